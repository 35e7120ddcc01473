import json

import pytest

import treegen.cli as cli
import treegen.generator as generator_mod
from tests.helpers.fakes import FakeBeacon, FakeExecution, make_converter
from treegen import epoch_slot_utils
from treegen.networks import NETWORKS_BY_NAME

READER = "tests.helpers.fakes:make_reader"


@pytest.fixture
def fake_chain(monkeypatch: pytest.MonkeyPatch):
    bn = FakeBeacon(finalized_epoch=300, missing={300 * 32 + 31})
    monkeypatch.setattr(cli, "BeaconNodeClient", lambda *a, **kw: bn)
    monkeypatch.setattr(generator_mod, "BeaconNodeClient", lambda *a, **kw: bn)
    monkeypatch.setattr(generator_mod, "ExecutionClient", lambda *a, **kw: FakeExecution(make_converter()))
    return bn


def test_finalized_only(fake_chain, capsys) -> None:
    assert cli.main(["--finalized-only"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["network"] == "mainnet"
    assert out["slot"] == 300 * 32 + 30
    assert out["epoch"] == 300


def test_finalized_only_with_target_epoch(fake_chain, capsys) -> None:
    assert cli.main(["--finalized-only", "-t", "250"]) == 0
    assert json.loads(capsys.readouterr().out)["slot"] == 250 * 32 + 31


def test_unfinalized_target_is_an_error(fake_chain, capsys) -> None:
    assert cli.main(["--finalized-only", "-t", "400"]) == 1
    assert "not finalized yet" in capsys.readouterr().err


def test_state_reader_required(fake_chain) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["-i", "5"])
    assert exc.value.code == 2


def test_past_interval_matching_root(fake_chain, capsys) -> None:
    code = cli.main(["-i", "5", "--state-reader", READER, "--tree-engine", "tests.helpers.fakes:make_engine"])
    report = json.loads(capsys.readouterr().out)
    assert code == 0
    assert report["root_validation"]["matches"] is True
    assert report["coordinate"]["consensus_block"] == 200 * 32 + 31


def test_past_interval_mismatch_exits_nonzero(fake_chain, capsys) -> None:
    code = cli.main(["-i", "5", "--state-reader", READER, "--tree-engine", "tests.helpers.fakes:make_wrong_engine"])
    assert code == 1
    assert json.loads(capsys.readouterr().out)["root_mismatch"] is True


def test_past_interval_with_target_epoch(fake_chain, capsys, tmp_path) -> None:
    out = tmp_path / "report.json"
    code = cli.main(["-i", "5", "-t", "150", "--state-reader", READER,
                     "--tree-engine", "tests.helpers.fakes:make_wrong_engine", "-o", str(out)])
    report = json.loads(out.read_text())
    assert code == 0
    assert report["root_validation"]["checked"] is False
    assert report["coordinate"]["consensus_block"] == 150 * 32 + 31


def test_unknown_interval(fake_chain, capsys) -> None:
    assert cli.main(["-i", "77", "--state-reader", READER]) == 1
    assert "interval 77" in capsys.readouterr().err


def test_current_interval_dry_run(fake_chain, capsys) -> None:
    assert cli.main(["--state-reader", READER]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["mode"] == "current"
    assert report["coordinate"]["consensus_block"] == 300 * 32 + 30


def test_network_info(fake_chain, capsys) -> None:
    assert cli.main(["-n", "--state-reader", READER]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["start_slot"] == 279 * 32 + 32
    assert info["coordinate"]["interval_index"] == 9


def test_load_factory_rejects_bad_path() -> None:
    with pytest.raises(ValueError):
        cli.load_factory("tests.helpers.fakes")


def _fields(out: str) -> list:
    pairs = (line.split(":", 1) for line in out.splitlines() if line.strip())
    return [(k, v.strip()) for k, v in pairs]


def test_epoch_slot_utils_epoch_and_slot(capsys) -> None:
    assert epoch_slot_utils.main(["--epoch", "10", "--slot", "349", "--timestamp"]) == 0
    fields = _fields(capsys.readouterr().out)
    assert ("first_slot", "320") in fields
    assert ("last_slot", "351") in fields
    assert ("index_in_epoch", "29/31") in fields
    assert ("start", "2020-12-01T13:04:23+00:00") in fields


def test_epoch_slot_utils_time(capsys) -> None:
    genesis = NETWORKS_BY_NAME["hoodi"].genesis_time
    assert epoch_slot_utils.main(["--time", str(genesis + 12 * 40 + 5), "--network", "hoodi"]) == 0
    fields = _fields(capsys.readouterr().out)
    assert ("slot", "40") in fields
    assert ("epoch", "1") in fields


def test_epoch_slot_utils_time_before_genesis(capsys) -> None:
    assert epoch_slot_utils.main(["--time", "1000"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_epoch_slot_utils_needs_a_query() -> None:
    with pytest.raises(SystemExit):
        epoch_slot_utils.main([])
