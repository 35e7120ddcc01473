import types
from typing import Any

import pytest

from treegen.beacon import BeaconNodeClient
from treegen.errors import BeaconClientError


def _response(status: int, payload: Any = None) -> Any:
    return types.SimpleNamespace(status_code=status, json=lambda: payload, text=str(payload), headers={})


class RoutedSession:
    """Answers GETs from a {url: (status, payload)} table."""

    def __init__(self, routes):
        self.routes = routes
        self.urls = []

    def request(self, method, url, json=None, timeout=None):
        self.urls.append(url)
        status, payload = self.routes.get(url, (404, {"message": "not found"}))
        return _response(status, payload)


def _block(slot, payload=None):
    body = {} if payload is None else {"execution_payload": payload}
    return {"data": {"message": {"slot": str(slot), "proposer_index": "12", "body": body}}}


def client(routes, urls=("http://bn",)):
    return BeaconNodeClient(list(urls), session=RoutedSession(routes), max_retries=1)


def test_get_block_post_merge() -> None:
    bn = client({"http://bn/eth/v2/beacon/blocks/100": (200, _block(100, {"block_number": "555"}))})
    block, exists = bn.get_block(100)
    assert exists
    assert (block.slot, block.proposer_index, block.execution_block_number) == (100, 12, 555)


def test_get_block_pre_merge_has_no_execution_block() -> None:
    bn = client({"http://bn/eth/v2/beacon/blocks/7": (200, _block(7))})
    block, exists = bn.get_block(7)
    assert exists and block.execution_block_number == 0


def test_missed_slot_is_absent() -> None:
    assert client({}).get_block(8) == (None, False)


def test_falls_back_to_next_provider() -> None:
    routes = {
        "http://a/eth/v1/beacon/states/head/finality_checkpoints": (400, "bad"),
        "http://b/eth/v1/beacon/states/head/finality_checkpoints": (200, {"data": {"finalized": {"epoch": "321"}}}),
    }
    bn = client(routes, urls=("http://a/", "http://b"))
    assert bn.get_head().finalized_epoch == 321
    assert bn.session.urls[0].startswith("http://a/eth")


def test_all_providers_failing_raises() -> None:
    with pytest.raises(BeaconClientError):
        client({"http://bn/eth/v1/beacon/states/head/finality_checkpoints": (400, "bad")}).get_head()


def test_get_chain_config() -> None:
    routes = {
        "http://bn/eth/v1/beacon/genesis": (200, {"data": {"genesis_time": "1606824023"}}),
        "http://bn/eth/v1/config/spec": (200, {"data": {"SLOTS_PER_EPOCH": "32", "SECONDS_PER_SLOT": "12"}}),
        "http://bn/eth/v1/config/deposit_contract": (200, {"data": {"chain_id": "1", "address": "0x00"}}),
    }
    cfg = client(routes).get_chain_config()
    assert cfg.genesis_time == 1606824023
    assert cfg.genesis_epoch == 0
    assert cfg.seconds_per_epoch == 384
    assert cfg.chain_id == 1
