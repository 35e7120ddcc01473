import pytest

from treegen.errors import ChainIdentificationFailure
from treegen.networks import NETWORKS_BY_NAME, identify_network


@pytest.mark.parametrize("chain_id, name", [(1, "mainnet"), (5, "prater"), (17000, "holesky"), (560048, "hoodi")])
def test_known_chain_ids(chain_id, name) -> None:
    assert identify_network(chain_id).name == name
    assert NETWORKS_BY_NAME[name].chain_id == chain_id


def test_unknown_chain_id() -> None:
    with pytest.raises(ChainIdentificationFailure, match=r"\[11155111\]"):
        identify_network(11155111)
