"""
Known networks, keyed by the chain ID the beacon node reports for its
deposit contract.

Cross-referenced with: ethereum/consensus-specs configs/*.yaml
"""

from dataclasses import dataclass

from .errors import ChainIdentificationFailure

SLOTS_PER_EPOCH = 32
SECONDS_PER_SLOT = 12

# Upper bound on simultaneous execution-client requests made while a tree is
# generated. The execution transport sizes its connection pool from this.
MAX_CONCURRENT_EXECUTION_REQUESTS = 200


@dataclass(frozen=True)
class Network:
    name: str
    chain_id: int
    genesis_time: int


NETWORKS = {
    1:      Network("mainnet", 1,      1606824023),
    5:      Network("prater",  5,      1616508000),
    17000:  Network("holesky", 17000,  1695902400),
    560048: Network("hoodi",   560048, 1742213400),
}

NETWORKS_BY_NAME = {n.name: n for n in NETWORKS.values()}


def identify_network(chain_id: int) -> Network:
    """Return the network for a deposit-contract chain ID."""
    try:
        return NETWORKS[chain_id]
    except KeyError:
        raise ChainIdentificationFailure(chain_id) from None
