"""
Interfaces of the collaborators the resolution engine consumes.

BeaconNodeClient and ExecutionClient satisfy the two chain interfaces; the
protocol reader, network state manager and tree engine are supplied by the
caller.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import BlockHeader, CommitmentEvent, SnapshotCoordinate


@runtime_checkable
class ConsensusChainClient(Protocol):
    def get_block(self, slot: int) -> tuple:
        """Return (block | None, exists)."""
        ...

    def get_head(self) -> Any:
        ...

    def get_chain_config(self) -> Any:
        ...


@runtime_checkable
class ExecutionChainClient(Protocol):
    def header_by_number(self, number: Optional[int] = None) -> Optional[BlockHeader]:
        ...

    def header_by_time(self, timestamp: int) -> Optional[BlockHeader]:
        ...


@runtime_checkable
class ProtocolStateReader(Protocol):
    def current_interval_index(self) -> int:
        ...

    def current_interval_start_time(self) -> int:
        ...

    def interval_duration(self) -> int:
        """Length of one rewards interval, in seconds."""
        ...

    def commitment_event_for_index(self, index: int) -> Optional[CommitmentEvent]:
        """The published snapshot for a closed interval, or None if there isn't one."""
        ...


@runtime_checkable
class NetworkStateManager(Protocol):
    def get_state_for_slot(self, slot: int) -> Any:
        ...


@runtime_checkable
class TreeConstructionEngine(Protocol):
    def generate(self, coordinate: SnapshotCoordinate, state: Any) -> Any:
        """
        Build the rewards artifact. The result exposes `merkle_root` (bytes
        or 0x-hex) and optionally `invalid_network_nodes` ({address: network}).
        """
        ...
