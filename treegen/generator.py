"""
Ties the resolution engine to the external state manager and tree engine.

Without a tree engine the generator stops after resolving the snapshot,
which is all `--network-info` style queries need.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from .beacon import BeaconNodeClient
from .collaborators import (
    ConsensusChainClient,
    ExecutionChainClient,
    NetworkStateManager,
    ProtocolStateReader,
    TreeConstructionEngine,
)
from .config import Settings
from .epoch_slot_utils import EpochTimeConverter
from .execution import ExecutionClient
from .models import RootValidation, SnapshotCoordinate
from .networks import Network, identify_network
from .override import BoundaryOverrider
from .past_interval import PastIntervalReconstructor, normalize_root
from .slot_locator import FinalizedSlotLocator
from .snapshot import NetworkInfo, SnapshotResolver

log = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    network: str
    mode: str  # "current" or "past"
    coordinate: SnapshotCoordinate
    target_epoch: Optional[int] = None
    merkle_root: Optional[str] = None
    root_validation: Optional[RootValidation] = None
    invalid_network_nodes: dict = field(default_factory=dict)
    elapsed_seconds: float = 0.0
    artifact: Any = field(default=None, repr=False)

    @property
    def root_mismatch(self) -> bool:
        v = self.root_validation
        return v is not None and v.checked and not v.matches

    def to_dict(self) -> dict:
        # The artifact belongs to the tree engine and has its own serialization
        return {
            "network": self.network,
            "mode": self.mode,
            "coordinate": self.coordinate.to_dict(),
            "target_epoch": self.target_epoch,
            "merkle_root": self.merkle_root,
            "root_validation": self.root_validation.to_dict() if self.root_validation else None,
            "root_mismatch": self.root_mismatch,
            "invalid_network_nodes": {str(k): v for k, v in self.invalid_network_nodes.items()},
            "elapsed_seconds": self.elapsed_seconds,
        }


class TreeGenerator:
    def __init__(
        self,
        network: Network,
        bn: ConsensusChainClient,
        ec: ExecutionChainClient,
        converter: EpochTimeConverter,
        state_reader: ProtocolStateReader,
        state_manager: Optional[NetworkStateManager] = None,
        tree_engine: Optional[TreeConstructionEngine] = None,
    ):
        self.network = network
        self.bn = bn
        self.ec = ec
        self.converter = converter
        self.state_manager = state_manager
        self.tree_engine = tree_engine

        self.locator = FinalizedSlotLocator(bn, converter)
        self.overrider = BoundaryOverrider(self.locator, converter, ec)
        self.resolver = SnapshotResolver(bn, ec, state_reader, converter, self.locator, self.overrider)
        self.reconstructor = PastIntervalReconstructor(ec, state_reader, self.overrider)

    @classmethod
    def connect(
        cls,
        settings: Settings,
        state_reader: ProtocolStateReader,
        state_manager: Optional[NetworkStateManager] = None,
        tree_engine: Optional[TreeConstructionEngine] = None,
    ) -> "TreeGenerator":
        """Build clients from settings and check which network the beacon node is on."""
        bn = BeaconNodeClient(settings.bn_endpoints, max_retries=settings.max_retries, timeout=settings.request_timeout)
        cfg = bn.get_chain_config()
        network = identify_network(cfg.chain_id)
        log.info("Beacon node is configured for %s.", network.name)

        ec = ExecutionClient(
            settings.ec_endpoint,
            max_concurrency=settings.max_concurrent_ec_requests,
            max_retries=settings.max_retries,
            timeout=settings.request_timeout,
        )
        return cls(network, bn, ec, EpochTimeConverter.from_chain_config(cfg), state_reader, state_manager, tree_engine)

    def _build(self, coordinate: SnapshotCoordinate, report: GenerationReport) -> Any:
        if self.tree_engine is None:
            return None

        state = None
        if self.state_manager is not None:
            state = self.state_manager.get_state_for_slot(coordinate.consensus_block)

        start = time.monotonic()
        artifact = self.tree_engine.generate(coordinate, state)
        report.elapsed_seconds = time.monotonic() - start
        report.artifact = artifact
        report.merkle_root = "0x" + normalize_root(artifact.merkle_root).hex()

        invalid = dict(getattr(artifact, "invalid_network_nodes", None) or {})
        for address, network in invalid.items():
            log.warning("Node %s has invalid network %d assigned! Using 0 (mainnet) instead.", address, network)
        report.invalid_network_nodes = invalid
        log.info("Finished in %.2fs", report.elapsed_seconds)
        return artifact

    def _log_snapshot(self, coordinate: SnapshotCoordinate) -> None:
        log.info(
            "Snapshot Beacon block = %d, EL block = %d, running from %d to %d",
            coordinate.consensus_block, coordinate.execution_header.number,
            coordinate.start_time, coordinate.end_time,
        )

    def generate_current(self, target_epoch: Optional[int] = None) -> GenerationReport:
        """Dry run for the open interval, ending at the latest finalized slot or `target_epoch`."""
        coordinate = self.resolver.resolve_current(target_epoch)
        log.info("Generating a dry-run tree for the current interval (%d)", coordinate.interval_index)
        self._log_snapshot(coordinate)

        report = GenerationReport(
            network=self.network.name, mode="current", coordinate=coordinate, target_epoch=target_epoch,
        )
        self._build(coordinate, report)
        return report

    def generate_past(self, index: int, target_epoch: Optional[int] = None) -> GenerationReport:
        """Recreate a finished interval's tree; the root is only checked for the full interval."""
        result = self.reconstructor.reconstruct(index, target_epoch)
        self._log_snapshot(result.coordinate)

        report = GenerationReport(
            network=self.network.name, mode="past", coordinate=result.coordinate, target_epoch=target_epoch,
        )
        artifact = self._build(result.coordinate, report)
        if artifact is not None:
            report.root_validation = self.reconstructor.validate_root(result, artifact.merkle_root)
        return report

    def network_info(self) -> NetworkInfo:
        return self.resolver.network_info()
