"""Snapshot boundary resolution for rewards intervals spanning the beacon and execution chains."""

from .epoch_slot_utils import EpochTimeConverter
from .errors import (
    TreegenError,
    ChainIdentificationFailure,
    InvalidSlot,
    NoProposedBlockInEpoch,
    EpochNotFinalized,
    TargetOutsideInterval,
    PreMergeTargetUnsupported,
    UnknownInterval,
    MissingExecutionPairing,
    BeaconClientError,
    ExecutionClientError,
)
from .models import BlockHeader, CommitmentEvent, LocatedSlot, SnapshotCoordinate
from .override import BoundaryOverrider
from .past_interval import PastIntervalReconstructor
from .slot_locator import FinalizedSlotLocator
from .snapshot import SnapshotResolver

__version__ = "1.2.0"
