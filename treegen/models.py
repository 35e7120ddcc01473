"""
Value types passed between the resolution components.

All records are frozen: an override produces a new record and never mutates
the one it was derived from.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Union


# ─── Chain data ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BlockHeader:
    number: int
    hash: str
    timestamp: int


@dataclass(frozen=True)
class LocatedSlot:
    """A slot that had a proposed block, with its paired execution block (0 = pre-merge)."""
    slot: int
    execution_block_number: int
    slot_time: int


# ─── Execution pairing ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class DirectByNumber:
    """Post-merge: the beacon block names its execution block."""
    number: int


@dataclass(frozen=True)
class DeriveByTime:
    """Pre-merge: the execution block must be matched by timestamp."""
    timestamp: int


PairingMode = Union[DirectByNumber, DeriveByTime]


def pairing_for(located: LocatedSlot) -> PairingMode:
    if located.execution_block_number == 0:
        return DeriveByTime(located.slot_time)
    return DirectByNumber(located.execution_block_number)


# ─── Interval boundaries ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class SnapshotCoordinate:
    interval_index: int
    start_time: int
    end_time: int
    consensus_block: int
    execution_header: BlockHeader
    intervals_elapsed: int

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"interval {self.interval_index} ends at {self.end_time}, "
                f"not after its start {self.start_time}"
            )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CommitmentEvent:
    """A published rewards snapshot for a closed interval."""
    index: int
    consensus_block: int
    execution_block: int
    start_time: int
    end_time: int
    intervals_elapsed: int
    canonical_root: bytes

    def to_dict(self) -> dict:
        d = asdict(self)
        d["canonical_root"] = "0x" + self.canonical_root.hex()
        return d


Boundary = Union[SnapshotCoordinate, CommitmentEvent]


# ─── Reconstruction results ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Reconstruction:
    event: CommitmentEvent
    coordinate: SnapshotCoordinate
    target_epoch: Optional[int] = None

    @property
    def overridden(self) -> bool:
        return self.target_epoch is not None


@dataclass(frozen=True)
class RootValidation:
    """Advisory outcome of comparing a regenerated root with the canonical one."""
    checked: bool
    matches: Optional[bool] = None
    root: Optional[str] = None
    canonical_root: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)
