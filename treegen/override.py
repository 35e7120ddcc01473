"""
Pull an interval's end boundary back to an earlier epoch inside it.
"""

import dataclasses
import logging
from typing import Optional, Tuple

from .collaborators import ExecutionChainClient
from .epoch_slot_utils import EpochTimeConverter
from .errors import PreMergeTargetUnsupported, TargetOutsideInterval
from .execution import resolve_pairing
from .models import Boundary, BlockHeader, CommitmentEvent, DirectByNumber, SnapshotCoordinate
from .slot_locator import FinalizedSlotLocator

log = logging.getLogger(__name__)


def _index_of(boundary: Boundary) -> int:
    if isinstance(boundary, CommitmentEvent):
        return boundary.index
    return boundary.interval_index


def _with_end(boundary: Boundary, slot: int, end_time: int, header: BlockHeader) -> Boundary:
    if isinstance(boundary, CommitmentEvent):
        # The published root only covers the full interval, so it doesn't carry over
        return dataclasses.replace(
            boundary,
            consensus_block=slot,
            execution_block=header.number,
            end_time=end_time,
            canonical_root=b"",
        )
    return dataclasses.replace(
        boundary,
        consensus_block=slot,
        execution_header=header,
        end_time=end_time,
    )


class BoundaryOverrider:
    def __init__(self, locator: FinalizedSlotLocator, converter: EpochTimeConverter, ec: ExecutionChainClient):
        self.locator = locator
        self.converter = converter
        self.ec = ec

    def interval_epochs(self, boundary: Boundary, end_epoch: Optional[int] = None) -> Tuple[int, int]:
        """
        Return (start_epoch, end_epoch) of an interval. The end epoch defaults
        to the epoch of the boundary's slot; an open interval passes the
        finalized epoch instead, since its slot may sit in an earlier epoch.
        """
        if end_epoch is None:
            end_epoch = self.converter.slot_to_epoch(boundary.consensus_block)
        return self.converter.time_to_epoch(boundary.start_time), end_epoch

    def check_target(self, boundary: Boundary, target_epoch: int, end_epoch: Optional[int] = None) -> None:
        """Raise TargetOutsideInterval unless `target_epoch` starts after the interval start and within its end."""
        start_epoch, end_epoch = self.interval_epochs(boundary, end_epoch)
        outside = TargetOutsideInterval(target_epoch, _index_of(boundary), start_epoch, end_epoch)
        if target_epoch < 0 or target_epoch > end_epoch:
            raise outside

        target_time = self.converter.epoch_start_time(target_epoch)
        if target_time <= boundary.start_time or target_time > boundary.end_time:
            raise outside

    def override(self, boundary: Boundary, target_epoch: int, end_epoch: Optional[int] = None) -> Boundary:
        """
        Return a copy of `boundary` ending at the last proposed block of
        `target_epoch`. Index, start time and intervals elapsed are kept.
        Targeting the epoch the boundary's slot is already in returns
        `boundary` unchanged.
        """
        self.check_target(boundary, target_epoch, end_epoch)

        if target_epoch == self.converter.slot_to_epoch(boundary.consensus_block):
            log.info("Target epoch %d is the interval's end epoch, using the full interval", target_epoch)
            return boundary

        located = self.locator.last_proposed_block_in_epoch(target_epoch)
        if located.execution_block_number == 0:
            raise PreMergeTargetUnsupported(target_epoch, located.slot)

        header = resolve_pairing(self.ec, DirectByNumber(located.execution_block_number), located.slot)
        log.info("Overriding the targeted slot to %d (EL block %d)", located.slot, header.number)
        return _with_end(boundary, located.slot, located.slot_time, header)
