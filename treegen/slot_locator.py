"""
Find the nearest slot at or below a target that actually has a block.

Missed slots are normal on the beacon chain; every scan here walks backward
until it hits a proposed block.
"""

import logging
from typing import Any, Iterator, Optional, Tuple

from .collaborators import ConsensusChainClient
from .epoch_slot_utils import EpochTimeConverter
from .errors import EpochNotFinalized, InvalidSlot, NoProposedBlockInEpoch
from .models import LocatedSlot

log = logging.getLogger(__name__)


def descending_slots(upper: int, lower: int) -> Iterator[int]:
    """Yield upper, upper-1, ..., lower."""
    slot = upper
    while slot >= lower:
        yield slot
        slot -= 1


class FinalizedSlotLocator:
    def __init__(self, bn: ConsensusChainClient, converter: EpochTimeConverter):
        self.bn = bn
        self.converter = converter

    def _first_proposed(
        self, candidates: Iterator[int], epoch: Optional[int] = None
    ) -> Tuple[Optional[int], Optional[Any]]:
        for slot in candidates:
            block, exists = self.bn.get_block(slot)
            if exists:
                return slot, block
            if epoch is None:
                log.info("Slot %d was missing, trying the previous one...", slot)
            else:
                first, _ = self.converter.epoch_to_slot_range(epoch)
                log.info("No proposal in epoch %d at slot %d...", epoch, slot - first)
        return None, None

    def locate(self, upper_bound: int) -> LocatedSlot:
        """Scan back from `upper_bound` to the first slot with a block, stopping at genesis."""
        genesis_slot = self.converter.genesis_slot
        if upper_bound < genesis_slot:
            raise InvalidSlot(upper_bound, genesis_slot)

        slot, block = self._first_proposed(descending_slots(upper_bound, genesis_slot))
        if block is None:
            raise InvalidSlot(genesis_slot - 1, genesis_slot)
        return LocatedSlot(
            slot=slot,
            execution_block_number=block.execution_block_number,
            slot_time=self.converter.slot_to_time(slot),
        )

    def last_proposed_block_in_epoch(self, epoch: int) -> LocatedSlot:
        """Like locate(), but confined to one epoch's slots."""
        first, last = self.converter.epoch_to_slot_range(epoch)
        slot, block = self._first_proposed(descending_slots(last, first), epoch=epoch)
        if block is None:
            raise NoProposedBlockInEpoch(epoch)
        return LocatedSlot(
            slot=slot,
            execution_block_number=block.execution_block_number,
            slot_time=self.converter.slot_to_time(slot),
        )

    def latest_finalized(self, target_epoch: Optional[int] = None) -> LocatedSlot:
        """
        Locate the last proposed slot of the latest finalized epoch, or of
        `target_epoch` if given (which must itself be finalized).
        """
        finalized_epoch = self.bn.get_head().finalized_epoch
        if target_epoch is not None and target_epoch > finalized_epoch:
            raise EpochNotFinalized(target_epoch, finalized_epoch)

        epoch = finalized_epoch if target_epoch is None else target_epoch
        _, last = self.converter.epoch_to_slot_range(epoch)
        return self.locate(last)
