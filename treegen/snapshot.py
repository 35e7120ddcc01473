"""
Snapshot details for the current (still open) rewards interval.
"""

import logging
import time
from dataclasses import dataclass, asdict
from typing import Callable, Optional

from .collaborators import ConsensusChainClient, ExecutionChainClient, ProtocolStateReader
from .epoch_slot_utils import EpochTimeConverter
from .errors import ExecutionClientError, UnknownInterval
from .execution import resolve_pairing
from .models import DirectByNumber, SnapshotCoordinate, pairing_for
from .override import BoundaryOverrider
from .slot_locator import FinalizedSlotLocator

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkInfo:
    coordinate: SnapshotCoordinate
    previous_end_slot: Optional[int] = None
    previous_end_el_block: Optional[int] = None

    @property
    def start_slot(self) -> Optional[int]:
        if self.previous_end_slot is None:
            return None
        return self.previous_end_slot + 1

    @property
    def start_el_block(self) -> Optional[int]:
        if self.previous_end_el_block is None:
            return None
        return self.previous_end_el_block + 1

    def to_dict(self) -> dict:
        d = asdict(self)
        d["start_slot"] = self.start_slot
        d["start_el_block"] = self.start_el_block
        return d


class SnapshotResolver:
    def __init__(
        self,
        bn: ConsensusChainClient,
        ec: ExecutionChainClient,
        state_reader: ProtocolStateReader,
        converter: EpochTimeConverter,
        locator: Optional[FinalizedSlotLocator] = None,
        overrider: Optional[BoundaryOverrider] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.bn = bn
        self.ec = ec
        self.state_reader = state_reader
        self.converter = converter
        self.locator = locator or FinalizedSlotLocator(bn, converter)
        self.overrider = overrider or BoundaryOverrider(self.locator, converter, ec)
        self.clock = clock

    def resolve_current(self, target_epoch: Optional[int] = None) -> SnapshotCoordinate:
        """
        Resolve the open interval's snapshot at the latest finalized slot.
        The end time is "now", since the interval hasn't closed yet. With
        `target_epoch` the boundary is pulled back to that epoch.
        """
        reader = self.state_reader
        index = reader.current_interval_index()
        start_time = reader.current_interval_start_time()
        duration = reader.interval_duration()

        head = self.ec.header_by_number(None)
        if head is None:
            raise ExecutionClientError("execution client returned no latest block")
        intervals_elapsed = max(0, (head.timestamp - start_time) // duration)

        finalized_epoch = self.bn.get_head().finalized_epoch
        _, last_slot = self.converter.epoch_to_slot_range(finalized_epoch)
        located = self.locator.locate(last_slot)
        pairing = pairing_for(located)
        header = resolve_pairing(self.ec, pairing, located.slot)
        # Post-merge payloads carry the slot's own time; time-matched PoW blocks only have to land inside the slot
        tolerance = 0 if isinstance(pairing, DirectByNumber) else self.converter.seconds_per_slot - 1
        if abs(header.timestamp - located.slot_time) > tolerance:
            log.warning(
                "EL block %d has timestamp %d but slot %d is at %d",
                header.number, header.timestamp, located.slot, located.slot_time,
            )

        coordinate = SnapshotCoordinate(
            interval_index=index,
            start_time=start_time,
            end_time=int(self.clock()),
            consensus_block=located.slot,
            execution_header=header,
            intervals_elapsed=intervals_elapsed,
        )

        if target_epoch is not None:
            coordinate = self.overrider.override(coordinate, target_epoch, end_epoch=finalized_epoch)
        return coordinate

    def network_info(self) -> NetworkInfo:
        """Current interval details, plus where it started if a previous interval exists."""
        coordinate = self.resolve_current()
        if coordinate.interval_index == 0:
            return NetworkInfo(coordinate)

        previous = self.state_reader.commitment_event_for_index(coordinate.interval_index - 1)
        if previous is None:
            raise UnknownInterval(coordinate.interval_index - 1)
        return NetworkInfo(
            coordinate,
            previous_end_slot=previous.consensus_block,
            previous_end_el_block=previous.execution_block,
        )
