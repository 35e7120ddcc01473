#!/usr/bin/env python3
"""
Epoch/slot/time conversion for the beacon chain.

Usage:
    epoch-slot-utils --epoch 57993
    epoch-slot-utils --slot 1855776
    epoch-slot-utils --epoch 57993 --timestamp --network hoodi
    epoch-slot-utils --time 1742213400 --network hoodi
"""

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .errors import InvalidSlot
from .networks import NETWORKS_BY_NAME, SLOTS_PER_EPOCH, SECONDS_PER_SLOT


@dataclass(frozen=True)
class EpochTimeConverter:
    genesis_time: int
    genesis_epoch: int = 0
    slots_per_epoch: int = SLOTS_PER_EPOCH
    seconds_per_slot: int = SECONDS_PER_SLOT
    seconds_per_epoch: Optional[int] = None

    def __post_init__(self):
        if self.seconds_per_epoch is None:
            object.__setattr__(self, "seconds_per_epoch", self.slots_per_epoch * self.seconds_per_slot)

    @classmethod
    def from_chain_config(cls, cfg) -> "EpochTimeConverter":
        return cls(
            genesis_time=cfg.genesis_time,
            genesis_epoch=cfg.genesis_epoch,
            slots_per_epoch=cfg.slots_per_epoch,
            seconds_per_slot=cfg.seconds_per_slot,
            seconds_per_epoch=cfg.seconds_per_epoch,
        )

    @property
    def genesis_slot(self) -> int:
        return self.genesis_epoch * self.slots_per_epoch

    def epoch_to_slot_range(self, epoch: int) -> tuple:
        """Return (first_slot, last_slot) for a given epoch."""
        if epoch < 0:
            raise InvalidSlot(epoch * self.slots_per_epoch, self.genesis_slot)
        first = epoch * self.slots_per_epoch
        last = first + self.slots_per_epoch - 1
        return first, last

    def slot_to_epoch(self, slot: int) -> int:
        return slot // self.slots_per_epoch

    def slot_to_time(self, slot: int) -> int:
        """Return the Unix timestamp of a slot."""
        if slot < self.genesis_slot:
            raise InvalidSlot(slot, self.genesis_slot)
        return self.genesis_time + (slot - self.genesis_slot) * self.seconds_per_slot

    def time_to_slot(self, ts: int) -> int:
        """Return the slot in progress at a Unix timestamp."""
        if ts < self.genesis_time:
            raise InvalidSlot(self.genesis_slot - 1, self.genesis_slot)
        return (ts - self.genesis_time) // self.seconds_per_slot + self.genesis_slot

    def time_to_epoch(self, ts: int) -> int:
        """Return the epoch containing a Unix timestamp."""
        if ts < self.genesis_time:
            raise InvalidSlot(self.genesis_slot - 1, self.genesis_slot)
        return (ts - self.genesis_time) // self.seconds_per_epoch + self.genesis_epoch

    def epoch_start_time(self, epoch: int) -> int:
        first, _ = self.epoch_to_slot_range(epoch)
        return self.slot_to_time(first)


def _iso(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def describe_epoch(conv: EpochTimeConverter, epoch: int, with_time: bool = False) -> dict:
    first, last = conv.epoch_to_slot_range(epoch)
    info = {"epoch": epoch, "first_slot": first, "last_slot": last}
    if with_time:
        info["start"] = _iso(conv.slot_to_time(first))
        info["end"] = _iso(conv.slot_to_time(last) + conv.seconds_per_slot)
    return info


def describe_slot(conv: EpochTimeConverter, slot: int, with_time: bool = False) -> dict:
    epoch = conv.slot_to_epoch(slot)
    first, _ = conv.epoch_to_slot_range(epoch)
    info = {"slot": slot, "epoch": epoch, "index_in_epoch": f"{slot - first}/{conv.slots_per_epoch - 1}"}
    if with_time:
        info["time"] = _iso(conv.slot_to_time(slot))
    return info


def describe_time(conv: EpochTimeConverter, ts: int) -> dict:
    return {"time": _iso(ts), "slot": conv.time_to_slot(ts), "epoch": conv.time_to_epoch(ts)}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Convert between beacon chain epochs, slots and Unix times")
    parser.add_argument("--epoch", type=int, help="Show the slot range of an epoch")
    parser.add_argument("--slot", type=int, help="Show the epoch a slot belongs to")
    parser.add_argument("--time", type=int, help="Show the slot and epoch in progress at a Unix time")
    parser.add_argument("--timestamp", action="store_true", help="Include wall-clock times for --epoch/--slot")
    parser.add_argument("--network", default="mainnet", choices=sorted(NETWORKS_BY_NAME))
    parser.add_argument("--genesis-time", type=int, default=None, help="Overrides the network's genesis time")
    args = parser.parse_args(argv)

    conv = EpochTimeConverter(genesis_time=args.genesis_time or NETWORKS_BY_NAME[args.network].genesis_time)
    if args.epoch is None and args.slot is None and args.time is None:
        parser.error("give at least one of --epoch, --slot or --time")

    try:
        sections = []
        if args.epoch is not None:
            sections.append(describe_epoch(conv, args.epoch, args.timestamp))
        if args.slot is not None:
            sections.append(describe_slot(conv, args.slot, args.timestamp))
        if args.time is not None:
            sections.append(describe_time(conv, args.time))
    except InvalidSlot as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for section in sections:
        for key, value in section.items():
            print(f"{key + ':':16s}{value}")
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
