import pytest

from tests.helpers.fakes import GENESIS_TIME, make_converter
from treegen.epoch_slot_utils import EpochTimeConverter
from treegen.errors import InvalidSlot


def test_epoch_to_slot_range(converter) -> None:
    assert converter.epoch_to_slot_range(0) == (0, 31)
    assert converter.epoch_to_slot_range(10) == (320, 351)


def test_slot_to_time_counts_from_genesis(converter) -> None:
    assert converter.slot_to_time(0) == GENESIS_TIME
    assert converter.slot_to_time(351) == GENESIS_TIME + 351 * 12


def test_slot_to_time_with_nonzero_genesis_epoch() -> None:
    conv = make_converter(genesis_epoch=2)
    assert conv.genesis_slot == 64
    assert conv.slot_to_time(64) == GENESIS_TIME
    with pytest.raises(InvalidSlot) as exc:
        conv.slot_to_time(63)
    assert exc.value.slot == 63


def test_epoch_start_time_is_monotonic(converter) -> None:
    times = [converter.epoch_start_time(e) for e in range(0, 500)]
    assert all(b > a for a, b in zip(times, times[1:]))


def test_time_to_epoch_round_trips_epoch_bounds(converter) -> None:
    first, last = converter.epoch_to_slot_range(42)
    assert converter.time_to_epoch(converter.slot_to_time(first)) == 42
    assert converter.time_to_epoch(converter.slot_to_time(last) + 11) == 42
    assert converter.time_to_epoch(converter.slot_to_time(last) + 12) == 43


def test_time_before_genesis_is_rejected(converter) -> None:
    with pytest.raises(InvalidSlot):
        converter.time_to_epoch(GENESIS_TIME - 1)
    with pytest.raises(InvalidSlot):
        converter.time_to_slot(GENESIS_TIME - 1)


def test_negative_epoch_is_rejected(converter) -> None:
    with pytest.raises(InvalidSlot):
        converter.epoch_to_slot_range(-1)


def test_seconds_per_epoch_defaults_from_slot_timing() -> None:
    conv = EpochTimeConverter(genesis_time=0, slots_per_epoch=8, seconds_per_slot=6)
    assert conv.seconds_per_epoch == 48
