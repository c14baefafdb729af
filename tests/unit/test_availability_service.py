"""
Unit tests for the availability calculator.
"""

from datetime import datetime, timedelta, timezone

from firstmate.models.schedule import BusySlot
from firstmate.services.availability_service import (
    find_free_slots,
    has_conflict,
    intervals_conflict,
)

DAY_START = datetime(2026, 3, 3, 16, 0, tzinfo=timezone.utc)
DAY_END = datetime(2026, 3, 4, 5, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    return DAY_START + timedelta(minutes=minutes)


def busy(start_minutes: int, end_minutes: int) -> BusySlot:
    return BusySlot(start=at(start_minutes), end=at(end_minutes))


def spans(slots) -> list[tuple[datetime, datetime]]:
    return [(slot.start, slot.end) for slot in slots]


def test_no_busy_slots_returns_whole_window():
    assert spans(find_free_slots(DAY_START, DAY_END, [])) == [(DAY_START, DAY_END)]


def test_busy_slot_covering_window_returns_nothing():
    cover = BusySlot(start=DAY_START - timedelta(hours=1), end=DAY_END + timedelta(hours=1))
    assert find_free_slots(DAY_START, DAY_END, [cover]) == []


def test_gap_exactly_minimum_is_included():
    slots = find_free_slots(DAY_START, at(60), [busy(0, 30), busy(45, 60)])
    assert spans(slots) == [(at(30), at(45))]


def test_gap_below_minimum_is_dropped():
    slots = find_free_slots(DAY_START, at(60), [busy(0, 30), busy(44, 60)])
    assert slots == []


def test_overlapping_and_adjacent_busy_slots_extend_cursor():
    slots = find_free_slots(
        DAY_START,
        at(240),
        [busy(30, 90), busy(60, 120), busy(120, 150), busy(40, 50)],
    )
    assert spans(slots) == [(DAY_START, at(30)), (at(150), at(240))]


def test_unsorted_input_produces_chronological_output():
    slots = find_free_slots(DAY_START, at(300), [busy(200, 220), busy(20, 40), busy(100, 130)])
    assert spans(slots) == [
        (DAY_START, at(20)),
        (at(40), at(100)),
        (at(130), at(200)),
        (at(220), at(300)),
    ]


def test_busy_slots_outside_window_are_ignored_and_partial_ones_clipped():
    slots = find_free_slots(
        DAY_START,
        at(120),
        [busy(-120, -60), busy(-30, 30), busy(100, 400), busy(500, 600)],
    )
    assert spans(slots) == [(at(30), at(100))]


def test_trailing_gap_below_minimum_is_dropped():
    slots = find_free_slots(DAY_START, at(100), [busy(30, 90)])
    assert spans(slots) == [(DAY_START, at(30))]


def test_degenerate_busy_slot_is_ignored():
    inverted = BusySlot(start=at(60), end=at(30))
    assert spans(find_free_slots(DAY_START, at(90), [inverted])) == [(DAY_START, at(90))]


def test_empty_window_returns_nothing():
    assert find_free_slots(DAY_END, DAY_START, []) == []


def test_custom_minimum_block_size():
    slots = find_free_slots(DAY_START, at(60), [busy(20, 60)], min_block_minutes=30)
    assert slots == []


def test_conflict_predicate_is_half_open():
    assert intervals_conflict(at(0), at(30), at(15), at(45))
    assert intervals_conflict(at(0), at(60), at(15), at(30))
    assert not intervals_conflict(at(0), at(30), at(30), at(60))
    assert not intervals_conflict(at(30), at(60), at(0), at(30))


def test_has_conflict_checks_every_interval():
    slots = [busy(0, 30), busy(90, 120)]
    assert has_conflict(at(100), at(110), slots)
    assert not has_conflict(at(30), at(90), slots)
