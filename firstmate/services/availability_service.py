"""
Availability calculation.

Computes free gaps inside a window from an unmerged list of busy intervals.
All intervals are half-open: [start, end).
"""

from datetime import datetime, timedelta
from typing import Iterable, Protocol

from firstmate.models.schedule import TimeSlot

MIN_BLOCK_MINUTES = 15


class Interval(Protocol):
    start: datetime
    end: datetime


def intervals_conflict(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open overlap test; touching endpoints do not conflict."""
    return start_a < end_b and end_a > start_b


def has_conflict(start: datetime, end: datetime, busy: Iterable[Interval]) -> bool:
    """True if [start, end) overlaps any busy interval."""
    return any(intervals_conflict(start, end, slot.start, slot.end) for slot in busy)


def find_free_slots(
    day_start: datetime,
    day_end: datetime,
    busy: Iterable[Interval],
    min_block_minutes: int = MIN_BLOCK_MINUTES,
) -> list[TimeSlot]:
    """
    Return the free gaps of at least ``min_block_minutes`` in [day_start, day_end).

    Busy intervals may overlap, touch, or extend past the window; they are
    clipped, sorted and swept with a cursor. Output is chronological.
    """
    if day_end <= day_start:
        return []

    min_gap = timedelta(minutes=min_block_minutes)
    clipped = sorted(
        (
            (max(slot.start, day_start), min(slot.end, day_end))
            for slot in busy
            if slot.end > slot.start and intervals_conflict(slot.start, slot.end, day_start, day_end)
        ),
        key=lambda interval: interval[0],
    )

    free: list[TimeSlot] = []
    cursor = day_start
    for busy_start, busy_end in clipped:
        if cursor < busy_start and busy_start - cursor >= min_gap:
            free.append(TimeSlot(start=cursor, end=busy_start))
        if busy_end > cursor:
            cursor = busy_end

    if cursor < day_end and day_end - cursor >= min_gap:
        free.append(TimeSlot(start=cursor, end=day_end))

    return free
