"""
Enum definitions for the application.

These enums are used across models and provide type-safe values for goals and blocks.
"""

from enum import Enum


class CalendarType(str, Enum):
    """Which of the user's two calendars a block is routed to."""

    WORK = "work"
    PERSONAL = "personal"


class Weekday(str, Enum):
    """Day of week, lowercase names as emitted by goal capture."""

    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

    @classmethod
    def from_date(cls, value) -> "Weekday":
        """Weekday of a date (date.weekday() is Monday=0)."""
        return _BY_ISO_INDEX[value.weekday()]


_BY_ISO_INDEX = [
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
]


class RecurrenceCadence(str, Enum):
    """Recurrence cadence of a goal."""

    DAILY = "daily"
    WEEKLY = "weekly"


class PlacementStrategy(str, Enum):
    """
    How the allocator generates occurrences for a goal.

    NEXT_AVAILABLE = Preferred time on the first free day, else first free slot
    PREFERRED_TIME = Preferred time only, first conflict-free day wins
    RECURRING = One session per matching weekday at the preferred time
    FILL_HOURS = Greedily consume estimated hours across free slots
    """

    NEXT_AVAILABLE = "next_available"
    PREFERRED_TIME = "preferred_time"
    RECURRING = "recurring"
    FILL_HOURS = "fill_hours"


class UnscheduledReason(str, Enum):
    """Why a goal ended a batch run without its full allocation."""

    NO_AVAILABLE_SLOT = "no_available_slot"
    PARTIALLY_SCHEDULED = "partially_scheduled"
