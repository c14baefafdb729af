"""
Goal model definitions.

Goals are the structured records produced by goal capture and consumed by the scheduler.
"""

import math
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from firstmate.models.enums import CalendarType, RecurrenceCadence, Weekday


class RecurringConfig(BaseModel):
    """Weekdays a recurring goal repeats on."""

    cadence: RecurrenceCadence = Field(RecurrenceCadence.WEEKLY, alias="type")
    days: set[Weekday] = Field(default_factory=set)

    model_config = {"populate_by_name": True}

    @field_validator("days", mode="before")
    @classmethod
    def _lowercase_days(cls, value):
        if isinstance(value, (list, tuple, set)):
            return [day.lower() if isinstance(day, str) else day for day in value]
        return value

    @model_validator(mode="after")
    def _require_days_for_weekly(self) -> "RecurringConfig":
        if self.cadence == RecurrenceCadence.WEEKLY and not self.days:
            raise ValueError("weekly recurrence needs at least one day")
        return self

    def effective_days(self) -> set[Weekday]:
        """Days to expand; a daily cadence without days means every day."""
        if self.cadence == RecurrenceCadence.DAILY and not self.days:
            return set(Weekday)
        return set(self.days)


class Goal(BaseModel):
    """A unit of work to schedule."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    due_date: date
    estimated_hours: float = Field(..., gt=0, description="Total effort across all sessions")
    duration_minutes: Optional[float] = Field(
        None, ge=15, allow_inf_nan=False, description="Length of a single session"
    )
    is_hard_deadline: bool = False
    priority: int = Field(3, ge=1, le=5, description="5 = most urgent")
    is_work: bool = False
    # "HH:MM" in the scheduler timezone; unparseable values are treated as absent
    preferred_time: Optional[str] = None
    recurring: Optional[RecurringConfig] = None

    @property
    def calendar_type(self) -> CalendarType:
        return CalendarType.WORK if self.is_work else CalendarType.PERSONAL

    @property
    def total_minutes(self) -> float:
        return round(self.estimated_hours * 60, 6)

    def session_minutes(self, max_session_minutes: int, min_block_minutes: int = 15) -> float:
        """Length of one session, derived from estimated_hours when not given."""
        if self.duration_minutes is not None:
            return self.duration_minutes
        derived = math.ceil(self.total_minutes)
        return max(min_block_minutes, min(derived, max_session_minutes))


def parse_time_of_day(value: Optional[str]) -> Optional[tuple[int, int]]:
    """Parse "HH:MM" into (hour, minute); None when missing or malformed."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if hours < 0 or hours > 23 or minutes < 0 or minutes > 59:
        return None
    return hours, minutes


class SubGoal(BaseModel):
    """A step of a larger goal, placed as one session of its own."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    estimated_hours: float = Field(1.0, gt=0)
    # Sub-goals without a start date are kept but never placed
    start_date: Optional[date] = None
    end_date: Optional[date] = None
