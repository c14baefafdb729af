"""Pydantic models (schemas) for the application."""

from firstmate.models.enums import (
    CalendarType,
    PlacementStrategy,
    RecurrenceCadence,
    UnscheduledReason,
    Weekday,
)
from firstmate.models.goal import Goal, RecurringConfig, SubGoal
from firstmate.models.schedule import (
    BusySlot,
    GoalScheduleResult,
    ProposedBlock,
    ScheduledBlock,
    ScheduleResponse,
    SubGoalScheduleResult,
    TimeSlot,
    UnscheduledGoal,
)

__all__ = [
    # Enums
    "CalendarType",
    "PlacementStrategy",
    "RecurrenceCadence",
    "UnscheduledReason",
    "Weekday",
    # Goal
    "Goal",
    "RecurringConfig",
    "SubGoal",
    # Schedule
    "BusySlot",
    "GoalScheduleResult",
    "ProposedBlock",
    "ScheduledBlock",
    "ScheduleResponse",
    "SubGoalScheduleResult",
    "TimeSlot",
    "UnscheduledGoal",
]
