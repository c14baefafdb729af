"""
Schedule models for time-block allocation inputs and outputs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from firstmate.models.enums import CalendarType, UnscheduledReason
from firstmate.models.goal import Goal, SubGoal
from firstmate.utils.datetime_utils import ensure_utc


class BusySlot(BaseModel):
    """Externally committed interval [start, end) in absolute time."""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class TimeSlot(BaseModel):
    """Free gap [start, end) computed by the availability calculator."""

    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


class ScheduledBlock(BaseModel):
    """A block already committed by an earlier run."""

    id: Optional[str] = None
    goal_id: str
    calendar_type: CalendarType = CalendarType.PERSONAL
    start: datetime
    end: datetime
    is_completed: bool = False

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ProposedBlock(BaseModel):
    """Tentative allocation produced by the scheduler."""

    model_config = {"frozen": True}

    goal_id: str
    goal_title: str
    calendar_type: CalendarType
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


class UnscheduledGoal(BaseModel):
    """Goal that did not receive its full allocation in a batch run."""

    goal_id: str
    reason: UnscheduledReason
    remaining_minutes: int = Field(..., ge=0)


class ScheduleResponse(BaseModel):
    """Batch allocation result for a window."""

    window_start: datetime
    window_end: datetime
    blocks: list[ProposedBlock] = Field(default_factory=list)
    unscheduled_goals: list[UnscheduledGoal] = Field(default_factory=list)


class GoalScheduleResult(BaseModel):
    """Placement result for a single newly captured goal."""

    goal_id: str
    blocks: list[ProposedBlock] = Field(default_factory=list)
    requested_sessions: int = Field(..., ge=0)
    scheduled_sessions: int = Field(..., ge=0)
    scheduling_error: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return 0 < self.scheduled_sessions < self.requested_sessions


class SubGoalScheduleResult(BaseModel):
    """Placement result for the sub-goals of one parent goal."""

    parent_goal_id: str
    blocks: list[ProposedBlock] = Field(default_factory=list)
    unscheduled_sub_goal_ids: list[str] = Field(default_factory=list)
    scheduling_error: Optional[str] = None


class ScheduleGenerateRequest(BaseModel):
    """Request body for batch schedule generation."""

    goals: list[Goal]
    busy_slots: list[BusySlot] = Field(default_factory=list)
    existing_blocks: list[ScheduledBlock] = Field(default_factory=list)
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    now: Optional[datetime] = None


class GoalScheduleRequest(BaseModel):
    """Request body for placing a single goal."""

    goal: Goal
    busy_slots: list[BusySlot] = Field(default_factory=list)
    now: Optional[datetime] = None


class SubGoalScheduleRequest(BaseModel):
    """Request body for placing the sub-goals of a goal."""

    parent: Goal
    sub_goals: list[SubGoal] = Field(..., min_length=1)
    busy_slots: list[BusySlot] = Field(default_factory=list)
    now: Optional[datetime] = None
