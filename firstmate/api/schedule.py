"""
Schedule API endpoints.

Stateless access to the scheduling engine: callers supply busy slots and
goals, and receive proposed blocks. Nothing is persisted here.
"""

from fastapi import APIRouter, HTTPException, status

from firstmate.api.deps import Scheduler
from firstmate.core.exceptions import ValidationError
from firstmate.models.schedule import (
    GoalScheduleRequest,
    GoalScheduleResult,
    ScheduleGenerateRequest,
    ScheduleResponse,
    SubGoalScheduleRequest,
    SubGoalScheduleResult,
)
from firstmate.utils.datetime_utils import ensure_utc, get_week_range, now_utc

router = APIRouter()


@router.post("/generate", response_model=ScheduleResponse)
async def generate_schedule(
    payload: ScheduleGenerateRequest,
    scheduler_service: Scheduler,
):
    """Propose blocks for all goals across a window (default: the current week)."""
    now = ensure_utc(payload.now) if payload.now else now_utc()
    window_start, window_end = get_week_range(now, scheduler_service.timezone)
    if payload.window_start:
        window_start = ensure_utc(payload.window_start)
    if payload.window_end:
        window_end = ensure_utc(payload.window_end)

    if window_end <= window_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="window_end must be after window_start",
        )

    try:
        return scheduler_service.build_schedule(
            payload.goals,
            payload.busy_slots,
            payload.existing_blocks,
            window_start,
            window_end,
            now=now,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post("/goal", response_model=GoalScheduleResult)
async def schedule_goal(
    payload: GoalScheduleRequest,
    scheduler_service: Scheduler,
):
    """Place a newly captured goal, reporting when it could not be scheduled."""
    now = ensure_utc(payload.now) if payload.now else now_utc()
    try:
        return scheduler_service.schedule_goal(payload.goal, payload.busy_slots, now)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post("/sub-goals", response_model=SubGoalScheduleResult)
async def schedule_sub_goals(
    payload: SubGoalScheduleRequest,
    scheduler_service: Scheduler,
):
    """Place the sub-goals of a goal one after another."""
    now = ensure_utc(payload.now) if payload.now else now_utc()
    try:
        return scheduler_service.schedule_sub_goals(
            payload.parent, payload.sub_goals, payload.busy_slots, now
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
