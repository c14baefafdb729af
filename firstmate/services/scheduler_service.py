"""
Scheduler service for placing goal sessions on the calendar.

Handles single-goal placement, recurring expansion and batch week filling.
Every operation is a pure function of its arguments: "now" is passed in,
and nothing is read from or written to external systems.
"""

import math
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional, Sequence

from firstmate.core.config import Settings
from firstmate.core.exceptions import ValidationError
from firstmate.core.logger import setup_logger
from firstmate.models.enums import PlacementStrategy, UnscheduledReason, Weekday
from firstmate.models.goal import Goal, SubGoal, parse_time_of_day
from firstmate.models.schedule import (
    GoalScheduleResult,
    ProposedBlock,
    ScheduleResponse,
    SubGoalScheduleResult,
    UnscheduledGoal,
)
from firstmate.services.availability_service import Interval, find_free_slots, has_conflict
from firstmate.utils.datetime_utils import (
    end_of_local_day,
    ensure_utc,
    get_zone,
    iter_local_dates,
    local_day_bounds,
    local_time_to_utc,
    start_of_local_day,
)

logger = setup_logger(__name__)

NO_SLOT_MESSAGE = "No available time slot found; the goal was saved but not scheduled"
SUB_GOAL_NO_SLOT_MESSAGE = "No available time slot found for some sub-goals"


class SchedulerService:
    """
    Service for allocating time blocks to goals.

    Provides:
    - Next-slot placement for one-off goals
    - Weekday expansion for recurring goals
    - Priority-ordered batch allocation across a window
    """

    def __init__(
        self,
        timezone: str = "America/Los_Angeles",
        day_start: str = "08:00",
        day_end: str = "21:00",
        min_block_minutes: int = 15,
        max_session_minutes: int = 120,
        default_recurring_time: str = "09:00",
        search_lookahead_days: int = 14,
    ):
        """
        Initialize scheduler service.

        Args:
            timezone: IANA zone in which day bounds and preferred times are read
            day_start: Start of the daily free-slot scan ("HH:MM")
            day_end: End of the daily free-slot scan ("HH:MM")
            min_block_minutes: Smallest block ever proposed, also the rounding step
            max_session_minutes: Cap for a session derived from estimated hours
            default_recurring_time: Time for recurring goals without a preferred time
            search_lookahead_days: Minimum horizon used by schedule_goal
        """
        try:
            get_zone(timezone)
        except ValueError as e:
            raise ValidationError(str(e), details={"timezone": timezone}) from e

        parsed_start = parse_time_of_day(day_start)
        parsed_end = parse_time_of_day(day_end)
        if parsed_start is None or parsed_end is None or parsed_end <= parsed_start:
            raise ValidationError(
                "Invalid scheduling day window",
                details={"day_start": day_start, "day_end": day_end},
            )
        parsed_default = parse_time_of_day(default_recurring_time)
        if parsed_default is None:
            raise ValidationError(
                "Invalid default recurring time",
                details={"default_recurring_time": default_recurring_time},
            )
        if min_block_minutes <= 0:
            raise ValidationError("min_block_minutes must be positive")

        self.timezone = timezone
        self.day_start = parsed_start
        self.day_end = parsed_end
        self.min_block_minutes = min_block_minutes
        self.max_session_minutes = max_session_minutes
        self.default_recurring_time = parsed_default
        self.search_lookahead_days = search_lookahead_days

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulerService":
        return cls(
            timezone=settings.SCHEDULER_TIMEZONE,
            day_start=settings.SCHEDULE_DAY_START,
            day_end=settings.SCHEDULE_DAY_END,
            min_block_minutes=settings.MIN_BLOCK_MINUTES,
            max_session_minutes=settings.MAX_SESSION_MINUTES,
            default_recurring_time=settings.DEFAULT_RECURRING_TIME,
            search_lookahead_days=settings.SEARCH_LOOKAHEAD_DAYS,
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def find_next_slot(
        self,
        goal: Goal,
        busy: Iterable[Interval],
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime] = None,
    ) -> Optional[ProposedBlock]:
        """
        Place a single session for a one-off goal.

        Tries the preferred time on each day first, then falls back to the
        first free slot of the daily scan window.

        Returns:
            The proposed block, or None when nothing fits in the window
        """
        blocks = self._place_sessions(
            goal, PlacementStrategy.NEXT_AVAILABLE, busy, window_start, window_end, now
        )
        if not blocks:
            logger.info(f"No slot found for goal {goal.id} before {window_end.isoformat()}")
            return None
        return blocks[0]

    def find_recurring_slots(
        self,
        goal: Goal,
        busy: Iterable[Interval],
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime] = None,
    ) -> list[ProposedBlock]:
        """
        Expand a recurring goal into one block per matching weekday.

        Occurrences that conflict with busy time or with an earlier occurrence
        are skipped, so the result may hold fewer blocks than requested.
        """
        if goal.recurring is None:
            raise ValidationError(f"Goal {goal.id} is not recurring")

        blocks = self._place_sessions(
            goal, PlacementStrategy.RECURRING, busy, window_start, window_end, now
        )
        requested = self.count_recurring_occurrences(goal, window_start, window_end, now)
        logger.info(
            f"Recurring goal {goal.id}: {len(blocks)}/{requested} occurrences scheduled"
        )
        return blocks

    def generate_schedule(
        self,
        goals: Sequence[Goal],
        busy: Iterable[Interval],
        existing_blocks: Iterable[Interval],
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime] = None,
    ) -> list[ProposedBlock]:
        """Allocate blocks for every goal across the window (see build_schedule)."""
        return self.build_schedule(
            goals, busy, existing_blocks, window_start, window_end, now
        ).blocks

    def build_schedule(
        self,
        goals: Sequence[Goal],
        busy: Iterable[Interval],
        existing_blocks: Iterable[Interval],
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime] = None,
    ) -> ScheduleResponse:
        """
        Allocate blocks for a batch of goals across a window.

        Goals are ordered hard deadlines first, then by descending priority;
        ties keep input order. Blocks placed for earlier goals are busy time
        for later ones.

        Returns:
            ScheduleResponse with all proposed blocks plus one report per goal
            that ended with no blocks or with unconsumed hours
        """
        taken: list[Interval] = [*busy, *existing_blocks]
        proposed: list[ProposedBlock] = []
        unscheduled: list[UnscheduledGoal] = []

        for goal in self.order_goals(goals):
            strategy = self._batch_strategy(goal)
            blocks = self._place_sessions(
                goal, strategy, [*taken, *proposed], window_start, window_end, now
            )
            proposed.extend(blocks)

            report = self._unscheduled_report(goal, strategy, blocks, window_start, window_end, now)
            if report:
                unscheduled.append(report)

        logger.info(
            f"Schedule generated: {len(proposed)} blocks for {len(goals)} goals "
            f"({len(unscheduled)} not fully scheduled)"
        )

        return ScheduleResponse(
            window_start=ensure_utc(window_start),
            window_end=ensure_utc(window_end),
            blocks=proposed,
            unscheduled_goals=unscheduled,
        )

    def schedule_goal(
        self,
        goal: Goal,
        busy: Iterable[Interval],
        now: datetime,
    ) -> GoalScheduleResult:
        """
        Place a newly captured goal.

        The window runs from now to the later of the due date and the
        lookahead horizon; hard deadlines are clamped to the due date.
        """
        now = ensure_utc(now)
        busy = list(busy)
        lookahead_end = now + timedelta(days=self.search_lookahead_days)
        window_end = max(end_of_local_day(goal.due_date, self.timezone), lookahead_end)

        if goal.recurring is not None:
            blocks = self.find_recurring_slots(goal, busy, now, window_end, now)
            requested = self.count_recurring_occurrences(goal, now, window_end, now)
        else:
            block = self.find_next_slot(goal, busy, now, window_end, now)
            blocks = [block] if block else []
            requested = 1

        return GoalScheduleResult(
            goal_id=goal.id,
            blocks=blocks,
            requested_sessions=requested,
            scheduled_sessions=len(blocks),
            scheduling_error=None if blocks else NO_SLOT_MESSAGE,
        )

    def schedule_sub_goals(
        self,
        parent: Goal,
        sub_goals: Sequence[SubGoal],
        busy: Iterable[Interval],
        now: datetime,
    ) -> SubGoalScheduleResult:
        """
        Place one session per sub-goal, in the order given.

        Each sub-goal is searched from the later of its start date and now up
        to the later of the parent's due date and the lookahead horizon. Blocks
        placed for earlier sub-goals are busy time for later ones. Sub-goals
        without a start date are skipped.
        """
        now = ensure_utc(now)
        taken: list[Interval] = list(busy)
        window_end = max(
            end_of_local_day(parent.due_date, self.timezone),
            now + timedelta(days=self.search_lookahead_days),
        )

        blocks: list[ProposedBlock] = []
        unscheduled: list[str] = []
        for sub_goal in sub_goals:
            if sub_goal.start_date is None:
                continue
            goal = self._sub_goal_as_goal(parent, sub_goal)
            start_from = max(start_of_local_day(sub_goal.start_date, self.timezone), now)
            placed = self._place_sessions(
                goal, PlacementStrategy.NEXT_AVAILABLE, taken, start_from, window_end, now
            )
            if not placed:
                unscheduled.append(sub_goal.id)
                continue
            blocks.extend(placed)
            taken.extend(placed)

        logger.info(
            f"Sub-goals of {parent.id}: {len(blocks)} placed, {len(unscheduled)} without a slot"
        )

        return SubGoalScheduleResult(
            parent_goal_id=parent.id,
            blocks=blocks,
            unscheduled_sub_goal_ids=unscheduled,
            scheduling_error=SUB_GOAL_NO_SLOT_MESSAGE if unscheduled else None,
        )

    def count_recurring_occurrences(
        self,
        goal: Goal,
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime] = None,
    ) -> int:
        """Number of future occurrences a recurring goal asks for in the window."""
        if goal.recurring is None:
            return 0
        now_at, earliest, latest = self._resolve_window(goal, window_start, window_end, now)
        at = parse_time_of_day(goal.preferred_time) or self.default_recurring_time
        return sum(
            1
            for _ in self._fixed_time_occurrences(
                goal, at, goal.recurring.effective_days(), now_at, earliest, latest
            )
        )

    @staticmethod
    def order_goals(goals: Sequence[Goal]) -> list[Goal]:
        """Hard deadlines first, then priority high to low; stable for ties."""
        return sorted(goals, key=lambda goal: (not goal.is_hard_deadline, -goal.priority))

    # ------------------------------------------------------------------
    # Placement primitive
    # ------------------------------------------------------------------

    def _place_sessions(
        self,
        goal: Goal,
        strategy: PlacementStrategy,
        busy: Iterable[Interval],
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime] = None,
    ) -> list[ProposedBlock]:
        self._check_goal(goal)
        now_at, earliest, latest = self._resolve_window(goal, window_start, window_end, now)
        if latest <= earliest:
            return []

        # Blocks are appended as they are placed so later sessions avoid them
        working: list[Interval] = list(busy)
        preferred = parse_time_of_day(goal.preferred_time)

        if strategy == PlacementStrategy.NEXT_AVAILABLE:
            blocks: list[ProposedBlock] = []
            if preferred:
                blocks = self._place_at_time(
                    goal, preferred, None, working, now_at, earliest, latest, first_only=True
                )
            if not blocks:
                blocks = self._fill_free_slots(
                    goal,
                    self._session_minutes(goal),
                    working,
                    earliest,
                    latest,
                    max_blocks=1,
                    round_up=False,
                )
            return blocks

        if strategy == PlacementStrategy.PREFERRED_TIME:
            if not preferred:
                return []
            return self._place_at_time(
                goal, preferred, None, working, now_at, earliest, latest, first_only=True
            )

        if strategy == PlacementStrategy.RECURRING:
            if goal.recurring is None:
                return []
            return self._place_at_time(
                goal,
                preferred or self.default_recurring_time,
                goal.recurring.effective_days(),
                working,
                now_at,
                earliest,
                latest,
                first_only=False,
            )

        return self._fill_free_slots(
            goal,
            goal.total_minutes,
            working,
            earliest,
            latest,
            max_blocks=None,
            round_up=True,
        )

    def _place_at_time(
        self,
        goal: Goal,
        at: tuple[int, int],
        weekdays: Optional[set[Weekday]],
        working: list[Interval],
        now_at: datetime,
        earliest: datetime,
        latest: datetime,
        first_only: bool,
    ) -> list[ProposedBlock]:
        blocks: list[ProposedBlock] = []
        for start, end in self._fixed_time_occurrences(goal, at, weekdays, now_at, earliest, latest):
            if has_conflict(start, end, working):
                logger.debug(f"Goal {goal.id}: {start.isoformat()} conflicts, skipping")
                continue
            block = self._make_block(goal, start, end)
            blocks.append(block)
            working.append(block)
            if first_only:
                break
        return blocks

    def _fixed_time_occurrences(
        self,
        goal: Goal,
        at: tuple[int, int],
        weekdays: Optional[set[Weekday]],
        now_at: datetime,
        earliest: datetime,
        latest: datetime,
    ) -> Iterator[tuple[datetime, datetime]]:
        """Candidate [start, end) pairs at a wall-clock time, one per eligible day."""
        duration = timedelta(minutes=self._session_minutes(goal))
        for day in iter_local_dates(earliest, latest, self.timezone):
            if weekdays is not None and Weekday.from_date(day) not in weekdays:
                continue
            # Offset resolved for this date, so the wall-clock time survives DST
            start = local_time_to_utc(day, at[0], at[1], self.timezone)
            end = start + duration
            if start <= now_at or start < earliest or end > latest:
                continue
            yield start, end

    def _fill_free_slots(
        self,
        goal: Goal,
        total_minutes: float,
        working: list[Interval],
        earliest: datetime,
        latest: datetime,
        max_blocks: Optional[int],
        round_up: bool,
    ) -> list[ProposedBlock]:
        remaining = total_minutes
        blocks: list[ProposedBlock] = []

        for day in iter_local_dates(earliest, latest, self.timezone):
            if remaining <= 0 or self._reached(blocks, max_blocks):
                break
            day_start, day_end = self._scan_window(day)
            free_slots = find_free_slots(
                max(day_start, earliest),
                min(day_end, latest),
                working,
                self.min_block_minutes,
            )
            for slot in free_slots:
                if remaining <= 0 or self._reached(blocks, max_blocks):
                    break
                minutes = self._chunk_minutes(remaining, slot.minutes, round_up)
                if minutes < self.min_block_minutes:
                    continue
                block = self._make_block(goal, slot.start, slot.start + timedelta(minutes=minutes))
                blocks.append(block)
                working.append(block)
                remaining -= minutes

        return blocks

    def _chunk_minutes(self, remaining: float, free_minutes: float, round_up: bool) -> float:
        """Minutes to carve from a free slot: rounded up to the step, then clamped to the slot."""
        chunk = min(remaining, free_minutes)
        if round_up:
            step = self.min_block_minutes
            chunk = math.ceil(chunk / step) * step
        return min(chunk, free_minutes)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_window(
        self,
        goal: Goal,
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime],
    ) -> tuple[datetime, datetime, datetime]:
        """Return (now, earliest start, latest end) for a goal."""
        window_start = ensure_utc(window_start)
        now_at = ensure_utc(now) if now is not None else window_start
        earliest = max(window_start, now_at)
        latest = ensure_utc(window_end)
        if goal.is_hard_deadline:
            latest = min(latest, self._deadline(goal))
        return now_at, earliest, latest

    def _deadline(self, goal: Goal) -> datetime:
        return end_of_local_day(goal.due_date, self.timezone)

    def _scan_window(self, day: date) -> tuple[datetime, datetime]:
        return local_day_bounds(day, self.day_start, self.day_end, self.timezone)

    def _session_minutes(self, goal: Goal) -> float:
        return goal.session_minutes(self.max_session_minutes, self.min_block_minutes)

    def _batch_strategy(self, goal: Goal) -> PlacementStrategy:
        has_preferred = parse_time_of_day(goal.preferred_time) is not None
        if goal.recurring is not None and has_preferred:
            return PlacementStrategy.RECURRING
        if has_preferred:
            return PlacementStrategy.PREFERRED_TIME
        return PlacementStrategy.FILL_HOURS

    def _unscheduled_report(
        self,
        goal: Goal,
        strategy: PlacementStrategy,
        blocks: list[ProposedBlock],
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime],
    ) -> Optional[UnscheduledGoal]:
        if strategy == PlacementStrategy.FILL_HOURS:
            placed = sum(block.minutes for block in blocks)
            remaining = max(0, math.ceil(goal.total_minutes - placed))
        elif strategy == PlacementStrategy.RECURRING:
            requested = self.count_recurring_occurrences(goal, window_start, window_end, now)
            remaining = math.ceil(max(0, requested - len(blocks)) * self._session_minutes(goal))
        else:
            remaining = 0 if blocks else math.ceil(self._session_minutes(goal))

        if remaining <= 0:
            return None
        reason = (
            UnscheduledReason.PARTIALLY_SCHEDULED if blocks else UnscheduledReason.NO_AVAILABLE_SLOT
        )
        return UnscheduledGoal(goal_id=goal.id, reason=reason, remaining_minutes=remaining)

    def _check_goal(self, goal: Goal) -> None:
        """Reject goals that bypassed model validation."""
        if not 1 <= goal.priority <= 5:
            raise ValidationError(f"Goal {goal.id} has priority {goal.priority} outside 1-5")
        if goal.estimated_hours <= 0:
            raise ValidationError(f"Goal {goal.id} has non-positive estimated_hours")
        if goal.duration_minutes is not None and goal.duration_minutes < self.min_block_minutes:
            raise ValidationError(
                f"Goal {goal.id} has duration_minutes below {self.min_block_minutes}"
            )

    def _sub_goal_as_goal(self, parent: Goal, sub_goal: SubGoal) -> Goal:
        """Schedulable goal for a sub-goal, inheriting the parent's placement hints."""
        session = min(sub_goal.estimated_hours * 60, self.max_session_minutes)
        return Goal(
            id=sub_goal.id,
            title=sub_goal.title,
            description=sub_goal.description,
            due_date=sub_goal.end_date or parent.due_date,
            estimated_hours=sub_goal.estimated_hours,
            duration_minutes=max(session, self.min_block_minutes),
            priority=parent.priority,
            is_work=parent.is_work,
            preferred_time=parent.preferred_time,
        )

    @staticmethod
    def _reached(blocks: list[ProposedBlock], max_blocks: Optional[int]) -> bool:
        return max_blocks is not None and len(blocks) >= max_blocks

    @staticmethod
    def _make_block(goal: Goal, start: datetime, end: datetime) -> ProposedBlock:
        return ProposedBlock(
            goal_id=goal.id,
            goal_title=goal.title,
            calendar_type=goal.calendar_type,
            start=start,
            end=end,
        )
