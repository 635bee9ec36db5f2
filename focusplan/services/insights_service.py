"""
Productivity insights: planned vs. confirmed vs. executed time,
estimation bias and slipped work. Everything is derived on read.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from focusplan.core.config import Settings, get_settings
from focusplan.core.exceptions import ValidationError
from focusplan.core.logger import setup_logger
from focusplan.interfaces.block_repository import IPlannedBlockRepository
from focusplan.interfaces.proposal_repository import IProposalRepository
from focusplan.interfaces.session_repository import ISessionRepository
from focusplan.interfaces.task_repository import ITaskRepository
from focusplan.models.enums import BlockState, TaskStatus
from focusplan.models.insights import DailyInsights, InsightsMinutes, SlippedTask, WeeklyInsights
from focusplan.models.proposal import PlannedBlock
from focusplan.models.session import ExecutionSession
from focusplan.models.task import Task
from focusplan.utils.datetime_utils import (
    get_user_today,
    get_zone,
    local_day_bounds,
    now_utc,
    overlap_minutes,
    week_start_for,
)

logger = setup_logger(__name__)

OPEN_STATUSES = (TaskStatus.TODO, TaskStatus.IN_PROGRESS)


def estimation_bias(tasks: list[Task]) -> float:
    """
    Estimate-weighted relative error over completed tasks.

    sum(actual - estimate) / sum(estimate); positive means work took longer
    than estimated. Tasks without an estimate are ignored.
    """
    estimated = [task for task in tasks if task.estimated_minutes]
    total_estimate = sum(task.estimated_minutes for task in estimated)
    if total_estimate <= 0:
        return 0.0
    total_actual = sum(task.actual_minutes_total for task in estimated)
    return (total_actual - total_estimate) / total_estimate


class InsightsService:
    """Daily and weekly aggregates for one user."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        proposal_repo: IProposalRepository,
        block_repo: IPlannedBlockRepository,
        session_repo: ISessionRepository,
        settings: Optional[Settings] = None,
    ):
        self.task_repo = task_repo
        self.proposal_repo = proposal_repo
        self.block_repo = block_repo
        self.session_repo = session_repo
        self.settings = settings or get_settings()

    def _resolve_timezone(self, timezone: Optional[str]) -> str:
        tz = timezone or self.settings.DEFAULT_TIMEZONE
        try:
            get_zone(tz)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return tz

    async def daily(
        self,
        user_id: str,
        day: Optional[date] = None,
        timezone: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DailyInsights:
        """
        Insights for one day in the user's timezone.

        Args:
            user_id: User ID
            day: Day to report (defaults to today)
            timezone: IANA timezone (defaults to DEFAULT_TIMEZONE)
            now: Reference time for deciding whether a block has passed

        Returns:
            DailyInsights; all zeros when nothing happened that day
        """
        tz = self._resolve_timezone(timezone)
        day = day or get_user_today(tz)
        now = now or now_utc()
        day_start, day_end = local_day_bounds(day, tz)

        minutes = InsightsMinutes()

        proposal = await self.proposal_repo.get_latest(user_id, day)
        if proposal:
            minutes.planned = proposal.planned_minutes
            minutes.calendar_busy = sum(
                overlap_minutes(busy.start, busy.end, day_start, day_end)
                for busy in proposal.busy_intervals
            )

        confirmed = await self.block_repo.list_by_date(user_id, day, BlockState.CONFIRMED)
        minutes.confirmed = sum(block.minutes for block in confirmed)

        sessions = await self.session_repo.list_started_between(user_id, day_start, day_end)
        minutes.executed = sum(
            session.duration_minutes for session in sessions if not session.is_active
        )

        completed = await self.task_repo.list_completed_between(user_id, day_start, day_end)
        logger.debug(
            f"Insights {user_id} {day}: planned={minutes.planned:.0f} "
            f"confirmed={minutes.confirmed:.0f} executed={minutes.executed:.0f}"
        )

        return DailyInsights(
            day=day,
            minutes=minutes,
            slipped=await self._slipped(user_id, confirmed, sessions, now),
            estimation_bias=estimation_bias(completed),
        )

    async def _slipped(
        self,
        user_id: str,
        confirmed: list[PlannedBlock],
        sessions: list[ExecutionSession],
        now: datetime,
    ) -> list[SlippedTask]:
        """Confirmed blocks that are over with no work recorded on their task that day."""
        worked = {session.task_id for session in sessions}
        candidates = []
        for block in confirmed:
            if block.end > now or block.task_id in worked or block.task_id in candidates:
                continue
            candidates.append(block.task_id)
        if not candidates:
            return []

        tasks = {task.id: task for task in await self.task_repo.get_many(user_id, candidates)}
        slipped = []
        for task_id in candidates:
            task = tasks.get(task_id)
            if task and task.status in OPEN_STATUSES:
                slipped.append(SlippedTask(task_id=task.id, title=task.title))
        return slipped

    async def weekly(
        self,
        user_id: str,
        week_start: Optional[date] = None,
        timezone: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> WeeklyInsights:
        """Seven daily reports summed; bias is computed over the whole week."""
        tz = self._resolve_timezone(timezone)
        week_start = week_start or week_start_for(get_user_today(tz))
        now = now or now_utc()

        days = [
            await self.daily(user_id, week_start + timedelta(days=offset), tz, now)
            for offset in range(7)
        ]

        minutes = InsightsMinutes(
            planned=sum(day.minutes.planned for day in days),
            confirmed=sum(day.minutes.confirmed for day in days),
            executed=sum(day.minutes.executed for day in days),
            calendar_busy=sum(day.minutes.calendar_busy for day in days),
        )

        week_begin, _ = local_day_bounds(week_start, tz)
        _, week_end = local_day_bounds(week_start + timedelta(days=6), tz)
        completed = await self.task_repo.list_completed_between(user_id, week_begin, week_end)

        return WeeklyInsights(
            week_start=week_start,
            minutes=minutes,
            estimation_bias=estimation_bias(completed),
            slipped_count=sum(len(day.slipped) for day in days),
            days=days,
        )
