"""
Local calendar provider backed by the calendar_events table.

Events created by confirm are stored here and count as busy time on
later propose calls, the same way a real calendar would report them.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import and_, delete, select

from focusplan.core.logger import setup_logger
from focusplan.infrastructure.local.database import (
    CalendarEventORM,
    from_db_datetime,
    get_session_factory,
    to_db_datetime,
)
from focusplan.interfaces.calendar_provider import ICalendarProvider
from focusplan.models.calendar import BusyInterval, CalendarEventCreate
from focusplan.utils.datetime_utils import local_day_bounds

logger = setup_logger(__name__)


class LocalCalendarProvider(ICalendarProvider):
    """SQLite-backed calendar for local development and tests."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def list_busy_intervals(
        self,
        user_id: str,
        day: date,
        timezone: str,
    ) -> list[BusyInterval]:
        day_start, day_end = local_day_bounds(day, timezone)
        async with self._session_factory() as session:
            result = await session.execute(
                select(CalendarEventORM)
                .where(
                    and_(
                        CalendarEventORM.user_id == user_id,
                        CalendarEventORM.start_ts < to_db_datetime(day_end),
                        CalendarEventORM.end_ts > to_db_datetime(day_start),
                    )
                )
                .order_by(CalendarEventORM.start_ts, CalendarEventORM.id)
            )
            intervals = []
            for orm in result.scalars().all():
                start = max(from_db_datetime(orm.start_ts), day_start)
                end = min(from_db_datetime(orm.end_ts), day_end)
                if end <= start:
                    continue
                intervals.append(
                    BusyInterval(
                        start=start,
                        end=end,
                        source="local",
                        event_id=orm.id,
                        summary=orm.summary,
                    )
                )
            return intervals

    async def create_event(self, user_id: str, event: CalendarEventCreate) -> str:
        async with self._session_factory() as session:
            orm = CalendarEventORM(
                user_id=user_id,
                summary=event.summary,
                description=event.description,
                start_ts=to_db_datetime(event.start),
                end_ts=to_db_datetime(event.end),
                extended_private=dict(event.extended_private),
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            logger.debug(f"Created local calendar event {orm.id} for user {user_id}")
            return orm.id

    async def delete_event(self, user_id: str, event_id: str) -> bool:
        async with self._session_factory() as session:
            await session.execute(
                delete(CalendarEventORM).where(
                    and_(
                        CalendarEventORM.user_id == user_id,
                        CalendarEventORM.id == event_id,
                    )
                )
            )
            await session.commit()
            return True
