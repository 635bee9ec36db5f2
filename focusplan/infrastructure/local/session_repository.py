"""
SQLite implementation of execution session repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import IntegrityError

from focusplan.core.exceptions import AlreadyTrackingError
from focusplan.infrastructure.local.database import (
    ExecutionSessionORM,
    from_db_datetime,
    get_session_factory,
    to_db_datetime,
)
from focusplan.interfaces.session_repository import ISessionRepository
from focusplan.models.session import ExecutionSession


class SqliteSessionRepository(ISessionRepository):
    """SQLite implementation of session repository.

    The partial unique index on (user_id, task_id) WHERE ended_at IS NULL is
    what enforces a single active session per task.
    """

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ExecutionSessionORM) -> ExecutionSession:
        return ExecutionSession(
            id=UUID(orm.id),
            user_id=orm.user_id,
            task_id=UUID(orm.task_id),
            started_at=from_db_datetime(orm.started_at),
            ended_at=from_db_datetime(orm.ended_at),
        )

    async def create(self, session: ExecutionSession) -> ExecutionSession:
        async with self._session_factory() as db:
            orm = ExecutionSessionORM(
                id=str(session.id),
                user_id=session.user_id,
                task_id=str(session.task_id),
                started_at=to_db_datetime(session.started_at),
                ended_at=to_db_datetime(session.ended_at),
            )
            db.add(orm)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise AlreadyTrackingError(
                    f"Task {session.task_id} already has an active session"
                ) from e
            return self._orm_to_model(orm)

    async def get_active(self, user_id: str, task_id: UUID) -> Optional[ExecutionSession]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(ExecutionSessionORM).where(
                    and_(
                        ExecutionSessionORM.user_id == user_id,
                        ExecutionSessionORM.task_id == str(task_id),
                        ExecutionSessionORM.ended_at.is_(None),
                    )
                )
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def close(self, session_id: UUID, ended_at: datetime) -> Optional[ExecutionSession]:
        async with self._session_factory() as db:
            result = await db.execute(
                update(ExecutionSessionORM)
                .where(
                    and_(
                        ExecutionSessionORM.id == str(session_id),
                        ExecutionSessionORM.ended_at.is_(None),
                    )
                )
                .values(ended_at=to_db_datetime(ended_at))
            )
            await db.commit()
            if result.rowcount != 1:
                return None

            row = await db.execute(
                select(ExecutionSessionORM).where(ExecutionSessionORM.id == str(session_id))
            )
            return self._orm_to_model(row.scalar_one())

    async def list_for_task(self, user_id: str, task_id: UUID) -> list[ExecutionSession]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(ExecutionSessionORM)
                .where(
                    and_(
                        ExecutionSessionORM.user_id == user_id,
                        ExecutionSessionORM.task_id == str(task_id),
                    )
                )
                .order_by(ExecutionSessionORM.started_at, ExecutionSessionORM.id)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_started_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[ExecutionSession]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(ExecutionSessionORM)
                .where(
                    and_(
                        ExecutionSessionORM.user_id == user_id,
                        ExecutionSessionORM.started_at >= to_db_datetime(start),
                        ExecutionSessionORM.started_at < to_db_datetime(end),
                    )
                )
                .order_by(ExecutionSessionORM.started_at, ExecutionSessionORM.id)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def delete_for_task(self, user_id: str, task_id: UUID) -> int:
        async with self._session_factory() as db:
            result = await db.execute(
                delete(ExecutionSessionORM).where(
                    and_(
                        ExecutionSessionORM.user_id == user_id,
                        ExecutionSessionORM.task_id == str(task_id),
                    )
                )
            )
            await db.commit()
            return result.rowcount or 0
