"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select

from focusplan.core.exceptions import NotFoundError
from focusplan.infrastructure.local.database import (
    TaskORM,
    from_db_datetime,
    get_session_factory,
    to_db_datetime,
)
from focusplan.interfaces.task_repository import ITaskRepository
from focusplan.models.enums import Priority, TaskStatus
from focusplan.models.task import Task, TaskCreate, TaskUpdate
from focusplan.utils.datetime_utils import now_utc


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            user_id=orm.user_id,
            title=orm.title,
            notes=orm.notes,
            priority=Priority(orm.priority),
            estimated_minutes=orm.estimated_minutes,
            due_date=orm.due_date,
            status=TaskStatus(orm.status),
            actual_minutes_total=orm.actual_minutes_total or 0.0,
            sessions_count=orm.sessions_count or 0,
            completed_at=from_db_datetime(orm.completed_at),
            created_at=from_db_datetime(orm.created_at),
            updated_at=from_db_datetime(orm.updated_at),
        )

    async def _get_orm(self, session, user_id: str, task_id: UUID) -> Optional[TaskORM]:
        result = await session.execute(
            select(TaskORM).where(
                and_(TaskORM.id == str(task_id), TaskORM.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """Create a new task."""
        async with self._session_factory() as session:
            now = to_db_datetime(now_utc())
            orm = TaskORM(
                id=str(uuid4()),
                user_id=user_id,
                title=task.title,
                notes=task.notes,
                priority=task.priority.value,
                estimated_minutes=task.estimated_minutes,
                due_date=task.due_date,
                status=task.status.value,
                actual_minutes_total=0.0,
                sessions_count=0,
                completed_at=now if task.status == TaskStatus.DONE else None,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, user_id: str, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, task_id)
            return self._orm_to_model(orm) if orm else None

    async def get_many(self, user_id: str, task_ids: list[UUID]) -> list[Task]:
        """Get tasks by IDs."""
        if not task_ids:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(
                    and_(
                        TaskORM.user_id == user_id,
                        TaskORM.id.in_([str(task_id) for task_id in task_ids]),
                    )
                )
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list(
        self,
        user_id: str,
        status: Optional[TaskStatus] = None,
        include_done: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        """List tasks with optional filters."""
        async with self._session_factory() as session:
            query = select(TaskORM).where(TaskORM.user_id == user_id)

            if status:
                query = query.where(TaskORM.status == status.value)
            elif not include_done:
                query = query.where(TaskORM.status != TaskStatus.DONE.value)

            query = query.order_by(TaskORM.created_at.desc(), TaskORM.id)
            query = query.limit(limit).offset(offset)

            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_eligible(self, user_id: str, plan_date: date) -> list[Task]:
        """List tasks that are not done, oldest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM)
                .where(
                    and_(
                        TaskORM.user_id == user_id,
                        TaskORM.status != TaskStatus.DONE.value,
                    )
                )
                .order_by(TaskORM.created_at.asc(), TaskORM.id)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_completed_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Task]:
        """List tasks completed in [start, end)."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM)
                .where(
                    and_(
                        TaskORM.user_id == user_id,
                        TaskORM.status == TaskStatus.DONE.value,
                        TaskORM.completed_at >= to_db_datetime(start),
                        TaskORM.completed_at < to_db_datetime(end),
                    )
                )
                .order_by(TaskORM.completed_at.asc(), TaskORM.id)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        """Update an existing task."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, task_id)
            if not orm:
                raise NotFoundError(f"Task {task_id} not found")

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if value is None and field in ("title", "priority", "status"):
                    continue
                if hasattr(value, "value"):  # Enum
                    value = value.value
                setattr(orm, field, value)

            if "status" in update_data and update_data["status"] is not None:
                if orm.status == TaskStatus.DONE.value:
                    orm.completed_at = orm.completed_at or to_db_datetime(now_utc())
                else:
                    orm.completed_at = None

            orm.updated_at = to_db_datetime(now_utc())
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def update_status(
        self,
        user_id: str,
        task_id: UUID,
        status: TaskStatus,
        completed_at: Optional[datetime] = None,
    ) -> Task:
        """Set task status."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, task_id)
            if not orm:
                raise NotFoundError(f"Task {task_id} not found")
            orm.status = status.value
            if status == TaskStatus.DONE:
                orm.completed_at = to_db_datetime(completed_at or now_utc())
            else:
                orm.completed_at = None
            orm.updated_at = to_db_datetime(now_utc())
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def set_actual_minutes(
        self,
        user_id: str,
        task_id: UUID,
        actual_minutes_total: float,
        sessions_count: int,
    ) -> Task:
        """Store tracked-time aggregate."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, task_id)
            if not orm:
                raise NotFoundError(f"Task {task_id} not found")
            orm.actual_minutes_total = actual_minutes_total
            orm.sessions_count = sessions_count
            orm.updated_at = to_db_datetime(now_utc())
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, user_id: str, task_id: UUID) -> bool:
        """Delete a task."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, task_id)
            if not orm:
                return False

            await session.delete(orm)
            await session.commit()
            return True
