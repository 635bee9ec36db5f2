"""
Execution tracking: start / stop / done on a task.

Calls for the same (user, task) are serialised by an in-process lock; the
session store's unique index on open sessions covers multiple processes.
"""

import asyncio
from collections import defaultdict
from typing import Optional
from uuid import UUID

from focusplan.core.exceptions import (
    AlreadyTrackingError,
    ConflictError,
    NoActiveSessionError,
    NotFoundError,
)
from focusplan.core.logger import setup_logger
from focusplan.interfaces.session_repository import ISessionRepository
from focusplan.interfaces.task_repository import ITaskRepository
from focusplan.models.enums import TaskStatus
from focusplan.models.session import ExecutionSession
from focusplan.models.task import Task
from focusplan.utils.datetime_utils import now_utc

logger = setup_logger(__name__)


class ExecService:
    """Time-tracking state machine: todo -> in_progress -> done."""

    def __init__(self, task_repo: ITaskRepository, session_repo: ISessionRepository):
        self.task_repo = task_repo
        self.session_repo = session_repo
        self._locks: defaultdict[tuple[str, UUID], asyncio.Lock] = defaultdict(asyncio.Lock)

    def _lock(self, user_id: str, task_id: UUID) -> asyncio.Lock:
        return self._locks[(user_id, task_id)]

    def forget(self, user_id: str, task_id: UUID) -> None:
        """Drop the lock of a task that is finished or deleted."""
        self._locks.pop((user_id, task_id), None)

    async def _get_task(self, user_id: str, task_id: UUID) -> Task:
        task = await self.task_repo.get(user_id, task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    async def _refresh_actual_minutes(self, user_id: str, task_id: UUID) -> Task:
        """Recompute the task's tracked total from its closed sessions."""
        sessions = await self.session_repo.list_for_task(user_id, task_id)
        closed = [session for session in sessions if not session.is_active]
        total = sum(session.duration_minutes for session in closed)
        return await self.task_repo.set_actual_minutes(user_id, task_id, total, len(closed))

    async def start(self, user_id: str, task_id: UUID) -> ExecutionSession:
        """
        Open a session and move the task to in_progress.

        Raises:
            NotFoundError: Task does not exist
            ConflictError: Task is already done
            AlreadyTrackingError: A session is already open for this task
        """
        async with self._lock(user_id, task_id):
            task = await self._get_task(user_id, task_id)
            if task.status == TaskStatus.DONE:
                raise ConflictError(f"Task {task_id} is already done")

            if await self.session_repo.get_active(user_id, task_id):
                raise AlreadyTrackingError(f"Task {task_id} already has an active session")

            session = await self.session_repo.create(
                ExecutionSession(user_id=user_id, task_id=task_id, started_at=now_utc())
            )
            if task.status != TaskStatus.IN_PROGRESS:
                await self.task_repo.update_status(user_id, task_id, TaskStatus.IN_PROGRESS)

            logger.info(f"Started session {session.id} on task {task_id} for {user_id}")
            return session

    async def stop(self, user_id: str, task_id: UUID) -> ExecutionSession:
        """
        Close the open session. The task stays in_progress.

        Raises:
            NotFoundError: Task does not exist
            NoActiveSessionError: Nothing is being tracked
        """
        async with self._lock(user_id, task_id):
            await self._get_task(user_id, task_id)
            active = await self.session_repo.get_active(user_id, task_id)
            if not active:
                raise NoActiveSessionError(f"No active session for task {task_id}")

            closed = await self.session_repo.close(active.id, now_utc())
            if not closed:
                raise NoActiveSessionError(f"No active session for task {task_id}")

            await self._refresh_actual_minutes(user_id, task_id)
            logger.info(
                f"Stopped session {closed.id} on task {task_id} "
                f"after {closed.duration_minutes:.1f} min"
            )
            return closed

    async def done(self, user_id: str, task_id: UUID) -> Task:
        """
        Close any open session and complete the task.

        Raises:
            NotFoundError: Task does not exist
            NoActiveSessionError: Task is already done
        """
        async with self._lock(user_id, task_id):
            task = await self._get_task(user_id, task_id)
            if task.status == TaskStatus.DONE:
                raise NoActiveSessionError(f"Task {task_id} is already done")

            now = now_utc()
            active = await self.session_repo.get_active(user_id, task_id)
            if active:
                await self.session_repo.close(active.id, now)

            await self.task_repo.update_status(user_id, task_id, TaskStatus.DONE, completed_at=now)
            task = await self._refresh_actual_minutes(user_id, task_id)
            logger.info(
                f"Completed task {task_id} for {user_id}: "
                f"{task.actual_minutes_total:.1f} min over {task.sessions_count} session(s)"
            )

        self.forget(user_id, task_id)
        return task

    async def list_sessions(self, user_id: str, task_id: UUID) -> list[ExecutionSession]:
        await self._get_task(user_id, task_id)
        return await self.session_repo.list_for_task(user_id, task_id)

    async def active_session(self, user_id: str, task_id: UUID) -> Optional[ExecutionSession]:
        return await self.session_repo.get_active(user_id, task_id)
