"""
Task service: CRUD pass-through plus cascading delete.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from focusplan.core.exceptions import ConflictError, NotFoundError
from focusplan.core.logger import setup_logger
from focusplan.interfaces.block_repository import IPlannedBlockRepository
from focusplan.interfaces.calendar_provider import ICalendarProvider
from focusplan.interfaces.session_repository import ISessionRepository
from focusplan.interfaces.task_repository import ITaskRepository
from focusplan.models.enums import TaskStatus
from focusplan.models.task import Task, TaskCreate, TaskDeletionResult, TaskUpdate
from focusplan.services.exec_service import ExecService

logger = setup_logger(__name__)


class TaskService:
    """Task operations that touch more than the task store."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        block_repo: IPlannedBlockRepository,
        session_repo: ISessionRepository,
        calendar_provider: ICalendarProvider,
        exec_service: Optional[ExecService] = None,
    ):
        self.task_repo = task_repo
        self.block_repo = block_repo
        self.session_repo = session_repo
        self.calendar_provider = calendar_provider
        self.exec_service = exec_service or ExecService(task_repo, session_repo)

    async def create(self, user_id: str, task: TaskCreate) -> Task:
        return await self.task_repo.create(user_id, task)

    async def get(self, user_id: str, task_id: UUID) -> Task:
        task = await self.task_repo.get(user_id, task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    async def list(
        self,
        user_id: str,
        status: Optional[TaskStatus] = None,
        include_done: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        return await self.task_repo.list(
            user_id,
            status=status,
            include_done=include_done,
            limit=limit,
            offset=offset,
        )

    async def update(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        """
        Update a task.

        A status change goes through execution tracking: done closes any open
        session and recomputes the tracked minutes, and a task with an open
        session cannot go back to todo.

        Raises:
            NotFoundError: Task does not exist
            ConflictError: Moving a tracked task back to todo
        """
        task = await self.get(user_id, task_id)
        if update.status is None:
            return await self.task_repo.update(user_id, task_id, update)

        if update.status == TaskStatus.TODO and await self.session_repo.get_active(user_id, task_id):
            raise ConflictError(f"Task {task_id} has an active session; stop it first")
        if update.status != TaskStatus.DONE:
            return await self.task_repo.update(user_id, task_id, update)

        updated = await self.task_repo.update(
            user_id, task_id, update.model_copy(update={"status": None})
        )
        if task.status == TaskStatus.DONE:
            return updated
        return await self.exec_service.done(user_id, task_id)

    async def delete_task(self, user_id: str, task_id: UUID) -> TaskDeletionResult:
        """
        Delete a task together with everything planned or tracked for it.

        Calendar events of the task's blocks go first. A failed event delete
        is logged and counted but does not stop the cascade.

        Raises:
            NotFoundError: Task does not exist
        """
        await self.get(user_id, task_id)
        result = TaskDeletionResult(task_id=task_id)

        blocks = await self.block_repo.list_for_task(user_id, task_id)
        for block in blocks:
            if not block.event_id:
                continue
            try:
                await self.calendar_provider.delete_event(user_id, block.event_id)
                result.calendar_events_deleted += 1
            except Exception as e:
                logger.warning(
                    f"Failed to delete calendar event {block.event_id} for task {task_id}: {e}"
                )
                result.calendar_events_failed += 1

        result.sessions_deleted = await self.session_repo.delete_for_task(user_id, task_id)
        result.blocks_deleted = await self.block_repo.delete_for_task(user_id, task_id)
        if not await self.task_repo.delete(user_id, task_id):
            raise NotFoundError(f"Task {task_id} not found")
        self.exec_service.forget(user_id, task_id)

        logger.info(
            f"Deleted task {task_id} for {user_id}: {result.blocks_deleted} block(s), "
            f"{result.sessions_deleted} session(s), {result.calendar_events_deleted} event(s) "
            f"({result.calendar_events_failed} failed)"
        )
        return result
