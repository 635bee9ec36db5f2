"""
Task repository interface.

Defines the contract for task persistence operations.
Implementations: SQLite
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from focusplan.models.enums import TaskStatus
from focusplan.models.task import Task, TaskCreate, TaskUpdate


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """
        Create a new task.

        Args:
            user_id: Owner user ID
            task: Task creation data

        Returns:
            Created task with generated ID and timestamps
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, task_id: UUID) -> Optional[Task]:
        """
        Get a task by ID.

        Args:
            user_id: Owner user ID
            task_id: Task ID

        Returns:
            Task if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_many(self, user_id: str, task_ids: list[UUID]) -> list[Task]:
        """Get several tasks by ID. Missing IDs are silently dropped."""
        pass

    @abstractmethod
    async def list(
        self,
        user_id: str,
        status: Optional[TaskStatus] = None,
        include_done: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        """
        List tasks with optional filters.

        Args:
            user_id: Owner user ID
            status: Filter by status
            include_done: Include completed tasks
            limit: Maximum number of results
            offset: Pagination offset

        Returns:
            List of tasks matching filters, newest first
        """
        pass

    @abstractmethod
    async def list_eligible(self, user_id: str, plan_date: date) -> list[Task]:
        """
        List tasks that may be planned on ``plan_date``.

        Returns every task that is not done. Placement narrows this further to
        ``todo`` tasks.
        """
        pass

    @abstractmethod
    async def list_completed_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Task]:
        """List tasks whose ``completed_at`` falls in [start, end)."""
        pass

    @abstractmethod
    async def update(self, user_id: str, task_id: UUID, update: TaskUpdate) -> Task:
        """
        Update an existing task.

        Raises:
            NotFoundError: If the task does not exist
        """
        pass

    @abstractmethod
    async def update_status(
        self,
        user_id: str,
        task_id: UUID,
        status: TaskStatus,
        completed_at: Optional[datetime] = None,
    ) -> Task:
        """
        Set task status. ``completed_at`` is stored when moving to DONE and
        cleared otherwise.

        Raises:
            NotFoundError: If the task does not exist
        """
        pass

    @abstractmethod
    async def set_actual_minutes(
        self,
        user_id: str,
        task_id: UUID,
        actual_minutes_total: float,
        sessions_count: int,
    ) -> Task:
        """
        Store the tracked-time aggregate for a task.

        Raises:
            NotFoundError: If the task does not exist
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str, task_id: UUID) -> bool:
        """
        Delete a task.

        Returns:
            True if deleted, False if not found
        """
        pass
