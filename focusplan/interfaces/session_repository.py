"""
Execution session repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from focusplan.models.session import ExecutionSession


class ISessionRepository(ABC):
    """Abstract interface for execution session persistence."""

    @abstractmethod
    async def create(self, session: ExecutionSession) -> ExecutionSession:
        """
        Open a new session.

        Raises:
            AlreadyTrackingError: If the user already has an active session
                for the task
        """
        pass

    @abstractmethod
    async def get_active(self, user_id: str, task_id: UUID) -> Optional[ExecutionSession]:
        """The open session for a task, if any."""
        pass

    @abstractmethod
    async def close(self, session_id: UUID, ended_at: datetime) -> Optional[ExecutionSession]:
        """
        Close an active session.

        Returns:
            The closed session, or None if it was not active anymore
        """
        pass

    @abstractmethod
    async def list_for_task(self, user_id: str, task_id: UUID) -> list[ExecutionSession]:
        """All sessions of a task, oldest first."""
        pass

    @abstractmethod
    async def list_started_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[ExecutionSession]:
        """Sessions whose ``started_at`` falls in [start, end), oldest first."""
        pass

    @abstractmethod
    async def delete_for_task(self, user_id: str, task_id: UUID) -> int:
        """Delete every session of a task. Returns the number removed."""
        pass
