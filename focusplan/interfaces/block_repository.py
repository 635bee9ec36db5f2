"""
Planned block repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from focusplan.models.enums import BlockState
from focusplan.models.proposal import PlannedBlock


class IPlannedBlockRepository(ABC):
    @abstractmethod
    async def get(self, block_id: UUID) -> Optional[PlannedBlock]:
        pass

    @abstractmethod
    async def list_by_date(
        self,
        user_id: str,
        plan_date: date,
        state: Optional[BlockState] = None,
    ) -> list[PlannedBlock]:
        """Blocks of any proposal planned on ``plan_date``, ordered by start."""
        pass

    @abstractmethod
    async def list_for_task(self, user_id: str, task_id: UUID) -> list[PlannedBlock]:
        pass

    @abstractmethod
    async def compare_and_set_state(
        self,
        block_id: UUID,
        expected_state: BlockState,
        expected_version: int,
        new_state: BlockState,
    ) -> Optional[PlannedBlock]:
        """
        Atomically move a block from ``expected_state``/``expected_version``
        to ``new_state``, bumping the version.

        Returns:
            The updated block when this call won the transition, None when the
            row no longer matches (someone else changed it first).
        """
        pass

    @abstractmethod
    async def set_event_id(
        self,
        block_id: UUID,
        expected_version: int,
        event_id: str,
    ) -> Optional[PlannedBlock]:
        """Attach the calendar event ID to a block still at ``expected_version``."""
        pass

    @abstractmethod
    async def delete_for_task(self, user_id: str, task_id: UUID) -> int:
        """Delete every block of a task. Returns the number removed."""
        pass
