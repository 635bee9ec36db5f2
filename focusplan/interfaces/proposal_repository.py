"""Interface for proposal repository."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from focusplan.models.enums import ProposalStatus
from focusplan.models.proposal import Proposal


class IProposalRepository(ABC):
    """Interface for day proposals awaiting confirmation."""

    @abstractmethod
    async def create(self, proposal: Proposal) -> Proposal:
        """Persist a new proposal together with its blocks.

        Any earlier proposal for the same user and date that is still
        PROPOSED or CONFIRMED is marked SUPERSEDED in the same transaction.

        Args:
            proposal: The proposal to create

        Returns:
            The created proposal
        """
        pass

    @abstractmethod
    async def get(self, proposal_id: UUID) -> Optional[Proposal]:
        """Get a proposal by ID, with its blocks in their current state.

        Args:
            proposal_id: The proposal ID

        Returns:
            The proposal if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_latest(self, user_id: str, plan_date: date) -> Optional[Proposal]:
        """Most recently created proposal for a user/date, whatever its status."""
        pass

    @abstractmethod
    async def list_latest_by_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> list[Proposal]:
        """Latest proposal per date in [start_date, end_date], ordered by date."""
        pass

    @abstractmethod
    async def update_status(self, proposal_id: UUID, status: ProposalStatus) -> Optional[Proposal]:
        """Update the status of a proposal.

        Args:
            proposal_id: The proposal ID
            status: The new status

        Returns:
            The updated proposal if found, None otherwise
        """
        pass
