"""Abstract interfaces for infrastructure abstraction."""

from focusplan.interfaces.auth_provider import IAuthProvider, User
from focusplan.interfaces.block_repository import IPlannedBlockRepository
from focusplan.interfaces.calendar_provider import ICalendarProvider
from focusplan.interfaces.proposal_repository import IProposalRepository
from focusplan.interfaces.session_repository import ISessionRepository
from focusplan.interfaces.task_repository import ITaskRepository

__all__ = [
    "IAuthProvider",
    "ICalendarProvider",
    "IPlannedBlockRepository",
    "IProposalRepository",
    "ISessionRepository",
    "ITaskRepository",
    "User",
]
