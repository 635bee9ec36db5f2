"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from focusplan.core.config import get_settings
from focusplan.core.exceptions import (
    ConflictError,
    ExternalServiceError,
    FocusPlanError,
    NotFoundError,
    ValidationError,
)
from focusplan.interfaces.auth_provider import IAuthProvider, User
from focusplan.interfaces.block_repository import IPlannedBlockRepository
from focusplan.interfaces.calendar_provider import ICalendarProvider
from focusplan.interfaces.proposal_repository import IProposalRepository
from focusplan.interfaces.session_repository import ISessionRepository
from focusplan.interfaces.task_repository import ITaskRepository
from focusplan.services.exec_service import ExecService
from focusplan.services.insights_service import InsightsService
from focusplan.services.planner_service import PlannerService
from focusplan.services.task_service import TaskService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from focusplan.infrastructure.local.task_repository import SqliteTaskRepository
    return SqliteTaskRepository()


@lru_cache()
def get_proposal_repository() -> IProposalRepository:
    """Get proposal repository instance."""
    from focusplan.infrastructure.local.proposal_repository import SqliteProposalRepository
    return SqliteProposalRepository()


@lru_cache()
def get_block_repository() -> IPlannedBlockRepository:
    """Get planned block repository instance."""
    from focusplan.infrastructure.local.block_repository import SqlitePlannedBlockRepository
    return SqlitePlannedBlockRepository()


@lru_cache()
def get_session_repository() -> ISessionRepository:
    """Get execution session repository instance."""
    from focusplan.infrastructure.local.session_repository import SqliteSessionRepository
    return SqliteSessionRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_calendar_provider() -> ICalendarProvider:
    """Get calendar provider instance."""
    settings = get_settings()
    if settings.CALENDAR_PROVIDER == "google":
        from focusplan.infrastructure.google.calendar_provider import GoogleCalendarProvider

        return GoogleCalendarProvider(settings)

    from focusplan.infrastructure.local.calendar_provider import LocalCalendarProvider
    return LocalCalendarProvider()


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    from focusplan.infrastructure.auth.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=settings.AUTH_REQUIRED)


# ===========================================
# Service Dependencies
# ===========================================


def get_planner_service(
    task_repo: ITaskRepository = Depends(get_task_repository),
    calendar_provider: ICalendarProvider = Depends(get_calendar_provider),
    proposal_repo: IProposalRepository = Depends(get_proposal_repository),
    block_repo: IPlannedBlockRepository = Depends(get_block_repository),
) -> PlannerService:
    return PlannerService(task_repo, calendar_provider, proposal_repo, block_repo)


@lru_cache()
def get_exec_service(
    task_repo: ITaskRepository = Depends(get_task_repository),
    session_repo: ISessionRepository = Depends(get_session_repository),
) -> ExecService:
    """Cached per repository pair so per-task locks are shared across requests."""
    return ExecService(task_repo, session_repo)



def get_insights_service(
    task_repo: ITaskRepository = Depends(get_task_repository),
    proposal_repo: IProposalRepository = Depends(get_proposal_repository),
    block_repo: IPlannedBlockRepository = Depends(get_block_repository),
    session_repo: ISessionRepository = Depends(get_session_repository),
) -> InsightsService:
    return InsightsService(task_repo, proposal_repo, block_repo, session_repo)


def get_task_service(
    task_repo: ITaskRepository = Depends(get_task_repository),
    block_repo: IPlannedBlockRepository = Depends(get_block_repository),
    session_repo: ISessionRepository = Depends(get_session_repository),
    calendar_provider: ICalendarProvider = Depends(get_calendar_provider),
    exec_service: ExecService = Depends(get_exec_service),
) -> TaskService:
    return TaskService(task_repo, block_repo, session_repo, calendar_provider, exec_service)


# ===========================================
# Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    With auth disabled, every request acts as the development user.
    """
    if not auth_provider.is_enabled():
        return User(id="dev_user", email="dev@example.com", display_name="Developer")

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return await auth_provider.verify_token(token)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


# ===========================================
# Error Mapping
# ===========================================


def http_error(exc: FocusPlanError) -> HTTPException:
    """Translate a domain error into an HTTP error."""
    if isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, ExternalServiceError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=exc.message)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

CurrentUser = Annotated[User, Depends(get_current_user)]
Planner = Annotated[PlannerService, Depends(get_planner_service)]
Exec = Annotated[ExecService, Depends(get_exec_service)]
Insights = Annotated[InsightsService, Depends(get_insights_service)]
Tasks = Annotated[TaskService, Depends(get_task_service)]
