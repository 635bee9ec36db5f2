"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class FocusPlanError(Exception):
    """Base exception for focusplan."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(FocusPlanError):
    """Malformed input. Never retried."""

    pass


class NotFoundError(FocusPlanError):
    """Resource not found."""

    pass


class NoActiveSessionError(NotFoundError):
    """No open execution session exists for the task."""

    pass


class ConflictError(FocusPlanError):
    """Recoverable state conflict (stale proposal, lost race, active session)."""

    pass


class AlreadyTrackingError(ConflictError):
    """The task already has an active execution session."""

    pass


class StaleProposalError(ConflictError):
    """The proposal was superseded or has expired."""

    pass


class ExternalServiceError(FocusPlanError):
    """Calendar provider or other external call failed."""

    pass


class CalendarTimeoutError(ExternalServiceError):
    """Calendar provider did not answer within the configured timeout."""

    pass
