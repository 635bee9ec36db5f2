"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/priority values.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Task status."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Priority(str, Enum):
    """Task priority tier."""

    LOW = "low"
    MEDIUM = "med"
    HIGH = "high"


class BlockState(str, Enum):
    """
    Lifecycle of a planned block.

    PROPOSED = created by placement, awaiting confirm
    CONFIRMED = accepted and mapped 1:1 to a calendar event
    SKIPPED = not accepted in a confirm call
    """

    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    SKIPPED = "skipped"


class ProposalStatus(str, Enum):
    """Status of a day proposal."""

    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    SUPERSEDED = "superseded"
    EXPIRED = "expired"


class UnplaceableReason(str, Enum):
    """Why placement could not fit a task."""

    NO_CAPACITY = "no_capacity"
    TOO_LONG_FOR_ANY_SLOT = "task_too_long_for_any_slot"


class SkipReason(str, Enum):
    """Fixed skip reasons reported by confirm."""

    ALREADY_CONFIRMED = "already_confirmed"
    NOT_ACCEPTED = "not_accepted"
    CALENDAR_TIMEOUT = "calendar_timeout"
    CALENDAR_ERROR = "calendar_error"
