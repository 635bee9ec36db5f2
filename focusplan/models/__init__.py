"""Domain models (Pydantic)."""

from focusplan.models.calendar import BusyInterval, CalendarEventCreate, FreeInterval
from focusplan.models.enums import BlockState, Priority, ProposalStatus, TaskStatus
from focusplan.models.insights import DailyInsights, InsightsMinutes, SlippedTask, WeeklyInsights
from focusplan.models.proposal import (
    ConfirmRequest,
    ConfirmResult,
    CreatedBlock,
    PlannedBlock,
    Proposal,
    ProposeRequest,
    SkippedBlock,
    UnplaceableTask,
)
from focusplan.models.schedule import PlacementResult, ScoredTask, ScoringWeights, WorkingHours
from focusplan.models.session import ExecutionSession
from focusplan.models.task import Task, TaskCreate, TaskDeletionResult, TaskUpdate

__all__ = [
    "BlockState",
    "BusyInterval",
    "CalendarEventCreate",
    "ConfirmRequest",
    "ConfirmResult",
    "CreatedBlock",
    "DailyInsights",
    "ExecutionSession",
    "FreeInterval",
    "InsightsMinutes",
    "PlacementResult",
    "PlannedBlock",
    "Priority",
    "Proposal",
    "ProposalStatus",
    "ProposeRequest",
    "ScoredTask",
    "ScoringWeights",
    "SkippedBlock",
    "SlippedTask",
    "Task",
    "TaskCreate",
    "TaskDeletionResult",
    "TaskStatus",
    "TaskUpdate",
    "UnplaceableTask",
    "WeeklyInsights",
    "WorkingHours",
]
