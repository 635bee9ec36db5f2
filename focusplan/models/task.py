"""
Task model definitions.

Tasks are the backlog items the planner schedules into focus blocks.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from focusplan.models.enums import Priority, TaskStatus


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    notes: Optional[str] = Field(None, max_length=2000, description="Free-form notes")
    priority: Priority = Field(Priority.MEDIUM, description="Priority tier (low/med/high)")
    estimated_minutes: Optional[int] = Field(None, ge=1, description="Estimated duration in minutes")
    due_date: Optional[date] = Field(None, description="Due date (calendar date)")


class TaskCreate(TaskBase):
    """Schema for creating a new task."""

    status: TaskStatus = Field(TaskStatus.TODO, description="Initial status")


class TaskUpdate(BaseModel):
    """Schema for updating a task. All fields optional."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    notes: Optional[str] = Field(None, max_length=2000)
    priority: Optional[Priority] = None
    estimated_minutes: Optional[int] = Field(None, ge=1)
    due_date: Optional[date] = None
    status: Optional[TaskStatus] = None


class Task(TaskBase):
    """Complete task model with all fields."""

    id: UUID
    user_id: str
    status: TaskStatus = TaskStatus.TODO
    actual_minutes_total: float = Field(0.0, ge=0, description="Sum of closed session durations")
    sessions_count: int = Field(0, ge=0)
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def effective_minutes(self, default_minutes: int) -> int:
        """Estimated duration, falling back to the configured default."""
        return self.estimated_minutes or default_minutes


class TaskDeletionResult(BaseModel):
    """Outcome of a cascading task delete."""

    task_id: UUID
    calendar_events_deleted: int = 0
    calendar_events_failed: int = 0
    sessions_deleted: int = 0
    blocks_deleted: int = 0
