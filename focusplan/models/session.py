"""Execution session models."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field


class ExecutionSession(BaseModel):
    """A span of tracked work on a task. ``ended_at`` is None while active."""

    id: UUID = Field(default_factory=uuid4)
    user_id: str
    task_id: UUID
    started_at: datetime
    ended_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.ended_at is None

    @computed_field
    @property
    def duration_minutes(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return max(0.0, (self.ended_at - self.started_at).total_seconds() / 60)
