"""
Calendar interval and event models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class TimeSpan(BaseModel):
    """Half-open [start, end) span."""

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self):
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    def overlaps(self, other: "TimeSpan") -> bool:
        return self.start < other.end and other.start < self.end


class BusyInterval(TimeSpan):
    """A busy span from the external calendar. Snapshot, never mutated."""

    source: str = "calendar"
    event_id: Optional[str] = None
    summary: Optional[str] = None


class FreeInterval(TimeSpan):
    """Derived free span inside working hours. Never persisted."""

    pass


class CalendarEventCreate(BaseModel):
    """Payload for creating an external calendar event."""

    start: datetime
    end: datetime
    summary: str = Field(..., min_length=1)
    description: str = ""
    # Stored as private extended properties (task_id, block_id)
    extended_private: dict[str, str] = Field(default_factory=dict)
