"""
Test helpers shared across test modules.
"""

from datetime import date, datetime, timedelta
from typing import Optional
from uuid import uuid4

from focusplan.models.enums import Priority, TaskStatus
from focusplan.models.task import Task
from focusplan.utils.datetime_utils import UTC

# Monday
PLAN_DATE = date(2030, 1, 7)


def utc(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


def make_task(
    title: str = "Task",
    priority: Priority = Priority.MEDIUM,
    estimated_minutes: Optional[int] = 30,
    due_date: Optional[date] = None,
    status: TaskStatus = TaskStatus.TODO,
) -> Task:
    """Helper to create an in-memory task."""
    now = datetime(2030, 1, 1, tzinfo=UTC)
    return Task(
        id=uuid4(),
        user_id="test_user",
        title=title,
        priority=priority,
        estimated_minutes=estimated_minutes,
        due_date=due_date,
        status=status,
        created_at=now,
        updated_at=now,
    )


class FakeClock:
    """Callable stand-in for now_utc()."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now = self.now + timedelta(minutes=minutes)
