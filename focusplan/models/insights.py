"""Insight aggregates. Derived on read, never persisted."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field


class InsightsMinutes(BaseModel):
    planned: float = 0.0
    confirmed: float = 0.0
    executed: float = 0.0
    calendar_busy: float = 0.0


class SlippedTask(BaseModel):
    task_id: UUID
    title: str


class DailyInsights(BaseModel):
    day: date
    minutes: InsightsMinutes = Field(default_factory=InsightsMinutes)
    slipped: list[SlippedTask] = Field(default_factory=list)
    # Positive = actual took longer than estimated
    estimation_bias: float = 0.0


class WeeklyInsights(BaseModel):
    week_start: date
    minutes: InsightsMinutes = Field(default_factory=InsightsMinutes)
    estimation_bias: float = 0.0
    slipped_count: int = 0
    days: list[DailyInsights] = Field(default_factory=list)
