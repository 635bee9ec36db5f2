"""
Models for free-time computation, scoring and placement.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from focusplan.models.enums import Priority
from focusplan.models.proposal import PlannedBlock, UnplaceableTask
from focusplan.models.task import Task


class WorkBreak(BaseModel):
    start: str
    end: str


class WorkingHours(BaseModel):
    """Daily working-hours window in the user's timezone."""

    start: str = "09:00"
    end: str = "17:00"
    timezone: str = "UTC"
    breaks: list[WorkBreak] = Field(default_factory=list)


class ScoringWeights(BaseModel):
    """
    Scoring policy.

    A task's score is its priority tier weight plus a due-date bonus:
    overdue tasks get ``overdue_bonus`` plus ``overdue_step_per_day`` for each
    day late (capped at ``overdue_cap_days``); tasks due today get
    ``due_today_bonus``; tasks due within ``horizon_days`` decay linearly from
    ``due_today_bonus`` down to ``min_due_bonus``; later due dates get
    ``min_due_bonus``; tasks with no due date get nothing.
    """

    tier_weights: dict[Priority, float] = Field(
        default_factory=lambda: {
            Priority.LOW: 100.0,
            Priority.MEDIUM: 200.0,
            Priority.HIGH: 300.0,
        }
    )
    due_today_bonus: float = Field(50.0, gt=0)
    overdue_bonus: float = Field(60.0, gt=0)
    overdue_step_per_day: float = Field(1.0, ge=0)
    overdue_cap_days: int = Field(30, ge=0)
    horizon_days: int = Field(14, ge=1)
    min_due_bonus: float = Field(1.0, gt=0)

    @property
    def max_due_bonus(self) -> float:
        return self.overdue_bonus + self.overdue_step_per_day * self.overdue_cap_days

    @model_validator(mode="after")
    def _check_ordering(self):
        missing = [p.value for p in Priority if p not in self.tier_weights]
        if missing:
            raise ValueError(f"tier_weights missing priorities: {missing}")
        if not self.min_due_bonus < self.due_today_bonus < self.overdue_bonus:
            raise ValueError("expected min_due_bonus < due_today_bonus < overdue_bonus")
        ordered = [
            self.tier_weights[Priority.LOW],
            self.tier_weights[Priority.MEDIUM],
            self.tier_weights[Priority.HIGH],
        ]
        for lower, higher in zip(ordered, ordered[1:]):
            if higher - lower <= self.max_due_bonus:
                raise ValueError("priority tiers must be separated by more than the largest due bonus")
        return self


class ScoredTask(BaseModel):
    task: Task
    score: float
    reason: str = ""


class PlacementResult(BaseModel):
    blocks: list[PlannedBlock] = Field(default_factory=list)
    unplaceable: list[UnplaceableTask] = Field(default_factory=list)

    @property
    def placed_minutes(self) -> float:
        return sum(block.minutes for block in self.blocks)
