"""
Task scoring for day planning.

Score = priority tier weight + due-date bonus. Tier weights are spaced wider
than the largest due bonus, so priority always dominates and the due date
orders tasks within a tier.
"""

from datetime import date, datetime
from typing import Optional, Union

from focusplan.models.enums import Priority
from focusplan.models.schedule import ScoredTask, ScoringWeights
from focusplan.models.task import Task

PRIORITY_LABELS = {
    Priority.HIGH: "high",
    Priority.MEDIUM: "medium",
    Priority.LOW: "low",
}


def _reference_date(now: Union[date, datetime]) -> date:
    if isinstance(now, datetime):
        return now.date()
    return now


class ScoringService:
    """Deterministic urgency/priority scoring."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def due_bonus(self, task: Task, today: date) -> float:
        """Bonus that grows as the due date approaches and keeps growing once overdue."""
        if not task.due_date:
            return 0.0

        weights = self.weights
        days_until = (task.due_date - today).days

        if days_until < 0:
            days_late = min(-days_until, weights.overdue_cap_days)
            return weights.overdue_bonus + days_late * weights.overdue_step_per_day
        if days_until == 0:
            return weights.due_today_bonus
        if days_until >= weights.horizon_days:
            return weights.min_due_bonus

        step = (weights.due_today_bonus - weights.min_due_bonus) / weights.horizon_days
        return weights.due_today_bonus - days_until * step

    def score(self, task: Task, now: Union[date, datetime]) -> float:
        tier = self.weights.tier_weights.get(task.priority, 0.0)
        return tier + self.due_bonus(task, _reference_date(now))

    def reason_for(self, task: Task, now: Union[date, datetime]) -> str:
        """Human-readable placement reason, e.g. "high priority, due today"."""
        parts = [f"{PRIORITY_LABELS.get(task.priority, task.priority.value)} priority"]
        if task.due_date:
            days_until = (task.due_date - _reference_date(now)).days
            if days_until < 0:
                late = -days_until
                parts.append(f"overdue by {late} day{'s' if late != 1 else ''}")
            elif days_until == 0:
                parts.append("due today")
            elif days_until == 1:
                parts.append("due tomorrow")
            else:
                parts.append(f"due in {days_until} days")
        return ", ".join(parts)

    def rank(self, tasks: list[Task], now: Union[date, datetime]) -> list[ScoredTask]:
        """Score tasks and sort by descending score, ties broken by task ID."""
        scored = [
            ScoredTask(task=task, score=self.score(task, now), reason=self.reason_for(task, now))
            for task in tasks
        ]
        scored.sort(key=lambda item: (-item.score, str(item.task.id)))
        return scored
