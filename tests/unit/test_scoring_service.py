"""
Unit tests for ScoringService.
"""

from datetime import timedelta
from uuid import UUID

import pytest
from pydantic import ValidationError as PydanticValidationError

from focusplan.models.enums import Priority
from focusplan.models.schedule import ScoringWeights
from focusplan.services.scoring_service import ScoringService
from tests.helpers import PLAN_DATE, make_task


@pytest.fixture
def service():
    return ScoringService()


def test_priority_dominates_due_date(service):
    low_overdue = make_task(priority=Priority.LOW, due_date=PLAN_DATE - timedelta(days=365))
    med_no_due = make_task(priority=Priority.MEDIUM)
    high_no_due = make_task(priority=Priority.HIGH)

    assert service.score(high_no_due, PLAN_DATE) > service.score(med_no_due, PLAN_DATE)
    assert service.score(med_no_due, PLAN_DATE) > service.score(low_overdue, PLAN_DATE)


def test_due_date_orders_within_tier(service):
    overdue = make_task(due_date=PLAN_DATE - timedelta(days=2))
    today = make_task(due_date=PLAN_DATE)
    soon = make_task(due_date=PLAN_DATE + timedelta(days=3))
    far = make_task(due_date=PLAN_DATE + timedelta(days=60))
    undated = make_task()

    scores = [service.score(task, PLAN_DATE) for task in (overdue, today, soon, far, undated)]

    assert scores == sorted(scores, reverse=True)
    assert len(set(scores)) == len(scores)


def test_overdue_bonus_grows_then_caps(service):
    weights = service.weights
    one_day = make_task(due_date=PLAN_DATE - timedelta(days=1))
    ten_days = make_task(due_date=PLAN_DATE - timedelta(days=10))
    way_late = make_task(due_date=PLAN_DATE - timedelta(days=weights.overdue_cap_days + 50))

    assert service.due_bonus(ten_days, PLAN_DATE) > service.due_bonus(one_day, PLAN_DATE)
    assert service.due_bonus(way_late, PLAN_DATE) == weights.max_due_bonus


def test_due_bonus_decays_across_horizon(service):
    weights = service.weights
    bonuses = [
        service.due_bonus(make_task(due_date=PLAN_DATE + timedelta(days=days)), PLAN_DATE)
        for days in range(weights.horizon_days + 2)
    ]

    assert bonuses[0] == weights.due_today_bonus
    assert all(a > b for a, b in zip(bonuses, bonuses[1 : weights.horizon_days + 1]))
    assert bonuses[-1] == weights.min_due_bonus
    assert service.due_bonus(make_task(), PLAN_DATE) == 0.0


def test_rank_breaks_ties_by_task_id(service):
    a = make_task(title="a").model_copy(update={"id": UUID("00000000-0000-0000-0000-000000000002")})
    b = make_task(title="b").model_copy(update={"id": UUID("00000000-0000-0000-0000-000000000001")})

    first = service.rank([a, b], PLAN_DATE)
    second = service.rank([b, a], PLAN_DATE)

    assert [s.task.title for s in first] == ["b", "a"]
    assert [s.task.id for s in first] == [s.task.id for s in second]


def test_reason_strings(service):
    assert service.reason_for(make_task(priority=Priority.HIGH, due_date=PLAN_DATE), PLAN_DATE) == (
        "high priority, due today"
    )
    assert service.reason_for(make_task(priority=Priority.LOW), PLAN_DATE) == "low priority"
    assert service.reason_for(
        make_task(priority=Priority.MEDIUM, due_date=PLAN_DATE - timedelta(days=3)), PLAN_DATE
    ) == "medium priority, overdue by 3 days"
    assert service.reason_for(
        make_task(due_date=PLAN_DATE + timedelta(days=1)), PLAN_DATE
    ) == "medium priority, due tomorrow"


def test_custom_weights_are_used():
    weights = ScoringWeights(
        tier_weights={Priority.LOW: 0.0, Priority.MEDIUM: 1000.0, Priority.HIGH: 2000.0},
        due_today_bonus=10.0,
        overdue_bonus=20.0,
        overdue_step_per_day=0.0,
        min_due_bonus=5.0,
    )
    service = ScoringService(weights)

    assert service.score(make_task(priority=Priority.HIGH, due_date=PLAN_DATE), PLAN_DATE) == 2010.0


def test_weights_reject_overlapping_tiers():
    with pytest.raises(PydanticValidationError):
        ScoringWeights(
            tier_weights={Priority.LOW: 100.0, Priority.MEDIUM: 110.0, Priority.HIGH: 120.0},
        )
