"""
Tests for InsightsService.
"""

from datetime import timedelta

import pytest

from focusplan.models.calendar import BusyInterval
from focusplan.models.enums import Priority
from focusplan.models.task import TaskCreate
from focusplan.services import exec_service as exec_module
from focusplan.services.exec_service import ExecService
from focusplan.services.insights_service import InsightsService, estimation_bias
from focusplan.services.planner_service import PlannerService
from tests.helpers import PLAN_DATE, FakeClock, make_task, utc


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock(utc(PLAN_DATE, 9))
    monkeypatch.setattr(exec_module, "now_utc", fake)
    return fake


@pytest.fixture
def exec_service(task_repo, session_repo):
    return ExecService(task_repo, session_repo)


@pytest.fixture
def insights(task_repo, proposal_repo, block_repo, session_repo, settings):
    return InsightsService(task_repo, proposal_repo, block_repo, session_repo, settings=settings)


@pytest.fixture
def planner(task_repo, calendar, proposal_repo, block_repo, settings):
    return PlannerService(task_repo, calendar, proposal_repo, block_repo, settings=settings)


async def test_empty_day_is_all_zeros(insights, test_user_id):
    report = await insights.daily(test_user_id, PLAN_DATE)

    assert report.day == PLAN_DATE
    assert report.minutes.model_dump() == {
        "planned": 0.0,
        "confirmed": 0.0,
        "executed": 0.0,
        "calendar_busy": 0.0,
    }
    assert report.slipped == []
    assert report.estimation_bias == 0.0


async def test_estimation_bias_from_two_sessions(insights, exec_service, task_repo, clock, test_user_id):
    task = await task_repo.create(test_user_id, TaskCreate(title="Estimate me", estimated_minutes=60))
    await exec_service.start(test_user_id, task.id)
    clock.advance(50)
    await exec_service.stop(test_user_id, task.id)
    clock.advance(10)
    await exec_service.start(test_user_id, task.id)
    clock.advance(40)
    await exec_service.done(test_user_id, task.id)

    report = await insights.daily(test_user_id, PLAN_DATE)

    assert report.minutes.executed == 90
    assert report.estimation_bias == pytest.approx(0.5)


async def test_planned_confirmed_and_busy_minutes(insights, planner, calendar, task_repo, test_user_id):
    calendar.list_busy_intervals.return_value = [
        BusyInterval(start=utc(PLAN_DATE, 13), end=utc(PLAN_DATE, 14, 30)),
    ]
    await task_repo.create(test_user_id, TaskCreate(title="A", priority=Priority.HIGH, estimated_minutes=60))
    await task_repo.create(test_user_id, TaskCreate(title="B", estimated_minutes=30))
    proposal = await planner.propose(test_user_id, PLAN_DATE)
    first = proposal.blocks[0]
    await planner.confirm(test_user_id, proposal.id, [first.id])

    report = await insights.daily(test_user_id, PLAN_DATE, now=utc(PLAN_DATE, 8))

    assert report.minutes.planned == 90
    assert report.minutes.confirmed == first.minutes == 60
    assert report.minutes.calendar_busy == 90
    assert report.slipped == []


async def test_slipped_tasks(insights, planner, exec_service, task_repo, clock, test_user_id):
    worked = await task_repo.create(
        test_user_id, TaskCreate(title="Worked", priority=Priority.HIGH, estimated_minutes=60)
    )
    ignored = await task_repo.create(test_user_id, TaskCreate(title="Ignored", estimated_minutes=30))
    proposal = await planner.propose(test_user_id, PLAN_DATE)
    await planner.confirm(test_user_id, proposal.id, [block.id for block in proposal.blocks])

    clock.now = utc(PLAN_DATE, 9, 5)
    await exec_service.start(test_user_id, worked.id)
    clock.advance(30)
    await exec_service.stop(test_user_id, worked.id)

    during = await insights.daily(test_user_id, PLAN_DATE, now=utc(PLAN_DATE, 9, 30))
    after = await insights.daily(test_user_id, PLAN_DATE, now=utc(PLAN_DATE, 18))

    assert during.slipped == []
    assert [(s.task_id, s.title) for s in after.slipped] == [(ignored.id, "Ignored")]


async def test_done_tasks_do_not_slip(insights, planner, exec_service, task_repo, clock, test_user_id):
    task = await task_repo.create(test_user_id, TaskCreate(title="Quick", estimated_minutes=30))
    proposal = await planner.propose(test_user_id, PLAN_DATE)
    await planner.confirm(test_user_id, proposal.id, [proposal.blocks[0].id])
    clock.now = utc(PLAN_DATE - timedelta(days=1), 20)
    await exec_service.done(test_user_id, task.id)

    report = await insights.daily(test_user_id, PLAN_DATE, now=utc(PLAN_DATE, 18))

    assert report.slipped == []


async def test_weekly_rolls_up_days(insights, exec_service, task_repo, clock, test_user_id):
    monday = await task_repo.create(test_user_id, TaskCreate(title="Mon", estimated_minutes=60))
    wednesday = await task_repo.create(test_user_id, TaskCreate(title="Wed", estimated_minutes=60))

    await exec_service.start(test_user_id, monday.id)
    clock.advance(90)
    await exec_service.done(test_user_id, monday.id)

    clock.now = utc(PLAN_DATE + timedelta(days=2), 10)
    await exec_service.start(test_user_id, wednesday.id)
    clock.advance(30)
    await exec_service.done(test_user_id, wednesday.id)

    report = await insights.weekly(test_user_id, PLAN_DATE)

    assert report.week_start == PLAN_DATE
    assert len(report.days) == 7
    assert [day.minutes.executed for day in report.days] == [90, 0, 30, 0, 0, 0, 0]
    assert report.minutes.executed == 120
    # (90 + 30 - 120) / 120
    assert report.estimation_bias == pytest.approx(0.0)
    assert report.days[0].estimation_bias == pytest.approx(0.5)
    assert report.days[2].estimation_bias == pytest.approx(-0.5)


def test_estimation_bias_ignores_unestimated_tasks():
    done = [
        make_task(estimated_minutes=None).model_copy(update={"actual_minutes_total": 500}),
        make_task(estimated_minutes=40).model_copy(update={"actual_minutes_total": 30}),
    ]

    assert estimation_bias(done) == pytest.approx(-0.25)
    assert estimation_bias([]) == 0.0
