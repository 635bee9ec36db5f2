"""
Unit tests for PlacementService.
"""

from datetime import time, timedelta

import pytest

from focusplan.models.calendar import FreeInterval, TimeSpan
from focusplan.models.enums import Priority, TaskStatus
from focusplan.services.placement_service import PlacementService
from focusplan.services.scoring_service import ScoringService
from tests.helpers import PLAN_DATE, make_task, utc


@pytest.fixture
def service():
    return PlacementService()


@pytest.fixture
def scoring():
    return ScoringService()


def _free(*spans):
    return [
        FreeInterval(start=utc(PLAN_DATE, *start), end=utc(PLAN_DATE, *end))
        for start, end in spans
    ]


def test_high_priority_task_takes_first_slot_that_fits(service, scoring):
    urgent = make_task("urgent", Priority.HIGH, estimated_minutes=90, due_date=PLAN_DATE)
    filler = make_task("filler", Priority.LOW, estimated_minutes=60)
    free = _free(((9, 0), (10, 0)), ((11, 0), (13, 0)))

    result = service.place(scoring.rank([filler, urgent], PLAN_DATE), free, default_minutes=30)

    placed = {block.title: (block.start.time(), block.end.time()) for block in result.blocks}
    assert placed == {
        "urgent": (time(11, 0), time(12, 30)),
        "filler": (time(9, 0), time(10, 0)),
    }
    assert [block.title for block in result.blocks] == ["filler", "urgent"]
    assert result.unplaceable == []
    urgent_block = next(block for block in result.blocks if block.title == "urgent")
    assert urgent_block.reason == "high priority, due today"


def test_no_capacity_when_total_free_time_is_short(service, scoring):
    first = make_task("first", Priority.HIGH, estimated_minutes=90)
    second = make_task("second", Priority.LOW, estimated_minutes=60)
    free = _free(((9, 0), (9, 30)), ((11, 0), (12, 30)))

    result = service.place(scoring.rank([first, second], PLAN_DATE), free, default_minutes=30)

    assert [block.task_id for block in result.blocks] == [first.id]
    # Only the 30 minutes at 09:00 are left after the first task
    assert [item.task_id for item in result.unplaceable] == [second.id]
    assert result.unplaceable[0].reason == "no_capacity"



def test_fragmented_free_time_is_too_long_for_any_slot(service, scoring):
    task = make_task("long", estimated_minutes=60)
    free = _free(((9, 0), (9, 40)), ((10, 0), (10, 40)))

    result = service.place(scoring.rank([task], PLAN_DATE), free, default_minutes=30)

    assert result.blocks == []
    assert result.unplaceable[0].reason == "task_too_long_for_any_slot"


def test_only_todo_tasks_are_placed(service, scoring):
    todo = make_task("todo")
    started = make_task("started", status=TaskStatus.IN_PROGRESS)
    finished = make_task("finished", status=TaskStatus.DONE)

    result = service.place(
        scoring.rank([todo, started, finished], PLAN_DATE),
        _free(((9, 0), (17, 0))),
        default_minutes=30,
    )

    assert [block.task_id for block in result.blocks] == [todo.id]
    assert result.unplaceable == []


def test_default_duration_and_gap(service, scoring):
    a = make_task("a", Priority.HIGH, estimated_minutes=None)
    b = make_task("b", Priority.LOW, estimated_minutes=None)

    result = service.place(
        scoring.rank([a, b], PLAN_DATE),
        _free(((9, 0), (12, 0))),
        default_minutes=45,
        gap_minutes=15,
    )

    assert [(block.start.time(), block.end.time()) for block in result.blocks] == [
        (time(9, 0), time(9, 45)),
        (time(10, 0), time(10, 45)),
    ]


def test_placement_invariants_hold(service, scoring):
    tasks = [
        make_task(f"t{i}", priority, estimated_minutes=minutes, due_date=due)
        for i, (priority, minutes, due) in enumerate(
            [
                (Priority.HIGH, 45, PLAN_DATE),
                (Priority.HIGH, 120, None),
                (Priority.MEDIUM, 30, PLAN_DATE + timedelta(days=2)),
                (Priority.MEDIUM, 200, None),
                (Priority.LOW, 15, PLAN_DATE - timedelta(days=1)),
                (Priority.LOW, 60, None),
                (Priority.LOW, 90, None),
            ]
        )
    ]
    free = _free(((9, 0), (10, 15)), ((10, 30), (12, 0)), ((13, 0), (15, 0)), ((15, 30), (16, 0)))
    scored = scoring.rank(tasks, PLAN_DATE)

    result = service.place(scored, free, default_minutes=30)

    placed_ids = [block.task_id for block in result.blocks]
    unplaceable_ids = [item.task_id for item in result.unplaceable]
    assert sorted(map(str, placed_ids + unplaceable_ids)) == sorted(str(task.id) for task in tasks)
    assert not set(placed_ids) & set(unplaceable_ids)

    spans = [TimeSpan(start=block.start, end=block.end) for block in result.blocks]
    assert [span.start for span in spans] == sorted(span.start for span in spans)
    for i, span in enumerate(spans):
        assert not any(span.overlaps(other) for other in spans[i + 1 :])
    for block in result.blocks:
        assert any(interval.start <= block.start and block.end <= interval.end for interval in free)
    assert result.placed_minutes <= sum(interval.minutes for interval in free)

    again = service.place(scored, free, default_minutes=30)
    assert [(b.task_id, b.start, b.end, b.reason) for b in again.blocks] == [
        (b.task_id, b.start, b.end, b.reason) for b in result.blocks
    ]
    assert again.unplaceable == result.unplaceable
