"""
Unit tests for FreeTimeService.
"""

from datetime import datetime, time

import pytest

from focusplan.core.exceptions import ValidationError
from focusplan.models.calendar import BusyInterval
from focusplan.models.schedule import WorkBreak, WorkingHours
from focusplan.services.freetime_service import FreeTimeService
from focusplan.utils.datetime_utils import get_zone
from tests.helpers import PLAN_DATE, utc


@pytest.fixture
def service():
    return FreeTimeService()


@pytest.fixture
def hours():
    return WorkingHours(start="09:00", end="17:00", timezone="UTC")


def _spans(intervals):
    return [(i.start.time(), i.end.time()) for i in intervals]


def test_single_busy_interval_splits_window(service, hours):
    busy = [BusyInterval(start=utc(PLAN_DATE, 12), end=utc(PLAN_DATE, 13))]

    free = service.compute_free_intervals(PLAN_DATE, hours, busy, buffer_minutes=0)

    assert _spans(free) == [(time(9), time(12)), (time(13), time(17))]


def test_no_busy_returns_whole_window(service, hours):
    free = service.compute_free_intervals(PLAN_DATE, hours, [])

    assert _spans(free) == [(time(9), time(17))]
    assert service.total_minutes(free) == 480


def test_busy_outside_window_is_ignored(service, hours):
    busy = [
        BusyInterval(start=utc(PLAN_DATE, 6), end=utc(PLAN_DATE, 8)),
        BusyInterval(start=utc(PLAN_DATE, 18), end=utc(PLAN_DATE, 19)),
    ]

    free = service.compute_free_intervals(PLAN_DATE, hours, busy)

    assert _spans(free) == [(time(9), time(17))]


def test_busy_crossing_window_edges_is_clipped(service, hours):
    busy = [
        BusyInterval(start=utc(PLAN_DATE, 8), end=utc(PLAN_DATE, 9, 30)),
        BusyInterval(start=utc(PLAN_DATE, 16, 30), end=utc(PLAN_DATE, 18)),
    ]

    free = service.compute_free_intervals(PLAN_DATE, hours, busy)

    assert _spans(free) == [(time(9, 30), time(16, 30))]


def test_buffer_padding_merges_before_subtraction(service, hours):
    busy = [
        BusyInterval(start=utc(PLAN_DATE, 10), end=utc(PLAN_DATE, 10, 30)),
        BusyInterval(start=utc(PLAN_DATE, 10, 45), end=utc(PLAN_DATE, 11)),
    ]

    free = service.compute_free_intervals(PLAN_DATE, hours, busy, buffer_minutes=10)

    # The 10:30-10:45 gap disappears once both sides are padded
    assert _spans(free) == [(time(9), time(9, 50)), (time(11, 10), time(17))]


def test_overlapping_and_unsorted_busy(service, hours):
    busy = [
        BusyInterval(start=utc(PLAN_DATE, 14), end=utc(PLAN_DATE, 15)),
        BusyInterval(start=utc(PLAN_DATE, 10), end=utc(PLAN_DATE, 12)),
        BusyInterval(start=utc(PLAN_DATE, 11), end=utc(PLAN_DATE, 12, 30)),
        BusyInterval(start=utc(PLAN_DATE, 15), end=utc(PLAN_DATE, 15, 15)),
    ]

    free = service.compute_free_intervals(PLAN_DATE, hours, busy)

    assert _spans(free) == [
        (time(9), time(10)),
        (time(12, 30), time(14)),
        (time(15, 15), time(17)),
    ]
    for left, right in zip(free, free[1:]):
        assert left.end <= right.start


def test_breaks_are_subtracted_without_buffer(service):
    hours = WorkingHours(
        start="09:00",
        end="17:00",
        timezone="UTC",
        breaks=[WorkBreak(start="12:00", end="13:00")],
    )

    free = service.compute_free_intervals(PLAN_DATE, hours, [], buffer_minutes=15)

    assert _spans(free) == [(time(9), time(12)), (time(13), time(17))]


def test_window_is_interpreted_in_working_timezone(service):
    hours = WorkingHours(start="09:00", end="17:00", timezone="Europe/Berlin")
    # 11:00-12:00 UTC is 12:00-13:00 in Berlin during winter
    busy = [BusyInterval(start=utc(PLAN_DATE, 11), end=utc(PLAN_DATE, 12))]

    free = service.compute_free_intervals(PLAN_DATE, hours, busy)

    berlin = get_zone("Europe/Berlin")
    assert free[0].start == datetime(2030, 1, 7, 9, tzinfo=berlin)
    assert _spans(free) == [(time(9), time(12)), (time(13), time(17))]


def test_fully_busy_day_has_no_free_time(service, hours):
    busy = [BusyInterval(start=utc(PLAN_DATE, 8), end=utc(PLAN_DATE, 18))]

    assert service.compute_free_intervals(PLAN_DATE, hours, busy) == []


@pytest.mark.parametrize(
    "start,end,tz",
    [
        ("17:00", "09:00", "UTC"),
        ("09:00", "09:00", "UTC"),
        ("9am", "17:00", "UTC"),
        ("09:00", "25:00", "UTC"),
        ("09:00", "17:00", "Mars/Olympus"),
    ],
)
def test_malformed_window_raises(service, start, end, tz):
    with pytest.raises(ValidationError):
        service.compute_free_intervals(PLAN_DATE, WorkingHours(start=start, end=end, timezone=tz), [])


def test_negative_buffer_raises(service, hours):
    with pytest.raises(ValidationError):
        service.compute_free_intervals(PLAN_DATE, hours, [], buffer_minutes=-5)
