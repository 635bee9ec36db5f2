"""
Free-time computation.

Turns a working-hours window and the calendar's busy intervals into the
ordered list of free intervals a day can be planned into.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from focusplan.core.exceptions import ValidationError
from focusplan.models.calendar import BusyInterval, FreeInterval
from focusplan.models.schedule import WorkingHours
from focusplan.utils.datetime_utils import at_minutes, ensure_utc, get_zone, parse_time_to_minutes


@dataclass
class TimeInterval:
    start: datetime
    end: datetime


def _parse_hhmm(value: str, label: str) -> int:
    minutes = parse_time_to_minutes(value)
    if minutes is None:
        raise ValidationError(f"Invalid {label} time: {value!r} (expected HH:MM)")
    return minutes


def _merge_intervals(intervals: list[TimeInterval]) -> list[TimeInterval]:
    """Merge overlapping or touching intervals. Input must be sorted by start."""
    merged: list[TimeInterval] = []
    for interval in intervals:
        if merged and interval.start <= merged[-1].end:
            if interval.end > merged[-1].end:
                merged[-1].end = interval.end
            continue
        merged.append(TimeInterval(interval.start, interval.end))
    return merged


def _clip(interval: TimeInterval, window: TimeInterval) -> Optional[TimeInterval]:
    start = max(interval.start, window.start)
    end = min(interval.end, window.end)
    if end <= start:
        return None
    return TimeInterval(start, end)


class FreeTimeService:
    """Pure interval arithmetic over one working day."""

    def working_window(self, day: date, working_hours: WorkingHours) -> TimeInterval:
        """
        Resolve the working-hours window of ``day`` to aware datetimes.

        Raises:
            ValidationError: Unknown timezone, bad HH:MM, or end <= start
        """
        try:
            get_zone(working_hours.timezone)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        start_minutes = _parse_hhmm(working_hours.start, "working hours start")
        end_minutes = _parse_hhmm(working_hours.end, "working hours end")
        if end_minutes <= start_minutes:
            raise ValidationError(
                f"Working hours end ({working_hours.end}) must be after start ({working_hours.start})"
            )
        return TimeInterval(
            at_minutes(day, start_minutes, working_hours.timezone),
            at_minutes(day, end_minutes, working_hours.timezone),
        )

    def compute_free_intervals(
        self,
        day: date,
        working_hours: WorkingHours,
        busy: list[BusyInterval],
        buffer_minutes: int = 0,
    ) -> list[FreeInterval]:
        """
        Compute free intervals inside the working-hours window.

        Busy intervals are padded by ``buffer_minutes`` on both sides before
        merging, so padding can join two intervals that did not touch.
        Breaks are subtracted as-is.

        Args:
            day: Calendar day in ``working_hours.timezone``
            working_hours: Window, timezone and breaks
            busy: Busy intervals (any order, any timezone)
            buffer_minutes: Padding applied to each busy interval

        Returns:
            Sorted, non-overlapping free intervals in the working timezone

        Raises:
            ValidationError: Malformed window or negative buffer
        """
        if buffer_minutes < 0:
            raise ValidationError(f"buffer_minutes must be >= 0, got {buffer_minutes}")

        window = self.working_window(day, working_hours)
        tz = get_zone(working_hours.timezone)
        pad = timedelta(minutes=buffer_minutes)

        spans: list[TimeInterval] = []
        for interval in busy:
            padded = TimeInterval(ensure_utc(interval.start) - pad, ensure_utc(interval.end) + pad)
            clipped = _clip(padded, window)
            if clipped:
                spans.append(clipped)

        for work_break in working_hours.breaks:
            break_start = _parse_hhmm(work_break.start, "break start")
            break_end = _parse_hhmm(work_break.end, "break end")
            if break_end <= break_start:
                raise ValidationError(f"Break end ({work_break.end}) must be after start ({work_break.start})")
            clipped = _clip(
                TimeInterval(
                    at_minutes(day, break_start, working_hours.timezone),
                    at_minutes(day, break_end, working_hours.timezone),
                ),
                window,
            )
            if clipped:
                spans.append(clipped)

        spans.sort(key=lambda span: (span.start, span.end))
        merged = _merge_intervals(spans)

        free: list[FreeInterval] = []
        cursor = window.start
        for span in merged:
            if span.start > cursor:
                free.append(FreeInterval(start=cursor.astimezone(tz), end=span.start.astimezone(tz)))
            if span.end > cursor:
                cursor = span.end
        if cursor < window.end:
            free.append(FreeInterval(start=cursor.astimezone(tz), end=window.end.astimezone(tz)))
        return free

    @staticmethod
    def total_minutes(intervals: list[FreeInterval]) -> float:
        return sum(interval.minutes for interval in intervals)
