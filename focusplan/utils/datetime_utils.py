"""
Timezone-aware datetime utilities.

This module provides utilities for working with timezone-aware datetimes,
ensuring consistent handling across the application.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def get_zone(user_timezone: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return ZoneInfo(user_timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {user_timezone}") from exc


def get_user_today(user_timezone: str) -> date:
    """
    Get today's date in the user's timezone.

    Args:
        user_timezone: IANA timezone name (e.g., "Europe/Berlin", "America/New_York")

    Returns:
        date: Today's date in the user's timezone
    """
    tz = get_zone(user_timezone)
    return datetime.now(UTC).astimezone(tz).date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Args:
        dt: datetime to convert (can be None, naive, or timezone-aware)

    Returns:
        Optional[datetime]: UTC timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def parse_time_to_minutes(value: str) -> Optional[int]:
    """
    Parse "HH:MM" into minutes since midnight.

    "24:00" is accepted as the end of the day. Returns None when malformed.
    """
    parts = value.split(":")
    if len(parts) != 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if hours == 24 and minutes == 0:
        return 24 * 60
    if hours < 0 or hours > 23 or minutes < 0 or minutes > 59:
        return None
    return hours * 60 + minutes


def local_day_start(day: date, user_timezone: str) -> datetime:
    """Midnight of ``day`` in the user's timezone."""
    return datetime.combine(day, time.min, tzinfo=get_zone(user_timezone))


def local_day_bounds(day: date, user_timezone: str) -> tuple[datetime, datetime]:
    """[start, end) of ``day`` in the user's timezone, as aware datetimes."""
    start = local_day_start(day, user_timezone)
    end = local_day_start(day + timedelta(days=1), user_timezone)
    return start, end


def at_minutes(day: date, minutes: int, user_timezone: str) -> datetime:
    """Wall-clock time ``minutes`` after local midnight of ``day``."""
    if minutes >= 24 * 60:
        return local_day_start(day + timedelta(days=1), user_timezone)
    local = datetime.combine(
        day, time(hour=minutes // 60, minute=minutes % 60), tzinfo=get_zone(user_timezone)
    )
    return local


def minutes_between(start: datetime, end: datetime) -> float:
    """Length of [start, end) in minutes; negative spans count as zero."""
    return max(0.0, (end - start).total_seconds() / 60)


def overlap_minutes(
    start: datetime,
    end: datetime,
    window_start: datetime,
    window_end: datetime,
) -> float:
    """Minutes of [start, end) that fall inside [window_start, window_end)."""
    return minutes_between(max(start, window_start), min(end, window_end))


def week_start_for(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())
