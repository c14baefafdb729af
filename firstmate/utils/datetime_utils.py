"""
Timezone-aware datetime utilities.

All wall-clock math is done in an IANA zone via zoneinfo, so the UTC offset
is resolved for the specific date rather than assumed constant across DST.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Optional
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


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ValueError: If the zone is unknown
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {tz_name}") from e


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def local_time_to_utc(day: date, hour: int, minute: int, tz_name: str) -> datetime:
    """
    Convert a wall-clock time on a given local date to an absolute UTC instant.

    Args:
        day: Calendar date in the target timezone
        hour: Wall-clock hour (0-23)
        minute: Wall-clock minute (0-59)
        tz_name: IANA timezone name

    Returns:
        datetime: Timezone-aware datetime in UTC

    Example:
        >>> local_time_to_utc(date(2026, 3, 6), 9, 0, "America/Los_Angeles")
        datetime(2026, 3, 6, 17, 0, tzinfo=timezone.utc)  # PST, UTC-8
        >>> local_time_to_utc(date(2026, 3, 9), 9, 0, "America/Los_Angeles")
        datetime(2026, 3, 9, 16, 0, tzinfo=timezone.utc)  # PDT, UTC-7
    """
    localized = datetime.combine(day, time(hour, minute), tzinfo=get_zone(tz_name))
    return localized.astimezone(UTC)


def to_local(dt: datetime, tz_name: str) -> datetime:
    """Express an instant in the target timezone (naive input assumed UTC)."""
    return ensure_utc(dt).astimezone(get_zone(tz_name))


def local_date(dt: datetime, tz_name: str) -> date:
    """Calendar date of an instant in the target timezone."""
    return to_local(dt, tz_name).date()


def start_of_local_day(day: date, tz_name: str) -> datetime:
    """UTC instant of local midnight at the start of ``day``."""
    return local_time_to_utc(day, 0, 0, tz_name)


def end_of_local_day(day: date, tz_name: str) -> datetime:
    """UTC instant of local midnight at the end of ``day`` (exclusive bound)."""
    return start_of_local_day(day + timedelta(days=1), tz_name)


def local_day_bounds(
    day: date,
    start: tuple[int, int],
    end: tuple[int, int],
    tz_name: str,
) -> tuple[datetime, datetime]:
    """UTC bounds of a wall-clock window such as 08:00-21:00 on ``day``."""
    return (
        local_time_to_utc(day, start[0], start[1], tz_name),
        local_time_to_utc(day, end[0], end[1], tz_name),
    )


def iter_local_dates(window_start: datetime, window_end: datetime, tz_name: str) -> Iterator[date]:
    """Yield each local calendar date touched by [window_start, window_end]."""
    if window_end <= window_start:
        return
    current = local_date(window_start, tz_name)
    last = local_date(window_end, tz_name)
    while current <= last:
        yield current
        current += timedelta(days=1)


def get_week_range(now: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """
    Monday 00:00 to the following Monday 00:00 of the week containing ``now``.

    Both bounds are computed in the target timezone and returned in UTC, so a
    week spanning a DST transition is 167 or 169 hours long.
    """
    today = local_date(now, tz_name)
    monday = today - timedelta(days=today.weekday())
    return start_of_local_day(monday, tz_name), start_of_local_day(monday + timedelta(days=7), tz_name)
