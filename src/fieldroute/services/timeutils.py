"""Minute-of-day conversions and timezone-safe date helpers."""

from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from ..config import settings
from ..models.domain import WEEKDAYS


def to_minutes(value: time | str | int | float | None) -> int | None:
    """Convert a clock value ("HH:MM", time, or minute count) to minutes since midnight."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    return hours * 60 + minutes


def minutes_to_time_str(minutes: float | None) -> str | None:
    """Format minutes since midnight as "HH:MM"."""
    if minutes is None:
        return None
    hours = int(minutes // 60)
    mins = round(minutes % 60)
    if mins == 60:
        hours, mins = hours + 1, 0
    return f"{hours:02d}:{mins:02d}"


def minutes_to_time(minutes: int) -> time:
    """Clock time for a minute offset; clamps to the last minute of the day."""
    minutes = max(0, min(int(minutes), 23 * 60 + 59))
    return time(minutes // 60, minutes % 60)


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def resolve_timezone(tz: str | ZoneInfo | None = None) -> ZoneInfo:
    if isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz or settings.timezone)


def local_date(value: date | datetime, tz: str | ZoneInfo | None = None) -> date:
    """Calendar date of a value in the given zone; naive datetimes are taken as local already."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(resolve_timezone(tz)).date()
        return value.date()
    return value


def is_same_day(first: date | datetime | None, second: date | datetime | None, tz: str | ZoneInfo | None = None) -> bool:
    if first is None or second is None:
        return False
    zone = resolve_timezone(tz)
    return local_date(first, zone) == local_date(second, zone)


def local_naive(value: datetime, tz: str | ZoneInfo | None = None) -> datetime:
    """Drop tzinfo after converting to the local zone so it compares with naive schedule datetimes."""
    if value.tzinfo is None:
        return value
    return value.astimezone(resolve_timezone(tz)).replace(tzinfo=None)
