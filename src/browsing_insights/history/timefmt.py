"""Local-time conversions and display formats for epoch-millisecond timestamps."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo

from dateutil import tz

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR


def local_zone() -> tzinfo:
    return tz.tzlocal()


def to_local(ms: int | float, zone: tzinfo | None = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in the local zone."""
    return datetime.fromtimestamp(ms / 1000, tz=zone or local_zone())


def to_ms(dt: datetime) -> int:
    return int(round(dt.timestamp() * 1000))


def time_of_day(value: int | float | datetime) -> str:
    """``HH:MM`` in local time."""
    dt = value if isinstance(value, datetime) else to_local(value)
    return f"{dt.hour:02d}:{dt.minute:02d}"


def time_stamp(value: int | float | datetime) -> str:
    """``M/D/YYYY h:mm:ss AM`` in local time."""
    dt = value if isinstance(value, datetime) else to_local(value)
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month}/{dt.day}/{dt.year} {hour}:{dt.minute:02d}:{dt.second:02d} {suffix}"


def date_stamp(value: int | float | datetime) -> str:
    """``MM/DD/YY`` in local time."""
    dt = value if isinstance(value, datetime) else to_local(value)
    return f"{dt.month:02d}/{dt.day:02d}/{dt.year % 100:02d}"


def parse_date_stamp(stamp: str) -> datetime:
    return datetime.strptime(stamp, "%m/%d/%y")


def days_ago(days: int, now_ms: int) -> int:
    """Epoch-ms exactly ``days`` * 24h before ``now_ms``; 0 means all history."""
    if days == 0:
        return 0
    return now_ms - days * MS_PER_DAY


def since_midnight(days: int, now_ms: int, zone: tzinfo | None = None) -> int:
    """Local midnight ``days - 1`` days before ``now_ms``; 0 means all history.

    With ``days=1`` this is the start of today, so the window covers a
    partial day up to now.
    """
    if days == 0:
        return 0
    now = to_local(now_ms, zone)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return to_ms(midnight - timedelta(days=days - 1))


def now_ms() -> int:
    return to_ms(datetime.now(tz=local_zone()))
