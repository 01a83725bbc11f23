from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Return an aware datetime in ``tz`` (the host's local zone when omitted).

    Naive values are taken to already be local wall-clock time.
    """
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(tz) if tz is not None else value.astimezone()


def local_day(value: Union[datetime, date], tz: Optional[tzinfo] = None) -> date:
    """Truncate a timestamp to its calendar day in the given zone."""
    if isinstance(value, datetime):
        return to_local(value, tz).date()
    return value


def start_of_week(day: date) -> date:
    # Monday-first, same as (getDay() + 6) % 7 with Sunday = 0
    return day - timedelta(days=day.weekday())


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def shift_month(day: date, months: int) -> date:
    """First day of the month ``months`` away from the month containing ``day``."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def days_in_month(day: date) -> int:
    return (shift_month(day, 1) - start_of_month(day)).days


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
