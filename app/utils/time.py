"""Date utilities (date-only, ISO YYYY-MM-DD)."""

from datetime import date, datetime, timedelta, timezone
from typing import Union

DateLike = Union[date, datetime, str]


def parse_day(value: DateLike) -> date:
    """
    Normalize a date, datetime or ISO string to a plain date.

    Time-of-day is dropped; strings may carry a time component
    ("2026-01-15T00:00:00") which is ignored.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date string")
        return date.fromisoformat(text[:10])
    raise TypeError(f"Unsupported date value: {value!r}")


def format_day(value: date) -> str:
    """Format date as YYYY-MM-DD for the REST gateway."""
    return value.isoformat()


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def now_naive() -> datetime:
    """Current UTC time as naive datetime for DB storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
