"""
UTC calendar helpers for day-based backtests.

A trading day is the UTC calendar day [00:00, 24:00). Exchange timestamps are
epoch milliseconds.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Union

DAY_MS = 86_400_000


def parse_day(value: Union[str, date, datetime]) -> date:
    """
    Parse an ISO date (YYYY-MM-DD) or pass a date through.

    Raises:
        ValueError: If the string is not an ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def dates_in_range(start: date, end: date) -> list[date]:
    """
    All calendar days from start to end inclusive.

    Returns an empty list when start is after end.
    """
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def previous_day(day: date) -> date:
    """The calendar day before day."""
    return day - timedelta(days=1)


def day_start(day: date) -> datetime:
    """UTC midnight at the start of day."""
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def to_epoch_ms(ts: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(ts.timestamp() * 1000)


def day_bounds_ms(day: date) -> tuple[int, int]:
    """
    Epoch millisecond bounds of a UTC day.

    Returns:
        (start_ms, end_ms) where end_ms is start_ms + 24h
    """
    start_ms = to_epoch_ms(day_start(day))
    return start_ms, start_ms + DAY_MS
