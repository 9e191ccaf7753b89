"""Datetime helpers."""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds between two datetimes, never negative."""
    return max(0, int((end - start).total_seconds() * 1000))
