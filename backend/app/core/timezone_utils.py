"""
Timezone utilities for the Spyke marketplace.

All timestamps are stored and compared in UTC. SQLite drops tzinfo on the
way back out of the database, so values read from it are normalized here.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from .enums import StatsPeriod


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def period_range(period: StatsPeriod, now: Optional[datetime] = None) -> Tuple[Optional[datetime], datetime]:
    """
    Resolve a reporting period into a (start, end) window.

    Args:
        period: today, week, month or all
        now: Reference time, defaults to the current UTC time

    Returns:
        Tuple of start (None for "all") and end
    """
    end = now or utc_now()
    if period == StatsPeriod.TODAY:
        return end.replace(hour=0, minute=0, second=0, microsecond=0), end
    if period == StatsPeriod.WEEK:
        return end - timedelta(days=7), end
    if period == StatsPeriod.MONTH:
        return end - timedelta(days=30), end
    return None, end


def from_millis(value: int | float) -> datetime:
    """Convert a JavaScript millisecond timestamp to an aware datetime."""
    return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
