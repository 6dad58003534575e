"""
Date and time utility functions for the assessment engine.

This module provides standardized timezone-aware datetime functions used for
due/grace/expiration arithmetic and for consistent audit timestamps.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

# A clock is any zero-argument callable returning an aware UTC datetime.
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """
    Get the current UTC datetime with timezone information.

    Returns:
        datetime: Current UTC time as a timezone-aware datetime object
    """
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware as UTC.

    If the datetime is naive (no timezone), assume it's UTC.
    If it has a timezone, convert it to UTC.

    Args:
        dt: Input datetime object

    Returns:
        datetime: Timezone-aware UTC datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def add_days(dt: datetime, days: int) -> datetime:
    """Shift a datetime by a whole number of days, keeping it in UTC."""
    return as_utc(dt) + timedelta(days=days)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from ``earlier`` to ``later`` (floored)."""
    return (as_utc(later) - as_utc(earlier)) // timedelta(days=1)


def format_date_iso(dt: datetime) -> str:
    """
    Format a datetime as an ISO 8601 string with a UTC 'Z' suffix.

    Args:
        dt: The datetime to format

    Returns:
        str: Formatted ISO 8601 string
    """
    return as_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_long_date(dt: datetime) -> str:
    """Human-readable date used in patient-facing messages (e.g. 'Monday, June 3, 2024')."""
    dt = as_utc(dt)
    return f"{dt.strftime('%A, %B')} {dt.day}, {dt.year}"
