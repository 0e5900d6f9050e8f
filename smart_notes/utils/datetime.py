"""Datetime utility functions."""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def days_ago(days: int) -> datetime:
    """Return the UTC time the given number of days before now."""
    return utc_now() - timedelta(days=days)
