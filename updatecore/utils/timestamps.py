"""Timestamp utilities for reports and logs."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def format_timestamp_for_log(dt: Optional[datetime]) -> str:
    """Format a datetime for log output (ISO 8601, UTC, 'Z' suffix).

    Naive datetimes are treated as UTC. ``None`` renders as ``"N/A"``.

    Example:
        >>> format_timestamp_for_log(datetime(2025, 11, 4, 12, 30, tzinfo=timezone.utc))
        '2025-11-04T12:30:00Z'
    """
    if dt is None:
        return "N/A"

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
