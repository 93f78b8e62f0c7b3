"""
Timezone-aware datetime utilities.

All functions return timezone-aware datetime objects in UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Get the current UTC time as a timezone-aware datetime object.

    Returns:
        datetime: Current UTC time with timezone information
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime object is timezone-aware and in UTC.

    Naive datetimes (SQLite returns these) are assumed to already be UTC.

    Args:
        dt: Datetime object (may be naive or timezone-aware)

    Returns:
        datetime: Timezone-aware datetime in UTC, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as an ISO-8601 UTC string."""
    dt = ensure_utc(dt)
    return dt.isoformat() if dt else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string produced by to_iso."""
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value))
