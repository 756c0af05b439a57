"""
Datetime utilities for consistent timezone handling across the application.
All datetime operations should use timezone-aware datetimes.
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_iso_datetime(iso_string: str) -> datetime:
    """
    Parse ISO format datetime string to timezone-aware datetime.
    Handles both 'Z' suffix and '+00:00' timezone formats.

    Args:
        iso_string: ISO format datetime string

    Returns:
        Timezone-aware datetime object

    Raises:
        ValueError: If datetime string cannot be parsed
    """
    normalized = iso_string.strip().replace("Z", "+00:00")

    try:
        return ensure_aware(datetime.fromisoformat(normalized))
    except ValueError as e:
        raise ValueError(f"Invalid datetime string: {iso_string}") from e


def to_iso_string(dt: datetime) -> str:
    """Convert datetime to ISO format string, assuming UTC for naive values."""
    return ensure_aware(dt).isoformat()


def format_local(dt: Optional[datetime], tz_name: str = "UTC") -> str:
    """Human readable timestamp in the configured timezone."""
    if dt is None:
        return "now"

    return ensure_aware(dt).astimezone(ZoneInfo(tz_name)).strftime("%d.%m.%Y %H:%M")


def today_in(tz_name: str = "UTC") -> date:
    """Current calendar date in the configured timezone."""
    return utc_now().astimezone(ZoneInfo(tz_name)).date()
