"""Utility functions for timestamp handling."""

from datetime import datetime

import pytz


def parse_iso_timestamp(value: str) -> datetime | None:
    """Parses an ISO-8601 string into an aware datetime, or None if it is not one."""
    if not value or not isinstance(value, str):
        return None
    try:
        # Handle both Z and +00:00 for UTC
        dt_obj = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if dt_obj.tzinfo is None:
        dt_obj = pytz.utc.localize(dt_obj)
    return dt_obj


def format_timestamp_for_store(dt: datetime) -> str:
    """Formats a datetime as an ISO-8601 UTC string with millisecond precision."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    dt_utc = dt.astimezone(pytz.utc)
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt_utc.microsecond // 1000:03d}Z"
