"""Shared parsing helpers for SimpleFIN payload values.

SimpleFIN sends timestamps as Unix epoch seconds and amounts as decimal
strings; SQLite hands datetimes back without tzinfo.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation


def parse_unix_timestamp(value) -> datetime | None:
    """Parse a Unix epoch timestamp to a UTC-aware datetime.

    Args:
        value: An int, float, string-encoded number, or None.

    Returns:
        A timezone-aware UTC datetime, or None if the value cannot be parsed.
    """
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (ValueError, TypeError, OSError):
        return None


def parse_decimal(value) -> Decimal | None:
    """Parse a SimpleFIN amount (usually a string like ``"-12.34"``).

    Returns:
        The Decimal value, or None if missing or not numeric.
    """
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware (UTC).

    If the datetime is naive, attach UTC; otherwise return as-is.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
