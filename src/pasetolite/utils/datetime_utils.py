"""Datetime utilities for pasetolite."""

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string with a 'Z' suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_iso_timestamp(timestamp_str: str) -> datetime:
    """Parse an ISO 8601 timestamp string to an aware datetime.

    Handles both 'Z' suffix and '+00:00' timezone formats. Timestamps
    without an offset are rejected.

    Args:
        timestamp_str: ISO 8601 formatted timestamp string.

    Returns:
        A timezone-aware datetime object.

    Raises:
        ValueError: If the string is not ISO 8601 or has no offset.
    """
    if timestamp_str.endswith("Z"):
        timestamp_str = timestamp_str[:-1] + "+00:00"
    parsed = datetime.fromisoformat(timestamp_str)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no timezone offset: {timestamp_str!r}")
    return parsed
