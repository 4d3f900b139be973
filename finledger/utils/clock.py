"""
Time helpers. All stored timestamps are naive UTC.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time without tzinfo (matches the DateTime columns)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are returned as-is."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
