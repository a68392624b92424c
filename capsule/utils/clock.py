"""UTC timestamp helpers.

SQLite hands datetimes back without tzinfo; everything we store is UTC, so
naive values are tagged as UTC before they are compared or rendered.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: datetime | None) -> str | None:
    """ISO-8601 in UTC, e.g. 2026-01-01T12:00:00.123456+00:00."""
    value = as_utc(value)
    return value.isoformat() if value else None
