from __future__ import annotations

from datetime import datetime, timezone


def _is_naive(value: datetime) -> bool:
    return value.tzinfo is None or value.utcoffset() is None


def require_utc(value: datetime | None, *, field_name: str = "timestamp") -> datetime | None:
    """Convert an offset-aware ``value`` to UTC; reject naive input.

    Used on request bodies, where a missing offset is ambiguous.
    """

    if value is None:
        return None
    if _is_naive(value):
        raise ValueError(f"{field_name} must include a timezone offset")
    return value.astimezone(timezone.utc)


def coerce_utc(value: datetime | None) -> datetime | None:
    """Convert a stored datetime to UTC, reading naive values as UTC.

    SQLite drops the offset of ``DateTime(timezone=True)`` columns; every value
    is written in UTC, so the missing offset is known.
    """

    if value is None:
        return None
    if _is_naive(value):
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
