"""Timestamp parsing for API payloads and persisted settings."""

from __future__ import annotations

from datetime import datetime, timezone


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are assumed to be UTC (the Skyvern API omits the
    offset). None and empty strings return None.

    Raises:
        ValueError: If value is a non-empty string that is not ISO-8601.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if not text:
            return None
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def duration_seconds(started_at: datetime | None, finished_at: datetime | None) -> float | None:
    """Seconds between two timestamps, or None unless both are present."""
    if started_at is None or finished_at is None:
        return None
    return (finished_at - started_at).total_seconds()
