"""Helpers for reducing timestamps to rate days."""

from __future__ import annotations

from datetime import date, datetime, timezone


def to_rate_date(value: date | datetime | str) -> date:
    """Truncate ``value`` to the calendar day used as the rate key.

    Timezone-aware datetimes are converted to UTC before truncation so the
    same instant always maps to the same day. Naive datetimes are taken as-is.
    Strings must be ISO formatted (``YYYY-MM-DD`` or a full ISO timestamp).
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return to_rate_date(datetime.fromisoformat(text))
    raise TypeError(f"Cannot derive a rate date from {type(value).__name__}")


def to_utc_datetime(value: object) -> datetime:
    """Normalise a stored ``updated_at`` value into an aware UTC datetime."""

    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise TypeError(f"Cannot interpret {value!r} as a timestamp")
    if value.tzinfo is None:
        # SQLite and MySQL hand back naive values; everything is written as UTC.
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalise_rate_date(value: object) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    return date.fromisoformat(str(value))


def utc_from_timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


__all__ = ["normalise_rate_date", "to_rate_date", "to_utc_datetime", "utc_from_timestamp"]
