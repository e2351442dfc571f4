"""Bucketing helpers for date-indexed series."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterable, Literal

Frequency = Literal["daily", "weekly", "monthly", "yearly"]
FREQUENCIES: tuple[str, ...] = ("daily", "weekly", "monthly", "yearly")


def normalise_frequency(frequency: str) -> str:
    freq = frequency.lower()
    if freq not in FREQUENCIES:
        raise ValueError("frequency must be one of: daily, weekly, monthly, yearly")
    return freq


def last_dates_by_key(
    dates: Iterable[date],
    key_builder: Callable[[date], Any],
) -> list[date]:
    """Keep the latest date of every bucket produced by ``key_builder``."""

    buckets: dict[Any, date] = {}
    for day in dates:
        key = key_builder(day)
        if key not in buckets or day > buckets[key]:
            buckets[key] = day
    return sorted(buckets.values())


def select_period_ends(dates: list[date], frequency: str) -> list[date]:
    """Return the dates that close each ``frequency`` period.

    ``daily`` returns ``dates`` sorted; coarser frequencies keep the last date
    present in each ISO week, month or year.
    """

    freq = normalise_frequency(frequency)
    if freq == "daily":
        return sorted(dates)
    if freq == "weekly":
        return last_dates_by_key(
            dates,
            lambda value: (value.isocalendar().year, value.isocalendar().week),
        )
    if freq == "monthly":
        return last_dates_by_key(dates, lambda value: (value.year, value.month))
    return last_dates_by_key(dates, lambda value: value.year)


__all__ = ["FREQUENCIES", "Frequency", "last_dates_by_key", "normalise_frequency", "select_period_ends"]
