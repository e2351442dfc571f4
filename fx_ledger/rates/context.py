"""Owned state shared by every conversion in a process."""

from __future__ import annotations

from dataclasses import dataclass, field

from fx_ledger.config import RateSettings
from fx_ledger.rates.cache import RateCache
from fx_ledger.rates.limiter import SlidingWindowRateLimiter


@dataclass(slots=True)
class RateContext:
    """Holds the in-memory cache and the provider call limiter.

    Build one per process (or per test) and hand it to the engine. Nothing is
    torn down explicitly; losing it on restart only costs a store lookup.
    """

    cache: RateCache = field(default_factory=RateCache)
    limiter: SlidingWindowRateLimiter = field(default_factory=SlidingWindowRateLimiter)

    @classmethod
    def from_settings(cls, settings: RateSettings) -> "RateContext":
        return cls(
            cache=RateCache(settings.cache_ttl, max_entries=settings.cache_max_entries),
            limiter=SlidingWindowRateLimiter(
                settings.max_calls_per_window, settings.window_seconds
            ),
        )


__all__ = ["RateContext"]
