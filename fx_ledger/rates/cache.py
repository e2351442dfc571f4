"""Process-local exchange rate cache."""

from __future__ import annotations

from collections import OrderedDict
from datetime import date

from fx_ledger.config import DEFAULT_CACHE_TTL_SECONDS
from fx_ledger.currency import Currency
from fx_ledger.models import CacheEntry

CacheKey = tuple[date, Currency, Currency]


class RateCache:
    """Flat ``(date, from, to) -> CacheEntry`` mapping with lazy expiry.

    Entries are never evicted for being stale; readers check freshness with
    :meth:`is_fresh` and writers simply overwrite. When ``max_entries`` is set
    the least recently written or read key is dropped once the bound is hit.
    """

    __slots__ = ("ttl", "max_entries", "_entries")

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        *,
        max_entries: int | None = None,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()

    def get(self, rate_date: date, from_currency: Currency, to_currency: Currency) -> CacheEntry | None:
        key = (rate_date, from_currency, to_currency)
        entry = self._entries.get(key)
        if entry is not None and self.max_entries is not None:
            self._entries.move_to_end(key)
        return entry

    def put(
        self,
        rate_date: date,
        from_currency: Currency,
        to_currency: Currency,
        rate: float,
        timestamp: float,
    ) -> CacheEntry:
        key = (rate_date, from_currency, to_currency)
        entry = CacheEntry(rate=rate, fetched_at=timestamp)
        self._entries[key] = entry
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return entry

    def is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.fetched_at < self.ttl

    def get_fresh(
        self, rate_date: date, from_currency: Currency, to_currency: Currency, now: float
    ) -> CacheEntry | None:
        """Return the entry only when it is younger than ``ttl``."""

        entry = self.get(rate_date, from_currency, to_currency)
        if entry is None or not self.is_fresh(entry, now):
            return None
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["CacheKey", "RateCache"]
