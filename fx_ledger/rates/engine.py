"""Rate resolution across the memory cache, the rate store and the provider."""

from __future__ import annotations

import asyncio
import math
import time
from datetime import date, datetime
from decimal import Decimal
from typing import Callable

from fx_ledger.config import RateSettings
from fx_ledger.currency import Currency
from fx_ledger.db.base_backend import RateStore
from fx_ledger.errors import (
    FxLedgerError,
    InvalidAmount,
    ProviderError,
    RateLimitExceeded,
    RateUnavailable,
    StoreWriteError,
)
from fx_ledger.models import ExchangeRateRecord, ProviderSnapshot, StoredRate
from fx_ledger.providers.base import RateProvider
from fx_ledger.rates.context import RateContext
from fx_ledger.utils.dates import to_rate_date, utc_from_timestamp
from fx_ledger.utils.formatting import format_amount
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)

Amount = float | int | Decimal
DateLike = date | datetime | str


def ensure_finite_amount(amount: object) -> float:
    """Return ``amount`` as a float or raise :class:`InvalidAmount`."""

    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise InvalidAmount(f"Amount must be a number, got {type(amount).__name__}")
    value = float(amount)
    if not math.isfinite(value):
        raise InvalidAmount(f"Amount must be finite, got {amount!r}")
    return value


class ConversionEngine:
    """Resolve and apply exchange rates.

    Lookup order is the in-memory cache, then the rate store, then the
    provider (behind the sliding-window limiter). A rate is fresh while it is
    younger than ``settings.cache_ttl`` seconds. Freshly fetched rates are
    upserted into the store; a failed write is logged and the rate is still
    returned.

    Concurrent requests for the same uncached key are not coalesced: each may
    reach the provider and the last response to land wins in the cache.
    """

    def __init__(
        self,
        store: RateStore | None,
        provider: RateProvider,
        *,
        context: RateContext | None = None,
        settings: RateSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or RateSettings()
        self.context = context or RateContext.from_settings(self.settings)
        self.store = store
        self.provider = provider
        self._clock = clock
        self.last_write_ok: bool | None = None
        self.last_write_error: StoreWriteError | None = None

    async def get_exchange_rate(
        self,
        from_currency: Currency | str,
        to_currency: Currency | str,
        rate_date: DateLike,
    ) -> float:
        """Return how many ``to_currency`` units one ``from_currency`` buys on ``rate_date``."""

        source = Currency.parse(from_currency)
        target = Currency.parse(to_currency)
        if source is target:
            return 1.0
        day = to_rate_date(rate_date)
        try:
            return await self._resolve(source, target, day)
        except FxLedgerError as exc:
            LOGGER.error("Error getting exchange rate %s->%s for %s: %s", source, target, day, exc)
            raise
        except Exception as exc:
            LOGGER.exception("Unexpected failure resolving %s->%s for %s", source, target, day)
            raise RateUnavailable(f"Failed to get exchange rate {source}->{target} for {day}") from exc

    async def convert_amount(
        self,
        amount: Amount,
        from_currency: Currency | str,
        to_currency: Currency | str,
        rate_date: DateLike,
    ) -> float:
        value = ensure_finite_amount(amount)
        rate = await self.get_exchange_rate(from_currency, to_currency, rate_date)
        return value * rate

    async def convert_to_preferred(
        self,
        amount: Amount,
        from_currency: Currency | str,
        rate_date: DateLike,
        preferred: Currency | str,
    ) -> float:
        """Convert into the user's preferred currency; a no-op when they match."""

        value = ensure_finite_amount(amount)
        if Currency.parse(from_currency) is Currency.parse(preferred):
            return value
        return await self.convert_amount(value, from_currency, preferred, rate_date)

    @staticmethod
    def format_amount(amount: Amount, currency: Currency | str) -> str:
        return format_amount(amount, currency)

    async def _resolve(self, source: Currency, target: Currency, day: date) -> float:
        cache = self.context.cache
        now = self._clock()

        entry = cache.get(day, source, target)
        if entry is not None and cache.is_fresh(entry, now):
            LOGGER.debug("Memory cache hit for %s->%s on %s", source, target, day)
            return entry.rate
        # (timestamp, rate) of the newest stale value seen so far
        fallback: tuple[float, float] | None = (
            (entry.fetched_at, entry.rate) if entry is not None else None
        )

        stored = await self._lookup(source, target, day)
        if stored is not None:
            stored_at = stored.updated_at.timestamp()
            if now - stored_at < cache.ttl:
                LOGGER.debug("Rate store hit for %s->%s on %s", source, target, day)
                cache.put(day, source, target, stored.rate, stored_at)
                return stored.rate
            if fallback is None or stored_at > fallback[0]:
                fallback = (stored_at, stored.rate)

        if not self.context.limiter.try_admit(now):
            if self.settings.stale_fallback and fallback is not None:
                LOGGER.warning(
                    "Provider rate limit reached; serving stale %s->%s rate for %s",
                    source,
                    target,
                    day,
                )
                return fallback[1]
            raise RateLimitExceeded("Rate limit exceeded. Please try again later.")

        snapshot = await self._fetch(source)
        rate = snapshot.rates.get(target.value)
        if rate is None:
            raise ProviderError(f"No conversion rate found for {target.value}")

        await self._persist(
            ExchangeRateRecord(
                from_currency=source,
                to_currency=target,
                rate_date=day,
                rate=rate,
                updated_at=utc_from_timestamp(now),
            )
        )
        cache.put(day, source, target, rate, now)
        return rate

    async def _lookup(self, source: Currency, target: Currency, day: date) -> StoredRate | None:
        if self.store is None:
            return None
        try:
            return await asyncio.to_thread(self.store.lookup, source, target, day)
        except Exception as exc:
            LOGGER.warning("Rate store lookup failed for %s->%s on %s: %s", source, target, day, exc)
            return None

    async def _fetch(self, source: Currency) -> ProviderSnapshot:
        timeout = self.settings.provider_timeout
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.provider.fetch_latest, source.value),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError(f"Rate provider did not answer within {timeout}s") from exc

    async def _persist(self, record: ExchangeRateRecord) -> bool:
        """Upsert ``record`` and report success; failures never propagate."""

        if self.store is None:
            self.last_write_ok = None
            return False
        try:
            await asyncio.to_thread(self.store.upsert, record)
        except Exception as exc:
            error = StoreWriteError(
                f"Error storing exchange rate {record.from_currency}->{record.to_currency} "
                f"for {record.rate_date}: {exc}"
            )
            error.__cause__ = exc
            LOGGER.error("%s", error)
            self.last_write_ok = False
            self.last_write_error = error
            return False
        self.last_write_ok = True
        self.last_write_error = None
        return True


__all__ = ["ConversionEngine", "ensure_finite_amount"]
