"""Rate store interface implemented by every database backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Sequence

from fx_ledger.currency import Currency
from fx_ledger.models import ExchangeRateRecord, PersistenceResult, StoredRate


class RateStore(ABC):
    """Durable ``(from, to, date) -> rate`` table.

    ``upsert`` must be a single atomic insert-or-update keyed on the currency
    pair and date; other processes may write the same key concurrently.
    """

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create the rate table/collection and verify connectivity."""

    @abstractmethod
    def lookup(
        self, from_currency: Currency, to_currency: Currency, rate_date: date
    ) -> StoredRate | None:
        """Return the stored rate for the key or ``None``."""

    @abstractmethod
    def upsert(self, record: ExchangeRateRecord) -> PersistenceResult:
        """Insert the record or overwrite ``rate``/``updated_at`` of the existing row."""

    @abstractmethod
    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[ExchangeRateRecord]:
        """Return stored rates constrained by the provided dates."""

    def ping(self) -> None:
        """Round-trip to the store, raising if it cannot be reached.

        A missing optional driver surfaces as :class:`ModuleNotFoundError`.
        """

    def upsert_many(self, records: Sequence[ExchangeRateRecord]) -> PersistenceResult:
        result = PersistenceResult()
        for record in records:
            written = self.upsert(record)
            result.inserted += written.inserted
            result.updated += written.updated
        return result

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["RateStore"]
