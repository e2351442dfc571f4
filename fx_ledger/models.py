"""Data models shared across the rate pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal

from fx_ledger.currency import Currency


@dataclass(slots=True)
class ExchangeRateRecord:
    """One rate row: 1 ``from_currency`` equals ``rate`` ``to_currency`` on ``rate_date``."""

    from_currency: Currency
    to_currency: Currency
    rate_date: date
    rate: float
    updated_at: datetime


@dataclass(slots=True, frozen=True)
class StoredRate:
    """Result of a persistent store point lookup."""

    rate: float
    updated_at: datetime


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """In-memory cached rate; ``fetched_at`` is seconds since the epoch."""

    rate: float
    fetched_at: float


@dataclass(slots=True, frozen=True)
class ProviderSnapshot:
    """Latest conversion rates returned by the provider for ``base``."""

    base: str
    rates: dict[str, float]


@dataclass(slots=True)
class PersistenceResult:
    """Represents how many rows were inserted or updated by a write."""

    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        """Return the total number of affected rows."""

        return self.inserted + self.updated


TransactionKind = Literal["income", "expense"]


@dataclass(slots=True)
class Transaction:
    """Ledger entry as handed over by the application layer."""

    amount: float
    currency: Currency | str
    kind: TransactionKind
    date: date | datetime | str
    category: str | None = None


__all__ = [
    "CacheEntry",
    "ExchangeRateRecord",
    "PersistenceResult",
    "ProviderSnapshot",
    "StoredRate",
    "Transaction",
    "TransactionKind",
]
