"""SQLite rate store backed by :class:`SQLiteManager`."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from fx_ledger.currency import Currency
from fx_ledger.db import DEFAULT_SQLITE_DB_PATH
from fx_ledger.db.base_backend import RateStore
from fx_ledger.db.sqlite_manager import SQLiteManager
from fx_ledger.models import ExchangeRateRecord, PersistenceResult, StoredRate


class SQLiteBackend(RateStore):
    """Rate store that keeps rates in a local SQLite file."""

    def __init__(
        self,
        db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
        *,
        manager: SQLiteManager | None = None,
    ) -> None:
        self.manager = manager or SQLiteManager(db_path)
        self.db_path = Path(self.manager.db_path)

    def ensure_schema(self) -> None:
        # ``SQLiteManager`` creates the table in its constructor.
        return None

    def lookup(
        self, from_currency: Currency, to_currency: Currency, rate_date: date
    ) -> StoredRate | None:
        return self.manager.lookup(from_currency, to_currency, rate_date)

    def upsert(self, record: ExchangeRateRecord) -> PersistenceResult:
        return self.manager.upsert(record)

    def ping(self) -> None:
        self.manager.ping()

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[ExchangeRateRecord]:
        return self.manager.fetch_range(start, end)

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.manager.close()


__all__ = ["SQLiteBackend"]
