"""Shared logic for SQL (Postgres/MySQL) rate stores."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from fx_ledger.currency import SUPPORTED_CURRENCIES, Currency
from fx_ledger.db import EXCHANGE_RATES_TABLE
from fx_ledger.db.base_backend import RateStore
from fx_ledger.models import ExchangeRateRecord, PersistenceResult, StoredRate
from fx_ledger.utils.dates import normalise_rate_date, to_utc_datetime
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)

_CURRENCY_LIST = ", ".join(f"'{code}'" for code in SUPPORTED_CURRENCIES)

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS exchange_rates (
    id VARCHAR(36) NOT NULL PRIMARY KEY,
    from_currency VARCHAR(3) NOT NULL,
    to_currency VARCHAR(3) NOT NULL,
    date DATE NOT NULL,
    rate NUMERIC(18, 8) NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CONSTRAINT exchange_rates_currency_pair_date_unique
        UNIQUE (from_currency, to_currency, date),
    CONSTRAINT exchange_rates_supported_currencies
        CHECK (from_currency IN ({_CURRENCY_LIST}) AND to_currency IN ({_CURRENCY_LIST}))
);
"""

_INSERT_SQL = """
INSERT INTO exchange_rates(id, from_currency, to_currency, date, rate, created_at, updated_at)
VALUES(:id, :from_currency, :to_currency, :rate_date, :rate, :updated_at, :updated_at)
"""

# PostgreSQL and SQLite share the ``ON CONFLICT`` clause; MySQL needs its own.
UPSERT_SQL_ON_CONFLICT = (
    _INSERT_SQL
    + """ON CONFLICT (from_currency, to_currency, date)
DO UPDATE SET rate = excluded.rate, updated_at = excluded.updated_at
"""
)
UPSERT_SQL_MYSQL = (
    _INSERT_SQL
    + """ON DUPLICATE KEY UPDATE rate = VALUES(rate), updated_at = VALUES(updated_at)
"""
)

LOOKUP_SQL = """
SELECT rate, updated_at FROM exchange_rates
WHERE from_currency = :from_currency AND to_currency = :to_currency AND date = :rate_date
"""


class RelationalBackend(RateStore):
    """Rate store over a SQLAlchemy engine, created lazily from ``url``."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine_instance: Engine | None = None

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True, pool_pre_ping=True)
        return self._engine_instance

    def _upsert_sql(self) -> str:
        if self._get_engine().dialect.name in {"mysql", "mariadb"}:
            return UPSERT_SQL_MYSQL
        return UPSERT_SQL_ON_CONFLICT

    def ping(self) -> None:
        with self._get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))

    def ensure_schema(self) -> None:
        LOGGER.info("Creating %s table if missing", EXCHANGE_RATES_TABLE)
        with self._get_engine().begin() as connection:
            connection.execute(text(SCHEMA_SQL))

    def lookup(
        self, from_currency: Currency, to_currency: Currency, rate_date: date
    ) -> StoredRate | None:
        params = {
            "from_currency": from_currency.value,
            "to_currency": to_currency.value,
            "rate_date": rate_date,
        }
        with self._get_engine().connect() as connection:
            row = connection.execute(text(LOOKUP_SQL), params).first()
        if row is None:
            return None
        mapping = row._mapping
        return StoredRate(
            rate=float(mapping["rate"]),
            updated_at=to_utc_datetime(mapping["updated_at"]),
        )

    def upsert(self, record: ExchangeRateRecord) -> PersistenceResult:
        result = PersistenceResult()
        params: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "from_currency": record.from_currency.value,
            "to_currency": record.to_currency.value,
            "rate_date": record.rate_date,
            "rate": record.rate,
            "updated_at": to_utc_datetime(record.updated_at).replace(tzinfo=None),
        }
        with self._get_engine().begin() as connection:
            connection.execute(text(self._upsert_sql()), params)
        result.inserted += 1
        return result

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[ExchangeRateRecord]:
        where_clauses: list[str] = []
        params: dict[str, object] = {}
        if start is not None:
            where_clauses.append("date >= :start_date")
            params["start_date"] = start
        if end is not None:
            where_clauses.append("date <= :end_date")
            params["end_date"] = end
        query = "SELECT from_currency, to_currency, date, rate, updated_at FROM exchange_rates"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY date, from_currency, to_currency"

        records: list[ExchangeRateRecord] = []
        with self._get_engine().connect() as connection:
            for row in connection.execute(text(query), params):
                mapping = row._mapping
                records.append(
                    ExchangeRateRecord(
                        from_currency=Currency.parse(mapping["from_currency"]),
                        to_currency=Currency.parse(mapping["to_currency"]),
                        rate_date=normalise_rate_date(mapping["date"]),
                        rate=float(mapping["rate"]),
                        updated_at=to_utc_datetime(mapping["updated_at"]),
                    )
                )
        return records

    def close(self) -> None:  # pragma: no cover - trivial resource cleanup
        if self._engine_instance is not None:
            self._engine_instance.dispose()


__all__ = ["RelationalBackend", "SCHEMA_SQL", "UPSERT_SQL_MYSQL", "UPSERT_SQL_ON_CONFLICT"]
