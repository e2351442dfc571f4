"""MongoDB rate store."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from fx_ledger.currency import Currency
from fx_ledger.db import EXCHANGE_RATES_TABLE
from fx_ledger.db.base_backend import RateStore
from fx_ledger.models import ExchangeRateRecord, PersistenceResult, StoredRate
from fx_ledger.utils.dates import to_utc_datetime
from fx_ledger.utils.logger import get_logger

try:  # pragma: no cover - optional dependency
    from pymongo import ASCENDING, MongoClient
    from pymongo.collection import Collection
    from pymongo.errors import PyMongoError
except ModuleNotFoundError:  # pragma: no cover - handled when the client is first needed
    ASCENDING = 1  # type: ignore[assignment]
    MongoClient = None  # type: ignore[assignment]
    Collection = Any  # type: ignore[assignment, misc]
    PyMongoError = Exception  # type: ignore[assignment, misc]

LOGGER = get_logger(__name__)

UNIQUE_INDEX_NAME = "exchange_rates_currency_pair_date_unique"
KEY_FIELDS = ("from_currency", "to_currency", "date")


def _key_filter(from_currency: Currency, to_currency: Currency, rate_date: date) -> dict[str, str]:
    # Dates are stored as ISO strings so range queries compare lexically.
    return dict(zip(KEY_FIELDS, (from_currency.value, to_currency.value, rate_date.isoformat())))


def _to_record(doc: dict[str, Any]) -> ExchangeRateRecord:
    return ExchangeRateRecord(
        from_currency=Currency.parse(doc["from_currency"]),
        to_currency=Currency.parse(doc["to_currency"]),
        rate_date=date.fromisoformat(doc["date"]),
        rate=float(doc["rate"]),
        updated_at=to_utc_datetime(doc["updated_at"]),
    )


class MongoBackend(RateStore):
    """One document per ``(from_currency, to_currency, date)``, guarded by a unique index.

    The client is created on first use, so building the store never touches
    the network and a missing pymongo only fails once the store is used.
    """

    def __init__(
        self,
        url: str,
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        self.url = url
        self.database = database
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client: Any = None
        self._rates: Collection | None = None

    def _get_client(self) -> Any:
        if self._client is None:
            if MongoClient is None:
                raise ModuleNotFoundError("pymongo is required for MongoDB rate stores", name="pymongo")
            self._client = MongoClient(
                self.url, serverSelectionTimeoutMS=self.server_selection_timeout_ms
            )
        return self._client

    @property
    def collection(self) -> Collection:
        if self._rates is None:
            client = self._get_client()
            db = client[self.database] if self.database else client.get_default_database()
            self._rates = db[EXCHANGE_RATES_TABLE]
        return self._rates

    def ping(self) -> None:
        self._get_client().admin.command("ping")

    def ensure_schema(self) -> None:
        LOGGER.info("Creating unique index on %s if missing", EXCHANGE_RATES_TABLE)
        try:
            self.ping()
            self.collection.create_index(
                [(field, ASCENDING) for field in KEY_FIELDS],
                unique=True,
                name=UNIQUE_INDEX_NAME,
            )
        except PyMongoError as exc:
            raise RuntimeError(f"Could not prepare the MongoDB rate collection: {exc}") from exc

    def lookup(
        self, from_currency: Currency, to_currency: Currency, rate_date: date
    ) -> StoredRate | None:
        doc = self.collection.find_one(_key_filter(from_currency, to_currency, rate_date))
        if doc is None:
            return None
        return StoredRate(rate=float(doc["rate"]), updated_at=to_utc_datetime(doc["updated_at"]))

    def upsert(self, record: ExchangeRateRecord) -> PersistenceResult:
        stamp = to_utc_datetime(record.updated_at)
        outcome = self.collection.update_one(
            _key_filter(record.from_currency, record.to_currency, record.rate_date),
            {
                "$set": {"rate": record.rate, "updated_at": stamp},
                "$setOnInsert": {"id": str(uuid.uuid4()), "created_at": stamp},
            },
            upsert=True,
        )
        if outcome.upserted_id is not None:
            return PersistenceResult(inserted=1)
        return PersistenceResult(updated=1)

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[ExchangeRateRecord]:
        bounds = {
            op: day.isoformat() for op, day in (("$gte", start), ("$lte", end)) if day is not None
        }
        query = {"date": bounds} if bounds else {}
        return [_to_record(doc) for doc in self.collection.find(query).sort("date", ASCENDING)]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


__all__ = ["MongoBackend", "UNIQUE_INDEX_NAME"]
