"""MongoDB store tests against an in-memory stand-in for the pymongo client."""

from __future__ import annotations

from datetime import date, datetime, timezone
from types import SimpleNamespace
from typing import Any

import pytest

from fx_ledger.currency import Currency
from fx_ledger.db import mongo_backend
from fx_ledger.models import ExchangeRateRecord


class FakeCollection:
    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self.indexes: list[dict[str, Any]] = []

    def _match(self, doc: dict[str, Any], query: dict[str, Any]) -> bool:
        for field, expected in query.items():
            value = doc.get(field)
            if isinstance(expected, dict):
                if "$gte" in expected and value < expected["$gte"]:
                    return False
                if "$lte" in expected and value > expected["$lte"]:
                    return False
            elif value != expected:
                return False
        return True

    def create_index(self, keys: list[tuple[str, int]], **options: Any) -> str:
        self.indexes.append({"keys": keys, **options})
        return options["name"]

    def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next((doc for doc in self.docs if self._match(doc, query)), None)

    def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False):
        doc = self.find_one(query)
        if doc is not None:
            doc.update(update["$set"])
            return SimpleNamespace(upserted_id=None)
        assert upsert
        doc = {**query, **update["$setOnInsert"], **update["$set"]}
        self.docs.append(doc)
        return SimpleNamespace(upserted_id=doc["id"])

    def find(self, query: dict[str, Any]):
        matches = [doc for doc in self.docs if self._match(doc, query)]
        return SimpleNamespace(
            sort=lambda field, direction: sorted(matches, key=lambda doc: doc[field])
        )


class FakeClient:
    instances: list["FakeClient"] = []

    def __init__(self, url: str, **options: Any) -> None:
        self.url = url
        self.options = options
        self.pings = 0
        self.closed = False
        self.databases: dict[str, dict[str, FakeCollection]] = {}
        self.admin = SimpleNamespace(command=self._command)
        FakeClient.instances.append(self)

    def _command(self, name: str) -> dict[str, float]:
        assert name == "ping"
        self.pings += 1
        return {"ok": 1.0}

    def __getitem__(self, name: str) -> "_AutoCollections":
        db = self.databases.setdefault(name, {})
        return _AutoCollections(db)

    def get_default_database(self) -> "_AutoCollections":
        return self[self.url.rsplit("/", 1)[-1]]

    def close(self) -> None:
        self.closed = True


class _AutoCollections:
    def __init__(self, db: dict[str, FakeCollection]) -> None:
        self._db = db

    def __getitem__(self, name: str) -> FakeCollection:
        return self._db.setdefault(name, FakeCollection())


@pytest.fixture(autouse=True)
def fake_pymongo(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeClient.instances = []
    monkeypatch.setattr(mongo_backend, "MongoClient", FakeClient)


def _record(rate: float, day: date, hour: int = 0) -> ExchangeRateRecord:
    return ExchangeRateRecord(
        from_currency=Currency.SAR,
        to_currency=Currency.EGP,
        rate_date=day,
        rate=rate,
        updated_at=datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc),
    )


def test_store_is_lazy_until_first_use() -> None:
    store = mongo_backend.MongoBackend("mongodb://db.example.com/ledger")

    assert FakeClient.instances == []
    store.ping()
    assert FakeClient.instances[0].options == {"serverSelectionTimeoutMS": 5000}
    assert FakeClient.instances[0].pings == 1


def test_ensure_schema_creates_unique_key_index() -> None:
    store = mongo_backend.MongoBackend("mongodb://db.example.com/", database="ledger")
    store.ensure_schema()

    assert store.collection.indexes == [
        {
            "keys": [("from_currency", 1), ("to_currency", 1), ("date", 1)],
            "unique": True,
            "name": mongo_backend.UNIQUE_INDEX_NAME,
        }
    ]


def test_upsert_keeps_one_document_per_key() -> None:
    store = mongo_backend.MongoBackend("mongodb://db.example.com/ledger")

    first = store.upsert(_record(12.6, date(2024, 3, 1)))
    other_day = store.upsert(_record(12.7, date(2024, 3, 2)))
    again = store.upsert(_record(12.9, date(2024, 3, 1), hour=9))

    assert (first.inserted, other_day.inserted, again.updated) == (1, 1, 1)
    assert len(store.collection.docs) == 2
    stored = store.lookup(Currency.SAR, Currency.EGP, date(2024, 3, 1))
    assert stored is not None
    assert stored.rate == 12.9
    assert stored.updated_at == datetime(2024, 3, 1, 9, tzinfo=timezone.utc)
    # created_at is only written on insert
    assert store.collection.docs[0]["created_at"] == datetime(2024, 3, 1, tzinfo=timezone.utc)


def test_fetch_range_filters_and_sorts_by_day() -> None:
    store = mongo_backend.MongoBackend("mongodb://db.example.com/ledger")
    for day in (date(2024, 3, 5), date(2024, 3, 1), date(2024, 3, 3)):
        store.upsert(_record(12.0 + day.day / 10, day))

    assert [row.rate_date.day for row in store.fetch_range(start=date(2024, 3, 2))] == [3, 5]
    assert [row.rate_date.day for row in store.fetch_range()] == [1, 3, 5]
    assert store.fetch_range(end=date(2024, 3, 1))[0].to_currency is Currency.EGP


def test_default_database_comes_from_url() -> None:
    store = mongo_backend.MongoBackend("mongodb://db.example.com/ledger")

    assert store.lookup(Currency.USD, Currency.SAR, date(2024, 3, 1)) is None
    assert set(FakeClient.instances[0].databases) == {"ledger"}
    store.close()
    assert FakeClient.instances[0].closed is True


def test_missing_pymongo_is_reported_on_use(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(mongo_backend, "MongoClient", None)
    store = mongo_backend.MongoBackend("mongodb://db.example.com/ledger")

    with pytest.raises(ModuleNotFoundError) as excinfo:
        store.ping()
    assert excinfo.value.name == "pymongo"
