"""SQLAlchemy-backed storage for the bundled SQLite rate database."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from pathlib import Path
from typing import cast

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    String,
    UniqueConstraint,
    create_engine,
    select,
    text,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fx_ledger.currency import SUPPORTED_CURRENCIES, Currency
from fx_ledger.db import DEFAULT_SQLITE_DB_PATH, EXCHANGE_RATES_TABLE
from fx_ledger.models import ExchangeRateRecord, PersistenceResult, StoredRate
from fx_ledger.utils.dates import to_utc_datetime
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)

_CURRENCY_LIST = ", ".join(f"'{code}'" for code in SUPPORTED_CURRENCIES)


class Base(DeclarativeBase):
    pass


class _ExchangeRate(Base):
    __tablename__ = EXCHANGE_RATES_TABLE
    __table_args__ = (
        UniqueConstraint(
            "from_currency",
            "to_currency",
            "date",
            name="exchange_rates_currency_pair_date_unique",
        ),
        CheckConstraint(
            f"from_currency IN ({_CURRENCY_LIST}) AND to_currency IN ({_CURRENCY_LIST})",
            name="exchange_rates_supported_currencies",
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    from_currency = Column(String(3), nullable=False)
    to_currency = Column(String(3), nullable=False)
    rate_date = Column("date", Date, nullable=False)
    rate = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))


def _naive_utc(value: datetime) -> datetime:
    return to_utc_datetime(value).replace(tzinfo=None)


class SQLiteManager:
    """Owns the SQLite engine and exposes lookup/upsert over ``exchange_rates``."""

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(self.engine)
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )
        LOGGER.debug("Opened SQLite rate store at %s", self.db_path)

    def lookup(
        self, from_currency: Currency, to_currency: Currency, rate_date: date
    ) -> StoredRate | None:
        with self._SessionFactory() as session:
            stmt = select(_ExchangeRate.rate, _ExchangeRate.updated_at).where(
                _ExchangeRate.from_currency == from_currency.value,
                _ExchangeRate.to_currency == to_currency.value,
                _ExchangeRate.rate_date == rate_date,
            )
            row = session.execute(stmt).first()
        if row is None:
            return None
        return StoredRate(rate=float(row.rate), updated_at=to_utc_datetime(row.updated_at))

    def upsert(self, record: ExchangeRateRecord) -> PersistenceResult:
        result = PersistenceResult()
        table = _ExchangeRate.__table__
        updated_at = _naive_utc(record.updated_at)
        stmt = sqlite_insert(table).values(
            id=str(uuid.uuid4()),
            from_currency=record.from_currency.value,
            to_currency=record.to_currency.value,
            date=record.rate_date,
            rate=record.rate,
            created_at=updated_at,
            updated_at=updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["from_currency", "to_currency", "date"],
            set_={
                table.c.rate: stmt.excluded.rate,
                table.c.updated_at: stmt.excluded.updated_at,
            },
        )
        with self._SessionFactory() as session:
            existed = (
                session.execute(
                    select(_ExchangeRate.id).where(
                        _ExchangeRate.from_currency == record.from_currency.value,
                        _ExchangeRate.to_currency == record.to_currency.value,
                        _ExchangeRate.rate_date == record.rate_date,
                    )
                ).first()
                is not None
            )
            session.execute(stmt)
            session.commit()
        # The pre-read only feeds the counters; the write itself is one statement.
        if existed:
            result.updated += 1
        else:
            result.inserted += 1
        LOGGER.debug(
            "Upserted %s->%s on %s (inserted=%s, updated=%s)",
            record.from_currency.value,
            record.to_currency.value,
            record.rate_date,
            result.inserted,
            result.updated,
        )
        return result

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[ExchangeRateRecord]:
        with self._SessionFactory() as session:
            stmt = select(_ExchangeRate).order_by(
                _ExchangeRate.rate_date, _ExchangeRate.from_currency, _ExchangeRate.to_currency
            )
            if start is not None:
                stmt = stmt.where(_ExchangeRate.rate_date >= start)
            if end is not None:
                stmt = stmt.where(_ExchangeRate.rate_date <= end)
            records: list[ExchangeRateRecord] = []
            for row in session.execute(stmt).scalars():
                model = cast(_ExchangeRate, row)
                records.append(
                    ExchangeRateRecord(
                        from_currency=Currency.parse(cast(str, model.from_currency)),
                        to_currency=Currency.parse(cast(str, model.to_currency)),
                        rate_date=cast(date, model.rate_date),
                        rate=cast(float, model.rate),
                        updated_at=to_utc_datetime(model.updated_at),
                    )
                )
            return records

    def ping(self) -> None:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def count(self) -> int:
        with self._SessionFactory() as session:
            return len(session.execute(select(_ExchangeRate.id)).all())

    def close(self) -> None:  # pragma: no cover - trivial
        self.engine.dispose()

    def __enter__(self) -> "SQLiteManager":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["Base", "SQLiteManager"]
