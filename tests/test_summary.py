from __future__ import annotations

import asyncio
from datetime import date

import pytest

from fx_ledger.config import RateSettings
from fx_ledger.errors import InvalidAmount
from fx_ledger.models import ProviderSnapshot, Transaction
from fx_ledger.rates import ConversionEngine
from fx_ledger.summary import UNCATEGORIZED, balance_series, summarize


class _Provider:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def fetch_latest(self, base_currency: str) -> ProviderSnapshot:
        self.calls.append(base_currency)
        rates = {"USD": {"SAR": 3.75, "EGP": 50.0}, "SAR": {"USD": 0.25, "EGP": 13.0}}
        return ProviderSnapshot(base=base_currency, rates=rates[base_currency])


def _engine(provider: _Provider, **settings) -> ConversionEngine:
    return ConversionEngine(None, provider, settings=RateSettings(**settings), clock=lambda: 1_717_200_000.0)


LEDGER = [
    Transaction(1000, "USD", "income", date(2024, 6, 1), "Salary"),
    Transaction(400, "SAR", "expense", date(2024, 6, 1), "Rent"),
    Transaction(20, "USD", "expense", date(2024, 6, 2), "Food"),
    Transaction(100, "SAR", "expense", "2024-06-02"),
    Transaction(37.5, "SAR", "income", date(2024, 7, 15)),
]


def test_summarize_converts_every_transaction() -> None:
    summary = asyncio.run(summarize(_engine(_Provider()), LEDGER, "USD"))

    assert summary.currency == "USD"
    assert summary.total_income == pytest.approx(1000 + 37.5 * 0.25)
    assert summary.total_expense == pytest.approx(100 + 20 + 25)
    assert summary.expenses_by_category == pytest.approx(
        {"Rent": 100.0, "Food": 20.0, UNCATEGORIZED: 25.0}
    )
    assert summary.balance == pytest.approx(summary.total_income - summary.total_expense)


def test_each_currency_and_day_is_resolved_once() -> None:
    provider = _Provider()
    # Three distinct (SAR, day) keys against a limit of three calls.
    asyncio.run(summarize(_engine(provider, max_calls_per_window=3), LEDGER, "USD"))

    assert sorted(provider.calls) == ["SAR", "SAR", "SAR"]


def test_empty_ledger_summarizes_to_zero() -> None:
    summary = asyncio.run(summarize(_engine(_Provider()), [], "EGP"))

    assert summary.total_income == 0.0
    assert summary.total_expense == 0.0
    assert summary.expenses_by_category == {}


def test_invalid_rows_are_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown transaction kind"):
        asyncio.run(summarize(_engine(_Provider()), [Transaction(1, "USD", "refund", date(2024, 6, 1))], "USD"))  # type: ignore[arg-type]
    with pytest.raises(InvalidAmount):
        asyncio.run(summarize(_engine(_Provider()), [Transaction(float("nan"), "USD", "income", date(2024, 6, 1))], "USD"))


def test_balance_series_daily_and_monthly() -> None:
    engine = _engine(_Provider())

    daily = asyncio.run(balance_series(engine, LEDGER, "USD"))
    assert [point.point_date for point in daily] == [date(2024, 6, 1), date(2024, 6, 2), date(2024, 7, 15)]
    assert daily[0].balance == pytest.approx(900.0)
    assert daily[1].balance == pytest.approx(855.0)
    assert daily[2].balance == pytest.approx(864.375)

    monthly = asyncio.run(balance_series(engine, LEDGER, "USD", frequency="monthly"))
    assert [point.point_date for point in monthly] == [date(2024, 6, 2), date(2024, 7, 15)]
    assert [point.balance for point in monthly] == pytest.approx([855.0, 864.375])


def test_balance_series_rejects_unknown_frequency() -> None:
    with pytest.raises(ValueError, match="frequency must be one of"):
        asyncio.run(balance_series(_engine(_Provider()), LEDGER, "USD", frequency="hourly"))
