"""Aggregated views over ledger transactions in a single display currency."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from fx_ledger.currency import Currency
from fx_ledger.models import Transaction
from fx_ledger.rates.engine import ConversionEngine, ensure_finite_amount
from fx_ledger.utils.date_range import normalise_frequency, select_period_ends
from fx_ledger.utils.dates import to_rate_date

UNCATEGORIZED = "Uncategorized"
_KINDS = {"income", "expense"}


@dataclass(slots=True)
class LedgerSummary:
    """Income/expense totals converted into ``currency``."""

    currency: Currency
    total_income: float = 0.0
    total_expense: float = 0.0
    expenses_by_category: dict[str, float] = field(default_factory=dict)

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense


@dataclass(slots=True, frozen=True)
class BalancePoint:
    point_date: date
    balance: float


async def convert_transactions(
    engine: ConversionEngine,
    transactions: Sequence[Transaction],
    preferred: Currency | str,
) -> list[float]:
    """Return every transaction amount expressed in ``preferred``.

    Rates are resolved once per distinct ``(currency, day)`` pair, all pairs
    concurrently, so a long ledger does not burn through the provider limit.
    """

    target = Currency.parse(preferred)
    keys: list[tuple[Currency, date]] = []
    amounts: list[float] = []
    for transaction in transactions:
        if transaction.kind not in _KINDS:
            raise ValueError(f"Unknown transaction kind: {transaction.kind!r}")
        amounts.append(ensure_finite_amount(transaction.amount))
        keys.append((Currency.parse(transaction.currency), to_rate_date(transaction.date)))

    unique_keys = list(dict.fromkeys(keys))
    rates = await asyncio.gather(
        *(engine.get_exchange_rate(currency, target, day) for currency, day in unique_keys)
    )
    rate_by_key = dict(zip(unique_keys, rates))
    return [amount * rate_by_key[key] for amount, key in zip(amounts, keys)]


async def summarize(
    engine: ConversionEngine,
    transactions: Iterable[Transaction],
    preferred: Currency | str,
) -> LedgerSummary:
    """Total income and expenses, and break expenses down by category."""

    rows = list(transactions)
    converted = await convert_transactions(engine, rows, preferred)
    summary = LedgerSummary(currency=Currency.parse(preferred))
    for transaction, amount in zip(rows, converted):
        if transaction.kind == "income":
            summary.total_income += amount
            continue
        summary.total_expense += amount
        category = transaction.category or UNCATEGORIZED
        summary.expenses_by_category[category] = (
            summary.expenses_by_category.get(category, 0.0) + amount
        )
    return summary


async def balance_series(
    engine: ConversionEngine,
    transactions: Iterable[Transaction],
    preferred: Currency | str,
    frequency: str = "daily",
) -> list[BalancePoint]:
    """Running balance after each day, sampled at the end of each period."""

    freq = normalise_frequency(frequency)
    rows = list(transactions)
    converted = await convert_transactions(engine, rows, preferred)

    changes: dict[date, float] = {}
    for transaction, amount in zip(rows, converted):
        day = to_rate_date(transaction.date)
        signed = amount if transaction.kind == "income" else -amount
        changes[day] = changes.get(day, 0.0) + signed

    running = 0.0
    balances: dict[date, float] = {}
    for day in sorted(changes):
        running += changes[day]
        balances[day] = running
    return [BalancePoint(day, balances[day]) for day in select_period_ends(list(balances), freq)]


__all__ = [
    "BalancePoint",
    "LedgerSummary",
    "UNCATEGORIZED",
    "balance_series",
    "convert_transactions",
    "summarize",
]
