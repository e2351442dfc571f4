import asyncio
from datetime import date

from fx_ledger import FxLedger, Transaction

print(FxLedger.__version__)  # 0.1.0

# Default Usage: bundled SQLite store, settings from FX_LEDGER_* variables
fx = FxLedger()


async def main() -> None:
    # Rate for a single day
    rate = await fx.get_exchange_rate("USD", "SAR", date(2024, 6, 1))
    print(rate)
    # => 3.75

    # Converting an amount (second call is served from memory)
    converted = await fx.convert_amount(200, "USD", "SAR", date(2024, 6, 1))
    print(fx.format_amount(converted, "SAR"))
    # => SAR 750.00

    transactions = [
        Transaction(amount=5000, currency="SAR", kind="income", date=date(2024, 6, 1)),
        Transaction(amount=120, currency="USD", kind="expense", date=date(2024, 6, 2), category="Food"),
        Transaction(amount=900, currency="EGP", kind="expense", date=date(2024, 6, 9)),
    ]

    summary = await fx.summarize(transactions, preferred="USD")
    print(fx.format_amount(summary.balance, "USD"), summary.expenses_by_category)
    # => $... {'Food': 120.0, 'Uncategorized': ...}

    weekly = await fx.balance_series(transactions, preferred="USD", frequency="weekly")
    print(weekly)


asyncio.run(main())
fx.close()
