"""Display formatting for monetary amounts."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from fx_ledger.currency import Currency

NBSP = "\u00a0"

# en-US renders a narrow symbol only for a handful of currencies; everything
# else is shown as its ISO code followed by a non-breaking space.
_EN_US_SYMBOLS: dict[Currency, str] = {
    Currency.USD: "$",
}


def currency_symbol(currency: Currency | str) -> str:
    """Return the en-US display prefix for ``currency``."""

    resolved = Currency.parse(currency)
    return _EN_US_SYMBOLS.get(resolved, f"{resolved.value}{NBSP}")


def format_amount(amount: float | int | Decimal, currency: Currency | str) -> str:
    """Format ``amount`` the way en-US currency formatting does.

    Examples: ``format_amount(1234.5, "USD") == "$1,234.50"`` and
    ``format_amount(-5, "EGP") == "-EGP\\u00a05.00"``. Non-finite amounts are
    rendered as their float text rather than raising.
    """

    prefix = currency_symbol(currency)
    value = float(amount)
    if not math.isfinite(value):
        return f"{prefix}{value}"
    quantised = Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantised < 0 else ""
    return f"{sign}{prefix}{abs(quantised):,.2f}"


__all__ = ["NBSP", "currency_symbol", "format_amount"]
