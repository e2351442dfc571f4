from __future__ import annotations

from decimal import Decimal

import pytest

from fx_ledger.errors import InvalidCurrency
from fx_ledger.utils.formatting import NBSP, currency_symbol, format_amount


def test_usd_uses_dollar_sign_and_two_decimals() -> None:
    assert format_amount(1234.5, "USD") == "$1,234.50"


def test_negative_amounts_render_with_leading_minus() -> None:
    assert format_amount(-5, "EGP") == f"-EGP{NBSP}5.00"
    assert format_amount(-1234.567, "USD") == "-$1,234.57"


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, f"SAR{NBSP}0.00"),
        (0.005, f"SAR{NBSP}0.01"),
        (1_000_000, f"SAR{NBSP}1,000,000.00"),
        (Decimal("12.345"), f"SAR{NBSP}12.35"),
    ],
)
def test_sar_amounts(amount: object, expected: str) -> None:
    assert format_amount(amount, "SAR") == expected  # type: ignore[arg-type]


def test_currency_symbol_lookup() -> None:
    assert currency_symbol("usd") == "$"
    assert currency_symbol("EGP") == f"EGP{NBSP}"


def test_unknown_currency_is_rejected() -> None:
    with pytest.raises(InvalidCurrency):
        format_amount(10, "EUR")


def test_non_finite_amounts_do_not_raise() -> None:
    assert format_amount(float("inf"), "USD") == "$inf"
