"""Supported currencies."""

from __future__ import annotations

from enum import Enum

from fx_ledger.errors import InvalidCurrency


class Currency(str, Enum):
    """Closed set of currencies a ledger entry or exchange rate may reference."""

    USD = "USD"
    SAR = "SAR"
    EGP = "EGP"

    @classmethod
    def parse(cls, value: "Currency | str") -> "Currency":
        """Return the enum member for ``value`` or raise :class:`InvalidCurrency`.

        Codes are matched case-insensitively after stripping whitespace, so
        ``" usd"`` resolves to :attr:`USD` while ``"EUR"`` is rejected.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidCurrency(value)
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise InvalidCurrency(value) from None

    @classmethod
    def codes(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    def __str__(self) -> str:
        return self.value


SUPPORTED_CURRENCIES: tuple[str, ...] = Currency.codes()

__all__ = ["Currency", "SUPPORTED_CURRENCIES"]
