"""Contract for live rate providers."""

from __future__ import annotations

from typing import Protocol

from fx_ledger.models import ProviderSnapshot


class RateProvider(Protocol):
    """Fetches the current conversion rates for a base currency.

    Implementations raise :class:`~fx_ledger.errors.ProviderError` when the
    remote side reports an error or returns something unusable, and
    :class:`~fx_ledger.errors.RateUnavailable` on transport failures. They do
    not retry.
    """

    def fetch_latest(self, base_currency: str) -> ProviderSnapshot:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateProvider"]
