"""Exception taxonomy raised by the rate resolution pipeline."""

from __future__ import annotations


class FxLedgerError(RuntimeError):
    """Base class for every error raised by fx_ledger."""


class InvalidCurrency(FxLedgerError, ValueError):
    """A currency code outside the supported set was supplied."""

    def __init__(self, code: object) -> None:
        self.code = code
        super().__init__(f"Unsupported currency: {code!r}")


class InvalidAmount(FxLedgerError, ValueError):
    """An amount was not a finite number."""


class RateLimitExceeded(FxLedgerError):
    """The provider call was suppressed and no fallback rate existed."""


class ProviderError(FxLedgerError):
    """The rate provider failed to deliver a usable rate for the requested target."""


class StoreWriteError(FxLedgerError):
    """Persisting a freshly fetched rate failed. Logged, never propagated."""


class RateUnavailable(FxLedgerError):
    """Generic failure to resolve a rate (network outage, unexpected errors)."""


__all__ = [
    "FxLedgerError",
    "InvalidAmount",
    "InvalidCurrency",
    "ProviderError",
    "RateLimitExceeded",
    "RateUnavailable",
    "StoreWriteError",
]
