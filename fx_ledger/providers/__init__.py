"""External exchange rate providers."""

from fx_ledger.providers.base import RateProvider
from fx_ledger.providers.exchangerate_api import ExchangeRateApiClient

__all__ = ["ExchangeRateApiClient", "RateProvider"]
