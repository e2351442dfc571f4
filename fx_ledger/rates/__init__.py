"""Rate caching, limiting and conversion."""

from fx_ledger.rates.cache import RateCache
from fx_ledger.rates.context import RateContext
from fx_ledger.rates.engine import ConversionEngine, ensure_finite_amount
from fx_ledger.rates.limiter import SlidingWindowRateLimiter

__all__ = [
    "ConversionEngine",
    "RateCache",
    "RateContext",
    "SlidingWindowRateLimiter",
    "ensure_finite_amount",
]
