"""Client for the ExchangeRate-API ``/latest`` endpoint."""

from __future__ import annotations

import math
from typing import Any

import requests

from fx_ledger.config import DEFAULT_BASE_URL, DEFAULT_PROVIDER_TIMEOUT_SECONDS
from fx_ledger.errors import ProviderError, RateUnavailable
from fx_ledger.models import ProviderSnapshot
from fx_ledger.utils.logger import get_logger

LOGGER = get_logger(__name__)


class ExchangeRateApiClient:
    """Fetch ``GET {base_url}/{api_key}/latest/{base}`` and validate the payload."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def latest_url(self, base_currency: str) -> str:
        return f"{self.base_url}/{self.api_key}/latest/{base_currency}"

    def fetch_latest(self, base_currency: str) -> ProviderSnapshot:
        """Return all conversion rates for ``base_currency``."""

        if not self.api_key:
            raise ProviderError("No API key configured for the exchange rate provider")
        url = self.latest_url(base_currency)
        LOGGER.info("Fetching latest rates for %s", base_currency)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as exc:
            raise ProviderError(f"Rate provider timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise RateUnavailable(f"Rate provider unreachable: {exc}") from exc

        # Error payloads come back with 4xx statuses, so read the body first.
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                f"Rate provider returned an unparseable response (HTTP {response.status_code})"
            ) from exc
        return self.parse_payload(base_currency, payload)

    @staticmethod
    def parse_payload(base_currency: str, payload: Any) -> ProviderSnapshot:
        if not isinstance(payload, dict):
            raise ProviderError("Rate provider response is not a JSON object")
        result = payload.get("result")
        if result == "error":
            raise ProviderError(f"API Error: {payload.get('error-type', 'unknown')}")
        if result != "success":
            raise ProviderError(f"Unexpected provider result: {result!r}")
        raw_rates = payload.get("conversion_rates")
        if not isinstance(raw_rates, dict):
            raise ProviderError("Rate provider response has no conversion_rates mapping")

        rates: dict[str, float] = {}
        for code, value in raw_rates.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            number = float(value)
            if math.isfinite(number) and number > 0:
                rates[str(code).upper()] = number
        return ProviderSnapshot(base=base_currency, rates=rates)

    def close(self) -> None:  # pragma: no cover - trivial
        self.session.close()

    def __enter__(self) -> "ExchangeRateApiClient":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["ExchangeRateApiClient"]
