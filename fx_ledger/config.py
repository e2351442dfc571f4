"""Runtime settings for rate resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping

DEFAULT_BASE_URL = "https://v6.exchangerate-api.com/v6"
DEFAULT_CACHE_TTL_SECONDS = 6 * 60 * 60
DEFAULT_MAX_CALLS_PER_WINDOW = 30
DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Expected a boolean value, got {raw!r}")


def _parse_optional_int(raw: str) -> int | None:
    return int(raw) if raw.strip() else None


# Environment variable -> (field, parser)
_ENV_VARS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "FX_LEDGER_API_KEY": ("api_key", str),
    "FX_LEDGER_BASE_URL": ("base_url", str),
    "FX_LEDGER_CACHE_TTL": ("cache_ttl", float),
    "FX_LEDGER_MAX_CALLS": ("max_calls_per_window", int),
    "FX_LEDGER_WINDOW_SECONDS": ("window_seconds", float),
    "FX_LEDGER_PROVIDER_TIMEOUT": ("provider_timeout", float),
    "FX_LEDGER_STALE_FALLBACK": ("stale_fallback", _parse_bool),
    "FX_LEDGER_CACHE_MAX_ENTRIES": ("cache_max_entries", _parse_optional_int),
}


@dataclass(slots=True, frozen=True)
class RateSettings:
    """Tunables for the conversion engine and its collaborators."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS
    max_calls_per_window: int = DEFAULT_MAX_CALLS_PER_WINDOW
    window_seconds: float = DEFAULT_WINDOW_SECONDS
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    stale_fallback: bool = True
    cache_max_entries: int | None = None

    def __post_init__(self) -> None:
        if self.cache_ttl <= 0:
            raise ValueError("cache_ttl must be positive")
        if self.max_calls_per_window <= 0:
            raise ValueError("max_calls_per_window must be positive")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if self.provider_timeout <= 0:
            raise ValueError("provider_timeout must be positive")
        if self.cache_max_entries is not None and self.cache_max_entries <= 0:
            raise ValueError("cache_max_entries must be positive when set")

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "RateSettings":
        """Build settings from ``FX_LEDGER_*`` variables, then apply ``overrides``."""

        source = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for env_name, (field_name, parser) in _ENV_VARS.items():
            raw = source.get(env_name)
            if raw is None:
                continue
            try:
                values[field_name] = parser(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}") from exc
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")
        values.update(overrides)
        return cls(**values)


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_MAX_CALLS_PER_WINDOW",
    "DEFAULT_PROVIDER_TIMEOUT_SECONDS",
    "DEFAULT_WINDOW_SECONDS",
    "RateSettings",
]
