"""Persistence backends for exchange rates."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH", "EXCHANGE_RATES_TABLE", "bundled_sqlite_path"]

# Resolved relative to this file so the package works from any working
# directory, including site-packages installs.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path(__file__).resolve().with_name("rates.db")

EXCHANGE_RATES_TABLE: Final[str] = "exchange_rates"


def bundled_sqlite_path() -> Path:
    """Return the absolute path to the default ``rates.db`` file."""

    return DEFAULT_SQLITE_DB_PATH
