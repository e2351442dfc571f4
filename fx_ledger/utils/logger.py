"""Logging helpers shared by every fx_ledger module."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL_ENV = "FX_LEDGER_LOG_LEVEL"

_configured = False


def _resolve_level() -> int:
    raw = os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(raw)
    # ``getLevelName`` echoes unknown names back as "Level X" strings.
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = "fx_ledger") -> logging.Logger:
    """Return ``logging.getLogger(name)``, configuring the root handler once.

    The level defaults to INFO and can be overridden through the
    ``FX_LEDGER_LOG_LEVEL`` environment variable (``DEBUG`` surfaces cache hits).
    """
    global _configured
    if not _configured:
        logging.basicConfig(level=_resolve_level(), format=LOG_FORMAT)
        _configured = True
    return logging.getLogger(name)


__all__ = ["LOG_FORMAT", "LOG_LEVEL_ENV", "get_logger"]
