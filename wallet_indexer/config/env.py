"""
Environment variable loading for the wallet indexer.

- Loads .env from the project root when available.
- Typed readers with defaults; malformed numeric values fall back to the default.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from wallet_indexer.indexer_logging import get_logger

logger = get_logger(__name__)

# Project root: config is wallet_indexer/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_indexer_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("env_invalid_int", name=name, value=raw, default=default)
        return default


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("env_invalid_float", name=name, value=raw, default=default)
        return default


def mask_secret(value: str, visible: int = 3) -> str:
    """Return the first few characters of a secret followed by '...' (for startup logs)."""
    if not value:
        return ""
    return value[:visible] + "..."
