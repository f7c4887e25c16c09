"""Runtime configuration for fintrack.

Paths and defaults are module constants that can be overridden through
environment variables, so the Streamlit app and the tests can point the
store somewhere else without code changes.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

STORE_PATH = Path(
    os.getenv("FINTRACK_STORE_PATH", DATA_DIR / "fintrack.json")
).resolve()

LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()

CURRENCY_SYMBOL = os.getenv("FINTRACK_CURRENCY_SYMBOL", "$")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create the data directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    STORE_PATH.parent.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL), logging.INFO),
        format=LOG_FORMAT,
    )
