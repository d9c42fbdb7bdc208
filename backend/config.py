"""
Centralized configuration for the Tax Calculator backend.

Single source of truth for:
  - Database path and connection management
  - Engine-wide constants (fallback brackets, code formats)
  - Logging configuration
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

# ─── Database ────────────────────────────────────────────────────────────────

DB_PATH = Path(
    os.environ.get("TAX_CALCULATOR_DB", Path(__file__).parent / "tax_calculator.db")
)


@contextmanager
def get_db(db_path: Optional[Union[str, Path]] = None):
    """
    Context-managed database connection.

    Usage:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT ...")

    The connection is automatically closed when the block exits,
    even if an exception occurs. Pending writes are committed only
    when the block exits cleanly.
    """
    conn = sqlite3.connect(db_path or DB_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


# ─── Engine Constants ────────────────────────────────────────────────────────

# ISO-4217-like currency codes: three letters
CURRENCY_CODE_PATTERN = r"^[A-Z]{3}$"

# Generic approximation for jurisdictions without a modeled strategy.
# (lower, upper, rate); upper None means unbounded.
FALLBACK_BRACKETS = [
    (0, 12_000, 0.0),
    (12_000, None, 0.25),
]
FALLBACK_CODE = "GENERIC"

# Order in which components are trimmed when total tax would exceed gross income
CLAMP_ORDER = (
    "other_deductions",
    "health_contributions",
    "social_contributions",
    "local_tax",
    "regional_tax",
    "federal_or_national_tax",
)


# ─── Logging ─────────────────────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level=logging.INFO):
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance."""
    return logging.getLogger(name)
