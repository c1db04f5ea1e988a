"""Configuration for the budget tracker.

Values come from environment variables with sensible defaults so that the
Streamlit app and the tests can run without any setup.
"""

import logging
import os
from decimal import Decimal
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


DATA_DIR = Path(os.getenv("BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))

# Read-only demo data loaded into a fresh session; empty string disables it
SEED_PATH = os.getenv("BUDGET_SEED_PATH", str(DATA_DIR / "seed.json"))

LOG_LEVEL = os.getenv("BUDGET_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

CURRENCY = os.getenv("BUDGET_CURRENCY", "$")

# Percentage-used thresholds for the status tiers
WARNING_THRESHOLD = Decimal(os.getenv("BUDGET_WARNING_THRESHOLD", "75"))
CRITICAL_THRESHOLD = Decimal(os.getenv("BUDGET_CRITICAL_THRESHOLD", "90"))

ALLOW_ORPHAN_EXPENSES = _env_flag("BUDGET_ALLOW_ORPHAN_EXPENSES")

DEMO_USER_EMAIL = os.getenv("BUDGET_DEMO_USER_EMAIL", "demo@example.com")


def get_seed_path():
    """Seed file path, or None when seeding is disabled or the file is missing."""
    if not SEED_PATH:
        return None
    path = Path(SEED_PATH)
    return path if path.exists() else None


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the app process."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level or LOG_LEVEL)
        return
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
