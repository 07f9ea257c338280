"""Runtime settings for the pricing engine: seed location, money rounding, logging."""

from __future__ import annotations

import logging
import os
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SEED_PATH = Path(os.getenv("CART_SEED_PATH", BASE_DIR / "data" / "seed.json"))

LOG_LEVEL = os.getenv("CART_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Totals are reported in whole cents.
MONEY_QUANTUM = Decimal("0.01")
MONEY_ROUNDING = ROUND_HALF_UP


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
