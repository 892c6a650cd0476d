# task_autofit/config.py
"""
Defaults and environment-driven tunables.

Settings that belong to a user (durations, working hours, visible range) live in
models.Settings; this module only holds the fallbacks for those and a few
process-level knobs read from the environment:

- AUTOFIT_SLOT_INTERVAL_MINUTES: calendar slot granularity used to round "now" (default 15)
- AUTOFIT_MAX_DST_COERCE_MINUTES: how far a nonexistent wall time may be pushed forward (default 180)
- AUTOFIT_LOG_LEVEL: logging level for the web wrapper / smoke script (default INFO)
- AUTOFIT_CORS_ORIGINS: comma-separated origins for the web wrapper (empty = "*")
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List

DEFAULT_TASK_DURATION = 30
DEFAULT_MIN_TIME_BETWEEN_TASKS = 15
DEFAULT_SLOT_MIN_TIME = "06:00"
DEFAULT_SLOT_MAX_TIME = "22:00"

DEFAULT_WORKING_HOURS: List[Dict[str, str]] = [
    {"start": "11:00", "end": "12:15"},
    {"start": "13:00", "end": "18:00"},
]

DEFAULT_SLOT_INTERVAL_MINUTES = 15
DEFAULT_MAX_DST_COERCE_MINUTES = 180

MAX_SEARCH_TEXT_LENGTH = 200
MAX_WORKING_HOURS = 20


def _read_int(name: str, default: int) -> int:
    """
    Read a positive integer from the environment.

    Missing, non-numeric or non-positive values fall back to the default.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def slot_interval_minutes() -> int:
    return _read_int("AUTOFIT_SLOT_INTERVAL_MINUTES", DEFAULT_SLOT_INTERVAL_MINUTES)


def max_dst_coerce_minutes() -> int:
    return _read_int("AUTOFIT_MAX_DST_COERCE_MINUTES", DEFAULT_MAX_DST_COERCE_MINUTES)


def cors_origins() -> List[str]:
    """
    Read AUTOFIT_CORS_ORIGINS from env.

    If empty, every origin is allowed (development default).
    """
    raw = os.getenv("AUTOFIT_CORS_ORIGINS", "").strip()
    if not raw:
        return ["*"]
    return [x.strip() for x in raw.split(",") if x.strip()]


def configure_logging() -> None:
    """
    Configure root logging from AUTOFIT_LOG_LEVEL.

    Only entry points (web wrapper, smoke script) call this; library modules just log.
    """
    level_name = os.getenv("AUTOFIT_LOG_LEVEL", "INFO").strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
