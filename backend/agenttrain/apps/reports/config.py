# backend/agenttrain/apps/reports/config.py
"""
Report engine settings, read once from the environment.
"""

from __future__ import annotations

import os

MAX_DUE_SOON_DAYS = 365
MONTH_WINDOW_DAYS = 30

# Hard ceiling on detail rows returned to the client; env may lower it, never raise it.
MAX_ROW_LIMIT = 200


def _int_env(name: str, default: int, *, low: int, high: int) -> int:
    try:
        value = int(os.getenv(name, str(default)))
    except ValueError:
        return default
    return max(low, min(high, value))


# Look-ahead used when the prompt does not name a window.
DEFAULT_DUE_SOON_DAYS: int = _int_env("REPORT_DEFAULT_DUE_SOON_DAYS", 60, low=1, high=MAX_DUE_SOON_DAYS)

ROW_LIMIT: int = _int_env("REPORT_ROW_LIMIT", MAX_ROW_LIMIT, low=1, high=MAX_ROW_LIMIT)

MAX_PROMPT_LENGTH: int = _int_env("REPORT_MAX_PROMPT_LENGTH", 2000, low=1, high=100_000)

UNASSIGNED_JOB_TITLE = "Unassigned"
