from __future__ import annotations

from datetime import datetime
from typing import Any

import numpy as np


TIME_FORMAT = "%Y-%m-%d"
NOT_A_TIME = np.datetime64("NaT", "D")


def parse_time(text: Any) -> np.datetime64:
    """Parse a ``YYYY-MM-DD`` string into a day-precision ``datetime64``.

    Malformed input yields ``NaT`` instead of raising; callers carry it through
    and the scales map it to ``nan``.
    """

    if not isinstance(text, str):
        return NOT_A_TIME
    try:
        parsed = datetime.strptime(text.strip(), TIME_FORMAT)
    except ValueError:
        return NOT_A_TIME
    return np.datetime64(parsed.date(), "D")


def is_valid_time(value: np.datetime64) -> bool:
    return not bool(np.isnat(value))


def format_time_tick(value: np.datetime64) -> str:
    if not is_valid_time(value):
        return ""
    day = value.astype("datetime64[D]").item()
    if day.month == 1 and day.day == 1:
        return f"{day.year:d}"
    if day.day == 1:
        return day.strftime("%B")
    return day.strftime("%b %d")
