from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from unrate_chart.timeparse import parse_time


@dataclass(frozen=True)
class RecessionInterval:
    start: np.datetime64
    end: np.datetime64

    @classmethod
    def from_strings(cls, start: str, end: str) -> "RecessionInterval":
        return cls(start=parse_time(start), end=parse_time(end))


RECESSIONS: tuple[RecessionInterval, ...] = (
    RecessionInterval.from_strings("2001-03-01", "2001-11-30"),
    RecessionInterval.from_strings("2007-12-01", "2009-06-30"),
)
