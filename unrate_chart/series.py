from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from unrate_chart.timeparse import is_valid_time, parse_time

LOGGER = logging.getLogger(__name__)

DATE_COLUMN = "DATE"


@dataclass(frozen=True)
class SeriesInfo:
    identifier: str
    display_name: str
    color: str


DEFAULT_SERIES: tuple[SeriesInfo, ...] = (
    SeriesInfo("UNRATE", "United States", "#f6f6f6"),
    SeriesInfo("MOUR", "State of Missouri", "#7e8083"),
    SeriesInfo("CLMUR", "Columbia, Missouri", "#f58667"),
)


@dataclass(frozen=True)
class DataPoint:
    date: np.datetime64
    value: float

    @property
    def is_valid(self) -> bool:
        return is_valid_time(self.date) and math.isfinite(self.value)


@dataclass(frozen=True)
class Series:
    identifier: str
    display_name: str
    points: tuple[DataPoint, ...]

    def __len__(self) -> int:
        return len(self.points)

    @property
    def dates(self) -> np.ndarray:
        return np.asarray([p.date for p in self.points], dtype="datetime64[D]")

    @property
    def values(self) -> np.ndarray:
        return np.asarray([p.value for p in self.points], dtype=np.float64)

    @property
    def last_point(self) -> DataPoint | None:
        # Last in source order, not the latest date.
        if not self.points:
            return None
        return self.points[-1]


def coerce_value(raw: Any) -> float:
    if raw is None:
        return math.nan
    text = str(raw).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def build_series(
    rows: Sequence[Mapping[str, str]],
    infos: Iterable[SeriesInfo] = DEFAULT_SERIES,
) -> tuple[Series, ...]:
    dates = [parse_time(row.get(DATE_COLUMN)) for row in rows]
    for index, date in enumerate(dates):
        if not is_valid_time(date):
            LOGGER.debug("row %d: unparseable %s %r", index, DATE_COLUMN, rows[index].get(DATE_COLUMN))

    out: list[Series] = []
    for info in infos:
        points: list[DataPoint] = []
        for index, row in enumerate(rows):
            value = coerce_value(row.get(info.identifier))
            if math.isnan(value):
                LOGGER.debug("row %d: no numeric %s value %r", index, info.identifier, row.get(info.identifier))
            points.append(DataPoint(date=dates[index], value=value))
        out.append(Series(identifier=info.identifier, display_name=info.display_name, points=tuple(points)))
    return tuple(out)
