from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import re
import tomllib
from typing import Any, Mapping

import numpy as np

from unrate_chart.errors import ChartConfigError
from unrate_chart.layout import DEFAULT_MARGIN, Margin
from unrate_chart.recessions import RECESSIONS, RecessionInterval
from unrate_chart.scales import DEFAULT_TIME_DOMAIN, DEFAULT_VALUE_DOMAIN
from unrate_chart.series import DEFAULT_SERIES, SeriesInfo
from unrate_chart.timeparse import is_valid_time, parse_time

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")

DEFAULT_X_TICKS = (parse_time("2000-01-01"), parse_time("2010-01-01"), parse_time("2019-01-01"))


@dataclass(frozen=True)
class ChartConfig:
    data_source: str = "data/fredgraph.csv"
    selector: str = ".chart"
    container_width: int = 960
    container_height: int = 500
    margin: Margin = DEFAULT_MARGIN
    series: tuple[SeriesInfo, ...] = DEFAULT_SERIES
    recessions: tuple[RecessionInterval, ...] = RECESSIONS
    time_domain: tuple[np.datetime64, np.datetime64] = DEFAULT_TIME_DOMAIN
    value_domain: tuple[float, float] = DEFAULT_VALUE_DOMAIN
    x_tick_values: tuple[np.datetime64, ...] = DEFAULT_X_TICKS
    x_tick_size: float = 20.0
    y_tick_count: int = 5
    axis_offset: float = 20.0
    label_offset: float = 10.0
    dot_radius: float = 4.0
    background: str = "#1d1f23"
    recession_fill: str = "#34373d"
    text_color: str = "#d0d4da"

    @property
    def colors(self) -> dict[str, str]:
        return {info.identifier: info.color for info in self.series}

    @property
    def display_names(self) -> dict[str, str]:
        return {info.identifier: info.display_name for info in self.series}


DEFAULT_CONFIG = ChartConfig()

_CHART_KEYS = {
    "data_source",
    "selector",
    "width",
    "height",
    "background",
    "recession_fill",
    "text_color",
    "dot_radius",
    "label_offset",
}
_TOP_LEVEL = {"chart", "margin", "series", "recessions", "domain"}


def validate_color(value: Any, key: str) -> str:
    if not isinstance(value, str) or not _HEX_COLOR.match(value):
        raise ChartConfigError(f"`{key}` must be a hex color (#RRGGBB or #RRGGBBAA)")
    return value


def load_config(path: str | Path) -> ChartConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"chart config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ChartConfigError(f"invalid TOML in {config_path}: {exc}") from exc
    return config_from_mapping(raw)


def config_from_mapping(raw: Mapping[str, Any], base: ChartConfig = DEFAULT_CONFIG) -> ChartConfig:
    unknown = set(raw) - _TOP_LEVEL
    if unknown:
        raise ChartConfigError(f"unknown config section(s): {', '.join(sorted(unknown))}")

    chart = _section(raw, "chart")
    bad = set(chart) - _CHART_KEYS
    if bad:
        raise ChartConfigError(f"unknown [chart] key(s): {', '.join(sorted(bad))}")
    updates: dict[str, Any] = {}
    for key in ("data_source", "selector"):
        if key in chart:
            updates[key] = _non_empty_str(chart[key], f"chart.{key}")
    if "width" in chart:
        updates["container_width"] = _non_negative_int(chart["width"], "chart.width")
    if "height" in chart:
        updates["container_height"] = _non_negative_int(chart["height"], "chart.height")
    for key in ("background", "recession_fill", "text_color"):
        if key in chart:
            updates[key] = validate_color(chart[key], f"chart.{key}")
    for key in ("dot_radius", "label_offset"):
        if key in chart:
            updates[key] = _number(chart[key], f"chart.{key}")

    margin = _section(raw, "margin")
    if margin:
        bad = set(margin) - {"top", "right", "bottom", "left"}
        if bad:
            raise ChartConfigError(f"unknown [margin] key(s): {', '.join(sorted(bad))}")
        updates["margin"] = Margin(
            **{key: _non_negative_int(margin.get(key, getattr(base.margin, key)), f"margin.{key}") for key in ("top", "right", "bottom", "left")}
        )

    if "series" in raw:
        updates["series"] = _parse_series(raw["series"])
    if "recessions" in raw:
        updates["recessions"] = _parse_recessions(raw["recessions"])

    domain = _section(raw, "domain")
    if "time" in domain:
        start, end = _pair(domain["time"], "domain.time")
        time_domain = (_date(start, "domain.time"), _date(end, "domain.time"))
        if time_domain[0] == time_domain[1]:
            raise ChartConfigError("`domain.time` start and end must differ")
        updates["time_domain"] = time_domain
    if "value" in domain:
        lo, hi = _pair(domain["value"], "domain.value")
        value_domain = (_number(lo, "domain.value"), _number(hi, "domain.value"))
        if value_domain[0] == value_domain[1]:
            raise ChartConfigError("`domain.value` bounds must differ")
        updates["value_domain"] = value_domain

    return replace(base, **updates)


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name, {})
    if not isinstance(value, Mapping):
        raise ChartConfigError(f"[{name}] must be a table")
    return value


def _parse_series(value: Any) -> tuple[SeriesInfo, ...]:
    if not isinstance(value, list) or not value:
        raise ChartConfigError("[[series]] must be a non-empty array of tables")
    out: list[SeriesInfo] = []
    seen: set[str] = set()
    for index, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise ChartConfigError(f"series[{index}] must be a table")
        try:
            identifier = _non_empty_str(item["id"], f"series[{index}].id")
            name = _non_empty_str(item["name"], f"series[{index}].name")
            color = validate_color(item["color"], f"series[{index}].color")
        except KeyError as exc:
            raise ChartConfigError(f"series[{index}] missing required field: {exc.args[0]}") from exc
        if identifier in seen:
            raise ChartConfigError(f"duplicate series id: {identifier}")
        seen.add(identifier)
        out.append(SeriesInfo(identifier=identifier, display_name=name, color=color))
    return tuple(out)


def _parse_recessions(value: Any) -> tuple[RecessionInterval, ...]:
    if not isinstance(value, list):
        raise ChartConfigError("[[recessions]] must be an array of tables")
    out: list[RecessionInterval] = []
    for index, item in enumerate(value):
        if not isinstance(item, Mapping) or "start" not in item or "end" not in item:
            raise ChartConfigError(f"recessions[{index}] needs `start` and `end`")
        out.append(
            RecessionInterval(
                start=_date(item["start"], f"recessions[{index}].start"),
                end=_date(item["end"], f"recessions[{index}].end"),
            )
        )
    return tuple(out)


def _date(value: Any, key: str) -> np.datetime64:
    # tomllib hands back datetime.date for bare TOML dates.
    text = value.isoformat() if hasattr(value, "isoformat") else value
    parsed = parse_time(text)
    if not is_valid_time(parsed):
        raise ChartConfigError(f"`{key}` must be a YYYY-MM-DD date")
    return parsed


def _pair(value: Any, key: str) -> tuple[Any, Any]:
    if not isinstance(value, list) or len(value) != 2:
        raise ChartConfigError(f"`{key}` must be a two-element array")
    return value[0], value[1]


def _non_empty_str(value: Any, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ChartConfigError(f"`{key}` must be a non-empty string")
    return value


def _non_negative_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ChartConfigError(f"`{key}` must be a non-negative integer")
    return value


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ChartConfigError(f"`{key}` must be a number")
    return float(value)
