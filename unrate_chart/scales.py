from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

import numpy as np

from unrate_chart.layout import Dimensions
from unrate_chart.series import DataPoint
from unrate_chart.timeparse import parse_time


DEFAULT_TIME_DOMAIN = (parse_time("2000-01-01"), parse_time("2019-01-01"))
DEFAULT_VALUE_DOMAIN = (0.0, 10.0)


def _as_days(value: Any) -> np.ndarray:
    arr = np.asarray(value, dtype="datetime64[D]")
    return np.where(np.isnat(arr), np.nan, arr.astype(np.int64).astype(np.float64))


def _round_half_up(values: np.ndarray) -> np.ndarray:
    # Half-up like screen-pixel rounding, not numpy's half-to-even.
    return np.floor(values + 0.5)


def _finish(out: np.ndarray, like: Any) -> float | np.ndarray:
    if np.ndim(like) == 0:
        return float(out)
    return out


@dataclass(frozen=True)
class LinearScale:
    """Linear map from a numeric domain onto a pixel range, without clamping."""

    domain: tuple[float, float]
    range: tuple[float, float]
    round: bool = True

    def __post_init__(self) -> None:
        if self.domain[0] == self.domain[1]:
            raise ValueError("scale domain must not be degenerate")

    def __call__(self, value: Any) -> float | np.ndarray:
        x = np.asarray(value, dtype=np.float64)
        d0, d1 = float(self.domain[0]), float(self.domain[1])
        r0, r1 = float(self.range[0]), float(self.range[1])
        out = r0 + (x - d0) / (d1 - d0) * (r1 - r0)
        if self.round:
            out = _round_half_up(out)
        return _finish(out, value)

    def ticks(self, count: int) -> np.ndarray:
        lo, hi = sorted((float(self.domain[0]), float(self.domain[1])))
        return linear_ticks(lo, hi, count)


@dataclass(frozen=True)
class TimeScale:
    """Linear map from calendar days onto a pixel range; ``NaT`` maps to ``nan``."""

    domain: tuple[np.datetime64, np.datetime64]
    range: tuple[float, float]
    round: bool = True

    def __post_init__(self) -> None:
        d0, d1 = _as_days(list(self.domain))
        if not (np.isfinite(d0) and np.isfinite(d1)):
            raise ValueError("time scale domain must be valid dates")
        if d0 == d1:
            raise ValueError("scale domain must not be degenerate")

    def __call__(self, value: Any) -> float | np.ndarray:
        x = _as_days(value)
        d0, d1 = _as_days(list(self.domain))
        r0, r1 = float(self.range[0]), float(self.range[1])
        out = r0 + (x - d0) / (d1 - d0) * (r1 - r0)
        if self.round:
            out = _round_half_up(out)
        return _finish(out, value)


def format_px(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    out = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if out == "-0" else out


@dataclass(frozen=True)
class LineGenerator:
    x: TimeScale
    y: LinearScale

    def coordinates(self, points: Sequence[DataPoint]) -> tuple[np.ndarray, np.ndarray]:
        dates = np.asarray([p.date for p in points], dtype="datetime64[D]")
        values = np.asarray([p.value for p in points], dtype=np.float64)
        return np.asarray(self.x(dates), dtype=np.float64), np.asarray(self.y(values), dtype=np.float64)

    def __call__(self, points: Sequence[DataPoint]) -> str | None:
        """Build an SVG path; non-finite points break the line into subpaths."""

        if not points:
            return None
        xs, ys = self.coordinates(points)
        parts: list[str] = []
        pen_down = False
        for x, y in zip(xs.tolist(), ys.tolist(), strict=True):
            if not (np.isfinite(x) and np.isfinite(y)):
                pen_down = False
                continue
            cmd = "L" if pen_down else "M"
            parts.append(f"{cmd}{format_px(x)},{format_px(y)}")
            pen_down = True
        if not parts:
            return None
        return "".join(parts)


@dataclass(frozen=True)
class Scales:
    time: TimeScale
    value: LinearScale
    line: LineGenerator


def build_scales(
    dims: Dimensions,
    *,
    time_domain: tuple[np.datetime64, np.datetime64] = DEFAULT_TIME_DOMAIN,
    value_domain: tuple[float, float] = DEFAULT_VALUE_DOMAIN,
) -> Scales:
    time = TimeScale(domain=time_domain, range=(0.0, float(dims.width)))
    value = LinearScale(domain=value_domain, range=(float(dims.height), 0.0))
    return Scales(time=time, value=value, line=LineGenerator(x=time, y=value))


def linear_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Nice round ticks covering ``[vmin, vmax]``, about ``target`` of them."""

    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    step = _tick_step((vmax - vmin) / target)
    tick_min = np.ceil(vmin / step - 1e-9) * step
    tick_max = np.floor(vmax / step + 1e-9) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    decimals = _decimals_from_step(step) if step is not None else 6
    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


_STEP_10 = np.sqrt(50.0)
_STEP_5 = np.sqrt(10.0)
_STEP_2 = np.sqrt(2.0)


def _tick_step(raw_step: float) -> float:
    exp = np.floor(np.log10(raw_step))
    frac = raw_step / (10**exp)

    if frac >= _STEP_10:
        nice_frac = 10.0
    elif frac >= _STEP_5:
        nice_frac = 5.0
    elif frac >= _STEP_2:
        nice_frac = 2.0
    else:
        nice_frac = 1.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
