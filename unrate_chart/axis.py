from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Sequence
import xml.etree.ElementTree as ET

import numpy as np

from unrate_chart.scales import LinearScale, TimeScale, format_px, format_ticks
from unrate_chart.timeparse import format_time_tick


AxisOrient = Literal["bottom", "left"]

# Half-pixel shift keeps 1px strokes on device pixels.
CRISP_OFFSET = 0.5
DEFAULT_TICK_SIZE_OUTER = 6.0
DEFAULT_TICK_PADDING = 3.0


@dataclass(frozen=True)
class AxisTick:
    position: float
    label: str


@dataclass(frozen=True)
class AxisModel:
    orient: AxisOrient
    ticks: tuple[AxisTick, ...]
    range: tuple[float, float]
    tick_size_inner: float
    tick_size_outer: float = DEFAULT_TICK_SIZE_OUTER
    tick_padding: float = DEFAULT_TICK_PADDING

    @property
    def positions(self) -> list[float]:
        return [t.position for t in self.ticks]

    @property
    def labels(self) -> list[str]:
        return [t.label for t in self.ticks]


def axis_bottom(
    scale: TimeScale,
    tick_values: Sequence[np.datetime64],
    *,
    tick_size: float,
    formatter: Callable[[np.datetime64], str] = format_time_tick,
) -> AxisModel:
    ticks = tuple(AxisTick(position=float(scale(value)), label=formatter(value)) for value in tick_values)
    return AxisModel(orient="bottom", ticks=ticks, range=scale.range, tick_size_inner=tick_size)


def axis_left(
    scale: LinearScale,
    *,
    count: int,
    tick_size: float,
    suffix: str = "%",
) -> AxisModel:
    values = scale.ticks(count)
    labels = format_ticks(values)
    ticks = tuple(
        AxisTick(position=float(scale(float(v))), label=f"{label}{suffix}")
        for v, label in zip(values.tolist(), labels, strict=True)
    )
    return AxisModel(orient="left", ticks=ticks, range=scale.range, tick_size_inner=tick_size)


def _domain_path(model: AxisModel) -> str:
    r0 = format_px(float(model.range[0]) + CRISP_OFFSET)
    r1 = format_px(float(model.range[1]) + CRISP_OFFSET)
    if model.orient == "bottom":
        outer = format_px(model.tick_size_outer)
        return f"M{r0},{outer}V{CRISP_OFFSET}H{r1}V{outer}"
    outer = format_px(-model.tick_size_outer)
    return f"M{outer},{r0}H{CRISP_OFFSET}V{r1}H{outer}"


def draw_axis(group: ET.Element, model: AxisModel) -> None:
    """Replace the contents of an axis group with ticks for ``model``."""

    for child in list(group):
        group.remove(child)
    group.set("fill", "none")
    group.set("font-size", "10")
    group.set("font-family", "sans-serif")
    group.set("text-anchor", "middle" if model.orient == "bottom" else "end")

    ET.SubElement(group, "path", {"class": "domain", "stroke": "currentColor", "d": _domain_path(model)})

    spacing = max(model.tick_size_inner, 0.0) + model.tick_padding
    for tick in model.ticks:
        if not np.isfinite(tick.position):
            continue
        pos = format_px(tick.position + CRISP_OFFSET)
        if model.orient == "bottom":
            tick_g = ET.SubElement(group, "g", {"class": "tick", "opacity": "1", "transform": f"translate({pos},0)"})
            ET.SubElement(tick_g, "line", {"stroke": "currentColor", "y2": format_px(model.tick_size_inner)})
            text = ET.SubElement(tick_g, "text", {"fill": "currentColor", "y": format_px(spacing), "dy": "0.71em"})
        else:
            tick_g = ET.SubElement(group, "g", {"class": "tick", "opacity": "1", "transform": f"translate(0,{pos})"})
            ET.SubElement(tick_g, "line", {"stroke": "currentColor", "x2": format_px(-model.tick_size_inner)})
            text = ET.SubElement(tick_g, "text", {"fill": "currentColor", "x": format_px(-spacing), "dy": "0.32em"})
        text.text = tick.label
