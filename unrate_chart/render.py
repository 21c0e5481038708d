from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING
import xml.etree.ElementTree as ET

from unrate_chart.axis import axis_bottom, axis_left, draw_axis
from unrate_chart.document import ChartContainer
from unrate_chart.errors import ChartStateError
from unrate_chart.scales import format_px

if TYPE_CHECKING:
    from unrate_chart.chart import ChartState

SVG_NS = "http://www.w3.org/2000/svg"


@dataclass(frozen=True)
class ChartElements:
    """Handles to the rendered tree; created once, updated in place."""

    svg: ET.Element
    plot: ET.Element
    x_axis: ET.Element
    y_axis: ET.Element
    recessions: tuple[ET.Element, ...]
    line_groups: dict[str, ET.Element]
    paths: dict[str, ET.Element]
    labels: dict[str, ET.Element]
    dots: dict[str, ET.Element]


def _num(value: float) -> str:
    if not math.isfinite(value):
        return "NaN"
    return format_px(value)


def append_elements(state: "ChartState", container: ChartContainer | None) -> ChartElements:
    # Without a container the tree is built detached; the first update fails on layout.
    if container is not None:
        svg = ET.SubElement(container.element, "svg", {"xmlns": SVG_NS})
    else:
        svg = ET.Element("svg", {"xmlns": SVG_NS})
    plot = ET.SubElement(svg, "g", {"class": "chart-g"})
    x_axis = ET.SubElement(plot, "g", {"class": "axis x-axis"})
    y_axis = ET.SubElement(plot, "g", {"class": "axis y-axis"})

    recessions = tuple(
        ET.SubElement(plot, "rect", {"class": "recession", "fill": state.config.recession_fill})
        for _ in state.config.recessions
    )

    groups: dict[str, ET.Element] = {}
    paths: dict[str, ET.Element] = {}
    labels: dict[str, ET.Element] = {}
    dots: dict[str, ET.Element] = {}
    colors = state.colors
    for series in state.series:
        color = colors[series.identifier]
        group = ET.SubElement(plot, "g", {"class": f"line-group {series.identifier}"})
        groups[series.identifier] = group
        paths[series.identifier] = ET.SubElement(
            group, "path", {"fill": "none", "stroke": color, "stroke-width": "2"}
        )
        labels[series.identifier] = ET.SubElement(group, "text", {"fill": color, "dy": "0.32em"})
        dots[series.identifier] = ET.SubElement(group, "circle", {"fill": color})

    return ChartElements(
        svg=svg,
        plot=plot,
        x_axis=x_axis,
        y_axis=y_axis,
        recessions=recessions,
        line_groups=groups,
        paths=paths,
        labels=labels,
        dots=dots,
    )


def _lower(parent: ET.Element, children: tuple[ET.Element, ...]) -> None:
    for child in children:
        parent.remove(child)
    for index, child in enumerate(children):
        parent.insert(index, child)


def update_elements(state: "ChartState") -> None:
    elements = state.elements
    dims = state.dims
    scales = state.scales
    if elements is None or dims is None or scales is None:
        raise ChartStateError("update_elements requires appended elements, dimensions and scales")
    cfg = state.config
    margin = dims.margin

    elements.svg.set("width", str(dims.outer_width))
    elements.svg.set("height", str(dims.outer_height))
    elements.plot.set("transform", f"translate({margin.left},{margin.top})")

    elements.x_axis.set("transform", f"translate(0,{_num(dims.height + cfg.axis_offset)})")
    draw_axis(elements.x_axis, axis_bottom(scales.time, cfg.x_tick_values, tick_size=-cfg.x_tick_size))

    elements.y_axis.set("transform", f"translate({_num(-cfg.axis_offset)},0)")
    draw_axis(
        elements.y_axis,
        axis_left(scales.value, count=cfg.y_tick_count, tick_size=-(dims.width + cfg.axis_offset)),
    )

    for rect, interval in zip(elements.recessions, cfg.recessions, strict=True):
        x0 = scales.time(interval.start)
        x1 = scales.time(interval.end)
        rect.set("x", _num(x0))
        rect.set("y", "0")
        rect.set("width", _num(x1 - x0))
        rect.set("height", _num(dims.height))
    _lower(elements.plot, elements.recessions)

    for series in state.series:
        path = elements.paths[series.identifier]
        d = scales.line(series.points)
        if d is None:
            path.attrib.pop("d", None)
        else:
            path.set("d", d)

        label = elements.labels[series.identifier]
        dot = elements.dots[series.identifier]
        label.text = series.display_name
        last = series.last_point
        if last is None:
            continue
        cx = scales.time(last.date)
        cy = scales.value(last.value)
        label.set("x", _num(cx + cfg.label_offset))
        label.set("y", _num(cy))
        dot.set("cx", _num(cx))
        dot.set("cy", _num(cy))
        dot.set("r", _num(cfg.dot_radius))
