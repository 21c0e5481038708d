from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from pathlib import Path

from PIL import Image, ImageColor, ImageDraw, ImageFont

from unrate_chart.axis import axis_bottom, axis_left
from unrate_chart.chart import Chart
from unrate_chart.errors import ChartStateError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartExportBundle:
    svg: Path
    html: Path
    png: Path | None = None

    def as_dict(self) -> dict[str, str]:
        out = {"svg": str(self.svg), "html": str(self.html)}
        if self.png is not None:
            out["png"] = str(self.png)
        return out


def build_stylesheet(chart: Chart) -> str:
    cfg = chart.state.config
    return (
        f"body {{ margin: 0; background: {cfg.background}; }}\n"
        f"{cfg.selector} {{ color: {cfg.text_color}; font-family: sans-serif; }}\n"
        ".axis .domain { display: none; }\n"
        ".axis .tick line { stroke-opacity: 0.2; }\n"
        ".line-group text { font-size: 12px; }\n"
    )


def export_chart_bundle(
    chart: Chart,
    *,
    out_dir: str | Path,
    prefix: str = "unemployment",
    png: bool = True,
) -> ChartExportBundle:
    root = Path(out_dir)
    root.mkdir(parents=True, exist_ok=True)

    path_svg = root / f"{prefix}.svg"
    path_html = root / f"{prefix}.html"
    path_svg.write_text(chart.to_svg() + "\n", encoding="utf-8")

    document = chart.state.document
    document.set_stylesheet(build_stylesheet(chart))
    path_html.write_text(document.to_html() + "\n", encoding="utf-8")

    path_png: Path | None = None
    if png:
        path_png = root / f"{prefix}.png"
        render_png_preview(chart).save(path_png)

    LOGGER.info("exported chart to %s", root)
    return ChartExportBundle(svg=path_svg, html=path_html, png=path_png)


def render_png_preview(chart: Chart) -> Image.Image:
    """Rasterize the current geometry with Pillow; mirrors the SVG positions."""

    state = chart.state
    dims = state.dims
    scales = state.scales
    if dims is None or scales is None:
        raise ChartStateError("chart must be updated before export")
    cfg = state.config
    ox, oy = dims.margin.left, dims.margin.top

    image = Image.new("RGB", (max(1, dims.outer_width), max(1, dims.outer_height)), color=ImageColor.getrgb(cfg.background))
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()
    text_rgb = ImageColor.getrgb(cfg.text_color)
    grid_rgb = _mix(text_rgb, ImageColor.getrgb(cfg.background), 0.2)

    for interval in cfg.recessions:
        x0 = scales.time(interval.start)
        x1 = scales.time(interval.end)
        if _finite(x0, x1) and x1 > x0 and dims.height > 0:
            draw.rectangle([ox + x0, oy, ox + x1, oy + dims.height], fill=ImageColor.getrgb(cfg.recession_fill))

    y_model = axis_left(scales.value, count=cfg.y_tick_count, tick_size=-(dims.width + cfg.axis_offset))
    for tick in y_model.ticks:
        y = oy + tick.position
        draw.line([ox - cfg.axis_offset, y, ox + dims.width, y], fill=grid_rgb)
        _text(draw, (ox - cfg.axis_offset - 3, y), tick.label, text_rgb, font, anchor="rm")

    x_model = axis_bottom(scales.time, cfg.x_tick_values, tick_size=-cfg.x_tick_size)
    base = oy + dims.height + cfg.axis_offset
    for tick in x_model.ticks:
        x = ox + tick.position
        draw.line([x, base - cfg.x_tick_size, x, base], fill=grid_rgb)
        _text(draw, (x, base + 3), tick.label, text_rgb, font, anchor="mt")

    for series in state.series:
        color = ImageColor.getrgb(state.colors[series.identifier])
        xs, ys = scales.line.coordinates(series.points)
        run: list[tuple[float, float]] = []
        for x, y in zip(xs.tolist(), ys.tolist(), strict=True):
            if not _finite(x, y):
                _flush(draw, run, color)
                run = []
                continue
            run.append((ox + x, oy + y))
        _flush(draw, run, color)

        last = series.last_point
        if last is None:
            continue
        cx = scales.time(last.date)
        cy = scales.value(last.value)
        if not _finite(cx, cy):
            continue
        r = cfg.dot_radius
        draw.ellipse([ox + cx - r, oy + cy - r, ox + cx + r, oy + cy + r], fill=color)
        _text(draw, (ox + cx + cfg.label_offset, oy + cy), series.display_name, color, font, anchor="lm")
    return image


def _flush(draw: ImageDraw.ImageDraw, run: list[tuple[float, float]], color: tuple[int, ...]) -> None:
    if len(run) >= 2:
        draw.line(run, fill=color, width=2)
    elif len(run) == 1:
        draw.point(run, fill=color)


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def _mix(a: tuple[int, ...], b: tuple[int, ...], weight: float) -> tuple[int, int, int]:
    return tuple(int(round(a[i] * weight + b[i] * (1.0 - weight))) for i in range(3))  # type: ignore[return-value]


def _text(
    draw: ImageDraw.ImageDraw,
    xy: tuple[float, float],
    text: str,
    color: tuple[int, ...],
    font: ImageFont.ImageFont | ImageFont.FreeTypeFont,
    *,
    anchor: str,
) -> None:
    # Anchors are resolved by hand; bitmap fallback fonts do not support them.
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    w = right - left
    h = bottom - top
    x, y = xy
    if anchor[0] == "r":
        x -= w
    elif anchor[0] == "m":
        x -= w / 2.0
    if anchor[1] == "m":
        y -= h / 2.0
    draw.text((x - left, y - top), text, fill=color, font=font)
