from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
from pathlib import Path
import re
from typing import Sequence

from unrate_chart.chart import Chart
from unrate_chart.config import DEFAULT_CONFIG, ChartConfig, load_config
from unrate_chart.document import HostDocument
from unrate_chart.errors import ChartError
from unrate_chart.export import export_chart_bundle

LOGGER = logging.getLogger(__name__)

_SIZE = re.compile(r"^(\d+)[xX](\d+)$")


def _pixels(value: str) -> int:
    try:
        px = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a pixel count, got {value!r}") from None
    if px < 0:
        raise argparse.ArgumentTypeError(f"pixel count must be >= 0, got {px}")
    return px


def _size(value: str) -> tuple[int, int]:
    match = _SIZE.match(value.strip())
    if not match:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}")
    return int(match.group(1)), int(match.group(2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="unrate-chart")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render the unemployment chart to SVG/HTML/PNG.")
    render.add_argument("--data", default=None, help="CSV path or URL. Default: config data_source.")
    render.add_argument("--config", type=Path, default=None, help="TOML chart config.")
    render.add_argument("--width", type=_pixels, default=None, help="Container width in px.")
    render.add_argument("--height", type=_pixels, default=None, help="Container height in px.")
    render.add_argument(
        "--resize",
        type=_size,
        action="append",
        default=[],
        metavar="WxH",
        help="Resize the container and re-run update; may be repeated.",
    )
    render.add_argument("--out-dir", type=Path, default=Path("out"))
    render.add_argument("--prefix", default="unemployment")
    render.add_argument("--no-png", action="store_true", help="Skip the Pillow PNG preview.")
    return parser


def _resolve_config(args: argparse.Namespace) -> ChartConfig:
    cfg = load_config(args.config) if args.config is not None else DEFAULT_CONFIG
    if args.data is not None:
        cfg = replace(cfg, data_source=args.data)
    return cfg


def run_render(args: argparse.Namespace) -> dict[str, object]:
    cfg = _resolve_config(args)
    width = args.width if args.width is not None else cfg.container_width
    height = args.height if args.height is not None else cfg.container_height

    document = HostDocument()
    if cfg.selector.startswith("#"):
        container = document.add_container(element_id=cfg.selector[1:], width=width, height=height)
    else:
        container = document.add_container(class_name=cfg.selector.lstrip("."), width=width, height=height)
    chart = Chart(document, cfg)
    chart.start()
    for new_width, new_height in args.resize:
        container.resize(new_width, new_height)
        chart.update()

    bundle = export_chart_bundle(chart, out_dir=args.out_dir, prefix=args.prefix, png=not args.no_png)
    dims = chart.state.dims
    assert dims is not None
    return {
        "files": bundle.as_dict(),
        "width": dims.width,
        "height": dims.height,
        "series": [s.identifier for s in chart.series],
        "updates": chart.update_count,
    }


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    if args.command == "render":
        try:
            summary = run_render(args)
        except (ChartError, FileNotFoundError) as exc:
            LOGGER.error("%s", exc)
            return 1
        print(json.dumps(summary, indent=2))
        return 0
    parser.error(f"unknown command: {args.command}")
    return 2
