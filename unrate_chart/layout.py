from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from unrate_chart.errors import ChartMountError


class Measurable(Protocol):
    @property
    def offset_width(self) -> int:
        ...

    @property
    def offset_height(self) -> int:
        ...


@dataclass(frozen=True)
class Margin:
    top: int = 30
    right: int = 140
    bottom: int = 40
    left: int = 50

    @property
    def horizontal(self) -> int:
        return self.left + self.right

    @property
    def vertical(self) -> int:
        return self.top + self.bottom


DEFAULT_MARGIN = Margin()


@dataclass(frozen=True)
class Dimensions:
    """Drawable plot area in pixels (container size minus margins)."""

    width: int
    height: int
    margin: Margin = DEFAULT_MARGIN

    @property
    def outer_width(self) -> int:
        return self.width + self.margin.horizontal

    @property
    def outer_height(self) -> int:
        return self.height + self.margin.vertical


def compute_dimensions(container: Measurable | None, margin: Margin = DEFAULT_MARGIN) -> Dimensions:
    # Re-measured on every call; the container may have been resized since.
    if container is None:
        raise ChartMountError("chart container not found in hosting document")
    width = int(container.offset_width) - margin.horizontal
    height = int(container.offset_height) - margin.vertical
    return Dimensions(width=width, height=height, margin=margin)
