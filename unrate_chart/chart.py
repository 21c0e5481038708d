from __future__ import annotations

from dataclasses import dataclass
import enum
import logging
from typing import Mapping, Sequence
import xml.etree.ElementTree as ET

from unrate_chart.config import DEFAULT_CONFIG, ChartConfig
from unrate_chart.document import HostDocument
from unrate_chart.errors import ChartLoadError, ChartStateError
from unrate_chart.layout import Dimensions, Margin, compute_dimensions
from unrate_chart.loader import load_dataset, load_dataset_async
from unrate_chart.render import ChartElements, append_elements, update_elements
from unrate_chart.scales import Scales, build_scales
from unrate_chart.series import Series, build_series

LOGGER = logging.getLogger(__name__)


class ChartPhase(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


@dataclass
class ChartState:
    """Everything one chart needs between update passes."""

    config: ChartConfig
    document: HostDocument
    series: tuple[Series, ...] = ()
    dims: Dimensions | None = None
    scales: Scales | None = None
    elements: ChartElements | None = None
    phase: ChartPhase = ChartPhase.UNINITIALIZED

    @property
    def colors(self) -> dict[str, str]:
        return self.config.colors

    @property
    def margin(self) -> Margin:
        return self.config.margin


class Chart:
    def __init__(self, document: HostDocument, config: ChartConfig = DEFAULT_CONFIG) -> None:
        self.state = ChartState(config=config, document=document)
        self.update_count = 0

    @property
    def phase(self) -> ChartPhase:
        return self.state.phase

    @property
    def series(self) -> tuple[Series, ...]:
        return self.state.series

    @property
    def elements(self) -> ChartElements:
        if self.state.elements is None:
            raise ChartStateError("chart has not been initialized")
        return self.state.elements

    def start(self) -> None:
        """Load the configured dataset and draw; a failed load raises ``ChartLoadError``."""

        load_dataset(self.state.config.data_source, self._on_loaded)

    async def start_async(self) -> None:
        result = await load_dataset_async(self.state.config.data_source)
        self.init(result.unwrap())

    def _on_loaded(self, error: Exception | None, rows: Sequence[Mapping[str, str]] | None) -> None:
        if error is not None:
            raise ChartLoadError(f"failed to load dataset {self.state.config.data_source}: {error}") from error
        self.init(rows or [])

    def init(self, rows: Sequence[Mapping[str, str]]) -> None:
        if self.state.phase is ChartPhase.READY:
            raise ChartStateError("chart is already initialized")
        state = self.state
        state.series = build_series(rows, state.config.series)
        container = state.document.query_selector(state.config.selector)
        state.elements = append_elements(state, container)
        state.phase = ChartPhase.READY
        LOGGER.info("chart initialized with %d series of %d rows", len(state.series), len(rows))
        self.update()

    def update(self) -> None:
        if self.state.phase is not ChartPhase.READY:
            raise ChartStateError("update() called before init()")
        self.set_dimensions()
        self.set_scales()
        update_elements(self.state)
        self.update_count += 1
        LOGGER.debug("update #%d at %dx%d", self.update_count, self.state.dims.width, self.state.dims.height)

    def set_dimensions(self) -> Dimensions:
        state = self.state
        container = state.document.query_selector(state.config.selector)
        state.dims = compute_dimensions(container, state.config.margin)
        return state.dims

    def set_scales(self) -> Scales:
        state = self.state
        if state.dims is None:
            raise ChartStateError("dimensions must be set before scales")
        state.scales = build_scales(
            state.dims,
            time_domain=state.config.time_domain,
            value_domain=state.config.value_domain,
        )
        return state.scales

    def to_svg(self) -> str:
        return ET.tostring(self.elements.svg, encoding="unicode")
