from unrate_chart.chart import Chart, ChartPhase, ChartState
from unrate_chart.config import ChartConfig, load_config
from unrate_chart.document import ChartContainer, HostDocument
from unrate_chart.errors import ChartConfigError, ChartError, ChartLoadError, ChartMountError, ChartStateError
from unrate_chart.loader import LoadResult, load_dataset, load_dataset_async, read_rows
from unrate_chart.recessions import RECESSIONS, RecessionInterval
from unrate_chart.scales import LinearScale, LineGenerator, TimeScale, build_scales
from unrate_chart.series import DataPoint, Series, SeriesInfo, build_series
from unrate_chart.timeparse import parse_time

__all__ = [
    "Chart",
    "ChartConfig",
    "ChartConfigError",
    "ChartContainer",
    "ChartError",
    "ChartLoadError",
    "ChartMountError",
    "ChartPhase",
    "ChartState",
    "ChartStateError",
    "DataPoint",
    "HostDocument",
    "LineGenerator",
    "LinearScale",
    "LoadResult",
    "RECESSIONS",
    "RecessionInterval",
    "Series",
    "SeriesInfo",
    "TimeScale",
    "build_scales",
    "build_series",
    "load_config",
    "load_dataset",
    "load_dataset_async",
    "parse_time",
    "read_rows",
]
