from __future__ import annotations


class ChartError(RuntimeError):
    """Base class for chart failures."""


class ChartLoadError(ChartError):
    """Dataset could not be fetched or parsed; the chart is never drawn."""


class ChartMountError(ChartError):
    """Hosting document has no element matching the chart selector."""


class ChartStateError(ChartError):
    pass


class ChartConfigError(ChartError, ValueError):
    pass
