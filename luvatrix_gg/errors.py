from __future__ import annotations


class PlotDataError(ValueError):
    """Base error for invalid plot data or scale requests."""


class EmptyColumn(PlotDataError):
    pass


class UnsupportedObjectColumn(PlotDataError):
    pass


class GenericColumnUnsupported(PlotDataError):
    pass


class DegenerateRange(PlotDataError):
    pass


class MissingTransformPair(PlotDataError):
    pass


class InvalidColumnType(PlotDataError):
    pass


class UnsupportedChannelCombination(PlotDataError):
    pass


class UnimplementedPositionPolicy(PlotDataError):
    pass


class MissingBinEdge(PlotDataError):
    """Bin width requested for the last row without a width column or edge row."""


class MissingScaleValue(PlotDataError):
    """A mapped aesthetic column holds null rows that no scale value exists for."""
