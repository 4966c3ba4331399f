from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Iterator, Mapping

import pandas as pd

from luvatrix_gg.colors import BLACK, GREY20, RGBA, TRANSPARENT, ColorScale, with_alpha
from luvatrix_gg.ranges import ScaleRange
from luvatrix_gg.scale_types import DiscreteKind, LineType, MarkerKind, ScaleTransform


PREV_VALS_COL = "prevVals"
BIN_WIDTHS_COL = "binWidths"


class GeomKind(Enum):
    POINT = "point"
    BAR = "bar"
    HISTOGRAM = "histogram"
    FREQ_POLY = "freqpoly"
    TILE = "tile"
    LINE = "line"
    ERROR_BAR = "errorbar"
    TEXT = "text"
    RASTER = "raster"


class PositionKind(Enum):
    IDENTITY = "identity"
    STACK = "stack"
    DODGE = "dodge"
    FILL = "fill"


class BinPositionKind(Enum):
    NONE = "none"
    CENTER = "center"
    LEFT = "left"
    RIGHT = "right"


class HistogramDrawingStyle(Enum):
    BARS = "bars"
    OUTLINE = "outline"


class ErrorBarKind(Enum):
    LINES = "lines"
    LINEST = "linest"


class TextAlignKind(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class Font:
    family: str = "sans-serif"
    size: float = 12.0
    color: RGBA = BLACK
    align_kind: TextAlignKind = TextAlignKind.CENTER


@dataclass(frozen=True)
class GgStyle:
    """Partial style; unset fields fall back to the geom defaults."""

    color: RGBA | None = None
    size: float | None = None
    line_type: LineType | None = None
    line_width: float | None = None
    fill_color: RGBA | None = None
    marker: MarkerKind | None = None
    error_bar_kind: ErrorBarKind | None = None
    alpha: float | None = None
    font: Font | None = None


@dataclass(frozen=True)
class Style:
    color: RGBA = BLACK
    size: float = 3.0
    line_type: LineType = LineType.SOLID
    line_width: float = 1.0
    fill_color: RGBA = TRANSPARENT
    marker: MarkerKind = MarkerKind.CIRCLE
    error_bar_kind: ErrorBarKind = ErrorBarKind.LINES
    font: Font = Font()


_DEFAULT_STYLES: dict[GeomKind, Style] = {
    GeomKind.POINT: Style(color=BLACK, size=3.0, line_width=1.0),
    GeomKind.LINE: Style(color=BLACK, line_width=1.0, size=5.0),
    GeomKind.FREQ_POLY: Style(color=BLACK, line_width=1.0, size=5.0),
    GeomKind.BAR: Style(color=GREY20, fill_color=GREY20, line_width=1.0, line_type=LineType.SOLID),
    GeomKind.HISTOGRAM: Style(color=GREY20, fill_color=GREY20, line_width=0.2),
    GeomKind.TILE: Style(color=GREY20, fill_color=GREY20, line_width=0.05),
    GeomKind.RASTER: Style(color=GREY20, fill_color=GREY20, line_width=0.0),
    GeomKind.ERROR_BAR: Style(color=BLACK, line_width=1.0, size=10.0),
    GeomKind.TEXT: Style(color=BLACK, font=Font()),
}


def default_style(geom_kind: GeomKind) -> Style:
    return _DEFAULT_STYLES[geom_kind]


@dataclass(frozen=True)
class Geom:
    """A layer request: what to draw and how to place it."""

    kind: GeomKind
    gid: int = 0
    position: PositionKind = PositionKind.IDENTITY
    bin_position: BinPositionKind = BinPositionKind.NONE
    hd_kind: HistogramDrawingStyle = HistogramDrawingStyle.BARS
    user_style: GgStyle = GgStyle()


@dataclass(frozen=True)
class LabelData:
    style: GgStyle
    styles: tuple[GgStyle, ...]
    df: pd.DataFrame


@dataclass(frozen=True, eq=False)
class FilledGeom:
    """Geometry layer with resolved scales and per-label sub-dataframes."""

    geom: Geom
    x_col: str = ""
    y_col: str = ""
    dc_kind_x: DiscreteKind = DiscreteKind.CONTINUOUS
    dc_kind_y: DiscreteKind = DiscreteKind.CONTINUOUS
    x_label_seq: tuple[Any, ...] = ()
    y_label_seq: tuple[Any, ...] = ()
    x_scale: ScaleRange = ScaleRange(0.0, 1.0)
    y_scale: ScaleRange = ScaleRange(0.0, 1.0)
    x_min: str | None = None
    x_max: str | None = None
    y_min: str | None = None
    y_max: str | None = None
    width: str | None = None
    height: str | None = None
    text: str | None = None
    fill_col: str = ""
    fill_data_scale: ScaleRange = ScaleRange(0.0, 1.0)
    raster_x_scale: ScaleRange = ScaleRange(0.0, 1.0)
    raster_y_scale: ScaleRange = ScaleRange(0.0, 1.0)
    color_scale: ColorScale | None = None
    trans: ScaleTransform | None = None
    yield_data: Mapping[Any, LabelData] = field(default_factory=dict)

    @property
    def geom_kind(self) -> GeomKind:
        return self.geom.kind

    @property
    def hd_kind(self) -> HistogramDrawingStyle:
        return self.geom.hd_kind

    def enumerate_data(self) -> Iterator[tuple[Any, GgStyle, tuple[GgStyle, ...], pd.DataFrame]]:
        for label, data in self.yield_data.items():
            yield label, data.style, data.styles, data.df


def merge_user_style(style: GgStyle, fg: FilledGeom) -> Style:
    """Resolve ``style`` against the geom's user style and kind defaults.

    User style set on the geom wins over the per-label style, which wins
    over the defaults. An alpha is applied to the fill color (and to the
    line color for line like geoms without fill).
    """
    out = default_style(fg.geom_kind)
    user = fg.geom.user_style
    updates: dict[str, Any] = {}
    for f in fields(GgStyle):
        if f.name == "alpha":
            continue
        value = getattr(user, f.name)
        if value is None:
            value = getattr(style, f.name)
        if value is not None:
            updates[f.name] = value
    out = replace(out, **updates)
    alpha = user.alpha if user.alpha is not None else style.alpha
    if alpha is not None:
        if out.fill_color[3] > 0:
            out = replace(out, fill_color=with_alpha(out.fill_color, alpha))
        if fg.geom_kind in (GeomKind.POINT, GeomKind.LINE, GeomKind.ERROR_BAR, GeomKind.TEXT):
            out = replace(out, color=with_alpha(out.color, alpha))
    return out
