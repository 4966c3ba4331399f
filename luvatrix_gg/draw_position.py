from __future__ import annotations

from typing import Any, Sequence

import pandas as pd

from luvatrix_gg.canvas import Coord, Coord1D, UnitKind, Viewport, c1
from luvatrix_gg.columns import to_python
from luvatrix_gg.errors import MissingBinEdge, UnimplementedPositionPolicy
from luvatrix_gg.geom import (
    BIN_WIDTHS_COL,
    PREV_VALS_COL,
    BinPositionKind,
    FilledGeom,
    GeomKind,
    HistogramDrawingStyle,
    PositionKind,
)
from luvatrix_gg.ranges import ScaleRange
from luvatrix_gg.scale_types import AxisKind, DiscreteKind
from luvatrix_gg.theme import DEFAULT_DISCRETE_BIN_WIDTH, DEFAULT_THEME, OutsideRangeKind, Theme


def _is_null(value: Any) -> bool:
    return value is None or (not isinstance(value, str) and bool(pd.isna(value)))


def _outside(value: float, scale: ScaleRange, margin: ScaleRange | None, ork: OutsideRangeKind) -> float | None:
    """Apply the outside range policy; ``None`` means the row is dropped."""
    target = margin if margin is not None else scale
    if value < scale.low:
        if ork == OutsideRangeKind.DROP:
            return None
        if ork == OutsideRangeKind.CLIP:
            return target.low
    elif value > scale.high:
        if ork == OutsideRangeKind.DROP:
            return None
        if ork == OutsideRangeKind.CLIP:
            return target.high
    return value


def get_xy(
    view: Viewport,
    x_vals: Sequence[Any],
    y_vals: Sequence[Any],
    fg: FilledGeom,
    i: int,
    theme: Theme = DEFAULT_THEME,
    x_ork: OutsideRangeKind = OutsideRangeKind.CLIP,
    y_ork: OutsideRangeKind = OutsideRangeKind.CLIP,
) -> tuple[Any, Any] | None:
    """Read the x / y value of row ``i`` against the viewport's scales.

    Missing and null values become 0. Continuous values outside the view
    scale are dropped (``None`` is returned), clipped or left alone.
    Discrete values are returned unchanged.
    """
    x = to_python(x_vals[i]) if i < len(x_vals) else None
    y = to_python(y_vals[i]) if i < len(y_vals) else None
    x = 0.0 if _is_null(x) else x
    y = 0.0 if _is_null(y) else y
    if fg.dc_kind_x == DiscreteKind.CONTINUOUS:
        x = _outside(float(x), view.x_scale, theme.x_margin_range, x_ork)
        if x is None:
            return None
    if fg.dc_kind_y == DiscreteKind.CONTINUOUS:
        y = _outside(float(y), view.y_scale, theme.y_margin_range, y_ork)
        if y is None:
            return None
    return (x, y)


def read_or_calc_bin_width(
    df: pd.DataFrame,
    idx: int,
    data_col: str,
    dc_kind: DiscreteKind,
    col: str = BIN_WIDTHS_COL,
    discrete_width: float = DEFAULT_DISCRETE_BIN_WIDTH,
) -> float:
    """Bin width of row ``idx``.

    Read from ``col`` if the frame has it, else measured as the distance to
    the next row of ``data_col``; bins are left edge based, so the frame must
    hold the right edge of the last bin as its own row.
    """
    if dc_kind == DiscreteKind.DISCRETE:
        return discrete_width
    if col in df.columns:
        value = df[col].iloc[idx]
        return 0.0 if _is_null(value) else float(value)
    data = df[data_col]
    if idx < len(df) - 1:
        high_val = data.iloc[idx + 1]
        if not _is_null(high_val):
            return float(high_val) - float(data.iloc[idx])
        if idx == 0:
            raise MissingBinEdge(f"cannot infer bin width of `{data_col}` at row 0: next value is null")
        # fall back to the previous bin
        return float(data.iloc[idx]) - float(data.iloc[idx - 1])
    raise MissingBinEdge(f"cannot infer bin width of the last row of `{data_col}` without a right bin edge row")


def move_bin_position(value: float, bp_kind: BinPositionKind, bin_width: float) -> float:
    # data is left edge based
    if bp_kind in (BinPositionKind.LEFT, BinPositionKind.NONE):
        return value
    if bp_kind == BinPositionKind.CENTER:
        return value + bin_width / 2.0
    if bp_kind == BinPositionKind.RIGHT:
        return value + bin_width
    raise ValueError(f"Unknown bin position: {bp_kind}")


def read_width_height(df: pd.DataFrame, idx: int, fg: FilledGeom) -> tuple[float, float]:
    width = float(df[fg.width].iloc[idx]) if fg.width is not None else 1.0
    height = float(df[fg.height].iloc[idx]) if fg.height is not None else 1.0
    return width, height


def calc_bin_widths(
    df: pd.DataFrame,
    idx: int,
    fg: FilledGeom,
    discrete_width: float = DEFAULT_DISCRETE_BIN_WIDTH,
) -> tuple[float, float]:
    kind = fg.geom_kind
    if kind in (GeomKind.TILE, GeomKind.RASTER):
        return read_width_height(df, idx, fg)
    if kind in (
        GeomKind.HISTOGRAM,
        GeomKind.BAR,
        GeomKind.POINT,
        GeomKind.LINE,
        GeomKind.FREQ_POLY,
        GeomKind.ERROR_BAR,
        GeomKind.TEXT,
    ):
        return read_or_calc_bin_width(df, idx, fg.x_col, fg.dc_kind_x, discrete_width=discrete_width), 0.0
    raise ValueError(f"Unknown geom kind: {kind}")


def move_bin_positions(p: tuple[Any, Any], bin_widths: tuple[float, float], fg: FilledGeom) -> tuple[Any, Any]:
    """Shift ``p`` by the geom's bin position; discrete labels stay as they are."""
    x, y = p
    bp_kind = fg.geom.bin_position
    if fg.dc_kind_x == DiscreteKind.CONTINUOUS:
        x = move_bin_position(x, bp_kind, bin_widths[0])
    if fg.geom_kind == GeomKind.TILE and fg.dc_kind_y == DiscreteKind.CONTINUOUS:
        y = move_bin_position(y, bp_kind, bin_widths[1])
    return (x, y)


def _discrete_histo(width: float, ax_kind: AxisKind) -> Coord1D:
    if ax_kind == AxisKind.X:
        # bars are centered in their cell
        return c1((1.0 - width) / 2.0, UnitKind.RELATIVE, AxisKind.X)
    return c1(1.0, UnitKind.RELATIVE, AxisKind.Y)


def _continuous(view: Viewport, val: Any, ax_kind: AxisKind) -> Coord1D:
    scale = view.x_scale if ax_kind == AxisKind.X else view.y_scale
    return c1(float(val), UnitKind.DATA, ax_kind, scale)


def get_draw_pos_impl(
    view: Viewport,
    fg: FilledGeom,
    val: Any,
    width: float,
    dc_kind: DiscreteKind,
    ax_kind: AxisKind,
) -> Coord1D:
    if dc_kind == DiscreteKind.CONTINUOUS:
        return _continuous(view, val, ax_kind)
    kind = fg.geom_kind
    if kind in (GeomKind.POINT, GeomKind.ERROR_BAR, GeomKind.TEXT, GeomKind.LINE, GeomKind.FREQ_POLY):
        return c1(0.5, UnitKind.RELATIVE, ax_kind)
    if kind in (GeomKind.HISTOGRAM, GeomKind.BAR, GeomKind.TILE):
        return _discrete_histo(width, ax_kind)
    if kind == GeomKind.RASTER:
        return _discrete_histo(1.0, ax_kind)
    raise ValueError(f"Unknown geom kind: {kind}")


def _is_bar_like(fg: FilledGeom) -> bool:
    return fg.geom_kind == GeomKind.BAR or (
        fg.geom_kind == GeomKind.HISTOGRAM and fg.hd_kind == HistogramDrawingStyle.BARS
    )


def get_draw_pos(
    view: Viewport,
    fg: FilledGeom,
    p: tuple[Any, Any],
    bin_widths: tuple[float, float],
    df: pd.DataFrame,
    idx: int,
    min_val: float,
) -> Coord:
    """Drawing coordinate of one row for the geom's position policy.

    Bars start at ``min_val`` (identity) or at the running stack value in
    the ``prevVals`` column (stack). Other stacked geoms use the y value as
    is, since their y column already holds the stacked values.
    """
    x, y = p
    position = fg.geom.position
    if position == PositionKind.IDENTITY:
        if _is_bar_like(fg):
            y = min_val
    elif position == PositionKind.STACK:
        if _is_bar_like(fg):
            y = float(df[PREV_VALS_COL].iloc[idx])
    elif position in (PositionKind.DODGE, PositionKind.FILL):
        raise UnimplementedPositionPolicy(f"position `{position.value}` is not implemented")
    else:
        raise ValueError(f"Unknown position: {position}")
    return Coord(
        x=get_draw_pos_impl(view, fg, x, bin_widths[0], fg.dc_kind_x, AxisKind.X),
        y=get_draw_pos_impl(view, fg, y, bin_widths[1], fg.dc_kind_y, AxisKind.Y),
    )


def extend_line_to_axis(
    line_points: Sequence[Coord],
    ax_kind: AxisKind,
    df: pd.DataFrame,
    fg: FilledGeom,
    min_val: float,
    discrete_width: float = DEFAULT_DISCRETE_BIN_WIDTH,
    rows: Sequence[int] | None = None,
) -> list[Coord]:
    """Return ``line_points`` with a point on the main axis added at both ends.

    Frequency polygons are additionally extended outwards by one bin width
    so the line starts and ends on the outer edges of the first / last bin.
    ``rows`` gives the dataframe row of every point when rows were dropped.
    """
    if not line_points:
        return []
    start = line_points[0]
    end = line_points[-1]
    freq_poly = fg.geom_kind == GeomKind.FREQ_POLY
    first = rows[0] if rows else 0
    last = max(len(df) - 2, 0)
    if rows:
        last = min(rows[-1], last)
    if ax_kind == AxisKind.X:
        start = Coord(x=start.x, y=start.y.with_pos(min_val))
        end = Coord(x=end.x, y=end.y.with_pos(min_val))
        if freq_poly:
            first_width = read_or_calc_bin_width(df, first, fg.x_col, fg.dc_kind_x, discrete_width=discrete_width)
            last_width = read_or_calc_bin_width(df, last, fg.x_col, fg.dc_kind_x, discrete_width=discrete_width)
            start = Coord(x=start.x.with_pos(start.x.pos - first_width), y=start.y)
            end = Coord(x=end.x.with_pos(end.x.pos + last_width), y=end.y)
    elif ax_kind == AxisKind.Y:
        start = Coord(x=start.x.with_pos(0.0), y=start.y)
        end = Coord(x=end.x.with_pos(0.0), y=end.y)
        if freq_poly:
            first_width = read_or_calc_bin_width(df, first, fg.y_col, fg.dc_kind_y, discrete_width=discrete_width)
            last_width = read_or_calc_bin_width(df, last, fg.y_col, fg.dc_kind_y, discrete_width=discrete_width)
            start = Coord(x=start.x, y=start.y.with_pos(start.y.pos - first_width))
            end = Coord(x=end.x, y=end.y.with_pos(end.y.pos + last_width))
    else:
        raise ValueError(f"Unknown axis: {ax_kind}")
    return [start, *line_points, end]


def convert_points_to_histogram(
    df: pd.DataFrame,
    fg: FilledGeom,
    line_points: Sequence[Coord],
    min_val: float,
    discrete_width: float = DEFAULT_DISCRETE_BIN_WIDTH,
    rows: Sequence[int] | None = None,
) -> list[Coord]:
    """Turn per-bin points into the step outline of a histogram.

    Starting on the baseline, every bin contributes a vertical rise to its
    count followed by a horizontal run of its bin width. ``rows`` maps each
    point to its dataframe row; without it point ``i`` is row ``i``.
    """
    if not line_points:
        return []
    if rows is None:
        rows = range(len(line_points))
    elif len(rows) != len(line_points):
        raise ValueError(f"got {len(rows)} rows for {len(line_points)} histogram points")
    first = line_points[0]
    cur_x = first.x.pos
    out = [
        Coord(x=first.x.with_pos(cur_x), y=first.y.with_pos(min_val)),
        Coord(x=first.x.with_pos(cur_x), y=first.y),
    ]
    cur_x += read_or_calc_bin_width(df, rows[0], fg.x_col, fg.dc_kind_x, discrete_width=discrete_width)
    out.append(Coord(x=first.x.with_pos(cur_x), y=first.y))
    for idx in range(1, len(line_points)):
        cur_y = line_points[idx].y
        out.append(Coord(x=first.x.with_pos(cur_x), y=cur_y))
        cur_x += read_or_calc_bin_width(df, rows[idx], fg.x_col, fg.dc_kind_x, discrete_width=discrete_width)
        out.append(Coord(x=first.x.with_pos(cur_x), y=cur_y))
    return out


def read_error_data(
    df: pd.DataFrame, idx: int, fg: FilledGeom
) -> tuple[float | None, float | None, float | None, float | None]:
    def read(col: str | None) -> float | None:
        return None if col is None else float(df[col].iloc[idx])

    return read(fg.x_min), read(fg.x_max), read(fg.y_min), read(fg.y_max)


def format_text_value(value: Any, precision: int) -> str:
    value = to_python(value)
    if _is_null(value):
        return ""
    if isinstance(value, float):
        return f"{value:.{precision}g}"
    return str(value)


def read_text(df: pd.DataFrame, idx: int, fg: FilledGeom, precision: int = DEFAULT_THEME.text_precision) -> str:
    if fg.text is None:
        raise ValueError("geom has no text column")
    return format_text_value(df[fg.text].iloc[idx], precision)
