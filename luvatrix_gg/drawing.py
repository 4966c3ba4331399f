from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

from luvatrix_gg.canvas import Coord, ErrorBar, Point, PolyLine, Raster, Rect, Text, UnitKind, Viewport, c1, quant
from luvatrix_gg.colors import TRANSPARENT, color_scale, pack_argb
from luvatrix_gg.draw_position import (
    calc_bin_widths,
    convert_points_to_histogram,
    extend_line_to_axis,
    get_draw_pos,
    get_xy,
    move_bin_positions,
    read_error_data,
    read_or_calc_bin_width,
    read_text,
    read_width_height,
)
from luvatrix_gg.errors import DegenerateRange
from luvatrix_gg.geom import (
    BinPositionKind,
    FilledGeom,
    GeomKind,
    GgStyle,
    HistogramDrawingStyle,
    Style,
    merge_user_style,
)
from luvatrix_gg.layout import ViewMap, calc_view_map, get_view, prepare_views
from luvatrix_gg.ranges import ScaleRange
from luvatrix_gg.scale_types import AxisKind
from luvatrix_gg.theme import DEFAULT_THEME, Theme


LOGGER = logging.getLogger(__name__)

_LINE_KINDS = (GeomKind.LINE, GeomKind.FREQ_POLY)
_RGB_MASK = np.uint32(0x00FFFFFF)


def draw_error_bar(view: Viewport, fg: FilledGeom, pos: Coord, df: pd.DataFrame, idx: int, style: Style) -> list[ErrorBar]:
    x_min, x_max, y_min, y_max = read_error_data(df, idx, fg)
    out: list[ErrorBar] = []
    if x_min is not None or x_max is not None:
        out.append(
            ErrorBar(
                pos=pos,
                error_up=c1(x_max if x_max is not None else pos.x.pos, UnitKind.DATA, AxisKind.X, view.x_scale),
                error_down=c1(x_min if x_min is not None else pos.x.pos, UnitKind.DATA, AxisKind.X, view.x_scale),
                axis=AxisKind.X,
                kind=style.error_bar_kind,
                style=style,
            )
        )
    if y_min is not None or y_max is not None:
        out.append(
            ErrorBar(
                pos=pos,
                error_up=c1(y_max if y_max is not None else pos.y.pos, UnitKind.DATA, AxisKind.Y, view.y_scale),
                error_down=c1(y_min if y_min is not None else pos.y.pos, UnitKind.DATA, AxisKind.Y, view.y_scale),
                axis=AxisKind.Y,
                kind=style.error_bar_kind,
                style=style,
            )
        )
    return out


def draw_raster(view: Viewport, fg: FilledGeom, df: pd.DataFrame) -> None:
    """Add the sub dataframe as one bitmap, coloring each cell by the fill column."""
    min_x, max_x = fg.raster_x_scale.low, fg.raster_x_scale.high
    min_y, max_y = fg.raster_y_scale.low, fg.raster_y_scale.high
    wv, hv = read_width_height(df, 0, fg)
    width = max_x - min_x + wv
    height = max_y - min_y + hv
    num_x = int(round(width / wv))
    num_y = int(round(height / hv))
    palette = fg.color_scale if fg.color_scale is not None else color_scale()
    packed = np.asarray([pack_argb(palette.color_at(i)) for i in range(len(palette))], dtype=np.uint32)
    alpha = fg.geom.user_style.alpha if fg.geom.user_style.alpha is not None else 1.0
    alpha_bits = np.uint32(int(max(0.0, min(255.0, alpha * 255.0))) << 24)
    trans = fg.trans

    def draw_cb() -> np.ndarray:
        if trans is not None and fg.fill_data_scale.low <= 0.0:
            raise DegenerateRange(
                f"raster fill scale {fg.fill_data_scale} must be positive for a transformed fill scale"
            )
        z_scale = fg.fill_data_scale
        if trans is not None:
            z_scale = ScaleRange(trans(z_scale.low), trans(z_scale.high))
        xs = df[fg.x_col].to_numpy(dtype=np.float64)
        ys = df[fg.y_col].to_numpy(dtype=np.float64)
        zs = df[fg.fill_col].to_numpy(dtype=np.float64)
        if trans is not None:
            zs = np.asarray([trans(z) for z in zs], dtype=np.float64)
        # cells outside the raster scales have no pixel
        inside = np.isfinite(xs) & np.isfinite(ys) & np.isfinite(zs)
        inside &= (xs >= min_x) & (xs <= max_x) & (ys >= min_y) & (ys <= max_y)
        if not inside.all():
            LOGGER.debug("raster of `%s` skips %d cells outside its scales", fg.fill_col, int((~inside).sum()))
        xs, ys, zs = xs[inside], ys[inside], zs[inside]
        ix = np.clip(np.rint((xs - min_x) / wv).astype(np.int64), 0, num_x - 1)
        iy = np.clip(np.rint((ys - min_y) / hv).astype(np.int64), 0, num_y - 1)
        high = len(packed) - 1
        color_idx = np.clip(np.rint(high * (zs - z_scale.low) / z_scale.span), 0, high).astype(np.int64)
        colors = packed[color_idx]
        # only colored pixels pick up the layer alpha
        colors = np.where(colors > 0, alpha_bits | (colors & _RGB_MASK), colors).astype(np.uint32)
        out = np.zeros(num_x * num_y, dtype=np.uint32)
        out[(num_y - iy - 1) * num_x + ix] = colors
        return out

    view.add_obj(
        Raster(
            origin=Coord(
                x=c1(min_x, UnitKind.DATA, AxisKind.X, view.x_scale),
                y=c1(max_y + hv, UnitKind.DATA, AxisKind.Y, view.y_scale),
            ),
            width=quant(width, UnitKind.DATA),
            height=quant(height, UnitKind.DATA),
            num_x=num_x,
            num_y=num_y,
            draw_cb=draw_cb,
        )
    )


def draw(
    view: Viewport,
    fg: FilledGeom,
    pos: Coord,
    y: Any,
    bin_widths: tuple[float, float],
    df: pd.DataFrame,
    idx: int,
    style: Style,
    theme: Theme = DEFAULT_THEME,
) -> None:
    """Emit the graph object(s) of a single row into ``view``."""
    kind = fg.geom_kind
    if kind == GeomKind.POINT:
        view.add_obj(Point(pos=pos, style=style))
    elif kind == GeomKind.ERROR_BAR:
        for bar in draw_error_bar(view, fg, pos, df, idx, style):
            view.add_obj(bar)
    elif kind in (GeomKind.HISTOGRAM, GeomKind.BAR):
        bin_width = read_or_calc_bin_width(df, idx, fg.x_col, fg.dc_kind_x, discrete_width=theme.discrete_bin_width)
        height = 0.0 if y is None or pd.isna(y) else float(y)
        view.add_obj(Rect(origin=pos, width=quant(bin_width, UnitKind.DATA), height=quant(-height, UnitKind.DATA), style=style))
    elif kind == GeomKind.TILE:
        view.add_obj(
            Rect(
                origin=pos,
                width=quant(bin_widths[0], UnitKind.DATA),
                height=quant(-bin_widths[1], UnitKind.DATA),
                style=style,
            )
        )
    elif kind == GeomKind.TEXT:
        view.add_obj(
            Text(
                pos=pos,
                text=read_text(df, idx, fg, theme.text_precision),
                font=style.font,
                align_kind=style.font.align_kind,
            )
        )
    elif kind in (GeomKind.LINE, GeomKind.FREQ_POLY, GeomKind.RASTER):
        raise ValueError(f"{kind.value} geoms are drawn per sub dataframe")
    else:
        raise ValueError(f"Unknown geom kind: {kind}")


def _in_parent(pos: Coord, cell: Viewport) -> Coord:
    # relative coords of a grid cell, expressed in the cell's parent
    x, y = pos.x, pos.y
    if x.kind == UnitKind.RELATIVE:
        x = x.with_pos(cell.origin_x + cell.width * x.pos)
    if y.kind == UnitKind.RELATIVE:
        y = y.with_pos(cell.origin_y + cell.height * y.pos)
    return Coord(x=x, y=y)


def _column_values(df: pd.DataFrame, col: str) -> list[Any]:
    return df[col].tolist() if col else []


def _histogram_styles(point_styles: Sequence[Style]) -> list[Style]:
    if not point_styles:
        return []
    out = [point_styles[0]] * 3
    for style in point_styles[1:]:
        out.extend((style, style))
    return out


def draw_sub_df(
    view: Viewport,
    fg: FilledGeom,
    view_map: ViewMap,
    df: pd.DataFrame,
    styles: Sequence[GgStyle],
    theme: Theme = DEFAULT_THEME,
) -> Viewport:
    """Draw all rows of one label group into ``view`` and return it."""
    kind = fg.geom_kind
    style = merge_user_style(styles[0], fg)
    need_bin_width = kind in (GeomKind.BAR, GeomKind.HISTOGRAM, GeomKind.TILE, GeomKind.RASTER) or fg.geom.bin_position in (
        BinPositionKind.CENTER,
        BinPositionKind.RIGHT,
    )
    outline = kind in _LINE_KINDS or (kind == GeomKind.HISTOGRAM and fg.hd_kind == HistogramDrawingStyle.OUTLINE)
    # histograms are drawn upwards from the lower end of the y scale
    min_val = fg.y_scale.low
    line_points: list[Coord] = []
    line_rows: list[int] = []
    point_styles: list[Style] = []

    if kind != GeomKind.RASTER:
        x_vals = _column_values(df, fg.x_col)
        y_vals = _column_values(df, fg.y_col)
        # binned data carries the right edge of the last bin as an extra row
        last = len(df) - 1 if fg.geom.bin_position == BinPositionKind.NONE else len(df) - 2
        for i in range(last + 1):
            if len(styles) > 1:
                style = merge_user_style(styles[i], fg)
            p = get_xy(view, x_vals, y_vals, fg, i, theme, theme.x_outside_range, theme.y_outside_range)
            if p is None:
                continue
            loc_view = view[get_view(view_map, p, fg)] if view_map else view
            bin_widths = (0.0, 0.0)
            if need_bin_width:
                bin_widths = calc_bin_widths(df, i, fg, theme.discrete_bin_width)
                p = move_bin_positions(p, bin_widths, fg)
            pos = get_draw_pos(loc_view, fg, p, bin_widths, df, i, min_val)
            if outline:
                line_points.append(_in_parent(pos, loc_view) if loc_view is not view else pos)
                line_rows.append(i)
                point_styles.append(style)
            else:
                draw(loc_view, fg, pos, p[1], bin_widths, df, i, style, theme)

    if kind == GeomKind.RASTER:
        draw_raster(view, fg, df)
        return view
    if not outline or not line_points:
        return view
    if kind == GeomKind.HISTOGRAM:
        line_points = convert_points_to_histogram(df, fg, line_points, min_val, theme.discrete_bin_width, rows=line_rows)
        point_styles = _histogram_styles(point_styles)

    if style.fill_color != TRANSPARENT or kind == GeomKind.FREQ_POLY:
        line_points = extend_line_to_axis(line_points, AxisKind.X, df, fg, min_val, theme.discrete_bin_width, rows=line_rows)
        point_styles = [point_styles[0], *point_styles, point_styles[-1]]
    if len(styles) == 1:
        view.add_obj(PolyLine(points=tuple(line_points), style=style))
    else:
        LOGGER.warning("drawing %s with %d styles segment by segment, gradients are not supported", kind.value, len(styles))
        for i in range(len(line_points) - 1):
            view.add_obj(PolyLine(points=(line_points[i], line_points[i + 1]), style=point_styles[i]))
    return view


def _label_matches(label_val: Any, label: Any) -> bool:
    if isinstance(label, Mapping):
        return label_val in label.values()
    if isinstance(label, (tuple, list, frozenset, set)):
        return label_val in label
    return label_val == label


def create_gobj_from_geom(
    view: Viewport,
    fg: FilledGeom,
    theme: Theme = DEFAULT_THEME,
    label_val: Any = None,
) -> Viewport:
    """Draw ``fg`` into a copy of ``view`` and return the finished viewport.

    ``view`` itself is left untouched. With ``label_val`` only the label
    groups containing that value are drawn.
    """
    out = prepare_views(view, fg, theme)
    view_map = calc_view_map(fg)
    for label, base_style, styles, sub_df in fg.enumerate_data():
        if label_val is not None and not _label_matches(label_val, label):
            continue
        out = draw_sub_df(out, fg, view_map, sub_df, styles if styles else (base_style,), theme)
    return out
