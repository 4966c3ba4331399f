from __future__ import annotations

from typing import Any

from luvatrix_gg.canvas import Quantity, Viewport, quant
from luvatrix_gg.geom import FilledGeom
from luvatrix_gg.ranges import UNIT_RANGE
from luvatrix_gg.scale_types import DiscreteKind
from luvatrix_gg.theme import DEFAULT_THEME, Theme


ViewMap = dict[tuple[Any, Any], int]


def cols_rows(fg: FilledGeom) -> tuple[int, int]:
    cols = len(fg.x_label_seq) if fg.dc_kind_x == DiscreteKind.DISCRETE else 1
    rows = len(fg.y_label_seq) if fg.dc_kind_y == DiscreteKind.DISCRETE else 1
    return max(cols, 1), max(rows, 1)


def _with_margins(count: int, margin: Quantity) -> list[Quantity | None]:
    return [margin] + [None] * count + [margin]


def prepare_views(view: Viewport, fg: FilledGeom, theme: Theme = DEFAULT_THEME) -> Viewport:
    """Return a copy of ``view`` split into one cell per discrete label.

    Axes with more than one discrete label get a margin cell before and
    after the label cells. Label cells share the remaining space evenly and
    use a unit data scale along their discrete axis.
    """
    out = view.copy()
    cols, rows = cols_rows(fg)
    if cols == 1 and rows == 1:
        return out
    margin = quant(theme.discrete_scale_margin)
    widths: list[Quantity | None] = []
    heights: list[Quantity | None] = []
    if cols > 1:
        widths = _with_margins(cols, margin)
        cols += 2
    if rows > 1:
        heights = _with_margins(rows, margin)
        rows += 2
    out.layout(cols, rows, col_widths=widths, row_heights=heights)
    for child in out.children:
        if fg.dc_kind_x == DiscreteKind.DISCRETE and len(widths) > 0:
            child.x_scale = UNIT_RANGE
        if fg.dc_kind_y == DiscreteKind.DISCRETE and len(heights) > 0:
            child.y_scale = UNIT_RANGE
    return out


def calc_view_map(fg: FilledGeom) -> ViewMap:
    """Map ``(x_label, y_label)`` to the index of the child drawn into.

    ``None`` stands in for an axis without a label grid. The margin row and
    column inserted by :func:`prepare_views` are skipped.
    """
    cols, rows = cols_rows(fg)
    out: ViewMap = {}
    if cols == 1 and rows == 1:
        return out
    if rows == 1:
        for j in range(cols):
            out[(fg.x_label_seq[j], None)] = j + 1
    elif cols == 1:
        for i in range(rows):
            out[(None, fg.y_label_seq[i])] = i + 1
    else:
        for i in range(rows):
            y = fg.y_label_seq[i]
            for j in range(cols):
                out[(fg.x_label_seq[j], y)] = (i + 1) * (cols + 2) + (j + 1)
    return out


def get_view(view_map: ViewMap, p: tuple[Any, Any], fg: FilledGeom) -> int:
    cols, rows = cols_rows(fg)
    px = p[0] if cols > 1 else None
    py = p[1] if rows > 1 else None
    try:
        return view_map[(px, py)]
    except KeyError as exc:
        raise KeyError(f"no viewport for labels ({px!r}, {py!r})") from exc
