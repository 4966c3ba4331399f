from __future__ import annotations

from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

from luvatrix_gg.colors import ColorScale, color_hue, color_scale, to_color
from luvatrix_gg.columns import ColumnKind, Formula, ValueKind
from luvatrix_gg.errors import (
    DegenerateRange,
    InvalidColumnType,
    MissingScaleValue,
    MissingTransformPair,
    UnsupportedChannelCombination,
)
from luvatrix_gg.ranges import ScaleRange
from luvatrix_gg.scale_types import (
    COLOR_KINDS,
    AxisKind,
    DataKind,
    DiscreteKind,
    FilledScale,
    LineType,
    MarkerKind,
    ScaleKind,
    ScaleTransform,
    ScaleValue,
    require_complete,
)
from luvatrix_gg.theme import DEFAULT_ALPHA_RANGE, DEFAULT_COLOR_SCALE, DEFAULT_HUE_START, DEFAULT_SIZE_RANGE


MAX_DISCRETE_SIZES = 5

_MARKERS = tuple(MarkerKind)
_LINE_TYPES = tuple(LineType)


def _require_range(name: str, value_range: tuple[float, float]) -> tuple[float, float]:
    low, high = value_range
    if low == high:
        raise DegenerateRange(f"{name} range must not be degenerate, got ({low}, {high})")
    return float(low), float(high)


def _require_transform_pair(trans: ScaleTransform | None, inv_trans: ScaleTransform | None) -> None:
    if (trans is None) != (inv_trans is None):
        raise MissingTransformPair("a scale transform needs both a forward and an inverse transformation")


def _require_axis(ax_kind: AxisKind | None) -> AxisKind:
    if ax_kind is None:
        raise UnsupportedChannelCombination("position data scales need an axis")
    return ax_kind


def _numeric_label(label: Any, channel: str) -> float:
    if isinstance(label, bool) or not isinstance(label, (int, float)):
        raise InvalidColumnType(f"Value used to set {channel} must be int or float, got {label!r}")
    return float(label)


def fill_discrete_color_scale(
    sc_kind: ScaleKind,
    vkind: ValueKind,
    col: Formula,
    data_kind: DataKind,
    label_seq: Sequence[Any],
    value_map: Mapping[Any, ScaleValue] | None,
    hue_start: float = DEFAULT_HUE_START,
) -> FilledScale:
    fill = sc_kind == ScaleKind.FILL_COLOR
    if value_map is None:
        hues = color_hue(len(label_seq), hue_start=hue_start)
        value_map = {}
        for i, label in enumerate(label_seq):
            color = hues[i] if data_kind == DataKind.MAPPING else to_color(label)
            value_map[label] = ScaleValue.of_color(color, fill=fill)
    return FilledScale(
        col=col,
        sc_kind=sc_kind,
        dc_kind=DiscreteKind.DISCRETE,
        vkind=vkind,
        data_kind=data_kind,
        label_seq=tuple(label_seq),
        value_map=value_map,
    )


def fill_discrete_size_scale(
    vkind: ValueKind,
    col: Formula,
    data_kind: DataKind,
    label_seq: Sequence[Any],
    value_map: Mapping[Any, ScaleValue] | None,
    size_range: tuple[float, float] = DEFAULT_SIZE_RANGE,
) -> FilledScale:
    min_size, max_size = _require_range("size", size_range)
    if value_map is None:
        num_sizes = min(len(label_seq), MAX_DISCRETE_SIZES)
        step = (max_size - min_size) / num_sizes
        value_map = {}
        for i, label in enumerate(label_seq):
            if data_kind == DataKind.MAPPING:
                # sizes saturate at the top of the range past MAX_DISCRETE_SIZES labels
                size = min(min_size + i * step, max_size)
            else:
                size = _numeric_label(label, "size")
            value_map[label] = ScaleValue.of_size(size)
    return FilledScale(
        col=col,
        sc_kind=ScaleKind.SIZE,
        dc_kind=DiscreteKind.DISCRETE,
        vkind=vkind,
        data_kind=data_kind,
        label_seq=tuple(label_seq),
        value_map=value_map,
    )


def fill_discrete_alpha_scale(
    vkind: ValueKind,
    col: Formula,
    data_kind: DataKind,
    label_seq: Sequence[Any],
    value_map: Mapping[Any, ScaleValue] | None,
    alpha_range: tuple[float, float] = DEFAULT_ALPHA_RANGE,
) -> FilledScale:
    min_alpha, max_alpha = _require_range("alpha", alpha_range)
    if value_map is None:
        step = (max_alpha - min_alpha) / len(label_seq)
        value_map = {}
        for i, label in enumerate(label_seq):
            if data_kind == DataKind.MAPPING:
                alpha = min_alpha + i * step
            else:
                alpha = _numeric_label(label, "alpha")
            value_map[label] = ScaleValue.of_alpha(alpha)
    return FilledScale(
        col=col,
        sc_kind=ScaleKind.ALPHA,
        dc_kind=DiscreteKind.DISCRETE,
        vkind=vkind,
        data_kind=data_kind,
        label_seq=tuple(label_seq),
        value_map=value_map,
    )


def fill_discrete_shape_scale(
    vkind: ValueKind,
    col: Formula,
    label_seq: Sequence[Any],
    value_map: Mapping[Any, ScaleValue] | None,
) -> FilledScale:
    if value_map is None:
        value_map = {
            label: ScaleValue.of_shape(_MARKERS[i % len(_MARKERS)], _LINE_TYPES[i % len(_LINE_TYPES)])
            for i, label in enumerate(label_seq)
        }
    return FilledScale(
        col=col,
        sc_kind=ScaleKind.SHAPE,
        dc_kind=DiscreteKind.DISCRETE,
        vkind=vkind,
        label_seq=tuple(label_seq),
        value_map=value_map,
    )


def fill_discrete_position_scale(
    sc_kind: ScaleKind,
    col: Formula,
    ax_kind: AxisKind,
    vkind: ValueKind,
    label_seq: Sequence[Any],
    trans: ScaleTransform | None = None,
    inv_trans: ScaleTransform | None = None,
) -> FilledScale:
    if sc_kind == ScaleKind.TRANSFORMED_DATA and (trans is None or inv_trans is None):
        raise MissingTransformPair(f"transformed scale for `{col}` needs a forward and an inverse transformation")
    return FilledScale(
        col=col,
        sc_kind=sc_kind,
        dc_kind=DiscreteKind.DISCRETE,
        vkind=vkind,
        ax_kind=ax_kind,
        label_seq=tuple(label_seq),
        trans=trans if sc_kind == ScaleKind.TRANSFORMED_DATA else None,
        inv_trans=inv_trans if sc_kind == ScaleKind.TRANSFORMED_DATA else None,
    )


def fill_continuous_linear_scale(col: Formula, ax_kind: AxisKind, vkind: ValueKind, data_scale: ScaleRange) -> FilledScale:
    return FilledScale(
        col=col,
        sc_kind=ScaleKind.LINEAR_DATA,
        dc_kind=DiscreteKind.CONTINUOUS,
        vkind=vkind,
        ax_kind=ax_kind,
        data_scale=data_scale,
    )


def _transform_range(data_scale: ScaleRange, trans: ScaleTransform, col: Formula) -> ScaleRange:
    with np.errstate(divide="ignore", invalid="ignore"):
        low = float(trans(data_scale.low))
        high = float(trans(data_scale.high))
    out = ScaleRange(low, high)
    if not out.is_finite():
        raise DegenerateRange(
            f"Invalid data scale {data_scale} for the transformation of `{col}`; the transformed range "
            f"({low}, {high}) is not finite. Log-like transforms need a positive data range."
        )
    return out


def fill_continuous_transformed_scale(
    col: Formula,
    ax_kind: AxisKind,
    vkind: ValueKind,
    trans: ScaleTransform,
    inv_trans: ScaleTransform,
    data_scale: ScaleRange,
) -> FilledScale:
    return FilledScale(
        col=col,
        sc_kind=ScaleKind.TRANSFORMED_DATA,
        dc_kind=DiscreteKind.CONTINUOUS,
        vkind=vkind,
        ax_kind=ax_kind,
        data_scale=_transform_range(data_scale, trans, col),
        trans=trans,
        inv_trans=inv_trans,
    )


def fill_continuous_color_scale(
    sc_kind: ScaleKind,
    col: Formula,
    data_kind: DataKind,
    vkind: ValueKind,
    data_scale: ScaleRange,
    palette: ColorScale,
    trans: ScaleTransform | None = None,
    inv_trans: ScaleTransform | None = None,
) -> FilledScale:
    _require_transform_pair(trans, inv_trans)
    fill = sc_kind == ScaleKind.FILL_COLOR
    if data_kind == DataKind.MAPPING:
        domain = _transform_range(data_scale, trans, col) if trans is not None else data_scale
        if domain.is_degenerate():
            raise DegenerateRange(f"color data scale of `{col}` is degenerate: {domain}")
    else:
        domain = data_scale
    colors_high = len(palette) - 1

    def map_data(df: pd.DataFrame) -> list[ScaleValue]:
        column = col.evaluate(df)
        require_complete(column, col, sc_kind)
        if data_kind == DataKind.SETTING:
            if column.kind not in (ColumnKind.INT, ColumnKind.STRING, ColumnKind.CONSTANT):
                raise InvalidColumnType(f"Invalid column type {column.kind.value} of column `{col}` to set a color!")
            return [ScaleValue.of_color(to_color(column.value_at(i)), fill=fill) for i in range(len(column))]
        values = column.to_float()
        if trans is not None:
            with np.errstate(divide="ignore", invalid="ignore"):
                values = np.asarray([trans(v) for v in values], dtype=np.float64)
        scaled = colors_high * (values - domain.low) / (domain.high - domain.low)
        if np.isnan(scaled).any():
            rows = [int(i) for i in np.flatnonzero(np.isnan(scaled))]
            raise MissingScaleValue(f"color scale of `{col}` has no color for non numeric rows {rows[:10]!r}")
        idx = np.clip(np.rint(scaled), 0, colors_high).astype(np.int64)
        return [ScaleValue.of_color(palette.color_at(int(i)), fill=fill) for i in idx]

    return FilledScale(
        col=col,
        sc_kind=sc_kind,
        dc_kind=DiscreteKind.CONTINUOUS,
        vkind=vkind,
        data_kind=data_kind,
        data_scale=data_scale,
        map_data=map_data,
        color_scale=palette,
        trans=trans,
        inv_trans=inv_trans,
    )


def _fill_continuous_normalized_scale(
    sc_kind: ScaleKind,
    col: Formula,
    data_kind: DataKind,
    vkind: ValueKind,
    data_scale: ScaleRange,
) -> FilledScale:
    if data_scale.is_degenerate():
        raise DegenerateRange(f"{sc_kind.value} data scale of `{col}` is degenerate: {data_scale}")
    build = ScaleValue.of_size if sc_kind == ScaleKind.SIZE else ScaleValue.of_alpha

    def map_data(df: pd.DataFrame) -> list[ScaleValue]:
        column = col.evaluate(df)
        require_complete(column, col, sc_kind)
        # setting data must be float like as well
        values = column.to_float()
        if data_kind == DataKind.MAPPING:
            values = (values - data_scale.low) / (data_scale.high - data_scale.low)
        return [build(float(v)) for v in values]

    return FilledScale(
        col=col,
        sc_kind=sc_kind,
        dc_kind=DiscreteKind.CONTINUOUS,
        vkind=vkind,
        data_kind=data_kind,
        data_scale=data_scale,
        map_data=map_data,
    )


def fill_continuous_size_scale(
    col: Formula,
    data_kind: DataKind,
    vkind: ValueKind,
    data_scale: ScaleRange,
    size_range: tuple[float, float] = DEFAULT_SIZE_RANGE,
) -> FilledScale:
    _require_range("size", size_range)
    return _fill_continuous_normalized_scale(ScaleKind.SIZE, col, data_kind, vkind, data_scale)


def fill_continuous_alpha_scale(
    col: Formula,
    data_kind: DataKind,
    vkind: ValueKind,
    data_scale: ScaleRange,
    alpha_range: tuple[float, float] = DEFAULT_ALPHA_RANGE,
) -> FilledScale:
    _require_range("alpha", alpha_range)
    return _fill_continuous_normalized_scale(ScaleKind.ALPHA, col, data_kind, vkind, data_scale)


def fill_scale_impl(
    vkind: ValueKind,
    is_discrete: bool,
    col: Formula,
    sc_kind: ScaleKind,
    data_kind: DataKind = DataKind.MAPPING,
    *,
    label_seq: Sequence[Any] | None = None,
    value_map: Mapping[Any, ScaleValue] | None = None,
    data_scale: ScaleRange | None = None,
    ax_kind: AxisKind | None = None,
    trans: ScaleTransform | None = None,
    inv_trans: ScaleTransform | None = None,
    palette: ColorScale | None = None,
    size_range: tuple[float, float] = DEFAULT_SIZE_RANGE,
    alpha_range: tuple[float, float] = DEFAULT_ALPHA_RANGE,
    hue_start: float = DEFAULT_HUE_START,
) -> FilledScale:
    """Build the filled scale of kind ``sc_kind`` from a discreteness verdict.

    Discrete scales need ``label_seq``; continuous scales (except text) need
    ``data_scale``.
    """
    if is_discrete:
        if not label_seq:
            raise ValueError(f"discrete scale for `{col}` needs a non-empty label sequence")
        if sc_kind in COLOR_KINDS:
            return fill_discrete_color_scale(sc_kind, vkind, col, data_kind, label_seq, value_map, hue_start)
        if sc_kind == ScaleKind.SIZE:
            return fill_discrete_size_scale(vkind, col, data_kind, label_seq, value_map, size_range)
        if sc_kind == ScaleKind.ALPHA:
            return fill_discrete_alpha_scale(vkind, col, data_kind, label_seq, value_map, alpha_range)
        if sc_kind == ScaleKind.SHAPE:
            return fill_discrete_shape_scale(vkind, col, label_seq, value_map)
        if sc_kind in (ScaleKind.LINEAR_DATA, ScaleKind.TRANSFORMED_DATA):
            return fill_discrete_position_scale(sc_kind, col, _require_axis(ax_kind), vkind, label_seq, trans, inv_trans)
        if sc_kind == ScaleKind.TEXT:
            return FilledScale(
                col=col, sc_kind=ScaleKind.TEXT, dc_kind=DiscreteKind.DISCRETE, vkind=vkind, label_seq=tuple(label_seq)
            )
        raise TypeError(f"Unsupported scale kind: {sc_kind!r}")

    if sc_kind == ScaleKind.TEXT:
        return FilledScale(col=col, sc_kind=ScaleKind.TEXT, dc_kind=DiscreteKind.CONTINUOUS, vkind=vkind)
    if sc_kind == ScaleKind.SHAPE:
        raise UnsupportedChannelCombination(f"Shape not supported for continuous variables (column `{col}`)!")
    if data_scale is None:
        raise ValueError(f"continuous scale for `{col}` needs a data scale")
    if sc_kind == ScaleKind.LINEAR_DATA:
        return fill_continuous_linear_scale(col, _require_axis(ax_kind), vkind, data_scale)
    if sc_kind == ScaleKind.TRANSFORMED_DATA:
        if trans is None or inv_trans is None:
            raise MissingTransformPair(f"transformed scale for `{col}` needs a forward and an inverse transformation")
        return fill_continuous_transformed_scale(col, _require_axis(ax_kind), vkind, trans, inv_trans, data_scale)
    if sc_kind in COLOR_KINDS:
        palette = palette if palette is not None else color_scale(DEFAULT_COLOR_SCALE)
        return fill_continuous_color_scale(sc_kind, col, data_kind, vkind, data_scale, palette, trans, inv_trans)
    if sc_kind == ScaleKind.SIZE:
        return fill_continuous_size_scale(col, data_kind, vkind, data_scale, size_range)
    if sc_kind == ScaleKind.ALPHA:
        return fill_continuous_alpha_scale(col, data_kind, vkind, data_scale, alpha_range)
    raise TypeError(f"Unsupported scale kind: {sc_kind!r}")
