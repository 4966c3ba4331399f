from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Any, Sequence

import pandas as pd

from luvatrix_gg.aes import CHANNEL_KINDS, Plot
from luvatrix_gg.colors import color_scale
from luvatrix_gg.columns import Column, FormulaKind, ValueKind, concat_columns, constant_column, scale_from_data, sorted_labels
from luvatrix_gg.discreteness import discrete_and_type
from luvatrix_gg.errors import MissingTransformPair
from luvatrix_gg.fill import fill_scale_impl
from luvatrix_gg.ranges import ScaleRange, widen_degenerate
from luvatrix_gg.scale_types import (
    POSITION_KINDS,
    DiscreteKind,
    FilledScale,
    FilledScales,
    Scale,
    ScaleEntry,
    ScaleKind,
)
from luvatrix_gg.theme import DEFAULT_THEME, Theme


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ScaleData:
    """A scale request plus the geom's own dataframe, if it brings one."""

    data_frame: pd.DataFrame | None
    scale: Scale


def _identity_data(df: pd.DataFrame, scale: Scale) -> Column:
    if scale.col.kind == FormulaKind.SCALAR:
        # reducing formulas contribute a single value
        return constant_column(scale.col.reduce(df), 1)
    return scale.col.evaluate(df)


def _group_label_seq(data: Column, scales: Sequence[Scale], sc_kind: ScaleKind) -> tuple[Any, ...]:
    for s in scales:
        if s.label_seq:
            return tuple(s.label_seq)
    labels = sorted_labels(data.unique_values())
    if sc_kind in POSITION_KINDS and scales[0].reversed:
        labels.reverse()
    return tuple(labels)


def _group_data_scale(data: Column, scales: Sequence[Scale], sc_kind: ScaleKind) -> ScaleRange:
    for s in scales:
        if s.data_scale is not None and not s.data_scale.is_degenerate():
            return s.data_scale
    data_scale = scale_from_data(data)
    if sc_kind in POSITION_KINDS:
        data_scale = widen_degenerate(data_scale)
    return data_scale


def fill_scale(
    df: pd.DataFrame,
    scales: Sequence[Scale],
    sc_kind: ScaleKind,
    theme: Theme = DEFAULT_THEME,
) -> list[FilledScale]:
    """Resolve all ``scales`` of one channel against their combined data.

    Every scale contributes its data to one combined column, which decides
    discreteness, labels and domain for the whole group. One filled scale is
    returned per input scale, each keeping its own column reference.
    """
    if not scales:
        return []
    data = concat_columns([_identity_data(df, s) for s in scales])
    if data.value_kind() == ValueKind.NULL:
        LOGGER.warning(
            "Unexpected data type null of column(s) %s, skipping scale",
            ", ".join(str(s.col) for s in scales),
        )
        return []

    forced = next((s.dc_kind for s in scales if s.has_discreteness()), None)
    is_discrete, vkind = discrete_and_type(
        data,
        scales[0],
        forced,
        seed=theme.sample_seed,
        num_samples=theme.num_samples,
        threshold=theme.discrete_threshold,
    )

    label_seq: tuple[Any, ...] | None = None
    value_map = None
    data_scale: ScaleRange | None = None
    if is_discrete:
        label_seq = _group_label_seq(data, scales, sc_kind)
        value_map = next((s.value_map for s in scales if s.value_map), None)
    elif sc_kind != ScaleKind.TEXT:
        data_scale = _group_data_scale(data, scales, sc_kind)

    result: list[FilledScale] = []
    for s in scales:
        if (s.trans is None) != (s.inv_trans is None):
            raise MissingTransformPair(f"scale of `{s.col}` needs both a forward and an inverse transformation")
        filled = fill_scale_impl(
            vkind,
            is_discrete,
            s.col,
            sc_kind,
            s.data_kind,
            label_seq=label_seq,
            value_map=value_map,
            data_scale=data_scale,
            ax_kind=s.ax_kind,
            trans=s.trans,
            inv_trans=s.inv_trans,
            palette=s.color_scale if s.color_scale is not None else color_scale(theme.color_scale),
            size_range=s.size_range if s.size_range is not None else theme.size_range,
            alpha_range=s.alpha_range if s.alpha_range is not None else theme.alpha_range,
            hue_start=theme.hue_start,
        )
        updates: dict[str, Any] = {"ids": s.ids, "reversed": s.reversed}
        if sc_kind in POSITION_KINDS:
            updates.update(
                secondary_axis=s.secondary_axis,
                date_scale=s.date_scale,
                num_ticks=s.num_ticks,
                breaks=s.breaks,
            )
            if is_discrete:
                updates["format_discrete_label"] = s.format_discrete_label
            else:
                updates["format_continuous_label"] = s.format_continuous_label
        result.append(replace(filled, **updates))
    LOGGER.debug(
        "filled %d %s scale(s) as %s",
        len(result),
        sc_kind.value,
        DiscreteKind.DISCRETE.value if is_discrete else DiscreteKind.CONTINUOUS.value,
    )
    return result


def _kind_for(scale: Scale, sc_kind: ScaleKind) -> ScaleKind:
    # x / y are collected as linear data; a transformed request keeps its kind
    if scale.sc_kind == ScaleKind.TRANSFORMED_DATA:
        return ScaleKind.TRANSFORMED_DATA
    return sc_kind


def call_fill_scale(
    plot_data: pd.DataFrame,
    scales: Sequence[ScaleData],
    sc_kind: ScaleKind,
    theme: Theme = DEFAULT_THEME,
) -> list[FilledScale]:
    """Fill the scales sharing the plot data as one group, and each scale
    with its own data frame on its own."""
    shared = [sd.scale for sd in scales if sd.data_frame is None]
    result: list[FilledScale] = []
    if shared:
        result.extend(fill_scale(plot_data, shared, _kind_for(shared[0], sc_kind), theme))
    for sd in scales:
        if sd.data_frame is None:
            continue
        result.extend(fill_scale(sd.data_frame, [sd.scale], _kind_for(sd.scale, sc_kind), theme))
    return result


def collect(plot: Plot, channel: str) -> list[ScaleData]:
    out: list[ScaleData] = []
    main = getattr(plot.aes, channel)
    if main is not None:
        # the plot data is handed to the fill procedures separately
        out.append(ScaleData(data_frame=None, scale=main))
    for layer in plot.geoms:
        scale = getattr(layer.aes, channel)
        if scale is None:
            continue
        if scale.ids is None:
            scale = replace(scale, ids=frozenset({layer.geom.gid}))
        out.append(ScaleData(data_frame=layer.data, scale=scale))
    return out


def add_facets(plot: Plot, theme: Theme = DEFAULT_THEME) -> tuple[FilledScale, ...]:
    """Resolve each facet column on its own so facet labels never mix."""
    if plot.facet is None:
        return ()
    filled: list[FilledScale] = []
    for template in plot.facet.columns:
        filled.extend(call_fill_scale(plot.data, [ScaleData(data_frame=None, scale=template)], ScaleKind.LINEAR_DATA, theme))
    return tuple(filled)


def collect_scales(plot: Plot, theme: Theme = DEFAULT_THEME) -> FilledScales:
    """Collect and resolve every aesthetic of ``plot`` and its geoms."""
    entries: dict[str, ScaleEntry] = {}
    requests: dict[str, list[ScaleData]] = {}
    for channel, (sc_kind, _) in CHANNEL_KINDS.items():
        requests[channel] = collect(plot, channel)
        filled = call_fill_scale(plot.data, requests[channel], sc_kind, theme)
        entries[channel] = ScaleEntry.from_filled(filled)

    def is_discrete_axis(channel: str) -> bool:
        return not any(not fs.is_discrete() for fs in entries[channel].all())

    return FilledScales(
        input_data=plot.data,
        discrete_x=is_discrete_axis("x"),
        discrete_y=is_discrete_axis("y"),
        reversed_x=any(sd.scale.reversed for sd in requests["x"]),
        reversed_y=any(sd.scale.reversed for sd in requests["y"]),
        facets=add_facets(plot, theme),
        **entries,
    )
