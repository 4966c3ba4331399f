from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

import pandas as pd

from luvatrix_gg.columns import as_formula
from luvatrix_gg.geom import Geom
from luvatrix_gg.scale_types import AxisKind, DataKind, DiscreteKind, Scale, ScaleKind


@dataclass(frozen=True)
class Factor:
    """Marks a column as discrete regardless of its type."""

    value: Any


@dataclass(frozen=True)
class Setting:
    """A fixed value for a whole layer instead of a per-row mapping."""

    value: Any


def factor(value: Any) -> Factor:
    return Factor(value)


def setting(value: Any) -> Setting:
    return Setting(value)


CHANNEL_KINDS: dict[str, tuple[ScaleKind, AxisKind | None]] = {
    "x": (ScaleKind.LINEAR_DATA, AxisKind.X),
    "x_min": (ScaleKind.LINEAR_DATA, AxisKind.X),
    "x_max": (ScaleKind.LINEAR_DATA, AxisKind.X),
    "y": (ScaleKind.LINEAR_DATA, AxisKind.Y),
    "y_min": (ScaleKind.LINEAR_DATA, AxisKind.Y),
    "y_max": (ScaleKind.LINEAR_DATA, AxisKind.Y),
    "color": (ScaleKind.COLOR, None),
    "fill": (ScaleKind.FILL_COLOR, None),
    "alpha": (ScaleKind.ALPHA, None),
    "size": (ScaleKind.SIZE, None),
    "shape": (ScaleKind.SHAPE, None),
    "width": (ScaleKind.LINEAR_DATA, AxisKind.X),
    "height": (ScaleKind.LINEAR_DATA, AxisKind.Y),
    "text": (ScaleKind.TEXT, None),
    "weight": (ScaleKind.LINEAR_DATA, AxisKind.Y),
}


@dataclass(frozen=True)
class Aesthetics:
    x: Optional[Scale] = None
    x_min: Optional[Scale] = None
    x_max: Optional[Scale] = None
    y: Optional[Scale] = None
    y_min: Optional[Scale] = None
    y_max: Optional[Scale] = None
    color: Optional[Scale] = None
    fill: Optional[Scale] = None
    alpha: Optional[Scale] = None
    size: Optional[Scale] = None
    shape: Optional[Scale] = None
    width: Optional[Scale] = None
    height: Optional[Scale] = None
    text: Optional[Scale] = None
    weight: Optional[Scale] = None


def scale_for_channel(channel: str, value: Any) -> Scale:
    """Build the scale request for ``channel`` from a column name, formula, factor, setting or scale."""
    if isinstance(value, Scale):
        return value
    if channel not in CHANNEL_KINDS:
        raise ValueError(f"Unknown aesthetic: {channel}")
    sc_kind, ax_kind = CHANNEL_KINDS[channel]
    dc_kind = None
    data_kind = DataKind.MAPPING
    if isinstance(value, Factor):
        dc_kind = DiscreteKind.DISCRETE
        value = value.value
    elif isinstance(value, Setting):
        data_kind = DataKind.SETTING
        value = value.value
    return Scale(col=as_formula(value), sc_kind=sc_kind, ax_kind=ax_kind, dc_kind=dc_kind, data_kind=data_kind)


def aes(**channels: Any) -> Aesthetics:
    return Aesthetics(**{name: scale_for_channel(name, value) for name, value in channels.items() if value is not None})


@dataclass(frozen=True)
class GeomLayer:
    """A geom together with its own aesthetics and optional own data."""

    geom: Geom
    aes: Aesthetics = Aesthetics()
    data: Optional[pd.DataFrame] = None


@dataclass(frozen=True)
class Facet:
    columns: tuple[Scale, ...] = ()


def facet_wrap(*columns: str) -> Facet:
    return Facet(columns=tuple(scale_for_channel("x", factor(c)) for c in columns))


@dataclass(frozen=True, eq=False)
class Plot:
    data: pd.DataFrame
    aes: Aesthetics = Aesthetics()
    geoms: tuple[GeomLayer, ...] = ()
    facet: Optional[Facet] = None

    def add(self, geom: Geom, aes: Aesthetics | None = None, data: pd.DataFrame | None = None) -> "Plot":
        if any(layer.geom.gid == geom.gid for layer in self.geoms):
            geom = replace(geom, gid=max(layer.geom.gid for layer in self.geoms) + 1)
        layer = GeomLayer(geom=geom, aes=aes if aes is not None else Aesthetics(), data=data)
        return replace(self, geoms=self.geoms + (layer,))
