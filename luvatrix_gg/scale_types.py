from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

import pandas as pd

from luvatrix_gg.colors import RGBA, ColorScale
from luvatrix_gg.columns import Column, Formula, ValueKind
from luvatrix_gg.errors import MissingScaleValue, PlotDataError
from luvatrix_gg.ranges import ScaleRange


ScaleTransform = Callable[[float], float]


class ScaleKind(Enum):
    LINEAR_DATA = "linear_data"
    TRANSFORMED_DATA = "transformed_data"
    COLOR = "color"
    FILL_COLOR = "fill_color"
    ALPHA = "alpha"
    SHAPE = "shape"
    SIZE = "size"
    TEXT = "text"


POSITION_KINDS = frozenset({ScaleKind.LINEAR_DATA, ScaleKind.TRANSFORMED_DATA})
COLOR_KINDS = frozenset({ScaleKind.COLOR, ScaleKind.FILL_COLOR})


class DiscreteKind(Enum):
    DISCRETE = "discrete"
    CONTINUOUS = "continuous"


class DataKind(Enum):
    MAPPING = "mapping"
    SETTING = "setting"


class AxisKind(Enum):
    X = "x"
    Y = "y"


class MarkerKind(Enum):
    CIRCLE = "circle"
    CROSS = "cross"
    TRIANGLE = "triangle"
    RHOMBUS = "rhombus"
    RECTANGLE = "rectangle"
    ROTCROSS = "rotcross"
    UPSIDEDOWN_TRIANGLE = "upsidedown_triangle"
    EMPTY_CIRCLE = "empty_circle"
    EMPTY_RECTANGLE = "empty_rectangle"
    EMPTY_RHOMBUS = "empty_rhombus"


class LineType(Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"
    DOT_DASH = "dot_dash"
    LONG_DASH = "long_dash"
    TWO_DASH = "two_dash"


class SecondaryAxis(Enum):
    NONE = "none"
    TOP = "top"
    RIGHT = "right"


@dataclass(frozen=True)
class ScaleValue:
    """One concrete visual property produced by a resolved scale."""

    kind: ScaleKind
    color: RGBA | None = None
    size: float | None = None
    alpha: float | None = None
    marker: MarkerKind | None = None
    line_type: LineType | None = None

    def __post_init__(self) -> None:
        populated = {
            "color": self.color is not None,
            "size": self.size is not None,
            "alpha": self.alpha is not None,
            "shape": self.marker is not None and self.line_type is not None,
        }
        expected = _SCALE_VALUE_FIELD.get(self.kind)
        if expected is None:
            raise PlotDataError(f"scale kind {self.kind.value} carries no scale value")
        if not populated[expected] or sum(populated.values()) != 1:
            raise PlotDataError(f"scale value of kind {self.kind.value} must carry exactly `{expected}`")

    @classmethod
    def of_color(cls, color: RGBA, *, fill: bool = False) -> "ScaleValue":
        return cls(kind=ScaleKind.FILL_COLOR if fill else ScaleKind.COLOR, color=color)

    @classmethod
    def of_size(cls, size: float) -> "ScaleValue":
        return cls(kind=ScaleKind.SIZE, size=float(size))

    @classmethod
    def of_alpha(cls, alpha: float) -> "ScaleValue":
        return cls(kind=ScaleKind.ALPHA, alpha=float(alpha))

    @classmethod
    def of_shape(cls, marker: MarkerKind, line_type: LineType) -> "ScaleValue":
        return cls(kind=ScaleKind.SHAPE, marker=marker, line_type=line_type)


_SCALE_VALUE_FIELD = {
    ScaleKind.COLOR: "color",
    ScaleKind.FILL_COLOR: "color",
    ScaleKind.SIZE: "size",
    ScaleKind.ALPHA: "alpha",
    ScaleKind.SHAPE: "shape",
}


MapData = Callable[[pd.DataFrame], list[ScaleValue]]


@dataclass(frozen=True)
class DateScale:
    format_string: str = "%Y-%m-%d"
    is_timestamp: bool = True


@dataclass(frozen=True)
class Scale:
    """Request to resolve one aesthetic channel for one layer."""

    col: Formula
    sc_kind: ScaleKind
    ax_kind: AxisKind | None = None
    dc_kind: DiscreteKind | None = None
    data_kind: DataKind = DataKind.MAPPING
    label_seq: tuple[Any, ...] = ()
    value_map: Mapping[Any, ScaleValue] | None = None
    data_scale: ScaleRange | None = None
    size_range: tuple[float, float] | None = None
    alpha_range: tuple[float, float] | None = None
    color_scale: ColorScale | None = None
    trans: ScaleTransform | None = None
    inv_trans: ScaleTransform | None = None
    reversed: bool = False
    secondary_axis: SecondaryAxis = SecondaryAxis.NONE
    date_scale: DateScale | None = None
    num_ticks: int | None = None
    breaks: tuple[float, ...] = ()
    format_discrete_label: Callable[[Any], str] | None = None
    format_continuous_label: Callable[[float], str] | None = None
    ids: frozenset[int] | None = None

    def has_discreteness(self) -> bool:
        return self.dc_kind is not None


def require_complete(column: Column, col: Formula, sc_kind: ScaleKind) -> None:
    """Fail on null rows of a mapped column; they have no scale value."""
    missing = column.null_rows()
    if missing:
        raise MissingScaleValue(
            f"{sc_kind.value} scale of `{col}` cannot map null values (rows {missing[:10]!r}); "
            "drop or fill them before plotting"
        )


@dataclass(frozen=True)
class FilledScale:
    """Resolved, immutable form of a :class:`Scale`."""

    col: Formula
    sc_kind: ScaleKind
    dc_kind: DiscreteKind
    vkind: ValueKind = ValueKind.NULL
    data_kind: DataKind = DataKind.MAPPING
    ax_kind: AxisKind | None = None
    label_seq: tuple[Any, ...] = ()
    value_map: Mapping[Any, ScaleValue] = field(default_factory=lambda: MappingProxyType({}))
    data_scale: ScaleRange | None = None
    map_data: MapData | None = None
    color_scale: ColorScale | None = None
    trans: ScaleTransform | None = None
    inv_trans: ScaleTransform | None = None
    reversed: bool = False
    secondary_axis: SecondaryAxis = SecondaryAxis.NONE
    date_scale: DateScale | None = None
    num_ticks: int | None = None
    breaks: tuple[float, ...] = ()
    format_discrete_label: Callable[[Any], str] | None = None
    format_continuous_label: Callable[[float], str] | None = None
    ids: frozenset[int] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.value_map, MappingProxyType):
            object.__setattr__(self, "value_map", MappingProxyType(dict(self.value_map)))
        if self.sc_kind == ScaleKind.TEXT:
            return
        if self.is_discrete():
            if not self.label_seq:
                raise PlotDataError(f"discrete scale for `{self.col}` requires a non-empty label sequence")
            if len(set(self.label_seq)) != len(self.label_seq):
                raise PlotDataError(f"discrete scale for `{self.col}` has duplicate labels")
            if self.data_scale is not None or self.map_data is not None:
                raise PlotDataError(f"discrete scale for `{self.col}` must not carry a data scale")
            if self.sc_kind not in POSITION_KINDS:
                missing = [label for label in self.label_seq if label not in self.value_map]
                if missing:
                    raise PlotDataError(f"discrete scale for `{self.col}` has no values for labels {missing!r}")
        else:
            if self.data_scale is None:
                raise PlotDataError(f"continuous scale for `{self.col}` requires a data scale")
            if self.label_seq:
                raise PlotDataError(f"continuous scale for `{self.col}` must not carry labels")

    def is_discrete(self) -> bool:
        return self.dc_kind == DiscreteKind.DISCRETE

    def values_for(self, df: pd.DataFrame) -> list[ScaleValue]:
        """Map every row of ``df`` through this scale."""
        if self.sc_kind in POSITION_KINDS or self.sc_kind == ScaleKind.TEXT:
            raise PlotDataError(f"scale of kind {self.sc_kind.value} does not produce scale values")
        if not self.is_discrete():
            assert self.map_data is not None
            return self.map_data(df)
        column = self.col.evaluate(df)
        require_complete(column, self.col, self.sc_kind)
        return [self.value_map[column.value_at(i)] for i in range(len(column))]


@dataclass(frozen=True)
class ScaleEntry:
    """Main scale of a channel plus the layer specific overrides."""

    main: FilledScale | None = None
    more: tuple[FilledScale, ...] = ()

    def all(self) -> tuple[FilledScale, ...]:
        if self.main is None:
            return self.more
        return (self.main,) + self.more

    def for_geom(self, geom_id: int) -> FilledScale | None:
        for scale in self.more:
            if scale.ids is not None and geom_id in scale.ids:
                return scale
        return self.main

    @classmethod
    def from_filled(cls, filled: Sequence[FilledScale]) -> "ScaleEntry":
        if filled and filled[0].ids is None:
            return cls(main=filled[0], more=tuple(filled[1:]))
        return cls(main=None, more=tuple(filled))


@dataclass(frozen=True)
class FilledScales:
    """The resolved scale set of one plot."""

    input_data: Optional[pd.DataFrame] = None
    x: ScaleEntry = ScaleEntry()
    x_min: ScaleEntry = ScaleEntry()
    x_max: ScaleEntry = ScaleEntry()
    y: ScaleEntry = ScaleEntry()
    y_min: ScaleEntry = ScaleEntry()
    y_max: ScaleEntry = ScaleEntry()
    color: ScaleEntry = ScaleEntry()
    fill: ScaleEntry = ScaleEntry()
    alpha: ScaleEntry = ScaleEntry()
    size: ScaleEntry = ScaleEntry()
    shape: ScaleEntry = ScaleEntry()
    width: ScaleEntry = ScaleEntry()
    height: ScaleEntry = ScaleEntry()
    text: ScaleEntry = ScaleEntry()
    weight: ScaleEntry = ScaleEntry()
    discrete_x: bool = False
    discrete_y: bool = False
    reversed_x: bool = False
    reversed_y: bool = False
    facets: tuple[FilledScale, ...] = ()
