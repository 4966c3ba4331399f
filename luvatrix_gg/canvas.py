from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Sequence, Union

import numpy as np

from luvatrix_gg.geom import ErrorBarKind, Font, Style, TextAlignKind
from luvatrix_gg.ranges import UNIT_RANGE, ScaleRange
from luvatrix_gg.scale_types import AxisKind


class UnitKind(Enum):
    RELATIVE = "relative"
    DATA = "data"


@dataclass(frozen=True)
class Coord1D:
    """A position along one axis, either relative to the viewport or in data units."""

    pos: float
    kind: UnitKind = UnitKind.RELATIVE
    axis: AxisKind = AxisKind.X
    scale: ScaleRange | None = None

    def with_pos(self, pos: float) -> "Coord1D":
        return replace(self, pos=float(pos))

    def to_relative(self) -> float:
        # relative y grows downwards, data y grows upwards
        if self.kind == UnitKind.RELATIVE:
            return self.pos
        scale = self.scale if self.scale is not None else UNIT_RANGE
        rel = scale.normalize(self.pos)
        return 1.0 - rel if self.axis == AxisKind.Y else rel


@dataclass(frozen=True)
class Coord:
    x: Coord1D
    y: Coord1D


def c1(pos: float, kind: UnitKind = UnitKind.RELATIVE, axis: AxisKind = AxisKind.X, scale: ScaleRange | None = None) -> Coord1D:
    return Coord1D(pos=float(pos), kind=kind, axis=axis, scale=scale)


@dataclass(frozen=True)
class Quantity:
    val: float
    unit: UnitKind = UnitKind.RELATIVE

    def to_relative(self, scale: ScaleRange | None = None) -> float:
        if self.unit == UnitKind.RELATIVE:
            return self.val
        scale = scale if scale is not None else UNIT_RANGE
        return self.val / scale.span


def quant(val: float, unit: UnitKind = UnitKind.RELATIVE) -> Quantity:
    return Quantity(val=float(val), unit=unit)


@dataclass(frozen=True)
class Point:
    pos: Coord
    style: Style


@dataclass(frozen=True)
class Rect:
    """Axis aligned rectangle; negative sizes extend left / upwards from ``origin``."""

    origin: Coord
    width: Quantity
    height: Quantity
    style: Style


@dataclass(frozen=True)
class PolyLine:
    points: tuple[Coord, ...]
    style: Style


@dataclass(frozen=True)
class ErrorBar:
    pos: Coord
    error_up: Coord1D
    error_down: Coord1D
    axis: AxisKind
    kind: ErrorBarKind
    style: Style


@dataclass(frozen=True, eq=False)
class Raster:
    """Bitmap of ``num_x * num_y`` packed ARGB pixels, top row first."""

    origin: Coord
    width: Quantity
    height: Quantity
    num_x: int
    num_y: int
    draw_cb: Callable[[], np.ndarray]


@dataclass(frozen=True)
class Text:
    pos: Coord
    text: str
    font: Font = Font()
    align_kind: TextAlignKind = TextAlignKind.CENTER


GraphObject = Union[Point, Rect, PolyLine, ErrorBar, Raster, Text]


def _split_sizes(count: int, sizes: Sequence[Quantity | None]) -> list[float]:
    if not sizes:
        return [1.0 / count] * count
    if len(sizes) != count:
        raise ValueError(f"expected {count} sizes, got {len(sizes)}")
    fixed = sum(q.val for q in sizes if q is not None)
    if fixed > 1.0:
        raise ValueError("fixed grid sizes exceed the viewport")
    num_free = sum(1 for q in sizes if q is None)
    share = (1.0 - fixed) / num_free if num_free else 0.0
    return [share if q is None else q.val for q in sizes]


@dataclass
class Viewport:
    """A rectangular drawing region, relative to its parent.

    Children are stored row major, so the child at (row, col) of a grid with
    ``cols`` columns lives at ``row * cols + col``.
    """

    origin_x: float = 0.0
    origin_y: float = 0.0
    width: float = 1.0
    height: float = 1.0
    x_scale: ScaleRange = UNIT_RANGE
    y_scale: ScaleRange = UNIT_RANGE
    name: str = "root"
    children: list["Viewport"] = field(default_factory=list)
    objects: list[GraphObject] = field(default_factory=list)

    def __getitem__(self, idx: int) -> "Viewport":
        return self.children[idx]

    def copy(self) -> "Viewport":
        return replace(
            self,
            children=[child.copy() for child in self.children],
            objects=list(self.objects),
        )

    def add_obj(self, obj: GraphObject) -> None:
        self.objects.append(obj)

    def layout(
        self,
        cols: int,
        rows: int,
        col_widths: Sequence[Quantity | None] = (),
        row_heights: Sequence[Quantity | None] = (),
    ) -> None:
        """Replace the children by a ``rows x cols`` grid.

        Cells sized ``None`` share whatever the fixed cells leave over.
        """
        if cols <= 0 or rows <= 0:
            raise ValueError("cols and rows must be > 0")
        widths = _split_sizes(cols, col_widths)
        heights = _split_sizes(rows, row_heights)
        children: list[Viewport] = []
        y = 0.0
        for i, h in enumerate(heights):
            x = 0.0
            for j, w in enumerate(widths):
                children.append(
                    Viewport(
                        origin_x=x,
                        origin_y=y,
                        width=w,
                        height=h,
                        x_scale=self.x_scale,
                        y_scale=self.y_scale,
                        name=f"{self.name}/{i}.{j}",
                    )
                )
                x += w
            y += h
        self.children = children
