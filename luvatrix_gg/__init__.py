from luvatrix_gg.aes import Aesthetics, Facet, GeomLayer, Plot, aes, facet_wrap, factor, setting
from luvatrix_gg.api import draw_geoms, render_geoms, resolve_scales
from luvatrix_gg.canvas import Coord, Coord1D, Quantity, UnitKind, Viewport
from luvatrix_gg.collect import add_facets, call_fill_scale, collect_scales, fill_scale
from luvatrix_gg.columns import Formula, column_ref, computed, constant
from luvatrix_gg.discreteness import discrete_and_type, is_discrete_data
from luvatrix_gg.drawing import create_gobj_from_geom
from luvatrix_gg.errors import (
    DegenerateRange,
    EmptyColumn,
    GenericColumnUnsupported,
    InvalidColumnType,
    MissingBinEdge,
    MissingTransformPair,
    PlotDataError,
    UnimplementedPositionPolicy,
    UnsupportedChannelCombination,
    UnsupportedObjectColumn,
)
from luvatrix_gg.fill import fill_scale_impl
from luvatrix_gg.geom import (
    BinPositionKind,
    FilledGeom,
    Geom,
    GeomKind,
    GgStyle,
    HistogramDrawingStyle,
    LabelData,
    PositionKind,
    Style,
)
from luvatrix_gg.layout import calc_view_map, prepare_views
from luvatrix_gg.ranges import ScaleRange
from luvatrix_gg.scale_types import (
    AxisKind,
    DataKind,
    DiscreteKind,
    FilledScale,
    FilledScales,
    Scale,
    ScaleKind,
    ScaleValue,
)
from luvatrix_gg.theme import DEFAULT_THEME, OutsideRangeKind, Theme, validate_theme

__all__ = [
    "Aesthetics",
    "AxisKind",
    "BinPositionKind",
    "Coord",
    "Coord1D",
    "DEFAULT_THEME",
    "DataKind",
    "DegenerateRange",
    "DiscreteKind",
    "EmptyColumn",
    "Facet",
    "FilledGeom",
    "FilledScale",
    "FilledScales",
    "Formula",
    "GenericColumnUnsupported",
    "Geom",
    "GeomKind",
    "GeomLayer",
    "GgStyle",
    "HistogramDrawingStyle",
    "InvalidColumnType",
    "LabelData",
    "MissingBinEdge",
    "MissingTransformPair",
    "OutsideRangeKind",
    "Plot",
    "PlotDataError",
    "PositionKind",
    "Quantity",
    "Scale",
    "ScaleKind",
    "ScaleRange",
    "ScaleValue",
    "Style",
    "Theme",
    "UnimplementedPositionPolicy",
    "UnitKind",
    "UnsupportedChannelCombination",
    "UnsupportedObjectColumn",
    "Viewport",
    "add_facets",
    "aes",
    "calc_view_map",
    "call_fill_scale",
    "collect_scales",
    "column_ref",
    "computed",
    "constant",
    "create_gobj_from_geom",
    "discrete_and_type",
    "draw_geoms",
    "facet_wrap",
    "factor",
    "fill_scale",
    "fill_scale_impl",
    "is_discrete_data",
    "prepare_views",
    "render_geoms",
    "resolve_scales",
    "setting",
    "validate_theme",
]
