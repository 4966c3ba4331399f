from __future__ import annotations

from typing import Any, Mapping, Sequence

import numpy as np

from luvatrix_gg.aes import Plot
from luvatrix_gg.canvas import Viewport
from luvatrix_gg.collect import collect_scales
from luvatrix_gg.colors import RGBA, WHITE
from luvatrix_gg.drawing import create_gobj_from_geom
from luvatrix_gg.geom import FilledGeom
from luvatrix_gg.render.rasterize import render_viewport
from luvatrix_gg.scale_types import FilledScales
from luvatrix_gg.theme import DEFAULT_THEME, Theme, validate_theme


def _theme(theme: Theme | Mapping[str, Any] | None) -> Theme:
    if theme is None:
        return DEFAULT_THEME
    if isinstance(theme, Theme):
        return theme
    return validate_theme(theme)


def resolve_scales(plot: Plot, theme: Theme | Mapping[str, Any] | None = None) -> FilledScales:
    return collect_scales(plot, _theme(theme))


def draw_geoms(
    geoms: Sequence[FilledGeom],
    *,
    view: Viewport | None = None,
    theme: Theme | Mapping[str, Any] | None = None,
    label_val: Any = None,
) -> Viewport:
    """Draw every geom into its own child of ``view`` and return the new tree.

    Without ``view`` a root viewport spanning the first geom's data scales
    is used.
    """
    if not geoms:
        raise ValueError("geoms must not be empty")
    resolved = _theme(theme)
    out = Viewport(x_scale=geoms[0].x_scale, y_scale=geoms[0].y_scale) if view is None else view.copy()
    for fg in geoms:
        layer = Viewport(x_scale=out.x_scale, y_scale=out.y_scale, name=f"{out.name}/geom{fg.geom.gid}")
        out.children.append(create_gobj_from_geom(layer, fg, resolved, label_val=label_val))
    return out


def render_geoms(
    geoms: Sequence[FilledGeom],
    width: int,
    height: int,
    *,
    theme: Theme | Mapping[str, Any] | None = None,
    background: RGBA = WHITE,
) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")
    return render_viewport(draw_geoms(geoms, theme=theme), width, height, background)
