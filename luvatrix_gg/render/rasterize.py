from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageDraw

from luvatrix_gg.canvas import Coord, Coord1D, ErrorBar, GraphObject, Point, PolyLine, Raster, Rect, Text, Viewport
from luvatrix_gg.colors import RGBA, TRANSPARENT, WHITE
from luvatrix_gg.geom import ErrorBarKind, Style
from luvatrix_gg.render.canvas import blit_argb, draw_marker, draw_polyline, fill_rect, new_canvas, stroke_rect
from luvatrix_gg.render.text import draw_text
from luvatrix_gg.scale_types import AxisKind


@dataclass(frozen=True)
class PixelBox:
    x: float
    y: float
    width: float
    height: float

    def child(self, view: Viewport) -> "PixelBox":
        return PixelBox(
            x=self.x + view.origin_x * self.width,
            y=self.y + view.origin_y * self.height,
            width=view.width * self.width,
            height=view.height * self.height,
        )

    def px(self, c: Coord1D) -> float:
        if c.axis == AxisKind.X:
            return self.x + c.to_relative() * self.width
        return self.y + c.to_relative() * self.height

    def point(self, coord: Coord) -> tuple[int, int]:
        return int(round(self.px(coord.x))), int(round(self.px(coord.y)))


def render_viewport(view: Viewport, width: int, height: int, background: RGBA = WHITE) -> np.ndarray:
    """Rasterize ``view`` and all of its children into an RGBA ``uint8`` frame."""
    frame = new_canvas(width, height, background)
    root = PixelBox(0.0, 0.0, float(width), float(height))
    _render(frame, view, root.child(view))
    return frame


def _render(frame: np.ndarray, view: Viewport, box: PixelBox) -> None:
    for obj in view.objects:
        _draw_object(frame, view, box, obj)
    for child in view.children:
        _render(frame, child, box.child(child))


def _draw_object(frame: np.ndarray, view: Viewport, box: PixelBox, obj: GraphObject) -> None:
    if isinstance(obj, Point):
        x, y = box.point(obj.pos)
        draw_marker(frame, x, y, obj.style.marker, obj.style.color, size=max(1, int(round(obj.style.size))))
    elif isinstance(obj, Rect):
        x0, y0 = box.point(obj.origin)
        x1 = int(round(x0 + obj.width.to_relative(view.x_scale) * box.width))
        y1 = int(round(y0 + obj.height.to_relative(view.y_scale) * box.height))
        fill_rect(frame, x0, y0, x1, y1, obj.style.fill_color)
        stroke_rect(frame, x0, y0, x1, y1, obj.style.color, _line_width(obj.style))
    elif isinstance(obj, PolyLine):
        _draw_polyline(frame, box, obj)
    elif isinstance(obj, ErrorBar):
        _draw_error_bar(frame, box, obj)
    elif isinstance(obj, Raster):
        x0, y0 = box.point(obj.origin)
        x1 = int(round(x0 + obj.width.to_relative(view.x_scale) * box.width))
        y1 = int(round(y0 + obj.height.to_relative(view.y_scale) * box.height))
        blit_argb(frame, obj.draw_cb(), obj.num_x, obj.num_y, x0, y0, x1, y1)
    elif isinstance(obj, Text):
        x, y = box.point(obj.pos)
        draw_text(
            frame,
            x,
            y,
            obj.text,
            obj.font.color,
            font_family=obj.font.family,
            font_size_px=obj.font.size,
            align=obj.align_kind,
        )
    else:
        raise ValueError(f"Unknown graph object: {type(obj).__name__}")


def _line_width(style: Style) -> int:
    return max(1, int(round(style.line_width)))


def _draw_polyline(frame: np.ndarray, box: PixelBox, line: PolyLine) -> None:
    if len(line.points) < 2:
        return
    pts = [box.point(p) for p in line.points]
    if line.style.fill_color != TRANSPARENT and len(pts) >= 3:
        _fill_polygon(frame, pts, line.style.fill_color)
    xs = np.asarray([p[0] for p in pts], dtype=np.int64)
    ys = np.asarray([p[1] for p in pts], dtype=np.int64)
    draw_polyline(frame, xs, ys, line.style.color, width=_line_width(line.style), line_type=line.style.line_type)


def _fill_polygon(frame: np.ndarray, pts: list[tuple[int, int]], color: RGBA) -> None:
    mask_img = Image.new("L", (frame.shape[1], frame.shape[0]), 0)
    ImageDraw.Draw(mask_img).polygon(pts, fill=255)
    mask = np.asarray(mask_img, dtype=np.uint8) > 0
    if not np.any(mask):
        return
    a = color[3] / 255.0
    rgb = frame[mask, :3].astype(np.float32)
    frame[mask, :3] = (np.asarray(color[:3], dtype=np.float32) * a + rgb * (1.0 - a)).astype(np.uint8)
    frame[mask, 3] = 255


def _draw_error_bar(frame: np.ndarray, box: PixelBox, bar: ErrorBar) -> None:
    x, y = box.point(bar.pos)
    up = int(round(box.px(bar.error_up)))
    down = int(round(box.px(bar.error_down)))
    color = bar.style.color
    width = _line_width(bar.style)
    half = max(1, int(round(bar.style.size / 2.0)))
    if bar.axis == AxisKind.X:
        xs, ys = np.asarray([down, up]), np.asarray([y, y])
        caps = ((down, y - half, down, y + half), (up, y - half, up, y + half))
    else:
        xs, ys = np.asarray([x, x]), np.asarray([down, up])
        caps = ((x - half, down, x + half, down), (x - half, up, x + half, up))
    draw_polyline(frame, xs, ys, color, width=width)
    if bar.kind == ErrorBarKind.LINEST:
        for x0, y0, x1, y1 in caps:
            draw_polyline(frame, np.asarray([x0, x1]), np.asarray([y0, y1]), color, width=width)
