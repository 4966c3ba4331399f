from .canvas import blit, blit_argb, draw_marker, draw_pixel, draw_polyline, fill_rect, new_canvas, stroke_rect
from .rasterize import PixelBox, render_viewport
from .text import draw_text, text_size

__all__ = [
    "PixelBox",
    "blit",
    "blit_argb",
    "draw_marker",
    "draw_pixel",
    "draw_polyline",
    "draw_text",
    "fill_rect",
    "new_canvas",
    "render_viewport",
    "stroke_rect",
    "text_size",
]
