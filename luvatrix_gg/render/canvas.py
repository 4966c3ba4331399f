from __future__ import annotations

import numpy as np

from luvatrix_gg.colors import RGBA
from luvatrix_gg.scale_types import LineType, MarkerKind


# on / off pixel runs, repeated along a line
DASH_PATTERNS: dict[LineType, tuple[int, ...]] = {
    LineType.SOLID: (),
    LineType.DASHED: (6, 4),
    LineType.DOTTED: (1, 3),
    LineType.DOT_DASH: (1, 3, 6, 3),
    LineType.LONG_DASH: (12, 4),
    LineType.TWO_DASH: (8, 3, 3, 3),
}


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0] or x < 0 or x >= dst.shape[1]:
        return
    a = color[3] / 255.0
    inv = 1.0 - a
    current = dst[y, x, :3].astype(np.float32)
    dst[y, x, 0:3] = (np.asarray(color[0:3], dtype=np.float32) * a + current * inv).astype(np.uint8)
    dst[y, x, 3] = 255


def fill_rect(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    """Blend ``color`` over the pixels in ``[x0, x1) x [y0, y1)``."""
    if color[3] == 0:
        return
    xa, xb = max(0, min(x0, x1)), min(dst.shape[1], max(x0, x1))
    ya, yb = max(0, min(y0, y1)), min(dst.shape[0], max(y0, y1))
    if xa >= xb or ya >= yb:
        return
    patch = dst[ya:yb, xa:xb]
    a = color[3] / 255.0
    patch[:, :, :3] = (np.asarray(color[0:3], dtype=np.float32) * a + patch[:, :, :3].astype(np.float32) * (1.0 - a)).astype(np.uint8)
    patch[:, :, 3] = 255


def stroke_rect(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA, width: int = 1) -> None:
    if color[3] == 0 or width <= 0:
        return
    xa, xb = min(x0, x1), max(x0, x1)
    ya, yb = min(y0, y1), max(y0, y1)
    fill_rect(dst, xa, ya, xb, ya + width, color)
    fill_rect(dst, xa, yb - width, xb, yb, color)
    fill_rect(dst, xa, ya + width, xa + width, yb - width, color)
    fill_rect(dst, xb - width, ya + width, xb, yb - width, color)


def blit_argb(dst: np.ndarray, pixels: np.ndarray, num_x: int, num_y: int, x0: int, y0: int, x1: int, y1: int) -> None:
    """Scale a packed ARGB bitmap (top row first) onto the pixel box ``[x0, x1) x [y0, y1)``."""
    w, h = x1 - x0, y1 - y0
    if w <= 0 or h <= 0:
        return
    grid = np.asarray(pixels, dtype=np.uint32).reshape(num_y, num_x)
    cols = np.minimum((np.arange(w) * num_x) // w, num_x - 1)
    rows = np.minimum((np.arange(h) * num_y) // h, num_y - 1)
    argb = grid[rows][:, cols]
    src = np.empty((h, w, 4), dtype=np.uint8)
    src[:, :, 0] = (argb >> 16) & 0xFF
    src[:, :, 1] = (argb >> 8) & 0xFF
    src[:, :, 2] = argb & 0xFF
    src[:, :, 3] = (argb >> 24) & 0xFF
    blit(dst, src, x0, y0)


def blit(dst: np.ndarray, src: np.ndarray, x0: int = 0, y0: int = 0) -> None:
    h, w, _ = src.shape
    sx0, sy0 = max(0, -x0), max(0, -y0)
    x0, y0 = max(0, x0), max(0, y0)
    y1 = min(dst.shape[0], y0 + h - sy0)
    x1 = min(dst.shape[1], x0 + w - sx0)
    if y0 >= y1 or x0 >= x1:
        return

    view = dst[y0:y1, x0:x1]
    patch = src[sy0 : sy0 + (y1 - y0), sx0 : sx0 + (x1 - x0)]
    alpha = patch[:, :, 3:4].astype(np.float32) / 255.0
    inv = 1.0 - alpha
    view[:, :, :3] = (patch[:, :, :3] * alpha + view[:, :, :3] * inv).astype(np.uint8)
    view[:, :, 3] = 255


def _line_pixels(x0: int, y0: int, x1: int, y1: int) -> list[tuple[int, int]]:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    out: list[tuple[int, int]] = []
    while True:
        out.append((x0, y0))
        if x0 == x1 and y0 == y1:
            return out
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _dash_mask(count: int, pattern: tuple[int, ...], offset: int) -> np.ndarray:
    if not pattern:
        return np.ones(count, dtype=bool)
    period = sum(pattern)
    on = np.zeros(period, dtype=bool)
    pos = 0
    for k, run in enumerate(pattern):
        if k % 2 == 0:
            on[pos : pos + run] = True
        pos += run
    return on[(np.arange(count) + offset) % period]


def draw_polyline(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: int = 1,
    line_type: LineType = LineType.SOLID,
) -> None:
    if xs.size < 2 or color[3] == 0:
        return
    pattern = DASH_PATTERNS[line_type]
    offset = 0
    for i in range(xs.size - 1):
        pixels = _line_pixels(int(xs[i]), int(ys[i]), int(xs[i + 1]), int(ys[i + 1]))
        # the shared end point is drawn by the next segment
        pixels = pixels[:-1] if i < xs.size - 2 else pixels
        mask = _dash_mask(len(pixels), pattern, offset)
        offset += len(pixels)
        for (x, y), on in zip(pixels, mask):
            if on:
                _draw_square_brush(dst, x, y, color=color, width=width)


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    fill_rect(dst, x - radius, y - radius, x + radius + 1, y + radius + 1, color)


def draw_marker(dst: np.ndarray, x: int, y: int, marker: MarkerKind, color: RGBA, size: int = 3) -> None:
    radius = max(1, size // 2)
    yy, xx = np.mgrid[-radius : radius + 1, -radius : radius + 1]
    if marker in (MarkerKind.CIRCLE, MarkerKind.EMPTY_CIRCLE):
        inside = xx * xx + yy * yy <= radius * radius
        edge = inside & (xx * xx + yy * yy >= (radius - 1) * (radius - 1))
        mask = edge if marker == MarkerKind.EMPTY_CIRCLE else inside
    elif marker in (MarkerKind.RECTANGLE, MarkerKind.EMPTY_RECTANGLE):
        mask = np.ones_like(xx, dtype=bool)
        if marker == MarkerKind.EMPTY_RECTANGLE:
            mask = (np.abs(xx) == radius) | (np.abs(yy) == radius)
    elif marker in (MarkerKind.RHOMBUS, MarkerKind.EMPTY_RHOMBUS):
        dist = np.abs(xx) + np.abs(yy)
        mask = dist == radius if marker == MarkerKind.EMPTY_RHOMBUS else dist <= radius
    elif marker == MarkerKind.CROSS:
        mask = (xx == 0) | (yy == 0)
    elif marker == MarkerKind.ROTCROSS:
        mask = (xx == yy) | (xx == -yy)
    elif marker == MarkerKind.TRIANGLE:
        mask = 2 * np.abs(xx) <= yy + radius
    elif marker == MarkerKind.UPSIDEDOWN_TRIANGLE:
        mask = 2 * np.abs(xx) <= radius - yy
    else:
        raise ValueError(f"Unknown marker: {marker}")
    for dy, dx in zip(*np.nonzero(mask)):
        draw_pixel(dst, x + int(dx) - radius, y + int(dy) - radius, color)
