from __future__ import annotations

from functools import lru_cache

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from luvatrix_gg.colors import RGBA
from luvatrix_gg.geom import TextAlignKind


# tried in order when a family has no font file of its own name
FALLBACK_FONT_FILES = ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf", "Helvetica.ttc")
_GENERIC_FAMILIES = frozenset({"sans-serif", "serif", "monospace"})


@lru_cache(maxsize=32)
def load_font(family: str, size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(size_px)))
    name = family.strip()
    files = FALLBACK_FONT_FILES
    if name and name.lower() not in _GENERIC_FAMILIES:
        files = (name, name.replace(" ", "") + ".ttf") + files
    for file_name in files:
        try:
            return ImageFont.truetype(file_name, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=256)
def text_mask(text: str, family: str, size_px: float) -> np.ndarray:
    """Coverage mask (``uint8``, 0..255) of ``text`` cropped to its ink box."""
    font = load_font(family, size_px)
    left, top, right, bottom = font.getbbox(text)
    image = Image.new("L", (max(1, int(right - left)), max(1, int(bottom - top))), 0)
    ImageDraw.Draw(image).text((-left, -top), text, fill=255, font=font)
    mask = np.asarray(image, dtype=np.uint8)
    mask.setflags(write=False)
    return mask


def text_size(text: str, family: str = "sans-serif", size_px: float = 12.0) -> tuple[int, int]:
    if not text:
        return (0, 0)
    h, w = text_mask(text, family, size_px).shape
    return (w, h)


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font_family: str = "sans-serif",
    font_size_px: float = 12.0,
    align: TextAlignKind = TextAlignKind.CENTER,
) -> None:
    """Draw ``text`` vertically centered on ``y``; ``x`` is the anchor given by ``align``."""
    if not text or color[3] == 0:
        return
    mask = text_mask(text, font_family, font_size_px)
    h, w = mask.shape
    if align == TextAlignKind.CENTER:
        x -= w // 2
    elif align == TextAlignKind.RIGHT:
        x -= w
    y -= h // 2

    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(dst.shape[1], x + w), min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    a = mask[y0 - y : y1 - y, x0 - x : x1 - x, None].astype(np.float32) * (color[3] / 255.0 / 255.0)
    patch = dst[y0:y1, x0:x1]
    rgb = np.asarray(color[:3], dtype=np.float32)
    patch[:, :, :3] = (rgb * a + patch[:, :, :3].astype(np.float32) * (1.0 - a)).astype(np.uint8)
    patch[:, :, 3] = 255
