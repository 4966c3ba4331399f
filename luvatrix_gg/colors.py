from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from numbers import Integral
from typing import Any

import numpy as np
from cmap import Colormap
from PIL import ImageColor

from luvatrix_gg.errors import InvalidColumnType


RGBA = tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)
BLACK: RGBA = (0, 0, 0, 255)
WHITE: RGBA = (255, 255, 255, 255)
GREY20: RGBA = (51, 51, 51, 255)
GREY92: RGBA = (235, 235, 235, 255)

DEFAULT_HUE_CHROMA = 100.0
DEFAULT_HUE_LUMINANCE = 65.0
PALETTE_SIZE = 256

# CIE D65 reference white in u'v' chromaticity.
_WHITE_U = 0.1978398
_WHITE_V = 0.4683363
_XYZ_TO_LINEAR_RGB = np.asarray(
    [
        [3.240479, -1.537150, -0.498535],
        [-0.969256, 1.875992, 0.041556],
        [0.055648, -0.204043, 1.057311],
    ],
    dtype=np.float64,
)


def hue_sequence(num: int, hue_start: float = 15.0) -> np.ndarray:
    """Evenly spaced hue angles in degrees, ``num`` steps around the circle."""
    if num <= 0:
        return np.zeros(0, dtype=np.float64)
    hues = np.linspace(hue_start, hue_start + 360.0, num + 1, dtype=np.float64)[:num]
    return np.mod(hues, 360.0)


def hcl_to_rgba(
    hue: float,
    chroma: float = DEFAULT_HUE_CHROMA,
    luminance: float = DEFAULT_HUE_LUMINANCE,
    alpha: int = 255,
) -> RGBA:
    if luminance <= 0.0:
        return (0, 0, 0, alpha)
    h = np.deg2rad(hue)
    u = chroma * np.cos(h)
    v = chroma * np.sin(h)
    y = ((luminance + 16.0) / 116.0) ** 3 if luminance > 8.0 else luminance / 903.3
    u_prime = u / (13.0 * luminance) + _WHITE_U
    v_prime = v / (13.0 * luminance) + _WHITE_V
    x = 9.0 * y * u_prime / (4.0 * v_prime)
    z = -x / 3.0 - 5.0 * y + 3.0 * y / v_prime
    linear = _XYZ_TO_LINEAR_RGB @ np.asarray([x, y, z], dtype=np.float64)
    srgb = np.where(linear <= 0.0031308, 12.92 * linear, 1.055 * np.power(np.abs(linear), 1.0 / 2.4) - 0.055)
    rgb = np.rint(np.clip(srgb, 0.0, 1.0) * 255.0).astype(np.int64)
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]), alpha)


def color_hue(num: int, hue_start: float = 15.0) -> list[RGBA]:
    """``num`` colors evenly spaced around the HCL hue wheel."""
    return [hcl_to_rgba(float(h)) for h in hue_sequence(num, hue_start)]


def to_color(value: Any) -> RGBA:
    """Parse a color literal, an ``0xRRGGBB`` integer or an RGB(A) tuple."""
    if isinstance(value, tuple) and len(value) in (3, 4):
        channels = [int(c) for c in value]
        if len(channels) == 3:
            channels.append(255)
        return (channels[0], channels[1], channels[2], channels[3])
    if isinstance(value, bool):
        raise InvalidColumnType(f"cannot interpret boolean {value!r} as a color")
    if isinstance(value, Integral):
        packed = int(value)
        if packed < 0 or packed > 0xFFFFFF:
            raise InvalidColumnType(f"integer color out of range: {packed:#x}")
        return ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF, 255)
    if isinstance(value, str):
        try:
            parsed = ImageColor.getrgb(value.strip())
        except ValueError as exc:
            raise InvalidColumnType(f"unknown color literal: {value!r}") from exc
        if len(parsed) == 3:
            return (parsed[0], parsed[1], parsed[2], 255)
        return (parsed[0], parsed[1], parsed[2], parsed[3])
    raise InvalidColumnType(f"cannot interpret {value!r} as a color")


def with_alpha(color: RGBA, alpha: float) -> RGBA:
    a = int(round(max(0.0, min(1.0, alpha)) * 255))
    return (color[0], color[1], color[2], a)


def pack_argb(color: RGBA) -> int:
    return (color[3] << 24) | (color[0] << 16) | (color[1] << 8) | color[2]


@dataclass(frozen=True, eq=False)
class ColorScale:
    name: str
    colors: np.ndarray

    def __len__(self) -> int:
        return int(self.colors.shape[0])

    def color_at(self, idx: int) -> RGBA:
        r, g, b, a = (int(c) for c in self.colors[idx])
        return (r, g, b, a)


@lru_cache(maxsize=16)
def color_scale(name: str = "viridis", size: int = PALETTE_SIZE) -> ColorScale:
    if size <= 1:
        raise ValueError("palette size must be > 1")
    rgba = Colormap(name)(np.linspace(0.0, 1.0, size, dtype=np.float64))
    colors = np.rint(np.clip(np.asarray(rgba, dtype=np.float64), 0.0, 1.0) * 255.0).astype(np.uint8)
    colors.setflags(write=False)
    return ColorScale(name=name, colors=colors)
