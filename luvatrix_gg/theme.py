from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
import os
from typing import Any, Mapping

from luvatrix_gg.ranges import ScaleRange


class OutsideRangeKind(Enum):
    DROP = "drop"
    CLIP = "clip"
    NONE = "none"


DEFAULT_SIZE_RANGE = (2.0, 7.0)
DEFAULT_ALPHA_RANGE = (0.1, 1.0)
DEFAULT_COLOR_SCALE = "viridis"
DEFAULT_HUE_START = 15.0
DEFAULT_DISCRETE_BIN_WIDTH = 0.8


def _default_text_precision() -> int:
    raw = os.getenv("LUVATRIX_GG_TEXT_PRECISION", "4").strip()
    try:
        value = int(raw)
    except ValueError:
        return 4
    return value if value > 0 else 4


@dataclass(frozen=True)
class Theme:
    """Rendering defaults consumed by scale resolution and geometry drawing."""

    x_outside_range: OutsideRangeKind = OutsideRangeKind.CLIP
    y_outside_range: OutsideRangeKind = OutsideRangeKind.CLIP
    # clip targets; the viewport's own data scale is used when unset
    x_margin_range: ScaleRange | None = None
    y_margin_range: ScaleRange | None = None
    discrete_scale_margin: float = 0.0
    discrete_bin_width: float = DEFAULT_DISCRETE_BIN_WIDTH
    size_range: tuple[float, float] = DEFAULT_SIZE_RANGE
    alpha_range: tuple[float, float] = DEFAULT_ALPHA_RANGE
    color_scale: str = DEFAULT_COLOR_SCALE
    hue_start: float = DEFAULT_HUE_START
    text_precision: int = 4
    sample_seed: int = 42
    num_samples: int = 100
    discrete_threshold: float = 0.125


DEFAULT_THEME = Theme(text_precision=_default_text_precision())


def _as_range(key: str, value: Any) -> tuple[float, float]:
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        raise ValueError(f"Theme field `{key}` must be a (low, high) pair")
    low, high = float(value[0]), float(value[1])
    if low == high:
        raise ValueError(f"Theme field `{key}` must not be degenerate")
    return (low, high)


def _as_outside_range(key: str, value: Any) -> OutsideRangeKind:
    if isinstance(value, OutsideRangeKind):
        return value
    try:
        return OutsideRangeKind(str(value).lower())
    except ValueError as exc:
        raise ValueError(f"Theme field `{key}` must be one of drop/clip/none") from exc


def _as_margin_range(key: str, value: Any) -> ScaleRange | None:
    if value is None or isinstance(value, ScaleRange):
        return value
    low, high = _as_range(key, value)
    return ScaleRange(low, high)


def validate_theme(overrides: Mapping[str, Any] | None = None) -> Theme:
    """Merge user overrides into the default theme, rejecting unknown or invalid fields."""

    raw: dict[str, Any] = asdict(DEFAULT_THEME)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown theme field: {key}")
            raw[key] = value

    margin = raw["discrete_scale_margin"]
    if not isinstance(margin, (int, float)) or not 0.0 <= float(margin) < 0.5:
        raise ValueError("Theme field `discrete_scale_margin` must be a relative size in [0, 0.5)")

    bin_width = raw["discrete_bin_width"]
    if not isinstance(bin_width, (int, float)) or not 0.0 < float(bin_width) <= 1.0:
        raise ValueError("Theme field `discrete_bin_width` must be in (0, 1]")

    if not isinstance(raw["color_scale"], str) or not raw["color_scale"].strip():
        raise ValueError("Theme field `color_scale` must be a non-empty colormap name")

    for key in ("text_precision", "num_samples"):
        if not isinstance(raw[key], int) or raw[key] <= 0:
            raise ValueError(f"Theme field `{key}` must be a positive integer")

    threshold = raw["discrete_threshold"]
    if not isinstance(threshold, (int, float)) or not 0.0 < float(threshold) < 1.0:
        raise ValueError("Theme field `discrete_threshold` must be in (0, 1)")

    return Theme(
        x_outside_range=_as_outside_range("x_outside_range", raw["x_outside_range"]),
        y_outside_range=_as_outside_range("y_outside_range", raw["y_outside_range"]),
        x_margin_range=_as_margin_range("x_margin_range", raw["x_margin_range"]),
        y_margin_range=_as_margin_range("y_margin_range", raw["y_margin_range"]),
        discrete_scale_margin=float(margin),
        discrete_bin_width=float(bin_width),
        size_range=_as_range("size_range", raw["size_range"]),
        alpha_range=_as_range("alpha_range", raw["alpha_range"]),
        color_scale=raw["color_scale"].strip(),
        hue_start=float(raw["hue_start"]),
        text_precision=int(raw["text_precision"]),
        sample_seed=int(raw["sample_seed"]),
        num_samples=int(raw["num_samples"]),
        discrete_threshold=float(threshold),
    )
