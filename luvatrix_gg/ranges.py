from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ScaleRange:
    low: float
    high: float

    @property
    def span(self) -> float:
        return self.high - self.low

    def is_degenerate(self) -> bool:
        return self.low == self.high

    def is_finite(self) -> bool:
        return bool(np.isfinite(self.low) and np.isfinite(self.high))

    def normalize(self, value: float) -> float:
        return (value - self.low) / (self.high - self.low)


UNIT_RANGE = ScaleRange(0.0, 1.0)


def widen_degenerate(scale: ScaleRange, pad: float = 1.0) -> ScaleRange:
    if not scale.is_degenerate():
        return scale
    delta = max(pad, abs(scale.low) * 0.05)
    return ScaleRange(scale.low - delta, scale.high + delta)
