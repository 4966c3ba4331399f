from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np

from luvatrix_gg.columns import Column, ColumnKind, ValueKind
from luvatrix_gg.errors import EmptyColumn, GenericColumnUnsupported, UnsupportedObjectColumn
from luvatrix_gg.scale_types import DiscreteKind, Scale


LOGGER = logging.getLogger(__name__)

DEFAULT_SAMPLE_SEED = 42
DEFAULT_NUM_SAMPLES = 100
DEFAULT_DISCRETE_THRESHOLD = 0.125


def draw_sample_indices(high: int, num: int = DEFAULT_NUM_SAMPLES, seed: int = DEFAULT_SAMPLE_SEED) -> np.ndarray:
    """Draw up to ``num`` indices in ``[0, high]`` from a generator seeded with ``seed``."""
    if high < 0:
        return np.zeros(0, dtype=np.int64)
    rng = np.random.default_rng(seed)
    count = min(num - 1, high) + 1
    return rng.integers(0, high + 1, size=count, dtype=np.int64)


def _sample_indices(column: Column, draw_samples: bool, num_samples: int, seed: int) -> np.ndarray:
    if draw_samples:
        return draw_sample_indices(column.high, num=num_samples, seed=seed)
    return np.arange(len(column), dtype=np.int64)


def is_discrete_data(
    column: Column,
    scale: Scale,
    *,
    draw_samples: bool = True,
    seed: int = DEFAULT_SAMPLE_SEED,
    num_samples: int = DEFAULT_NUM_SAMPLES,
    threshold: float = DEFAULT_DISCRETE_THRESHOLD,
) -> bool:
    """Estimate whether ``column`` holds discrete data.

    Float columns are continuous; string, bool and constant columns are
    discrete. Integer and object columns are sampled (deterministically for a
    given ``seed``) and count as continuous if the number of distinct sampled
    values exceeds ``threshold`` times the sample size. Object columns holding
    any string or bool are discrete.

    ``scale`` is only used for error messages.
    """
    kind = column.kind
    if kind == ColumnKind.FLOAT:
        return False
    if kind in (ColumnKind.STRING, ColumnKind.BOOL, ColumnKind.CONSTANT):
        return True
    if kind == ColumnKind.NONE:
        raise EmptyColumn(f"Input column `{scale.col}` is empty. Such a column cannot be plotted.")
    if kind == ColumnKind.GENERIC:
        raise GenericColumnUnsupported(
            f"Input column `{scale.col}` is generic ({column.values.dtype}). Generic columns are not supported."
        )

    indices = _sample_indices(column, draw_samples, num_samples, seed)
    elements = [column.value_at(int(i)) for i in indices]
    if kind == ColumnKind.OBJECT:
        if any(isinstance(v, Mapping) for v in elements):
            raise UnsupportedObjectColumn(
                f"Input column `{scale.col}` contains object like values (key / value pairs in a single "
                "element). Such a column cannot be plotted."
            )
        if any(isinstance(v, (str, bool)) for v in elements):
            LOGGER.debug("object column `%s` contains strings or bools, treating as discrete", scale.col)
            return True
    elif kind != ColumnKind.INT:
        raise TypeError(f"Unsupported column kind: {kind!r}")

    cardinality = len(set(elements))
    discrete = cardinality <= indices.size * threshold
    LOGGER.debug(
        "column `%s` determined to be %s (%d distinct of %d sampled); use an explicit discreteness to override",
        scale.col,
        "discrete" if discrete else "continuous",
        cardinality,
        indices.size,
    )
    return discrete


def discrete_and_type(
    data: Column,
    scale: Scale,
    dc_kind: DiscreteKind | None = None,
    *,
    seed: int = DEFAULT_SAMPLE_SEED,
    num_samples: int = DEFAULT_NUM_SAMPLES,
    threshold: float = DEFAULT_DISCRETE_THRESHOLD,
) -> tuple[bool, ValueKind]:
    """Discreteness (forced by ``dc_kind`` if given) and value kind of ``data``."""
    if dc_kind is not None:
        is_discrete = dc_kind == DiscreteKind.DISCRETE
    else:
        is_discrete = is_discrete_data(data, scale, seed=seed, num_samples=num_samples, threshold=threshold)
    return is_discrete, data.value_kind()
