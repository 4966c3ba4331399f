from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from numbers import Number
from typing import Any, Callable

import numpy as np
import pandas as pd

from luvatrix_gg.errors import PlotDataError
from luvatrix_gg.ranges import ScaleRange


class ColumnKind(Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    CONSTANT = "constant"
    OBJECT = "object"
    NONE = "none"
    GENERIC = "generic"


class ValueKind(Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    OBJECT = "object"
    NULL = "null"


class FormulaKind(Enum):
    COLUMN = "column"
    VALUE = "value"
    FUNCTION = "function"
    SCALAR = "scalar"


_INFERRED_KINDS = {
    "string": ColumnKind.STRING,
    "boolean": ColumnKind.BOOL,
    "integer": ColumnKind.INT,
    "floating": ColumnKind.FLOAT,
}


def infer_column_kind(series: pd.Series) -> ColumnKind:
    if len(series) == 0:
        return ColumnKind.NONE
    dtype = series.dtype
    if isinstance(dtype, pd.CategoricalDtype):
        return ColumnKind.STRING
    if pd.api.types.is_bool_dtype(dtype):
        return ColumnKind.BOOL
    if pd.api.types.is_integer_dtype(dtype):
        return ColumnKind.INT
    if pd.api.types.is_float_dtype(dtype):
        return ColumnKind.FLOAT
    if dtype == object:
        inferred = pd.api.types.infer_dtype(series, skipna=True)
        return _INFERRED_KINDS.get(inferred, ColumnKind.OBJECT)
    if pd.api.types.is_string_dtype(dtype):
        return ColumnKind.STRING
    return ColumnKind.GENERIC


def to_python(value: Any) -> Any:
    """Unwrap numpy scalars and map pandas/numpy nulls to ``None``."""
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def label_sort_key(value: Any) -> tuple[int, Any]:
    if isinstance(value, (bool, np.bool_)):
        return (0, bool(value))
    if isinstance(value, Number):
        return (1, float(value))  # type: ignore[arg-type]
    if isinstance(value, str):
        return (2, value)
    return (3, str(value))


def sorted_labels(values: Sequence[Any]) -> list[Any]:
    return sorted(values, key=label_sort_key)


@dataclass(frozen=True, eq=False)
class Column:
    values: pd.Series
    kind: ColumnKind

    def __len__(self) -> int:
        return len(self.values)

    @property
    def high(self) -> int:
        return len(self.values) - 1

    def value_at(self, idx: int) -> Any:
        return to_python(self.values.iloc[idx])

    def null_rows(self) -> list[int]:
        return [int(i) for i in np.flatnonzero(self.values.isna().to_numpy())]

    def to_float(self) -> np.ndarray:
        return pd.to_numeric(self.values, errors="coerce").to_numpy(dtype=np.float64, na_value=np.nan)

    def unique_values(self) -> list[Any]:
        out: list[Any] = []
        seen: set[Any] = set()
        for raw in pd.unique(self.values.dropna().to_numpy(dtype=object)):
            value = to_python(raw)
            if value is None or value in seen:
                continue
            seen.add(value)
            out.append(value)
        return out

    def value_kind(self) -> ValueKind:
        if self.kind == ColumnKind.NONE or self.values.isna().all():
            return ValueKind.NULL
        if self.kind == ColumnKind.CONSTANT:
            return _value_kind_of(self.value_at(0))
        return _COLUMN_VALUE_KINDS[self.kind]


_COLUMN_VALUE_KINDS = {
    ColumnKind.INT: ValueKind.INT,
    ColumnKind.FLOAT: ValueKind.FLOAT,
    ColumnKind.STRING: ValueKind.STRING,
    ColumnKind.BOOL: ValueKind.BOOL,
    ColumnKind.OBJECT: ValueKind.OBJECT,
    ColumnKind.GENERIC: ValueKind.OBJECT,
}


def _value_kind_of(value: Any) -> ValueKind:
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    return ValueKind.OBJECT


def column_from_values(values: Any) -> Column:
    series = values if isinstance(values, pd.Series) else pd.Series(values)
    series = series.reset_index(drop=True)
    return Column(values=series, kind=infer_column_kind(series))


def constant_column(value: Any, length: int) -> Column:
    series = pd.Series([value] * length, dtype=object if isinstance(value, str) else None)
    if length == 0:
        return Column(values=series, kind=ColumnKind.NONE)
    return Column(values=series, kind=ColumnKind.CONSTANT)


def empty_column() -> Column:
    return Column(values=pd.Series([], dtype=object), kind=ColumnKind.NONE)


def concat_columns(columns: Sequence[Column]) -> Column:
    parts = [c for c in columns if len(c) > 0]
    if not parts:
        return empty_column()
    series = pd.concat([c.values for c in parts], ignore_index=True)
    if all(c.kind == ColumnKind.CONSTANT for c in parts):
        firsts = {c.value_at(0) for c in parts}
        if len(firsts) == 1:
            return Column(values=series, kind=ColumnKind.CONSTANT)
    return Column(values=series, kind=infer_column_kind(series))


def scale_from_data(column: Column) -> ScaleRange:
    """Numeric domain of the finite values in ``column``."""
    arr = column.to_float()
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        raise PlotDataError(f"column contains no finite values to build a data scale: {column.values.name!r}")
    return ScaleRange(low=float(np.min(finite)), high=float(np.max(finite)))


@dataclass(frozen=True)
class Formula:
    """Reference to the data behind an aesthetic.

    A formula is either a column name, a literal value, a vectorized
    function of the dataframe, or a reducing (scalar) function.
    """

    name: str
    kind: FormulaKind = FormulaKind.COLUMN
    value: Any = None
    fn: Callable[[pd.DataFrame], Any] | None = None

    def __str__(self) -> str:
        return self.name

    def evaluate(self, df: pd.DataFrame) -> Column:
        if self.kind == FormulaKind.COLUMN:
            if self.name not in df.columns:
                raise PlotDataError(f"column not found: {self.name}")
            return column_from_values(df[self.name])
        if self.kind == FormulaKind.VALUE:
            return constant_column(self.value, len(df))
        if self.kind == FormulaKind.SCALAR:
            return constant_column(self.reduce(df), len(df))
        if self.kind == FormulaKind.FUNCTION:
            assert self.fn is not None
            result = self.fn(df)
            if np.isscalar(result) or result is None:
                return constant_column(result, len(df))
            column = column_from_values(result)
            if len(column) != len(df):
                raise PlotDataError(
                    f"formula `{self.name}` produced {len(column)} values for a dataframe of {len(df)} rows"
                )
            return column
        raise TypeError(f"Unsupported formula kind: {self.kind!r}")

    def reduce(self, df: pd.DataFrame) -> Any:
        if self.kind == FormulaKind.VALUE:
            return self.value
        if self.kind != FormulaKind.SCALAR or self.fn is None:
            raise PlotDataError(f"formula `{self.name}` is not a reducing formula")
        return to_python(self.fn(df))


def column_ref(name: str) -> Formula:
    return Formula(name=name, kind=FormulaKind.COLUMN)


def constant(value: Any) -> Formula:
    return Formula(name=str(value), kind=FormulaKind.VALUE, value=value)


def computed(name: str, fn: Callable[[pd.DataFrame], Any], *, reduce: bool = False) -> Formula:
    kind = FormulaKind.SCALAR if reduce else FormulaKind.FUNCTION
    return Formula(name=name, kind=kind, fn=fn)


def as_formula(value: Any) -> Formula:
    if isinstance(value, Formula):
        return value
    if isinstance(value, str):
        return column_ref(value)
    if callable(value):
        return computed(getattr(value, "__name__", "<formula>"), value)
    return constant(value)
