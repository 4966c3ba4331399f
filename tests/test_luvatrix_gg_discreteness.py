from __future__ import annotations

import unittest

import numpy as np
import pandas as pd

from luvatrix_gg.columns import ColumnKind, ValueKind, column_from_values, column_ref, concat_columns, constant_column
from luvatrix_gg.discreteness import discrete_and_type, draw_sample_indices, is_discrete_data
from luvatrix_gg.errors import EmptyColumn, GenericColumnUnsupported, UnsupportedObjectColumn
from luvatrix_gg.scale_types import AxisKind, DiscreteKind, Scale, ScaleKind


def _scale(name: str = "x") -> Scale:
    return Scale(col=column_ref(name), sc_kind=ScaleKind.LINEAR_DATA, ax_kind=AxisKind.X)


class ColumnKindTests(unittest.TestCase):
    def test_infers_kinds_from_pandas_dtypes(self) -> None:
        self.assertEqual(column_from_values([1, 2, 3]).kind, ColumnKind.INT)
        self.assertEqual(column_from_values([1.0, 2.5]).kind, ColumnKind.FLOAT)
        self.assertEqual(column_from_values(["a", "b"]).kind, ColumnKind.STRING)
        self.assertEqual(column_from_values([True, False]).kind, ColumnKind.BOOL)
        self.assertEqual(column_from_values([1, "a", 2.5]).kind, ColumnKind.OBJECT)
        self.assertEqual(column_from_values(pd.Series([], dtype=float)).kind, ColumnKind.NONE)
        self.assertEqual(column_from_values(pd.to_datetime(["2024-01-01"])).kind, ColumnKind.GENERIC)

    def test_concat_of_equal_constants_stays_constant(self) -> None:
        data = concat_columns([constant_column("a", 2), constant_column("a", 3)])
        self.assertEqual(data.kind, ColumnKind.CONSTANT)
        self.assertEqual(len(data), 5)

    def test_unique_values_skip_nulls_and_keep_order(self) -> None:
        data = column_from_values(["b", None, "a", "b"])
        self.assertEqual(data.unique_values(), ["b", "a"])


class DiscretenessTests(unittest.TestCase):
    def test_low_cardinality_int_column_is_discrete(self) -> None:
        data = column_from_values([1, 1, 1, 2, 2, 3] * 20)
        self.assertTrue(is_discrete_data(data, _scale()))

    def test_distinct_int_column_is_continuous(self) -> None:
        data = column_from_values(list(range(1000)))
        self.assertFalse(is_discrete_data(data, _scale()))

    def test_threshold_is_inclusive(self) -> None:
        at_threshold = column_from_values([0] * 8)
        above = column_from_values([0] * 7 + [1])
        self.assertTrue(is_discrete_data(at_threshold, _scale(), draw_samples=False))
        self.assertFalse(is_discrete_data(above, _scale(), draw_samples=False))

    def test_float_column_is_continuous(self) -> None:
        self.assertFalse(is_discrete_data(column_from_values([1.0, 1.0, 1.0]), _scale()))

    def test_string_bool_and_constant_columns_are_discrete(self) -> None:
        self.assertTrue(is_discrete_data(column_from_values(["a"] * 500), _scale()))
        self.assertTrue(is_discrete_data(column_from_values([True, False]), _scale()))
        self.assertTrue(is_discrete_data(constant_column(3.5, 10), _scale()))

    def test_object_column_with_strings_is_discrete(self) -> None:
        data = column_from_values(list(range(200)) + ["label"])
        self.assertTrue(is_discrete_data(data, _scale(), draw_samples=False))

    def test_empty_column_fails(self) -> None:
        with self.assertRaisesRegex(EmptyColumn, "is empty"):
            is_discrete_data(column_from_values(pd.Series([], dtype=float)), _scale())

    def test_nested_object_column_fails(self) -> None:
        data = column_from_values(pd.Series([{"a": 1}, {"b": 2}], dtype=object))
        with self.assertRaises(UnsupportedObjectColumn):
            is_discrete_data(data, _scale())

    def test_generic_column_fails(self) -> None:
        data = column_from_values(pd.to_datetime(["2024-01-01", "2024-01-02"]))
        with self.assertRaises(GenericColumnUnsupported):
            is_discrete_data(data, _scale())

    def test_sampling_is_deterministic_for_a_seed(self) -> None:
        first = draw_sample_indices(999, num=100, seed=42)
        second = draw_sample_indices(999, num=100, seed=42)
        self.assertTrue(np.array_equal(first, second))
        self.assertEqual(first.size, 100)
        self.assertTrue(np.all((first >= 0) & (first <= 999)))

        data = column_from_values([i % 30 for i in range(1000)])
        verdicts = {is_discrete_data(data, _scale(), seed=7) for _ in range(5)}
        self.assertEqual(len(verdicts), 1)

    def test_short_columns_sample_every_row_count(self) -> None:
        self.assertEqual(draw_sample_indices(4).size, 5)
        self.assertEqual(draw_sample_indices(-1).size, 0)

    def test_forced_discreteness_skips_sampling(self) -> None:
        data = column_from_values([0.5, 1.5, 2.5])
        self.assertEqual(discrete_and_type(data, _scale(), DiscreteKind.DISCRETE), (True, ValueKind.FLOAT))
        ints = column_from_values([1, 1, 1])
        self.assertEqual(discrete_and_type(ints, _scale(), DiscreteKind.CONTINUOUS), (False, ValueKind.INT))


if __name__ == "__main__":
    unittest.main()
