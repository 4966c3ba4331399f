from __future__ import annotations

import unittest

import numpy as np
import pandas as pd

from luvatrix_gg.colors import color_hue, color_scale
from luvatrix_gg.columns import ValueKind, column_ref
from luvatrix_gg.errors import (
    DegenerateRange,
    InvalidColumnType,
    MissingScaleValue,
    MissingTransformPair,
    PlotDataError,
    UnsupportedChannelCombination,
)
from luvatrix_gg.fill import fill_scale_impl
from luvatrix_gg.ranges import ScaleRange
from luvatrix_gg.scale_types import (
    AxisKind,
    DataKind,
    DiscreteKind,
    FilledScale,
    LineType,
    MarkerKind,
    ScaleKind,
    ScaleValue,
)


class DiscreteFillTests(unittest.TestCase):
    def test_discrete_color_assigns_one_hue_per_label(self) -> None:
        filled = fill_scale_impl(ValueKind.STRING, True, column_ref("c"), ScaleKind.COLOR, label_seq=("a", "b", "c"))
        hues = color_hue(3, hue_start=15.0)
        self.assertEqual(filled.label_seq, ("a", "b", "c"))
        self.assertEqual([filled.value_map[k].color for k in filled.label_seq], hues)
        self.assertEqual(len(filled.value_map), len(filled.label_seq))
        self.assertIsNone(filled.data_scale)
        self.assertIsNone(filled.map_data)

    def test_discrete_fill_setting_parses_labels_as_colors(self) -> None:
        filled = fill_scale_impl(
            ValueKind.STRING,
            True,
            column_ref("c"),
            ScaleKind.FILL_COLOR,
            DataKind.SETTING,
            label_seq=("red", "#0000ff"),
        )
        self.assertEqual(filled.value_map["red"], ScaleValue.of_color((255, 0, 0, 255), fill=True))
        self.assertEqual(filled.value_map["#0000ff"].color, (0, 0, 255, 255))

    def test_explicit_value_map_is_reused(self) -> None:
        value_map = {"a": ScaleValue.of_color((1, 2, 3, 255)), "b": ScaleValue.of_color((4, 5, 6, 255))}
        filled = fill_scale_impl(
            ValueKind.STRING, True, column_ref("c"), ScaleKind.COLOR, label_seq=("a", "b"), value_map=value_map
        )
        self.assertEqual(dict(filled.value_map), value_map)

    def test_discrete_size_steps_over_at_most_five_sizes(self) -> None:
        three = fill_scale_impl(ValueKind.INT, True, column_ref("s"), ScaleKind.SIZE, label_seq=(1, 2, 3))
        sizes = [three.value_map[k].size for k in (1, 2, 3)]
        self.assertTrue(np.allclose(sizes, [2.0, 2.0 + 5.0 / 3.0, 2.0 + 10.0 / 3.0]))

        seven = fill_scale_impl(ValueKind.INT, True, column_ref("s"), ScaleKind.SIZE, label_seq=tuple(range(7)))
        sizes = [seven.value_map[k].size for k in range(7)]
        self.assertEqual(sizes, [2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 7.0])

    def test_discrete_size_setting_requires_numbers(self) -> None:
        filled = fill_scale_impl(
            ValueKind.INT, True, column_ref("s"), ScaleKind.SIZE, DataKind.SETTING, label_seq=(4,)
        )
        self.assertEqual(filled.value_map[4].size, 4.0)
        with self.assertRaises(InvalidColumnType):
            fill_scale_impl(ValueKind.STRING, True, column_ref("s"), ScaleKind.SIZE, DataKind.SETTING, label_seq=("big",))

    def test_discrete_alpha_steps_over_all_labels(self) -> None:
        filled = fill_scale_impl(
            ValueKind.STRING, True, column_ref("a"), ScaleKind.ALPHA, label_seq=("w", "x", "y", "z")
        )
        alphas = [filled.value_map[k].alpha for k in ("w", "x", "y", "z")]
        self.assertTrue(np.allclose(alphas, [0.1, 0.325, 0.55, 0.775]))

    def test_discrete_shape_cycles_markers_and_line_types(self) -> None:
        labels = tuple(range(12))
        filled = fill_scale_impl(ValueKind.INT, True, column_ref("k"), ScaleKind.SHAPE, label_seq=labels)
        markers = list(MarkerKind)
        line_types = list(LineType)
        for i in labels:
            self.assertEqual(filled.value_map[i].marker, markers[i % len(markers)])
            self.assertEqual(filled.value_map[i].line_type, line_types[i % len(line_types)])

    def test_discrete_position_keeps_labels_only(self) -> None:
        filled = fill_scale_impl(
            ValueKind.STRING, True, column_ref("x"), ScaleKind.LINEAR_DATA, ax_kind=AxisKind.X, label_seq=("a", "b")
        )
        self.assertEqual(filled.label_seq, ("a", "b"))
        self.assertEqual(len(filled.value_map), 0)
        self.assertEqual(filled.ax_kind, AxisKind.X)

    def test_discrete_transformed_position_needs_transform_pair(self) -> None:
        with self.assertRaises(MissingTransformPair):
            fill_scale_impl(
                ValueKind.INT,
                True,
                column_ref("x"),
                ScaleKind.TRANSFORMED_DATA,
                ax_kind=AxisKind.X,
                label_seq=(1, 10),
                trans=np.log10,
            )

    def test_discrete_branch_requires_labels(self) -> None:
        with self.assertRaises(ValueError):
            fill_scale_impl(ValueKind.STRING, True, column_ref("c"), ScaleKind.COLOR, label_seq=())

    def test_filled_scale_rejects_duplicate_labels(self) -> None:
        with self.assertRaisesRegex(PlotDataError, "duplicate"):
            FilledScale(
                col=column_ref("x"),
                sc_kind=ScaleKind.LINEAR_DATA,
                dc_kind=DiscreteKind.DISCRETE,
                label_seq=("a", "a"),
            )


class ContinuousFillTests(unittest.TestCase):
    def test_continuous_size_maps_domain_onto_unit_interval(self) -> None:
        filled = fill_scale_impl(
            ValueKind.FLOAT, False, column_ref("v"), ScaleKind.SIZE, data_scale=ScaleRange(0.0, 10.0)
        )
        df = pd.DataFrame({"v": [0.0, 2.5, 5.0, 10.0]})
        sizes = [sv.size for sv in filled.map_data(df)]
        self.assertEqual(sizes[0], 0.0)
        self.assertEqual(sizes[-1], 1.0)
        self.assertEqual(sizes, sorted(sizes))

    def test_continuous_alpha_setting_passes_values_through(self) -> None:
        filled = fill_scale_impl(
            ValueKind.FLOAT,
            False,
            column_ref("v"),
            ScaleKind.ALPHA,
            DataKind.SETTING,
            data_scale=ScaleRange(0.0, 10.0),
        )
        df = pd.DataFrame({"v": [0.3, 0.7]})
        self.assertEqual([sv.alpha for sv in filled.values_for(df)], [0.3, 0.7])

    def test_degenerate_size_and_alpha_domains_fail(self) -> None:
        for kind in (ScaleKind.SIZE, ScaleKind.ALPHA):
            with self.subTest(kind=kind):
                with self.assertRaises(DegenerateRange):
                    fill_scale_impl(ValueKind.FLOAT, False, column_ref("v"), kind, data_scale=ScaleRange(3.0, 3.0))

    def test_continuous_color_uses_palette_ends(self) -> None:
        palette = color_scale("viridis")
        filled = fill_scale_impl(
            ValueKind.FLOAT,
            False,
            column_ref("v"),
            ScaleKind.COLOR,
            data_scale=ScaleRange(0.0, 10.0),
            palette=palette,
        )
        colors = [sv.color for sv in filled.map_data(pd.DataFrame({"v": [0.0, 10.0, 20.0]}))]
        self.assertEqual(colors[0], palette.color_at(0))
        self.assertEqual(colors[1], palette.color_at(255))
        self.assertEqual(colors[2], palette.color_at(255))

    def test_continuous_color_setting_rejects_float_columns(self) -> None:
        filled = fill_scale_impl(
            ValueKind.FLOAT,
            False,
            column_ref("v"),
            ScaleKind.COLOR,
            DataKind.SETTING,
            data_scale=ScaleRange(0.0, 1.0),
        )
        with self.assertRaises(InvalidColumnType):
            filled.map_data(pd.DataFrame({"v": [0.1, 0.2]}))

    def test_log_transform_needs_positive_domain(self) -> None:
        with self.assertRaises(DegenerateRange):
            fill_scale_impl(
                ValueKind.FLOAT,
                False,
                column_ref("v"),
                ScaleKind.TRANSFORMED_DATA,
                ax_kind=AxisKind.Y,
                data_scale=ScaleRange(0.0, 100.0),
                trans=np.log10,
                inv_trans=lambda v: 10.0**v,
            )

    def test_transformed_domain_is_stored_transformed(self) -> None:
        filled = fill_scale_impl(
            ValueKind.FLOAT,
            False,
            column_ref("v"),
            ScaleKind.TRANSFORMED_DATA,
            ax_kind=AxisKind.Y,
            data_scale=ScaleRange(1.0, 100.0),
            trans=np.log10,
            inv_trans=lambda v: 10.0**v,
        )
        self.assertAlmostEqual(filled.data_scale.low, 0.0)
        self.assertAlmostEqual(filled.data_scale.high, 2.0)

    def test_continuous_shape_is_unsupported(self) -> None:
        with self.assertRaises(UnsupportedChannelCombination):
            fill_scale_impl(ValueKind.FLOAT, False, column_ref("v"), ScaleKind.SHAPE, data_scale=ScaleRange(0.0, 1.0))

    def test_continuous_text_needs_no_domain(self) -> None:
        filled = fill_scale_impl(ValueKind.FLOAT, False, column_ref("t"), ScaleKind.TEXT)
        self.assertEqual(filled.sc_kind, ScaleKind.TEXT)
        self.assertIsNone(filled.data_scale)


class MissingValueTests(unittest.TestCase):
    def test_discrete_color_rejects_null_rows(self) -> None:
        filled = fill_scale_impl(ValueKind.STRING, True, column_ref("c"), ScaleKind.COLOR, label_seq=("a", "b"))
        df = pd.DataFrame({"c": ["a", None, "b", "a"]})
        with self.assertRaisesRegex(MissingScaleValue, r"`c`.*\[1\]"):
            filled.values_for(df)
        self.assertEqual(len(filled.values_for(df.dropna())), 3)

    def test_continuous_color_rejects_nan_rows(self) -> None:
        filled = fill_scale_impl(
            ValueKind.FLOAT, False, column_ref("v"), ScaleKind.COLOR, data_scale=ScaleRange(0.0, 10.0)
        )
        with self.assertRaises(MissingScaleValue):
            filled.values_for(pd.DataFrame({"v": [0.0, np.nan, 10.0]}))

    def test_continuous_size_rejects_nullable_int_rows(self) -> None:
        filled = fill_scale_impl(ValueKind.INT, False, column_ref("v"), ScaleKind.SIZE, data_scale=ScaleRange(1.0, 2.0))
        df = pd.DataFrame({"v": pd.array([1, None, 2], dtype="Int64")})
        with self.assertRaises(MissingScaleValue):
            filled.values_for(df)

    def test_continuous_alpha_rejects_nan_rows(self) -> None:
        filled = fill_scale_impl(
            ValueKind.FLOAT, False, column_ref("v"), ScaleKind.ALPHA, data_scale=ScaleRange(0.0, 1.0)
        )
        with self.assertRaises(MissingScaleValue):
            filled.values_for(pd.DataFrame({"v": [0.5, None]}))


if __name__ == "__main__":
    unittest.main()
