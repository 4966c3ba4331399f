from __future__ import annotations

import unittest

import numpy as np

from luvatrix_gg.colors import color_hue, color_scale, hue_sequence, pack_argb, to_color, with_alpha
from luvatrix_gg.errors import InvalidColumnType


class ColorTests(unittest.TestCase):
    def test_hues_are_evenly_spaced_from_the_offset(self) -> None:
        self.assertTrue(np.allclose(hue_sequence(3, hue_start=15.0), [15.0, 135.0, 255.0]))
        self.assertTrue(np.allclose(hue_sequence(4, hue_start=300.0), [300.0, 30.0, 120.0, 210.0]))

    def test_color_hue_is_distinct_and_deterministic(self) -> None:
        colors = color_hue(5)
        self.assertEqual(len(set(colors)), 5)
        self.assertEqual(colors, color_hue(5))
        for color in colors:
            self.assertEqual(color[3], 255)

    def test_color_hue_matches_the_ggplot_palette(self) -> None:
        self.assertEqual(
            color_hue(3),
            [(248, 118, 109, 255), (0, 186, 56, 255), (97, 156, 255, 255)],
        )

    def test_to_color_parses_literals(self) -> None:
        self.assertEqual(to_color("red"), (255, 0, 0, 255))
        self.assertEqual(to_color("#00ff00"), (0, 255, 0, 255))
        self.assertEqual(to_color(0x0000FF), (0, 0, 255, 255))
        self.assertEqual(to_color((1, 2, 3)), (1, 2, 3, 255))

    def test_to_color_rejects_unknown_values(self) -> None:
        with self.assertRaises(InvalidColumnType):
            to_color("not-a-color")
        with self.assertRaises(InvalidColumnType):
            to_color(2.5)
        with self.assertRaises(InvalidColumnType):
            to_color(True)

    def test_with_alpha_and_argb_packing(self) -> None:
        self.assertEqual(with_alpha((10, 20, 30, 255), 0.5), (10, 20, 30, 128))
        self.assertEqual(pack_argb((0x11, 0x22, 0x33, 0xFF)), 0xFF112233)

    def test_continuous_palette_has_256_rgba_entries(self) -> None:
        palette = color_scale("viridis")
        self.assertEqual(len(palette), 256)
        self.assertEqual(palette.colors.shape, (256, 4))
        self.assertEqual(palette.colors.dtype, np.uint8)
        self.assertNotEqual(palette.color_at(0), palette.color_at(255))


if __name__ == "__main__":
    unittest.main()
