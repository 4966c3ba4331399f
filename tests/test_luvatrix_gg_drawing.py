from __future__ import annotations

import unittest

import numpy as np
import pandas as pd

from luvatrix_gg.api import draw_geoms, render_geoms
from luvatrix_gg.canvas import Coord, ErrorBar, Point, PolyLine, Raster, Rect, Text, UnitKind, Viewport, c1, quant
from luvatrix_gg.colors import color_scale, pack_argb
from luvatrix_gg.drawing import create_gobj_from_geom
from luvatrix_gg.geom import (
    BinPositionKind,
    FilledGeom,
    Geom,
    GeomKind,
    GgStyle,
    HistogramDrawingStyle,
    LabelData,
    Style,
)
from luvatrix_gg.ranges import ScaleRange
from luvatrix_gg.render import draw_text, new_canvas, render_viewport, text_size
from luvatrix_gg.scale_types import AxisKind, DiscreteKind
from luvatrix_gg.theme import OutsideRangeKind, validate_theme


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
SCALE = ScaleRange(0.0, 10.0)


def _filled(kind: GeomKind, groups: dict, *, geom: Geom | None = None, **kwargs) -> FilledGeom:
    yield_data = {label: LabelData(style=GgStyle(), styles=styles, df=df) for label, (styles, df) in groups.items()}
    return FilledGeom(
        geom=geom if geom is not None else Geom(kind),
        x_col=kwargs.pop("x_col", "x"),
        y_col=kwargs.pop("y_col", "y"),
        x_scale=kwargs.pop("x_scale", SCALE),
        y_scale=kwargs.pop("y_scale", SCALE),
        yield_data=yield_data,
        **kwargs,
    )


def _view(fg: FilledGeom) -> Viewport:
    return Viewport(x_scale=fg.x_scale, y_scale=fg.y_scale)


def _xy(points) -> list[tuple[float, float]]:
    return [(p.x.pos, p.y.pos) for p in points]


class CreateGraphObjectTests(unittest.TestCase):
    def test_points_are_drawn_into_a_copy(self) -> None:
        df = pd.DataFrame({"x": [1.0, 2.0, 3.0], "y": [4.0, 5.0, 6.0]})
        fg = _filled(GeomKind.POINT, {"a": ((GgStyle(color=RED),), df)})
        view = _view(fg)

        out = create_gobj_from_geom(view, fg)

        self.assertEqual(view.objects, [])
        self.assertEqual(len(out.objects), 3)
        self.assertTrue(all(isinstance(obj, Point) for obj in out.objects))
        self.assertEqual(out.objects[1].style.color, RED)
        self.assertEqual((out.objects[1].pos.x.pos, out.objects[1].pos.y.pos), (2.0, 5.0))
        self.assertEqual(out.objects[1].pos.x.kind, UnitKind.DATA)

    def test_points_outside_the_scale_are_clipped(self) -> None:
        df = pd.DataFrame({"x": [12.0], "y": [-3.0]})
        fg = _filled(GeomKind.POINT, {"a": ((GgStyle(),), df)})

        out = create_gobj_from_geom(_view(fg), fg)

        self.assertEqual(_xy([out.objects[0].pos]), [(10.0, 0.0)])

    def test_discrete_bars_land_in_their_label_cells(self) -> None:
        df = pd.DataFrame({"x": ["a", "b"], "y": [3.0, 6.0]})
        fg = _filled(
            GeomKind.BAR,
            {"all": ((GgStyle(),), df)},
            dc_kind_x=DiscreteKind.DISCRETE,
            x_label_seq=("a", "b"),
        )

        out = create_gobj_from_geom(_view(fg), fg)

        self.assertEqual(len(out.children), 4)
        self.assertEqual(out.objects, [])
        (first,) = out[1].objects
        (second,) = out[2].objects
        self.assertIsInstance(first, Rect)
        self.assertEqual(first.width, quant(0.8, UnitKind.DATA))
        self.assertAlmostEqual(first.origin.x.pos, 0.1)
        self.assertEqual(first.origin.x.kind, UnitKind.RELATIVE)
        self.assertEqual(first.origin.y.pos, 0.0)
        self.assertEqual(first.height, quant(-3.0, UnitKind.DATA))
        self.assertEqual(second.height, quant(-6.0, UnitKind.DATA))
        self.assertEqual(out[0].objects, [])
        self.assertEqual(out[3].objects, [])

    def test_label_value_selects_groups(self) -> None:
        df_a = pd.DataFrame({"x": [1.0, 2.0], "y": [1.0, 2.0]})
        df_b = pd.DataFrame({"x": [3.0], "y": [3.0]})
        fg = _filled(
            GeomKind.POINT,
            {("a",): ((GgStyle(color=RED),), df_a), ("b",): ((GgStyle(color=BLUE),), df_b)},
        )

        out = create_gobj_from_geom(_view(fg), fg, label_val="b")

        self.assertEqual(len(out.objects), 1)
        self.assertEqual(out.objects[0].style.color, BLUE)

    def test_empty_style_sequence_falls_back_to_label_style(self) -> None:
        df = pd.DataFrame({"x": [1.0], "y": [1.0]})
        fg = FilledGeom(
            geom=Geom(GeomKind.POINT),
            x_col="x",
            y_col="y",
            x_scale=SCALE,
            y_scale=SCALE,
            yield_data={"a": LabelData(style=GgStyle(color=BLUE), styles=(), df=df)},
        )

        out = create_gobj_from_geom(_view(fg), fg)

        self.assertEqual(out.objects[0].style.color, BLUE)

    def test_multi_style_lines_are_drawn_per_segment(self) -> None:
        df = pd.DataFrame({"x": [1.0, 2.0, 3.0], "y": [1.0, 3.0, 2.0]})
        styles = (GgStyle(color=RED), GgStyle(color=BLUE), GgStyle(color=RED))
        fg = _filled(GeomKind.LINE, {"a": (styles, df)})

        with self.assertLogs("luvatrix_gg.drawing", level="WARNING"):
            out = create_gobj_from_geom(_view(fg), fg)

        self.assertEqual(len(out.objects), 2)
        self.assertTrue(all(isinstance(obj, PolyLine) for obj in out.objects))
        self.assertEqual(out.objects[0].style.color, RED)
        self.assertEqual(out.objects[1].style.color, BLUE)
        self.assertEqual(_xy(out.objects[1].points), [(2.0, 3.0), (3.0, 2.0)])

    def test_single_style_line_is_one_polyline(self) -> None:
        df = pd.DataFrame({"x": [1.0, 2.0, 3.0], "y": [1.0, 3.0, 2.0]})
        fg = _filled(GeomKind.LINE, {"a": ((GgStyle(),), df)})

        out = create_gobj_from_geom(_view(fg), fg)

        (line,) = out.objects
        self.assertEqual(_xy(line.points), [(1.0, 1.0), (2.0, 3.0), (3.0, 2.0)])

    def test_outline_histogram_is_a_closed_step_line(self) -> None:
        df = pd.DataFrame({"x": [0.0, 1.0, 2.0, 3.0], "y": [5.0, 8.0, 3.0, 0.0]})
        geom = Geom(GeomKind.HISTOGRAM, bin_position=BinPositionKind.LEFT, hd_kind=HistogramDrawingStyle.OUTLINE)
        fg = _filled(GeomKind.HISTOGRAM, {"a": ((GgStyle(),), df)}, geom=geom)

        out = create_gobj_from_geom(_view(fg), fg)

        (line,) = out.objects
        points = _xy(line.points)
        self.assertEqual(len(points), 9)
        self.assertEqual(
            points[1:8],
            [(0.0, 0.0), (0.0, 5.0), (1.0, 5.0), (1.0, 8.0), (2.0, 8.0), (2.0, 3.0), (3.0, 3.0)],
        )
        self.assertEqual(points[0], (0.0, 0.0))
        self.assertEqual(points[-1], (3.0, 0.0))

    def test_outline_histogram_skips_dropped_bins(self) -> None:
        df = pd.DataFrame({"x": [-2.0, 1.0, 3.0, 6.0, 10.0], "y": [9.0, 5.0, 8.0, 3.0, 0.0]})
        geom = Geom(GeomKind.HISTOGRAM, bin_position=BinPositionKind.LEFT, hd_kind=HistogramDrawingStyle.OUTLINE)
        fg = _filled(GeomKind.HISTOGRAM, {"a": ((GgStyle(),), df)}, geom=geom)
        theme = validate_theme({"x_outside_range": OutsideRangeKind.DROP})

        out = create_gobj_from_geom(_view(fg), fg, theme)

        (line,) = out.objects
        self.assertEqual(
            _xy(line.points)[1:8],
            [(1.0, 0.0), (1.0, 5.0), (3.0, 5.0), (3.0, 8.0), (6.0, 8.0), (6.0, 3.0), (10.0, 3.0)],
        )

    def test_bar_histogram_draws_one_rect_per_bin(self) -> None:
        df = pd.DataFrame({"x": [0.0, 2.0, 4.0], "y": [1.0, 2.0, 0.0]})
        geom = Geom(GeomKind.HISTOGRAM, bin_position=BinPositionKind.LEFT)
        fg = _filled(GeomKind.HISTOGRAM, {"a": ((GgStyle(),), df)}, geom=geom)

        out = create_gobj_from_geom(_view(fg), fg)

        self.assertEqual(len(out.objects), 2)
        self.assertEqual([obj.width.val for obj in out.objects], [2.0, 2.0])
        self.assertEqual([obj.height.val for obj in out.objects], [-1.0, -2.0])

    def test_raster_packs_cells_top_row_first(self) -> None:
        df = pd.DataFrame({"x": [0.0, 1.0, 0.0, 1.0], "y": [0.0, 0.0, 1.0, 1.0], "z": [0.0, 1.0, 2.0, 3.0]})
        fg = _filled(
            GeomKind.RASTER,
            {"a": ((GgStyle(),), df)},
            fill_col="z",
            fill_data_scale=ScaleRange(0.0, 3.0),
            raster_x_scale=ScaleRange(0.0, 1.0),
            raster_y_scale=ScaleRange(0.0, 1.0),
        )

        out = create_gobj_from_geom(_view(fg), fg)

        (raster,) = out.objects
        self.assertIsInstance(raster, Raster)
        self.assertEqual((raster.num_x, raster.num_y), (2, 2))
        pixels = raster.draw_cb()
        palette = color_scale()
        self.assertEqual(pixels.shape, (4,))
        self.assertEqual(int(pixels[0]), pack_argb(palette.color_at(170)))
        self.assertEqual(int(pixels[1]), pack_argb(palette.color_at(255)))
        self.assertEqual(int(pixels[2]), pack_argb(palette.color_at(0)))

    def test_raster_leaves_out_cells_outside_its_scales(self) -> None:
        df = pd.DataFrame({"x": [0.0, 1.0, -1.0, 3.0], "y": [0.0, 1.0, 0.0, 1.0], "z": [0.0, 3.0, 1.0, 2.0]})
        fg = _filled(
            GeomKind.RASTER,
            {"a": ((GgStyle(),), df)},
            fill_col="z",
            fill_data_scale=ScaleRange(0.0, 3.0),
            raster_x_scale=ScaleRange(0.0, 1.0),
            raster_y_scale=ScaleRange(0.0, 1.0),
        )

        (raster,) = create_gobj_from_geom(_view(fg), fg).objects
        pixels = raster.draw_cb()

        palette = color_scale()
        self.assertEqual(pixels.shape, (4,))
        self.assertEqual(int(pixels[1]), pack_argb(palette.color_at(255)))
        self.assertEqual(int(pixels[2]), pack_argb(palette.color_at(0)))
        self.assertEqual(int(pixels[0]), 0)
        self.assertEqual(int(pixels[3]), 0)

    def test_error_bars_along_both_axes(self) -> None:
        df = pd.DataFrame({"x": [1.0], "y": [2.0], "xlo": [0.5], "xhi": [1.5], "ylo": [1.0], "yhi": [3.0]})
        fg = _filled(
            GeomKind.ERROR_BAR,
            {"a": ((GgStyle(),), df)},
            x_min="xlo",
            x_max="xhi",
            y_min="ylo",
            y_max="yhi",
        )

        out = create_gobj_from_geom(_view(fg), fg)

        x_bar, y_bar = out.objects
        self.assertIsInstance(x_bar, ErrorBar)
        self.assertEqual((x_bar.axis, x_bar.error_down.pos, x_bar.error_up.pos), (AxisKind.X, 0.5, 1.5))
        self.assertEqual((y_bar.axis, y_bar.error_down.pos, y_bar.error_up.pos), (AxisKind.Y, 1.0, 3.0))

    def test_text_rows(self) -> None:
        df = pd.DataFrame({"x": [1.0], "y": [2.0], "label": [2.0 / 3.0]})
        fg = _filled(GeomKind.TEXT, {"a": ((GgStyle(),), df)}, text="label")

        out = create_gobj_from_geom(_view(fg), fg)

        (text,) = out.objects
        self.assertIsInstance(text, Text)
        self.assertEqual(text.text, "0.6667")


class RenderTests(unittest.TestCase):
    def test_rect_is_filled_in_pixel_space(self) -> None:
        view = Viewport(x_scale=SCALE, y_scale=SCALE)
        view.add_obj(
            Rect(
                origin=Coord(x=c1(0.0, UnitKind.DATA, AxisKind.X, SCALE), y=c1(5.0, UnitKind.DATA, AxisKind.Y, SCALE)),
                width=quant(5.0, UnitKind.DATA),
                height=quant(-5.0, UnitKind.DATA),
                style=Style(color=RED, fill_color=RED),
            )
        )

        frame = render_viewport(view, 100, 100)

        self.assertEqual(frame.shape, (100, 100, 4))
        self.assertEqual(tuple(frame[25, 25]), RED)
        self.assertEqual(tuple(frame[75, 75]), (255, 255, 255, 255))

    def test_draw_geoms_keeps_one_child_per_geom(self) -> None:
        df = pd.DataFrame({"x": [1.0, 2.0], "y": [1.0, 2.0]})
        points = _filled(GeomKind.POINT, {"a": ((GgStyle(),), df)}, geom=Geom(GeomKind.POINT, gid=0))
        line = _filled(GeomKind.LINE, {"a": ((GgStyle(),), df)}, geom=Geom(GeomKind.LINE, gid=1))

        out = draw_geoms([points, line])

        self.assertEqual([child.name for child in out.children], ["root/geom0", "root/geom1"])
        self.assertEqual(len(out[0].objects), 2)
        self.assertEqual(len(out[1].objects), 1)
        with self.assertRaises(ValueError):
            draw_geoms([])

    def test_text_is_blended_around_its_anchor(self) -> None:
        frame = new_canvas(80, 40)
        draw_text(frame, 40, 20, "gg", (0, 0, 0, 255), font_size_px=16.0)

        width, height = text_size("gg", size_px=16.0)
        self.assertGreater(width, 0)
        self.assertGreater(height, 0)
        self.assertLess(int(frame[:, :, :3].min()), 255)
        self.assertTrue(np.all(frame[:, :20, :3] == 255))

    def test_render_geoms_returns_rgba_frame(self) -> None:
        df = pd.DataFrame({"x": [1.0, 9.0], "y": [1.0, 9.0]})
        fg = _filled(GeomKind.LINE, {"a": ((GgStyle(color=BLUE),), df)})

        frame = render_geoms([fg], 64, 48)

        self.assertEqual(frame.shape, (48, 64, 4))
        self.assertEqual(frame.dtype, np.uint8)
        self.assertTrue(np.any(np.all(frame == np.asarray(BLUE, dtype=np.uint8), axis=-1)))


if __name__ == "__main__":
    unittest.main()
