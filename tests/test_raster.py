from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

import numpy as np
from PIL import Image

from apexplot.charts import (
    BarChartSpec,
    ChartKind,
    ChartPanel,
    ComparisonChartSpec,
    LineChartSpec,
    PieChartSpec,
    layout_bar_chart,
    layout_comparison_chart,
    layout_line_chart,
    layout_pie_chart,
)
from apexplot.errors import ConfigurationError
from apexplot.legend import LegendSpec, MonospaceMeasurer
from apexplot.raster import (
    PillowTextMeasurer,
    RenderStyle,
    blit,
    blit_scaled,
    dash_runs,
    draw_polyline,
    draw_text,
    fill_polygon,
    fill_rect,
    new_canvas,
    render_chart,
    render_to_png,
)
from apexplot.series import BarItem, LineSeries, PieSlice, Point


MEASURER = MonospaceMeasurer()


def _line_geometry(**kwargs):
    series = LineSeries(label="s", points=(Point(0.0, 1.0), Point(1.0, 3.0), Point(2.0, 2.0)), line_kind="dashed")
    return layout_line_chart(LineChartSpec(series=(series,), **kwargs), MEASURER)


class CanvasTests(unittest.TestCase):
    def test_new_canvas_fills_background(self) -> None:
        canvas = new_canvas(4, 3, (10, 20, 30, 255))
        self.assertEqual(canvas.shape, (3, 4, 4))
        self.assertTrue(np.all(canvas[:, :, 0] == 10))

    def test_fill_rect_is_inclusive_and_clipped(self) -> None:
        canvas = new_canvas(10, 10)
        fill_rect(canvas, 2.0, 2.0, 4.0, 20.0, (255, 0, 0, 255))
        self.assertEqual(int(np.count_nonzero(canvas[:, :, 1] == 0)), 3 * 8)

    def test_polygon_fill_covers_interior(self) -> None:
        canvas = new_canvas(20, 20)
        fill_polygon(canvas, [2.0, 17.0, 17.0, 2.0], [2.0, 2.0, 17.0, 17.0], (0, 0, 255, 255))
        self.assertEqual(tuple(canvas[10, 10, :3]), (0, 0, 255))
        self.assertEqual(tuple(canvas[0, 0, :3]), (255, 255, 255))

    def test_blit_handles_negative_offsets(self) -> None:
        dst = new_canvas(4, 4)
        src = new_canvas(3, 3, (0, 0, 0, 255))
        blit(dst, src, -1, -1)
        self.assertEqual(int(np.count_nonzero(dst[:, :, 0] == 0)), 4)

    def test_blit_scaled_resamples(self) -> None:
        dst = new_canvas(10, 10)
        blit_scaled(dst, new_canvas(4, 4, (0, 0, 0, 255)), 0, 0, 8, 8)
        self.assertEqual(tuple(dst[4, 4, :3]), (0, 0, 0))
        self.assertEqual(tuple(dst[9, 9, :3]), (255, 255, 255))


class LineDrawingTests(unittest.TestCase):
    def test_dash_runs_split_by_arc_length(self) -> None:
        runs = dash_runs(np.asarray([0.0, 25.0]), np.asarray([0.0, 0.0]), (10.0, 5.0))
        self.assertEqual(len(runs), 2)
        self.assertEqual(runs[0][0].tolist(), [0.0, 10.0])
        self.assertEqual(runs[1][0].tolist(), [15.0, 25.0])

    def test_dashed_polyline_leaves_gaps(self) -> None:
        canvas = new_canvas(30, 3)
        draw_polyline(canvas, np.asarray([0.0, 25.0]), np.asarray([1.0, 1.0]), (0, 0, 0, 255), dash=(10.0, 5.0))
        row = canvas[1, :, 0]
        self.assertEqual(int(row[5]), 0)
        self.assertEqual(int(row[12]), 255)
        self.assertEqual(int(row[20]), 0)


class RenderTests(unittest.TestCase):
    def test_line_chart_canvas_matches_layout(self) -> None:
        geom = _line_geometry(legend=LegendSpec(show=True), title="Trend")
        image = render_chart(geom)
        self.assertEqual(image.shape, (600, 1010, 4))
        self.assertEqual(image.dtype, np.uint8)

    def test_bar_interior_has_bar_color(self) -> None:
        item = BarItem("a", 0.0, 4.0, value=8.0, color=(200, 10, 10, 255))
        geom = layout_bar_chart(BarChartSpec(items=(item,)), MEASURER)
        image = render_chart(geom, RenderStyle(show_grid=False))
        bar = geom.bars[0]
        cx = int(round((bar.left + bar.right) / 2.0))
        cy = int(round((bar.top + bar.bottom) / 2.0))
        self.assertEqual(tuple(image[cy, cx, :3]), (200, 10, 10))

    def test_pie_and_comparison_render(self) -> None:
        pie_spec = PieChartSpec(slices=(PieSlice("a", 1.0), PieSlice("b", 2.0)), kind="donut")
        pie = render_chart(layout_pie_chart(pie_spec, MEASURER))
        self.assertEqual(pie.shape[:2], (600, 800))
        centre = pie[290, 400, :3]
        self.assertEqual(tuple(centre), (255, 255, 255))

        spec = ComparisonChartSpec(
            left=ChartPanel(ChartKind.LINE, LineChartSpec(series=_line_geometry().spec.series)),
            right=ChartPanel(ChartKind.DONUT, pie_spec),
            width=1200.0,
            height=600.0,
        )
        image = render_chart(layout_comparison_chart(spec, MEASURER))
        self.assertEqual(image.shape[:2], (600, 1200))

    def test_unknown_geometry_is_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            render_chart(object())  # type: ignore[arg-type]

    def test_png_is_written(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out = render_to_png(_line_geometry(), Path(td) / "charts" / "line.png")
            self.assertTrue(out.exists())
            with Image.open(out) as img:
                self.assertEqual(img.size, (800, 600))


class TextMeasureTests(unittest.TestCase):
    def test_pillow_measurer_grows_with_text(self) -> None:
        measurer = PillowTextMeasurer()
        short = measurer.measure("ab", 14.0)
        long = measurer.measure("abcdefgh", 14.0)
        self.assertGreater(short, 0.0)
        self.assertGreater(long, short)

    def test_vertical_text_is_taller_than_wide(self) -> None:
        canvas = new_canvas(200, 200)
        draw_text(
            canvas, 100.0, 100.0, "vertical", (0, 0, 0, 255), font_size_px=16.0, vertical=True, align="center", valign="middle"
        )
        ys, xs = np.nonzero(canvas[:, :, 0] < 255)
        self.assertGreater(ys.size, 0)
        self.assertGreater(ys.max() - ys.min(), xs.max() - xs.min())

    def test_text_clipped_at_canvas_edge(self) -> None:
        canvas = new_canvas(20, 10)
        draw_text(canvas, -5.0, -3.0, "clipped", (0, 0, 0, 255), font_size_px=14.0)
        self.assertEqual(canvas.shape, (10, 20, 4))
        self.assertTrue(np.any(canvas[:, :, 0] < 255))


if __name__ == "__main__":
    unittest.main()
