from __future__ import annotations

import math
import unittest

from apexplot.charts import (
    BarChartSpec,
    ChartKind,
    ChartPanel,
    ComparisonChartSpec,
    HorizontalBarChartSpec,
    LineChartSpec,
    PieChartSpec,
    layout_bar_chart,
    layout_comparison_chart,
    layout_horizontal_bar_chart,
    layout_line_chart,
    layout_pie_chart,
)
from apexplot.charts.bar import value_range_samples, waterfall_totals
from apexplot.charts.comparison import panel_padding, panel_rects
from apexplot.charts.pie import slice_angles
from apexplot.errors import AxisBoundsError, ConfigurationError, DegenerateInputWarning
from apexplot.legend import CalloutSpec, LegendSpec, MonospaceMeasurer
from apexplot.scales import AxisSpec
from apexplot.series import (
    AreaSpec,
    BarItem,
    BarSegment,
    ErrorBar,
    HorizontalBarItem,
    LineSeries,
    PieSlice,
    Point,
    RegressionSpec,
)
from apexplot.sizing import Padding


MEASURER = MonospaceMeasurer()


def _series(*ys: float, label: str = "s", **kwargs) -> LineSeries:
    return LineSeries(label=label, points=tuple(Point(float(i), float(y)) for i, y in enumerate(ys)), **kwargs)


class LineChartTests(unittest.TestCase):
    def test_default_plot_rect(self) -> None:
        geom = layout_line_chart(LineChartSpec(series=(_series(1, 2, 3),)), MEASURER)
        plot = geom.layout.plot
        self.assertEqual((plot.left, plot.top, plot.right, plot.bottom), (100.0, 60.0, 700.0, 520.0))
        self.assertEqual(geom.baseline_y, 520.0)
        self.assertEqual(len(geom.series[0].points), 3)
        self.assertEqual(geom.series[0].path.kind, "straight")

    def test_smoothed_path_stays_inside_plot_rect(self) -> None:
        spec = LineChartSpec(series=(_series(0, 10, 0, 10, smoothing="spline"),), y=AxisSpec(min=0.0, max=10.0))
        geom = layout_line_chart(spec, MEASURER)
        rect = geom.frame.rect
        path = geom.series[0].path
        self.assertGreater(len(path.points), 4)
        self.assertTrue(all(rect.contains(p.x, p.y) for p in path.points))
        self.assertEqual(min(p.y for p in path.points), rect.top)
        self.assertEqual(max(p.y for p in path.points), rect.bottom)

    def test_title_and_axis_labels_shrink_plot(self) -> None:
        spec = LineChartSpec(series=(_series(1, 2),), title="Sales", x=AxisSpec(label="day"))
        plot = layout_line_chart(spec, MEASURER).layout.plot
        self.assertEqual(plot.top, 60.0 + 24.0 + 30.0)
        self.assertEqual(plot.bottom, 520.0 - (12.0 + 40.0))

    def test_out_of_range_point_is_reported(self) -> None:
        spec = LineChartSpec(series=(_series(1, 2, 3, 15, label="sales"),), y=AxisSpec(min=0.0, max=10.0))
        with self.assertRaises(AxisBoundsError) as ctx:
            layout_line_chart(spec, MEASURER)
        self.assertEqual((ctx.exception.series, ctx.exception.index, ctx.exception.axis), ("sales", 3, "y"))

    def test_band_bounds_are_validated(self) -> None:
        area = AreaSpec(kind="around", upper=(3.0, 12.0), lower=(1.0, 1.0))
        spec = LineChartSpec(series=(_series(2, 2, area=area),), y=AxisSpec(min=0.0, max=10.0))
        with self.assertRaises(AxisBoundsError) as ctx:
            layout_line_chart(spec, MEASURER)
        self.assertEqual(ctx.exception.field, "area.upper")

    def test_error_bars_are_clamped_to_plot(self) -> None:
        series = LineSeries(
            label="e",
            points=(Point(5.0, 9.0, error=ErrorBar(positive=5.0, negative=1.0)),),
            show_error_bars=True,
        )
        spec = LineChartSpec(series=(series,), x=AxisSpec(min=0.0, max=10.0), y=AxisSpec(min=0.0, max=10.0))
        bar = layout_line_chart(spec, MEASURER).series[0].error_bars[0]
        self.assertEqual(bar.top, 60.0)
        self.assertAlmostEqual(bar.bottom, 520.0 - 8.0 * 46.0)
        self.assertEqual(bar.x, 400.0)

    def test_right_legend_grows_canvas(self) -> None:
        spec = LineChartSpec(series=(_series(1, 2),), legend=LegendSpec(show=True))
        geom = layout_line_chart(spec, MEASURER)
        self.assertEqual(geom.layout.canvas_width, 1010.0)
        self.assertEqual(geom.legend.x, 710.0)

    def test_regression_series_reads_as_scatter(self) -> None:
        series = _series(1, 3, 5, 7, regression=RegressionSpec(kind="linear"))
        chart = layout_line_chart(LineChartSpec(series=(series,)), MEASURER)
        geom = chart.series[0]
        self.assertIsNone(geom.path)
        self.assertIsNotNone(geom.regression)
        rect = chart.layout.plot
        self.assertTrue(all(rect.contains(p.x, p.y) for p in geom.regression.points))

    def test_shaded_area_is_attached(self) -> None:
        geom = layout_line_chart(LineChartSpec(series=(_series(4, 4, area=AreaSpec(kind="below")),)), MEASURER)
        self.assertEqual(geom.series[0].area.area, 4.0)


class BarChartTests(unittest.TestCase):
    def test_standard_bars_start_at_baseline(self) -> None:
        items = (BarItem("a", 0.0, 2.0, value=5.0), BarItem("b", 4.0, 6.0, value=10.0))
        geom = layout_bar_chart(BarChartSpec(items=items), MEASURER)
        self.assertEqual(geom.layout.canvas_width, 580.0)
        a, b = geom.bars
        self.assertEqual(a.bottom, geom.baseline_y)
        self.assertAlmostEqual(b.top, geom.frame.y.map(10.0))
        self.assertLess(b.top, a.top)

    def test_grouped_segments_leave_gap(self) -> None:
        item = BarItem("g", 0.0, 10.0, segments=(BarSegment(3.0, "x"), BarSegment(5.0, "y")))
        geom = layout_bar_chart(BarChartSpec(items=(item,), kind="grouped"), MEASURER)
        first, second = geom.bars
        self.assertAlmostEqual(second.left - first.right, 10.0)
        self.assertEqual([b.label for b in geom.bars], ["x", "y"])

    def test_stacked_splits_positive_and_negative(self) -> None:
        item = BarItem("s", 0.0, 4.0, segments=(BarSegment(3.0), BarSegment(-2.0), BarSegment(4.0)))
        spec = BarChartSpec(items=(item,), kind="stacked")
        self.assertEqual(value_range_samples(spec), [7.0, -2.0])
        geom = layout_bar_chart(spec, MEASURER)
        y = geom.frame.y.map
        pos, neg, top = geom.bars
        self.assertAlmostEqual(neg.top, y(0.0))
        self.assertAlmostEqual(neg.bottom, y(-2.0))
        self.assertAlmostEqual(top.bottom, y(3.0))
        self.assertAlmostEqual(top.top, y(7.0))

    def test_waterfall_steps_and_range_expansion(self) -> None:
        items = (BarItem("up", 0.0, 2.0, value=5.0), BarItem("down", 3.0, 5.0, value=-2.0))
        self.assertEqual(waterfall_totals(items), [5.0, 3.0])
        spec = BarChartSpec(items=items, kind="waterfall", y=AxisSpec(min=-3.0, max=4.0))
        geom = layout_bar_chart(spec, MEASURER)
        self.assertAlmostEqual(geom.frame.y.scale.max, 5.5)
        self.assertEqual(geom.frame.y.scale.min, -3.0)
        down = geom.bars[1]
        y = geom.frame.y.map
        self.assertAlmostEqual(down.top, y(5.0))
        self.assertAlmostEqual(down.bottom, y(3.0))

    def test_x_end_outside_explicit_range(self) -> None:
        items = (BarItem("a", 0.0, 2.0, value=1.0), BarItem("b", 4.0, 6.0, value=2.0))
        with self.assertRaises(AxisBoundsError) as ctx:
            layout_bar_chart(BarChartSpec(items=items, x=AxisSpec(min=0.0, max=5.0)), MEASURER)
        self.assertEqual((ctx.exception.index, ctx.exception.field), (1, "x_end"))

    def test_lollipop_stem_runs_from_baseline(self) -> None:
        items = (BarItem("a", 0.0, 2.0, value=4.0),)
        geom = layout_bar_chart(BarChartSpec(items=items, kind="lollipop"), MEASURER)
        self.assertEqual(geom.bars, ())
        pop = geom.lollipops[0]
        self.assertEqual(pop.stem_start.y, geom.baseline_y)
        self.assertAlmostEqual(pop.stem_end.y, geom.frame.y.map(4.0))
        self.assertEqual(pop.stem_start.x, pop.stem_end.x)

    def test_unknown_kind(self) -> None:
        with self.assertRaises(ConfigurationError):
            BarChartSpec(items=(BarItem("a", 0.0, 1.0, value=1.0),), kind="pyramid")  # type: ignore[arg-type]


class HorizontalBarChartTests(unittest.TestCase):
    def _items(self) -> tuple[HorizontalBarItem, ...]:
        return (HorizontalBarItem("a", value=10.0), HorizontalBarItem("b", value=20.0), HorizontalBarItem("c", value=30.0))

    def test_responsive_height_and_rows(self) -> None:
        geom = layout_horizontal_bar_chart(HorizontalBarChartSpec(items=self._items()), MEASURER)
        self.assertEqual(geom.layout.canvas_height, 292.0)
        self.assertEqual([r.y for r in geom.rows[:2]], [77.5, 127.5])
        first = geom.bars[0]
        self.assertEqual(first.bottom - first.top, 35.0)
        self.assertEqual(first.left, geom.baseline_x)

    def test_value_axis_is_zero_anchored(self) -> None:
        geom = layout_horizontal_bar_chart(HorizontalBarChartSpec(items=self._items()), MEASURER)
        self.assertEqual(geom.frame.x.scale.min, 0.0)
        self.assertAlmostEqual(geom.frame.x.scale.max, 33.0)
        self.assertAlmostEqual(geom.bars[2].right, geom.frame.x.map(30.0))

    def test_range_items(self) -> None:
        items = (HorizontalBarItem("r", x_start=10.0, x_end=20.0), HorizontalBarItem("s", x_start=15.0, x_end=40.0))
        geom = layout_horizontal_bar_chart(HorizontalBarChartSpec(items=items), MEASURER)
        self.assertAlmostEqual(geom.frame.x.scale.min, 7.0)
        self.assertAlmostEqual(geom.frame.x.scale.max, 43.0)
        bar = geom.bars[0]
        self.assertEqual(bar.value, 10.0)
        self.assertAlmostEqual(bar.left, geom.frame.x.map(10.0))

    def test_ranged_rows_outrank_an_explicit_x_range(self) -> None:
        items = (HorizontalBarItem("a", x_start=10.0, x_end=20.0), HorizontalBarItem("b", x_start=30.0, x_end=40.0))
        spec = HorizontalBarChartSpec(items=items, x=AxisSpec(min=0.0, max=100.0))
        geom = layout_horizontal_bar_chart(spec, MEASURER)
        self.assertAlmostEqual(geom.frame.x.scale.min, 7.0)
        self.assertAlmostEqual(geom.frame.x.scale.max, 43.0)
        self.assertAlmostEqual(geom.bars[1].right, geom.frame.x.map(40.0))
        outside = (HorizontalBarItem("a", x_start=10.0, x_end=120.0),)
        with self.assertRaises(AxisBoundsError):
            layout_horizontal_bar_chart(HorizontalBarChartSpec(items=outside, x=AxisSpec(min=0.0, max=100.0)), MEASURER)

    def test_min_bar_height_sizes_the_canvas(self) -> None:
        items = tuple(HorizontalBarItem(label, value=float(i + 1)) for i, label in enumerate("abcde"))
        geom = layout_horizontal_bar_chart(HorizontalBarChartSpec(items=items, min_bar_height=60.0), MEASURER)
        self.assertAlmostEqual(geom.layout.canvas_height, 60.0 + 5 * 60.0 + 4 * 15.0 + 2.0 + 80.0)
        last = geom.bars[-1]
        self.assertAlmostEqual(last.bottom - last.top, 60.0)
        self.assertLessEqual(last.bottom, geom.layout.plot.bottom + 1e-9)
        self.assertLessEqual(geom.layout.plot.bottom, geom.layout.canvas_height)

    def test_rows_shrink_to_fit_an_explicit_height(self) -> None:
        items = tuple(HorizontalBarItem(label, value=float(i + 1)) for i, label in enumerate("abcde"))
        spec = HorizontalBarChartSpec(items=items, height=402.0, min_bar_height=60.0)
        with self.assertWarns(DegenerateInputWarning):
            geom = layout_horizontal_bar_chart(spec, MEASURER)
        self.assertAlmostEqual(geom.bars[0].bottom - geom.bars[0].top, 40.0)
        self.assertAlmostEqual(geom.bars[-1].bottom, geom.layout.plot.bottom)
        with self.assertRaises(ConfigurationError):
            layout_horizontal_bar_chart(HorizontalBarChartSpec(items=items, height=150.0), MEASURER)


class PieChartTests(unittest.TestCase):
    def test_angles_and_value_text(self) -> None:
        slices = (PieSlice("a", 1.0), PieSlice("b", 1.0), PieSlice("c", 2.0))
        geom = layout_pie_chart(PieChartSpec(slices=slices), MEASURER)
        first, _, last = geom.slices
        self.assertAlmostEqual(first.start_angle, -math.pi / 2)
        self.assertAlmostEqual(first.sweep, math.pi / 2)
        self.assertAlmostEqual(last.end_angle, 3 * math.pi / 2)
        self.assertEqual(first.value_text, "1 25.0%")
        self.assertAlmostEqual(first.label_anchor.x - geom.layout.center.x, 230.0 * 0.7 * math.cos(first.mid_angle))

    def test_zero_total_is_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            slice_angles([0.0, 0.0])
        with self.assertRaises(ConfigurationError):
            PieChartSpec(slices=(PieSlice("neg", -1.0),))

    def test_donut_inner_radius(self) -> None:
        geom = layout_pie_chart(PieChartSpec(slices=(PieSlice("a", 1.0), PieSlice("b", 3.0)), kind="donut"), MEASURER)
        s = geom.slices[0]
        self.assertAlmostEqual(s.inner_radius, 0.6 * s.outer_radius)

    def test_small_slice_label_goes_outside(self) -> None:
        geom = layout_pie_chart(PieChartSpec(slices=(PieSlice("big", 99.0), PieSlice("tiny", 1.0))), MEASURER)
        big, tiny = geom.slices
        self.assertFalse(big.outside)
        self.assertTrue(tiny.outside)
        self.assertEqual(tiny.label_font_size, 12.0)
        dx = tiny.label_anchor.x - geom.layout.center.x
        dy = tiny.label_anchor.y - geom.layout.center.y
        self.assertAlmostEqual(math.hypot(dx, dy), tiny.outer_radius + 15.0)

    def test_callouts_grow_canvas(self) -> None:
        slices = (PieSlice("Apples", 3.0), PieSlice("Pears", 1.0))
        geom = layout_pie_chart(PieChartSpec(slices=slices, callouts=CalloutSpec(show=True)), MEASURER)
        self.assertAlmostEqual(geom.layout.canvas_width, 800.0 + 2 * 83.2)
        self.assertAlmostEqual(geom.layout.canvas_height, 600.0 + 2 * 31.0)
        self.assertEqual(len(geom.callouts), 2)


class ComparisonChartTests(unittest.TestCase):
    def _spec(self, **kwargs) -> ComparisonChartSpec:
        line = ChartPanel(ChartKind.LINE, LineChartSpec(series=(_series(1, 2, 3),)))
        pie = ChartPanel("pie", PieChartSpec(slices=(PieSlice("a", 1.0), PieSlice("b", 2.0))))
        return ComparisonChartSpec(left=line, right=pie, **kwargs)

    def test_side_by_side_rects(self) -> None:
        first, second = panel_rects(self._spec())
        self.assertEqual((first.left, first.top, first.right, first.bottom), (60.0, 100.0, 1180.0, 1140.0))
        self.assertEqual(second.left, 1220.0)

    def test_top_bottom_rects(self) -> None:
        first, second = panel_rects(self._spec(layout="top_bottom"))
        self.assertEqual(first.bottom, 100.0 + 500.0)
        self.assertEqual(second.top, first.bottom + 40.0)

    def test_sub_charts_fill_their_panels(self) -> None:
        geom = layout_comparison_chart(self._spec(), MEASURER)
        line = geom.panels[0].geometry
        self.assertEqual(line.spec.width, 1120.0)
        self.assertEqual(line.spec.padding, Padding(50.0, 50.0, 50.0, 60.0))
        self.assertEqual(geom.panels[1].kind, ChartKind.PIE)

    def test_panel_padding_is_scaled(self) -> None:
        spec = self._spec(panel_padding=Padding(100.0, 60.0, 60.0, 60.0))
        self.assertEqual(panel_padding(spec), Padding(70.0, 42.0, 42.0, 50.0))

    def test_panel_spec_must_match_kind(self) -> None:
        with self.assertRaises(ConfigurationError):
            ChartPanel(ChartKind.BAR, PieChartSpec(slices=(PieSlice("a", 1.0),)))
        with self.assertRaises(ValueError):
            ChartPanel("scatter", PieChartSpec(slices=(PieSlice("a", 1.0),)))

    def test_donut_panel_coerces_spec(self) -> None:
        panel = ChartPanel(ChartKind.DONUT, PieChartSpec(slices=(PieSlice("a", 1.0),)))
        self.assertEqual(panel.spec.kind, "donut")


if __name__ == "__main__":
    unittest.main()
