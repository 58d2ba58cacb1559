from __future__ import annotations

import unittest

from apexplot.areas import area_samples, band_area, shade_series, trapezoid_area
from apexplot.errors import AreaBoundsError, DegenerateInputWarning
from apexplot.scales import AxisSpec, PlotFrame, resolve_scale
from apexplot.series import AreaSpec, CanvasPoint, LineSeries, PlotRect, Point


def _frame() -> PlotFrame:
    axis = AxisSpec(min=0.0, max=10.0)
    return PlotFrame.build(
        PlotRect(left=0.0, top=0.0, right=100.0, bottom=100.0),
        resolve_scale([], axis),
        resolve_scale([], axis),
    )


def _flat(y: float, label: str = "s", area: AreaSpec | None = None) -> LineSeries:
    return LineSeries(
        label=label,
        points=(Point(0.0, y), Point(10.0, y)),
        area=area or AreaSpec(),
    )


class IntegrationTests(unittest.TestCase):
    def test_trapezoid_of_constant(self) -> None:
        self.assertEqual(trapezoid_area([0.0, 10.0], [5.0, 5.0]), 50.0)
        self.assertEqual(trapezoid_area([0.0], [5.0]), 0.0)

    def test_trapezoid_sums_absolute_segments(self) -> None:
        self.assertEqual(trapezoid_area([0.0, 1.0, 2.0], [2.0, 2.0, -2.0]), 2.0)

    def test_band_truncates_to_shortest(self) -> None:
        self.assertEqual(band_area([0.0, 10.0, 20.0], [5.0, 5.0], [1.0, 1.0, 1.0]), 40.0)


class ShadeSeriesTests(unittest.TestCase):
    def test_below_shades_to_baseline(self) -> None:
        shaded = shade_series(_flat(5.0, area=AreaSpec(kind="below")), _frame())
        self.assertIsNotNone(shaded)
        self.assertEqual(shaded.area, 50.0)
        self.assertEqual(shaded.label, "Area: 50.00")
        self.assertEqual(shaded.polygon[0], CanvasPoint(0.0, 100.0))
        self.assertEqual(shaded.polygon[1], CanvasPoint(0.0, 50.0))
        self.assertEqual(shaded.polygon[-1], CanvasPoint(100.0, 100.0))

    def test_above_shades_to_top(self) -> None:
        shaded = shade_series(_flat(5.0, area=AreaSpec(kind="above")), _frame())
        self.assertEqual(shaded.polygon[0].y, 0.0)
        self.assertEqual(shaded.area, 50.0)

    def test_to_value_must_clear_the_series(self) -> None:
        with self.assertRaises(AreaBoundsError) as ctx:
            shade_series(_flat(5.0, area=AreaSpec(kind="below", to_value=5.0)), _frame())
        self.assertEqual(ctx.exception.y_range, (5.0, 5.0))
        with self.assertRaises(AreaBoundsError):
            shade_series(_flat(5.0, area=AreaSpec(kind="above", to_value=4.0)), _frame())

    def test_between_two_series(self) -> None:
        spec = AreaSpec(kind="between", second=_flat(1.0, label="floor"))
        shaded = shade_series(_flat(5.0, area=spec), _frame())
        self.assertEqual(shaded.area, 40.0)
        self.assertEqual(len(shaded.polygon), 4)

    def test_around_band(self) -> None:
        spec = AreaSpec(kind="around", upper=(6.0, 6.0), lower=(4.0, 4.0))
        shaded = shade_series(_flat(5.0, area=spec), _frame())
        self.assertEqual(shaded.area, 20.0)
        self.assertEqual(shaded.label_anchor, CanvasPoint(50.0, 50.0))

    def test_around_with_mismatched_bounds_is_skipped(self) -> None:
        spec = AreaSpec(kind="around", upper=(6.0,), lower=(4.0, 4.0))
        with self.assertWarns(DegenerateInputWarning):
            self.assertIsNone(shade_series(_flat(5.0, area=spec), _frame()))

    def test_no_area_or_short_series(self) -> None:
        self.assertIsNone(shade_series(_flat(5.0), _frame()))
        short = LineSeries(label="one", points=(Point(1.0, 1.0),), area=AreaSpec(kind="below"))
        self.assertIsNone(shade_series(short, _frame()))

    def test_area_samples_include_band_bounds(self) -> None:
        spec = AreaSpec(kind="around", upper=(6.0, 7.0), lower=(4.0, 3.0))
        ys = sorted(p.y for p in area_samples(_flat(5.0, area=spec)))
        self.assertEqual(ys, [3.0, 4.0, 6.0, 7.0])


if __name__ == "__main__":
    unittest.main()
