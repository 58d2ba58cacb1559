from __future__ import annotations

import unittest

from apexplot.scales import AxisMapping, AxisSpec, resolve_scale
from apexplot.ticks import default_label_spacing, log_tick_values, plan_ticks, stepped_values, suppress_overlapping


class TickPlannerTests(unittest.TestCase):
    def test_crowded_labels_are_suppressed_but_marks_kept(self) -> None:
        spec = AxisSpec(min=0.0, max=100.0, step=10.0)
        mapping = AxisMapping(resolve_scale([], spec), 0.0, 200.0)
        ticks = plan_ticks(mapping, spec, "x", min_label_spacing=30.0)
        self.assertEqual(len(ticks), 11)
        self.assertEqual(ticks.values, tuple(float(v) for v in range(0, 101, 10)))
        visible = [t.value for t in ticks.visible_labels]
        self.assertEqual(visible, [0.0, 20.0, 40.0, 60.0, 80.0, 100.0])
        hidden = [t for t in ticks.ticks if not t.label_visible]
        self.assertEqual(len(hidden), 5)

    def test_labels_follow_step_precision(self) -> None:
        spec = AxisSpec(min=0.0, max=1.0, step=0.25)
        mapping = AxisMapping(resolve_scale([], spec), 0.0, 400.0)
        ticks = plan_ticks(mapping, spec, "x")
        self.assertEqual([t.label for t in ticks.ticks], ["0", "0.25", "0.5", "0.75", "1"])
        self.assertTrue(all(t.label_visible for t in ticks.ticks))

    def test_y_axis_runs_bottom_to_top(self) -> None:
        spec = AxisSpec(min=0.0, max=100.0, step=10.0)
        mapping = AxisMapping(resolve_scale([], spec), 200.0, 0.0)
        ticks = plan_ticks(mapping, spec, "y", min_label_spacing=30.0)
        self.assertEqual(ticks.positions[0], 200.0)
        self.assertEqual(ticks.positions[-1], 0.0)
        self.assertTrue(ticks.ticks[0].label_visible)
        self.assertFalse(ticks.ticks[1].label_visible)

    def test_custom_values_are_placed_by_value(self) -> None:
        spec = AxisSpec(values=(1.0, 2.0, 5.0))
        mapping = AxisMapping(resolve_scale([], spec), 0.0, 400.0)
        ticks = plan_ticks(mapping, spec, "x")
        self.assertEqual(ticks.positions, (0.0, 100.0, 400.0))
        self.assertEqual([t.label for t in ticks.ticks], ["1", "2", "5"])

    def test_fixed_spacing_drops_values_past_axis_end(self) -> None:
        spec = AxisSpec(values=(1.0, 2.0, 3.0, 4.0), value_spacing=50.0)
        mapping = AxisMapping(resolve_scale([], spec), 0.0, 120.0)
        ticks = plan_ticks(mapping, spec, "x", fixed_spacing=True)
        self.assertEqual(ticks.positions, (0.0, 50.0, 100.0))

    def test_log_axis_ticks_are_powers_of_ten(self) -> None:
        spec = AxisSpec(min=1.0, max=1000.0, scale="log")
        mapping = AxisMapping(resolve_scale([], spec, default_baseline=None), 0.0, 300.0)
        ticks = plan_ticks(mapping, spec, "x")
        self.assertEqual(ticks.values, (1.0, 10.0, 100.0, 1000.0))
        for expected, pos in zip((0.0, 100.0, 200.0, 300.0), ticks.positions):
            self.assertAlmostEqual(pos, expected)

    def test_log_axis_without_inner_power_of_ten_uses_endpoints(self) -> None:
        self.assertEqual(log_tick_values(2.0, 8.0), [2.0, 8.0])
        spec = AxisSpec(min=2.0, max=8.0, scale="log")
        mapping = AxisMapping(resolve_scale([], spec, default_baseline=None), 0.0, 300.0)
        ticks = plan_ticks(mapping, spec, "x")
        self.assertEqual(ticks.values, (2.0, 8.0))
        self.assertAlmostEqual(ticks.positions[0], 0.0)
        self.assertAlmostEqual(ticks.positions[1], 300.0)
        self.assertTrue(ticks.ticks[0].label_visible)

    def test_date_axis_labels(self) -> None:
        day = 86_400_000.0
        spec = AxisSpec(min=0.0, max=2 * day, step=day, date_format="MM-DD")
        mapping = AxisMapping(resolve_scale([], spec), 0.0, 300.0)
        ticks = plan_ticks(mapping, spec, "x")
        self.assertEqual([t.label for t in ticks.ticks], ["01-01", "01-02", "01-03"])

    def test_greedy_suppression_compares_with_last_visible_label(self) -> None:
        self.assertEqual(suppress_overlapping([0.0, 10.0, 25.0, 31.0], 20.0), [True, False, True, False])
        self.assertEqual(suppress_overlapping([], 20.0), [])

    def test_stepped_values_tolerate_float_accumulation(self) -> None:
        values = stepped_values(0.0, 1.0, 0.1)
        self.assertEqual(len(values), 11)
        self.assertAlmostEqual(values[-1], 1.0)

    def test_default_label_spacing(self) -> None:
        self.assertEqual(default_label_spacing(AxisSpec(), "x"), 40.0)
        self.assertEqual(default_label_spacing(AxisSpec(values=(1.0, 2.0)), "y"), 30.0)
        self.assertEqual(default_label_spacing(AxisSpec(tick_font_size=14.0), "y"), 19.0)
        self.assertEqual(default_label_spacing(AxisSpec(value_spacing=55.0), "y"), 55.0)


if __name__ == "__main__":
    unittest.main()
