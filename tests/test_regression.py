from __future__ import annotations

import math
import unittest

import numpy as np

from apexplot.errors import DegenerateInputWarning
from apexplot.regression import (
    exponential_fit,
    fit_regression,
    linear_fit,
    logarithmic_fit,
    polynomial_fit,
    regression_domain,
    sample_regression,
    solve_gaussian,
)
from apexplot.series import Point, RegressionSpec


def _points(xs, fn) -> list[Point]:
    return [Point(float(x), float(fn(x))) for x in xs]


class FitTests(unittest.TestCase):
    def test_linear_fit_recovers_slope_and_intercept(self) -> None:
        fit = linear_fit(_points(range(6), lambda x: 2 * x + 1))
        m, b = fit.coefficients
        self.assertAlmostEqual(m, 2.0)
        self.assertAlmostEqual(b, 1.0)

    def test_degree_one_polynomial_matches_linear(self) -> None:
        rng = np.random.default_rng(7)
        xs = np.linspace(0.0, 10.0, 25)
        pts = [Point(float(x), float(3 * x - 4 + rng.normal(0, 0.5))) for x in xs]
        m, b = linear_fit(pts).coefficients
        a0, a1 = polynomial_fit(pts, degree=1).coefficients
        self.assertAlmostEqual(a0, b, places=8)
        self.assertAlmostEqual(a1, m, places=8)

    def test_exact_quadratic_is_recovered(self) -> None:
        fit = polynomial_fit(_points(range(-3, 4), lambda x: 0.5 * x * x - x + 2), degree=2)
        for got, want in zip(fit.coefficients, (2.0, -1.0, 0.5)):
            self.assertAlmostEqual(got, want, places=9)

    def test_singular_system_degrades_to_flat_fit(self) -> None:
        pts = [Point(1.0, 2.0), Point(1.0, 4.0), Point(1.0, 6.0)]
        with self.assertWarns(DegenerateInputWarning):
            fit = polynomial_fit(pts, degree=2)
        self.assertEqual(fit.coefficients, (4.0, 0.0, 0.0))

    def test_gaussian_solver_pivots(self) -> None:
        out = solve_gaussian(np.asarray([[0.0, 1.0], [2.0, 0.0]]), np.asarray([3.0, 4.0]))
        self.assertIsNotNone(out)
        self.assertEqual(out.tolist(), [2.0, 3.0])
        self.assertIsNone(solve_gaussian(np.zeros((2, 2)), np.zeros(2)))

    def test_exponential_fit(self) -> None:
        fit = exponential_fit(_points(range(5), lambda x: 2.0 * math.exp(0.5 * x)))
        a, b = fit.coefficients
        self.assertAlmostEqual(a, 2.0, places=9)
        self.assertAlmostEqual(b, 0.5, places=9)

    def test_exponential_needs_positive_values(self) -> None:
        pts = [Point(0.0, -1.0), Point(1.0, 0.0), Point(2.0, 3.0)]
        with self.assertWarns(DegenerateInputWarning):
            fit = exponential_fit(pts)
        self.assertEqual(fit.coefficients, (1.0, 0.0))

    def test_logarithmic_fit(self) -> None:
        fit = logarithmic_fit(_points(range(1, 6), lambda x: 3.0 + 2.0 * math.log(x)))
        a, b = fit.coefficients
        self.assertAlmostEqual(a, 3.0, places=9)
        self.assertAlmostEqual(b, 2.0, places=9)

    def test_fit_regression_dispatch(self) -> None:
        pts = _points(range(4), lambda x: x)
        self.assertIsNone(fit_regression(pts, RegressionSpec()))
        self.assertIsNone(fit_regression(pts[:1], RegressionSpec(kind="linear")))
        self.assertEqual(fit_regression(pts, RegressionSpec(kind="polynomial", degree=3)).kind, "polynomial")


class SamplingTests(unittest.TestCase):
    def test_sample_count_covers_domain(self) -> None:
        fit = linear_fit(_points(range(3), lambda x: x))
        samples = sample_regression(fit, 0.0, 10.0)
        self.assertEqual(len(samples), 101)
        self.assertAlmostEqual(samples[0].x, 0.0)
        self.assertAlmostEqual(samples[-1].x, 10.0)

    def test_logarithmic_samples_skip_non_positive_x(self) -> None:
        fit = logarithmic_fit(_points(range(1, 4), lambda x: math.log(x)))
        samples = sample_regression(fit, -5.0, 5.0)
        self.assertTrue(samples)
        self.assertLess(len(samples), 101)
        self.assertTrue(all(p.x > 0 for p in samples))

    def test_domain_is_padded_and_clamped(self) -> None:
        pts = _points(range(0, 11), lambda x: x)
        self.assertEqual(regression_domain(pts, 0.0, 20.0), (0.0, 11.0))


if __name__ == "__main__":
    unittest.main()
