from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import math

import numpy as np

from apexplot.errors import ConfigurationError, report_degenerate
from apexplot.series import Point, RegressionSpec


LOGGER = logging.getLogger(__name__)

REGRESSION_SAMPLE_INTERVALS = 100
DOMAIN_PAD_RATIO = 0.1
_PIVOT_EPS = 1e-12


@dataclass(frozen=True)
class RegressionFit:
    """A fitted curve.

    ``coefficients`` meaning depends on ``kind``:
    linear ``(m, b)``, polynomial ``(a0, a1, ..., ad)``,
    exponential ``(a, b)`` for ``a*e^(b*x)``, logarithmic ``(a, b)`` for ``a + b*ln(x)``.
    """

    kind: str
    coefficients: tuple[float, ...]

    def evaluate(self, x: np.ndarray | Sequence[float] | float) -> np.ndarray:
        xs = np.asarray(x, dtype=np.float64)
        if self.kind == "linear":
            m, b = self.coefficients
            return m * xs + b
        if self.kind == "polynomial":
            # np.polyval wants the highest power first.
            return np.polyval(np.asarray(self.coefficients[::-1], dtype=np.float64), xs)
        if self.kind == "exponential":
            a, b = self.coefficients
            return a * np.exp(b * xs)
        if self.kind == "logarithmic":
            a, b = self.coefficients
            with np.errstate(divide="ignore", invalid="ignore"):
                return np.where(xs > 0, a + b * np.log(np.where(xs > 0, xs, 1.0)), np.nan)
        raise ConfigurationError(f"unsupported regression kind: {self.kind!r}")


def _xy(points: Sequence[Point]) -> tuple[np.ndarray, np.ndarray]:
    x = np.asarray([p.x for p in points], dtype=np.float64)
    y = np.asarray([p.y for p in points], dtype=np.float64)
    return x, y


def _linear_coefficients(x: np.ndarray, y: np.ndarray) -> tuple[float, float]:
    n = x.size
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_xx = float(np.sum(x * x))
    denom = n * sum_xx - sum_x * sum_x
    if n == 0:
        return 0.0, 0.0
    if denom == 0:
        report_degenerate(LOGGER, "linear regression on %d points with no x spread; using a flat fit", n)
        return 0.0, sum_y / n
    m = (n * sum_xy - sum_x * sum_y) / denom
    return m, (sum_y - m * sum_x) / n


def linear_fit(points: Sequence[Point]) -> RegressionFit:
    """Closed-form least squares ``y = m*x + b``."""
    m, b = _linear_coefficients(*_xy(points))
    return RegressionFit(kind="linear", coefficients=(m, b))


def polynomial_fit(points: Sequence[Point], degree: int = 2) -> RegressionFit:
    """Least-squares polynomial via the normal equations.

    ``X^T X c = X^T y`` is solved by Gaussian elimination with partial
    pivoting. A singular system degrades to a flat fit at the mean of y.
    """
    if degree < 1:
        raise ConfigurationError("polynomial degree must be >= 1")
    x, y = _xy(points)
    if x.size == 0:
        return RegressionFit(kind="polynomial", coefficients=(0.0,) * (degree + 1))
    design = np.vander(x, degree + 1, increasing=True)
    a = design.T @ design
    rhs = design.T @ y
    coeffs = solve_gaussian(a, rhs)
    if coeffs is None:
        report_degenerate(
            LOGGER,
            "polynomial regression of degree %d on %d points is singular; using a flat fit",
            degree,
            x.size,
        )
        flat = [float(np.mean(y))] + [0.0] * degree
        return RegressionFit(kind="polynomial", coefficients=tuple(flat))
    return RegressionFit(kind="polynomial", coefficients=tuple(float(c) for c in coeffs))


def solve_gaussian(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray | None:
    """Solve ``matrix @ out = rhs``; ``None`` when a pivot vanishes."""
    a = np.array(matrix, dtype=np.float64)
    b = np.array(rhs, dtype=np.float64)
    n = b.size
    scale = float(np.max(np.abs(a))) if a.size else 0.0
    if scale == 0.0:
        return None
    for i in range(n):
        pivot = i + int(np.argmax(np.abs(a[i:, i])))
        if abs(a[pivot, i]) <= _PIVOT_EPS * scale:
            return None
        if pivot != i:
            a[[i, pivot]] = a[[pivot, i]]
            b[[i, pivot]] = b[[pivot, i]]
        for k in range(i + 1, n):
            factor = a[k, i] / a[i, i]
            a[k, i:] -= factor * a[i, i:]
            b[k] -= factor * b[i]
    out = np.zeros(n, dtype=np.float64)
    for i in range(n - 1, -1, -1):
        out[i] = (b[i] - float(np.dot(a[i, i + 1 :], out[i + 1 :]))) / a[i, i]
    if not np.all(np.isfinite(out)):
        return None
    return out


def exponential_fit(points: Sequence[Point]) -> RegressionFit:
    x, y = _xy(points)
    keep = y > 0
    if int(np.count_nonzero(keep)) < 2:
        report_degenerate(LOGGER, "exponential regression needs two points with y > 0; using the identity fit")
        return RegressionFit(kind="exponential", coefficients=(1.0, 0.0))
    m, b = _linear_coefficients(x[keep], np.log(y[keep]))
    return RegressionFit(kind="exponential", coefficients=(math.exp(b), m))


def logarithmic_fit(points: Sequence[Point]) -> RegressionFit:
    x, y = _xy(points)
    keep = x > 0
    if int(np.count_nonzero(keep)) < 2:
        report_degenerate(LOGGER, "logarithmic regression needs two points with x > 0; using a zero fit")
        return RegressionFit(kind="logarithmic", coefficients=(0.0, 0.0))
    m, b = _linear_coefficients(np.log(x[keep]), y[keep])
    return RegressionFit(kind="logarithmic", coefficients=(b, m))


def fit_regression(points: Sequence[Point], spec: RegressionSpec) -> RegressionFit | None:
    if spec.kind == "none" or len(points) < 2:
        return None
    if spec.kind == "linear":
        return linear_fit(points)
    if spec.kind == "polynomial":
        return polynomial_fit(points, spec.degree)
    if spec.kind == "exponential":
        return exponential_fit(points)
    if spec.kind == "logarithmic":
        return logarithmic_fit(points)
    raise ConfigurationError(f"unsupported regression kind: {spec.kind!r}")


def regression_domain(points: Sequence[Point], axis_min: float, axis_max: float) -> tuple[float, float]:
    """Data x extent padded by 10% each side, clamped to the axis domain."""
    xs = [p.x for p in points]
    lo = min(xs)
    hi = max(xs)
    pad = (hi - lo) * DOMAIN_PAD_RATIO
    return max(axis_min, lo - pad), min(axis_max, hi + pad)


def sample_regression(
    fit: RegressionFit,
    x_min: float,
    x_max: float,
    intervals: int = REGRESSION_SAMPLE_INTERVALS,
) -> list[Point]:
    """Evaluate ``fit`` at ``intervals + 1`` evenly spaced x values.

    Samples where the curve is undefined (``x <= 0`` for logarithmic fits) or
    not finite are left out.
    """
    xs = x_min + (np.arange(intervals + 1, dtype=np.float64) / intervals) * (x_max - x_min)
    if fit.kind == "logarithmic":
        xs = xs[xs > 0]
    with np.errstate(over="ignore", invalid="ignore"):
        ys = fit.evaluate(xs)
    keep = np.isfinite(ys)
    return [Point(x=float(xv), y=float(yv)) for xv, yv in zip(xs[keep].tolist(), ys[keep].tolist(), strict=True)]
