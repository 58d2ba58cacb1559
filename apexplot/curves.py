from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
from typing import TypeVar

import numpy as np

from apexplot.errors import ConfigurationError, report_degenerate
from apexplot.series import CanvasPoint, PlotRect, Point


LOGGER = logging.getLogger(__name__)

BEZIER_TENSION = 0.5
SPLINE_SAMPLES_PER_SEGMENT = 20
BEZIER_FLATTEN_SAMPLES = 16

P = TypeVar("P", Point, CanvasPoint)


@dataclass(frozen=True)
class BezierSegment:
    start: CanvasPoint
    cp1: CanvasPoint
    cp2: CanvasPoint
    end: CanvasPoint

    def sample(self, count: int) -> np.ndarray:
        t = np.linspace(0.0, 1.0, count + 1)[:, None]
        p0 = np.asarray([self.start.x, self.start.y])
        p1 = np.asarray([self.cp1.x, self.cp1.y])
        p2 = np.asarray([self.cp2.x, self.cp2.y])
        p3 = np.asarray([self.end.x, self.end.y])
        u = 1.0 - t
        return u**3 * p0 + 3 * u**2 * t * p1 + 3 * u * t**2 * p2 + t**3 * p3


@dataclass(frozen=True)
class CurvePath:
    """A drawable path: a polyline plus the cubic segments it was flattened from."""

    kind: str
    points: tuple[CanvasPoint, ...]
    segments: tuple[BezierSegment, ...] = ()


def _like(proto: P, x: float, y: float) -> P:
    if isinstance(proto, CanvasPoint):
        return CanvasPoint(x=float(x), y=float(y))  # type: ignore[return-value]
    return Point(x=float(x), y=float(y))  # type: ignore[return-value]


def bezier_segments(points: Sequence[Point | CanvasPoint], tension: float = BEZIER_TENSION) -> list[BezierSegment]:
    """Catmull-Rom style control points, with the neighbours clamped at the ends."""
    out: list[BezierSegment] = []
    n = len(points)
    for i in range(n - 1):
        p0 = points[i - 1] if i > 0 else points[i]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[i + 2] if i < n - 2 else points[i + 1]
        out.append(
            BezierSegment(
                start=CanvasPoint(p1.x, p1.y),
                cp1=CanvasPoint(p1.x + (p2.x - p0.x) * tension, p1.y + (p2.y - p0.y) * tension),
                cp2=CanvasPoint(p2.x - (p3.x - p1.x) * tension, p2.y - (p3.y - p1.y) * tension),
                end=CanvasPoint(p2.x, p2.y),
            )
        )
    return out


def flatten_bezier(segments: Sequence[BezierSegment], samples_per_segment: int = BEZIER_FLATTEN_SAMPLES) -> list[CanvasPoint]:
    if not segments:
        return []
    out: list[CanvasPoint] = [segments[0].start]
    for seg in segments:
        pts = seg.sample(samples_per_segment)
        out.extend(CanvasPoint(float(x), float(y)) for x, y in pts[1:].tolist())
    return out


def natural_cubic_spline(points: Sequence[P], samples_per_segment: int = SPLINE_SAMPLES_PER_SEGMENT) -> list[P]:
    """Sample a natural cubic spline through ``points``.

    Second derivatives come from a Thomas-algorithm solve with zero curvature
    at both ends. Fewer than three points (or repeated x) return the input.
    """
    n = len(points)
    if n < 3:
        return list(points)
    x = np.asarray([p.x for p in points], dtype=np.float64)
    y = np.asarray([p.y for p in points], dtype=np.float64)
    h = np.diff(x)
    if np.any(h == 0):
        report_degenerate(LOGGER, "spline input has repeated x values; drawing straight segments")
        return list(points)

    alpha = np.zeros(n)
    for i in range(1, n - 1):
        alpha[i] = 3.0 / h[i] * (y[i + 1] - y[i]) - 3.0 / h[i - 1] * (y[i] - y[i - 1])

    l = np.ones(n)
    mu = np.zeros(n)
    z = np.zeros(n)
    for i in range(1, n - 1):
        l[i] = 2.0 * (x[i + 1] - x[i - 1]) - h[i - 1] * mu[i - 1]
        mu[i] = h[i] / l[i]
        z[i] = (alpha[i] - h[i - 1] * z[i - 1]) / l[i]

    c = np.zeros(n)
    b = np.zeros(n - 1)
    d = np.zeros(n - 1)
    for j in range(n - 2, -1, -1):
        c[j] = z[j] - mu[j] * c[j + 1]
        b[j] = (y[j + 1] - y[j]) / h[j] - h[j] * (c[j + 1] + 2.0 * c[j]) / 3.0
        d[j] = (c[j + 1] - c[j]) / (3.0 * h[j])

    out: list[P] = []
    t = np.arange(samples_per_segment, dtype=np.float64) / samples_per_segment
    for i in range(n - 1):
        dx = t * h[i]
        ys = y[i] + b[i] * dx + c[i] * dx**2 + d[i] * dx**3
        out.extend(_like(points[0], xv, yv) for xv, yv in zip((x[i] + dx).tolist(), ys.tolist(), strict=True))
    out.append(_like(points[0], x[-1], y[-1]))
    return out


def step_points(points: Sequence[P]) -> list[P]:
    """Staircase path: horizontal to the next x at the prior y, then vertical."""
    if len(points) < 2:
        return list(points)
    out: list[P] = [points[0]]
    for prev, nxt in zip(points[:-1], points[1:], strict=True):
        out.append(_like(points[0], nxt.x, prev.y))
        out.append(nxt)
    return out


def _clamped(points: Sequence[CanvasPoint], bounds: PlotRect | None) -> tuple[CanvasPoint, ...]:
    if bounds is None:
        return tuple(points)
    return tuple(CanvasPoint(*bounds.clamp(p.x, p.y)) for p in points)


def _clamped_segment(seg: BezierSegment, bounds: PlotRect) -> BezierSegment:
    start, cp1, cp2, end = _clamped((seg.start, seg.cp1, seg.cp2, seg.end), bounds)
    return BezierSegment(start=start, cp1=cp1, cp2=cp2, end=end)


def build_path(
    points: Sequence[CanvasPoint],
    *,
    smoothing: str = "none",
    line_kind: str = "solid",
    bounds: PlotRect | None = None,
) -> CurvePath:
    """Turn canvas points into a drawable path.

    With ``bounds`` every emitted point stays inside the rectangle. Bezier
    control points are clamped too, so the cubic curve (which lies in the
    hull of its control points) cannot leave it either.
    """
    if len(points) < 2:
        return CurvePath(kind="none", points=_clamped(points, bounds))
    if smoothing == "bezier":
        segments = bezier_segments(points)
        if bounds is not None:
            segments = [_clamped_segment(seg, bounds) for seg in segments]
        return CurvePath(kind="bezier", points=_clamped(flatten_bezier(segments), bounds), segments=tuple(segments))
    if smoothing == "spline":
        return CurvePath(kind="spline", points=_clamped(natural_cubic_spline(points), bounds))
    if smoothing != "none":
        raise ConfigurationError(f"unsupported smoothing kind: {smoothing!r}")
    if line_kind in {"step", "stepline"}:
        return CurvePath(kind="step", points=_clamped(step_points(points), bounds))
    return CurvePath(kind="straight", points=_clamped(points, bounds))
