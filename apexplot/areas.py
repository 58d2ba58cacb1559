from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging

import numpy as np

from apexplot.errors import AreaBoundsError, ConfigurationError, report_degenerate
from apexplot.scales import PlotFrame
from apexplot.series import CanvasPoint, LineSeries, Point


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShadedArea:
    """Fill polygon for a shaded region plus its integrated size.

    ``polygon`` is in canvas pixels and already clamped to the plot rect.
    ``label_anchor`` is where an ``Area: N`` annotation is centred.
    """

    kind: str
    polygon: tuple[CanvasPoint, ...]
    area: float
    label_anchor: CanvasPoint

    @property
    def label(self) -> str:
        return f"Area: {self.area:.2f}"


def trapezoid_area(xs: Sequence[float] | np.ndarray, ys: Sequence[float] | np.ndarray, baseline: float = 0.0) -> float:
    """``sum(|avg(y_i, y_i+1) - baseline| * (x_i+1 - x_i))`` over consecutive pairs."""
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    if x.size < 2:
        return 0.0
    avg = (y[:-1] + y[1:]) / 2.0
    return float(np.sum(np.abs(avg - baseline) * np.diff(x)))


def band_area(
    xs: Sequence[float] | np.ndarray,
    upper: Sequence[float] | np.ndarray,
    lower: Sequence[float] | np.ndarray,
) -> float:
    """Trapezoidal area between two curves sampled at the same x values.

    Inputs of unequal length are truncated to the shortest.
    """
    n = min(len(xs), len(upper), len(lower))
    if n < 2:
        return 0.0
    x = np.asarray(xs[:n], dtype=np.float64)
    u = np.asarray(upper[:n], dtype=np.float64)
    lo = np.asarray(lower[:n], dtype=np.float64)
    gap = np.abs((u[:-1] + u[1:]) / 2.0 - (lo[:-1] + lo[1:]) / 2.0)
    return float(np.sum(gap * np.diff(x)))


def validate_to_value(kind: str, to_value: float, ys: Sequence[float]) -> None:
    lo = float(min(ys))
    hi = float(max(ys))
    if kind == "below" and not to_value < lo:
        raise AreaBoundsError(kind=kind, to_value=to_value, y_range=(lo, hi))
    if kind == "above" and not to_value > hi:
        raise AreaBoundsError(kind=kind, to_value=to_value, y_range=(lo, hi))


def shade_series(series: LineSeries, frame: PlotFrame, canvas_points: Sequence[CanvasPoint] | None = None) -> ShadedArea | None:
    """Build the shaded region configured on ``series.area``.

    Returns ``None`` when shading is off, the series has fewer than two
    points, or a confidence band does not match the series length.
    """
    spec = series.area
    points = series.points
    if spec.kind == "none" or len(points) < 2:
        return None
    pts = list(canvas_points) if canvas_points is not None else frame.to_canvas_many(points)
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    center_x = (pts[0].x + pts[-1].x) / 2.0
    mid = pts[len(pts) // 2]

    if spec.kind in {"below", "above"}:
        if spec.to_value is not None:
            validate_to_value(spec.kind, spec.to_value, ys)
            shade_value = float(spec.to_value)
            shade_y = frame.y.map(shade_value)
        elif spec.kind == "below":
            shade_value = frame.y.scale.effective_baseline
            shade_y = frame.baseline_y
        else:
            shade_value = frame.y.scale.max
            shade_y = frame.rect.top
        polygon = (CanvasPoint(pts[0].x, shade_y), *pts, CanvasPoint(pts[-1].x, shade_y))
        return ShadedArea(
            kind=spec.kind,
            polygon=polygon,
            area=trapezoid_area(xs, ys, shade_value),
            label_anchor=CanvasPoint(center_x, (shade_y + mid.y) / 2.0),
        )

    if spec.kind == "between":
        if spec.second is None:
            raise ConfigurationError(f"series {series.label!r}: area kind 'between' needs a second series")
        other = spec.second.points
        other_pts = frame.to_canvas_many(other)
        n = min(len(points), len(other))
        area = band_area(xs[:n], ys[:n], [p.y for p in other[:n]])
        return ShadedArea(
            kind="between",
            polygon=(*pts, *reversed(other_pts)),
            area=area,
            label_anchor=CanvasPoint(center_x, mid.y),
        )

    if spec.kind == "around":
        if len(spec.upper) != len(points) or len(spec.lower) != len(points):
            report_degenerate(
                LOGGER,
                "series %r: band bounds (%d upper, %d lower) do not match %d points; skipping shading",
                series.label,
                len(spec.upper),
                len(spec.lower),
                len(points),
            )
            return None
        upper_pts = [CanvasPoint(p.x, frame.y.map(v)) for p, v in zip(pts, spec.upper, strict=True)]
        lower_pts = [CanvasPoint(p.x, frame.y.map(v)) for p, v in zip(pts, spec.lower, strict=True)]
        half = len(pts) // 2
        return ShadedArea(
            kind="around",
            polygon=(*upper_pts, *reversed(lower_pts)),
            area=band_area(xs, spec.upper, spec.lower),
            label_anchor=CanvasPoint(center_x, (upper_pts[half].y + lower_pts[half].y) / 2.0),
        )

    raise ConfigurationError(f"unsupported area kind: {spec.kind!r}")


def area_samples(series: LineSeries) -> list[Point]:
    """Points whose y values must fit the y axis when the area is drawn."""
    spec = series.area
    out: list[Point] = []
    if spec.kind == "around":
        out.extend(Point(x=p.x, y=v) for p, v in zip(series.points, spec.upper))
        out.extend(Point(x=p.x, y=v) for p, v in zip(series.points, spec.lower))
    elif spec.kind == "between" and spec.second is not None:
        out.extend(spec.second.points)
    return out
