from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging

from apexplot.areas import ShadedArea, area_samples, shade_series
from apexplot.charts.base import legend_box, title_height
from apexplot.curves import CurvePath, build_path
from apexplot.errors import ConfigurationError
from apexplot.legend import LegendBox, LegendSpec, TextMeasurer, line_legend_metrics, position_legend
from apexplot.regression import RegressionFit, fit_regression, regression_domain, sample_regression
from apexplot.scales import AxisSpec, PlotFrame, resolve_scale, validate_bounds
from apexplot.series import CanvasPoint, LegendEntry, LineSeries
from apexplot.sizing import LINE_PADDING, ChartLayout, Padding, reserve_axis_chart
from apexplot.ticks import TickSet, plan_ticks


LOGGER = logging.getLogger(__name__)

LEGEND_GAP = 10.0
AXIS_LABEL_MARGIN = 40.0


@dataclass(frozen=True)
class LineChartSpec:
    series: tuple[LineSeries, ...]
    width: float = 800.0
    height: float = 600.0
    padding: Padding = LINE_PADDING
    title: str | None = None
    title_font_size: float = 24.0
    x: AxisSpec = field(default_factory=AxisSpec)
    y: AxisSpec = field(default_factory=AxisSpec)
    legend: LegendSpec = field(default_factory=LegendSpec)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("width and height must be > 0")
        if not isinstance(self.series, tuple):
            object.__setattr__(self, "series", tuple(self.series))


@dataclass(frozen=True)
class ErrorBarGeometry:
    x: float
    top: float
    bottom: float
    cap_width: float = 6.0


@dataclass(frozen=True)
class RegressionCurve:
    fit: RegressionFit
    points: tuple[CanvasPoint, ...]


@dataclass(frozen=True)
class SeriesGeometry:
    series: LineSeries
    points: tuple[CanvasPoint, ...]
    path: CurvePath | None
    markers: tuple[CanvasPoint, ...]
    error_bars: tuple[ErrorBarGeometry, ...]
    area: ShadedArea | None
    regression: RegressionCurve | None


@dataclass(frozen=True)
class LineChartGeometry:
    spec: LineChartSpec
    layout: ChartLayout
    frame: PlotFrame
    x_ticks: TickSet
    y_ticks: TickSet
    series: tuple[SeriesGeometry, ...]
    legend: LegendBox | None
    baseline_y: float


def _x_samples(spec: LineChartSpec) -> Iterator[tuple[str | int, int, str, float]]:
    for s in spec.series:
        for i, p in enumerate(s.points):
            yield s.label, i, "x", p.x


def _y_samples(spec: LineChartSpec) -> Iterator[tuple[str | int, int, str, float]]:
    for s in spec.series:
        for i, p in enumerate(s.points):
            yield s.label, i, "y", p.y
        for i, v in enumerate(s.area.upper):
            yield s.label, i, "area.upper", v
        for i, v in enumerate(s.area.lower):
            yield s.label, i, "area.lower", v


def _error_bars(series: LineSeries, frame: PlotFrame) -> tuple[ErrorBarGeometry, ...]:
    if not series.show_error_bars:
        return ()
    out: list[ErrorBarGeometry] = []
    for p in series.points:
        if p.error is None:
            continue
        out.append(
            ErrorBarGeometry(
                x=frame.x.map(p.x),
                top=frame.y.map(p.y + p.error.positive),
                bottom=frame.y.map(p.y - p.error.negative),
            )
        )
    return tuple(out)


def _regression(series: LineSeries, frame: PlotFrame) -> RegressionCurve | None:
    fit = fit_regression(series.points, series.regression)
    if fit is None:
        return None
    lo, hi = regression_domain(series.points, frame.x.scale.min, frame.x.scale.max)
    samples = sample_regression(fit, lo, hi)
    pts = [frame.to_canvas_unclamped(p) for p in samples]
    return RegressionCurve(fit=fit, points=tuple(p for p in pts if frame.rect.contains(p.x, p.y)))


def layout_line_chart(spec: LineChartSpec, measurer: TextMeasurer) -> LineChartGeometry:
    """Resolve scales, reserve space and compute every series' pixel geometry."""
    xs = [p.x for s in spec.series for p in s.points]
    ys = [p.y for s in spec.series for p in (*s.points, *area_samples(s))]
    x_scale = resolve_scale(xs, spec.x, auto="padded", default_baseline=None)
    y_scale = resolve_scale(ys, spec.y, auto="baseline_anchored", default_baseline=None)
    validate_bounds("x", spec.x, x_scale, _x_samples(spec), chart="line chart")
    validate_bounds("y", spec.y, y_scale, _y_samples(spec), chart="line chart")

    derived = [LegendEntry(label=s.label, color=s.color) for s in spec.series]
    box = legend_box(spec.legend, derived, measurer, line_legend_metrics(spec.legend))
    title_h = title_height(spec.title, spec.title_font_size)
    axis_label_h = spec.x.tick_font_size + AXIS_LABEL_MARGIN if (spec.x.label or spec.y.label) else 0.0
    layout = reserve_axis_chart(
        width=spec.width,
        height=spec.height,
        padding=spec.padding,
        title_height=title_h,
        axis_label_height=axis_label_h,
        legend=box,
        position=spec.legend.position,
        gap=LEGEND_GAP,
    )
    frame = PlotFrame.build(layout.plot, x_scale, y_scale)
    if box is not None:
        box = position_legend(
            box,
            spec.legend.position,
            canvas_width=layout.canvas_width,
            canvas_height=layout.canvas_height,
            chart=layout.chart,
            padding_top=spec.padding.top,
            padding_bottom=spec.padding.bottom,
            padding_left=spec.padding.left,
            title_height=title_h,
            gap=LEGEND_GAP,
        )

    geoms: list[SeriesGeometry] = []
    for s in spec.series:
        pts = frame.to_canvas_many(s.points)
        path = build_path(pts, smoothing=s.smoothing, line_kind=s.line_kind, bounds=frame.rect) if s.draws_line else None
        markers = tuple(pts) if s.show_markers and s.marker != "none" else ()
        geoms.append(
            SeriesGeometry(
                series=s,
                points=tuple(pts),
                path=path,
                markers=markers,
                error_bars=_error_bars(s, frame),
                area=shade_series(s, frame, pts),
                regression=_regression(s, frame),
            )
        )
    LOGGER.debug("line chart: %d series on %.0fx%.0f canvas", len(geoms), layout.canvas_width, layout.canvas_height)
    return LineChartGeometry(
        spec=spec,
        layout=layout,
        frame=frame,
        x_ticks=plan_ticks(frame.x, spec.x, "x"),
        y_ticks=plan_ticks(frame.y, spec.y, "y"),
        series=tuple(geoms),
        legend=box,
        baseline_y=frame.baseline_y,
    )
