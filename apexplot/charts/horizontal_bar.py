from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging

from apexplot.charts.bar import BarRect
from apexplot.charts.base import legend_box, title_height
from apexplot.errors import ConfigurationError, report_degenerate
from apexplot.legend import LegendBox, LegendSpec, TextMeasurer, line_legend_metrics, position_legend
from apexplot.scales import AxisSpec, PlotFrame, ResolvedScale, resolve_scale, validate_bounds
from apexplot.series import RGBA, HorizontalBarItem, LegendEntry, palette_color
from apexplot.sizing import (
    BAR_PADDING,
    ChartLayout,
    Padding,
    reserve_axis_chart,
    responsive_horizontal_bar_height,
    x_axis_label_area,
)
from apexplot.ticks import TickSet, plan_ticks


LOGGER = logging.getLogger(__name__)

TITLE_MARGIN = 20.0
LEGEND_GAP = 20.0
LEGEND_TRAILING = 10.0
SIZING_MIN_BAR_HEIGHT = 40.0
ROW_MIN_BAR_HEIGHT = 30.0


@dataclass(frozen=True)
class HorizontalBarChartSpec:
    items: tuple[HorizontalBarItem, ...]
    width: float = 800.0
    height: float | None = None
    padding: Padding = BAR_PADDING
    title: str | None = None
    title_font_size: float = 24.0
    axis_label_font_size: float = 14.0
    x: AxisSpec = field(default_factory=AxisSpec)
    y: AxisSpec = field(default_factory=AxisSpec)
    legend: LegendSpec = field(default_factory=LegendSpec)
    min_bar_height: float | None = None
    bar_spacing: float = 15.0

    def __post_init__(self) -> None:
        if self.width <= 0 or (self.height is not None and self.height <= 0):
            raise ConfigurationError("width and height must be > 0")
        if (self.min_bar_height is not None and self.min_bar_height <= 0) or self.bar_spacing < 0:
            raise ConfigurationError("bar height must be > 0 and bar spacing >= 0")
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class RowLabel:
    text: str
    y: float


@dataclass(frozen=True)
class HorizontalBarChartGeometry:
    spec: HorizontalBarChartSpec
    layout: ChartLayout
    frame: PlotFrame
    x_ticks: TickSet
    rows: tuple[RowLabel, ...]
    bars: tuple[BarRect, ...]
    legend: LegendBox | None
    baseline_x: float


def _has_x_axis(spec: HorizontalBarChartSpec) -> bool:
    return bool(spec.x.label) or spec.x.has_custom_values or spec.x.has_explicit_range


def _range(item: HorizontalBarItem) -> tuple[float, float]:
    if item.x_start is None or item.x_end is None:
        raise ConfigurationError(f"horizontal bar {item.label!r} needs both x_start and x_end")
    return float(item.x_start), float(item.x_end)


def _extent(item: HorizontalBarItem, base: float) -> tuple[float, float]:
    if item.has_range:
        return _range(item)
    vals = item.segment_values()
    pos = sum(v for v in vals if v > 0)
    neg = sum(v for v in vals if v < 0)
    return base + neg, base + pos


def _samples(spec: HorizontalBarChartSpec) -> Iterator[tuple[str | int, int, str, float]]:
    for i, item in enumerate(spec.items):
        if item.has_range:
            start, end = _range(item)
            yield item.label, i, "x_start", start
            yield item.label, i, "x_end", end
        for j, seg in enumerate(item.segments):
            yield item.label, i, f"segments[{j}].value", seg.value
        if item.value is not None and not item.segments:
            yield item.label, i, "value", item.value


def _color(item: HorizontalBarItem, index: int, seg_index: int | None = None) -> RGBA:
    if seg_index is not None and item.segments[seg_index].color is not None:
        return item.segments[seg_index].color  # type: ignore[return-value]
    if item.color is not None:
        return item.color
    return palette_color(index if seg_index is None else seg_index)


def row_height(plot_height: float, count: int, *, min_bar_height: float, spacing: float) -> float:
    """Row thickness: at least ``min_bar_height`` unless the rows would overrun the plot."""
    if count <= 0:
        return min_bar_height
    fit = (plot_height - (count - 1) * spacing) / count
    if fit <= 0:
        raise ConfigurationError(f"{count} rows with {spacing} px spacing do not fit a {plot_height} px plot area")
    height = max(min_bar_height, (plot_height - count * spacing) / count)
    if height > fit + 1e-6:
        report_degenerate(
            LOGGER,
            "%d rows of %s px do not fit a %s px plot area; shrinking rows to %s px",
            count,
            height,
            plot_height,
            fit,
        )
        return fit
    return height


def layout_horizontal_bar_chart(spec: HorizontalBarChartSpec, measurer: TextMeasurer) -> HorizontalBarChartGeometry:
    """Rows stack top to bottom; bars run along x from the baseline or across an explicit range."""
    n = len(spec.items)
    base = spec.x.baseline if spec.x.baseline is not None else 0.0
    extents = [_extent(item, base) for item in spec.items]
    ranged = any(item.has_range for item in spec.items)
    x_scale = resolve_scale(
        [v for pair in extents for v in pair],
        spec.x,
        auto="zero_anchored",
        default_baseline=0.0,
        item_ranges=extents if ranged else None,
        item_ranges_first=True,
    )
    validate_bounds("x", spec.x, x_scale, _samples(spec), chart="horizontal bar chart")

    has_x_axis = _has_x_axis(spec)
    x_area = x_axis_label_area(
        has_x_axis=has_x_axis,
        has_x_label=bool(spec.x.label),
        tick_font_size=spec.x.tick_font_size,
        axis_label_font_size=spec.axis_label_font_size,
    )
    y_area = spec.axis_label_font_size + 20.0 if spec.y.label else 0.0
    height = spec.height
    if height is None:
        height = responsive_horizontal_bar_height(
            n,
            spec.padding,
            title_font_size=spec.title_font_size if spec.title else None,
            min_bar_height=spec.min_bar_height if spec.min_bar_height is not None else SIZING_MIN_BAR_HEIGHT,
            bar_spacing=spec.bar_spacing,
            tick_font_size=spec.x.tick_font_size,
            axis_label_font_size=spec.axis_label_font_size,
            has_x_axis=has_x_axis,
            has_x_label=bool(spec.x.label),
            has_y_label=bool(spec.y.label),
        )

    derived = [LegendEntry(label=item.label, color=_color(item, i)) for i, item in enumerate(spec.items)]
    box = legend_box(
        spec.legend,
        derived,
        measurer,
        line_legend_metrics(spec.legend),
        font_size=spec.axis_label_font_size,
    )
    title_h = title_height(spec.title, spec.title_font_size, margin=20.0 + TITLE_MARGIN)
    layout = reserve_axis_chart(
        width=spec.width,
        height=height,
        padding=spec.padding,
        title_height=title_h,
        axis_label_height=max(x_area, y_area) + 2.0,
        legend=box,
        position=spec.legend.position,
        gap=LEGEND_GAP,
        trailing=LEGEND_TRAILING,
    )
    frame = PlotFrame.build(layout.plot, x_scale, ResolvedScale(min=0.0, max=float(max(n, 1)), step=1.0))
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

    min_h = spec.min_bar_height if spec.min_bar_height is not None else ROW_MIN_BAR_HEIGHT
    bar_h = row_height(layout.plot.height, n, min_bar_height=min_h, spacing=spec.bar_spacing)
    bars: list[BarRect] = []
    rows: list[RowLabel] = []
    for i, item in enumerate(spec.items):
        top = layout.plot.top + i * (bar_h + spec.bar_spacing)
        bottom = top + bar_h
        rows.append(RowLabel(text=item.label, y=(top + bottom) / 2.0))
        if item.has_range:
            start, end = _range(item)
            x0 = frame.x.map(start)
            x1 = frame.x.map(end)
            bars.append(BarRect(i, 0, item.label, end - start, min(x0, x1), top, max(x0, x1), bottom, _color(item, i)))
            continue
        if item.segments:
            pos = neg = base
            for j, v in enumerate(item.segment_values()):
                if v >= 0:
                    start, pos = pos, pos + v
                    end = pos
                else:
                    start, neg = neg, neg + v
                    end = neg
                x0 = frame.x.map(start)
                x1 = frame.x.map(end)
                seg_label = item.segments[j].label
                bars.append(BarRect(i, j, seg_label, v, min(x0, x1), top, max(x0, x1), bottom, _color(item, i, j)))
            continue
        value = float(item.value)  # type: ignore[arg-type]
        x0 = frame.x.map(base)
        x1 = frame.x.map(value)
        bars.append(BarRect(i, 0, item.label, value, min(x0, x1), top, max(x0, x1), bottom, _color(item, i)))

    return HorizontalBarChartGeometry(
        spec=spec,
        layout=layout,
        frame=frame,
        x_ticks=plan_ticks(frame.x, spec.x, "x"),
        rows=tuple(rows),
        bars=tuple(bars),
        legend=box,
        baseline_x=frame.x.map(base),
    )
