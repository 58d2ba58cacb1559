from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
import logging
from typing import Literal

from apexplot.charts.base import legend_box, title_height
from apexplot.errors import ConfigurationError
from apexplot.legend import LegendBox, LegendSpec, TextMeasurer, line_legend_metrics, position_legend
from apexplot.scales import RANGE_PAD_RATIO, AxisSpec, PlotFrame, ResolvedScale, resolve_scale, validate_bounds
from apexplot.series import RGBA, BarItem, CanvasPoint, LegendEntry, palette_color
from apexplot.sizing import BAR_PADDING, ChartLayout, Padding, reserve_axis_chart, responsive_bar_width
from apexplot.ticks import TickSet, plan_ticks


LOGGER = logging.getLogger(__name__)

BarKind = Literal["standard", "grouped", "stacked", "waterfall", "lollipop"]
BAR_KINDS = ("standard", "grouped", "stacked", "waterfall", "lollipop")

LEGEND_GAP = 20.0
LEGEND_TRAILING = 10.0
MIN_Y_LABEL_WIDTH = 60.0
Y_LABEL_MARGIN = 30.0
AXIS_LABEL_MARGIN = 20.0


@dataclass(frozen=True)
class BarChartSpec:
    items: tuple[BarItem, ...]
    kind: BarKind = "standard"
    width: float | None = None
    height: float = 600.0
    padding: Padding = BAR_PADDING
    title: str | None = None
    title_font_size: float = 24.0
    axis_label_font_size: float = 14.0
    x: AxisSpec = field(default_factory=AxisSpec)
    y: AxisSpec = field(default_factory=AxisSpec)
    legend: LegendSpec = field(default_factory=LegendSpec)
    initial_value: float = 0.0
    min_bar_width: float = 20.0
    group_spacing: float = 10.0
    lollipop_dot_size: float = 8.0

    def __post_init__(self) -> None:
        if self.kind not in BAR_KINDS:
            raise ConfigurationError(f"unsupported bar chart kind: {self.kind!r}")
        if self.width is not None and self.width <= 0:
            raise ConfigurationError("width must be > 0")
        if self.height <= 0:
            raise ConfigurationError("height must be > 0")
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class BarRect:
    item_index: int
    segment_index: int
    label: str | None
    value: float
    left: float
    top: float
    right: float
    bottom: float
    color: RGBA


@dataclass(frozen=True)
class Lollipop:
    item_index: int
    value: float
    stem_start: CanvasPoint
    stem_end: CanvasPoint
    dot_size: float
    color: RGBA


@dataclass(frozen=True)
class BarChartGeometry:
    spec: BarChartSpec
    layout: ChartLayout
    frame: PlotFrame
    x_ticks: TickSet
    y_ticks: TickSet
    bars: tuple[BarRect, ...]
    lollipops: tuple[Lollipop, ...]
    legend: LegendBox | None
    baseline_y: float


def waterfall_totals(items: tuple[BarItem, ...], initial_value: float = 0.0) -> list[float]:
    """Running totals after each waterfall item, starting from ``initial_value``."""
    running = float(initial_value)
    out: list[float] = []
    for item in items:
        running += item.total()
        out.append(running)
    return out


def value_range_samples(spec: BarChartSpec) -> list[float]:
    """Values the y axis has to cover for this chart kind."""
    if spec.kind == "stacked":
        out: list[float] = []
        for item in spec.items:
            vals = item.segment_values()
            out.append(sum(v for v in vals if v > 0))
            out.append(sum(v for v in vals if v < 0))
        return out
    if spec.kind == "waterfall":
        return [spec.initial_value, *waterfall_totals(spec.items, spec.initial_value)]
    return [v for item in spec.items for v in item.segment_values()]


def _validation_samples(spec: BarChartSpec, axis: str) -> Iterator[tuple[str | int, int, str, float]]:
    for i, item in enumerate(spec.items):
        if axis == "x":
            yield item.label, i, "x_start", item.x_start
            yield item.label, i, "x_end", item.x_end
            continue
        if item.segments:
            for j, seg in enumerate(item.segments):
                yield item.label, i, f"segments[{j}].value", seg.value
        elif item.value is not None:
            yield item.label, i, "value", item.value


def _expand_waterfall(scale: ResolvedScale, totals: list[float]) -> ResolvedScale:
    lo = min(totals)
    hi = max(totals)
    pad = (hi - lo) * RANGE_PAD_RATIO
    base = scale.effective_baseline
    new_lo = min(scale.min, lo - pad, base)
    new_hi = max(scale.max, hi + pad, base)
    if new_lo == scale.min and new_hi == scale.max:
        return scale
    LOGGER.debug("waterfall totals widen y range to [%s, %s]", new_lo, new_hi)
    return replace(scale, min=new_lo, max=new_hi)


def _y_label_width(scale: ResolvedScale, measurer: TextMeasurer, font_size: float) -> float:
    widest = max(measurer.measure(f"{scale.min:.1f}", font_size), measurer.measure(f"{scale.max:.1f}", font_size))
    return max(MIN_Y_LABEL_WIDTH, widest) + Y_LABEL_MARGIN


def _item_color(item: BarItem, index: int) -> RGBA:
    return item.color or palette_color(index)


def _segment_color(item: BarItem, seg_index: int) -> RGBA:
    if item.segments and item.segments[seg_index].color is not None:
        return item.segments[seg_index].color  # type: ignore[return-value]
    return item.color or palette_color(seg_index)


def _vertical(frame: PlotFrame, left: float, right: float, start: float, end: float) -> tuple[float, float, float, float]:
    y0 = frame.y.map(start)
    y1 = frame.y.map(end)
    return left, min(y0, y1), right, max(y0, y1)


def _group_span(frame: PlotFrame, item: BarItem, min_width: float) -> tuple[float, float]:
    x0 = frame.x.map(item.x_start)
    x1 = frame.x.map(item.x_end)
    width = max(x1 - x0, min_width)
    mid = (x0 + x1) / 2.0
    return mid - width / 2.0, mid + width / 2.0


def bar_rects(spec: BarChartSpec, frame: PlotFrame) -> tuple[list[BarRect], list[Lollipop]]:
    """Pixel rectangles for every bar, segment or waterfall step."""
    bars: list[BarRect] = []
    pops: list[Lollipop] = []
    base = frame.y.scale.effective_baseline
    running = float(spec.initial_value)
    for i, item in enumerate(spec.items):
        left, right = _group_span(frame, item, spec.min_bar_width)
        values = item.segment_values()
        labels = [seg.label for seg in item.segments] or [item.label]

        if spec.kind == "standard":
            total = item.total()
            l, t, r, b = _vertical(frame, left, right, base, total)
            bars.append(BarRect(i, 0, item.label, total, l, t, r, b, _item_color(item, i)))

        elif spec.kind == "grouped":
            n = len(values)
            seg_w = max(1.0, (right - left - spec.group_spacing * (n - 1)) / n)
            for j, v in enumerate(values):
                sl = left + j * (seg_w + spec.group_spacing)
                l, t, r, b = _vertical(frame, sl, sl + seg_w, base, v)
                bars.append(BarRect(i, j, labels[j], v, l, t, r, b, _segment_color(item, j)))

        elif spec.kind == "stacked":
            pos = neg = base
            for j, v in enumerate(values):
                if v >= 0:
                    start, pos = pos, pos + v
                    end = pos
                else:
                    start, neg = neg, neg + v
                    end = neg
                l, t, r, b = _vertical(frame, left, right, start, end)
                bars.append(BarRect(i, j, labels[j], v, l, t, r, b, _segment_color(item, j)))

        elif spec.kind == "waterfall":
            for j, v in enumerate(values):
                start = running
                running += v
                l, t, r, b = _vertical(frame, left, right, start, running)
                color = _segment_color(item, j) if (item.segments or item.color) else palette_color(0 if v >= 0 else 2)
                bars.append(BarRect(i, j, labels[j], v, l, t, r, b, color))

        else:
            total = item.total()
            cx = (left + right) / 2.0
            pops.append(
                Lollipop(
                    item_index=i,
                    value=total,
                    stem_start=CanvasPoint(cx, frame.y.map(base)),
                    stem_end=CanvasPoint(cx, frame.y.map(total)),
                    dot_size=spec.lollipop_dot_size,
                    color=_item_color(item, i),
                )
            )
    return bars, pops


def _legend_entries(spec: BarChartSpec) -> list[LegendEntry]:
    if spec.kind in {"grouped", "stacked"} and spec.items and spec.items[0].segments:
        first = spec.items[0]
        return [
            LegendEntry(label=seg.label or f"{first.label} {j + 1}", color=_segment_color(first, j))
            for j, seg in enumerate(first.segments)
        ]
    return [LegendEntry(label=item.label, color=_item_color(item, i)) for i, item in enumerate(spec.items)]


def layout_bar_chart(spec: BarChartSpec, measurer: TextMeasurer) -> BarChartGeometry:
    x_scale = resolve_scale(
        [],
        spec.x,
        default_baseline=None,
        item_ranges=[(item.x_start, item.x_end) for item in spec.items],
    )
    y_scale = resolve_scale(value_range_samples(spec), spec.y, auto="padded", default_baseline=0.0)
    if spec.kind == "waterfall" and spec.y.has_explicit_range and not spec.y.has_custom_values and spec.items:
        y_scale = _expand_waterfall(y_scale, [spec.initial_value, *waterfall_totals(spec.items, spec.initial_value)])
    validate_bounds("x", spec.x, x_scale, _validation_samples(spec, "x"), chart="bar chart")
    validate_bounds("y", spec.y, y_scale, _validation_samples(spec, "y"), chart="bar chart")

    width = spec.width
    if width is None:
        width = responsive_bar_width(x_scale.min, x_scale.max, spec.padding, custom_count=len(spec.x.values))
    box = legend_box(
        spec.legend,
        _legend_entries(spec),
        measurer,
        line_legend_metrics(spec.legend),
        font_size=spec.axis_label_font_size,
    )
    title_h = title_height(spec.title, spec.title_font_size)
    left_room = 0.0
    if box is not None and spec.legend.position == "left":
        left_room = _y_label_width(y_scale, measurer, spec.y.tick_font_size)
    layout = reserve_axis_chart(
        width=width,
        height=spec.height,
        padding=spec.padding,
        title_height=title_h,
        axis_label_height=spec.axis_label_font_size + AXIS_LABEL_MARGIN if spec.x.label else 0.0,
        legend=box,
        position=spec.legend.position,
        gap=LEGEND_GAP,
        trailing=LEGEND_TRAILING,
        left_room=left_room,
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
    bars, pops = bar_rects(spec, frame)
    return BarChartGeometry(
        spec=spec,
        layout=layout,
        frame=frame,
        x_ticks=plan_ticks(frame.x, spec.x, "x"),
        y_ticks=plan_ticks(frame.y, spec.y, "y"),
        bars=tuple(bars),
        lollipops=tuple(pops),
        legend=box,
        baseline_y=frame.baseline_y,
    )
