from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import math
from typing import Literal

from apexplot.charts.base import legend_box, title_height
from apexplot.errors import ConfigurationError
from apexplot.legend import (
    CalloutLabel,
    CalloutSpec,
    EdgeReserve,
    LegendBox,
    LegendSpec,
    TextMeasurer,
    connected_legend_reserve,
    layout_callouts,
    pie_legend_metrics,
    position_pie_legend,
)
from apexplot.scales import format_tick
from apexplot.series import RGBA, CanvasPoint, LegendEntry, PieSlice, palette_color
from apexplot.sizing import PIE_PADDING, Padding, PieLayout, reserve_pie_chart


PieKind = Literal["pie", "donut"]

START_ANGLE = -math.pi / 2.0
DONUT_INNER_RATIO = 0.6
SMALL_SLICE_PERCENT = 5.0
SMALL_SLICE_ANGLE = 0.15
OUTSIDE_LABEL_OFFSET = 15.0
PIE_LABEL_RATIO = 0.7
LEGEND_GAP = 20.0


@dataclass(frozen=True)
class PieChartSpec:
    slices: tuple[PieSlice, ...]
    kind: PieKind = "pie"
    width: float = 800.0
    height: float = 600.0
    padding: Padding = PIE_PADDING
    title: str | None = None
    title_font_size: float = 24.0
    inner_radius_ratio: float = DONUT_INNER_RATIO
    show_values: bool = True
    legend: LegendSpec = field(default_factory=LegendSpec)
    callouts: CalloutSpec = field(default_factory=CalloutSpec)

    def __post_init__(self) -> None:
        if self.kind not in {"pie", "donut"}:
            raise ConfigurationError(f"unsupported pie chart kind: {self.kind!r}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("width and height must be > 0")
        if not 0.0 <= self.inner_radius_ratio < 1.0:
            raise ConfigurationError("donut inner radius ratio must be in [0, 1)")
        if not isinstance(self.slices, tuple):
            object.__setattr__(self, "slices", tuple(self.slices))
        for s in self.slices:
            if s.value < 0 or not math.isfinite(s.value):
                raise ConfigurationError(f"slice {s.label!r} has an invalid value: {s.value!r}")


@dataclass(frozen=True)
class SliceGeometry:
    slice: PieSlice
    index: int
    start_angle: float
    end_angle: float
    percentage: float
    color: RGBA
    outer_radius: float
    inner_radius: float
    value_text: str | None
    label_anchor: CanvasPoint
    label_font_size: float
    outside: bool

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2.0

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle


@dataclass(frozen=True)
class PieChartGeometry:
    spec: PieChartSpec
    layout: PieLayout
    slices: tuple[SliceGeometry, ...]
    legend: LegendBox | None
    callouts: tuple[CalloutLabel, ...]


def slice_angles(values: Sequence[float], start: float = START_ANGLE) -> list[tuple[float, float]]:
    """Clockwise ``(start, end)`` angles in radians, the first slice starting at 12 o'clock."""
    total = float(sum(values))
    if total <= 0:
        raise ConfigurationError(f"pie chart needs a positive total, got {total}")
    out: list[tuple[float, float]] = []
    angle = start
    for v in values:
        sweep = v / total * 2.0 * math.pi
        out.append((angle, angle + sweep))
        angle += sweep
    return out


def value_text(s: PieSlice, percentage: float) -> str:
    if s.value_label is not None:
        return s.value_label
    return f"{format_tick(s.value)} {percentage:.1f}%"


def label_placement(
    percentage: float,
    sweep: float,
    radius: float,
    inner_radius: float,
    donut: bool,
) -> tuple[float, float, bool]:
    """``(label radius, font size, outside)`` for a slice's value text.

    Slices under 5% or narrower than 0.15 rad get their text just outside
    the rim in a smaller font.
    """
    if percentage < SMALL_SLICE_PERCENT or sweep < SMALL_SLICE_ANGLE:
        return radius + OUTSIDE_LABEL_OFFSET, 12.0, True
    if donut:
        return (radius + inner_radius) / 2.0, 14.0, False
    return radius * PIE_LABEL_RATIO, 14.0, False


def _color(s: PieSlice, index: int) -> RGBA:
    return s.color or palette_color(index)


def layout_pie_chart(spec: PieChartSpec, measurer: TextMeasurer) -> PieChartGeometry:
    values = [s.value for s in spec.slices]
    angles = slice_angles(values)
    total = float(sum(values))
    entries = spec.legend.entries or tuple(LegendEntry(label=s.label, color=_color(s, i)) for i, s in enumerate(spec.slices))
    box = legend_box(spec.legend, entries, measurer, pie_legend_metrics(spec.legend))
    reserve = connected_legend_reserve(entries, measurer, spec.callouts) if spec.callouts.show else EdgeReserve()
    title_h = title_height(spec.title, spec.title_font_size)
    layout = reserve_pie_chart(
        width=spec.width,
        height=spec.height,
        padding=spec.padding,
        title_height=title_h,
        legend=box,
        position=spec.legend.position,
        gap=LEGEND_GAP,
        callouts=reserve,
    )
    if box is not None:
        box = position_pie_legend(
            box,
            spec.legend.position,
            canvas_width=layout.canvas_width,
            canvas_height=layout.canvas_height,
            chart=layout.chart,
            padding_top=spec.padding.top,
            padding_bottom=spec.padding.bottom,
            title_height=title_h,
            gap=LEGEND_GAP,
        )

    donut = spec.kind == "donut"
    radius = layout.radius
    inner = radius * spec.inner_radius_ratio if donut else 0.0
    cx, cy = layout.center.x, layout.center.y
    geoms: list[SliceGeometry] = []
    for i, (s, (start, end)) in enumerate(zip(spec.slices, angles, strict=True)):
        pct = s.value / total * 100.0
        label_r, font, outside = label_placement(pct, end - start, radius, inner, donut)
        mid = (start + end) / 2.0
        geoms.append(
            SliceGeometry(
                slice=s,
                index=i,
                start_angle=start,
                end_angle=end,
                percentage=pct,
                color=_color(s, i),
                outer_radius=radius,
                inner_radius=inner,
                value_text=value_text(s, pct) if (spec.show_values and s.show_value) else None,
                label_anchor=CanvasPoint(cx + math.cos(mid) * label_r, cy + math.sin(mid) * label_r),
                label_font_size=font,
                outside=outside,
            )
        )

    callouts: list[CalloutLabel] = []
    if spec.callouts.show:
        callouts = layout_callouts(entries, angles, layout.center, radius, measurer, spec.callouts)
    return PieChartGeometry(spec=spec, layout=layout, slices=tuple(geoms), legend=box, callouts=tuple(callouts))
