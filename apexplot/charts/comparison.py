from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
import math
from typing import Any, Literal, Union

from apexplot.charts.bar import BarChartGeometry, BarChartSpec, layout_bar_chart
from apexplot.charts.base import title_height
from apexplot.charts.horizontal_bar import (
    HorizontalBarChartGeometry,
    HorizontalBarChartSpec,
    layout_horizontal_bar_chart,
)
from apexplot.charts.line import LineChartGeometry, LineChartSpec, layout_line_chart
from apexplot.charts.pie import PieChartGeometry, PieChartSpec, layout_pie_chart
from apexplot.errors import ConfigurationError
from apexplot.legend import TextMeasurer
from apexplot.series import PlotRect
from apexplot.sizing import Padding


LOGGER = logging.getLogger(__name__)

ComparisonLayout = Literal["side_by_side", "top_bottom"]

COMPARISON_PADDING = Padding(top=100.0, right=60.0, bottom=60.0, left=60.0)
PANEL_PADDING_RATIO = 0.7
PANEL_PADDING_FLOORS = Padding(top=40.0, right=40.0, bottom=40.0, left=50.0)
DEFAULT_PANEL_PADDING = Padding(top=50.0, right=50.0, bottom=50.0, left=60.0)


class ChartKind(str, Enum):
    LINE = "line"
    BAR = "bar"
    HORIZONTAL_BAR = "horizontal_bar"
    PIE = "pie"
    DONUT = "donut"


ChartSpec = Union[LineChartSpec, BarChartSpec, HorizontalBarChartSpec, PieChartSpec]
ChartGeometry = Union[LineChartGeometry, BarChartGeometry, HorizontalBarChartGeometry, PieChartGeometry]

_SPEC_TYPES: dict[ChartKind, type] = {
    ChartKind.LINE: LineChartSpec,
    ChartKind.BAR: BarChartSpec,
    ChartKind.HORIZONTAL_BAR: HorizontalBarChartSpec,
    ChartKind.PIE: PieChartSpec,
    ChartKind.DONUT: PieChartSpec,
}


@dataclass(frozen=True)
class ChartPanel:
    """One chart variant: the kind tag plus the spec that kind expects."""

    kind: ChartKind
    spec: Any

    def __post_init__(self) -> None:
        kind = ChartKind(self.kind)
        object.__setattr__(self, "kind", kind)
        expected = _SPEC_TYPES[kind]
        if not isinstance(self.spec, expected):
            raise ConfigurationError(f"{kind.value} panel needs a {expected.__name__}, got {type(self.spec).__name__}")
        if kind is ChartKind.DONUT and self.spec.kind != "donut":
            object.__setattr__(self, "spec", replace(self.spec, kind="donut"))
        if kind is ChartKind.PIE and self.spec.kind != "pie":
            raise ConfigurationError("pie panel has a donut spec; use kind 'donut'")


def layout_chart(panel: ChartPanel, measurer: TextMeasurer) -> ChartGeometry:
    if panel.kind is ChartKind.LINE:
        return layout_line_chart(panel.spec, measurer)
    if panel.kind is ChartKind.BAR:
        return layout_bar_chart(panel.spec, measurer)
    if panel.kind is ChartKind.HORIZONTAL_BAR:
        return layout_horizontal_bar_chart(panel.spec, measurer)
    return layout_pie_chart(panel.spec, measurer)


@dataclass(frozen=True)
class ComparisonChartSpec:
    left: ChartPanel
    right: ChartPanel
    layout: ComparisonLayout = "side_by_side"
    width: float = 2400.0
    height: float = 1200.0
    padding: Padding = COMPARISON_PADDING
    spacing: float = 40.0
    title: str | None = None
    title_font_size: float = 28.0
    panel_padding: Padding | None = None

    def __post_init__(self) -> None:
        if self.layout not in {"side_by_side", "top_bottom"}:
            raise ConfigurationError(f"unsupported comparison layout: {self.layout!r}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("width and height must be > 0")
        if self.spacing < 0:
            raise ConfigurationError("spacing must be >= 0")


@dataclass(frozen=True)
class PanelGeometry:
    kind: ChartKind
    rect: PlotRect
    geometry: ChartGeometry


@dataclass(frozen=True)
class ComparisonChartGeometry:
    spec: ComparisonChartSpec
    canvas_width: float
    canvas_height: float
    title_height: float
    panels: tuple[PanelGeometry, PanelGeometry]


def panel_rects(spec: ComparisonChartSpec) -> tuple[PlotRect, PlotRect]:
    """Split the space under the title into two panels separated by ``spacing``."""
    title_h = title_height(spec.title, spec.title_font_size, margin=40.0)
    left = spec.padding.left
    top = spec.padding.top + title_h
    avail_w = spec.width - spec.padding.left - spec.padding.right
    avail_h = spec.height - spec.padding.top - spec.padding.bottom - title_h
    if spec.layout == "side_by_side":
        panel_w = (avail_w - spec.spacing) / 2.0
        panel_h = avail_h
        dx, dy = panel_w + spec.spacing, 0.0
    else:
        panel_w = avail_w
        panel_h = (avail_h - spec.spacing) / 2.0
        dx, dy = 0.0, panel_h + spec.spacing
    if panel_w <= 0 or panel_h <= 0:
        raise ConfigurationError(f"comparison chart {spec.width}x{spec.height} leaves no room for its panels")
    first = PlotRect(left=left, top=top, right=left + panel_w, bottom=top + panel_h)
    second = PlotRect(left=left + dx, top=top + dy, right=first.right + dx, bottom=first.bottom + dy)
    return first, second


def panel_padding(spec: ComparisonChartSpec) -> Padding:
    if spec.panel_padding is None:
        return DEFAULT_PANEL_PADDING
    return spec.panel_padding.scaled(PANEL_PADDING_RATIO, PANEL_PADDING_FLOORS)


def _fit_panel(panel: ChartPanel, rect: PlotRect, padding: Padding) -> ChartPanel:
    width = float(math.floor(rect.width))
    height = float(math.floor(rect.height))
    return ChartPanel(kind=panel.kind, spec=replace(panel.spec, padding=padding, width=width, height=height))


def layout_comparison_chart(spec: ComparisonChartSpec, measurer: TextMeasurer) -> ComparisonChartGeometry:
    """Lay out both sub-charts at their panel size with shrunk padding.

    A sub-chart whose legend grows its canvas is scaled back into the panel
    when rendered.
    """
    rects = panel_rects(spec)
    padding = panel_padding(spec)
    panels = []
    for panel, rect in zip((spec.left, spec.right), rects, strict=True):
        fitted = _fit_panel(panel, rect, padding)
        panels.append(PanelGeometry(kind=panel.kind, rect=rect, geometry=layout_chart(fitted, measurer)))
    LOGGER.debug("comparison chart: %s panels %s", spec.layout, [p.kind.value for p in panels])
    return ComparisonChartGeometry(
        spec=spec,
        canvas_width=spec.width,
        canvas_height=spec.height,
        title_height=title_height(spec.title, spec.title_font_size, margin=40.0),
        panels=(panels[0], panels[1]),
    )
