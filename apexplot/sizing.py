from __future__ import annotations

from dataclasses import dataclass
import math

from apexplot.errors import ConfigurationError
from apexplot.legend import EdgeReserve, LegendBox
from apexplot.series import CanvasPoint, LegendPosition, PlotRect


MIN_BAR_CHART_AREA_WIDTH = 400.0
PIXELS_PER_X_UNIT = 10.0
PIXELS_PER_CUSTOM_TICK = 20.0


@dataclass(frozen=True)
class Padding:
    top: float = 60.0
    right: float = 100.0
    bottom: float = 80.0
    left: float = 100.0

    def __post_init__(self) -> None:
        if min(self.top, self.right, self.bottom, self.left) < 0:
            raise ConfigurationError("padding must be >= 0")

    def scaled(self, ratio: float, floors: "Padding") -> "Padding":
        return Padding(
            top=max(floors.top, math.floor(self.top * ratio)),
            right=max(floors.right, math.floor(self.right * ratio)),
            bottom=max(floors.bottom, math.floor(self.bottom * ratio)),
            left=max(floors.left, math.floor(self.left * ratio)),
        )


LINE_PADDING = Padding(top=60.0, right=100.0, bottom=80.0, left=100.0)
BAR_PADDING = Padding(top=60.0, right=80.0, bottom=80.0, left=100.0)
PIE_PADDING = Padding(top=60.0, right=80.0, bottom=80.0, left=80.0)


@dataclass(frozen=True)
class ChartLayout:
    """Pixel allocation for one axis chart.

    ``chart`` is the area left after padding, title and legend; ``plot`` is
    the axis rectangle inside it (origin at its bottom-left corner).
    """

    canvas_width: float
    canvas_height: float
    chart: PlotRect
    plot: PlotRect
    title_height: float = 0.0


@dataclass(frozen=True)
class PieLayout:
    canvas_width: float
    canvas_height: float
    chart: PlotRect
    center: CanvasPoint
    radius: float
    title_height: float = 0.0


def responsive_bar_width(x_min: float, x_max: float, padding: Padding = BAR_PADDING, custom_count: int = 0) -> float:
    """Canvas width for a vertical bar chart: 10 px per x unit or 20 px per custom tick, at least 400 px."""
    if custom_count > 0:
        area = max(MIN_BAR_CHART_AREA_WIDTH, custom_count * PIXELS_PER_CUSTOM_TICK)
    else:
        area = max(MIN_BAR_CHART_AREA_WIDTH, (x_max - x_min) * PIXELS_PER_X_UNIT)
    return padding.left + area + padding.right


def x_axis_label_area(
    *,
    has_x_axis: bool,
    has_x_label: bool,
    tick_font_size: float = 12.0,
    axis_label_font_size: float = 14.0,
) -> float:
    if not (has_x_axis or has_x_label):
        return 0.0
    tick_labels = tick_font_size + 10.0
    label_text = axis_label_font_size + 2.0 if has_x_label else 0.0
    return tick_labels + (8.0 if has_x_label else 0.0) + label_text


def responsive_horizontal_bar_height(
    count: int,
    padding: Padding = BAR_PADDING,
    *,
    title_font_size: float | None = None,
    min_bar_height: float = 40.0,
    bar_spacing: float = 15.0,
    tick_font_size: float = 12.0,
    axis_label_font_size: float = 14.0,
    has_x_axis: bool = False,
    has_x_label: bool = False,
    has_y_label: bool = False,
) -> float:
    """``padTop + title + bars + axis labels + padBottom`` for ``count`` bars.

    ``has_x_axis`` is true when the x axis carries custom values or an
    explicit range.
    """
    bars = count * min_bar_height + max(0, count - 1) * bar_spacing
    title = title_font_size + 20.0 if title_font_size is not None else 0.0
    title_margin = 20.0 if title_font_size is not None else 0.0
    x_area = x_axis_label_area(
        has_x_axis=has_x_axis,
        has_x_label=has_x_label,
        tick_font_size=tick_font_size,
        axis_label_font_size=axis_label_font_size,
    )
    y_area = axis_label_font_size + 20.0 if has_y_label else 0.0
    return padding.top + title + title_margin + bars + max(x_area, y_area) + 2.0 + padding.bottom


def legend_growth(legend: LegendBox | None, position: LegendPosition, gap: float) -> tuple[float, float]:
    """Extra canvas ``(width, height)`` a legend needs beside the chart."""
    if legend is None or not legend.items:
        return 0.0, 0.0
    if position in {"left", "right"}:
        return legend.width + gap, 0.0
    return 0.0, legend.height + gap


def reserve_axis_chart(
    *,
    width: float,
    height: float,
    padding: Padding,
    title_height: float = 0.0,
    axis_label_height: float = 0.0,
    legend: LegendBox | None = None,
    position: LegendPosition = "right",
    gap: float = 10.0,
    trailing: float = 0.0,
    left_room: float = 0.0,
) -> ChartLayout:
    """Grow the canvas for the legend and carve out the axis rectangle.

    The legend gets ``gap`` pixels between itself and the chart. ``left_room``
    keeps y tick labels clear of a left legend; ``trailing`` is extra canvas
    margin past the legend.
    """
    chart_left = padding.left
    chart_right = width - padding.right
    chart_top = padding.top + title_height
    chart_bottom = height - padding.bottom
    extra_w = extra_h = 0.0
    if legend is not None and legend.items:
        if position == "left":
            extra_w = legend.width + gap + left_room + trailing
            chart_left = padding.left + legend.width + gap + left_room
        elif position == "right":
            extra_w = legend.width + gap + trailing
        elif position == "top":
            extra_h = legend.height + gap + trailing
            chart_top = padding.top + title_height + legend.height + gap + trailing
        else:
            extra_h = legend.height + gap + trailing
    if chart_right <= chart_left or chart_bottom - axis_label_height <= chart_top:
        raise ConfigurationError(
            f"chart dimensions {width}x{height} leave no room for the plot after padding, title and legend"
        )
    chart = PlotRect(left=chart_left, top=chart_top, right=chart_right, bottom=chart_bottom)
    plot = PlotRect(left=chart_left, top=chart_top, right=chart_right, bottom=chart_bottom - axis_label_height)
    return ChartLayout(
        canvas_width=width + extra_w,
        canvas_height=height + extra_h,
        chart=chart,
        plot=plot,
        title_height=title_height,
    )


def reserve_pie_chart(
    *,
    width: float,
    height: float,
    padding: Padding = PIE_PADDING,
    title_height: float = 0.0,
    legend: LegendBox | None = None,
    position: LegendPosition = "right",
    gap: float = 20.0,
    callouts: EdgeReserve | None = None,
) -> PieLayout:
    """Canvas growth and pie placement; the chart area never shrinks for legends."""
    reserve = callouts or EdgeReserve()
    legend_w, legend_h = legend_growth(legend, position, gap)
    shift_x = reserve.left + (legend_w if position == "left" else 0.0)
    shift_y = reserve.top + (legend_h if position == "top" else 0.0)
    chart = PlotRect(
        left=padding.left + shift_x,
        top=padding.top + title_height + shift_y,
        right=width - padding.right + shift_x,
        bottom=height - padding.bottom + shift_y,
    )
    if chart.width <= 0 or chart.height <= 0:
        raise ConfigurationError(f"pie chart dimensions {width}x{height} leave no room after padding and title")
    cx, cy = chart.center
    return PieLayout(
        canvas_width=width + legend_w + reserve.left + reserve.right,
        canvas_height=height + legend_h + reserve.top + reserve.bottom,
        chart=chart,
        center=CanvasPoint(cx, cy),
        radius=max(min(chart.width, chart.height) / 2.0, 0.0),
        title_height=title_height,
    )
