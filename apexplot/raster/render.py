from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from pathlib import Path

import numpy as np

from apexplot.charts.bar import BarChartGeometry, BarRect
from apexplot.charts.comparison import ChartGeometry, ComparisonChartGeometry
from apexplot.charts.horizontal_bar import HorizontalBarChartGeometry
from apexplot.charts.line import LineChartGeometry
from apexplot.charts.pie import PieChartGeometry
from apexplot.errors import ConfigurationError
from apexplot.legend import LINE_HEIGHT_RATIO, LegendBox
from apexplot.raster.canvas import (
    blit_scaled,
    draw_hline,
    draw_vline,
    fill_circle,
    fill_polygon,
    fill_rect,
    fill_wedge,
    new_canvas,
    save_png,
    stroke_rect,
)
from apexplot.raster.draw_lines import DASH_PATTERNS, draw_polyline
from apexplot.raster.draw_markers import draw_markers
from apexplot.raster.draw_text import DEFAULT_FONT_FAMILY, draw_text
from apexplot.series import RGBA, CanvasPoint, PlotRect
from apexplot.ticks import TickSet


LOGGER = logging.getLogger(__name__)

TICK_LENGTH = 5


@dataclass(frozen=True)
class RenderStyle:
    background: RGBA = (255, 255, 255, 255)
    axis_color: RGBA = (0, 0, 0, 255)
    grid_color: RGBA = (220, 220, 220, 255)
    text_color: RGBA = (0, 0, 0, 255)
    legend_background: RGBA = (255, 255, 255, 230)
    legend_border: RGBA = (160, 160, 160, 255)
    font_family: str = DEFAULT_FONT_FAMILY
    show_grid: bool = True


def with_alpha(color: RGBA, opacity: float) -> RGBA:
    r, g, b, a = color
    return (r, g, b, int(max(0.0, min(1.0, opacity)) * a))


def _xy(points: tuple[CanvasPoint, ...] | list[CanvasPoint]) -> tuple[np.ndarray, np.ndarray]:
    return (
        np.asarray([p.x for p in points], dtype=np.float64),
        np.asarray([p.y for p in points], dtype=np.float64),
    )


def _text(canvas: np.ndarray, style: RenderStyle, x: float, y: float, text: str, size: float, **kw) -> None:
    draw_text(canvas, x, y, text, kw.pop("color", style.text_color), font_family=style.font_family, font_size_px=size, **kw)


def _draw_title(canvas: np.ndarray, style: RenderStyle, title: str | None, size: float, top: float) -> None:
    if title:
        _text(canvas, style, canvas.shape[1] / 2.0, top, title, size, align="center", embolden_px=2)


def _draw_axes(canvas: np.ndarray, style: RenderStyle, rect: PlotRect, x_axis_y: float) -> None:
    draw_vline(canvas, int(round(rect.left)), int(round(rect.top)), int(round(rect.bottom)), style.axis_color)
    draw_hline(canvas, int(round(rect.left)), int(round(rect.right)), int(round(x_axis_y)), style.axis_color)


def _draw_x_ticks(canvas: np.ndarray, style: RenderStyle, ticks: TickSet, rect: PlotRect, font: float) -> None:
    row = int(round(rect.bottom))
    for tick in ticks.ticks:
        x = int(round(tick.position))
        if style.show_grid:
            draw_vline(canvas, x, int(round(rect.top)), row, style.grid_color)
        draw_vline(canvas, x, row, row + TICK_LENGTH, style.axis_color)
        if tick.label_visible:
            _text(canvas, style, x, row + TICK_LENGTH + 3, tick.label, font, align="center")


def _draw_y_ticks(canvas: np.ndarray, style: RenderStyle, ticks: TickSet, rect: PlotRect, font: float) -> None:
    col = int(round(rect.left))
    for tick in ticks.ticks:
        y = int(round(tick.position))
        if style.show_grid:
            draw_hline(canvas, col, int(round(rect.right)), y, style.grid_color)
        draw_hline(canvas, col - TICK_LENGTH, col, y, style.axis_color)
        if tick.label_visible:
            _text(canvas, style, col - TICK_LENGTH - 4, y, tick.label, font, align="right", valign="middle")


def _draw_axis_labels(
    canvas: np.ndarray,
    style: RenderStyle,
    rect: PlotRect,
    x_label: str | None,
    y_label: str | None,
    font: float,
) -> None:
    if x_label:
        _text(canvas, style, (rect.left + rect.right) / 2.0, rect.bottom + font + 20, x_label, font, align="center")
    if y_label:
        _text(
            canvas,
            style,
            max(0.0, rect.left - 60),
            (rect.top + rect.bottom) / 2.0,
            y_label,
            font,
            align="right",
            valign="middle",
            vertical=True,
        )


def _draw_legend(canvas: np.ndarray, style: RenderStyle, box: LegendBox | None) -> None:
    if box is None:
        return
    r = box.rect
    fill_rect(canvas, r.left, r.top, r.right, r.bottom, style.legend_background)
    stroke_rect(canvas, r.left, r.top, r.right, r.bottom, style.legend_border)
    line_h = box.font_size * LINE_HEIGHT_RATIO
    for i, item in enumerate(box.items):
        sw = box.swatch(i)
        fill_rect(canvas, sw.left, sw.top, sw.right, sw.bottom, item.entry.color)
        origin = box.text_origin(i)
        for j, line in enumerate(item.lines):
            _text(canvas, style, origin.x, origin.y + j * line_h, line, box.font_size, valign="middle")


def _fill_bar(canvas: np.ndarray, bar: BarRect) -> None:
    fill_rect(canvas, bar.left, bar.top, bar.right, bar.bottom, bar.color)


def render_line_chart(g: LineChartGeometry, style: RenderStyle) -> np.ndarray:
    spec = g.spec
    canvas = new_canvas(int(math.ceil(g.layout.canvas_width)), int(math.ceil(g.layout.canvas_height)), style.background)
    rect = g.layout.plot
    _draw_title(canvas, style, spec.title, spec.title_font_size, spec.padding.top)
    _draw_x_ticks(canvas, style, g.x_ticks, rect, spec.x.tick_font_size)
    _draw_y_ticks(canvas, style, g.y_ticks, rect, spec.y.tick_font_size)

    for sg in g.series:
        s = sg.series
        if sg.area is not None:
            xs, ys = _xy(sg.area.polygon)
            fill_polygon(canvas, xs.tolist(), ys.tolist(), with_alpha(s.area.color or s.color, s.area.opacity))
            if s.area.show_area_size:
                anchor = sg.area.label_anchor
                _text(canvas, style, anchor.x, anchor.y, sg.area.label, 12, align="center", valign="middle")
        if sg.path is not None:
            xs, ys = _xy(sg.path.points)
            draw_polyline(canvas, xs, ys, s.color, s.line_width, dash=DASH_PATTERNS.get(s.line_kind, ()))
        if sg.regression is not None and len(sg.regression.points) > 1:
            xs, ys = _xy(sg.regression.points)
            reg = s.regression
            draw_polyline(canvas, xs, ys, reg.color or s.color, reg.line_width, dash=DASH_PATTERNS.get(reg.line_kind, ()))
        for bar in sg.error_bars:
            x = int(round(bar.x))
            half = int(bar.cap_width // 2)
            draw_vline(canvas, x, int(round(bar.top)), int(round(bar.bottom)), s.color)
            draw_hline(canvas, x - half, x + half, int(round(bar.top)), s.color)
            draw_hline(canvas, x - half, x + half, int(round(bar.bottom)), s.color)
        if sg.markers:
            xs, ys = _xy(sg.markers)
            draw_markers(canvas, xs, ys, s.color, s.effective_marker_size, kind=s.marker)

    _draw_axes(canvas, style, rect, g.baseline_y)
    _draw_axis_labels(canvas, style, rect, spec.x.label, spec.y.label, 14)
    _draw_legend(canvas, style, g.legend)
    return canvas


def render_bar_chart(g: BarChartGeometry, style: RenderStyle) -> np.ndarray:
    spec = g.spec
    canvas = new_canvas(int(math.ceil(g.layout.canvas_width)), int(math.ceil(g.layout.canvas_height)), style.background)
    rect = g.layout.plot
    _draw_title(canvas, style, spec.title, spec.title_font_size, spec.padding.top)
    _draw_x_ticks(canvas, style, g.x_ticks, rect, spec.x.tick_font_size)
    _draw_y_ticks(canvas, style, g.y_ticks, rect, spec.y.tick_font_size)
    for bar in g.bars:
        _fill_bar(canvas, bar)
    for pop in g.lollipops:
        xs, ys = _xy([pop.stem_start, pop.stem_end])
        draw_polyline(canvas, xs, ys, pop.color, 2)
        fill_circle(canvas, pop.stem_end.x, pop.stem_end.y, pop.dot_size / 2.0, pop.color)
    _draw_axes(canvas, style, rect, g.baseline_y)
    _draw_axis_labels(canvas, style, rect, spec.x.label, spec.y.label, spec.axis_label_font_size)
    _draw_legend(canvas, style, g.legend)
    return canvas


def render_horizontal_bar_chart(g: HorizontalBarChartGeometry, style: RenderStyle) -> np.ndarray:
    spec = g.spec
    canvas = new_canvas(int(math.ceil(g.layout.canvas_width)), int(math.ceil(g.layout.canvas_height)), style.background)
    rect = g.layout.plot
    _draw_title(canvas, style, spec.title, spec.title_font_size, spec.padding.top)
    _draw_x_ticks(canvas, style, g.x_ticks, rect, spec.x.tick_font_size)
    for row in g.rows:
        _text(canvas, style, rect.left - 8, row.y, row.text, spec.y.tick_font_size, align="right", valign="middle")
    for bar in g.bars:
        _fill_bar(canvas, bar)
    draw_vline(canvas, int(round(g.baseline_x)), int(round(rect.top)), int(round(rect.bottom)), style.axis_color)
    draw_hline(canvas, int(round(rect.left)), int(round(rect.right)), int(round(rect.bottom)), style.axis_color)
    _draw_axis_labels(canvas, style, rect, spec.x.label, spec.y.label, spec.axis_label_font_size)
    _draw_legend(canvas, style, g.legend)
    return canvas


def render_pie_chart(g: PieChartGeometry, style: RenderStyle) -> np.ndarray:
    spec = g.spec
    canvas = new_canvas(int(math.ceil(g.layout.canvas_width)), int(math.ceil(g.layout.canvas_height)), style.background)
    _draw_title(canvas, style, spec.title, spec.title_font_size, spec.padding.top)
    center = g.layout.center
    for sl in g.slices:
        if sl.sweep <= 0:
            continue
        fill_wedge(
            canvas,
            center.x,
            center.y,
            sl.outer_radius,
            sl.start_angle,
            sl.end_angle,
            sl.color,
            inner_radius=sl.inner_radius,
        )
    for sl in g.slices:
        if sl.value_text:
            color = style.text_color if sl.outside else (255, 255, 255, 255)
            anchor = sl.label_anchor
            _text(
                canvas, style, anchor.x, anchor.y, sl.value_text, sl.label_font_size,
                color=color, align="center", valign="middle",
            )
    for callout in g.callouts:
        xs, ys = _xy([callout.leader_start, callout.anchor, callout.leader_end])
        draw_polyline(canvas, xs, ys, callout.entry.color, spec.callouts.line_width)
        r = callout.rect
        fill_rect(canvas, r.left, r.top, r.right, r.bottom, style.legend_background)
        stroke_rect(canvas, r.left, r.top, r.right, r.bottom, callout.entry.color)
        line_h = spec.callouts.font_size * LINE_HEIGHT_RATIO
        first = r.top + spec.callouts.padding + line_h / 2.0
        for j, line in enumerate(callout.lines):
            y = first + j * line_h
            _text(canvas, style, r.left + spec.callouts.padding, y, line, spec.callouts.font_size, valign="middle")
    _draw_legend(canvas, style, g.legend)
    return canvas


def render_comparison_chart(g: ComparisonChartGeometry, style: RenderStyle) -> np.ndarray:
    spec = g.spec
    canvas = new_canvas(int(math.ceil(g.canvas_width)), int(math.ceil(g.canvas_height)), style.background)
    _draw_title(canvas, style, spec.title, spec.title_font_size, spec.padding.top)
    for panel in g.panels:
        image = render_chart(panel.geometry, style)
        r = panel.rect
        blit_scaled(canvas, image, int(round(r.left)), int(round(r.top)), int(math.floor(r.width)), int(math.floor(r.height)))
    return canvas


def render_chart(geometry: ChartGeometry | ComparisonChartGeometry, style: RenderStyle | None = None) -> np.ndarray:
    """Rasterise laid-out chart geometry to an ``(height, width, 4)`` uint8 RGBA array."""
    style = style or RenderStyle()
    if isinstance(geometry, LineChartGeometry):
        return render_line_chart(geometry, style)
    if isinstance(geometry, BarChartGeometry):
        return render_bar_chart(geometry, style)
    if isinstance(geometry, HorizontalBarChartGeometry):
        return render_horizontal_bar_chart(geometry, style)
    if isinstance(geometry, PieChartGeometry):
        return render_pie_chart(geometry, style)
    if isinstance(geometry, ComparisonChartGeometry):
        return render_comparison_chart(geometry, style)
    raise ConfigurationError(f"cannot render {type(geometry).__name__}")


def render_to_png(geometry: ChartGeometry | ComparisonChartGeometry, path: str | Path, style: RenderStyle | None = None) -> Path:
    rgba = render_chart(geometry, style)
    out = save_png(rgba, path)
    LOGGER.info("wrote %dx%d chart to %s", rgba.shape[1], rgba.shape[0], out)
    return out
