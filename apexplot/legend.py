from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
import math
from typing import Protocol

from apexplot.errors import ConfigurationError
from apexplot.series import LEGEND_POSITIONS, CanvasPoint, LegendEntry, LegendPosition, PlotRect


LINE_HEIGHT_RATIO = 1.2


class TextMeasurer(Protocol):
    def measure(self, text: str, font_size: float) -> float:
        """Rendered width of ``text`` in pixels."""
        ...


@dataclass(frozen=True)
class MonospaceMeasurer:
    """Width estimate for a fixed-pitch face: every glyph is ``advance`` ems wide."""

    advance: float = 0.6

    def measure(self, text: str, font_size: float) -> float:
        return len(text) * font_size * self.advance


def wrap_text(text: str, max_width: float, measurer: TextMeasurer, font_size: float) -> list[str]:
    """Greedy word wrap; a word wider than ``max_width`` still gets its own line."""
    words = text.split(" ")
    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measurer.measure(candidate, font_size) < max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


@dataclass(frozen=True)
class LegendSpec:
    show: bool = False
    position: LegendPosition = "right"
    font_size: float = 16.0
    spacing: float | None = None
    padding: float | None = None
    max_width: float | None = None
    wrap_text: bool = True
    entries: tuple[LegendEntry, ...] = ()

    def __post_init__(self) -> None:
        if self.position not in LEGEND_POSITIONS:
            raise ConfigurationError(f"unsupported legend position: {self.position!r}")
        if self.font_size <= 0:
            raise ConfigurationError("legend font size must be > 0")
        if self.max_width is not None and self.max_width <= 0:
            raise ConfigurationError("legend max width must be > 0")


@dataclass(frozen=True)
class LegendMetrics:
    box_size: float
    text_spacing: float
    padding: float
    spacing: float
    min_width: float = 0.0


def line_legend_metrics(spec: LegendSpec) -> LegendMetrics:
    return LegendMetrics(
        box_size=15.0,
        text_spacing=10.0,
        padding=8.0 if spec.padding is None else spec.padding,
        spacing=(spec.spacing or 20.0),
        min_width=200.0,
    )


def pie_legend_metrics(spec: LegendSpec) -> LegendMetrics:
    return LegendMetrics(
        box_size=max(18.0, spec.font_size * LINE_HEIGHT_RATIO),
        text_spacing=12.0,
        padding=10.0 if spec.padding is None else spec.padding,
        spacing=18.0 if spec.spacing is None else spec.spacing,
    )


@dataclass(frozen=True)
class LegendItem:
    entry: LegendEntry
    offset: float
    height: float
    lines: tuple[str, ...]


@dataclass(frozen=True)
class LegendBox:
    x: float
    y: float
    width: float
    height: float
    items: tuple[LegendItem, ...]
    metrics: LegendMetrics
    font_size: float

    def at(self, x: float, y: float) -> "LegendBox":
        return replace(self, x=float(x), y=float(y))

    @property
    def rect(self) -> PlotRect:
        return PlotRect(left=self.x, top=self.y, right=self.x + self.width, bottom=self.y + self.height)

    def swatch(self, index: int) -> PlotRect:
        item = self.items[index]
        cy = self.y + item.offset + item.height / 2.0
        box = self.metrics.box_size
        left = self.x + self.metrics.padding
        return PlotRect(left=left, top=cy - box / 2.0, right=left + box, bottom=cy + box / 2.0)

    def text_origin(self, index: int) -> CanvasPoint:
        """Left edge and vertical centre of the first text line for entry ``index``."""
        item = self.items[index]
        cy = self.y + item.offset + item.height / 2.0
        line_height = self.font_size * LINE_HEIGHT_RATIO
        x = self.x + self.metrics.padding + self.metrics.box_size + self.metrics.text_spacing
        return CanvasPoint(x=x, y=cy - (len(item.lines) - 1) * line_height / 2.0)


def layout_legend(
    entries: Sequence[LegendEntry],
    measurer: TextMeasurer,
    *,
    metrics: LegendMetrics,
    font_size: float,
    max_width: float | None = None,
    wrap: bool = True,
) -> LegendBox:
    """Size a legend box; the box is placed at the origin until `position_legend` moves it.

    With ``max_width`` set the width is exactly ``max_width`` and labels are
    wrapped to the room left beside the swatch. Entry offsets stack top to
    bottom, so wrapped entries never overlap.
    """
    if not entries:
        return LegendBox(x=0.0, y=0.0, width=0.0, height=0.0, items=(), metrics=metrics, font_size=font_size)
    text_room = None
    if max_width is not None and wrap:
        text_room = max_width - metrics.padding * 2 - metrics.box_size - metrics.text_spacing

    widest = 0.0
    items: list[LegendItem] = []
    offset = metrics.padding
    for i, entry in enumerate(entries):
        if text_room is not None:
            lines = wrap_text(entry.label, text_room, measurer, font_size)
            text_w = max(measurer.measure(line, font_size) for line in lines)
            text_h = len(lines) * font_size * LINE_HEIGHT_RATIO
        else:
            lines = [entry.label]
            text_w = measurer.measure(entry.label, font_size)
            text_h = font_size
        widest = max(widest, metrics.box_size + metrics.text_spacing + text_w)
        height = max(metrics.box_size, text_h)
        items.append(LegendItem(entry=entry, offset=offset, height=height, lines=tuple(lines)))
        offset += height
        if i < len(entries) - 1:
            offset += metrics.spacing

    width = float(max_width) if max_width is not None else max(metrics.min_width, widest + metrics.padding * 2)
    return LegendBox(
        x=0.0,
        y=0.0,
        width=width,
        height=offset + metrics.padding,
        items=tuple(items),
        metrics=metrics,
        font_size=font_size,
    )


def position_legend(
    box: LegendBox,
    position: LegendPosition,
    *,
    canvas_width: float,
    canvas_height: float,
    chart: PlotRect,
    padding_top: float,
    padding_bottom: float,
    padding_left: float,
    title_height: float = 0.0,
    gap: float = 10.0,
) -> LegendBox:
    """Place a line-chart legend beside the reserved chart rectangle."""
    if position == "top":
        return box.at((canvas_width - box.width) / 2.0, padding_top + title_height + gap)
    if position == "bottom":
        return box.at((canvas_width - box.width) / 2.0, canvas_height - padding_bottom - box.height - gap)
    if position == "left":
        return box.at(padding_left + gap, chart.top + (chart.height - box.height) / 2.0)
    if position == "right":
        return box.at(chart.right + gap, chart.top + (chart.height - box.height) / 2.0)
    raise ConfigurationError(f"unsupported legend position: {position!r}")


def position_pie_legend(
    box: LegendBox,
    position: LegendPosition,
    *,
    canvas_width: float,
    canvas_height: float,
    chart: PlotRect,
    padding_top: float,
    padding_bottom: float,
    title_height: float = 0.0,
    gap: float = 20.0,
) -> LegendBox:
    """Pie legends centre on the canvas axis perpendicular to their side."""
    if position == "top":
        return box.at((canvas_width - box.width) / 2.0, padding_top + title_height)
    if position == "bottom":
        return box.at((canvas_width - box.width) / 2.0, canvas_height - padding_bottom - box.height)
    if position == "left":
        return box.at(chart.left - box.width - gap, (canvas_height - box.height) / 2.0)
    if position == "right":
        return box.at(chart.right + gap, (canvas_height - box.height) / 2.0)
    raise ConfigurationError(f"unsupported legend position: {position!r}")


@dataclass(frozen=True)
class CalloutSpec:
    show: bool = False
    font_size: float = 12.0
    padding: float = 5.0
    max_width: float = 150.0
    wrap_text: bool = True
    line_width: int = 1
    label_gap: float = 20.0
    min_spacing: float = 5.0

    def __post_init__(self) -> None:
        if self.max_width <= self.padding * 2:
            raise ConfigurationError("callout max width must exceed twice its padding")


@dataclass(frozen=True)
class CalloutLabel:
    """One pie-slice label box with its leader line.

    ``box_y`` is the vertical centre of the box; ``box_x`` its left edge.
    """

    entry: LegendEntry
    angle: float
    anchor: CanvasPoint
    box_x: float
    box_y: float
    box_width: float
    box_height: float
    left_side: bool
    lines: tuple[str, ...]
    leader_start: CanvasPoint
    leader_end: CanvasPoint

    @property
    def top(self) -> float:
        return self.box_y - self.box_height / 2.0

    @property
    def bottom(self) -> float:
        return self.box_y + self.box_height / 2.0

    @property
    def rect(self) -> PlotRect:
        return PlotRect(left=self.box_x, top=self.top, right=self.box_x + self.box_width, bottom=self.bottom)

    def overlaps(self, other: "CalloutLabel") -> bool:
        x_hit = not (self.box_x + self.box_width < other.box_x or self.box_x > other.box_x + other.box_width)
        y_hit = not (self.bottom < other.top or self.top > other.bottom)
        return x_hit and y_hit


def _callout_text(entry: LegendEntry, measurer: TextMeasurer, spec: CalloutSpec) -> tuple[list[str], float, float]:
    if spec.wrap_text:
        lines = wrap_text(entry.label, spec.max_width - spec.padding * 2, measurer, spec.font_size)
        width = max(measurer.measure(line, spec.font_size) for line in lines)
        return lines, width, len(lines) * spec.font_size * LINE_HEIGHT_RATIO
    return [entry.label], measurer.measure(entry.label, spec.font_size), spec.font_size


def layout_callouts(
    entries: Sequence[LegendEntry],
    angles: Sequence[tuple[float, float]],
    center: CanvasPoint,
    radius: float,
    measurer: TextMeasurer,
    spec: CalloutSpec | None = None,
) -> list[CalloutLabel]:
    """Place leader-line labels around a pie.

    Each box sits ``spec.label_gap`` beyond the rim at its slice's mid-angle,
    hanging left of the anchor on the left half. A single pass in entry order
    shoves a box above or below every earlier box it collides with.
    """
    spec = spec or CalloutSpec()
    placed: list[CalloutLabel] = []
    for entry, (start, end) in zip(entries, angles):
        angle = (start + end) / 2.0
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        label_radius = radius + spec.label_gap
        anchor = CanvasPoint(center.x + cos_a * label_radius, center.y + sin_a * label_radius)
        left = cos_a < 0
        lines, text_w, text_h = _callout_text(entry, measurer, spec)
        box_w = min(spec.max_width, text_w + spec.padding * 2)
        box_h = text_h + spec.padding * 2
        box_x = anchor.x - box_w if left else anchor.x
        box_y = anchor.y
        for prev in placed:
            x_hit = not (box_x + box_w < prev.box_x or box_x > prev.box_x + prev.box_width)
            y_hit = not (box_y + box_h / 2.0 < prev.top or box_y - box_h / 2.0 > prev.bottom)
            if x_hit and y_hit:
                if box_y < prev.box_y:
                    box_y = prev.box_y - prev.box_height / 2.0 - box_h / 2.0 - spec.min_spacing
                else:
                    box_y = prev.box_y + prev.box_height / 2.0 + box_h / 2.0 + spec.min_spacing
        placed.append(
            CalloutLabel(
                entry=entry,
                angle=angle,
                anchor=anchor,
                box_x=box_x,
                box_y=box_y,
                box_width=box_w,
                box_height=box_h,
                left_side=left,
                lines=tuple(lines),
                leader_start=CanvasPoint(center.x + cos_a * radius, center.y + sin_a * radius),
                leader_end=CanvasPoint(box_x + box_w if left else box_x, box_y),
            )
        )
    return placed


@dataclass(frozen=True)
class EdgeReserve:
    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0


def connected_legend_reserve(entries: Sequence[LegendEntry], measurer: TextMeasurer, spec: CalloutSpec) -> EdgeReserve:
    """Canvas growth needed so callout boxes fit around the pie."""
    if not entries:
        return EdgeReserve()
    widest = max(measurer.measure(e.label, spec.font_size) for e in entries)
    box_w = min(spec.max_width, widest + spec.padding * 2)
    box_h = spec.font_size + spec.padding * 2
    return EdgeReserve(left=box_w + 30.0, right=box_w + 30.0, top=box_h / 2.0 + 20.0, bottom=box_h / 2.0 + 20.0)
