from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from apexplot.errors import ConfigurationError


RGBA = tuple[int, int, int, int]

SmoothingKind = Literal["none", "bezier", "spline"]
LineKind = Literal["solid", "dashed", "dotted", "dashdot", "longdash", "shortdash", "dashdotdot", "step", "stepline"]
RegressionKind = Literal["none", "linear", "polynomial", "exponential", "logarithmic"]
AreaKind = Literal["none", "below", "above", "between", "around"]
MarkerKind = Literal["circle", "square", "triangle", "diamond", "cross", "none"]
LegendPosition = Literal["top", "bottom", "left", "right"]

SMOOTHING_KINDS = ("none", "bezier", "spline")
LINE_KINDS = ("solid", "dashed", "dotted", "dashdot", "longdash", "shortdash", "dashdotdot", "step", "stepline")
REGRESSION_KINDS = ("none", "linear", "polynomial", "exponential", "logarithmic")
AREA_KINDS = ("none", "below", "above", "between", "around")
MARKER_KINDS = ("circle", "square", "triangle", "diamond", "cross", "none")
LEGEND_POSITIONS = ("top", "bottom", "left", "right")

DEFAULT_SERIES_COLOR: RGBA = (74, 144, 226, 255)


def default_palette() -> tuple[RGBA, ...]:
    return (
        (74, 144, 226, 255),
        (80, 200, 120, 255),
        (255, 107, 107, 255),
        (255, 165, 0, 255),
        (155, 89, 182, 255),
        (243, 156, 18, 255),
        (26, 188, 156, 255),
        (231, 76, 60, 255),
    )


def palette_color(index: int, palette: tuple[RGBA, ...] | None = None) -> RGBA:
    colors = default_palette() if palette is None else palette
    return colors[index % len(colors)]


def _check_kind(value: str, allowed: tuple[str, ...], what: str) -> None:
    if value not in allowed:
        raise ConfigurationError(f"unsupported {what}: {value!r} (expected one of {', '.join(allowed)})")


@dataclass(frozen=True)
class ErrorBar:
    positive: float = 0.0
    negative: float = 0.0


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    label: str | None = None
    error: ErrorBar | None = None


@dataclass(frozen=True)
class CanvasPoint:
    x: float
    y: float


@dataclass(frozen=True)
class PlotRect:
    """Pixel rectangle reserved for plotted geometry.

    ``bottom`` is the axis origin row and ``top`` the axis end row, so pixel y
    grows downward while domain y grows upward.
    """

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> tuple[float, float]:
        return ((self.left + self.right) / 2.0, (self.top + self.bottom) / 2.0)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def clamp(self, x: float, y: float) -> tuple[float, float]:
        return min(max(x, self.left), self.right), min(max(y, self.top), self.bottom)


@dataclass(frozen=True)
class RegressionSpec:
    kind: RegressionKind = "none"
    degree: int = 2
    color: RGBA | None = None
    line_width: int = 2
    line_kind: LineKind = "dashed"

    def __post_init__(self) -> None:
        _check_kind(self.kind, REGRESSION_KINDS, "regression kind")
        if self.degree < 1:
            raise ConfigurationError("polynomial degree must be >= 1")


@dataclass(frozen=True)
class AreaSpec:
    kind: AreaKind = "none"
    color: RGBA | None = None
    opacity: float = 0.3
    to_value: float | None = None
    second: "LineSeries | None" = None
    upper: tuple[float, ...] = ()
    lower: tuple[float, ...] = ()
    show_area_size: bool = False

    def __post_init__(self) -> None:
        _check_kind(self.kind, AREA_KINDS, "area kind")
        if self.kind == "between" and self.second is None:
            raise ConfigurationError("area kind 'between' requires a second series")


@dataclass(frozen=True)
class LineSeries:
    label: str
    points: tuple[Point, ...]
    color: RGBA = DEFAULT_SERIES_COLOR
    line_width: int = 2
    line_kind: LineKind = "solid"
    smoothing: SmoothingKind = "none"
    show_line: bool | None = None
    marker: MarkerKind = "circle"
    marker_size: int | None = None
    show_markers: bool = True
    show_error_bars: bool = False
    regression: RegressionSpec = field(default_factory=RegressionSpec)
    area: AreaSpec = field(default_factory=AreaSpec)

    def __post_init__(self) -> None:
        _check_kind(self.line_kind, LINE_KINDS, "line kind")
        _check_kind(self.smoothing, SMOOTHING_KINDS, "smoothing kind")
        _check_kind(self.marker, MARKER_KINDS, "marker kind")
        if self.line_width <= 0:
            raise ConfigurationError("line width must be > 0")

    @property
    def has_regression(self) -> bool:
        return self.regression.kind != "none"

    @property
    def draws_line(self) -> bool:
        # Series with a fitted curve read as scatter plots unless asked otherwise.
        if self.show_line is not None:
            return self.show_line
        return not self.has_regression

    @property
    def effective_marker_size(self) -> int:
        if self.marker_size is not None:
            return self.marker_size
        return 8 if self.has_regression else 6


@dataclass(frozen=True)
class BarSegment:
    value: float
    label: str | None = None
    color: RGBA | None = None


@dataclass(frozen=True)
class BarItem:
    label: str
    x_start: float
    x_end: float
    value: float | None = None
    segments: tuple[BarSegment, ...] = ()
    color: RGBA | None = None

    def __post_init__(self) -> None:
        if self.value is None and not self.segments:
            raise ConfigurationError(f"bar {self.label!r} needs a value or segments")

    def segment_values(self) -> list[float]:
        if self.segments:
            return [seg.value for seg in self.segments]
        return [float(self.value)] if self.value is not None else []

    def total(self) -> float:
        return float(sum(self.segment_values()))


@dataclass(frozen=True)
class HorizontalBarItem:
    label: str
    value: float | None = None
    segments: tuple[BarSegment, ...] = ()
    x_start: float | None = None
    x_end: float | None = None
    color: RGBA | None = None

    def __post_init__(self) -> None:
        if self.value is None and not self.segments and (self.x_start is None or self.x_end is None):
            raise ConfigurationError(f"bar {self.label!r} needs a value, segments or an x range")

    def segment_values(self) -> list[float]:
        if self.segments:
            return [seg.value for seg in self.segments]
        return [float(self.value)] if self.value is not None else []

    @property
    def has_range(self) -> bool:
        return self.x_start is not None and self.x_end is not None


@dataclass(frozen=True)
class PieSlice:
    label: str
    value: float
    color: RGBA | None = None
    show_value: bool = True
    value_label: str | None = None


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: RGBA = DEFAULT_SERIES_COLOR
