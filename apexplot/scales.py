from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
import logging
import math
from typing import Literal

import numpy as np

from apexplot.errors import AxisBoundsError, ConfigurationError, report_degenerate
from apexplot.series import CanvasPoint, Point, PlotRect


LOGGER = logging.getLogger(__name__)

ScaleKind = Literal["linear", "log"]
AutoRange = Literal["zero_anchored", "padded", "baseline_anchored"]

RANGE_PAD_RATIO = 0.1
DEFAULT_STEP_DIVISIONS = 10


@dataclass(frozen=True)
class AxisSpec:
    """Axis configuration as supplied by the caller (defaults already applied)."""

    min: float | None = None
    max: float | None = None
    step: float | None = None
    values: tuple[float, ...] = ()
    baseline: float | None = None
    scale: ScaleKind = "linear"
    date_format: str | None = None
    label: str | None = None
    value_spacing: float | None = None
    tick_font_size: float = 12.0

    def __post_init__(self) -> None:
        if self.scale not in {"linear", "log"}:
            raise ConfigurationError(f"unsupported scale kind: {self.scale!r}")
        if self.step is not None and not (self.step > 0):
            raise ConfigurationError("axis step must be > 0")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ConfigurationError(f"axis min ({self.min}) must not exceed max ({self.max})")
        if self.value_spacing is not None and self.value_spacing < 0:
            raise ConfigurationError("value spacing must be >= 0")
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(float(v) for v in self.values))

    @property
    def has_explicit_range(self) -> bool:
        return self.min is not None and self.max is not None

    @property
    def has_custom_values(self) -> bool:
        return len(self.values) > 0

    @property
    def is_date_time(self) -> bool:
        return bool(self.date_format)


@dataclass(frozen=True)
class ResolvedScale:
    min: float
    max: float
    step: float
    kind: ScaleKind = "linear"
    baseline: float | None = None
    custom_values: tuple[float, ...] = ()
    explicit: bool = False

    @property
    def span(self) -> float:
        return self.max - self.min

    @property
    def is_log(self) -> bool:
        return self.kind == "log" and self.min > 0 and self.max > 0

    @property
    def effective_baseline(self) -> float:
        return 0.0 if self.baseline is None else self.baseline

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


def resolve_scale(
    values: Sequence[float] | np.ndarray,
    spec: AxisSpec | None = None,
    *,
    auto: AutoRange = "padded",
    default_baseline: float | None = 0.0,
    item_ranges: Sequence[tuple[float, float]] | None = None,
    item_ranges_first: bool = False,
    empty_range: tuple[float, float] = (0.0, 1.0),
) -> ResolvedScale:
    """Compute an axis domain, step and scale kind from config and data extent.

    Custom tick values win over an explicit ``min``/``max`` which wins over
    per-item ranges (bar ``x_start``/``x_end``) which win over the ``auto``
    policy applied to ``values``. With ``item_ranges_first`` the per-item
    ranges come before everything else (horizontal bar rows); an explicit
    range or custom values then only bound validation.
    """
    spec = spec or AxisSpec()
    baseline = spec.baseline if spec.baseline is not None else default_baseline
    data = np.asarray(values, dtype=np.float64).reshape(-1)
    data = data[np.isfinite(data)]
    explicit = False
    step: float | None = spec.step

    if item_ranges and item_ranges_first:
        lo, hi = _item_range_extent(item_ranges)
    elif spec.has_custom_values:
        lo = float(min(spec.values))
        hi = float(max(spec.values))
        step = 1.0
        explicit = True
    elif spec.has_explicit_range:
        lo, hi = explicit_range(spec, baseline)
        explicit = True
    elif item_ranges:
        lo, hi = _item_range_extent(item_ranges)
    elif data.size == 0:
        lo, hi = empty_range
    else:
        lo, hi = _auto_range(data, auto=auto, baseline=baseline)

    if hi - lo <= 0:
        report_degenerate(LOGGER, "zero-range axis [%s, %s]; widening to a unit range", lo, hi)
        hi = lo + 1.0

    if step is None:
        step = float(max(1, math.ceil((hi - lo) / DEFAULT_STEP_DIVISIONS)))

    kind: ScaleKind = spec.scale
    if kind == "log" and (lo <= 0 or hi <= 0):
        report_degenerate(LOGGER, "log scale needs a positive domain, got [%s, %s]; using linear", lo, hi)
        kind = "linear"

    return ResolvedScale(
        min=lo,
        max=hi,
        step=float(step),
        kind=kind,
        baseline=baseline,
        custom_values=spec.values,
        explicit=explicit,
    )


def explicit_range(spec: AxisSpec, baseline: float | None) -> tuple[float, float]:
    """The declared ``min``/``max`` with the baseline folded in."""
    if spec.min is None or spec.max is None:
        raise ConfigurationError("axis has no explicit min/max range")
    lo = float(spec.min)
    hi = float(spec.max)
    if baseline is not None:
        lo = min(lo, baseline)
        hi = max(hi, baseline)
    return lo, hi


def _item_range_extent(item_ranges: Sequence[tuple[float, float]]) -> tuple[float, float]:
    ends = np.asarray([v for pair in item_ranges for v in pair], dtype=np.float64)
    lo = float(np.min(ends))
    hi = float(np.max(ends))
    pad = (hi - lo) * RANGE_PAD_RATIO
    return max(0.0, lo - pad), hi + pad


def _auto_range(data: np.ndarray, *, auto: AutoRange, baseline: float | None) -> tuple[float, float]:
    dmin = float(np.min(data))
    dmax = float(np.max(data))
    if auto == "zero_anchored":
        base = 0.0 if baseline is None else baseline
        hi = max(dmax, 1.0)
        pad = hi * RANGE_PAD_RATIO
        lo = min(max(0.0, -pad), base)
        if dmin < 0:
            lo = min(lo, dmin - pad)
        return lo, max(hi + pad, base)
    if auto == "baseline_anchored":
        base = 0.0 if baseline is None else baseline
        lo = min(dmin, base)
        hi = max(dmax, base)
        pad = (hi - lo) * RANGE_PAD_RATIO
        # Padding only grows away from the baseline; the low edge stays put.
        lo = max(lo - pad, min(base, lo))
        return lo, hi + pad
    if auto == "padded":
        pad = (dmax - dmin) * RANGE_PAD_RATIO
        lo = dmin - pad
        hi = dmax + pad
        if baseline is not None:
            lo = min(lo, baseline)
            hi = max(hi, baseline)
        return lo, hi
    raise ConfigurationError(f"unsupported auto range policy: {auto!r}")


def bounds_for_validation(spec: AxisSpec, scale: ResolvedScale) -> tuple[float, float] | None:
    if spec.has_custom_values:
        return (float(min(spec.values)), float(max(spec.values)))
    if spec.has_explicit_range:
        if not scale.explicit:
            return explicit_range(spec, scale.baseline)
        return (scale.min, scale.max)
    return None


def validate_bounds(
    axis: str,
    spec: AxisSpec,
    scale: ResolvedScale,
    samples: Iterable[tuple[str | int, int, str, float]],
    *,
    chart: str = "chart",
) -> None:
    """Raise `AxisBoundsError` for the first sample outside a declared range.

    Samples are ``(series, index, field, value)`` tuples. Nothing is checked
    when the axis range was derived from the data.
    """
    bounds = bounds_for_validation(spec, scale)
    if bounds is None:
        return
    lo, hi = bounds
    for series, index, field, value in samples:
        if value < lo or value > hi:
            raise AxisBoundsError(
                axis=axis,
                series=series,
                index=index,
                field=field,
                value=float(value),
                bounds=(lo, hi),
                chart=chart,
            )


def log_scale(value: float, vmin: float, vmax: float) -> float:
    """Fractional position of ``value`` along a log10 axis spanning ``[vmin, vmax]``."""
    if value <= 0:
        return 0.0
    log_min = math.log10(vmin)
    log_max = math.log10(vmax)
    if log_max == log_min:
        return 0.0
    return (math.log10(value) - log_min) / (log_max - log_min)


def log_scale_inverse(position: float, vmin: float, vmax: float) -> float:
    log_min = math.log10(vmin)
    log_max = math.log10(vmax)
    return float(10 ** (log_min + position * (log_max - log_min)))


def map_to_pixel(
    value: float,
    domain_min: float,
    domain_max: float,
    pixel_start: float,
    pixel_end: float,
    scale: ScaleKind = "linear",
) -> float:
    lo_px = min(pixel_start, pixel_end)
    hi_px = max(pixel_start, pixel_end)
    if scale == "log" and domain_min > 0 and domain_max > 0:
        t = log_scale(value, domain_min, domain_max)
    else:
        span = domain_max - domain_min
        t = 0.0 if span == 0 else (value - domain_min) / span
    if not math.isfinite(t):
        t = 0.0
    px = pixel_start + t * (pixel_end - pixel_start)
    return float(min(hi_px, max(lo_px, px)))


@dataclass(frozen=True)
class AxisMapping:
    scale: ResolvedScale
    pixel_start: float
    pixel_end: float

    def map(self, value: float) -> float:
        return map_to_pixel(value, self.scale.min, self.scale.max, self.pixel_start, self.pixel_end, self.scale.kind)

    def map_unclamped(self, value: float) -> float:
        if self.scale.is_log:
            t = log_scale(value, self.scale.min, self.scale.max)
        else:
            t = (value - self.scale.min) / self.scale.span
        return self.pixel_start + t * (self.pixel_end - self.pixel_start)

    def map_array(self, values: np.ndarray) -> np.ndarray:
        v = np.asarray(values, dtype=np.float64)
        if self.scale.is_log:
            log_min = math.log10(self.scale.min)
            log_max = math.log10(self.scale.max)
            with np.errstate(divide="ignore", invalid="ignore"):
                t = (np.log10(np.where(v > 0, v, self.scale.min)) - log_min) / (log_max - log_min)
        else:
            t = (v - self.scale.min) / self.scale.span
        t = np.where(np.isfinite(t), t, 0.0)
        px = self.pixel_start + t * (self.pixel_end - self.pixel_start)
        return np.clip(px, min(self.pixel_start, self.pixel_end), max(self.pixel_start, self.pixel_end))

    def span_pixels(self, extent: float) -> float:
        """Pixel length of a domain extent on a linear axis (used for error bars)."""
        return abs(extent) / self.scale.span * abs(self.pixel_end - self.pixel_start)


@dataclass(frozen=True)
class PlotFrame:
    rect: PlotRect
    x: AxisMapping
    y: AxisMapping

    @classmethod
    def build(cls, rect: PlotRect, x_scale: ResolvedScale, y_scale: ResolvedScale) -> "PlotFrame":
        return cls(
            rect=rect,
            x=AxisMapping(x_scale, rect.left, rect.right),
            y=AxisMapping(y_scale, rect.bottom, rect.top),
        )

    def to_canvas(self, point: Point) -> CanvasPoint:
        return CanvasPoint(x=self.x.map(point.x), y=self.y.map(point.y))

    def to_canvas_many(self, points: Sequence[Point]) -> list[CanvasPoint]:
        if not points:
            return []
        xs = self.x.map_array(np.asarray([p.x for p in points], dtype=np.float64))
        ys = self.y.map_array(np.asarray([p.y for p in points], dtype=np.float64))
        return [CanvasPoint(x=float(px), y=float(py)) for px, py in zip(xs.tolist(), ys.tolist(), strict=True)]

    def to_canvas_unclamped(self, point: Point) -> CanvasPoint:
        return CanvasPoint(x=self.x.map_unclamped(point.x), y=self.y.map_unclamped(point.y))

    @property
    def baseline_y(self) -> float:
        return self.y.map(self.y.scale.effective_baseline)


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros for fractional values (preserve integer zeros like 30, 40).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: Sequence[float] | np.ndarray) -> list[str]:
    arr = np.asarray(ticks, dtype=np.float64)
    if arr.size == 0:
        return []
    if arr.size == 1:
        return [format_tick(float(arr[0]))]
    step = float(abs(arr[1] - arr[0]))
    return [format_tick(float(v), step=step) for v in arr]


def format_date(value: float, fmt: str) -> str:
    """Render epoch milliseconds with ``YYYY MM DD HH mm ss`` tokens (UTC)."""
    stamp = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    return (
        fmt.replace("YYYY", f"{stamp.year:04d}")
        .replace("MM", f"{stamp.month:02d}")
        .replace("DD", f"{stamp.day:02d}")
        .replace("HH", f"{stamp.hour:02d}")
        .replace("mm", f"{stamp.minute:02d}")
        .replace("ss", f"{stamp.second:02d}")
    )


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
