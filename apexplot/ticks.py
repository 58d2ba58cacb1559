from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Literal

from apexplot.scales import AxisMapping, AxisSpec, format_date, format_tick, format_ticks_for_axis


Orientation = Literal["x", "y"]

DEFAULT_X_LABEL_SPACING = 40.0
DEFAULT_Y_LABEL_SPACING = 30.0


@dataclass(frozen=True)
class Tick:
    value: float
    position: float
    label: str
    label_visible: bool


@dataclass(frozen=True)
class TickSet:
    axis: Orientation
    ticks: tuple[Tick, ...]

    def __len__(self) -> int:
        return len(self.ticks)

    @property
    def values(self) -> tuple[float, ...]:
        return tuple(t.value for t in self.ticks)

    @property
    def positions(self) -> tuple[float, ...]:
        return tuple(t.position for t in self.ticks)

    @property
    def visible_labels(self) -> tuple[Tick, ...]:
        return tuple(t for t in self.ticks if t.label_visible)


def default_label_spacing(spec: AxisSpec, orientation: Orientation) -> float:
    if spec.value_spacing is not None and spec.value_spacing > 0:
        return float(spec.value_spacing)
    if orientation == "x":
        return DEFAULT_X_LABEL_SPACING
    if spec.has_custom_values:
        return DEFAULT_Y_LABEL_SPACING
    return float(spec.tick_font_size) + 5.0


def plan_ticks(
    mapping: AxisMapping,
    spec: AxisSpec,
    orientation: Orientation,
    *,
    min_label_spacing: float | None = None,
    fixed_spacing: bool = False,
) -> TickSet:
    """Enumerate ticks for an axis and mark which labels fit.

    Custom values are placed by value on their own min/max, or every
    ``spec.value_spacing`` pixels when ``fixed_spacing`` is set. Otherwise the
    resolved domain is walked by its step (powers of ten on a log axis).
    """
    spacing = default_label_spacing(spec, orientation) if min_label_spacing is None else float(min_label_spacing)
    scale = mapping.scale
    if spec.has_custom_values:
        values = list(spec.values)
        if fixed_spacing and spec.value_spacing:
            positions = _fixed_positions(mapping, len(values), float(spec.value_spacing))
            pairs = [(v, p) for v, p in zip(values, positions, strict=True) if p is not None]
            labels = [_label(v, spec, None) for v, _ in pairs]
            ticks = tuple(
                Tick(value=v, position=p, label=lbl, label_visible=True)
                for (v, p), lbl in zip(pairs, labels, strict=True)
            )
            return TickSet(axis=orientation, ticks=ticks)
        positions_f = [mapping.map(v) for v in values]
        labels = [_label(v, spec, None) for v in values]
    elif scale.is_log:
        values = log_tick_values(scale.min, scale.max)
        positions_f = [mapping.map(v) for v in values]
        labels = [_label(v, spec, None) for v in values]
    else:
        values = stepped_values(scale.min, scale.max, scale.step)
        positions_f = [mapping.map(v) for v in values]
        if spec.is_date_time:
            labels = [_label(v, spec, None) for v in values]
        else:
            labels = format_ticks_for_axis(values) if len(values) > 1 else [format_tick(v) for v in values]

    visible = suppress_overlapping(positions_f, spacing)
    ticks = tuple(
        Tick(value=float(v), position=float(p), label=lbl, label_visible=show)
        for v, p, lbl, show in zip(values, positions_f, labels, visible, strict=True)
    )
    return TickSet(axis=orientation, ticks=ticks)


def stepped_values(vmin: float, vmax: float, step: float) -> list[float]:
    if step <= 0 or not math.isfinite(step):
        return [vmin]
    count = int(math.floor((vmax - vmin) / step + 1e-9))
    return [vmin + i * step for i in range(count + 1)]


def log_tick_values(vmin: float, vmax: float) -> list[float]:
    """Powers of ten inside the domain, or both ends when none falls inside."""
    lo = math.floor(math.log10(vmin))
    hi = math.ceil(math.log10(vmax))
    values = [float(10**p) for p in range(lo, hi + 1) if vmin <= 10**p <= vmax]
    if not values:
        return [float(vmin), float(vmax)]
    return values


def suppress_overlapping(positions: list[float], min_spacing: float) -> list[bool]:
    """Greedy label suppression in iteration order.

    A label is hidden when it lies closer than ``min_spacing`` pixels to the
    last label that stayed visible; the first label always stays.
    """
    out: list[bool] = []
    last: float | None = None
    for pos in positions:
        if last is not None and abs(pos - last) < min_spacing:
            out.append(False)
            continue
        out.append(True)
        last = pos
    return out


def _fixed_positions(mapping: AxisMapping, count: int, spacing: float) -> list[float | None]:
    lo = min(mapping.pixel_start, mapping.pixel_end)
    hi = max(mapping.pixel_start, mapping.pixel_end)
    direction = 1.0 if mapping.pixel_end >= mapping.pixel_start else -1.0
    out: list[float | None] = []
    for i in range(count):
        pos = mapping.pixel_start + direction * spacing * i
        out.append(pos if lo <= pos <= hi else None)
    return out


def _label(value: float, spec: AxisSpec, step: float | None) -> str:
    if spec.date_format:
        return format_date(value, spec.date_format)
    return format_tick(value, step=step)
