from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import fields
import logging
from pathlib import Path
import tomllib
from typing import Any

from apexplot.adapters.normalize import coerce_values, normalize_points
from apexplot.charts.bar import BarChartSpec
from apexplot.charts.comparison import ChartKind, ChartPanel, ComparisonChartSpec
from apexplot.charts.horizontal_bar import HorizontalBarChartSpec
from apexplot.charts.line import LineChartSpec
from apexplot.charts.pie import PieChartSpec
from apexplot.errors import ConfigurationError, PlotDataError
from apexplot.legend import CalloutSpec, LegendSpec
from apexplot.scales import AxisSpec
from apexplot.series import (
    RGBA,
    AreaSpec,
    BarItem,
    BarSegment,
    HorizontalBarItem,
    LegendEntry,
    LineSeries,
    PieSlice,
    RegressionSpec,
)
from apexplot.sizing import Padding


LOGGER = logging.getLogger(__name__)

ChartConfig = ChartPanel | ComparisonChartSpec
Converter = Callable[[Any, str], Any]


def load_chart_config(path: str | Path) -> ChartConfig:
    """Read a TOML chart description into a chart panel or comparison spec."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"chart config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"{config_path}: invalid TOML: {exc}") from exc
    LOGGER.debug("loaded chart config %s (kind=%r)", config_path, raw.get("kind"))
    return parse_chart_config(raw, where=config_path.name)


def parse_chart_config(raw: Mapping[str, Any], *, where: str = "config") -> ChartConfig:
    table = dict(raw)
    try:
        kind = str(table.pop("kind"))
    except KeyError as exc:
        raise ConfigurationError(f"{where}: missing required field: kind") from exc
    if kind == "comparison":
        return _build(
            ComparisonChartSpec,
            table,
            where,
            left=lambda v, w: parse_panel(_table(v, w), where=w),
            right=lambda v, w: parse_panel(_table(v, w), where=w),
            padding=_padding,
            panel_padding=_padding,
        )
    return parse_panel({"kind": kind, **table}, where=where)


def parse_panel(raw: Mapping[str, Any], *, where: str) -> ChartPanel:
    table = dict(raw)
    try:
        kind = ChartKind(str(table.pop("kind")))
    except KeyError as exc:
        raise ConfigurationError(f"{where}: missing required field: kind") from exc
    except ValueError as exc:
        allowed = ", ".join(k.value for k in ChartKind)
        raise ConfigurationError(
            f"{where}: unsupported chart kind {raw.get('kind')!r} (expected one of {allowed}, comparison)"
        ) from exc

    common: dict[str, Converter] = {
        "padding": _padding,
        "legend": _legend,
        "x": _axis,
        "y": _axis,
    }
    if kind is ChartKind.LINE:
        spec: Any = _build(LineChartSpec, table, where, series=_list_of(_series), **common)
    elif kind is ChartKind.BAR:
        if "bar_kind" in table:
            table["kind"] = table.pop("bar_kind")
        spec = _build(BarChartSpec, table, where, items=_list_of(_bar_item), **common)
    elif kind is ChartKind.HORIZONTAL_BAR:
        spec = _build(HorizontalBarChartSpec, table, where, items=_list_of(_horizontal_item), **common)
    else:
        table["kind"] = kind.value
        spec = _build(
            PieChartSpec,
            table,
            where,
            slices=_list_of(_slice),
            padding=_padding,
            legend=_legend,
            callouts=lambda v, w: _build(CalloutSpec, _table(v, w), w),
        )
    return ChartPanel(kind=kind, spec=spec)


def _build(cls: type, raw: Mapping[str, Any], where: str, **converters: Converter) -> Any:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - names)
    if unknown:
        raise ConfigurationError(f"{where}: unknown keys for {cls.__name__}: {', '.join(unknown)}")
    kwargs = {}
    for key, value in raw.items():
        convert = converters.get(key)
        kwargs[key] = convert(value, f"{where}.{key}") if convert is not None else value
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise ConfigurationError(f"{where}: {exc}") from exc


def _table(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{where} must be a table")
    return dict(value)


def _list_of(convert: Converter) -> Converter:
    def run(value: Any, where: str) -> tuple[Any, ...]:
        if not isinstance(value, list):
            raise ConfigurationError(f"{where} must be an array")
        return tuple(convert(item, f"{where}[{i}]") for i, item in enumerate(value))

    return run


def parse_color(value: Any, where: str = "color") -> RGBA:
    """Accept ``[r, g, b]``, ``[r, g, b, a]`` or ``"#rrggbb"`` / ``"#rrggbbaa"``."""
    if isinstance(value, str):
        text = value.lstrip("#")
        if len(text) not in {6, 8}:
            raise ConfigurationError(f"{where}: expected #rrggbb or #rrggbbaa, got {value!r}")
        try:
            parts = [int(text[i : i + 2], 16) for i in range(0, len(text), 2)]
        except ValueError as exc:
            raise ConfigurationError(f"{where}: invalid hex colour {value!r}") from exc
    elif isinstance(value, list) and len(value) in {3, 4}:
        parts = [int(v) for v in value]
    else:
        raise ConfigurationError(f"{where}: colour must be a hex string or an [r, g, b(, a)] array")
    if len(parts) == 3:
        parts.append(255)
    if any(p < 0 or p > 255 for p in parts):
        raise ConfigurationError(f"{where}: colour channels must be in [0, 255]")
    return (parts[0], parts[1], parts[2], parts[3])


def _padding(value: Any, where: str) -> Padding:
    return _build(Padding, _table(value, where), where)


def _axis(value: Any, where: str) -> AxisSpec:
    table = _table(value, where)
    if "values" in table:
        table["values"] = _values(table["values"], f"{where}.values")
    return _build(AxisSpec, table, where)


def _legend(value: Any, where: str) -> LegendSpec:
    def entry(item: Any, w: str) -> LegendEntry:
        return _build(LegendEntry, _table(item, w), w, color=parse_color)

    return _build(LegendSpec, _table(value, where), where, entries=_list_of(entry))


def _values(value: Any, where: str) -> tuple[float, ...]:
    try:
        return coerce_values(value, label=where)
    except PlotDataError as exc:
        raise ConfigurationError(str(exc)) from exc


def _points(table: dict[str, Any], where: str) -> None:
    """Fold ``points = [[x, y], ...]`` or parallel ``x``/``y`` arrays into ``points``."""
    try:
        if "points" in table:
            table["points"] = normalize_points(table["points"])
        elif "y" in table:
            table["points"] = normalize_points(table.pop("y"), x=table.pop("x", None))
        else:
            raise ConfigurationError(f"{where}: missing required field: points")
    except PlotDataError as exc:
        raise ConfigurationError(f"{where}: {exc}") from exc


def _series(value: Any, where: str) -> LineSeries:
    table = _table(value, where)
    _points(table, where)
    return _build(
        LineSeries,
        table,
        where,
        color=parse_color,
        regression=lambda v, w: _build(RegressionSpec, _table(v, w), w, color=parse_color),
        area=_area,
    )


def _area(value: Any, where: str) -> AreaSpec:
    table = _table(value, where)
    for key in ("upper", "lower"):
        if key in table:
            table[key] = _values(table[key], f"{where}.{key}")
    return _build(AreaSpec, table, where, color=parse_color, second=_series)


def _segment(value: Any, where: str) -> BarSegment:
    return _build(BarSegment, _table(value, where), where, color=parse_color)


def _bar_item(value: Any, where: str) -> BarItem:
    return _build(BarItem, _table(value, where), where, color=parse_color, segments=_list_of(_segment))


def _horizontal_item(value: Any, where: str) -> HorizontalBarItem:
    return _build(HorizontalBarItem, _table(value, where), where, color=parse_color, segments=_list_of(_segment))


def _slice(value: Any, where: str) -> PieSlice:
    return _build(PieSlice, _table(value, where), where, color=parse_color)
