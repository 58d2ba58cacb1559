from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from apexplot.errors import PlotDataError
from apexplot.series import ErrorBar, Point


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def normalize_xy(
    y: Any = None,
    *,
    x: Any = None,
    data: Any = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Coerce x/y inputs to float64 arrays, dropping pairs that are not finite."""
    y_values = _resolve_input(y=y, key="y", data=data)
    if y_values is None:
        raise PlotDataError("y input is required")

    y_arr = _coerce_1d_numeric(y_values, label="y")
    if y_arr.size == 0:
        raise PlotDataError("empty series")

    if x is None:
        x_arr = np.arange(y_arr.size, dtype=np.float64)
    else:
        x_values = _resolve_input(y=x, key="x", data=data)
        x_arr = _coerce_1d_numeric(x_values, label="x")

    if x_arr.shape != y_arr.shape:
        raise PlotDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")

    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    if not np.any(mask):
        raise PlotDataError("series contains no finite points")
    return x_arr[mask], y_arr[mask]


def normalize_points(value: Any = None, *, x: Any = None, data: Any = None) -> tuple[Point, ...]:
    """Build an ordered point tuple from any supported input shape.

    Accepts ``Point`` instances, ``(x, y)`` pairs, mappings with ``x``/``y``
    keys (plus optional ``label`` and ``error``), or anything `normalize_xy`
    understands (lists, numpy arrays, torch tensors, pandas columns).
    """
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)) and value and x is None and data is None:
        first = value[0]
        if isinstance(first, Point):
            return tuple(_check_point(p, i) for i, p in enumerate(value))
        if isinstance(first, Mapping):
            return tuple(_point_from_mapping(item, i) for i, item in enumerate(value))
        if isinstance(first, (tuple, list)):
            return tuple(_point_from_pair(item, i) for i, item in enumerate(value))
    xs, ys = normalize_xy(value, x=x, data=data)
    return tuple(Point(x=float(xv), y=float(yv)) for xv, yv in zip(xs.tolist(), ys.tolist(), strict=True))


def coerce_values(value: Any, *, label: str) -> tuple[float, ...]:
    arr = _coerce_1d_numeric(value, label=label)
    if not np.all(np.isfinite(arr)):
        raise PlotDataError(f"{label} contains non-finite values")
    return tuple(float(v) for v in arr.tolist())


def _check_point(point: Point, index: int) -> Point:
    if not (np.isfinite(point.x) and np.isfinite(point.y)):
        raise PlotDataError(f"point {index} is not finite: ({point.x!r}, {point.y!r})")
    return point


def _point_from_pair(item: Any, index: int) -> Point:
    if len(item) != 2:
        raise PlotDataError(f"point {index} must be an (x, y) pair")
    return _check_point(Point(x=_to_float(item[0], index, "x"), y=_to_float(item[1], index, "y")), index)


def _point_from_mapping(item: Mapping[str, Any], index: int) -> Point:
    if "x" not in item or "y" not in item:
        raise PlotDataError(f"point {index} needs 'x' and 'y' keys")
    error = item.get("error")
    error_bar: ErrorBar | None = None
    if isinstance(error, ErrorBar):
        error_bar = error
    elif isinstance(error, Mapping):
        error_bar = ErrorBar(
            positive=_to_float(error.get("positive", 0.0), index, "error.positive"),
            negative=_to_float(error.get("negative", 0.0), index, "error.negative"),
        )
    elif error is not None:
        raise PlotDataError(f"point {index} has an unsupported error bar: {error!r}")
    label = item.get("label")
    return _check_point(
        Point(
            x=_to_float(item["x"], index, "x"),
            y=_to_float(item["y"], index, "y"),
            label=None if label is None else str(label),
            error=error_bar,
        ),
        index,
    )


def _to_float(raw: Any, index: int, field: str) -> float:
    if isinstance(raw, Decimal):
        return float(raw)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise PlotDataError(f"point {index} {field} is not numeric: {raw!r}") from exc


def _resolve_input(y: Any, key: str, data: Any) -> Any:
    if data is not None:
        if pd is None:
            raise PlotDataError("pandas is required when using `data=`")
        if not isinstance(data, pd.DataFrame):
            raise PlotDataError("`data` must be a pandas DataFrame")
        if isinstance(y, str):
            if y not in data.columns:
                raise PlotDataError(f"column not found: {y}")
            return data[y]
        if y is None:
            if key == "y":
                numeric_cols = [c for c in data.columns if _is_numeric_dtype(data[c])]
                if len(numeric_cols) != 1:
                    raise PlotDataError("when y is omitted, data must have exactly one numeric column")
                return data[numeric_cols[0]]
            return None
        return y

    if pd is not None and isinstance(y, pd.DataFrame):
        numeric_cols = [c for c in y.columns if _is_numeric_dtype(y[c])]
        if len(numeric_cols) != 1:
            raise PlotDataError("1-D DataFrame input must contain exactly one numeric column")
        return y[numeric_cols[0]]

    return y


def _is_numeric_dtype(series: Any) -> bool:
    if pd is None:
        return False
    try:
        return bool(pd.api.types.is_numeric_dtype(series))
    except Exception:
        return False


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(value, dtype=object), label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.ndim != 1:
        raise PlotDataError(f"{label} must be 1-D")
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
