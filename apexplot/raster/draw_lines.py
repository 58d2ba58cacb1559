from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from apexplot.raster.canvas import draw_pixel
from apexplot.series import RGBA


DASH_PATTERNS: dict[str, tuple[float, ...]] = {
    "solid": (),
    "step": (),
    "stepline": (),
    "dashed": (10.0, 5.0),
    "dotted": (2.0, 5.0),
    "dashdot": (10.0, 5.0, 2.0, 5.0),
    "longdash": (20.0, 5.0),
    "shortdash": (5.0, 5.0),
    "dashdotdot": (10.0, 5.0, 2.0, 5.0, 2.0, 5.0),
}


def draw_polyline(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: int = 1,
    dash: Sequence[float] = (),
) -> None:
    if xs.size < 2:
        return
    if dash:
        for run_x, run_y in dash_runs(xs, ys, dash):
            draw_polyline(dst, run_x, run_y, color, width)
        return
    for i in range(xs.size - 1):
        _draw_line_segment(
            dst,
            int(round(xs[i])),
            int(round(ys[i])),
            int(round(xs[i + 1])),
            int(round(ys[i + 1])),
            color=color,
            width=width,
        )


def dash_runs(xs: np.ndarray, ys: np.ndarray, dash: Sequence[float]) -> list[tuple[np.ndarray, np.ndarray]]:
    """Split a polyline into the "on" runs of a repeating ``[on, off, ...]`` pattern."""
    seg = np.hypot(np.diff(xs), np.diff(ys))
    cum = np.concatenate([[0.0], np.cumsum(seg)])
    total = float(cum[-1])
    period = float(sum(dash))
    if total <= 0 or period <= 0:
        return [(xs, ys)]
    runs: list[tuple[np.ndarray, np.ndarray]] = []
    pos = 0.0
    k = 0
    while pos < total:
        length = float(dash[k % len(dash)])
        if k % 2 == 0:
            end = min(total, pos + length)
            inner = (cum > pos) & (cum < end)
            dists = np.concatenate([[pos], cum[inner], [end]])
            runs.append((np.interp(dists, cum, xs), np.interp(dists, cum, ys)))
        pos += length
        k += 1
    return runs


def _draw_line_segment(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA, width: int) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _draw_square_brush(dst, x0, y0, color=color, width=width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color)
