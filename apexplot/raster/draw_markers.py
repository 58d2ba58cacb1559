from __future__ import annotations

import numpy as np

from apexplot.raster.canvas import draw_pixel, fill_circle, fill_polygon
from apexplot.raster.draw_lines import draw_polyline
from apexplot.series import RGBA


def draw_markers(dst: np.ndarray, xs: np.ndarray, ys: np.ndarray, color: RGBA, size: int = 1, kind: str = "square") -> None:
    radius = max(0, size // 2)
    for x, y in zip(xs.tolist(), ys.tolist(), strict=False):
        _draw_marker(dst, float(x), float(y), color=color, radius=radius, kind=kind)


def _draw_marker(dst: np.ndarray, x: float, y: float, color: RGBA, radius: int, kind: str) -> None:
    if kind == "none":
        return
    if kind == "circle":
        fill_circle(dst, x, y, max(radius, 1), color)
        return
    if kind == "triangle":
        fill_polygon(dst, [x, x + radius, x - radius], [y - radius, y + radius, y + radius], color)
        return
    if kind == "diamond":
        fill_polygon(dst, [x, x + radius, x, x - radius], [y - radius, y, y + radius, y], color)
        return
    if kind == "cross":
        draw_polyline(dst, np.asarray([x - radius, x + radius]), np.asarray([y - radius, y + radius]), color, 2)
        draw_polyline(dst, np.asarray([x - radius, x + radius]), np.asarray([y + radius, y - radius]), color, 2)
        return
    xi, yi = int(round(x)), int(round(y))
    for yy in range(yi - radius, yi + radius + 1):
        for xx in range(xi - radius, xi + radius + 1):
            draw_pixel(dst, xx, yy, color)
