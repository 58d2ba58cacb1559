from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw

from apexplot.series import RGBA


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :, 0] = color[0]
    canvas[:, :, 1] = color[1]
    canvas[:, :, 2] = color[2]
    canvas[:, :, 3] = color[3]
    return canvas


def blit(dst: np.ndarray, src: np.ndarray, x0: int = 0, y0: int = 0) -> None:
    h, w, _ = src.shape
    y1 = min(dst.shape[0], y0 + h)
    x1 = min(dst.shape[1], x0 + w)
    sx = max(0, -x0)
    sy = max(0, -y0)
    x0 = max(0, x0)
    y0 = max(0, y0)
    if y0 >= y1 or x0 >= x1:
        return

    view = dst[y0:y1, x0:x1]
    patch = src[sy : sy + (y1 - y0), sx : sx + (x1 - x0)]
    alpha = patch[:, :, 3:4].astype(np.float32) / 255.0
    inv = 1.0 - alpha
    view[:, :, :3] = (patch[:, :, :3] * alpha + view[:, :, :3] * inv).astype(np.uint8)
    view[:, :, 3] = 255


def blit_scaled(dst: np.ndarray, src: np.ndarray, x0: int, y0: int, width: int, height: int) -> None:
    """Resample ``src`` to ``width`` x ``height`` and composite it at ``(x0, y0)``."""
    if width <= 0 or height <= 0:
        return
    if src.shape[1] != width or src.shape[0] != height:
        image = Image.fromarray(src).resize((width, height), Image.Resampling.LANCZOS)
        src = np.asarray(image, dtype=np.uint8)
    blit(dst, src, x0, y0)


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0] or x < 0 or x >= dst.shape[1]:
        return
    a = color[3] / 255.0
    inv = 1.0 - a
    current = dst[y, x, :3].astype(np.float32)
    dst[y, x, 0:3] = (np.asarray(color[0:3], dtype=np.float32) * a + current * inv).astype(np.uint8)
    dst[y, x, 3] = 255


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0]:
        return
    xa = max(0, min(x0, x1))
    xb = min(dst.shape[1] - 1, max(x0, x1))
    if xa > xb:
        return
    segment = dst[y, xa : xb + 1]
    a = color[3] / 255.0
    inv = 1.0 - a
    segment[:, :3] = (np.asarray(color[0:3], dtype=np.float32) * a + segment[:, :3].astype(np.float32) * inv).astype(np.uint8)
    segment[:, 3] = 255


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    if x < 0 or x >= dst.shape[1]:
        return
    ya = max(0, min(y0, y1))
    yb = min(dst.shape[0] - 1, max(y0, y1))
    if ya > yb:
        return
    segment = dst[ya : yb + 1, x]
    a = color[3] / 255.0
    inv = 1.0 - a
    segment[:, :3] = (np.asarray(color[0:3], dtype=np.float32) * a + segment[:, :3].astype(np.float32) * inv).astype(np.uint8)
    segment[:, 3] = 255


def fill_rect(dst: np.ndarray, left: float, top: float, right: float, bottom: float, color: RGBA) -> None:
    y0 = int(round(min(top, bottom)))
    y1 = int(round(max(top, bottom)))
    x0 = int(round(min(left, right)))
    x1 = int(round(max(left, right)))
    for y in range(y0, y1 + 1):
        draw_hline(dst, x0, x1, y, color)


def stroke_rect(dst: np.ndarray, left: float, top: float, right: float, bottom: float, color: RGBA) -> None:
    x0, y0, x1, y1 = int(round(left)), int(round(top)), int(round(right)), int(round(bottom))
    draw_hline(dst, x0, x1, y0, color)
    draw_hline(dst, x0, x1, y1, color)
    draw_vline(dst, x0, y0, y1, color)
    draw_vline(dst, x1, y0, y1, color)


def blend_mask(dst: np.ndarray, mask: np.ndarray, color: RGBA) -> None:
    """Alpha-blend ``color`` wherever the canvas-sized 8-bit ``mask`` has coverage."""
    cov = mask.astype(np.float32) / 255.0 * (color[3] / 255.0)
    if not np.any(cov > 0):
        return
    rgb = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    dst[:, :, :3] = (rgb * cov[:, :, None] + dst[:, :, :3].astype(np.float32) * (1.0 - cov[:, :, None])).astype(np.uint8)
    dst[:, :, 3] = np.maximum(dst[:, :, 3], (cov * 255.0).astype(np.uint8))


def fill_polygon(dst: np.ndarray, xs: Sequence[float], ys: Sequence[float], color: RGBA) -> None:
    if len(xs) < 3:
        return
    image = Image.new("L", (dst.shape[1], dst.shape[0]), 0)
    ImageDraw.Draw(image).polygon(list(zip(xs, ys)), fill=255)
    blend_mask(dst, np.asarray(image, dtype=np.uint8), color)


def fill_wedge(
    dst: np.ndarray,
    cx: float,
    cy: float,
    radius: float,
    start: float,
    end: float,
    color: RGBA,
    *,
    inner_radius: float = 0.0,
    samples_per_radian: float = 32.0,
) -> None:
    """Fill a pie slice (or a ring segment when ``inner_radius`` > 0); angles in radians."""
    count = max(2, int(abs(end - start) * samples_per_radian) + 1)
    angles = np.linspace(start, end, count)
    outer_x = cx + np.cos(angles) * radius
    outer_y = cy + np.sin(angles) * radius
    if inner_radius > 0:
        inner_x = cx + np.cos(angles[::-1]) * inner_radius
        inner_y = cy + np.sin(angles[::-1]) * inner_radius
        xs = np.concatenate([outer_x, inner_x])
        ys = np.concatenate([outer_y, inner_y])
    else:
        xs = np.concatenate([[cx], outer_x])
        ys = np.concatenate([[cy], outer_y])
    fill_polygon(dst, xs.tolist(), ys.tolist(), color)


def fill_circle(dst: np.ndarray, cx: float, cy: float, radius: float, color: RGBA) -> None:
    image = Image.new("L", (dst.shape[1], dst.shape[0]), 0)
    ImageDraw.Draw(image).ellipse((cx - radius, cy - radius, cx + radius, cy + radius), fill=255)
    blend_mask(dst, np.asarray(image, dtype=np.uint8), color)


def save_png(rgba: np.ndarray, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.ascontiguousarray(rgba)).save(out, format="PNG")
    return out
