from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
from pathlib import Path
from typing import Literal

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from apexplot.raster.canvas import blend_mask
from apexplot.series import RGBA


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 12.0
FONT_FALLBACK_PATTERNS = ("dejavusans", "liberationsans", "arial", "helvetica", "dejavusansmono", "courier")
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)
FONT_SUFFIXES = {".ttf", ".otf", ".ttc"}

HAlign = Literal["left", "center", "right"]
VAlign = Literal["top", "middle", "bottom"]
Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True)
class PillowTextMeasurer:
    """Measures text with the same Pillow font the renderer draws with."""

    font_family: str = DEFAULT_FONT_FAMILY

    def measure(self, text: str, font_size: float) -> float:
        return float(text_size(text, font_family=self.font_family, font_size_px=font_size)[0])


def draw_text(
    dst: np.ndarray,
    x: float,
    y: float,
    text: str,
    color: RGBA,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    embolden_px: int = 1,
    vertical: bool = False,
    align: HAlign = "left",
    valign: VAlign = "top",
) -> None:
    """Draw ``text`` with its ``align``/``valign`` corner at ``(x, y)``.

    ``vertical`` turns the glyphs a quarter turn counter-clockwise (y axis titles).
    """
    if not text:
        return
    mask = _glyph_mask(text, _load_font(font_family, font_size_px))
    if embolden_px > 1:
        mask = _embolden(mask, embolden_px)
    if vertical:
        mask = np.rot90(mask)
    h, w = mask.shape
    left = int(round(x - (w / 2.0 if align == "center" else w if align == "right" else 0.0)))
    top = int(round(y - (h / 2.0 if valign == "middle" else h if valign == "bottom" else 0.0)))

    x0, y0 = max(0, left), max(0, top)
    x1, y1 = min(dst.shape[1], left + w), min(dst.shape[0], top + h)
    if x1 <= x0 or y1 <= y0:
        return
    blend_mask(dst[y0:y1, x0:x1], mask[y0 - top : y1 - top, x0 - left : x1 - left], color)


def text_size(text: str, *, font_family: str = DEFAULT_FONT_FAMILY, font_size_px: float = DEFAULT_FONT_SIZE_PX) -> tuple[int, int]:
    """Horizontal ``(width, height)`` of ``text``; empty text keeps the line height."""
    font = _load_font(font_family, font_size_px)
    if not text:
        ascent, descent = font.getmetrics()
        return 0, max(1, int(ascent + descent))
    left, top, right, bottom = font.getbbox(text)
    return max(0, int(right - left)), max(1, int(bottom - top))


def _embolden(mask: np.ndarray, embolden_px: int) -> np.ndarray:
    out = mask.copy()
    for shift in range(1, min(embolden_px, mask.shape[1])):
        np.maximum(out[:, shift:], mask[:, :-shift], out=out[:, shift:])
    return out


@lru_cache(maxsize=256)
def _glyph_mask(text: str, font: Font) -> np.ndarray:
    left, top, right, bottom = font.getbbox(text)
    image = Image.new("L", (max(1, int(right - left)), max(1, int(bottom - top))), 0)
    ImageDraw.Draw(image).text((-left, -top), text, fill=255, font=font)
    return np.asarray(image, dtype=np.uint8)


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> Font:
    size = max(1, int(round(font_size_px)))
    path = find_font(font_family)
    if path is not None:
        try:
            return ImageFont.truetype(str(path), size=size)
        except OSError:
            LOGGER.warning("failed to load font %s; using the Pillow default font", path)
    else:
        LOGGER.debug("no font file matches %r; using the Pillow default font", font_family)
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=1)
def _font_index() -> tuple[tuple[str, Path], ...]:
    """Installed font files keyed by their lower-cased, space-free stem."""
    found: list[tuple[str, Path]] = []
    for base in FONT_DIRS:
        if base.is_dir():
            found.extend(
                (path.stem.lower().replace(" ", ""), path)
                for path in sorted(base.rglob("*"))
                if path.suffix.lower() in FONT_SUFFIXES
            )
    return tuple(found)


def find_font(font_family: str) -> Path | None:
    """First installed font whose file name contains the family, then a sans fallback."""
    wanted = font_family.strip().lower().replace(" ", "") or DEFAULT_FONT_FAMILY.lower().replace(" ", "")
    index = _font_index()
    for pattern in (wanted, *FONT_FALLBACK_PATTERNS):
        for stem, path in index:
            if pattern in stem:
                return path
    return None
