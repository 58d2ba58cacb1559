from .canvas import blit, blit_scaled, draw_hline, draw_vline, fill_polygon, fill_rect, fill_wedge, new_canvas, save_png
from .draw_lines import DASH_PATTERNS, dash_runs, draw_polyline
from .draw_markers import draw_markers
from .draw_text import PillowTextMeasurer, draw_text, text_size
from .render import RenderStyle, render_chart, render_to_png

__all__ = [
    "DASH_PATTERNS",
    "PillowTextMeasurer",
    "RenderStyle",
    "blit",
    "blit_scaled",
    "dash_runs",
    "draw_hline",
    "draw_vline",
    "draw_markers",
    "draw_polyline",
    "draw_text",
    "fill_polygon",
    "fill_rect",
    "fill_wedge",
    "new_canvas",
    "render_chart",
    "render_to_png",
    "save_png",
    "text_size",
]
