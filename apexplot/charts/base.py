from __future__ import annotations

from collections.abc import Sequence

from apexplot.legend import LegendBox, LegendMetrics, LegendSpec, TextMeasurer, layout_legend
from apexplot.series import LegendEntry


TITLE_MARGIN = 30.0


def title_height(title: str | None, font_size: float, margin: float = TITLE_MARGIN) -> float:
    if not title:
        return 0.0
    return float(font_size) + margin


def legend_box(
    spec: LegendSpec,
    derived: Sequence[LegendEntry],
    measurer: TextMeasurer,
    metrics: LegendMetrics,
    *,
    font_size: float | None = None,
) -> LegendBox | None:
    """Size the legend for a chart, or ``None`` when it is hidden or empty.

    Explicit ``spec.entries`` replace the entries derived from the data.
    """
    if not spec.show:
        return None
    entries = spec.entries or tuple(derived)
    if not entries:
        return None
    return layout_legend(
        entries,
        measurer,
        metrics=metrics,
        font_size=spec.font_size if font_size is None else font_size,
        max_width=spec.max_width,
        wrap=spec.wrap_text,
    )
