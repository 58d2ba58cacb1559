from __future__ import annotations

import logging
from typing import Any
import warnings


class ChartError(ValueError):
    """Base class for every error raised while laying out a chart."""


class PlotDataError(ChartError):
    pass


class ConfigurationError(ChartError):
    pass


class AxisBoundsError(ChartError):
    """A data value falls outside an explicitly declared axis range.

    Silently clamping would misrepresent the data, so the render is aborted and
    the offending series/index/field is reported.
    """

    def __init__(
        self,
        *,
        axis: str,
        series: str | int,
        index: int,
        field: str,
        value: float,
        bounds: tuple[float, float],
        chart: str = "chart",
    ) -> None:
        self.axis = axis
        self.series = series
        self.index = index
        self.field = field
        self.value = value
        self.bounds = bounds
        lo, hi = bounds
        super().__init__(
            f"{chart}: data value out of {axis}-axis bounds: series {series!r} index {index} "
            f"has {field} value {value!r}, which exceeds the {axis}-axis range [{lo}, {hi}]"
        )


class AreaBoundsError(ChartError):
    def __init__(self, *, kind: str, to_value: float, y_range: tuple[float, float]) -> None:
        self.kind = kind
        self.to_value = to_value
        self.y_range = y_range
        lo, hi = y_range
        if kind == "below":
            rule = f"must be strictly below the minimum y value ({lo})"
        else:
            rule = f"must be strictly above the maximum y value ({hi})"
        super().__init__(
            f"invalid area shading: for area type {kind!r} the to_value ({to_value}) {rule}; "
            f"series y range is [{lo}, {hi}]"
        )


class DegenerateInputWarning(UserWarning):
    pass


def report_degenerate(logger: logging.Logger, message: str, *args: Any) -> None:
    text = message % args if args else message
    logger.warning(text)
    warnings.warn(text, DegenerateInputWarning, stacklevel=3)
