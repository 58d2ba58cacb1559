from apexplot.areas import ShadedArea, shade_series, trapezoid_area
from apexplot.charts import (
    BarChartSpec,
    ChartKind,
    ChartPanel,
    ComparisonChartSpec,
    HorizontalBarChartSpec,
    LineChartSpec,
    PieChartSpec,
    layout_bar_chart,
    layout_chart,
    layout_comparison_chart,
    layout_horizontal_bar_chart,
    layout_line_chart,
    layout_pie_chart,
)
from apexplot.config import load_chart_config, parse_chart_config
from apexplot.curves import bezier_segments, build_path, natural_cubic_spline, step_points
from apexplot.errors import (
    AreaBoundsError,
    AxisBoundsError,
    ChartError,
    ConfigurationError,
    DegenerateInputWarning,
    PlotDataError,
)
from apexplot.legend import CalloutSpec, LegendSpec, MonospaceMeasurer, layout_callouts, layout_legend
from apexplot.regression import fit_regression, sample_regression
from apexplot.scales import AxisSpec, log_scale, log_scale_inverse, map_to_pixel, resolve_scale
from apexplot.series import (
    AreaSpec,
    BarItem,
    BarSegment,
    ErrorBar,
    HorizontalBarItem,
    LegendEntry,
    LineSeries,
    PieSlice,
    Point,
    RegressionSpec,
)
from apexplot.sizing import Padding
from apexplot.ticks import plan_ticks

__all__ = [
    "AreaBoundsError",
    "AreaSpec",
    "AxisBoundsError",
    "AxisSpec",
    "BarChartSpec",
    "BarItem",
    "BarSegment",
    "CalloutSpec",
    "ChartError",
    "ChartKind",
    "ChartPanel",
    "ComparisonChartSpec",
    "ConfigurationError",
    "DegenerateInputWarning",
    "ErrorBar",
    "HorizontalBarChartSpec",
    "HorizontalBarItem",
    "LegendEntry",
    "LegendSpec",
    "LineChartSpec",
    "LineSeries",
    "MonospaceMeasurer",
    "Padding",
    "PieChartSpec",
    "PieSlice",
    "PlotDataError",
    "Point",
    "RegressionSpec",
    "ShadedArea",
    "bezier_segments",
    "build_path",
    "fit_regression",
    "layout_bar_chart",
    "layout_callouts",
    "layout_chart",
    "layout_comparison_chart",
    "layout_horizontal_bar_chart",
    "layout_legend",
    "layout_line_chart",
    "layout_pie_chart",
    "load_chart_config",
    "log_scale",
    "log_scale_inverse",
    "map_to_pixel",
    "natural_cubic_spline",
    "parse_chart_config",
    "plan_ticks",
    "resolve_scale",
    "sample_regression",
    "shade_series",
    "step_points",
    "trapezoid_area",
]
