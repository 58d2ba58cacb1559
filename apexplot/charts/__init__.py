from apexplot.charts.bar import BarChartGeometry, BarChartSpec, BarRect, Lollipop, layout_bar_chart
from apexplot.charts.comparison import (
    ChartGeometry,
    ChartKind,
    ChartPanel,
    ChartSpec,
    ComparisonChartGeometry,
    ComparisonChartSpec,
    PanelGeometry,
    layout_chart,
    layout_comparison_chart,
)
from apexplot.charts.horizontal_bar import (
    HorizontalBarChartGeometry,
    HorizontalBarChartSpec,
    layout_horizontal_bar_chart,
)
from apexplot.charts.line import LineChartGeometry, LineChartSpec, SeriesGeometry, layout_line_chart
from apexplot.charts.pie import PieChartGeometry, PieChartSpec, SliceGeometry, layout_pie_chart, slice_angles

__all__ = [
    "BarChartGeometry",
    "BarChartSpec",
    "BarRect",
    "ChartGeometry",
    "ChartKind",
    "ChartPanel",
    "ChartSpec",
    "ComparisonChartGeometry",
    "ComparisonChartSpec",
    "HorizontalBarChartGeometry",
    "HorizontalBarChartSpec",
    "LineChartGeometry",
    "LineChartSpec",
    "Lollipop",
    "PanelGeometry",
    "PieChartGeometry",
    "PieChartSpec",
    "SeriesGeometry",
    "SliceGeometry",
    "layout_bar_chart",
    "layout_chart",
    "layout_comparison_chart",
    "layout_horizontal_bar_chart",
    "layout_line_chart",
    "layout_pie_chart",
    "slice_angles",
]
