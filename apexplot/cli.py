from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from apexplot.charts.comparison import ComparisonChartSpec, layout_chart, layout_comparison_chart
from apexplot.config import ChartConfig, load_chart_config
from apexplot.errors import ChartError
from apexplot.legend import TextMeasurer
from apexplot.raster.draw_text import DEFAULT_FONT_FAMILY, PillowTextMeasurer
from apexplot.raster.render import RenderStyle, render_to_png


LOGGER = logging.getLogger("apexplot")


def layout_config(config: ChartConfig, measurer: TextMeasurer):
    if isinstance(config, ComparisonChartSpec):
        return layout_comparison_chart(config, measurer)
    return layout_chart(config, measurer)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apexplot")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity for layout warnings and progress.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a TOML chart description to PNG.")
    render.add_argument("config", type=Path)
    render.add_argument("-o", "--output", type=Path, default=None, help="Output PNG path. Default: <config>.png")
    render.add_argument("--font", default=DEFAULT_FONT_FAMILY, help="Font family used for measuring and drawing text.")
    render.add_argument("--no-grid", action="store_true", help="Do not draw grid lines on axis charts.")

    check = sub.add_parser("check", help="Validate a chart description and run its layout without drawing.")
    check.add_argument("config", type=Path)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    try:
        config = load_chart_config(args.config)
        if args.command == "check":
            layout_config(config, PillowTextMeasurer())
            print(f"{args.config}: ok")
            return 0
        measurer = PillowTextMeasurer(font_family=args.font)
        geometry = layout_config(config, measurer)
        output = args.output or args.config.with_suffix(".png")
        style = RenderStyle(font_family=args.font, show_grid=not args.no_grid)
        out = render_to_png(geometry, output, style)
    except (ChartError, OSError) as exc:
        LOGGER.error("%s", exc)
        return 2
    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
