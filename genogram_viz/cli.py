import argparse
import logging
from pathlib import Path

from .builder import build_graph
from .config import LayoutConfig, RenderConfig
from .debug import draw_network
from .errors import GenogramInputError
from .importers import load_family
from .layout import GenogramLayout
from .render import measure_people, render_svg

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Lay out a family file as a genogram SVG.")
    parser.add_argument("family", type=Path, help="Family file (.json or ;-separated .csv).")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("genogram.svg"),
        help="Path to output SVG file (default: genogram.svg).",
    )
    parser.add_argument(
        "--direction",
        type=int,
        choices=(0, 90, 180, 270),
        default=90,
        help="Growth direction of generations in degrees (default: 90, top-down).",
    )
    parser.add_argument("--locale", default="en", help="Locale for dates (default: en).")
    parser.add_argument("--font", help="TrueType font used to measure names.")
    parser.add_argument("--link", help="URL template for person boxes, e.g. https://x/{key}.")
    parser.add_argument("--debug", type=Path, help="Also write a plot of the layout network.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    render_config = RenderConfig(locale=args.locale, font_path=args.font, link_template=args.link)
    try:
        family = load_family(args.family)
        graph = build_graph(family)
    except GenogramInputError as e:
        logger.error(f"cannot read {args.family}: {e}")
        return 2

    layout = GenogramLayout(LayoutConfig(direction=args.direction))
    result = layout.do_layout(graph, sizes=measure_people(graph.people.values(), render_config))
    render_svg(result, graph, str(args.output), render_config)
    if args.debug:
        draw_network(layout.network, str(args.debug))

    if result.diagnostics:
        logger.info(f"{len(result.diagnostics)} relationships could not be drawn")
    return 0
