"""SVG output for a laid-out genogram.

This is deliberately thin: boxes coloured by sex, the name and life dates in
each box, marriage lines and orthogonal parent-child lines. Label nodes and
suppressed people are never painted.
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, Tuple

import svgwrite
from babel.dates import format_date
from PIL import ImageFont

from .builder import GenogramGraph
from .config import RenderConfig
from .layout import LayoutResult
from .model import Person

logger = logging.getLogger(__name__)

line_spacing = 14
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


def load_font(config: RenderConfig):
    if config.font_path:
        return ImageFont.truetype(config.font_path, config.font_size)
    return ImageFont.load_default()


def wrap_name(name: str, font, max_width: float) -> list:
    """Greedy word wrap of a name to lines no wider than max_width."""
    lines = []
    for word in name.split():
        if lines and font.getlength(f"{lines[-1]} {word}") <= max_width:
            lines[-1] = f"{lines[-1]} {word}"
        else:
            lines.append(word)
    return lines or [""]


def info_lines(person: Person, config: RenderConfig) -> list:
    lines = []
    if person.birth and person.birth.date:
        lines.append(f"* {date2str(person.birth.date, config)}")
    if person.death and person.death.date:
        dd = person.death.date
        kia = dd.startswith("x")
        lines.append(f"{'⚔' if kia else '†'} {date2str(dd, config)}")
    return lines


def measure_people(people: Iterable[Person], config: RenderConfig = None) -> Dict[int, Tuple[float, float]]:
    """Box size per person key, from the rendered width of their name."""
    config = config or RenderConfig()
    font = load_font(config)
    sizes = {}
    for person in people:
        lines = wrap_name(person.name, font, config.max_text_width)
        text_width = max(font.getlength(line) for line in lines)
        for info in info_lines(person, config):
            text_width = max(text_width, font.getlength(info))
        text_width = min(text_width, config.max_text_width)
        count = len(lines) + len(info_lines(person, config))
        sizes[person.key] = (
            math.ceil(text_width + 2 * config.text_margin),
            math.ceil(count * line_spacing + 2 * config.text_margin),
        )
    return sizes


def date2str(value: str, config: RenderConfig = None) -> str:
    config = config or RenderConfig()
    if not value:
        return ""
    if value.startswith("#"):
        return value
    if value.startswith("x"):
        value = value[1:]

    for fmt in DATE_FORMATS:
        try:
            date_obj = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return format_date(date_obj, format=config.date_format, locale=config.locale)
    return str(value)


def get_colors(person: Person, config: RenderConfig) -> Tuple[str, str]:
    """(fill_color, stroke_color) for a person box."""
    if person.is_male:
        fill = config.male_color
    elif person.is_female:
        fill = config.female_color
    else:
        fill = config.other_color
    return fill, "white"


def points_to_path(points) -> str:
    (x, y), rest = points[0], points[1:]
    return f"M {x},{y} " + " ".join(f"L {px},{py}" for px, py in rest)


def render_svg(
    result: LayoutResult, graph: GenogramGraph, path: str = None, config: RenderConfig = None
) -> svgwrite.Drawing:
    """Draw the layout; saves to path when given and returns the drawing."""
    config = config or RenderConfig()
    min_x, min_y, max_x, max_y = result.bounds()
    dx = config.margin - min_x
    dy = config.margin - min_y
    width = max_x - min_x + 2 * config.margin
    height = max_y - min_y + 2 * config.margin

    dwg = svgwrite.Drawing(path or "genogram.svg", size=(f"{width}px", f"{height}px"))
    font = load_font(config)

    # lines first, boxes on top
    for route in result.routes:
        points = [(x + dx, y + dy) for x, y in route.points]
        is_marriage = route.kind == "marriage"
        dwg.add(
            dwg.path(
                d=points_to_path(points),
                stroke=config.marriage_link_color if is_marriage else config.parent_link_color,
                fill="none",
                stroke_width=2.5 if is_marriage else 3,
            )
        )

    for key, placement in result.placements.items():
        person = graph.people.get(key)
        if person is None or person.suppressed:
            continue

        x, y = placement.x + dx, placement.y + dy
        fill, stroke = get_colors(person, config)
        box = dwg.rect(
            insert=(x, y),
            size=(placement.width, placement.height),
            fill=fill,
            stroke=stroke,
            stroke_width=1.5,
            rx=4,
        )
        if config.link_template:
            link = dwg.a(config.link_template.format(key=key), target="_blank")
            link.add(box)
            dwg.add(link)
        else:
            dwg.add(box)

        lines = wrap_name(person.name, font, config.max_text_width)
        text_y = y + config.text_margin + line_spacing / 2
        for line in lines:
            dwg.add(
                dwg.text(
                    line,
                    insert=(x + placement.width / 2, text_y),
                    text_anchor="middle",
                    dominant_baseline="middle",
                    font_size=f"{config.font_size}px",
                    font_family=config.text_font,
                    fill="black",
                    font_weight="bold",
                )
            )
            text_y += line_spacing

        for info in info_lines(person, config):
            dwg.add(
                dwg.text(
                    info,
                    insert=(x + placement.width / 2, text_y),
                    text_anchor="middle",
                    dominant_baseline="middle",
                    font_size=f"{config.font_size - 2}px",
                    font_family=config.text_font,
                    fill="#666666",
                )
            )
            text_y += line_spacing

    if path:
        dwg.save()
        logger.info(f"SVG file created: {path}")
    return dwg
