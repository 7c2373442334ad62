from dataclasses import dataclass

# Layout defaults
spouse_spacing = 30
layer_spacing = 30
column_spacing = 10
direction = 90
node_width = 100
node_height = 40
crossing_iterations = 100

# Render defaults
male_color = "#90CAF9"
female_color = "#F48FB1"
other_color = "orange"
parent_link_color = "#424242"
marriage_link_color = "#6a0dad"
text_font = "Georgia, 'Times New Roman', Times, serif"
font_size = 12
text_margin = 10
max_text_width = 80
date_format = "d. MMM y"


@dataclass
class LayoutConfig:
    spouse_spacing: float = spouse_spacing
    layer_spacing: float = layer_spacing
    column_spacing: float = column_spacing
    # 90 = top-down, 0 = left-to-right, 180/270 mirror those
    direction: int = direction
    node_width: float = node_width
    node_height: float = node_height
    crossing_iterations: int = crossing_iterations

    def __post_init__(self):
        if self.direction not in (0, 90, 180, 270):
            raise ValueError(f"direction must be 0, 90, 180 or 270, not {self.direction}")

    @property
    def horizontal(self) -> bool:
        return self.direction in (0, 180)


@dataclass
class RenderConfig:
    male_color: str = male_color
    female_color: str = female_color
    other_color: str = other_color
    parent_link_color: str = parent_link_color
    marriage_link_color: str = marriage_link_color
    text_font: str = text_font
    font_size: int = font_size
    # path to a .ttf used for measuring names; Pillow's default font otherwise
    font_path: str = None
    text_margin: float = text_margin
    max_text_width: float = max_text_width
    locale: str = "en"
    date_format: str = date_format
    # e.g. "https://example.org/person/{key}", wraps each box in a link
    link_template: str = None
    margin: float = 20
