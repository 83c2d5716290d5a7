"""Named paint and text styles derived from a deck theme."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .fonts import FontName, LoadedFonts
from .models import ThemeConfig
from .utils import hex_to_rgb

logger = logging.getLogger(__name__)

STYLE_PREFIX = "Deck"


@dataclass(frozen=True)
class PaintStyle:
    name: str
    hex: str


@dataclass(frozen=True)
class TextStyle:
    name: str
    font: FontName
    font_size: float
    line_height: float


@dataclass
class DeckStyles:
    """Paint and text styles keyed by their short names (``Primary``, ``Heading/H1``)."""

    paint_styles: Dict[str, PaintStyle] = field(default_factory=dict)
    text_styles: Dict[str, TextStyle] = field(default_factory=dict)

    def paint(self, name: str) -> Optional[PaintStyle]:
        return self.paint_styles.get(name)

    def text(self, name: str) -> Optional[TextStyle]:
        return self.text_styles.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paintStyles": [
                {"name": style.name, "hex": style.hex, "color": vars(hex_to_rgb(style.hex))}
                for style in self.paint_styles.values()
            ],
            "textStyles": [
                {
                    "name": style.name,
                    "fontName": {"family": style.font.family, "style": style.font.style},
                    "fontSize": style.font_size,
                    "lineHeight": style.line_height,
                }
                for style in self.text_styles.values()
            ],
        }


# (short name, font role, size, line height)
TEXT_STYLE_DEFS = [
    ("Heading/H1", "heading", 64, 76),
    ("Heading/H2", "heading", 44, 52),
    ("Heading/H3", "heading", 32, 40),
    ("Body/Regular", "body", 24, 38),
    ("Body/Small", "body", 18, 28),
    ("Label/Uppercase", "body", 14, 20),
]


def build_theme_styles(theme: ThemeConfig, fonts: LoadedFonts) -> DeckStyles:
    """
    Build the deck's named paint and text styles.

    Args:
        theme: Deck theme
        fonts: Fonts already resolved for the theme

    Returns:
        DeckStyles with one paint style per palette colour and the six text styles
    """
    styles = DeckStyles()

    for key, hex_color in theme.colors.as_dict().items():
        short_name = key.capitalize()
        styles.paint_styles[short_name] = PaintStyle(name=f"{STYLE_PREFIX}/{short_name}", hex=hex_color.upper())

    for short_name, role, size, line_height in TEXT_STYLE_DEFS:
        font = fonts.heading if role == "heading" else fonts.body
        styles.text_styles[short_name] = TextStyle(
            name=f"{STYLE_PREFIX}/{short_name}",
            font=font,
            font_size=size,
            line_height=line_height,
        )

    logger.debug(
        f"Built {len(styles.paint_styles)} paint styles and {len(styles.text_styles)} text styles "
        f"for theme '{theme.name}'"
    )
    return styles
