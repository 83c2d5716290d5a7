"""Colour helpers and the shared text/shape creation primitives."""

from typing import Optional

from .canvas import RGB, FrameNode, RectangleNode, SceneNode, SolidPaint, TextNode
from .fonts import FontName
from .models import CanvasConfig

# Defaults of CanvasConfig; layouts read the frame's canvas instead.
SLIDE_W = 1920
SLIDE_H = 1080
PADDING = 80
FRAME_GAP = 320

WHITE = "#FFFFFF"
BLACK = "#000000"


# ── Color Helpers ─────────────────────────────────────────


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert a 6-digit hex colour to a normalized RGB triple. Input is not validated."""
    c = hex_color.replace("#", "")
    return RGB(
        r=int(c[0:2], 16) / 255,
        g=int(c[2:4], 16) / 255,
        b=int(c[4:6], 16) / 255,
    )


def solid(hex_color: str) -> SolidPaint:
    return SolidPaint(color=hex_to_rgb(hex_color), hex=hex_color.upper())


def set_fill(node: SceneNode, hex_color: str) -> None:
    node.fills = [solid(hex_color)]


def set_fill_with_opacity(node: SceneNode, hex_color: str, opacity: float) -> None:
    node.fills = [solid(hex_color)]
    node.opacity = opacity


def set_stroke(node: SceneNode, hex_color: str, weight: float = 1.0) -> None:
    node.strokes = [solid(hex_color)]
    node.stroke_weight = weight


# ── Text Creation ─────────────────────────────────────────


def create_styled_text(
    parent: FrameNode,
    text: str,
    font: FontName,
    font_size: float,
    color: str,
    x: float,
    y: float,
    w: float,
    align: str = "LEFT",
    line_height: Optional[float] = None,
    opacity: Optional[float] = None,
    letter_spacing: Optional[float] = None,
    auto_resize: bool = True,
) -> TextNode:
    """
    Create a text node and append it to the parent frame.

    Args:
        parent: Frame receiving the node
        text: Text content
        font: Resolved font handle
        font_size: Font size in pixels
        color: Hex colour from the theme palette
        x, y, w: Position and fixed width
        align: LEFT, CENTER or RIGHT
        line_height: Line height in pixels
        opacity: Node opacity (0-1)
        letter_spacing: Letter spacing in pixels
        auto_resize: Grow the height to fit the text

    Returns:
        The created TextNode
    """
    node = TextNode(
        name=text,
        characters=text,
        font_family=font.family,
        font_style=font.style,
        font_size=font_size,
    )
    set_fill(node, color)

    if line_height:
        node.line_height = line_height
    if opacity is not None:
        node.opacity = opacity
    if letter_spacing:
        node.letter_spacing = letter_spacing

    node.x = x
    node.y = y
    node.resize(w, font_size * 2)
    node.text_align_horizontal = align

    if auto_resize:
        node.text_auto_resize = "HEIGHT"
        node.height = node.estimated_height()

    parent.append_child(node)
    return node


# ── Shape Creation ────────────────────────────────────────


def create_accent_line(
    parent: FrameNode,
    x: float,
    y: float,
    w: float,
    h: float,
    color: str,
    corner_radius: float = 0,
) -> RectangleNode:
    rect = RectangleNode(name="Accent Line", x=x, y=y)
    rect.resize(w, h)
    set_fill(rect, color)
    if corner_radius:
        rect.corner_radius = corner_radius
    parent.append_child(rect)
    return rect


def create_card(
    parent: FrameNode,
    x: float,
    y: float,
    w: float,
    h: float,
    fill: str,
    corner_radius: Optional[float] = None,
    opacity: Optional[float] = None,
    name: str = "Card",
) -> RectangleNode:
    rect = RectangleNode(name=name, x=x, y=y)
    rect.resize(w, h)
    set_fill(rect, fill)
    rect.corner_radius = 12 if corner_radius is None else corner_radius
    if opacity is not None:
        rect.opacity = opacity
    parent.append_child(rect)
    return rect


# ── Geometry ──────────────────────────────────────────────


def clamp_x(x: float, w: float, canvas: CanvasConfig) -> float:
    """Shift a box horizontally so it stays inside the padded content region."""
    low = canvas.padding
    high = canvas.width - canvas.padding - w
    if high < low:
        return low
    return min(max(x, low), high)
