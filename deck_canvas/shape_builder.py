"""Reusable shapes: dividers, bordered cards, circles and connectors."""

import math
from typing import Optional

from .canvas import EllipseNode, FrameNode, LineNode, RectangleNode
from .utils import set_fill, set_stroke


def create_divider_line(
    parent: FrameNode,
    x: float,
    y: float,
    w: float,
    color: str,
    thickness: float = 3,
) -> RectangleNode:
    """Create a horizontal divider line."""
    line = RectangleNode(name="Divider", x=x, y=y)
    line.resize(w, thickness)
    set_fill(line, color)
    parent.append_child(line)
    return line


def create_container_card(
    parent: FrameNode,
    x: float,
    y: float,
    w: float,
    h: float,
    fill: str,
    corner_radius: float = 12,
    opacity: Optional[float] = None,
    border_color: Optional[str] = None,
    border_width: float = 2,
    name: str = "Card",
) -> RectangleNode:
    """Create a card/container shape with an optional border."""
    rect = RectangleNode(name=name, x=x, y=y)
    rect.resize(w, h)
    set_fill(rect, fill)
    rect.corner_radius = corner_radius

    if opacity is not None:
        rect.opacity = opacity

    if border_color:
        set_stroke(rect, border_color, border_width)

    parent.append_child(rect)
    return rect


def create_circle(
    parent: FrameNode,
    x: float,
    y: float,
    size: float,
    fill: str,
    opacity: Optional[float] = None,
    name: str = "Circle",
) -> EllipseNode:
    """Create a decorative circle (timeline nodes, avatars, step markers)."""
    circle = EllipseNode(name=name, x=x, y=y)
    circle.resize(size, size)
    set_fill(circle, fill)
    if opacity is not None:
        circle.opacity = opacity
    parent.append_child(circle)
    return circle


def create_connector(
    parent: FrameNode,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    color: str,
    thickness: float = 2,
) -> LineNode:
    """Create a straight connector line between two points."""
    line = LineNode(name="Connector", x=x1, y=y1)
    dx = x2 - x1
    dy = y2 - y1
    line.resize(math.hypot(dx, dy), 0)
    line.rotation = -math.degrees(math.atan2(dy, dx))
    set_stroke(line, color, thickness)
    parent.append_child(line)
    return line
