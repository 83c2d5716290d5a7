"""Background composition: solid fills, gradients, glows and overlays."""

import math
from typing import Optional

from .canvas import EllipseNode, FrameNode, GradientPaint, GradientStop, RectangleNode
from .utils import BLACK, hex_to_rgb, set_fill


def apply_solid_background(frame: FrameNode, color: str) -> None:
    """Apply a solid background fill to a frame."""
    set_fill(frame, color)


def apply_gradient_background(
    frame: FrameNode,
    start_color: str,
    end_color: str,
    angle: float = 135,
) -> None:
    """Apply a linear gradient background running at ``angle`` degrees."""
    rad = math.radians(angle)
    cos = math.cos(rad)
    sin = math.sin(rad)

    frame.fills = [
        GradientPaint(
            type="GRADIENT_LINEAR",
            stops=[
                GradientStop(position=0, color=hex_to_rgb(start_color), hex=start_color.upper()),
                GradientStop(position=1, color=hex_to_rgb(end_color), hex=end_color.upper()),
            ],
            transform=[
                [cos, sin, 0.5 - cos * 0.5 - sin * 0.5],
                [-sin, cos, 0.5 + sin * 0.5 - cos * 0.5],
            ],
            angle=angle,
        )
    ]


def add_dark_overlay(frame: FrameNode, opacity: float = 0.5) -> RectangleNode:
    """Add a full-frame black gradient overlay so text stays legible over images."""
    overlay = RectangleNode(name="Dark Overlay", x=0, y=0)
    overlay.resize(frame.width, frame.height)

    black = hex_to_rgb(BLACK)
    overlay.fills = [
        GradientPaint(
            type="GRADIENT_LINEAR",
            stops=[
                GradientStop(position=0, color=black, hex=BLACK, alpha=opacity * 0.3),
                GradientStop(position=1, color=black, hex=BLACK, alpha=opacity),
            ],
            transform=[[0, 1, 0], [-1, 0, 1]],
            angle=90,
        )
    ]

    frame.append_child(overlay)
    return overlay


def add_radial_glow(
    frame: FrameNode,
    color: str,
    x: Optional[float] = None,
    y: Optional[float] = None,
    size: Optional[float] = None,
    opacity: Optional[float] = None,
) -> EllipseNode:
    """
    Add a soft radial glow centred at a fractional frame position.

    Args:
        frame: Target frame
        color: Glow colour
        x, y: Centre as a fraction of the frame width/height (defaults 0.3, 0.5)
        size: Glow diameter in pixels (default 600)
        opacity: Alpha at the glow centre (default 0.15)
    """
    size = 600 if size is None else size
    glow = EllipseNode(name="Glow")
    glow.resize(size, size)
    glow.x = (0.3 if x is None else x) * frame.width - size / 2
    glow.y = (0.5 if y is None else y) * frame.height - size / 2

    rgb = hex_to_rgb(color)
    glow.fills = [
        GradientPaint(
            type="GRADIENT_RADIAL",
            stops=[
                GradientStop(position=0, color=rgb, hex=color.upper(), alpha=0.15 if opacity is None else opacity),
                GradientStop(position=1, color=rgb, hex=color.upper(), alpha=0),
            ],
        )
    ]

    frame.append_child(glow)
    return glow
