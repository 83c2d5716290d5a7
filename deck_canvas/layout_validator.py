"""
Post-render layout validation.

Checks rendered frames against the canvas constraints: primary content stays
inside the padding, every colour comes from the theme palette, and full-bleed
images carrying text sit under a legibility overlay.
"""

import logging
from typing import Iterable, List, Optional, Set

from .canvas import FrameNode, GradientPaint, SceneNode, SolidPaint, TextNode
from .exceptions import LayoutViolationError
from .models import LayoutIssue, LayoutValidationConfig, SlideType, ThemeConfig
from .utils import BLACK, WHITE

logger = logging.getLogger(__name__)

# Nodes allowed to exceed the padded content region.
DECORATIVE_NODE_NAMES = {
    "Glow",
    "Dark Overlay",
    "Background Image",
    "Left Panel",
    "Right Panel",
    "Accent Line",
    "Divider",
    "Connector",
}

OVERLAY_NODE_NAME = "Dark Overlay"
FULL_BLEED_NODE_NAME = "Background Image"

# Slide types that may use pure white/black for legibility over images.
LEGIBILITY_SLIDE_TYPES = {SlideType.VISUAL_HUMOR.value}

BOUNDS_TOLERANCE = 0.5


class LayoutValidator:
    """Validates rendered frames against canvas and palette constraints."""

    def __init__(self, config: Optional[LayoutValidationConfig] = None):
        """
        Initialize the layout validator.

        Args:
            config: Validation configuration (defaults to lenient)
        """
        self.config = config or LayoutValidationConfig()

    def validate_frame(self, frame: FrameNode, theme: ThemeConfig) -> List[LayoutIssue]:
        """
        Validate a single rendered frame.

        Args:
            frame: Rendered slide frame
            theme: Theme the frame was rendered with

        Returns:
            List of issues found (empty when the frame is clean)
        """
        issues: List[LayoutIssue] = []
        slide_number = frame.slide_number or 0

        if self.config.check_bounds:
            issues.extend(self._check_bounds(frame, slide_number))
        if self.config.check_palette:
            issues.extend(self._check_palette(frame, theme, slide_number))
        if self.config.check_overlay:
            issues.extend(self._check_overlay(frame, slide_number))

        return issues

    def validate(self, frames: Iterable[FrameNode], theme: ThemeConfig) -> List[LayoutIssue]:
        """
        Validate every frame of a deck.

        Returns:
            All issues found, in slide order

        Raises:
            LayoutViolationError: In strict mode, when any issue is found
        """
        if not self.config.enabled or self.config.mode == "disabled":
            logger.debug("Layout validation disabled, skipping all checks.")
            return []

        all_issues: List[LayoutIssue] = []
        for frame in frames:
            all_issues.extend(self.validate_frame(frame, theme))

        if not all_issues:
            logger.info("Layout validation passed")
            return all_issues

        for issue in all_issues:
            logger.debug(f"Slide {issue.slide_number} [{issue.category}] {issue.message}")

        if self.config.mode == "strict":
            error = LayoutViolationError(
                f"{len(all_issues)} layout violation(s) found",
                slide_number=all_issues[0].slide_number,
            )
            for issue in all_issues:
                error.add_violation(
                    issue.category,
                    issue.message,
                    slide_number=issue.slide_number,
                    node_name=issue.node_name,
                )
            raise error

        logger.warning(f"Layout validation found {len(all_issues)} issue(s)")
        return all_issues

    # ── Checks ────────────────────────────────────────────────

    def _check_bounds(self, frame: FrameNode, slide_number: int) -> List[LayoutIssue]:
        canvas = frame.canvas
        low_x, high_x = canvas.padding, canvas.width - canvas.padding
        low_y, high_y = canvas.padding, canvas.height - canvas.padding

        issues = []
        for node in frame.children:
            if not node.visible or node.name in DECORATIVE_NODE_NAMES:
                continue
            if (
                node.x < low_x - BOUNDS_TOLERANCE
                or node.right > high_x + BOUNDS_TOLERANCE
                or node.y < low_y - BOUNDS_TOLERANCE
                or node.bottom > high_y + BOUNDS_TOLERANCE
            ):
                issues.append(
                    LayoutIssue(
                        slide_number=slide_number,
                        category="bounds",
                        severity="medium",
                        message=(
                            f"Node at ({node.x:.0f}, {node.y:.0f}, {node.width:.0f}x{node.height:.0f}) "
                            f"leaves the content region [{low_x}, {high_x}] x [{low_y}, {high_y}]"
                        ),
                        node_name=node.name,
                    )
                )
        return issues

    def _check_palette(self, frame: FrameNode, theme: ThemeConfig, slide_number: int) -> List[LayoutIssue]:
        allowed = self.allowed_colors(theme, frame.slide_type)
        issues = []

        for node in [frame, *frame.children]:
            for hex_color in paint_colors(node):
                if hex_color not in allowed:
                    issues.append(
                        LayoutIssue(
                            slide_number=slide_number,
                            category="palette",
                            severity="high",
                            message=f"Colour {hex_color} is not part of the theme palette",
                            node_name=node.name,
                        )
                    )
        return issues

    def _check_overlay(self, frame: FrameNode, slide_number: int) -> List[LayoutIssue]:
        children = frame.children
        image_index = next(
            (i for i, node in enumerate(children) if node.name == FULL_BLEED_NODE_NAME and node.visible),
            None,
        )
        if image_index is None:
            return []

        above = children[image_index + 1:]
        if not any(isinstance(node, TextNode) and node.visible for node in above):
            return []

        overlay_opacity = max(
            (overlay_strength(node) for node in above if node.name == OVERLAY_NODE_NAME),
            default=None,
        )
        if overlay_opacity is not None and overlay_opacity >= self.config.min_overlay_opacity:
            return []

        current = "none" if overlay_opacity is None else f"{round(overlay_opacity * 100)}%"
        return [
            LayoutIssue(
                slide_number=slide_number,
                category="overlay",
                severity="high",
                message=(
                    f"Full-bleed image with text requires at least "
                    f"{round(self.config.min_overlay_opacity * 100)}% overlay (current: {current})"
                ),
                node_name=FULL_BLEED_NODE_NAME,
            )
        ]

    @staticmethod
    def allowed_colors(theme: ThemeConfig, slide_type: Optional[str] = None) -> Set[str]:
        allowed = {hex_color.upper() for hex_color in theme.colors.as_dict().values()}
        if slide_type in LEGIBILITY_SLIDE_TYPES:
            allowed.update({WHITE, BLACK})
        return allowed


def paint_colors(node: SceneNode) -> List[str]:
    """Upper-case hex colours used by a node's solid and gradient paints."""
    colors = []
    for paint in [*node.fills, *node.strokes]:
        if isinstance(paint, SolidPaint):
            colors.append(paint.hex.upper())
        elif isinstance(paint, GradientPaint):
            colors.extend(stop.hex.upper() for stop in paint.stops)
    return colors


def overlay_strength(node: SceneNode) -> float:
    """Strongest effective alpha of an overlay node."""
    alphas = [
        stop.alpha
        for paint in node.fills
        if isinstance(paint, GradientPaint)
        for stop in paint.stops
    ]
    alphas.extend(1.0 for paint in node.fills if isinstance(paint, SolidPaint))
    return node.opacity * max(alphas, default=0.0)
