"""Dispatch from slide type strings to layout functions."""

import logging
from typing import Callable, Dict

from . import layouts
from .models import SlideType

logger = logging.getLogger(__name__)

LayoutFunction = Callable[..., None]

LAYOUT_REGISTRY: Dict[str, LayoutFunction] = {
    SlideType.TITLE.value: layouts.title_layout,
    SlideType.CONTENT.value: layouts.content_layout,
    SlideType.PROBLEM.value: layouts.problem_layout,
    SlideType.SOLUTION.value: layouts.solution_layout,
    SlideType.COMPARISON.value: layouts.comparison_layout,
    SlideType.PROCESS.value: layouts.process_layout,
    SlideType.DATA_METRICS.value: layouts.data_metrics_layout,
    SlideType.CTA.value: layouts.cta_layout,
    SlideType.QUOTE.value: layouts.quote_layout,
    SlideType.ARCHITECTURE.value: layouts.architecture_layout,
    SlideType.TEAM.value: layouts.team_layout,
    SlideType.TIMELINE.value: layouts.timeline_layout,
    SlideType.SECTION_DIVIDER.value: layouts.section_divider_layout,
    SlideType.METRICS_HIGHLIGHT.value: layouts.metrics_highlight_layout,
    SlideType.FEATURE_GRID.value: layouts.feature_grid_layout,
    SlideType.PRODUCT_SHOWCASE.value: layouts.product_showcase_layout,
    SlideType.LOGO_WALL.value: layouts.logo_wall_layout,
    SlideType.MARKET_SIZING.value: layouts.market_sizing_layout,
    SlideType.SPLIT_STATEMENT.value: layouts.split_statement_layout,
    SlideType.VISUAL_HUMOR.value: layouts.visual_humor_layout,
    SlideType.OUTLINE.value: layouts.outline_layout,
}

DEFAULT_LAYOUT: LayoutFunction = layouts.content_layout


def get_layout_for_type(slide_type) -> LayoutFunction:
    """
    Return the layout function for a slide type.

    Never fails: unknown strings, and values that are not strings at all,
    get the CONTENT layout.

    Args:
        slide_type: Slide type string or SlideType member

    Returns:
        Layout function
    """
    key = slide_type.value if isinstance(slide_type, SlideType) else slide_type
    layout = LAYOUT_REGISTRY.get(key) if isinstance(key, str) else None
    if layout is None:
        logger.debug(f"No layout registered for slide type {slide_type!r}, using CONTENT")
        return DEFAULT_LAYOUT
    return layout


def registered_types():
    """Slide types with a dedicated layout, in registry order."""
    return list(LAYOUT_REGISTRY)
