"""Per-slide-type layout functions.

Every layout has the signature ``layout(frame, slide, theme, fonts, context)``
and paints in a fixed order: background, decoration, title, body, then any
image. Geometry is read from ``frame.canvas`` so one process can render
several canvas sizes. Colours come only from ``theme.colors``.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .background_builder import (
    add_dark_overlay,
    add_radial_glow,
    apply_gradient_background,
    apply_solid_background,
)
from .canvas import FrameNode
from .fonts import LoadedFonts
from .image_builder import ImageGeometry, place_background_image, place_image_with_shadow
from .image_fetcher import ImageFetcher
from .legacy_parser import (
    initials,
    lines_from_blocks,
    parse_features,
    parse_logos,
    parse_milestones,
    parse_steps,
    parse_team_member,
    split_comparison,
    strip_bullet_prefix,
    strip_number_prefix,
)
from .models import MetricsBlock, SlideDocument, ThemeConfig
from .shape_builder import create_circle, create_connector, create_container_card, create_divider_line
from .text_builder import render_structured_body
from .theme_builder import DeckStyles
from .utils import WHITE, clamp_x, create_accent_line, create_card, create_styled_text, set_stroke

logger = logging.getLogger(__name__)

# Minimum vertical advance between plain body lines.
LINE_STEP = 42
LIST_STEP = 38


@dataclass
class LayoutContext:
    """Deck-wide collaborators shared by every layout call."""

    styles: Optional[DeckStyles] = None
    image_fetcher: Optional[ImageFetcher] = None


def _dims(frame: FrameNode) -> Tuple[int, int, int]:
    canvas = frame.canvas
    return canvas.width, canvas.height, canvas.padding


def _body_lines(slide: SlideDocument) -> List[str]:
    """Legacy body lines, recovered from the structured body when absent."""
    if slide.body_lines:
        return list(slide.body_lines)
    return lines_from_blocks(slide.structured_body)


def _plain_lines(
    frame: FrameNode,
    lines: Sequence[str],
    theme: ThemeConfig,
    fonts: LoadedFonts,
    x: float,
    y: float,
    w: float,
    prefix: str = "",
    font_size: float = 22,
    line_height: float = 34,
    step: float = LINE_STEP,
) -> float:
    """Render body lines one under another and return the next free Y."""
    for line in lines:
        node = create_styled_text(
            frame,
            text=f"{prefix}{line}",
            font=fonts.body,
            font_size=font_size,
            color=theme.colors.text,
            x=x,
            y=y,
            w=w,
            line_height=line_height,
            opacity=0.85,
        )
        y += max(step, node.height + 8)
    return y


def _centered_heading(
    frame: FrameNode,
    slide: SlideDocument,
    theme: ThemeConfig,
    fonts: LoadedFonts,
    font_size: float = 40,
    line_height: float = 48,
    accent_offset: float = 56,
) -> None:
    """Centred title with a short accent line under it."""
    W, H, P = _dims(frame)
    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=font_size,
        color=theme.colors.text,
        x=P,
        y=P,
        w=W - P * 2,
        align="CENTER",
        line_height=line_height,
    )
    create_accent_line(frame, x=(W - 60) / 2, y=P + accent_offset, w=60, h=3, color=theme.colors.accent, corner_radius=2)


def _left_heading(
    frame: FrameNode,
    slide: SlideDocument,
    theme: ThemeConfig,
    fonts: LoadedFonts,
    w: float,
    font_size: float = 40,
    line_height: float = 48,
    accent_offset: float = 56,
) -> None:
    W, H, P = _dims(frame)
    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=font_size,
        color=theme.colors.text,
        x=P,
        y=P,
        w=w,
        line_height=line_height,
    )
    create_accent_line(frame, x=P, y=P + accent_offset, w=50, h=3, color=theme.colors.accent, corner_radius=2)


def _grid_origin(frame: FrameNode, total_w: float, total_h: float, top: float) -> Tuple[float, float]:
    """Centre a grid horizontally and vertically in the area below ``top``."""
    W, H, P = _dims(frame)
    start_x = max(P, (W - total_w) / 2)
    start_y = max(top, top + (H - P - top - total_h) / 2)
    return start_x, start_y


# ── Title and section slides ──────────────────────────────


def title_layout(frame, slide, theme, fonts, context):
    """Centred big title with subtitle, accent line and radial glow."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_gradient_background(frame, colors.background, colors.surface, 160)
    add_radial_glow(frame, colors.primary, x=0.5, y=0.4, size=800, opacity=0.08)

    anchor_y = H * 0.35
    create_accent_line(frame, x=(W - 80) / 2, y=anchor_y, w=80, h=4, color=colors.accent, corner_radius=2)

    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=64,
        color=colors.text,
        x=P,
        y=anchor_y + 24,
        w=W - P * 2,
        align="CENTER",
        line_height=76,
    )

    lines = _body_lines(slide)
    if lines and lines[0]:
        create_styled_text(
            frame,
            text=lines[0],
            font=fonts.body,
            font_size=28,
            color=colors.text,
            x=P + 100,
            y=anchor_y + 120,
            w=W - P * 2 - 200,
            align="CENTER",
            line_height=40,
            opacity=0.7,
        )

    create_accent_line(frame, x=(W - 200) / 2, y=H - 100, w=200, h=3, color=colors.primary, corner_radius=2)

    if slide.section_label:
        create_styled_text(
            frame,
            text=slide.section_label.upper(),
            font=fonts.body,
            font_size=14,
            color=colors.primary,
            x=P,
            y=anchor_y - 40,
            w=W - P * 2,
            align="CENTER",
            letter_spacing=3,
            opacity=0.6,
        )


def section_divider_layout(frame, slide, theme, fonts, context):
    W, H, P = _dims(frame)
    colors = theme.colors
    has_label = bool(slide.section_label)
    anchor_y = H * 0.38

    apply_solid_background(frame, colors.surface)
    add_radial_glow(frame, colors.primary, x=0.5, y=0.5, size=700, opacity=0.06)

    if has_label:
        create_styled_text(
            frame,
            text=slide.section_label.upper(),
            font=fonts.body,
            font_size=16,
            color=colors.primary,
            x=P,
            y=anchor_y,
            w=W - P * 2,
            align="CENTER",
            letter_spacing=4,
            opacity=0.6,
        )

    create_accent_line(
        frame, x=(W - 60) / 2, y=anchor_y + (32 if has_label else 0), w=60, h=3, color=colors.accent, corner_radius=2
    )

    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=56,
        color=colors.text,
        x=P + 60,
        y=anchor_y + (52 if has_label else 20),
        w=W - P * 2 - 120,
        align="CENTER",
        line_height=68,
    )

    lines = _body_lines(slide)
    if lines and lines[0]:
        create_styled_text(
            frame,
            text=lines[0],
            font=fonts.body,
            font_size=22,
            color=colors.text,
            x=P + 160,
            y=anchor_y + (135 if has_label else 103),
            w=W - P * 2 - 320,
            align="CENTER",
            line_height=34,
            opacity=0.6,
        )


def outline_layout(frame, slide, theme, fonts, context):
    """Table-of-contents list with zero-padded numbers and subtle dividers."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    add_radial_glow(frame, colors.primary, x=0.8, y=0.3, size=500, opacity=0.04)
    _left_heading(frame, slide, theme, fonts, w=W - P * 2, font_size=44, line_height=52, accent_offset=60)

    lines = _body_lines(slide)
    y = P + 90
    for i, line in enumerate(lines):
        create_styled_text(
            frame,
            text=f"{i + 1:02d}",
            font=fonts.heading_bold,
            font_size=20,
            color=colors.primary,
            x=P,
            y=y,
            w=60,
            opacity=0.5,
        )
        create_styled_text(
            frame,
            text=strip_number_prefix(line),
            font=fonts.heading,
            font_size=24,
            color=colors.text,
            x=P + 60,
            y=y,
            w=W - P * 2 - 60,
            line_height=32,
        )
        if i < len(lines) - 1:
            create_accent_line(frame, x=P + 60, y=y + 40, w=W - P * 2 - 60, h=1, color=colors.border)
        y += 56


# ── Text and image slides ─────────────────────────────────


def content_layout(frame, slide, theme, fonts, context):
    """Standard split: text on the left 55%, optional image on the right."""
    W, H, P = _dims(frame)
    colors = theme.colors
    text_w = W * 0.55 - P
    img_x = W * 0.57

    apply_solid_background(frame, colors.background)
    _left_heading(frame, slide, theme, fonts, w=text_w, font_size=44, line_height=52, accent_offset=62)

    if slide.has_structured_body:
        render_structured_body(frame, slide.structured_body, theme, fonts, P + 80, text_w)
    else:
        _plain_lines(frame, slide.body_lines, theme, fonts, x=P, y=P + 84, w=text_w)

    if slide.image_url:
        place_image_with_shadow(
            frame,
            slide.image_url,
            ImageGeometry(x=img_x, y=P + 20, w=W - img_x - P, h=H - P * 2 - 40, corner_radius=16),
            colors.surface,
            fetcher=context.image_fetcher,
        )


def problem_layout(frame, slide, theme, fonts, context):
    W, H, P = _dims(frame)
    colors = theme.colors
    text_w = W * 0.52 - P
    img_x = W * 0.55
    text_x = P + 8

    apply_solid_background(frame, colors.background)
    create_accent_line(frame, x=P - 8, y=P, w=4, h=H - P * 2, color=colors.error, corner_radius=2)

    create_styled_text(
        frame,
        text="THE PROBLEM",
        font=fonts.body,
        font_size=14,
        color=colors.error,
        x=text_x,
        y=P,
        w=text_w,
        letter_spacing=3,
        opacity=0.7,
    )
    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=40,
        color=colors.text,
        x=text_x,
        y=P + 32,
        w=text_w - 16,
        line_height=50,
    )
    create_accent_line(frame, x=text_x, y=P + 96, w=50, h=3, color=colors.accent, corner_radius=2)

    if slide.has_structured_body:
        render_structured_body(frame, slide.structured_body, theme, fonts, P + 116, text_w - 16, text_x)
    else:
        _plain_lines(frame, slide.body_lines, theme, fonts, x=text_x, y=P + 116, w=text_w - 16, prefix="• ")

    if slide.image_url:
        place_image_with_shadow(
            frame,
            slide.image_url,
            ImageGeometry(x=img_x, y=P + 20, w=W - img_x - P, h=H - P * 2 - 40, corner_radius=16),
            colors.surface,
            fetcher=context.image_fetcher,
        )


def solution_layout(frame, slide, theme, fonts, context):
    """Mirror of the problem slide: image left, text right."""
    W, H, P = _dims(frame)
    colors = theme.colors
    img_w = W * 0.42 - P
    text_x = W * 0.45
    text_w = W - text_x - P

    apply_solid_background(frame, colors.background)
    add_radial_glow(frame, colors.success, x=0.2, y=0.4, size=500, opacity=0.05)

    if slide.image_url:
        place_image_with_shadow(
            frame,
            slide.image_url,
            ImageGeometry(x=P, y=P + 20, w=img_w, h=H - P * 2 - 40, corner_radius=16),
            colors.surface,
            fetcher=context.image_fetcher,
        )

    create_styled_text(
        frame,
        text="THE SOLUTION",
        font=fonts.body,
        font_size=14,
        color=colors.success,
        x=text_x,
        y=P,
        w=text_w,
        letter_spacing=3,
        opacity=0.7,
    )
    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=40,
        color=colors.text,
        x=text_x,
        y=P + 32,
        w=text_w,
        line_height=50,
    )
    create_accent_line(frame, x=text_x, y=P + 96, w=50, h=3, color=colors.accent, corner_radius=2)

    if slide.has_structured_body:
        render_structured_body(frame, slide.structured_body, theme, fonts, P + 116, text_w, text_x)
    else:
        _plain_lines(frame, slide.body_lines, theme, fonts, x=text_x, y=P + 116, w=text_w, prefix="✓ ")


def architecture_layout(frame, slide, theme, fonts, context):
    """Full-width diagram image; body content takes its place when there is no image."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _left_heading(frame, slide, theme, fonts, w=W - P * 2, font_size=36, line_height=44, accent_offset=50)

    if slide.image_url:
        img_y = P + 70
        place_image_with_shadow(
            frame,
            slide.image_url,
            ImageGeometry(x=P, y=img_y, w=W - P * 2, h=H - img_y - P - 20, corner_radius=12),
            colors.surface,
            fetcher=context.image_fetcher,
        )
    elif slide.has_structured_body:
        render_structured_body(frame, slide.structured_body, theme, fonts, P + 74, W - P * 2)
    else:
        _plain_lines(frame, slide.body_lines, theme, fonts, x=P, y=P + 74, w=W - P * 2)


def product_showcase_layout(frame, slide, theme, fonts, context):
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    add_radial_glow(frame, colors.primary, x=0.4, y=0.5, size=700, opacity=0.06)
    _left_heading(frame, slide, theme, fonts, w=W * 0.5)

    lines = [strip_bullet_prefix(line) for line in _body_lines(slide)]
    _plain_lines(
        frame, lines, theme, fonts, x=P, y=P + 80, w=W * 0.42, prefix="✓ ", font_size=20, line_height=30, step=LIST_STEP
    )

    if slide.image_url:
        img_w = W * 0.48
        place_image_with_shadow(
            frame,
            slide.image_url,
            ImageGeometry(x=W - P - img_w, y=P + 20, w=img_w, h=H - P * 2 - 40, corner_radius=20),
            colors.surface,
            fetcher=context.image_fetcher,
        )


def quote_layout(frame, slide, theme, fonts, context):
    """The title is the quote; the first two body lines are attribution and context."""
    W, H, P = _dims(frame)
    colors = theme.colors
    text_x = P + 120
    text_w = W - P * 2 - 240

    apply_solid_background(frame, colors.background)
    add_radial_glow(frame, colors.primary, x=0.3, y=0.3, size=600, opacity=0.05)

    create_styled_text(
        frame,
        text="“",
        font=fonts.heading_bold,
        font_size=200,
        color=colors.primary,
        x=P + 40,
        y=H * 0.2,
        w=200,
        opacity=0.2,
    )
    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading,
        font_size=40,
        color=colors.text,
        x=text_x,
        y=H * 0.34,
        w=text_w,
        line_height=56,
    )

    attr_y = H * 0.66
    create_accent_line(frame, x=text_x, y=attr_y, w=50, h=3, color=colors.accent, corner_radius=2)

    lines = _body_lines(slide)
    attribution = lines[0] if len(lines) > 0 else ""
    quote_context = lines[1] if len(lines) > 1 else ""

    if attribution:
        create_styled_text(
            frame,
            text=attribution,
            font=fonts.body,
            font_size=20,
            color=colors.text,
            x=text_x,
            y=attr_y + 16,
            w=text_w,
            opacity=0.6,
        )
    if quote_context:
        create_styled_text(
            frame,
            text=quote_context,
            font=fonts.body,
            font_size=16,
            color=colors.text,
            x=text_x,
            y=attr_y + 48,
            w=text_w,
            opacity=0.45,
        )


def split_statement_layout(frame, slide, theme, fonts, context):
    W, H, P = _dims(frame)
    colors = theme.colors
    half = W / 2
    anchor_y = H * 0.3

    create_card(frame, x=0, y=0, w=half, h=H, fill=colors.primary, corner_radius=0, name="Left Panel")
    create_card(frame, x=half, y=0, w=half, h=H, fill=colors.background, corner_radius=0, name="Right Panel")
    add_radial_glow(frame, colors.accent, x=0.25, y=0.5, size=500, opacity=0.08)

    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=48,
        color=colors.background,
        x=P,
        y=anchor_y,
        w=half - P * 2,
        line_height=60,
    )

    _plain_lines(frame, _body_lines(slide), theme, fonts, x=half + P, y=anchor_y, w=half - P * 2, step=44)

    if slide.section_label:
        create_styled_text(
            frame,
            text=slide.section_label.upper(),
            font=fonts.body,
            font_size=14,
            color=colors.background,
            x=P,
            y=anchor_y - 36,
            w=half - P * 2,
            letter_spacing=3,
            opacity=0.5,
        )


def visual_humor_layout(frame, slide, theme, fonts, context):
    """Full-bleed image under a dark overlay with a white title and punchline."""
    W, H, P = _dims(frame)

    apply_solid_background(frame, theme.colors.background)
    if slide.image_url:
        place_background_image(frame, slide.image_url, opacity=0.85, fetcher=context.image_fetcher)

    # The overlay must sit above the image for legibility.
    add_dark_overlay(frame, 0.6)

    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=56,
        color=WHITE,
        x=P + 60,
        y=H * 0.4,
        w=W - P * 2 - 120,
        align="CENTER",
        line_height=68,
    )

    lines = _body_lines(slide)
    if lines and lines[0]:
        create_styled_text(
            frame,
            text=lines[0],
            font=fonts.body,
            font_size=24,
            color=WHITE,
            x=P + 120,
            y=H * 0.4 + 90,
            w=W - P * 2 - 240,
            align="CENTER",
            line_height=36,
            opacity=0.8,
        )


# ── Multi-item slides ─────────────────────────────────────


def comparison_layout(frame, slide, theme, fonts, context):
    """Two bordered cards split at a ``vs`` line (or the midpoint) with a VS badge."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _centered_heading(frame, slide, theme, fonts)

    columns = split_comparison(_body_lines(slide))

    col_w = (W - P * 2 - 40) / 2
    card_y = P + 80
    card_h = H - card_y - P
    right_x = P + col_w + 40

    for card_x, title, items, border, border_width, prefix in (
        (P, columns.left_title, columns.left, colors.border, 1, "• "),
        (right_x, columns.right_title, columns.right, colors.primary, 2, "✓ "),
    ):
        create_container_card(
            frame,
            x=card_x,
            y=card_y,
            w=col_w,
            h=card_h,
            fill=colors.surface,
            corner_radius=16,
            border_color=border,
            border_width=border_width,
        )
        create_styled_text(
            frame,
            text=title,
            font=fonts.heading_bold,
            font_size=24,
            color=colors.primary,
            x=card_x + 24,
            y=card_y + 24,
            w=col_w - 48,
        )
        _plain_lines(
            frame,
            items,
            theme,
            fonts,
            x=card_x + 24,
            y=card_y + 68,
            w=col_w - 48,
            prefix=prefix,
            font_size=20,
            line_height=30,
            step=LIST_STEP,
        )

    vs_size = 48
    vs_circle = create_circle(
        frame, x=W / 2 - vs_size / 2, y=card_y + card_h / 2 - vs_size / 2, size=vs_size, fill=colors.background, name="VS Circle"
    )
    set_stroke(vs_circle, colors.border, 1)

    create_styled_text(
        frame,
        text="VS",
        font=fonts.heading_bold,
        font_size=14,
        color=colors.text,
        x=W / 2 - vs_size / 2,
        y=card_y + card_h / 2 - 10,
        w=vs_size,
        align="CENTER",
        opacity=0.5,
    )


def process_layout(frame, slide, theme, fonts, context):
    """Numbered step circles joined by connectors, with label and description under each."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _centered_heading(frame, slide, theme, fonts)

    steps = parse_steps(_body_lines(slide))
    count = len(steps)
    if count == 0:
        return

    step_w = 200.0
    gap = 60.0
    total_w = count * step_w + (count - 1) * gap
    if total_w > W - P * 2:
        scale = (W - P * 2) / total_w
        step_w *= scale
        gap *= scale
        total_w = W - P * 2
        logger.debug(f"Scaled {count} process steps to width {step_w:.1f}")

    node_size = min(56.0, step_w)
    start_x = (W - total_w) / 2
    center_y = P + 80 + (H - P * 2 - 80) / 2
    node_y = center_y - node_size / 2 - 40

    for i, step in enumerate(steps):
        cx = start_x + i * (step_w + gap) + step_w / 2
        node_x = cx - node_size / 2

        if i < count - 1:
            next_cx = start_x + (i + 1) * (step_w + gap) + step_w / 2
            x1 = cx + node_size / 2 + 4
            x2 = next_cx - node_size / 2 - 4
            if x2 > x1:
                create_connector(frame, x1, node_y + node_size / 2, x2, node_y + node_size / 2, colors.border, 2)

        create_circle(frame, x=node_x, y=node_y, size=node_size, fill=colors.primary)
        create_styled_text(
            frame,
            text=str(i + 1),
            font=fonts.heading_bold,
            font_size=24,
            color=colors.background,
            x=node_x,
            y=node_y + 14,
            w=node_size,
            align="CENTER",
        )
        create_styled_text(
            frame,
            text=step.label,
            font=fonts.heading_bold,
            font_size=18,
            color=colors.text,
            x=cx - step_w / 2,
            y=node_y + node_size + 16,
            w=step_w,
            align="CENTER",
        )
        create_styled_text(
            frame,
            text=step.description,
            font=fonts.body,
            font_size=14,
            color=colors.text,
            x=cx - step_w / 2,
            y=node_y + node_size + 44,
            w=step_w,
            align="CENTER",
            line_height=20,
            opacity=0.7,
        )


DATA_METRIC_GAP = 24
DATA_METRIC_MAX_COLUMNS = 4


def data_metric_card_width(content_width: float, cols: int) -> float:
    return (content_width - (cols - 1) * DATA_METRIC_GAP) / cols


def data_metrics_layout(frame, slide, theme, fonts, context):
    """Grid of metric cards, at most four per row."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _left_heading(frame, slide, theme, fonts, w=W - P * 2)

    block: Optional[MetricsBlock] = slide.find_block("metrics")
    if block is None or not block.items:
        if slide.has_structured_body:
            render_structured_body(frame, slide.structured_body, theme, fonts, P + 80, W - P * 2)
        else:
            _plain_lines(frame, slide.body_lines, theme, fonts, x=P, y=P + 80, w=W - P * 2)
        return

    items = block.items
    cols = min(len(items), DATA_METRIC_MAX_COLUMNS)
    card_w = data_metric_card_width(W - P * 2, cols)
    card_h = 160
    start_y = P + 90

    for i, item in enumerate(items):
        cx = P + (i % cols) * (card_w + DATA_METRIC_GAP)
        cy = start_y + (i // cols) * (card_h + DATA_METRIC_GAP)

        create_container_card(
            frame,
            x=cx,
            y=cy,
            w=card_w,
            h=card_h,
            fill=colors.surface,
            corner_radius=16,
            border_color=colors.border,
            border_width=1,
        )
        create_styled_text(
            frame,
            text=item.value,
            font=fonts.heading_bold,
            font_size=44,
            color=colors.primary,
            x=cx + 24,
            y=cy + 24,
            w=card_w - 48,
        )
        create_styled_text(
            frame,
            text=item.label,
            font=fonts.body,
            font_size=16,
            color=colors.text,
            x=cx + 24,
            y=cy + 80,
            w=card_w - 48,
            opacity=0.7,
        )
        if item.change:
            create_styled_text(
                frame,
                text=item.change,
                font=fonts.body,
                font_size=14,
                color=colors.success,
                x=cx + 24,
                y=cy + 110,
                w=card_w - 48,
                opacity=0.6,
            )


def metrics_highlight_layout(frame, slide, theme, fonts, context):
    """One hero number with supporting text and up to three secondary metrics."""
    W, H, P = _dims(frame)
    colors = theme.colors
    anchor_y = H * 0.25

    apply_solid_background(frame, colors.background)
    add_radial_glow(frame, colors.primary, x=0.5, y=0.4, size=800, opacity=0.08)

    block = slide.find_block("metrics")
    metrics = block.items if block is not None else []
    big_value = metrics[0].value if metrics else slide.title
    big_label = metrics[0].label if metrics else ""

    create_styled_text(
        frame,
        text=big_value,
        font=fonts.heading_bold,
        font_size=120,
        color=colors.primary,
        x=P,
        y=anchor_y,
        w=W - P * 2,
        align="CENTER",
        line_height=130,
    )

    if big_label or big_value != slide.title:
        create_styled_text(
            frame,
            text=big_label or slide.title,
            font=fonts.heading_bold,
            font_size=32,
            color=colors.text,
            x=P + 100,
            y=anchor_y + 140,
            w=W - P * 2 - 200,
            align="CENTER",
            line_height=40,
        )

    create_accent_line(frame, x=(W - 80) / 2, y=anchor_y + 200, w=80, h=3, color=colors.accent, corner_radius=2)

    body_text = " ".join(slide.body_lines)
    if body_text:
        create_styled_text(
            frame,
            text=body_text,
            font=fonts.body,
            font_size=22,
            color=colors.text,
            x=P + 160,
            y=anchor_y + 224,
            w=W - P * 2 - 320,
            align="CENTER",
            line_height=34,
            opacity=0.7,
        )

    secondary = metrics[1:4]
    if secondary:
        col_w = (W - P * 2 - 200) / len(secondary)
        sec_y = H * 0.72
        for i, item in enumerate(secondary):
            cx = P + 100 + i * col_w
            create_styled_text(
                frame,
                text=item.value,
                font=fonts.heading_bold,
                font_size=36,
                color=colors.primary,
                x=cx,
                y=sec_y,
                w=col_w,
                align="CENTER",
            )
            create_styled_text(
                frame,
                text=item.label,
                font=fonts.body,
                font_size=14,
                color=colors.text,
                x=cx,
                y=sec_y + 44,
                w=col_w,
                align="CENTER",
                opacity=0.6,
            )


def team_columns(count: int) -> int:
    if count <= 3:
        return count
    return 3 if count <= 6 else 4


def team_layout(frame, slide, theme, fonts, context):
    """Member cards with an initials avatar, name and role."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _centered_heading(frame, slide, theme, fonts, font_size=44, line_height=52, accent_offset=62)

    members = [parse_team_member(line) for line in _body_lines(slide)]
    count = len(members)
    if count == 0:
        return

    cols = team_columns(count)
    rows = math.ceil(count / cols)
    card_w, card_h = 260, 220
    gap_x, gap_y = 32, 24
    avatar = 64
    start_x, start_y = _grid_origin(
        frame, cols * card_w + (cols - 1) * gap_x, rows * card_h + (rows - 1) * gap_y, P + 90
    )

    for i, member in enumerate(members):
        cx = start_x + (i % cols) * (card_w + gap_x)
        cy = start_y + (i // cols) * (card_h + gap_y)

        create_container_card(
            frame,
            x=cx,
            y=cy,
            w=card_w,
            h=card_h,
            fill=colors.surface,
            corner_radius=16,
            border_color=colors.border,
            border_width=1,
        )
        create_circle(
            frame, x=cx + (card_w - avatar) / 2, y=cy + 24, size=avatar, fill=colors.primary, opacity=0.15, name="Avatar"
        )
        create_styled_text(
            frame,
            text=initials(member.name),
            font=fonts.heading_bold,
            font_size=22,
            color=colors.primary,
            x=cx + (card_w - avatar) / 2,
            y=cy + 24 + 18,
            w=avatar,
            align="CENTER",
        )
        create_styled_text(
            frame,
            text=member.name,
            font=fonts.heading_bold,
            font_size=18,
            color=colors.text,
            x=cx + 12,
            y=cy + 100,
            w=card_w - 24,
            align="CENTER",
        )
        if member.role:
            create_styled_text(
                frame,
                text=member.role,
                font=fonts.body,
                font_size=14,
                color=colors.text,
                x=cx + 12,
                y=cy + 128,
                w=card_w - 24,
                align="CENTER",
                opacity=0.6,
            )


def timeline_layout(frame, slide, theme, fonts, context):
    """Horizontal rule with one node per milestone; the latest node is highlighted."""
    W, H, P = _dims(frame)
    colors = theme.colors
    canvas = frame.canvas

    apply_solid_background(frame, colors.background)
    _centered_heading(frame, slide, theme, fonts)

    milestones = parse_milestones(_body_lines(slide))
    count = len(milestones)
    if count == 0:
        return

    line_y = H * 0.55
    line_start = P + 40
    line_end = W - P - 40
    create_divider_line(frame, x=line_start, y=line_y, w=line_end - line_start, color=colors.border, thickness=2)

    spacing = (line_end - line_start) / ((count - 1) or 1)
    node_size = 16

    for i, milestone in enumerate(milestones):
        cx = W / 2 if count == 1 else line_start + i * spacing
        is_latest = i == count - 1

        create_circle(
            frame,
            x=cx - node_size / 2,
            y=line_y - node_size / 2 + 1,
            size=node_size,
            fill=colors.accent if is_latest else colors.primary,
        )

        if milestone.date:
            create_styled_text(
                frame,
                text=milestone.date,
                font=fonts.heading_bold,
                font_size=14,
                color=colors.primary,
                x=clamp_x(cx - 80, 160, canvas),
                y=line_y - 50,
                w=160,
                align="CENTER",
                letter_spacing=1,
            )

        create_styled_text(
            frame,
            text=milestone.text,
            font=fonts.body,
            font_size=16,
            color=colors.text,
            x=clamp_x(cx - 90, 180, canvas),
            y=line_y + 24,
            w=180,
            align="CENTER",
            line_height=22,
            opacity=0.8,
        )


def feature_grid_columns(count: int) -> int:
    return 2 if count <= 4 else 3


def feature_grid_layout(frame, slide, theme, fonts, context):
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _centered_heading(frame, slide, theme, fonts)

    features = parse_features(_body_lines(slide))
    count = len(features)
    if count == 0:
        return

    cols = feature_grid_columns(count)
    rows = math.ceil(count / cols)
    gap = 24
    card_w = (W - P * 2 - (cols - 1) * gap) / cols
    card_h = 160
    _, start_y = _grid_origin(frame, W - P * 2, rows * card_h + (rows - 1) * gap, P + 80)

    for i, feature in enumerate(features):
        cx = P + (i % cols) * (card_w + gap)
        cy = start_y + (i // cols) * (card_h + gap)

        create_container_card(
            frame,
            x=cx,
            y=cy,
            w=card_w,
            h=card_h,
            fill=colors.surface,
            corner_radius=16,
            border_color=colors.border,
            border_width=1,
        )
        icon = create_accent_line(frame, x=cx + 24, y=cy + 24, w=36, h=36, color=colors.primary, corner_radius=8)
        icon.name = "Icon"

        create_styled_text(
            frame,
            text=feature.title,
            font=fonts.heading_bold,
            font_size=20,
            color=colors.text,
            x=cx + 24,
            y=cy + 72,
            w=card_w - 48,
        )
        if feature.description:
            create_styled_text(
                frame,
                text=feature.description,
                font=fonts.body,
                font_size=14,
                color=colors.text,
                x=cx + 24,
                y=cy + 100,
                w=card_w - 48,
                line_height=20,
                opacity=0.7,
            )


def logo_wall_columns(count: int) -> int:
    if count <= 4:
        return count
    return 4 if count <= 8 else 5


def logo_wall_layout(frame, slide, theme, fonts, context):
    """Grid of name badges standing in for customer or partner logos."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _centered_heading(frame, slide, theme, fonts)

    logos = parse_logos(_body_lines(slide))
    count = len(logos)
    if count == 0:
        return

    cols = logo_wall_columns(count)
    rows = math.ceil(count / cols)
    card_w, card_h = 180, 100
    gap_x, gap_y = 32, 28
    start_x, start_y = _grid_origin(
        frame, cols * card_w + (cols - 1) * gap_x, rows * card_h + (rows - 1) * gap_y, P + 90
    )

    for i, name in enumerate(logos):
        cx = start_x + (i % cols) * (card_w + gap_x)
        cy = start_y + (i // cols) * (card_h + gap_y)

        create_container_card(
            frame,
            x=cx,
            y=cy,
            w=card_w,
            h=card_h,
            fill=colors.surface,
            corner_radius=12,
            border_color=colors.border,
            border_width=1,
        )
        create_styled_text(
            frame,
            text=name,
            font=fonts.heading_bold,
            font_size=16,
            color=colors.text,
            x=cx + 12,
            y=cy + (card_h - 20) / 2,
            w=card_w - 24,
            align="CENTER",
            opacity=0.6,
        )


# (name, diameter, opacity, label offset from centre)
MARKET_CIRCLES = [
    ("TAM", 420, 0.08, -190),
    ("SAM", 280, 0.12, -110),
    ("SOM", 160, 0.2, -12),
]


def market_sizing_layout(frame, slide, theme, fonts, context):
    """TAM/SAM/SOM concentric circles on the right, narrative on the left."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_solid_background(frame, colors.background)
    _left_heading(frame, slide, theme, fonts, w=W * 0.45)

    _plain_lines(
        frame, _body_lines(slide), theme, fonts, x=P, y=P + 80, w=W * 0.4, font_size=20, line_height=30, step=LIST_STEP
    )

    center_x = W * 0.72
    center_y = H * 0.5

    for name, size, opacity, _ in MARKET_CIRCLES:
        create_circle(
            frame, x=center_x - size / 2, y=center_y - size / 2, size=size, fill=colors.primary, opacity=opacity, name=name
        )

    for name, _, _, offset in MARKET_CIRCLES:
        create_styled_text(
            frame,
            text=name,
            font=fonts.heading_bold,
            font_size=16,
            color=colors.primary,
            x=center_x - 40,
            y=center_y + offset,
            w=80,
            align="CENTER",
            letter_spacing=2,
        )


def cta_layout(frame, slide, theme, fonts, context):
    """Centred call to action with a pill button labelled by the last body line."""
    W, H, P = _dims(frame)
    colors = theme.colors

    apply_gradient_background(frame, colors.background, colors.surface, 135)
    add_radial_glow(frame, colors.accent, x=0.5, y=0.5, size=900, opacity=0.1)

    create_styled_text(
        frame,
        text=slide.title,
        font=fonts.heading_bold,
        font_size=52,
        color=colors.text,
        x=P + 100,
        y=H * 0.28,
        w=W - P * 2 - 200,
        align="CENTER",
        line_height=64,
    )

    lines = _body_lines(slide)
    body_text = "\n".join(lines)
    if body_text:
        create_styled_text(
            frame,
            text=body_text,
            font=fonts.body,
            font_size=24,
            color=colors.text,
            x=P + 200,
            y=H * 0.28 + 90,
            w=W - P * 2 - 400,
            align="CENTER",
            line_height=38,
            opacity=0.75,
        )

    btn_w, btn_h = 320, 60
    btn_x = (W - btn_w) / 2
    btn_y = H * 0.62
    create_container_card(
        frame, x=btn_x, y=btn_y, w=btn_w, h=btn_h, fill=colors.primary, corner_radius=btn_h / 2, name="CTA Button"
    )
    create_styled_text(
        frame,
        text=(lines[-1] if lines else "") or "Get Started",
        font=fonts.heading_bold,
        font_size=20,
        color=colors.background,
        x=btn_x,
        y=btn_y + 18,
        w=btn_w,
        align="CENTER",
    )

    create_accent_line(frame, x=(W - 60) / 2, y=H * 0.22, w=60, h=3, color=colors.accent, corner_radius=2)

    if slide.section_label:
        create_styled_text(
            frame,
            text=slide.section_label,
            font=fonts.body,
            font_size=16,
            color=colors.text,
            x=P,
            y=H - P - 24,
            w=W - P * 2,
            align="CENTER",
            opacity=0.5,
        )
