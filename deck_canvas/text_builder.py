"""Structured body renderer: lays out tagged content blocks top to bottom."""

import logging
import math
from typing import Optional, Sequence

from .canvas import FrameNode
from .fonts import LoadedFonts
from .models import (
    BulletsBlock,
    MetricsBlock,
    NumberedBlock,
    ParagraphBlock,
    SubheadingBlock,
    TableBlock,
    ThemeConfig,
)
from .utils import create_styled_text

logger = logging.getLogger(__name__)

SUBHEADING_ADVANCE = 44
PARAGRAPH_ADVANCE = 50
LIST_ITEM_ADVANCE = 40
LIST_TRAILING_GAP = 8
LIST_INDENT = 20
METRIC_GAP = 16
METRIC_ROW_HEIGHT = 100
METRIC_MAX_COLUMNS = 4
METRIC_TRAILING_GAP = 16
TABLE_HEADER_HEIGHT = 32
TABLE_ROW_HEIGHT = 28
TABLE_TRAILING_GAP = 12
TABLE_CELL_GUTTER = 8


def metric_columns(item_count: int) -> int:
    return min(item_count, METRIC_MAX_COLUMNS)


def metric_card_width(max_width: float, cols: int, gap: float = METRIC_GAP) -> float:
    """Width of one metric cell when ``cols`` cells share ``max_width``."""
    return (max_width - (cols - 1) * gap) / cols


def render_structured_body(
    frame: FrameNode,
    blocks: Sequence,
    theme: ThemeConfig,
    fonts: LoadedFonts,
    start_y: float,
    max_width: float,
    start_x: Optional[float] = None,
) -> float:
    """
    Render structured body blocks in order and return the next free Y offset.

    Args:
        frame: Target frame
        blocks: Structured body blocks
        theme: Theme palette and fonts
        fonts: Resolved font handles
        start_y: Top of the first block
        max_width: Width available to every block
        start_x: Left edge; defaults to the canvas padding

    Returns:
        Y coordinate just below the last rendered block
    """
    x = frame.canvas.padding if start_x is None else start_x
    colors = theme.colors
    y = start_y

    for block in blocks:
        if isinstance(block, SubheadingBlock):
            create_styled_text(
                frame,
                text=block.text,
                font=fonts.heading_bold,
                font_size=28,
                color=colors.primary,
                x=x,
                y=y,
                w=max_width,
                line_height=36,
            )
            y += SUBHEADING_ADVANCE

        elif isinstance(block, ParagraphBlock):
            node = create_styled_text(
                frame,
                text=block.text,
                font=fonts.body,
                font_size=24,
                color=colors.text,
                x=x,
                y=y,
                w=max_width,
                line_height=38,
                opacity=0.85,
            )
            y += max(PARAGRAPH_ADVANCE, node.height + 12)

        elif isinstance(block, (BulletsBlock, NumberedBlock)):
            numbered = isinstance(block, NumberedBlock)
            for i, item in enumerate(block.items):
                prefix = f"{i + 1}. " if numbered else "• "
                node = create_styled_text(
                    frame,
                    text=f"{prefix}{item.text}",
                    font=fonts.heading_bold if item.bold else fonts.body,
                    font_size=22,
                    color=colors.text,
                    x=x + LIST_INDENT,
                    y=y,
                    w=max_width - LIST_INDENT,
                    line_height=34,
                    opacity=0.85,
                )
                y += max(LIST_ITEM_ADVANCE, node.height + 6)
            y += LIST_TRAILING_GAP

        elif isinstance(block, MetricsBlock):
            y = _render_metrics(frame, block, theme, fonts, x, y, max_width)

        elif isinstance(block, TableBlock):
            y = _render_table(frame, block, theme, fonts, x, y, max_width)

        else:
            logger.debug(f"Skipping unrecognised structured body block: {getattr(block, 'type', block)!r}")

    return y


def _render_metrics(frame, block: MetricsBlock, theme, fonts, x: float, y: float, max_width: float) -> float:
    count = len(block.items)
    if count == 0:
        return y + METRIC_TRAILING_GAP

    cols = metric_columns(count)
    card_w = metric_card_width(max_width, cols)

    for i, item in enumerate(block.items):
        col = i % cols
        row = i // cols
        cx = x + col * (card_w + METRIC_GAP)
        cy = y + row * METRIC_ROW_HEIGHT

        create_styled_text(
            frame,
            text=item.value,
            font=fonts.heading_bold,
            font_size=36,
            color=theme.colors.primary,
            x=cx,
            y=cy,
            w=card_w,
        )
        create_styled_text(
            frame,
            text=item.label,
            font=fonts.body,
            font_size=16,
            color=theme.colors.text,
            x=cx,
            y=cy + 44,
            w=card_w,
            opacity=0.7,
        )

    return y + math.ceil(count / cols) * METRIC_ROW_HEIGHT + METRIC_TRAILING_GAP


def _render_table(frame, block: TableBlock, theme, fonts, x: float, y: float, max_width: float) -> float:
    col_count = len(block.headers) or max((len(row) for row in block.rows), default=0)
    if col_count == 0:
        return y + TABLE_TRAILING_GAP

    col_w = max_width / col_count

    if block.headers:
        for c, header in enumerate(block.headers):
            create_styled_text(
                frame,
                text=header,
                font=fonts.heading_bold,
                font_size=18,
                color=theme.colors.primary,
                x=x + c * col_w,
                y=y,
                w=col_w - TABLE_CELL_GUTTER,
            )
        y += TABLE_HEADER_HEIGHT

    for row in block.rows:
        # Cells beyond the column count would land outside max_width.
        for c, cell in enumerate(row[:col_count]):
            create_styled_text(
                frame,
                text=cell,
                font=fonts.body,
                font_size=16,
                color=theme.colors.text,
                x=x + c * col_w,
                y=y,
                w=col_w - TABLE_CELL_GUTTER,
                opacity=0.85,
            )
        y += TABLE_ROW_HEIGHT

    return y + TABLE_TRAILING_GAP
