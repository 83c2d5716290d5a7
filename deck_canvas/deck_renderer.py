"""Renders whole decks: one frame per slide, laid out side by side."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .background_builder import apply_solid_background
from .canvas import FrameNode
from .fonts import FontLoader, LoadedFonts
from .image_fetcher import ImageFetcher
from .layout_registry import get_layout_for_type
from .layout_validator import LayoutValidator
from .layouts import LayoutContext
from .models import CanvasConfig, DeckPayload, LayoutIssue, RenderConfig, SlideDocument, ThemeConfig
from .theme_builder import DeckStyles, build_theme_styles
from .utils import create_styled_text

logger = logging.getLogger(__name__)

SPEAKER_NOTES_PREFIX = "[Speaker Notes]"
SPEAKER_NOTES_NODE_NAME = "Speaker Notes"
PLACEHOLDER_NODE_NAME = "Image Placeholder"


@dataclass
class RenderedDeck:
    """Frames produced for a deck, with the theme styles and fonts used."""

    title: str
    theme: ThemeConfig
    frames: List[FrameNode] = field(default_factory=list)
    styles: Optional[DeckStyles] = None
    fonts: Optional[LoadedFonts] = None
    issues: List[LayoutIssue] = field(default_factory=list)
    failed_slides: List[int] = field(default_factory=list)


class DeckRenderer:
    """Turns deck payloads into canvas frames via the layout registry."""

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        image_fetcher: Optional[ImageFetcher] = None,
        font_loader: Optional[FontLoader] = None,
    ):
        """
        Initialize the deck renderer.

        Args:
            config: Render configuration
            image_fetcher: Image fetcher shared by every layout call; one passed in is not closed by ``close()``
            font_loader: Font loader used to resolve theme fonts
        """
        self.config = config or RenderConfig()
        self._owns_fetcher = image_fetcher is None
        self.image_fetcher = image_fetcher or ImageFetcher(
            timeout=self.config.image_timeout,
            user_agent=self.config.user_agent,
        )
        self.font_loader = font_loader or FontLoader(
            available_families=self.config.available_fonts,
            fallback_family=self.config.fallback_font_family,
        )
        self.validator = LayoutValidator(self.config.validation)

        logger.info("DeckRenderer initialized")
        logger.debug(
            f"Canvas {self.config.canvas.width}x{self.config.canvas.height}, "
            f"workers: {self.config.max_workers}, validation mode: {self.config.validation.mode}"
        )

    def close(self) -> None:
        """Release the image fetcher's sessions when this renderer created it."""
        if self._owns_fetcher:
            self.image_fetcher.close()

    def __enter__(self) -> "DeckRenderer":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def render(self, payload: DeckPayload, canvas: Optional[CanvasConfig] = None) -> RenderedDeck:
        """
        Render every slide of a deck.

        Args:
            payload: Deck payload with theme and slides
            canvas: Canvas override; defaults to the configured canvas

        Returns:
            RenderedDeck with one frame per slide, in payload order

        Raises:
            LayoutViolationError: When strict validation finds violations
        """
        canvas = canvas or self.config.canvas
        theme = payload.theme

        logger.info(f"Rendering deck '{payload.title}' with {len(payload.slides)} slides")

        fonts = self.font_loader.load_fonts(theme)
        styles = build_theme_styles(theme, fonts)
        context = LayoutContext(styles=styles, image_fetcher=self.image_fetcher)
        deck = RenderedDeck(title=payload.title, theme=theme, styles=styles, fonts=fonts)

        def render_one(indexed):
            index, slide = indexed
            return self._render_safely(slide, theme, fonts, context, canvas, index, deck)

        indexed_slides = list(enumerate(payload.slides))
        if self.config.max_workers > 1 and len(indexed_slides) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                # map() yields results in submission order
                deck.frames = list(executor.map(render_one, indexed_slides))
        else:
            deck.frames = [render_one(item) for item in indexed_slides]

        deck.failed_slides.sort()
        deck.issues = self.validator.validate(deck.frames, theme)

        logger.info(f"Rendered {len(deck.frames)} frames ({len(deck.failed_slides)} fallback)")
        return deck

    def render_slide(
        self,
        slide: SlideDocument,
        theme: ThemeConfig,
        fonts: Optional[LoadedFonts] = None,
        context: Optional[LayoutContext] = None,
        canvas: Optional[CanvasConfig] = None,
        index: int = 0,
    ) -> FrameNode:
        """
        Render one slide document into a new frame.

        Layout errors propagate; ``render`` is the entry point that recovers
        from them.

        Args:
            slide: Slide document
            theme: Deck theme
            fonts: Resolved fonts; loaded from the theme when omitted
            context: Layout context; built from the theme when omitted
            canvas: Canvas configuration
            index: Position of the slide in the deck, for horizontal placement

        Returns:
            The populated frame
        """
        canvas = canvas or self.config.canvas
        if fonts is None:
            fonts = self.font_loader.load_fonts(theme)
        if context is None:
            context = LayoutContext(styles=build_theme_styles(theme, fonts), image_fetcher=self.image_fetcher)

        frame = self._new_frame(slide, canvas, index)
        layout = get_layout_for_type(slide.slide_type)
        layout(frame, slide, theme, fonts, context)
        self._attach_speaker_notes(frame, slide, theme, fonts)

        logger.debug(f"Rendered slide {slide.slide_number} ({slide.slide_type}) with {len(frame.children)} nodes")
        return frame

    def _render_safely(self, slide, theme, fonts, context, canvas, index, deck) -> FrameNode:
        try:
            return self.render_slide(slide, theme, fonts, context, canvas, index)
        except Exception as e:
            logger.error(f"Failed to render slide {slide.slide_number} ({slide.slide_type}): {e}")
            deck.failed_slides.append(slide.slide_number)
            return self._fallback_frame(slide, theme, fonts, canvas, index)

    def _new_frame(self, slide: SlideDocument, canvas: CanvasConfig, index: int) -> FrameNode:
        frame = FrameNode.for_canvas(
            canvas,
            name=f"Slide {slide.slide_number} — {slide.slide_type}",
            x=index * (canvas.width + canvas.frame_gap),
        )
        frame.slide_number = slide.slide_number
        frame.slide_type = slide.slide_type
        return frame

    def _fallback_frame(
        self,
        slide: SlideDocument,
        theme: ThemeConfig,
        fonts: LoadedFonts,
        canvas: CanvasConfig,
        index: int,
    ) -> FrameNode:
        """Minimal slide used when a layout fails: solid background and the title."""
        frame = self._new_frame(slide, canvas, index)
        apply_solid_background(frame, theme.colors.background)
        create_styled_text(
            frame,
            text=slide.title or f"Slide {slide.slide_number}",
            font=fonts.heading_bold,
            font_size=44,
            color=theme.colors.text,
            x=canvas.padding,
            y=canvas.padding,
            w=canvas.content_width,
            line_height=52,
        )
        self._attach_speaker_notes(frame, slide, theme, fonts)
        logger.warning(f"Added fallback slide for slide {slide.slide_number}")
        return frame

    def _attach_speaker_notes(
        self, frame: FrameNode, slide: SlideDocument, theme: ThemeConfig, fonts: LoadedFonts
    ) -> None:
        if not slide.speaker_notes:
            return
        frame.notes = slide.speaker_notes

        canvas = frame.canvas
        node = create_styled_text(
            frame,
            text=f"{SPEAKER_NOTES_PREFIX}\n{slide.speaker_notes}",
            font=fonts.body,
            font_size=12,
            color=theme.colors.text,
            x=0,
            y=canvas.height + 20,
            w=canvas.width,
        )
        node.name = SPEAKER_NOTES_NODE_NAME
        node.visible = False


def get_render_statistics(deck: RenderedDeck) -> Dict[str, Any]:
    """
    Summarise a rendered deck.

    Args:
        deck: Rendered deck

    Returns:
        Slide type counts, node counts, image and placeholder counts, issues by category
    """
    stats: Dict[str, Any] = {
        "total_slides": len(deck.frames),
        "total_nodes": sum(len(frame.children) for frame in deck.frames),
        "text_nodes": sum(len(frame.texts()) for frame in deck.frames),
        "images": sum(len(frame.images) for frame in deck.frames),
        "placeholders": sum(len(frame.find_all(name=PLACEHOLDER_NODE_NAME)) for frame in deck.frames),
        "slides_with_notes": len([frame for frame in deck.frames if frame.notes]),
        "fallback_slides": len(deck.failed_slides),
        "slide_types": {},
        "issues": {},
    }

    for frame in deck.frames:
        stats["slide_types"][frame.slide_type] = stats["slide_types"].get(frame.slide_type, 0) + 1

    for issue in deck.issues:
        stats["issues"][issue.category] = stats["issues"].get(issue.category, 0) + 1

    return stats
