"""deck-canvas - slide layout and rendering engine."""

__version__ = "0.1.0"

from .deck_renderer import DeckRenderer, RenderedDeck, get_render_statistics
from .layout_registry import LAYOUT_REGISTRY, get_layout_for_type
from .layout_validator import LayoutValidator
from .models import (
    CanvasConfig,
    ColorPalette,
    DeckPayload,
    LayoutValidationConfig,
    RenderConfig,
    SlideDocument,
    SlideType,
    ThemeConfig,
)
