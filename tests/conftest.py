"""Shared fixtures for deck-canvas tests."""

import io
from unittest.mock import Mock

import pytest
from PIL import Image

from deck_canvas.canvas import FrameNode
from deck_canvas.exceptions import ImageFetchError
from deck_canvas.fonts import FontLoader
from deck_canvas.image_fetcher import FetchResult, ImageFetcher
from deck_canvas.layouts import LayoutContext
from deck_canvas.models import CanvasConfig, ThemeConfig

PALETTE = {
    "primary": "#6366F1",
    "secondary": "#8B5CF6",
    "accent": "#F59E0B",
    "background": "#0F172A",
    "text": "#F8FAFC",
    "surface": "#1E293B",
    "border": "#334155",
    "success": "#22C55E",
    "warning": "#EAB308",
    "error": "#EF4444",
}


def make_png(size=(8, 6), color=(200, 40, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def theme():
    return ThemeConfig(name="Midnight", headingFont="Inter", bodyFont="Inter", colors=PALETTE)


@pytest.fixture
def fonts(theme):
    return FontLoader().load_fonts(theme)


@pytest.fixture
def frame():
    return FrameNode.for_canvas(CanvasConfig(), name="Test Frame")


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def offline_fetcher():
    """Image fetcher whose every fetch fails."""
    fetcher = Mock(spec=ImageFetcher)
    fetcher.fetch.side_effect = lambda url: FetchResult(url=url, error=ImageFetchError(url, "offline"))
    return fetcher


@pytest.fixture
def online_fetcher(png_bytes):
    """Image fetcher that returns the same decoded PNG for every URL."""
    real = ImageFetcher(session=Mock(headers={}))
    fetcher = Mock(spec=ImageFetcher)
    fetcher.fetch.side_effect = lambda url: FetchResult(url=url, resource=real._decode(url, png_bytes))
    return fetcher


@pytest.fixture
def offline_context(offline_fetcher):
    return LayoutContext(image_fetcher=offline_fetcher)


@pytest.fixture
def payload_dict():
    return {
        "version": 2,
        "presentationId": "deck-123",
        "title": "Quarterly Review",
        "theme": {"name": "Midnight", "headingFont": "Inter", "bodyFont": "Inter", "colors": PALETTE},
        "slides": [
            {
                "slideNumber": 1,
                "slideType": "TITLE",
                "title": "Our Vision",
                "bodyLines": ["Change the world"],
                "speakerNotes": "Welcome everyone",
            },
            {
                "slideNumber": 2,
                "slideType": "CONTENT",
                "title": "Why now",
                "structuredBody": [
                    {"type": "paragraph", "text": "Slides take too long to build."},
                    {"type": "bullets", "items": [{"text": "Manual layout"}, {"text": "Brand drift", "bold": True}]},
                ],
            },
            {
                "slideNumber": 3,
                "slideType": "DATA_METRICS",
                "title": "Traction",
                "structuredBody": [
                    {
                        "type": "metrics",
                        "items": [
                            {"label": "ARR", "value": "$4.2M", "change": "+38% YoY"},
                            {"label": "Customers", "value": "312"},
                        ],
                    }
                ],
            },
        ],
    }
