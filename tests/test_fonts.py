"""Tests for font resolution."""

import logging

from deck_canvas.fonts import FontLoader, FontName, LoadedFonts
from deck_canvas.models import ThemeConfig

from conftest import PALETTE


class TestFontLoader:
    """Tests for FontLoader class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.loader = FontLoader(available_families=["Inter", "Lato"], fallback_family="Inter")

    def test_available_font_is_used(self):
        """Test that an available family resolves to itself."""
        font = self.loader.load_font("Lato", "Bold")
        assert font == FontName("Lato", "Bold")

    def test_availability_is_case_insensitive(self):
        """Test family matching ignores case."""
        assert self.loader.is_available("lato")
        assert not self.loader.is_available("")

    def test_unavailable_font_falls_back(self, caplog):
        """Test fallback to the known-good family with a warning."""
        with caplog.at_level(logging.WARNING, logger="deck_canvas.fonts"):
            font = self.loader.load_font("Comic Neue")

        assert font == FontName("Inter", "Regular")
        assert "Comic Neue" in caplog.text

    def test_results_are_cached(self):
        """Test that repeated loads return the cached handle."""
        first = self.loader.load_font("Missing Family")
        second = self.loader.load_font("Missing Family")
        assert first is second

        self.loader.clear_cache()
        assert self.loader.load_font("Missing Family") is not first

    def test_any_family_accepted_without_inventory(self):
        """Test that no inventory means every family is available."""
        loader = FontLoader()
        assert loader.load_font("Anything Sans") == FontName("Anything Sans", "Regular")

    def test_load_fonts_for_theme(self):
        """Test resolving heading, bold heading and body fonts."""
        theme = ThemeConfig(headingFont="Playfair Display", bodyFont="Lato", colors=PALETTE)
        fonts = self.loader.load_fonts(theme)

        assert isinstance(fonts, LoadedFonts)
        assert fonts.heading == FontName("Inter", "Regular")
        assert fonts.heading_bold == FontName("Inter", "Bold")
        assert fonts.body == FontName("Lato", "Regular")
