"""Font resolution with fallback to a known-good family."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .models import ThemeConfig

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_FAMILY = "Inter"


@dataclass(frozen=True)
class FontName:
    family: str
    style: str = "Regular"


@dataclass(frozen=True)
class LoadedFonts:
    """Font handles resolved before any text node is created."""

    heading: FontName
    heading_bold: FontName
    body: FontName


class FontLoader:
    """Resolves requested font families against what the host can render."""

    def __init__(
        self,
        available_families: Optional[Iterable[str]] = None,
        fallback_family: str = DEFAULT_FALLBACK_FAMILY,
    ):
        """
        Initialize the font loader.

        Args:
            available_families: Families the host can render; None accepts any family
            fallback_family: Family substituted when a requested one is unavailable
        """
        self.available_families = (
            {family.lower() for family in available_families} if available_families is not None else None
        )
        self.fallback_family = fallback_family
        self._cache: Dict[Tuple[str, str], FontName] = {}

    def is_available(self, family: str) -> bool:
        if not family:
            return False
        if self.available_families is None:
            return True
        return family.lower() in self.available_families

    def load_font(self, family: str, style: str = "Regular") -> FontName:
        """
        Load a font, substituting the fallback family when unavailable.

        Args:
            family: Requested font family
            style: Font style (Regular, Bold, ...)

        Returns:
            The resolved FontName
        """
        key = (family, style)
        if key in self._cache:
            return self._cache[key]

        if self.is_available(family):
            resolved = FontName(family, style)
        else:
            logger.warning(f"Font '{family} {style}' unavailable, falling back to '{self.fallback_family}'")
            resolved = FontName(self.fallback_family, style)

        self._cache[key] = resolved
        return resolved

    def load_fonts(self, theme: ThemeConfig) -> LoadedFonts:
        """Resolve heading, bold heading and body fonts for a theme."""
        fonts = LoadedFonts(
            heading=self.load_font(theme.heading_font),
            heading_bold=self.load_font(theme.heading_font, "Bold"),
            body=self.load_font(theme.body_font),
        )
        logger.debug(f"Loaded fonts for theme '{theme.name}': {fonts}")
        return fonts

    def clear_cache(self) -> None:
        self._cache.clear()
