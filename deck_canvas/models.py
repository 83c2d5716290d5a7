"""Domain models for the deck-canvas slide layout engine."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class SlideType(str, Enum):
    """Closed set of slide types understood by the layout registry."""

    TITLE = "TITLE"
    CONTENT = "CONTENT"
    PROBLEM = "PROBLEM"
    SOLUTION = "SOLUTION"
    COMPARISON = "COMPARISON"
    PROCESS = "PROCESS"
    DATA_METRICS = "DATA_METRICS"
    CTA = "CTA"
    QUOTE = "QUOTE"
    ARCHITECTURE = "ARCHITECTURE"
    TEAM = "TEAM"
    TIMELINE = "TIMELINE"
    SECTION_DIVIDER = "SECTION_DIVIDER"
    METRICS_HIGHLIGHT = "METRICS_HIGHLIGHT"
    FEATURE_GRID = "FEATURE_GRID"
    PRODUCT_SHOWCASE = "PRODUCT_SHOWCASE"
    LOGO_WALL = "LOGO_WALL"
    MARKET_SIZING = "MARKET_SIZING"
    SPLIT_STATEMENT = "SPLIT_STATEMENT"
    VISUAL_HUMOR = "VISUAL_HUMOR"
    OUTLINE = "OUTLINE"


# ── Structured body blocks ────────────────────────────────


class BulletItem(BaseModel):
    """A single bullet or numbered list entry."""

    text: str = Field(..., description="Item text")
    bold: bool = Field(default=False, description="Render the item in the bold font")


class MetricItem(BaseModel):
    """A single metric shown as a large value over a small label."""

    label: str = Field(..., description="Metric label")
    value: str = Field(..., description="Metric value as displayed")
    change: Optional[str] = Field(None, description="Optional change indicator, e.g. '+12% YoY'")


class ParagraphBlock(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    text: str


class SubheadingBlock(BaseModel):
    type: Literal["subheading"] = "subheading"
    text: str


class BulletsBlock(BaseModel):
    type: Literal["bullets"] = "bullets"
    items: List[BulletItem] = Field(default_factory=list)


class NumberedBlock(BaseModel):
    type: Literal["numbered"] = "numbered"
    items: List[BulletItem] = Field(default_factory=list)


class MetricsBlock(BaseModel):
    type: Literal["metrics"] = "metrics"
    items: List[MetricItem] = Field(default_factory=list)


class TableBlock(BaseModel):
    type: Literal["table"] = "table"
    headers: List[str] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)


StructuredBodyBlock = Annotated[
    Union[ParagraphBlock, SubheadingBlock, BulletsBlock, NumberedBlock, MetricsBlock, TableBlock],
    Field(discriminator="type"),
]

BLOCK_TYPES = ("paragraph", "subheading", "bullets", "numbered", "metrics", "table")


# ── Slide document ────────────────────────────────────────


class SlideDocument(BaseModel):
    """Renderer-facing representation of one slide. Read-only once built."""

    slide_number: int = Field(..., ge=1, alias="slideNumber", description="1-based slide position")
    slide_type: str = Field(
        default=SlideType.CONTENT.value,
        alias="slideType",
        description="Slide type string; unknown values fall back to the CONTENT layout",
    )
    title: str = Field(..., description="Slide title")
    body_lines: List[str] = Field(
        default_factory=list, alias="bodyLines", description="Legacy plain-text body lines"
    )
    structured_body: List[StructuredBodyBlock] = Field(
        default_factory=list, alias="structuredBody", description="Tagged content blocks"
    )
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Remote image reference")
    section_label: Optional[str] = Field(None, alias="sectionLabel", description="Short section label")
    speaker_notes: Optional[str] = Field(None, alias="speakerNotes", description="Presenter-only notes")
    background_variant: Optional[str] = Field(None, alias="backgroundVariant")
    background_color: Optional[str] = Field(None, alias="backgroundColor")
    text_color: Optional[str] = Field(None, alias="textColor")
    accent_color: Optional[str] = Field(None, alias="accentColor")

    @field_validator("body_lines", mode="before")
    @classmethod
    def _none_body_lines(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("structured_body", mode="before")
    @classmethod
    def _drop_unknown_blocks(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        kept = []
        for block in value:
            block_type = block.get("type") if isinstance(block, dict) else getattr(block, "type", None)
            if block_type in BLOCK_TYPES:
                kept.append(block)
            else:
                logger.debug(f"Skipping structured body block with unknown type: {block_type!r}")
        return kept

    @property
    def has_structured_body(self) -> bool:
        """Return True when the slide carries at least one structured block."""
        return len(self.structured_body) > 0

    def find_block(self, block_type: str):
        """Return the first structured block of the given type, or None."""
        for block in self.structured_body:
            if block.type == block_type:
                return block
        return None

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "slideNumber": 3,
                "slideType": "PROBLEM",
                "title": "Teams lose 6 hours a week to slide formatting",
                "bodyLines": ["Manual layout work", "Inconsistent branding"],
                "structuredBody": [
                    {"type": "bullets", "items": [{"text": "Manual layout work", "bold": True}]}
                ],
                "imageUrl": "https://example.com/problem.png",
                "sectionLabel": "02",
                "speakerNotes": "Pause on the 6 hours figure",
            }
        },
    )


# ── Theme ─────────────────────────────────────────────────


class ColorPalette(BaseModel):
    """Closed palette of named theme colours (hex strings)."""

    primary: str
    secondary: str
    accent: str
    background: str
    text: str
    surface: str
    border: str
    success: str
    warning: str
    error: str

    @model_validator(mode="before")
    @classmethod
    def _fill_v1_palette(cls, data: Any) -> Any:
        # Six-colour palettes from older payloads: derive the rest from the palette itself.
        if isinstance(data, dict):
            data = dict(data)
            if "surface" in data:
                data.setdefault("border", data["surface"])
            if "primary" in data:
                data.setdefault("success", data["primary"])
            if "accent" in data:
                data.setdefault("warning", data["accent"])
                data.setdefault("error", data["accent"])
        return data

    def as_dict(self) -> Dict[str, str]:
        """Return the palette as a name → hex mapping."""
        return self.model_dump()

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
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
        },
    )


class ThemeConfig(BaseModel):
    """Colour palette plus heading/body font families for a deck."""

    name: str = Field(default="Default", description="Theme name")
    heading_font: str = Field(default="Inter", alias="headingFont")
    body_font: str = Field(default="Inter", alias="bodyFont")
    colors: ColorPalette

    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ── Canvas and payload ────────────────────────────────────


class CanvasConfig(BaseModel):
    """Fixed drawing surface dimensions and padding budget for one slide."""

    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)
    padding: int = Field(default=80, ge=0)
    frame_gap: int = Field(default=320, ge=0, description="Horizontal gap between frames on a page")

    @property
    def content_width(self) -> int:
        return self.width - self.padding * 2

    @property
    def content_height(self) -> int:
        return self.height - self.padding * 2

    model_config = ConfigDict(frozen=True)


class Dimensions(BaseModel):
    width: int = 1920
    height: int = 1080


class DeckPayload(BaseModel):
    """A complete deck export: theme plus ordered slide documents."""

    version: int = Field(default=2)
    presentation_id: str = Field(default="", alias="presentationId")
    title: str = Field(default="Untitled deck")
    slide_count: Optional[int] = Field(None, alias="slideCount")
    theme: ThemeConfig
    slides: List[SlideDocument] = Field(default_factory=list)
    dimensions: Dimensions = Field(default_factory=Dimensions)

    @property
    def effective_slide_count(self) -> int:
        return self.slide_count if self.slide_count is not None else len(self.slides)

    def canvas_config(self, padding: int = 80, frame_gap: int = 320) -> CanvasConfig:
        """Build the canvas configuration implied by the payload dimensions."""
        return CanvasConfig(
            width=self.dimensions.width,
            height=self.dimensions.height,
            padding=padding,
            frame_gap=frame_gap,
        )

    model_config = ConfigDict(populate_by_name=True)


# ── Configuration ─────────────────────────────────────────


class LayoutValidationConfig(BaseModel):
    """Configuration for post-render layout validation."""

    enabled: bool = Field(default=True, description="Enable layout validation")
    mode: str = Field(
        default="lenient",
        description="Validation mode: 'strict', 'lenient', or 'disabled'",
    )
    check_bounds: bool = Field(default=True, description="Keep primary content inside the padding")
    check_palette: bool = Field(default=True, description="Require theme palette colours only")
    check_overlay: bool = Field(
        default=True, description="Require a dark overlay over full-bleed images carrying text"
    )
    min_overlay_opacity: float = Field(default=0.3, ge=0.0, le=1.0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "enabled": True,
                "mode": "strict",
                "check_bounds": True,
                "check_palette": True,
                "check_overlay": True,
                "min_overlay_opacity": 0.3,
            }
        },
    )


class RenderConfig(BaseModel):
    """Configuration for rendering a deck."""

    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    image_timeout: float = Field(default=10.0, gt=0, description="Seconds before an image fetch gives up")
    fallback_font_family: str = Field(default="Inter", description="Known-good font family")
    available_fonts: Optional[List[str]] = Field(
        None, description="Font families the host can render; None accepts any family"
    )
    font_dir: Optional[str] = Field(None, description="Directory of .ttf/.otf files for rasterising")
    max_workers: int = Field(default=1, ge=1, description="Slides rendered concurrently")
    user_agent: str = Field(default="deck-canvas/0.1", description="User-Agent for image fetches")
    validation: LayoutValidationConfig = Field(default_factory=LayoutValidationConfig)

    @classmethod
    def from_env(cls, **overrides: Any) -> "RenderConfig":
        """
        Build a configuration from DECK_CANVAS_* environment variables.

        Args:
            **overrides: Explicit values that win over the environment

        Returns:
            RenderConfig instance
        """
        values: Dict[str, Any] = {}
        if os.getenv("DECK_CANVAS_IMAGE_TIMEOUT"):
            values["image_timeout"] = float(os.environ["DECK_CANVAS_IMAGE_TIMEOUT"])
        if os.getenv("DECK_CANVAS_FALLBACK_FONT"):
            values["fallback_font_family"] = os.environ["DECK_CANVAS_FALLBACK_FONT"]
        if os.getenv("DECK_CANVAS_MAX_WORKERS"):
            values["max_workers"] = int(os.environ["DECK_CANVAS_MAX_WORKERS"])
        if os.getenv("DECK_CANVAS_FONT_DIR"):
            values["font_dir"] = os.environ["DECK_CANVAS_FONT_DIR"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class LayoutIssue(BaseModel):
    """A finding from the layout validator."""

    slide_number: int = Field(..., description="Slide the issue belongs to")
    category: str = Field(..., description="bounds, palette or overlay")
    severity: str = Field(default="medium", description="low, medium, high")
    message: str = Field(..., description="Human-readable description")
    node_name: Optional[str] = Field(None, description="Name of the offending node")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "slide_number": 4,
                "category": "palette",
                "severity": "high",
                "message": "Fill colour #123456 is not part of the theme palette",
                "node_name": "Card",
            }
        },
    )
