"""In-memory scene graph produced by the layout engine.

Nodes carry absolute positions in the canvas coordinate space. A frame's
children are kept in append order, which is also the z-order: later
children draw on top of earlier ones.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .models import CanvasConfig


@dataclass(frozen=True)
class RGB:
    """Normalized (0-1) colour triple."""

    r: float
    g: float
    b: float

    def to_bytes(self) -> Tuple[int, int, int]:
        return (round(self.r * 255), round(self.g * 255), round(self.b * 255))


@dataclass
class SolidPaint:
    color: RGB
    hex: str
    type: str = "SOLID"


@dataclass
class GradientStop:
    position: float
    color: RGB
    hex: str
    alpha: float = 1.0


@dataclass
class GradientPaint:
    type: str  # GRADIENT_LINEAR or GRADIENT_RADIAL
    stops: List[GradientStop]
    transform: List[List[float]] = field(default_factory=lambda: [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    angle: float = 0.0


@dataclass
class ImagePaint:
    image_hash: str
    scale_mode: str = "FILL"
    type: str = "IMAGE"


Paint = Union[SolidPaint, GradientPaint, ImagePaint]


@dataclass
class DropShadow:
    color: RGB = RGB(0.0, 0.0, 0.0)
    alpha: float = 0.15
    offset_x: float = 0.0
    offset_y: float = 4.0
    radius: float = 16.0
    spread: float = 0.0
    visible: bool = True
    blend_mode: str = "NORMAL"
    type: str = "DROP_SHADOW"


@dataclass
class ImageResource:
    """Decoded image bytes registered with a frame."""

    hash: str
    data: bytes
    width: int
    height: int
    format: Optional[str] = None


@dataclass
class SceneNode:
    """Base class for every visual primitive."""

    name: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    opacity: float = 1.0
    visible: bool = True
    rotation: float = 0.0
    fills: List[Paint] = field(default_factory=list)
    strokes: List[SolidPaint] = field(default_factory=list)
    stroke_weight: float = 0.0
    effects: List[DropShadow] = field(default_factory=list)

    node_type = "NODE"

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the node for the JSON host format."""
        return {
            "type": self.node_type,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "opacity": self.opacity,
            "visible": self.visible,
            "rotation": self.rotation,
            "fills": [asdict(paint) for paint in self.fills],
            "strokes": [asdict(paint) for paint in self.strokes],
            "strokeWeight": self.stroke_weight,
            "effects": [asdict(effect) for effect in self.effects],
        }


@dataclass
class RectangleNode(SceneNode):
    corner_radius: float = 0.0

    node_type = "RECTANGLE"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["cornerRadius"] = self.corner_radius
        return data


@dataclass
class EllipseNode(SceneNode):
    node_type = "ELLIPSE"


@dataclass
class LineNode(SceneNode):
    """A straight line of length ``width`` rotated counter-clockwise by ``rotation`` degrees."""

    node_type = "LINE"

    def end_point(self) -> Tuple[float, float]:
        rad = math.radians(-self.rotation)
        return (self.x + self.width * math.cos(rad), self.y + self.width * math.sin(rad))


# Average glyph advance as a fraction of the font size, used to estimate wrapping.
_AVG_CHAR_WIDTH = 0.52


@dataclass
class TextNode(SceneNode):
    characters: str = ""
    font_family: str = "Inter"
    font_style: str = "Regular"
    font_size: float = 16.0
    line_height: Optional[float] = None
    letter_spacing: float = 0.0
    text_align_horizontal: str = "LEFT"
    text_auto_resize: str = "NONE"

    node_type = "TEXT"

    @property
    def is_bold(self) -> bool:
        return "bold" in self.font_style.lower()

    @property
    def effective_line_height(self) -> float:
        return self.line_height if self.line_height else self.font_size * 1.2

    def wrap_counts(self) -> List[int]:
        """Estimated number of wrapped lines for each hard line of text."""
        char_w = self.font_size * _AVG_CHAR_WIDTH + self.letter_spacing
        per_line = max(1, int(self.width // char_w)) if self.width > 0 and char_w > 0 else 1
        return [max(1, math.ceil(len(line) / per_line)) for line in self.characters.split("\n")]

    def estimated_height(self) -> float:
        """Height the text grows to when auto-resizing vertically."""
        return sum(self.wrap_counts()) * self.effective_line_height

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "characters": self.characters,
            "fontName": {"family": self.font_family, "style": self.font_style},
            "fontSize": self.font_size,
            "lineHeight": self.line_height,
            "letterSpacing": self.letter_spacing,
            "textAlignHorizontal": self.text_align_horizontal,
            "textAutoResize": self.text_auto_resize,
        })
        return data


@dataclass
class FrameNode(SceneNode):
    """One slide's drawing surface. Owns its children and registered images."""

    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    children: List[SceneNode] = field(default_factory=list)
    images: Dict[str, ImageResource] = field(default_factory=dict)
    notes: Optional[str] = None
    slide_number: Optional[int] = None
    slide_type: Optional[str] = None

    node_type = "FRAME"

    @classmethod
    def for_canvas(cls, canvas: CanvasConfig, name: str = "", x: float = 0.0, y: float = 0.0) -> "FrameNode":
        """Create an empty frame sized to the canvas."""
        return cls(name=name, x=x, y=y, width=canvas.width, height=canvas.height, canvas=canvas)

    def append_child(self, node: SceneNode) -> SceneNode:
        self.children.append(node)
        return node

    def register_image(self, resource: ImageResource) -> str:
        """Make image bytes renderable inside this frame and return their hash."""
        self.images.setdefault(resource.hash, resource)
        return resource.hash

    def find_all(self, node_type: Optional[type] = None, name: Optional[str] = None) -> List[SceneNode]:
        """Return children filtered by node class and/or exact name."""
        found = []
        for child in self.children:
            if node_type is not None and not isinstance(child, node_type):
                continue
            if name is not None and child.name != name:
                continue
            found.append(child)
        return found

    def texts(self) -> List[TextNode]:
        return [child for child in self.children if isinstance(child, TextNode)]

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "slideNumber": self.slide_number,
            "slideType": self.slide_type,
            "notes": self.notes,
            "children": [child.to_dict() for child in self.children],
        })
        return data
