"""Rasterise rendered frames to PNG images with Pillow."""

import io
import logging
import math
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont, ImageOps

from .canvas import (
    EllipseNode,
    FrameNode,
    GradientPaint,
    ImagePaint,
    LineNode,
    RectangleNode,
    SceneNode,
    SolidPaint,
    TextNode,
)
from .exceptions import ExportError

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".otf")


class RasterExporter:
    """Draws frames onto Pillow images, one PNG per slide."""

    def __init__(self, scale: float = 0.5, font_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the raster exporter.

        Args:
            scale: Output pixels per canvas pixel
            font_dir: Directory searched for .ttf/.otf files matching font families
        """
        self.scale = scale
        self.font_dir = Path(font_dir) if font_dir else None
        self._font_files = self._index_fonts()
        self._font_cache: Dict[Tuple[str, str, int], ImageFont.ImageFont] = {}

    def export(self, frames: Iterable[FrameNode], output_dir: Union[str, Path]) -> List[Path]:
        """
        Write each frame as ``slide_NN.png`` into ``output_dir``.

        Returns:
            Paths of the written images, in slide order

        Raises:
            ExportError: If an image cannot be written
        """
        output_dir = Path(output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"Could not create output directory {output_dir}: {e}") from e

        paths = []
        for i, frame in enumerate(frames):
            number = frame.slide_number or i + 1
            path = output_dir / f"slide_{number:02d}.png"
            image = self.render_frame(frame)
            try:
                image.save(path, "PNG")
            except OSError as e:
                raise ExportError(f"Could not write {path}: {e}") from e
            paths.append(path)
            logger.debug(f"Rasterised slide {number} to {path}")

        logger.info(f"Exported {len(paths)} PNG images to {output_dir}")
        return paths

    def render_frame(self, frame: FrameNode) -> Image.Image:
        """Rasterise one frame to an RGB image."""
        size = (max(1, round(frame.width * self.scale)), max(1, round(frame.height * self.scale)))
        base = Image.new("RGBA", size, (255, 255, 255, 255))

        if frame.fills:
            background = SceneNode(x=0, y=0, width=frame.width, height=frame.height, fills=frame.fills)
            base = self._composite_shape(base, background, "rect", 0)

        for node in frame.children:
            if not node.visible:
                continue
            if isinstance(node, TextNode):
                base = self._draw_text(base, node)
            elif isinstance(node, LineNode):
                base = self._draw_line(base, node)
            elif isinstance(node, (RectangleNode, EllipseNode)):
                image_paint = next((paint for paint in node.fills if isinstance(paint, ImagePaint)), None)
                if image_paint is not None:
                    base = self._draw_image(base, frame, node, image_paint)
                else:
                    kind = "ellipse" if isinstance(node, EllipseNode) else "rect"
                    radius = getattr(node, "corner_radius", 0)
                    base = self._composite_shape(base, node, kind, radius)

        return base.convert("RGB")

    # ── Shapes ────────────────────────────────────────────────

    def _box(self, node: SceneNode) -> Tuple[int, int, int, int]:
        s = self.scale
        return (
            round(node.x * s),
            round(node.y * s),
            round((node.x + node.width) * s),
            round((node.y + node.height) * s),
        )

    def _mask(self, size: Tuple[int, int], box, kind: str, radius: float) -> Image.Image:
        mask = Image.new("L", size, 0)
        draw = ImageDraw.Draw(mask)
        if box[2] <= box[0] or box[3] <= box[1]:
            return mask
        if kind == "ellipse":
            draw.ellipse(box, fill=255)
        elif radius:
            draw.rounded_rectangle(box, radius=radius * self.scale, fill=255)
        else:
            draw.rectangle(box, fill=255)
        return mask

    def _composite_shape(self, base: Image.Image, node: SceneNode, kind: str, radius: float) -> Image.Image:
        box = self._box(node)
        mask = self._mask(base.size, box, kind, radius)

        paint = node.fills[0] if node.fills else None
        if isinstance(paint, SolidPaint):
            r, g, b = paint.color.to_bytes()
            layer = Image.new("RGBA", base.size, (r, g, b, 0))
            alpha = mask.point(lambda v: round(v * node.opacity))
            layer.putalpha(alpha)
            base = Image.alpha_composite(base, layer)
        elif isinstance(paint, GradientPaint):
            field = gradient_field(paint, base.size, box, node.opacity)
            layer = Image.fromarray(field, "RGBA")
            transparent = Image.new("RGBA", base.size, (0, 0, 0, 0))
            base = Image.alpha_composite(base, Image.composite(layer, transparent, mask))

        if node.strokes and node.stroke_weight > 0:
            r, g, b = node.strokes[0].color.to_bytes()
            layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
            draw = ImageDraw.Draw(layer)
            width = max(1, round(node.stroke_weight * self.scale))
            outline = (r, g, b, round(255 * node.opacity))
            if box[2] > box[0] and box[3] > box[1]:
                if kind == "ellipse":
                    draw.ellipse(box, outline=outline, width=width)
                else:
                    draw.rounded_rectangle(box, radius=radius * self.scale, outline=outline, width=width)
            base = Image.alpha_composite(base, layer)

        return base

    def _draw_line(self, base: Image.Image, node: LineNode) -> Image.Image:
        if not node.strokes:
            return base
        end_x, end_y = node.end_point()
        s = self.scale
        r, g, b = node.strokes[0].color.to_bytes()
        layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).line(
            [(node.x * s, node.y * s), (end_x * s, end_y * s)],
            fill=(r, g, b, round(255 * node.opacity)),
            width=max(1, round(node.stroke_weight * s)),
        )
        return Image.alpha_composite(base, layer)

    def _draw_image(self, base: Image.Image, frame: FrameNode, node: SceneNode, paint: ImagePaint) -> Image.Image:
        resource = frame.images.get(paint.image_hash)
        box = self._box(node)
        width, height = box[2] - box[0], box[3] - box[1]
        if resource is None or width <= 0 or height <= 0:
            return base

        with Image.open(io.BytesIO(resource.data)) as source:
            fitted = ImageOps.fit(source.convert("RGBA"), (width, height))

        layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
        layer.paste(fitted, (box[0], box[1]))
        mask = self._mask(base.size, box, "rect", getattr(node, "corner_radius", 0))
        alpha = Image.fromarray(
            (np.asarray(layer.getchannel("A"), dtype=np.float32) * (np.asarray(mask) / 255.0) * node.opacity).astype(
                np.uint8
            ),
            "L",
        )
        layer.putalpha(alpha)
        return Image.alpha_composite(base, layer)

    # ── Text ──────────────────────────────────────────────────

    def _index_fonts(self) -> Dict[str, Path]:
        if self.font_dir is None or not self.font_dir.is_dir():
            return {}
        files = {}
        for path in sorted(self.font_dir.rglob("*")):
            if path.suffix.lower() in FONT_EXTENSIONS:
                files[path.stem.lower().replace(" ", "").replace("_", "-")] = path
        logger.debug(f"Indexed {len(files)} font files in {self.font_dir}")
        return files

    def _font(self, family: str, style: str, size: int):
        key = (family, style, size)
        if key in self._font_cache:
            return self._font_cache[key]

        stem = family.lower().replace(" ", "")
        candidates = [f"{stem}-{style.lower()}", stem] if style.lower() != "regular" else [f"{stem}-regular", stem]
        path = next((self._font_files[name] for name in candidates if name in self._font_files), None)

        if path is not None:
            font = ImageFont.truetype(str(path), size)
        else:
            font = ImageFont.load_default(size=size)
        self._font_cache[key] = font
        return font

    def _draw_text(self, base: Image.Image, node: TextNode) -> Image.Image:
        s = self.scale
        size = max(1, round(node.font_size * s))
        font = self._font(node.font_family, node.font_style, size)
        color = node.fills[0] if node.fills and isinstance(node.fills[0], SolidPaint) else None
        if color is None:
            return base
        r, g, b = color.color.to_bytes()
        fill = (r, g, b, round(255 * node.opacity))

        layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        max_width = node.width * s
        line_height = node.effective_line_height * s

        y = node.y * s
        for line in wrap_text(draw, node.characters, font, max_width):
            line_width = draw.textlength(line, font=font)
            if node.text_align_horizontal == "CENTER":
                x = node.x * s + (max_width - line_width) / 2
            elif node.text_align_horizontal == "RIGHT":
                x = node.x * s + max_width - line_width
            else:
                x = node.x * s
            draw.text((x, y + (line_height - size) / 2), line, font=font, fill=fill)
            y += line_height

        return Image.alpha_composite(base, layer)


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> List[str]:
    """Greedy word wrap of each hard line to ``max_width`` pixels."""
    lines: List[str] = []
    for hard_line in text.split("\n"):
        words = hard_line.split(" ")
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if current and draw.textlength(candidate, font=font) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def gradient_field(paint: GradientPaint, size: Tuple[int, int], box, opacity: float = 1.0) -> np.ndarray:
    """
    Evaluate a gradient over a full-size RGBA array.

    Linear gradients run along ``paint.angle`` across the box; radial gradients
    run from the box centre to its edge.
    """
    width, height = size
    left, top, right, bottom = box
    box_w = max(right - left, 1)
    box_h = max(bottom - top, 1)

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    u = (xs - left) / box_w - 0.5
    v = (ys - top) / box_h - 0.5

    if paint.type == "GRADIENT_RADIAL":
        t = np.clip(np.sqrt(u * u + v * v) * 2.0, 0.0, 1.0)
    else:
        rad = math.radians(paint.angle)
        proj = u * math.cos(rad) + v * math.sin(rad)
        extent = (abs(math.cos(rad)) + abs(math.sin(rad))) / 2 or 1.0
        t = np.clip((proj + extent) / (2 * extent), 0.0, 1.0)

    positions = [stop.position for stop in paint.stops]
    field = np.zeros((height, width, 4), dtype=np.float32)
    for channel in range(3):
        values = [stop.color.to_bytes()[channel] for stop in paint.stops]
        field[..., channel] = np.interp(t, positions, values)
    field[..., 3] = np.interp(t, positions, [stop.alpha * 255 * opacity for stop in paint.stops])

    return field.clip(0, 255).astype(np.uint8)
