"""Export rendered frames to a PowerPoint file with python-pptx."""

import io
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from lxml import etree
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Emu, Pt

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
from .models import CanvasConfig

logger = logging.getLogger(__name__)

EMU_PER_PX = 6350
PT_PER_PX = 0.5
BLANK_LAYOUT_INDEX = 6

ALIGNMENTS = {
    "LEFT": PP_ALIGN.LEFT,
    "CENTER": PP_ALIGN.CENTER,
    "RIGHT": PP_ALIGN.RIGHT,
    "JUSTIFIED": PP_ALIGN.JUSTIFY,
}


def px(value: float) -> Emu:
    return Emu(int(round(value * EMU_PER_PX)))


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.lstrip("#").upper())


def _set_alpha(color_parent, alpha: float) -> None:
    """Attach an ``a:alpha`` child to the ``a:srgbClr`` under ``color_parent``."""
    if color_parent is None or alpha >= 1.0:
        return
    srgb = color_parent.find(qn("a:srgbClr"))
    if srgb is None:
        return
    for existing in srgb.findall(qn("a:alpha")):
        srgb.remove(existing)
    node = etree.SubElement(srgb, qn("a:alpha"))
    node.set("val", str(int(round(max(alpha, 0.0) * 100000))))


class PptxExporter:
    """Writes frames as slides of a widescreen presentation."""

    def __init__(self, canvas: Optional[CanvasConfig] = None):
        """
        Initialize the PPTX exporter.

        Args:
            canvas: Canvas the frames were rendered for; sets the slide size
        """
        self.canvas = canvas or CanvasConfig()

    def export(self, frames: Iterable[FrameNode], output_path: Union[str, Path]) -> Path:
        """
        Export frames to a .pptx file.

        Args:
            frames: Rendered frames in slide order
            output_path: Destination file

        Returns:
            Path of the written presentation

        Raises:
            ExportError: If the file cannot be written
        """
        output_path = Path(output_path)
        prs = Presentation()
        prs.slide_width = px(self.canvas.width)
        prs.slide_height = px(self.canvas.height)

        count = 0
        for frame in frames:
            self._add_frame(prs, frame)
            count += 1

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            prs.save(str(output_path))
        except OSError as e:
            raise ExportError(f"Could not write presentation to {output_path}: {e}") from e

        logger.info(f"Exported {count} slides to {output_path}")
        return output_path

    def _add_frame(self, prs, frame: FrameNode) -> None:
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT_INDEX])
        self._apply_background(slide, frame)

        for node in frame.children:
            if not node.visible:
                continue
            try:
                self._add_node(slide, frame, node)
            except (ValueError, KeyError, OSError) as e:
                logger.warning(f"Skipped node '{node.name}' on slide {frame.slide_number}: {e}")

        if frame.notes:
            slide.notes_slide.notes_text_frame.text = frame.notes

        logger.debug(f"Exported frame '{frame.name}' with {len(frame.children)} nodes")

    def _apply_background(self, slide, frame: FrameNode) -> None:
        if not frame.fills:
            return
        paint = frame.fills[0]
        fill = slide.background.fill
        if isinstance(paint, SolidPaint):
            fill.solid()
            fill.fore_color.rgb = _rgb(paint.hex)
        elif isinstance(paint, GradientPaint):
            self._apply_gradient(fill, paint, 1.0)

    def _add_node(self, slide, frame: FrameNode, node: SceneNode) -> None:
        if isinstance(node, TextNode):
            self._add_text(slide, node)
        elif isinstance(node, LineNode):
            self._add_line(slide, node)
        elif isinstance(node, (RectangleNode, EllipseNode)):
            image = next((paint for paint in node.fills if isinstance(paint, ImagePaint)), None)
            if image is not None:
                self._add_picture(slide, frame, node, image)
            else:
                self._add_shape(slide, node)

    def _add_shape(self, slide, node: SceneNode) -> None:
        if isinstance(node, EllipseNode):
            shape_type = MSO_SHAPE.OVAL
        elif getattr(node, "corner_radius", 0):
            shape_type = MSO_SHAPE.ROUNDED_RECTANGLE
        else:
            shape_type = MSO_SHAPE.RECTANGLE

        shape = slide.shapes.add_shape(shape_type, px(node.x), px(node.y), px(node.width), px(node.height))
        shape.name = node.name or shape.name
        shape.shadow.inherit = False

        if shape_type == MSO_SHAPE.ROUNDED_RECTANGLE:
            shortest = min(node.width, node.height)
            if shortest > 0:
                shape.adjustments[0] = min(0.5, node.corner_radius / shortest)

        paint = node.fills[0] if node.fills else None
        if isinstance(paint, SolidPaint):
            shape.fill.solid()
            shape.fill.fore_color.rgb = _rgb(paint.hex)
            _set_alpha(shape._element.spPr.find(qn("a:solidFill")), node.opacity)
        elif isinstance(paint, GradientPaint):
            self._apply_gradient(shape.fill, paint, node.opacity)
            if paint.type == "GRADIENT_RADIAL":
                self._make_radial(shape._element.spPr.find(qn("a:gradFill")))
        else:
            shape.fill.background()

        if node.strokes:
            shape.line.color.rgb = _rgb(node.strokes[0].hex)
            shape.line.width = px(node.stroke_weight)
        else:
            shape.line.fill.background()

    def _apply_gradient(self, fill, paint: GradientPaint, opacity: float) -> None:
        fill.gradient()
        stops = fill.gradient_stops
        first, last = paint.stops[0], paint.stops[-1]
        for stop, source in ((stops[0], first), (stops[len(stops) - 1], last)):
            stop.position = source.position
            stop.color.rgb = _rgb(source.hex)
            _set_alpha(stop._gs, source.alpha * opacity)
        if paint.type == "GRADIENT_LINEAR":
            fill.gradient_angle = paint.angle % 360

    @staticmethod
    def _make_radial(grad_fill) -> None:
        if grad_fill is None:
            return
        lin = grad_fill.find(qn("a:lin"))
        if lin is not None:
            grad_fill.remove(lin)
        path = etree.SubElement(grad_fill, qn("a:path"))
        path.set("path", "circle")
        rect = etree.SubElement(path, qn("a:fillToRect"))
        for side in ("l", "t", "r", "b"):
            rect.set(side, "50000")

    def _add_line(self, slide, node: LineNode) -> None:
        end_x, end_y = node.end_point()
        connector = slide.shapes.add_connector(
            MSO_CONNECTOR.STRAIGHT, px(node.x), px(node.y), px(end_x), px(end_y)
        )
        connector.name = node.name or connector.name
        if node.strokes:
            connector.line.color.rgb = _rgb(node.strokes[0].hex)
            connector.line.width = px(node.stroke_weight)

    def _add_picture(self, slide, frame: FrameNode, node: SceneNode, paint: ImagePaint) -> None:
        resource = frame.images[paint.image_hash]
        picture = slide.shapes.add_picture(
            io.BytesIO(resource.data), px(node.x), px(node.y), px(node.width), px(node.height)
        )
        picture.name = node.name or picture.name

    def _add_text(self, slide, node: TextNode) -> None:
        box = slide.shapes.add_textbox(px(node.x), px(node.y), px(node.width), px(node.height))
        box.name = (node.name or "Text")[:60]
        frame = box.text_frame
        frame.word_wrap = True
        frame.vertical_anchor = MSO_ANCHOR.TOP
        frame.margin_left = frame.margin_right = frame.margin_top = frame.margin_bottom = 0

        color = node.fills[0].hex if node.fills and isinstance(node.fills[0], SolidPaint) else None

        for i, line in enumerate(node.characters.split("\n")):
            paragraph = frame.paragraphs[0] if i == 0 else frame.add_paragraph()
            paragraph.alignment = ALIGNMENTS.get(node.text_align_horizontal, PP_ALIGN.LEFT)
            if node.line_height:
                paragraph.line_spacing = Pt(node.line_height * PT_PER_PX)

            run = paragraph.add_run()
            run.text = line
            font = run.font
            font.name = node.font_family
            font.size = Pt(node.font_size * PT_PER_PX)
            font.bold = node.is_bold
            if color:
                font.color.rgb = _rgb(color)
                r_pr = run._r.find(qn("a:rPr"))
                _set_alpha(r_pr.find(qn("a:solidFill")) if r_pr is not None else None, node.opacity)
            if node.letter_spacing:
                run._r.get_or_add_rPr().set("spc", str(int(round(node.letter_spacing * PT_PER_PX * 100))))
