"""Image placement with rounded corners, shadows and placeholder fallback."""

import logging
from dataclasses import dataclass
from typing import Optional

from .canvas import DropShadow, FrameNode, ImagePaint, RectangleNode
from .image_fetcher import ImageFetcher
from .utils import create_card

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageGeometry:
    x: float
    y: float
    w: float
    h: float
    corner_radius: float = 12


def _fetch(image_url: str, fetcher: Optional[ImageFetcher]):
    if fetcher is not None:
        return fetcher.fetch(image_url)
    with ImageFetcher() as default_fetcher:
        return default_fetcher.fetch(image_url)


def place_image_with_shadow(
    frame: FrameNode,
    image_url: str,
    geometry: ImageGeometry,
    fallback_color: str,
    fetcher: Optional[ImageFetcher] = None,
) -> RectangleNode:
    """
    Place an image with rounded corners and a drop shadow.

    A failed fetch or decode never propagates: a translucent placeholder card
    with the same geometry is appended instead.

    Args:
        frame: Target frame
        image_url: Image location
        geometry: Position, size and corner radius
        fallback_color: Placeholder colour from the theme palette
        fetcher: Image fetcher; a short-lived default one is used when omitted

    Returns:
        The appended image rectangle or placeholder card
    """
    result = _fetch(image_url, fetcher)

    if not result.ok:
        logger.info(f"Using placeholder for image {image_url}")
        return create_card(
            frame,
            x=geometry.x,
            y=geometry.y,
            w=geometry.w,
            h=geometry.h,
            fill=fallback_color,
            corner_radius=geometry.corner_radius,
            opacity=0.3,
            name="Image Placeholder",
        )

    image_hash = frame.register_image(result.resource)

    rect = RectangleNode(name="Slide Image", x=geometry.x, y=geometry.y)
    rect.resize(geometry.w, geometry.h)
    rect.corner_radius = geometry.corner_radius
    rect.fills = [ImagePaint(image_hash=image_hash, scale_mode="FILL")]
    rect.effects = [DropShadow(alpha=0.15, offset_x=0, offset_y=4, radius=16, spread=0)]

    frame.append_child(rect)
    return rect


def place_background_image(
    frame: FrameNode,
    image_url: str,
    opacity: float = 0.8,
    fetcher: Optional[ImageFetcher] = None,
) -> Optional[RectangleNode]:
    """
    Place an image as a full-bleed background.

    On failure nothing is appended; the background already painted stays visible.
    """
    result = _fetch(image_url, fetcher)
    if not result.ok:
        logger.info(f"Background image {image_url} unavailable, keeping painted background")
        return None

    image_hash = frame.register_image(result.resource)

    rect = RectangleNode(name="Background Image", x=0, y=0)
    rect.resize(frame.width, frame.height)
    rect.fills = [ImagePaint(image_hash=image_hash, scale_mode="FILL")]
    rect.opacity = opacity
    frame.append_child(rect)
    return rect
