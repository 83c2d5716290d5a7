"""Export rendered decks as a JSON node tree."""

import base64
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from .exceptions import ExportError

logger = logging.getLogger(__name__)

JSON_FORMAT_VERSION = 2


def deck_to_dict(deck, embed_images: bool = False) -> Dict[str, Any]:
    """
    Build the JSON-serialisable form of a rendered deck.

    Args:
        deck: RenderedDeck
        embed_images: Include base64 image bytes instead of only their hashes

    Returns:
        Dictionary with title, theme, styles and one entry per frame
    """
    frames = []
    for frame in deck.frames:
        data = frame.to_dict()
        data["images"] = {
            image_hash: {
                "width": resource.width,
                "height": resource.height,
                "format": resource.format,
                **({"data": base64.b64encode(resource.data).decode("ascii")} if embed_images else {}),
            }
            for image_hash, resource in frame.images.items()
        }
        frames.append(data)

    return {
        "version": JSON_FORMAT_VERSION,
        "title": deck.title,
        "theme": deck.theme.model_dump(by_alias=True),
        "styles": deck.styles.to_dict() if deck.styles else None,
        "issues": [issue.model_dump() for issue in deck.issues],
        "frames": frames,
    }


def export_json(deck, output_path: Union[str, Path], embed_images: bool = False) -> Path:
    """
    Write a rendered deck to a JSON file.

    Raises:
        ExportError: If the file cannot be written
    """
    output_path = Path(output_path)
    payload = deck_to_dict(deck, embed_images=embed_images)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Could not write JSON to {output_path}: {e}") from e

    logger.info(f"Exported {len(deck.frames)} frames to {output_path}")
    return output_path
