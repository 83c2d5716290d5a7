#!/usr/bin/env python3
"""
Demo script rendering the sample deck to every output format.

Renders examples/sample_deck.json into examples/output/ as a PPTX file,
a directory of PNG previews and a JSON node tree, then prints the render
statistics and any layout issues.
"""

import json
import logging
import sys
from pathlib import Path

# Add the parent directory to the path so we can import deck_canvas
sys.path.insert(0, str(Path(__file__).parent.parent))

from deck_canvas.deck_renderer import DeckRenderer, get_render_statistics
from deck_canvas.json_exporter import export_json
from deck_canvas.models import DeckPayload, RenderConfig
from deck_canvas.pptx_exporter import PptxExporter
from deck_canvas.raster_exporter import RasterExporter

EXAMPLES_DIR = Path(__file__).parent


def main():
    """Render the sample deck."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    print("Deck Rendering Demo")
    print("=" * 40)

    payload = DeckPayload.model_validate(json.loads((EXAMPLES_DIR / "sample_deck.json").read_text(encoding="utf-8")))
    config = RenderConfig.from_env(max_workers=4)
    canvas = payload.canvas_config()

    with DeckRenderer(config) as renderer:
        deck = renderer.render(payload, canvas=canvas)

    output_dir = EXAMPLES_DIR / "output"
    pptx_path = PptxExporter(canvas).export(deck.frames, output_dir / "sample_deck.pptx")
    png_paths = RasterExporter(scale=0.25, font_dir=config.font_dir).export(deck.frames, output_dir / "png")
    json_path = export_json(deck, output_dir / "sample_deck.json")

    print(f"\nPPTX: {pptx_path}")
    print(f"PNG:  {len(png_paths)} images in {output_dir / 'png'}")
    print(f"JSON: {json_path}")

    stats = get_render_statistics(deck)
    print("\nRender statistics:")
    for key in ("total_slides", "total_nodes", "text_nodes", "placeholders", "fallback_slides"):
        print(f"• {key}: {stats[key]}")
    print(f"• slide types: {stats['slide_types']}")

    if deck.issues:
        print(f"\n{len(deck.issues)} layout issue(s):")
        for issue in deck.issues:
            print(f"• slide {issue.slide_number} [{issue.category}] {issue.message}")
    else:
        print("\nNo layout issues.")


if __name__ == "__main__":
    main()
