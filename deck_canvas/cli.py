"""Command-line interface for the deck-canvas slide renderer."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .deck_renderer import DeckRenderer, get_render_statistics
from .exceptions import ExportError, LayoutViolationError, PayloadError
from .json_exporter import export_json
from .layout_registry import LAYOUT_REGISTRY
from .models import DeckPayload, LayoutValidationConfig, RenderConfig
from .pptx_exporter import PptxExporter
from .raster_exporter import RasterExporter

# Load environment variables
load_dotenv()

console = Console()


def _configure_logging(debug: bool, log_file: Optional[Path]):
    """Configure root logging handlers and level."""
    import logging

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w"))

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def _load_payload(path: Path) -> DeckPayload:
    """
    Read and validate a deck payload file.

    Raises:
        PayloadError: If the file is not JSON or does not match the payload schema
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PayloadError(f"Could not read {path}: {e}") from e

    try:
        return DeckPayload.model_validate(data)
    except ValidationError as e:
        raise PayloadError(f"Invalid deck payload in {path}: {e.error_count()} error(s)\n{e}") from e


def _fail(ctx: click.Context, message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    if ctx.obj.get("debug", False):
        import traceback
        console.print(traceback.format_exc())
    else:
        console.print("Run again with --debug or --log-file for details")
    sys.exit(1)


def _issues_table(issues) -> Table:
    table = Table(title="Layout Issues")
    table.add_column("Slide", justify="right")
    table.add_column("Category", style="bold")
    table.add_column("Severity")
    table.add_column("Node")
    table.add_column("Message")

    severity_colors = {"high": "red", "medium": "yellow", "low": "green"}
    for issue in issues:
        color = severity_colors.get(issue.severity, "white")
        table.add_row(
            str(issue.slide_number),
            issue.category,
            f"[{color}]{issue.severity}[/{color}]",
            issue.node_name or "-",
            escape(issue.message),
        )
    return table


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Show stack traces on error")
@click.option("--log-file", type=click.Path(path_type=Path), help="Write debug logs to file")
@click.pass_context
def cli(ctx: click.Context, debug: bool, log_file: Optional[Path]):
    """
    deck-canvas - render structured slide documents onto a fixed canvas.

    Turns a deck payload (theme plus slide documents) into PPTX, PNG or JSON.
    """
    _configure_logging(debug, log_file)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["log_file"] = log_file


@cli.command()
@click.pass_context
@click.argument("payload_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--output", "-o",
    required=True,
    type=click.Path(path_type=Path),
    help="Output file (pptx/json) or directory (png)"
)
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["pptx", "png", "json"]),
    default="pptx",
    help="Output format"
)
@click.option("--strict", is_flag=True, help="Fail when layout validation finds issues")
@click.option("--workers", type=int, default=None, help="Slides rendered concurrently")
@click.option("--image-timeout", type=float, default=None, help="Seconds before an image fetch gives up")
@click.option("--scale", type=float, default=0.5, help="PNG output pixels per canvas pixel")
@click.option("--embed-images", is_flag=True, help="Embed image bytes in JSON output")
def render(
    ctx: click.Context,
    payload_path: Path,
    output: Path,
    output_format: str,
    strict: bool,
    workers: Optional[int],
    image_timeout: Optional[float],
    scale: float,
    embed_images: bool,
):
    """Render a deck payload to PPTX, PNG images or a JSON node tree."""

    try:
        payload = _load_payload(payload_path)
    except PayloadError as e:
        _fail(ctx, str(e))
        return

    validation = LayoutValidationConfig(mode="strict" if strict else "lenient")
    config = RenderConfig.from_env(
        max_workers=workers,
        image_timeout=image_timeout,
        validation=validation,
    )
    canvas = payload.canvas_config()

    console.print(f"[bold green]Rendering {payload_path}[/bold green]")
    console.print(f"Title: {payload.title}")
    console.print(f"Slides: {len(payload.slides)}")
    console.print(f"Canvas: {canvas.width}x{canvas.height}")
    console.print(f"Output: {output} ({output_format})")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        try:
            task = progress.add_task("Laying out slides...", total=None)
            with DeckRenderer(config) as renderer:
                deck = renderer.render(payload, canvas=canvas)
            progress.remove_task(task)

            task = progress.add_task(f"Writing {output_format}...", total=None)
            if output_format == "pptx":
                written = [PptxExporter(canvas).export(deck.frames, output)]
            elif output_format == "png":
                written = RasterExporter(scale=scale, font_dir=config.font_dir).export(deck.frames, output)
            else:
                written = [export_json(deck, output, embed_images=embed_images)]
            progress.remove_task(task)

        except LayoutViolationError as e:
            progress.stop()
            console.print(f"[red]Layout validation failed:[/red]\n{escape(str(e))}")
            sys.exit(1)
        except ExportError as e:
            progress.stop()
            _fail(ctx, f"Export failed: {e}")
            return

    stats = get_render_statistics(deck)

    table = Table(title="Render Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Slides", str(stats["total_slides"]))
    table.add_row("Nodes", str(stats["total_nodes"]))
    table.add_row("Text Nodes", str(stats["text_nodes"]))
    table.add_row("Images", str(stats["images"]))
    table.add_row("Image Placeholders", str(stats["placeholders"]))
    table.add_row("Slides With Notes", str(stats["slides_with_notes"]))
    table.add_row("Fallback Slides", str(stats["fallback_slides"]))
    table.add_row("Layout Issues", str(len(deck.issues)))
    console.print(table)

    if deck.issues:
        console.print(f"[yellow]{len(deck.issues)} layout issue(s); run 'validate' for details[/yellow]")

    for path in written:
        console.print(f"[green]Wrote {path}[/green]")


@cli.command()
@click.pass_context
@click.argument("payload_path", type=click.Path(exists=True, path_type=Path))
@click.option("--strict", is_flag=True, help="Exit non-zero when issues are found")
@click.option("--min-overlay", type=float, default=0.3, help="Minimum overlay opacity over full-bleed images")
def validate(ctx: click.Context, payload_path: Path, strict: bool, min_overlay: float):
    """Render a deck payload and report layout issues."""

    try:
        payload = _load_payload(payload_path)
    except PayloadError as e:
        _fail(ctx, str(e))
        return

    # Issues are collected leniently and the exit code decided here.
    config = RenderConfig.from_env(
        validation=LayoutValidationConfig(mode="lenient", min_overlay_opacity=min_overlay)
    )
    with DeckRenderer(config) as renderer:
        deck = renderer.render(payload, canvas=payload.canvas_config())

    if not deck.issues:
        console.print(f"[green]No layout issues in {len(deck.frames)} slides[/green]")
        return

    console.print(_issues_table(deck.issues))

    by_category = get_render_statistics(deck)["issues"]
    summary = ", ".join(f"{count} {category}" for category, count in sorted(by_category.items()))
    console.print(f"\n[yellow]{len(deck.issues)} issue(s): {summary}[/yellow]")

    if strict:
        sys.exit(1)


@cli.command()
def layouts():
    """List the slide types with a dedicated layout."""

    table = Table(title="Registered Layouts")
    table.add_column("Slide Type", style="cyan")
    table.add_column("Layout")

    for slide_type, layout in LAYOUT_REGISTRY.items():
        table.add_row(slide_type, layout.__name__)

    console.print(table)
    console.print("Unknown slide types render with the CONTENT layout.")


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
