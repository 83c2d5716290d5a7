"""Tests for CLI module."""

import json
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from deck_canvas import __version__
from deck_canvas.cli import cli
from deck_canvas.deck_renderer import DeckRenderer

from conftest import PALETTE


def _payload(slides):
    return {
        "title": "CLI Deck",
        "theme": {"name": "Midnight", "colors": PALETTE},
        "slides": slides,
    }


CLEAN_SLIDES = [
    {"slideNumber": 1, "slideType": "TITLE", "title": "Our Vision", "bodyLines": ["Change the world"]},
    {"slideNumber": 2, "slideType": "CONTENT", "title": "Why now", "bodyLines": ["Speed", "Consistency"]},
]

# Forty plain lines run past the bottom padding of a content slide.
OVERFLOW_SLIDES = [
    {"slideNumber": 1, "slideType": "CONTENT", "title": "Too much", "bodyLines": [f"Line {i}" for i in range(40)]},
]


class TestCLI:
    """Tests for CLI functionality."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()
        self.temp_dir = Path(tempfile.mkdtemp())

        self.payload_path = self.temp_dir / "deck.json"
        self.payload_path.write_text(json.dumps(_payload(CLEAN_SLIDES)), encoding="utf-8")

        self.overflow_path = self.temp_dir / "overflow.json"
        self.overflow_path.write_text(json.dumps(_payload(OVERFLOW_SLIDES)), encoding="utf-8")

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_cli_version(self):
        """Test CLI version option."""
        result = self.runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_help(self):
        """Test CLI help."""
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "render" in result.output
        assert "validate" in result.output
        assert "layouts" in result.output

    def test_render_help(self):
        """Test render command help."""
        result = self.runner.invoke(cli, ["render", "--help"])
        assert result.exit_code == 0
        assert "--output" in result.output
        assert "--format" in result.output
        assert "--strict" in result.output

    def test_render_pptx(self):
        """Test rendering a payload to PPTX."""
        output = self.temp_dir / "deck.pptx"
        result = self.runner.invoke(cli, ["render", str(self.payload_path), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.exists()
        assert "Render Summary" in result.output

    def test_render_json(self):
        """Test rendering a payload to JSON."""
        output = self.temp_dir / "deck_tree.json"
        result = self.runner.invoke(cli, ["render", str(self.payload_path), "-o", str(output), "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data["frames"]) == 2

    def test_render_png(self):
        """Test rendering a payload to PNG images."""
        output = self.temp_dir / "png"
        result = self.runner.invoke(
            cli, ["render", str(self.payload_path), "-o", str(output), "-f", "png", "--scale", "0.1"]
        )

        assert result.exit_code == 0, result.output
        assert sorted(path.name for path in output.iterdir()) == ["slide_01.png", "slide_02.png"]

    def test_render_with_workers(self):
        """Test the workers option is passed to the render configuration."""
        output = self.temp_dir / "deck.pptx"
        with patch("deck_canvas.cli.DeckRenderer", wraps=DeckRenderer) as renderer:
            result = self.runner.invoke(
                cli, ["render", str(self.payload_path), "-o", str(output), "--workers", "3", "--image-timeout", "2"]
            )

        assert result.exit_code == 0, result.output
        config = renderer.call_args[0][0]
        assert config.max_workers == 3
        assert config.image_timeout == 2.0

    def test_render_strict_fails_on_issues(self):
        """Test strict rendering exits non-zero when validation fails."""
        output = self.temp_dir / "deck.pptx"
        result = self.runner.invoke(cli, ["render", str(self.overflow_path), "-o", str(output), "--strict"])

        assert result.exit_code == 1
        assert "Layout validation failed" in result.output
        assert not output.exists()

    def test_render_lenient_reports_issues(self):
        """Test lenient rendering writes the output and mentions issues."""
        output = self.temp_dir / "deck.pptx"
        result = self.runner.invoke(cli, ["render", str(self.overflow_path), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.exists()
        assert "layout issue" in result.output

    def test_render_invalid_json(self):
        """Test a payload file that is not JSON."""
        bad = self.temp_dir / "bad.json"
        bad.write_text("{not json", encoding="utf-8")

        result = self.runner.invoke(cli, ["render", str(bad), "-o", str(self.temp_dir / "x.pptx")])

        assert result.exit_code == 1
        assert "Could not read" in result.output

    def test_render_invalid_payload(self):
        """Test a payload missing its theme."""
        bad = self.temp_dir / "bad.json"
        bad.write_text(json.dumps({"title": "No theme", "slides": []}), encoding="utf-8")

        result = self.runner.invoke(cli, ["render", str(bad), "-o", str(self.temp_dir / "x.pptx")])

        assert result.exit_code == 1
        assert "Invalid deck payload" in result.output

    def test_render_missing_file(self):
        """Test a payload path that does not exist."""
        result = self.runner.invoke(cli, ["render", str(self.temp_dir / "nope.json"), "-o", "x.pptx"])
        assert result.exit_code == 2

    def test_validate_clean(self):
        """Test validating a clean deck."""
        result = self.runner.invoke(cli, ["validate", str(self.payload_path)])

        assert result.exit_code == 0, result.output
        assert "No layout issues" in result.output

    def test_validate_reports_issues(self):
        """Test issues are listed in a table."""
        result = self.runner.invoke(cli, ["validate", str(self.overflow_path)])

        assert result.exit_code == 0, result.output
        assert "Layout Issues" in result.output
        assert "bounds" in result.output

    def test_validate_strict_exit_code(self):
        """Test strict validation exits non-zero when issues exist."""
        result = self.runner.invoke(cli, ["validate", str(self.overflow_path), "--strict"])
        assert result.exit_code == 1

    def test_layouts_lists_registry(self):
        """Test the layouts command lists registered slide types."""
        result = self.runner.invoke(cli, ["layouts"])

        assert result.exit_code == 0
        assert "TITLE" in result.output
        assert "VISUAL_HUMOR" in result.output
        assert "CONTENT layout" in result.output
