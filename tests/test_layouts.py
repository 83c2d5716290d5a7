"""Tests for per-slide-type layouts and the layout registry."""

import pytest

from deck_canvas import layouts
from deck_canvas.canvas import EllipseNode, LineNode, RectangleNode, TextNode
from deck_canvas.deck_renderer import DeckRenderer
from deck_canvas.layout_registry import LAYOUT_REGISTRY, get_layout_for_type, registered_types
from deck_canvas.layout_validator import LayoutValidator, paint_colors
from deck_canvas.models import SlideDocument, SlideType
from deck_canvas.utils import WHITE

W, H, P = 1920, 1080, 80

RICH_BODY = {
    "bodyLines": [
        "1. Discover: Interview users",
        "2. Build: Ship the beta",
        "Ada Lovelace - CTO",
        "Q3 2024: Launch",
    ],
    "structuredBody": [
        {"type": "subheading", "text": "Highlights"},
        {"type": "paragraph", "text": "Rendering is deterministic."},
        {"type": "bullets", "items": [{"text": "Fast"}, {"text": "Typed", "bold": True}]},
        {"type": "metrics", "items": [
            {"label": "ARR", "value": "$4.2M", "change": "+38%"},
            {"label": "NPS", "value": "71"},
        ]},
        {"type": "table", "headers": ["Plan", "Price"], "rows": [["Team", "$12"]]},
    ],
    "imageUrl": "https://example.com/image.png",
    "sectionLabel": "Section 02",
    "speakerNotes": "Say hello",
}


def _slide(slide_type, title="Slide Title", **fields):
    return SlideDocument.model_validate({"slideNumber": 1, "slideType": slide_type, "title": title, **fields})


def _by_text(frame):
    return {node.characters: node for node in frame.texts()}


class TestLayoutRegistry:
    """Tests for layout dispatch."""

    def test_every_slide_type_has_a_layout(self):
        """Test the registry covers the whole slide type set."""
        assert set(registered_types()) == {slide_type.value for slide_type in SlideType}

    @pytest.mark.parametrize("slide_type", list(SlideType))
    def test_enum_and_string_lookup_agree(self, slide_type):
        """Test lookups by member and by value."""
        assert get_layout_for_type(slide_type) is get_layout_for_type(slide_type.value)
        assert get_layout_for_type(slide_type) is LAYOUT_REGISTRY[slide_type.value]

    @pytest.mark.parametrize("value", ["FUTURE_TYPE_NOT_YET_DEFINED", "", "title", None, 42, ["TITLE"]])
    def test_unknown_values_get_content_layout(self, value):
        """Test the lookup never fails and falls back to CONTENT."""
        assert get_layout_for_type(value) is layouts.content_layout

    def test_specific_mappings(self):
        """Test a few explicit mappings."""
        assert get_layout_for_type("TITLE") is layouts.title_layout
        assert get_layout_for_type("COMPARISON") is layouts.comparison_layout
        assert get_layout_for_type("VISUAL_HUMOR") is layouts.visual_humor_layout


class TestLayoutsRender:
    """Tests shared by every layout."""

    @pytest.fixture(autouse=True)
    def _renderer(self, offline_fetcher):
        self.renderer = DeckRenderer(image_fetcher=offline_fetcher)

    @pytest.mark.parametrize("slide_type", [slide_type.value for slide_type in SlideType])
    def test_title_only_slide_renders(self, slide_type, theme):
        """Test every layout handles a slide with no body at all."""
        frame = self.renderer.render_slide(_slide(slide_type), theme)
        assert frame.children

    @pytest.mark.parametrize("slide_type", [slide_type.value for slide_type in SlideType])
    def test_palette_closure(self, slide_type, theme):
        """Test every fill and stroke colour comes from the palette."""
        frame = self.renderer.render_slide(_slide(slide_type, **RICH_BODY), theme)
        allowed = LayoutValidator.allowed_colors(theme, slide_type)

        for node in [frame, *frame.children]:
            for color in paint_colors(node):
                assert color in allowed, f"{slide_type}: {node.name} uses {color}"

    @pytest.mark.parametrize("slide_type", [slide_type.value for slide_type in SlideType])
    def test_image_failure_never_raises(self, slide_type, theme, offline_fetcher):
        """Test a failing image degrades without exceptions."""
        self.renderer.render_slide(_slide(slide_type, imageUrl="https://example.com/broken.png"), theme)

    def test_white_only_on_visual_humor(self, theme):
        """Test pure white is reserved for the image-backed slide type."""
        assert WHITE not in LayoutValidator.allowed_colors(theme, "CONTENT")
        assert WHITE in LayoutValidator.allowed_colors(theme, "VISUAL_HUMOR")


class TestScenarios:
    """End-to-end layout scenarios."""

    @pytest.fixture(autouse=True)
    def _renderer(self, offline_fetcher):
        self.renderer = DeckRenderer(image_fetcher=offline_fetcher)

    def test_title_slide(self, theme):
        """Test centred title, subtitle from the first body line and accent above the title."""
        frame = self.renderer.render_slide(_slide("TITLE", title="Our Vision", bodyLines=["Change the world"]), theme)

        texts = frame.texts()
        assert [node.characters for node in texts] == ["Our Vision", "Change the world"]
        title, subtitle = texts
        assert title.text_align_horizontal == "CENTER"
        assert title.font_size == 64
        assert subtitle.y > title.y

        accents = frame.find_all(RectangleNode, name="Accent Line")
        assert any(line.y < title.y for line in accents)
        assert not any(node.characters.startswith(("• ", "✓ ")) for node in texts)

    def test_comparison_with_separator(self, theme):
        """Test the columns split at the literal vs line."""
        frame = self.renderer.render_slide(
            _slide(
                "COMPARISON",
                title="Then and now",
                bodyLines=["Old Way", "- slow", "- manual", "vs", "New Way", "- fast", "- automatic"],
            ),
            theme,
        )
        texts = _by_text(frame)

        for left in ("Old Way", "• slow", "• manual"):
            assert texts[left].x < W / 2
        for right in ("New Way", "✓ fast", "✓ automatic"):
            assert texts[right].x > W / 2
        assert "vs" not in texts
        assert "VS" in texts

    def test_comparison_without_separator(self, theme):
        """Test six plain lines split three and three."""
        lines = ["Before", "Slow", "Manual", "After", "Fast", "Automatic"]
        frame = self.renderer.render_slide(_slide("COMPARISON", bodyLines=lines), theme)
        texts = _by_text(frame)

        assert texts["Before"].x < W / 2
        assert texts["• Slow"].x < W / 2
        assert texts["• Manual"].x < W / 2
        assert texts["After"].x > W / 2
        assert texts["✓ Fast"].x > W / 2
        assert texts["✓ Automatic"].x > W / 2

    def test_comparison_cards_and_badge(self, theme):
        """Test the two bordered cards and the VS circle."""
        frame = self.renderer.render_slide(_slide("COMPARISON", bodyLines=["- a", "vs", "- b"]), theme)

        cards = frame.find_all(RectangleNode, name="Card")
        assert len(cards) == 2
        assert cards[0].strokes[0].hex == theme.colors.border
        assert cards[1].strokes[0].hex == theme.colors.primary
        circle = frame.find_all(EllipseNode, name="VS Circle")[0]
        assert circle.x + circle.width / 2 == W / 2

    def test_data_metrics_five_items(self, theme):
        """Test five metrics render in a four-column grid with two rows."""
        items = [{"label": f"Metric {i}", "value": f"{i}0%"} for i in range(5)]
        frame = self.renderer.render_slide(
            _slide("DATA_METRICS", structuredBody=[{"type": "metrics", "items": items}]), theme
        )

        cards = frame.find_all(RectangleNode, name="Card")
        assert len(cards) == 5
        expected_w = (W - 2 * P - 3 * layouts.DATA_METRIC_GAP) / 4
        assert all(card.width == pytest.approx(expected_w) for card in cards)
        assert expected_w == pytest.approx(422)

        rows = sorted({card.y for card in cards})
        assert len(rows) == 2
        assert [card.y for card in cards].count(rows[0]) == 4
        assert [card.y for card in cards].count(rows[1]) == 1
        assert cards[-1].right <= W - P

    def test_data_metrics_change_indicator(self, theme):
        """Test the optional change line uses the success colour."""
        frame = self.renderer.render_slide(
            _slide("DATA_METRICS", structuredBody=[
                {"type": "metrics", "items": [{"label": "ARR", "value": "$4M", "change": "+38% YoY"}]}
            ]),
            theme,
        )
        assert _by_text(frame)["+38% YoY"].fills[0].hex == theme.colors.success

    def test_data_metrics_without_metrics_block(self, theme):
        """Test data metrics slides without metrics fall back to plain lines."""
        frame = self.renderer.render_slide(_slide("DATA_METRICS", bodyLines=["Revenue grew"]), theme)
        assert "Revenue grew" in _by_text(frame)
        assert frame.find_all(RectangleNode, name="Card") == []

    def test_unknown_type_uses_content_layout(self, theme):
        """Test an unknown slide type renders exactly like CONTENT."""
        fields = {"bodyLines": ["Point one"], "imageUrl": "https://example.com/x.png"}
        unknown = self.renderer.render_slide(_slide("FUTURE_TYPE_NOT_YET_DEFINED", **fields), theme)
        content = self.renderer.render_slide(_slide("CONTENT", **fields), theme)

        def signature(frame):
            return [(type(n).__name__, n.name, n.x, n.y, n.width, n.height) for n in frame.children]

        assert signature(unknown) == signature(content)
        placeholder = unknown.find_all(name="Image Placeholder")[0]
        assert placeholder.x == pytest.approx(W * 0.57)
        assert _by_text(unknown)["Slide Title"].x == P


class TestSlideTypeLayouts:
    """Tests for individual slide type layouts."""

    @pytest.fixture(autouse=True)
    def _renderer(self, offline_fetcher):
        self.renderer = DeckRenderer(image_fetcher=offline_fetcher)

    def test_content_structured_body(self, theme):
        """Test content slides prefer the structured body."""
        frame = self.renderer.render_slide(
            _slide("CONTENT", bodyLines=["legacy"], structuredBody=[{"type": "paragraph", "text": "structured"}]),
            theme,
        )
        texts = _by_text(frame)
        assert "structured" in texts
        assert "legacy" not in texts

    def test_problem_labels(self, theme):
        """Test the problem label, error accent and bullets."""
        frame = self.renderer.render_slide(_slide("PROBLEM", bodyLines=["Too slow"]), theme)
        texts = _by_text(frame)

        assert texts["THE PROBLEM"].fills[0].hex == theme.colors.error
        assert "• Too slow" in texts
        borders = [n for n in frame.find_all(RectangleNode, name="Accent Line") if n.fills[0].hex == theme.colors.error]
        assert borders and borders[0].height == H - 2 * P

    def test_solution_checkmarks(self, theme):
        """Test the solution label and checkmark items."""
        frame = self.renderer.render_slide(_slide("SOLUTION", bodyLines=["Automated"]), theme)
        texts = _by_text(frame)
        assert texts["THE SOLUTION"].fills[0].hex == theme.colors.success
        assert texts["✓ Automated"].x > W / 2 - 100

    def test_outline_numbers(self, theme):
        """Test outline items are renumbered with two digits."""
        frame = self.renderer.render_slide(_slide("OUTLINE", bodyLines=["1. Problem", "2. Solution", "3. Ask"]), theme)
        texts = _by_text(frame)

        assert {"01", "02", "03", "Problem", "Solution", "Ask"} <= set(texts)
        assert texts["02"].y > texts["01"].y

    def test_process_steps_and_connectors(self, theme):
        """Test step circles, numbers and connectors."""
        frame = self.renderer.render_slide(
            _slide("PROCESS", bodyLines=["Discover: Talk to users", "Build: Ship", "Grow: Sell"]), theme
        )

        assert len(frame.find_all(EllipseNode, name="Circle")) == 3
        assert len(frame.find_all(LineNode, name="Connector")) == 2
        assert {"1", "2", "3", "Discover", "Talk to users"} <= set(_by_text(frame))

    def test_process_many_steps_fit(self, theme):
        """Test long processes are scaled into the content width."""
        frame = self.renderer.render_slide(_slide("PROCESS", bodyLines=[f"Step {i}" for i in range(12)]), theme)

        circles = frame.find_all(EllipseNode, name="Circle")
        assert len(circles) == 12
        assert min(c.x for c in circles) >= P
        assert max(c.right for c in circles) <= W - P

    def test_team_cards(self, theme):
        """Test team member cards with initials avatars."""
        lines = ["Ada Lovelace - CTO", "Grace Hopper - CEO", "Alan Turing", "Katherine Johnson - Data", "Linus T"]
        frame = self.renderer.render_slide(_slide("TEAM", bodyLines=lines), theme)
        texts = _by_text(frame)

        assert len(frame.find_all(EllipseNode, name="Avatar")) == 5
        assert {"AL", "GH", "AT", "CTO", "CEO"} <= set(texts)
        assert layouts.team_columns(5) == 3
        assert len({card.y for card in frame.find_all(RectangleNode, name="Card")}) == 2

    def test_timeline_latest_highlighted(self, theme):
        """Test timeline nodes and the highlighted last milestone."""
        frame = self.renderer.render_slide(
            _slide("TIMELINE", bodyLines=["2022: Founded", "2023: Seed", "2024: Series A"]), theme
        )

        circles = frame.find_all(EllipseNode)
        assert [c.fills[0].hex for c in circles] == [theme.colors.primary, theme.colors.primary, theme.colors.accent]
        labels = [n for n in frame.texts() if n.characters in {"2022", "2023", "2024"}]
        assert all(P <= n.x and n.right <= W - P for n in labels)

    def test_feature_grid(self, theme):
        """Test feature cards and grid columns."""
        lines = ["Fast: Renders quickly", "Typed", "Themed: Palette only", "Portable", "Tested"]
        frame = self.renderer.render_slide(_slide("FEATURE_GRID", bodyLines=lines), theme)

        assert len(frame.find_all(RectangleNode, name="Icon")) == 5
        assert layouts.feature_grid_columns(4) == 2
        assert layouts.feature_grid_columns(5) == 3
        assert "Renders quickly" in _by_text(frame)

    def test_logo_wall(self, theme):
        """Test one badge per logo name."""
        frame = self.renderer.render_slide(_slide("LOGO_WALL", bodyLines=["- Acme", "Globex", "Initech"]), theme)

        assert len(frame.find_all(RectangleNode, name="Card")) == 3
        assert {"Acme", "Globex", "Initech"} <= set(_by_text(frame))
        assert layouts.logo_wall_columns(9) == 5

    def test_market_sizing_circles(self, theme):
        """Test the TAM/SAM/SOM circles and labels."""
        frame = self.renderer.render_slide(_slide("MARKET_SIZING", bodyLines=["TAM: $10B"]), theme)

        circles = {c.name: c for c in frame.find_all(EllipseNode)}
        assert circles["TAM"].width > circles["SAM"].width > circles["SOM"].width
        assert {"TAM", "SAM", "SOM", "TAM: $10B"} <= set(_by_text(frame))

    def test_quote_attribution(self, theme):
        """Test the quote title and attribution lines."""
        frame = self.renderer.render_slide(
            _slide("QUOTE", title="Simplicity is prerequisite", bodyLines=["Edsger Dijkstra", "1975"]), theme
        )
        texts = _by_text(frame)
        assert texts["Edsger Dijkstra"].y < texts["1975"].y
        assert texts["Simplicity is prerequisite"].font_size == 40

    def test_cta_button_label(self, theme):
        """Test the CTA button shows the last body line."""
        frame = self.renderer.render_slide(_slide("CTA", bodyLines=["Join us", "Book a demo"]), theme)
        button = frame.find_all(RectangleNode, name="CTA Button")[0]
        label = [n for n in frame.texts() if n.characters == "Book a demo"][0]

        assert button.corner_radius == button.height / 2
        assert label.x == button.x

    def test_cta_default_label(self, theme):
        """Test the default button label."""
        frame = self.renderer.render_slide(_slide("CTA"), theme)
        assert "Get Started" in _by_text(frame)

    def test_metrics_highlight(self, theme):
        """Test the hero value and secondary metrics."""
        items = [{"label": f"L{i}", "value": f"V{i}"} for i in range(5)]
        frame = self.renderer.render_slide(
            _slide("METRICS_HIGHLIGHT", structuredBody=[{"type": "metrics", "items": items}]), theme
        )
        texts = _by_text(frame)

        assert texts["V0"].font_size == 120
        assert {"V1", "V2", "V3"} <= set(texts)
        assert "V4" not in texts

    def test_split_statement_panels(self, theme):
        """Test the two full-height panels."""
        frame = self.renderer.render_slide(_slide("SPLIT_STATEMENT", bodyLines=["Right side"]), theme)
        left = frame.find_all(name="Left Panel")[0]
        right = frame.find_all(name="Right Panel")[0]

        assert (left.x, left.width, left.height) == (0, W / 2, H)
        assert right.x == W / 2
        assert _by_text(frame)["Right side"].x > W / 2

    def test_visual_humor_layering(self, theme, online_fetcher):
        """Test the background image sits under the overlay, under the text."""
        renderer = DeckRenderer(image_fetcher=online_fetcher)
        frame = renderer.render_slide(
            _slide("VISUAL_HUMOR", title="When the demo works", bodyLines=["First try"], imageUrl="https://x/y.png"),
            theme,
        )
        names = [node.name for node in frame.children]

        assert names.index("Background Image") < names.index("Dark Overlay") < names.index("When the demo works")
        assert _by_text(frame)["When the demo works"].fills[0].hex == WHITE
        assert frame.fills[0].hex == theme.colors.background

    def test_visual_humor_without_image(self, theme):
        """Test a failed background image keeps the painted background."""
        frame = self.renderer.render_slide(_slide("VISUAL_HUMOR", imageUrl="https://x/y.png"), theme)
        assert frame.find_all(name="Background Image") == []
        assert frame.find_all(name="Dark Overlay")

    def test_architecture_image_or_body(self, theme, online_fetcher):
        """Test the diagram image replaces body content."""
        with_image = DeckRenderer(image_fetcher=online_fetcher).render_slide(
            _slide("ARCHITECTURE", bodyLines=["API", "Worker"], imageUrl="https://x/diagram.png"), theme
        )
        image = with_image.find_all(name="Slide Image")[0]
        assert image.width == W - 2 * P
        assert "API" not in _by_text(with_image)

        without_image = self.renderer.render_slide(_slide("ARCHITECTURE", bodyLines=["API", "Worker"]), theme)
        assert {"API", "Worker"} <= set(_by_text(without_image))

    def test_section_divider_label(self, theme):
        """Test the section label is upper-cased."""
        frame = self.renderer.render_slide(_slide("SECTION_DIVIDER", sectionLabel="Part two"), theme)
        assert "PART TWO" in _by_text(frame)

    def test_product_showcase_checkmarks(self, theme):
        """Test product features drop their bullets and get checkmarks."""
        frame = self.renderer.render_slide(_slide("PRODUCT_SHOWCASE", bodyLines=["- Offline sync"]), theme)
        assert "✓ Offline sync" in _by_text(frame)

    def test_layouts_follow_canvas_size(self, theme):
        """Test layouts read geometry from the frame's canvas."""
        from deck_canvas.models import CanvasConfig

        canvas = CanvasConfig(width=1280, height=720, padding=48)
        frame = self.renderer.render_slide(_slide("CONTENT", bodyLines=["Point"]), theme, canvas=canvas)

        assert (frame.width, frame.height) == (1280, 720)
        assert _by_text(frame)["Slide Title"].x == 48
        assert all(isinstance(n, (TextNode, RectangleNode)) for n in frame.children)
