"""Tests for the grid helper and the Markdown-to-deck preprocessor."""

import pytest

from pptxforge.errors import InvalidInputError, MissingAssetError
from pptxforge.package.zipwriter import build_pptx
from pptxforge.processor.layout import Grid
from pptxforge.processor.markdown import load_markdown, markdown_to_deck
from pptxforge.qa.validator import QAValidator
from pptxforge.schema.slide import LayoutKind
from pptxforge.schema.text import BulletItem, BulletStyle
from pptxforge.schema.units import SLIDE_16X9, Transform, inches


TALK = """\
# Quarterly Review
Prepared by Finance

## Agenda
- Results
- Outlook
  - Risks
> Keep it short
> Mention hiring

## Steps
1. Plan
2. Build
"""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def talk_deck():
    """Deck parsed from a three-slide talk outline."""
    return markdown_to_deck(TALK)


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

class TestGrid:

    def test_cell_geometry(self):
        grid = Grid(rows=2, cols=2)
        assert (grid.cell_width, grid.cell_height) == (4_000_500, 2_857_500)
        assert grid.cell(0, 1) == Transform(4_686_300, 457_200, 4_000_500, 2_857_500)

    def test_span(self):
        box = Grid(rows=2, cols=2).cell(1, 0, col_span=2)
        assert box == Transform(457_200, 3_543_300, 8_229_600, 2_857_500)

    def test_top_offset(self):
        grid = Grid(top=inches(1.5))
        assert grid.cell(0, 0).y == 1_371_600
        assert grid.cell(0, 0).height == 5_029_200

    def test_kwargs(self):
        kwargs = Grid(slide_size=SLIDE_16X9).kwargs(0, 0)
        assert set(kwargs) == {"x", "y", "width", "height"}
        assert kwargs["height"] == 5_143_500 - 2 * 457_200

    def test_cells_row_major(self):
        cells = Grid(rows=2, cols=3).cells()
        assert len(cells) == 6
        assert cells[1].x > cells[0].x
        assert cells[3].y > cells[0].y

    @pytest.mark.parametrize("args", [(2, 0), (0, 2), (-1, 0)])
    def test_outside_grid(self, args):
        with pytest.raises(InvalidInputError):
            Grid(rows=2, cols=2).cell(*args)

    def test_span_too_wide(self):
        with pytest.raises(InvalidInputError):
            Grid(rows=1, cols=2).cell(0, 1, col_span=2)

    def test_invalid_dimensions(self):
        with pytest.raises(InvalidInputError):
            Grid(rows=0)
        with pytest.raises(InvalidInputError):
            Grid(cols=50, gutter=inches(1))


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

class TestMarkdownSlides:

    def test_slide_per_heading(self, talk_deck):
        assert talk_deck.slide_count == 3
        assert [s.title for s in talk_deck.slides] == ["Quarterly Review", "Agenda", "Steps"]

    def test_deck_title_from_first_heading(self, talk_deck):
        assert talk_deck.title == "Quarterly Review"

    def test_title_override(self):
        assert markdown_to_deck(TALK, title="Custom").title == "Custom"

    def test_title_slide(self, talk_deck):
        first = talk_deck.slides[0]
        assert first.layout is LayoutKind.CENTERED_TITLE
        assert first.bullets == [BulletItem("Prepared by Finance")]

    def test_nested_bullets_and_notes(self, talk_deck):
        agenda = talk_deck.slides[1]
        assert agenda.layout is LayoutKind.TITLE_AND_CONTENT
        assert [(b.text, b.level) for b in agenda.bullets] == [
            ("Results", 0), ("Outlook", 0), ("Risks", 1),
        ]
        assert agenda.notes == "Keep it short\nMention hiring"

    def test_numbered_list(self, talk_deck):
        steps = talk_deck.slides[2]
        assert steps.bullet_style is BulletStyle.NUMBER
        assert [b.text for b in steps.bullets] == ["Plan", "Build"]

    def test_subheading_becomes_bullet(self):
        deck = markdown_to_deck("## Topic\n### Detail\n")
        assert deck.slides[0].bullets == [BulletItem("Detail")]

    def test_slide_break(self):
        deck = markdown_to_deck("## One\n- a\n---\n- b\n")
        assert deck.slide_count == 2
        assert deck.slides[1].title == ""
        assert deck.slides[1].bullets == [BulletItem("b")]

    def test_empty_text(self):
        assert markdown_to_deck("\n\n").slide_count == 0


class TestMarkdownBlocks:

    def test_code_block(self):
        deck = markdown_to_deck('## Code\n```python\nprint("hi")\n```\n')
        slide = deck.slides[0]
        assert slide.layout is LayoutKind.TITLE_ONLY
        block = slide.code_blocks[0]
        assert block.language == "python"
        assert block.code == 'print("hi")'
        assert block.y == 1_371_600

    def test_table_padded(self):
        text = "## Data\n| Region | Sales |\n|---|---|\n| North | 10 |\n| South |\n"
        table = markdown_to_deck(text).slides[0].tables[0]
        assert table.row_count == 3
        assert table.col_count == 2
        assert table.cell(0, 0).text == "Region"
        assert table.cell(2, 1).text == ""
        assert table.header

    def test_bullets_above_blocks(self):
        deck = markdown_to_deck("## Mixed\n- point\n```\nx = 1\n```\n")
        slide = deck.slides[0]
        assert len(slide.shapes) == 1
        assert slide.shapes[0].y < slide.code_blocks[0].y

    def test_untitled_blocks_use_blank_layout(self):
        deck = markdown_to_deck("```\nx\n```\n")
        assert deck.slides[0].layout is LayoutKind.BLANK


class TestMarkdownFiles:

    def test_load(self, tmp_path):
        path = tmp_path / "talk.md"
        path.write_text(TALK, encoding="utf-8")
        assert load_markdown(path).slide_count == 3

    def test_missing(self, tmp_path):
        with pytest.raises(MissingAssetError):
            load_markdown(tmp_path / "absent.md")

    def test_built_deck_passes_qa(self):
        text = TALK + "\n## Data\n| a | b |\n|---|---|\n| 1 | 2 |\n```\ncode\n```\n"
        deck = markdown_to_deck(text)
        result = QAValidator(deck).validate(build_pptx(deck))
        assert result.passed, result.report()
