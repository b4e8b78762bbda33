"""Markdown-to-deck preprocessor.

Recognized structure:

- ``# Title`` / ``## Title`` start a new slide; a ``#`` slide holding only
  short text becomes a centered title slide
- ``-`` / ``*`` / ``+`` / ``1.`` list items become bullets, nested by indent
  (two spaces per level); numbered lists switch the slide to numbering
- fenced code blocks become code blocks
- pipe tables become tables, the first row as header
- ``> `` lines become speaker notes
- ``---`` on its own line forces a slide break
- any other non-blank line becomes a top-level bullet

Usage::

    deck = markdown_to_deck(Path("talk.md").read_text())
    write_pptx(deck, "talk.pptx")
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from pptxforge.errors import MissingAssetError
from pptxforge.processor.layout import Grid
from pptxforge.schema.presentation import Presentation
from pptxforge.schema.shapes import Shape, ShapeType
from pptxforge.schema.slide import LayoutKind, Slide
from pptxforge.schema.table import Table
from pptxforge.schema.text import BulletItem, BulletList, BulletStyle, CodeBlock, TextBody
from pptxforge.schema.units import SLIDE_4X3, SlideSize, inches

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_LIST_RE = re.compile(r"^(\s*)([-*+]|\d+[.)])\s+(.*)$")
_BREAK_RE = re.compile(r"^\s*(-{3,}|\*{3,}|_{3,})\s*$")
_TABLE_SEPARATOR_RE = re.compile(r"^\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)*\|?$")
_MAX_LEVEL = 8
# A '#' slide with at most this many plain lines becomes a title slide.
_SUBTITLE_LINES = 2


@dataclass
class _Draft:
    """Content gathered for one slide before it is laid out."""
    title: str = ""
    heading_level: int = 0
    bullets: list[BulletItem] = field(default_factory=list)
    numbered: bool = False
    nested: bool = False
    blocks: list[tuple[str, object]] = field(default_factory=list)   # ("code", (lang, code)) / ("table", rows)
    notes: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.title or self.bullets or self.blocks or self.notes)


def _split_row(line: str) -> list[str]:
    cells = line.strip()
    if cells.startswith("|"):
        cells = cells[1:]
    if cells.endswith("|"):
        cells = cells[:-1]
    return [c.strip() for c in cells.split("|")]


class MarkdownDeckParser:
    """Turns Markdown text into a ``Presentation``.

    Parameters
    ----------
    slide_size : SlideSize
        Extent used to position code blocks and tables.
    title : str, optional
        Deck title; defaults to the first ``#`` heading.
    """

    def __init__(self, slide_size: SlideSize = SLIDE_4X3, title: str | None = None) -> None:
        self.slide_size = slide_size
        self.title = title

    def parse(self, text: str) -> Presentation:
        deck = Presentation(title=self.title or "", slide_size=self.slide_size)
        draft = _Draft()
        lines = text.splitlines()
        i = 0
        while i < len(lines):
            line = lines[i]
            stripped = line.strip()

            if stripped.startswith("```"):
                language = stripped[3:].strip() or None
                body = []
                i += 1
                while i < len(lines) and not lines[i].strip().startswith("```"):
                    body.append(lines[i])
                    i += 1
                draft.blocks.append(("code", (language, "\n".join(body))))
                i += 1
                continue

            if stripped.startswith("|"):
                rows = []
                while i < len(lines) and lines[i].strip().startswith("|"):
                    if not _TABLE_SEPARATOR_RE.match(lines[i].strip()):
                        rows.append(_split_row(lines[i]))
                    i += 1
                if rows:
                    draft.blocks.append(("table", rows))
                continue

            i += 1
            if not stripped:
                continue
            heading = _HEADING_RE.match(stripped)
            if heading and len(heading.group(1)) <= 2:
                self._flush(deck, draft)
                draft = _Draft(title=heading.group(2), heading_level=len(heading.group(1)))
                if not deck.title and draft.heading_level == 1:
                    deck.title = draft.title
            elif heading:
                draft.bullets.append(BulletItem(heading.group(2)))
            elif _BREAK_RE.match(line):
                self._flush(deck, draft)
                draft = _Draft()
            elif stripped.startswith(">"):
                draft.notes.append(stripped[1:].strip())
            else:
                item = _LIST_RE.match(line)
                if item:
                    indent = len(item.group(1).expandtabs(4))
                    level = min(indent // 2, _MAX_LEVEL)
                    if not draft.bullets and item.group(2)[0].isdigit():
                        draft.numbered = True
                    draft.nested = draft.nested or level > 0
                    draft.bullets.append(BulletItem(item.group(3), level))
                else:
                    draft.bullets.append(BulletItem(stripped))
        self._flush(deck, draft)
        logger.debug("Markdown: %d slides", deck.slide_count)
        return deck

    # -- slide assembly ---------------------------------------------------

    def _flush(self, deck: Presentation, draft: _Draft) -> None:
        if draft.empty:
            return
        style = BulletStyle.NUMBER if draft.numbered else BulletStyle.BULLET
        notes = "\n".join(draft.notes) or None
        if not draft.blocks:
            deck.add_slide(Slide(
                title=draft.title,
                layout=self._text_layout(draft),
                bullets=draft.bullets,
                bullet_style=style,
                notes=notes,
            ))
            return

        slide = Slide(title=draft.title,
                      layout=LayoutKind.TITLE_ONLY if draft.title else LayoutKind.BLANK,
                      notes=notes)
        rows = len(draft.blocks) + (1 if draft.bullets else 0)
        grid = Grid(rows=rows, cols=1, slide_size=self.slide_size,
                    top=inches(1.5) if draft.title else None)
        row = 0
        if draft.bullets:
            body = TextBody(BulletList(draft.bullets, style).paragraphs())
            slide.add(Shape(ShapeType.RECTANGLE, text=body, **grid.kwargs(row, 0)))
            row += 1
        for kind, payload in draft.blocks:
            box = grid.cell(row, 0)
            if kind == "code":
                language, code = payload
                slide.add(CodeBlock(code, box.x, box.y, box.width, box.height,
                                    language=language))
            else:
                slide.add(self._table(payload, box.x, box.y, box.width))
            row += 1
        deck.add_slide(slide)

    @staticmethod
    def _text_layout(draft: _Draft) -> LayoutKind:
        if not draft.title and not draft.bullets:
            return LayoutKind.BLANK
        if (draft.heading_level == 1 and len(draft.bullets) <= _SUBTITLE_LINES
                and not draft.nested):
            return LayoutKind.CENTERED_TITLE
        return LayoutKind.TITLE_AND_CONTENT

    @staticmethod
    def _table(rows: list[list[str]], x: int, y: int, width: int) -> Table:
        cols = max(len(r) for r in rows)
        padded = [r + [""] * (cols - len(r)) for r in rows]
        return Table.from_rows(padded, x=x, y=y, width=width, header=True)


def markdown_to_deck(text: str, slide_size: SlideSize = SLIDE_4X3,
                     title: str | None = None) -> Presentation:
    return MarkdownDeckParser(slide_size, title).parse(text)


def load_markdown(path: str | Path, **kwargs) -> Presentation:
    """Read a Markdown file and convert it to a deck."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MissingAssetError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    return markdown_to_deck(text, **kwargs)
