"""Slide records: layout kind, transition and the per-slide element lists."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pptxforge.errors import InvalidInputError
from pptxforge.schema.annotations import Comment, InkStroke
from pptxforge.schema.chart import Chart
from pptxforge.schema.media import Audio, Image, Video
from pptxforge.schema.shapes import Connector, Shape
from pptxforge.schema.table import Table
from pptxforge.schema.text import BulletItem, BulletList, BulletStyle, CodeBlock


class LayoutKind(Enum):
    """Slide layouts; value is the ``type`` written to ``<p:cSld>``'s layout."""
    TITLE_ONLY = "titleOnly"
    TITLE_AND_CONTENT = "obj"
    TITLE_AND_BIG_CONTENT = "tx"
    BLANK = "blank"
    CENTERED_TITLE = "title"
    TWO_COLUMN = "twoObj"

    @property
    def display_name(self) -> str:
        return _LAYOUT_NAMES[self]

    @property
    def has_title(self) -> bool:
        return self is not LayoutKind.BLANK

    @property
    def has_body(self) -> bool:
        return self in (LayoutKind.TITLE_AND_CONTENT, LayoutKind.TITLE_AND_BIG_CONTENT,
                        LayoutKind.TWO_COLUMN, LayoutKind.CENTERED_TITLE)

    @classmethod
    def parse(cls, value: "str | LayoutKind") -> "LayoutKind":
        if isinstance(value, LayoutKind):
            return value
        key = value.strip().upper().replace(" ", "_").replace("-", "_")
        return cls[key]


_LAYOUT_NAMES = {
    LayoutKind.TITLE_ONLY: "Title Only",
    LayoutKind.TITLE_AND_CONTENT: "Title and Content",
    LayoutKind.TITLE_AND_BIG_CONTENT: "Title and Big Content",
    LayoutKind.BLANK: "Blank",
    LayoutKind.CENTERED_TITLE: "Title Slide",
    LayoutKind.TWO_COLUMN: "Two Content",
}

# Fixed emission order of layouts, so layout part numbers are stable.
LAYOUT_ORDER = [
    LayoutKind.CENTERED_TITLE,
    LayoutKind.TITLE_AND_CONTENT,
    LayoutKind.TITLE_ONLY,
    LayoutKind.TWO_COLUMN,
    LayoutKind.TITLE_AND_BIG_CONTENT,
    LayoutKind.BLANK,
]


class TransitionType(Enum):
    NONE = "none"
    CUT = "cut"
    FADE = "fade"
    PUSH = "push"
    WIPE = "wipe"
    SPLIT = "split"
    REVEAL = "reveal"
    COVER = "cover"
    ZOOM = "zoom"


class TransitionSpeed(Enum):
    SLOW = "slow"
    MEDIUM = "med"
    FAST = "fast"


_SIDES = ("l", "u", "r", "d")
_IN_OUT = ("in", "out")

# Directions each transition's child element accepts; absent types take none.
TRANSITION_DIRECTIONS = {
    TransitionType.PUSH: _SIDES,
    TransitionType.WIPE: _SIDES,
    TransitionType.SPLIT: _IN_OUT,
    TransitionType.REVEAL: ("l", "r"),
    TransitionType.COVER: _SIDES + ("lu", "ru", "ld", "rd"),
    TransitionType.ZOOM: _IN_OUT,
}


@dataclass(frozen=True)
class Transition:
    """Slide transition. ``direction`` overrides the per-type default."""
    transition_type: TransitionType = TransitionType.NONE
    speed: TransitionSpeed | None = None
    direction: str | None = None
    advance_after_ms: int | None = None

    def __post_init__(self) -> None:
        if self.direction is not None:
            allowed = TRANSITION_DIRECTIONS.get(self.transition_type, ())
            if self.direction not in allowed:
                choices = ", ".join(allowed) if allowed else "none"
                raise InvalidInputError(
                    f"Direction {self.direction!r} not valid for {self.transition_type.value} "
                    f"transition (allowed: {choices})"
                )
        if self.advance_after_ms is not None and self.advance_after_ms < 0:
            raise InvalidInputError(f"advance_after_ms {self.advance_after_ms} is negative")

    def to_dict(self) -> dict | str:
        if self.speed is None and self.direction is None and self.advance_after_ms is None:
            return self.transition_type.value
        d: dict[str, Any] = {"type": self.transition_type.value}
        if self.speed:
            d["speed"] = self.speed.value
        if self.direction:
            d["direction"] = self.direction
        if self.advance_after_ms is not None:
            d["advance_after_ms"] = self.advance_after_ms
        return d

    @classmethod
    def from_dict(cls, d: dict | str) -> "Transition":
        if isinstance(d, str):
            return cls(TransitionType(d))
        return cls(
            transition_type=TransitionType(d.get("type", "none")),
            speed=TransitionSpeed(d["speed"]) if d.get("speed") else None,
            direction=d.get("direction"),
            advance_after_ms=d.get("advance_after_ms"),
        )


@dataclass
class Slide:
    """One slide: placeholders (title, bullets) plus free-standing elements.

    ``bullets`` fill the layout's body placeholder; for TWO_COLUMN slides
    ``right_bullets`` fill the second column.
    """
    title: str = ""
    layout: LayoutKind = LayoutKind.TITLE_AND_CONTENT
    bullets: list[BulletItem | str] = field(default_factory=list)
    bullet_style: BulletStyle = BulletStyle.BULLET
    right_bullets: list[BulletItem | str] = field(default_factory=list)
    notes: str | None = None
    shapes: list[Shape] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)
    tables: list[Table] = field(default_factory=list)
    charts: list[Chart] = field(default_factory=list)
    connectors: list[Connector] = field(default_factory=list)
    code_blocks: list[CodeBlock] = field(default_factory=list)
    videos: list[Video] = field(default_factory=list)
    audios: list[Audio] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    ink: list[InkStroke] = field(default_factory=list)
    transition: Transition | None = None
    hidden: bool = False

    def __post_init__(self) -> None:
        self.layout = LayoutKind.parse(self.layout)
        if isinstance(self.bullet_style, str):
            self.bullet_style = BulletStyle(self.bullet_style)
        self.bullets = [BulletItem(b) if isinstance(b, str) else b for b in self.bullets]
        self.right_bullets = [BulletItem(b) if isinstance(b, str) else b
                              for b in self.right_bullets]

    # -- builder helpers ----------------------------------------------------

    def add(self, element) -> "Slide":
        """Append an element to the list matching its type."""
        for kind, bucket in (
            (Shape, self.shapes), (Image, self.images), (Table, self.tables),
            (Chart, self.charts), (Connector, self.connectors),
            (CodeBlock, self.code_blocks), (Video, self.videos),
            (Audio, self.audios), (Comment, self.comments), (InkStroke, self.ink),
        ):
            if isinstance(element, kind):
                bucket.append(element)
                return self
        raise TypeError(f"Cannot add {type(element).__name__} to a slide")

    def bullet_list(self) -> BulletList:
        return BulletList(self.bullets, self.bullet_style)

    def right_bullet_list(self) -> BulletList:
        return BulletList(self.right_bullets, self.bullet_style)

    @property
    def has_notes(self) -> bool:
        return bool(self.notes and self.notes.strip())

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"title": self.title, "layout": self.layout.name.lower()}
        if self.bullets:
            d["bullets"] = [b.to_dict() for b in self.bullets]
        if self.bullet_style is not BulletStyle.BULLET:
            d["bullet_style"] = self.bullet_style.value
        if self.right_bullets:
            d["right_bullets"] = [b.to_dict() for b in self.right_bullets]
        if self.notes:
            d["notes"] = self.notes
        for key in ("shapes", "images", "tables", "charts", "connectors",
                    "code_blocks", "videos", "audios", "comments", "ink"):
            items = getattr(self, key)
            if items:
                d[key] = [item.to_dict() for item in items]
        if self.transition:
            d["transition"] = self.transition.to_dict()
        if self.hidden:
            d["hidden"] = True
        return d

    @classmethod
    def from_dict(cls, d: dict, base_dir: Path | None = None) -> "Slide":
        return cls(
            title=d.get("title", ""),
            layout=d.get("layout", "title_and_content"),
            bullets=[BulletItem.from_dict(b) for b in d.get("bullets", [])],
            bullet_style=d.get("bullet_style", "bullet"),
            right_bullets=[BulletItem.from_dict(b) for b in d.get("right_bullets", [])],
            notes=d.get("notes"),
            shapes=[Shape.from_dict(s) for s in d.get("shapes", [])],
            images=[Image.from_dict(i, base_dir) for i in d.get("images", [])],
            tables=[_table_entry(t, base_dir) for t in d.get("tables", [])],
            charts=[_chart_entry(c, base_dir) for c in d.get("charts", [])],
            connectors=[Connector.from_dict(c) for c in d.get("connectors", [])],
            code_blocks=[CodeBlock.from_dict(c) for c in d.get("code_blocks", [])],
            videos=[Video.from_dict(v, base_dir) for v in d.get("videos", [])],
            audios=[Audio.from_dict(a, base_dir) for a in d.get("audios", [])],
            comments=[Comment.from_dict(c) for c in d.get("comments", [])],
            ink=[InkStroke.from_dict(s) for s in d.get("ink", [])],
            transition=Transition.from_dict(d["transition"]) if d.get("transition") else None,
            hidden=d.get("hidden", False),
        )


def _table_entry(d: dict, base_dir: Path | None) -> Table:
    if "data" in d:
        # Imported here: the processor package imports this module.
        from pptxforge.processor.ingestion import load_table
        return load_table(d, base_dir)
    return Table.from_dict(d)


def _chart_entry(d: dict, base_dir: Path | None) -> Chart:
    if "data" in d:
        from pptxforge.processor.ingestion import load_chart
        return load_chart(d, base_dir)
    return Chart.from_dict(d)
