"""Review annotations: comments and ink strokes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pptxforge.errors import InvalidInputError
from pptxforge.schema.colors import Color


# Comments default to a fixed timestamp so repeated builds are byte-identical.
DEFAULT_COMMENT_TIME = datetime(2024, 1, 1, 0, 0, 0)


def initials_for(name: str) -> str:
    return "".join(word[0].upper() for word in name.split() if word)[:3] or "?"


@dataclass
class Comment:
    """A review comment pinned to a slide position (``p:pos`` units)."""
    author: str
    text: str
    x: int = 0
    y: int = 0
    initials: str | None = None
    created: datetime = DEFAULT_COMMENT_TIME

    def __post_init__(self) -> None:
        if not self.author.strip():
            raise InvalidInputError("Comment author must not be empty")
        if self.initials is None:
            self.initials = initials_for(self.author)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"author": self.author, "text": self.text}
        if self.x or self.y:
            d["x"], d["y"] = self.x, self.y
        if self.initials != initials_for(self.author):
            d["initials"] = self.initials
        if self.created != DEFAULT_COMMENT_TIME:
            d["created"] = self.created.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Comment":
        created = d.get("created")
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        return cls(
            author=d["author"],
            text=d["text"],
            x=d.get("x", 0),
            y=d.get("y", 0),
            initials=d.get("initials"),
            created=created or DEFAULT_COMMENT_TIME,
        )


@dataclass
class CommentAuthor:
    id: int
    name: str
    initials: str
    last_idx: int = 0
    color_index: int = 0


class CommentAuthorList:
    """Deck-wide author registry; ids are assigned in first-seen order."""

    def __init__(self) -> None:
        self._authors: dict[str, CommentAuthor] = {}

    def register(self, name: str, initials: str) -> CommentAuthor:
        author = self._authors.get(name)
        if author is None:
            next_id = len(self._authors)
            author = CommentAuthor(next_id, name, initials, color_index=next_id)
            self._authors[name] = author
        return author

    def next_index(self, name: str) -> int:
        """Allocate the author's next comment ``idx`` (1-based)."""
        author = self._authors[name]
        author.last_idx += 1
        return author.last_idx

    @property
    def authors(self) -> list[CommentAuthor]:
        return list(self._authors.values())

    def __len__(self) -> int:
        return len(self._authors)


# ---------------------------------------------------------------------------
# Ink
# ---------------------------------------------------------------------------

class PenTip(Enum):
    BALL = "ellipse"
    FLAT = "rectangle"


@dataclass(frozen=True)
class InkPen:
    """Brush for ink strokes; ``width`` is in EMU, ``opacity`` in [0, 1]."""
    color: Color = Color(rgb="FF0000")
    width: int = 25_400
    tip: PenTip = PenTip.BALL
    opacity: float = 1.0

    def __post_init__(self) -> None:
        if not isinstance(self.color, Color):
            object.__setattr__(self, "color", Color.parse(self.color))
        if self.color.rgb is None:
            raise InvalidInputError("Ink pens need an RGB color")
        if self.width <= 0:
            raise InvalidInputError(f"Pen width {self.width} must be positive")
        if isinstance(self.tip, str):
            object.__setattr__(self, "tip", PenTip[self.tip.upper()])
        object.__setattr__(self, "opacity", min(max(float(self.opacity), 0.0), 1.0))

    @classmethod
    def highlighter(cls) -> "InkPen":
        return cls(Color(rgb="FFFF00"), width=152_400, tip=PenTip.FLAT, opacity=0.5)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"color": self.color.to_dict(), "width": self.width}
        if self.tip is not PenTip.BALL:
            d["tip"] = self.tip.name.lower()
        if self.opacity != 1.0:
            d["opacity"] = self.opacity
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "InkPen":
        return cls(
            color=Color.parse(d.get("color", "FF0000")),
            width=d.get("width", 25_400),
            tip=d.get("tip", "ball"),
            opacity=d.get("opacity", 1.0),
        )


@dataclass
class InkStroke:
    """A freehand stroke; points are (x, y) in slide EMU."""
    points: list[tuple[int, int]]
    pen: InkPen = field(default_factory=InkPen)

    def __post_init__(self) -> None:
        self.points = [(int(x), int(y)) for x, y in self.points]
        if len(self.points) < 2:
            raise InvalidInputError("An ink stroke needs at least two points")

    def bounds(self) -> tuple[int, int, int, int]:
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return min(xs), min(ys), max(xs), max(ys)

    def to_dict(self) -> dict:
        return {"points": [list(p) for p in self.points], "pen": self.pen.to_dict()}

    @classmethod
    def from_dict(cls, d: dict) -> "InkStroke":
        pen = InkPen.from_dict(d["pen"]) if d.get("pen") else InkPen()
        return cls(points=[tuple(p) for p in d["points"]], pen=pen)
