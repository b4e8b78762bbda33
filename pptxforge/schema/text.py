"""Text records: runs, paragraphs, text bodies, bullet lists and code blocks.

A ``TextBody`` is what ends up inside ``<p:txBody>``; shapes, placeholders,
table cells and code blocks all carry one. Plain strings are accepted
anywhere a body is expected and become one paragraph per line.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pptxforge.errors import InvalidInputError
from pptxforge.schema.colors import Color, optional_color
from pptxforge.schema.hyperlink import Hyperlink
from pptxforge.schema.units import Length, length_to_dict, parse_dimension


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Alignment(Enum):
    LEFT = "l"
    CENTER = "ctr"
    RIGHT = "r"
    JUSTIFY = "just"

    @classmethod
    def parse(cls, value: "str | Alignment") -> "Alignment":
        if isinstance(value, Alignment):
            return value
        by_name = {a.name.lower(): a for a in cls}
        key = value.strip().lower()
        if key in by_name:
            return by_name[key]
        return cls(value)


class VerticalAnchor(Enum):
    TOP = "t"
    MIDDLE = "ctr"
    BOTTOM = "b"


class AutoFit(Enum):
    NONE = "none"          # <a:noAutofit/>
    SHRINK = "normal"      # <a:normAutofit/>
    SHAPE = "shape"        # <a:spAutoFit/>


class BulletStyle(Enum):
    """Bullet glyphs and auto-numbering schemes."""
    BULLET = "bullet"
    DASH = "dash"
    ARROW = "arrow"
    CHECK = "check"
    SQUARE = "square"
    NUMBER = "number"          # 1. 2. 3.
    LETTER = "letter"          # a) b) c)
    ROMAN = "roman"            # I. II. III.

    @property
    def char(self) -> str | None:
        return _BULLET_CHARS.get(self)

    @property
    def autonum(self) -> str | None:
        return _BULLET_AUTONUM.get(self)


_BULLET_CHARS = {
    BulletStyle.BULLET: "•",
    BulletStyle.DASH: "–",
    BulletStyle.ARROW: "→",
    BulletStyle.CHECK: "✓",
    BulletStyle.SQUARE: "▪",
}

_BULLET_AUTONUM = {
    BulletStyle.NUMBER: "arabicPeriod",
    BulletStyle.LETTER: "alphaLcParenR",
    BulletStyle.ROMAN: "romanUcPeriod",
}


class RtlLanguage(Enum):
    """Right-to-left languages with their default complex-script font."""
    ARABIC = "ar-SA"
    HEBREW = "he-IL"
    URDU = "ur-PK"
    PERSIAN = "fa-IR"
    PASHTO = "ps-AF"
    SINDHI = "sd-PK"
    KURDISH = "ku-IQ"
    YIDDISH = "yi-001"

    @property
    def default_font(self) -> str:
        return _RTL_FONTS[self]

    @classmethod
    def parse(cls, tag: "str | RtlLanguage") -> "RtlLanguage":
        if isinstance(tag, RtlLanguage):
            return tag
        for lang in cls:
            if lang.value.lower() == tag.strip().lower():
                return lang
        raise InvalidInputError(f"Unrecognized RTL language tag {tag!r}")


_RTL_FONTS = {
    RtlLanguage.ARABIC: "Arial",
    RtlLanguage.HEBREW: "David",
    RtlLanguage.URDU: "Urdu Typesetting",
    RtlLanguage.PERSIAN: "B Nazanin",
    RtlLanguage.PASHTO: "Arial",
    RtlLanguage.SINDHI: "Arial",
    RtlLanguage.KURDISH: "Arial",
    RtlLanguage.YIDDISH: "David",
}


# ---------------------------------------------------------------------------
# Runs and paragraphs
# ---------------------------------------------------------------------------

@dataclass
class TextRun:
    """A span of text sharing one set of character properties."""
    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    subscript: bool = False
    superscript: bool = False
    size_pt: float | None = None
    font: str | None = None
    color: Color | str | None = None
    highlight: Color | str | None = None
    hyperlink: Hyperlink | None = None
    lang: str | None = None

    def __post_init__(self) -> None:
        if self.subscript and self.superscript:
            raise InvalidInputError("A run cannot be both subscript and superscript")
        if self.size_pt is not None and not 1 <= self.size_pt <= 4000:
            raise InvalidInputError(f"Font size {self.size_pt}pt out of range 1-4000")
        self.color = optional_color(self.color)
        self.highlight = optional_color(self.highlight)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"text": self.text}
        for flag in ("bold", "italic", "underline", "strikethrough",
                     "subscript", "superscript"):
            if getattr(self, flag):
                d[flag] = True
        if self.size_pt is not None:
            d["size_pt"] = self.size_pt
        if self.font:
            d["font"] = self.font
        if self.color:
            d["color"] = self.color.to_dict()
        if self.highlight:
            d["highlight"] = self.highlight.to_dict()
        if self.hyperlink:
            d["hyperlink"] = self.hyperlink.to_dict()
        if self.lang:
            d["lang"] = self.lang
        return d

    @classmethod
    def from_dict(cls, d: dict | str) -> "TextRun":
        if isinstance(d, str):
            return cls(d)
        return cls(
            text=d.get("text", ""),
            bold=d.get("bold", False),
            italic=d.get("italic", False),
            underline=d.get("underline", False),
            strikethrough=d.get("strikethrough", False),
            subscript=d.get("subscript", False),
            superscript=d.get("superscript", False),
            size_pt=d.get("size_pt"),
            font=d.get("font"),
            color=d.get("color"),
            highlight=d.get("highlight"),
            hyperlink=Hyperlink.from_dict(d["hyperlink"]) if d.get("hyperlink") else None,
            lang=d.get("lang"),
        )


@dataclass
class Paragraph:
    """Ordered runs plus paragraph-level properties.

    Parameters
    ----------
    runs : list[TextRun]
        Text content in order.
    alignment : Alignment | None
        Horizontal alignment; ``None`` inherits from the placeholder.
    level : int
        Indent level, 0-8.
    bullet : BulletStyle | None
        Bullet glyph or numbering scheme.
    space_before, space_after, line_spacing : float | None
        Spacing in points.
    rtl : bool
        Right-to-left paragraph; requires ``lang`` to be a known RTL tag.
    lang : str | None
        BCP-47 language tag applied to every run.
    cs_font : str | None
        Complex-script typeface; defaults to the language's font when RTL.
    """
    runs: list[TextRun] = field(default_factory=list)
    alignment: Alignment | None = None
    level: int = 0
    bullet: BulletStyle | None = None
    space_before: float | None = None
    space_after: float | None = None
    line_spacing: float | None = None
    rtl: bool = False
    lang: str | None = None
    cs_font: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.level <= 8:
            raise InvalidInputError(f"Paragraph level {self.level} out of range 0-8")
        if isinstance(self.alignment, str):
            self.alignment = Alignment.parse(self.alignment)
        if isinstance(self.bullet, str):
            self.bullet = BulletStyle(self.bullet)
        self.runs = [TextRun(r) if isinstance(r, str) else r for r in self.runs]
        if self.rtl:
            language = RtlLanguage.parse(self.lang or RtlLanguage.ARABIC.value)
            self.lang = language.value
            if self.cs_font is None:
                self.cs_font = language.default_font

    @classmethod
    def of(cls, text: str, **kwargs) -> "Paragraph":
        return cls(runs=[TextRun(text)], **kwargs)

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"runs": [r.to_dict() for r in self.runs]}
        if self.alignment:
            d["alignment"] = self.alignment.name.lower()
        if self.level:
            d["level"] = self.level
        if self.bullet:
            d["bullet"] = self.bullet.value
        for key in ("space_before", "space_after", "line_spacing"):
            if getattr(self, key) is not None:
                d[key] = getattr(self, key)
        if self.rtl:
            d["rtl"] = True
        if self.lang:
            d["lang"] = self.lang
        if self.cs_font:
            d["cs_font"] = self.cs_font
        return d

    @classmethod
    def from_dict(cls, d: dict | str) -> "Paragraph":
        if isinstance(d, str):
            return cls.of(d)
        runs = d.get("runs")
        if runs is None:
            runs = [d.get("text", "")]
        return cls(
            runs=[TextRun.from_dict(r) for r in runs],
            alignment=d.get("alignment"),
            level=d.get("level", 0),
            bullet=d.get("bullet"),
            space_before=d.get("space_before"),
            space_after=d.get("space_after"),
            line_spacing=d.get("line_spacing"),
            rtl=d.get("rtl", False),
            lang=d.get("lang"),
            cs_font=d.get("cs_font"),
        )


@dataclass
class TextBody:
    """Paragraphs plus body properties (anchor, wrap, auto-fit, insets)."""
    paragraphs: list[Paragraph] = field(default_factory=list)
    anchor: VerticalAnchor | None = None
    wrap: bool = True
    autofit: AutoFit = AutoFit.NONE
    inset: Length | None = None

    def __post_init__(self) -> None:
        if isinstance(self.anchor, str):
            self.anchor = VerticalAnchor[self.anchor.upper()]
        if isinstance(self.autofit, str):
            self.autofit = AutoFit(self.autofit)
        self.paragraphs = [Paragraph.of(p) if isinstance(p, str) else p
                           for p in self.paragraphs]

    @classmethod
    def from_text(cls, text: str, **kwargs) -> "TextBody":
        return cls(paragraphs=[Paragraph.of(line) for line in text.split("\n")],
                   **kwargs)

    @property
    def text(self) -> str:
        return "\n".join(p.text for p in self.paragraphs)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"paragraphs": [p.to_dict() for p in self.paragraphs]}
        if self.anchor:
            d["anchor"] = self.anchor.name.lower()
        if not self.wrap:
            d["wrap"] = False
        if self.autofit is not AutoFit.NONE:
            d["autofit"] = self.autofit.value
        if self.inset is not None:
            d["inset"] = length_to_dict(self.inset)
        return d

    @classmethod
    def from_dict(cls, d: dict | str) -> "TextBody":
        if isinstance(d, str):
            return cls.from_text(d)
        return cls(
            paragraphs=[Paragraph.from_dict(p) for p in d.get("paragraphs", [])],
            anchor=d.get("anchor"),
            wrap=d.get("wrap", True),
            autofit=d.get("autofit", "none"),
            inset=parse_dimension(d["inset"]) if d.get("inset") is not None else None,
        )


def as_text_body(value: "TextBody | str | None") -> TextBody | None:
    if value is None or isinstance(value, TextBody):
        return value
    return TextBody.from_text(value)


# ---------------------------------------------------------------------------
# Bullet lists and code blocks
# ---------------------------------------------------------------------------

@dataclass
class BulletItem:
    text: str
    level: int = 0

    def to_dict(self) -> dict | str:
        if self.level == 0:
            return self.text
        return {"text": self.text, "level": self.level}

    @classmethod
    def from_dict(cls, d: dict | str) -> "BulletItem":
        if isinstance(d, str):
            return cls(d)
        return cls(text=d["text"], level=d.get("level", 0))


@dataclass
class BulletList:
    """Bullet items rendered into the slide's body placeholder."""
    items: list[BulletItem] = field(default_factory=list)
    style: BulletStyle = BulletStyle.BULLET

    def __post_init__(self) -> None:
        self.items = [BulletItem(i) if isinstance(i, str) else i for i in self.items]
        if isinstance(self.style, str):
            self.style = BulletStyle(self.style)

    def paragraphs(self, size_pt: float | None = None) -> list[Paragraph]:
        return [
            Paragraph(runs=[TextRun(item.text, size_pt=size_pt)],
                      level=item.level, bullet=self.style)
            for item in self.items
        ]


@dataclass
class CodeBlock:
    """Source code rendered as a monospace block on a dark background."""
    code: str
    x: Length
    y: Length
    width: Length
    height: Length
    language: str | None = None
    font: str = "Consolas"
    size_pt: float = 12.0
    background: Color | str = "1E1E1E"
    foreground: Color | str = "D4D4D4"
    line_numbers: bool = False

    def __post_init__(self) -> None:
        self.background = Color.parse(self.background)
        self.foreground = Color.parse(self.foreground)

    def text_body(self) -> TextBody:
        lines = self.code.rstrip("\n").split("\n")
        width = len(str(len(lines)))
        paragraphs = []
        for number, line in enumerate(lines, start=1):
            if self.line_numbers:
                line = f"{number:>{width}}  {line}"
            paragraphs.append(Paragraph(runs=[TextRun(
                line, font=self.font, size_pt=self.size_pt, color=self.foreground,
            )], alignment=Alignment.LEFT))
        return TextBody(paragraphs=paragraphs, anchor=VerticalAnchor.TOP,
                        wrap=False)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "code": self.code,
            "x": length_to_dict(self.x), "y": length_to_dict(self.y),
            "width": length_to_dict(self.width),
            "height": length_to_dict(self.height),
        }
        if self.language:
            d["language"] = self.language
        if self.line_numbers:
            d["line_numbers"] = True
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "CodeBlock":
        return cls(
            code=d["code"],
            x=parse_dimension(d["x"]),
            y=parse_dimension(d["y"]),
            width=parse_dimension(d["width"]),
            height=parse_dimension(d["height"]),
            language=d.get("language"),
            font=d.get("font", "Consolas"),
            size_pt=d.get("size_pt", 12.0),
            background=d.get("background", "1E1E1E"),
            foreground=d.get("foreground", "D4D4D4"),
            line_numbers=d.get("line_numbers", False),
        )
