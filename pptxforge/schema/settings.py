"""Presentation-level settings: sections, slide show, print, fonts, signature."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pptxforge.errors import (
    InvalidInputError,
    MissingAssetError,
    OverlapError,
    UnsupportedFormatError,
)
from pptxforge.schema.colors import Color


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_GOLDEN = 0x9E3779B97F4A7C15
_MASK64 = (1 << 64) - 1


def section_guid(name: str) -> str:
    """Deterministic GUID for a section, derived from an FNV-1a hash of its name."""
    h = _FNV_OFFSET
    for byte in name.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & _MASK64
    d = (h * _GOLDEN) & _MASK64
    return "{%08X-%04X-%04X-%04X-%012X}" % (
        h >> 32, h & 0xFFFF, (h >> 16) & 0xFFFF, d & 0xFFFF, d >> 16,
    )


@dataclass(frozen=True)
class Section:
    """Named run of slides; ``first`` and ``last`` are inclusive 0-based indexes."""
    name: str
    first: int
    last: int

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidInputError("Section name must not be empty")
        if self.first < 0 or self.last < self.first:
            raise InvalidInputError(
                f"Section {self.name!r} has an invalid range {self.first}..{self.last}"
            )

    @property
    def guid(self) -> str:
        return section_guid(self.name)

    def overlaps(self, other: "Section") -> bool:
        return self.first <= other.last and other.first <= self.last

    def slide_indexes(self) -> range:
        return range(self.first, self.last + 1)


class SectionManager:
    """Ordered, non-overlapping sections."""

    def __init__(self) -> None:
        self._sections: list[Section] = []

    def add(self, name: str, first: int, last: int) -> Section:
        """Add a section; raises ``OverlapError`` and leaves the manager unchanged."""
        section = Section(name, first, last)
        for existing in self._sections:
            if existing.name == name:
                raise InvalidInputError(f"Duplicate section name {name!r}")
            if existing.overlaps(section):
                raise OverlapError(
                    f"Section {name!r} ({first}-{last}) overlaps "
                    f"{existing.name!r} ({existing.first}-{existing.last})"
                )
        self._sections.append(section)
        self._sections.sort(key=lambda s: s.first)
        return section

    def remove(self, name: str) -> bool:
        before = len(self._sections)
        self._sections = [s for s in self._sections if s.name != name]
        return len(self._sections) < before

    def section_for(self, slide_index: int) -> Section | None:
        for s in self._sections:
            if s.first <= slide_index <= s.last:
                return s
        return None

    @property
    def sections(self) -> list[Section]:
        return list(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __bool__(self) -> bool:
        return bool(self._sections)

    def __iter__(self):
        return iter(self._sections)

    def to_dict(self) -> list[dict]:
        return [{"name": s.name, "first": s.first, "last": s.last}
                for s in self._sections]

    @classmethod
    def from_dict(cls, items: list[dict]) -> "SectionManager":
        manager = cls()
        for item in items:
            manager.add(item["name"], item["first"], item["last"])
        return manager


# ---------------------------------------------------------------------------
# Slide show
# ---------------------------------------------------------------------------

class ShowType(Enum):
    SPEAKER = "speaker"          # <p:present/>
    KIOSK = "kiosk"              # <p:kiosk restart="300000"/>
    BROWSED = "browsed"          # <p:browse showScrollbar="1"/>


@dataclass
class SlideShowSettings:
    """``<p:showPr>`` options.

    ``slide_range`` is an inclusive (start, end) pair of 1-based slide numbers;
    ``custom_slides`` lists 1-based slide numbers of a custom show. At most one
    of the two may be set; neither means all slides.
    """
    show_type: ShowType = ShowType.SPEAKER
    loop: bool = False
    show_narration: bool = True
    show_animation: bool = True
    use_timings: bool = True
    pen_color: Color | str = "FF0000"
    slide_range: tuple[int, int] | None = None
    custom_slides: list[int] | None = None
    custom_show_name: str = "Custom Show 1"

    def __post_init__(self) -> None:
        if isinstance(self.show_type, str):
            self.show_type = ShowType(self.show_type)
        self.pen_color = Color.parse(self.pen_color)
        if self.pen_color.rgb is None:
            raise InvalidInputError("Pen color must be an RGB value")
        if self.slide_range is not None and self.custom_slides is not None:
            raise InvalidInputError("Use either a slide range or a custom show, not both")
        if self.slide_range is not None:
            start, end = self.slide_range
            if start < 1 or end < start:
                raise InvalidInputError(f"Invalid slide range {self.slide_range}")
            self.slide_range = (start, end)
        if self.custom_slides is not None:
            if not self.custom_slides or min(self.custom_slides) < 1:
                raise InvalidInputError("Custom show needs slide numbers >= 1")

    @classmethod
    def kiosk(cls) -> "SlideShowSettings":
        return cls(show_type=ShowType.KIOSK, loop=True, show_narration=False)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"show_type": self.show_type.value}
        if self.loop:
            d["loop"] = True
        if not self.show_narration:
            d["show_narration"] = False
        if not self.show_animation:
            d["show_animation"] = False
        if not self.use_timings:
            d["use_timings"] = False
        d["pen_color"] = self.pen_color.to_dict()
        if self.slide_range:
            d["slide_range"] = list(self.slide_range)
        if self.custom_slides:
            d["custom_slides"] = list(self.custom_slides)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "SlideShowSettings":
        rng = d.get("slide_range")
        return cls(
            show_type=d.get("show_type", "speaker"),
            loop=d.get("loop", False),
            show_narration=d.get("show_narration", True),
            show_animation=d.get("show_animation", True),
            use_timings=d.get("use_timings", True),
            pen_color=d.get("pen_color", "FF0000"),
            slide_range=tuple(rng) if rng else None,
            custom_slides=d.get("custom_slides"),
        )


# ---------------------------------------------------------------------------
# Print
# ---------------------------------------------------------------------------

class PrintWhat(Enum):
    SLIDES = "slides"
    HANDOUTS = "handouts"
    NOTES = "notes"
    OUTLINE = "outline"


class PrintColorMode(Enum):
    COLOR = "clr"
    GRAYSCALE = "gray"
    BLACK_AND_WHITE = "bw"


class HandoutLayout(Enum):
    ONE = "handout1"
    TWO = "handout2"
    THREE = "handout3"
    FOUR = "handout4"
    SIX = "handout6"
    NINE = "handout9"


@dataclass
class PrintSettings:
    """``<p:prnPr>`` options plus handout header/footer text."""
    print_what: PrintWhat = PrintWhat.SLIDES
    color_mode: PrintColorMode = PrintColorMode.COLOR
    handout_layout: HandoutLayout = HandoutLayout.THREE
    frame_slides: bool = False
    hidden_slides: bool = False
    scale_to_fit: bool = True
    header: str | None = None
    footer: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.print_what, str):
            self.print_what = PrintWhat(self.print_what)
        if isinstance(self.color_mode, str):
            self.color_mode = PrintColorMode(self.color_mode)
        if isinstance(self.handout_layout, str):
            self.handout_layout = HandoutLayout(self.handout_layout)

    @property
    def needs_handout_master(self) -> bool:
        return self.print_what is PrintWhat.HANDOUTS

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "print_what": self.print_what.value,
            "color_mode": self.color_mode.value,
        }
        if self.print_what is PrintWhat.HANDOUTS:
            d["handout_layout"] = self.handout_layout.value
        for key in ("frame_slides", "hidden_slides"):
            if getattr(self, key):
                d[key] = True
        if not self.scale_to_fit:
            d["scale_to_fit"] = False
        if self.header:
            d["header"] = self.header
        if self.footer:
            d["footer"] = self.footer
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "PrintSettings":
        return cls(
            print_what=d.get("print_what", "slides"),
            color_mode=d.get("color_mode", "clr"),
            handout_layout=d.get("handout_layout", "handout3"),
            frame_slides=d.get("frame_slides", False),
            hidden_slides=d.get("hidden_slides", False),
            scale_to_fit=d.get("scale_to_fit", True),
            header=d.get("header"),
            footer=d.get("footer"),
        )


# ---------------------------------------------------------------------------
# Embedded fonts
# ---------------------------------------------------------------------------

class FontStyle(Enum):
    REGULAR = "regular"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "boldItalic"


FONT_STYLE_ORDER = [FontStyle.REGULAR, FontStyle.BOLD, FontStyle.ITALIC,
                    FontStyle.BOLD_ITALIC]

_FONT_EXTENSIONS = {"fntdata", "ttf", "otf", "odttf"}


@dataclass
class EmbeddedFont:
    """One style of an embedded typeface (obfuscated or plain font bytes)."""
    typeface: str
    data: bytes
    style: FontStyle = FontStyle.REGULAR
    charset: int = 0
    pitch_family: int = 0x22
    panose: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.typeface.strip():
            raise InvalidInputError("Embedded font needs a typeface name")
        if not self.data:
            raise InvalidInputError(f"Embedded font {self.typeface!r} has no data")
        if isinstance(self.style, str):
            self.style = FontStyle(self.style)

    @classmethod
    def from_file(cls, typeface: str, path: str | Path,
                  style: FontStyle = FontStyle.REGULAR) -> "EmbeddedFont":
        path = Path(path)
        ext = path.suffix.lower().lstrip(".")
        if ext not in _FONT_EXTENSIONS:
            raise UnsupportedFormatError(f"Unsupported font file {path.name!r}")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise MissingAssetError(f"Cannot read font {path}: {exc.strerror or exc}") from exc
        return cls(typeface, data, style, source=str(path))

    @property
    def part_name(self) -> str:
        return f"ppt/fonts/{self.typeface.replace(' ', '')}-{self.style.value}.fntdata"

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"typeface": self.typeface, "path": self.source or ""}
        if self.style is not FontStyle.REGULAR:
            d["style"] = self.style.value
        return d

    @classmethod
    def from_dict(cls, d: dict, base_dir: Path | None = None) -> "EmbeddedFont":
        path = Path(d["path"])
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return cls.from_file(d["typeface"], path, FontStyle(d.get("style", "regular")))


# ---------------------------------------------------------------------------
# Digital signature (metadata only)
# ---------------------------------------------------------------------------

class HashAlgorithm(Enum):
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA1 = "sha1"

    @property
    def uri(self) -> str:
        return _HASH_URIS[self]


_HASH_URIS = {
    HashAlgorithm.SHA256: "http://www.w3.org/2001/04/xmlenc#sha256",
    HashAlgorithm.SHA384: "http://www.w3.org/2001/04/xmldsig-more#sha384",
    HashAlgorithm.SHA512: "http://www.w3.org/2001/04/xmlenc#sha512",
    HashAlgorithm.SHA1: "http://www.w3.org/2000/09/xmldsig#sha1",
}


class SignatureCommitment(Enum):
    CREATED = "ProofOfCreation"
    APPROVED = "ProofOfApproval"
    REVIEWED = "ProofOfReview"

    @property
    def uri(self) -> str:
        return f"http://uri.etsi.org/01903/v1.2.2#{self.value}"

    @property
    def label(self) -> str:
        return self.name.capitalize()


DEFAULT_SIGNING_TIME = datetime(2024, 1, 1, 0, 0, 0)


@dataclass
class DigitalSignature:
    """Signature metadata. No cryptographic signature value is computed."""
    signer: str
    email: str | None = None
    organization: str | None = None
    title: str | None = None
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256
    commitment: SignatureCommitment = SignatureCommitment.CREATED
    signed_at: datetime = DEFAULT_SIGNING_TIME
    comments: str | None = None

    def __post_init__(self) -> None:
        if not self.signer.strip():
            raise InvalidInputError("Signature needs a signer name")
        if isinstance(self.hash_algorithm, str):
            self.hash_algorithm = HashAlgorithm(self.hash_algorithm)
        if isinstance(self.commitment, str):
            self.commitment = SignatureCommitment[self.commitment.upper()]

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"signer": self.signer,
                             "hash_algorithm": self.hash_algorithm.value,
                             "commitment": self.commitment.name.lower()}
        for key in ("email", "organization", "title", "comments"):
            if getattr(self, key):
                d[key] = getattr(self, key)
        if self.signed_at != DEFAULT_SIGNING_TIME:
            d["signed_at"] = self.signed_at.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "DigitalSignature":
        signed_at = d.get("signed_at")
        if isinstance(signed_at, str):
            signed_at = datetime.fromisoformat(signed_at)
        return cls(
            signer=d["signer"],
            email=d.get("email"),
            organization=d.get("organization"),
            title=d.get("title"),
            hash_algorithm=d.get("hash_algorithm", "sha256"),
            commitment=d.get("commitment", "created"),
            signed_at=signed_at or DEFAULT_SIGNING_TIME,
            comments=d.get("comments"),
        )

