"""Top-level deck record and packaging options.

A ``Presentation`` is created empty, slides are appended, and the package
composer reads it once. Composition never mutates the model, so the same
deck can be built repeatedly (and yields identical bytes each time).

Usage::

    deck = Presentation(title="Quarterly Review")
    deck.add_slide(Slide(title="Agenda", bullets=["Results", "Outlook"]))
    deck.add_section("Intro", 0, 0)
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from pptxforge.errors import InvalidInputError
from pptxforge.schema.design_system import DesignSystem
from pptxforge.schema.settings import (
    DigitalSignature,
    EmbeddedFont,
    PrintSettings,
    Section,
    SectionManager,
    SlideShowSettings,
)
from pptxforge.schema.slide import Slide
from pptxforge.schema.units import SLIDE_4X3, SlideSize


# Fixed defaults keep repeated builds byte-identical.
DEFAULT_TIMESTAMP = datetime(2024, 1, 1, 0, 0, 0)
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


@dataclass
class BuildOptions:
    """Packaging knobs.

    Parameters
    ----------
    deflate_threshold : int
        Parts at least this many bytes long are DEFLATE-compressed; smaller
        parts are stored.
    zip_timestamp : tuple
        ``date_time`` written on every ZIP entry.
    created, modified : datetime
        Written to ``docProps/core.xml``.
    application : str
        Written to ``docProps/app.xml``.
    verify : bool
        Run the composer's post-condition checks.
    """
    deflate_threshold: int = 256
    zip_timestamp: tuple[int, int, int, int, int, int] = ZIP_EPOCH
    created: datetime = DEFAULT_TIMESTAMP
    modified: datetime = DEFAULT_TIMESTAMP
    application: str = "pptxforge"
    verify: bool = True

    def __post_init__(self) -> None:
        if self.deflate_threshold < 0:
            raise InvalidInputError("deflate_threshold must be >= 0")
        if len(self.zip_timestamp) != 6 or self.zip_timestamp[0] < 1980:
            raise InvalidInputError(
                f"ZIP timestamp {self.zip_timestamp} must be a 6-tuple from 1980 on"
            )
        self.zip_timestamp = tuple(self.zip_timestamp)


@dataclass
class Presentation:
    """A whole deck: slides plus presentation-level settings."""
    title: str = ""
    slides: list[Slide] = field(default_factory=list)
    slide_size: SlideSize = SLIDE_4X3
    author: str | None = None
    subject: str | None = None
    sections: SectionManager = field(default_factory=SectionManager)
    slide_show: SlideShowSettings | None = None
    print_settings: PrintSettings | None = None
    fonts: list[EmbeddedFont] = field(default_factory=list)
    signature: DigitalSignature | None = None
    design: DesignSystem = field(default_factory=DesignSystem)

    def add_slide(self, slide: Slide | None = None, **kwargs) -> Slide:
        """Append a slide (or build one from keyword arguments) and return it."""
        if slide is None:
            slide = Slide(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a Slide or keyword arguments, not both")
        self.slides.append(slide)
        return slide

    def add_section(self, name: str, first: int, last: int) -> Section:
        return self.sections.add(name, first, last)

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"title": self.title}
        if self.slide_size != SLIDE_4X3:
            d["slide_size"] = self.slide_size.to_dict()
        if self.author:
            d["author"] = self.author
        if self.subject:
            d["subject"] = self.subject
        d["design"] = self.design.to_dict()
        if self.sections:
            d["sections"] = self.sections.to_dict()
        if self.slide_show:
            d["slide_show"] = self.slide_show.to_dict()
        if self.print_settings:
            d["print"] = self.print_settings.to_dict()
        if self.fonts:
            d["fonts"] = [f.to_dict() for f in self.fonts]
        if self.signature:
            d["signature"] = self.signature.to_dict()
        d["slides"] = [s.to_dict() for s in self.slides]
        return d

    @classmethod
    def from_dict(cls, d: dict, base_dir: Path | None = None) -> "Presentation":
        size = d.get("slide_size")
        return cls(
            title=d.get("title", ""),
            slides=[Slide.from_dict(s, base_dir) for s in d.get("slides", [])],
            slide_size=SlideSize.from_dict(size) if size else SLIDE_4X3,
            author=d.get("author"),
            subject=d.get("subject"),
            sections=SectionManager.from_dict(d.get("sections", [])),
            slide_show=(SlideShowSettings.from_dict(d["slide_show"])
                        if d.get("slide_show") else None),
            print_settings=PrintSettings.from_dict(d["print"]) if d.get("print") else None,
            fonts=[EmbeddedFont.from_dict(f, base_dir) for f in d.get("fonts", [])],
            signature=(DigitalSignature.from_dict(d["signature"])
                       if d.get("signature") else None),
            design=DesignSystem.from_dict(d.get("design", {})),
        )
