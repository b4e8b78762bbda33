"""Hyperlink actions attached to shapes, images and text runs."""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from pptxforge.errors import InvalidInputError


class HyperlinkAction(Enum):
    """Where a click on the hyperlink goes."""
    URL = "url"
    SLIDE = "slide"                    # Jump to a specific slide (1-based)
    FIRST_SLIDE = "first_slide"
    LAST_SLIDE = "last_slide"
    NEXT_SLIDE = "next_slide"
    PREVIOUS_SLIDE = "previous_slide"
    END_SHOW = "end_show"
    EMAIL = "email"
    FILE = "file"


_SHOW_JUMPS = {
    HyperlinkAction.FIRST_SLIDE: "firstslide",
    HyperlinkAction.LAST_SLIDE: "lastslide",
    HyperlinkAction.NEXT_SLIDE: "nextslide",
    HyperlinkAction.PREVIOUS_SLIDE: "previousslide",
    HyperlinkAction.END_SHOW: "endshow",
}

_EXTERNAL = {HyperlinkAction.URL, HyperlinkAction.EMAIL, HyperlinkAction.FILE}


@dataclass(frozen=True)
class Hyperlink:
    """A click action.

    ``target`` holds the URL, e-mail address or file path depending on the
    action; ``slide`` holds the 1-based slide number for SLIDE jumps. The
    relationship ID is not stored here: the package composer assigns it per
    slide when the link is emitted.
    """
    action: HyperlinkAction
    target: str | None = None
    slide: int | None = None
    subject: str | None = None
    tooltip: str | None = None
    highlight_click: bool = False

    def __post_init__(self) -> None:
        if self.action is HyperlinkAction.SLIDE:
            if self.slide is None or self.slide < 1:
                raise InvalidInputError("Slide hyperlink needs a slide number >= 1")
        elif self.action in _EXTERNAL and not self.target:
            raise InvalidInputError(f"{self.action.value} hyperlink needs a target")

    # -- constructors -------------------------------------------------------

    @classmethod
    def url(cls, url: str, tooltip: str | None = None) -> "Hyperlink":
        return cls(HyperlinkAction.URL, target=url, tooltip=tooltip)

    @classmethod
    def to_slide(cls, number: int, tooltip: str | None = None) -> "Hyperlink":
        return cls(HyperlinkAction.SLIDE, slide=number, tooltip=tooltip)

    @classmethod
    def email(cls, address: str, subject: str | None = None,
              tooltip: str | None = None) -> "Hyperlink":
        return cls(HyperlinkAction.EMAIL, target=address, subject=subject,
                   tooltip=tooltip)

    @classmethod
    def file(cls, path: str, tooltip: str | None = None) -> "Hyperlink":
        return cls(HyperlinkAction.FILE, target=path, tooltip=tooltip)

    @classmethod
    def navigation(cls, action: HyperlinkAction) -> "Hyperlink":
        if action not in _SHOW_JUMPS:
            raise InvalidInputError(f"{action.value} is not a navigation action")
        return cls(action)

    # -- serialisation helpers ---------------------------------------------

    @property
    def is_external(self) -> bool:
        return self.action in _EXTERNAL

    @property
    def needs_relationship(self) -> bool:
        """Show jumps carry their target in ``action`` and need no rels entry."""
        return self.action not in _SHOW_JUMPS

    def relationship_target(self) -> str:
        """Target written to the slide's rels file."""
        if self.action is HyperlinkAction.URL:
            return self.target
        if self.action is HyperlinkAction.EMAIL:
            uri = f"mailto:{self.target}"
            if self.subject:
                uri += f"?subject={quote(self.subject)}"
            return uri
        if self.action is HyperlinkAction.FILE:
            path = self.target.replace("\\", "/")
            if path.startswith("file:"):
                return path
            return "file:///" + path.lstrip("/")
        if self.action is HyperlinkAction.SLIDE:
            return f"slide{self.slide}.xml"
        return ""

    def action_uri(self) -> str | None:
        """Value of the ``action`` attribute on ``<a:hlinkClick>``, if any."""
        if self.action is HyperlinkAction.SLIDE:
            return "ppaction://hlinksldjump"
        jump = _SHOW_JUMPS.get(self.action)
        if jump:
            return f"ppaction://hlinkshowjump?jump={jump}"
        return None

    def to_dict(self) -> dict:
        d: dict = {"action": self.action.value}
        if self.target is not None:
            d["target"] = self.target
        if self.slide is not None:
            d["slide"] = self.slide
        if self.subject:
            d["subject"] = self.subject
        if self.tooltip:
            d["tooltip"] = self.tooltip
        if self.highlight_click:
            d["highlight_click"] = True
        return d

    @classmethod
    def from_dict(cls, d: dict | str) -> "Hyperlink":
        if isinstance(d, str):
            return cls.url(d)
        return cls(
            action=HyperlinkAction(d.get("action", "url")),
            target=d.get("target"),
            slide=d.get("slide"),
            subject=d.get("subject"),
            tooltip=d.get("tooltip"),
            highlight_click=d.get("highlight_click", False),
        )
