"""Color records: sRGB triples or theme-scheme tokens."""

import re
from dataclasses import dataclass
from enum import Enum

from pptxforge.errors import InvalidInputError


class SchemeColor(Enum):
    """Theme color slots a shape can reference instead of a fixed RGB."""
    ACCENT1 = "accent1"
    ACCENT2 = "accent2"
    ACCENT3 = "accent3"
    ACCENT4 = "accent4"
    ACCENT5 = "accent5"
    ACCENT6 = "accent6"
    DK1 = "dk1"
    DK2 = "dk2"
    LT1 = "lt1"
    LT2 = "lt2"
    BG1 = "bg1"
    BG2 = "bg2"
    TX1 = "tx1"
    TX2 = "tx2"
    HLINK = "hlink"
    FOL_HLINK = "folHlink"


_HEX_RE = re.compile(r"^[0-9A-F]{6}$")
_SCHEME_VALUES = {s.value.lower(): s for s in SchemeColor}


def normalize_hex(value: str) -> str:
    """Strip ``#``, uppercase, and check for six hex digits."""
    h = value.strip().lstrip("#").upper()
    if not _HEX_RE.match(h):
        raise InvalidInputError(f"Invalid hex color {value!r}; expected RRGGBB")
    return h


@dataclass(frozen=True)
class Color:
    """Either an sRGB hex value (``rgb``) or a theme slot (``scheme``)."""
    rgb: str | None = None
    scheme: SchemeColor | None = None

    def __post_init__(self) -> None:
        if (self.rgb is None) == (self.scheme is None):
            raise InvalidInputError("Color needs exactly one of rgb or scheme")
        if self.rgb is not None:
            object.__setattr__(self, "rgb", normalize_hex(self.rgb))

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        return cls(rgb=value)

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> "Color":
        for c in (r, g, b):
            if not 0 <= c <= 255:
                raise InvalidInputError(f"RGB component {c} out of range 0-255")
        return cls(rgb=f"{r:02X}{g:02X}{b:02X}")

    @classmethod
    def theme(cls, slot: SchemeColor | str) -> "Color":
        if isinstance(slot, str):
            slot = parse_scheme(slot)
        return cls(scheme=slot)

    @classmethod
    def parse(cls, value: "str | Color") -> "Color":
        """Accept a Color, a scheme token (``"accent1"``) or a hex string."""
        if isinstance(value, Color):
            return value
        if not isinstance(value, str):
            raise InvalidInputError(f"Cannot interpret {value!r} as a color")
        token = value.strip().lower()
        if token in _SCHEME_VALUES:
            return cls(scheme=_SCHEME_VALUES[token])
        return cls(rgb=value)

    def to_dict(self) -> str:
        if self.scheme is not None:
            return self.scheme.value
        return f"#{self.rgb}"

    def __str__(self) -> str:
        return self.to_dict()


def parse_scheme(value: str) -> SchemeColor:
    token = value.strip().lower()
    if token not in _SCHEME_VALUES:
        raise InvalidInputError(f"Unknown scheme color {value!r}")
    return _SCHEME_VALUES[token]


def optional_color(value: "str | Color | None") -> Color | None:
    """Coerce an optional color field; used by record ``__post_init__``."""
    if value is None:
        return None
    return Color.parse(value)


BLACK = Color(rgb="000000")
WHITE = Color(rgb="FFFFFF")
