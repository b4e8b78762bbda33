"""Units and geometry primitives.

All OOXML coordinates are English Metric Units (EMU). Callers describe lengths
either as plain ``int`` values (already EMU) or as a tagged ``Dimension``
(inches, centimeters, points, or a ratio of the slide extent). Nothing in the
library silently interprets a bare float as inches or EMU.

Usage::

    from pptxforge.schema.units import inches, ratio, resolve

    resolve(inches(1), 0)                 # 914400
    resolve(ratio(0.5), SLIDE_WIDTH)      # 4572000
"""

import re
from dataclasses import dataclass
from enum import Enum

from pptxforge.errors import InvalidInputError


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMU_PER_INCH = 914_400
EMU_PER_CM = 360_000
EMU_PER_PT = 12_700
ANGLE_PER_DEGREE = 60_000     # OOXML angles are 1/60000 degree

SLIDE_WIDTH = 9_144_000       # 10 in
SLIDE_HEIGHT = 6_858_000      # 7.5 in

_MAX_EMU = 2 ** 63 - 1


class Unit(Enum):
    """Unit tag carried by a Dimension."""
    EMU = "emu"
    INCHES = "in"
    CM = "cm"
    PT = "pt"
    RATIO = "ratio"           # Fraction of the reference extent, clamped to [0, 1]


_FACTORS = {
    Unit.EMU: 1,
    Unit.INCHES: EMU_PER_INCH,
    Unit.CM: EMU_PER_CM,
    Unit.PT: EMU_PER_PT,
}


# ---------------------------------------------------------------------------
# Dimension
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Dimension:
    """A length tagged with its unit."""
    value: float
    unit: Unit = Unit.EMU

    def resolve(self, reference: int = 0) -> int:
        """Convert to EMU. ``reference`` is the extent a ratio is taken of."""
        if self.unit is Unit.RATIO:
            fraction = min(max(float(self.value), 0.0), 1.0)
            emu = int(fraction * reference)
        else:
            emu = int(self.value * _FACTORS[self.unit])
        if emu < 0:
            raise InvalidInputError(f"Dimension {self} resolves to a negative length")
        if emu > _MAX_EMU:
            raise InvalidInputError(f"Dimension {self} does not fit in 63 bits")
        return emu

    def to_dict(self) -> str:
        if self.unit is Unit.RATIO:
            return f"{self.value * 100:g}%"
        return f"{self.value:g}{self.unit.value}"

    def __str__(self) -> str:
        return self.to_dict()


def emu(value: int) -> Dimension:
    return Dimension(value, Unit.EMU)


def inches(value: float) -> Dimension:
    return Dimension(value, Unit.INCHES)


def cm(value: float) -> Dimension:
    return Dimension(value, Unit.CM)


def pt(value: float) -> Dimension:
    return Dimension(value, Unit.PT)


def ratio(value: float) -> Dimension:
    return Dimension(value, Unit.RATIO)


# A caller-supplied length: EMU integer or a tagged Dimension.
Length = int | Dimension


def resolve(value: Length, reference: int = 0) -> int:
    """Resolve a length to an EMU integer.

    Plain integers are taken as EMU and may be negative (off-slide offsets).
    Floats and other numeric types are rejected rather than guessed at.
    """
    if isinstance(value, Dimension):
        return value.resolve(reference)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(
            f"Length {value!r} must be an EMU integer or a Dimension "
            "(inches(), cm(), pt(), ratio())"
        )
    if abs(value) > _MAX_EMU:
        raise InvalidInputError(f"Length {value} does not fit in 63 bits")
    return value


def emu_to_inches(value: int) -> float:
    return value / EMU_PER_INCH


def emu_to_cm(value: int) -> float:
    return value / EMU_PER_CM


def emu_to_pt(value: int) -> float:
    return value / EMU_PER_PT


def degrees_to_angle(degrees: float) -> int:
    """Convert degrees to OOXML 1/60000-degree units, normalised to [0, 360)."""
    return int(degrees * ANGLE_PER_DEGREE) % (360 * ANGLE_PER_DEGREE)


_DIMENSION_RE = re.compile(
    r"^\s*(?P<num>[+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*"
    r"(?P<unit>emu|in|inch|inches|cm|pt|%)\s*$",
    re.IGNORECASE,
)

_UNIT_SUFFIXES = {
    "emu": Unit.EMU,
    "in": Unit.INCHES,
    "inch": Unit.INCHES,
    "inches": Unit.INCHES,
    "cm": Unit.CM,
    "pt": Unit.PT,
}


def parse_dimension(value: int | str | Dimension) -> Length:
    """Parse a length from configuration.

    Examples:
        914400   -> 914400 (EMU)
        "1.5in"  -> inches(1.5)
        "2cm"    -> cm(2)
        "12pt"   -> pt(12)
        "25%"    -> ratio(0.25)
    """
    if isinstance(value, Dimension):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(
            f"Bare number {value!r} is ambiguous; add a unit (in, cm, pt, emu, %)"
        )
    m = _DIMENSION_RE.match(value)
    if m is None:
        raise InvalidInputError(f"Cannot parse dimension {value!r}")
    number = float(m.group("num"))
    suffix = m.group("unit").lower()
    if suffix == "%":
        return ratio(number / 100)
    unit = _UNIT_SUFFIXES[suffix]
    if unit is Unit.EMU:
        return int(number)
    return Dimension(number, unit)


def length_to_dict(value: Length) -> int | str:
    """Inverse of ``parse_dimension`` for YAML output."""
    if isinstance(value, Dimension):
        return value.to_dict()
    return value


# ---------------------------------------------------------------------------
# Geometry records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SlideSize:
    """Slide extent in EMU plus the ``type`` tag written to ``<p:sldSz>``."""
    width: int
    height: int
    type_name: str | None = None

    @classmethod
    def from_name(cls, name: str) -> "SlideSize":
        key = name.lower().replace(":", "x").strip()
        if key.startswith("screen"):
            key = key[len("screen"):]
        if key not in _SLIDE_SIZES:
            raise InvalidInputError(
                f"Unknown slide size {name!r}; use one of {sorted(_SLIDE_SIZES)}"
            )
        return _SLIDE_SIZES[key]

    @classmethod
    def custom(cls, width: Length, height: Length) -> "SlideSize":
        w, h = resolve(width), resolve(height)
        if w <= 0 or h <= 0:
            raise InvalidInputError(f"Slide size {w}x{h} must be positive")
        return cls(w, h, None)

    def to_dict(self) -> dict:
        d: dict = {"width": self.width, "height": self.height}
        if self.type_name:
            d["type"] = self.type_name
        return d

    @classmethod
    def from_dict(cls, d: dict | str) -> "SlideSize":
        if isinstance(d, str):
            return cls.from_name(d)
        width = resolve(parse_dimension(d["width"]))
        height = resolve(parse_dimension(d["height"]))
        return cls(width, height, d.get("type"))


SLIDE_4X3 = SlideSize(SLIDE_WIDTH, SLIDE_HEIGHT, "screen4x3")
SLIDE_16X9 = SlideSize(9_144_000, 5_143_500, "screen16x9")
SLIDE_16X10 = SlideSize(9_144_000, 5_715_000, "screen16x10")
SLIDE_WIDESCREEN = SlideSize(12_192_000, 6_858_000, None)

_SLIDE_SIZES = {
    "4x3": SLIDE_4X3,
    "16x9": SLIDE_16X9,
    "16x10": SLIDE_16X10,
    "widescreen": SLIDE_WIDESCREEN,
}


@dataclass(frozen=True)
class Position:
    x: int
    y: int


@dataclass(frozen=True)
class Size:
    width: int
    height: int


@dataclass(frozen=True)
class Transform:
    """Resolved offset + extent in EMU, rotation in 1/60000 degree."""
    x: int
    y: int
    width: int
    height: int
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


def resolve_box(x: Length, y: Length, width: Length, height: Length,
                slide: SlideSize, rotation: float = 0.0) -> Transform:
    """Resolve a caller box against the slide extent.

    X and width resolve against the slide width; Y and height against the
    slide height. ``rotation`` is in degrees.
    """
    w = resolve(width, slide.width)
    h = resolve(height, slide.height)
    if w < 0 or h < 0:
        raise InvalidInputError(f"Negative extent {w}x{h}")
    return Transform(
        x=resolve(x, slide.width),
        y=resolve(y, slide.height),
        width=w,
        height=h,
        rotation=degrees_to_angle(rotation) if rotation else 0,
    )
