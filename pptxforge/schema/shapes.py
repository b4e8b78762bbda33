"""Shape, gradient and connector records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pptxforge.errors import InvalidInputError
from pptxforge.schema.colors import Color, optional_color
from pptxforge.schema.hyperlink import Hyperlink
from pptxforge.schema.text import TextBody, as_text_body
from pptxforge.schema.units import (
    ANGLE_PER_DEGREE,
    EMU_PER_PT,
    Length,
    length_to_dict,
    parse_dimension,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ShapeType(Enum):
    """Preset geometries (``<a:prstGeom prst=...>``)."""
    RECTANGLE = "rect"
    ROUNDED_RECTANGLE = "roundRect"
    ELLIPSE = "ellipse"
    TRIANGLE = "triangle"
    RIGHT_TRIANGLE = "rtTriangle"
    DIAMOND = "diamond"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"
    OCTAGON = "octagon"
    RIGHT_ARROW = "rightArrow"
    LEFT_ARROW = "leftArrow"
    UP_ARROW = "upArrow"
    DOWN_ARROW = "downArrow"
    CHEVRON = "chevron"
    STAR = "star5"
    HEART = "heart"
    CLOUD = "cloud"
    LIGHTNING = "lightningBolt"
    CALLOUT = "wedgeRectCallout"
    PLUS = "plus"
    DONUT = "donut"

    @classmethod
    def parse(cls, value: "str | ShapeType") -> "ShapeType":
        if isinstance(value, ShapeType):
            return value
        key = value.strip()
        for s in cls:
            if key.upper() == s.name or key == s.value:
                return s
        raise InvalidInputError(f"Unknown shape type {value!r}")


class LineDash(Enum):
    SOLID = "solid"
    DASH = "dash"
    DOT = "sysDot"
    DASH_DOT = "dashDot"
    LONG_DASH = "lgDash"


class GradientType(Enum):
    LINEAR = "linear"           # <a:lin>
    RADIAL = "circle"           # <a:path path="circle">
    RECTANGULAR = "rect"        # <a:path path="rect">
    PATH = "shape"              # <a:path path="shape">


class GradientDirection(Enum):
    """Named linear-gradient angles in 1/60000 degree."""
    HORIZONTAL = 0
    VERTICAL = 5_400_000
    DIAGONAL_DOWN = 2_700_000
    DIAGONAL_UP = 18_900_000


MAX_STOP_POSITION = 100_000


# ---------------------------------------------------------------------------
# Gradient
# ---------------------------------------------------------------------------

@dataclass
class GradientStop:
    """One color stop; ``position`` and ``alpha`` are in 1/1000 percent."""
    position: int
    color: Color | str
    alpha: int | None = None

    def __post_init__(self) -> None:
        self.color = Color.parse(self.color)
        self.position = min(max(int(self.position), 0), MAX_STOP_POSITION)
        if self.alpha is not None:
            self.alpha = min(max(int(self.alpha), 0), MAX_STOP_POSITION)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"position": self.position, "color": self.color.to_dict()}
        if self.alpha is not None:
            d["alpha"] = self.alpha
        return d

    @classmethod
    def from_dict(cls, d: dict | list) -> "GradientStop":
        if isinstance(d, (list, tuple)):
            return cls(*d)
        return cls(position=d["position"], color=d["color"], alpha=d.get("alpha"))


@dataclass
class Gradient:
    """Gradient fill with at least two stops.

    ``angle`` applies to linear gradients and is in 1/60000 degree; use
    ``GradientDirection`` values or ``Gradient.linear(..., degrees=...)``.
    """
    stops: list[GradientStop]
    gradient_type: GradientType = GradientType.LINEAR
    angle: int = 0
    rotate_with_shape: bool = True

    def __post_init__(self) -> None:
        self.stops = [s if isinstance(s, GradientStop) else GradientStop.from_dict(s)
                      for s in self.stops]
        if len(self.stops) < 2:
            raise InvalidInputError(
                f"Gradient needs at least 2 stops, got {len(self.stops)}"
            )
        if isinstance(self.gradient_type, str):
            self.gradient_type = GradientType(self.gradient_type)
        if isinstance(self.angle, GradientDirection):
            self.angle = self.angle.value
        self.angle = int(self.angle) % (360 * ANGLE_PER_DEGREE)

    @classmethod
    def linear(cls, start: Color | str, end: Color | str,
               direction: GradientDirection | None = GradientDirection.HORIZONTAL,
               degrees: float | None = None) -> "Gradient":
        if degrees is not None:
            angle = int(degrees * ANGLE_PER_DEGREE)
        elif direction is not None:
            angle = GradientDirection(direction).value
        else:
            raise InvalidInputError("Linear gradient needs a direction or degrees")
        return cls(stops=[GradientStop(0, start), GradientStop(MAX_STOP_POSITION, end)],
                   angle=angle)

    def sorted_stops(self) -> list[GradientStop]:
        """Stops in non-decreasing position order; ties keep caller order."""
        return sorted(self.stops, key=lambda s: s.position)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "type": self.gradient_type.value,
            "stops": [s.to_dict() for s in self.stops],
        }
        if self.angle:
            d["angle"] = self.angle
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Gradient":
        angle = d.get("angle", 0)
        if "direction" in d:
            angle = GradientDirection[d["direction"].upper()].value
        elif "degrees" in d:
            angle = int(d["degrees"] * ANGLE_PER_DEGREE)
        return cls(
            stops=[GradientStop.from_dict(s) for s in d["stops"]],
            gradient_type=GradientType(d.get("type", "linear")),
            angle=angle,
        )


# ---------------------------------------------------------------------------
# Shape
# ---------------------------------------------------------------------------

@dataclass
class Shape:
    """A preset-geometry shape with optional fill, outline, text and link.

    ``name`` lets connectors anchor to the shape; ``rotation`` is in degrees.
    ``line_width`` is in EMU.
    """
    shape_type: ShapeType
    x: Length
    y: Length
    width: Length
    height: Length
    fill: Color | str | None = None
    gradient: Gradient | None = None
    line_color: Color | str | None = None
    line_width: int | None = None
    line_dash: LineDash | None = None
    text: TextBody | str | None = None
    rotation: float = 0.0
    hyperlink: Hyperlink | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        self.shape_type = ShapeType.parse(self.shape_type)
        self.fill = optional_color(self.fill)
        self.line_color = optional_color(self.line_color)
        if self.fill is not None and self.gradient is not None:
            raise InvalidInputError("A shape takes a solid fill or a gradient, not both")
        if self.line_width is not None and self.line_width < 0:
            raise InvalidInputError(f"Negative line width {self.line_width}")
        if isinstance(self.line_dash, str):
            self.line_dash = LineDash(self.line_dash)
        self.text = as_text_body(self.text)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "type": self.shape_type.name.lower(),
            "x": length_to_dict(self.x), "y": length_to_dict(self.y),
            "width": length_to_dict(self.width),
            "height": length_to_dict(self.height),
        }
        if self.name:
            d["name"] = self.name
        if self.fill:
            d["fill"] = self.fill.to_dict()
        if self.gradient:
            d["gradient"] = self.gradient.to_dict()
        if self.line_color:
            d["line_color"] = self.line_color.to_dict()
        if self.line_width is not None:
            d["line_width"] = self.line_width
        if self.line_dash:
            d["line_dash"] = self.line_dash.value
        if self.text:
            d["text"] = self.text.to_dict()
        if self.rotation:
            d["rotation"] = self.rotation
        if self.hyperlink:
            d["hyperlink"] = self.hyperlink.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Shape":
        return cls(
            shape_type=ShapeType.parse(d.get("type", "rectangle")),
            x=parse_dimension(d["x"]),
            y=parse_dimension(d["y"]),
            width=parse_dimension(d["width"]),
            height=parse_dimension(d["height"]),
            fill=d.get("fill"),
            gradient=Gradient.from_dict(d["gradient"]) if d.get("gradient") else None,
            line_color=d.get("line_color"),
            line_width=d.get("line_width"),
            line_dash=d.get("line_dash"),
            text=TextBody.from_dict(d["text"]) if d.get("text") is not None else None,
            rotation=d.get("rotation", 0.0),
            hyperlink=Hyperlink.from_dict(d["hyperlink"]) if d.get("hyperlink") else None,
            name=d.get("name"),
        )


# ---------------------------------------------------------------------------
# Connector
# ---------------------------------------------------------------------------

class ConnectorType(Enum):
    STRAIGHT = "straightConnector1"
    ELBOW = "bentConnector3"
    CURVED = "curvedConnector3"


class ConnectionSite(Enum):
    """Connection-site index on the anchored shape.

    The side indexes follow the rectangle preset geometry (top, left, bottom,
    right); corners follow as 4-7.
    """
    TOP = 0
    LEFT = 1
    BOTTOM = 2
    RIGHT = 3
    TOP_LEFT = 4
    TOP_RIGHT = 5
    BOTTOM_RIGHT = 6
    BOTTOM_LEFT = 7


class ArrowType(Enum):
    NONE = "none"
    TRIANGLE = "triangle"
    STEALTH = "stealth"
    DIAMOND = "diamond"
    OVAL = "oval"
    ARROW = "arrow"


class ArrowSize(Enum):
    SMALL = "sm"
    MEDIUM = "med"
    LARGE = "lg"


DEFAULT_CONNECTOR_WIDTH = EMU_PER_PT     # 1pt


@dataclass(frozen=True)
class ConnectionAnchor:
    """Attach a connector end to a shape by name (or by shape id)."""
    shape: str | int
    site: ConnectionSite = ConnectionSite.RIGHT

    def to_dict(self) -> dict:
        return {"shape": self.shape, "site": self.site.name.lower()}

    @classmethod
    def from_dict(cls, d: dict) -> "ConnectionAnchor":
        return cls(shape=d["shape"],
                   site=ConnectionSite[d.get("site", "right").upper()])


@dataclass
class Connector:
    """A line between two points, optionally glued to shapes."""
    connector_type: ConnectorType
    start_x: Length
    start_y: Length
    end_x: Length
    end_y: Length
    start_anchor: ConnectionAnchor | None = None
    end_anchor: ConnectionAnchor | None = None
    start_arrow: ArrowType = ArrowType.NONE
    end_arrow: ArrowType = ArrowType.NONE
    arrow_size: ArrowSize = ArrowSize.MEDIUM
    color: Color | str = "000000"
    width: int = DEFAULT_CONNECTOR_WIDTH
    dash: LineDash | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.connector_type, str):
            self.connector_type = ConnectorType[self.connector_type.upper()]
        if isinstance(self.start_arrow, str):
            self.start_arrow = ArrowType(self.start_arrow)
        if isinstance(self.end_arrow, str):
            self.end_arrow = ArrowType(self.end_arrow)
        if isinstance(self.arrow_size, str):
            self.arrow_size = ArrowSize(self.arrow_size)
        if isinstance(self.dash, str):
            self.dash = LineDash(self.dash)
        self.color = Color.parse(self.color)
        if self.width < 0:
            raise InvalidInputError(f"Negative connector width {self.width}")

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "type": self.connector_type.name.lower(),
            "start": [length_to_dict(self.start_x), length_to_dict(self.start_y)],
            "end": [length_to_dict(self.end_x), length_to_dict(self.end_y)],
        }
        if self.start_anchor:
            d["start_anchor"] = self.start_anchor.to_dict()
        if self.end_anchor:
            d["end_anchor"] = self.end_anchor.to_dict()
        if self.start_arrow is not ArrowType.NONE:
            d["start_arrow"] = self.start_arrow.value
        if self.end_arrow is not ArrowType.NONE:
            d["end_arrow"] = self.end_arrow.value
        if self.color.rgb != "000000":
            d["color"] = self.color.to_dict()
        if self.width != DEFAULT_CONNECTOR_WIDTH:
            d["width"] = self.width
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Connector":
        sx, sy = d["start"]
        ex, ey = d["end"]
        return cls(
            connector_type=d.get("type", "straight"),
            start_x=parse_dimension(sx), start_y=parse_dimension(sy),
            end_x=parse_dimension(ex), end_y=parse_dimension(ey),
            start_anchor=(ConnectionAnchor.from_dict(d["start_anchor"])
                          if d.get("start_anchor") else None),
            end_anchor=(ConnectionAnchor.from_dict(d["end_anchor"])
                        if d.get("end_anchor") else None),
            start_arrow=d.get("start_arrow", "none"),
            end_arrow=d.get("end_arrow", "none"),
            arrow_size=d.get("arrow_size", "med"),
            color=d.get("color", "000000"),
            width=d.get("width", DEFAULT_CONNECTOR_WIDTH),
            dash=d.get("dash"),
            name=d.get("name"),
        )
