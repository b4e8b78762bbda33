"""Chart records.

A ``Chart`` carries its type, categories and series. Category charts (bar,
line, area, pie, radar, stock, combo) require every series to have one value
per category. Scatter series pair ``x_values`` with ``values``; bubble series
add ``sizes``; all three lists must have the same length.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pptxforge.errors import InvalidInputError
from pptxforge.schema.colors import Color, optional_color
from pptxforge.schema.units import Length, length_to_dict, parse_dimension


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ChartType(Enum):
    """Supported chart types."""
    BAR = "bar"                              # Clustered columns
    BAR_HORIZONTAL = "bar_horizontal"        # Clustered horizontal bars
    BAR_STACKED = "bar_stacked"
    BAR_STACKED_100 = "bar_stacked_100"
    LINE = "line"
    LINE_MARKERS = "line_markers"
    LINE_STACKED = "line_stacked"
    PIE = "pie"
    DOUGHNUT = "doughnut"
    AREA = "area"
    AREA_STACKED = "area_stacked"
    AREA_STACKED_100 = "area_stacked_100"
    SCATTER = "scatter"                      # Markers only
    SCATTER_LINES = "scatter_lines"
    SCATTER_SMOOTH = "scatter_smooth"
    BUBBLE = "bubble"
    RADAR = "radar"
    RADAR_FILLED = "radar_filled"
    STOCK_HLC = "stock_hlc"                  # High-low-close
    STOCK_OHLC = "stock_ohlc"                # Open-high-low-close
    COMBO = "combo"                          # Bars with line overlay

    @property
    def is_xy(self) -> bool:
        """Scatter and bubble charts plot paired numeric values."""
        return self in _XY_TYPES

    @property
    def is_pie(self) -> bool:
        return self in (ChartType.PIE, ChartType.DOUGHNUT)

    @property
    def is_stock(self) -> bool:
        return self in (ChartType.STOCK_HLC, ChartType.STOCK_OHLC)


_XY_TYPES = {
    ChartType.SCATTER,
    ChartType.SCATTER_LINES,
    ChartType.SCATTER_SMOOTH,
    ChartType.BUBBLE,
}

_STOCK_SERIES_COUNT = {ChartType.STOCK_HLC: 3, ChartType.STOCK_OHLC: 4}


class LegendPosition(Enum):
    RIGHT = "r"
    LEFT = "l"
    TOP = "t"
    BOTTOM = "b"


# ---------------------------------------------------------------------------
# Series and chart
# ---------------------------------------------------------------------------

@dataclass
class ChartSeries:
    """One data series.

    ``line`` marks a combo-chart series drawn as a line over the bars.
    """
    name: str
    values: list[float]
    x_values: list[float] | None = None
    sizes: list[float] | None = None
    color: Color | str | None = None
    line: bool = False

    def __post_init__(self) -> None:
        self.values = [_number(v) for v in self.values]
        if self.x_values is not None:
            self.x_values = [_number(v) for v in self.x_values]
        if self.sizes is not None:
            self.sizes = [_number(v) for v in self.sizes]
        self.color = optional_color(self.color)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"name": self.name, "values": list(self.values)}
        if self.x_values is not None:
            d["x_values"] = list(self.x_values)
        if self.sizes is not None:
            d["sizes"] = list(self.sizes)
        if self.color:
            d["color"] = self.color.to_dict()
        if self.line:
            d["line"] = True
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "ChartSeries":
        return cls(
            name=d["name"],
            values=d["values"],
            x_values=d.get("x_values"),
            sizes=d.get("sizes"),
            color=d.get("color"),
            line=d.get("line", False),
        )


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"Chart value {value!r} is not a number")
    if not math.isfinite(value):
        raise InvalidInputError(f"Chart value {value!r} is not finite")
    return value


@dataclass
class Chart:
    """A chart placed in a graphic frame.

    Parameters
    ----------
    chart_type : ChartType
        Determines the plot group and axes emitted.
    title : str
        Chart title; empty string suppresses it.
    categories : list[str]
        Category labels (ignored for scatter and bubble).
    series : list[ChartSeries]
        Series in emission order; index/order in the XML follow this list.
    """
    chart_type: ChartType
    title: str
    categories: list[str]
    series: list[ChartSeries]
    x: Length
    y: Length
    width: Length
    height: Length
    legend: LegendPosition | None = LegendPosition.RIGHT
    data_labels: bool = False
    x_axis_title: str | None = None
    y_axis_title: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.chart_type, str):
            self.chart_type = ChartType(self.chart_type)
        if isinstance(self.legend, str):
            self.legend = LegendPosition[self.legend.upper()]
        self.categories = [str(c) for c in self.categories]
        self.validate()

    def validate(self) -> None:
        if not self.series:
            raise InvalidInputError(f"Chart {self.title!r} has no series")
        if self.chart_type.is_xy:
            self._validate_xy()
            return
        if not self.categories:
            raise InvalidInputError(f"Chart {self.title!r} has no categories")
        expected = len(self.categories)
        for s in self.series:
            if len(s.values) != expected:
                raise InvalidInputError(
                    f"Series {s.name!r} has {len(s.values)} values for "
                    f"{expected} categories"
                )
        if self.chart_type.is_stock:
            needed = _STOCK_SERIES_COUNT[self.chart_type]
            if len(self.series) != needed:
                raise InvalidInputError(
                    f"{self.chart_type.value} needs exactly {needed} series, "
                    f"got {len(self.series)}"
                )
        if self.chart_type is ChartType.COMBO:
            if not any(s.line for s in self.series) or all(s.line for s in self.series):
                raise InvalidInputError(
                    "Combo chart needs at least one bar series and one line series"
                )

    def _validate_xy(self) -> None:
        for s in self.series:
            if s.x_values is None:
                raise InvalidInputError(f"Series {s.name!r} needs x_values")
            if len(s.x_values) != len(s.values):
                raise InvalidInputError(
                    f"Series {s.name!r} pairs {len(s.x_values)} x values with "
                    f"{len(s.values)} y values"
                )
            if self.chart_type is ChartType.BUBBLE:
                if s.sizes is None or len(s.sizes) != len(s.values):
                    raise InvalidInputError(
                        f"Bubble series {s.name!r} needs one size per point"
                    )

    @property
    def point_count(self) -> int:
        if self.chart_type.is_xy:
            return max(len(s.values) for s in self.series)
        return len(self.categories)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "type": self.chart_type.value,
            "title": self.title,
            "categories": list(self.categories),
            "series": [s.to_dict() for s in self.series],
            "x": length_to_dict(self.x), "y": length_to_dict(self.y),
            "width": length_to_dict(self.width),
            "height": length_to_dict(self.height),
        }
        if self.legend is not LegendPosition.RIGHT:
            d["legend"] = self.legend.name.lower() if self.legend else None
        if self.data_labels:
            d["data_labels"] = True
        if self.x_axis_title:
            d["x_axis_title"] = self.x_axis_title
        if self.y_axis_title:
            d["y_axis_title"] = self.y_axis_title
        if self.name:
            d["name"] = self.name
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Chart":
        return cls(
            chart_type=ChartType(d["type"]),
            title=d.get("title", ""),
            categories=d.get("categories", []),
            series=[ChartSeries.from_dict(s) for s in d["series"]],
            x=parse_dimension(d["x"]),
            y=parse_dimension(d["y"]),
            width=parse_dimension(d["width"]),
            height=parse_dimension(d["height"]),
            legend=d.get("legend", "right"),
            data_labels=d.get("data_labels", False),
            x_axis_title=d.get("x_axis_title"),
            y_axis_title=d.get("y_axis_title"),
            name=d.get("name"),
        )
