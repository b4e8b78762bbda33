"""Table records and the merge map.

Merged cells are described by rectangular ``MergeRegion``s. ``TableMergeMap``
validates them (inside the grid, no overlaps) and derives a per-cell
``MergeState``: the top-left cell is the anchor carrying the spans, the rest of
the anchor's row is HMERGE, and every cell in later rows is VMERGE.

Usage::

    table = Table.from_rows([["Region", "Q1"], ["North", "10"]])
    table.merge(0, 0, row_span=1, col_span=2)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pptxforge.errors import InvalidInputError, OverlapError
from pptxforge.schema.colors import Color, optional_color
from pptxforge.schema.text import Alignment, VerticalAnchor
from pptxforge.schema.units import Length, length_to_dict, parse_dimension


DEFAULT_ROW_HEIGHT = 370_840
DEFAULT_STYLE_ID = "{5C22544A-7EE6-4342-B048-85BDC9FD1C3A}"   # Medium Style 2 - Accent 1


# ---------------------------------------------------------------------------
# Merge state
# ---------------------------------------------------------------------------

class MergeKind(Enum):
    NORMAL = "normal"
    ANCHOR = "anchor"
    HMERGE = "hmerge"
    VMERGE = "vmerge"


@dataclass(frozen=True)
class MergeState:
    kind: MergeKind = MergeKind.NORMAL
    row_span: int = 1
    col_span: int = 1

    @property
    def is_merged_away(self) -> bool:
        return self.kind in (MergeKind.HMERGE, MergeKind.VMERGE)


NORMAL = MergeState()
HMERGE = MergeState(MergeKind.HMERGE)
VMERGE = MergeState(MergeKind.VMERGE)


@dataclass(frozen=True)
class MergeRegion:
    """Rectangle of cells rendered as one; coordinates are 0-based."""
    row: int
    col: int
    row_span: int
    col_span: int

    def __post_init__(self) -> None:
        if self.row < 0 or self.col < 0:
            raise InvalidInputError(f"Merge region origin ({self.row},{self.col}) is negative")
        if self.row_span < 1 or self.col_span < 1:
            raise InvalidInputError("Merge spans must be at least 1")

    @property
    def last_row(self) -> int:
        return self.row + self.row_span - 1

    @property
    def last_col(self) -> int:
        return self.col + self.col_span - 1

    def contains(self, r: int, c: int) -> bool:
        return self.row <= r <= self.last_row and self.col <= c <= self.last_col

    def overlaps(self, other: "MergeRegion") -> bool:
        return (self.row <= other.last_row and other.row <= self.last_row
                and self.col <= other.last_col and other.col <= self.last_col)

    def to_dict(self) -> list[int]:
        return [self.row, self.col, self.row_span, self.col_span]

    @classmethod
    def from_dict(cls, d: list | dict) -> "MergeRegion":
        if isinstance(d, (list, tuple)):
            return cls(*d)
        return cls(d["row"], d["col"], d.get("row_span", 1), d.get("col_span", 1))


class TableMergeMap:
    """Validated set of merge regions over a rows x cols grid."""

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols
        self._regions: list[MergeRegion] = []

    def add(self, region: MergeRegion) -> None:
        """Add a region; raises without mutating the map on any conflict."""
        if region.last_row >= self.rows or region.last_col >= self.cols:
            raise InvalidInputError(
                f"Merge region {region.to_dict()} exceeds the "
                f"{self.rows}x{self.cols} table grid"
            )
        for existing in self._regions:
            if existing.overlaps(region):
                raise OverlapError(
                    f"Merge region {region.to_dict()} overlaps {existing.to_dict()}"
                )
        self._regions.append(region)

    @property
    def regions(self) -> list[MergeRegion]:
        return list(self._regions)

    def state(self, r: int, c: int) -> MergeState:
        for region in self._regions:
            if region.row == r and region.col == c:
                return MergeState(MergeKind.ANCHOR, region.row_span, region.col_span)
            if region.contains(r, c):
                return HMERGE if r == region.row else VMERGE
        return NORMAL

    def grid(self) -> list[list[MergeState]]:
        return [[self.state(r, c) for c in range(self.cols)] for r in range(self.rows)]


# ---------------------------------------------------------------------------
# Cells, rows, table
# ---------------------------------------------------------------------------

@dataclass
class TableCell:
    text: str = ""
    bold: bool = False
    italic: bool = False
    size_pt: float | None = None
    color: Color | str | None = None
    background: Color | str | None = None
    alignment: Alignment | None = None
    anchor: VerticalAnchor | None = None
    merge: MergeState = NORMAL

    def __post_init__(self) -> None:
        self.color = optional_color(self.color)
        self.background = optional_color(self.background)
        if isinstance(self.alignment, str):
            self.alignment = Alignment.parse(self.alignment)
        if isinstance(self.anchor, str):
            self.anchor = VerticalAnchor[self.anchor.upper()]

    def to_dict(self) -> dict | str:
        d: dict[str, Any] = {"text": self.text}
        if self.bold:
            d["bold"] = True
        if self.italic:
            d["italic"] = True
        if self.size_pt is not None:
            d["size_pt"] = self.size_pt
        if self.color:
            d["color"] = self.color.to_dict()
        if self.background:
            d["background"] = self.background.to_dict()
        if self.alignment:
            d["alignment"] = self.alignment.name.lower()
        if self.anchor:
            d["anchor"] = self.anchor.name.lower()
        if len(d) == 1:
            return self.text
        return d

    @classmethod
    def from_dict(cls, d: dict | str | int | float) -> "TableCell":
        if not isinstance(d, dict):
            return cls("" if d is None else str(d))
        return cls(
            text=str(d.get("text", "")),
            bold=d.get("bold", False),
            italic=d.get("italic", False),
            size_pt=d.get("size_pt"),
            color=d.get("color"),
            background=d.get("background"),
            alignment=d.get("alignment"),
            anchor=d.get("anchor"),
        )


@dataclass
class TableRow:
    cells: list[TableCell]
    height: int | None = None

    def __post_init__(self) -> None:
        self.cells = [c if isinstance(c, TableCell) else TableCell.from_dict(c)
                      for c in self.cells]


@dataclass
class Table:
    """A grid of cells placed in a graphic frame.

    Parameters
    ----------
    rows : list[TableRow]
        Ordered rows; every row must have ``len(column_widths)`` cells.
    column_widths : list[int]
        EMU widths; when empty, ``width`` is split evenly.
    header : bool
        Style the first row as a header (``firstRow="1"``).
    """
    rows: list[TableRow]
    x: Length
    y: Length
    width: Length
    column_widths: list[int] = field(default_factory=list)
    header: bool = True
    banded_rows: bool = True
    style_id: str = DEFAULT_STYLE_ID
    merges: list[MergeRegion] = field(default_factory=list)
    name: str | None = None

    def __post_init__(self) -> None:
        self.rows = [r if isinstance(r, TableRow) else TableRow(r) for r in self.rows]
        if not self.rows:
            raise InvalidInputError("Table needs at least one row")
        cols = len(self.rows[0].cells)
        if cols == 0:
            raise InvalidInputError("Table needs at least one column")
        for i, row in enumerate(self.rows):
            if len(row.cells) != cols:
                raise InvalidInputError(
                    f"Row {i} has {len(row.cells)} cells, expected {cols}"
                )
        if self.column_widths and len(self.column_widths) != cols:
            raise InvalidInputError(
                f"{len(self.column_widths)} column widths for {cols} columns"
            )
        pending, self.merges = list(self.merges), []
        for region in pending:
            self._apply(region)

    @classmethod
    def from_rows(cls, rows: list[list[Any]], x: Length = 0, y: Length = 0,
                  width: Length = 0, **kwargs) -> "Table":
        return cls(rows=[TableRow([TableCell.from_dict(v) for v in row]) for row in rows],
                   x=x, y=y, width=width, **kwargs)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def col_count(self) -> int:
        return len(self.rows[0].cells)

    def cell(self, r: int, c: int) -> TableCell:
        return self.rows[r].cells[c]

    def merge_map(self) -> TableMergeMap:
        merge_map = TableMergeMap(self.row_count, self.col_count)
        for region in self.merges:
            merge_map.add(region)
        return merge_map

    def merge(self, row: int, col: int, row_span: int = 1, col_span: int = 1) -> "Table":
        """Merge a rectangle of cells; raises Overlap / InvalidInput on conflict."""
        self._apply(MergeRegion(row, col, row_span, col_span))
        return self

    def _apply(self, region: MergeRegion) -> None:
        merge_map = self.merge_map()
        merge_map.add(region)
        self.merges.append(region)
        for r in range(region.row, region.last_row + 1):
            for c in range(region.col, region.last_col + 1):
                self.rows[r].cells[c].merge = merge_map.state(r, c)

    def resolved_column_widths(self, total_width: int) -> list[int]:
        if self.column_widths:
            return list(self.column_widths)
        base, extra = divmod(total_width, self.col_count)
        return [base + (1 if i < extra else 0) for i in range(self.col_count)]

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "x": length_to_dict(self.x), "y": length_to_dict(self.y),
            "width": length_to_dict(self.width),
            "rows": [[c.to_dict() for c in row.cells] for row in self.rows],
        }
        heights = [row.height for row in self.rows]
        if any(h is not None for h in heights):
            d["row_heights"] = heights
        if self.column_widths:
            d["column_widths"] = list(self.column_widths)
        if not self.header:
            d["header"] = False
        if not self.banded_rows:
            d["banded_rows"] = False
        if self.style_id != DEFAULT_STYLE_ID:
            d["style_id"] = self.style_id
        if self.merges:
            d["merges"] = [m.to_dict() for m in self.merges]
        if self.name:
            d["name"] = self.name
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Table":
        heights = d.get("row_heights", [])
        rows = []
        for i, cells in enumerate(d["rows"]):
            height = heights[i] if i < len(heights) else None
            rows.append(TableRow([TableCell.from_dict(c) for c in cells], height=height))
        return cls(
            rows=rows,
            x=parse_dimension(d.get("x", 0)),
            y=parse_dimension(d.get("y", 0)),
            width=parse_dimension(d.get("width", 0)),
            column_widths=d.get("column_widths", []),
            header=d.get("header", True),
            banded_rows=d.get("banded_rows", True),
            style_id=d.get("style_id", DEFAULT_STYLE_ID),
            merges=[MergeRegion.from_dict(m) for m in d.get("merges", [])],
            name=d.get("name"),
        )


def validate_merge_states(table: Table) -> None:
    """Check that the per-cell merge states form valid rectangles.

    Used before emission so hand-edited ``TableCell.merge`` values cannot
    produce a grid readers reject.
    """
    rows, cols = table.row_count, table.col_count
    covered = [[False] * cols for _ in range(rows)]
    for r in range(rows):
        for c in range(cols):
            state = table.cell(r, c).merge
            if state.kind is not MergeKind.ANCHOR:
                continue
            if r + state.row_span > rows or c + state.col_span > cols:
                raise InvalidInputError(
                    f"Anchor ({r},{c}) spans {state.row_span}x{state.col_span} "
                    "beyond the table grid"
                )
            for rr in range(r, r + state.row_span):
                for cc in range(c, c + state.col_span):
                    if covered[rr][cc]:
                        raise OverlapError(f"Cell ({rr},{cc}) is covered by two merges")
                    covered[rr][cc] = True
                    if (rr, cc) == (r, c):
                        continue
                    expected = MergeKind.HMERGE if rr == r else MergeKind.VMERGE
                    if table.cell(rr, cc).merge.kind is not expected:
                        raise InvalidInputError(
                            f"Cell ({rr},{cc}) inside merge at ({r},{c}) "
                            f"must be {expected.value}"
                        )
    for r in range(rows):
        for c in range(cols):
            if table.cell(r, c).merge.is_merged_away and not covered[r][c]:
                raise InvalidInputError(f"Cell ({r},{c}) is merged away without an anchor")
