"""Grid positioning helper for callers placing shapes on a slide.

This is not a layout engine: it only divides the slide area into equal
cells so elements can be placed without computing EMU offsets by hand.

Usage::

    grid = Grid(rows=2, cols=2, slide_size=SLIDE_16X9)
    box = grid.cell(0, 1)
    chart = Chart(..., **grid.kwargs(1, 0, col_span=2))
"""

from pptxforge.errors import InvalidInputError
from pptxforge.schema.units import SLIDE_4X3, Length, SlideSize, Transform, inches, resolve


class Grid:
    """An evenly divided rectangle of ``rows`` x ``cols`` cells.

    Parameters
    ----------
    margin : Length
        Space kept free around the grid (default 0.5in).
    gutter : Length
        Space between adjacent cells (default 0.25in).
    top : Length, optional
        Top offset of the grid; defaults to ``margin``. Leave room for a
        title placeholder with e.g. ``top=inches(1.5)``.
    """

    def __init__(self, rows: int = 1, cols: int = 1, margin: Length = inches(0.5),
                 gutter: Length = inches(0.25), slide_size: SlideSize = SLIDE_4X3,
                 top: Length | None = None) -> None:
        if rows < 1 or cols < 1:
            raise InvalidInputError(f"Grid needs at least one row and column, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        self.slide_size = slide_size
        self.margin = resolve(margin, slide_size.width)
        self.gutter = resolve(gutter, slide_size.width)
        self.top = resolve(top, slide_size.height) if top is not None else self.margin

        self.width = slide_size.width - 2 * self.margin
        self.height = slide_size.height - self.top - self.margin
        self.cell_width = (self.width - (cols - 1) * self.gutter) // cols
        self.cell_height = (self.height - (rows - 1) * self.gutter) // rows
        if self.cell_width <= 0 or self.cell_height <= 0:
            raise InvalidInputError("Margins and gutters leave no room for grid cells")

    def cell(self, row: int, col: int, row_span: int = 1, col_span: int = 1) -> Transform:
        """Rectangle covering ``row_span`` x ``col_span`` cells from (row, col)."""
        if row_span < 1 or col_span < 1:
            raise InvalidInputError("Spans must be at least 1")
        if not (0 <= row and row + row_span <= self.rows
                and 0 <= col and col + col_span <= self.cols):
            raise InvalidInputError(
                f"Cell ({row},{col}) span {row_span}x{col_span} is outside "
                f"the {self.rows}x{self.cols} grid"
            )
        return Transform(
            x=self.margin + col * (self.cell_width + self.gutter),
            y=self.top + row * (self.cell_height + self.gutter),
            width=col_span * self.cell_width + (col_span - 1) * self.gutter,
            height=row_span * self.cell_height + (row_span - 1) * self.gutter,
        )

    def kwargs(self, row: int, col: int, row_span: int = 1, col_span: int = 1) -> dict:
        """``x``/``y``/``width``/``height`` keyword arguments for element records."""
        box = self.cell(row, col, row_span, col_span)
        return {"x": box.x, "y": box.y, "width": box.width, "height": box.height}

    def cells(self) -> list[Transform]:
        """Every single cell, row by row."""
        return [self.cell(r, c) for r in range(self.rows) for c in range(self.cols)]
