"""Table graphic frames (``<a:tbl>``).

Every grid position emits an ``<a:tc>``, merged-away ones included, so the
grid stays rectangular. Inside a cell the text body precedes ``<a:tcPr>``.
"""

from pptxforge.generator.context import SlideContext
from pptxforge.generator.shapes import non_visual_props
from pptxforge.generator.text import text_body_xml
from pptxforge.generator.xml import attrs, escape, solid_fill, xfrm
from pptxforge.schema.table import (
    DEFAULT_ROW_HEIGHT,
    MergeKind,
    MergeState,
    Table,
    TableCell,
    validate_merge_states,
)
from pptxforge.schema.text import Paragraph, TextBody, TextRun
from pptxforge.schema.units import EMU_PER_INCH, Transform, resolve


TABLE_URI = "http://schemas.openxmlformats.org/drawingml/2006/table"
_SIDE_MARGIN = EMU_PER_INCH // 2

_EMPTY_TX_BODY = ('<a:txBody><a:bodyPr/><a:lstStyle/>'
                  '<a:p><a:endParaRPr lang="en-US"/></a:p></a:txBody>')


def merge_attributes(state: MergeState) -> str:
    """Anchor -> gridSpan/rowSpan (omitted when 1); HMERGE/VMERGE -> flags."""
    if state.kind is MergeKind.ANCHOR:
        return attrs(
            ("gridSpan", state.col_span if state.col_span > 1 else None),
            ("rowSpan", state.row_span if state.row_span > 1 else None),
        )
    if state.kind is MergeKind.HMERGE:
        return ' hMerge="1"'
    if state.kind is MergeKind.VMERGE:
        return ' vMerge="1"'
    return ""


def _cell_body(cell: TableCell, ctx: SlideContext) -> str:
    paragraphs = [
        Paragraph(runs=[TextRun(line, bold=cell.bold, italic=cell.italic,
                                size_pt=cell.size_pt, color=cell.color)],
                  alignment=cell.alignment)
        for line in cell.text.split("\n")
    ]
    return text_body_xml(TextBody(paragraphs), ctx, tag="a:txBody", inherit=True)


def _cell_properties(cell: TableCell) -> str:
    head = attrs(("anchor", cell.anchor.value if cell.anchor else None))
    if cell.background is None:
        return f"<a:tcPr{head}/>"
    return f"<a:tcPr{head}>{solid_fill(cell.background)}</a:tcPr>"


def cell_xml(cell: TableCell, ctx: SlideContext) -> str:
    merge = merge_attributes(cell.merge)
    if cell.merge.is_merged_away:
        return f"<a:tc{merge}>{_EMPTY_TX_BODY}<a:tcPr/></a:tc>"
    return f"<a:tc{merge}>{_cell_body(cell, ctx)}{_cell_properties(cell)}</a:tc>"


def table_xml(table: Table, ctx: SlideContext) -> str:
    validate_merge_states(table)
    shape_id = ctx.next_shape_id(table.name)
    name = table.name or f"Table {shape_id}"
    size = ctx.slide_size

    total_width = resolve(table.width, size.width)
    if not total_width and not table.column_widths:
        total_width = size.width - 2 * _SIDE_MARGIN
    widths = table.resolved_column_widths(total_width)
    heights = [row.height or DEFAULT_ROW_HEIGHT for row in table.rows]
    box = Transform(resolve(table.x, size.width), resolve(table.y, size.height),
                    sum(widths), sum(heights))

    grid = "".join(f'<a:gridCol w="{w}"/>' for w in widths)
    rows = []
    for row, height in zip(table.rows, heights):
        cells = "".join(cell_xml(cell, ctx) for cell in row.cells)
        rows.append(f'<a:tr h="{height}">{cells}</a:tr>')

    tbl_pr = attrs(("firstRow", True if table.header else None),
                   ("bandRow", True if table.banded_rows else None))
    return "".join([
        "<p:graphicFrame>",
        "<p:nvGraphicFramePr>",
        non_visual_props(shape_id, name),
        '<p:cNvGraphicFramePr><a:graphicFrameLocks noGrp="1"/></p:cNvGraphicFramePr>',
        "<p:nvPr/></p:nvGraphicFramePr>",
        xfrm(box, tag="p:xfrm"),
        f'<a:graphic><a:graphicData uri="{TABLE_URI}">',
        f"<a:tbl><a:tblPr{tbl_pr}>",
        f"<a:tableStyleId>{escape(table.style_id)}</a:tableStyleId></a:tblPr>",
        f"<a:tblGrid>{grid}</a:tblGrid>",
        "".join(rows),
        "</a:tbl></a:graphicData></a:graphic>",
        "</p:graphicFrame>",
    ])
