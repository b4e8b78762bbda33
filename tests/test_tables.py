"""Tests for table records, the merge map and ``<a:tbl>`` emission."""

import re

import pytest

from pptxforge.errors import InvalidInputError, OverlapError
from pptxforge.generator.context import SlideContext
from pptxforge.generator.tables import cell_xml, merge_attributes, table_xml
from pptxforge.schema.table import (
    DEFAULT_STYLE_ID,
    HMERGE,
    MergeKind,
    MergeRegion,
    MergeState,
    Table,
    TableCell,
    TableMergeMap,
    validate_merge_states,
)


_TC_RE = re.compile(r"<a:tc(?=[ >])([^>]*)>")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def grid4():
    """4x4 table with a 2x3 merge at the origin and a 2x2 merge at (2,2)."""
    table = Table.from_rows([[f"r{r}c{c}" for c in range(4)] for r in range(4)])
    table.merge(0, 0, row_span=2, col_span=3)
    table.merge(2, 2, row_span=2, col_span=2)
    return table


def _tc_attributes(xml: str) -> list[str]:
    return _TC_RE.findall(xml)


# ---------------------------------------------------------------------------
# Merge map
# ---------------------------------------------------------------------------

class TestMergeMap:

    def test_states(self):
        merge_map = TableMergeMap(3, 3)
        merge_map.add(MergeRegion(0, 0, 2, 2))
        assert merge_map.state(0, 0) == MergeState(MergeKind.ANCHOR, 2, 2)
        assert merge_map.state(0, 1).kind is MergeKind.HMERGE
        assert merge_map.state(1, 0).kind is MergeKind.VMERGE
        assert merge_map.state(1, 1).kind is MergeKind.VMERGE
        assert merge_map.state(2, 2).kind is MergeKind.NORMAL

    def test_overlap_leaves_map_unchanged(self):
        merge_map = TableMergeMap(4, 4)
        merge_map.add(MergeRegion(0, 0, 2, 2))
        with pytest.raises(OverlapError):
            merge_map.add(MergeRegion(1, 1, 2, 2))
        assert merge_map.regions == [MergeRegion(0, 0, 2, 2)]

    def test_outside_grid(self):
        with pytest.raises(InvalidInputError, match="exceeds"):
            TableMergeMap(2, 2).add(MergeRegion(1, 1, 2, 1))

    def test_region_spans_positive(self):
        with pytest.raises(InvalidInputError):
            MergeRegion(0, 0, 0, 1)

    def test_adjacent_regions_allowed(self):
        merge_map = TableMergeMap(2, 4)
        merge_map.add(MergeRegion(0, 0, 2, 2))
        merge_map.add(MergeRegion(0, 2, 2, 2))
        assert len(merge_map.regions) == 2


# ---------------------------------------------------------------------------
# Table records
# ---------------------------------------------------------------------------

class TestTable:

    def test_ragged_rows(self):
        with pytest.raises(InvalidInputError, match="Row 1"):
            Table.from_rows([["a", "b"], ["c"]])

    def test_empty(self):
        with pytest.raises(InvalidInputError):
            Table.from_rows([])

    def test_column_width_count(self):
        with pytest.raises(InvalidInputError):
            Table.from_rows([["a", "b"]], column_widths=[100])

    def test_cells_from_values(self):
        table = Table.from_rows([[1, 2.5, None]])
        assert [c.text for c in table.rows[0].cells] == ["1", "2.5", ""]

    def test_merge_overlap_keeps_table(self, grid4):
        with pytest.raises(OverlapError):
            grid4.merge(1, 1, row_span=2, col_span=2)
        assert len(grid4.merges) == 2
        assert grid4.cell(1, 3).merge.kind is MergeKind.NORMAL

    def test_merge_beyond_grid(self, grid4):
        with pytest.raises(InvalidInputError):
            grid4.merge(3, 3, row_span=2)

    def test_resolved_widths_distribute_remainder(self):
        table = Table.from_rows([["a", "b", "c"]])
        assert table.resolved_column_widths(10) == [4, 3, 3]

    def test_dict_round_trip(self, grid4):
        again = Table.from_dict(grid4.to_dict())
        assert again.merges == grid4.merges
        assert again.cell(0, 1).merge.kind is MergeKind.HMERGE
        assert again == grid4

    def test_dict_keeps_banding_and_style(self):
        style = "{5940675A-B579-460E-94D1-54222C63F5DA}"
        table = Table.from_rows([["a", "b"], ["c", "d"]], banded_rows=False, style_id=style)
        d = table.to_dict()
        assert d["banded_rows"] is False
        assert d["style_id"] == style
        again = Table.from_dict(d)
        assert not again.banded_rows
        assert again.style_id == style
        assert again == table

    def test_dict_omits_default_banding_and_style(self, grid4):
        d = grid4.to_dict()
        assert "banded_rows" not in d
        assert "style_id" not in d


class TestValidateMergeStates:

    def test_orphan_merged_cell(self):
        table = Table.from_rows([["a", "b"], ["c", "d"]])
        table.cell(0, 1).merge = HMERGE
        with pytest.raises(InvalidInputError, match="without an anchor"):
            validate_merge_states(table)

    def test_anchor_beyond_grid(self):
        table = Table.from_rows([["a", "b"], ["c", "d"]])
        table.cell(1, 1).merge = MergeState(MergeKind.ANCHOR, 2, 1)
        with pytest.raises(InvalidInputError, match="beyond the table grid"):
            validate_merge_states(table)

    def test_wrong_kind_inside_region(self):
        table = Table.from_rows([["a", "b"], ["c", "d"]])
        table.merge(0, 0, row_span=1, col_span=2)
        table.cell(0, 1).merge = MergeState(MergeKind.VMERGE)
        with pytest.raises(InvalidInputError, match="must be hmerge"):
            validate_merge_states(table)

    def test_valid_grid(self, grid4):
        validate_merge_states(grid4)


# ---------------------------------------------------------------------------
# XML emission
# ---------------------------------------------------------------------------

class TestMergeAttributes:

    def test_anchor_spans(self):
        assert merge_attributes(MergeState(MergeKind.ANCHOR, 2, 3)) == (
            ' gridSpan="3" rowSpan="2"'
        )

    def test_single_span_omitted(self):
        assert merge_attributes(MergeState(MergeKind.ANCHOR, 2, 1)) == ' rowSpan="2"'

    def test_flags(self):
        assert merge_attributes(MergeState(MergeKind.HMERGE)) == ' hMerge="1"'
        assert merge_attributes(MergeState(MergeKind.VMERGE)) == ' vMerge="1"'
        assert merge_attributes(MergeState()) == ""


class TestTableXml:

    def test_merge_scenario(self, grid4):
        tcs = _tc_attributes(table_xml(grid4, SlideContext()))
        assert len(tcs) == 16
        cell = {(r, c): tcs[r * 4 + c] for r in range(4) for c in range(4)}

        assert cell[0, 0] == ' gridSpan="3" rowSpan="2"'
        assert cell[0, 1] == cell[0, 2] == ' hMerge="1"'
        assert cell[1, 0] == cell[1, 1] == cell[1, 2] == ' vMerge="1"'
        assert cell[2, 2] == ' gridSpan="2" rowSpan="2"'
        assert cell[2, 3] == ' hMerge="1"'
        assert cell[3, 2] == cell[3, 3] == ' vMerge="1"'
        for position in [(0, 3), (1, 3), (2, 0), (2, 1), (3, 0), (3, 1)]:
            assert cell[position] == ""

    def test_merged_away_cell_is_empty(self, grid4):
        xml = table_xml(grid4, SlideContext())
        assert "r0c1" not in xml
        assert ('<a:tc hMerge="1"><a:txBody><a:bodyPr/><a:lstStyle/>'
                '<a:p><a:endParaRPr lang="en-US"/></a:p></a:txBody><a:tcPr/></a:tc>') in xml

    def test_frame(self):
        table = Table.from_rows([["a", "b", "c"], ["1", "2", "3"]])
        xml = table_xml(table, SlideContext())
        assert xml.startswith("<p:graphicFrame>")
        assert '<p:cNvPr id="2" name="Table 2"/>' in xml
        assert xml.count('<a:gridCol w="2743200"/>') == 3
        assert (f'<a:tblPr firstRow="1" bandRow="1"><a:tableStyleId>'
                f"{DEFAULT_STYLE_ID}</a:tableStyleId></a:tblPr>") in xml
        assert xml.count('<a:tr h="370840">') == 2

    def test_no_header(self):
        table = Table.from_rows([["a"]], header=False, banded_rows=False)
        assert "<a:tblPr><a:tableStyleId>" in table_xml(table, SlideContext())

    def test_cell_properties(self):
        cell = TableCell("x", bold=True, background="FF0000", anchor="middle")
        xml = cell_xml(cell, SlideContext())
        assert xml.startswith("<a:tc><a:txBody><a:bodyPr/>")
        assert '<a:rPr b="1"/>' in xml
        assert xml.endswith(
            '<a:tcPr anchor="ctr"><a:solidFill><a:srgbClr val="FF0000"/>'
            "</a:solidFill></a:tcPr></a:tc>"
        )

    def test_multiline_cell(self):
        xml = cell_xml(TableCell("one\ntwo"), SlideContext())
        assert xml.count("<a:p>") == 2

    def test_invalid_states_rejected_at_emission(self):
        table = Table.from_rows([["a", "b"]])
        table.cell(0, 1).merge = HMERGE
        with pytest.raises(InvalidInputError):
            table_xml(table, SlideContext())
