"""Tests for shapes, gradient fills, connectors and code blocks."""

import pytest

from pptxforge.errors import InvalidInputError
from pptxforge.generator.context import SlideContext
from pptxforge.generator.shapes import (
    code_block_xml,
    connector_xml,
    gradient_xml,
    shape_xml,
)
from pptxforge.package.relationships import RT_HYPERLINK
from pptxforge.schema.hyperlink import Hyperlink
from pptxforge.schema.shapes import (
    ConnectionAnchor,
    ConnectionSite,
    Connector,
    Gradient,
    GradientDirection,
    GradientStop,
    GradientType,
    Shape,
    ShapeType,
)
from pptxforge.schema.text import CodeBlock
from pptxforge.schema.units import inches, ratio


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def ctx():
    """Fresh 4:3 slide context."""
    return SlideContext()


def _rect(**kwargs) -> Shape:
    return Shape(ShapeType.RECTANGLE, inches(1), inches(1), inches(2), inches(1), **kwargs)


# ---------------------------------------------------------------------------
# Gradients
# ---------------------------------------------------------------------------

class TestGradient:

    def test_diagonal_linear(self):
        gradient = Gradient(
            stops=[GradientStop(0, "FF0000"), GradientStop(100_000, "0000FF")],
            angle=GradientDirection.DIAGONAL_DOWN,
        )
        assert gradient_xml(gradient) == (
            '<a:gradFill rotWithShape="1"><a:gsLst>'
            '<a:gs pos="0"><a:srgbClr val="FF0000"/></a:gs>'
            '<a:gs pos="100000"><a:srgbClr val="0000FF"/></a:gs>'
            '</a:gsLst><a:lin ang="2700000" scaled="1"/></a:gradFill>'
        )

    def test_stops_sorted(self):
        gradient = Gradient(stops=[(100_000, "0000FF"), (0, "FF0000"), (50_000, "00FF00")])
        xml = gradient_xml(gradient)
        assert xml.index('pos="0"') < xml.index('pos="50000"') < xml.index('pos="100000"')

    def test_radial(self):
        gradient = Gradient(stops=[(0, "FFFFFF"), (100_000, "000000")],
                            gradient_type=GradientType.RADIAL)
        xml = gradient_xml(gradient)
        assert '<a:path path="circle">' in xml
        assert "<a:lin" not in xml

    def test_stop_alpha(self):
        gradient = Gradient(stops=[GradientStop(0, "FFFFFF", alpha=40_000),
                                   GradientStop(100_000, "000000")])
        assert '<a:srgbClr val="FFFFFF"><a:alpha val="40000"/></a:srgbClr>' in gradient_xml(gradient)

    def test_position_clamped(self):
        assert GradientStop(150_000, "FFFFFF").position == 100_000
        assert GradientStop(-5, "FFFFFF").position == 0

    def test_needs_two_stops(self):
        with pytest.raises(InvalidInputError):
            Gradient(stops=[(0, "FFFFFF")])

    def test_linear_degrees(self):
        assert Gradient.linear("FF0000", "0000FF", degrees=90).angle == 5_400_000

    def test_linear_direction(self):
        gradient = Gradient.linear("FF0000", "0000FF", direction=GradientDirection.VERTICAL)
        assert gradient.angle == 5_400_000

    def test_linear_needs_direction_or_degrees(self):
        with pytest.raises(InvalidInputError, match="direction or degrees"):
            Gradient.linear("FF0000", "0000FF", direction=None)

    def test_linear_degrees_without_direction(self):
        assert Gradient.linear("FF0000", "0000FF", direction=None, degrees=45).angle == 2_700_000

    def test_from_dict_direction(self):
        gradient = Gradient.from_dict({
            "direction": "diagonal_down",
            "stops": [{"position": 0, "color": "#FF0000"},
                      {"position": 100_000, "color": "#0000FF"}],
        })
        assert gradient.angle == 2_700_000
        assert gradient.stops[1].color.rgb == "0000FF"


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

class TestShape:

    def test_default_name_and_id(self, ctx):
        xml = shape_xml(_rect(), ctx)
        assert '<p:cNvPr id="2" name="Rectangle 2"/>' in xml
        assert '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>' in xml

    def test_multiword_name(self, ctx):
        shape = Shape("rounded_rectangle", 0, 0, 100, 100)
        assert 'name="Rounded Rectangle 2"' in shape_xml(shape, ctx)

    def test_ratio_position(self, ctx):
        shape = Shape(ShapeType.ELLIPSE, ratio(0.5), 0, ratio(0.25), ratio(0.25))
        assert '<a:off x="4572000" y="0"/>' in shape_xml(shape, ctx)

    def test_element_order(self, ctx):
        xml = shape_xml(_rect(fill="4472C4", line_color="000000", text="Hi"), ctx)
        order = ["<p:nvSpPr>", "<a:xfrm>", "<a:prstGeom", "<a:solidFill>", "<a:ln",
                 "</p:spPr>", "<p:txBody>"]
        positions = [xml.index(tag) for tag in order]
        assert positions == sorted(positions)

    def test_line(self, ctx):
        xml = shape_xml(_rect(line_color="000000", line_width=12_700, line_dash="dash"), ctx)
        assert ('<a:ln w="12700"><a:solidFill><a:srgbClr val="000000"/></a:solidFill>'
                '<a:prstDash val="dash"/></a:ln>') in xml

    def test_gradient_fill(self, ctx):
        shape = _rect(gradient=Gradient.linear("FF0000", "0000FF"))
        xml = shape_xml(shape, ctx)
        assert "<a:gradFill" in xml
        assert "<a:solidFill>" not in xml

    def test_fill_and_gradient_conflict(self):
        with pytest.raises(InvalidInputError):
            _rect(fill="FF0000", gradient=Gradient.linear("FF0000", "0000FF"))

    def test_rotation(self, ctx):
        assert '<a:xfrm rot="2700000">' in shape_xml(_rect(rotation=45), ctx)

    def test_unknown_type(self):
        with pytest.raises(InvalidInputError):
            ShapeType.parse("hexagram")

    def test_duplicate_names(self, ctx):
        shape_xml(_rect(name="box"), ctx)
        with pytest.raises(InvalidInputError, match="Duplicate shape name"):
            shape_xml(_rect(name="box"), ctx)

    def test_dict_round_trip(self):
        shape = _rect(fill="FF0000", name="Hero", text="Title")
        again = Shape.from_dict(shape.to_dict())
        assert again == shape


class TestShapeHyperlink:

    def test_url_with_tooltip(self, ctx):
        link = Hyperlink.url("https://example.com", tooltip='Visit "Example" & more')
        xml = shape_xml(_rect(hyperlink=link), ctx)
        assert len(ctx.rels) == 1
        rel = ctx.rels.get("rId1")
        assert rel.rel_type == RT_HYPERLINK
        assert rel.target == "https://example.com"
        assert rel.external
        assert ('<a:hlinkClick r:id="rId1" '
                'tooltip="Visit &quot;Example&quot; &amp; more"/>') in xml

    def test_rels_xml_marks_external(self, ctx):
        shape_xml(_rect(hyperlink=Hyperlink.url("https://example.com")), ctx)
        assert 'TargetMode="External"' in ctx.rels.to_xml()


# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------

class TestConnector:

    def test_flip_when_reversed(self, ctx):
        connector = Connector("straight", inches(3), inches(1), inches(1), inches(2))
        xml = connector_xml(connector, ctx)
        assert '<a:xfrm flipH="1">' in xml
        assert '<a:off x="914400" y="914400"/>' in xml
        assert '<a:ext cx="1828800" cy="914400"/>' in xml
        assert 'name="Connector 2"' in xml

    def test_arrows(self, ctx):
        connector = Connector("elbow", 0, 0, 100, 100, start_arrow="oval",
                              end_arrow="triangle", arrow_size="lg")
        xml = connector_xml(connector, ctx)
        assert '<a:headEnd type="oval" w="lg" len="lg"/>' in xml
        assert '<a:tailEnd type="triangle" w="lg" len="lg"/>' in xml
        assert 'prst="bentConnector3"' in xml

    def test_anchored(self, ctx):
        shape_xml(_rect(name="A"), ctx)
        shape_xml(_rect(name="B"), ctx)
        connector = Connector(
            "straight", 0, 0, 100, 100,
            start_anchor=ConnectionAnchor("A", ConnectionSite.RIGHT),
            end_anchor=ConnectionAnchor("B", ConnectionSite.LEFT),
        )
        xml = connector_xml(connector, ctx)
        assert ('<p:cNvCxnSpPr><a:stCxn id="2" idx="3"/>'
                '<a:endCxn id="3" idx="1"/></p:cNvCxnSpPr>') in xml

    def test_anchor_by_id(self, ctx):
        shape_xml(_rect(), ctx)
        connector = Connector("straight", 0, 0, 100, 100,
                              end_anchor=ConnectionAnchor(2, ConnectionSite.TOP))
        assert '<a:endCxn id="2" idx="0"/>' in connector_xml(connector, ctx)

    def test_unknown_anchor(self, ctx):
        connector = Connector("straight", 0, 0, 100, 100,
                              start_anchor=ConnectionAnchor("missing"))
        with pytest.raises(InvalidInputError, match="No shape named"):
            connector_xml(connector, ctx)

    def test_anchor_to_own_id(self, ctx):
        shape_xml(_rect(), ctx)
        connector = Connector("straight", 0, 0, 100, 100,
                              start_anchor=ConnectionAnchor(3, ConnectionSite.TOP))
        with pytest.raises(InvalidInputError, match="No shape with id 3"):
            connector_xml(connector, ctx)
        assert ctx.shape_count == 1

    def test_anchor_to_own_name(self, ctx):
        connector = Connector("straight", 0, 0, 100, 100, name="Link",
                              end_anchor=ConnectionAnchor("Link"))
        with pytest.raises(InvalidInputError, match="No shape named 'Link'"):
            connector_xml(connector, ctx)

    def test_negative_width(self):
        with pytest.raises(InvalidInputError):
            Connector("straight", 0, 0, 1, 1, width=-1)


# ---------------------------------------------------------------------------
# Code blocks
# ---------------------------------------------------------------------------

class TestCodeBlock:

    def test_text_box(self, ctx):
        block = CodeBlock("print('hi')", 0, 0, inches(4), inches(1), language="python")
        xml = code_block_xml(block, ctx)
        assert '<p:cNvPr id="2" name="Code python 2"/>' in xml
        assert '<p:cNvSpPr txBox="1"/>' in xml
        assert '<a:srgbClr val="1E1E1E"/>' in xml
        assert "<a:t>print(&apos;hi&apos;)</a:t>" in xml

    def test_lines_unbulleted(self, ctx):
        xml = code_block_xml(CodeBlock("a\nb", 0, 0, 100, 100), ctx)
        assert xml.count('<a:pPr algn="l"><a:buNone/></a:pPr>') == 2
        assert '<a:latin typeface="Consolas"/>' in xml
        assert 'wrap="none"' in xml
