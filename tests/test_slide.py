"""Tests for slide parts: placeholders, element order, transitions and ink."""

import pytest

from pptxforge.errors import InvalidInputError
from pptxforge.generator.context import SlideContext
from pptxforge.generator.media import PLACEHOLDER_POSTER
from pptxforge.generator.slide import ink_bounds, slide_xml, transition_xml
from pptxforge.generator.xml import XML_DECLARATION
from pptxforge.package.relationships import RT_CUSTOM_XML, RT_SLIDE_LAYOUT
from pptxforge.schema.annotations import InkStroke
from pptxforge.schema.media import Image, MediaOptions, Video
from pptxforge.schema.shapes import ConnectionAnchor, Connector, Shape
from pptxforge.schema.slide import LayoutKind, Slide, Transition, TransitionSpeed, TransitionType
from pptxforge.schema.table import Table
from pptxforge.schema.text import BulletItem


LAYOUT_PART = "ppt/slideLayouts/slideLayout2.xml"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def ctx():
    """Context for a single-slide deck."""
    return SlideContext()


def _render(slide: Slide, ctx: SlideContext) -> str:
    return slide_xml(slide, ctx, LAYOUT_PART)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class TestSlideRecord:

    def test_layout_parse(self):
        assert LayoutKind.parse("title and content") is LayoutKind.TITLE_AND_CONTENT
        assert LayoutKind.parse("two-column") is LayoutKind.TWO_COLUMN

    def test_bullets_coerced(self):
        slide = Slide(bullets=["a", BulletItem("b", level=1)])
        assert slide.bullets == [BulletItem("a"), BulletItem("b", 1)]

    def test_add_routes_by_type(self):
        slide = Slide()
        shape = Shape("rectangle", 0, 0, 10, 10)
        assert slide.add(shape) is slide
        assert slide.shapes == [shape]

    def test_add_rejects_unknown(self):
        with pytest.raises(TypeError):
            Slide().add("text")

    def test_has_notes(self):
        assert not Slide(notes="   ").has_notes
        assert Slide(notes="Speak slowly").has_notes

    def test_dict_round_trip(self):
        slide = Slide(title="Plan", layout="two_column", bullets=["a"],
                      right_bullets=[BulletItem("b", 1)], notes="n",
                      transition=Transition(TransitionType.FADE, TransitionSpeed.FAST),
                      hidden=True)
        assert Slide.from_dict(slide.to_dict()) == slide


# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------

class TestPlaceholders:

    def test_layout_rel_first(self, ctx):
        _render(Slide(title="Agenda"), ctx)
        rel = ctx.rels.get("rId1")
        assert rel.rel_type == RT_SLIDE_LAYOUT
        assert rel.target == "../slideLayouts/slideLayout2.xml"

    def test_title_and_body(self, ctx):
        xml = _render(Slide(title="Agenda", bullets=["One", "Two"]), ctx)
        assert xml.startswith(XML_DECLARATION)
        assert '<p:cNvPr id="2" name="Title 2"/>' in xml
        assert '<p:ph type="title"/>' in xml
        assert '<p:cNvPr id="3" name="Content Placeholder 3"/>' in xml
        assert '<p:ph idx="1"/>' in xml
        assert xml.count('<a:buChar char="•"/>') == 2
        assert "<a:t>Agenda</a:t>" in xml

    def test_centered_title(self, ctx):
        xml = _render(Slide(title="Deck", layout="centered_title", bullets=["By me"]), ctx)
        assert '<p:ph type="ctrTitle"/>' in xml
        assert '<p:ph type="subTitle" idx="1"/>' in xml
        assert 'name="Subtitle 3"' in xml
        assert "<a:buChar" not in xml

    def test_two_columns(self, ctx):
        slide = Slide(title="Compare", layout=LayoutKind.TWO_COLUMN,
                      bullets=["Left"], right_bullets=["Right"])
        xml = _render(slide, ctx)
        assert '<p:ph sz="half" idx="1"/>' in xml
        assert '<p:ph sz="half" idx="2"/>' in xml
        assert xml.index("<a:t>Left</a:t>") < xml.index("<a:t>Right</a:t>")

    def test_blank_layout_has_no_placeholders(self, ctx):
        xml = _render(Slide(title="Ignored", layout="blank", bullets=["x"]), ctx)
        assert "<p:ph" not in xml
        assert ctx.shape_count == 0

    def test_empty_title_skipped(self, ctx):
        xml = _render(Slide(bullets=["only"]), ctx)
        assert '<p:ph type="title"/>' not in xml
        assert 'name="Content Placeholder 2"' in xml

    def test_nested_bullet_level(self, ctx):
        xml = _render(Slide(title="T", bullets=[BulletItem("deep", level=2)]), ctx)
        assert 'marL="1028700" lvl="2"' in xml


# ---------------------------------------------------------------------------
# Element order and shape ids
# ---------------------------------------------------------------------------

class TestElementOrder:

    def test_shape_ids_follow_emission_order(self, ctx):
        slide = Slide(
            title="Mixed",
            shapes=[Shape("rectangle", 0, 0, 100, 100, name="box")],
            images=[Image.from_bytes(PLACEHOLDER_POSTER, 0, 0, 100, 100)],
            tables=[Table.from_rows([["a"]])],
            connectors=[Connector("straight", 0, 0, 50, 50,
                                  start_anchor=ConnectionAnchor("box"))],
        )
        xml = _render(slide, ctx)
        names = ['name="Title 2"', 'name="box"', 'name="Picture 4"',
                 'name="Table 5"', 'name="Connector 6"']
        positions = [xml.index(n) for n in names]
        assert positions == sorted(positions)
        assert '<a:stCxn id="3" idx="3"/>' in xml

    def test_hidden_slide(self, ctx):
        xml = _render(Slide(title="Backup", hidden=True), ctx)
        assert 'show="0">' in xml.split("\n", 1)[1][:400]

    def test_visible_slide_has_no_show_attribute(self, ctx):
        assert 'show="' not in _render(Slide(title="Main"), ctx)

    def test_transition_then_timing(self, ctx):
        slide = Slide(
            title="Clip",
            videos=[Video(b"mp4-bytes", "mp4", 0, 0, 100, 100,
                          options=MediaOptions(auto_play=True))],
            transition=Transition(TransitionType.FADE),
        )
        xml = _render(slide, ctx)
        assert (xml.index("</p:clrMapOvr>") < xml.index("<p:transition>")
                < xml.index("<p:timing>") < xml.index("</p:sld>"))


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TestTransitions:

    @pytest.mark.parametrize("transition", [
        None,
        Transition(TransitionType.NONE),
        Transition(TransitionType.CUT),
    ])
    def test_nothing_emitted(self, transition):
        assert transition_xml(transition) == ""

    def test_fade(self):
        transition = Transition(TransitionType.FADE, TransitionSpeed.FAST)
        assert transition_xml(transition) == (
            '<p:transition spd="fast"><p:fade/></p:transition>'
        )

    def test_default_directions(self):
        assert '<p:push dir="r"/>' in transition_xml(Transition(TransitionType.PUSH))
        assert '<p:split orient="horz" dir="out"/>' in transition_xml(
            Transition(TransitionType.SPLIT))
        assert '<p:zoom dir="in"/>' in transition_xml(Transition(TransitionType.ZOOM))

    def test_direction_override(self):
        transition = Transition(TransitionType.WIPE, direction="d")
        assert transition_xml(transition) == '<p:transition><p:wipe dir="d"/></p:transition>'

    def test_auto_advance(self):
        transition = Transition(TransitionType.COVER, advance_after_ms=3000)
        assert transition_xml(transition).startswith('<p:transition advTm="3000">')

    def test_reveal_has_fallback(self):
        xml = transition_xml(Transition(TransitionType.REVEAL))
        assert xml.startswith("<mc:AlternateContent")
        assert '<p14:reveal dir="r"/>' in xml
        assert "<mc:Fallback><p:transition><p:fade/></p:transition></mc:Fallback>" in xml

    @pytest.mark.parametrize("transition_type, direction", [
        (TransitionType.SPLIT, "up"),
        (TransitionType.SPLIT, "l"),
        (TransitionType.PUSH, "up"),
        (TransitionType.ZOOM, "r"),
        (TransitionType.REVEAL, "u"),
        (TransitionType.FADE, "l"),
    ])
    def test_invalid_direction(self, transition_type, direction):
        with pytest.raises(InvalidInputError, match="not valid"):
            Transition(transition_type, direction=direction)

    @pytest.mark.parametrize("transition_type, direction", [
        (TransitionType.SPLIT, "in"),
        (TransitionType.COVER, "ld"),
        (TransitionType.REVEAL, "l"),
    ])
    def test_valid_direction_written(self, transition_type, direction):
        assert f'dir="{direction}"' in transition_xml(Transition(transition_type, direction=direction))

    def test_invalid_direction_from_dict(self):
        with pytest.raises(InvalidInputError):
            Transition.from_dict({"type": "push", "direction": "up"})

    def test_negative_advance(self):
        with pytest.raises(InvalidInputError):
            Transition(TransitionType.FADE, advance_after_ms=-1)


# ---------------------------------------------------------------------------
# Ink
# ---------------------------------------------------------------------------

class TestInkFrame:

    def test_content_part(self, ctx):
        slide = Slide(title="Review", ink=[InkStroke([(100, 200), (400, 800)])])
        xml = _render(slide, ctx)
        assert '<p:contentPart p14:bwMode="auto" r:id="rId2">' in xml
        assert '<p14:cNvPr id="3" name="Ink 3"/>' in xml
        assert '<a:off x="100" y="200"/><a:ext cx="300" cy="600"/>' in xml
        rel = ctx.rels.get("rId2")
        assert rel.rel_type == RT_CUSTOM_XML
        assert rel.target == "../ink/ink1.xml"
        assert ctx.assets.ink[0][0] == "ppt/ink/ink1.xml"

    def test_bounds_union(self):
        strokes = [InkStroke([(10, 10), (20, 20)]), InkStroke([(5, 30), (15, 40)])]
        assert ink_bounds(strokes) == (5, 10, 15, 30)

    def test_degenerate_bounds(self):
        assert ink_bounds([InkStroke([(5, 5), (5, 5)])]) == (5, 5, 1, 1)
