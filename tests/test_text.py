"""Tests for XML helpers, hyperlinks and DrawingML text emission."""

import pytest

from pptxforge.errors import InternalError, InvalidInputError
from pptxforge.generator.context import SlideContext
from pptxforge.generator.text import (
    body_properties,
    paragraph_properties,
    paragraph_xml,
    run_xml,
    text_body_xml,
)
from pptxforge.generator.xml import attrs, color_xml, element, escape, xfrm
from pptxforge.package.relationships import RT_HYPERLINK, RT_SLIDE
from pptxforge.schema.colors import Color
from pptxforge.schema.hyperlink import Hyperlink, HyperlinkAction
from pptxforge.schema.text import (
    BulletList,
    BulletStyle,
    CodeBlock,
    Paragraph,
    TextBody,
    TextRun,
)
from pptxforge.schema.units import Transform


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def ctx():
    """Context for slide 1 of a three-slide deck."""
    return SlideContext(index=1, slide_count=3)


# ---------------------------------------------------------------------------
# XML helpers
# ---------------------------------------------------------------------------

class TestXmlHelpers:

    def test_escape_all_five(self):
        assert escape('<a & "b" \'c\'>') == "&lt;a &amp; &quot;b&quot; &apos;c&apos;&gt;"

    def test_escape_non_string(self):
        assert escape(42) == "42"

    def test_escape_keeps_whitespace_controls(self):
        assert escape("a\tb\nc\rd") == "a\tb\nc\rd"

    @pytest.mark.parametrize("text", ["Line\x0bbreak", "\x01start", "nul\x00", "form\x0cfeed",
                                      "bad\ufffe"])
    def test_escape_rejects_illegal_chars(self, text):
        with pytest.raises(InvalidInputError, match="XML cannot represent"):
            escape(text)

    def test_attrs_rejects_illegal_chars(self):
        with pytest.raises(InvalidInputError):
            attrs(("name", "Shape\x01"))

    def test_attrs_order_and_none(self):
        assert attrs(("b", 1), ("skip", None), ("a", "x")) == ' b="1" a="x"'

    def test_attrs_booleans(self):
        assert attrs(("on", True), ("off", False)) == ' on="1" off="0"'

    def test_attrs_escaped(self):
        assert attrs(("tooltip", 'say "hi" & go')) == ' tooltip="say &quot;hi&quot; &amp; go"'

    def test_element(self):
        assert element("a:t") == "<a:t/>"
        assert element("a:p", ("x", 1), children="<a:r/>") == '<a:p x="1"><a:r/></a:p>'

    def test_xfrm(self):
        assert xfrm(Transform(1, 2, 3, 4)) == (
            '<a:xfrm><a:off x="1" y="2"/><a:ext cx="3" cy="4"/></a:xfrm>'
        )

    def test_xfrm_rotation_and_flip(self):
        xml = xfrm(Transform(0, 0, 10, 10, rotation=5_400_000, flip_h=True))
        assert xml.startswith('<a:xfrm rot="5400000" flipH="1">')

    def test_color_xml(self):
        assert color_xml(Color.parse("FF0000")) == '<a:srgbClr val="FF0000"/>'
        assert color_xml(Color.parse("accent1"), alpha=50_000) == (
            '<a:schemeClr val="accent1"><a:alpha val="50000"/></a:schemeClr>'
        )


# ---------------------------------------------------------------------------
# Hyperlinks
# ---------------------------------------------------------------------------

class TestHyperlink:

    def test_url(self):
        link = Hyperlink.url("https://example.com")
        assert link.is_external
        assert link.relationship_target() == "https://example.com"
        assert link.action_uri() is None

    def test_email_with_subject(self):
        link = Hyperlink.email("a@example.com", subject="Hello World")
        assert link.relationship_target() == "mailto:a@example.com?subject=Hello%20World"

    def test_file_uri(self):
        link = Hyperlink.file("C:\\docs\\plan.pdf")
        assert link.relationship_target() == "file:///C:/docs/plan.pdf"

    def test_slide_jump(self):
        link = Hyperlink.to_slide(2)
        assert link.action_uri() == "ppaction://hlinksldjump"
        assert link.relationship_target() == "slide2.xml"

    def test_slide_number_must_be_positive(self):
        with pytest.raises(InvalidInputError):
            Hyperlink.to_slide(0)

    def test_navigation(self):
        link = Hyperlink.navigation(HyperlinkAction.NEXT_SLIDE)
        assert link.action_uri() == "ppaction://hlinkshowjump?jump=nextslide"
        assert not link.needs_relationship

    def test_navigation_rejects_url_action(self):
        with pytest.raises(InvalidInputError):
            Hyperlink.navigation(HyperlinkAction.URL)

    def test_url_needs_target(self):
        with pytest.raises(InvalidInputError):
            Hyperlink(HyperlinkAction.URL)

    def test_dict_round_trip(self):
        link = Hyperlink.email("x@example.com", subject="Re", tooltip="Mail")
        assert Hyperlink.from_dict(link.to_dict()) == link


class TestHyperlinkRelationships:

    def test_external_rel(self, ctx):
        rid = ctx.hyperlink_rid(Hyperlink.url("https://example.com"))
        assert rid == "rId1"
        rel = ctx.rels.get("rId1")
        assert rel.rel_type == RT_HYPERLINK
        assert rel.external

    def test_same_link_shares_rel(self, ctx):
        link = Hyperlink.url("https://example.com")
        assert ctx.hyperlink_rid(link) == ctx.hyperlink_rid(link)
        assert len(ctx.rels) == 1

    def test_slide_jump_rel(self, ctx):
        rid = ctx.hyperlink_rid(Hyperlink.to_slide(3))
        rel = ctx.rels.get(rid)
        assert rel.rel_type == RT_SLIDE
        assert rel.target == "slide3.xml"
        assert not rel.external

    def test_slide_jump_beyond_deck(self, ctx):
        with pytest.raises(InvalidInputError, match="targets slide 4"):
            ctx.hyperlink_rid(Hyperlink.to_slide(4))

    def test_show_jump_needs_no_rel(self, ctx):
        assert ctx.hyperlink_rid(Hyperlink.navigation(HyperlinkAction.END_SHOW)) == ""
        assert len(ctx.rels) == 0


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------

class TestRuns:

    def test_plain(self):
        assert run_xml(TextRun("Hi")) == "<a:r><a:rPr/><a:t>Hi</a:t></a:r>"

    def test_attribute_order(self):
        run = TextRun("x", bold=True, italic=True, underline=True,
                      strikethrough=True, size_pt=18, lang="en-US")
        assert run_xml(run).startswith(
            '<a:r><a:rPr lang="en-US" sz="1800" b="1" i="1" u="sng" strike="sngStrike"/>'
        )

    def test_baseline(self):
        assert 'baseline="-25000"' in run_xml(TextRun("2", subscript=True))
        assert 'baseline="30000"' in run_xml(TextRun("2", superscript=True))

    def test_sub_and_superscript_conflict(self):
        with pytest.raises(InvalidInputError):
            TextRun("x", subscript=True, superscript=True)

    def test_size_range(self):
        with pytest.raises(InvalidInputError):
            TextRun("x", size_pt=0.5)

    def test_children_order(self):
        run = TextRun("x", color="FF0000", highlight="FFFF00", font="Georgia")
        xml = run_xml(run)
        assert xml.index("<a:solidFill>") < xml.index("<a:highlight>") < xml.index("<a:latin")

    def test_text_escaped(self):
        assert "<a:t>R&amp;D &lt;2024&gt;</a:t>" in run_xml(TextRun("R&D <2024>"))

    def test_hyperlink_run(self, ctx):
        run = TextRun("docs", hyperlink=Hyperlink.url("https://example.com", tooltip="Docs"))
        xml = run_xml(run, ctx)
        assert '<a:hlinkClick r:id="rId1" tooltip="Docs"/>' in xml

    def test_hyperlink_needs_context(self):
        with pytest.raises(InternalError):
            run_xml(TextRun("x", hyperlink=Hyperlink.url("https://example.com")))


# ---------------------------------------------------------------------------
# Paragraphs and bodies
# ---------------------------------------------------------------------------

class TestParagraphs:

    def test_no_properties(self):
        assert paragraph_properties(Paragraph.of("x")) == ""

    def test_bullet_char(self):
        p = Paragraph.of("item", bullet=BulletStyle.BULLET)
        assert paragraph_properties(p) == (
            '<a:pPr marL="342900" indent="-342900">'
            '<a:buFont typeface="Arial"/><a:buChar char="•"/></a:pPr>'
        )

    def test_numbering(self):
        p = Paragraph.of("step", bullet=BulletStyle.NUMBER, level=1)
        xml = paragraph_properties(p)
        assert 'marL="685800" lvl="1"' in xml
        assert '<a:buAutoNum type="arabicPeriod"/>' in xml

    def test_spacing_order(self):
        p = Paragraph.of("x", space_before=6, space_after=3, line_spacing=12)
        xml = paragraph_properties(p)
        assert xml.index("<a:lnSpc>") < xml.index("<a:spcBef>") < xml.index("<a:spcAft>")
        assert '<a:spcBef><a:spcPts val="600"/></a:spcBef>' in xml

    def test_no_bullet_flag(self):
        assert paragraph_properties(Paragraph.of("x"), no_bullet=True) == (
            "<a:pPr><a:buNone/></a:pPr>"
        )

    def test_alignment_string(self):
        p = Paragraph.of("x", alignment="center")
        assert paragraph_properties(p) == '<a:pPr algn="ctr"/>'

    def test_level_range(self):
        with pytest.raises(InvalidInputError):
            Paragraph.of("x", level=9)

    def test_empty_paragraph(self):
        assert paragraph_xml(Paragraph()) == '<a:p><a:endParaRPr lang="en-US"/></a:p>'

    def test_rtl_defaults(self):
        p = Paragraph.of("שלום", rtl=True, lang="he-IL")
        assert p.cs_font == "David"
        xml = paragraph_xml(p)
        assert 'rtl="1"' in xml
        assert 'lang="he-IL"' in xml
        assert '<a:cs typeface="David"/>' in xml

    def test_rtl_defaults_to_arabic(self):
        p = Paragraph.of("مرحبا", rtl=True)
        assert p.lang == "ar-SA"
        assert p.cs_font == "Arial"

    def test_rtl_unknown_language(self):
        with pytest.raises(InvalidInputError):
            Paragraph.of("x", rtl=True, lang="en-US")


class TestTextBody:

    def test_inherit_collapses(self):
        assert body_properties(TextBody(), inherit=True) == "<a:bodyPr/>"

    def test_explicit_properties(self):
        body = TextBody(wrap=False, anchor="middle", autofit="normal")
        assert body_properties(body) == (
            '<a:bodyPr wrap="none" anchor="ctr"><a:normAutofit/></a:bodyPr>'
        )

    def test_always_one_paragraph(self):
        xml = text_body_xml(TextBody())
        assert xml.count("<a:p>") == 1
        assert xml.startswith("<p:txBody><a:bodyPr")

    def test_from_text_splits_lines(self):
        body = TextBody.from_text("one\ntwo")
        assert [p.text for p in body.paragraphs] == ["one", "two"]
        assert body.text == "one\ntwo"

    def test_dict_round_trip(self):
        body = TextBody([Paragraph(runs=[TextRun("x", bold=True, color="112233")],
                                   bullet="dash", level=2)], anchor="bottom")
        again = TextBody.from_dict(body.to_dict())
        assert again == body


class TestBulletsAndCode:

    def test_bullet_list_paragraphs(self):
        paragraphs = BulletList(["a", "b"], "check").paragraphs(size_pt=20)
        assert [p.bullet for p in paragraphs] == [BulletStyle.CHECK, BulletStyle.CHECK]
        assert paragraphs[0].runs[0].size_pt == 20

    def test_code_block_lines(self):
        block = CodeBlock("x = 1\ny = 2\n", 0, 0, 100, 100)
        body = block.text_body()
        assert [p.text for p in body.paragraphs] == ["x = 1", "y = 2"]
        assert not body.wrap
        assert body.paragraphs[0].runs[0].font == "Consolas"

    def test_code_block_line_numbers(self):
        code = "\n".join(f"line {i}" for i in range(10))
        body = CodeBlock(code, 0, 0, 100, 100, line_numbers=True).text_body()
        assert body.paragraphs[0].text == " 1  line 0"
        assert body.paragraphs[9].text == "10  line 9"
