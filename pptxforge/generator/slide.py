"""Slide parts (``ppt/slides/slideN.xml``).

Shape IDs start at 2 and follow emission order: title placeholder, body
placeholder(s), shapes, code blocks, images, tables, charts, connectors,
videos, audios, then the ink content part. Connectors come after every
shape they can be glued to.

The slide's rels are allocated in order of first appearance: the layout
first, then each reference as the element tree is written, then the notes
slide and comment list, which the slide XML does not mention.
"""

import logging

from pptxforge.generator.charts import chart_frame_xml
from pptxforge.generator.context import SlideContext
from pptxforge.generator.images import image_xml
from pptxforge.generator.media import audio_xml, timing_xml, video_xml
from pptxforge.generator.shapes import code_block_xml, connector_xml, shape_xml
from pptxforge.generator.tables import table_xml
from pptxforge.generator.text import text_body_xml
from pptxforge.generator.xml import NS_MC, NS_P14, PML_NAMESPACES, XML_DECLARATION, attrs
from pptxforge.package.relationships import RT_CUSTOM_XML, RT_SLIDE_LAYOUT
from pptxforge.schema.annotations import InkStroke
from pptxforge.schema.slide import LayoutKind, Slide, Transition, TransitionType
from pptxforge.schema.text import BulletItem, Paragraph, TextBody, TextRun

logger = logging.getLogger(__name__)

SP_TREE_HEAD = (
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
    '<p:grpSpPr><a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/>'
    '<a:chOff x="0" y="0"/><a:chExt cx="0" cy="0"/></a:xfrm></p:grpSpPr>'
)

# Default child element per transition type.
_TRANSITIONS = {
    TransitionType.FADE: ("fade", {}),
    TransitionType.PUSH: ("push", {"dir": "r"}),
    TransitionType.WIPE: ("wipe", {"dir": "r"}),
    TransitionType.SPLIT: ("split", {"orient": "horz", "dir": "out"}),
    TransitionType.REVEAL: ("reveal", {"dir": "r"}),
    TransitionType.COVER: ("cover", {"dir": "r"}),
    TransitionType.ZOOM: ("zoom", {"dir": "in"}),
}


# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------

def placeholder_xml(shape_id: int, name: str, ph: str, body: str) -> str:
    """A placeholder shape; geometry and styling come from the layout."""
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr{attrs(("id", shape_id), ("name", name))}/>'
        '<p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr>'
        f"<p:nvPr>{ph}</p:nvPr></p:nvSpPr><p:spPr/>{body}</p:sp>"
    )


def _title_ph(layout: LayoutKind) -> str:
    if layout is LayoutKind.CENTERED_TITLE:
        return '<p:ph type="ctrTitle"/>'
    return '<p:ph type="title"/>'


def _body_phs(layout: LayoutKind) -> list[str]:
    if layout is LayoutKind.CENTERED_TITLE:
        return ['<p:ph type="subTitle" idx="1"/>']
    if layout is LayoutKind.TWO_COLUMN:
        return ['<p:ph sz="half" idx="1"/>', '<p:ph sz="half" idx="2"/>']
    if layout is LayoutKind.TITLE_AND_BIG_CONTENT:
        return ['<p:ph type="body" idx="1"/>']
    return ['<p:ph idx="1"/>']


def _subtitle_body(items: list[BulletItem]) -> TextBody:
    return TextBody([Paragraph(runs=[TextRun(item.text)]) for item in items])


def placeholders_xml(slide: Slide, ctx: SlideContext) -> str:
    parts = []
    if slide.layout.has_title and slide.title:
        shape_id = ctx.next_shape_id()
        body = text_body_xml(TextBody([Paragraph(runs=[TextRun(slide.title)])]),
                             ctx, inherit=True)
        parts.append(placeholder_xml(shape_id, f"Title {shape_id}",
                                     _title_ph(slide.layout), body))
    if not slide.layout.has_body:
        return "".join(parts)

    columns = [slide.bullet_list()]
    if slide.layout is LayoutKind.TWO_COLUMN:
        columns.append(slide.right_bullet_list())
    for ph, column in zip(_body_phs(slide.layout), columns):
        if not column.items:
            continue
        shape_id = ctx.next_shape_id()
        if slide.layout is LayoutKind.CENTERED_TITLE:
            body = text_body_xml(_subtitle_body(column.items), ctx, inherit=True)
            name = f"Subtitle {shape_id}"
        else:
            body = text_body_xml(TextBody(column.paragraphs()), ctx, inherit=True)
            name = f"Content Placeholder {shape_id}"
        parts.append(placeholder_xml(shape_id, name, ph, body))
    return "".join(parts)


# ---------------------------------------------------------------------------
# Ink
# ---------------------------------------------------------------------------

def ink_bounds(strokes: list[InkStroke]) -> tuple[int, int, int, int]:
    """Union of stroke bounds as (x, y, width, height); extents at least 1."""
    boxes = [s.bounds() for s in strokes]
    x0 = min(b[0] for b in boxes)
    y0 = min(b[1] for b in boxes)
    x1 = max(b[2] for b in boxes)
    y1 = max(b[3] for b in boxes)
    return x0, y0, max(x1 - x0, 1), max(y1 - y0, 1)


def ink_frame_xml(strokes: list[InkStroke], ctx: SlideContext) -> str:
    """``p14:contentPart`` wrapped for readers without PowerPoint 2010 support."""
    shape_id = ctx.next_shape_id()
    rid = ctx.relate(RT_CUSTOM_XML, ctx.assets.add_ink(strokes))
    x, y, cx, cy = ink_bounds(strokes)
    return (
        f'<mc:AlternateContent xmlns:mc="{NS_MC}">'
        f'<mc:Choice xmlns:p14="{NS_P14}" Requires="p14">'
        f'<p:contentPart p14:bwMode="auto" r:id="{rid}">'
        f'<p14:nvContentPartPr><p14:cNvPr id="{shape_id}" name="Ink {shape_id}"/>'
        "<p14:cNvContentPartPr/><p14:nvPr/></p14:nvContentPartPr>"
        f'<p14:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></p14:xfrm>'
        "</p:contentPart></mc:Choice><mc:Fallback/></mc:AlternateContent>"
    )


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------

def transition_xml(transition: Transition | None) -> str:
    """``<p:transition>``; none and cut write nothing.

    Reveal exists only in the PowerPoint 2010 vocabulary, so it is wrapped in
    ``mc:AlternateContent`` with a fade fallback.
    """
    if transition is None or transition.transition_type not in _TRANSITIONS:
        return ""
    tag, defaults = _TRANSITIONS[transition.transition_type]
    options = dict(defaults)
    if transition.direction and "dir" in options:
        options["dir"] = transition.direction
    head = attrs(("spd", transition.speed.value if transition.speed else None),
                 ("advTm", transition.advance_after_ms))
    child = attrs(*options.items())
    if transition.transition_type is TransitionType.REVEAL:
        return (
            f'<mc:AlternateContent xmlns:mc="{NS_MC}">'
            f'<mc:Choice xmlns:p14="{NS_P14}" Requires="p14">'
            f"<p:transition{head}><p14:reveal{child}/></p:transition></mc:Choice>"
            f"<mc:Fallback><p:transition{head}><p:fade/></p:transition></mc:Fallback>"
            "</mc:AlternateContent>"
        )
    return f"<p:transition{head}><p:{tag}{child}/></p:transition>"


# ---------------------------------------------------------------------------
# Slide
# ---------------------------------------------------------------------------

def slide_xml(slide: Slide, ctx: SlideContext, layout_part: str) -> str:
    """Render the slide; ``ctx.rels`` holds its relationships afterwards."""
    ctx.relate(RT_SLIDE_LAYOUT, layout_part)
    tree = [placeholders_xml(slide, ctx)]
    tree += [shape_xml(s, ctx) for s in slide.shapes]
    tree += [code_block_xml(c, ctx) for c in slide.code_blocks]
    tree += [image_xml(i, ctx) for i in slide.images]
    tree += [table_xml(t, ctx) for t in slide.tables]
    tree += [chart_frame_xml(c, ctx) for c in slide.charts]
    tree += [connector_xml(c, ctx) for c in slide.connectors]
    tree += [video_xml(v, ctx) for v in slide.videos]
    tree += [audio_xml(a, ctx) for a in slide.audios]
    if slide.ink:
        tree.append(ink_frame_xml(slide.ink, ctx))

    root = f"<p:sld {PML_NAMESPACES}" + attrs(("show", False if slide.hidden else None)) + ">"
    xml = "".join([
        XML_DECLARATION, "\n", root,
        "<p:cSld><p:spTree>", SP_TREE_HEAD, "".join(tree), "</p:spTree></p:cSld>",
        "<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>",
        transition_xml(slide.transition),
        timing_xml(ctx.timed_media),
        "</p:sld>",
    ])
    logger.debug("Slide %d: %d shapes, %d rels", ctx.index,
                 ctx.shape_count, len(ctx.rels))
    return xml
