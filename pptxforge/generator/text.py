"""DrawingML text: runs, paragraphs and text bodies.

Ordering rules:

- ``<a:rPr>`` attributes are written as ``lang, sz, b, i, u, strike,
  baseline``; children follow the schema sequence (fill, highlight, latin,
  cs, hlinkClick).
- ``<a:pPr>`` comes before any run; its children follow the schema sequence
  (lnSpc, spcBef, spcAft, buFont, buChar/buAutoNum/buNone).
"""

from pptxforge.errors import InternalError
from pptxforge.generator.context import SlideContext
from pptxforge.generator.xml import attrs, color_xml, escape, solid_fill
from pptxforge.schema.hyperlink import Hyperlink
from pptxforge.schema.text import AutoFit, BulletStyle, Paragraph, TextBody, TextRun
from pptxforge.schema.units import resolve


_SUBSCRIPT_BASELINE = -25_000
_SUPERSCRIPT_BASELINE = 30_000
_BULLET_INDENT = 342_900          # 0.375in hanging indent per level

_AUTOFIT_XML = {
    AutoFit.NONE: "<a:noAutofit/>",
    AutoFit.SHRINK: "<a:normAutofit/>",
    AutoFit.SHAPE: "<a:spAutoFit/>",
}


def hyperlink_xml(link: Hyperlink, ctx: SlideContext, tag: str = "a:hlinkClick") -> str:
    """``<a:hlinkClick>``; the rId is allocated on the slide's rels."""
    return f"<{tag}" + attrs(
        ("r:id", ctx.hyperlink_rid(link)),
        ("action", link.action_uri()),
        ("tooltip", link.tooltip),
        ("highlightClick", True if link.highlight_click else None),
    ) + "/>"


def run_properties(run: TextRun, ctx: SlideContext | None, lang: str | None = None,
                   cs_font: str | None = None, tag: str = "a:rPr") -> str:
    baseline = None
    if run.subscript:
        baseline = _SUBSCRIPT_BASELINE
    elif run.superscript:
        baseline = _SUPERSCRIPT_BASELINE
    head = attrs(
        ("lang", run.lang or lang),
        ("sz", int(round(run.size_pt * 100)) if run.size_pt else None),
        ("b", True if run.bold else None),
        ("i", True if run.italic else None),
        ("u", "sng" if run.underline else None),
        ("strike", "sngStrike" if run.strikethrough else None),
        ("baseline", baseline),
    )
    children = []
    if run.color:
        children.append(solid_fill(run.color))
    if run.highlight:
        children.append(f"<a:highlight>{color_xml(run.highlight)}</a:highlight>")
    if run.font:
        children.append(f'<a:latin typeface="{escape(run.font)}"/>')
    if cs_font:
        children.append(f'<a:cs typeface="{escape(cs_font)}"/>')
    if run.hyperlink:
        if ctx is None:
            raise InternalError("Run hyperlinks need a slide context")
        children.append(hyperlink_xml(run.hyperlink, ctx))
    if not children:
        return f"<{tag}{head}/>"
    return f"<{tag}{head}>{''.join(children)}</{tag}>"


def run_xml(run: TextRun, ctx: SlideContext | None = None, lang: str | None = None,
            cs_font: str | None = None) -> str:
    return (f"<a:r>{run_properties(run, ctx, lang, cs_font)}"
            f"<a:t>{escape(run.text)}</a:t></a:r>")


def _bullet_xml(bullet: BulletStyle) -> str:
    if bullet.autonum:
        return f'<a:buFont typeface="+mj-lt"/><a:buAutoNum type="{bullet.autonum}"/>'
    return f'<a:buFont typeface="Arial"/><a:buChar char="{escape(bullet.char)}"/>'


def _spacing(tag: str, points: float | None) -> str:
    if points is None:
        return ""
    return f'<a:{tag}><a:spcPts val="{int(round(points * 100))}"/></a:{tag}>'


def paragraph_properties(p: Paragraph, no_bullet: bool = False) -> str:
    indent = None
    margin = None
    if p.bullet is not None:
        margin = _BULLET_INDENT * (p.level + 1)
        indent = -_BULLET_INDENT
    head = attrs(
        ("marL", margin),
        ("lvl", p.level or None),
        ("indent", indent),
        ("algn", p.alignment.value if p.alignment else None),
        ("rtl", True if p.rtl else None),
    )
    children = (
        _spacing("lnSpc", p.line_spacing)
        + _spacing("spcBef", p.space_before)
        + _spacing("spcAft", p.space_after)
    )
    if p.bullet is not None:
        children += _bullet_xml(p.bullet)
    elif no_bullet:
        children += "<a:buNone/>"
    if not head and not children:
        return ""
    if not children:
        return f"<a:pPr{head}/>"
    return f"<a:pPr{head}>{children}</a:pPr>"


def paragraph_xml(p: Paragraph, ctx: SlideContext | None = None,
                  no_bullet: bool = False) -> str:
    parts = ["<a:p>", paragraph_properties(p, no_bullet)]
    for run in p.runs:
        parts.append(run_xml(run, ctx, p.lang, p.cs_font))
    if not p.runs:
        parts.append('<a:endParaRPr lang="en-US"/>')
    parts.append("</a:p>")
    return "".join(parts)


def body_properties(body: TextBody, inherit: bool = False) -> str:
    """``<a:bodyPr>``; ``inherit`` leaves defaults to the placeholder."""
    inset = resolve(body.inset) if body.inset is not None else None
    if inherit and body.anchor is None and body.wrap and inset is None \
            and body.autofit is AutoFit.NONE:
        return "<a:bodyPr/>"
    head = attrs(
        ("wrap", "square" if body.wrap else "none"),
        ("lIns", inset), ("tIns", inset), ("rIns", inset), ("bIns", inset),
        ("anchor", body.anchor.value if body.anchor else None),
    )
    return f"<a:bodyPr{head}>{_AUTOFIT_XML[body.autofit]}</a:bodyPr>"


def text_body_xml(body: TextBody, ctx: SlideContext | None = None,
                  tag: str = "p:txBody", inherit: bool = False,
                  no_bullet: bool = False) -> str:
    """Full text body: bodyPr, lstStyle, then at least one paragraph."""
    paragraphs = body.paragraphs or [Paragraph()]
    inner = "".join(paragraph_xml(p, ctx, no_bullet) for p in paragraphs)
    return f"<{tag}>{body_properties(body, inherit)}<a:lstStyle/>{inner}</{tag}>"
