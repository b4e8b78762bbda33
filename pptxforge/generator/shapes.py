"""Preset shapes, gradient fills, connectors and code blocks.

Every ``<p:sp>`` is written as non-visual properties, then visual properties
(transform, geometry, fill, line), then the optional text body.
"""

from pptxforge.generator.context import SlideContext
from pptxforge.generator.text import hyperlink_xml, text_body_xml
from pptxforge.generator.xml import attrs, color_xml, solid_fill, xfrm
from pptxforge.schema.colors import Color
from pptxforge.schema.hyperlink import Hyperlink
from pptxforge.schema.shapes import (
    ArrowType,
    Connector,
    Gradient,
    GradientType,
    LineDash,
    Shape,
)
from pptxforge.schema.text import CodeBlock
from pptxforge.schema.units import Transform, resolve, resolve_box


_FILL_TO_CENTER = '<a:fillToRect l="50000" t="50000" r="50000" b="50000"/>'


def display_name(token: str) -> str:
    return token.replace("_", " ").title()


def non_visual_props(shape_id: int, name: str, descr: str | None = None,
                     hyperlink: Hyperlink | None = None,
                     ctx: SlideContext | None = None) -> str:
    head = attrs(("id", shape_id), ("name", name), ("descr", descr))
    if hyperlink is None:
        return f"<p:cNvPr{head}/>"
    return f"<p:cNvPr{head}>{hyperlink_xml(hyperlink, ctx)}</p:cNvPr>"


# ---------------------------------------------------------------------------
# Fills and lines
# ---------------------------------------------------------------------------

def gradient_xml(gradient: Gradient) -> str:
    """``<a:gradFill>`` with stops in non-decreasing position order."""
    stops = "".join(
        f'<a:gs pos="{stop.position}">{color_xml(stop.color, stop.alpha)}</a:gs>'
        for stop in gradient.sorted_stops()
    )
    if gradient.gradient_type is GradientType.LINEAR:
        shade = f'<a:lin ang="{gradient.angle}" scaled="1"/>'
    else:
        shade = (f'<a:path path="{gradient.gradient_type.value}">'
                 f"{_FILL_TO_CENTER}</a:path>")
    return (
        f'<a:gradFill rotWithShape="{"1" if gradient.rotate_with_shape else "0"}">'
        f"<a:gsLst>{stops}</a:gsLst>{shade}</a:gradFill>"
    )


def line_xml(color: Color | None, width: int | None, dash: LineDash | None,
             head: str = "", tail: str = "") -> str:
    if color is None and width is None and dash is None and not head and not tail:
        return ""
    children = ""
    if color is not None:
        children += solid_fill(color)
    if dash is not None:
        children += f'<a:prstDash val="{dash.value}"/>'
    children += head + tail
    return f"<a:ln{attrs(('w', width))}>{children}</a:ln>"


def _geometry(preset: str) -> str:
    return f'<a:prstGeom prst="{preset}"><a:avLst/></a:prstGeom>'


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

def shape_xml(shape: Shape, ctx: SlideContext) -> str:
    shape_id = ctx.next_shape_id(shape.name)
    name = shape.name or f"{display_name(shape.shape_type.name)} {shape_id}"
    box = resolve_box(shape.x, shape.y, shape.width, shape.height,
                      ctx.slide_size, shape.rotation)
    fill = ""
    if shape.gradient is not None:
        fill = gradient_xml(shape.gradient)
    elif shape.fill is not None:
        fill = solid_fill(shape.fill)
    parts = [
        "<p:sp>",
        "<p:nvSpPr>",
        non_visual_props(shape_id, name, hyperlink=shape.hyperlink, ctx=ctx),
        "<p:cNvSpPr/><p:nvPr/></p:nvSpPr>",
        "<p:spPr>",
        xfrm(box),
        _geometry(shape.shape_type.value),
        fill,
        line_xml(shape.line_color, shape.line_width, shape.line_dash),
        "</p:spPr>",
    ]
    if shape.text is not None:
        parts.append(text_body_xml(shape.text, ctx))
    parts.append("</p:sp>")
    return "".join(parts)


def code_block_xml(block: CodeBlock, ctx: SlideContext) -> str:
    """Dark rectangle holding one unbulleted monospace paragraph per line."""
    shape_id = ctx.next_shape_id()
    label = f"Code {block.language}" if block.language else "Code"
    box = resolve_box(block.x, block.y, block.width, block.height, ctx.slide_size)
    return "".join([
        "<p:sp>",
        "<p:nvSpPr>",
        non_visual_props(shape_id, f"{label} {shape_id}"),
        '<p:cNvSpPr txBox="1"/><p:nvPr/></p:nvSpPr>',
        "<p:spPr>",
        xfrm(box),
        _geometry("rect"),
        solid_fill(block.background),
        "</p:spPr>",
        text_body_xml(block.text_body(), ctx, no_bullet=True),
        "</p:sp>",
    ])


# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------

def _arrow(tag: str, arrow: ArrowType, size: str) -> str:
    if arrow is ArrowType.NONE:
        return ""
    return f'<a:{tag} type="{arrow.value}" w="{size}" len="{size}"/>'


def connector_xml(connector: Connector, ctx: SlideContext) -> str:
    """``<p:cxnSp>``; anchors glue the ends to shapes already on the slide."""
    size = ctx.slide_size
    sx, sy = resolve(connector.start_x, size.width), resolve(connector.start_y, size.height)
    ex, ey = resolve(connector.end_x, size.width), resolve(connector.end_y, size.height)
    box = Transform(
        x=min(sx, ex), y=min(sy, ey),
        width=abs(ex - sx), height=abs(ey - sy),
        flip_h=ex < sx, flip_v=ey < sy,
    )
    # Anchors resolve before the connector's own id is allocated.
    glue = ""
    if connector.start_anchor is not None:
        glue += (f'<a:stCxn id="{ctx.shape_id_for(connector.start_anchor.shape)}" '
                 f'idx="{connector.start_anchor.site.value}"/>')
    if connector.end_anchor is not None:
        glue += (f'<a:endCxn id="{ctx.shape_id_for(connector.end_anchor.shape)}" '
                 f'idx="{connector.end_anchor.site.value}"/>')
    shape_id = ctx.next_shape_id(connector.name)
    name = connector.name or f"Connector {shape_id}"
    arrow_size = connector.arrow_size.value
    line = line_xml(
        connector.color, connector.width, connector.dash,
        head=_arrow("headEnd", connector.start_arrow, arrow_size),
        tail=_arrow("tailEnd", connector.end_arrow, arrow_size),
    )
    return "".join([
        "<p:cxnSp>",
        "<p:nvCxnSpPr>",
        non_visual_props(shape_id, name),
        f"<p:cNvCxnSpPr>{glue}</p:cNvCxnSpPr>" if glue else "<p:cNvCxnSpPr/>",
        "<p:nvPr/></p:nvCxnSpPr>",
        "<p:spPr>",
        xfrm(box),
        _geometry(connector.connector_type.value),
        line,
        "</p:spPr>",
        "</p:cxnSp>",
    ])
