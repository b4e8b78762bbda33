"""Picture elements (``<p:pic>``) with crop and effects."""

from pptxforge.generator.context import SlideContext
from pptxforge.generator.shapes import non_visual_props
from pptxforge.generator.xml import attrs, color_xml, xfrm
from pptxforge.package.relationships import RT_IMAGE
from pptxforge.schema.media import Crop, EffectKind, Image, ImageEffect
from pptxforge.schema.units import Transform, resolve_box


# effectLst children must appear in this order.
_EFFECT_ORDER = [
    EffectKind.BLUR,
    EffectKind.GLOW,
    EffectKind.SHADOW,
    EffectKind.REFLECTION,
    EffectKind.SOFT_EDGES,
]

_SHADOW = (
    '<a:outerShdw blurRad="50800" dist="38100" dir="2700000" algn="tl" '
    'rotWithShape="0"><a:prstClr val="black"><a:alpha val="40000"/></a:prstClr>'
    "</a:outerShdw>"
)
_REFLECTION = (
    '<a:reflection blurRad="6350" stA="50000" endA="300" endPos="55000" '
    'dir="5400000" sy="-100000" algn="bl" rotWithShape="0"/>'
)


def effect_xml(effect: ImageEffect) -> str:
    if effect.kind is EffectKind.BLUR:
        return f'<a:blur rad="{effect.radius}"/>'
    if effect.kind is EffectKind.GLOW:
        return f'<a:glow rad="{effect.radius}">{color_xml(effect.color, effect.alpha)}</a:glow>'
    if effect.kind is EffectKind.SHADOW:
        return _SHADOW
    if effect.kind is EffectKind.REFLECTION:
        return _REFLECTION
    if effect.kind is EffectKind.SOFT_EDGES:
        return f'<a:softEdge rad="{effect.radius}"/>'
    return ""


def effect_list_xml(effects: list[ImageEffect]) -> str:
    """``<a:effectLst>`` in schema order; one entry per effect kind."""
    by_kind = {}
    for effect in effects:
        by_kind.setdefault(effect.kind, effect)
    inner = "".join(effect_xml(by_kind[k]) for k in _EFFECT_ORDER if k in by_kind)
    return f"<a:effectLst>{inner}</a:effectLst>" if inner else ""


def src_rect_xml(crop: Crop | None) -> str:
    if crop is None or crop.is_empty:
        return ""
    return "<a:srcRect" + attrs(
        ("l", crop.left or None), ("t", crop.top or None),
        ("r", crop.right or None), ("b", crop.bottom or None),
    ) + "/>"


def blip_fill_xml(rid: str, crop: Crop | None = None, grayscale: bool = False) -> str:
    blip = f'<a:blip r:embed="{rid}"><a:grayscl/></a:blip>' if grayscale \
        else f'<a:blip r:embed="{rid}"/>'
    return (f"<p:blipFill>{blip}{src_rect_xml(crop)}"
            "<a:stretch><a:fillRect/></a:stretch></p:blipFill>")


def picture_sp_pr(box: Transform, effects: str = "") -> str:
    return (f"<p:spPr>{xfrm(box)}"
            f'<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>{effects}</p:spPr>')


def image_xml(image: Image, ctx: SlideContext) -> str:
    shape_id = ctx.next_shape_id(image.name)
    name = image.name or f"Picture {shape_id}"
    # Hyperlink rels come first: cNvPr precedes the blip in document order.
    nv = non_visual_props(shape_id, name, image.alt_text, image.hyperlink, ctx)
    rid = ctx.relate(RT_IMAGE, ctx.assets.add_image(image.data, image.image_format))
    box = resolve_box(image.x, image.y, image.width, image.height, ctx.slide_size)
    grayscale = any(e.kind is EffectKind.GRAYSCALE for e in image.effects)
    return "".join([
        "<p:pic>",
        "<p:nvPicPr>",
        nv,
        '<p:cNvPicPr><a:picLocks noChangeAspect="1"/></p:cNvPicPr><p:nvPr/>',
        "</p:nvPicPr>",
        blip_fill_xml(rid, image.crop, grayscale),
        picture_sp_pr(box, effect_list_xml(image.effects)),
        "</p:pic>",
    ])
