"""Boilerplate parts: slide layouts, slide master, themes, notes and handout masters.

The master's placeholders are positioned from the slide size; layouts and
slides leave ``<p:spPr>`` empty and inherit those positions. Colors and
typefaces come from the deck's ``DesignSystem``.
"""

from pptxforge.generator.slide import SP_TREE_HEAD, placeholder_xml
from pptxforge.generator.xml import NS_A, PML_NAMESPACES, XML_DECLARATION, attrs, escape
from pptxforge.schema.design_system import DesignSystem
from pptxforge.schema.slide import LayoutKind
from pptxforge.schema.units import SlideSize, Transform


# Slide master and layout ids share one space that starts at 2^31.
MASTER_ID = 2_147_483_648

NOTES_WIDTH = 6_858_000
NOTES_HEIGHT = 9_144_000

_CLR_MAP = ('bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" '
            'accent2="accent2" accent3="accent3" accent4="accent4" '
            'accent5="accent5" accent6="accent6" hlink="hlink" folHlink="folHlink"')

_BG = ('<p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>')

_EMPTY_BODY = ('<p:txBody><a:bodyPr/><a:lstStyle/><a:p><a:endParaRPr lang="en-US"/>'
               "</a:p></p:txBody>")


def _sp_pr(box: Transform) -> str:
    return (f'<p:spPr><a:xfrm><a:off x="{box.x}" y="{box.y}"/>'
            f'<a:ext cx="{box.width}" cy="{box.height}"/></a:xfrm>'
            '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom></p:spPr>')


def _positioned_ph(shape_id: int, name: str, ph: str, box: Transform,
                   body: str = _EMPTY_BODY) -> str:
    return placeholder_xml(shape_id, name, ph, body).replace("<p:spPr/>", _sp_pr(box), 1)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class MasterGeometry:
    """Placeholder rectangles derived from the slide extent."""

    def __init__(self, size: SlideSize) -> None:
        self.size = size
        self.margin = size.width // 20
        self.inner_width = size.width - 2 * self.margin

    @property
    def title(self) -> Transform:
        h = self.size.height
        return Transform(self.margin, h * 4 // 100, self.inner_width, h * 17 // 100)

    @property
    def body(self) -> Transform:
        h = self.size.height
        return Transform(self.margin, h * 23 // 100, self.inner_width, h * 68 // 100)

    @property
    def centered_title(self) -> Transform:
        h = self.size.height
        return Transform(self.margin, h * 31 // 100, self.inner_width, h * 21 // 100)

    @property
    def subtitle(self) -> Transform:
        h = self.size.height
        return Transform(self.margin * 2, h * 56 // 100,
                         self.size.width - 4 * self.margin, h * 25 // 100)

    def column(self, index: int) -> Transform:
        body = self.body
        gutter = self.margin // 2
        width = (body.width - gutter) // 2
        return Transform(body.x + index * (width + gutter), body.y, width, body.height)


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------

def _layout_placeholders(kind: LayoutKind, geo: MasterGeometry) -> str:
    if kind is LayoutKind.BLANK:
        return ""
    if kind is LayoutKind.CENTERED_TITLE:
        return (_positioned_ph(2, "Title 1", '<p:ph type="ctrTitle"/>', geo.centered_title)
                + _positioned_ph(3, "Subtitle 2", '<p:ph type="subTitle" idx="1"/>',
                                 geo.subtitle))
    title = placeholder_xml(2, "Title 1", '<p:ph type="title"/>', _EMPTY_BODY)
    if kind is LayoutKind.TITLE_ONLY:
        return title
    if kind is LayoutKind.TWO_COLUMN:
        return (title
                + _positioned_ph(3, "Content Placeholder 2", '<p:ph sz="half" idx="1"/>',
                                 geo.column(0))
                + _positioned_ph(4, "Content Placeholder 3", '<p:ph sz="half" idx="2"/>',
                                 geo.column(1)))
    if kind is LayoutKind.TITLE_AND_BIG_CONTENT:
        return title + placeholder_xml(3, "Text Placeholder 2",
                                       '<p:ph type="body" idx="1"/>', _EMPTY_BODY)
    return title + placeholder_xml(3, "Content Placeholder 2", '<p:ph idx="1"/>', _EMPTY_BODY)


def layout_xml(kind: LayoutKind, size: SlideSize) -> str:
    """``ppt/slideLayouts/slideLayoutN.xml``; its only rel is the master."""
    geo = MasterGeometry(size)
    return (
        f'{XML_DECLARATION}\n<p:sldLayout {PML_NAMESPACES} type="{kind.value}" preserve="1">'
        f'<p:cSld name="{escape(kind.display_name)}"><p:spTree>{SP_TREE_HEAD}'
        f"{_layout_placeholders(kind, geo)}</p:spTree></p:cSld>"
        "<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr></p:sldLayout>"
    )


# ---------------------------------------------------------------------------
# Master
# ---------------------------------------------------------------------------

def _sz(points: float) -> int:
    return int(round(points * 100))


def _level(n: int, size_pt: float, font: str, bullet: bool, align: str = "l") -> str:
    indent = 228_600
    margin = indent * n if bullet else 0
    head = attrs(("marL", margin if bullet else None),
                 ("indent", -indent if bullet else None),
                 ("algn", align), ("defTabSz", 914_400), ("rtl", False))
    spacing = ('<a:lnSpc><a:spcPct val="90000"/></a:lnSpc>'
               f'<a:spcBef><a:spcPts val="{1000 if bullet else 0}"/></a:spcBef>')
    marker = ('<a:buFont typeface="Arial"/><a:buChar char="&#8226;"/>' if bullet
              else "<a:buNone/>")
    return (f"<a:lvl{n}pPr{head}>{spacing}{marker}"
            f'<a:defRPr sz="{_sz(size_pt)}" kern="1200"><a:solidFill>'
            '<a:schemeClr val="tx1"/></a:solidFill>'
            f'<a:latin typeface="{font}"/><a:ea typeface="{font.replace("lt", "ea")}"/>'
            f'<a:cs typeface="{font.replace("lt", "cs")}"/></a:defRPr></a:lvl{n}pPr>')


def body_sizes(design: DesignSystem) -> list[float]:
    """Body text size per outline level 1-5."""
    base = design.body_size_pt
    return [base, base - 4, base - 8, base - 10, base - 10]


def text_styles_xml(design: DesignSystem) -> str:
    title = _level(1, design.title_size_pt, "+mj-lt", bullet=False)
    body = "".join(_level(n, max(size, 8), "+mn-lt", bullet=True)
                   for n, size in enumerate(body_sizes(design), start=1))
    other = _level(1, 18, "+mn-lt", bullet=False)
    return (f"<p:txStyles><p:titleStyle>{title}</p:titleStyle>"
            f"<p:bodyStyle>{body}</p:bodyStyle>"
            f"<p:otherStyle>{other}</p:otherStyle></p:txStyles>")


def master_xml(layout_rids: list[str], size: SlideSize, design: DesignSystem) -> str:
    """``ppt/slideMasters/slideMaster1.xml``; ``layout_rids`` in layout order."""
    geo = MasterGeometry(size)
    ids = "".join(f'<p:sldLayoutId id="{MASTER_ID + i}" r:id="{rid}"/>'
                  for i, rid in enumerate(layout_rids, start=1))
    tree = (_positioned_ph(2, "Title Placeholder 1", '<p:ph type="title"/>', geo.title)
            + _positioned_ph(3, "Text Placeholder 2", '<p:ph type="body" idx="1"/>',
                             geo.body))
    return (
        f"{XML_DECLARATION}\n<p:sldMaster {PML_NAMESPACES}>"
        f"<p:cSld>{_BG}<p:spTree>{SP_TREE_HEAD}{tree}</p:spTree></p:cSld>"
        f"<p:clrMap {_CLR_MAP}/>"
        f"<p:sldLayoutIdLst>{ids}</p:sldLayoutIdLst>"
        f"{text_styles_xml(design)}</p:sldMaster>"
    )


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

def _fill_styles() -> str:
    return ('<a:fillStyleLst>'
            '<a:solidFill><a:schemeClr val="phClr"/></a:solidFill>'
            '<a:solidFill><a:schemeClr val="phClr"><a:tint val="50000"/></a:schemeClr></a:solidFill>'
            '<a:solidFill><a:schemeClr val="phClr"><a:shade val="80000"/></a:schemeClr></a:solidFill>'
            '</a:fillStyleLst>')


def _line_styles() -> str:
    return "<a:lnStyleLst>" + "".join(
        f'<a:ln w="{w}" cap="flat" cmpd="sng" algn="ctr"><a:solidFill>'
        '<a:schemeClr val="phClr"/></a:solidFill><a:prstDash val="solid"/>'
        "<a:miter lim=\"800000\"/></a:ln>"
        for w in (6350, 12700, 19050)
    ) + "</a:lnStyleLst>"


def _effect_styles() -> str:
    return ("<a:effectStyleLst>"
            + "<a:effectStyle><a:effectLst/></a:effectStyle>" * 3
            + "</a:effectStyleLst>")


def theme_xml(design: DesignSystem, name: str | None = None) -> str:
    """``ppt/theme/themeN.xml`` built from the design system."""
    colors = "".join(f'<a:{slot}><a:srgbClr val="{value}"/></a:{slot}>'
                     for slot, value in design.color_scheme())
    fonts = (f'<a:majorFont><a:latin typeface="{escape(design.major_font)}"/>'
             '<a:ea typeface=""/><a:cs typeface=""/></a:majorFont>'
             f'<a:minorFont><a:latin typeface="{escape(design.minor_font)}"/>'
             '<a:ea typeface=""/><a:cs typeface=""/></a:minorFont>')
    theme_name = escape(name or design.theme_name)
    return (
        f'{XML_DECLARATION}\n<a:theme xmlns:a="{NS_A}" name="{theme_name}">'
        f'<a:themeElements><a:clrScheme name="{theme_name}">{colors}</a:clrScheme>'
        f'<a:fontScheme name="{theme_name}">{fonts}</a:fontScheme>'
        f'<a:fmtScheme name="{theme_name}">{_fill_styles()}{_line_styles()}'
        f"{_effect_styles()}{_fill_styles().replace('fillStyleLst', 'bgFillStyleLst')}"
        "</a:fmtScheme></a:themeElements><a:objectDefaults/><a:extraClrSchemeLst/>"
        "</a:theme>"
    )


# ---------------------------------------------------------------------------
# Notes and handout masters
# ---------------------------------------------------------------------------

def notes_master_xml(design: DesignSystem) -> str:
    """``ppt/notesMasters/notesMaster1.xml``; related to its own theme."""
    image = Transform(1_143_000, 685_800, 4_572_000, 3_429_000)
    body = Transform(685_800, 4_343_400, 5_486_400, 4_114_800)
    tree = (_positioned_ph(2, "Slide Image Placeholder 1", '<p:ph type="sldImg" idx="2"/>',
                           image, body="")
            + _positioned_ph(3, "Notes Placeholder 2", '<p:ph type="body" sz="quarter" idx="3"/>',
                             body))
    notes_style = _level(1, design.notes_size_pt, "+mn-lt", bullet=False)
    return (
        f"{XML_DECLARATION}\n<p:notesMaster {PML_NAMESPACES}>"
        f"<p:cSld>{_BG}<p:spTree>{SP_TREE_HEAD}{tree}</p:spTree></p:cSld>"
        f"<p:clrMap {_CLR_MAP}/>"
        f"<p:notesStyle>{notes_style}</p:notesStyle></p:notesMaster>"
    )


def _text_body(text: str | None) -> str:
    if not text:
        return _EMPTY_BODY
    return (f'<p:txBody><a:bodyPr/><a:lstStyle/><a:p><a:r><a:rPr lang="en-US"/>'
            f"<a:t>{escape(text)}</a:t></a:r></a:p></p:txBody>")


def handout_master_xml(header: str | None = None, footer: str | None = None) -> str:
    """``ppt/handoutMasters/handoutMaster1.xml`` with header/footer text."""
    width, height = NOTES_WIDTH // 2, 458_788
    tree = (_positioned_ph(2, "Header Placeholder 1", '<p:ph type="hdr" sz="quarter"/>',
                           Transform(0, 0, width, height), _text_body(header))
            + _positioned_ph(3, "Footer Placeholder 2", '<p:ph type="ftr" sz="quarter" idx="3"/>',
                             Transform(0, NOTES_HEIGHT - height, width, height),
                             _text_body(footer)))
    return (
        f"{XML_DECLARATION}\n<p:handoutMaster {PML_NAMESPACES}>"
        f"<p:cSld>{_BG}<p:spTree>{SP_TREE_HEAD}{tree}</p:spTree></p:cSld>"
        f"<p:clrMap {_CLR_MAP}/></p:handoutMaster>"
    )


def default_text_style_xml() -> str:
    """``<p:defaultTextStyle>`` for presentation.xml."""
    levels = "".join(
        f'<a:lvl{n}pPr marL="{457_200 * (n - 1)}" algn="l" defTabSz="914400" rtl="0">'
        f'<a:defRPr sz="1800" kern="1200"><a:solidFill><a:schemeClr val="tx1"/>'
        '</a:solidFill><a:latin typeface="+mn-lt"/><a:ea typeface="+mn-ea"/>'
        f'<a:cs typeface="+mn-cs"/></a:defRPr></a:lvl{n}pPr>'
        for n in range(1, 10)
    )
    return f'<p:defaultTextStyle><a:defPPr><a:defRPr lang="en-US"/></a:defPPr>{levels}</p:defaultTextStyle>'


