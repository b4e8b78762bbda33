"""Presentation-level parts.

- ``ppt/presentation.xml``: master, notes/handout master, slide ID lists,
  slide size, embedded fonts, custom shows, default text style, sections.
- ``ppt/presProps.xml``: print (``prnPr``) and slide show (``showPr``)
  settings.
- ``ppt/viewProps.xml`` and ``ppt/tableStyles.xml``.
- ``docProps/core.xml`` and ``docProps/app.xml``.
"""

from dataclasses import dataclass, field
from datetime import datetime

from pptxforge.errors import InvalidInputError
from pptxforge.generator.masters import MASTER_ID, NOTES_HEIGHT, NOTES_WIDTH, default_text_style_xml
from pptxforge.generator.xml import (
    NS_A,
    NS_CORE,
    NS_DC,
    NS_DCMITYPE,
    NS_DCTERMS,
    NS_EXTENDED,
    NS_P14,
    NS_VT,
    NS_XSI,
    PML_NAMESPACES,
    XML_DECLARATION,
    attrs,
    color_xml,
    escape,
)
from pptxforge.schema.presentation import BuildOptions, Presentation
from pptxforge.schema.settings import (
    FONT_STYLE_ORDER,
    EmbeddedFont,
    PrintSettings,
    PrintWhat,
    SectionManager,
    ShowType,
    SlideShowSettings,
)
from pptxforge.schema.table import DEFAULT_STYLE_ID


FIRST_SLIDE_ID = 256
SECTIONS_EXT_URI = "{521415D9-36F7-43E2-AB2F-B90AF26B5E84}"
CUSTOM_SHOW_ID = 0

_PRESENTATION_FORMATS = {
    "screen4x3": "On-screen Show (4:3)",
    "screen16x9": "On-screen Show (16:9)",
    "screen16x10": "On-screen Show (16:10)",
}


def slide_id(number: int) -> int:
    """``<p:sldId id>`` for the 1-based slide ``number``."""
    return FIRST_SLIDE_ID + number


@dataclass
class PresentationRels:
    """rIds the composer allocated on ``ppt/_rels/presentation.xml.rels``."""
    master: str
    slides: list[str]
    notes_master: str | None = None
    handout_master: str | None = None
    fonts: dict[str, str] = field(default_factory=dict)    # font part -> rId


# ---------------------------------------------------------------------------
# presentation.xml
# ---------------------------------------------------------------------------

def embedded_fonts_xml(fonts: list[EmbeddedFont], rids: dict[str, str]) -> str:
    """One ``<p:embeddedFont>`` per typeface, styles in regular/bold/italic order."""
    if not fonts:
        return ""
    by_face: dict[str, dict] = {}
    for font in fonts:
        by_face.setdefault(font.typeface, {})[font.style] = font
    entries = []
    for typeface, styles in by_face.items():
        first = next(iter(styles.values()))
        head = attrs(("typeface", typeface), ("panose", first.panose),
                     ("pitchFamily", first.pitch_family), ("charset", first.charset))
        refs = "".join(f'<p:{style.value} r:id="{rids[styles[style].part_name]}"/>'
                       for style in FONT_STYLE_ORDER if style in styles)
        entries.append(f"<p:embeddedFont><p:font{head}/>{refs}</p:embeddedFont>")
    return f"<p:embeddedFontLst>{''.join(entries)}</p:embeddedFontLst>"


def custom_show_xml(show: SlideShowSettings | None, slide_rids: list[str]) -> str:
    if show is None or not show.custom_slides:
        return ""
    for number in show.custom_slides:
        if number > len(slide_rids):
            raise InvalidInputError(
                f"Custom show references slide {number}, but the deck has {len(slide_rids)}"
            )
    slides = "".join(f'<p:sld r:id="{slide_rids[n - 1]}"/>' for n in show.custom_slides)
    return (f'<p:custShowLst><p:custShow name="{escape(show.custom_show_name)}" '
            f'id="{CUSTOM_SHOW_ID}"><p:sldLst>{slides}</p:sldLst></p:custShow>'
            "</p:custShowLst>")


def sections_xml(sections: SectionManager, slide_count: int) -> str:
    """``p14:sectionLst`` extension; section ranges must lie within the deck."""
    if not sections:
        return ""
    items = []
    for section in sections:
        if section.last >= slide_count:
            raise InvalidInputError(
                f"Section {section.name!r} ends at slide index {section.last}, "
                f"but the deck has {slide_count} slides"
            )
        ids = "".join(f'<p14:sldId id="{slide_id(i + 1)}"/>' for i in section.slide_indexes())
        items.append(f'<p14:section name="{escape(section.name)}" id="{section.guid}">'
                     f"<p14:sldIdLst>{ids}</p14:sldIdLst></p14:section>")
    return (f'<p:extLst><p:ext uri="{SECTIONS_EXT_URI}">'
            f'<p14:sectionLst xmlns:p14="{NS_P14}">{"".join(items)}</p14:sectionLst>'
            "</p:ext></p:extLst>")


def presentation_xml(deck: Presentation, rels: PresentationRels) -> str:
    size = deck.slide_size
    head = attrs(("saveSubsetFonts", True),
                 ("embedTrueTypeFonts", True if deck.fonts else None))
    parts = [
        XML_DECLARATION, "\n", f"<p:presentation {PML_NAMESPACES}{head}>",
        f'<p:sldMasterIdLst><p:sldMasterId id="{MASTER_ID}" r:id="{rels.master}"/>'
        "</p:sldMasterIdLst>",
    ]
    if rels.notes_master:
        parts.append(f'<p:notesMasterIdLst><p:notesMasterId r:id="{rels.notes_master}"/>'
                     "</p:notesMasterIdLst>")
    if rels.handout_master:
        parts.append(f'<p:handoutMasterIdLst><p:handoutMasterId r:id="{rels.handout_master}"/>'
                     "</p:handoutMasterIdLst>")
    if rels.slides:
        ids = "".join(f'<p:sldId id="{slide_id(n)}" r:id="{rid}"/>'
                      for n, rid in enumerate(rels.slides, start=1))
        parts.append(f"<p:sldIdLst>{ids}</p:sldIdLst>")
    parts += [
        f"<p:sldSz{attrs(('cx', size.width), ('cy', size.height), ('type', size.type_name))}/>",
        f'<p:notesSz cx="{NOTES_WIDTH}" cy="{NOTES_HEIGHT}"/>',
        embedded_fonts_xml(deck.fonts, rels.fonts),
        custom_show_xml(deck.slide_show, rels.slides),
        default_text_style_xml(),
        sections_xml(deck.sections, deck.slide_count),
        "</p:presentation>",
    ]
    return "".join(parts)


# ---------------------------------------------------------------------------
# presProps.xml
# ---------------------------------------------------------------------------

def print_xml(settings: PrintSettings | None) -> str:
    if settings is None:
        return ""
    what = settings.print_what.value
    if settings.print_what is PrintWhat.HANDOUTS:
        what = settings.handout_layout.value.replace("handout", "handouts")
    return "<p:prnPr" + attrs(
        ("prnWhat", what),
        ("clrMode", settings.color_mode.value),
        ("hiddenSlides", True if settings.hidden_slides else None),
        ("scaleToFitPaper", True if settings.scale_to_fit else None),
        ("frameSlides", True if settings.frame_slides else None),
    ) + "/>"


_SHOW_TYPES = {
    ShowType.SPEAKER: "<p:present/>",
    ShowType.KIOSK: '<p:kiosk restart="300000"/>',
    ShowType.BROWSED: '<p:browse showScrollbar="1"/>',
}


def show_xml(show: SlideShowSettings | None, slide_count: int) -> str:
    if show is None:
        return ""
    if show.slide_range is not None:
        start, end = show.slide_range
        if end > slide_count:
            raise InvalidInputError(
                f"Slide show range {start}-{end} exceeds the deck's {slide_count} slides"
            )
        which = f'<p:sldRg st="{start}" end="{end}"/>'
    elif show.custom_slides:
        which = f'<p:custShow id="{CUSTOM_SHOW_ID}"/>'
    else:
        which = "<p:sldAll/>"
    head = attrs(("loop", True if show.loop else None),
                 ("showNarration", show.show_narration),
                 ("showAnimation", show.show_animation),
                 ("useTimings", show.use_timings))
    return (f"<p:showPr{head}>{_SHOW_TYPES[show.show_type]}{which}"
            f"<p:penClr>{color_xml(show.pen_color)}</p:penClr></p:showPr>")


def pres_props_xml(deck: Presentation) -> str:
    return (f"{XML_DECLARATION}\n<p:presentationPr {PML_NAMESPACES}>"
            f"{print_xml(deck.print_settings)}{show_xml(deck.slide_show, deck.slide_count)}"
            "</p:presentationPr>")


def view_props_xml() -> str:
    return (
        f"{XML_DECLARATION}\n<p:viewPr {PML_NAMESPACES}>"
        '<p:normalViewPr><p:restoredLeft sz="15620"/><p:restoredTop sz="94660"/>'
        "</p:normalViewPr>"
        '<p:slideViewPr><p:cSldViewPr><p:cViewPr varScale="1"><p:scale>'
        '<a:sx n="100" d="100"/><a:sy n="100" d="100"/></p:scale>'
        '<p:origin x="0" y="0"/></p:cViewPr><p:guideLst/></p:cSldViewPr></p:slideViewPr>'
        '<p:notesTextViewPr><p:cViewPr><p:scale><a:sx n="1" d="1"/><a:sy n="1" d="1"/>'
        '</p:scale><p:origin x="0" y="0"/></p:cViewPr></p:notesTextViewPr>'
        '<p:gridSpacing cx="76200" cy="76200"/></p:viewPr>'
    )


def table_styles_xml() -> str:
    return (f'{XML_DECLARATION}\n<a:tblStyleLst xmlns:a="{NS_A}" '
            f'def="{DEFAULT_STYLE_ID}"/>')


# ---------------------------------------------------------------------------
# docProps
# ---------------------------------------------------------------------------

def _w3cdtf(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def core_xml(deck: Presentation, options: BuildOptions) -> str:
    author = escape(deck.author or "")
    return (
        f'{XML_DECLARATION}\n<cp:coreProperties xmlns:cp="{NS_CORE}" xmlns:dc="{NS_DC}" '
        f'xmlns:dcterms="{NS_DCTERMS}" xmlns:dcmitype="{NS_DCMITYPE}" xmlns:xsi="{NS_XSI}">'
        f"<dc:title>{escape(deck.title)}</dc:title>"
        + (f"<dc:subject>{escape(deck.subject)}</dc:subject>" if deck.subject else "")
        + f"<dc:creator>{author}</dc:creator>"
        f"<cp:lastModifiedBy>{author}</cp:lastModifiedBy>"
        "<cp:revision>1</cp:revision>"
        f'<dcterms:created xsi:type="dcterms:W3CDTF">{_w3cdtf(options.created)}</dcterms:created>'
        f'<dcterms:modified xsi:type="dcterms:W3CDTF">{_w3cdtf(options.modified)}</dcterms:modified>'
        "</cp:coreProperties>"
    )


def app_xml(deck: Presentation, options: BuildOptions) -> str:
    slides = deck.slides
    titles = "".join(f"<vt:lpstr>{escape(s.title)}</vt:lpstr>" for s in slides)
    clips = sum(len(s.videos) + len(s.audios) for s in slides)
    fmt = _PRESENTATION_FORMATS.get(deck.slide_size.type_name, "Custom")
    return (
        f'{XML_DECLARATION}\n<Properties xmlns="{NS_EXTENDED}" xmlns:vt="{NS_VT}">'
        "<TotalTime>0</TotalTime><Words>0</Words>"
        f"<Application>{escape(options.application)}</Application>"
        f"<PresentationFormat>{fmt}</PresentationFormat>"
        "<Paragraphs>0</Paragraphs>"
        f"<Slides>{len(slides)}</Slides>"
        f"<Notes>{sum(1 for s in slides if s.has_notes)}</Notes>"
        f"<HiddenSlides>{sum(1 for s in slides if s.hidden)}</HiddenSlides>"
        f"<MMClips>{clips}</MMClips>"
        "<ScaleCrop>false</ScaleCrop>"
        '<HeadingPairs><vt:vector size="2" baseType="variant">'
        "<vt:variant><vt:lpstr>Slide Titles</vt:lpstr></vt:variant>"
        f"<vt:variant><vt:i4>{len(slides)}</vt:i4></vt:variant></vt:vector></HeadingPairs>"
        f'<TitlesOfParts><vt:vector size="{len(slides)}" baseType="lpstr">{titles}'
        "</vt:vector></TitlesOfParts>"
        "<LinksUpToDate>false</LinksUpToDate><SharedDoc>false</SharedDoc>"
        "<HyperlinksChanged>false</HyperlinksChanged><AppVersion>16.0000</AppVersion>"
        "</Properties>"
    )
