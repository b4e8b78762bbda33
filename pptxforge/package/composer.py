"""Package composer. Plans every part of a deck and renders it.

Walks the presentation model once, allocates part names and relationship
IDs, invokes the generator for each part and records its content type.
Nothing is written to disk here: the result is a ``PartTree`` that the ZIP
writer serializes.

Usage::

    from pptxforge.package.composer import PackageComposer

    tree = PackageComposer(deck).compose()
    slide_xml = tree["ppt/slides/slide1.xml"].decode("utf-8")
"""

import logging
import re
from collections.abc import Iterator

from pptxforge.errors import InternalError, InvalidInputError
from pptxforge.generator.adjuncts import (
    PlacedComment,
    comment_authors_xml,
    comment_list_xml,
    inkml_xml,
    notes_slide_xml,
    signature_xml,
)
from pptxforge.generator.charts import chart_colors_xml, chart_style_xml, chart_xml
from pptxforge.generator.context import AssetRegistry, SlideContext
from pptxforge.generator.masters import (
    handout_master_xml,
    layout_xml,
    master_xml,
    notes_master_xml,
    theme_xml,
)
from pptxforge.generator.presentation_xml import (
    PresentationRels,
    app_xml,
    core_xml,
    pres_props_xml,
    presentation_xml,
    table_styles_xml,
    view_props_xml,
)
from pptxforge.generator.slide import slide_xml
from pptxforge.generator.workbook import workbook_bytes
from pptxforge.package.content_types import (
    CT_CHART,
    CT_CHART_COLORS,
    CT_CHART_STYLE,
    CT_COMMENT_AUTHORS,
    CT_COMMENTS,
    CT_CORE,
    CT_DSIG,
    CT_EXTENDED,
    CT_HANDOUT_MASTER,
    CT_INK,
    CT_NOTES_MASTER,
    CT_NOTES_SLIDE,
    CT_PRES_PROPS,
    CT_PRESENTATION,
    CT_SLIDE,
    CT_SLIDE_LAYOUT,
    CT_SLIDE_MASTER,
    CT_TABLE_STYLES,
    CT_THEME,
    CT_VIEW_PROPS,
    ContentTypes,
)
from pptxforge.package.relationships import (
    RT_CHART_COLORS,
    RT_CHART_STYLE,
    RT_COMMENT_AUTHORS,
    RT_COMMENTS,
    RT_CORE_PROPERTIES,
    RT_DSIG_ORIGIN,
    RT_DSIG_SIGNATURE,
    RT_EXTENDED_PROPERTIES,
    RT_FONT,
    RT_HANDOUT_MASTER,
    RT_NOTES_MASTER,
    RT_NOTES_SLIDE,
    RT_OFFICE_DOCUMENT,
    RT_PACKAGE,
    RT_PRES_PROPS,
    RT_SLIDE,
    RT_SLIDE_LAYOUT,
    RT_SLIDE_MASTER,
    RT_TABLE_STYLES,
    RT_THEME,
    RT_VIEW_PROPS,
    RelationshipTable,
    relative_target,
    rels_path_for,
    resolve_target,
)
from pptxforge.schema.annotations import CommentAuthorList
from pptxforge.schema.presentation import BuildOptions, Presentation
from pptxforge.schema.slide import LAYOUT_ORDER, LayoutKind, Slide

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"
PRESENTATION_PART = "ppt/presentation.xml"
MASTER_PART = "ppt/slideMasters/slideMaster1.xml"
NOTES_MASTER_PART = "ppt/notesMasters/notesMaster1.xml"
HANDOUT_MASTER_PART = "ppt/handoutMasters/handoutMaster1.xml"
COMMENT_AUTHORS_PART = "ppt/commentAuthors.xml"
CORE_PART = "docProps/core.xml"
APP_PART = "docProps/app.xml"
SIGNATURE_ORIGIN_PART = "_xmlsignatures/origin.sigs"
SIGNATURE_PART = "_xmlsignatures/sig1.xml"

# A deck without slides still needs one layout under the master.
_FALLBACK_LAYOUT = LayoutKind.TITLE_AND_CONTENT

_RID_ATTR_RE = re.compile(rb'\br:(?:id|embed|link|pict)="([^"]*)"')


# ---------------------------------------------------------------------------
# Part tree
# ---------------------------------------------------------------------------

class PartTree:
    """Ordered part name -> bytes mapping plus its content-types manifest.

    ``[Content_Types].xml`` is always the first entry; the remaining parts
    keep the order the composer produced them in.
    """

    def __init__(self) -> None:
        self.content_types = ContentTypes()
        self.rels: dict[str, RelationshipTable] = {}
        self._parts: dict[str, bytes] = {}

    def add(self, name: str, data: bytes | str, content_type: str | None = None) -> None:
        """Add a part; ``content_type`` registers an override, else a default."""
        if name in self._parts:
            raise InternalError(f"Part {name} written twice")
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._parts[name] = data
        if content_type is not None:
            self.content_types.add_override(name, content_type)
        elif not name.endswith(".rels"):
            self.content_types.add_binary(name)

    def add_rels(self, source_part: str, table: RelationshipTable) -> None:
        """Write ``table`` as the companion ``.rels`` part of ``source_part``."""
        if not table:
            return
        self.rels[source_part] = table
        self.add(rels_path_for(source_part), table.to_xml())

    def finish(self) -> None:
        manifest = self.content_types.to_xml().encode("utf-8")
        self._parts = {CONTENT_TYPES_PART: manifest, **self._parts}

    def names(self) -> list[str]:
        return list(self._parts)

    def items(self) -> Iterator[tuple[str, bytes]]:
        return iter(self._parts.items())

    def __getitem__(self, name: str) -> bytes:
        return self._parts[name]

    def __contains__(self, name: object) -> bool:
        return name in self._parts

    def __iter__(self) -> Iterator[str]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------

class PackageComposer:
    """Turns a ``Presentation`` into a ``PartTree``.

    Parameters
    ----------
    deck : Presentation
        The deck to compose. It is read, never modified.
    options : BuildOptions, optional
        Packaging knobs; defaults produce byte-reproducible output.
    """

    def __init__(self, deck: Presentation, options: BuildOptions | None = None) -> None:
        self.deck = deck
        self.options = options or BuildOptions()

    def compose(self) -> PartTree:
        deck = self.deck
        tree = PartTree()
        assets = AssetRegistry()
        authors = CommentAuthorList()
        slide_count = deck.slide_count
        logger.debug("Composing deck %r: %d slides", deck.title, slide_count)

        layouts = self._plan_layouts()
        layout_parts = {kind: f"ppt/slideLayouts/slideLayout{i}.xml"
                        for i, kind in enumerate(layouts, start=1)}
        needs_notes = any(s.has_notes for s in deck.slides)
        needs_handout = bool(deck.print_settings and deck.print_settings.needs_handout_master)
        self._check_fonts()

        # Package root
        root_rels = RelationshipTable()
        root_rels.add(RT_OFFICE_DOCUMENT, PRESENTATION_PART)
        root_rels.add(RT_CORE_PROPERTIES, CORE_PART)
        root_rels.add(RT_EXTENDED_PROPERTIES, APP_PART)
        if deck.signature is not None:
            root_rels.add(RT_DSIG_ORIGIN, SIGNATURE_ORIGIN_PART)
        tree.add_rels("", root_rels)
        tree.add(CORE_PART, core_xml(deck, self.options), CT_CORE)
        tree.add(APP_PART, app_xml(deck, self.options), CT_EXTENDED)

        # presentation.xml and its rels
        pres_rels = RelationshipTable()

        def relate(rel_type: str, part: str) -> str:
            return pres_rels.add(rel_type, relative_target(PRESENTATION_PART, part))

        master_rid = relate(RT_SLIDE_MASTER, MASTER_PART)
        slide_parts = [f"ppt/slides/slide{n}.xml" for n in range(1, slide_count + 1)]
        slide_rids = [relate(RT_SLIDE, part) for part in slide_parts]
        notes_rid = relate(RT_NOTES_MASTER, NOTES_MASTER_PART) if needs_notes else None
        handout_rid = relate(RT_HANDOUT_MASTER, HANDOUT_MASTER_PART) if needs_handout else None
        font_rids = {font.part_name: relate(RT_FONT, font.part_name) for font in deck.fonts}
        relate(RT_PRES_PROPS, "ppt/presProps.xml")
        relate(RT_VIEW_PROPS, "ppt/viewProps.xml")
        relate(RT_THEME, "ppt/theme/theme1.xml")
        relate(RT_TABLE_STYLES, "ppt/tableStyles.xml")
        if any(s.comments for s in deck.slides):
            relate(RT_COMMENT_AUTHORS, COMMENT_AUTHORS_PART)

        rels = PresentationRels(master_rid, slide_rids, notes_rid, handout_rid, font_rids)
        tree.add(PRESENTATION_PART, presentation_xml(deck, rels), CT_PRESENTATION)
        tree.add_rels(PRESENTATION_PART, pres_rels)

        # Slides, with their notes slides and comment lists
        notes_count = comments_count = 0
        for number, (slide, part) in enumerate(zip(deck.slides, slide_parts), start=1):
            ctx = SlideContext(number, slide_count, deck.slide_size, deck.design,
                               assets, part)
            xml = slide_xml(slide, ctx, layout_parts[slide.layout])
            if slide.has_notes:
                notes_count += 1
                notes_part = f"ppt/notesSlides/notesSlide{notes_count}.xml"
                ctx.relate(RT_NOTES_SLIDE, notes_part)
                self._add_notes(tree, slide, notes_part, part)
            if slide.comments:
                comments_count += 1
                comments_part = f"ppt/comments/comment{comments_count}.xml"
                ctx.relate(RT_COMMENTS, comments_part)
                tree.add(comments_part,
                         comment_list_xml(self._place_comments(slide, authors)),
                         CT_COMMENTS)
            tree.add(part, xml, CT_SLIDE)
            tree.add_rels(part, ctx.rels)

        # Master, layouts, themes
        master_rels = RelationshipTable()
        layout_rids = []
        for kind in layouts:
            layout_part = layout_parts[kind]
            layout_rids.append(master_rels.add(
                RT_SLIDE_LAYOUT, relative_target(MASTER_PART, layout_part)))
            tree.add(layout_part, layout_xml(kind, deck.slide_size), CT_SLIDE_LAYOUT)
            layout_rels = RelationshipTable()
            layout_rels.add(RT_SLIDE_MASTER, relative_target(layout_part, MASTER_PART))
            tree.add_rels(layout_part, layout_rels)
        master_rels.add(RT_THEME, relative_target(MASTER_PART, "ppt/theme/theme1.xml"))
        tree.add(MASTER_PART, master_xml(layout_rids, deck.slide_size, deck.design),
                 CT_SLIDE_MASTER)
        tree.add_rels(MASTER_PART, master_rels)
        tree.add("ppt/theme/theme1.xml", theme_xml(deck.design), CT_THEME)

        theme_count = 1
        if needs_notes:
            theme_count += 1
            self._add_master(tree, NOTES_MASTER_PART, notes_master_xml(deck.design),
                             CT_NOTES_MASTER, theme_count)
        if needs_handout:
            theme_count += 1
            settings = deck.print_settings
            self._add_master(tree, HANDOUT_MASTER_PART,
                             handout_master_xml(settings.header, settings.footer),
                             CT_HANDOUT_MASTER, theme_count)

        # Presentation-level companions
        tree.add("ppt/presProps.xml", pres_props_xml(deck), CT_PRES_PROPS)
        tree.add("ppt/viewProps.xml", view_props_xml(), CT_VIEW_PROPS)
        tree.add("ppt/tableStyles.xml", table_styles_xml(), CT_TABLE_STYLES)
        if authors:
            tree.add(COMMENT_AUTHORS_PART, comment_authors_xml(authors.authors),
                     CT_COMMENT_AUTHORS)

        self._add_assets(tree, assets)
        for font in deck.fonts:
            tree.add(font.part_name, font.data)

        if deck.signature is not None:
            self._add_signature(tree)

        if self.options.verify:
            verify(tree)
        tree.finish()
        logger.debug("Composed %d parts", len(tree))
        return tree

    # -- planning ------------------------------------------------------------

    def _plan_layouts(self) -> list[LayoutKind]:
        """Layout kinds used by any slide, in ``LAYOUT_ORDER``."""
        used = {slide.layout for slide in self.deck.slides}
        kinds = [kind for kind in LAYOUT_ORDER if kind in used]
        logger.debug("Layouts: %s", ", ".join(k.name for k in kinds) or "fallback")
        return kinds or [_FALLBACK_LAYOUT]

    def _check_fonts(self) -> None:
        seen: set[str] = set()
        for font in self.deck.fonts:
            if font.part_name in seen:
                raise InvalidInputError(
                    f"Font {font.typeface!r} ({font.style.value}) is embedded twice"
                )
            seen.add(font.part_name)

    @staticmethod
    def _place_comments(slide: Slide, authors: CommentAuthorList) -> list[PlacedComment]:
        placed = []
        for comment in slide.comments:
            author = authors.register(comment.author, comment.initials)
            placed.append(PlacedComment(comment, author.id, authors.next_index(comment.author)))
        return placed

    # -- adjunct parts -------------------------------------------------------

    @staticmethod
    def _add_notes(tree: PartTree, slide: Slide, notes_part: str, slide_part: str) -> None:
        tree.add(notes_part, notes_slide_xml(slide.notes), CT_NOTES_SLIDE)
        notes_rels = RelationshipTable()
        notes_rels.add(RT_NOTES_MASTER, relative_target(notes_part, NOTES_MASTER_PART))
        notes_rels.add(RT_SLIDE, relative_target(notes_part, slide_part))
        tree.add_rels(notes_part, notes_rels)

    def _add_master(self, tree: PartTree, part: str, xml: str, content_type: str,
                    theme_number: int) -> None:
        """A notes or handout master with its own theme part."""
        theme_part = f"ppt/theme/theme{theme_number}.xml"
        rels = RelationshipTable()
        rels.add(RT_THEME, relative_target(part, theme_part))
        tree.add(part, xml, content_type)
        tree.add_rels(part, rels)
        tree.add(theme_part, theme_xml(self.deck.design), CT_THEME)

    def _add_assets(self, tree: PartTree, assets: AssetRegistry) -> None:
        for part, data in assets.media.items():
            tree.add(part, data)

        for number, (part, chart) in enumerate(assets.charts, start=1):
            workbook_part = f"ppt/embeddings/Workbook{number}.xlsx"
            style_part = f"ppt/charts/style{number}.xml"
            colors_part = f"ppt/charts/colors{number}.xml"
            chart_rels = RelationshipTable()
            workbook_rid = chart_rels.add(RT_PACKAGE, relative_target(part, workbook_part))
            chart_rels.add(RT_CHART_STYLE, relative_target(part, style_part))
            chart_rels.add(RT_CHART_COLORS, relative_target(part, colors_part))
            tree.add(part, chart_xml(chart, workbook_rid), CT_CHART)
            tree.add_rels(part, chart_rels)
            tree.add(style_part, chart_style_xml(), CT_CHART_STYLE)
            tree.add(colors_part, chart_colors_xml(), CT_CHART_COLORS)
            tree.add(workbook_part, workbook_bytes(chart, self.options.zip_timestamp,
                                                   self.options.modified))
            logger.debug("Chart %s (%s, %d series)", part, chart.chart_type.value,
                         len(chart.series))

        for part, strokes in assets.ink:
            tree.add(part, inkml_xml(strokes), CT_INK)

    def _add_signature(self, tree: PartTree) -> None:
        signed = [(name, tree.content_types.content_type_for(name), data)
                  for name, data in tree.items()]
        signature = self.deck.signature
        tree.add(SIGNATURE_ORIGIN_PART, b"")
        origin_rels = RelationshipTable()
        origin_rels.add(RT_DSIG_SIGNATURE, relative_target(SIGNATURE_ORIGIN_PART, SIGNATURE_PART))
        tree.add_rels(SIGNATURE_ORIGIN_PART, origin_rels)
        tree.add(SIGNATURE_PART, signature_xml(signature, signed), CT_DSIG)
        logger.debug("Signature over %d parts (%s)", len(signed),
                     signature.hash_algorithm.value)


# ---------------------------------------------------------------------------
# Post-conditions
# ---------------------------------------------------------------------------

def verify(tree: PartTree) -> None:
    """Check the package invariants; raise ``InternalError`` on the first violation.

    - every relationship ID is unique within its rels part
    - every internal relationship target is a part of the package
    - every ``r:id`` / ``r:embed`` / ``r:link`` in a part resolves in its rels
    - every part has exactly one content type and every override names a part
    """
    for source, table in tree.rels.items():
        ids = table.ids()
        if len(ids) != len(set(ids)):
            raise InternalError(f"Duplicate relationship IDs in {rels_path_for(source)}")
        for rel in table:
            if rel.external:
                continue
            target = resolve_target(source, rel.target)
            if target not in tree:
                raise InternalError(
                    f"{rels_path_for(source)} {rel.rid} targets missing part {target}"
                )

    for name, data in tree.items():
        if not name.endswith(".xml"):
            continue
        rids = {rid.decode("ascii") for rid in _RID_ATTR_RE.findall(data) if rid}
        if not rids:
            continue
        known = set(tree.rels[name].ids()) if name in tree.rels else set()
        missing = sorted(rids - known)
        if missing:
            raise InternalError(f"{name} references unknown relationship(s) {missing}")

    for name in tree:
        if tree.content_types.content_type_for(name) is None:
            raise InternalError(f"Part {name} has no content type")
    for name in tree.content_types.overrides:
        if name not in tree:
            raise InternalError(f"[Content_Types].xml overrides missing part {name}")
