"""Tests for OPC packaging: relationships, content types, composition and ZIP output."""

import io
import posixpath
import zipfile

import pptx
import pytest
from lxml import etree

from pptxforge.errors import InternalError, InvalidInputError, PackageWriteError
from pptxforge.generator.media import PLACEHOLDER_POSTER
from pptxforge.generator.xml import NS_CONTENT_TYPES, NS_PKG_RELS
from pptxforge.package.composer import CONTENT_TYPES_PART, PackageComposer, PartTree, verify
from pptxforge.package.content_types import CT_PRESENTATION, CT_SLIDE, ContentTypes, extension_of
from pptxforge.package.relationships import (
    RT_DSIG_ORIGIN,
    RT_HYPERLINK,
    RT_SLIDE,
    RelationshipTable,
    relative_target,
    rels_path_for,
    resolve_target,
)
from pptxforge.package.zipwriter import build_pptx, write_pptx, write_zip
from pptxforge.schema.annotations import Comment, InkStroke
from pptxforge.schema.chart import Chart, ChartSeries, ChartType
from pptxforge.schema.hyperlink import Hyperlink
from pptxforge.schema.media import Image, Video
from pptxforge.schema.presentation import ZIP_EPOCH, BuildOptions, Presentation
from pptxforge.schema.settings import DigitalSignature, EmbeddedFont, PrintSettings, SlideShowSettings
from pptxforge.schema.shapes import Shape
from pptxforge.schema.slide import Slide
from pptxforge.schema.table import Table
from pptxforge.schema.units import inches


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def simple_deck():
    """Two slides with a title, bullets, notes and a table."""
    deck = Presentation(title="Quarterly Review", author="Ada")
    deck.add_slide(Slide(title="Agenda", bullets=["Results", "Outlook"], notes="Speak slowly"))
    deck.add_slide(Slide(title="Numbers", layout="title_only", tables=[
        Table.from_rows([["Region", "Sales"], ["North", 120]],
                        inches(1), inches(2), inches(6)),
    ]))
    return deck


@pytest.fixture
def full_deck():
    """A deck exercising every optional part."""
    deck = Presentation(title="Everything", author="Ada")
    chart = Chart(ChartType.BAR, "Sales", ["Q1", "Q2"], [ChartSeries("2024", [1, 2])],
                  inches(1), inches(1), inches(4), inches(3))
    deck.add_slide(Slide(
        title="Overview",
        bullets=["One"],
        notes="Remember the demo",
        charts=[chart],
        images=[Image.from_bytes(PLACEHOLDER_POSTER, 0, 0, inches(1), inches(1))],
        shapes=[Shape("rectangle", 0, 0, 100, 100,
                      hyperlink=Hyperlink.url("https://example.com"))],
        comments=[Comment("Ada Lovelace", "Check the totals")],
    ))
    deck.add_slide(Slide(
        title="Demo",
        videos=[Video(b"mp4-bytes", "mp4", 0, 0, inches(4), inches(3))],
        shapes=[Shape("rectangle", 0, 0, 100, 100, hyperlink=Hyperlink.to_slide(1))],
        ink=[InkStroke([(0, 0), (3600, 3600)])],
        comments=[Comment("Ada Lovelace", "Shorter"), Comment("Bob", "Agreed")],
    ))
    deck.add_section("All", 0, 1)
    deck.fonts.append(EmbeddedFont("Inter", b"font-bytes"))
    deck.print_settings = PrintSettings(print_what="handouts", header="Draft")
    deck.slide_show = SlideShowSettings(loop=True)
    deck.signature = DigitalSignature("Jane Doe")
    return deck


def _entries(data: bytes) -> list[zipfile.ZipInfo]:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return zf.infolist()


def _read(data: bytes, name: str) -> bytes:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return zf.read(name)


def _source_of(rels_name: str) -> str:
    directory, name = posixpath.split(rels_name)
    return posixpath.join(posixpath.dirname(directory), name[:-len(".rels")])


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------

class TestRelationships:

    def test_ids_in_order(self):
        table = RelationshipTable()
        assert table.add(RT_SLIDE, "slides/slide1.xml") == "rId1"
        assert table.add(RT_SLIDE, "slides/slide2.xml") == "rId2"
        assert table.ids() == ["rId1", "rId2"]

    def test_same_target_shares_id(self):
        table = RelationshipTable()
        first = table.add(RT_HYPERLINK, "https://example.com", external=True)
        assert table.add(RT_HYPERLINK, "https://example.com", external=True) == first
        assert len(table) == 1

    def test_external_target_mode(self):
        table = RelationshipTable()
        table.add(RT_HYPERLINK, "https://example.com/?a=1&b=2", external=True)
        xml = table.to_xml()
        assert 'Target="https://example.com/?a=1&amp;b=2" TargetMode="External"' in xml
        root = etree.fromstring(xml.encode("utf-8"))
        assert root.tag == f"{{{NS_PKG_RELS}}}Relationships"

    def test_of_type(self):
        table = RelationshipTable()
        table.add(RT_SLIDE, "a.xml")
        table.add(RT_HYPERLINK, "b", external=True)
        assert [r.target for r in table.of_type(RT_SLIDE)] == ["a.xml"]
        assert table.get("rId2").external
        assert table.get("rId9") is None

    def test_rels_path(self):
        assert rels_path_for("ppt/slides/slide1.xml") == "ppt/slides/_rels/slide1.xml.rels"
        assert rels_path_for("") == "_rels/.rels"

    def test_relative_target(self):
        assert relative_target("ppt/slides/slide1.xml", "ppt/media/image1.png") == \
            "../media/image1.png"
        assert relative_target("ppt/presentation.xml", "ppt/slides/slide1.xml") == \
            "slides/slide1.xml"
        assert relative_target("", "ppt/presentation.xml") == "ppt/presentation.xml"

    def test_resolve_target(self):
        assert resolve_target("ppt/slides/slide1.xml", "../media/image1.png") == \
            "ppt/media/image1.png"
        assert resolve_target("ppt/slides/slide1.xml", "/ppt/x.xml") == "ppt/x.xml"
        with pytest.raises(InternalError):
            resolve_target("ppt/slides/slide1.xml", "../../../x.xml")


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------

class TestContentTypes:

    def test_preset_defaults(self):
        types = ContentTypes()
        assert set(types.defaults) == {"rels", "xml"}

    @pytest.mark.parametrize("name,ext", [
        ("_rels/.rels", "rels"),
        ("ppt/slides/_rels/slide1.xml.rels", "rels"),
        ("ppt/media/image1.PNG", "png"),
        ("ppt/embeddings/Workbook1.xlsx", "xlsx"),
        ("_xmlsignatures/origin.sigs", "sigs"),
        ("ppt/README", ""),
    ])
    def test_extension_of(self, name, ext):
        assert extension_of(name) == ext

    def test_root_rels_resolves(self):
        assert ContentTypes().content_type_for("_rels/.rels") == (
            "application/vnd.openxmlformats-package.relationships+xml"
        )

    def test_override_wins(self):
        types = ContentTypes()
        types.add_override("ppt/presentation.xml", CT_PRESENTATION)
        assert types.content_type_for("ppt/presentation.xml") == CT_PRESENTATION
        assert types.content_type_for("ppt/other.xml") == "application/xml"

    def test_duplicate_override(self):
        types = ContentTypes()
        types.add_override("ppt/slides/slide1.xml", CT_SLIDE)
        with pytest.raises(InternalError):
            types.add_override("ppt/slides/slide1.xml", CT_SLIDE)

    def test_binary_default(self):
        types = ContentTypes()
        types.add_binary("ppt/media/image1.PNG")
        assert types.defaults["png"] == "image/png"
        with pytest.raises(InternalError):
            types.add_binary("ppt/media/blob.bin")

    def test_manifest_xml(self):
        types = ContentTypes()
        types.add_override("ppt/presentation.xml", CT_PRESENTATION)
        xml = types.to_xml()
        assert f'<Override PartName="/ppt/presentation.xml" ContentType="{CT_PRESENTATION}"/>' in xml
        assert xml.index("<Default") < xml.index("<Override")


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------

class TestPartTree:

    def test_part_written_twice(self):
        tree = PartTree()
        tree.add("ppt/slides/slide1.xml", "<x/>", CT_SLIDE)
        with pytest.raises(InternalError):
            tree.add("ppt/slides/slide1.xml", "<x/>", CT_SLIDE)

    def test_text_encoded(self):
        tree = PartTree()
        tree.add("ppt/slides/slide1.xml", "<a>é</a>", CT_SLIDE)
        assert tree["ppt/slides/slide1.xml"] == "<a>é</a>".encode("utf-8")

    def test_finish_puts_manifest_first(self):
        tree = PartTree()
        tree.add("ppt/slides/slide1.xml", "<x/>", CT_SLIDE)
        tree.finish()
        assert tree.names()[0] == CONTENT_TYPES_PART


class TestComposer:

    def test_part_order(self, simple_deck):
        names = PackageComposer(simple_deck).compose().names()
        assert names[:6] == [
            "[Content_Types].xml", "_rels/.rels", "docProps/core.xml", "docProps/app.xml",
            "ppt/presentation.xml", "ppt/_rels/presentation.xml.rels",
        ]
        assert names.index("ppt/slides/slide1.xml") < names.index("ppt/slides/slide2.xml")

    def test_layouts_only_for_used_kinds(self, simple_deck):
        tree = PackageComposer(simple_deck).compose()
        assert b'type="obj"' in tree["ppt/slideLayouts/slideLayout1.xml"]
        assert b'type="titleOnly"' in tree["ppt/slideLayouts/slideLayout2.xml"]
        assert "ppt/slideLayouts/slideLayout3.xml" not in tree
        assert b"slideLayout2.xml" in tree["ppt/slides/_rels/slide2.xml.rels"]

    def test_empty_deck_gets_fallback_layout(self):
        tree = PackageComposer(Presentation()).compose()
        assert b'type="obj"' in tree["ppt/slideLayouts/slideLayout1.xml"]
        assert "ppt/slides/slide1.xml" not in tree

    def test_notes_master_only_when_needed(self, simple_deck):
        tree = PackageComposer(simple_deck).compose()
        assert "ppt/notesSlides/notesSlide1.xml" in tree
        assert "ppt/notesMasters/notesMaster1.xml" in tree
        assert "ppt/theme/theme2.xml" in tree
        assert "ppt/notesSlides/notesSlide2.xml" not in tree

        simple_deck.slides[0].notes = None
        tree = PackageComposer(simple_deck).compose()
        assert "ppt/notesMasters/notesMaster1.xml" not in tree

    def test_optional_parts(self, full_deck):
        tree = PackageComposer(full_deck).compose()
        for name in (
            "ppt/charts/chart1.xml", "ppt/charts/_rels/chart1.xml.rels",
            "ppt/charts/style1.xml", "ppt/charts/colors1.xml",
            "ppt/embeddings/Workbook1.xlsx",
            "ppt/media/image1.png", "ppt/media/media1.mp4",
            "ppt/handoutMasters/handoutMaster1.xml", "ppt/theme/theme3.xml",
            "ppt/comments/comment1.xml", "ppt/comments/comment2.xml",
            "ppt/commentAuthors.xml", "ppt/ink/ink1.xml",
            "ppt/fonts/Inter-regular.fntdata",
            "_xmlsignatures/origin.sigs", "_xmlsignatures/sig1.xml",
        ):
            assert name in tree, name

    def test_comment_authors_deck_wide(self, full_deck):
        tree = PackageComposer(full_deck).compose()
        second = tree["ppt/comments/comment2.xml"].decode("utf-8")
        assert 'authorId="0" dt="2024-01-01T00:00:00.000" idx="2"' in second
        assert 'authorId="1" dt="2024-01-01T00:00:00.000" idx="1"' in second
        authors = tree["ppt/commentAuthors.xml"].decode("utf-8")
        assert 'name="Ada Lovelace" initials="AL" lastIdx="2"' in authors

    def test_signature_rels(self, full_deck):
        tree = PackageComposer(full_deck).compose()
        assert tree.rels[""].of_type(RT_DSIG_ORIGIN)
        signature = tree["_xmlsignatures/sig1.xml"]
        assert b"/ppt/presentation.xml?ContentType=" in signature
        assert b"/_xmlsignatures/sig1.xml?" not in signature

    def test_font_embedded_twice(self):
        deck = Presentation(fonts=[EmbeddedFont("Inter", b"a"), EmbeddedFont("Inter", b"b")])
        with pytest.raises(InvalidInputError, match="embedded twice"):
            PackageComposer(deck).compose()

    def test_deck_not_mutated(self, full_deck):
        before = full_deck.to_dict()
        PackageComposer(full_deck).compose()
        assert full_deck.to_dict() == before

    def test_hyperlink_past_deck(self):
        deck = Presentation()
        deck.add_slide(Slide(shapes=[Shape("rectangle", 0, 0, 1, 1,
                                           hyperlink=Hyperlink.to_slide(5))]))
        with pytest.raises(InvalidInputError):
            PackageComposer(deck).compose()


class TestVerify:

    def test_unknown_relationship(self):
        tree = PartTree()
        tree.add("ppt/slides/slide1.xml", '<p:sld r:id="rId1"/>', CT_SLIDE)
        with pytest.raises(InternalError, match="unknown relationship"):
            verify(tree)

    def test_missing_target(self):
        tree = PartTree()
        tree.add("ppt/slides/slide1.xml", "<p:sld/>", CT_SLIDE)
        rels = RelationshipTable()
        rels.add(RT_SLIDE, "slide9.xml")
        tree.add_rels("ppt/slides/slide1.xml", rels)
        with pytest.raises(InternalError, match="missing part"):
            verify(tree)

    def test_override_without_part(self):
        tree = PartTree()
        tree.content_types.add_override("ppt/slides/slide1.xml", CT_SLIDE)
        with pytest.raises(InternalError, match="overrides missing part"):
            verify(tree)

    def test_external_targets_skipped(self):
        tree = PartTree()
        tree.add("ppt/slides/slide1.xml", '<p:sld r:id="rId1"/>', CT_SLIDE)
        rels = RelationshipTable()
        rels.add(RT_HYPERLINK, "https://example.com", external=True)
        tree.add_rels("ppt/slides/slide1.xml", rels)
        verify(tree)


# ---------------------------------------------------------------------------
# ZIP output
# ---------------------------------------------------------------------------

class TestZipWriter:

    def test_entries_match_tree_and_manifest(self, full_deck):
        options = BuildOptions()
        tree = PackageComposer(full_deck, options).compose()
        data = write_zip(tree, options)
        names = [info.filename for info in _entries(data)]
        assert names == tree.names()

        manifest = etree.fromstring(_read(data, CONTENT_TYPES_PART))
        ns = {"ct": NS_CONTENT_TYPES}
        defaults = {el.get("Extension") for el in manifest.findall("ct:Default", ns)}
        overrides = {el.get("PartName") for el in manifest.findall("ct:Override", ns)}
        for name in names[1:]:
            assert f"/{name}" in overrides or name.rsplit(".", 1)[-1].lower() in defaults, name
        assert overrides <= {f"/{name}" for name in names}

    def test_internal_targets_resolve(self, full_deck):
        data = build_pptx(full_deck)
        names = {info.filename for info in _entries(data)}
        ns = {"r": NS_PKG_RELS}
        for name in names:
            if not name.endswith(".rels"):
                continue
            root = etree.fromstring(_read(data, name))
            for rel in root.findall("r:Relationship", ns):
                if rel.get("TargetMode") == "External":
                    continue
                assert resolve_target(_source_of(name), rel.get("Target")) in names

    def test_manifest_first(self, simple_deck):
        assert _entries(build_pptx(simple_deck))[0].filename == "[Content_Types].xml"

    def test_no_directory_entries(self, full_deck):
        assert not [i for i in _entries(build_pptx(full_deck)) if i.filename.endswith("/")]

    def test_deterministic(self, full_deck):
        assert build_pptx(full_deck) == build_pptx(full_deck)

    def test_timestamps_pinned(self, simple_deck):
        assert {info.date_time for info in _entries(build_pptx(simple_deck))} == {ZIP_EPOCH}

    def test_compression_by_size(self, simple_deck):
        for info in _entries(build_pptx(simple_deck)):
            expected = zipfile.ZIP_DEFLATED if info.file_size >= 256 else zipfile.ZIP_STORED
            assert info.compress_type == expected, info.filename

    def test_threshold_zero_deflates_everything(self, simple_deck):
        data = build_pptx(simple_deck, BuildOptions(deflate_threshold=0))
        assert {info.compress_type for info in _entries(data)} == {zipfile.ZIP_DEFLATED}

    def test_unfinished_tree_rejected(self):
        tree = PartTree()
        tree.add("ppt/slides/slide1.xml", "<x/>", CT_SLIDE)
        with pytest.raises(PackageWriteError):
            write_zip(tree)

    def test_write_to_file(self, simple_deck, tmp_path):
        path = write_pptx(simple_deck, tmp_path / "deck.pptx")
        assert path.read_bytes()[:2] == b"PK"

    def test_write_failure(self, simple_deck, tmp_path):
        with pytest.raises(PackageWriteError):
            write_pptx(simple_deck, tmp_path / "missing" / "deck.pptx")

    def test_single_slide_builds(self):
        deck = Presentation(title="One")
        deck.add_slide(title="Only")
        names = [info.filename for info in _entries(build_pptx(deck))]
        assert names[0] == CONTENT_TYPES_PART
        assert "_rels/.rels" in names
        assert "ppt/slides/slide1.xml" in names

    def test_control_character_rejected(self):
        deck = Presentation(title="Bad")
        deck.add_slide(title="Line\x0bbreak")
        with pytest.raises(InvalidInputError, match="U\\+000B"):
            build_pptx(deck)


class TestBuildOptions:

    def test_negative_threshold(self):
        with pytest.raises(InvalidInputError):
            BuildOptions(deflate_threshold=-1)

    def test_timestamp_before_1980(self):
        with pytest.raises(InvalidInputError):
            BuildOptions(zip_timestamp=(1970, 1, 1, 0, 0, 0))


# ---------------------------------------------------------------------------
# Read back with python-pptx
# ---------------------------------------------------------------------------

class TestReadBack:

    def test_python_pptx_opens_deck(self, simple_deck):
        prs = pptx.Presentation(io.BytesIO(build_pptx(simple_deck)))
        assert len(prs.slides) == 2
        assert prs.slide_width == 9_144_000
        first, second = prs.slides
        assert first.shapes.title.text == "Agenda"
        assert first.notes_slide.notes_text_frame.text == "Speak slowly"
        assert prs.core_properties.title == "Quarterly Review"
        assert prs.core_properties.author == "Ada"

        tables = [shape for shape in second.shapes if shape.has_table]
        assert len(tables) == 1
        assert tables[0].table.cell(1, 0).text == "North"

    def test_python_pptx_opens_full_deck(self, full_deck):
        prs = pptx.Presentation(io.BytesIO(build_pptx(full_deck)))
        charts = [shape for shape in prs.slides[0].shapes if shape.has_chart]
        assert len(charts) == 1
        assert list(charts[0].chart.plots[0].categories) == ["Q1", "Q2"]
