"""``[Content_Types].xml`` manifest.

Binary parts and ``.rels`` files are covered by ``<Default>`` entries keyed on
the file extension; every XML part gets an ``<Override>`` naming its exact
content type. An override takes precedence over the ``xml`` default, so each
part resolves to exactly one declaration.
"""

import posixpath

from pptxforge.errors import InternalError
from pptxforge.generator.xml import NS_CONTENT_TYPES, XML_DECLARATION, attrs
from pptxforge.schema.media import AudioFormat, ImageFormat, VideoFormat


_PML = "application/vnd.openxmlformats-officedocument.presentationml"
_OFFICE = "application/vnd.openxmlformats-officedocument"

CT_RELS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_PRESENTATION = f"{_PML}.presentation.main+xml"
CT_SLIDE = f"{_PML}.slide+xml"
CT_SLIDE_LAYOUT = f"{_PML}.slideLayout+xml"
CT_SLIDE_MASTER = f"{_PML}.slideMaster+xml"
CT_NOTES_SLIDE = f"{_PML}.notesSlide+xml"
CT_NOTES_MASTER = f"{_PML}.notesMaster+xml"
CT_HANDOUT_MASTER = f"{_PML}.handoutMaster+xml"
CT_PRES_PROPS = f"{_PML}.presProps+xml"
CT_VIEW_PROPS = f"{_PML}.viewProps+xml"
CT_TABLE_STYLES = f"{_PML}.tableStyles+xml"
CT_COMMENTS = f"{_PML}.comments+xml"
CT_COMMENT_AUTHORS = f"{_PML}.commentAuthors+xml"
CT_THEME = f"{_OFFICE}.theme+xml"
CT_CHART = f"{_OFFICE}.drawingml.chart+xml"
CT_CHART_STYLE = "application/vnd.ms-office.chartstyle+xml"
CT_CHART_COLORS = "application/vnd.ms-office.chartcolorstyle+xml"
CT_XLSX = f"{_OFFICE}.spreadsheetml.sheet"
CT_CORE = "application/vnd.openxmlformats-package.core-properties+xml"
CT_EXTENDED = f"{_OFFICE}.extended-properties+xml"
CT_INK = "application/inkml+xml"
CT_FONT = "application/x-fontdata"
CT_DSIG_ORIGIN = "application/vnd.openxmlformats-package.digital-signature-origin"
CT_DSIG = "application/vnd.openxmlformats-package.digital-signature-xmlsignature+xml"

_MEDIA_TYPES = {
    fmt.extension: fmt.mime_type
    for enum in (ImageFormat, VideoFormat, AudioFormat)
    for fmt in enum
}

_BINARY_DEFAULTS = {
    "xlsx": CT_XLSX,
    "fntdata": CT_FONT,
    "sigs": CT_DSIG_ORIGIN,
}


def extension_of(part_name: str) -> str:
    """Lower-case extension of the part's file name; ``_rels/.rels`` gives ``rels``."""
    base = posixpath.basename(part_name)
    _, dot, ext = base.rpartition(".")
    return ext.lower() if dot else ""


def default_for_extension(ext: str) -> str | None:
    """Content type a ``<Default>`` entry would give ``ext``, if known."""
    return _MEDIA_TYPES.get(ext) or _BINARY_DEFAULTS.get(ext)


class ContentTypes:
    """Defaults by extension plus per-part overrides, in insertion order."""

    def __init__(self) -> None:
        self.defaults: dict[str, str] = {"rels": CT_RELS, "xml": CT_XML}
        self.overrides: dict[str, str] = {}

    def add_default(self, ext: str, content_type: str) -> None:
        existing = self.defaults.get(ext)
        if existing is not None and existing != content_type:
            raise InternalError(
                f"Extension {ext!r} already maps to {existing}, not {content_type}"
            )
        self.defaults[ext] = content_type

    def add_override(self, part_name: str, content_type: str) -> None:
        if part_name in self.overrides:
            raise InternalError(f"Part {part_name} declared twice in [Content_Types].xml")
        self.overrides[part_name] = content_type

    def add_binary(self, part_name: str) -> None:
        """Declare a binary part through a default on its extension."""
        ext = extension_of(part_name)
        content_type = default_for_extension(ext)
        if content_type is None:
            raise InternalError(f"No content type known for {part_name}")
        self.add_default(ext, content_type)

    def content_type_for(self, part_name: str) -> str | None:
        if part_name in self.overrides:
            return self.overrides[part_name]
        return self.defaults.get(extension_of(part_name))

    def to_xml(self) -> str:
        defaults = "".join(
            f"<Default{attrs(('Extension', ext), ('ContentType', ct))}/>"
            for ext, ct in self.defaults.items()
        )
        overrides = "".join(
            f"<Override{attrs(('PartName', '/' + name), ('ContentType', ct))}/>"
            for name, ct in self.overrides.items()
        )
        return (f'{XML_DECLARATION}\n<Types xmlns="{NS_CONTENT_TYPES}">'
                f"{defaults}{overrides}</Types>")
