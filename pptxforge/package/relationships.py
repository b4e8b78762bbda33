"""Relationship tables (``.rels`` parts).

Each source part owns one ``RelationshipTable``. IDs are ``rId1``, ``rId2``,
... in order of first reference; adding the same (type, target, mode) twice
returns the existing ID, so an image used twice on one slide shares a rel.
"""

import posixpath
from dataclasses import dataclass

from pptxforge.errors import InternalError
from pptxforge.generator.xml import NS_PKG_RELS, XML_DECLARATION, attrs


_OD = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_PKG = "http://schemas.openxmlformats.org/package/2006/relationships"

RT_OFFICE_DOCUMENT = f"{_OD}/officeDocument"
RT_CORE_PROPERTIES = f"{_PKG}/metadata/core-properties"
RT_EXTENDED_PROPERTIES = f"{_OD}/extended-properties"
RT_SLIDE = f"{_OD}/slide"
RT_SLIDE_LAYOUT = f"{_OD}/slideLayout"
RT_SLIDE_MASTER = f"{_OD}/slideMaster"
RT_THEME = f"{_OD}/theme"
RT_NOTES_SLIDE = f"{_OD}/notesSlide"
RT_NOTES_MASTER = f"{_OD}/notesMaster"
RT_HANDOUT_MASTER = f"{_OD}/handoutMaster"
RT_PRES_PROPS = f"{_OD}/presProps"
RT_VIEW_PROPS = f"{_OD}/viewProps"
RT_TABLE_STYLES = f"{_OD}/tableStyles"
RT_IMAGE = f"{_OD}/image"
RT_HYPERLINK = f"{_OD}/hyperlink"
RT_CHART = f"{_OD}/chart"
RT_PACKAGE = f"{_OD}/package"
RT_CHART_STYLE = "http://schemas.microsoft.com/office/2011/relationships/chartStyle"
RT_CHART_COLORS = "http://schemas.microsoft.com/office/2011/relationships/chartColorStyle"
RT_COMMENTS = f"{_OD}/comments"
RT_COMMENT_AUTHORS = f"{_OD}/commentAuthors"
RT_FONT = f"{_OD}/font"
RT_VIDEO = f"{_OD}/video"
RT_AUDIO = f"{_OD}/audio"
RT_MEDIA = "http://schemas.microsoft.com/office/2007/relationships/media"
RT_CUSTOM_XML = f"{_OD}/customXml"
RT_DSIG_ORIGIN = f"{_PKG}/digital-signature/origin"
RT_DSIG_SIGNATURE = f"{_PKG}/digital-signature/signature"


@dataclass(frozen=True)
class Relationship:
    rid: str
    rel_type: str
    target: str
    external: bool = False


class RelationshipTable:
    """Ordered relationships of one source part."""

    def __init__(self) -> None:
        self._rels: list[Relationship] = []
        self._by_key: dict[tuple[str, str, bool], Relationship] = {}

    def add(self, rel_type: str, target: str, external: bool = False) -> str:
        """Return the rId for (type, target), allocating the next one if new."""
        key = (rel_type, target, external)
        rel = self._by_key.get(key)
        if rel is None:
            rel = Relationship(f"rId{len(self._rels) + 1}", rel_type, target, external)
            self._rels.append(rel)
            self._by_key[key] = rel
        return rel.rid

    def get(self, rid: str) -> Relationship | None:
        for rel in self._rels:
            if rel.rid == rid:
                return rel
        return None

    def ids(self) -> list[str]:
        return [rel.rid for rel in self._rels]

    def of_type(self, rel_type: str) -> list[Relationship]:
        return [rel for rel in self._rels if rel.rel_type == rel_type]

    def __iter__(self):
        return iter(self._rels)

    def __len__(self) -> int:
        return len(self._rels)

    def __bool__(self) -> bool:
        return bool(self._rels)

    def to_xml(self) -> str:
        rows = []
        for rel in self._rels:
            rows.append("<Relationship" + attrs(
                ("Id", rel.rid),
                ("Type", rel.rel_type),
                ("Target", rel.target),
                ("TargetMode", "External" if rel.external else None),
            ) + "/>")
        return (
            f"{XML_DECLARATION}\n"
            f'<Relationships xmlns="{NS_PKG_RELS}">'
            + "".join(rows)
            + "</Relationships>"
        )


def rels_path_for(part_name: str) -> str:
    """``ppt/slides/slide1.xml`` -> ``ppt/slides/_rels/slide1.xml.rels``."""
    directory, name = posixpath.split(part_name)
    return posixpath.join(directory, "_rels", f"{name}.rels")


def relative_target(source_part: str, target_part: str) -> str:
    """Target of a relationship from ``source_part`` to ``target_part``."""
    return posixpath.relpath(target_part, posixpath.dirname(source_part) or ".")


def resolve_target(source_part: str, target: str) -> str:
    """Inverse of ``relative_target``: the absolute part name a target points at."""
    if target.startswith("/"):
        return target.lstrip("/")
    resolved = posixpath.normpath(posixpath.join(posixpath.dirname(source_part), target))
    if resolved.startswith(".."):
        raise InternalError(f"Relationship target {target!r} escapes the package")
    return resolved
