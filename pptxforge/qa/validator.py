"""QA validator. Inspects a generated PPTX against the package invariants.

Reads the archive back with zipfile + lxml and checks that the content-types
manifest covers every part exactly once, that every relationship resolves,
that slide IDs follow the deck order, and that table merges, chart series
and gradient stops are well formed. Finally the package is opened with
python-pptx to prove a third-party reader accepts it.

Usage::

    from pptxforge.qa.validator import QAValidator

    validator = QAValidator(deck)
    result = validator.validate(pptx_bytes)
    assert result.passed, result.report()
"""

import io
import posixpath
import re
import zipfile
from dataclasses import dataclass, field

from lxml import etree
from pptx import Presentation as PptxPresentation

from pptxforge.errors import InternalError
from pptxforge.generator.presentation_xml import slide_id
from pptxforge.generator.xml import NS_A, NS_C, NS_CONTENT_TYPES, NS_P, NS_PKG_RELS, NS_R
from pptxforge.package.content_types import extension_of
from pptxforge.package.relationships import resolve_target
from pptxforge.schema.presentation import Presentation


CONTENT_TYPES_PART = "[Content_Types].xml"
_NS = {"a": NS_A, "c": NS_C, "p": NS_P, "r": NS_R, "ct": NS_CONTENT_TYPES,
       "rel": NS_PKG_RELS}
_REF_ATTRS = {f"{{{NS_R}}}{name}" for name in ("id", "embed", "link", "pict")}
_SLIDE_RE = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
# Chart families whose series pair X/Y values instead of sharing categories.
_XY_TAGS = {"scatterChart", "bubbleChart"}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    slide_index: int    # 1-based; -1 for package-level issues
    part: str           # "" when not tied to one part
    category: str       # e.g. "content_types", "relationships", "table"
    message: str

    def __str__(self) -> str:
        loc = f"slide {self.slide_index}" if self.slide_index > 0 else "package"
        if self.part:
            loc += f" ({self.part})"
        return f"[{self.severity.upper()}] {loc}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def by_category(self, category: str) -> list[Issue]:
        return [i for i in self.issues if i.category == category]

    def summary(self) -> str:
        """One-line summary string."""
        status = "PASS" if self.passed else "FAIL"
        return (
            f"QA {status}: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)"
        )

    def report(self) -> str:
        """Multi-line report of all issues."""
        lines = [self.summary()]
        for issue in self.issues:
            lines.append(f"  {issue}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def list_parts(pptx_bytes: bytes) -> list[str]:
    """Entry names of a PPTX archive, in archive order."""
    with zipfile.ZipFile(io.BytesIO(pptx_bytes)) as archive:
        return archive.namelist()


def source_for_rels(rels_path: str) -> str:
    """``ppt/slides/_rels/slide1.xml.rels`` -> ``ppt/slides/slide1.xml``."""
    rels_dir, name = posixpath.split(rels_path)
    return posixpath.join(posixpath.dirname(rels_dir), name[: -len(".rels")])


def _slide_number(part: str) -> int:
    match = _SLIDE_RE.match(part)
    return int(match.group(1)) if match else -1


def _int_attr(element, name: str, default: int = 1) -> int:
    value = element.get(name)
    return int(value) if value is not None else default


def _truthy(element, name: str) -> bool:
    return element.get(name) in ("1", "true")


# ---------------------------------------------------------------------------
# QAValidator
# ---------------------------------------------------------------------------

class QAValidator:
    """Validates a built PPTX.

    Parameters
    ----------
    deck : Presentation, optional
        The deck the package was built from. When given, the slide count and
        dimensions read back through python-pptx are compared against it.
    """

    def __init__(self, deck: Presentation | None = None) -> None:
        self.deck = deck

    def validate(self, pptx_bytes: bytes) -> QAResult:
        """Run all validation checks on a built PPTX.

        Parameters
        ----------
        pptx_bytes : bytes
            The raw PPTX file content (from ``build_pptx``).

        Returns
        -------
        QAResult
            Aggregated validation result.
        """
        result = QAResult()
        try:
            archive = zipfile.ZipFile(io.BytesIO(pptx_bytes))
        except zipfile.BadZipFile as exc:
            self._add(result, "error", "archive", f"Not a ZIP archive: {exc}")
            return result

        with archive:
            parts = {name: archive.read(name) for name in archive.namelist()}
            self._check_archive(archive.namelist(), result)

        trees = self._parse_xml(parts, result)
        self._check_content_types(parts, trees, result)
        rels = self._check_relationships(parts, trees, result)
        self._check_references(trees, rels, result)
        self._check_slide_ids(parts, trees, rels, result)
        for name, root in trees.items():
            if _SLIDE_RE.match(name):
                self._check_tables(name, root, result)
            if name.startswith("ppt/charts/chart"):
                self._check_chart(name, root, result)
            if name.startswith("ppt/slides/") or name.startswith("ppt/slideMasters/"):
                self._check_gradients(name, root, result)
        self._check_readback(pptx_bytes, trees, result)
        return result

    # ------------------------------------------------------------------
    # Archive-level checks
    # ------------------------------------------------------------------

    @staticmethod
    def _add(result: QAResult, severity: str, category: str, message: str,
             part: str = "", slide_index: int = -1) -> None:
        if slide_index < 0 and part:
            slide_index = _slide_number(part)
        result.issues.append(Issue(severity, slide_index, part, category, message))

    def _check_archive(self, names: list[str], result: QAResult) -> None:
        if not names or names[0] != CONTENT_TYPES_PART:
            self._add(result, "error", "archive",
                      f"{CONTENT_TYPES_PART} is not the first entry")
        for name in names:
            if name.endswith("/"):
                self._add(result, "warning", "archive", "Directory entry in archive", name)
        if len(names) != len(set(names)):
            self._add(result, "error", "archive", "Duplicate entry names")

    def _parse_xml(self, parts: dict[str, bytes], result: QAResult) -> dict:
        trees = {}
        for name, data in parts.items():
            if not (name.endswith(".xml") or name.endswith(".rels")):
                continue
            try:
                trees[name] = etree.fromstring(data)
            except etree.XMLSyntaxError as exc:
                self._add(result, "error", "xml", f"Malformed XML: {exc}", name)
        return trees

    # ------------------------------------------------------------------
    # Content types
    # ------------------------------------------------------------------

    def _check_content_types(self, parts: dict[str, bytes], trees: dict,
                             result: QAResult) -> None:
        root = trees.get(CONTENT_TYPES_PART)
        if root is None:
            self._add(result, "error", "content_types", f"{CONTENT_TYPES_PART} missing")
            return
        defaults = {d.get("Extension").lower(): d.get("ContentType")
                    for d in root.findall("ct:Default", _NS)}
        overrides: dict[str, str] = {}
        for override in root.findall("ct:Override", _NS):
            name = override.get("PartName").lstrip("/")
            if name in overrides:
                self._add(result, "error", "content_types",
                          "Part declared by more than one override", name)
            overrides[name] = override.get("ContentType")
            if name not in parts:
                self._add(result, "error", "content_types",
                          "Override names a part missing from the archive", name)
        for name in parts:
            if name == CONTENT_TYPES_PART or name in overrides:
                continue
            ext = extension_of(name)
            if ext not in defaults:
                self._add(result, "error", "content_types", "Part has no content type", name)

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def _check_relationships(self, parts: dict[str, bytes], trees: dict,
                             result: QAResult) -> dict[str, dict[str, tuple[str, bool]]]:
        """Validate every ``.rels`` part; returns source part -> {rId: (target, external)}."""
        tables: dict[str, dict[str, tuple[str, bool]]] = {}
        for name, root in trees.items():
            if not name.endswith(".rels"):
                continue
            source = source_for_rels(name)
            if source and source not in parts:
                self._add(result, "error", "relationships",
                          "Rels part has no source part", name)
            table: dict[str, tuple[str, bool]] = {}
            for rel in root.findall("rel:Relationship", _NS):
                rid = rel.get("Id")
                if rid in table:
                    self._add(result, "error", "relationships",
                              f"Duplicate relationship ID {rid}", name)
                external = rel.get("TargetMode") == "External"
                table[rid] = (rel.get("Target"), external)
                if external:
                    continue
                try:
                    target = resolve_target(source, rel.get("Target"))
                except InternalError as exc:
                    self._add(result, "error", "relationships", exc.message, name)
                    continue
                if target not in parts:
                    self._add(result, "error", "relationships",
                              f"{rid} targets missing part {target}", name)
            tables[source] = table
        return tables

    def _check_references(self, trees: dict, rels: dict, result: QAResult) -> None:
        for name, root in trees.items():
            if not name.endswith(".xml"):
                continue
            table = rels.get(name, {})
            for element in root.iter():
                for attr in _REF_ATTRS.intersection(element.attrib):
                    rid = element.get(attr)
                    if rid and rid not in table:
                        self._add(result, "error", "relationships",
                                  f"r:{etree.QName(attr).localname}={rid!r} does not "
                                  "resolve", name)

    # ------------------------------------------------------------------
    # Slide IDs
    # ------------------------------------------------------------------

    def _check_slide_ids(self, parts: dict[str, bytes], trees: dict, rels: dict,
                         result: QAResult) -> None:
        root = trees.get("ppt/presentation.xml")
        if root is None:
            self._add(result, "error", "slide_ids", "ppt/presentation.xml missing")
            return
        table = rels.get("ppt/presentation.xml", {})
        listed = []
        for number, entry in enumerate(root.findall("p:sldIdLst/p:sldId", _NS), start=1):
            expected = slide_id(number)
            if _int_attr(entry, "id", 0) != expected:
                self._add(result, "error", "slide_ids",
                          f"Slide {number} has id {entry.get('id')}, expected {expected}")
            target = table.get(entry.get(f"{{{NS_R}}}id"))
            if target is not None:
                listed.append(resolve_target("ppt/presentation.xml", target[0]))
        in_archive = sorted((p for p in parts if _SLIDE_RE.match(p)), key=_slide_number)
        if listed != in_archive:
            self._add(result, "error", "slide_ids",
                      "presentation.xml slide list does not match the slide parts")

    # ------------------------------------------------------------------
    # Content checks
    # ------------------------------------------------------------------

    def _check_tables(self, part: str, root, result: QAResult) -> None:
        for tbl in root.iter(f"{{{NS_A}}}tbl"):
            columns = len(tbl.findall("a:tblGrid/a:gridCol", _NS))
            rows = [tr.findall("a:tc", _NS) for tr in tbl.findall("a:tr", _NS)]
            if any(len(cells) != columns for cells in rows):
                self._add(result, "error", "table", "Table grid is not rectangular", part)
                continue
            covered: dict[tuple[int, int], str] = {}
            for r, cells in enumerate(rows):
                for c, tc in enumerate(cells):
                    row_span = _int_attr(tc, "rowSpan")
                    col_span = _int_attr(tc, "gridSpan")
                    if row_span == 1 and col_span == 1:
                        continue
                    if r + row_span > len(rows) or c + col_span > columns:
                        self._add(result, "error", "table",
                                  f"Merge at ({r},{c}) leaves the grid", part)
                        continue
                    for rr in range(r, r + row_span):
                        for cc in range(c, c + col_span):
                            if (rr, cc) == (r, c):
                                continue
                            if (rr, cc) in covered:
                                self._add(result, "error", "table",
                                          f"Merges overlap at ({rr},{cc})", part)
                            covered[(rr, cc)] = "hMerge" if rr == r else "vMerge"
            for r, cells in enumerate(rows):
                for c, tc in enumerate(cells):
                    expected = covered.get((r, c))
                    actual = ("hMerge" if _truthy(tc, "hMerge")
                              else "vMerge" if _truthy(tc, "vMerge") else None)
                    if expected != actual:
                        self._add(result, "error", "table",
                                  f"Cell ({r},{c}) merge state {actual}, expected {expected}",
                                  part)

    def _check_chart(self, part: str, root, result: QAResult) -> None:
        plot_area = root.find("c:chart/c:plotArea", _NS)
        if plot_area is None:
            self._add(result, "error", "chart", "Chart has no plot area", part)
            return
        for group in plot_area:
            if etree.QName(group).localname in _XY_TAGS:
                continue
            for ser in group.findall("c:ser", _NS):
                cat = ser.find("c:cat//c:ptCount", _NS)
                val = ser.find("c:val//c:ptCount", _NS)
                if cat is None or val is None:
                    continue
                if cat.get("val") != val.get("val"):
                    self._add(result, "error", "chart",
                              f"Series {ser.find('c:idx', _NS).get('val')} has "
                              f"{val.get('val')} values for {cat.get('val')} categories",
                              part)

    def _check_gradients(self, part: str, root, result: QAResult) -> None:
        for gs_list in root.iter(f"{{{NS_A}}}gsLst"):
            positions = [_int_attr(gs, "pos", 0) for gs in gs_list.findall("a:gs", _NS)]
            if len(positions) < 2:
                self._add(result, "error", "gradient", "Gradient has fewer than 2 stops", part)
            if any(not 0 <= p <= 100_000 for p in positions):
                self._add(result, "error", "gradient", "Gradient stop out of range", part)
            if positions != sorted(positions):
                self._add(result, "error", "gradient", "Gradient stops out of order", part)

    # ------------------------------------------------------------------
    # Read-back
    # ------------------------------------------------------------------

    def _check_readback(self, pptx_bytes: bytes, trees: dict, result: QAResult) -> None:
        # python-pptx raises many unrelated types on damaged packages
        try:
            prs = PptxPresentation(io.BytesIO(pptx_bytes))
            slide_count = len(prs.slides)
            width, height = prs.slide_width, prs.slide_height
        except Exception as exc:
            self._add(result, "error", "readback", f"python-pptx cannot open the file: {exc}")
            return
        root = trees.get("ppt/presentation.xml")
        listed = len(root.findall("p:sldIdLst/p:sldId", _NS)) if root is not None else 0
        if slide_count != listed:
            self._add(result, "error", "readback",
                      f"python-pptx sees {slide_count} slides, package lists {listed}")
        if self.deck is None:
            return
        if slide_count != self.deck.slide_count:
            self._add(result, "error", "slide_count",
                      f"Expected {self.deck.slide_count} slides, got {slide_count}")
        size = self.deck.slide_size
        if (width, height) != (size.width, size.height):
            self._add(result, "error", "dimensions",
                      f"Slide size {width}x{height} != "
                      f"expected {size.width}x{size.height}")
