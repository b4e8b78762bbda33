"""Per-slide emission context and the deck-wide asset registry.

Slide-level generators never allocate part names or relationship IDs
themselves: they ask the ``SlideContext``, which records each reference in
the slide's ``RelationshipTable`` in order of first appearance and hands
binary assets to the shared ``AssetRegistry``.
"""

import hashlib
import logging

from pptxforge.errors import InvalidInputError
from pptxforge.package.relationships import (
    RT_HYPERLINK,
    RT_SLIDE,
    RelationshipTable,
    relative_target,
)
from pptxforge.schema.annotations import InkStroke
from pptxforge.schema.chart import Chart
from pptxforge.schema.design_system import DesignSystem
from pptxforge.schema.hyperlink import Hyperlink, HyperlinkAction
from pptxforge.schema.media import ImageFormat, MediaOptions
from pptxforge.schema.units import SLIDE_4X3, SlideSize

logger = logging.getLogger(__name__)

# spTree's own group shape takes id 1.
FIRST_SHAPE_ID = 2


class AssetRegistry:
    """Binary and adjunct parts shared across a deck.

    Identical media bytes are stored once; charts and ink parts are numbered
    deck-wide in the order they are registered.
    """

    def __init__(self) -> None:
        self.media: dict[str, bytes] = {}
        self._by_digest: dict[str, str] = {}
        self._image_count = 0
        self._media_count = 0
        self.charts: list[tuple[str, Chart]] = []
        self.ink: list[tuple[str, list[InkStroke]]] = []

    def _store(self, data: bytes, name_for) -> str:
        digest = hashlib.sha256(data).hexdigest()
        part = self._by_digest.get(digest)
        if part is None:
            part = name_for()
            self._by_digest[digest] = part
            self.media[part] = data
            logger.debug("Media part %s (%d bytes)", part, len(data))
        return part

    def add_image(self, data: bytes, image_format: ImageFormat) -> str:
        def name_for() -> str:
            self._image_count += 1
            return f"ppt/media/image{self._image_count}.{image_format.extension}"
        return self._store(data, name_for)

    def add_media(self, data: bytes, extension: str) -> str:
        def name_for() -> str:
            self._media_count += 1
            return f"ppt/media/media{self._media_count}.{extension}"
        return self._store(data, name_for)

    def add_chart(self, chart: Chart) -> str:
        part = f"ppt/charts/chart{len(self.charts) + 1}.xml"
        self.charts.append((part, chart))
        return part

    def add_ink(self, strokes: list[InkStroke]) -> str:
        part = f"ppt/ink/ink{len(self.ink) + 1}.xml"
        self.ink.append((part, strokes))
        return part


class SlideContext:
    """State threaded through the generators while one slide is emitted.

    Parameters
    ----------
    index : int
        1-based slide number.
    slide_count : int
        Number of slides in the deck; bounds slide-jump hyperlinks.
    """

    def __init__(self, index: int = 1, slide_count: int = 1,
                 slide_size: SlideSize = SLIDE_4X3,
                 design: DesignSystem | None = None,
                 assets: AssetRegistry | None = None,
                 part_name: str | None = None) -> None:
        self.index = index
        self.slide_count = slide_count
        self.slide_size = slide_size
        self.design = design or DesignSystem()
        self.assets = assets if assets is not None else AssetRegistry()
        self.part_name = part_name or f"ppt/slides/slide{index}.xml"
        self.rels = RelationshipTable()
        self.shape_names: dict[str, int] = {}
        # (shape id, "video" | "audio", options) for the slide's <p:timing>
        self.timed_media: list[tuple[int, str, MediaOptions]] = []
        self._next_id = FIRST_SHAPE_ID

    # -- shape ids ------------------------------------------------------------

    def next_shape_id(self, name: str | None = None) -> int:
        shape_id = self._next_id
        self._next_id += 1
        if name:
            if name in self.shape_names:
                raise InvalidInputError(
                    f"Duplicate shape name {name!r} on slide {self.index}"
                )
            self.shape_names[name] = shape_id
        return shape_id

    @property
    def shape_count(self) -> int:
        return self._next_id - FIRST_SHAPE_ID

    def shape_id_for(self, ref: str | int) -> int:
        """Resolve a connector anchor (shape name or explicit id)."""
        if isinstance(ref, int):
            if not FIRST_SHAPE_ID <= ref < self._next_id:
                raise InvalidInputError(f"No shape with id {ref} on slide {self.index}")
            return ref
        if ref not in self.shape_names:
            raise InvalidInputError(f"No shape named {ref!r} on slide {self.index}")
        return self.shape_names[ref]

    # -- relationships -------------------------------------------------------

    def relate(self, rel_type: str, target_part: str) -> str:
        return self.rels.add(rel_type, relative_target(self.part_name, target_part))

    def relate_external(self, rel_type: str, target: str) -> str:
        return self.rels.add(rel_type, target, external=True)

    def hyperlink_rid(self, link: Hyperlink) -> str:
        """rId for a hyperlink; empty for show jumps, which need no rel."""
        if not link.needs_relationship:
            return ""
        if link.action is HyperlinkAction.SLIDE:
            if link.slide > self.slide_count:
                raise InvalidInputError(
                    f"Hyperlink on slide {self.index} targets slide {link.slide}, "
                    f"but the deck has {self.slide_count}"
                )
            return self.relate(RT_SLIDE, f"ppt/slides/slide{link.slide}.xml")
        return self.relate_external(RT_HYPERLINK, link.relationship_target())
