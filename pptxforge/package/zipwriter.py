"""Deterministic ZIP serialization of a composed package.

``[Content_Types].xml`` is written first, directory entries are never
written, every entry carries the same timestamp, and the compression choice
depends only on the part size, so the same deck always yields the same
bytes.
"""

import io
import logging
import zipfile
from pathlib import Path

from pptxforge.errors import PackageWriteError
from pptxforge.package.composer import CONTENT_TYPES_PART, PackageComposer, PartTree
from pptxforge.schema.presentation import BuildOptions, Presentation

logger = logging.getLogger(__name__)


def zip_info(name: str, size: int, options: BuildOptions) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=options.zip_timestamp)
    if size >= options.deflate_threshold:
        info.compress_type = zipfile.ZIP_DEFLATED
    else:
        info.compress_type = zipfile.ZIP_STORED
    info.external_attr = 0o644 << 16
    info.create_system = 0
    return info


def write_zip(tree: PartTree, options: BuildOptions | None = None) -> bytes:
    """Serialize ``tree``; raises ``PackageWriteError`` if it lacks a manifest."""
    options = options or BuildOptions()
    names = tree.names()
    if not names or names[0] != CONTENT_TYPES_PART:
        raise PackageWriteError(f"{CONTENT_TYPES_PART} must be the first entry")
    out = io.BytesIO()
    deflated = 0
    with zipfile.ZipFile(out, "w") as archive:
        for name, data in tree.items():
            info = zip_info(name, len(data), options)
            if info.compress_type == zipfile.ZIP_DEFLATED:
                deflated += 1
            archive.writestr(info, data)
    result = out.getvalue()
    logger.debug("Archive: %d entries (%d deflated), %d bytes",
                 len(names), deflated, len(result))
    return result


def build_pptx(deck: Presentation, options: BuildOptions | None = None) -> bytes:
    """Compose ``deck`` and return the PPTX bytes.

    Raises a ``PptxForgeError`` subclass on invalid input or a failed
    post-condition; nothing partial is returned.
    """
    options = options or BuildOptions()
    tree = PackageComposer(deck, options).compose()
    return write_zip(tree, options)


def write_pptx(deck: Presentation, path: str | Path,
               options: BuildOptions | None = None) -> Path:
    """Build ``deck`` and write it to ``path``."""
    data = build_pptx(deck, options)
    path = Path(path)
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise PackageWriteError(f"Cannot write {path}: {exc.strerror or exc}") from exc
    logger.debug("Wrote %s (%d bytes)", path, len(data))
    return path
