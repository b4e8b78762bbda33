"""OPC packaging: relationships, content types, composition and ZIP output."""

from .relationships import RelationshipTable, Relationship, rels_path_for, relative_target
from .content_types import ContentTypes
from .composer import PackageComposer, PartTree, verify
from .zipwriter import build_pptx, write_pptx, write_zip

__all__ = [
    "RelationshipTable",
    "Relationship",
    "rels_path_for",
    "relative_target",
    "ContentTypes",
    "PackageComposer",
    "PartTree",
    "verify",
    "build_pptx",
    "write_pptx",
    "write_zip",
]
