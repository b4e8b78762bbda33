"""QA validation package for pptxforge.

Reads a built PPTX back and checks the package invariants (content-types
coverage, relationship resolution, slide IDs, table merges, chart series
and gradient stops), then opens it with python-pptx.
"""

from .validator import (
    Issue,
    QAResult,
    QAValidator,
    list_parts,
)

__all__ = [
    "Issue",
    "QAResult",
    "QAValidator",
    "list_parts",
]
