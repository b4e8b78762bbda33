"""Error taxonomy for pptxforge.

Every failure raised by the library is a subclass of ``PptxForgeError`` and
carries a ``kind`` attribute so callers can branch on the category without
caring about the concrete class::

    try:
        data = build_pptx(deck)
    except PptxForgeError as exc:
        if exc.kind is ErrorKind.OVERLAP:
            ...
"""

from enum import Enum


class ErrorKind(Enum):
    """Category of a pptxforge failure."""
    INVALID_INPUT = "invalid_input"            # Caller violated a record constraint
    OVERLAP = "overlap"                        # Merge regions or sections collide
    MISSING_ASSET = "missing_asset"            # Referenced file cannot be read
    UNSUPPORTED_FORMAT = "unsupported_format"  # Unknown image/media/font extension
    IO = "io"                                  # Output could not be written
    INTERNAL = "internal"                      # Post-condition failed (a bug)


class PptxForgeError(Exception):
    """Base class for all pptxforge errors."""
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class InvalidInputError(PptxForgeError, ValueError):
    kind = ErrorKind.INVALID_INPUT


class OverlapError(PptxForgeError, ValueError):
    kind = ErrorKind.OVERLAP


class MissingAssetError(PptxForgeError):
    kind = ErrorKind.MISSING_ASSET


class UnsupportedFormatError(PptxForgeError, ValueError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class PackageWriteError(PptxForgeError):
    kind = ErrorKind.IO


class InternalError(PptxForgeError, RuntimeError):
    kind = ErrorKind.INTERNAL
