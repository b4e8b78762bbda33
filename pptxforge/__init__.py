"""pptxforge: builds Office Open XML presentations (.pptx) from a deck model.

Usage::

    from pptxforge import Presentation, Slide, build_pptx

    deck = Presentation(title="Quarterly Review")
    deck.add_slide(Slide(title="Agenda", bullets=["Results", "Outlook"]))
    data = build_pptx(deck)
"""

from .errors import (
    ErrorKind,
    InternalError,
    InvalidInputError,
    MissingAssetError,
    OverlapError,
    PackageWriteError,
    PptxForgeError,
    UnsupportedFormatError,
)
from .schema import (
    Audio,
    BuildOptions,
    Chart,
    ChartSeries,
    ChartType,
    Color,
    Comment,
    Connector,
    DigitalSignature,
    EmbeddedFont,
    Gradient,
    GradientStop,
    Hyperlink,
    Image,
    ImageEffect,
    InkPen,
    InkStroke,
    LayoutKind,
    Paragraph,
    Presentation,
    PrintSettings,
    SectionManager,
    Shape,
    ShapeType,
    Slide,
    SlideShowSettings,
    Table,
    TableCell,
    TextBody,
    TextRun,
    Transition,
    TransitionType,
    Video,
    cm,
    emu,
    inches,
    load_deck,
    pt,
    ratio,
    save_deck,
)
from .package import PackageComposer, PartTree, build_pptx, write_pptx

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ErrorKind",
    "InternalError",
    "InvalidInputError",
    "MissingAssetError",
    "OverlapError",
    "PackageWriteError",
    "PptxForgeError",
    "UnsupportedFormatError",
    # Model
    "Audio",
    "BuildOptions",
    "Chart",
    "ChartSeries",
    "ChartType",
    "Color",
    "Comment",
    "Connector",
    "DigitalSignature",
    "EmbeddedFont",
    "Gradient",
    "GradientStop",
    "Hyperlink",
    "Image",
    "ImageEffect",
    "InkPen",
    "InkStroke",
    "LayoutKind",
    "Paragraph",
    "Presentation",
    "PrintSettings",
    "SectionManager",
    "Shape",
    "ShapeType",
    "Slide",
    "SlideShowSettings",
    "Table",
    "TableCell",
    "TextBody",
    "TextRun",
    "Transition",
    "TransitionType",
    "Video",
    "cm",
    "emu",
    "inches",
    "pt",
    "ratio",
    "load_deck",
    "save_deck",
    # Packaging
    "PackageComposer",
    "PartTree",
    "build_pptx",
    "write_pptx",
]
