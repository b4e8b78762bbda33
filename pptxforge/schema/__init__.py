"""Deck schema package - typed records describing a presentation.

Provides the contract between callers, input adapters and the package
composer:

- units.py: EMU conversions, Dimension, SlideSize, Transform
- colors.py / hyperlink.py: shared value records
- text.py / shapes.py / media.py / table.py / chart.py: element records
- annotations.py: comments and ink
- slide.py / presentation.py: slide and deck records, BuildOptions
- settings.py: sections, slide show, print, fonts, signature
- design_system.py: theme palette and typography
- loader.py: YAML serialization/deserialization
"""

from .annotations import Comment, InkPen, InkStroke, PenTip
from .chart import Chart, ChartSeries, ChartType, LegendPosition
from .colors import Color, SchemeColor
from .design_system import DesignSystem
from .hyperlink import Hyperlink, HyperlinkAction
from .loader import load_deck, loads_deck, save_deck
from .media import (
    Audio,
    AudioFormat,
    Crop,
    EffectKind,
    Image,
    ImageEffect,
    ImageFormat,
    MediaOptions,
    Video,
    VideoFormat,
)
from .presentation import BuildOptions, Presentation
from .settings import (
    DigitalSignature,
    EmbeddedFont,
    FontStyle,
    HandoutLayout,
    HashAlgorithm,
    PrintColorMode,
    PrintSettings,
    PrintWhat,
    Section,
    SectionManager,
    ShowType,
    SignatureCommitment,
    SlideShowSettings,
)
from .shapes import (
    ArrowSize,
    ArrowType,
    ConnectionAnchor,
    ConnectionSite,
    Connector,
    ConnectorType,
    Gradient,
    GradientDirection,
    GradientStop,
    GradientType,
    LineDash,
    Shape,
    ShapeType,
)
from .slide import LayoutKind, Slide, Transition, TransitionSpeed, TransitionType
from .table import MergeKind, MergeRegion, MergeState, Table, TableCell, TableMergeMap, TableRow
from .text import (
    Alignment,
    AutoFit,
    BulletItem,
    BulletList,
    BulletStyle,
    CodeBlock,
    Paragraph,
    RtlLanguage,
    TextBody,
    TextRun,
    VerticalAnchor,
)
from .units import (
    SLIDE_4X3,
    SLIDE_16X9,
    SLIDE_16X10,
    SLIDE_WIDESCREEN,
    Dimension,
    SlideSize,
    Transform,
    Unit,
    cm,
    emu,
    inches,
    pt,
    ratio,
    resolve,
)

__all__ = [
    # Units
    "Dimension",
    "SLIDE_4X3",
    "SLIDE_16X9",
    "SLIDE_16X10",
    "SLIDE_WIDESCREEN",
    "SlideSize",
    "Transform",
    "Unit",
    "cm",
    "emu",
    "inches",
    "pt",
    "ratio",
    "resolve",
    # Values
    "Color",
    "SchemeColor",
    "Hyperlink",
    "HyperlinkAction",
    # Text
    "Alignment",
    "AutoFit",
    "BulletItem",
    "BulletList",
    "BulletStyle",
    "CodeBlock",
    "Paragraph",
    "RtlLanguage",
    "TextBody",
    "TextRun",
    "VerticalAnchor",
    # Shapes
    "ArrowSize",
    "ArrowType",
    "ConnectionAnchor",
    "ConnectionSite",
    "Connector",
    "ConnectorType",
    "Gradient",
    "GradientDirection",
    "GradientStop",
    "GradientType",
    "LineDash",
    "Shape",
    "ShapeType",
    # Media
    "Audio",
    "AudioFormat",
    "Crop",
    "EffectKind",
    "Image",
    "ImageEffect",
    "ImageFormat",
    "MediaOptions",
    "Video",
    "VideoFormat",
    # Tables and charts
    "MergeKind",
    "MergeRegion",
    "MergeState",
    "Table",
    "TableCell",
    "TableMergeMap",
    "TableRow",
    "Chart",
    "ChartSeries",
    "ChartType",
    "LegendPosition",
    # Annotations
    "Comment",
    "InkPen",
    "InkStroke",
    "PenTip",
    # Slides and deck
    "LayoutKind",
    "Slide",
    "Transition",
    "TransitionSpeed",
    "TransitionType",
    "BuildOptions",
    "Presentation",
    "DesignSystem",
    # Settings
    "DigitalSignature",
    "EmbeddedFont",
    "FontStyle",
    "HandoutLayout",
    "HashAlgorithm",
    "PrintColorMode",
    "PrintSettings",
    "PrintWhat",
    "Section",
    "SectionManager",
    "ShowType",
    "SignatureCommitment",
    "SlideShowSettings",
    # Loader
    "load_deck",
    "loads_deck",
    "save_deck",
]
