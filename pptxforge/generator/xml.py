"""XML helpers shared by every part generator.

Parts are assembled by string concatenation with explicit namespace
prefixes. Anything derived from caller input goes through ``escape``;
library-emitted markup never does.
"""

import re

from pptxforge.errors import InvalidInputError
from pptxforge.schema.colors import Color
from pptxforge.schema.units import Transform


XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'

# Namespace URIs
NS_A = "http://schemas.openxmlformats.org/drawingml/2006/main"
NS_P = "http://schemas.openxmlformats.org/presentationml/2006/main"
NS_R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
NS_C = "http://schemas.openxmlformats.org/drawingml/2006/chart"
NS_PKG_RELS = "http://schemas.openxmlformats.org/package/2006/relationships"
NS_CONTENT_TYPES = "http://schemas.openxmlformats.org/package/2006/content-types"
NS_MC = "http://schemas.openxmlformats.org/markup-compatibility/2006"
NS_P14 = "http://schemas.microsoft.com/office/powerpoint/2010/main"
NS_A14 = "http://schemas.microsoft.com/office/drawing/2010/main"
NS_INKML = "http://www.w3.org/2003/InkML"
NS_CORE = "http://schemas.openxmlformats.org/package/2006/metadata/core-properties"
NS_DC = "http://purl.org/dc/elements/1.1/"
NS_DCTERMS = "http://purl.org/dc/terms/"
NS_DCMITYPE = "http://purl.org/dc/dcmitype/"
NS_XSI = "http://www.w3.org/2001/XMLSchema-instance"
NS_EXTENDED = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
NS_VT = "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"
NS_DSIG = "http://www.w3.org/2000/09/xmldsig#"
NS_OFFICE_DSIG = "http://schemas.microsoft.com/office/2006/digsig"
NS_CS = "http://schemas.microsoft.com/office/drawing/2012/chartStyle"

# Namespace declarations used on PresentationML root elements.
PML_NAMESPACES = f'xmlns:a="{NS_A}" xmlns:r="{NS_R}" xmlns:p="{NS_P}"'

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}

# Characters outside the XML 1.0 Char production.
_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def escape(text) -> str:
    """Entity-escape the five XML special characters.

    Raises ``InvalidInputError`` for characters XML 1.0 cannot carry at all
    (control characters such as vertical tab, lone surrogates).
    """
    text = str(text)
    bad = _ILLEGAL_XML_CHARS.search(text)
    if bad:
        raise InvalidInputError(
            f"Text contains character U+{ord(bad.group()):04X}, which XML cannot "
            f"represent (at offset {bad.start()} of {text[:40]!r})"
        )
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def attrs(*pairs: tuple[str, object]) -> str:
    """Render ``name="value"`` pairs in the given order, skipping ``None``.

    Booleans render as ``"1"``/``"0"``. Values are escaped.
    """
    out = []
    for name, value in pairs:
        if value is None:
            continue
        if isinstance(value, bool):
            value = "1" if value else "0"
        out.append(f' {name}="{escape(value)}"')
    return "".join(out)


def element(tag: str, *pairs: tuple[str, object], children: str = "") -> str:
    """Emit ``<tag attrs>children</tag>`` or a self-closing tag when empty."""
    if children:
        return f"<{tag}{attrs(*pairs)}>{children}</{tag}>"
    return f"<{tag}{attrs(*pairs)}/>"


def xfrm(transform: Transform, tag: str = "a:xfrm") -> str:
    """Offset then extent; ``rot`` is omitted when zero."""
    head = attrs(
        ("rot", transform.rotation or None),
        ("flipH", True if transform.flip_h else None),
        ("flipV", True if transform.flip_v else None),
    )
    return (
        f"<{tag}{head}>"
        f'<a:off x="{transform.x}" y="{transform.y}"/>'
        f'<a:ext cx="{transform.width}" cy="{transform.height}"/>'
        f"</{tag}>"
    )


def color_xml(color: Color, alpha: int | None = None) -> str:
    """``<a:srgbClr>`` or ``<a:schemeClr>`` with an optional alpha child."""
    tag = "a:schemeClr" if color.scheme is not None else "a:srgbClr"
    value = color.scheme.value if color.scheme is not None else color.rgb
    if alpha is None:
        return f'<{tag} val="{value}"/>'
    return f'<{tag} val="{value}"><a:alpha val="{alpha}"/></{tag}>'


def solid_fill(color: Color, alpha: int | None = None) -> str:
    return f"<a:solidFill>{color_xml(color, alpha)}</a:solidFill>"


def document(root: str) -> str:
    return XML_DECLARATION + "\n" + root
