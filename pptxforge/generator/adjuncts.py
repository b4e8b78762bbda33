"""Adjunct parts: notes slides, comments, InkML and the signature parts."""

import base64
import hashlib
from dataclasses import dataclass

from pptxforge.generator.slide import SP_TREE_HEAD
from pptxforge.generator.xml import NS_DSIG, NS_INKML, NS_OFFICE_DSIG, PML_NAMESPACES, XML_DECLARATION, escape
from pptxforge.schema.annotations import Comment, CommentAuthor, InkPen, InkStroke
from pptxforge.schema.settings import DigitalSignature
from pptxforge.schema.units import EMU_PER_CM


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

def notes_slide_xml(notes: str) -> str:
    """``ppt/notesSlides/notesSlideN.xml``: slide image + notes body."""
    paragraphs = "".join(
        f'<a:p><a:r><a:rPr lang="en-US"/><a:t>{escape(line)}</a:t></a:r></a:p>' if line
        else '<a:p><a:endParaRPr lang="en-US"/></a:p>'
        for line in notes.strip("\n").split("\n")
    )
    return (
        f"{XML_DECLARATION}\n<p:notes {PML_NAMESPACES}><p:cSld><p:spTree>{SP_TREE_HEAD}"
        '<p:sp><p:nvSpPr><p:cNvPr id="2" name="Slide Image Placeholder 1"/>'
        '<p:cNvSpPr><a:spLocks noGrp="1" noRot="1" noChangeAspect="1"/></p:cNvSpPr>'
        '<p:nvPr><p:ph type="sldImg"/></p:nvPr></p:nvSpPr><p:spPr/></p:sp>'
        '<p:sp><p:nvSpPr><p:cNvPr id="3" name="Notes Placeholder 2"/>'
        '<p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr>'
        '<p:nvPr><p:ph type="body" idx="1"/></p:nvPr></p:nvSpPr><p:spPr/>'
        f"<p:txBody><a:bodyPr/><a:lstStyle/>{paragraphs}</p:txBody></p:sp>"
        "</p:spTree></p:cSld><p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr></p:notes>"
    )


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@dataclass
class PlacedComment:
    """A comment with its deck-wide author id and per-author index."""
    comment: Comment
    author_id: int
    idx: int


def comment_list_xml(comments: list[PlacedComment]) -> str:
    """``ppt/comments/commentN.xml``."""
    items = "".join(
        f'<p:cm authorId="{c.author_id}" '
        f'dt="{c.comment.created.strftime("%Y-%m-%dT%H:%M:%S.000")}" idx="{c.idx}">'
        f'<p:pos x="{c.comment.x}" y="{c.comment.y}"/>'
        f"<p:text>{escape(c.comment.text)}</p:text></p:cm>"
        for c in comments
    )
    return f"{XML_DECLARATION}\n<p:cmLst {PML_NAMESPACES}>{items}</p:cmLst>"


def comment_authors_xml(authors: list[CommentAuthor]) -> str:
    """``ppt/commentAuthors.xml``."""
    items = "".join(
        f'<p:cmAuthor id="{a.id}" name="{escape(a.name)}" initials="{escape(a.initials)}" '
        f'lastIdx="{a.last_idx}" clrIdx="{a.color_index}"/>'
        for a in authors
    )
    return f"{XML_DECLARATION}\n<p:cmAuthorLst {PML_NAMESPACES}>{items}</p:cmAuthorLst>"


# ---------------------------------------------------------------------------
# Ink
# ---------------------------------------------------------------------------

EMU_PER_HIMETRIC = 360


def _brush_xml(brush_id: str, pen: InkPen) -> str:
    width = f"{pen.width / EMU_PER_CM:.5f}"
    props = [
        ("width", width, "cm"), ("height", width, "cm"),
        ("color", f"#{pen.color.rgb}", None), ("tip", pen.tip.value, None),
    ]
    if pen.opacity < 1.0:
        props.append(("transparency", str(round((1.0 - pen.opacity) * 255)), None))
    body = "".join(
        f'<inkml:brushProperty name="{name}" value="{value}"'
        + (f' units="{units}"' if units else "") + "/>"
        for name, value, units in props
    )
    return f'<inkml:brush xml:id="{brush_id}">{body}</inkml:brush>'


def inkml_xml(strokes: list[InkStroke]) -> str:
    """``ppt/ink/inkN.xml``; points in HIMETRIC relative to the strokes' bounds."""
    x0 = min(s.bounds()[0] for s in strokes)
    y0 = min(s.bounds()[1] for s in strokes)
    brushes: dict[InkPen, str] = {}
    for stroke in strokes:
        brushes.setdefault(stroke.pen, f"br{len(brushes)}")
    traces = []
    for stroke in strokes:
        points = ", ".join(f"{(x - x0) // EMU_PER_HIMETRIC} {(y - y0) // EMU_PER_HIMETRIC}"
                           for x, y in stroke.points)
        traces.append(f'<inkml:trace contextRef="#ctx0" '
                      f'brushRef="#{brushes[stroke.pen]}">{points}</inkml:trace>')
    definitions = (
        '<inkml:context xml:id="ctx0"><inkml:inkSource xml:id="inkSrc0">'
        "<inkml:traceFormat>"
        '<inkml:channel name="X" type="integer" max="32767" units="cm"/>'
        '<inkml:channel name="Y" type="integer" max="32767" units="cm"/>'
        "</inkml:traceFormat><inkml:channelProperties>"
        '<inkml:channelProperty channel="X" name="resolution" value="1000" units="1/cm"/>'
        '<inkml:channelProperty channel="Y" name="resolution" value="1000" units="1/cm"/>'
        "</inkml:channelProperties></inkml:inkSource></inkml:context>"
        + "".join(_brush_xml(bid, pen) for pen, bid in brushes.items())
    )
    return (f'{XML_DECLARATION}\n<inkml:ink xmlns:inkml="{NS_INKML}">'
            f"<inkml:definitions>{definitions}</inkml:definitions>"
            f"{''.join(traces)}</inkml:ink>")


# ---------------------------------------------------------------------------
# Digital signature
# ---------------------------------------------------------------------------

C14N = "http://www.w3.org/TR/2001/REC-xml-c14n-20010315"
RSA_SHA256 = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha256"
OBJECT_TYPE = "http://www.w3.org/2000/09/xmldsig#Object"
NS_MDSSI = "http://schemas.openxmlformats.org/package/2006/digital-signature"
NS_XADES = "http://uri.etsi.org/01903/v1.3.2#"


def digest(data: bytes, signature: DigitalSignature) -> str:
    h = hashlib.new(signature.hash_algorithm.value, data)
    return base64.b64encode(h.digest()).decode("ascii")


def _reference(uri: str, value: str, signature: DigitalSignature, type_: str | None = None) -> str:
    type_attr = f' Type="{type_}"' if type_ else ""
    return (f'<Reference URI="{escape(uri)}"{type_attr}>'
            f'<DigestMethod Algorithm="{signature.hash_algorithm.uri}"/>'
            f"<DigestValue>{value}</DigestValue></Reference>")


def _subject_name(signature: DigitalSignature) -> str:
    parts = [f"CN={signature.signer}"]
    if signature.title:
        parts.append(f"T={signature.title}")
    if signature.organization:
        parts.append(f"O={signature.organization}")
    if signature.email:
        parts.append(f"E={signature.email}")
    return ", ".join(parts)


def signature_xml(signature: DigitalSignature,
                  parts: list[tuple[str, str, bytes]]) -> str:
    """``_xmlsignatures/sig1.xml``.

    ``parts`` lists (part name, content type, bytes) of every signed part.
    Digests are real; ``SignatureValue`` stays empty because no key is
    involved.
    """
    manifest = "".join(
        _reference(f"/{name}?ContentType={content_type}", digest(data, signature), signature)
        for name, content_type, data in parts
    )
    signed_at = signature.signed_at.strftime("%Y-%m-%dT%H:%M:%SZ")
    package_object = (
        f'<Object Id="idPackageObject"><Manifest>{manifest}</Manifest>'
        '<SignatureProperties><SignatureProperty Id="idSignatureTime" '
        'Target="#idPackageSignature">'
        f'<mdssi:SignatureTime xmlns:mdssi="{NS_MDSSI}">'
        "<mdssi:Format>YYYY-MM-DDThh:mm:ssTZD</mdssi:Format>"
        f"<mdssi:Value>{signed_at}</mdssi:Value></mdssi:SignatureTime>"
        "</SignatureProperty></SignatureProperties></Object>"
    )
    office_object = (
        '<Object Id="idOfficeObject"><SignatureProperties>'
        '<SignatureProperty Id="idOfficeV1Details" Target="#idPackageSignature">'
        f'<SignatureInfoV1 xmlns="{NS_OFFICE_DSIG}">'
        f"<SetupID/><SignatureText>{escape(signature.signer)}</SignatureText>"
        "<SignatureImage/>"
        f"<SignatureComments>{escape(signature.comments or '')}</SignatureComments>"
        "<WindowsVersion/><OfficeVersion/><ApplicationVersion/><Monitors/>"
        "<HorizontalResolution/><VerticalResolution/><ColorDepth/>"
        "<SignatureProviderId>{00000000-0000-0000-0000-000000000000}</SignatureProviderId>"
        "<SignatureProviderUrl/><SignatureProviderDetails>9</SignatureProviderDetails>"
        "<SignatureType>1</SignatureType></SignatureInfoV1></SignatureProperty>"
        '<SignatureProperty Id="idCommitment" Target="#idPackageSignature">'
        f'<xd:CommitmentTypeIndication xmlns:xd="{NS_XADES}"><xd:CommitmentTypeId>'
        f"<xd:Identifier>{signature.commitment.uri}</xd:Identifier>"
        f"<xd:Description>{signature.commitment.label}</xd:Description>"
        "</xd:CommitmentTypeId><xd:AllSignedDataObjects/></xd:CommitmentTypeIndication>"
        "</SignatureProperty></SignatureProperties></Object>"
    )
    signed_info = (
        f'<SignedInfo><CanonicalizationMethod Algorithm="{C14N}"/>'
        f'<SignatureMethod Algorithm="{RSA_SHA256}"/>'
        + _reference("#idPackageObject", digest(package_object.encode("utf-8"), signature),
                     signature, OBJECT_TYPE)
        + _reference("#idOfficeObject", digest(office_object.encode("utf-8"), signature),
                     signature, OBJECT_TYPE)
        + "</SignedInfo>"
    )
    return (
        f'{XML_DECLARATION}\n<Signature xmlns="{NS_DSIG}" Id="idPackageSignature">'
        f"{signed_info}<SignatureValue/>"
        f"<KeyInfo><KeyName>{escape(signature.signer)}</KeyName>"
        f"<X509Data><X509SubjectName>{escape(_subject_name(signature))}</X509SubjectName>"
        "</X509Data></KeyInfo>"
        f"{package_object}{office_object}</Signature>"
    )
