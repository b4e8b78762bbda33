"""Embedded video and audio clips and the slide timing tree that plays them.

A clip is a ``<p:pic>`` whose ``<p:nvPr>`` carries the media link. Each clip
takes three slide rels in document order: the legacy ``r:link`` (video or
audio type), the ``p14:media`` ``r:embed`` (2007 media type) and the poster
image shown before playback.
"""

import base64

from pptxforge.generator.context import SlideContext
from pptxforge.generator.images import blip_fill_xml, picture_sp_pr
from pptxforge.generator.xml import NS_P14, attrs
from pptxforge.package.relationships import RT_AUDIO, RT_IMAGE, RT_MEDIA, RT_VIDEO
from pptxforge.schema.media import Audio, ImageFormat, MediaOptions, Video
from pptxforge.schema.units import resolve_box


# 1x1 transparent PNG used as a poster frame when the caller supplies none.
PLACEHOLDER_POSTER = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)

MEDIA_EXT_URI = "{DAA4B4D4-6D71-4841-9C94-3DE7FCFB9230}"


def _media_ext(rid: str, options: MediaOptions) -> str:
    trim = ""
    if options.has_trim:
        trim = "<p14:trim" + attrs(("st", options.start_ms), ("end", options.end_ms)) + "/>"
    body = f'<p14:media xmlns:p14="{NS_P14}" r:embed="{rid}"'
    body += f">{trim}</p14:media>" if trim else "/>"
    return f'<p:extLst><p:ext uri="{MEDIA_EXT_URI}">{body}</p:ext></p:extLst>'


def _clip_xml(kind: str, default_name: str, data: bytes, extension: str,
              link_type: str, x, y, width, height, options: MediaOptions,
              alt_text: str | None, poster: tuple[bytes, ImageFormat],
              ctx: SlideContext) -> str:
    shape_id = ctx.next_shape_id()
    part = ctx.assets.add_media(data, extension)
    link_rid = ctx.relate(link_type, part)
    media_rid = ctx.relate(RT_MEDIA, part)
    poster_rid = ctx.relate(RT_IMAGE, ctx.assets.add_image(*poster))
    box = resolve_box(x, y, width, height, ctx.slide_size)
    if options.needs_timing:
        ctx.timed_media.append((shape_id, kind, options))

    head = attrs(("id", shape_id), ("name", f"{default_name} {shape_id}"),
                 ("descr", alt_text))
    cnv = f'<p:cNvPr{head}><a:hlinkClick r:id="" action="ppaction://media"/></p:cNvPr>'
    return "".join([
        "<p:pic>",
        "<p:nvPicPr>",
        cnv,
        '<p:cNvPicPr><a:picLocks noChangeAspect="1"/></p:cNvPicPr>',
        f'<p:nvPr><a:{kind}File r:link="{link_rid}"/>',
        _media_ext(media_rid, options),
        "</p:nvPr></p:nvPicPr>",
        blip_fill_xml(poster_rid),
        picture_sp_pr(box),
        "</p:pic>",
    ])


def video_xml(video: Video, ctx: SlideContext) -> str:
    if video.poster is not None:
        poster = (video.poster.data, video.poster.image_format)
    else:
        poster = (PLACEHOLDER_POSTER, ImageFormat.PNG)
    return _clip_xml("video", "Video", video.data, video.video_format.extension,
                     RT_VIDEO, video.x, video.y, video.width, video.height,
                     video.options, video.alt_text, poster, ctx)


def audio_xml(audio: Audio, ctx: SlideContext) -> str:
    return _clip_xml("audio", "Audio", audio.data, audio.audio_format.extension,
                     RT_AUDIO, audio.x, audio.y, audio.width, audio.height,
                     audio.options, audio.alt_text,
                     (PLACEHOLDER_POSTER, ImageFormat.PNG), ctx)


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

class _Ids:
    def __init__(self) -> None:
        self.value = 0

    def next(self) -> int:
        self.value += 1
        return self.value


def _autoplay_par(shape_id: int, ids: _Ids) -> str:
    outer, inner, effect, call = ids.next(), ids.next(), ids.next(), ids.next()
    return (
        f'<p:par><p:cTn id="{outer}" fill="hold"><p:stCondLst><p:cond delay="0"/>'
        f'</p:stCondLst><p:childTnLst><p:par><p:cTn id="{inner}" fill="hold">'
        '<p:stCondLst><p:cond delay="0"/></p:stCondLst><p:childTnLst>'
        f'<p:par><p:cTn id="{effect}" presetID="1" presetClass="mediacall" '
        'presetSubtype="0" fill="hold" nodeType="afterEffect"><p:stCondLst>'
        '<p:cond delay="0"/></p:stCondLst><p:childTnLst>'
        '<p:cmd type="call" cmd="playFrom(0.0)"><p:cBhvr>'
        f'<p:cTn id="{call}" dur="indefinite" fill="hold"/>'
        f'<p:tgtEl><p:spTgt spid="{shape_id}"/></p:tgtEl></p:cBhvr></p:cmd>'
        "</p:childTnLst></p:cTn></p:par></p:childTnLst></p:cTn></p:par>"
        "</p:childTnLst></p:cTn></p:par>"
    )


def _media_node(shape_id: int, kind: str, options: MediaOptions, ids: _Ids) -> str:
    node = attrs(("vol", options.volume * 1000 if options.volume != 100 else None),
                 ("mute", True if options.mute else None))
    ctn = attrs(("id", ids.next()),
                ("repeatCount", "indefinite" if options.loop else None),
                ("fill", "hold"), ("display", False))
    return (f"<p:{kind}><p:cMediaNode{node}><p:cTn{ctn}><p:stCondLst>"
            '<p:cond delay="indefinite"/></p:stCondLst></p:cTn>'
            f'<p:tgtEl><p:spTgt spid="{shape_id}"/></p:tgtEl>'
            f"</p:cMediaNode></p:{kind}>")


def timing_xml(timed_media: list[tuple[int, str, MediaOptions]]) -> str:
    """``<p:timing>`` for a slide; empty when no clip needs playback settings.

    Auto-play clips get a main-sequence entry that starts them with the
    slide; every clip gets a media node carrying loop, mute and volume.
    """
    if not timed_media:
        return ""
    ids = _Ids()
    root = ids.next()
    children = []
    auto = [shape_id for shape_id, _, options in timed_media if options.auto_play]
    if auto:
        seq_id = ids.next()
        pars = "".join(_autoplay_par(shape_id, ids) for shape_id in auto)
        children.append(
            f'<p:seq concurrent="1" nextAc="seek"><p:cTn id="{seq_id}" '
            f'dur="indefinite" nodeType="mainSeq"><p:childTnLst>{pars}'
            "</p:childTnLst></p:cTn>"
            '<p:prevCondLst><p:cond evt="onPrev" delay="0"><p:tgtEl><p:sldTgt/>'
            "</p:tgtEl></p:cond></p:prevCondLst>"
            '<p:nextCondLst><p:cond evt="onNext" delay="0"><p:tgtEl><p:sldTgt/>'
            "</p:tgtEl></p:cond></p:nextCondLst></p:seq>"
        )
    for shape_id, kind, options in timed_media:
        children.append(_media_node(shape_id, kind, options, ids))
    return (f'<p:timing><p:tnLst><p:par><p:cTn id="{root}" dur="indefinite" '
            f'restart="never" nodeType="tmRoot"><p:childTnLst>{"".join(children)}'
            "</p:childTnLst></p:cTn></p:par></p:tnLst></p:timing>")
