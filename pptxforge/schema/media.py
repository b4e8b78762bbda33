"""Embedded binary assets: images, video and audio.

Each record keeps its raw bytes; ``from_file`` constructors read from disk
and infer the format tag from the file extension.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pptxforge.errors import InvalidInputError, MissingAssetError, UnsupportedFormatError
from pptxforge.schema.colors import Color
from pptxforge.schema.hyperlink import Hyperlink
from pptxforge.schema.units import Length, length_to_dict, parse_dimension


def _read_asset(path: str | Path) -> bytes:
    path = Path(path)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise MissingAssetError(f"Cannot read {path}: {exc.strerror or exc}") from exc


def _extension(path: str | Path) -> str:
    return Path(path).suffix.lower().lstrip(".")


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------

class ImageFormat(Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def from_extension(cls, ext: str) -> "ImageFormat":
        ext = ext.lower().lstrip(".")
        ext = {"jpg": "jpeg", "tif": "tiff"}.get(ext, ext)
        try:
            return cls(ext)
        except ValueError:
            raise UnsupportedFormatError(f"Unsupported image format {ext!r}") from None

    @classmethod
    def sniff(cls, data: bytes) -> "ImageFormat":
        """Detect the format from magic bytes."""
        if data.startswith(b"\x89PNG\r\n\x1a\n"):
            return cls.PNG
        if data.startswith(b"\xff\xd8\xff"):
            return cls.JPEG
        if data[:6] in (b"GIF87a", b"GIF89a"):
            return cls.GIF
        if data.startswith(b"BM"):
            return cls.BMP
        if data[:4] in (b"II*\x00", b"MM\x00*"):
            return cls.TIFF
        raise UnsupportedFormatError("Unrecognized image data")


class VideoFormat(Enum):
    MP4 = "mp4"
    WMV = "wmv"
    AVI = "avi"
    MOV = "mov"
    MKV = "mkv"
    WEBM = "webm"
    M4V = "m4v"

    @property
    def mime_type(self) -> str:
        return _VIDEO_MIME[self]

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def from_extension(cls, ext: str) -> "VideoFormat":
        try:
            return cls(ext.lower().lstrip("."))
        except ValueError:
            raise UnsupportedFormatError(f"Unsupported video format {ext!r}") from None


_VIDEO_MIME = {
    VideoFormat.MP4: "video/mp4",
    VideoFormat.WMV: "video/x-ms-wmv",
    VideoFormat.AVI: "video/x-msvideo",
    VideoFormat.MOV: "video/quicktime",
    VideoFormat.MKV: "video/x-matroska",
    VideoFormat.WEBM: "video/webm",
    VideoFormat.M4V: "video/x-m4v",
}


class AudioFormat(Enum):
    MP3 = "mp3"
    WAV = "wav"
    WMA = "wma"
    M4A = "m4a"
    OGG = "ogg"
    FLAC = "flac"
    AAC = "aac"

    @property
    def mime_type(self) -> str:
        return _AUDIO_MIME[self]

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def from_extension(cls, ext: str) -> "AudioFormat":
        try:
            return cls(ext.lower().lstrip("."))
        except ValueError:
            raise UnsupportedFormatError(f"Unsupported audio format {ext!r}") from None


_AUDIO_MIME = {
    AudioFormat.MP3: "audio/mpeg",
    AudioFormat.WAV: "audio/wav",
    AudioFormat.WMA: "audio/x-ms-wma",
    AudioFormat.M4A: "audio/mp4",
    AudioFormat.OGG: "audio/ogg",
    AudioFormat.FLAC: "audio/flac",
    AudioFormat.AAC: "audio/aac",
}


# ---------------------------------------------------------------------------
# Image effects
# ---------------------------------------------------------------------------

class EffectKind(Enum):
    SHADOW = "shadow"
    REFLECTION = "reflection"
    GLOW = "glow"
    SOFT_EDGES = "soft_edges"
    BLUR = "blur"
    GRAYSCALE = "grayscale"


_RADIUS_EFFECTS = frozenset({EffectKind.GLOW, EffectKind.SOFT_EDGES, EffectKind.BLUR})


@dataclass(frozen=True)
class ImageEffect:
    """One picture effect. ``radius`` (EMU) applies to glow, soft edges, blur."""
    kind: EffectKind
    radius: int | None = None
    color: Color | None = None
    alpha: int | None = None         # 1/1000 percent

    def __post_init__(self) -> None:
        if self.kind in _RADIUS_EFFECTS:
            if self.radius is None:
                raise InvalidInputError(f"{self.kind.value} effect needs a radius")
            if self.radius < 0:
                raise InvalidInputError(f"Effect radius {self.radius} must not be negative")
        if self.kind is EffectKind.GLOW and self.color is None:
            raise InvalidInputError("glow effect needs a color")
        if self.alpha is not None and not 0 <= self.alpha <= 100_000:
            raise InvalidInputError(f"Effect alpha {self.alpha} out of range 0-100000")

    @classmethod
    def shadow(cls) -> "ImageEffect":
        return cls(EffectKind.SHADOW)

    @classmethod
    def reflection(cls) -> "ImageEffect":
        return cls(EffectKind.REFLECTION)

    @classmethod
    def glow(cls, radius: int = 63_500, color: str = "FFC000",
             alpha: int = 60_000) -> "ImageEffect":
        return cls(EffectKind.GLOW, radius=radius, color=Color.parse(color), alpha=alpha)

    @classmethod
    def soft_edges(cls, radius: int = 63_500) -> "ImageEffect":
        return cls(EffectKind.SOFT_EDGES, radius=radius)

    @classmethod
    def blur(cls, radius: int = 38_100) -> "ImageEffect":
        return cls(EffectKind.BLUR, radius=radius)

    @classmethod
    def grayscale(cls) -> "ImageEffect":
        return cls(EffectKind.GRAYSCALE)

    def to_dict(self) -> dict | str:
        if self.radius is None and self.color is None:
            return self.kind.value
        d: dict[str, Any] = {"kind": self.kind.value}
        if self.radius is not None:
            d["radius"] = self.radius
        if self.color is not None:
            d["color"] = self.color.to_dict()
        if self.alpha is not None:
            d["alpha"] = self.alpha
        return d

    @classmethod
    def from_dict(cls, d: dict | str) -> "ImageEffect":
        if isinstance(d, str):
            d = {"kind": d}
        kind = EffectKind(d["kind"])
        factory = getattr(cls, kind.value)
        accepted = {
            EffectKind.GLOW: ("radius", "color", "alpha"),
            EffectKind.SOFT_EDGES: ("radius",),
            EffectKind.BLUR: ("radius",),
        }.get(kind, ())
        return factory(**{k: d[k] for k in accepted if k in d})


@dataclass(frozen=True)
class Crop:
    """Crop insets in 1/1000 percent of the source image (``<a:srcRect>``)."""
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    def __post_init__(self) -> None:
        for side in (self.left, self.top, self.right, self.bottom):
            if not 0 <= side <= 100_000:
                raise InvalidInputError(f"Crop value {side} out of range 0-100000")
        if self.left + self.right >= 100_000 or self.top + self.bottom >= 100_000:
            raise InvalidInputError("Crop removes the whole image")

    @property
    def is_empty(self) -> bool:
        return not (self.left or self.top or self.right or self.bottom)


# ---------------------------------------------------------------------------
# Image
# ---------------------------------------------------------------------------

@dataclass
class Image:
    """A raster picture placed on a slide."""
    data: bytes
    image_format: ImageFormat
    x: Length
    y: Length
    width: Length
    height: Length
    crop: Crop | None = None
    effects: list[ImageEffect] = field(default_factory=list)
    alt_text: str | None = None
    hyperlink: Hyperlink | None = None
    name: str | None = None
    source: str | None = None        # Original path, kept for YAML round-trips

    def __post_init__(self) -> None:
        if not self.data:
            raise InvalidInputError("Image has no data")
        if isinstance(self.image_format, str):
            self.image_format = ImageFormat.from_extension(self.image_format)

    @classmethod
    def from_file(cls, path: str | Path, x: Length, y: Length,
                  width: Length, height: Length, **kwargs) -> "Image":
        image_format = ImageFormat.from_extension(_extension(path))
        return cls(_read_asset(path), image_format, x, y, width, height,
                   source=str(path), **kwargs)

    @classmethod
    def from_bytes(cls, data: bytes, x: Length, y: Length,
                   width: Length, height: Length, **kwargs) -> "Image":
        return cls(data, ImageFormat.sniff(data), x, y, width, height, **kwargs)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "path": self.source or "",
            "x": length_to_dict(self.x), "y": length_to_dict(self.y),
            "width": length_to_dict(self.width),
            "height": length_to_dict(self.height),
        }
        if self.crop and not self.crop.is_empty:
            d["crop"] = [self.crop.left, self.crop.top, self.crop.right, self.crop.bottom]
        if self.effects:
            d["effects"] = [e.to_dict() for e in self.effects]
        if self.alt_text:
            d["alt_text"] = self.alt_text
        if self.hyperlink:
            d["hyperlink"] = self.hyperlink.to_dict()
        if self.name:
            d["name"] = self.name
        return d

    @classmethod
    def from_dict(cls, d: dict, base_dir: Path | None = None) -> "Image":
        path = Path(d["path"])
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        crop = d.get("crop")
        return cls.from_file(
            path,
            parse_dimension(d["x"]), parse_dimension(d["y"]),
            parse_dimension(d["width"]), parse_dimension(d["height"]),
            crop=Crop(*crop) if crop else None,
            effects=[ImageEffect.from_dict(e) for e in d.get("effects", [])],
            alt_text=d.get("alt_text"),
            hyperlink=Hyperlink.from_dict(d["hyperlink"]) if d.get("hyperlink") else None,
            name=d.get("name"),
        )


# ---------------------------------------------------------------------------
# Video / audio
# ---------------------------------------------------------------------------

@dataclass
class MediaOptions:
    """Playback options; trim points are in milliseconds."""
    auto_play: bool = False
    loop: bool = False
    mute: bool = False
    volume: int = 100
    start_ms: int | None = None
    end_ms: int | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.volume <= 100:
            raise InvalidInputError(f"Volume {self.volume} out of range 0-100")
        for value in (self.start_ms, self.end_ms):
            if value is not None and value < 0:
                raise InvalidInputError(f"Negative trim point {value}")
        if (self.start_ms is not None and self.end_ms is not None
                and self.end_ms <= self.start_ms):
            raise InvalidInputError("Trim end must come after trim start")

    @property
    def has_trim(self) -> bool:
        return self.start_ms is not None or self.end_ms is not None

    @property
    def needs_timing(self) -> bool:
        return self.auto_play or self.loop or self.mute or self.volume != 100

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        for key in ("auto_play", "loop", "mute"):
            if getattr(self, key):
                d[key] = True
        if self.volume != 100:
            d["volume"] = self.volume
        if self.start_ms is not None:
            d["start_ms"] = self.start_ms
        if self.end_ms is not None:
            d["end_ms"] = self.end_ms
        return d

    @classmethod
    def from_dict(cls, d: dict | None) -> "MediaOptions":
        d = d or {}
        return cls(
            auto_play=d.get("auto_play", False),
            loop=d.get("loop", False),
            mute=d.get("mute", False),
            volume=d.get("volume", 100),
            start_ms=d.get("start_ms"),
            end_ms=d.get("end_ms"),
        )


@dataclass
class Video:
    data: bytes
    video_format: VideoFormat
    x: Length
    y: Length
    width: Length
    height: Length
    options: MediaOptions = field(default_factory=MediaOptions)
    poster: Image | None = None
    alt_text: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.data:
            raise InvalidInputError("Video has no data")
        if isinstance(self.video_format, str):
            self.video_format = VideoFormat.from_extension(self.video_format)

    @classmethod
    def from_file(cls, path: str | Path, x: Length, y: Length,
                  width: Length, height: Length, **kwargs) -> "Video":
        video_format = VideoFormat.from_extension(_extension(path))
        return cls(_read_asset(path), video_format, x, y, width, height,
                   source=str(path), **kwargs)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "path": self.source or "",
            "x": length_to_dict(self.x), "y": length_to_dict(self.y),
            "width": length_to_dict(self.width),
            "height": length_to_dict(self.height),
        }
        if self.options.to_dict():
            d["options"] = self.options.to_dict()
        if self.poster and self.poster.source:
            d["poster"] = self.poster.source
        if self.alt_text:
            d["alt_text"] = self.alt_text
        return d

    @classmethod
    def from_dict(cls, d: dict, base_dir: Path | None = None) -> "Video":
        path = _relative(d["path"], base_dir)
        x, y = parse_dimension(d["x"]), parse_dimension(d["y"])
        w, h = parse_dimension(d["width"]), parse_dimension(d["height"])
        poster = None
        if d.get("poster"):
            poster = Image.from_file(_relative(d["poster"], base_dir), x, y, w, h)
        return cls.from_file(path, x, y, w, h,
                             options=MediaOptions.from_dict(d.get("options")),
                             poster=poster, alt_text=d.get("alt_text"))


@dataclass
class Audio:
    data: bytes
    audio_format: AudioFormat
    x: Length
    y: Length
    width: Length
    height: Length
    options: MediaOptions = field(default_factory=MediaOptions)
    alt_text: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.data:
            raise InvalidInputError("Audio has no data")
        if isinstance(self.audio_format, str):
            self.audio_format = AudioFormat.from_extension(self.audio_format)

    @classmethod
    def from_file(cls, path: str | Path, x: Length, y: Length,
                  width: Length, height: Length, **kwargs) -> "Audio":
        audio_format = AudioFormat.from_extension(_extension(path))
        return cls(_read_asset(path), audio_format, x, y, width, height,
                   source=str(path), **kwargs)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "path": self.source or "",
            "x": length_to_dict(self.x), "y": length_to_dict(self.y),
            "width": length_to_dict(self.width),
            "height": length_to_dict(self.height),
        }
        if self.options.to_dict():
            d["options"] = self.options.to_dict()
        if self.alt_text:
            d["alt_text"] = self.alt_text
        return d

    @classmethod
    def from_dict(cls, d: dict, base_dir: Path | None = None) -> "Audio":
        return cls.from_file(
            _relative(d["path"], base_dir),
            parse_dimension(d["x"]), parse_dimension(d["y"]),
            parse_dimension(d["width"]), parse_dimension(d["height"]),
            options=MediaOptions.from_dict(d.get("options")),
            alt_text=d.get("alt_text"),
        )


def _relative(path: str, base_dir: Path | None) -> Path:
    p = Path(path)
    if base_dir is not None and not p.is_absolute():
        return base_dir / p
    return p
