"""Static format knowledge: which tags are images or videos, and how to
convert them.

This module is the only place codec names and Pillow encoder names live.
Every lookup is case-insensitive and tolerates a leading dot.
"""

from __future__ import annotations

from cnvrt.models import FormatDescriptor, ImageStrategy

DEFAULT_VIDEO_CODEC = "libx264"
DEFAULT_AUDIO_CODEC = "aac"

# Output containers every video source may target unless restricted below
_ALL_VIDEO_OUTPUTS = frozenset({"mp4", "mkv", "mov", "webm", "avi", "flv", "mpg", "ts", "ogv"})

_VIDEO_FORMATS: tuple[FormatDescriptor, ...] = (
    FormatDescriptor(
        extension="mp4",
        container="mp4",
        codec="libx264",
        aliases=("m4v",),
        compatible_outputs=_ALL_VIDEO_OUTPUTS,
    ),
    FormatDescriptor(
        extension="mkv",
        container="matroska",
        codec="libx264",
        aliases=("matroska",),
        compatible_outputs=_ALL_VIDEO_OUTPUTS,
    ),
    FormatDescriptor(
        extension="mov",
        container="mov",
        codec="libx264",
        aliases=("quicktime",),
        compatible_outputs=_ALL_VIDEO_OUTPUTS,
    ),
    FormatDescriptor(
        extension="webm",
        container="webm",
        codec="libvpx-vp9",
        audio_codec="libopus",
        compatible_outputs=_ALL_VIDEO_OUTPUTS,
    ),
    FormatDescriptor(
        extension="avi",
        container="avi",
        codec="mpeg4",
        compatible_outputs=_ALL_VIDEO_OUTPUTS,
    ),
    FormatDescriptor(
        extension="flv",
        container="flv",
        codec="libx264",
        compatible_outputs=_ALL_VIDEO_OUTPUTS,
    ),
    FormatDescriptor(
        extension="mpg",
        container="mpeg",
        codec="mpeg2video",
        aliases=("mpeg", "mpeg2"),
        compatible_outputs=_ALL_VIDEO_OUTPUTS,
    ),
    FormatDescriptor(
        extension="ts",
        container="mpegts",
        codec="libx264",
        aliases=("m2ts", "mts"),
        compatible_outputs=_ALL_VIDEO_OUTPUTS - {"flv"},
    ),
    FormatDescriptor(
        extension="ogv",
        container="ogg",
        codec="libtheora",
        aliases=("ogg",),
        compatible_outputs=frozenset({"mp4", "mkv", "mov", "avi", "webm", "ogv"}),
    ),
)

# Lookup by canonical extension and by every alias
_VIDEO_INDEX: dict[str, FormatDescriptor] = {}
for _descriptor in _VIDEO_FORMATS:
    _VIDEO_INDEX[_descriptor.extension] = _descriptor
    for _alias in _descriptor.aliases:
        _VIDEO_INDEX[_alias] = _descriptor

VIDEO_EXTENSIONS: frozenset[str] = frozenset(
    {"mp4", "m4v", "mkv", "mov", "webm", "avi", "flv", "mpg", "mpeg", "ts", "m2ts", "mts", "ogv", "ogg"}
)

# Decoder ids: "raster" plain open, "frames" first frame of an animation,
# "icon" largest entry of an icon file, "layered" flattened composite.
IMAGE_STRATEGIES: dict[str, ImageStrategy] = {
    "png": ImageStrategy(decoder="raster", encoder="PNG"),
    "apng": ImageStrategy(decoder="frames", encoder="PNG"),
    "jpg": ImageStrategy(decoder="raster", encoder="JPEG", save_mode="RGB"),
    "jpeg": ImageStrategy(decoder="raster", encoder="JPEG", save_mode="RGB"),
    "jfif": ImageStrategy(decoder="raster", encoder="JPEG", save_mode="RGB"),
    "webp": ImageStrategy(decoder="frames", encoder="WEBP"),
    "bmp": ImageStrategy(decoder="raster", encoder="BMP"),
    "gif": ImageStrategy(decoder="frames", encoder="GIF"),
    "tiff": ImageStrategy(decoder="frames", encoder="TIFF"),
    "tif": ImageStrategy(decoder="frames", encoder="TIFF"),
    "ico": ImageStrategy(decoder="icon", encoder="ICO"),
    "cur": ImageStrategy(decoder="icon"),
    "ppm": ImageStrategy(decoder="raster", encoder="PPM", save_mode="RGB"),
    "pgm": ImageStrategy(decoder="raster", encoder="PPM", save_mode="L"),
    "pbm": ImageStrategy(decoder="raster", encoder="PPM", save_mode="1"),
    "tga": ImageStrategy(decoder="raster"),
    "dds": ImageStrategy(decoder="raster"),
    "pcx": ImageStrategy(decoder="raster"),
    "psd": ImageStrategy(decoder="layered"),
    "heic": ImageStrategy(decoder="raster"),
    "heif": ImageStrategy(decoder="raster"),
}

# Image tags without a dedicated strategy go through the generic re-encoder
IMAGE_EXTENSIONS: frozenset[str] = frozenset(IMAGE_STRATEGIES) | frozenset({"avif", "fits"})

IMAGE_OUTPUT_FORMATS: tuple[str, ...] = (
    "png", "jpg", "jpeg", "webp", "bmp", "gif", "tiff", "ico", "ppm", "pgm", "pbm",
)
VIDEO_OUTPUT_FORMATS: tuple[str, ...] = (
    "mp4", "mkv", "mov", "webm", "avi", "flv", "mpg", "ts", "ogv",
)

# The image format that doubles as an animation container
ANIMATED_IMAGE_FORMAT = "gif"


def normalize(ext: str) -> str:
    """Lower-case an extension and strip a leading dot."""
    return ext.strip().lower().lstrip(".")


def is_video_format(ext: str) -> bool:
    """Check if ``ext`` is a known video extension."""
    return normalize(ext) in VIDEO_EXTENSIONS


def is_image_format(ext: str) -> bool:
    """Check if ``ext`` is a known still-image extension."""
    return normalize(ext) in IMAGE_EXTENSIONS


def is_supported_format(ext: str) -> bool:
    """Check if ``ext`` is either an image or a video extension."""
    return is_image_format(ext) or is_video_format(ext)


def describe_video(ext: str) -> FormatDescriptor | None:
    """Get the descriptor for a video extension.

    Args:
        ext: Video extension or alias (e.g. "m4v", ".MKV")

    Returns:
        FormatDescriptor or None for unknown extensions
    """
    return _VIDEO_INDEX.get(normalize(ext))


def codec_for(ext: str) -> str:
    """Get the output video codec for a target format.

    Total: unknown or empty input gets the default codec.
    """
    descriptor = describe_video(ext)
    return descriptor.codec if descriptor else DEFAULT_VIDEO_CODEC


def audio_codec_for(ext: str) -> str:
    """Get the output audio codec for a target format."""
    descriptor = describe_video(ext)
    return descriptor.audio_codec if descriptor else DEFAULT_AUDIO_CODEC


def image_strategy_for(ext: str) -> ImageStrategy | None:
    """Get the dedicated image strategy for ``ext``, if it has one."""
    return IMAGE_STRATEGIES.get(normalize(ext))


def get_supported_formats(ext: str) -> list[str]:
    """List formats that ``ext`` can be converted to.

    Video sources get the video output list, everything else the image list.
    """
    if is_video_format(ext):
        return list(VIDEO_OUTPUT_FORMATS)
    return list(IMAGE_OUTPUT_FORMATS)


def is_compatible(source: str, target: str) -> bool:
    """Check whether ``source`` can be converted to ``target``."""
    source, target = normalize(source), normalize(target)
    descriptor = describe_video(source)
    if descriptor is not None:
        return descriptor.can_convert_to(target)
    if is_image_format(source):
        return target in IMAGE_OUTPUT_FORMATS
    return False


def get_all_video_formats() -> list[str]:
    """Return every recognized video extension, sorted."""
    return sorted(VIDEO_EXTENSIONS)


def get_all_image_formats() -> list[str]:
    """Return every recognized image extension, sorted."""
    return sorted(IMAGE_EXTENSIONS)
