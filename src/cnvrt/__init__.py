"""cnvrt - local image and video format conversion.

Images are converted with Pillow; videos are transcoded with FFmpeg, which
is downloaded on first use when it is not installed.

Usage:
    from cnvrt import convert_path, get_supported_formats

    outcome = convert_path("photo.png", "photo.webp", "png", "webp")
    if outcome.success:
        print(f"Written to {outcome.output_path}")
    else:
        print(f"Failed ({outcome.error_kind}): {outcome.message}")

    # What can an mkv become?
    print(get_supported_formats("mkv"))
"""

from loguru import logger

from cnvrt._version import __version__
from cnvrt.catalog import (
    audio_codec_for,
    codec_for,
    describe_video,
    get_supported_formats,
    is_compatible,
    is_image_format,
    is_supported_format,
    is_video_format,
)
from cnvrt.dispatcher import ConversionDispatcher, convert, convert_bytes, convert_path
from cnvrt.errors import (
    ConversionError,
    ImageCodecError,
    InputNotFoundError,
    ProcessError,
    ProvisionError,
    TranscodeError,
    UnsupportedFormatError,
    UnsupportedPlatformError,
)
from cnvrt.images import ImageCodec
from cnvrt.models import (
    BinaryHandle,
    ConversionOutcome,
    ConversionRequest,
    FormatDescriptor,
    TranscodeOptions,
)
from cnvrt.paths import get_downloads_folder
from cnvrt.provisioning import BinaryProvisioner
from cnvrt.transcoder import FFmpegCommand, Transcoder

logger.disable("cnvrt")

__all__ = [
    # Version
    "__version__",
    # Main functions
    "convert",
    "convert_path",
    "convert_bytes",
    "get_downloads_folder",
    # Capability queries
    "is_supported_format",
    "is_image_format",
    "is_video_format",
    "is_compatible",
    "get_supported_formats",
    "describe_video",
    "codec_for",
    "audio_codec_for",
    # Components
    "ConversionDispatcher",
    "ImageCodec",
    "Transcoder",
    "FFmpegCommand",
    "BinaryProvisioner",
    # Models
    "ConversionRequest",
    "ConversionOutcome",
    "TranscodeOptions",
    "FormatDescriptor",
    "BinaryHandle",
    # Errors
    "ConversionError",
    "InputNotFoundError",
    "UnsupportedFormatError",
    "ImageCodecError",
    "ProvisionError",
    "UnsupportedPlatformError",
    "TranscodeError",
    "ProcessError",
]
