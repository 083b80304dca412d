"""Route conversion requests to the image codec or the video transcoder."""

from __future__ import annotations

import os
import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from loguru import logger

from cnvrt.catalog import (
    ANIMATED_IMAGE_FORMAT,
    IMAGE_OUTPUT_FORMATS,
    describe_video,
    image_strategy_for,
    is_image_format,
)
from cnvrt.config import get_config
from cnvrt.errors import ConversionError, UnsupportedFormatError
from cnvrt.images import ImageCodec
from cnvrt.models import ConversionOutcome, ConversionRequest, TranscodeOptions
from cnvrt.paths import resolve_output_path
from cnvrt.transcoder import Transcoder

STAGING_PREFIX = "cnvrt_input_"


class Route(str, Enum):
    """Conversion path chosen for a request."""

    REENCODE = "reencode"  # generic image re-encode
    IMAGE = "image"  # per-format image decode
    VIDEO = "video"


def select_route(source: str, target: str) -> Route:
    """Pick the conversion path for a normalized source/target pair.

    Precedence:
    1. Target is the animated-image format: generic re-encode for any image source
    2. Video source: transcode, if the target is a compatible container
    3. Image source: dedicated decoder when one exists, generic re-encode otherwise
    4. Anything else is unsupported

    Raises:
        UnsupportedFormatError: If no route exists
    """
    if target == ANIMATED_IMAGE_FORMAT and is_image_format(source):
        return Route.REENCODE

    descriptor = describe_video(source)
    if descriptor is not None:
        if not descriptor.can_convert_to(target):
            raise UnsupportedFormatError(target)
        return Route.VIDEO

    if is_image_format(source):
        if target not in IMAGE_OUTPUT_FORMATS:
            raise UnsupportedFormatError(target)
        return Route.IMAGE if image_strategy_for(source) else Route.REENCODE

    raise UnsupportedFormatError(source)


class ConversionDispatcher:
    """Single entry point for conversions.

    ``convert`` never raises: every failure is returned as an unsuccessful
    ``ConversionOutcome`` carrying the error message and kind.

    Args:
        image_codec: Image conversion backend (default: Pillow ImageCodec)
        transcoder: Video transcoder (default: Transcoder with its own provisioner)
        temp_dir: Where byte input is staged (default: config, then system temp)
    """

    def __init__(
        self,
        image_codec: ImageCodec | None = None,
        transcoder: Transcoder | None = None,
        temp_dir: str | None = None,
    ) -> None:
        self.image_codec = image_codec or ImageCodec()
        self._transcoder = transcoder
        self.temp_dir = temp_dir or get_config().staging.temp_dir or tempfile.gettempdir()

    @property
    def transcoder(self) -> Transcoder:
        # Created on first video request so image-only use never touches provisioning
        if self._transcoder is None:
            self._transcoder = Transcoder()
        return self._transcoder

    def convert(self, request: ConversionRequest) -> ConversionOutcome:
        """Run one conversion and report the outcome."""
        try:
            output_path = self._convert(request)
        except ConversionError as e:
            logger.warning(f"Conversion {request.source} -> {request.target} failed: {e}")
            return ConversionOutcome.failed(str(e), e.kind)
        except OSError as e:
            logger.warning(f"Conversion {request.source} -> {request.target} failed: {e}")
            return ConversionOutcome.failed(f"Conversion error: {e}", "io")

        return ConversionOutcome.ok(
            f"Successfully converted {request.source_format} to {request.target_format}",
            output_path,
        )

    def _convert(self, request: ConversionRequest) -> str:
        source, target = request.source, request.target
        route = select_route(source, target)
        logger.debug(f"Routing {source} -> {target} via {route.value}")

        output_path = resolve_output_path(request.output_path, request.input_path, target)

        with self._staged_input(request) as input_path:
            if route is Route.VIDEO:
                self.transcoder.transcode(input_path, output_path, target, request.options)
            elif route is Route.IMAGE:
                self.image_codec.convert(
                    input_path, output_path, source, target, request.keep_transparency
                )
            else:
                self.image_codec.reencode(input_path, output_path, target, request.keep_transparency)

        return output_path

    @contextmanager
    def _staged_input(self, request: ConversionRequest) -> Iterator[str]:
        """Yield a path to the request's input, staging raw bytes to a temp file.

        The staged file is removed on every exit path.
        """
        if request.input_path is not None:
            yield request.input_path
            return

        staged = os.path.join(self.temp_dir, f"{STAGING_PREFIX}{uuid.uuid4()}.{request.source}")
        try:
            with open(staged, "wb") as f:
                f.write(request.input_bytes or b"")
        except OSError as e:
            _unlink_quietly(staged)
            raise ConversionError(f"Failed to write input file: {e}") from e

        try:
            yield staged
        finally:
            _unlink_quietly(staged)


def _unlink_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove staged input {path}: {e}")


# Module-level dispatcher for the convenience functions (lazy)
_dispatcher: ConversionDispatcher | None = None


def get_dispatcher() -> ConversionDispatcher:
    """Get the shared dispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = ConversionDispatcher()
    return _dispatcher


def convert_path(
    input_path: str,
    output_path: str,
    from_format: str,
    to_format: str,
    keep_transparency: bool = True,
    options: TranscodeOptions | None = None,
) -> ConversionOutcome:
    """Convert a file on disk.

    Args:
        input_path: Source file
        output_path: Destination file ("" or "." for the Downloads directory)
        from_format: Source format tag (e.g. "png", "mkv")
        to_format: Target format tag
        keep_transparency: Keep alpha where the target supports it
        options: Video encoder options (default: from config)

    Returns:
        ConversionOutcome
    """
    request = ConversionRequest(
        input_path=input_path,
        output_path=output_path,
        source_format=from_format,
        target_format=to_format,
        keep_transparency=keep_transparency,
        options=options,
    )
    return get_dispatcher().convert(request)


def convert_bytes(
    input_data: bytes,
    output_path: str,
    from_format: str,
    to_format: str,
    keep_transparency: bool = True,
    options: TranscodeOptions | None = None,
) -> ConversionOutcome:
    """Convert in-memory file content.

    The bytes are staged to a temp file that is always cleaned up.
    """
    request = ConversionRequest(
        input_bytes=input_data,
        output_path=output_path,
        source_format=from_format,
        target_format=to_format,
        keep_transparency=keep_transparency,
        options=options,
    )
    return get_dispatcher().convert(request)


# Short alias
convert = convert_path
