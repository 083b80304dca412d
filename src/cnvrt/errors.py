"""Exception types for cnvrt.

Every error raised inside the package derives from ``ConversionError`` and
carries a ``kind`` tag. The dispatcher turns these into
``ConversionOutcome`` values, so the tag is what callers see as
``outcome.error_kind``.
"""

from __future__ import annotations

from typing import ClassVar


class ConversionError(Exception):
    """Base class for all cnvrt errors."""

    kind: ClassVar[str] = "conversion"


class InputNotFoundError(ConversionError):
    """Input file does not exist."""

    kind: ClassVar[str] = "file_not_found"

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class UnsupportedFormatError(ConversionError):
    """Format (or format pair) is not supported."""

    kind: ClassVar[str] = "unsupported_format"

    def __init__(self, fmt: str) -> None:
        super().__init__(f"Unsupported format: {fmt}")
        self.format = fmt


class ImageCodecError(ConversionError):
    """Image decode or encode failed."""

    kind: ClassVar[str] = "image_codec"


# --- Provisioning ---


class ProvisionError(ConversionError):
    """The ffmpeg binary could not be made available."""

    kind: ClassVar[str] = "provision"


class UnsupportedPlatformError(ProvisionError):
    """No ffmpeg build is known for this OS/architecture."""

    def __init__(self, system: str, machine: str) -> None:
        super().__init__(f"Unsupported platform for FFmpeg download: {system}/{machine}")
        self.system = system
        self.machine = machine


class BinaryDownloadError(ProvisionError):
    """Archive download failed."""


class ArchiveExtractionError(ProvisionError):
    """Archive could not be read."""


class ArchiveEntryMissingError(ArchiveExtractionError):
    """Archive was readable but holds no ffmpeg binary."""


class PermissionSetError(ProvisionError):
    """Extracted binary could not be made executable."""


# --- Transcoding ---


class TranscodeError(ConversionError):
    """Video transcoding failed.

    When the failure came from provisioning, ``kind`` reports ``provision``
    so callers can tell a missing encoder from a failed encode.
    """

    kind: ClassVar[str] = "transcode"

    def __init__(self, message: str, cause: ConversionError | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.kind = cause.kind  # type: ignore[misc]


class ProcessError(TranscodeError):
    """ffmpeg could not be spawned or exited with a non-zero status."""

    kind: ClassVar[str] = "process"

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
