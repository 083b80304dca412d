"""Models for the ffmpeg binary lifecycle."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ProvisionState(str, Enum):
    """States a provisioner moves through while resolving ffmpeg."""

    UNRESOLVED = "unresolved"
    CACHED_FOUND = "cached_found"
    SYSTEM_FOUND = "system_found"
    DOWNLOADING = "downloading"
    EXTRACTED = "extracted"
    READY = "ready"
    UNAVAILABLE = "unavailable"


class BinarySource(str, Enum):
    """Where a resolved binary came from."""

    CACHE = "cache"
    SYSTEM = "system"
    DOWNLOAD = "download"


class BinaryHandle(BaseModel):
    """A resolved, executable ffmpeg binary.

    For ``BinarySource.SYSTEM`` the path is the bare command name and is
    resolved through PATH by the OS.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    source: BinarySource

    def __str__(self) -> str:
        return str(self.path)
