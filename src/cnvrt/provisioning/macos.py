"""macOS provisioning strategy."""

from __future__ import annotations

from typing import ClassVar

from .base import ZipPlatformStrategy


class MacOSStrategy(ZipPlatformStrategy):
    """evermeet.cx static build, a zip holding a single ``ffmpeg`` file."""

    name: ClassVar[str] = "macos"
