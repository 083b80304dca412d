"""Windows provisioning strategy."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar

from .base import ZipPlatformStrategy


class WindowsStrategy(ZipPlatformStrategy):
    """ffbinaries zip build for 64-bit Windows.

    NTFS has no execute bit, so marking the binary executable is a no-op.
    """

    name: ClassVar[str] = "windows"
    binary_name: ClassVar[str] = "ffmpeg.exe"

    def set_executable(self, path: Path) -> None:
        pass
