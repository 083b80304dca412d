"""Base class for platform provisioning strategies."""

from __future__ import annotations

import os
import shutil
import stat
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import ClassVar

import httpx
from loguru import logger

from cnvrt.errors import (
    ArchiveEntryMissingError,
    ArchiveExtractionError,
    BinaryDownloadError,
    PermissionSetError,
)

CHUNK_SIZE = 1024 * 1024


class PlatformStrategy(ABC):
    """Download, extract and mark executable one ffmpeg build.

    One subclass exists per operating system. An instance is bound to the
    download URL chosen for the current architecture.

    Attributes:
        name: Operating system this strategy serves
        archive: Archive format of the download ("zip" or "tar.xz")
        binary_name: File name of the binary inside the archive and in the cache
    """

    name: ClassVar[str] = "base"
    archive: ClassVar[str] = ""
    binary_name: ClassVar[str] = "ffmpeg"

    def __init__(self, url: str) -> None:
        self.url = url

    def download(
        self,
        dest: Path,
        timeout: float = 600,
        transport: httpx.BaseTransport | None = None,
    ) -> Path:
        """Stream the archive at ``self.url`` into ``dest``.

        Raises:
            BinaryDownloadError: On any HTTP or filesystem failure
        """
        logger.info(f"Downloading FFmpeg from {self.url}")
        try:
            with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
                with client.stream("GET", self.url) as response:
                    response.raise_for_status()
                    with open(dest, "wb") as f:
                        for chunk in response.iter_bytes(CHUNK_SIZE):
                            f.write(chunk)
        except httpx.HTTPError as e:
            raise BinaryDownloadError(f"Failed to download FFmpeg: {e}") from e
        except OSError as e:
            raise BinaryDownloadError(f"Failed to write FFmpeg download to {dest}: {e}") from e

        logger.debug(f"Download complete: {dest} ({dest.stat().st_size} bytes)")
        return dest

    @abstractmethod
    def extract(self, archive_path: Path, target_path: Path) -> Path:
        """Extract the ffmpeg binary from ``archive_path`` to ``target_path``.

        Raises:
            ArchiveExtractionError: If the archive cannot be read
            ArchiveEntryMissingError: If no ffmpeg binary is inside
        """
        pass

    def set_executable(self, path: Path) -> None:
        """Add execute permission for user, group and others."""
        try:
            mode = path.stat().st_mode
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            raise PermissionSetError(f"Failed to set permissions on {path}: {e}") from e

    def _is_binary_entry(self, entry_name: str) -> bool:
        return PurePosixPath(entry_name.replace("\\", "/")).name == self.binary_name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, url={self.url!r})"


class ZipPlatformStrategy(PlatformStrategy):
    """Strategy for builds shipped as a zip archive."""

    archive: ClassVar[str] = "zip"

    def extract(self, archive_path: Path, target_path: Path) -> Path:
        logger.info(f"Extracting {self.binary_name} from zip archive")
        try:
            with zipfile.ZipFile(archive_path) as zf:
                for info in zf.infolist():
                    if info.is_dir() or not self._is_binary_entry(info.filename):
                        continue
                    with zf.open(info) as src, open(target_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    return target_path
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveExtractionError(f"Failed to read ZIP: {e}") from e

        raise ArchiveEntryMissingError("FFmpeg binary not found in ZIP")
