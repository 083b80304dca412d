"""Linux provisioning strategy."""

from __future__ import annotations

import lzma
import shutil
import tarfile
from pathlib import Path
from typing import ClassVar

from loguru import logger

from cnvrt.errors import ArchiveEntryMissingError, ArchiveExtractionError

from .base import PlatformStrategy


class LinuxStrategy(PlatformStrategy):
    """johnvansickle.com static build shipped as ``.tar.xz``.

    The archive holds a versioned top-level directory; only the ``ffmpeg``
    file inside it is extracted.
    """

    name: ClassVar[str] = "linux"
    archive: ClassVar[str] = "tar.xz"

    def extract(self, archive_path: Path, target_path: Path) -> Path:
        logger.info(f"Extracting {self.binary_name} from tar.xz archive")
        try:
            with tarfile.open(archive_path, "r:xz") as tar:
                for member in tar:
                    if not member.isfile() or not self._is_binary_entry(member.name):
                        continue
                    src = tar.extractfile(member)
                    if src is None:
                        continue
                    with src, open(target_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    return target_path
        except (tarfile.TarError, lzma.LZMAError, EOFError, OSError) as e:
            raise ArchiveExtractionError(f"Failed to read TAR: {e}") from e

        raise ArchiveEntryMissingError("FFmpeg binary not found in TAR")
