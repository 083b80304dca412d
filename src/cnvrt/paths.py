"""Filesystem locations used around a conversion."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def get_downloads_folder() -> Path | None:
    """Return the user's Downloads directory, or None if it does not exist."""
    if sys.platform.startswith("linux"):
        xdg = os.environ.get("XDG_DOWNLOAD_DIR")
        if xdg and Path(xdg).expanduser().is_dir():
            return Path(xdg).expanduser()
    downloads = Path.home() / "Downloads"
    return downloads if downloads.is_dir() else None


def resolve_output_path(output_path: str, input_name: str | None, target_format: str) -> str:
    """Resolve the path a conversion writes to.

    An empty path or ``.`` sends the file to the Downloads directory (or the
    current directory when there is none), named after the input with the
    target extension.
    """
    if output_path and output_path != ".":
        return output_path

    stem = Path(input_name).stem if input_name else "converted"
    directory = get_downloads_folder() or Path.cwd()
    return str(directory / f"{stem}.{target_format}")
