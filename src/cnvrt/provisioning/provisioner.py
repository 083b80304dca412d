"""Locate or acquire a working ffmpeg binary."""

from __future__ import annotations

import os
import subprocess
import threading
import uuid
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from cnvrt.config import get_config
from cnvrt.errors import ProvisionError
from cnvrt.models import BinaryHandle, BinarySource, ProvisionState

from .base import PlatformStrategy
from .platforms import get_platform_strategy

SYSTEM_BINARY = "ffmpeg"
VERSION_CHECK_TIMEOUT = 10

# Serializes first-run provisioning inside this process
_PROVISION_LOCK = threading.Lock()


def default_binary_name() -> str:
    """File name of the ffmpeg executable on this OS."""
    return "ffmpeg.exe" if os.name == "nt" else "ffmpeg"


class BinaryProvisioner:
    """Make sure an ffmpeg binary is available.

    Resolution order for ``ensure()``:
    1. A binary already in the per-user cache directory
    2. ``ffmpeg`` on PATH (must answer ``-version`` with exit status 0)
    3. Download the platform archive, extract the binary into the cache

    Once step 3 has succeeded, later calls stop at step 1. There is no retry;
    a failure raises and the caller may call ``ensure()`` again.

    Args:
        cache_dir: Cache directory (default: from config)
        strategy: Platform strategy (default: selected for the running machine)
        system_binary: Command name to look up on PATH
        timeout: Download timeout in seconds (default: from config)
        transport: httpx transport override, used by tests
    """

    def __init__(
        self,
        cache_dir: Path | str | None = None,
        strategy: PlatformStrategy | None = None,
        system_binary: str = SYSTEM_BINARY,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        config = get_config().provision
        self.cache_dir = Path(cache_dir) if cache_dir else config.resolved_cache_dir
        self.system_binary = system_binary
        self.timeout = timeout if timeout is not None else config.timeout_seconds
        self.transport = transport
        self._strategy = strategy
        self.state = ProvisionState.UNRESOLVED

    @property
    def strategy(self) -> PlatformStrategy:
        """Platform strategy in use (selected for the running machine if not given)."""
        return self._strategy or get_platform_strategy()

    @property
    def binary_name(self) -> str:
        if self._strategy is not None:
            return self._strategy.binary_name
        return default_binary_name()

    @property
    def cache_path(self) -> Path:
        """Where the cached binary lives (whether or not it exists yet)."""
        return self.cache_dir / self.binary_name

    def locate_cached(self) -> Path | None:
        """Return the cached binary if present. Presence is enough."""
        path = self.cache_path
        return path if path.is_file() else None

    def locate_system(self) -> bool:
        """Check if ``ffmpeg -version`` runs and exits with status 0."""
        try:
            result = subprocess.run(
                [self.system_binary, "-version"],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=VERSION_CHECK_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def ensure(self) -> BinaryHandle:
        """Resolve a usable ffmpeg binary, downloading it if necessary.

        Returns:
            BinaryHandle for the resolved binary

        Raises:
            ProvisionError: If the binary cannot be found or acquired
        """
        with _PROVISION_LOCK:
            self.state = ProvisionState.UNRESOLVED

            cached = self.locate_cached()
            if cached is not None:
                self.state = ProvisionState.CACHED_FOUND
                logger.debug(f"Using cached FFmpeg: {cached}")
                return self._ready(cached.resolve(), BinarySource.CACHE)

            if self.locate_system():
                self.state = ProvisionState.SYSTEM_FOUND
                logger.debug(f"Using system FFmpeg: {self.system_binary}")
                return self._ready(Path(self.system_binary), BinarySource.SYSTEM)

            try:
                path = self._provision()
            except ProvisionError:
                self.state = ProvisionState.UNAVAILABLE
                raise
            return self._ready(path, BinarySource.DOWNLOAD)

    def _ready(self, path: Path, source: BinarySource) -> BinaryHandle:
        self.state = ProvisionState.READY
        return BinaryHandle(path=path, source=source)

    def _provision(self) -> Path:
        """Download and install the binary into the cache directory."""
        strategy = self.strategy

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProvisionError(f"Failed to create cache directory {self.cache_dir}: {e}") from e

        token = uuid.uuid4().hex
        archive_path = self.cache_dir / f"ffmpeg-download-{token}.tmp"
        staged_path = self.cache_dir / f".{strategy.binary_name}.{token}.partial"
        target_path = self.cache_dir / strategy.binary_name

        logger.info("FFmpeg not found. Downloading (this may take a few minutes)...")
        self.state = ProvisionState.DOWNLOADING
        try:
            strategy.download(archive_path, timeout=self.timeout, transport=self.transport)
            strategy.extract(archive_path, staged_path)
            self.state = ProvisionState.EXTRACTED
            strategy.set_executable(staged_path)
            try:
                os.replace(staged_path, target_path)
            except OSError as e:
                raise ProvisionError(f"Failed to move FFmpeg into {target_path}: {e}") from e
        finally:
            archive_path.unlink(missing_ok=True)
            staged_path.unlink(missing_ok=True)

        logger.info(f"FFmpeg ready at {target_path}")
        return target_path.resolve()


def get_provisioner_status(provisioner: BinaryProvisioner | None = None) -> dict[str, Any]:
    """Describe how ffmpeg would be resolved, without downloading anything.

    Returns:
        Dict with cache path, cached/system availability and download info.
    """
    provisioner = provisioner or BinaryProvisioner()
    status: dict[str, Any] = {
        "cache_path": str(provisioner.cache_path),
        "cached": provisioner.locate_cached() is not None,
        "system": provisioner.locate_system(),
    }
    try:
        strategy = provisioner.strategy
        status["platform"] = strategy.name
        status["download_url"] = strategy.url
    except ProvisionError as e:
        status["platform"] = None
        status["download_url"] = None
        status["error"] = str(e)
    return status
