"""Platform detection and download URL selection."""

from __future__ import annotations

import functools
import platform

from cnvrt.errors import UnsupportedPlatformError

from .base import PlatformStrategy
from .linux import LinuxStrategy
from .macos import MacOSStrategy
from .windows import WindowsStrategy

# (os, arch) -> (strategy class, download URL)
DOWNLOAD_TABLE: dict[tuple[str, str], tuple[type[PlatformStrategy], str]] = {
    ("windows", "x86_64"): (
        WindowsStrategy,
        "https://github.com/ffbinaries/ffbinaries-prebuilt/releases/download/v6.1/ffmpeg-6.1-win-64.zip",
    ),
    ("macos", "x86_64"): (MacOSStrategy, "https://evermeet.cx/ffmpeg/getrelease/ffmpeg/zip"),
    ("macos", "arm64"): (MacOSStrategy, "https://evermeet.cx/ffmpeg/getrelease/ffmpeg/zip"),
    ("linux", "x86_64"): (
        LinuxStrategy,
        "https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-amd64-static.tar.xz",
    ),
    ("linux", "arm64"): (
        LinuxStrategy,
        "https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-arm64-static.tar.xz",
    ),
}

_SYSTEM_ALIASES = {"darwin": "macos", "win32": "windows", "cygwin": "windows"}
_MACHINE_ALIASES = {"amd64": "x86_64", "x64": "x86_64", "aarch64": "arm64", "armv8": "arm64"}


def normalize_platform(system: str, machine: str) -> tuple[str, str]:
    """Map ``platform.system()``/``platform.machine()`` spellings to table keys."""
    system = system.lower()
    machine = machine.lower()
    return _SYSTEM_ALIASES.get(system, system), _MACHINE_ALIASES.get(machine, machine)


def get_strategy_for_platform(system: str, machine: str) -> PlatformStrategy:
    """Get the provisioning strategy for an OS/architecture pair.

    Pure: no filesystem or network access.

    Raises:
        UnsupportedPlatformError: If no build is known for the pair
    """
    entry = DOWNLOAD_TABLE.get(normalize_platform(system, machine))
    if entry is None:
        raise UnsupportedPlatformError(system, machine)
    strategy_cls, url = entry
    return strategy_cls(url)


@functools.lru_cache(maxsize=1)
def get_platform_strategy() -> PlatformStrategy:
    """Get the strategy for the running machine (computed once)."""
    return get_strategy_for_platform(platform.system(), platform.machine())
