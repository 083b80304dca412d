"""FFmpeg provisioning.

Supported platforms:
- Windows x86_64 (zip)
- macOS x86_64 / arm64 (zip)
- Linux x86_64 / arm64 (tar.xz)

The strategy for the running machine is selected once, on first use.
"""

from .base import PlatformStrategy, ZipPlatformStrategy
from .linux import LinuxStrategy
from .macos import MacOSStrategy
from .platforms import (
    DOWNLOAD_TABLE,
    get_platform_strategy,
    get_strategy_for_platform,
    normalize_platform,
)
from .provisioner import BinaryProvisioner, default_binary_name, get_provisioner_status
from .windows import WindowsStrategy

__all__ = [
    # Provisioner
    "BinaryProvisioner",
    "default_binary_name",
    "get_provisioner_status",
    # Strategies
    "PlatformStrategy",
    "ZipPlatformStrategy",
    "LinuxStrategy",
    "MacOSStrategy",
    "WindowsStrategy",
    # Platform selection
    "DOWNLOAD_TABLE",
    "get_platform_strategy",
    "get_strategy_for_platform",
    "normalize_platform",
]
