"""Configuration management for cnvrt.

Supports loading configuration from:
1. Environment variables (CNVRT_*)
2. Config file (~/.cnvrt/config.yaml)
3. Default values

Example config file (~/.cnvrt/config.yaml):
    provision:
      cache_dir: "/opt/cnvrt-cache"
      timeout_seconds: 900
    transcode:
      bitrate: "8000k"
      preset: "slow"
    staging:
      temp_dir: "/tmp/cnvrt"
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

# Config file search locations (in priority order)
CONFIG_LOCATIONS = [
    Path.home() / ".cnvrt" / "config.yaml",
    Path.home() / ".config" / "cnvrt" / "config.yaml",
    Path(".cnvrt.yaml"),
]

APP_DIR_NAME = "cnvrt"


def default_cache_dir() -> Path:
    """Return the per-user cache directory for cnvrt."""
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Caches"
    else:
        xdg = os.environ.get("XDG_CACHE_HOME")
        root = Path(xdg) if xdg else Path.home() / ".cache"
    return root / APP_DIR_NAME


@dataclass
class ProvisionConfig:
    """FFmpeg provisioning configuration."""

    cache_dir: str | None = None
    timeout_seconds: int = 600

    @property
    def resolved_cache_dir(self) -> Path:
        return Path(self.cache_dir).expanduser() if self.cache_dir else default_cache_dir()


@dataclass
class TranscodeConfig:
    """Default video encoding parameters."""

    bitrate: str = "5000k"
    preset: str = "medium"


@dataclass
class StagingConfig:
    """Temp file staging configuration."""

    temp_dir: str | None = None


@dataclass
class CnvrtConfig:
    """Main configuration for cnvrt."""

    provision: ProvisionConfig = field(default_factory=ProvisionConfig)
    transcode: TranscodeConfig = field(default_factory=TranscodeConfig)
    staging: StagingConfig = field(default_factory=StagingConfig)


def _load_yaml_config() -> dict[str, Any]:
    """Load configuration from the first YAML file found."""
    for config_path in CONFIG_LOCATIONS:
        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as f:
                    data = yaml.safe_load(f)
                    return data if isinstance(data, dict) else {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Could not load config file {config_path}: {e}")
                continue
    return {}


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with CNVRT_ prefix."""
    return os.environ.get(f"CNVRT_{key}", default)


def load_config() -> CnvrtConfig:
    """Load configuration from file and environment variables.

    Priority (highest first):
    1. Environment variables (CNVRT_*)
    2. Config file (~/.cnvrt/config.yaml)
    3. Default values
    """
    file_config = _load_yaml_config()

    provision_config = file_config.get("provision") or {}
    provision = ProvisionConfig(
        cache_dir=_get_env("CACHE_DIR") or provision_config.get("cache_dir"),
        timeout_seconds=int(
            _get_env("DOWNLOAD_TIMEOUT") or provision_config.get("timeout_seconds", 600)
        ),
    )

    transcode_config = file_config.get("transcode") or {}
    transcode = TranscodeConfig(
        bitrate=_get_env("BITRATE") or transcode_config.get("bitrate", "5000k"),
        preset=_get_env("PRESET") or transcode_config.get("preset", "medium"),
    )

    staging_config = file_config.get("staging") or {}
    staging = StagingConfig(
        temp_dir=_get_env("TEMP_DIR") or staging_config.get("temp_dir"),
    )

    return CnvrtConfig(provision=provision, transcode=transcode, staging=staging)


# Global config instance (lazy loaded)
_config: CnvrtConfig | None = None


def get_config() -> CnvrtConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
