"""Pytest configuration and fixtures."""

import io
import struct
import subprocess
import tarfile
import zipfile
from pathlib import Path

import pytest
from PIL import Image

from cnvrt import config, dispatcher
from cnvrt.images import ImageCodec

SAMPLE_SIZE = (10, 10)


def command_exists(cmd: str) -> bool:
    """Check if a command exists in PATH."""
    try:
        subprocess.run(
            [cmd, "-version"],
            capture_output=True,
            timeout=5,
        )
        return True
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point cache and staging dirs into tmp_path and ignore user config files."""
    staging = tmp_path / "staging"
    staging.mkdir()
    monkeypatch.setattr(config, "CONFIG_LOCATIONS", [])
    monkeypatch.setenv("CNVRT_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("CNVRT_TEMP_DIR", str(staging))
    for key in ("CNVRT_BITRATE", "CNVRT_PRESET", "CNVRT_DOWNLOAD_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    config.reset_config()
    dispatcher._dispatcher = None
    yield
    config.reset_config()
    dispatcher._dispatcher = None


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def has_ffmpeg() -> bool:
    """Check if ffmpeg is available."""
    return command_exists("ffmpeg")


@pytest.fixture
def sample_png(tmp_path) -> Path:
    """A 10x10 RGB PNG."""
    path = tmp_path / "sample.png"
    Image.new("RGB", SAMPLE_SIZE, (200, 40, 40)).save(path, format="PNG")
    return path


@pytest.fixture
def sample_rgba_png(tmp_path) -> Path:
    """A 10x10 PNG with a fully transparent left half."""
    path = tmp_path / "alpha.png"
    img = Image.new("RGBA", SAMPLE_SIZE, (0, 0, 255, 255))
    for x in range(5):
        for y in range(10):
            img.putpixel((x, y), (0, 0, 0, 0))
    img.save(path, format="PNG")
    return path


@pytest.fixture
def make_sample(tmp_path, sample_png):
    """Factory: write the 10x10 sample in any image output format."""

    def _make(fmt: str) -> Path:
        path = tmp_path / f"source.{fmt}"
        ImageCodec().reencode(str(sample_png), str(path), fmt)
        return path

    return _make


def build_tar_xz(entries: dict[str, bytes]) -> bytes:
    """Build an in-memory .tar.xz archive."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:xz") as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def build_zip(entries: dict[str, bytes]) -> bytes:
    """Build an in-memory .zip archive."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


FAKE_FFMPEG = b"#!/bin/sh\nexit 0\n"


def build_psd(size: tuple[int, int], color: tuple[int, int, int]) -> bytes:
    """Build a flat 8-bit RGB Photoshop file with no layers."""
    width, height = size
    header = b"8BPS" + struct.pack(">H6xHIIHH", 1, 3, height, width, 8, 3)
    # Empty color mode, image resource and layer sections, then raw planar data
    sections = struct.pack(">III", 0, 0, 0) + struct.pack(">H", 0)
    planes = b"".join(bytes([channel]) * (width * height) for channel in color)
    return header + sections + planes


def build_fits(size: tuple[int, int], value: int) -> bytes:
    """Build an 8-bit grayscale FITS image filled with ``value``."""
    width, height = size
    cards = [
        ("SIMPLE", "T"),
        ("BITPIX", "8"),
        ("NAXIS", "2"),
        ("NAXIS1", str(width)),
        ("NAXIS2", str(height)),
    ]
    header = b"".join(f"{key:<8}= {val:>20}".ljust(80).encode("ascii") for key, val in cards)
    header += b"END".ljust(80)
    header = header.ljust(2880, b" ")
    data = bytes([value]) * (width * height)
    return header + data.ljust(2880, b"\0")
