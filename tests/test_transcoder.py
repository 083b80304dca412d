"""Tests for ffmpeg command construction and execution."""

import subprocess
from pathlib import Path

import pytest

from cnvrt import transcoder as transcoder_module
from cnvrt.errors import (
    BinaryDownloadError,
    InputNotFoundError,
    ProcessError,
    TranscodeError,
)
from cnvrt.models import BinaryHandle, BinarySource, TranscodeOptions
from cnvrt.transcoder import FFmpegCommand, Transcoder

DEFAULT_OPTIONS = TranscodeOptions()


class FakeProvisioner:
    """Stands in for BinaryProvisioner; never touches the network."""

    def __init__(self, path: str = "/opt/ffmpeg", error: Exception | None = None):
        self.path = path
        self.error = error
        self.calls = 0

    def ensure(self) -> BinaryHandle:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return BinaryHandle(path=Path(self.path), source=BinarySource.CACHE)


class RecordingRun:
    """Replacement for subprocess.run that records argv and kwargs."""

    def __init__(self, returncode: int = 0, error: Exception | None = None):
        self.returncode = returncode
        self.error = error
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(args, self.returncode)


@pytest.fixture
def input_file(tmp_path) -> Path:
    path = tmp_path / "clip.mkv"
    path.write_bytes(b"\x1aE\xdf\xa3 not really matroska")
    return path


class TestFFmpegCommand:
    def test_webm_arguments(self):
        command = FFmpegCommand.for_target("ffmpeg", "in.mp4", "out.webm", "webm", DEFAULT_OPTIONS)
        assert command.to_args() == [
            "ffmpeg", "-i", "in.mp4", "-y",
            "-c:v", "libvpx-vp9", "-b:v", "5000k", "-preset", "medium",
            "-c:a", "libopus", "-b:a", "128k",
            "out.webm",
        ]  # fmt: skip

    def test_mp4_arguments(self):
        options = TranscodeOptions(bitrate="2000k", preset="fast")
        command = FFmpegCommand.for_target("/c/ffmpeg", "a.mov", "b.mp4", "mp4", options)
        args = command.to_args()

        assert args[0] == "/c/ffmpeg"
        assert args[args.index("-c:v") + 1] == "libx264"
        assert args[args.index("-b:v") + 1] == "2000k"
        assert args[args.index("-preset") + 1] == "fast"
        assert args[args.index("-c:a") + 1] == "aac"
        assert args[args.index("-b:a") + 1] == "128k"
        assert args[-1] == "b.mp4"

    def test_flag_order(self):
        """Input comes first, then -y, then codecs, then the output path last."""
        args = FFmpegCommand.for_target("ffmpeg", "x", "y", "avi", DEFAULT_OPTIONS).to_args()
        assert args.index("-i") < args.index("-y") < args.index("-c:v") < args.index("-c:a")
        assert args[-1] == "y"

    @pytest.mark.parametrize("target", ["mpg", "ogv", "avi", "ts"])
    def test_non_webm_targets_use_aac(self, target):
        command = FFmpegCommand.for_target("ffmpeg", "x", f"y.{target}", target, DEFAULT_OPTIONS)
        assert command.audio_codec == "aac"

    def test_audio_bitrate_is_fixed(self):
        options = TranscodeOptions(bitrate="12000k", preset="slow")
        args = FFmpegCommand.for_target("ffmpeg", "x", "y.mkv", "mkv", options).to_args()
        assert args[args.index("-b:a") + 1] == "128k"
        assert "audio_bitrate" not in TranscodeOptions.model_fields

    def test_unknown_target_falls_back_to_default_codec(self):
        command = FFmpegCommand.for_target("ffmpeg", "x", "y.xyz", "xyz", DEFAULT_OPTIONS)
        assert command.video_codec == "libx264"
        assert command.audio_codec == "aac"

    def test_str_quotes_paths(self):
        command = FFmpegCommand.for_target(
            "ffmpeg", "my clip.mkv", "out.mp4", "mp4", DEFAULT_OPTIONS
        )
        assert "my clip.mkv" in str(command)
        assert str(command).startswith("ffmpeg")


class TestTranscoder:
    def test_build_command_uses_config_defaults(self, monkeypatch):
        from cnvrt.config import reset_config

        monkeypatch.setenv("CNVRT_BITRATE", "800k")
        monkeypatch.setenv("CNVRT_PRESET", "veryfast")
        reset_config()

        command = Transcoder(FakeProvisioner()).build_command("ffmpeg", "a", "b", ".MP4")

        assert command.bitrate == "800k"
        assert command.preset == "veryfast"
        assert command.video_codec == "libx264"

    def test_missing_input(self, tmp_path):
        provisioner = FakeProvisioner()
        with pytest.raises(InputNotFoundError):
            Transcoder(provisioner).transcode(str(tmp_path / "nope.mkv"), "out.mp4", "mp4")
        assert provisioner.calls == 0

    def test_provisioning_failure(self, input_file, tmp_path, monkeypatch):
        run = RecordingRun()
        monkeypatch.setattr(transcoder_module.subprocess, "run", run)
        provisioner = FakeProvisioner(error=BinaryDownloadError("Failed to download FFmpeg: offline"))

        with pytest.raises(TranscodeError) as exc_info:
            Transcoder(provisioner).transcode(str(input_file), str(tmp_path / "o.mp4"), "mp4")

        assert exc_info.value.kind == "provision"
        assert "provisioning failed" in str(exc_info.value)
        assert run.calls == []

    def test_success(self, input_file, tmp_path, monkeypatch):
        run = RecordingRun(returncode=0)
        monkeypatch.setattr(transcoder_module.subprocess, "run", run)
        output = str(tmp_path / "out.webm")

        Transcoder(FakeProvisioner("/opt/ffmpeg")).transcode(str(input_file), output, "webm")

        assert len(run.calls) == 1
        args, kwargs = run.calls[0]
        assert args[0] == str(Path("/opt/ffmpeg"))
        assert args[args.index("-i") + 1] == str(input_file)
        assert args[-1] == output
        assert "libvpx-vp9" in args
        for stream in ("stdin", "stdout", "stderr"):
            assert kwargs[stream] == subprocess.DEVNULL

    def test_explicit_options(self, input_file, monkeypatch):
        run = RecordingRun()
        monkeypatch.setattr(transcoder_module.subprocess, "run", run)
        options = TranscodeOptions(bitrate="1500k", preset="slow")

        Transcoder(FakeProvisioner()).transcode(str(input_file), "out.mp4", "mp4", options)

        args, _ = run.calls[0]
        assert args[args.index("-b:v") + 1] == "1500k"
        assert args[args.index("-preset") + 1] == "slow"

    def test_nonzero_exit(self, input_file, monkeypatch):
        monkeypatch.setattr(transcoder_module.subprocess, "run", RecordingRun(returncode=1))

        with pytest.raises(ProcessError) as exc_info:
            Transcoder(FakeProvisioner()).transcode(str(input_file), "out.mp4", "mp4")

        assert exc_info.value.returncode == 1
        assert exc_info.value.kind == "process"
        assert "may not be supported" in str(exc_info.value)

    def test_spawn_failure(self, input_file, monkeypatch):
        run = RecordingRun(error=FileNotFoundError(2, "No such file or directory"))
        monkeypatch.setattr(transcoder_module.subprocess, "run", run)

        with pytest.raises(ProcessError, match="Failed to run FFmpeg"):
            Transcoder(FakeProvisioner()).transcode(str(input_file), "out.mp4", "mp4")


@pytest.mark.requires_ffmpeg
def test_real_transcode(tmp_path, has_ffmpeg):
    """Generate a short clip with ffmpeg and convert it to mkv."""
    if not has_ffmpeg:
        pytest.skip("ffmpeg not installed")

    source = tmp_path / "tiny.mp4"
    subprocess.run(
        [
            "ffmpeg", "-y", "-f", "lavfi", "-i", "testsrc=duration=1:size=64x64:rate=10",
            "-c:v", "libx264", "-pix_fmt", "yuv420p", str(source),
        ],
        capture_output=True,
        check=True,
    )  # fmt: skip
    output = tmp_path / "tiny.mkv"

    Transcoder().transcode(str(source), str(output), "mkv")

    assert output.exists()
    assert output.stat().st_size > 0
