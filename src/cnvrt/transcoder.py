"""Video transcoding through an external ffmpeg process.

Command construction (``FFmpegCommand``) is pure and separate from
execution (``Transcoder``), so the flag grammar can be checked without
spawning anything.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass

from loguru import logger

from cnvrt.catalog import audio_codec_for, codec_for, normalize
from cnvrt.config import get_config
from cnvrt.errors import InputNotFoundError, ProcessError, ProvisionError, TranscodeError
from cnvrt.models import TranscodeOptions
from cnvrt.provisioning import BinaryProvisioner

AUDIO_BITRATE = "128k"


@dataclass(frozen=True)
class FFmpegCommand:
    """One ffmpeg invocation for a single input/output pair."""

    binary: str
    input_path: str
    output_path: str
    video_codec: str
    bitrate: str
    preset: str
    audio_codec: str

    @classmethod
    def for_target(
        cls,
        binary: str,
        input_path: str,
        output_path: str,
        target_format: str,
        options: TranscodeOptions,
    ) -> FFmpegCommand:
        """Build the command for ``target_format`` with catalog codecs."""
        return cls(
            binary=binary,
            input_path=input_path,
            output_path=output_path,
            video_codec=codec_for(target_format),
            bitrate=options.bitrate,
            preset=options.preset,
            audio_codec=audio_codec_for(target_format),
        )

    def to_args(self) -> list[str]:
        """Return the argv list."""
        return [
            self.binary,
            "-i", self.input_path,
            "-y",
            "-c:v", self.video_codec,
            "-b:v", self.bitrate,
            "-preset", self.preset,
            "-c:a", self.audio_codec,
            "-b:a", AUDIO_BITRATE,
            self.output_path,
        ]  # fmt: skip

    def __str__(self) -> str:
        args = self.to_args()
        return subprocess.list2cmdline(args) if os.name == "nt" else shlex.join(args)


class Transcoder:
    """Run one blocking ffmpeg conversion per call.

    Args:
        provisioner: Resolves the ffmpeg binary (default: a new BinaryProvisioner)
    """

    def __init__(self, provisioner: BinaryProvisioner | None = None) -> None:
        self.provisioner = provisioner or BinaryProvisioner()

    def default_options(self) -> TranscodeOptions:
        config = get_config().transcode
        return TranscodeOptions(
            bitrate=config.bitrate,
            preset=config.preset,
        )

    def build_command(
        self,
        binary: str,
        input_path: str,
        output_path: str,
        target_format: str,
        options: TranscodeOptions | None = None,
    ) -> FFmpegCommand:
        return FFmpegCommand.for_target(
            binary,
            input_path,
            output_path,
            normalize(target_format),
            options or self.default_options(),
        )

    def transcode(
        self,
        input_path: str,
        output_path: str,
        target_format: str,
        options: TranscodeOptions | None = None,
    ) -> None:
        """Transcode ``input_path`` into ``output_path``.

        Exit status 0 is the only success signal; the output file is not
        inspected afterwards.

        Raises:
            InputNotFoundError: If the input does not exist
            TranscodeError: If ffmpeg cannot be provisioned
            ProcessError: If ffmpeg cannot be spawned or exits non-zero
        """
        if not os.path.exists(input_path):
            raise InputNotFoundError(input_path)

        try:
            handle = self.provisioner.ensure()
        except ProvisionError as e:
            raise TranscodeError(f"FFmpeg provisioning failed: {e}", cause=e) from e

        command = self.build_command(str(handle.path), input_path, output_path, target_format, options)
        logger.debug(f"Running: {command}")
        self._run(command)

    def _run(self, command: FFmpegCommand) -> None:
        try:
            result = subprocess.run(
                command.to_args(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise ProcessError(f"Failed to run FFmpeg: {e}") from e

        if result.returncode != 0:
            raise ProcessError(
                "FFmpeg transcoding failed. The file format may not be supported.",
                returncode=result.returncode,
            )
