"""Conversion request and outcome models."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TranscodeOptions(BaseModel):
    """Encoder parameters for one video conversion."""

    bitrate: str = "5000k"
    preset: str = "medium"


class ConversionRequest(BaseModel):
    """One conversion, from a path or from raw bytes.

    Exactly one of ``input_path`` and ``input_bytes`` must be set.
    """

    input_path: str | None = None
    input_bytes: bytes | None = Field(default=None, repr=False)
    output_path: str
    source_format: str
    target_format: str
    keep_transparency: bool = True
    options: TranscodeOptions | None = None

    @model_validator(mode="after")
    def _check_single_input(self) -> ConversionRequest:
        if (self.input_path is None) == (self.input_bytes is None):
            raise ValueError("exactly one of input_path or input_bytes is required")
        return self

    @property
    def source(self) -> str:
        """Normalized source format tag."""
        return self.source_format.lower().lstrip(".")

    @property
    def target(self) -> str:
        """Normalized target format tag."""
        return self.target_format.lower().lstrip(".")


def _new_id() -> str:
    return uuid.uuid4().hex


class ConversionOutcome(BaseModel):
    """Result of a conversion. Always returned, never raised."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    success: bool
    message: str
    output_path: str | None = None
    error_kind: str | None = None

    @classmethod
    def ok(cls, message: str, output_path: str) -> ConversionOutcome:
        return cls(success=True, message=message, output_path=output_path)

    @classmethod
    def failed(cls, message: str, error_kind: str | None = None) -> ConversionOutcome:
        return cls(success=False, message=message, error_kind=error_kind)
