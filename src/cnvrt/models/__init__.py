"""Pydantic models for cnvrt."""

from .binary import BinaryHandle, BinarySource, ProvisionState
from .conversion import ConversionOutcome, ConversionRequest, TranscodeOptions
from .formats import FormatDescriptor, ImageStrategy

__all__ = [
    # Formats
    "FormatDescriptor",
    "ImageStrategy",
    # Conversion
    "ConversionRequest",
    "ConversionOutcome",
    "TranscodeOptions",
    # Binary
    "BinaryHandle",
    "BinarySource",
    "ProvisionState",
]
