"""Format descriptor models."""

from pydantic import BaseModel, ConfigDict, Field


class FormatDescriptor(BaseModel):
    """Static description of one video format.

    Descriptors are built once from the catalog table and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    extension: str
    container: str
    codec: str
    audio_codec: str = "aac"
    aliases: tuple[str, ...] = ()
    compatible_outputs: frozenset[str] = Field(default_factory=frozenset)

    def can_convert_to(self, target: str) -> bool:
        """Check if this format lists ``target`` as a valid output."""
        return target.lower().lstrip(".") in self.compatible_outputs


class ImageStrategy(BaseModel):
    """How a still-image tag is decoded and encoded.

    ``decoder`` names a decode routine in ``cnvrt.images``; ``encoder`` is
    the Pillow format name used when saving to this tag.
    """

    model_config = ConfigDict(frozen=True)

    decoder: str
    encoder: str | None = None
    save_mode: str | None = None
