"""Still-image conversion with Pillow.

One generic function does every conversion; a source strategy only picks
how the input is decoded, and the target strategy picks the Pillow encoder.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

from loguru import logger
from PIL import Image
from pillow_heif import register_heif_opener

from cnvrt.catalog import IMAGE_OUTPUT_FORMATS, IMAGE_STRATEGIES, image_strategy_for, normalize
from cnvrt.errors import ImageCodecError, InputNotFoundError, UnsupportedFormatError

register_heif_opener()

GENERIC_DECODER = "raster"
JPEG_QUALITY = 95
MAX_ICON_SIZE = 256

# Modes every supported encoder accepts once the target's save_mode is applied
_SAFE_MODES = {"1", "L", "P", "RGB", "RGBA"}

_BACKGROUND = (255, 255, 255)


def _decode_raster(img: Image.Image) -> Image.Image:
    return img


def _decode_first_frame(img: Image.Image) -> Image.Image:
    img.seek(0)
    return img


def _decode_icon(img: Image.Image) -> Image.Image:
    ico = getattr(img, "ico", None)
    if ico is None:
        return _decode_raster(img)
    largest = max(ico.sizes(), key=lambda size: size[0] * size[1])
    return ico.getimage(largest)


def _decode_layered(img: Image.Image) -> Image.Image:
    # The image as opened is the merged composite; layers start at frame 1
    return img


DECODERS: dict[str, Callable[[Image.Image], Image.Image]] = {
    "raster": _decode_raster,
    "frames": _decode_first_frame,
    "icon": _decode_icon,
    "layered": _decode_layered,
}


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)


def flatten(img: Image.Image) -> Image.Image:
    """Composite any alpha channel onto a white background."""
    if not _has_alpha(img):
        return img if img.mode != "P" else img.convert("RGB")
    rgba = img.convert("RGBA")
    background = Image.new("RGB", rgba.size, _BACKGROUND)
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def prepare_for_save(img: Image.Image, target: str, keep_transparency: bool = True) -> Image.Image:
    """Convert ``img`` into a mode the target encoder accepts."""
    strategy = IMAGE_STRATEGIES[target]

    if img.mode not in _SAFE_MODES:
        img = img.convert("RGBA" if _has_alpha(img) else "RGB")

    if strategy.save_mode is not None or not keep_transparency:
        img = flatten(img)
    if strategy.save_mode is not None and img.mode != strategy.save_mode:
        img = img.convert(strategy.save_mode)
    return img


def _save_options(img: Image.Image, target: str) -> dict[str, Any]:
    encoder = IMAGE_STRATEGIES[target].encoder
    if encoder == "JPEG":
        return {"quality": JPEG_QUALITY}
    if encoder == "ICO":
        width, height = img.size
        return {"sizes": [(min(width, MAX_ICON_SIZE), min(height, MAX_ICON_SIZE))]}
    return {}


class ImageCodec:
    """Pillow-backed image conversion.

    ``reencode`` is the generic path; ``convert`` decodes with the source
    format's dedicated decoder. Both write ``output_path`` with the target
    format's encoder.
    """

    def reencode(
        self,
        input_path: str,
        output_path: str,
        target_format: str,
        keep_transparency: bool = True,
    ) -> None:
        """Decode any image Pillow can open and save it as ``target_format``."""
        self._convert(input_path, output_path, GENERIC_DECODER, target_format, keep_transparency)

    def convert(
        self,
        input_path: str,
        output_path: str,
        source_format: str,
        target_format: str,
        keep_transparency: bool = True,
    ) -> None:
        """Decode with the source format's strategy and save as ``target_format``."""
        strategy = image_strategy_for(source_format)
        decoder = strategy.decoder if strategy else GENERIC_DECODER
        self._convert(input_path, output_path, decoder, target_format, keep_transparency)

    def _convert(
        self,
        input_path: str,
        output_path: str,
        decoder: str,
        target_format: str,
        keep_transparency: bool,
    ) -> None:
        target = normalize(target_format)
        if target not in IMAGE_OUTPUT_FORMATS:
            raise UnsupportedFormatError(target_format)
        if not os.path.exists(input_path):
            raise InputNotFoundError(input_path)

        img = self._decode(input_path, decoder)
        try:
            img = prepare_for_save(img, target, keep_transparency)
            encoder = IMAGE_STRATEGIES[target].encoder
            logger.debug(f"Saving {img.size[0]}x{img.size[1]} {img.mode} image as {encoder}")
            img.save(output_path, format=encoder, **_save_options(img, target))
        except (OSError, ValueError, KeyError) as e:
            _remove_partial(output_path)
            raise ImageCodecError(f"Failed to save {target.upper()}: {e}") from e

    def _decode(self, input_path: str, decoder: str) -> Image.Image:
        try:
            with Image.open(input_path) as img:
                # copy before the file closes, close() invalidates the image
                return DECODERS[decoder](img).copy()
        except (OSError, ValueError, EOFError, Image.DecompressionBombError) as e:
            raise ImageCodecError(f"Failed to decode image: {e}") from e


def _remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial output {path}: {e}")
