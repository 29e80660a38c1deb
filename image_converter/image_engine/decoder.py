"""Image decoder using pyvips.

Raw bytes are sniffed by content signature (`new_from_buffer`); paths go
through the file loader. Either way the result is normalized to an 8-bit sRGB
`PixelBuffer` with 3 or 4 channels. Alpha is preserved; flattening is the
compositor's job.
"""

import contextlib
import os
from pathlib import Path
from typing import Any

import numpy as np
import pyvips  # type: ignore

from image_converter.errors import ConversionIOError, DecodeError
from image_converter.image_engine.pixel_buffer import RGB_CHANNELS, RGBA_CHANNELS, PixelBuffer
from image_converter.logger import get_logger

_logger = get_logger("decoder")


def _to_pixel_buffer(image: Any) -> PixelBuffer:
    with contextlib.suppress(pyvips.Error):
        image = image.colourspace("srgb")
    if image.format != "uchar":
        # 16-bit PNGs etc.: keep the high byte instead of clipping.
        image = image.cast("uchar", shift=image.format in ("ushort", "short"))

    alpha = None
    if image.hasalpha():
        alpha = image[image.bands - 1]
        image = image.extract_band(0, n=image.bands - 1)
    if image.bands > RGB_CHANNELS:
        image = image.extract_band(0, n=RGB_CHANNELS)
    elif image.bands < RGB_CHANNELS:
        grey = image[0]
        image = grey.bandjoin([grey] * (RGB_CHANNELS - 1))
    if alpha is not None:
        image = image.bandjoin(alpha)

    # Forces the full decode, so truncated data fails here.
    mem = image.write_to_memory()
    array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    if array.shape[2] not in (RGB_CHANNELS, RGBA_CHANNELS):
        raise DecodeError(f"Unsupported band count after conversion: {array.shape[2]}")
    return PixelBuffer.from_array(array.copy())


def decode_bytes(data: bytes) -> PixelBuffer:
    """Decode in-memory image bytes; the format is detected from the content."""
    if not data:
        raise DecodeError("Failed to guess image format: empty input")
    try:
        image = pyvips.Image.new_from_buffer(data, "", fail_on="error")
        return _to_pixel_buffer(image)
    except pyvips.Error as e:
        _logger.debug("decode_bytes failed: %s", e)
        raise DecodeError(f"Failed to load image: {_first_line(e)}") from e


def decode_file(path: str | Path) -> PixelBuffer:
    """Decode an image file from disk."""
    p = Path(path)
    if not p.is_file():
        raise ConversionIOError(f"Failed to open image {p}: no such file")
    if not os.access(p, os.R_OK):
        raise ConversionIOError(f"Failed to open image {p}: permission denied")
    try:
        image = pyvips.Image.new_from_file(str(p), fail_on="error")
        return _to_pixel_buffer(image)
    except pyvips.Error as e:
        _logger.debug("decode_file failed for %s: %s", p, e)
        raise DecodeError(f"Failed to open image {p}: {_first_line(e)}") from e


def _first_line(err: Exception) -> str:
    text = str(err).strip()
    return text.splitlines()[0] if text else err.__class__.__name__
