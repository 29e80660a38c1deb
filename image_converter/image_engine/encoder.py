"""Serialize pixel buffers to PNG, JPEG or WebP bytes with pyvips."""

from __future__ import annotations

from typing import Any

import numpy as np
import pyvips  # type: ignore

from image_converter.color import BackgroundColor
from image_converter.errors import EncodeError
from image_converter.image_engine.compositor import ConversionMode, flatten_for_target
from image_converter.image_engine.formats import TargetFormat
from image_converter.image_engine.pixel_buffer import RGB_CHANNELS, PixelBuffer
from image_converter.logger import get_logger

_logger = get_logger("encoder")

JPEG_QUALITY = 75
WEBP_QUALITY = 75


def _to_vips(buf: PixelBuffer) -> Any:
    # pyvips expects a contiguous bytes buffer in C order
    img: Any = pyvips.Image.new_from_memory(buf.to_bytes(), buf.width, buf.height, buf.channels, "uchar")
    return img.copy(interpretation="srgb")


def _with_opaque_alpha(buf: PixelBuffer) -> PixelBuffer:
    if buf.has_alpha:
        return buf
    alpha = np.full((buf.height, buf.width, 1), 255, dtype=np.uint8)
    return PixelBuffer(width=buf.width, height=buf.height, pixels=np.concatenate([buf.pixels, alpha], axis=2))


def prepare_for_target(
    buf: PixelBuffer, target: TargetFormat, background: BackgroundColor | None, mode: ConversionMode
) -> PixelBuffer:
    """Apply compositing where the target cannot store alpha."""
    if target.supports_alpha:
        return buf
    return flatten_for_target(buf, background, mode)


def encode(buf: PixelBuffer, target: TargetFormat) -> bytes:
    """Encode a buffer.

    PNG keeps the buffer as given (RGB or RGBA). JPEG needs an opaque RGB
    buffer and uses JPEG_QUALITY. WebP is always written from RGBA at
    WEBP_QUALITY.
    """
    if target is TargetFormat.PNG:
        suffix, options = ".png", {}
    elif target is TargetFormat.JPEG:
        if buf.channels != RGB_CHANNELS:
            raise ValueError("JPEG encoding expects an opaque RGB buffer")
        suffix, options = ".jpg", {"Q": JPEG_QUALITY}
    else:
        buf = _with_opaque_alpha(buf)
        suffix, options = ".webp", {"Q": WEBP_QUALITY}

    try:
        out = _to_vips(buf).write_to_buffer(suffix, **options)
    except pyvips.Error as e:
        _logger.debug("encode %s failed: %s", target.value, e)
        raise EncodeError(f"Failed to write {target.name}: {e}") from e
    # Normalize to bytes in case pyvips returns a memoryview-like object
    if isinstance(out, bytes):
        return out
    return bytes(out)
