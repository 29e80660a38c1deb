"""Alpha compositing for targets without an alpha channel.

Background policy for a transparent image bound for an opaque target:

    background given   mode     result
    ----------------   ------   ----------------------------
    yes                any      the given color
    no                 batch    white (255, 255, 255)
    no                 single   MissingBackgroundError

A background is only used to resolve actual transparency. Images without a
translucent pixel keep their colors even when a background was supplied.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from image_converter.color import WHITE, BackgroundColor
from image_converter.errors import MissingBackgroundError
from image_converter.image_engine.pixel_buffer import RGB_CHANNELS, PixelBuffer
from image_converter.logger import get_logger

_logger = get_logger("compositor")

_OPAQUE = 255


class ConversionMode(Enum):
    SINGLE = "single"
    BATCH = "batch"


def has_transparency(buf: PixelBuffer) -> bool:
    """True if the buffer has an alpha channel with any value below 255."""
    if not buf.has_alpha:
        return False
    return bool((buf.pixels[:, :, 3] < _OPAQUE).any())


def resolve_background(background: BackgroundColor | None, mode: ConversionMode) -> BackgroundColor:
    if background is not None:
        return background
    if mode is ConversionMode.BATCH:
        _logger.debug("no background given, batch default is white")
        return WHITE
    raise MissingBackgroundError()


def composite_over(buf: PixelBuffer, background: BackgroundColor) -> PixelBuffer:
    """Blend an RGBA buffer over a solid color and return an RGB buffer.

    out = (1 - a) * bg + a * src with a = alpha / 255, evaluated in float32 per
    channel and truncated toward zero. alpha 0 yields bg exactly and alpha 255
    yields src exactly.
    """
    if not buf.has_alpha:
        raise ValueError("composite_over expects an RGBA buffer")

    src = buf.pixels[:, :, :RGB_CHANNELS].astype(np.float32)
    a = buf.pixels[:, :, 3:4].astype(np.float32) / np.float32(255.0)
    bg = np.asarray(background.as_tuple(), dtype=np.float32)

    out = (np.float32(1.0) - a) * bg + a * src
    out = np.clip(out, 0.0, 255.0).astype(np.uint8)
    return PixelBuffer(width=buf.width, height=buf.height, pixels=out)


def drop_alpha(buf: PixelBuffer) -> PixelBuffer:
    if buf.channels == RGB_CHANNELS:
        return buf
    rgb = np.ascontiguousarray(buf.pixels[:, :, :RGB_CHANNELS])
    return PixelBuffer(width=buf.width, height=buf.height, pixels=rgb)


def flatten_for_target(
    buf: PixelBuffer, background: BackgroundColor | None, mode: ConversionMode
) -> PixelBuffer:
    """Produce an opaque RGB buffer, compositing only when there is transparency."""
    if buf.channels == RGB_CHANNELS:
        return buf
    if not has_transparency(buf):
        return drop_alpha(buf)
    bg = resolve_background(background, mode)
    _logger.debug("compositing %dx%d over %s", buf.width, buf.height, bg.to_hex())
    return composite_over(buf, bg)
