"""Image Engine - decode, composite and encode.

Usage:
    from image_converter.image_engine import decode_bytes, encode, prepare_for_target

    buf = decode_bytes(data)
    buf = prepare_for_target(buf, TargetFormat.JPEG, background, ConversionMode.SINGLE)
    out = encode(buf, TargetFormat.JPEG)
"""

from .compositor import ConversionMode, composite_over, flatten_for_target, has_transparency, resolve_background
from .decoder import decode_bytes, decode_file
from .encoder import JPEG_QUALITY, WEBP_QUALITY, encode, prepare_for_target
from .formats import TargetFormat
from .pixel_buffer import PixelBuffer

__all__ = [
    "JPEG_QUALITY",
    "WEBP_QUALITY",
    "ConversionMode",
    "PixelBuffer",
    "TargetFormat",
    "composite_over",
    "decode_bytes",
    "decode_file",
    "encode",
    "flatten_for_target",
    "has_transparency",
    "resolve_background",
]
