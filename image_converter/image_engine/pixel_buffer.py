"""In-memory pixel buffer passed between engine stages."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

RGB_CHANNELS = 3
RGBA_CHANNELS = 4
_EXPECTED_NDIM = 3


@dataclass(frozen=True)
class PixelBuffer:
    """8-bit RGB or RGBA pixels stored as an (height, width, channels) array.

    Stages never write into a buffer they received; each returns a new one.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = self.pixels
        if arr.ndim != _EXPECTED_NDIM or arr.shape[2] not in (RGB_CHANNELS, RGBA_CHANNELS):
            raise ValueError(f"unexpected pixel array shape: {arr.shape}")
        if arr.shape[0] != self.height or arr.shape[1] != self.width:
            raise ValueError(f"pixel array {arr.shape[1]}x{arr.shape[0]} does not match {self.width}x{self.height}")
        if arr.dtype != np.uint8:
            raise ValueError(f"expected uint8 pixels, got {arr.dtype}")

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelBuffer:
        arr = np.ascontiguousarray(array, dtype=np.uint8)
        return cls(width=int(arr.shape[1]), height=int(arr.shape[0]), pixels=arr)

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.channels == RGBA_CHANNELS

    def to_bytes(self) -> bytes:
        """Flat interleaved pixel bytes; length is width * height * channels."""
        return self.pixels.tobytes()
