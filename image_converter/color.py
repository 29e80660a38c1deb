"""Background color parsing."""

from __future__ import annotations

import string
from dataclasses import dataclass

from image_converter.errors import InvalidColorError

_HEX_DIGITS = frozenset(string.hexdigits)
_HEX_LEN = 6


@dataclass(frozen=True)
class BackgroundColor:
    r: int
    g: int
    b: int

    @classmethod
    def parse(cls, value: str) -> BackgroundColor:
        """Parse `#rrggbb` or `rrggbb` (case-insensitive)."""
        if not isinstance(value, str) or len(value) not in (_HEX_LEN, _HEX_LEN + 1):
            raise InvalidColorError("Invalid hex color format")
        digits = value[1:] if value.startswith("#") else value
        if len(digits) != _HEX_LEN or not all(c in _HEX_DIGITS for c in digits):
            raise InvalidColorError(f"Invalid hex color: {value!r}")
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @classmethod
    def parse_optional(cls, value: str | None) -> BackgroundColor | None:
        """None means no background was requested."""
        if value is None:
            return None
        return cls.parse(value)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


WHITE = BackgroundColor(255, 255, 255)
