"""Target formats the encoder can produce."""

from __future__ import annotations

from enum import Enum

from image_converter.errors import UnsupportedFormatError


class TargetFormat(Enum):
    PNG = "png"
    JPEG = "jpg"
    WEBP = "webp"

    @classmethod
    def from_tag(cls, tag: str | TargetFormat) -> TargetFormat:
        """Map `png`, `jpg`, `jpeg` or `webp` (any case) to a format."""
        if isinstance(tag, TargetFormat):
            return tag
        key = (tag or "").strip().lower() if isinstance(tag, str) else ""
        fmt = _TAGS.get(key)
        if fmt is None:
            raise UnsupportedFormatError(f"Unsupported output format: {tag!r}")
        return fmt

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def supports_alpha(self) -> bool:
        return self is not TargetFormat.JPEG


_TAGS = {
    "png": TargetFormat.PNG,
    "jpg": TargetFormat.JPEG,
    "jpeg": TargetFormat.JPEG,
    "webp": TargetFormat.WEBP,
}

_MIME_TYPES = {
    TargetFormat.PNG: "image/png",
    TargetFormat.JPEG: "image/jpeg",
    TargetFormat.WEBP: "image/webp",
}
