"""Folder listing with base64 data-URL previews for a picker UI."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path

from image_converter.errors import ConversionIOError
from image_converter.image_engine.formats import TargetFormat
from image_converter.logger import get_logger

_logger = get_logger("thumbnails")

VALID_EXTS = {
    ".png": TargetFormat.PNG.mime_type,
    ".jpg": TargetFormat.JPEG.mime_type,
    ".jpeg": TargetFormat.JPEG.mime_type,
    ".webp": TargetFormat.WEBP.mime_type,
}


@dataclass(frozen=True)
class Thumbnail:
    path: Path
    name: str
    data_url: str


def iter_image_files(folder: str | Path) -> list[Path]:
    """Image files directly inside `folder`, sorted by name."""
    try:
        entries = list(Path(folder).iterdir())
    except OSError as e:
        raise ConversionIOError(f"Failed to read directory: {e}") from e
    files = [p for p in entries if p.is_file() and p.suffix.lower() in VALID_EXTS]
    return sorted(files, key=lambda p: p.name.lower())


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def list_image_thumbnails(folder: str | Path) -> list[Thumbnail]:
    thumbs: list[Thumbnail] = []
    for path in iter_image_files(folder):
        try:
            data = path.read_bytes()
        except OSError as e:
            _logger.debug("skip unreadable %s: %s", path, e)
            continue
        thumbs.append(Thumbnail(path=path, name=path.name, data_url=to_data_url(data, VALID_EXTS[path.suffix.lower()])))
    return thumbs
