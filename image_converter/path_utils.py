"""Output path derivation and writing.

Single mode writes to `<desktop>/ImageConverter/<stem>_converted.<ext>`.
Batch mode writes next to the source in a sibling folder:
`/a/b/photo.jpg` -> `/a/b/b_converted/photo.<ext>`.

The stem is everything before the *first* dot of the filename, so
`archive.tar.png` becomes `archive`. Kept as current behavior.
"""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QStandardPaths

from image_converter.errors import ConversionIOError
from image_converter.image_engine.compositor import ConversionMode
from image_converter.image_engine.formats import TargetFormat
from image_converter.logger import get_logger

_logger = get_logger("paths")

SINGLE_OUTPUT_FOLDER = "ImageConverter"
BATCH_FOLDER_SUFFIX = "_converted"
SINGLE_NAME_SUFFIX = "_converted"
_FALLBACK_STEM = "converted"


def abs_path(path: str | Path) -> Path:
    """Absolute path without resolving symlinks; the path need not exist."""
    return Path(path).expanduser().absolute()


def desktop_dir() -> Path:
    """The user's desktop folder (QStandardPaths, falling back to ~/Desktop)."""
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.DesktopLocation)
    if location:
        return Path(location)
    return Path.home() / "Desktop"


def file_stem(filename: str) -> str:
    name = Path(filename).name
    stem = name.split(".", 1)[0]
    return stem or _FALLBACK_STEM


def single_output_dir(base_dir: str | Path | None = None) -> Path:
    base = Path(base_dir) if base_dir else desktop_dir()
    return base / SINGLE_OUTPUT_FOLDER


def batch_output_dir(source_path: str | Path) -> Path:
    parent = abs_path(source_path).parent
    if not parent.name:
        raise ConversionIOError(f"Could not get source folder name for {source_path}")
    return parent / f"{parent.name}{BATCH_FOLDER_SUFFIX}"


def output_filename(filename: str, target: TargetFormat, mode: ConversionMode) -> str:
    stem = file_stem(filename)
    if mode is ConversionMode.BATCH:
        return f"{stem}.{target.extension}"
    return f"{stem}{SINGLE_NAME_SUFFIX}.{target.extension}"


def resolve_output_path(
    filename: str,
    target: TargetFormat,
    mode: ConversionMode,
    source_path: str | Path | None = None,
    base_dir: str | Path | None = None,
) -> Path:
    """Destination for a converted file.

    Batch mode needs `source_path`; single mode uses `base_dir` (the desktop
    when omitted) joined with SINGLE_OUTPUT_FOLDER.
    """
    if mode is ConversionMode.BATCH:
        if source_path is None:
            raise ValueError("batch mode needs the source path")
        directory = batch_output_dir(source_path)
    else:
        directory = single_output_dir(base_dir)
    return directory / output_filename(filename, target, mode)


def write_output(path: Path, data: bytes) -> Path:
    """Create the parent folders and write `data`; last writer wins."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConversionIOError(f"Failed to create output folder: {e}") from e
    try:
        path.write_bytes(data)
    except OSError as e:
        raise ConversionIOError(f"Failed to write image: {e}") from e
    _logger.debug("wrote %d bytes to %s", len(data), path)
    return path
