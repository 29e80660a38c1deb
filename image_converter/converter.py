"""Single-file conversion chain: decode, composite if needed, encode, write.

Two entry points mirror how files reach the engine:

- `convert_image` takes uploaded bytes plus the original filename and runs in
  single mode (output under the desktop, explicit background required for
  transparent JPEG targets).
- `convert_image_from_path` takes a file on disk and runs in batch mode
  (output beside the source, white default background). The batch pipeline
  calls it once per file.

Both return a `ConversionOutcome` instead of raising; `convert` is the raising
variant they share.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from image_converter.color import BackgroundColor
from image_converter.errors import ConversionError, ConversionIOError
from image_converter.image_engine import (
    ConversionMode,
    TargetFormat,
    decode_bytes,
    decode_file,
    encode,
    prepare_for_target,
)
from image_converter.logger import get_logger
from image_converter.path_utils import resolve_output_path, write_output

_logger = get_logger("converter")


@dataclass(frozen=True)
class ConversionRequest:
    filename: str
    target: TargetFormat
    background: BackgroundColor | None
    mode: ConversionMode
    data: bytes | None = None
    path: Path | None = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.path is None):
            raise ValueError("a request needs exactly one of data or path")

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        filename: str,
        fmt: str | TargetFormat,
        bg_color: str | None = None,
        mode: ConversionMode = ConversionMode.SINGLE,
    ) -> ConversionRequest:
        background = BackgroundColor.parse_optional(bg_color)
        return cls(filename, TargetFormat.from_tag(fmt), background, mode, data=bytes(data))

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        fmt: str | TargetFormat,
        bg_color: str | BackgroundColor | None = None,
        mode: ConversionMode = ConversionMode.BATCH,
    ) -> ConversionRequest:
        background = bg_color if isinstance(bg_color, BackgroundColor) else BackgroundColor.parse_optional(bg_color)
        p = Path(path)
        if not p.name:
            raise ConversionIOError(f"Invalid file path: {path}")
        return cls(p.name, TargetFormat.from_tag(fmt), background, mode, path=p)


@dataclass(frozen=True)
class ConversionOutcome:
    output_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def convert(request: ConversionRequest, output_dir: str | Path | None = None) -> Path:
    """Run the full chain for one request and return the written path.

    `output_dir` replaces the desktop as the single-mode base folder.
    Raises the first ConversionError encountered.
    """
    buf = decode_bytes(request.data) if request.data is not None else decode_file(request.path)  # type: ignore[arg-type]
    buf = prepare_for_target(buf, request.target, request.background, request.mode)
    data = encode(buf, request.target)
    out_path = resolve_output_path(
        request.filename, request.target, request.mode, source_path=request.path, base_dir=output_dir
    )
    return write_output(out_path, data)


def _run(build: Callable[[], ConversionRequest], output_dir: str | Path | None = None) -> ConversionOutcome:
    try:
        request = build()
        out = convert(request, output_dir)
    except ConversionError as e:
        _logger.debug("conversion failed: %s", e)
        return ConversionOutcome(error=str(e))
    _logger.info("converted %s -> %s", request.filename, out)
    return ConversionOutcome(output_path=out)


def convert_image(
    file_bytes: bytes,
    filename: str,
    fmt: str | TargetFormat,
    bg_color: str | None = None,
    output_dir: str | Path | None = None,
) -> ConversionOutcome:
    """Convert uploaded bytes in single mode."""
    return _run(lambda: ConversionRequest.from_bytes(file_bytes, filename, fmt, bg_color), output_dir)


def convert_image_from_path(
    file_path: str | Path, fmt: str | TargetFormat, bg_color: str | BackgroundColor | None = None
) -> ConversionOutcome:
    """Convert a file on disk in batch mode (output beside the source)."""
    return _run(lambda: ConversionRequest.from_path(file_path, fmt, bg_color))
