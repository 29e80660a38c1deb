"""Command line front end.

    image-converter convert photo.png -f jpg -b "#ffffff"
    image-converter batch ~/Pictures/holiday -f webp
    image-converter list ~/Pictures/holiday
"""

import argparse
import os
import sys
from pathlib import Path

from image_converter.batch import BatchJob, BatchPipeline, ProgressEvent, ProgressStatus
from image_converter.converter import convert_image
from image_converter.errors import ConversionError
from image_converter.logger import get_logger
from image_converter.path_utils import abs_path
from image_converter.settings_manager import SettingsManager
from image_converter.thumbnails import iter_image_files, list_image_thumbnails


def _apply_logging_options(args: argparse.Namespace) -> None:
    # Reflect CLI options in the env so every get_logger() call picks them up.
    if args.log_level:
        os.environ["IMAGE_CONVERTER_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["IMAGE_CONVERTER_LOG_CATS"] = args.log_cats


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image-converter", description="Convert images between PNG, JPEG and WebP")
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    parser.add_argument("--settings", help="Path to settings.json")
    sub = parser.add_subparsers(dest="command", required=True)

    p_convert = sub.add_parser("convert", help="Convert one file into the desktop output folder")
    p_convert.add_argument("file")
    p_convert.add_argument("-f", "--format", help="png, jpg, jpeg or webp")
    p_convert.add_argument("-b", "--background", help="Background hex color, e.g. #ffffff")
    p_convert.add_argument("-o", "--output-dir", help="Base folder instead of the desktop")

    p_batch = sub.add_parser("batch", help="Convert files or folders into <folder>_converted")
    p_batch.add_argument("paths", nargs="*", help="Defaults to the folder of the previous batch")
    p_batch.add_argument("-f", "--format", help="png, jpg, jpeg or webp")
    p_batch.add_argument("-b", "--background", help="Background hex color, e.g. #ffffff")

    p_list = sub.add_parser("list", help="List convertible images in a folder")
    p_list.add_argument("folder")
    return parser


def _expand_paths(paths: list[str]) -> list[Path]:
    files: list[Path] = []
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            files.extend(iter_image_files(p))
        else:
            files.append(p)
    return files


def _cmd_convert(args: argparse.Namespace, settings: SettingsManager) -> int:
    logger = get_logger("main")
    src = Path(args.file)
    try:
        data = src.read_bytes()
    except OSError as e:
        logger.error("cannot read %s: %s", src, e)
        return 1
    fmt = args.format or settings.target_format
    bg = args.background
    if bg is None and settings.background_color is not None:
        bg = settings.background_color.to_hex()
    outcome = convert_image(data, src.name, fmt, bg, output_dir=args.output_dir or settings.single_output_dir)
    if not outcome.ok:
        logger.error("%s", outcome.error)
        return 1
    print(outcome.output_path)
    return 0


def _cmd_batch(args: argparse.Namespace, settings: SettingsManager) -> int:
    logger = get_logger("main")
    fmt = args.format or settings.target_format
    bg = args.background
    if bg is None and settings.background_color is not None:
        bg = settings.background_color.to_hex()
    paths = args.paths
    if not paths:
        if settings.last_batch_dir is None:
            logger.error("no input paths and no previous batch folder")
            return 2
        paths = [settings.last_batch_dir]
    try:
        job = BatchJob.create(_expand_paths(paths), fmt, bg)
    except ConversionError as e:
        logger.error("%s", e)
        return 1

    errors: list[ProgressEvent] = []

    def sink(event: ProgressEvent) -> None:
        if event.status is ProgressStatus.ERROR:
            errors.append(event)
            logger.error("[%3d%%] %s", event.progress, event.message)
        else:
            logger.info("[%3d%%] %s", event.progress, event.message)

    pipeline = BatchPipeline(sink)
    pipeline.start(job)
    pipeline.wait()

    if job.files:
        settings.set("last_batch_dir", str(abs_path(job.files[0]).parent))
    return 1 if errors else 0


def _cmd_list(args: argparse.Namespace) -> int:
    try:
        thumbs = list_image_thumbnails(args.folder)
    except ConversionError as e:
        get_logger("main").error("%s", e)
        return 1
    for t in thumbs:
        print(f"{t.name}\t{t.path}\t{len(t.data_url)} chars")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _apply_logging_options(args)
    settings = SettingsManager(args.settings)
    if args.command == "convert":
        return _cmd_convert(args, settings)
    if args.command == "batch":
        return _cmd_batch(args, settings)
    return _cmd_list(args)


if __name__ == "__main__":
    sys.exit(main())
