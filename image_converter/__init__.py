"""Convert images between PNG, JPEG and WebP with alpha-aware compositing."""

from image_converter.batch import BatchJob, BatchPipeline, ProgressEvent, ProgressStatus
from image_converter.converter import ConversionOutcome, ConversionRequest, convert, convert_image, convert_image_from_path

__all__ = [
    "BatchJob",
    "BatchPipeline",
    "ConversionOutcome",
    "ConversionRequest",
    "ProgressEvent",
    "ProgressStatus",
    "convert",
    "convert_image",
    "convert_image_from_path",
]
