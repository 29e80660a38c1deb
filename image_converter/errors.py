"""Error taxonomy for the conversion engine.

Every failure the engine reports is a `ConversionError` subclass carrying a
human readable message. Entry points turn them into `ConversionOutcome.error`
strings and the batch pipeline into `error` progress events.
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for all conversion failures."""


class DecodeError(ConversionError):
    """Input bytes or file could not be recognized or decoded."""


class InvalidColorError(ConversionError, ValueError):
    """Background color string is not a 6 digit hex color."""


class MissingBackgroundError(ConversionError):
    """Transparent image bound for an opaque format with no background to use."""

    def __init__(self, message: str = "Image has transparency. Please provide a background color."):
        super().__init__(message)


class UnsupportedFormatError(ConversionError, ValueError):
    """Target format tag is not one of png, jpg, jpeg, webp."""


class EncodeError(ConversionError):
    """The imaging library failed to serialize a buffer."""


class ConversionIOError(ConversionError, OSError):
    """Reading a source, creating an output folder or writing a file failed."""
