"""Exceptions raised by the thumbnail generator."""

from __future__ import annotations


class ThumbnailError(Exception):
    """Base class for thumbnail generation failures."""


class InvalidDimensions(ThumbnailError, ValueError):
    """Source width or height is not a positive integer."""

    def __init__(self, width: object, height: object) -> None:
        super().__init__(f"Image dimensions must be positive integers, got {width}x{height}")
        self.width = width
        self.height = height


class DecodeError(ThumbnailError):
    """Source image could not be loaded into a drawable surface."""


class EncodeError(ThumbnailError):
    """Final surface could not be serialized to the requested output format."""


class ImageTooLarge(DecodeError):
    """Decoded image has more pixels than the configured limit."""
