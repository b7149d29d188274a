"""Thumbnail generator: plan, then progressively resample.

Entry points for callers that know a source image and its pixel size and
want back either a thumbnail or ``None`` when the image is already small
enough to be shown as it is.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field

from shotthumb.imaging.geometry import plan, validate_dimensions
from shotthumb.imaging.resampler import (
    BlobThumbnail,
    DataUrlThumbnail,
    ImageDescriptor,
    OutputFormat,
    Thumbnail,
    resample,
)
from shotthumb.imaging.surface import PillowSurface

logger = logging.getLogger(__name__)


def create_thumbnail(
    source: bytes | str,
    width: int,
    height: int,
    output_format: OutputFormat | str = OutputFormat.DATA_URL,
    max_pixels: int | None = None,
) -> Thumbnail | None:
    """Create a thumbnail for an image of the given size.

    Args:
        source: Encoded image bytes or a ``data:`` URL.
        width: Source width in pixels.
        height: Source height in pixels.
        output_format: ``"blob"`` for raw PNG bytes; anything else gives a data URL.
        max_pixels: Refuse to decode a source with more pixels than this,
            whatever size was declared for it.

    Returns:
        The thumbnail, or None if the image is within the skip threshold.
        Nothing is decoded in the latter case.

    Raises:
        InvalidDimensions: If width or height is not a positive integer.
        ImageTooLarge: If the decoded image exceeds ``max_pixels``.
        DecodeError: If the source cannot be decoded.
        EncodeError: If the thumbnail cannot be encoded.
    """
    validate_dimensions(width, height)
    resample_plan = plan(width, height)
    if resample_plan is None:
        return None

    thumbnail = resample(
        ImageDescriptor(source, width, height),
        resample_plan,
        output_format,
        surface_factory=functools.partial(PillowSurface.load_from, max_pixels=max_pixels),
    )
    logger.info(
        "Created %s thumbnail %sx%s from %sx%s in %s passes",
        resample_plan.orientation,
        thumbnail.width,
        thumbnail.height,
        width,
        height,
        thumbnail.passes,
    )
    return thumbnail


# ---------------------------------------------------------------------------
# Shot clip helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClipImage:
    """The image of a shot's first clip: its URL (if any) and pixel size."""

    url: str | None = field(repr=False)
    width: int
    height: int


def create_thumbnail_url(image: ClipImage) -> str | None:
    """Return a data URL thumbnail for a clip image.

    Returns None when the clip has no image URL or needs no thumbnail.
    """
    if not image.url:
        return None
    thumbnail = create_thumbnail(image.url, image.width, image.height, OutputFormat.DATA_URL)
    if not isinstance(thumbnail, DataUrlThumbnail):
        return None
    return thumbnail.data_url


def create_thumbnail_blob(image: ClipImage, data_url: str) -> bytes | None:
    """Return PNG bytes for a clip image whose data URL was resolved separately."""
    thumbnail = create_thumbnail(data_url, image.width, image.height, OutputFormat.BLOB)
    if not isinstance(thumbnail, BlobThumbnail):
        return None
    return thumbnail.data
