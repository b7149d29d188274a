"""Progressive resampler.

A single large downscale with nearest-neighbour sampling aliases badly. Halving
the image at most 2x per pass and only then resampling to the exact thumbnail
size gives a much sharper result without a filtering library.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from shotthumb.errors import ThumbnailError
from shotthumb.imaging.geometry import round_half_up, validate_dimensions
from shotthumb.imaging.surface import PNG_CONTENT_TYPE, PillowSurface, to_data_url

if TYPE_CHECKING:
    from collections.abc import Callable

    from shotthumb.imaging.geometry import ResamplePlan
    from shotthumb.imaging.surface import DrawableSurface

logger = logging.getLogger(__name__)

MAX_RESIZE_SCALE_FACTOR: float = 0.5


class OutputFormat(StrEnum):
    DATA_URL = "dataurl"
    BLOB = "blob"

    @classmethod
    def parse(cls, value: str | OutputFormat | None) -> OutputFormat:
        """Map ``"blob"`` to BLOB and anything else to DATA_URL."""
        if value == cls.BLOB:
            return cls.BLOB
        return cls.DATA_URL


@dataclass(frozen=True)
class ImageDescriptor:
    """A source image and its pixel size, as known to the caller.

    ``source`` is either raw encoded image bytes or a ``data:`` URL.
    """

    source: bytes | str = field(repr=False)
    width: int
    height: int

    def __post_init__(self) -> None:
        validate_dimensions(self.width, self.height)


@dataclass(frozen=True)
class DataUrlThumbnail:
    """Thumbnail encoded as a self-describing PNG data URL."""

    data_url: str = field(repr=False)
    width: int
    height: int
    passes: int


@dataclass(frozen=True)
class BlobThumbnail:
    """Thumbnail as raw PNG bytes."""

    data: bytes = field(repr=False)
    width: int
    height: int
    passes: int
    content_type: str = PNG_CONTENT_TYPE


Thumbnail = DataUrlThumbnail | BlobThumbnail


def max_passes(width: int, height: int, resample_plan: ResamplePlan) -> int:
    """Upper bound on the number of draw passes needed for an image."""
    ratio = max(width, height) / max(resample_plan.thumbnail_width, resample_plan.thumbnail_height)
    return max(math.ceil(math.log2(ratio)), 0) + 1


def resample(
    descriptor: ImageDescriptor,
    resample_plan: ResamplePlan,
    output_format: OutputFormat | str = OutputFormat.DATA_URL,
    surface_factory: Callable[[bytes | str], DrawableSurface] = PillowSurface.load_from,
) -> Thumbnail:
    """Downscale an image to its planned thumbnail by repeated halving.

    Each pass reads the top-left ``src_width x src_height`` region of the
    working surface, which is how the planned crop is applied.

    Raises:
        DecodeError: If the source cannot be loaded.
        EncodeError: If the final surface cannot be encoded.
    """
    output_format = OutputFormat.parse(output_format)
    thumb_width = resample_plan.thumbnail_width
    thumb_height = resample_plan.thumbnail_height
    scaled_width = resample_plan.scaled_width
    scaled_height = resample_plan.scaled_height

    surface = surface_factory(descriptor.source)
    if (surface.width, surface.height) != (descriptor.width, descriptor.height):
        logger.warning(
            "Declared size %sx%s differs from decoded size %sx%s",
            descriptor.width,
            descriptor.height,
            surface.width,
            surface.height,
        )

    src_width, src_height = descriptor.width, descriptor.height
    limit = max_passes(descriptor.width, descriptor.height, resample_plan)
    passes = 0
    while True:
        passes += 1
        if passes > limit:
            raise ThumbnailError(f"Resampling did not converge within {limit} passes")

        dest_width = round_half_up(src_width * MAX_RESIZE_SCALE_FACTOR)
        dest_height = round_half_up(src_height * MAX_RESIZE_SCALE_FACTOR)
        if dest_width <= scaled_width or dest_height <= scaled_height:
            # Final pass: shrink the read window to the crop that maps onto the
            # thumbnail box, absorbing rounding from the earlier halvings.
            src_width = round_half_up(src_width * (thumb_width / scaled_width))
            src_height = round_half_up(src_height * (resample_plan.crop_height / scaled_height))
            dest_width, dest_height = thumb_width, thumb_height

        surface = surface.draw_region(src_width, src_height, dest_width, dest_height, smoothing=False)
        logger.debug(
            "Pass %s: %sx%s region -> %sx%s",
            passes,
            src_width,
            src_height,
            dest_width,
            dest_height,
        )

        if surface.width <= thumb_width and surface.height <= thumb_height:
            break
        src_width, src_height = dest_width, dest_height

    png = surface.encode()
    if output_format is OutputFormat.BLOB:
        return BlobThumbnail(data=png, width=surface.width, height=surface.height, passes=passes)
    return DataUrlThumbnail(data_url=to_data_url(png), width=surface.width, height=surface.height, passes=passes)
