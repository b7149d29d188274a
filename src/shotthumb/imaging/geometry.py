"""Geometry planner: decides whether and how an image is scaled and cropped.

Thumbnails fit a 210x280 box. Images wider than the 3:4 display ratio are
scaled on y and cropped on x ("landscape"); all others are scaled on x and
cropped on y ("portrait").
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum

from shotthumb.errors import InvalidDimensions

logger = logging.getLogger(__name__)

MAX_THUMBNAIL_WIDTH: int = 210
MAX_THUMBNAIL_HEIGHT: int = 280
DISPLAY_ASPECT_RATIO: float = 3 / 4

# Generating, sending and storing a thumbnail has a cost, so images only
# slightly larger than the box are used as they are.
THUMBNAIL_THRESHOLD_FACTOR: float = 1.20
WIDTH_THRESHOLD: float = MAX_THUMBNAIL_WIDTH * THUMBNAIL_THRESHOLD_FACTOR
HEIGHT_THRESHOLD: float = MAX_THUMBNAIL_HEIGHT * THUMBNAIL_THRESHOLD_FACTOR


class Orientation(StrEnum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


@dataclass(frozen=True)
class ResamplePlan:
    """Target sizes for one thumbnail.

    ``scaled_*`` is the size the whole image would have after scaling;
    ``thumbnail_*`` is the part of it that is kept after cropping.
    ``crop_height`` is the kept height before it is cut to whole pixels; the
    final pass sizes its read window from it.
    """

    thumbnail_width: int
    thumbnail_height: int
    scaled_width: int
    scaled_height: int
    orientation: Orientation
    crop_height: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going up (not to even)."""
    return math.floor(value + 0.5)


def validate_dimensions(width: int, height: int) -> None:
    """Raise InvalidDimensions unless both values are positive integers."""
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidDimensions(width, height)


def needs_thumbnail(width: int, height: int) -> bool:
    """Return False when the image is within the skip threshold on both axes."""
    return width > WIDTH_THRESHOLD or height > HEIGHT_THRESHOLD


def display_stretch_height_bound(width: int) -> float:
    """Tallest crop that still looks right if the page stretches the image to full width.

    The display layer may widen a narrow thumbnail up to MAX_THUMBNAIL_WIDTH,
    which magnifies its height by the same factor.
    """
    return MAX_THUMBNAIL_HEIGHT / (MAX_THUMBNAIL_WIDTH / width)


def plan(width: int, height: int) -> ResamplePlan | None:
    """Compute the resample plan for an image, or None if no thumbnail is needed.

    Raises:
        InvalidDimensions: If width or height is not a positive integer.
    """
    validate_dimensions(width, height)
    if not needs_thumbnail(width, height):
        logger.debug("No thumbnail needed for %sx%s", width, height)
        return None

    if width / height > DISPLAY_ASPECT_RATIO:
        y_scale_factor = MAX_THUMBNAIL_HEIGHT / height if height > MAX_THUMBNAIL_HEIGHT else 1.0
        scaled_height = round_half_up(height * y_scale_factor)
        scaled_width = round_half_up(width * y_scale_factor)
        result = ResamplePlan(
            thumbnail_width=min(scaled_width, MAX_THUMBNAIL_WIDTH),
            thumbnail_height=scaled_height,
            scaled_width=scaled_width,
            scaled_height=scaled_height,
            orientation=Orientation.LANDSCAPE,
            crop_height=scaled_height,
        )
    else:
        x_scale_factor = MAX_THUMBNAIL_WIDTH / width if width > MAX_THUMBNAIL_WIDTH else 1.0
        scaled_width = round_half_up(width * x_scale_factor)
        scaled_height = round_half_up(height * x_scale_factor)
        crop_height = min(scaled_height, MAX_THUMBNAIL_HEIGHT, display_stretch_height_bound(width))
        # A surface cannot have a fractional height; truncate like a canvas does.
        thumbnail_height = int(crop_height)
        result = ResamplePlan(
            thumbnail_width=scaled_width,
            thumbnail_height=thumbnail_height,
            scaled_width=scaled_width,
            scaled_height=scaled_height,
            orientation=Orientation.PORTRAIT,
            crop_height=crop_height,
        )

    logger.debug("Planned %s thumbnail for %sx%s: %s", result.orientation, width, height, result)
    return result
