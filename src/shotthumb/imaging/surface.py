"""Drawable surfaces: decode, region-resample and encode raster images."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Protocol
from urllib.parse import unquote_to_bytes

from PIL import Image, UnidentifiedImageError

from shotthumb.errors import DecodeError, EncodeError, ImageTooLarge

logger = logging.getLogger(__name__)

PNG_CONTENT_TYPE = "image/png"


class DrawableSurface(Protocol):
    """Protocol for a raster surface the resampler can draw from."""

    @property
    def width(self) -> int:
        """Surface width in pixels."""
        ...

    @property
    def height(self) -> int:
        """Surface height in pixels."""
        ...

    def draw_region(
        self,
        src_width: int,
        src_height: int,
        dest_width: int,
        dest_height: int,
        *,
        smoothing: bool = False,
    ) -> DrawableSurface:
        """Resample the top-left ``src_width x src_height`` region into a new surface.

        Args:
            src_width: Width of the region read, anchored at the origin.
            src_height: Height of the region read, anchored at the origin.
            dest_width: Width of the new surface.
            dest_height: Height of the new surface.
            smoothing: Interpolate between pixels instead of picking the nearest one.

        Returns:
            A new ``dest_width x dest_height`` surface.
        """
        ...

    def encode(self) -> bytes:
        """Serialize the surface to lossless PNG bytes.

        Raises:
            EncodeError: If the surface cannot be serialized.
        """
        ...


def decode_data_url(data_url: str) -> bytes:
    """Return the payload bytes of a ``data:`` URL.

    Raises:
        DecodeError: If the string is not a well-formed data URL.
    """
    if not data_url.startswith("data:"):
        raise DecodeError("Image source is not a data URL")
    header, sep, payload = data_url[5:].partition(",")
    if not sep:
        raise DecodeError("Data URL has no payload separator")

    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError("Data URL has an invalid base64 payload") from exc
    return unquote_to_bytes(payload)


def to_data_url(png_bytes: bytes) -> str:
    """Wrap PNG bytes in a base64 ``data:`` URL."""
    return f"data:{PNG_CONTENT_TYPE};base64,{base64.b64encode(png_bytes).decode('ascii')}"


class PillowSurface:
    """DrawableSurface backed by a Pillow image, kept in RGBA like a canvas."""

    def __init__(self, image: Image.Image) -> None:
        self._image = image

    @classmethod
    def load_from(cls, source: bytes | str, max_pixels: int | None = None) -> PillowSurface:
        """Decode raw image bytes or a data URL into a surface.

        The pixel limit is checked against the image header, before any
        pixel data is decoded.

        Raises:
            ImageTooLarge: If the image has more than ``max_pixels`` pixels.
            DecodeError: If the source cannot be decoded as an image.
        """
        data = decode_data_url(source) if isinstance(source, str) else source
        try:
            with Image.open(io.BytesIO(data)) as img:
                if max_pixels is not None and img.width * img.height > max_pixels:
                    raise ImageTooLarge(
                        f"Image is {img.width}x{img.height}, which exceeds {max_pixels} pixels"
                    )
                img.load()
                rgba = img.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise DecodeError(f"Image could not be decoded: {exc}") from exc

        logger.debug("Decoded %s source image (%sx%s)", img.format, rgba.width, rgba.height)
        return cls(rgba)

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def image(self) -> Image.Image:
        return self._image

    def draw_region(
        self,
        src_width: int,
        src_height: int,
        dest_width: int,
        dest_height: int,
        *,
        smoothing: bool = False,
    ) -> PillowSurface:
        # Reads past the edge of the surface are clipped, as on a canvas.
        box = (0, 0, min(src_width, self.width), min(src_height, self.height))
        resample = Image.Resampling.BILINEAR if smoothing else Image.Resampling.NEAREST
        return PillowSurface(self._image.resize((dest_width, dest_height), resample, box=box))

    def encode(self) -> bytes:
        buffer = io.BytesIO()
        try:
            self._image.save(buffer, format="PNG")
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Thumbnail could not be encoded as PNG: {exc}") from exc
        return buffer.getvalue()
