"""Tests for the thumbnail generator entry points."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from PIL import Image

from shotthumb.errors import DecodeError, ImageTooLarge, InvalidDimensions
from shotthumb.imaging.generator import (
    ClipImage,
    create_thumbnail,
    create_thumbnail_blob,
    create_thumbnail_url,
)
from shotthumb.imaging.resampler import BlobThumbnail, DataUrlThumbnail, OutputFormat
from shotthumb.imaging.surface import decode_data_url, to_data_url


def _make_png(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (12, 34, 56)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestCreateThumbnail:
    def test_small_image_returns_none_without_decoding(self) -> None:
        with patch("shotthumb.imaging.generator.resample") as mock_resample:
            assert create_thumbnail(b"never decoded", 200, 300) is None
            assert create_thumbnail(b"never decoded", 252, 336, "blob") is None
        mock_resample.assert_not_called()

    def test_data_url_by_default(self) -> None:
        result = create_thumbnail(_make_png(1000, 500), 1000, 500)
        assert isinstance(result, DataUrlThumbnail)
        assert result.data_url.startswith("data:image/png;base64,")
        assert (result.width, result.height) == (210, 280)

    def test_blob_output(self) -> None:
        result = create_thumbnail(_make_png(400, 1000), 400, 1000, OutputFormat.BLOB)
        assert isinstance(result, BlobThumbnail)
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.format == "PNG"
            assert img.size == (210, 280)

    def test_unrecognised_format_gives_data_url(self) -> None:
        result = create_thumbnail(_make_png(1000, 500), 1000, 500, "webp")
        assert isinstance(result, DataUrlThumbnail)

    def test_zero_width_raises_before_planning(self) -> None:
        with patch("shotthumb.imaging.generator.plan") as mock_plan, pytest.raises(InvalidDimensions):
            create_thumbnail(_make_png(10, 10), 0, 500)
        mock_plan.assert_not_called()

    def test_zero_height_raises(self) -> None:
        with pytest.raises(InvalidDimensions):
            create_thumbnail(_make_png(10, 10), 500, 0)

    def test_real_size_over_pixel_limit_is_not_decoded(self) -> None:
        # Declared 1000x500 fits the limit; the upload is really 1200x1200.
        with pytest.raises(ImageTooLarge):
            create_thumbnail(_make_png(1200, 1200), 1000, 500, max_pixels=600_000)

    def test_no_pixel_limit_by_default(self) -> None:
        result = create_thumbnail(_make_png(1200, 1200), 1000, 500)
        assert result is not None

    def test_decode_error_propagates(self) -> None:
        with pytest.raises(DecodeError):
            create_thumbnail(b"\x89PNG but truncated", 1000, 500)


class TestClipHelpers:
    def test_thumbnail_url_without_image_url(self) -> None:
        assert create_thumbnail_url(ClipImage(url=None, width=1000, height=500)) is None
        assert create_thumbnail_url(ClipImage(url="", width=1000, height=500)) is None

    def test_thumbnail_url_for_small_clip(self) -> None:
        image = ClipImage(url=to_data_url(_make_png(200, 200)), width=200, height=200)
        assert create_thumbnail_url(image) is None

    def test_thumbnail_url(self) -> None:
        image = ClipImage(url=to_data_url(_make_png(1000, 500)), width=1000, height=500)
        data_url = create_thumbnail_url(image)
        assert data_url is not None
        with Image.open(io.BytesIO(decode_data_url(data_url))) as img:
            assert img.size == (210, 280)

    def test_thumbnail_blob(self) -> None:
        image = ClipImage(url="https://example.com/shot.png", width=400, height=1000)
        data = create_thumbnail_blob(image, to_data_url(_make_png(400, 1000)))
        assert data is not None
        assert data.startswith(b"\x89PNG")

    def test_thumbnail_blob_for_small_clip(self) -> None:
        image = ClipImage(url=None, width=100, height=100)
        assert create_thumbnail_blob(image, to_data_url(_make_png(100, 100))) is None
