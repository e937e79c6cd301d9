"""Tests for upload and raster validation."""

from __future__ import annotations

import pytest

from conftest import image_bytes
from utils.image_validation import (
    CORRUPT_IMAGE_MESSAGE,
    ImageValidationError,
    decode_image,
    file_extension,
    image_mime_type,
    validate_upload,
)
from utils.settings import DEFAULT_ALLOWED_FORMATS

MAX = 50 * 1024 * 1024


def _validate(filename, size):
    return validate_upload(filename, size, max_file_size=MAX, allowed_formats=DEFAULT_ALLOWED_FORMATS)


class TestValidateUpload:
    """Test suite for presence, size and extension checks."""

    def test_missing_file(self) -> None:
        with pytest.raises(ImageValidationError, match="Please provide a valid image file"):
            _validate(None, None)

    def test_size_boundary(self) -> None:
        assert _validate("panel.png", MAX) == "png"
        with pytest.raises(ImageValidationError, match="exceeds maximum allowed size of 50MB") as excinfo:
            _validate("panel.png", MAX + 1)
        assert excinfo.value.details == {"error": "File too large", "size": MAX + 1}

    @pytest.mark.parametrize("filename", ["scan.gif", "scan", "scan.", "archive.png.zip"])
    def test_rejects_unlisted_extensions(self, filename: str) -> None:
        with pytest.raises(ImageValidationError, match="Allowed formats: jpeg, jpg, png, tiff, bmp"):
            _validate(filename, 10)

    def test_extension_is_case_insensitive(self) -> None:
        assert _validate("IR_0042.JPG", 10) == "jpg"
        assert file_extension("a.b.TIFF") == "tiff"

    def test_size_is_checked_before_extension(self) -> None:
        with pytest.raises(ImageValidationError, match="File size"):
            _validate("scan.gif", MAX + 1)


class TestDecodeImage:
    """Test suite for decoding and dimension limits."""

    def test_decodes_valid_png(self) -> None:
        image = decode_image(image_bytes(size=(64, 32)), max_dimension=8192)

        assert image.size == (64, 32)
        assert image_mime_type(image) == "image/png"

    def test_jpeg_mime_type(self) -> None:
        image = decode_image(image_bytes(fmt="JPEG"), max_dimension=8192)
        assert image_mime_type(image) == "image/jpeg"

    def test_corrupt_bytes(self) -> None:
        with pytest.raises(ImageValidationError) as excinfo:
            decode_image(b"definitely not an image", max_dimension=8192)
        assert str(excinfo.value) == CORRUPT_IMAGE_MESSAGE

    def test_truncated_image(self) -> None:
        data = image_bytes(size=(300, 300), fmt="JPEG")
        with pytest.raises(ImageValidationError):
            decode_image(data[: len(data) // 2], max_dimension=8192)

    def test_dimension_limit_is_inclusive(self) -> None:
        assert decode_image(image_bytes(size=(16, 8)), max_dimension=16).size == (16, 8)
        with pytest.raises(ImageValidationError, match="exceed maximum allowed size of 16px"):
            decode_image(image_bytes(size=(17, 8)), max_dimension=16)
