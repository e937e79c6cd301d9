"""Validation helpers for uploaded inspection images."""

from __future__ import annotations

import io
from typing import Any, Dict, Iterable, Optional

from PIL import Image, UnidentifiedImageError

CORRUPT_IMAGE_MESSAGE = "Invalid or corrupted image file. Please upload a valid image."

FORMAT_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "TIFF": "image/tiff",
    "BMP": "image/bmp",
}


class ImageValidationError(ValueError):
    """Raised when an upload fails a validation check.

    The message is safe to return to the client; `details` is for the audit record.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}


def file_extension(filename: Optional[str]) -> Optional[str]:
    """Return the lower-cased extension of `filename`, or None when absent."""
    if not filename or "." not in filename:
        return None
    extension = filename.rsplit(".", 1)[-1].strip().lower()
    return extension or None


def validate_upload(
    filename: Optional[str],
    size: Optional[int],
    *,
    max_file_size: int,
    allowed_formats: Iterable[str],
) -> str:
    """Check presence, size and extension of an upload, in that order.

    Returns:
        The validated extension.

    Raises:
        ImageValidationError: On the first failing check.
    """
    if not filename or size is None:
        raise ImageValidationError("Please provide a valid image file", {"error": "Invalid file upload"})

    if size > max_file_size:
        raise ImageValidationError(
            f"File size exceeds maximum allowed size of {max_file_size // (1024 * 1024)}MB",
            {"error": "File too large", "size": size},
        )

    allowed = tuple(allowed_formats)
    extension = file_extension(filename)
    if extension not in allowed:
        raise ImageValidationError(
            f"Invalid file format. Allowed formats: {', '.join(allowed)}",
            {"error": "Invalid file format", "format": extension},
        )
    return extension


def decode_image(image_bytes: bytes, *, max_dimension: int) -> Image.Image:
    """Decode `image_bytes` and enforce the pixel-dimension ceiling.

    Raises:
        ImageValidationError: If the bytes are not a readable image or the
            dimensions are missing or too large.
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageValidationError(
            CORRUPT_IMAGE_MESSAGE, {"error": "Invalid image file", "details": str(exc)}
        ) from exc

    width, height = image.size
    if not width or not height:
        raise ImageValidationError(
            "Image has invalid dimensions. Please upload a valid image.",
            {"error": "Invalid image dimensions", "width": width, "height": height},
        )
    if width > max_dimension or height > max_dimension:
        raise ImageValidationError(
            f"Image dimensions exceed maximum allowed size of {max_dimension}px",
            {"error": "Image too large", "width": width, "height": height},
        )

    try:
        image.load()
    except (OSError, ValueError, SyntaxError) as exc:
        raise ImageValidationError(
            CORRUPT_IMAGE_MESSAGE, {"error": "Invalid image file", "details": str(exc)}
        ) from exc
    return image


def image_mime_type(image: Image.Image) -> str:
    """Return the MIME type for a decoded image, defaulting to JPEG."""
    return FORMAT_MIME_TYPES.get(image.format or "", "image/jpeg")
