"""Environment-driven settings for the inspection service.

Values are read once at startup (after `load_dotenv()` in `main.py`) into a
frozen `Settings` instance that is attached to `app.state.settings`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_ALLOWED_FORMATS = ("jpeg", "jpg", "png", "tiff", "bmp")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not a valid integer") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be a positive integer, got {value}")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not a valid number") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Runtime limits and upstream configuration.

    Attributes:
        openai_model: Chat model used for hotspot, vision and summary calls.
        openai_timeout: Deadline in seconds for a single inference call.
        max_file_size: Largest accepted upload in bytes (inclusive).
        max_image_dimension: Largest accepted width or height in pixels.
        allowed_formats: Lower-case file extensions accepted for upload.
        request_timeout: Deadline in seconds for reading the uploaded file.
        rate_limit: Requests allowed per client per window.
        rate_window: Window length in seconds.
        log_level: Root logging level name.
    """

    openai_model: str = "gpt-4.1-2025-04-14"
    openai_timeout: float = 60.0
    max_file_size: int = 50 * 1024 * 1024
    max_image_dimension: int = 8192
    allowed_formats: Tuple[str, ...] = field(default=DEFAULT_ALLOWED_FORMATS)
    request_timeout: float = 30.0
    rate_limit: int = 100
    rate_window: float = 3600.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Raises:
            RuntimeError: If a numeric variable is malformed or not positive.
        """
        formats_raw = os.getenv("ALLOWED_IMAGE_FORMATS", "")
        formats = tuple(
            part.strip().lower().lstrip(".") for part in formats_raw.split(",") if part.strip()
        )
        return cls(
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
            openai_timeout=_float_env("OPENAI_TIMEOUT_SECONDS", cls.openai_timeout),
            max_file_size=_int_env("MAX_FILE_SIZE_BYTES", cls.max_file_size),
            max_image_dimension=_int_env("MAX_IMAGE_DIMENSION", cls.max_image_dimension),
            allowed_formats=formats or DEFAULT_ALLOWED_FORMATS,
            request_timeout=_float_env("REQUEST_TIMEOUT_SECONDS", cls.request_timeout),
            rate_limit=_int_env("RATE_LIMIT", cls.rate_limit),
            rate_window=_float_env("RATE_WINDOW_SECONDS", cls.rate_window),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
