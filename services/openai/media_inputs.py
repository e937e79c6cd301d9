"""Utilities to build vision chat payloads for the Chat Completions API."""

import base64
from typing import Any, Dict, List, Optional


def to_image_data_url(image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode raw image bytes as a base64 data URL."""
    if not image_bytes:
        raise ValueError("Image bytes are required to build a data URL.")
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def build_user_content(user_prompt: str, image_url: Optional[str]) -> List[Dict[str, Any]]:
    """Compose the user message parts: prompt text first, then the image when present."""
    content: List[Dict[str, Any]] = [{"type": "text", "text": user_prompt}]
    if image_url:
        content.append({"type": "image_url", "image_url": {"url": image_url, "detail": "high"}})
    return content


def build_messages(
    user_prompt: str,
    *,
    system_prompt: Optional[str] = None,
    image_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Build the chat message list with an optional system role."""
    messages: List[Dict[str, Any]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    if image_url:
        messages.append({"role": "user", "content": build_user_content(user_prompt, image_url)})
    else:
        messages.append({"role": "user", "content": user_prompt})
    return messages
