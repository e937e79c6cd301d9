"""Helpers to parse Chat Completions outputs."""

import json
from typing import Any, Dict, Optional


def extract_text(response: Any) -> str:
    """Return the first choice's message content, or an empty string."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None) or ""


def parse_json_content(response: Any) -> Dict[str, Any]:
    """Decode the first choice's content as a JSON object.

    Raises:
        ValueError: If the content is not valid JSON or not an object.
    """
    text = extract_text(response) or "{}"
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError("Model response was not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise ValueError("Model response JSON was not an object.")
    return payload


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "prompt_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "completion_tokens", None) if usage else None,
    }
