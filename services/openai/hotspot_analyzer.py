"""Thermal hotspot extraction using OpenAI's Chat Completions vision input."""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from models.analysis_models import InferenceDegraded, InferenceOk, InferenceOutcome
from services.hotspot_normalizer import parse_analysis_payload
from services.openai.hotspot_prompts import build_system_prompt, build_user_prompt
from services.openai.media_inputs import build_messages, to_image_data_url
from services.openai.response_parser import extract_usage, parse_json_content

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = "gpt-4.1-2025-04-14"
DEFAULT_TIMEOUT = 60.0


class HotspotAnalyzer:
    """Send a thermal image to the vision model and normalize its hotspot report.

    A single attempt is made per image. Every failure of that attempt (deadline,
    transport error, non-JSON reply) is returned as `InferenceDegraded` so the
    caller can always answer the request.
    """

    def __init__(self, client: AsyncOpenAI, *, model: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.timeout = timeout

    async def analyze(
        self,
        image_bytes: bytes,
        *,
        mime_type: str = "image/jpeg",
        component_type: Optional[str] = None,
    ) -> InferenceOutcome:
        """Return the normalized analysis, or a degraded marker if the call failed."""
        start_time = time.time()
        try:
            messages = build_messages(
                build_user_prompt(component_type),
                system_prompt=build_system_prompt(component_type),
                image_url=to_image_data_url(image_bytes, mime_type),
            )
            response = await asyncio.wait_for(self._create_response(messages), timeout=self.timeout)
            result = parse_analysis_payload(parse_json_content(response), model=self.model)
        except asyncio.TimeoutError:
            LOGGER.error("Hotspot analysis timed out after %.1fs", self.timeout)
            return InferenceDegraded(reason="timeout")
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("OpenAI vision analysis failed: %s", exc)
            return InferenceDegraded(reason=str(exc) or exc.__class__.__name__)

        result.usage = extract_usage(response)
        LOGGER.info(
            "Hotspot analysis returned %d hotspot(s), severity=%s in %.3fs",
            len(result.hotspots),
            result.severity,
            time.time() - start_time,
        )
        return InferenceOk(result=result)

    async def _create_response(self, messages: List[Dict[str, Any]]) -> Any:
        """Request a JSON-only completion for the hotspot prompt."""
        return await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0.1,
            max_tokens=8192,
            response_format={"type": "json_object"},
        )
