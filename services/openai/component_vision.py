"""Free-text defect inspection of battery and inverter photos."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from services.openai.media_inputs import build_messages, to_image_data_url
from services.openai.response_parser import extract_text

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = "gpt-4.1-2025-04-14"
GENERIC_PROMPT = "Analyze this image for defects"
DEFECT_KEYWORDS = ("defect", "issue", "problem")
PLACEHOLDER_CONFIDENCE = 0.85

COMPONENT_PROMPTS = {
    "battery": (
        "Analyze this battery system image for defects. Look for:\n"
        "1. Thermal anomalies or hot spots\n"
        "2. Physical damage or corrosion\n"
        "3. Improper connections or loose terminals\n"
        "4. Swelling or deformation\n"
        "5. Electrolyte leakage\n\n"
        "Provide a detailed analysis including:\n"
        "- Defect type and severity (critical/high/medium/low)\n"
        "- Specific location of issues\n"
        "- Recommended actions\n"
        "- Safety concerns if any"
    ),
    "inverter": (
        "Analyze this inverter image for defects. Look for:\n"
        "1. Overheating signs or thermal stress\n"
        "2. Component damage or burn marks\n"
        "3. Dust accumulation affecting cooling\n"
        "4. LED indicator status\n"
        "5. Cable or connection issues\n\n"
        "Provide a detailed analysis including:\n"
        "- Defect type and severity (critical/high/medium/low)\n"
        "- Specific component affected\n"
        "- Recommended maintenance actions\n"
        "- Operational impact assessment"
    ),
}


def mentions_defects(analysis: Optional[str]) -> bool:
    """Return True when the analysis text mentions a defect, issue or problem."""
    text = (analysis or "").lower()
    return any(keyword in text for keyword in DEFECT_KEYWORDS)


class ComponentVisionService:
    """Ask the vision model for a written inspection of one component photo."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, *, model: str = DEFAULT_MODEL) -> None:
        self.client = client
        self.model = model

    def _resolve_client(self, client: Optional[AsyncOpenAI]) -> AsyncOpenAI:
        """Return a usable OpenAI client or raise if missing."""
        resolved = client or self.client
        if resolved is None:
            raise ValueError("OpenAI client is not configured.")
        return resolved

    async def analyze(
        self,
        image_bytes: bytes,
        component_type: str,
        *,
        mime_type: str = "image/jpeg",
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the model's analysis with a keyword-derived defect flag.

        Raises:
            ValueError: If the image or component type is missing.
        """
        if not image_bytes or not component_type:
            raise ValueError("Image and type are required")

        openai_client = self._resolve_client(client)
        prompt = COMPONENT_PROMPTS.get(component_type, GENERIC_PROMPT)
        response = await openai_client.chat.completions.create(
            model=model or self.model,
            messages=build_messages(prompt, image_url=to_image_data_url(image_bytes, mime_type)),
            max_tokens=10000,
        )
        analysis = extract_text(response)
        LOGGER.info("Component vision analysis received for type=%s (%d chars)", component_type, len(analysis))

        return {
            "type": component_type,
            "analysis": analysis,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "defectsFound": mentions_defects(analysis),
            "confidence": PLACEHOLDER_CONFIDENCE,
        }
