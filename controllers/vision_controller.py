"""Controller for component vision analysis requests."""

from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from fastapi import HTTPException

from services.openai.component_vision import ComponentVisionService


class VisionController:
    """Coordinate component inspection requests between the API layer and OpenAI service."""

    def __init__(self, service: Optional[ComponentVisionService] = None) -> None:
        self.service = service or ComponentVisionService()

    async def analyze(
        self,
        image_bytes: Optional[bytes],
        component_type: Optional[str],
        mime_type: str,
        openai_client: AsyncOpenAI | None = None,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Validate input and request a written inspection from the service.

        Raises:
            HTTPException: 400 when the image or type is missing, 500 on service failure.
        """
        if not image_bytes or not component_type:
            raise HTTPException(status_code=400, detail="Image and type are required")
        try:
            return await self.service.analyze(
                image_bytes, component_type, mime_type=mime_type, client=openai_client, model=model
            )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise HTTPException(status_code=500, detail="Failed to analyze image") from exc
