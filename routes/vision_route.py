"""FastAPI route for battery and inverter inspection."""

from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile

from controllers.vision_controller import VisionController

router = APIRouter(prefix="/api/analyze", tags=["analyze"])
controller = VisionController()


@router.post("/vision", summary="Inspect a battery or inverter photo")
async def analyze_component(
    request: Request,
    image: Optional[UploadFile] = File(None),
    type: Optional[str] = Form(None),
):
    """Return a written defect inspection for the uploaded component photo."""
    image_bytes = None
    mime_type = "image/jpeg"
    if image is not None:
        try:
            image_bytes = await image.read()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise HTTPException(status_code=400, detail="Unable to read uploaded image.") from exc
        mime_type = image.content_type or mime_type

    settings = request.app.state.settings
    openai_client = getattr(request.app.state, "openai_client", None)
    try:
        return await controller.analyze(
            image_bytes, type, mime_type, openai_client=openai_client, model=settings.openai_model
        )
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=500, detail="Failed to analyze image") from exc
