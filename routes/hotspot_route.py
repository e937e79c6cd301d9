"""FastAPI route for thermal hotspot analysis."""

from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile

from controllers.hotspot_controller import HotspotController

router = APIRouter(prefix="/api/analyze", tags=["analyze"])
controller = HotspotController()


@router.post("/hotspot", summary="Detect hotspots in a thermal image")
async def analyze_hotspots(
    request: Request,
    image: Optional[UploadFile] = File(None),
    imageType: Optional[str] = Form("auto"),
    demoMode: Optional[str] = Form(None),
    componentType: Optional[str] = Form(None),
):
    """Classify the upload as thermal or visual and, if thermal, extract hotspots.

    Args:
        request: The FastAPI request containing application state.
        image: Uploaded image (jpeg, jpg, png, tiff or bmp).
        imageType: Caller hint: `thermal`, `visual` or `auto`.
        demoMode: `"true"` forces thermal treatment.
        componentType: Optional `solar`, `battery` or `inverter` tag for the prompt.

    Returns:
        A JSON response; the controller converts every failure into a structured body.
    """
    return await controller.analyze(
        request,
        image,
        image_type=imageType,
        demo_mode=(demoMode or "").strip().lower() == "true",
        component_type=componentType,
    )
