from fastapi import APIRouter, Request, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, Optional

from controllers.summary_controller import summarize_defects

router = APIRouter(prefix="/api/analyze", tags=["analyze"])


class SummaryRequest(BaseModel):
    defects: Optional[Any] = None
    projectName: Optional[str] = None
    summaryType: Optional[str] = "executive"


@router.post("/summarize")
async def post_summary(request: Request, payload: SummaryRequest) -> Dict[str, Any]:
    """Summarize a defect log and score its overall severity."""
    try:
        result = await summarize_defects(request, payload.defects, payload.projectName, payload.summaryType)
    except HTTPException:
        raise
    except Exception:
        raise HTTPException(status_code=500, detail="Failed to generate summary")
    return result
