from fastapi import Request, HTTPException
from typing import Any, Dict, List, Optional

from services.openai.defect_summarizer import DefectSummarizer

SUMMARY_TYPES = ("executive", "technical", "maintenance")


async def summarize_defects(
    request: Request,
    defects: Optional[List[Dict[str, Any]]],
    project_name: Optional[str] = None,
    summary_type: Optional[str] = "executive",
) -> Dict[str, Any]:
    """Summarize a defect log with the shared OpenAI client.

    Unknown or missing summary types are answered in the executive register.
    Entries that are not objects are summarized as empty defects.

    Raises:
        HTTPException(400) if `defects` is missing or not a list.
        HTTPException(500) if the summary could not be generated.
    """
    if defects is None or not isinstance(defects, list):
        raise HTTPException(status_code=400, detail="Defects array is required")

    settings = request.app.state.settings
    openai_client = getattr(request.app.state, "openai_client", None)
    if openai_client is None:
        raise HTTPException(status_code=500, detail="Failed to generate summary")

    summary_type = summary_type or "executive"
    entries = [d if isinstance(d, dict) else {} for d in defects]
    summarizer = DefectSummarizer(openai_client, model=settings.openai_model)
    register = summary_type if summary_type in SUMMARY_TYPES else "executive"
    try:
        result = await summarizer.summarize(entries, project_name=project_name, summary_type=register)
    except Exception as exc:
        raise HTTPException(status_code=500, detail="Failed to generate summary") from exc

    result["metadata"]["summaryType"] = summary_type
    return result
