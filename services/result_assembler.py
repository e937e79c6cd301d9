"""Build the client-facing hotspot response for each pipeline outcome."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.analysis_models import HotspotAnalysisResult, InferenceDegraded, InferenceOk, InferenceOutcome
from services.hotspot_normalizer import affected_area

NON_THERMAL_CONFIDENCE = 0.95
NON_THERMAL_MESSAGE = "Image does not appear to be a thermal image"
DEGRADED_CONFIDENCE = 0.5
DEGRADED_MESSAGE = "Advanced analysis temporarily unavailable. Please try again."
DEGRADED_ERROR = "vision_api_error"


def base_metadata(
    *,
    width: int,
    height: int,
    image_type: str,
    processing_time_ms: int,
) -> Dict[str, Any]:
    """Detection metadata shared by every response for a decoded image."""
    return {
        "totalHotspots": 0,
        "maxTemperature": None,
        "affectedArea": 0,
        "imageType": image_type,
        "dimensions": {"width": width, "height": height},
        "processingTime": f"{processing_time_ms}ms",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def non_thermal_response(request_id: str) -> Dict[str, Any]:
    """Confident negative for images the detector rejected."""
    return {
        "requestId": request_id,
        "hotspots": [],
        "severity": "none",
        "confidence": NON_THERMAL_CONFIDENCE,
        "metadata": {
            "totalHotspots": 0,
            "maxTemperature": None,
            "affectedArea": 0,
            "message": NON_THERMAL_MESSAGE,
        },
    }


def degraded_response(request_id: str, base: Dict[str, Any]) -> Dict[str, Any]:
    """Well-formed, information-poor answer used when the inference call failed."""
    metadata = dict(base)
    metadata.update(
        {
            "totalHotspots": 0,
            "maxTemperature": None,
            "affectedArea": 0,
            "message": DEGRADED_MESSAGE,
            "error": DEGRADED_ERROR,
        }
    )
    return {
        "requestId": request_id,
        "hotspots": [],
        "severity": "unknown",
        "confidence": DEGRADED_CONFIDENCE,
        "metadata": metadata,
    }


def analysis_response(request_id: str, result: HotspotAnalysisResult, base: Dict[str, Any]) -> Dict[str, Any]:
    """Merge a normalized inference result over the base metadata."""
    metadata = dict(base)
    metadata.update(
        {
            "totalHotspots": len(result.hotspots),
            "maxTemperature": result.max_temperature,
            "affectedArea": affected_area(result.hotspots),
        }
    )
    # Inference-provided fields win over the detection metadata.
    metadata.update(
        {
            "analysis": result.analysis,
            "recommendations": list(result.recommendations),
            "aiModel": result.model,
            "confidence": result.confidence,
        }
    )
    return {
        "requestId": request_id,
        "severity": result.severity,
        "hotspots": [h.to_dict() for h in result.hotspots],
        "confidence": result.confidence,
        "metadata": metadata,
    }


def assemble_response(request_id: str, outcome: InferenceOutcome, base: Dict[str, Any]) -> Dict[str, Any]:
    """Convert an inference outcome into the response body; degraded outcomes never raise."""
    if isinstance(outcome, InferenceOk):
        return analysis_response(request_id, outcome.result, base)
    return degraded_response(request_id, base)


def degraded_reason(outcome: InferenceOutcome) -> Optional[str]:
    return outcome.reason if isinstance(outcome, InferenceDegraded) else None
