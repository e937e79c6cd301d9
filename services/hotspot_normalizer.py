"""Normalize the inference service's hotspot JSON into bounded records.

The service is asked for a fixed JSON shape but nothing guarantees it. Every
field is optional here; anything missing, falsy or of the wrong type is
replaced by a default before the rest of the pipeline sees it.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from models.analysis_models import SEVERITY_LEVELS, Hotspot, HotspotAnalysisResult

MAX_HOTSPOTS = 50
DEFAULT_RADIUS = 20
DEFAULT_INTENSITY = 50
DEFAULT_AREA = 1000
DEFAULT_DESCRIPTION = "Thermal anomaly detected"
DEFAULT_SEVERITY = "medium"
DEFAULT_CONFIDENCE = 0.85
DEFAULT_ANALYSIS = "Thermal analysis completed"
# Affected area is reported as summed pixel area / 100, not scaled by image resolution.
AFFECTED_AREA_DIVISOR = 100


def _lenient_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching the service's integer convention."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _whole_if_integral(value: float) -> float:
    return int(value) if float(value).is_integer() else value


class RawHotspot(BaseModel):
    """One hotspot entry exactly as the service returned it."""

    model_config = ConfigDict(extra="ignore")

    x: Optional[float] = None
    y: Optional[float] = None
    radius: Optional[float] = None
    intensity: Optional[float] = None
    area: Optional[float] = None
    description: Optional[str] = None

    @field_validator("x", "y", "radius", "intensity", "area", mode="before")
    @classmethod
    def _number(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return value.strip() if isinstance(value, str) else None


class RawHotspotAnalysis(BaseModel):
    """Top-level payload of the hotspot analysis response."""

    model_config = ConfigDict(extra="ignore")

    hotspots: List[RawHotspot] = []
    severity: Optional[str] = None
    maxTemperature: Optional[float] = None
    analysis: Optional[str] = None
    recommendations: List[str] = []
    confidence: Optional[float] = None

    @field_validator("hotspots", mode="before")
    @classmethod
    def _hotspot_list(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("severity", "analysis", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("maxTemperature", "confidence", mode="before")
    @classmethod
    def _optional_number(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)

    @field_validator("recommendations", mode="before")
    @classmethod
    def _recommendation_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]


def normalize_hotspot(raw: RawHotspot) -> Hotspot:
    """Round, clamp and default a single hotspot."""
    return Hotspot(
        x=round_half_up(_clamp(raw.x or 0, 0, 100)),
        y=round_half_up(_clamp(raw.y or 0, 0, 100)),
        radius=round_half_up(raw.radius or DEFAULT_RADIUS),
        intensity=round_half_up(_clamp(raw.intensity or DEFAULT_INTENSITY, 0, 100)),
        area=_whole_if_integral(raw.area or DEFAULT_AREA),
        description=raw.description or DEFAULT_DESCRIPTION,
    )


def normalize_hotspots(raw_hotspots: List[RawHotspot], limit: int = MAX_HOTSPOTS) -> List[Hotspot]:
    """Normalize hotspots, keeping only the first `limit` in their original order."""
    return [normalize_hotspot(raw) for raw in raw_hotspots[:limit]]


def normalize_severity(value: Optional[str]) -> str:
    if not value:
        return DEFAULT_SEVERITY
    severity = value.strip().lower()
    if severity not in SEVERITY_LEVELS or severity == "unknown":
        return DEFAULT_SEVERITY
    return severity


def normalize_confidence(value: Optional[float], default: float = DEFAULT_CONFIDENCE) -> float:
    """Map a service confidence onto [0, 1].

    Values above 1 are treated as percentages. A missing or zero value falls back to `default`.
    """
    if not value:
        return default
    if value > 1:
        value = value / 100
    return _clamp(value, 0.0, 1.0)


def affected_area(hotspots: List[Hotspot]) -> int:
    """Sum hotspot areas (circle area when no area is set) and scale by 1/100."""
    total = sum(h.area or math.pi * h.radius * h.radius for h in hotspots)
    return round_half_up(total / AFFECTED_AREA_DIVISOR)


def parse_analysis_payload(payload: Dict[str, Any], *, model: Optional[str] = None) -> HotspotAnalysisResult:
    """Turn a decoded JSON payload into a normalized `HotspotAnalysisResult`.

    Raises:
        ValueError: If the payload is not a JSON object.
    """
    if not isinstance(payload, dict):
        raise ValueError("Hotspot analysis payload must be a JSON object.")
    raw = RawHotspotAnalysis.model_validate(payload)
    return HotspotAnalysisResult(
        hotspots=normalize_hotspots(raw.hotspots),
        severity=normalize_severity(raw.severity),
        confidence=normalize_confidence(raw.confidence),
        max_temperature=raw.maxTemperature or None,
        analysis=raw.analysis or DEFAULT_ANALYSIS,
        recommendations=list(raw.recommendations),
        model=model,
    )
