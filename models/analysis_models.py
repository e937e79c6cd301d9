"""Domain models for thermal hotspot analysis requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

SEVERITY_LEVELS = ("none", "low", "medium", "high", "critical", "unknown")


@dataclass(frozen=True)
class ImageSubmission:
    """One uploaded image and the hints supplied with it.

    Attributes:
        image_bytes: Raw bytes of the uploaded file.
        filename: Client-supplied filename, used for the extension check.
        content_type: Declared MIME type, if any.
        image_type: Caller hint, one of `thermal`, `visual` or `auto`.
        demo_mode: Forces thermal treatment regardless of color statistics.
        component_type: Optional `battery`, `inverter` or `solar` tag.
    """

    image_bytes: bytes
    filename: str
    content_type: Optional[str] = None
    image_type: str = "auto"
    demo_mode: bool = False
    component_type: Optional[str] = None


@dataclass(frozen=True)
class ColorFeatures:
    """Color statistics derived from the sampled pixel histogram."""

    unique_colors: int
    avg_color_variance: float
    red_bias: float
    blue_bias: float
    sample_count: int


@dataclass(frozen=True)
class ThermalClassification:
    """Verdict of the thermal pattern detector plus the inputs that produced it."""

    is_thermal: bool
    color_pattern: bool
    features: ColorFeatures
    signals: Dict[str, bool]
    image_type: str
    demo_mode: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isThermalImage": self.is_thermal,
            "thermalColorPattern": self.color_pattern,
            "imageType": self.image_type,
            "demoMode": self.demo_mode,
            "uniqueColors": self.features.unique_colors,
            "avgColorVariance": round(self.features.avg_color_variance, 2),
            "redBias": round(self.features.red_bias, 2),
            "blueBias": round(self.features.blue_bias, 2),
            "conditions": dict(self.signals),
        }


@dataclass
class Hotspot:
    """A normalized hotspot region; coordinates and intensity are percentages."""

    x: int
    y: int
    radius: int = 20
    intensity: int = 50
    area: float = 1000
    description: str = "Thermal anomaly detected"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
            "intensity": self.intensity,
            "area": self.area,
            "description": self.description,
        }


@dataclass
class HotspotAnalysisResult:
    """Normalized output of one successful inference call."""

    hotspots: List[Hotspot]
    severity: str
    confidence: float
    max_temperature: Optional[float] = None
    analysis: str = "Thermal analysis completed"
    recommendations: List[str] = field(default_factory=list)
    model: Optional[str] = None
    usage: Dict[str, Optional[int]] = field(default_factory=dict)


@dataclass(frozen=True)
class InferenceOk:
    """The inference service answered and its payload was normalized."""

    result: HotspotAnalysisResult


@dataclass(frozen=True)
class InferenceDegraded:
    """The inference service could not be used for this request."""

    reason: str


InferenceOutcome = Union[InferenceOk, InferenceDegraded]


@dataclass
class AuditLog:
    """Per-request audit record, finalized and emitted once."""

    request_id: str
    timestamp: str
    client_ip: str
    action: str
    status: str = "failure"
    details: Dict[str, Any] = field(default_factory=dict)
    processing_time: Optional[int] = None
    started_at: float = 0.0
    emitted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestId": self.request_id,
            "timestamp": self.timestamp,
            "clientIp": self.client_ip,
            "action": self.action,
            "status": self.status,
            "details": self.details,
            "processingTime": self.processing_time,
        }


@dataclass
class RateLimitEntry:
    """Request counter for one client within the current window."""

    count: int
    reset_time: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate-limit check; `retry_after` is whole seconds."""

    allowed: bool
    retry_after: int = 0
    remaining: int = 0
