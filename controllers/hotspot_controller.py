"""Controller for the thermal hotspot analysis endpoint."""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import Request, UploadFile
from fastapi.responses import JSONResponse

from models.analysis_models import (
    AuditLog,
    ImageSubmission,
    InferenceDegraded,
    InferenceOutcome,
    RateLimitDecision,
)
from services.audit_recorder import AuditRecorder
from services.openai.cost_generator import CostGenerator
from services.openai.hotspot_analyzer import HotspotAnalyzer
from services.rate_limiter import RateLimitStore
from services.result_assembler import assemble_response, base_metadata, degraded_reason, non_thermal_response
from services.thermal_detector import ThermalPatternDetector
from utils.image_validation import ImageValidationError, decode_image, image_mime_type, validate_upload
from utils.settings import Settings

LOGGER = logging.getLogger(__name__)

IMAGE_TYPES = ("thermal", "visual", "auto")
TIMEOUT_MESSAGE = "Request timed out. Please try with a smaller image."
GENERIC_ERROR_MESSAGE = "An error occurred during analysis. Please try again."
SUPPORT_MESSAGE = "If this issue persists, please contact support with the request ID."


def client_identifier(request: Request) -> str:
    """Return the first forwarded-for address, or `unknown`."""
    forwarded = request.headers.get("x-forwarded-for") or ""
    first = forwarded.split(",", 1)[0].strip()
    return first or "unknown"


def normalize_image_type(image_type: Optional[str]) -> str:
    value = (image_type or "auto").strip().lower()
    return value if value in IMAGE_TYPES else "auto"


def _error_response(status_code: int, message: str, request_id: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "requestId": request_id, **extra})


class HotspotController:
    """Run validation, rate limiting, thermal detection and hotspot extraction for one upload."""

    def __init__(
        self,
        detector: Optional[ThermalPatternDetector] = None,
        recorder: Optional[AuditRecorder] = None,
        cost_generator: Optional[CostGenerator] = None,
    ) -> None:
        self.detector = detector or ThermalPatternDetector()
        self.recorder = recorder or AuditRecorder()
        self.cost_generator = cost_generator or CostGenerator()

    async def analyze(
        self,
        request: Request,
        image: Optional[UploadFile],
        *,
        image_type: Optional[str] = None,
        demo_mode: bool = False,
        component_type: Optional[str] = None,
    ) -> JSONResponse:
        """Return the hotspot response for the uploaded image.

        Every path, including unexpected failures, produces a JSON response
        and exactly one emitted audit record.
        """
        client_ip = client_identifier(request)
        audit = self.recorder.start(client_ip, "hotspot_analysis")
        try:
            settings: Settings = request.app.state.settings
            rate_limiter: RateLimitStore = request.app.state.rate_limiter
            decision = rate_limiter.hit(client_ip, settings.rate_limit, settings.rate_window)
            if not decision.allowed:
                return self._rate_limited(audit, decision)
            response = await self._analyze(
                request, audit, image, normalize_image_type(image_type), demo_mode, component_type
            )
            response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
            return response
        except ImageValidationError as exc:
            self.recorder.note(audit, **exc.details)
            LOGGER.info("[%s] Image validation failed: %s", audit.request_id, exc)
            return _error_response(400, str(exc), audit.request_id)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            timed_out = isinstance(exc, asyncio.TimeoutError) or "timeout" in str(exc).lower()
            self.recorder.note(audit, error=str(exc) or exc.__class__.__name__)
            LOGGER.exception("[%s] Hotspot analysis failed", audit.request_id)
            return _error_response(
                500,
                TIMEOUT_MESSAGE if timed_out else GENERIC_ERROR_MESSAGE,
                audit.request_id,
                support=SUPPORT_MESSAGE,
            )
        finally:
            self.recorder.finalize(audit, "failure")

    def _rate_limited(self, audit: AuditLog, decision: RateLimitDecision) -> JSONResponse:
        self.recorder.note(audit, error="Rate limit exceeded")
        LOGGER.warning("[%s] Rate limit exceeded for %s", audit.request_id, audit.client_ip)
        response = _error_response(
            429,
            "Too many requests. Please try again later.",
            audit.request_id,
            retryAfter=decision.retry_after,
        )
        response.headers["Retry-After"] = str(decision.retry_after)
        response.headers["X-RateLimit-Remaining"] = "0"
        return response

    async def _analyze(
        self,
        request: Request,
        audit: AuditLog,
        image: Optional[UploadFile],
        image_type: str,
        demo_mode: bool,
        component_type: Optional[str],
    ) -> JSONResponse:
        settings: Settings = request.app.state.settings
        request_id = audit.request_id

        if image is None:
            validate_upload(None, None, max_file_size=settings.max_file_size, allowed_formats=settings.allowed_formats)

        try:
            image_bytes = await asyncio.wait_for(image.read(), timeout=settings.request_timeout)
        except asyncio.TimeoutError as exc:
            raise asyncio.TimeoutError("File processing timeout") from exc

        submission = ImageSubmission(
            image_bytes=image_bytes,
            filename=image.filename or "",
            content_type=image.content_type,
            image_type=image_type,
            demo_mode=demo_mode,
            component_type=component_type,
        )
        validate_upload(
            submission.filename,
            len(submission.image_bytes),
            max_file_size=settings.max_file_size,
            allowed_formats=settings.allowed_formats,
        )
        self.recorder.note(
            audit,
            fileInfo={
                "name": submission.filename,
                "size": len(submission.image_bytes),
                "type": submission.content_type,
                "imageType": submission.image_type,
                "demoMode": submission.demo_mode,
                "componentType": submission.component_type,
            },
        )

        decoded = await asyncio.to_thread(
            decode_image, submission.image_bytes, max_dimension=settings.max_image_dimension
        )
        width, height = decoded.size
        self.recorder.note(
            audit,
            imageMetadata={"width": width, "height": height, "format": decoded.format, "mode": decoded.mode},
        )

        classification = await asyncio.to_thread(
            self.detector.classify, decoded, image_type=submission.image_type, demo_mode=submission.demo_mode
        )
        self.recorder.note(audit, classification=classification.to_dict())

        if not classification.is_thermal:
            self.recorder.finalize(audit, "success", {"results": {"severity": "none", "hotspotCount": 0}})
            return JSONResponse(content=non_thermal_response(request_id))

        outcome = await self._run_inference(request, settings, submission, image_mime_type(decoded))
        body = assemble_response(
            request_id,
            outcome,
            base_metadata(
                width=width,
                height=height,
                image_type="thermal",
                processing_time_ms=self.recorder.elapsed_ms(audit),
            ),
        )

        results: Dict[str, Any] = {
            "severity": body["severity"],
            "hotspotCount": len(body["hotspots"]),
            "confidence": body["confidence"],
        }
        if isinstance(outcome, InferenceDegraded):
            results.update({"error": body["metadata"]["error"], "reason": degraded_reason(outcome)})
            self.recorder.finalize(audit, "failure", {"results": results})
        else:
            usage = outcome.result.usage
            results["cost"] = self.cost_generator.estimate_or_zero(usage, settings.openai_model)
            self.recorder.finalize(audit, "success", {"results": results})
        return JSONResponse(content=body)

    async def _run_inference(
        self,
        request: Request,
        settings: Settings,
        submission: ImageSubmission,
        mime_type: str,
    ) -> InferenceOutcome:
        openai_client = getattr(request.app.state, "openai_client", None)
        if openai_client is None:
            LOGGER.error("OpenAI client not initialized; returning degraded hotspot result.")
            return InferenceDegraded(reason="OpenAI client not initialized")
        analyzer = HotspotAnalyzer(openai_client, model=settings.openai_model, timeout=settings.openai_timeout)
        return await analyzer.analyze(
            submission.image_bytes, mime_type=mime_type, component_type=submission.component_type
        )
