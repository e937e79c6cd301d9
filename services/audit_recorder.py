"""Per-request audit trail for the analysis endpoints."""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.analysis_models import AuditLog

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger("audit")


class AuditRecorder:
    """Create, annotate and emit `AuditLog` records.

    Records are emitted as one `AUDIT {json}` line on the `audit` logger.
    Emission failures are logged and never reach the caller.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or AUDIT_LOGGER

    def start(self, client_ip: str, action: str, request_id: Optional[str] = None) -> AuditLog:
        """Open a record for a new request."""
        return AuditLog(
            request_id=request_id or str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            client_ip=client_ip,
            action=action,
            started_at=time.monotonic(),
        )

    @staticmethod
    def elapsed_ms(audit: AuditLog) -> int:
        return int((time.monotonic() - audit.started_at) * 1000)

    def note(self, audit: AuditLog, **details: Any) -> None:
        """Attach detail fields to the record."""
        audit.details.update(details)

    def finalize(self, audit: AuditLog, status: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Set status and processing time, then emit the record if not already emitted."""
        if audit.emitted:
            return
        audit.emitted = True
        audit.status = status
        audit.processing_time = self.elapsed_ms(audit)
        if details:
            audit.details.update(details)
        try:
            self.logger.info("AUDIT %s", json.dumps(audit.to_dict(), default=str))
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("Failed to write audit log for %s: %s", audit.request_id, exc)
