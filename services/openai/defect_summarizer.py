"""Defect-log summaries for executives, engineers and maintenance crews.

Given a list of logged defects, this module scores their overall severity,
derives follow-up action items, and asks the chat model for a written
summary in one of three registers.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from services.openai.media_inputs import build_messages
from services.openai.response_parser import extract_text

DEFAULT_MODEL = "gpt-4.1-2025-04-14"
SEVERITY_SCORES = {"critical": 4, "high": 3, "medium": 2, "low": 1}


def _severity(defect: Dict[str, Any]) -> str:
    return str(defect.get("severity") or "").strip().lower()


def _defect_lines(defects: List[Dict[str, Any]]) -> str:
    return "\n".join(
        f"- {d.get('type', 'Unknown')} ({d.get('severity', 'unknown')} severity) "
        f"at {d.get('location', 'unknown location')}: {d.get('description', '')}"
        for d in defects
    )


def overall_severity(defects: List[Dict[str, Any]]) -> str:
    """Map the mean severity score of `defects` onto a severity level."""
    total = sum(SEVERITY_SCORES.get(_severity(d), 0) for d in defects)
    average = total / (len(defects) or 1)
    if average >= 3.5:
        return "critical"
    if average >= 2.5:
        return "high"
    if average >= 1.5:
        return "medium"
    return "low"


def action_items(defects: List[Dict[str, Any]]) -> List[str]:
    """Return follow-up actions driven by critical/high counts and log size."""
    items: List[str] = []
    critical = sum(1 for d in defects if _severity(d) == "critical")
    high = sum(1 for d in defects if _severity(d) == "high")
    if critical > 0:
        items.append(f"Immediate action required for {critical} critical defect(s)")
    if high > 0:
        items.append(f"Schedule urgent maintenance for {high} high-severity issue(s)")
    if len(defects) > 5:
        items.append("Comprehensive site inspection recommended")
    return items


class DefectSummarizer:
    """Summarize a defect log with the chat model."""

    SYSTEM_PROMPT = (
        "You are an expert AI analyst specializing in solar infrastructure defect analysis and reporting."
    )

    def __init__(self, client: AsyncOpenAI, *, model: str = DEFAULT_MODEL) -> None:
        if client is None:
            raise ValueError("OpenAI AsyncOpenAI client is required.")
        self.client = client
        self.model = model

    def build_prompt(self, defects: List[Dict[str, Any]], project_name: Optional[str], summary_type: str) -> str:
        """Return the user prompt for `summary_type`, falling back to the executive register."""
        site = project_name or "the project site"
        listing = _defect_lines(defects)
        if summary_type == "technical":
            return (
                f"As an AI analyst, create a technical summary of the following defects found at {site}.\n"
                "Include specific technical details, root causes, and detailed remediation steps.\n\n"
                f"Defects found:\n{listing}\n\n"
                "Structure the response with:\n"
                "1. Overview of technical issues\n"
                "2. Root cause analysis\n"
                "3. Recommended technical interventions"
            )
        if summary_type == "maintenance":
            return (
                f"As an AI analyst, create a maintenance-focused summary for the following defects at {site}.\n"
                "Prioritize by urgency and group by maintenance type (immediate, scheduled, preventive).\n\n"
                f"Defects found:\n{listing}\n\n"
                "Organize by maintenance priority and include estimated time/resources needed."
            )
        return (
            "As an AI analyst for solar infrastructure, create a concise executive summary (2-3 sentences) "
            f"of the following defects found at {site}.\n"
            "Focus on business impact, urgency, and recommended actions. "
            "Use clear, non-technical language suitable for executives.\n\n"
            f"Defects found:\n{listing}\n\n"
            "Format the response as a single paragraph highlighting the most critical issues first."
        )

    async def summarize(
        self,
        defects: List[Dict[str, Any]],
        *,
        project_name: Optional[str] = None,
        summary_type: str = "executive",
    ) -> Dict[str, Any]:
        """Return the generated summary with severity and action-item metadata."""
        start = time.time()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(
                    self.build_prompt(defects, project_name, summary_type),
                    system_prompt=self.SYSTEM_PROMPT,
                ),
                temperature=0.7,
                max_tokens=8192,
            )
        except Exception as exc:
            logging.error("OpenAI summary request failed: %s", exc)
            raise

        logging.info("Defect summary latency: %.3fs", time.time() - start)

        return {
            "summary": extract_text(response),
            "metadata": {
                "summaryType": summary_type,
                "projectName": project_name,
                "totalDefects": len(defects),
                "overallSeverity": overall_severity(defects),
                "actionItems": action_items(defects),
                "generatedAt": datetime.now(timezone.utc).isoformat(),
                "model": self.model,
            },
        }
