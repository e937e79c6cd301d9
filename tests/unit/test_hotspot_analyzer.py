"""Tests for the OpenAI-backed hotspot analyzer and its fallback."""

from __future__ import annotations

import asyncio
import base64
from unittest.mock import AsyncMock

import pytest

from conftest import SAMPLE_ANALYSIS, FakeOpenAI, make_completion
from models.analysis_models import InferenceDegraded, InferenceOk
from services.openai.hotspot_analyzer import HotspotAnalyzer


class TestHotspotAnalyzer:
    """Test suite for HotspotAnalyzer."""

    def test_requires_client(self) -> None:
        with pytest.raises(ValueError):
            HotspotAnalyzer(None)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_successful_call_is_normalized(self) -> None:
        client = FakeOpenAI(AsyncMock(return_value=make_completion(SAMPLE_ANALYSIS, 900, 210)))
        analyzer = HotspotAnalyzer(client, model="gpt-4.1")

        outcome = await analyzer.analyze(b"\x89PNG-bytes", mime_type="image/png", component_type="solar")

        assert isinstance(outcome, InferenceOk)
        result = outcome.result
        assert [h.x for h in result.hotspots] == [12, 55]
        assert result.hotspots[1].radius == 20
        assert result.severity == "high"
        assert result.confidence == 0.9
        assert result.usage == {"input_tokens": 900, "output_tokens": 210}

    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        client = FakeOpenAI(AsyncMock(return_value=make_completion({})))
        analyzer = HotspotAnalyzer(client, model="gpt-4.1")

        await analyzer.analyze(b"raw-image", mime_type="image/png", component_type="battery")

        kwargs = client.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4.1"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.1
        system, user = kwargs["messages"]
        assert system["role"] == "system"
        assert "thermal imaging analyst" in system["content"]
        assert "battery systems" in system["content"]
        text_part, image_part = user["content"]
        assert '"maxTemperature"' in text_part["text"]
        expected_url = "data:image/png;base64," + base64.b64encode(b"raw-image").decode()
        assert image_part["image_url"] == {"url": expected_url, "detail": "high"}

    @pytest.mark.asyncio
    async def test_exception_becomes_degraded(self) -> None:
        client = FakeOpenAI(AsyncMock(side_effect=RuntimeError("upstream 503")))
        outcome = await HotspotAnalyzer(client).analyze(b"img")

        assert outcome == InferenceDegraded(reason="upstream 503")

    @pytest.mark.asyncio
    async def test_malformed_json_becomes_degraded(self) -> None:
        client = FakeOpenAI(AsyncMock(return_value=make_completion("not json {")))
        outcome = await HotspotAnalyzer(client).analyze(b"img")

        assert isinstance(outcome, InferenceDegraded)

    @pytest.mark.asyncio
    async def test_deadline_becomes_degraded(self) -> None:
        async def slow(**_kwargs):
            await asyncio.sleep(5)

        client = FakeOpenAI(AsyncMock(side_effect=slow))
        outcome = await HotspotAnalyzer(client, timeout=0.05).analyze(b"img")

        assert outcome == InferenceDegraded(reason="timeout")
