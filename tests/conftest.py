"""Pytest configuration and fixtures for the hotspot service tests."""

from __future__ import annotations

import io
import json
from types import SimpleNamespace
from typing import Any, Callable, Dict, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import create_app
from services.rate_limiter import InMemoryRateLimitStore
from utils.settings import Settings


def make_completion(content: Any, prompt_tokens: int = 1200, completion_tokens: int = 300) -> SimpleNamespace:
    """Build an object shaped like a Chat Completions response."""
    text = content if isinstance(content, str) else json.dumps(content)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


class FakeOpenAI:
    """Stand-in for `AsyncOpenAI` exposing only `chat.completions.create`."""

    def __init__(self, create: Optional[AsyncMock] = None) -> None:
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=create or AsyncMock()))
        self.closed = False

    @property
    def create(self) -> AsyncMock:
        return self.chat.completions.create

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def image_bytes(color=(0, 0, 0), size=(200, 200), fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def iron_palette_image() -> Image.Image:
    """8x8 grid of 20px blocks, all with a hot red channel and varied green/blue levels."""
    image = Image.new("RGB", (160, 160))
    for gy in range(8):
        for bx in range(8):
            block = Image.new("RGB", (20, 20), (240, gy * 32 + 5, bx * 32 + 5))
            image.paste(block, (bx * 20, gy * 20))
    return image


SAMPLE_ANALYSIS: Dict[str, Any] = {
    "hotspots": [
        {"x": 12.4, "y": 87.6, "radius": 14.5, "intensity": 92, "area": 640, "description": "Cell hotspot"},
        {"x": 55, "y": 40},
    ],
    "severity": "high",
    "maxTemperature": 78.5,
    "analysis": "Two anomalies on the upper string.",
    "recommendations": ["Inspect bypass diode", "Schedule IV curve test"],
    "confidence": 0.9,
}


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI(AsyncMock(return_value=make_completion(SAMPLE_ANALYSIS)))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(rate_limit=100, rate_window=3600.0, openai_timeout=5.0, request_timeout=5.0)


@pytest.fixture
def make_client(fake_openai: FakeOpenAI, clock: FakeClock, settings: Settings) -> Callable[..., TestClient]:
    """Return a factory producing started TestClients with injected state."""
    clients = []

    def factory(
        settings_override: Optional[Settings] = None,
        openai_client: Any = fake_openai,
    ) -> TestClient:
        app = create_app()
        app.state.settings = settings_override or settings
        app.state.rate_limiter = InMemoryRateLimitStore(clock=clock)
        app.state.openai_client = openai_client
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
