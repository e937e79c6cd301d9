import inspect
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from routes.hotspot_route import router as hotspot_router
from routes.summary_route import router as summary_router
from routes.vision_route import router as vision_router
from services.rate_limiter import InMemoryRateLimitStore
from utils.settings import Settings

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - runtime settings read from the environment
      - the in-process rate-limit store
      - the OpenAI async client
    and attach them to `app.state`.

    Values already present on `app.state` are kept, so tests can inject fakes.
    """
    settings = getattr(app.state, "settings", None) or Settings.from_env()
    app.state.settings = settings
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if getattr(app.state, "rate_limiter", None) is None:
        app.state.rate_limiter = InMemoryRateLimitStore()

    if getattr(app.state, "openai_client", None) is None:
        if not os.getenv("OPENAI_API_KEY"):
            raise RuntimeError("OPENAI_API_KEY environment variable is not set")
        try:
            app.state.openai_client = AsyncOpenAI()
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    try:
        yield
    finally:
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    LOGGER.warning("Error while closing OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Solar Inspection Hotspot API", lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports OpenAI client presence and rate-limit window.
        """
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        settings = getattr(request.app.state, "settings", None)
        return {
            "ok": True,
            "openai_available": has_openai,
            "rate_limit_window_seconds": settings.rate_window if settings else None,
        }

    # Register application routers
    app.include_router(hotspot_router)
    app.include_router(vision_router)
    app.include_router(summary_router)

    return app


app = create_app()
