"""
FastAPI server over the analysis engine.

The lifespan builds one httpx.AsyncClient, one CommentaryGate and the engine
and stores them on app.state; the client is closed on shutdown. create_app()
accepts a prebuilt engine for tests.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI

from backend_omnipass import __version__
from backend_omnipass.analytics.analytics_pipeline import AnalysisEngine, build_engine
from backend_omnipass.api_server.analysis_routes import router as analysis_router
from backend_omnipass.api_server.coach_routes import router as coach_router
from backend_omnipass.config import Settings, get_settings
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, engine: AnalysisEngine | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client: httpx.AsyncClient | None = None
        if engine is not None:
            app.state.engine = engine
        else:
            cfg = settings or get_settings()
            client = httpx.AsyncClient()
            app.state.engine = build_engine(cfg, client)
        app.state.http_client = client
        logger.info(
            "api_started",
            network=app.state.engine.settings.network,
            gemini_configured=app.state.engine.coach.live,
        )
        try:
            yield
        finally:
            if client is not None:
                await client.aclose()
            logger.info("api_stopped")

    app = FastAPI(
        title="OmniPass API",
        description="Cross-chain DeFi wallet analysis, access tiers and AI coaching.",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(analysis_router)
    app.include_router(coach_router)

    @app.get("/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "network": app.state.engine.settings.network,
            "version": __version__,
        }

    return app


app = create_app()
