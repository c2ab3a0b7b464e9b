"""Request-scoped access to objects built in the app lifespan."""

from __future__ import annotations

import time

from fastapi import Request

from backend_omnipass.analytics.analytics_pipeline import AnalysisEngine


def get_engine(request: Request) -> AnalysisEngine:
    return request.app.state.engine


def elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
