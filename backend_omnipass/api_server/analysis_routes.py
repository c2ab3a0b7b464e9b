"""
FastAPI router: /api/analysis.

GET /{address} and POST /user return {success, data, processingTime}. An
invalid address is a 400 with the same envelope; collaborator failures never
reach this layer.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend_omnipass.analytics.analytics_pipeline import AnalysisEngine
from backend_omnipass.api_server.dependencies import elapsed_ms, get_engine
from backend_omnipass.core.exceptions import InvalidAddressError, UnsupportedChainError
from backend_omnipass.ingestion.chains import FAUCETS, get_supported_chains, list_all_chains
from backend_omnipass.omnipass_logging import get_logger
from backend_omnipass.utils.wallet_utils import short_address

logger = get_logger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


class AnalysisRequest(BaseModel):
    """POST /api/analysis/user body."""

    address: str = Field("", description="EVM address (0x + 40 hex)")
    chains: list[int] | None = Field(None, description="Optional chain ids; defaults to the network's chains")


def _error(status_code: int, message: str, start: float) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "processingTime": elapsed_ms(start)},
    )


async def _run_analysis(
    engine: AnalysisEngine,
    address: str,
    chain_ids: list[int] | None,
    start: float,
):
    if not address:
        return _error(400, "Address is required", start)
    try:
        result = await engine.analyze_cross_chain_activity(address, chain_ids)
    except (InvalidAddressError, UnsupportedChainError) as e:
        logger.info("analysis_rejected", address=short_address(address), error=str(e))
        return _error(400, str(e), start)
    except Exception as e:
        logger.exception("analysis_failed", address=short_address(address), error=str(e))
        return _error(500, "Analysis failed", start)
    return {"success": True, "data": result.to_api(), "processingTime": elapsed_ms(start)}


@router.get("/chains")
def list_chains(
    all_chains: bool = Query(False, alias="all"),
    engine: AnalysisEngine = Depends(get_engine),
):
    """Chains observed in the configured network mode; ?all=true lists every registered chain."""
    chains = list_all_chains() if all_chains else get_supported_chains(engine.settings.network)
    return {
        "success": True,
        "network": engine.settings.network,
        "chains": [c.to_api() for c in chains],
    }


@router.get("/health")
def analysis_health(engine: AnalysisEngine = Depends(get_engine)):
    settings = engine.settings
    return {
        "success": True,
        "status": "healthy",
        "network": settings.network,
        "chains": [c.name for c in get_supported_chains(settings.network)],
        "services": {
            "alchemy": bool(settings.alchemy_api_key),
            "gemini": bool(settings.gemini_api_key),
            "coingecko": settings.price_lookups_enabled,
        },
        "tierThresholds": {
            "PLATINUM": settings.tier_thresholds.platinum_tvl,
            "GOLD": settings.tier_thresholds.gold_tvl,
            "SILVER": settings.tier_thresholds.silver_tvl,
            "BRONZE": settings.tier_thresholds.bronze_tvl,
        },
    }


@router.get("/faucets")
def list_faucets():
    return {"success": True, "faucets": FAUCETS}


@router.post("/user")
async def analyze_user(body: AnalysisRequest, engine: AnalysisEngine = Depends(get_engine)):
    start = time.perf_counter()
    return await _run_analysis(engine, body.address.strip(), body.chains, start)


# Declared last so /chains, /health and /faucets are not captured as addresses.
@router.get("/{address}")
async def analyze_address(address: str, engine: AnalysisEngine = Depends(get_engine)):
    start = time.perf_counter()
    return await _run_analysis(engine, address.strip(), None, start)
