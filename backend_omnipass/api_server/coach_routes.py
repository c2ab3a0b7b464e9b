"""
FastAPI router: /api/coach.

Questions and suggestions can be personalised by an address; the analysis for
it is computed on the fly and a failure only drops the personalisation.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from backend_omnipass.ai_engine.coach import get_available_questions, get_suggested_questions
from backend_omnipass.analytics.analytics_pipeline import AnalysisEngine
from backend_omnipass.analytics.models import AnalysisResult
from backend_omnipass.api_server.dependencies import elapsed_ms, get_engine
from backend_omnipass.core.exceptions import MissingQuestionError
from backend_omnipass.omnipass_logging import get_logger
from backend_omnipass.utils.wallet_utils import is_valid_address, short_address

logger = get_logger(__name__)

router = APIRouter(prefix="/api/coach", tags=["coach"])

COACH_FEATURES = [
    "Personalized DeFi coaching with Gemini AI",
    "Tier advancement guidance",
    "Risk management advice",
    "Protocol recommendations",
    "Caching and rate limiting",
]


class AskRequest(BaseModel):
    """POST /api/coach/ask body."""

    model_config = ConfigDict(populate_by_name=True)

    question_id: str | None = Field(None, alias="questionId")
    custom_question: str | None = Field(None, alias="customQuestion")
    address: str | None = None


async def _optional_analysis(engine: AnalysisEngine, address: str | None) -> AnalysisResult | None:
    if not address or not is_valid_address(address):
        return None
    try:
        return await engine.analyze_cross_chain_activity(address)
    except Exception as e:
        logger.warning("coach_personalization_failed", address=short_address(address), error=str(e))
        return None


async def _questions(engine: AnalysisEngine, address: str | None):
    analysis = await _optional_analysis(engine, address)
    return {
        "success": True,
        "questions": [q.to_api() for q in get_available_questions(analysis)],
        "suggestedQuestions": get_suggested_questions(analysis) if analysis is not None else [],
        "personalizedResponse": analysis is not None,
    }


@router.get("/questions")
async def list_questions(engine: AnalysisEngine = Depends(get_engine)):
    return await _questions(engine, None)


@router.get("/questions/{address}")
async def list_questions_for(address: str, engine: AnalysisEngine = Depends(get_engine)):
    return await _questions(engine, address.strip())


@router.post("/ask")
async def ask(body: AskRequest, engine: AnalysisEngine = Depends(get_engine)):
    start = time.perf_counter()
    analysis = await _optional_analysis(engine, body.address)
    try:
        response = await engine.answer_coaching_question(body.question_id, body.custom_question, analysis)
    except MissingQuestionError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
    except Exception as e:
        logger.exception("coach_ask_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Failed to get coaching response",
                "processingTime": elapsed_ms(start),
            },
        )
    return {
        "success": True,
        "data": response.to_api(),
        "processingTime": elapsed_ms(start),
        "personalizedAdvice": analysis is not None,
        "userTier": analysis.tier.value if analysis is not None else None,
    }


@router.get("/suggestions/{address}")
async def suggestions(address: str, engine: AnalysisEngine = Depends(get_engine)):
    address = address.strip()
    if not is_valid_address(address):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Valid Ethereum address is required"},
        )
    analysis = await engine.analyze_cross_chain_activity(address)
    items = get_suggested_questions(analysis)
    return {
        "success": True,
        "suggestions": items,
        "userTier": analysis.tier.value,
        "tvl": analysis.total_value_locked_usd,
        "riskScore": analysis.risk_score,
        "recommendations": len(items),
    }


@router.get("/health")
def coach_health(engine: AnalysisEngine = Depends(get_engine)):
    live = engine.coach.live
    return {
        "success": True,
        "status": "AI Coach service operational",
        "features": COACH_FEATURES,
        "availableQuestions": len(get_available_questions()),
        "geminiApiConfigured": live,
        "fallbackMode": not live,
    }
