"""
Commentary step: AI insights attached to every analysis result.

Order per request: no credential -> templated fallback; cache hit -> cached
insights; rate limit exceeded -> advisory insights; otherwise one generative
call, JSON extraction and validation. Any collaborator or parse failure falls
back to the templates. Only successfully parsed responses are cached.
"""

from __future__ import annotations

from backend_omnipass.ai_engine.commentary_gate import CommentaryGate
from backend_omnipass.ai_engine.gemini_client import GeminiClient
from backend_omnipass.ai_engine.json_extract import extract_json_object, string_list
from backend_omnipass.ai_engine.prompts import build_insights_prompt
from backend_omnipass.analytics.models import AIInsights, AnalysisMetrics
from backend_omnipass.omnipass_logging import bind_address, get_logger

logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = (
    "You are making requests too quickly. Please wait a moment before asking more questions. "
    "This helps us provide quality responses to all users."
)

HIGH_VALUE_TVL = 50_000.0
MODERATE_VALUE_TVL = 10_000.0
COMMITTED_TVL = 1_000.0
HEALTHY_AVG_HEALTH = 1.5
LIQUIDATION_WARNING_HEALTH = 1.3


def fallback_insights(metrics: AnalysisMetrics) -> AIInsights:
    """Deterministic insights built only from the metrics bundle."""
    tvl = metrics.total_tvl
    avg_health = metrics.average_health_factor

    if tvl > HIGH_VALUE_TVL:
        summary = "High-value DeFi user with significant cross-chain exposure"
    elif tvl > MODERATE_VALUE_TVL:
        summary = "Active DeFi participant with moderate portfolio size"
    else:
        summary = "Emerging DeFi user building cross-chain presence"

    if metrics.has_multi_chain:
        chain_point = f"Diversified across {metrics.active_chain_count} networks"
    else:
        chain_point = "Limited to single chain activity"
    if avg_health is None:
        health_point = "No leveraged lending positions detected"
    elif avg_health > HEALTHY_AVG_HEALTH:
        health_point = "Maintains healthy collateral ratios"
    else:
        health_point = "Moderate risk profile"
    commitment_point = (
        "Demonstrates commitment to DeFi protocols" if tvl > COMMITTED_TVL else "Early stage user"
    )

    if tvl > MODERATE_VALUE_TVL:
        recommendations = [
            "Consider expanding to additional L2 networks",
            "Explore yield optimization strategies",
        ]
    else:
        recommendations = [
            "Gradually increase position sizes",
            "Maintain diverse protocol exposure",
        ]

    if avg_health is not None and avg_health < LIQUIDATION_WARNING_HEALTH:
        risk_factors = ["Health factor approaching liquidation risk", "High leverage exposure"]
    else:
        risk_factors = ["Standard DeFi protocol risks", "Market volatility exposure"]

    return AIInsights(
        summary=summary,
        reasoning=[chain_point, health_point, commitment_point],
        recommendations=recommendations,
        risk_factors=risk_factors,
    )


def rate_limited_insights() -> AIInsights:
    return AIInsights(
        summary=RATE_LIMIT_MESSAGE,
        reasoning=[],
        recommendations=["Wait 1 minute before requesting another analysis"],
        risk_factors=[],
    )


def parse_insights(text: str) -> AIInsights | None:
    """Insights from a generative response, or None if no usable JSON object with a summary is found."""
    parsed = extract_json_object(text)
    if parsed is None:
        return None
    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        return None
    return AIInsights(
        summary=summary.strip(),
        reasoning=string_list(parsed.get("reasoning")),
        recommendations=string_list(parsed.get("recommendations")),
        risk_factors=string_list(parsed.get("riskFactors")),
    )


class InsightsService:
    def __init__(self, client: GeminiClient | None, gate: CommentaryGate) -> None:
        self._client = client
        self._gate = gate

    @property
    def live(self) -> bool:
        return self._client is not None

    async def get_insights(self, metrics: AnalysisMetrics) -> AIInsights:
        log = bind_address(metrics.address)
        if self._client is None:
            log.debug("insights_fallback_no_credential")
            return fallback_insights(metrics)

        tier = metrics.tier.value
        cache_key = CommentaryGate.cache_key(f"insights:{metrics.address}", tier)
        cached = self._gate.get_cached(cache_key)
        if cached is not None:
            log.debug("insights_cache_hit", tier=tier)
            return cached.model_copy(deep=True)

        if not self._gate.allow_request(tier):
            return rate_limited_insights()

        try:
            text = await self._client.complete(build_insights_prompt(metrics))
        except Exception as e:
            log.warning("insights_generation_failed", error=str(e))
            return fallback_insights(metrics)

        insights = parse_insights(text)
        if insights is None:
            log.warning("insights_parse_failed", response_chars=len(text) if isinstance(text, str) else 0)
            return fallback_insights(metrics)
        self._gate.set_cached(cache_key, insights)
        log.info("insights_generated", tier=tier)
        return insights.model_copy(deep=True)
