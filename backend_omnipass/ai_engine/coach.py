"""
AI coach: catalogue questions, personalised suggestions and answers.

Answers share the CommentaryGate with the insights step. Without a Gemini key,
or on any failure, a canned answer for the question id (or a generic one) is
returned.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from backend_omnipass.ai_engine.commentary_gate import CommentaryGate
from backend_omnipass.ai_engine.gemini_client import GeminiClient
from backend_omnipass.ai_engine.insights import RATE_LIMIT_MESSAGE
from backend_omnipass.ai_engine.json_extract import extract_json_object, string_list
from backend_omnipass.ai_engine.prompts import build_coaching_prompt
from backend_omnipass.analytics.models import AccessTier, AnalysisResult, CamelModel
from backend_omnipass.core.exceptions import MissingQuestionError
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger(__name__)

GENERAL_QUESTION = "General DeFi question"


class CoachQuestion(CamelModel):
    id: str
    question: str
    category: str
    requires_analysis: bool = False


class CoachResponse(CamelModel):
    question: str
    answer: str
    action_items: list[str] = Field(default_factory=list)
    related_questions: list[str] = Field(default_factory=list)


QUESTION_CATALOGUE: tuple[CoachQuestion, ...] = (
    CoachQuestion(id="next-tier", question="How to reach the next tier?", category="tier", requires_analysis=True),
    CoachQuestion(id="improve-risk", question="How to improve my risk score?", category="risk", requires_analysis=True),
    CoachQuestion(id="explore-protocols", question="What protocols should I explore?", category="protocol"),
    CoachQuestion(
        id="diversification",
        question="How can I diversify my portfolio better?",
        category="risk",
        requires_analysis=True,
    ),
    CoachQuestion(id="cross-chain", question="Which chains should I expand to?", category="protocol", requires_analysis=True),
    CoachQuestion(id="defi-basics", question="What are the safest DeFi strategies for beginners?", category="general"),
    CoachQuestion(
        id="yield-optimization",
        question="How can I optimize my yield farming returns?",
        category="protocol",
        requires_analysis=True,
    ),
    CoachQuestion(id="risk-management", question="What are the main risks in DeFi I should watch?", category="risk"),
)

BRONZE_UPGRADE_QUESTION = CoachQuestion(
    id="bronze-upgrade",
    question="I'm Bronze tier, what should I focus on first?",
    category="tier",
    requires_analysis=True,
)
MULTI_CHAIN_START_QUESTION = CoachQuestion(
    id="multi-chain-start",
    question="How do I start using multiple chains?",
    category="protocol",
    requires_analysis=True,
)

_QUESTION_TEXT = {
    q.id: q.question for q in (*QUESTION_CATALOGUE, BRONZE_UPGRADE_QUESTION, MULTI_CHAIN_START_QUESTION)
}

_FALLBACK_ANSWERS: dict[str, dict[str, Any]] = {
    "next-tier": {
        "answer": (
            "To advance to the next tier in OmniPass, focus on increasing your Total Value Locked (TVL) "
            "across multiple chains while maintaining good risk management practices. Start by expanding "
            "your holdings to at least 2-3 different blockchain networks like Ethereum and Polygon. "
            "Maintain healthy lending positions with health factors above 1.5 on platforms like Aave V3. "
            "Your activity score improves through diverse protocol interactions, so explore different DeFi "
            "protocols systematically. Use testnets first to practice strategies before committing mainnet funds."
        ),
        "action_items": [
            "Increase TVL by gradually adding more funds across multiple chains",
            "Expand to at least 2-3 different blockchain networks (Ethereum, Polygon)",
            "Maintain lending positions with health factors above 1.5 on Aave V3",
            "Interact with 3+ different DeFi protocols to boost activity score",
        ],
        "related_questions": ["What protocols should I explore?", "How to improve my risk score?"],
    },
    "improve-risk": {
        "answer": (
            "Improving your risk score requires a combination of conservative position management and "
            "portfolio diversification. Focus on maintaining higher health factors in lending protocols "
            "(aim for 2.0+ on Aave), diversifying your holdings across multiple chains and protocols, and "
            "avoiding over-leveraged positions. Use established, audited protocols like Aave, Compound and "
            "Uniswap rather than newer, unproven platforms. Consider dollar-cost averaging into positions "
            "rather than making large single investments, and keep emergency reserves."
        ),
        "action_items": [
            "Keep health factors above 2.0 in all lending protocols",
            "Diversify holdings across 3+ different protocols and chains",
            "Use conservative leverage ratios (maximum 2:1 if any)",
            "Maintain 10-20% of portfolio in stablecoins as emergency reserves",
        ],
        "related_questions": [
            "What are the safest DeFi strategies for beginners?",
            "How can I diversify my portfolio better?",
        ],
    },
    "explore-protocols": {
        "answer": (
            "Start with battle-tested lending protocols like Aave V3 on Ethereum and Polygon for earning "
            "stable yields on your assets. Next, explore decentralized exchanges like Uniswap V3 for liquidity "
            "provision, starting with stable pairs (USDC/USDT) before moving to more volatile pairs. Consider "
            "Curve Finance for additional yield. Start on testnets to understand the mechanics before "
            "committing real funds, and research each protocol's audits and TVL trends."
        ),
        "action_items": [
            "Start with Aave V3 lending on Sepolia testnet, then mainnet",
            "Try providing liquidity on Uniswap V3 with stablecoin pairs first",
            "Explore Curve Finance for yield farming opportunities",
            "Research protocol audits and community feedback before investing",
        ],
        "related_questions": [
            "How to reach the next tier?",
            "What are the main risks in DeFi I should watch?",
        ],
    },
}

_GENERIC_FALLBACK: dict[str, Any] = {
    "answer": (
        "Thank you for your question about DeFi strategy. Start by focusing on established, audited "
        "protocols and maintaining good risk management practices. Consider beginning with lending "
        "protocols like Aave for stable returns, then gradually exploring liquidity provision and yield "
        "farming. Research thoroughly and start with small amounts on testnets to learn the mechanics safely."
    ),
    "action_items": [
        "Research the topic thoroughly using official documentation",
        "Start with small amounts on testnets to practice safely",
        "Join DeFi communities and forums for additional insights and support",
    ],
    "related_questions": ["What protocols should I explore?", "How to improve my risk score?"],
}


def question_text(question_id: str | None, custom_question: str | None = None) -> str:
    if custom_question:
        return custom_question
    return _QUESTION_TEXT.get(question_id or "", GENERAL_QUESTION)


def fallback_answer(question_id: str | None, custom_question: str | None = None) -> CoachResponse:
    template = _FALLBACK_ANSWERS.get(question_id or "", _GENERIC_FALLBACK)
    return CoachResponse(question=question_text(question_id, custom_question), **template)


def rate_limited_answer(question_id: str | None, custom_question: str | None = None) -> CoachResponse:
    return CoachResponse(
        question=question_text(question_id, custom_question),
        answer=RATE_LIMIT_MESSAGE,
        action_items=[
            "Wait 1 minute before asking another question",
            "Consider browsing existing questions first",
        ],
        related_questions=["What protocols should I explore?", "How to improve my risk score?"],
    )


def _active_chain_count(analysis: AnalysisResult) -> int:
    return sum(1 for c in analysis.chains if c.valuation_usd > 0)


def get_available_questions(analysis: AnalysisResult | None = None) -> list[CoachQuestion]:
    """Catalogue questions, plus personalised ones when an analysis is supplied."""
    questions = list(QUESTION_CATALOGUE)
    if analysis is None:
        return questions
    if analysis.tier == AccessTier.BRONZE:
        questions.append(BRONZE_UPGRADE_QUESTION)
    if _active_chain_count(analysis) < 2:
        questions.append(MULTI_CHAIN_START_QUESTION)
    return questions


def get_suggested_questions(analysis: AnalysisResult) -> list[str]:
    suggestions: list[str] = []
    if analysis.tier == AccessTier.BRONZE and analysis.total_value_locked_usd < 500:
        suggestions.append("How can I increase my portfolio value efficiently on testnets?")
    if _active_chain_count(analysis) < 2:
        suggestions.append("Which chain should I expand to next for better diversification?")
    if analysis.risk_score < 60:
        suggestions.append("How can I improve my risk management and safety practices?")
    if analysis.activity_score < 50:
        suggestions.append("How can I increase my DeFi activity score safely?")
    if not suggestions:
        suggestions = [
            "How can I optimize my yield farming strategy?",
            "What new protocols are worth exploring safely?",
            "How do I prepare my portfolio for market volatility?",
        ]
    return suggestions


def parse_coach_response(text: str, question: str) -> CoachResponse | None:
    parsed = extract_json_object(text)
    if parsed is None:
        return None
    answer = parsed.get("answer")
    if not isinstance(answer, str) or not answer.strip():
        return None
    return CoachResponse(
        question=question,
        answer=answer.strip(),
        action_items=string_list(parsed.get("actionItems")),
        related_questions=string_list(parsed.get("relatedQuestions")),
    )


class CoachService:
    def __init__(self, client: GeminiClient | None, gate: CommentaryGate) -> None:
        self._client = client
        self._gate = gate

    @property
    def live(self) -> bool:
        return self._client is not None

    async def answer_question(
        self,
        question_id: str | None = None,
        custom_question: str | None = None,
        analysis: AnalysisResult | None = None,
    ) -> CoachResponse:
        """
        Answer a catalogue question (by id) or a free-text question.

        Raises MissingQuestionError when neither is given. Collaborator failures
        never raise: the canned answer is returned instead.
        """
        if not question_id and not custom_question:
            raise MissingQuestionError()
        if self._client is None:
            logger.debug("coach_fallback_no_credential", question_id=question_id)
            return fallback_answer(question_id, custom_question)

        tier = analysis.tier.value if analysis is not None else None
        cache_key = CommentaryGate.cache_key(f"coach:{custom_question or question_id}", tier)
        cached = self._gate.get_cached(cache_key)
        if cached is not None:
            logger.debug("coach_cache_hit", question_id=question_id, tier=tier)
            return cached.model_copy(deep=True)

        if not self._gate.allow_request(tier):
            return rate_limited_answer(question_id, custom_question)

        question = question_text(question_id, custom_question)
        try:
            text = await self._client.complete(build_coaching_prompt(question, analysis))
        except Exception as e:
            logger.warning("coach_generation_failed", question_id=question_id, error=str(e))
            return fallback_answer(question_id, custom_question)

        response = parse_coach_response(text, question)
        if response is None:
            logger.warning("coach_parse_failed", question_id=question_id)
            return fallback_answer(question_id, custom_question)
        self._gate.set_cached(cache_key, response)
        logger.info("coach_answer_generated", question_id=question_id, tier=tier)
        return response.model_copy(deep=True)
