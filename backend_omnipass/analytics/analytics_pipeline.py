"""
Analysis pipeline: one address -> AnalysisResult.

Stages run strictly in order: validate -> fetch (per chain, concurrent) ->
price -> value -> score -> classify -> comment -> assemble. Collaborators
resolve their own failures to fallback values, so only a malformed address
(InvalidAddressError) or a defect in the scoring code fails a request.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

import httpx

from backend_omnipass.ai_engine.coach import CoachResponse, CoachService
from backend_omnipass.ai_engine.commentary_gate import CommentaryGate
from backend_omnipass.ai_engine.gemini_client import GeminiClient
from backend_omnipass.ai_engine.insights import InsightsService
from backend_omnipass.analytics.activity_engine import calculate_activity_score
from backend_omnipass.analytics.diversification_engine import calculate_diversification_score
from backend_omnipass.analytics.models import (
    AnalysisMetrics,
    AnalysisResult,
    ChainObservation,
    ProtocolPosition,
)
from backend_omnipass.analytics.portfolio_metrics import compute_portfolio_metrics
from backend_omnipass.analytics.risk_engine import calculate_risk_score
from backend_omnipass.analytics.tier_classifier import classify_portfolio
from backend_omnipass.analytics.valuation import build_wallet_position, valuate_chain
from backend_omnipass.config.settings import Settings
from backend_omnipass.ingestion.alchemy_client import AlchemyBalanceSource
from backend_omnipass.ingestion.chains import ChainConfig, get_chain, get_supported_chains
from backend_omnipass.ingestion.lending import SyntheticLendingSource
from backend_omnipass.ingestion.mock_data import estimate_wallet_age_months
from backend_omnipass.ingestion.price_client import CoinGeckoPriceSource
from backend_omnipass.omnipass_logging import bind_address
from backend_omnipass.utils.wallet_utils import normalize_address

SECONDS_PER_MONTH = 30 * 24 * 3600


class AnalysisEngine:
    """
    Cross-chain analysis for one network mode.

    Sources are duck-typed: balance_source provides get_native_balance,
    get_token_balances and get_first_transaction_timestamp; price_source
    provides get_native_price_usd and get_token_price_usd; lending_source
    provides get_positions. All are awaited and must not raise.
    """

    def __init__(
        self,
        settings: Settings,
        balance_source,
        price_source,
        lending_source,
        insights: InsightsService,
        coach: CoachService,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        self.balance_source = balance_source
        self.price_source = price_source
        self.lending_source = lending_source
        self.insights = insights
        self.coach = coach
        self._clock = clock

    def chains_for(self, chain_ids: list[int] | None = None) -> list[ChainConfig]:
        if not chain_ids:
            return get_supported_chains(self.settings.network)
        return [get_chain(cid) for cid in dict.fromkeys(chain_ids)]

    async def analyze_cross_chain_activity(
        self,
        address: str,
        chain_ids: list[int] | None = None,
    ) -> AnalysisResult:
        """Full analysis. Raises InvalidAddressError (or UnsupportedChainError for explicit chain_ids)."""
        address = normalize_address(address)
        chains_cfg = self.chains_for(chain_ids)
        log = bind_address(address)
        log.info("analysis_pipeline_start", network=self.settings.network, chains=[c.chain_id for c in chains_cfg])

        fetched = await asyncio.gather(
            *(self._observe_chain(address, chain) for chain in chains_cfg),
            self._first_transaction(address, chains_cfg),
        )
        chains: list[ChainObservation] = list(fetched[:-1])
        first_tx_ts = fetched[-1]

        if first_tx_ts is None:
            age_months = estimate_wallet_age_months(address)
            age_estimated = True
        else:
            age_months = max(int((self._clock() - first_tx_ts) // SECONDS_PER_MONTH), 0)
            age_estimated = False

        portfolio = compute_portfolio_metrics(chains)
        risk = calculate_risk_score(chains, portfolio, age_months)
        activity = calculate_activity_score(portfolio)
        diversification = calculate_diversification_score(portfolio)
        access = classify_portfolio(chains, portfolio, self.settings.tier_thresholds)

        metrics = AnalysisMetrics(
            address=address,
            total_tvl=portfolio.total_tvl,
            chain_tvls={c.name: c.valuation_usd for c in chains},
            active_chain_count=portfolio.active_chain_count,
            active_positions=portfolio.total_position_count,
            protocol_names=list(portfolio.protocol_names),
            average_health_factor=portfolio.average_health_factor,
            risk_score=risk,
            activity_score=activity,
            diversification_score=diversification,
            tier=access.tier,
        )
        ai_insights = await self.insights.get_insights(metrics)

        result = AnalysisResult(
            address=address,
            network=self.settings.network,
            total_value_locked_usd=portfolio.total_tvl,
            risk_score=risk,
            activity_score=activity,
            diversification_score=diversification,
            chains=chains,
            ai_insights=ai_insights,
            access_level=access,
            wallet_age_months=age_months,
            wallet_age_estimated=age_estimated,
        )
        log.info(
            "analysis_pipeline_done",
            tvl=round(portfolio.total_tvl, 2),
            tier=access.tier.value,
            qualifies=access.qualifies,
            risk_score=risk,
            activity_score=activity,
            diversification_score=diversification,
        )
        return result

    async def _observe_chain(self, address: str, chain: ChainConfig) -> ChainObservation:
        native_balance, holdings, lending, native_price = await asyncio.gather(
            self.balance_source.get_native_balance(address, chain.chain_id),
            self.balance_source.get_token_balances(address, chain.chain_id),
            self.lending_source.get_positions(address, chain.chain_id),
            self.price_source.get_native_price_usd(chain),
        )
        priced = [h for h in holdings if h.raw_amount > 0]
        token_prices = await asyncio.gather(
            *(self.price_source.get_token_price_usd(h, chain) for h in priced)
        )
        prices = {h.contract_address: p for h, p in zip(priced, token_prices)}

        wallet_value = valuate_chain(
            native_balance,
            native_price,
            holdings,
            lambda h: prices[h.contract_address],
        )
        protocols: list[ProtocolPosition] = [build_wallet_position(wallet_value, holdings)]
        protocols.extend(lending)
        return ChainObservation(
            chain_id=chain.chain_id,
            name=chain.name,
            native_symbol=chain.native_symbol,
            native_balance=native_balance,
            native_price_usd=native_price,
            token_holdings=list(holdings),
            valuation_usd=sum(p.valuation_usd for p in protocols),
            protocols=protocols,
        )

    async def _first_transaction(self, address: str, chains: list[ChainConfig]) -> int | None:
        stamps = await asyncio.gather(
            *(self.balance_source.get_first_transaction_timestamp(address, c.chain_id) for c in chains)
        )
        found = [ts for ts in stamps if ts is not None]
        return min(found) if found else None

    async def answer_coaching_question(
        self,
        question_id: str | None = None,
        custom_question: str | None = None,
        requester_analysis: AnalysisResult | None = None,
    ) -> CoachResponse:
        return await self.coach.answer_question(question_id, custom_question, requester_analysis)


def build_engine(
    settings: Settings,
    http_client: httpx.AsyncClient,
    gate: CommentaryGate | None = None,
) -> AnalysisEngine:
    """Wire the live collaborators from settings. One gate is shared by insights and coach."""
    if gate is None:
        gate = CommentaryGate(
            ttl_sec=settings.cache_ttl_sec,
            window_sec=settings.rate_limit_window_sec,
            max_requests=settings.rate_limit_max_requests,
        )
    gemini = None
    if settings.gemini_api_key:
        gemini = GeminiClient(
            http_client,
            settings.gemini_api_key,
            model=settings.gemini_model,
            max_output_tokens=settings.gemini_max_tokens,
            timeout=settings.commentary_timeout_sec,
        )
    return AnalysisEngine(
        settings=settings,
        balance_source=AlchemyBalanceSource(
            http_client,
            api_key=settings.alchemy_api_key,
            timeout=settings.request_timeout_sec,
        ),
        price_source=CoinGeckoPriceSource(
            http_client,
            api_key=settings.coingecko_api_key,
            enabled=settings.price_lookups_enabled,
            timeout=settings.request_timeout_sec,
        ),
        lending_source=SyntheticLendingSource(enabled=settings.include_lending_positions),
        insights=InsightsService(gemini, gate),
        coach=CoachService(gemini, gate),
    )
