"""
Access tier classification. Order of checks matters: first match wins.

  PLATINUM  tvl >= platinum, avg health >= 2.0, chains >= 2
  GOLD      tvl >= gold,     avg health >= 1.5, chains >= 2
  SILVER    tvl >= silver,   avg health >= 1.3
  BRONZE    tvl >= bronze                       (qualifies)
  BRONZE    otherwise                           (does not qualify; carries hints)

Thresholds come from TierThresholds so testnet and mainnet deployments share
the decision structure.
"""

from __future__ import annotations

from backend_omnipass.analytics.models import AccessLevel, AccessTier, ChainObservation
from backend_omnipass.analytics.portfolio_metrics import PortfolioMetrics
from backend_omnipass.config.settings import TESTNET_TIER_THRESHOLDS, TierThresholds

PLATINUM_MIN_HEALTH = 2.0
GOLD_MIN_HEALTH = 1.5
SILVER_MIN_HEALTH = 1.3
MULTI_CHAIN_MIN = 2

# Stand-in average when no position defines a health factor
NEUTRAL_HEALTH_FACTOR = 1.0


def classify_access(
    total_tvl: float,
    avg_health: float,
    active_chain_count: int,
    thresholds: TierThresholds = TESTNET_TIER_THRESHOLDS,
) -> AccessLevel:
    if (
        total_tvl >= thresholds.platinum_tvl
        and avg_health >= PLATINUM_MIN_HEALTH
        and active_chain_count >= MULTI_CHAIN_MIN
    ):
        return AccessLevel(tier=AccessTier.PLATINUM, qualifies=True)
    if (
        total_tvl >= thresholds.gold_tvl
        and avg_health >= GOLD_MIN_HEALTH
        and active_chain_count >= MULTI_CHAIN_MIN
    ):
        return AccessLevel(tier=AccessTier.GOLD, qualifies=True)
    if total_tvl >= thresholds.silver_tvl and avg_health >= SILVER_MIN_HEALTH:
        return AccessLevel(tier=AccessTier.SILVER, qualifies=True)
    if total_tvl >= thresholds.bronze_tvl:
        return AccessLevel(tier=AccessTier.BRONZE, qualifies=True)
    return AccessLevel(
        tier=AccessTier.BRONZE,
        qualifies=False,
        required_tvl=thresholds.bronze_tvl,
        required_score=thresholds.min_score,
    )


def tier_chain_count(chains: list[ChainObservation], thresholds: TierThresholds) -> int:
    """Chains whose TVL clears the per-chain minimum for the multi-chain requirement."""
    return sum(1 for c in chains if c.valuation_usd > thresholds.chain_min_tvl_usd)


def tier_average_health(metrics: PortfolioMetrics) -> float:
    avg = metrics.average_health_factor
    return NEUTRAL_HEALTH_FACTOR if avg is None else avg


def classify_portfolio(
    chains: list[ChainObservation],
    metrics: PortfolioMetrics,
    thresholds: TierThresholds,
) -> AccessLevel:
    return classify_access(
        metrics.total_tvl,
        tier_average_health(metrics),
        tier_chain_count(chains, thresholds),
        thresholds,
    )
