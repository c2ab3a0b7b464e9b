"""
Risk engine: 0-100 risk score (higher is safer) from four weighted components.

  protocol quality  40  TVL-weighted quality rating of the protocols held
  health factor     30  bucketed health factors of lending positions (20 when none)
  wallet age        20  min(age_months * 2, 20)
  portfolio size    10  min(total_tvl / 100, 10)

Pure and deterministic; the wallet age is passed in so the caller decides
between a real first-transaction age and the address-derived estimate.
"""

from __future__ import annotations

from backend_omnipass.analytics.models import WALLET_BALANCE_PROTOCOL, ChainObservation
from backend_omnipass.analytics.portfolio_metrics import PortfolioMetrics, clamp_score
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger(__name__)

PROTOCOL_QUALITY_WEIGHT = 0.4
HEALTH_FACTOR_MAX_POINTS = 30
WALLET_AGE_MAX_POINTS = 20
PORTFOLIO_SIZE_MAX_POINTS = 10

UNKNOWN_PROTOCOL_QUALITY = 50
PROTOCOL_QUALITY = {
    "Aave V3": 90,
    "Aave V2": 85,
    "Compound V3": 85,
    "Uniswap V3": 80,
    "Curve Finance": 80,
    "Venus Protocol": 70,
    WALLET_BALANCE_PROTOCOL: 70,
}

# Used when no position carries a health factor: no data is not bad data
NO_HEALTH_DATA_POINTS = 20
HEALTH_FACTOR_BUCKETS = (
    (2.0, 30),
    (1.5, 25),
    (1.3, 15),
)
HEALTH_FACTOR_FLOOR_POINTS = 5

WALLET_AGE_POINTS_PER_MONTH = 2
PORTFOLIO_SIZE_USD_PER_POINT = 100.0


def protocol_quality(name: str) -> int:
    return PROTOCOL_QUALITY.get(name, UNKNOWN_PROTOCOL_QUALITY)


def protocol_quality_component(chains: list[ChainObservation]) -> float:
    """TVL-weighted average quality rating (0-100); 0 when nothing holds value."""
    weighted = 0.0
    total_weight = 0.0
    for chain in chains:
        for p in chain.protocols:
            if p.valuation_usd <= 0:
                continue
            weighted += protocol_quality(p.name) * p.valuation_usd
            total_weight += p.valuation_usd
    if total_weight <= 0:
        return 0.0
    return weighted / total_weight


def health_factor_points(health_factor: float) -> int:
    for threshold, points in HEALTH_FACTOR_BUCKETS:
        if health_factor >= threshold:
            return points
    return HEALTH_FACTOR_FLOOR_POINTS


def health_factor_component(metrics: PortfolioMetrics) -> float:
    """Average bucket points (0-30) over defined health factors."""
    if not metrics.health_factors:
        return float(NO_HEALTH_DATA_POINTS)
    points = [health_factor_points(hf) for hf in metrics.health_factors]
    return sum(points) / len(points)


def wallet_age_component(age_months: int) -> float:
    return float(min(max(age_months, 0) * WALLET_AGE_POINTS_PER_MONTH, WALLET_AGE_MAX_POINTS))


def portfolio_size_component(total_tvl: float) -> float:
    return min(max(total_tvl, 0.0) / PORTFOLIO_SIZE_USD_PER_POINT, float(PORTFOLIO_SIZE_MAX_POINTS))


def calculate_risk_score(
    chains: list[ChainObservation],
    metrics: PortfolioMetrics,
    wallet_age_months: int,
) -> int:
    quality = protocol_quality_component(chains)
    health = health_factor_component(metrics)
    age = wallet_age_component(wallet_age_months)
    size = portfolio_size_component(metrics.total_tvl)
    score = clamp_score(quality * PROTOCOL_QUALITY_WEIGHT + health + age + size)
    logger.debug(
        "risk_engine_result",
        quality=round(quality, 2),
        health=round(health, 2),
        age=age,
        size=round(size, 2),
        score=score,
    )
    return score
