"""
Activity engine: additive 0-100 activity score.

30 points per chain holding value, tiered bonuses for distinct protocols,
position count and TVL magnitude, plus 10 when any position carries a health
factor (real protocol usage rather than plain holding).
"""

from __future__ import annotations

from backend_omnipass.analytics.portfolio_metrics import PortfolioMetrics, clamp_score

POINTS_PER_ACTIVE_CHAIN = 30
PROTOCOL_DIVERSITY_TIERS = ((3, 25), (2, 15), (1, 10))
POSITION_COUNT_TIERS = ((5, 20), (3, 15), (1, 10))
TVL_TIERS = ((5000.0, 15), (1000.0, 12), (500.0, 8), (100.0, 5))
PROTOCOL_USAGE_BONUS = 10


def _tiered(value: float, tiers: tuple[tuple[float, int], ...]) -> int:
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return 0


def calculate_activity_score(metrics: PortfolioMetrics) -> int:
    score = POINTS_PER_ACTIVE_CHAIN * metrics.active_chain_count
    score += _tiered(metrics.total_protocol_count, PROTOCOL_DIVERSITY_TIERS)
    score += _tiered(metrics.total_position_count, POSITION_COUNT_TIERS)
    score += _tiered(metrics.total_tvl, TVL_TIERS)
    if metrics.health_factors:
        score += PROTOCOL_USAGE_BONUS
    return clamp_score(score)
