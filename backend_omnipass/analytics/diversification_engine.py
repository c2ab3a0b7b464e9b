"""
Diversification engine: chain spread (max 65) + protocol category spread (max 35).
"""

from __future__ import annotations

from backend_omnipass.analytics.models import WALLET_BALANCE_PROTOCOL
from backend_omnipass.analytics.portfolio_metrics import PortfolioMetrics, clamp_score

CATEGORY_WALLET = "Wallet"
CATEGORY_LENDING = "Lending"
CATEGORY_DEX = "DEX"
CATEGORY_OTHER = "Other"

SINGLE_CHAIN_POINTS = 20
MULTI_CHAIN_POINTS = 50
BALANCED_DISTRIBUTION_BONUS = 15
MAX_BALANCED_CHAIN_SHARE = 0.8
CATEGORY_TIERS = ((3, 35), (2, 25), (1, 15))


def protocol_category(name: str) -> str:
    if name == WALLET_BALANCE_PROTOCOL:
        return CATEGORY_WALLET
    if "Aave" in name:
        return CATEGORY_LENDING
    if "Uniswap" in name:
        return CATEGORY_DEX
    return CATEGORY_OTHER


def chain_spread_points(metrics: PortfolioMetrics) -> int:
    if metrics.active_chain_count >= 2:
        points = MULTI_CHAIN_POINTS
        if metrics.max_chain_share <= MAX_BALANCED_CHAIN_SHARE:
            points += BALANCED_DISTRIBUTION_BONUS
        return points
    if metrics.active_chain_count == 1:
        return SINGLE_CHAIN_POINTS
    return 0


def category_spread_points(metrics: PortfolioMetrics) -> int:
    categories = {protocol_category(name) for name in metrics.protocol_names}
    for threshold, points in CATEGORY_TIERS:
        if len(categories) >= threshold:
            return points
    return 0


def calculate_diversification_score(metrics: PortfolioMetrics) -> int:
    return clamp_score(chain_spread_points(metrics) + category_spread_points(metrics))
