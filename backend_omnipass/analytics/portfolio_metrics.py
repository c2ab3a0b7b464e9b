"""
Portfolio metrics derived from chain observations.

Shared input of the three score calculators: active chains, distinct protocol
names, position totals, per-chain TVL share and the defined health factors.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_omnipass.analytics.models import ChainObservation

SCORE_MIN = 0
SCORE_MAX = 100


def clamp_score(score: float) -> int:
    """Round and clamp to the 0-100 score range."""
    return max(SCORE_MIN, min(SCORE_MAX, int(round(score))))


@dataclass(frozen=True)
class PortfolioMetrics:
    total_tvl: float
    active_chain_count: int
    protocol_names: tuple[str, ...]
    total_position_count: int
    chain_shares: tuple[float, ...]
    health_factors: tuple[float, ...]

    @property
    def total_protocol_count(self) -> int:
        return len(self.protocol_names)

    @property
    def max_chain_share(self) -> float:
        return max(self.chain_shares) if self.chain_shares else 0.0

    @property
    def average_health_factor(self) -> float | None:
        """Mean of defined health factors; None when no position carries one."""
        if not self.health_factors:
            return None
        return sum(self.health_factors) / len(self.health_factors)


def compute_portfolio_metrics(chains: list[ChainObservation]) -> PortfolioMetrics:
    """
    Build metrics from chain observations.

    Protocol names and position counts only include positions with value;
    health factors include every position that defines one.
    """
    total_tvl = sum(c.valuation_usd for c in chains)
    active = [c for c in chains if c.valuation_usd > 0]

    names: list[str] = []
    position_count = 0
    health_factors: list[float] = []
    for chain in chains:
        for p in chain.protocols:
            if p.health_factor is not None:
                health_factors.append(p.health_factor)
            if p.valuation_usd <= 0:
                continue
            position_count += p.position_count
            if p.name not in names:
                names.append(p.name)

    shares = tuple(c.valuation_usd / total_tvl for c in active) if total_tvl > 0 else ()
    return PortfolioMetrics(
        total_tvl=total_tvl,
        active_chain_count=len(active),
        protocol_names=tuple(names),
        total_position_count=position_count,
        chain_shares=shares,
        health_factors=tuple(health_factors),
    )
