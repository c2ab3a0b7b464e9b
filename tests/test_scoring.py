"""
Tests for the risk, activity and diversification calculators.
"""

from __future__ import annotations

import itertools

import pytest

from backend_omnipass.analytics.activity_engine import calculate_activity_score
from backend_omnipass.analytics.diversification_engine import (
    calculate_diversification_score,
    protocol_category,
)
from backend_omnipass.analytics.models import ChainObservation, ProtocolPosition
from backend_omnipass.analytics.portfolio_metrics import compute_portfolio_metrics
from backend_omnipass.analytics.risk_engine import (
    calculate_risk_score,
    health_factor_component,
    health_factor_points,
    protocol_quality_component,
)


def _chain(chain_id: int, positions: list[ProtocolPosition]) -> ChainObservation:
    return ChainObservation(
        chain_id=chain_id,
        name=f"chain-{chain_id}",
        native_symbol="ETH",
        native_balance=0.0,
        valuation_usd=sum(p.valuation_usd for p in positions),
        protocols=positions,
    )


def _lending_portfolio(health_factor: float) -> list[ChainObservation]:
    return [
        _chain(11155111, [
            ProtocolPosition(name="Wallet Balance", valuation_usd=100.0, position_count=1),
            ProtocolPosition(name="Aave V3", valuation_usd=10_000.0, position_count=2, health_factor=health_factor),
        ])
    ]


@pytest.mark.parametrize(
    "hf,points",
    [(3.0, 30), (2.0, 30), (1.99, 25), (1.5, 25), (1.3, 15), (1.29, 5), (1.1, 5), (0.5, 5)],
)
def test_health_factor_buckets(hf, points):
    assert health_factor_points(hf) == points


def test_low_health_factor_lowers_risk_score():
    """A dominant position at hf 1.1 buckets to 5 points; the same portfolio at 2.5 gets 30."""
    risky = _lending_portfolio(1.1)
    safe = _lending_portfolio(2.5)
    risky_metrics = compute_portfolio_metrics(risky)
    safe_metrics = compute_portfolio_metrics(safe)

    assert health_factor_component(risky_metrics) == 5
    assert health_factor_component(safe_metrics) == 30
    risky_score = calculate_risk_score(risky, risky_metrics, wallet_age_months=6)
    safe_score = calculate_risk_score(safe, safe_metrics, wallet_age_months=6)
    assert risky_score < safe_score
    assert safe_score - risky_score == 25


def test_no_health_data_is_neutral():
    chains = [_chain(1, [ProtocolPosition(name="Wallet Balance", valuation_usd=500.0, position_count=1)])]
    assert health_factor_component(compute_portfolio_metrics(chains)) == 20


def test_protocol_quality_is_tvl_weighted():
    chains = [_chain(1, [
        ProtocolPosition(name="Aave V3", valuation_usd=300.0),
        ProtocolPosition(name="Mystery Farm", valuation_usd=100.0),
    ])]
    assert protocol_quality_component(chains) == pytest.approx((90 * 300 + 50 * 100) / 400)
    assert protocol_quality_component([]) == 0.0


def test_risk_score_components():
    """quality 70 * 0.4 + no-health 20 + age min(12*2, 20) + size min(500/100, 10) = 73."""
    chains = [_chain(1, [ProtocolPosition(name="Wallet Balance", valuation_usd=500.0, position_count=1)])]
    assert calculate_risk_score(chains, compute_portfolio_metrics(chains), wallet_age_months=12) == 73


def test_activity_score_single_chain_holder():
    """30 (one chain) + 10 (one protocol) + 10 (one position) + 8 (TVL >= 500) = 58."""
    chains = [_chain(1, [ProtocolPosition(name="Wallet Balance", valuation_usd=600.0, position_count=1)])]
    assert calculate_activity_score(compute_portfolio_metrics(chains)) == 58


def test_activity_score_clamped():
    chains = [
        _chain(i, [
            ProtocolPosition(name="Wallet Balance", valuation_usd=5000.0, position_count=3),
            ProtocolPosition(name="Aave V3", valuation_usd=5000.0, position_count=2, health_factor=2.0),
            ProtocolPosition(name="Uniswap V3", valuation_usd=5000.0, position_count=2),
        ])
        for i in (1, 137)
    ]
    assert calculate_activity_score(compute_portfolio_metrics(chains)) == 100


def test_activity_score_empty_portfolio():
    assert calculate_activity_score(compute_portfolio_metrics([])) == 0


def test_protocol_categories():
    assert protocol_category("Wallet Balance") == "Wallet"
    assert protocol_category("Aave V3") == "Lending"
    assert protocol_category("Uniswap V3") == "DEX"
    assert protocol_category("Curve Finance") == "Other"


def test_diversification_balanced_two_chains():
    """50 (two chains) + 15 (no chain above 80%) + 25 (wallet + lending) = 90."""
    chains = [
        _chain(1, [
            ProtocolPosition(name="Wallet Balance", valuation_usd=600.0, position_count=1),
            ProtocolPosition(name="Aave V3", valuation_usd=400.0, position_count=2, health_factor=2.0),
        ]),
        _chain(137, [ProtocolPosition(name="Wallet Balance", valuation_usd=800.0, position_count=1)]),
    ]
    assert calculate_diversification_score(compute_portfolio_metrics(chains)) == 90


def test_diversification_concentrated_two_chains():
    """One chain holding more than 80% loses the distribution bonus."""
    chains = [
        _chain(1, [ProtocolPosition(name="Wallet Balance", valuation_usd=9000.0, position_count=1)]),
        _chain(137, [ProtocolPosition(name="Wallet Balance", valuation_usd=1000.0, position_count=1)]),
    ]
    assert calculate_diversification_score(compute_portfolio_metrics(chains)) == 50 + 15


def test_diversification_single_chain_and_empty():
    chains = [_chain(1, [ProtocolPosition(name="Wallet Balance", valuation_usd=10.0, position_count=1)])]
    assert calculate_diversification_score(compute_portfolio_metrics(chains)) == 20 + 15
    assert calculate_diversification_score(compute_portfolio_metrics([])) == 0


def test_scores_bounded_over_input_grid():
    """All three scores stay in [0, 100] across TVL, health factor, chain count and age."""
    tvls = (0.0, 0.01, 99.0, 1_000.0, 25_000.0, 10**9)
    health_factors = (None, 0.0, 1.0, 1.3, 2.5, 1e6)
    chain_counts = (0, 1, 2, 4)
    ages = (0, 5, 36, 1000)
    for tvl, hf, n_chains, age in itertools.product(tvls, health_factors, chain_counts, ages):
        chains = [
            _chain(i, [
                ProtocolPosition(name="Wallet Balance", valuation_usd=tvl, position_count=1),
                ProtocolPosition(name="Aave V3", valuation_usd=tvl / 2, position_count=2, health_factor=hf),
            ])
            for i in range(n_chains)
        ]
        metrics = compute_portfolio_metrics(chains)
        for score in (
            calculate_risk_score(chains, metrics, age),
            calculate_activity_score(metrics),
            calculate_diversification_score(metrics),
        ):
            assert 0 <= score <= 100


def test_scores_deterministic():
    chains = _lending_portfolio(1.7)
    first = compute_portfolio_metrics(chains)
    second = compute_portfolio_metrics(chains)
    assert calculate_risk_score(chains, first, 3) == calculate_risk_score(chains, second, 3)
    assert calculate_activity_score(first) == calculate_activity_score(second)
    assert calculate_diversification_score(first) == calculate_diversification_score(second)
