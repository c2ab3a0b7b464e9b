"""
OmniPass analytics: valuation, scoring, tier classification, aggregation.

Modules: valuation, portfolio_metrics, risk_engine, activity_engine,
diversification_engine, tier_classifier, analytics_pipeline.
"""

from backend_omnipass.analytics.activity_engine import calculate_activity_score
from backend_omnipass.analytics.diversification_engine import calculate_diversification_score
from backend_omnipass.analytics.portfolio_metrics import compute_portfolio_metrics
from backend_omnipass.analytics.risk_engine import calculate_risk_score
from backend_omnipass.analytics.tier_classifier import classify_access
from backend_omnipass.analytics.valuation import valuate_chain

__all__ = [
    "calculate_activity_score",
    "calculate_diversification_score",
    "calculate_risk_score",
    "classify_access",
    "compute_portfolio_metrics",
    "valuate_chain",
]
