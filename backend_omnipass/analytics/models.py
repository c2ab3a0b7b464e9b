"""
Data models for analysis input and output.

Pydantic models serialize with camelCase keys (totalValueLocked, accessLevel,
aiInsights, ...) so the request layer can return them unchanged. Positions use
an explicit optional health factor: None means "not applicable", never 1.0.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

WALLET_BALANCE_PROTOCOL = "Wallet Balance"


class AccessTier(str, Enum):
    """Ordered access tiers: BRONZE < SILVER < GOLD < PLATINUM."""

    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER = (AccessTier.BRONZE, AccessTier.SILVER, AccessTier.GOLD, AccessTier.PLATINUM)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class TokenHolding(CamelModel):
    """One ERC-20 balance; raw_amount is in the token's smallest unit."""

    contract_address: str
    raw_amount: int = Field(..., ge=0)
    decimals: int = Field(18, ge=0)
    symbol: str | None = None

    @property
    def amount(self) -> float:
        return self.raw_amount / (10 ** self.decimals)


class ProtocolPosition(CamelModel):
    """A named position on one chain (lending market, DEX pool or plain wallet holdings)."""

    name: str
    valuation_usd: float = Field(..., ge=0, alias="tvl")
    position_count: int = Field(0, ge=0, alias="positions")
    health_factor: float | None = None


class ChainObservation(CamelModel):
    """State of one supported network for one address at analysis time."""

    chain_id: int
    name: str
    native_symbol: str
    native_balance: float = Field(..., ge=0)
    native_price_usd: float = Field(0.0, ge=0)
    token_holdings: list[TokenHolding] = Field(default_factory=list)
    valuation_usd: float = Field(0.0, ge=0, alias="tvl")
    protocols: list[ProtocolPosition] = Field(default_factory=list)


class AIInsights(CamelModel):
    summary: str
    reasoning: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


class AccessLevel(CamelModel):
    tier: AccessTier
    qualifies: bool = Field(..., alias="qualifiesForAccess")
    required_tvl: float | None = Field(None, alias="requiredTVL")
    required_score: int | None = None


class AnalysisMetrics(CamelModel):
    """Aggregated numbers handed to the commentary step (prompt and templated fallback)."""

    address: str
    total_tvl: float
    chain_tvls: dict[str, float] = Field(default_factory=dict)
    active_chain_count: int = 0
    active_positions: int = 0
    protocol_names: list[str] = Field(default_factory=list)
    average_health_factor: float | None = None
    risk_score: int = 0
    activity_score: int = 0
    diversification_score: int = 0
    tier: AccessTier = AccessTier.BRONZE

    @property
    def has_multi_chain(self) -> bool:
        return self.active_chain_count >= 2


class AnalysisResult(CamelModel):
    """Consolidated result of one analysis request."""

    address: str
    network: str
    total_value_locked_usd: float = Field(..., ge=0, alias="totalValueLocked")
    risk_score: int = Field(..., ge=0, le=100)
    activity_score: int = Field(..., ge=0, le=100)
    diversification_score: int = Field(..., ge=0, le=100)
    chains: list[ChainObservation]
    ai_insights: AIInsights
    access_level: AccessLevel
    wallet_age_months: int = 0
    wallet_age_estimated: bool = True

    @property
    def tier(self) -> AccessTier:
        return self.access_level.tier

    @property
    def qualifies(self) -> bool:
        return self.access_level.qualifies
