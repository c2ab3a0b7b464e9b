"""
Application settings.

Typed, immutable settings built from the environment. Tier thresholds are
configuration: one table per network mode, consumed by the tier classifier
without touching its decision structure.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field

from backend_omnipass.config.env import (
    NETWORK_MAINNET,
    NETWORK_TESTNET,
    env_flag,
    env_float,
    env_int,
    env_str,
    get_network,
    load_omnipass_env,
)

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_REQUEST_TIMEOUT_SEC = 10.0
DEFAULT_COMMENTARY_TIMEOUT_SEC = 15.0
DEFAULT_CACHE_TTL_SEC = 300.0
DEFAULT_RATE_LIMIT_WINDOW_SEC = 60.0
DEFAULT_RATE_LIMIT_MAX_REQUESTS = 10


@dataclass(frozen=True)
class TierThresholds:
    """
    USD thresholds for the access tiers (platinum > gold > silver > bronze).

    chain_min_tvl_usd: a chain counts towards the multi-chain requirement
    only when its TVL exceeds this value.
    """

    platinum_tvl: float
    gold_tvl: float
    silver_tvl: float
    bronze_tvl: float
    min_score: int = 50
    chain_min_tvl_usd: float = 100.0

    def __post_init__(self) -> None:
        if not (self.platinum_tvl > self.gold_tvl > self.silver_tvl > self.bronze_tvl >= 0):
            raise ValueError("tier thresholds must be strictly descending and non-negative")


TESTNET_TIER_THRESHOLDS = TierThresholds(
    platinum_tvl=10_000.0,
    gold_tvl=5_000.0,
    silver_tvl=1_000.0,
    bronze_tvl=100.0,
)

MAINNET_TIER_THRESHOLDS = TierThresholds(
    platinum_tvl=100_000.0,
    gold_tvl=25_000.0,
    silver_tvl=5_000.0,
    bronze_tvl=1_000.0,
    chain_min_tvl_usd=100.0,
)


def thresholds_for_network(network: str) -> TierThresholds:
    return MAINNET_TIER_THRESHOLDS if network == NETWORK_MAINNET else TESTNET_TIER_THRESHOLDS


@dataclass(frozen=True)
class Settings:
    """Service configuration. Construct directly in tests; use get_settings() at runtime."""

    network: str = NETWORK_TESTNET
    alchemy_api_key: str = ""
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_max_tokens: int = 1000
    coingecko_api_key: str = ""
    price_lookups_enabled: bool = False
    include_lending_positions: bool = True
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    commentary_timeout_sec: float = DEFAULT_COMMENTARY_TIMEOUT_SEC
    cache_ttl_sec: float = DEFAULT_CACHE_TTL_SEC
    rate_limit_window_sec: float = DEFAULT_RATE_LIMIT_WINDOW_SEC
    rate_limit_max_requests: int = DEFAULT_RATE_LIMIT_MAX_REQUESTS
    tier_thresholds: TierThresholds = field(default=TESTNET_TIER_THRESHOLDS)
    api_host: str = "0.0.0.0"
    api_port: int = 3001

    @property
    def is_mainnet(self) -> bool:
        return self.network == NETWORK_MAINNET

    @classmethod
    def from_env(cls) -> "Settings":
        load_omnipass_env()
        network = get_network()
        coingecko_key = env_str("COINGECKO_API_KEY")
        return cls(
            network=network,
            alchemy_api_key=env_str("ALCHEMY_API_KEY"),
            gemini_api_key=env_str("GEMINI_API_KEY"),
            gemini_model=env_str("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            gemini_max_tokens=env_int("GEMINI_MAX_TOKENS", 1000),
            coingecko_api_key=coingecko_key,
            price_lookups_enabled=env_flag("COINGECKO_ENABLED", bool(coingecko_key)),
            include_lending_positions=env_flag("OMNIPASS_LENDING_POSITIONS", True),
            request_timeout_sec=env_float("OMNIPASS_REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC),
            commentary_timeout_sec=env_float("COACH_TIMEOUT_SEC", DEFAULT_COMMENTARY_TIMEOUT_SEC),
            cache_ttl_sec=env_float("COMMENTARY_CACHE_TTL_SEC", DEFAULT_CACHE_TTL_SEC),
            rate_limit_window_sec=env_float("RATE_LIMIT_WINDOW_SEC", DEFAULT_RATE_LIMIT_WINDOW_SEC),
            rate_limit_max_requests=env_int("RATE_LIMIT_MAX_REQUESTS", DEFAULT_RATE_LIMIT_MAX_REQUESTS),
            tier_thresholds=thresholds_for_network(network),
            api_host=env_str("API_HOST", "0.0.0.0"),
            api_port=env_int("API_PORT", 3001),
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings, read from the environment once."""
    return Settings.from_env()


__all__ = [
    "NETWORK_MAINNET",
    "NETWORK_TESTNET",
    "MAINNET_TIER_THRESHOLDS",
    "TESTNET_TIER_THRESHOLDS",
    "Settings",
    "TierThresholds",
    "get_settings",
    "thresholds_for_network",
]
