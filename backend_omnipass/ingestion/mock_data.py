"""
Deterministic fallback data keyed by the address.

Used whenever the node provider is unconfigured or failing, so an analysis
degrades to reproducible demo data instead of failing. Every value is a pure
function of the address (seed = last 6 hex digits) and the chain.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_omnipass.analytics.models import ProtocolPosition, TokenHolding
from backend_omnipass.ingestion.chains import (
    ETHEREUM_MAINNET,
    FAMILY_ETHEREUM,
    POLYGON_AMOY,
    POLYGON_MAINNET,
    SEPOLIA,
    ChainConfig,
)
from backend_omnipass.utils.wallet_utils import address_seed

LENDING_PROTOCOL = "Aave V3"
LENDING_POSITION_COUNT = 2
WALLET_AGE_MAX_MONTHS = 36


@dataclass(frozen=True)
class MockToken:
    symbol: str
    contract_address: str
    decimals: int
    base_units: int
    seed_modulus: int

    def holding(self, seed: int) -> TokenHolding:
        units = self.base_units + seed % self.seed_modulus
        return TokenHolding(
            contract_address=self.contract_address,
            raw_amount=units * 10 ** self.decimals,
            decimals=self.decimals,
            symbol=self.symbol,
        )


MOCK_TOKENS: dict[int, tuple[MockToken, ...]] = {
    ETHEREUM_MAINNET: (
        MockToken("USDC", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", 6, 1000, 10000),
        MockToken("USDT", "0xdAC17F958D2ee523a2206206994597C13D831ec7", 6, 500, 5000),
        MockToken("DAI", "0x6B175474E89094C44Da98b954EedeAC495271d0F", 18, 300, 3000),
    ),
    POLYGON_MAINNET: (
        MockToken("USDC", "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174", 6, 2000, 20000),
        MockToken("USDT", "0xc2132D05D31c914a87C6611C10748AEb04B58e8F", 6, 1000, 10000),
    ),
    SEPOLIA: (
        MockToken("USDC", "0x94a9D9AC8a22534E3FaCa9F4e7F2E2cf85d5E4C8", 6, 100, 1000),
        MockToken("DAI", "0xFF34B3d4Aee8ddCd6F9AFFFB6Fe49bD371b8a357", 18, 50, 500),
    ),
    POLYGON_AMOY: (
        MockToken("USDC", "0x41E94Eb019C0762f9Bfcf9Fb1E58725BfB0e7582", 6, 200, 2000),
    ),
}


def mock_native_balance(address: str, chain: ChainConfig) -> float:
    seed = address_seed(address)
    if chain.family == FAMILY_ETHEREUM:
        return 0.1 + seed % 2 if chain.testnet else 0.5 + seed % 10
    return 1.0 + seed % 10 if chain.testnet else 10.0 + seed % 100


def mock_token_balances(address: str, chain: ChainConfig) -> list[TokenHolding]:
    seed = address_seed(address)
    return [t.holding(seed) for t in MOCK_TOKENS.get(chain.chain_id, ())]


def mock_lending_position(address: str, chain: ChainConfig) -> ProtocolPosition:
    """Synthesized Aave V3 supply position with a health factor."""
    seed = address_seed(address)
    if chain.family == FAMILY_ETHEREUM:
        supplied = 1000 + seed % 5000 if chain.testnet else 5000 + seed % 50000
        health = 1.5 + (seed % 100) / 100
    else:
        supplied = 500 + seed % 2500 if chain.testnet else 2500 + seed % 25000
        health = 1.8 + (seed % 120) / 100
    return ProtocolPosition(
        name=LENDING_PROTOCOL,
        valuation_usd=float(supplied),
        position_count=LENDING_POSITION_COUNT,
        health_factor=round(health, 4),
    )


def estimate_wallet_age_months(address: str) -> int:
    """Heuristic wallet age (0-36 months) from the first address byte; used when no first-transaction data exists."""
    return int(address[2:4], 16) % (WALLET_AGE_MAX_MONTHS + 1)
