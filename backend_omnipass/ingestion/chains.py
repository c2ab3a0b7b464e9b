"""
Supported chain registry for testnet and mainnet modes.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_omnipass.config.env import NETWORK_MAINNET, NETWORK_TESTNET
from backend_omnipass.core.exceptions import UnsupportedChainError

ETHEREUM_MAINNET = 1
POLYGON_MAINNET = 137
SEPOLIA = 11155111
POLYGON_AMOY = 80002

ETH_FALLBACK_PRICE_USD = 2500.0
MATIC_FALLBACK_PRICE_USD = 0.8

FAMILY_ETHEREUM = "ethereum"
FAMILY_POLYGON = "polygon"


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    name: str
    family: str
    native_symbol: str
    coingecko_id: str
    fallback_native_price_usd: float
    alchemy_url_template: str
    coingecko_platform: str | None
    explorer: str
    protocols: tuple[str, ...] = ()
    faucet: str | None = None
    testnet: bool = False

    def alchemy_url(self, api_key: str) -> str:
        return self.alchemy_url_template.format(key=api_key)

    def to_api(self) -> dict:
        out = {
            "name": self.name,
            "chainId": self.chain_id,
            "nativeSymbol": self.native_symbol,
            "protocols": list(self.protocols),
            "explorer": self.explorer,
            "testnet": self.testnet,
        }
        if self.faucet:
            out["faucet"] = self.faucet
        return out


CHAINS: dict[int, ChainConfig] = {
    ETHEREUM_MAINNET: ChainConfig(
        chain_id=ETHEREUM_MAINNET,
        name="Ethereum Mainnet",
        family=FAMILY_ETHEREUM,
        native_symbol="ETH",
        coingecko_id="ethereum",
        fallback_native_price_usd=ETH_FALLBACK_PRICE_USD,
        alchemy_url_template="https://eth-mainnet.g.alchemy.com/v2/{key}",
        coingecko_platform="ethereum",
        explorer="https://etherscan.io",
        protocols=("Aave V3", "Compound V3", "Uniswap V3"),
    ),
    POLYGON_MAINNET: ChainConfig(
        chain_id=POLYGON_MAINNET,
        name="Polygon Mainnet",
        family=FAMILY_POLYGON,
        native_symbol="MATIC",
        coingecko_id="matic-network",
        fallback_native_price_usd=MATIC_FALLBACK_PRICE_USD,
        alchemy_url_template="https://polygon-mainnet.g.alchemy.com/v2/{key}",
        coingecko_platform="polygon-pos",
        explorer="https://polygonscan.com",
        protocols=("Aave V3", "Uniswap V3"),
    ),
    SEPOLIA: ChainConfig(
        chain_id=SEPOLIA,
        name="Sepolia Testnet",
        family=FAMILY_ETHEREUM,
        native_symbol="ETH",
        coingecko_id="ethereum",
        fallback_native_price_usd=ETH_FALLBACK_PRICE_USD,
        alchemy_url_template="https://eth-sepolia.g.alchemy.com/v2/{key}",
        coingecko_platform=None,
        explorer="https://sepolia.etherscan.io",
        protocols=("Aave V3",),
        faucet="https://sepoliafaucet.com/",
        testnet=True,
    ),
    POLYGON_AMOY: ChainConfig(
        chain_id=POLYGON_AMOY,
        name="Polygon Amoy Testnet",
        family=FAMILY_POLYGON,
        native_symbol="MATIC",
        coingecko_id="matic-network",
        fallback_native_price_usd=MATIC_FALLBACK_PRICE_USD,
        alchemy_url_template="https://polygon-amoy.g.alchemy.com/v2/{key}",
        coingecko_platform=None,
        explorer="https://amoy.polygonscan.com",
        protocols=("Aave V3",),
        faucet="https://faucet.polygon.technology/",
        testnet=True,
    ),
}

NETWORK_CHAINS: dict[str, tuple[int, ...]] = {
    NETWORK_TESTNET: (SEPOLIA, POLYGON_AMOY),
    NETWORK_MAINNET: (ETHEREUM_MAINNET, POLYGON_MAINNET),
}

FAUCETS = [
    {
        "name": "Sepolia ETH Faucet",
        "url": "https://sepoliafaucet.com/",
        "asset": "ETH",
        "chain": "Sepolia",
        "note": "Get free Sepolia ETH for testing",
    },
    {
        "name": "Polygon Amoy Faucet",
        "url": "https://faucet.polygon.technology/",
        "asset": "MATIC",
        "chain": "Polygon Amoy",
        "note": "Get free MATIC for testing on Amoy",
    },
]


def get_chain(chain_id: int) -> ChainConfig:
    try:
        return CHAINS[chain_id]
    except KeyError:
        raise UnsupportedChainError(chain_id) from None


def get_supported_chains(network: str) -> list[ChainConfig]:
    """Chains observed by an analysis in the given network mode."""
    ids = NETWORK_CHAINS.get(network, NETWORK_CHAINS[NETWORK_TESTNET])
    return [CHAINS[i] for i in ids]


def list_all_chains() -> list[ChainConfig]:
    return list(CHAINS.values())
