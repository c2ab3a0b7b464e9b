"""
Price source: USD unit prices from CoinGecko.

Stablecoins are priced at 1.0 without a call. Natives fall back to the
chain's documented constant and every other token to 1.0 when the lookup
is disabled, unknown or failing.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_omnipass.analytics.models import TokenHolding
from backend_omnipass.analytics.valuation import FALLBACK_TOKEN_PRICE_USD
from backend_omnipass.core.exceptions import CollaboratorError
from backend_omnipass.ingestion.chains import ChainConfig
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger(__name__)

COINGECKO_BASE = "https://api.coingecko.com/api/v3"
REQUEST_TIMEOUT = 10.0
STABLECOIN_SYMBOLS = frozenset({"USDC", "USDT", "DAI", "BUSD"})
STABLECOIN_PRICE_USD = 1.0


class CoinGeckoPriceSource:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str = "",
        enabled: bool = True,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._client = http_client
        self._api_key = (api_key or "").strip()
        self._enabled = enabled
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        if self._api_key:
            return {"x-cg-demo-api-key": self._api_key}
        return {}

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        r = await self._client.get(
            f"{COINGECKO_BASE}{path}",
            params=params,
            headers=self._headers(),
            timeout=self._timeout,
        )
        if r.status_code != 200:
            raise CollaboratorError("coingecko", f"{path} HTTP {r.status_code}")
        data = r.json()
        if not isinstance(data, dict):
            raise CollaboratorError("coingecko", f"{path} returned unexpected payload")
        return data

    async def get_native_price_usd(self, chain: ChainConfig) -> float:
        fallback = chain.fallback_native_price_usd
        if not self._enabled:
            return fallback
        try:
            data = await self._get("/simple/price", {"ids": chain.coingecko_id, "vs_currencies": "usd"})
            price = _usd(data.get(chain.coingecko_id))
        except Exception as e:
            logger.warning("price_lookup_failed", asset=chain.coingecko_id, error=str(e))
            return fallback
        if price is None:
            logger.info("price_lookup_missing", asset=chain.coingecko_id, fallback=fallback)
            return fallback
        return price

    async def get_token_price_usd(self, holding: TokenHolding, chain: ChainConfig) -> float:
        symbol = (holding.symbol or "").upper()
        if symbol in STABLECOIN_SYMBOLS:
            return STABLECOIN_PRICE_USD
        if not self._enabled or not chain.coingecko_platform:
            return FALLBACK_TOKEN_PRICE_USD
        contract = holding.contract_address.lower()
        try:
            data = await self._get(
                f"/simple/token_price/{chain.coingecko_platform}",
                {"contract_addresses": contract, "vs_currencies": "usd"},
            )
            price = _usd(data.get(contract))
        except Exception as e:
            logger.warning("price_lookup_failed", asset=contract, chain_id=chain.chain_id, error=str(e))
            return FALLBACK_TOKEN_PRICE_USD
        return FALLBACK_TOKEN_PRICE_USD if price is None else price


def _usd(entry: Any) -> float | None:
    if not isinstance(entry, dict) or entry.get("usd") is None:
        return None
    try:
        price = float(entry["usd"])
    except (TypeError, ValueError):
        return None
    return price if price >= 0 else None
