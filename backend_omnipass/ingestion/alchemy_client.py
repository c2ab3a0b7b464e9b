"""
Balance source: native and ERC-20 balances via Alchemy JSON-RPC.

eth_getBalance, alchemy_getTokenBalances + alchemy_getTokenMetadata and
alchemy_getAssetTransfers (first transaction). Without an API key, or on any
failure, balances fall back to the deterministic generator in mock_data and
the first-transaction lookup returns None.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

import httpx

from backend_omnipass.analytics.models import TokenHolding
from backend_omnipass.core.exceptions import CollaboratorError
from backend_omnipass.ingestion.chains import ChainConfig, get_chain
from backend_omnipass.ingestion.mock_data import mock_native_balance, mock_token_balances
from backend_omnipass.omnipass_logging import get_logger
from backend_omnipass.utils.wallet_utils import short_address

logger = get_logger(__name__)

WEI_PER_ETHER = 10 ** 18
DEFAULT_TOKEN_DECIMALS = 18
MAX_TOKENS_WITH_METADATA = 20
REQUEST_TIMEOUT = 10.0


class AlchemyBalanceSource:
    """
    Balance collaborator for one network mode.

    The http client is owned by the caller (one AsyncClient per process).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str = "",
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._client = http_client
        self._api_key = (api_key or "").strip()
        self._timeout = timeout
        if not self._api_key:
            logger.warning("alchemy_api_key_missing", message="Using deterministic mock balances")

    @property
    def live(self) -> bool:
        return bool(self._api_key)

    async def _rpc(self, chain: ChainConfig, method: str, params: list[Any]) -> Any:
        body = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        r = await self._client.post(chain.alchemy_url(self._api_key), json=body, timeout=self._timeout)
        if r.status_code != 200:
            raise CollaboratorError("alchemy", f"{method} HTTP {r.status_code}")
        try:
            data = r.json()
        except ValueError as e:
            raise CollaboratorError("alchemy", f"{method} returned non-JSON body") from e
        if not isinstance(data, dict):
            raise CollaboratorError("alchemy", f"{method} returned unexpected payload")
        if data.get("error"):
            raise CollaboratorError("alchemy", f"{method} error: {data['error']}")
        return data.get("result")

    async def get_native_balance(self, address: str, chain_id: int) -> float:
        chain = get_chain(chain_id)
        if not self.live:
            return mock_native_balance(address, chain)
        try:
            result = await self._rpc(chain, "eth_getBalance", [address, "latest"])
            if not isinstance(result, str):
                raise CollaboratorError("alchemy", "eth_getBalance result is not a hex string")
            balance = int(result, 16) / WEI_PER_ETHER
            logger.debug("alchemy_native_balance", address=short_address(address), chain_id=chain_id, balance=balance)
            return balance
        except Exception as e:
            logger.warning(
                "alchemy_native_balance_failed",
                address=short_address(address),
                chain_id=chain_id,
                error=str(e),
            )
            return mock_native_balance(address, chain)

    async def get_token_balances(self, address: str, chain_id: int) -> list[TokenHolding]:
        chain = get_chain(chain_id)
        if not self.live:
            return mock_token_balances(address, chain)
        try:
            result = await self._rpc(chain, "alchemy_getTokenBalances", [address])
            raw_balances = _parse_token_balances(result)
        except Exception as e:
            logger.warning(
                "alchemy_token_balances_failed",
                address=short_address(address),
                chain_id=chain_id,
                error=str(e),
            )
            return mock_token_balances(address, chain)

        raw_balances = raw_balances[:MAX_TOKENS_WITH_METADATA]
        holdings = await asyncio.gather(
            *(self._with_metadata(chain, contract, amount) for contract, amount in raw_balances)
        )
        logger.debug(
            "alchemy_token_balances",
            address=short_address(address),
            chain_id=chain_id,
            token_count=len(holdings),
        )
        return list(holdings)

    async def _with_metadata(self, chain: ChainConfig, contract: str, raw_amount: int) -> TokenHolding:
        decimals = DEFAULT_TOKEN_DECIMALS
        symbol = None
        try:
            meta = await self._rpc(chain, "alchemy_getTokenMetadata", [contract])
            if isinstance(meta, dict):
                raw_decimals = meta.get("decimals")
                if isinstance(raw_decimals, int) and not isinstance(raw_decimals, bool) and raw_decimals >= 0:
                    decimals = raw_decimals
                raw_symbol = meta.get("symbol")
                if isinstance(raw_symbol, str) and raw_symbol.strip():
                    symbol = raw_symbol
        except Exception as e:
            logger.debug("alchemy_token_metadata_failed", token=contract, chain_id=chain.chain_id, error=str(e))
        return TokenHolding(contract_address=contract, raw_amount=raw_amount, decimals=decimals, symbol=symbol)

    async def get_first_transaction_timestamp(self, address: str, chain_id: int) -> int | None:
        """Unix timestamp of the earliest transfer touching the address, or None when unknown."""
        if not self.live:
            return None
        chain = get_chain(chain_id)
        try:
            sent, received = await asyncio.gather(
                self._first_transfer(chain, {"fromAddress": address}),
                self._first_transfer(chain, {"toAddress": address}),
            )
        except Exception as e:
            logger.warning(
                "alchemy_first_transaction_failed",
                address=short_address(address),
                chain_id=chain_id,
                error=str(e),
            )
            return None
        found = [ts for ts in (sent, received) if ts is not None]
        return min(found) if found else None

    async def _first_transfer(self, chain: ChainConfig, direction: dict[str, str]) -> int | None:
        params = {
            "fromBlock": "0x0",
            "toBlock": "latest",
            "category": ["external", "erc20"],
            "order": "asc",
            "maxCount": "0x1",
            "withMetadata": True,
            **direction,
        }
        result = await self._rpc(chain, "alchemy_getAssetTransfers", [params])
        transfers = (result or {}).get("transfers") or []
        if not transfers:
            return None
        stamp = ((transfers[0] or {}).get("metadata") or {}).get("blockTimestamp")
        if not stamp:
            return None
        return int(datetime.fromisoformat(stamp.replace("Z", "+00:00")).timestamp())


def _parse_token_balances(result: Any) -> list[tuple[str, int]]:
    """(contract, raw_amount) for every nonzero, error-free entry of alchemy_getTokenBalances."""
    if not isinstance(result, dict):
        raise CollaboratorError("alchemy", "alchemy_getTokenBalances result is not an object")
    out: list[tuple[str, int]] = []
    for item in result.get("tokenBalances") or []:
        if not isinstance(item, dict) or item.get("error"):
            continue
        contract = item.get("contractAddress")
        raw_hex = item.get("tokenBalance")
        if not contract or not raw_hex:
            continue
        try:
            amount = int(raw_hex, 16)
        except (TypeError, ValueError):
            continue
        if amount > 0:
            out.append((contract, amount))
    return out
