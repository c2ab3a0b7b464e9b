"""
Tests for the HTTP collaborators using httpx.MockTransport (no network).
"""

from __future__ import annotations

import json

import httpx
import pytest

from backend_omnipass.ai_engine.gemini_client import GeminiClient
from backend_omnipass.analytics.models import TokenHolding
from backend_omnipass.core.exceptions import CollaboratorError
from backend_omnipass.ingestion.alchemy_client import AlchemyBalanceSource
from backend_omnipass.ingestion.chains import SEPOLIA, get_chain
from backend_omnipass.ingestion.mock_data import mock_native_balance, mock_token_balances
from backend_omnipass.ingestion.price_client import CoinGeckoPriceSource
from tests.conftest import DEMO_ADDRESS

USDC_CONTRACT = "0x94a9d9ac8a22534e3faca9f4e7f2e2cf85d5e4c8"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _rpc_handler(results: dict, calls: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append(body["method"])
        result = results[body["method"]]
        if callable(result):
            result = result(body["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return handler


def _server_error(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, text="upstream down")


# --- Alchemy ---


@pytest.mark.asyncio
async def test_native_balance_live():
    async with _client(_rpc_handler({"eth_getBalance": hex(3 * 10**18)})) as http:
        source = AlchemyBalanceSource(http, api_key="k")
        assert await source.get_native_balance(DEMO_ADDRESS, SEPOLIA) == pytest.approx(3.0)


@pytest.mark.asyncio
async def test_native_balance_failure_uses_mock():
    async with _client(_server_error) as http:
        source = AlchemyBalanceSource(http, api_key="k")
        balance = await source.get_native_balance(DEMO_ADDRESS, SEPOLIA)
    assert balance == mock_native_balance(DEMO_ADDRESS, get_chain(SEPOLIA))


@pytest.mark.asyncio
async def test_rpc_error_payload_uses_mock():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "bad"}})

    async with _client(handler) as http:
        source = AlchemyBalanceSource(http, api_key="k")
        holdings = await source.get_token_balances(DEMO_ADDRESS, SEPOLIA)
    assert holdings == mock_token_balances(DEMO_ADDRESS, get_chain(SEPOLIA))


@pytest.mark.asyncio
async def test_no_key_never_calls_network():
    calls = []
    async with _client(_rpc_handler({}, calls)) as http:
        source = AlchemyBalanceSource(http, api_key="")
        assert not source.live
        await source.get_native_balance(DEMO_ADDRESS, SEPOLIA)
        await source.get_token_balances(DEMO_ADDRESS, SEPOLIA)
        assert await source.get_first_transaction_timestamp(DEMO_ADDRESS, SEPOLIA) is None
    assert calls == []


@pytest.mark.asyncio
async def test_token_balances_with_metadata():
    """Nonzero balances are kept and decimals/symbol come from token metadata."""
    results = {
        "alchemy_getTokenBalances": {
            "address": DEMO_ADDRESS,
            "tokenBalances": [
                {"contractAddress": USDC_CONTRACT, "tokenBalance": hex(2_500_000), "error": None},
                {"contractAddress": "0xdead", "tokenBalance": "0x0", "error": None},
                {"contractAddress": "0xbeef", "tokenBalance": None, "error": "execution reverted"},
            ],
        },
        "alchemy_getTokenMetadata": {"decimals": 6, "symbol": "USDC", "name": "USD Coin"},
    }
    async with _client(_rpc_handler(results)) as http:
        holdings = await AlchemyBalanceSource(http, api_key="k").get_token_balances(DEMO_ADDRESS, SEPOLIA)
    assert holdings == [
        TokenHolding(contract_address=USDC_CONTRACT, raw_amount=2_500_000, decimals=6, symbol="USDC")
    ]
    assert holdings[0].amount == pytest.approx(2.5)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "metadata",
    [
        {"decimals": 18, "symbol": 12345},
        {"decimals": -6, "symbol": "USDC"},
        {"decimals": "six", "symbol": ""},
        {"decimals": None, "symbol": ["USDC"]},
    ],
)
async def test_malformed_token_metadata_uses_defaults(metadata):
    """Unusable decimals fall back to 18 and unusable symbols to None."""
    results = {
        "alchemy_getTokenBalances": {
            "tokenBalances": [{"contractAddress": USDC_CONTRACT, "tokenBalance": hex(10**18), "error": None}],
        },
        "alchemy_getTokenMetadata": metadata,
    }
    async with _client(_rpc_handler(results)) as http:
        holdings = await AlchemyBalanceSource(http, api_key="k").get_token_balances(DEMO_ADDRESS, SEPOLIA)
    assert len(holdings) == 1
    holding = holdings[0]
    assert holding.contract_address == USDC_CONTRACT
    assert holding.decimals == 18
    assert holding.symbol == ("USDC" if metadata["symbol"] == "USDC" else None)


@pytest.mark.asyncio
async def test_first_transaction_timestamp():
    def transfers(params):
        if "fromAddress" in params[0]:
            return {"transfers": [{"metadata": {"blockTimestamp": "2024-01-01T00:00:00.000Z"}}]}
        return {"transfers": []}

    async with _client(_rpc_handler({"alchemy_getAssetTransfers": transfers})) as http:
        ts = await AlchemyBalanceSource(http, api_key="k").get_first_transaction_timestamp(DEMO_ADDRESS, SEPOLIA)
    assert ts == 1704067200


@pytest.mark.asyncio
async def test_first_transaction_failure_is_none():
    async with _client(_server_error) as http:
        ts = await AlchemyBalanceSource(http, api_key="k").get_first_transaction_timestamp(DEMO_ADDRESS, SEPOLIA)
    assert ts is None


# --- CoinGecko ---


@pytest.mark.asyncio
async def test_native_price_live_and_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/simple/price")
        assert request.headers["x-cg-demo-api-key"] == "cg"
        return httpx.Response(200, json={"ethereum": {"usd": 3100.5}})

    async with _client(handler) as http:
        price = await CoinGeckoPriceSource(http, api_key="cg").get_native_price_usd(get_chain(SEPOLIA))
    assert price == 3100.5

    async with _client(_server_error) as http:
        price = await CoinGeckoPriceSource(http).get_native_price_usd(get_chain(SEPOLIA))
    assert price == 2500.0


@pytest.mark.asyncio
async def test_disabled_prices_use_constants():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        return httpx.Response(200, json={})

    async with _client(handler) as http:
        source = CoinGeckoPriceSource(http, enabled=False)
        assert await source.get_native_price_usd(get_chain(80002)) == 0.8
        weth = TokenHolding(contract_address="0xweth", raw_amount=1, symbol="WETH")
        assert await source.get_token_price_usd(weth, get_chain(1)) == 1.0
    assert calls == []


@pytest.mark.asyncio
async def test_token_prices():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "/simple/token_price/ethereum" in request.url.path
        return httpx.Response(200, json={"0xweth": {"usd": 3000}})

    async with _client(handler) as http:
        source = CoinGeckoPriceSource(http)
        stable = TokenHolding(contract_address="0xusdc", raw_amount=1, symbol="usdc")
        weth = TokenHolding(contract_address="0xWETH", raw_amount=1, symbol="WETH")
        unknown = TokenHolding(contract_address="0xabc", raw_amount=1)
        assert await source.get_token_price_usd(stable, get_chain(1)) == 1.0
        assert await source.get_token_price_usd(weth, get_chain(1)) == 3000.0
        assert await source.get_token_price_usd(unknown, get_chain(1)) == 1.0


# --- Gemini ---


@pytest.mark.asyncio
async def test_gemini_complete():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["key"] == "g"
        assert "gemini-1.5-flash:generateContent" in request.url.path
        body = json.loads(request.content)
        assert body["contents"][0]["parts"][0]["text"] == "hello"
        assert body["generationConfig"]["maxOutputTokens"] == 500
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "hi"}]}}]})

    async with _client(handler) as http:
        text = await GeminiClient(http, "g", max_output_tokens=500).complete("hello")
    assert text == "hi"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": "bad key"}),
        httpx.Response(429, json={"error": "slow down"}),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": 42}]}}]}),
        httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}]}}]}),
    ],
)
async def test_gemini_errors(response):
    async with _client(lambda request: response) as http:
        with pytest.raises(CollaboratorError):
            await GeminiClient(http, "g").complete("hello")


def test_gemini_requires_key():
    with pytest.raises(ValueError):
        GeminiClient(httpx.AsyncClient(), "")
