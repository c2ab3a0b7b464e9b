"""
Pytest fixtures for OmniPass tests.

Collaborators are replaced by in-memory stubs so no test touches the network;
the CommentaryGate gets a fake clock so TTL and window expiry are explicit.
"""

from __future__ import annotations

import httpx
import pytest

from backend_omnipass.ai_engine.coach import CoachService
from backend_omnipass.ai_engine.commentary_gate import CommentaryGate
from backend_omnipass.ai_engine.insights import InsightsService
from backend_omnipass.analytics.analytics_pipeline import AnalysisEngine, build_engine
from backend_omnipass.analytics.models import ProtocolPosition, TokenHolding
from backend_omnipass.config import Settings
from backend_omnipass.core.exceptions import CollaboratorError

DEMO_ADDRESS = "0x1111111111111111111111111111111111111111"
OTHER_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGemini:
    """Stands in for GeminiClient: returns a canned text or raises, and counts calls."""

    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


class StubBalanceSource:
    def __init__(
        self,
        native: float = 0.0,
        tokens: list[TokenHolding] | None = None,
        first_tx: int | None = None,
    ) -> None:
        self.native = native
        self.tokens = tokens or []
        self.first_tx = first_tx

    async def get_native_balance(self, address: str, chain_id: int) -> float:
        return self.native

    async def get_token_balances(self, address: str, chain_id: int) -> list[TokenHolding]:
        return list(self.tokens)

    async def get_first_transaction_timestamp(self, address: str, chain_id: int) -> int | None:
        return self.first_tx


class StubPriceSource:
    def __init__(self, native_price: float = 2500.0, token_price: float = 1.0) -> None:
        self.native_price = native_price
        self.token_price = token_price

    async def get_native_price_usd(self, chain) -> float:
        return self.native_price

    async def get_token_price_usd(self, holding, chain) -> float:
        return self.token_price


class StubLendingSource:
    def __init__(self, positions: dict[int, list[ProtocolPosition]] | None = None) -> None:
        self.positions = positions or {}

    async def get_positions(self, address: str, chain_id: int) -> list[ProtocolPosition]:
        return list(self.positions.get(chain_id, []))


def _refuse_network(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("network disabled in tests", request=request)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(clock) -> CommentaryGate:
    return CommentaryGate(ttl_sec=300, window_sec=60, max_requests=10, clock=clock)


@pytest.fixture
def offline_http_client() -> httpx.AsyncClient:
    """AsyncClient whose every request fails with a connection error."""
    return httpx.AsyncClient(transport=httpx.MockTransport(_refuse_network))


@pytest.fixture
def mock_engine(settings, offline_http_client, gate) -> AnalysisEngine:
    """Engine wired like production but with no keys: deterministic demo balances and templated insights."""
    return build_engine(settings, offline_http_client, gate)


@pytest.fixture
def make_engine(settings, gate):
    """Factory for engines over stub collaborators."""

    def _make(
        balance_source=None,
        price_source=None,
        lending_source=None,
        gemini=None,
        engine_settings: Settings | None = None,
    ) -> AnalysisEngine:
        return AnalysisEngine(
            settings=engine_settings or settings,
            balance_source=balance_source or StubBalanceSource(),
            price_source=price_source or StubPriceSource(),
            lending_source=lending_source or StubLendingSource(),
            insights=InsightsService(gemini, gate),
            coach=CoachService(gemini, gate),
        )

    return _make


@pytest.fixture
def failing_gemini() -> FakeGemini:
    return FakeGemini(error=CollaboratorError("gemini", "HTTP 503"))
