"""
Valuation step: native + token balances -> chain TVL in USD.

Prices are resolved before valuation; the lookup passed in is a plain callable.
A failing lookup for one token degrades to the fallback unit price instead of
failing the chain.
"""

from __future__ import annotations

from typing import Callable, Iterable

from backend_omnipass.analytics.models import WALLET_BALANCE_PROTOCOL, ProtocolPosition, TokenHolding
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger(__name__)

FALLBACK_TOKEN_PRICE_USD = 1.0

PriceLookup = Callable[[TokenHolding], float]


def valuate_chain(
    native_balance: float,
    native_price_usd: float,
    token_holdings: Iterable[TokenHolding],
    price_lookup: PriceLookup,
) -> float:
    """
    valuation = native_balance * native_price + sum(amount * price) over tokens with raw_amount > 0.
    """
    if native_balance < 0 or native_price_usd < 0:
        raise ValueError("native balance and price must be non-negative")
    total = native_balance * native_price_usd
    for holding in token_holdings:
        if holding.raw_amount <= 0:
            continue
        try:
            price = float(price_lookup(holding))
        except Exception as e:
            logger.warning(
                "valuation_price_lookup_failed",
                token=holding.contract_address,
                symbol=holding.symbol,
                error=str(e),
            )
            price = FALLBACK_TOKEN_PRICE_USD
        total += holding.amount * max(price, 0.0)
    return total


def build_wallet_position(valuation_usd: float, token_holdings: Iterable[TokenHolding]) -> ProtocolPosition:
    """Plain holdings as a protocol position: nonzero tokens + 1 (native) sub-positions, no health factor."""
    nonzero = sum(1 for h in token_holdings if h.raw_amount > 0)
    return ProtocolPosition(
        name=WALLET_BALANCE_PROTOCOL,
        valuation_usd=valuation_usd,
        position_count=nonzero + 1,
        health_factor=None,
    )
