"""
Environment variable loading for OmniPass.

- OMNIPASS_NETWORK: testnet | mainnet (default: testnet)
- ALCHEMY_API_KEY: node provider key (mock balances when absent)
- GEMINI_API_KEY: generative-language key (templated commentary when absent)
- COINGECKO_API_KEY / COINGECKO_ENABLED: live USD prices
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_omnipass/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

NETWORK_TESTNET = "testnet"
NETWORK_MAINNET = "mainnet"

_TRUTHY = ("1", "true", "yes", "on")


def load_omnipass_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def env_flag(name: str, default: bool) -> bool:
    raw = env_str(name).lower()
    if not raw:
        return default
    return raw in _TRUTHY


def get_network() -> str:
    """
    Return OMNIPASS_NETWORK from env: testnet | mainnet.
    Default: testnet. Unknown values fall back to testnet.
    """
    raw = env_str("OMNIPASS_NETWORK", NETWORK_TESTNET).lower()
    if raw in ("mainnet", "main", "production"):
        return NETWORK_MAINNET
    return NETWORK_TESTNET
