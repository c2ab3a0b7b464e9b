"""Wallet address validation and address-derived seeds."""

from __future__ import annotations

import re

from backend_omnipass.core.exceptions import InvalidAddressError

EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_address(address: object) -> bool:
    """Return True if address is 0x + 40 hex digits (case-insensitive)."""
    return isinstance(address, str) and bool(EVM_ADDRESS_RE.fullmatch(address.strip()))


def normalize_address(address: object) -> str:
    """Strip and lowercase a valid address; raise InvalidAddressError otherwise."""
    if not is_valid_address(address):
        raise InvalidAddressError(address)
    return address.strip().lower()


def short_address(address: str) -> str:
    return address[:10] + "..." if len(address) > 10 else address


def address_seed(address: str) -> int:
    """Seed for the deterministic fallback generator: last 6 hex digits as an integer."""
    return int(address[-6:], 16)
