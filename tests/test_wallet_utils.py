"""
Tests for address validation and seeding.
"""

from __future__ import annotations

import pytest

from backend_omnipass.core.exceptions import InvalidAddressError
from backend_omnipass.utils.wallet_utils import (
    address_seed,
    is_valid_address,
    normalize_address,
    short_address,
)


@pytest.mark.parametrize(
    "address",
    [
        "0x1111111111111111111111111111111111111111",
        "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
        "  0xABCDEFabcdef0123456789ABCDEFabcdef012345 ",
    ],
)
def test_valid_addresses(address):
    assert is_valid_address(address)
    assert normalize_address(address) == address.strip().lower()


@pytest.mark.parametrize(
    "address",
    ["", "0x123", "1111111111111111111111111111111111111111", "0xZZ11111111111111111111111111111111111111", None, 42],
)
def test_invalid_addresses(address):
    assert not is_valid_address(address)
    with pytest.raises(InvalidAddressError, match="Invalid Ethereum address format"):
        normalize_address(address)


def test_invalid_address_is_value_error():
    with pytest.raises(ValueError):
        normalize_address("0x1")


def test_address_seed_uses_last_six_hex_digits():
    assert address_seed("0x1111111111111111111111111111111111111111") == 0x111111
    assert address_seed("0x00000000000000000000000000000000000000ff") == 255


def test_short_address():
    assert short_address("0x1111111111111111111111111111111111111111") == "0x11111111..."
    assert short_address("0x12") == "0x12"
