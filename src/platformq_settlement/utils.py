"""
Utility functions for identities and amounts.
"""

import re
from typing import Any

from eth_utils import to_checksum_address, is_address

from .types import ZERO_ADDRESS, UINT256_MAX


def validate_address(address: Any) -> bool:
    """Validate EVM address format"""
    return isinstance(address, str) and is_address(address)


def normalize_address(address: str) -> str:
    """Normalize address to EIP-55 checksum format"""
    return to_checksum_address(address)


def is_null_address(address: str) -> bool:
    return normalize_address(address) == ZERO_ADDRESS


def is_uint256(value: Any) -> bool:
    """Check that value is an int (not bool) within uint256"""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= UINT256_MAX


def validate_private_key(private_key: str) -> bool:
    """Validate private key format"""
    # Remove 0x prefix if present
    if private_key.startswith('0x'):
        private_key = private_key[2:]

    # Check if it's 64 hex characters
    return bool(re.match(r'^[0-9a-fA-F]{64}$', private_key))


def address_to_bytes(address: str) -> bytes:
    """Raw 20-byte representation of an address"""
    return bytes.fromhex(normalize_address(address)[2:])
