"""
Asset identifier prefixes.

A creator may only lazily mint asset ids whose decimal form starts with the
creator's prefix: the Keccak-256 hash of the creator address, rendered by
concatenating the decimal numeral of each hash byte ("7", "42", "255", ...)
and cutting the result to PREFIX_LENGTH characters.

This is digit concatenation, not a base conversion. Bytes contribute one to
three digits each and the walk stops as soon as the string is longer than
PREFIX_LENGTH, so later hash bytes are never read. Asset ids already committed
on chain depend on this exact rendering.
"""

import logging

from eth_utils import keccak

from .utils import address_to_bytes

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 12


def digits_from_hash(digest: bytes, length: int = PREFIX_LENGTH) -> str:
    """Concatenate byte numerals of digest until longer than length, then truncate"""
    digits = ""
    for byte in digest:
        digits += str(byte)
        if len(digits) > length:
            break
    return digits[:length]


def derive_prefix(identity: str) -> str:
    """Derive the 12-digit asset id prefix of an identity"""
    return digits_from_hash(keccak(address_to_bytes(identity)))


def extract_leading_digits(decimal_string: str, length: int = PREFIX_LENGTH) -> str:
    """Return the first length characters, or "" when the string is shorter"""
    if len(decimal_string) < length:
        return ""
    return decimal_string[:length]


def asset_id_prefix(asset_id: int) -> str:
    return extract_leading_digits(str(asset_id))


def is_asset_id_bound_to(asset_id: int, identity: str) -> bool:
    """Check whether asset_id carries the prefix of identity"""
    return asset_id_prefix(asset_id) == derive_prefix(identity)


def compose_asset_id(identity: str, suffix: int) -> int:
    """Build an asset id bound to identity.

    Raises:
        ValueError: if suffix is negative, or if the identity's prefix has a
            leading zero (such ids lose the zero in decimal form and can never
            be bound to the identity)
    """
    if suffix < 0:
        raise ValueError(f"Suffix must be non-negative, got {suffix}")

    prefix = derive_prefix(identity)
    if prefix.startswith("0"):
        raise ValueError(f"Prefix {prefix} of {identity} has a leading zero")

    asset_id = int(prefix + str(suffix))
    logger.debug(f"Composed asset id {asset_id} for {identity}")
    return asset_id
