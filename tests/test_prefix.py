"""
Test asset id prefix derivation and binding
"""

import pytest
from eth_utils import keccak

from platformq_settlement.prefix import (
    PREFIX_LENGTH,
    asset_id_prefix,
    compose_asset_id,
    derive_prefix,
    digits_from_hash,
    extract_leading_digits,
    is_asset_id_bound_to,
)
from platformq_settlement.utils import address_to_bytes

from conftest import account_from_seed


def _reference_prefix(address):
    """Independent rendering: decimal numerals of every hash byte, cut to 12"""
    digest = keccak(bytes.fromhex(address[2:]))
    return "".join(str(b) for b in digest)[:12]


class TestDigitsFromHash:

    def test_mixed_width_bytes(self):
        """Bytes contribute one to three digits each"""
        assert digits_from_hash(bytes([255, 1, 200, 7, 99, 123, 45])) == "255120079912"

    def test_all_zero_bytes(self):
        assert digits_from_hash(bytes(32)) == "000000000000"

    def test_stops_once_longer_than_length(self):
        """Later bytes are never read once the string exceeds the length"""
        head = bytes([100, 100, 100, 100, 100])  # 15 digits
        assert digits_from_hash(head + bytes([1] * 27)) == "100100100100"
        assert digits_from_hash(head + bytes([9] * 27)) == "100100100100"

    def test_exact_length_boundary(self):
        assert digits_from_hash(bytes([111, 222, 123, 234, 5])) == "111222123234"

    def test_short_input_returns_everything(self):
        assert digits_from_hash(bytes([1, 2, 3])) == "123"


class TestDerivePrefix:

    @pytest.mark.parametrize("seed", [0x11, 0x12, 0x13, 0x2a, 0x7f])
    def test_matches_reference_rendering(self, seed):
        address = account_from_seed(seed).address
        assert derive_prefix(address) == _reference_prefix(address)

    def test_length(self):
        assert len(derive_prefix(account_from_seed(0x11).address)) == PREFIX_LENGTH

    def test_case_insensitive_identity(self):
        """Checksummed and lowercase forms hash the same 20 bytes"""
        address = account_from_seed(0x11).address
        assert derive_prefix(address) == derive_prefix(address.lower())

    def test_hashes_raw_address_bytes(self):
        address = account_from_seed(0x12).address
        assert derive_prefix(address) == digits_from_hash(keccak(address_to_bytes(address)))

    def test_distinct_identities_differ(self):
        assert derive_prefix(account_from_seed(0x11).address) != derive_prefix(account_from_seed(0x12).address)


class TestExtractLeadingDigits:

    def test_shorter_than_length_is_empty(self):
        assert extract_leading_digits("12345678901") == ""

    def test_exact_length(self):
        assert extract_leading_digits("123456789012") == "123456789012"

    def test_longer(self):
        assert extract_leading_digits("123456789012999") == "123456789012"

    def test_asset_id_prefix(self):
        assert asset_id_prefix(123456789012999) == "123456789012"
        assert asset_id_prefix(42) == ""


class TestComposeAssetId:

    def test_composed_id_is_bound(self, creator):
        asset_id = compose_asset_id(creator.address, 999)
        assert str(asset_id).startswith(derive_prefix(creator.address))
        assert str(asset_id).endswith("999")
        assert is_asset_id_bound_to(asset_id, creator.address)

    def test_bound_only_to_its_creator(self, creator, outsider):
        asset_id = compose_asset_id(creator.address, 1)
        assert not is_asset_id_bound_to(asset_id, outsider.address)

    def test_bare_prefix(self, creator):
        assert str(compose_asset_id(creator.address, 0)) == derive_prefix(creator.address) + "0"

    def test_negative_suffix_rejected(self, creator):
        with pytest.raises(ValueError):
            compose_asset_id(creator.address, -1)


class TestKnownVectors:
    """Fixed hashes and prefixes that committed asset ids depend on"""

    EMPTY_KECCAK = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    ZERO_ADDRESS_KECCAK = "5380c7b7ae81a58eb98d9c78de4a1fd7fd9535fc953ed2be602daaa41767312a"

    def test_empty_input_hash(self):
        assert keccak(b"").hex() == self.EMPTY_KECCAK
        assert digits_from_hash(bytes.fromhex(self.EMPTY_KECCAK)) == "197210701134"

    def test_null_identity_prefix(self):
        """keccak of the 20 zero bytes is 53 80 c7 b7 ae ..., rendered 83 128 199 183 174"""
        assert keccak(bytes(20)).hex() == self.ZERO_ADDRESS_KECCAK
        assert derive_prefix("0x" + "00" * 20) == "831281991831"
