"""
Test sale-term digests and dual-signature verification
"""

import pytest
from eth_abi import encode
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import keccak

from platformq_settlement.errors import (
    InvalidAuthoritySignatureError,
    InvalidCreatorSignatureError,
    SignatureRejectedError,
)
from platformq_settlement.signatures import (
    SignatureVerifier,
    encode_sale_terms,
    recover_signer,
    sale_terms_digest,
    signable_digest,
)


@pytest.fixture
def terms(make_terms, recipients):
    return make_terms(123456789012999, recipients, [700, 300])


@pytest.fixture
def verifier():
    return SignatureVerifier()


class TestDigest:

    def test_encoding_field_order(self, terms):
        expected = encode(
            ["address", "uint256", "address", "address[]", "uint256[]"],
            [terms.asset_registry_id, terms.asset_id, terms.settlement_context_id,
             list(terms.recipients), list(terms.amounts)],
        )
        assert encode_sale_terms(terms) == expected
        assert sale_terms_digest(terms) == keccak(expected)

    def test_wallet_personal_sign_compatible(self, terms, creator):
        """A plain personal_sign over the 32-byte digest recovers through the verifier path"""
        signed = Account.sign_message(encode_defunct(primitive=sale_terms_digest(terms)), creator.key)
        assert recover_signer(terms, signed.signature) == creator.address

    def test_unsigned_fields_do_not_change_digest(self, make_terms, recipients):
        plain = make_terms(5, recipients, [1, 2])
        with_delivery = make_terms(5, recipients, [1, 2], is_preexisting=True, metadata="ipfs://x")
        assert sale_terms_digest(plain) == sale_terms_digest(with_delivery)

    @pytest.mark.parametrize("change", [
        {"asset_id": 6},
        {"amounts": [1, 3]},
        {"recipients": ["0x" + "c2" * 20, "0x" + "c1" * 20]},
        {"settlement_context_id": "0x" + "e1" * 20},
    ])
    def test_signed_fields_change_digest(self, make_terms, recipients, change):
        base = dict(asset_id=5, recipients=recipients, amounts=[1, 2])
        original = make_terms(**base)
        base.update(change)
        assert sale_terms_digest(make_terms(**base)) != sale_terms_digest(original)


def _word(value):
    return f"{value:064x}"


def _address_word(byte_hex):
    return "00" * 12 + byte_hex * 20


class TestKnownEncoding:
    """Byte layout of the signed terms, written out word by word"""

    def test_head_and_tail_layout(self, make_terms):
        terms = make_terms(5, ["0x" + "c1" * 20], [7])
        expected = "".join([
            _address_word("a1"),   # asset registry
            _word(5),              # asset id
            _address_word("e0"),   # settlement context
            _word(0xa0),           # offset of recipients
            _word(0xe0),           # offset of amounts
            _word(1),
            _address_word("c1"),
            _word(1),
            _word(7),
        ])
        assert encode_sale_terms(terms).hex() == expected
        assert sale_terms_digest(terms) == keccak(bytes.fromhex(expected))

    def test_personal_message_envelope(self, make_terms):
        signable = signable_digest(make_terms(5, ["0x" + "c1" * 20], [7]))
        assert signable.version == b"E"
        assert signable.header == b"thereum Signed Message:\n32"
        assert len(signable.body) == 32


class TestSignatureVerifier:

    def test_returns_creator(self, verifier, terms, creator, authority, sign):
        recovered = verifier.verify(terms, sign(creator, terms), sign(authority, terms), authority.address)
        assert recovered == creator.address

    def test_any_creator_accepted_by_verifier(self, verifier, terms, outsider, authority, sign):
        """Creator identity is whatever signed; provenance decides whether it may sell"""
        recovered = verifier.verify(terms, sign(outsider, terms), sign(authority, terms), authority.address)
        assert recovered == outsider.address

    def test_wrong_authority(self, verifier, terms, creator, outsider, authority, sign):
        with pytest.raises(InvalidAuthoritySignatureError) as excinfo:
            verifier.verify(terms, sign(creator, terms), sign(outsider, terms), authority.address)
        assert isinstance(excinfo.value, SignatureRejectedError)

    def test_authority_signed_other_terms(self, verifier, terms, make_terms, recipients,
                                          creator, authority, sign):
        other = make_terms(terms.asset_id, recipients, [701, 300])
        with pytest.raises(InvalidAuthoritySignatureError):
            verifier.verify(terms, sign(creator, terms), sign(authority, other), authority.address)

    def test_malformed_authority_signature(self, verifier, terms, creator, authority, sign):
        with pytest.raises(InvalidAuthoritySignatureError):
            verifier.verify(terms, sign(creator, terms), b"\x00" * 10, authority.address)

    def test_authority_checked_before_creator(self, verifier, terms, authority):
        """Both signatures are garbage: the authority failure is reported"""
        with pytest.raises(InvalidAuthoritySignatureError):
            verifier.verify(terms, b"\x01" * 65, b"\x01" * 65, authority.address)

    def test_malformed_creator_signature(self, verifier, terms, authority, sign):
        with pytest.raises(InvalidCreatorSignatureError) as excinfo:
            verifier.verify(terms, b"\x00" * 10, sign(authority, terms), authority.address)
        assert excinfo.value.reason == "InvalidCreatorSignature"

    def test_hex_string_signatures(self, verifier, terms, creator, authority, sign):
        creator_sig = "0x" + sign(creator, terms).hex()
        authority_sig = "0x" + sign(authority, terms).hex()
        assert verifier.verify(terms, creator_sig, authority_sig, authority.address) == creator.address
