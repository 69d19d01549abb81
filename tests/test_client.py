"""
Test off-chain signing and preflight checks
"""

import pytest

from platformq_settlement import (
    CallContext,
    InvalidAuthoritySignatureError,
    NotApprovedError,
    SaleTermsSigner,
    SelfPurchaseRejectedError,
    ValueMismatchError,
    compose_asset_id,
    preflight_purchase,
    recover_signer,
)


class TestSaleTermsSigner:

    def test_address_matches_key(self, creator):
        assert SaleTermsSigner(creator.key.hex()).address == creator.address

    def test_signature_recovers_to_signer(self, creator, make_terms, recipients):
        terms = make_terms(1, recipients, [1, 2])
        signature = SaleTermsSigner(creator.key.hex()).sign(terms)

        assert isinstance(signature, bytes)
        assert len(signature) == 65
        assert recover_signer(terms, signature) == creator.address

    def test_invalid_key(self):
        with pytest.raises(ValueError):
            SaleTermsSigner("0x1234")


class TestPreflight:

    def test_deferred_creation_passes(self, registry, creator, authority, buyer,
                                      recipients, make_terms, sign):
        terms = make_terms(compose_asset_id(creator.address, 3), recipients, [10, 20])

        result = preflight_purchase(registry, terms, sign(creator, terms), sign(authority, terms),
                                    authority.address, buyer.address, 30)
        assert result == creator.address

    def test_matches_engine_rejection(self, registry, creator, authority, buyer,
                                      recipients, make_terms, sign):
        terms = make_terms(compose_asset_id(creator.address, 3), recipients, [10, 20])
        with pytest.raises(ValueMismatchError):
            preflight_purchase(registry, terms, sign(creator, terms), sign(authority, terms),
                               authority.address, buyer.address, 29)

    def test_checks_approval_for_target_engine(self, registry, engine, creator, authority, buyer,
                                               recipients, make_terms, sign, mint):
        mint(creator.address, 77)
        terms = make_terms(77, recipients, [10, 20], is_preexisting=True)
        signatures = (sign(creator, terms), sign(authority, terms))

        with pytest.raises(NotApprovedError):
            preflight_purchase(registry, terms, *signatures, authority.address, buyer.address, 30)

        registry.approve(CallContext(sender=creator.address), engine.address, 77)
        assert preflight_purchase(registry, terms, *signatures, authority.address,
                                  buyer.address, 30) == creator.address

    def test_self_purchase(self, registry, engine, creator, authority, recipients,
                           make_terms, sign, mint):
        mint(creator.address, 77)
        terms = make_terms(77, recipients, [10, 20], is_preexisting=True)
        with pytest.raises(SelfPurchaseRejectedError):
            preflight_purchase(registry, terms, sign(creator, terms), sign(authority, terms),
                               authority.address, creator.address, 30)

    def test_untrusted_authority(self, registry, creator, outsider, authority, buyer,
                                 recipients, make_terms, sign):
        terms = make_terms(compose_asset_id(creator.address, 3), recipients, [10, 20])
        with pytest.raises(InvalidAuthoritySignatureError):
            preflight_purchase(registry, terms, sign(creator, terms), sign(outsider, terms),
                               authority.address, buyer.address, 30)

    @pytest.mark.parametrize("value", [30.0, True, -30])
    def test_attached_value_must_be_uint256(self, registry, creator, authority, buyer,
                                            recipients, make_terms, sign, value):
        terms = make_terms(compose_asset_id(creator.address, 3), recipients, [10, 20])
        with pytest.raises(ValueMismatchError):
            preflight_purchase(registry, terms, sign(creator, terms), sign(authority, terms),
                               authority.address, buyer.address, value)

    def test_moves_no_value(self, host, registry, creator, authority, buyer,
                            recipients, make_terms, sign):
        terms = make_terms(compose_asset_id(creator.address, 3), recipients, [10, 20])
        preflight_purchase(registry, terms, sign(creator, terms), sign(authority, terms),
                           authority.address, buyer.address, 30)
        assert host.ledger.balance_of(recipients[0]) == 0
        assert not registry.exists(terms.asset_id)
