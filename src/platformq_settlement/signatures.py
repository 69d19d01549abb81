"""
Dual-signature verification of sale terms.

Both the creator and the trusted authority sign the same digest:

    keccak256(abi.encode(address assetRegistryId, uint256 assetId,
                         address settlementContextId,
                         address[] recipients, uint256[] amounts))

wrapped in the EIP-191 personal-message prefix before signing, as wallets do
for `personal_sign`. The field order is part of the protocol. Embedding the
settlement context id scopes a signature pair to one engine deployment.
"""

import logging
from typing import Union

from eth_abi import encode
from eth_account import Account
from eth_account.messages import SignableMessage, encode_defunct
from eth_utils import keccak

from .errors import InvalidAuthoritySignatureError, InvalidCreatorSignatureError
from .types import SaleTerms
from .utils import normalize_address

logger = logging.getLogger(__name__)

SALE_TERMS_ABI_TYPES = ["address", "uint256", "address", "address[]", "uint256[]"]

SignatureLike = Union[bytes, str]


def encode_sale_terms(terms: SaleTerms) -> bytes:
    """Canonical ABI encoding of the signed sale-term fields"""
    return encode(
        SALE_TERMS_ABI_TYPES,
        [
            normalize_address(terms.asset_registry_id),
            terms.asset_id,
            normalize_address(terms.settlement_context_id),
            [normalize_address(r) for r in terms.recipients],
            list(terms.amounts),
        ],
    )


def sale_terms_digest(terms: SaleTerms) -> bytes:
    return keccak(encode_sale_terms(terms))


def signable_digest(terms: SaleTerms) -> SignableMessage:
    """Apply the personal-message prefix to the terms digest"""
    return encode_defunct(primitive=sale_terms_digest(terms))


def recover_signer(terms: SaleTerms, signature: SignatureLike) -> str:
    """Recover the address that signed terms. Raises on malformed signatures."""
    return Account.recover_message(signable_digest(terms), signature=signature)


class SignatureVerifier:
    """Verifies creator + trusted-authority signature pairs over sale terms"""

    def verify(self,
               terms: SaleTerms,
               creator_signature: SignatureLike,
               authority_signature: SignatureLike,
               trusted_authority: str) -> str:
        """
        Verify both signatures and return the recovered creator.

        The authority signature is checked first. The creator identity is only
        meaningful because the authority co-signed the very same digest.

        Raises:
            InvalidAuthoritySignatureError: authority signature unrecoverable or
                not produced by trusted_authority
            InvalidCreatorSignatureError: creator signature unrecoverable
        """
        signable = signable_digest(terms)
        expected = normalize_address(trusted_authority)

        try:
            authority = Account.recover_message(signable, signature=authority_signature)
        except Exception as e:
            raise InvalidAuthoritySignatureError(
                f"Could not recover authority signer: {e}"
            ) from e

        if authority != expected:
            logger.warning(f"Authority signature recovered {authority}, expected {expected}")
            raise InvalidAuthoritySignatureError(
                f"Authority signature recovered {authority}, expected {expected}"
            )

        try:
            creator = Account.recover_message(signable, signature=creator_signature)
        except Exception as e:
            raise InvalidCreatorSignatureError(
                f"Could not recover creator signer: {e}"
            ) from e

        logger.debug(f"Verified sale terms for asset {terms.asset_id} signed by {creator}")
        return creator
