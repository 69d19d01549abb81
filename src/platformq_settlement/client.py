"""
Off-chain helpers for preparing and checking purchases.
"""

import logging
from typing import Optional

from eth_account import Account

from .errors import SettlementError
from .interfaces import IAssetRegistryReader
from .signatures import SignatureVerifier, SignatureLike, signable_digest
from .types import SaleTerms
from .utils import validate_private_key
from .validation import check_binding, check_distribution, check_listing, parse_value

logger = logging.getLogger(__name__)


class SaleTermsSigner:
    """Signs sale terms as a creator or as the trusted authority"""

    def __init__(self, private_key: str):
        if not validate_private_key(private_key):
            raise ValueError("Invalid private key format")
        self._account = Account.from_key(private_key)
        self.address = self._account.address

    def sign(self, terms: SaleTerms) -> bytes:
        """Return the 65-byte signature over the personal-message digest of terms"""
        signed = self._account.sign_message(signable_digest(terms))
        return bytes(signed.signature)


def preflight_purchase(registry: IAssetRegistryReader,
                       terms: SaleTerms,
                       creator_signature: SignatureLike,
                       authority_signature: SignatureLike,
                       trusted_authority: str,
                       buyer: str,
                       value: int,
                       verifier: Optional[SignatureVerifier] = None) -> str:
    """
    Run the engine's read-only checks without moving value.

    The operator checked for approval is terms.settlement_context_id, the
    engine the purchase will be sent to.

    Returns:
        The recovered creator

    Raises:
        SettlementError: the same rejection the engine would raise
    """
    verifier = verifier or SignatureVerifier()
    try:
        creator = verifier.verify(terms, creator_signature, authority_signature, trusted_authority)
        if terms.is_preexisting:
            check_listing(registry, terms.asset_id, creator, buyer,
                          operator=terms.settlement_context_id)
        else:
            check_binding(terms.asset_id, creator)
        check_distribution(terms.recipients, terms.amounts, parse_value(value))
    except SettlementError as e:
        logger.warning(f"Preflight of asset {terms.asset_id} for {buyer} failed: {e}")
        raise

    logger.debug(f"Preflight of asset {terms.asset_id} for {buyer} passed")
    return creator
