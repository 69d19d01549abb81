"""
Settlement Engine

Settles one pre-agreed sale of a unique asset for native currency:

    Received -> SignatureValidated -> ProvenanceValidated
             -> DistributionValidated -> Settled

The whole purchase runs under a single reentrancy guard and inside one atomic
scope of the execution host. Payments are pushed to recipients after full
validation and before the asset is delivered; a recipient whose code tries to
re-enter the purchase during that window is rejected, and any failure rolls
back every balance and registry change made by the call, including the value
the buyer attached.
"""

import logging
from contextlib import contextmanager
from typing import Sequence, Optional, Iterator, List

from .access import AccessPolicy, MINTER_ROLE
from .authority import TrustedAuthorityRegistry
from .errors import (
    SettlementError,
    ReentrancyRejectedError,
    UnauthorizedError,
    UnknownRegistryError,
)
from .host import ExecutionHost
from .interfaces import IAssetRegistry
from .signatures import SignatureVerifier, SignatureLike
from .types import (
    AuthorityRotation,
    CallContext,
    DeliveryMode,
    GuardState,
    Payee,
    SaleTerms,
    SettlementReceipt,
    SettlementState,
)
from .utils import normalize_address, validate_address
from .validation import (
    check_binding,
    check_distribution,
    check_listing,
    parse_amounts,
    parse_asset_id,
    parse_recipients,
    parse_value,
)

logger = logging.getLogger(__name__)

_STATE_ORDER: List[SettlementState] = list(SettlementState)


class SettlementProgress:
    """Tracks one purchase through the settlement states"""

    def __init__(self, asset_id: int):
        self.asset_id = asset_id
        self.state = SettlementState.RECEIVED

    def advance(self, next_state: SettlementState) -> None:
        expected = _STATE_ORDER[_STATE_ORDER.index(self.state) + 1]
        if next_state is not expected:
            raise RuntimeError(f"Illegal settlement transition {self.state.value} -> {next_state.value}")
        logger.debug(f"Asset {self.asset_id}: {self.state.value} -> {next_state.value}")
        self.state = next_state


class SettlementEngine:
    """
    Sale settlement contract deployed on an ExecutionHost.

    The engine's own address is the settlement context id embedded in every
    signed digest, so signatures collected for one engine cannot be replayed
    against another. The engine must hold MINTER_ROLE on any registry it
    creates assets in.
    """

    def __init__(self,
                 host: ExecutionHost,
                 address: str,
                 deployer: str,
                 verifier: Optional[SignatureVerifier] = None):
        self.address = normalize_address(address)
        self.access = AccessPolicy(deployer)
        self.authority = TrustedAuthorityRegistry(deployer, self.access)
        self.guard_state = GuardState.IDLE
        self._host = host
        self._verifier = verifier or SignatureVerifier()

    # ===== PURCHASE =====

    def purchase_with_native_currency(self,
                                      ctx: CallContext,
                                      registry_id: str,
                                      asset_id: int,
                                      recipients: Sequence[str],
                                      amounts: Sequence[int],
                                      creator_signature: SignatureLike,
                                      authority_signature: SignatureLike,
                                      is_preexisting: bool,
                                      metadata: str = "") -> SettlementReceipt:
        """
        Buy an asset by paying exactly the sum of the distribution.

        Args:
            ctx: Buyer and the attached value in wei
            registry_id: Address of the asset registry
            asset_id: Asset to buy (or to create, for deferred creation)
            recipients: Payment recipients, parallel to amounts
            amounts: Wei owed to each recipient
            creator_signature: Seller's signature over the sale terms
            authority_signature: Trusted authority's signature over the same terms
            is_preexisting: True to transfer an existing asset, False to create it
            metadata: Asset URI attached on deferred creation

        Returns:
            Receipt of the completed settlement

        Raises:
            SettlementError: any rejection; nothing the call did survives it
        """
        try:
            with self._non_reentrant(), self._host.atomic():
                return self._settle(ctx, registry_id, asset_id, recipients, amounts,
                                    creator_signature, authority_signature,
                                    is_preexisting, metadata)
        except SettlementError as e:
            logger.warning(f"Purchase of asset {asset_id} by {ctx.sender} rejected: {e}")
            raise

    def _settle(self, ctx: CallContext, registry_id: str, asset_id: int,
                recipients: Sequence[str], amounts: Sequence[int],
                creator_signature: SignatureLike, authority_signature: SignatureLike,
                is_preexisting: bool, metadata: str) -> SettlementReceipt:
        buyer = normalize_address(ctx.sender)
        progress = SettlementProgress(asset_id)

        # Received
        value = parse_value(ctx.value)
        self._host.ledger.attach_value(buyer, self.address, value)
        registry = self._resolve_registry(registry_id)
        terms = SaleTerms(
            asset_registry_id=registry.address,
            asset_id=parse_asset_id(asset_id),
            settlement_context_id=self.address,
            recipients=parse_recipients(recipients),
            amounts=parse_amounts(amounts),
            is_preexisting=is_preexisting,
            delivery_metadata=metadata,
        )

        creator = self._verifier.verify(
            terms, creator_signature, authority_signature, self.authority.current
        )
        progress.advance(SettlementState.SIGNATURE_VALIDATED)

        owner = None
        if terms.is_preexisting:
            owner = check_listing(registry, terms.asset_id, creator, buyer, operator=self.address)
        else:
            check_binding(terms.asset_id, creator)
        progress.advance(SettlementState.PROVENANCE_VALIDATED)

        total = check_distribution(terms.recipients, terms.amounts, value)
        progress.advance(SettlementState.DISTRIBUTION_VALIDATED)

        payouts = self._push_payments(terms.distribution)

        operator = CallContext(sender=self.address)
        if terms.is_preexisting:
            registry.safe_transfer_from(operator, owner, buyer, terms.asset_id)
            mode = DeliveryMode.TRANSFER
        else:
            registry.create(operator, buyer, terms.asset_id, terms.delivery_metadata)
            mode = DeliveryMode.DEFERRED_CREATION
        progress.advance(SettlementState.SETTLED)

        logger.info(
            f"Settled asset {terms.asset_id} in {registry.address}: {creator} -> {buyer}, "
            f"{total} wei to {len(payouts)} recipients ({mode.value})"
        )
        return SettlementReceipt(
            buyer=buyer,
            creator=creator,
            asset_registry_id=registry.address,
            asset_id=terms.asset_id,
            delivery_mode=mode,
            total_amount=total,
            payouts=payouts,
            state=progress.state,
        )

    def _push_payments(self, distribution: List[Payee]) -> List[Payee]:
        """Push every amount to its recipient; recipient code runs during the push"""
        for payee in distribution:
            self._host.ledger.transfer_value(self.address, payee.recipient, payee.amount)
            logger.debug(f"Paid {payee.amount} wei to {payee.recipient}")
        return list(distribution)

    @contextmanager
    def _non_reentrant(self) -> Iterator[None]:
        if self.guard_state is GuardState.IN_FLIGHT:
            raise ReentrancyRejectedError("A purchase is already in flight on this engine")
        self.guard_state = GuardState.IN_FLIGHT
        try:
            yield
        finally:
            self.guard_state = GuardState.IDLE

    # ===== CREATION =====

    def create_asset(self, ctx: CallContext, registry_id: str, to_address: str,
                     asset_id: int, metadata: str) -> None:
        """Create an asset through the engine. Caller must be a minter on the registry."""
        registry = self._resolve_registry(registry_id)
        if not registry.has_role(MINTER_ROLE, ctx.sender):
            raise UnauthorizedError(f"{ctx.sender} is not a minter on {registry.address}")

        with self._host.atomic():
            registry.create(CallContext(sender=self.address), to_address, asset_id, metadata)

    # ===== ADMINISTRATION =====

    def set_trusted_authority(self, ctx: CallContext, identity: str) -> AuthorityRotation:
        return self.authority.set_authority(ctx, identity)

    def get_trusted_authority(self, ctx: CallContext) -> str:
        return self.authority.get_authority(ctx)

    # ===== FALLBACK =====

    def receive(self, ctx: CallContext) -> None:
        """Accept plain value transfers"""
        logger.debug(f"Engine {self.address} received {ctx.value} wei from {ctx.sender}")

    def _resolve_registry(self, registry_id: str) -> IAssetRegistry:
        if not validate_address(registry_id):
            raise UnknownRegistryError(f"Registry id {registry_id!r} is not an address")
        registry = self._host.code_at(registry_id)
        if not isinstance(registry, IAssetRegistry):
            raise UnknownRegistryError(f"No registry deployed at {registry_id}")
        return registry
