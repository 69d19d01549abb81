"""
In-memory asset registry.

An ERC-721 style registry of unique assets: ownership, single-asset and
operator approvals, metadata URIs and a minter capability for creation. It
runs on an ExecutionHost, so its state is rolled back together with balances
when a settlement fails.
"""

import logging
from typing import Dict, Set, List, Optional, Any

from .access import AccessPolicy, MINTER_ROLE
from .errors import (
    AssetAlreadyExistsError,
    AssetNotFoundError,
    DeliveryRejectedError,
    InvalidAssetIdError,
    InvalidIdentityError,
    OwnershipMismatchError,
    UnauthorizedError,
)
from .interfaces import IAssetReceiver
from .types import CallContext
from .utils import normalize_address, is_null_address, is_uint256

logger = logging.getLogger(__name__)


class InMemoryAssetRegistry:
    """Unique-asset registry deployed on an ExecutionHost"""

    def __init__(self, host, address: str, admin: str,
                 name: str = "PlatformQ Asset", symbol: str = "PQA"):
        self.address = normalize_address(address)
        self.name = name
        self.symbol = symbol
        self.access = AccessPolicy(admin)
        self._host = host
        self._owners: Dict[int, str] = {}
        self._approvals: Dict[int, str] = {}
        self._operators: Dict[str, Set[str]] = {}
        self._uris: Dict[int, str] = {}

    # ===== READS =====

    def exists(self, asset_id: int) -> bool:
        return asset_id in self._owners

    def owner_of(self, asset_id: int) -> str:
        if asset_id not in self._owners:
            raise AssetNotFoundError(f"Asset {asset_id} does not exist in {self.address}")
        return self._owners[asset_id]

    def balance_of(self, owner: str) -> int:
        owner = normalize_address(owner)
        return sum(1 for holder in self._owners.values() if holder == owner)

    def assets_of(self, owner: str) -> List[int]:
        owner = normalize_address(owner)
        return sorted(asset_id for asset_id, holder in self._owners.items() if holder == owner)

    def token_uri(self, asset_id: int) -> str:
        self.owner_of(asset_id)
        return self._uris.get(asset_id, "")

    def get_approved(self, asset_id: int) -> Optional[str]:
        self.owner_of(asset_id)
        return self._approvals.get(asset_id)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return normalize_address(operator) in self._operators.get(normalize_address(owner), set())

    def has_role(self, role: str, account: str) -> bool:
        return self.access.has_role(role, account)

    # ===== APPROVALS =====

    def approve(self, ctx: CallContext, to_address: str, asset_id: int) -> None:
        owner = self.owner_of(asset_id)
        if normalize_address(ctx.sender) != owner and not self.is_approved_for_all(owner, ctx.sender):
            raise UnauthorizedError(f"{ctx.sender} may not approve asset {asset_id}")
        self._approvals[asset_id] = normalize_address(to_address)

    def set_approval_for_all(self, ctx: CallContext, operator: str, approved: bool) -> None:
        operators = self._operators.setdefault(normalize_address(ctx.sender), set())
        if approved:
            operators.add(normalize_address(operator))
        else:
            operators.discard(normalize_address(operator))

    # ===== TRANSFERS =====

    def transfer_from(self, ctx: CallContext, from_address: str,
                      to_address: str, asset_id: int) -> None:
        owner = self.owner_of(asset_id)
        if owner != normalize_address(from_address):
            raise OwnershipMismatchError(f"Asset {asset_id} is owned by {owner}, not {from_address}")
        if is_null_address(to_address):
            raise InvalidIdentityError("Cannot transfer to the null address")
        if not self._is_approved_or_owner(ctx.sender, owner, asset_id):
            raise UnauthorizedError(f"{ctx.sender} is not approved for asset {asset_id}")

        self._approvals.pop(asset_id, None)
        self._owners[asset_id] = normalize_address(to_address)
        logger.debug(f"Asset {asset_id} moved from {owner} to {to_address}")

    def safe_transfer_from(self, ctx: CallContext, from_address: str,
                           to_address: str, asset_id: int) -> None:
        """Transfer, then let receiving code accept or reject the asset"""
        self.transfer_from(ctx, from_address, to_address, asset_id)

        code = self._host.code_at(to_address)
        if code is None:
            return
        if not isinstance(code, IAssetReceiver):
            raise DeliveryRejectedError(f"Code at {to_address} does not accept assets")
        code.on_asset_received(ctx.sender, normalize_address(from_address), asset_id)

    # ===== CREATION =====

    def create(self, ctx: CallContext, to_address: str, asset_id: int, metadata: str) -> None:
        """Create asset_id owned by to_address. Caller must hold MINTER_ROLE."""
        self.access.require_role(MINTER_ROLE, ctx.sender)

        if not is_uint256(asset_id):
            raise InvalidAssetIdError(f"Asset id {asset_id!r} is not a uint256")
        if is_null_address(to_address):
            raise InvalidIdentityError("Cannot create an asset for the null address")
        if asset_id in self._owners:
            raise AssetAlreadyExistsError(f"Asset {asset_id} already exists in {self.address}")

        self._owners[asset_id] = normalize_address(to_address)
        if metadata:
            self._uris[asset_id] = metadata

        logger.info(f"Created asset {asset_id} for {to_address} in {self.address}")

    # ===== JOURNAL =====

    def snapshot(self) -> Dict[str, Any]:
        return {
            "owners": dict(self._owners),
            "approvals": dict(self._approvals),
            "operators": {owner: set(ops) for owner, ops in self._operators.items()},
            "uris": dict(self._uris),
        }

    def restore(self, state: Dict[str, Any]) -> None:
        self._owners = dict(state["owners"])
        self._approvals = dict(state["approvals"])
        self._operators = {owner: set(ops) for owner, ops in state["operators"].items()}
        self._uris = dict(state["uris"])

    def _is_approved_or_owner(self, spender: str, owner: str, asset_id: int) -> bool:
        spender = normalize_address(spender)
        return (
            spender == owner
            or self._approvals.get(asset_id) == spender
            or self.is_approved_for_all(owner, spender)
        )
