"""
Sale validation rules shared by the settlement engine and off-chain preflight.
"""

from typing import Any, Sequence, Tuple

from .errors import (
    AmountOverflowError,
    AssetIdNotOwnedByCreatorError,
    InvalidAssetIdError,
    InvalidPayeeError,
    MalformedDistributionError,
    NotApprovedError,
    OwnershipMismatchError,
    SelfPurchaseRejectedError,
    ValueMismatchError,
    ZeroAmountError,
)
from .interfaces import IAssetRegistryReader
from .prefix import PREFIX_LENGTH, derive_prefix, extract_leading_digits
from .types import UINT256_MAX
from .utils import normalize_address, validate_address, is_null_address, is_uint256


# ===== INPUT PARSING =====

def parse_asset_id(asset_id: Any) -> int:
    if not is_uint256(asset_id):
        raise InvalidAssetIdError(f"Asset id {asset_id!r} is not a uint256")
    return asset_id


def parse_recipients(recipients: Sequence[Any]) -> Tuple[str, ...]:
    """Checksum every recipient. Anything that is not an address is an invalid payee."""
    parsed = []
    for recipient in recipients:
        if not validate_address(recipient):
            raise InvalidPayeeError(f"Recipient {recipient!r} is not an address")
        parsed.append(normalize_address(recipient))
    return tuple(parsed)


def parse_amounts(amounts: Sequence[Any]) -> Tuple[int, ...]:
    parsed = []
    for amount in amounts:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ZeroAmountError(f"Amount {amount!r} is not a positive integer")
        if amount > UINT256_MAX:
            raise AmountOverflowError(f"Amount {amount} exceeds uint256")
        parsed.append(amount)
    return tuple(parsed)


# ===== PROVENANCE =====

def check_listing(registry: IAssetRegistryReader, asset_id: int, creator: str,
                  buyer: str, operator: str) -> str:
    """
    Validate a sale of an asset that already exists.

    Returns:
        The current owner

    Raises:
        OwnershipMismatchError: owner is not the recovered creator
        SelfPurchaseRejectedError: buyer already owns the asset
        NotApprovedError: operator may not move the asset
    """
    owner = normalize_address(registry.owner_of(asset_id))

    if owner != normalize_address(creator):
        raise OwnershipMismatchError(f"Asset {asset_id} is owned by {owner}, terms were signed by {creator}")
    if owner == normalize_address(buyer):
        raise SelfPurchaseRejectedError(f"{buyer} already owns asset {asset_id}")

    approved = registry.get_approved(asset_id)
    operator = normalize_address(operator)
    if approved is not None and normalize_address(approved) == operator:
        return owner
    if registry.is_approved_for_all(owner, operator):
        return owner
    raise NotApprovedError(f"{operator} is not approved to move asset {asset_id} of {owner}")


def check_binding(asset_id: int, creator: str) -> None:
    """Validate that a not-yet-created asset id carries the creator's prefix"""
    leading = extract_leading_digits(str(asset_id), PREFIX_LENGTH)
    expected = derive_prefix(creator)
    if leading != expected:
        raise AssetIdNotOwnedByCreatorError(
            f"Asset {asset_id} has prefix {leading or '<none>'}, creator {creator} owns prefix {expected}"
        )


def parse_value(value: Any) -> int:
    """Attached value must be a uint256 integer"""
    if not is_uint256(value):
        raise ValueMismatchError(f"Attached value {value!r} is not a uint256 integer")
    return value


# ===== DISTRIBUTION =====

def check_distribution(recipients: Sequence[str], amounts: Sequence[int], value: int) -> int:
    """
    Validate a payment distribution against the attached value.

    Returns:
        The distribution total, which equals value
    """
    if not recipients or len(recipients) != len(amounts):
        raise MalformedDistributionError(
            f"Distribution needs matching non-empty recipients and amounts, "
            f"got {len(recipients)} and {len(amounts)}"
        )

    total = 0
    for recipient, amount in zip(recipients, amounts):
        if is_null_address(recipient):
            raise InvalidPayeeError("Distribution pays the null address")
        if amount <= 0:
            raise ZeroAmountError(f"Distribution pays {amount} to {recipient}")
        total += amount
        if total > UINT256_MAX:
            raise AmountOverflowError("Distribution total exceeds uint256")

    if value != total:
        raise ValueMismatchError(f"Attached value {value} does not equal distribution total {total}")
    return total
