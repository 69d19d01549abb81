"""
PlatformQ Settlement Library

Dual-signature settlement of unique-asset sales for native currency, with
creator-bound asset ids for assets that are created at sale time.
"""

from .types import (
    CallContext,
    Payee,
    SaleTerms,
    SettlementReceipt,
    AuthorityRotation,
    SettlementState,
    GuardState,
    DeliveryMode,
    ZERO_ADDRESS,
    UINT256_MAX
)

from .errors import (
    ErrorCode,
    SettlementError,
    SignatureRejectedError,
    InvalidAuthoritySignatureError,
    InvalidCreatorSignatureError,
    OwnershipMismatchError,
    SelfPurchaseRejectedError,
    NotApprovedError,
    AssetIdNotOwnedByCreatorError,
    MalformedDistributionError,
    InvalidPayeeError,
    ZeroAmountError,
    AmountOverflowError,
    ValueMismatchError,
    ReentrancyRejectedError,
    InsufficientFundsError,
    DeliveryRejectedError,
    AssetAlreadyExistsError,
    AssetNotFoundError,
    UnknownRegistryError,
    InvalidAssetIdError,
    InvalidIdentityError,
    UnauthorizedError
)

from .interfaces import (
    IJournaled,
    IAssetRegistryReader,
    IAssetRegistry,
    IValueReceiver,
    IAssetReceiver
)

from .prefix import (
    PREFIX_LENGTH,
    derive_prefix,
    extract_leading_digits,
    compose_asset_id,
    is_asset_id_bound_to
)

from .signatures import (
    SignatureVerifier,
    encode_sale_terms,
    sale_terms_digest,
    recover_signer
)

from .access import AccessPolicy, DEFAULT_ADMIN_ROLE, MINTER_ROLE
from .authority import TrustedAuthorityRegistry
from .host import ExecutionHost, Ledger
from .registry import InMemoryAssetRegistry
from .engine import SettlementEngine
from .client import SaleTermsSigner, preflight_purchase
from .config import SettlementSettings, get_settings
from .adapters import EVMAssetRegistry

__all__ = [
    # Types
    "CallContext",
    "Payee",
    "SaleTerms",
    "SettlementReceipt",
    "AuthorityRotation",
    "SettlementState",
    "GuardState",
    "DeliveryMode",
    "ZERO_ADDRESS",
    "UINT256_MAX",

    # Errors
    "ErrorCode",
    "SettlementError",
    "SignatureRejectedError",
    "InvalidAuthoritySignatureError",
    "InvalidCreatorSignatureError",
    "OwnershipMismatchError",
    "SelfPurchaseRejectedError",
    "NotApprovedError",
    "AssetIdNotOwnedByCreatorError",
    "MalformedDistributionError",
    "InvalidPayeeError",
    "ZeroAmountError",
    "AmountOverflowError",
    "ValueMismatchError",
    "ReentrancyRejectedError",
    "InsufficientFundsError",
    "DeliveryRejectedError",
    "AssetAlreadyExistsError",
    "AssetNotFoundError",
    "UnknownRegistryError",
    "InvalidAssetIdError",
    "InvalidIdentityError",
    "UnauthorizedError",

    # Interfaces
    "IJournaled",
    "IAssetRegistryReader",
    "IAssetRegistry",
    "IValueReceiver",
    "IAssetReceiver",

    # Prefixes & signatures
    "PREFIX_LENGTH",
    "derive_prefix",
    "extract_leading_digits",
    "compose_asset_id",
    "is_asset_id_bound_to",
    "SignatureVerifier",
    "encode_sale_terms",
    "sale_terms_digest",
    "recover_signer",

    # Contracts & host
    "AccessPolicy",
    "DEFAULT_ADMIN_ROLE",
    "MINTER_ROLE",
    "TrustedAuthorityRegistry",
    "ExecutionHost",
    "Ledger",
    "InMemoryAssetRegistry",
    "SettlementEngine",

    # Client
    "SaleTermsSigner",
    "preflight_purchase",
    "SettlementSettings",
    "get_settings",
    "EVMAssetRegistry"
]

__version__ = "1.0.0"
