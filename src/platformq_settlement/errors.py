"""
Error Handling for PlatformQ Settlement

Every rejected settlement surfaces as one SettlementError subclass carrying a
machine-readable error code and a human-readable reason tag. There is no retry
metadata: a rejection with the same terms is definitive.
"""

from typing import Optional


class ErrorCode:
    """Standard error codes for settlement operations"""
    # Signature errors
    SIGNATURE_REJECTED = "SIGNATURE_REJECTED"
    INVALID_AUTHORITY_SIGNATURE = "INVALID_AUTHORITY_SIGNATURE"
    INVALID_CREATOR_SIGNATURE = "INVALID_CREATOR_SIGNATURE"

    # Provenance errors
    OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"
    SELF_PURCHASE_REJECTED = "SELF_PURCHASE_REJECTED"
    NOT_APPROVED = "NOT_APPROVED"
    ASSET_ID_NOT_OWNED_BY_CREATOR = "ASSET_ID_NOT_OWNED_BY_CREATOR"

    # Distribution errors
    MALFORMED_DISTRIBUTION = "MALFORMED_DISTRIBUTION"
    INVALID_PAYEE = "INVALID_PAYEE"
    ZERO_AMOUNT = "ZERO_AMOUNT"
    AMOUNT_OVERFLOW = "AMOUNT_OVERFLOW"
    VALUE_MISMATCH = "VALUE_MISMATCH"

    # Execution errors
    REENTRANCY_REJECTED = "REENTRANCY_REJECTED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    DELIVERY_REJECTED = "DELIVERY_REJECTED"

    # Registry errors
    ASSET_ALREADY_EXISTS = "ASSET_ALREADY_EXISTS"
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    UNKNOWN_REGISTRY = "UNKNOWN_REGISTRY"

    # Input and authorization errors
    INVALID_ASSET_ID = "INVALID_ASSET_ID"
    INVALID_IDENTITY = "INVALID_IDENTITY"
    UNAUTHORIZED = "UNAUTHORIZED"


class SettlementError(Exception):
    """Base exception for settlement errors"""

    error_code: str = "SETTLEMENT_ERROR"
    reason: str = "SettlementError"

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.reason}: {self.message}"


class SignatureRejectedError(SettlementError):
    """Sale terms failed dual-signature verification"""
    error_code = ErrorCode.SIGNATURE_REJECTED
    reason = "SignatureRejected"


class InvalidAuthoritySignatureError(SignatureRejectedError):
    """Authority signature is malformed or not from the trusted authority"""
    error_code = ErrorCode.INVALID_AUTHORITY_SIGNATURE
    reason = "InvalidAuthoritySignature"


class InvalidCreatorSignatureError(SignatureRejectedError):
    """Creator signature could not be recovered"""
    error_code = ErrorCode.INVALID_CREATOR_SIGNATURE
    reason = "InvalidCreatorSignature"


class OwnershipMismatchError(SettlementError):
    error_code = ErrorCode.OWNERSHIP_MISMATCH
    reason = "OwnershipMismatch"


class SelfPurchaseRejectedError(SettlementError):
    error_code = ErrorCode.SELF_PURCHASE_REJECTED
    reason = "SelfPurchaseRejected"


class NotApprovedError(SettlementError):
    error_code = ErrorCode.NOT_APPROVED
    reason = "NotApproved"


class AssetIdNotOwnedByCreatorError(SettlementError):
    error_code = ErrorCode.ASSET_ID_NOT_OWNED_BY_CREATOR
    reason = "AssetIdNotOwnedByCreator"


class MalformedDistributionError(SettlementError):
    error_code = ErrorCode.MALFORMED_DISTRIBUTION
    reason = "MalformedDistribution"


class InvalidPayeeError(SettlementError):
    error_code = ErrorCode.INVALID_PAYEE
    reason = "InvalidPayee"


class ZeroAmountError(SettlementError):
    error_code = ErrorCode.ZERO_AMOUNT
    reason = "ZeroAmount"


class AmountOverflowError(SettlementError):
    error_code = ErrorCode.AMOUNT_OVERFLOW
    reason = "AmountOverflow"


class ValueMismatchError(SettlementError):
    error_code = ErrorCode.VALUE_MISMATCH
    reason = "ValueMismatch"


class ReentrancyRejectedError(SettlementError):
    error_code = ErrorCode.REENTRANCY_REJECTED
    reason = "ReentrancyRejected"


class InsufficientFundsError(SettlementError):
    """Sender balance does not cover a value transfer"""
    error_code = ErrorCode.INSUFFICIENT_FUNDS
    reason = "InsufficientFunds"


class DeliveryRejectedError(SettlementError):
    """Receiving code refused an asset"""
    error_code = ErrorCode.DELIVERY_REJECTED
    reason = "DeliveryRejected"


class AssetAlreadyExistsError(SettlementError):
    error_code = ErrorCode.ASSET_ALREADY_EXISTS
    reason = "AssetAlreadyExists"


class AssetNotFoundError(SettlementError):
    error_code = ErrorCode.ASSET_NOT_FOUND
    reason = "AssetNotFound"


class UnknownRegistryError(SettlementError):
    error_code = ErrorCode.UNKNOWN_REGISTRY
    reason = "UnknownRegistry"


class InvalidAssetIdError(SettlementError):
    error_code = ErrorCode.INVALID_ASSET_ID
    reason = "InvalidAssetId"


class InvalidIdentityError(SettlementError):
    error_code = ErrorCode.INVALID_IDENTITY
    reason = "InvalidIdentity"


class UnauthorizedError(SettlementError):
    """Caller lacks the capability required by an operation"""
    error_code = ErrorCode.UNAUTHORIZED
    reason = "Unauthorized"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)
