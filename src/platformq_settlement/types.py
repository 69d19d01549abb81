"""
Core types and enums for settlement operations.
"""

from enum import Enum
from typing import Tuple, List, Dict, Any
from dataclasses import dataclass, field
from datetime import datetime


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
UINT256_MAX = 2 ** 256 - 1


class SettlementState(Enum):
    """Per-call purchase states, in the order they are reached"""
    RECEIVED = "received"
    SIGNATURE_VALIDATED = "signature_validated"
    PROVENANCE_VALIDATED = "provenance_validated"
    DISTRIBUTION_VALIDATED = "distribution_validated"
    SETTLED = "settled"


class GuardState(Enum):
    """Reentrancy guard state of a settlement engine"""
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class DeliveryMode(Enum):
    """How the asset reaches the buyer"""
    TRANSFER = "transfer"  # asset already exists in the registry
    DEFERRED_CREATION = "deferred_creation"  # asset is created at sale time


@dataclass(frozen=True)
class CallContext:
    """Caller identity and the native value attached to a call"""
    sender: str
    value: int = 0


@dataclass(frozen=True)
class Payee:
    """One entry of a payment distribution"""
    recipient: str
    amount: int


@dataclass(frozen=True)
class SaleTerms:
    """Terms a creator and the trusted authority sign for one sale.

    Only the registry, asset id, settlement context and the distribution are
    covered by the signatures; delivery mode and metadata are not.
    """
    asset_registry_id: str
    asset_id: int
    settlement_context_id: str
    recipients: Tuple[str, ...]
    amounts: Tuple[int, ...]
    is_preexisting: bool = False
    delivery_metadata: str = ""

    @property
    def distribution(self) -> List[Payee]:
        return [Payee(recipient, amount) for recipient, amount in zip(self.recipients, self.amounts)]


@dataclass
class SettlementReceipt:
    """Outcome of a completed purchase"""
    buyer: str
    creator: str
    asset_registry_id: str
    asset_id: int
    delivery_mode: DeliveryMode
    total_amount: int
    payouts: List[Payee]
    state: SettlementState = SettlementState.SETTLED
    settled_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "buyer": self.buyer,
            "creator": self.creator,
            "asset_registry_id": self.asset_registry_id,
            "asset_id": str(self.asset_id),
            "delivery_mode": self.delivery_mode.value,
            "total_amount": str(self.total_amount),
            "payouts": [
                {"recipient": p.recipient, "amount": str(p.amount)} for p in self.payouts
            ],
            "state": self.state.value,
            "settled_at": self.settled_at.isoformat(),
        }


@dataclass
class AuthorityRotation:
    """Logged record of a trusted-authority change"""
    previous: str
    current: str
    rotated_by: str
    rotated_at: datetime = field(default_factory=datetime.utcnow)
