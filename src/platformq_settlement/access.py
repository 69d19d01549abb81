"""
Role-based authorization policy.

Administrative and minting capabilities are checked at the API boundary of the
engine and the registry through an AccessPolicy, kept apart from the
settlement state machine itself.
"""

import logging
from typing import Dict, Set, List

from eth_utils import encode_hex, keccak

from .errors import UnauthorizedError
from .types import CallContext
from .utils import normalize_address

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_ROLE = "0x" + "00" * 32
MINTER_ROLE = encode_hex(keccak(text="MINTER_ROLE"))


class AccessPolicy:
    """Role membership with DEFAULT_ADMIN_ROLE administering every role"""

    def __init__(self, admin: str):
        self._members: Dict[str, Set[str]] = {}
        self._grant(DEFAULT_ADMIN_ROLE, normalize_address(admin))

    def has_role(self, role: str, account: str) -> bool:
        return normalize_address(account) in self._members.get(role, set())

    def require_role(self, role: str, account: str) -> None:
        """Raise UnauthorizedError unless account holds role"""
        if not self.has_role(role, account):
            raise UnauthorizedError(f"Account {account} is missing role {role}")

    def grant_role(self, ctx: CallContext, role: str, account: str) -> None:
        self.require_role(DEFAULT_ADMIN_ROLE, ctx.sender)
        self._grant(role, normalize_address(account))
        logger.info(f"Role {role} granted to {account} by {ctx.sender}")

    def revoke_role(self, ctx: CallContext, role: str, account: str) -> None:
        self.require_role(DEFAULT_ADMIN_ROLE, ctx.sender)
        self._members.get(role, set()).discard(normalize_address(account))
        logger.info(f"Role {role} revoked from {account} by {ctx.sender}")

    def renounce_role(self, ctx: CallContext, role: str) -> None:
        self._members.get(role, set()).discard(normalize_address(ctx.sender))
        logger.info(f"Role {role} renounced by {ctx.sender}")

    def members(self, role: str) -> List[str]:
        return sorted(self._members.get(role, set()))

    def _grant(self, role: str, account: str) -> None:
        self._members.setdefault(role, set()).add(account)
