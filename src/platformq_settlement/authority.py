"""
Trusted authority holder.
"""

import logging

from .access import AccessPolicy, DEFAULT_ADMIN_ROLE
from .errors import InvalidIdentityError
from .types import CallContext, AuthorityRotation
from .utils import normalize_address, is_null_address, validate_address

logger = logging.getLogger(__name__)


class TrustedAuthorityRegistry:
    """
    Holds the identity whose co-signature every sale requires.

    Reads and writes through the public API need DEFAULT_ADMIN_ROLE. Rotation
    replaces the identity outright: signatures made by a previous authority
    stop verifying immediately and no history is kept.
    """

    def __init__(self, initial_authority: str, access: AccessPolicy):
        self._authority = normalize_address(initial_authority)
        self._access = access

    @property
    def current(self) -> str:
        """Ungated read for internal signature verification"""
        return self._authority

    def get_authority(self, ctx: CallContext) -> str:
        self._access.require_role(DEFAULT_ADMIN_ROLE, ctx.sender)
        return self._authority

    def set_authority(self, ctx: CallContext, new_identity: str) -> AuthorityRotation:
        self._access.require_role(DEFAULT_ADMIN_ROLE, ctx.sender)

        if not validate_address(new_identity) or is_null_address(new_identity):
            raise InvalidIdentityError(f"Trusted authority must be a non-null address, got {new_identity!r}")

        rotation = AuthorityRotation(
            previous=self._authority,
            current=normalize_address(new_identity),
            rotated_by=normalize_address(ctx.sender),
        )
        self._authority = rotation.current

        logger.info(
            f"Trusted authority rotated from {rotation.previous} to {rotation.current} "
            f"by {rotation.rotated_by}"
        )
        return rotation
