"""
Interfaces (protocols) for settlement collaborators.
Using Python's Protocol for structural subtyping.
"""

from typing import Protocol, Any, Optional, runtime_checkable
from abc import abstractmethod

from .types import CallContext


@runtime_checkable
class IJournaled(Protocol):
    """State that the execution host rolls back when a call fails"""

    @abstractmethod
    def snapshot(self) -> Any:
        """Capture the current state"""
        ...

    @abstractmethod
    def restore(self, state: Any) -> None:
        """Restore a state captured by snapshot()"""
        ...


class IAssetRegistryReader(Protocol):
    """Read side of an asset registry"""

    @abstractmethod
    def owner_of(self, asset_id: int) -> str:
        """Get the current owner of an asset"""
        ...

    @abstractmethod
    def get_approved(self, asset_id: int) -> Optional[str]:
        """Get the account approved to move a single asset"""
        ...

    @abstractmethod
    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        """Check whether operator may move every asset of owner"""
        ...

    @abstractmethod
    def has_role(self, role: str, account: str) -> bool:
        """Check registry capability membership"""
        ...


@runtime_checkable
class IAssetRegistry(IAssetRegistryReader, Protocol):
    """Asset registry collaborator used by the settlement engine"""

    address: str

    @abstractmethod
    def safe_transfer_from(self, ctx: CallContext, from_address: str,
                           to_address: str, asset_id: int) -> None:
        """Transfer an asset, notifying receiving code"""
        ...

    @abstractmethod
    def create(self, ctx: CallContext, to_address: str, asset_id: int, metadata: str) -> None:
        """Create a new asset; caller must hold the minter capability"""
        ...


@runtime_checkable
class IValueReceiver(Protocol):
    """Code that accepts native value transfers"""

    @abstractmethod
    def receive(self, ctx: CallContext) -> None:
        """Called after ctx.value has been credited"""
        ...


@runtime_checkable
class IAssetReceiver(Protocol):
    """Code that accepts assets through safe transfers"""

    @abstractmethod
    def on_asset_received(self, operator: str, from_address: str, asset_id: int) -> None:
        """Called after the asset has been assigned; raising rejects it"""
        ...
