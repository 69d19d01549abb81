"""
In-process execution host.

Stands in for the chain the settlement engine runs on: code deployed at
addresses, a native-currency ledger, and all-or-nothing execution. State that
implements IJournaled is snapshotted on entry to atomic() and restored if the
block raises, so a failed call leaves no partial effects behind.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Any, List, Optional, Iterator

from .errors import InsufficientFundsError, DeliveryRejectedError
from .interfaces import IJournaled, IValueReceiver
from .types import CallContext
from .utils import normalize_address, is_uint256

logger = logging.getLogger(__name__)


class Ledger:
    """Native currency balances, in wei"""

    def __init__(self, host: "ExecutionHost"):
        self._host = host
        self._balances: Dict[str, int] = {}

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def deposit(self, address: str, amount: int) -> None:
        """Fund an account from outside any call (genesis / faucet)"""
        if amount < 0:
            raise ValueError(f"Deposit amount must be non-negative, got {amount}")
        address = normalize_address(address)
        self._balances[address] = self._balances.get(address, 0) + amount

    def attach_value(self, sender: str, recipient: str, amount: int) -> None:
        """Move value attached to a call. No receiving code runs."""
        if not is_uint256(amount):
            raise ValueError(f"Transfer amount must be a uint256 integer, got {amount!r}")

        sender = normalize_address(sender)
        recipient = normalize_address(recipient)

        available = self._balances.get(sender, 0)
        if available < amount:
            raise InsufficientFundsError(f"{sender} holds {available} wei, needs {amount}")

        self._balances[sender] = available - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        logger.debug(f"Moved {amount} wei from {sender} to {recipient}")

    def transfer_value(self, sender: str, recipient: str, amount: int) -> None:
        """
        Move amount from sender to recipient.

        If recipient is deployed code its receive() hook runs after the
        balance moves, with whatever logic it carries. Exceptions raised by
        the hook propagate to the caller.
        """
        self.attach_value(sender, recipient, amount)

        code = self._host.code_at(recipient)
        if code is None:
            return
        if not isinstance(code, IValueReceiver):
            raise DeliveryRejectedError(f"Code at {recipient} does not accept value")
        code.receive(CallContext(sender=normalize_address(sender), value=amount))

    def snapshot(self) -> Dict[str, int]:
        return dict(self._balances)

    def restore(self, state: Dict[str, int]) -> None:
        self._balances = dict(state)


class ExecutionHost:
    """Deployed code, balances and atomic execution scopes"""

    def __init__(self):
        self._code: Dict[str, Any] = {}
        self._journaled: List[IJournaled] = []
        self.ledger = Ledger(self)
        self.register(self.ledger)

    def deploy(self, contract: Any) -> Any:
        """Place contract at contract.address; journal it if it keeps state"""
        address = normalize_address(contract.address)
        if address in self._code:
            raise ValueError(f"Code already deployed at {address}")

        self._code[address] = contract
        if isinstance(contract, IJournaled):
            self.register(contract)

        logger.info(f"Deployed {type(contract).__name__} at {address}")
        return contract

    def register(self, participant: IJournaled) -> None:
        self._journaled.append(participant)

    def code_at(self, address: str) -> Optional[Any]:
        return self._code.get(normalize_address(address))

    def is_contract(self, address: str) -> bool:
        return self.code_at(address) is not None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run a block with all-or-nothing effects. Nested scopes roll back independently."""
        snapshots = [(participant, participant.snapshot()) for participant in self._journaled]
        try:
            yield
        except BaseException:
            for participant, state in reversed(snapshots):
                participant.restore(state)
            logger.debug(f"Rolled back {len(snapshots)} journaled participants")
            raise
