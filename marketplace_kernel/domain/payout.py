"""
PayoutGateway -- the boundary where value leaves the marketplace.

Responsibility:
    Abstracts the external holdings substrate that receives withdrawn escrow.
    FundCustody calls ``transfer()`` exactly once per withdrawal, after the
    pooled balance has already been written to zero.

Architecture position:
    Kernel > Domain -- interface plus one in-process implementation
    (InMemoryWallet), in the same way Clock pairs an interface with
    SystemClock / DeterministicClock.

Failure modes:
    - Any exception raised by ``transfer()`` aborts the withdrawal; the
      enclosing transaction rolls back and the balance is restored.
"""

import threading
from abc import ABC, abstractmethod


class PayoutGateway(ABC):
    """
    Destination for value leaving the system.

    Contract:
        ``transfer(recipient, amount)`` credits ``amount`` to ``recipient``'s
        external holdings, or raises.  Implementations must not assume they
        can call back into the marketplace; a nested call is rejected with
        ReentrantCallError.
    """

    @abstractmethod
    def transfer(self, recipient: str, amount: int) -> None:
        ...


class InMemoryWallet(PayoutGateway):
    """Per-identity holdings kept in process memory."""

    def __init__(self, opening: dict[str, int] | None = None):
        self._holdings: dict[str, int] = dict(opening or {})
        self._lock = threading.Lock()
        self.transfers: list[tuple[str, int]] = []

    def transfer(self, recipient: str, amount: int) -> None:
        with self._lock:
            self._holdings[recipient] = self._holdings.get(recipient, 0) + amount
            self.transfers.append((recipient, amount))

    def holdings_of(self, identity: str) -> int:
        with self._lock:
            return self._holdings.get(identity, 0)
