"""
FundCustody -- the pooled escrow balance and owner-only withdrawal.

Responsibility:
    Holds every escrowed bid amount in one process-wide balance.  Value
    enters only through ``deposit()`` (bid placement) and leaves only through
    ``withdraw()``, which drains the whole balance to the system owner via
    the PayoutGateway.

Architecture position:
    Kernel > Services -- imperative shell.
    ``deposit`` is called by BidLedger; ``withdraw`` by the Marketplace
    facade.

Invariants enforced:
    - No per-project sub-ledger, no refunds, no release on acceptance.
    - ``withdraw`` writes the zero balance and flushes BEFORE calling the
      gateway.  If the gateway raises, the caller's transaction rolls back
      and the balance is restored.
    - ``withdraw`` is not gated by the emergency stop.

Failure modes:
    - UnauthorizedError: withdraw by anyone but the system owner.
    - EscrowOverflowError: deposit would push the balance past MAX_AMOUNT.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace_kernel.db.types import MAX_AMOUNT, validate_amount
from marketplace_kernel.domain.payout import PayoutGateway
from marketplace_kernel.exceptions import EscrowOverflowError
from marketplace_kernel.logging_config import get_logger
from marketplace_kernel.models.escrow import POOL_ROW_ID, EscrowPool
from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.base import BaseService

logger = get_logger("services.fund_custody")


class FundCustody(BaseService):
    """Aggregate escrow balance."""

    def __init__(self, session: Session):
        super().__init__(session)
        self._access = AccessController(session)

    def _pool(self) -> EscrowPool:
        pool = self.session.execute(
            select(EscrowPool).where(EscrowPool.id == POOL_ROW_ID).with_for_update()
        ).scalar_one_or_none()
        if pool is None:
            pool = EscrowPool(id=POOL_ROW_ID, balance=0)
            self.session.add(pool)
            self.session.flush()
        return pool

    def initialize(self) -> int:
        """Create the pool row at zero if it does not exist. Returns the balance."""
        return self._pool().balance

    @property
    def balance(self) -> int:
        return self._pool().balance

    def deposit(self, amount: int) -> int:
        """
        Add escrowed value to the pool.

        Returns:
            The new balance.

        Raises:
            EscrowOverflowError: If the balance would exceed MAX_AMOUNT.
        """
        validate_amount(amount, "deposit")
        pool = self._pool()
        if pool.balance > MAX_AMOUNT - amount:
            raise EscrowOverflowError(pool.balance, amount, MAX_AMOUNT)

        pool.balance += amount
        self.session.flush()
        logger.debug("escrow_deposited", extra={"amount": amount, "balance": pool.balance})
        return pool.balance

    def withdraw(self, caller: str, payout: PayoutGateway) -> int:
        """
        Transfer the entire pooled balance to the system owner.

        Args:
            caller: Must be the system owner.
            payout: Gateway that receives the value.

        Returns:
            The amount transferred.

        Raises:
            UnauthorizedError: If caller is not the system owner.
        """
        self._access.require_owner(caller, "withdraw")
        owner = self._access.owner

        pool = self._pool()
        amount = pool.balance

        # Balance is written before any value leaves the system.
        pool.balance = 0
        self.session.flush()

        payout.transfer(owner, amount)

        logger.info("funds_withdrawn", extra={"amount": amount, "recipient": owner})
        return amount
