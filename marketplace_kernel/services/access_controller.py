"""
AccessController -- system owner identity and the emergency-stop gate.

Responsibility:
    Holds the system owner (written once, at initialization) and the
    ``stopped`` flag.  Provides the capability checks every operation calls
    explicitly at its start: ``require_running`` (the gate) and
    ``require_owner`` (the system-owner role).

Architecture position:
    Kernel > Services -- imperative shell.
    Called first by every mutating service and by FundCustody.

Invariants enforced:
    - The owner never changes after initialization.
    - Only the owner can flip ``stopped``; toggling is itself never gated.
    - ``require_stopped`` exists for interface completeness and is not
      wired to any operation.

Failure modes:
    - UnauthorizedError: caller is not the system owner.
    - EmergencyStoppedError: gate closed.
    - NotStoppedError: ``require_stopped`` while running.
    - OwnerAlreadySetError: store initialized by a different owner.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace_kernel.exceptions import (
    EmergencyStoppedError,
    NotStoppedError,
    OwnerAlreadySetError,
    UnauthorizedError,
)
from marketplace_kernel.logging_config import get_logger
from marketplace_kernel.models.access_control import CONTROL_ROW_ID, AccessControlState
from marketplace_kernel.services.base import BaseService

logger = get_logger("services.access_controller")

SYSTEM_OWNER_ROLE = "system owner"
PROJECT_OWNER_ROLE = "project owner"


class AccessController(BaseService):
    """
    Owner identity and emergency stop.

    Contract:
        Every check reads the single control row inside the caller's
        transaction, so the answer is consistent with the rest of the
        operation's snapshot.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _state(self) -> AccessControlState:
        state = self.session.execute(
            select(AccessControlState).where(AccessControlState.id == CONTROL_ROW_ID)
        ).scalar_one_or_none()
        if state is None:
            raise RuntimeError(
                "Access control not initialized. Call AccessController.initialize() first."
            )
        return state

    def initialize(self, owner: str) -> None:
        """
        Create the control row with ``owner`` as system owner.

        Re-initializing with the same owner is a no-op.

        Raises:
            ValueError: If owner is empty.
            OwnerAlreadySetError: If a different owner is already recorded.
        """
        if not owner:
            raise ValueError("System owner identity must be a non-empty string")

        existing = self.session.execute(
            select(AccessControlState).where(AccessControlState.id == CONTROL_ROW_ID)
        ).scalar_one_or_none()
        if existing is not None:
            if existing.owner != owner:
                raise OwnerAlreadySetError(existing.owner, owner)
            return

        self.session.add(AccessControlState(id=CONTROL_ROW_ID, owner=owner, stopped=False))
        self.session.flush()
        logger.info("access_control_initialized", extra={"owner": owner})

    @property
    def owner(self) -> str:
        return self._state().owner

    @property
    def is_stopped(self) -> bool:
        return self._state().stopped

    def require_owner(self, caller: str, operation: str) -> None:
        """Raise UnauthorizedError unless ``caller`` is the system owner."""
        if caller != self._state().owner:
            raise UnauthorizedError(caller, SYSTEM_OWNER_ROLE, operation)

    def require_running(self, operation: str) -> None:
        """The gate: raise EmergencyStoppedError while stopped."""
        if self._state().stopped:
            raise EmergencyStoppedError(operation)

    def require_stopped(self, operation: str) -> None:
        """Companion gate that only passes while stopped. Not used by any operation."""
        if not self._state().stopped:
            raise NotStoppedError(operation)

    def toggle_active(self, caller: str) -> bool:
        """
        Flip the emergency stop.

        Returns:
            The new ``stopped`` value.

        Raises:
            UnauthorizedError: If caller is not the system owner.
        """
        self.require_owner(caller, "toggle_active")
        state = self._state()
        state.stopped = not state.stopped
        self.session.flush()

        logger.warning(
            "emergency_stop_toggled",
            extra={"stopped": state.stopped, "actor": caller},
        )
        return state.stopped
