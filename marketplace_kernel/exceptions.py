"""
Typed Exception Hierarchy for the Marketplace Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every operation either commits all of its effects or fails and commits
nothing.  A failure is the terminal result of the call, so callers need to
branch on *what* failed without parsing message strings:

    try:
        marketplace.place_bid(project_id, 50, 49, caller=bidder)
    except InsufficientFundsError as e:
        ask_for_exact_amount(e.bid_amount)        # Structured data
    except ProjectNotActiveError as e:
        show_closed_banner(e.project_id)

Every class carries:
  1. A CODE class attribute (machine-readable, API-safe).
  2. Structured attributes describing the failure.
  3. A stable, human-readable message, also exposed as ``reason``.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    MarketplaceError (base)
    |
    +-- AccessError
    |   +-- UnauthorizedError
    |   +-- EmergencyStoppedError
    |   +-- NotStoppedError
    |   +-- OwnerAlreadySetError
    |
    +-- NotFoundError
    |   +-- ProjectNotFoundError
    |   +-- BidNotFoundError
    |
    +-- ProjectError
    |   +-- ProjectNotActiveError
    |
    +-- EscrowError
    |   +-- InsufficientFundsError
    |   +-- EscrowOverflowError
    |
    +-- MilestoneError
    |   +-- InvalidMilestoneIndexError
    |
    +-- ConcurrencyError
    |   +-- ReentrantCallError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- AuditError
        +-- AuditChainBrokenError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                     | When Raised
-------------|--------------------------|--------------------------------------
Access       | UNAUTHORIZED             | Caller does not hold the required role
             | EMERGENCY_STOPPED        | Gate closed by the system owner
             | NOT_STOPPED              | "Only when stopped" gate while running
             | OWNER_ALREADY_SET        | Store already initialized by another owner
-------------|--------------------------|--------------------------------------
Lookup       | PROJECT_NOT_FOUND        | Project id was never assigned
             | BID_NOT_FOUND            | Bid id was never assigned
-------------|--------------------------|--------------------------------------
Project      | PROJECT_NOT_ACTIVE       | Project already has an accepted bid
-------------|--------------------------|--------------------------------------
Escrow       | INSUFFICIENT_FUNDS       | Escrowed value != declared bid amount
             | ESCROW_OVERFLOW          | Pooled balance would leave integer range
-------------|--------------------------|--------------------------------------
Milestone    | INVALID_MILESTONE_INDEX  | Index outside [0, 365)
-------------|--------------------------|--------------------------------------
Concurrency  | REENTRANT_CALL           | Nested call while an operation runs
-------------|--------------------------|--------------------------------------
Integrity    | IMMUTABILITY_VIOLATION   | Update/delete of a frozen record
             | AUDIT_CHAIN_BROKEN       | Notification hash chain mismatch

===============================================================================
"""


class MarketplaceError(Exception):
    """
    Base exception for all marketplace kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "MARKETPLACE_ERROR"

    @property
    def reason(self) -> str:
        """Human-readable failure reason (the exception message)."""
        return str(self)


# Access-control exceptions


class AccessError(MarketplaceError):
    """Base exception for access-control and gate errors."""

    code: str = "ACCESS_ERROR"


class UnauthorizedError(AccessError):
    """Caller identity does not match the role the operation requires."""

    code: str = "UNAUTHORIZED"

    def __init__(self, caller: str, required_role: str, operation: str):
        self.caller = caller
        self.required_role = required_role
        self.operation = operation
        super().__init__(
            f"Caller {caller} is not the {required_role} required for {operation}"
        )


class EmergencyStoppedError(AccessError):
    """The emergency stop is engaged; mutating operations are refused."""

    code: str = "EMERGENCY_STOPPED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Emergency stop is active: {operation} refused")


class NotStoppedError(AccessError):
    """An operation restricted to the stopped state was called while running."""

    code: str = "NOT_STOPPED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} is only allowed while stopped")


class OwnerAlreadySetError(AccessError):
    """The store was already initialized with a different system owner."""

    code: str = "OWNER_ALREADY_SET"

    def __init__(self, existing_owner: str, requested_owner: str):
        self.existing_owner = existing_owner
        self.requested_owner = requested_owner
        super().__init__(
            f"System owner already set to {existing_owner}, "
            f"cannot initialize as {requested_owner}"
        )


# Lookup exceptions


class NotFoundError(MarketplaceError):
    """Referenced id was never assigned."""

    code: str = "NOT_FOUND"


class ProjectNotFoundError(NotFoundError):
    """Project with given id does not exist."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: int):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class BidNotFoundError(NotFoundError):
    """Bid with given id does not exist."""

    code: str = "BID_NOT_FOUND"

    def __init__(self, bid_id: int):
        self.bid_id = bid_id
        super().__init__(f"Bid not found: {bid_id}")


# Project lifecycle exceptions


class ProjectError(MarketplaceError):
    """Base exception for project lifecycle errors."""

    code: str = "PROJECT_ERROR"


class ProjectNotActiveError(ProjectError):
    """Project is no longer accepting bids (a bid was already accepted)."""

    code: str = "PROJECT_NOT_ACTIVE"

    def __init__(self, project_id: int):
        self.project_id = project_id
        super().__init__(f"Project {project_id} is not active")


# Escrow exceptions


class EscrowError(MarketplaceError):
    """Base exception for escrow and custody errors."""

    code: str = "ESCROW_ERROR"


class InsufficientFundsError(EscrowError):
    """Escrowed value does not exactly match the declared bid amount."""

    code: str = "INSUFFICIENT_FUNDS"

    def __init__(self, bid_amount: int, escrowed_value: int):
        self.bid_amount = bid_amount
        self.escrowed_value = escrowed_value
        super().__init__(
            f"Escrowed value {escrowed_value} does not match bid amount {bid_amount}"
        )


class EscrowOverflowError(EscrowError):
    """Deposit would push the pooled balance past the storable range."""

    code: str = "ESCROW_OVERFLOW"

    def __init__(self, balance: int, deposit: int, limit: int):
        self.balance = balance
        self.deposit = deposit
        self.limit = limit
        super().__init__(
            f"Deposit {deposit} on balance {balance} exceeds limit {limit}"
        )


# Milestone exceptions


class MilestoneError(MarketplaceError):
    """Base exception for milestone errors."""

    code: str = "MILESTONE_ERROR"


class InvalidMilestoneIndexError(MilestoneError):
    """Milestone index outside the fixed day-of-year range."""

    code: str = "INVALID_MILESTONE_INDEX"

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Milestone index {index} outside [0, {size})")


# Concurrency exceptions


class ConcurrencyError(MarketplaceError):
    """Base exception for concurrency errors."""

    code: str = "CONCURRENCY_ERROR"


class ReentrantCallError(ConcurrencyError):
    """A marketplace operation was invoked while another one is in flight on the same thread."""

    code: str = "REENTRANT_CALL"

    def __init__(self, operation: str, active_operation: str):
        self.operation = operation
        self.active_operation = active_operation
        super().__init__(
            f"Re-entrant call to {operation} during {active_operation}"
        )


# Immutability exceptions


class ImmutabilityError(MarketplaceError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete a record that is frozen."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.violation = reason
        super().__init__(
            f"Cannot modify immutable {entity_type} {entity_id}: {reason}"
        )


# Audit exceptions


class AuditError(MarketplaceError):
    """Base exception for audit log errors."""

    code: str = "AUDIT_ERROR"


class AuditChainBrokenError(AuditError):
    """Notification hash chain validation failed."""

    code: str = "AUDIT_CHAIN_BROKEN"

    def __init__(self, seq: int, expected_hash: str, actual_hash: str):
        self.seq = seq
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Audit chain broken at notification {seq}: "
            f"expected {expected_hash}, got {actual_hash}"
        )
