"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable records returned across the kernel boundary:
    ProjectInfo, BidInfo, NotificationRecord and MarketplaceStatus.  Callers
    never receive ORM entities.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods are boundary converters invoked only from
    services and selectors.

Invariants enforced:
    - Zero-value reads: ``ProjectInfo.empty()`` and ``BidInfo.empty()`` are
      the all-default records returned for ids that were never assigned.
      They carry ``exists=False`` so callers can tell them apart.

Failure modes:
    (none -- construction only)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from marketplace_kernel.domain.milestones import MilestoneFlags

if TYPE_CHECKING:
    from marketplace_kernel.models.bid import Bid as BidModel
    from marketplace_kernel.models.notification import (
        Notification as NotificationModel,
    )
    from marketplace_kernel.models.project import Project as ProjectModel

# Owner/bidder of every zero-value record
ZERO_IDENTITY = "0x" + "0" * 40


class NotificationKind(str, Enum):
    """Kinds of externally observable state transitions."""

    NEW_PROJECT = "NewProject"
    NEW_BID = "NewBid"
    BID_ACCEPTED = "BidAccepted"
    MILESTONE_REACHED = "MilestoneReached"
    PROJECT_COMPLETED = "ProjectCompleted"


@dataclass(frozen=True)
class ProjectInfo:
    """Read-only view of a Project row."""

    id: int
    name: str
    description: str
    is_active: bool
    price: int
    owner: str
    milestones: MilestoneFlags
    exists: bool = True

    @classmethod
    def empty(cls) -> ProjectInfo:
        return cls(
            id=0,
            name="",
            description="",
            is_active=False,
            price=0,
            owner=ZERO_IDENTITY,
            milestones=MilestoneFlags.empty(),
            exists=False,
        )

    @classmethod
    def from_model(cls, model: ProjectModel) -> ProjectInfo:
        return cls(
            id=model.id,
            name=model.name,
            description=model.description,
            is_active=model.is_active,
            price=model.price,
            owner=model.owner,
            milestones=model.milestones,
        )


@dataclass(frozen=True)
class BidInfo:
    """Read-only view of a Bid row."""

    id: int
    project_id: int
    timestamp: int
    amount: int
    bidder: str
    exists: bool = True

    @property
    def placed_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)

    @classmethod
    def empty(cls) -> BidInfo:
        return cls(
            id=0,
            project_id=0,
            timestamp=0,
            amount=0,
            bidder=ZERO_IDENTITY,
            exists=False,
        )

    @classmethod
    def from_model(cls, model: BidModel) -> BidInfo:
        return cls(
            id=model.id,
            project_id=model.project_id,
            timestamp=model.timestamp,
            amount=model.amount,
            bidder=model.bidder,
        )


@dataclass(frozen=True)
class NotificationRecord:
    """One entry of the append-only notification log."""

    seq: int
    kind: NotificationKind
    project_id: int
    actor: str
    occurred_at: int
    hash: str
    bid_id: int | None = None
    milestone_index: int | None = None
    amount: int | None = None
    name: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_model(cls, model: NotificationModel) -> NotificationRecord:
        return cls(
            seq=model.seq,
            kind=NotificationKind(model.kind),
            project_id=model.project_id,
            actor=model.actor,
            occurred_at=model.occurred_at,
            hash=model.hash,
            bid_id=model.bid_id,
            milestone_index=model.milestone_index,
            amount=model.amount,
            name=model.name,
            payload=MappingProxyType(dict(model.payload or {})),
        )


@dataclass(frozen=True)
class MarketplaceStatus:
    """Snapshot of system-wide state."""

    owner: str
    stopped: bool
    pooled_balance: int
    next_project_id: int
    next_bid_id: int
