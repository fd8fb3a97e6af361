"""
ORM immutability tests.

Verifies the listeners in db/immutability.py:
- Bids and notifications can never be updated or deleted
- Projects can never be deleted
- Project name, description and price are fixed at creation
- An inactive project cannot be reactivated
- Lifecycle fields (is_active, owner, milestones) may move forward
"""

import pytest
from sqlalchemy import select

from marketplace_kernel.exceptions import ImmutabilityViolationError
from marketplace_kernel.models.bid import Bid
from marketplace_kernel.models.notification import Notification
from marketplace_kernel.models.project import Project
from marketplace_kernel.services.bid_acceptance import BidAcceptanceWorkflow
from marketplace_kernel.services.bid_ledger import BidLedger
from marketplace_kernel.services.project_registry import ProjectRegistry


@pytest.fixture
def seeded(session, deterministic_clock, alice, bob):
    project_id = ProjectRegistry(session, deterministic_clock).create_project(
        "Bridge", "Steel span", 100, alice
    )
    bid_id = BidLedger(session, deterministic_clock).place_bid(project_id, 50, 50, bob)
    session.flush()
    return project_id, bid_id


class TestBidImmutability:

    def test_update_blocked(self, session, seeded):
        _, bid_id = seeded
        bid = session.get(Bid, bid_id)
        bid.amount = 1
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "Bid"

    def test_delete_blocked(self, session, seeded):
        _, bid_id = seeded
        session.delete(session.get(Bid, bid_id))
        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestNotificationImmutability:

    def test_update_blocked(self, session, seeded):
        notification = session.execute(select(Notification).limit(1)).scalar_one()
        notification.actor = "0xforged"
        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_delete_blocked(self, session, seeded):
        notification = session.execute(select(Notification).limit(1)).scalar_one()
        session.delete(notification)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestProjectImmutability:

    @pytest.mark.parametrize(
        "field, value",
        [("name", "Renamed"), ("description", "Changed"), ("price", 1)],
    )
    def test_frozen_fields(self, session, seeded, field, value):
        project_id, _ = seeded
        project = session.get(Project, project_id)
        setattr(project, field, value)
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert field in exc_info.value.violation

    def test_delete_blocked(self, session, seeded):
        project_id, _ = seeded
        session.delete(session.get(Project, project_id))
        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_reactivation_blocked(self, session, deterministic_clock, seeded, alice):
        project_id, bid_id = seeded
        BidAcceptanceWorkflow(session, deterministic_clock).accept_bid(bid_id, alice)

        project = session.get(Project, project_id)
        project.is_active = True
        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_lifecycle_fields_may_change(self, session, seeded, carol):
        project_id, _ = seeded
        project = session.get(Project, project_id)
        project.owner = carol
        project.milestones = project.milestones.mark(0)
        project.is_active = False
        session.flush()
        assert session.get(Project, project_id).milestones.is_reached(0)

    def test_same_value_is_not_a_change(self, session, seeded):
        project_id, _ = seeded
        project = session.get(Project, project_id)
        project.name = "Bridge"
        session.flush()
