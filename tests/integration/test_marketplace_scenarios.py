"""
End-to-end marketplace scenarios through the Marketplace facade.

Each scenario commits real transactions against a fresh in-memory store and
checks both the returned values and the committed state afterwards.
"""

import pytest

from marketplace_kernel.exceptions import (
    BidNotFoundError,
    EmergencyStoppedError,
    InsufficientFundsError,
    InvalidMilestoneIndexError,
    ProjectNotActiveError,
    UnauthorizedError,
)

pytestmark = pytest.mark.scenario


class TestEmergencyStop:

    def test_stop_blocks_then_resume_allows(self, marketplace, system_owner, alice):
        assert marketplace.toggle_active(system_owner) is True

        with pytest.raises(EmergencyStoppedError):
            marketplace.create_project("Bridge", "Steel span", 100, caller=alice)

        assert marketplace.toggle_active(system_owner) is False
        assert marketplace.create_project("Bridge", "Steel span", 100, caller=alice) == 0

    def test_every_gated_operation_blocked(self, marketplace, system_owner, alice, bob):
        project_id = marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        bid_id = marketplace.place_bid(project_id, 5, 5, caller=bob)
        marketplace.toggle_active(system_owner)

        with pytest.raises(EmergencyStoppedError):
            marketplace.place_bid(project_id, 5, 5, caller=bob)
        with pytest.raises(EmergencyStoppedError):
            marketplace.accept_bid(bid_id, caller=alice)
        with pytest.raises(EmergencyStoppedError):
            marketplace.mark_milestone(project_id, 0, caller=alice)
        with pytest.raises(EmergencyStoppedError):
            marketplace.complete_project(project_id, caller=alice)

    def test_withdraw_while_stopped(self, marketplace, wallet, system_owner, alice, bob):
        project_id = marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        marketplace.place_bid(project_id, 30, 30, caller=bob)
        marketplace.toggle_active(system_owner)

        assert marketplace.withdraw(system_owner) == 30
        assert wallet.holdings_of(system_owner) == 30

    def test_only_owner_toggles(self, marketplace, alice):
        with pytest.raises(UnauthorizedError):
            marketplace.toggle_active(alice)
        assert marketplace.status().stopped is False


class TestBidAcceptanceScenario:

    def test_accept_transfers_and_closes(self, marketplace, alice, bob, carol):
        project_id = marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        assert project_id == 0

        bid_id = marketplace.place_bid(project_id, 50, 50, caller=bob)
        assert bid_id == 0
        assert marketplace.status().pooled_balance == 50

        accepted = marketplace.accept_bid(bid_id, caller=alice)
        assert accepted.owner == bob
        assert accepted.is_active is False

        with pytest.raises(ProjectNotActiveError):
            marketplace.place_bid(project_id, 10, 10, caller=carol)

        stored = marketplace.get_project(project_id)
        assert stored == accepted
        assert marketplace.status().pooled_balance == 50
        assert marketplace.status().next_bid_id == 1

    def test_phantom_bid_rejected(self, marketplace, alice):
        marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        with pytest.raises(BidNotFoundError):
            marketplace.accept_bid(0, caller=alice)
        assert marketplace.get_project(0).is_active is True
        assert marketplace.get_project(0).owner == alice


class TestEscrowExactness:

    @pytest.mark.parametrize("escrowed", [49, 51])
    def test_off_by_one_rejected_without_side_effects(self, marketplace, alice, bob, escrowed):
        project_id = marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        before = marketplace.status()

        with pytest.raises(InsufficientFundsError):
            marketplace.place_bid(project_id, 50, escrowed, caller=bob)

        assert marketplace.status() == before
        assert marketplace.bids_for_project(project_id) == []
        assert marketplace.get_bid(0).exists is False


class TestMilestoneScenario:

    def test_new_owner_tracks_progress(self, marketplace, alice, bob):
        project_id = marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        marketplace.accept_bid(marketplace.place_bid(project_id, 50, 50, caller=bob), caller=alice)

        marketplace.mark_milestone(project_id, 364, caller=bob)
        marketplace.mark_milestone(project_id, 364, caller=bob)
        with pytest.raises(InvalidMilestoneIndexError):
            marketplace.mark_milestone(project_id, 365, caller=bob)
        marketplace.complete_project(project_id, caller=bob)

        flags = marketplace.get_project(project_id).milestones
        assert flags.reached_indices() == (364,)


class TestWithdrawScenario:

    def test_non_owner_leaves_balance(self, marketplace, wallet, alice, bob):
        project_id = marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        marketplace.place_bid(project_id, 80, 80, caller=bob)

        with pytest.raises(UnauthorizedError):
            marketplace.withdraw(alice)
        assert marketplace.status().pooled_balance == 80
        assert wallet.holdings_of(alice) == 0

    def test_owner_receives_pool(self, marketplace, wallet, system_owner, alice, bob, carol):
        first = marketplace.create_project("A", "a", 100, caller=alice)
        second = marketplace.create_project("B", "b", 100, caller=alice)
        marketplace.place_bid(first, 20, 20, caller=bob)
        marketplace.place_bid(second, 35, 35, caller=carol)

        assert marketplace.withdraw(system_owner) == 55
        assert marketplace.status().pooled_balance == 0
        assert wallet.holdings_of(system_owner) == 55

    def test_failed_transfer_rolls_back(self, session_factory, deterministic_clock, system_owner, alice, bob):
        from marketplace_kernel.domain.payout import PayoutGateway
        from marketplace_kernel.marketplace import Marketplace

        class BrokenGateway(PayoutGateway):
            def transfer(self, recipient, amount):
                raise ConnectionError("payout rail down")

        market = Marketplace(
            owner=system_owner,
            clock=deterministic_clock,
            payout=BrokenGateway(),
            session_factory=session_factory,
        )
        project_id = market.create_project("A", "a", 100, caller=alice)
        market.place_bid(project_id, 20, 20, caller=bob)

        with pytest.raises(ConnectionError):
            market.withdraw(system_owner)
        assert market.status().pooled_balance == 20


class TestReopenStore:

    def test_same_owner_reopens(self, marketplace, session_factory, deterministic_clock, wallet, system_owner, alice):
        from marketplace_kernel.marketplace import Marketplace

        marketplace.create_project("A", "a", 1, caller=alice)
        reopened = Marketplace(
            owner=system_owner,
            clock=deterministic_clock,
            payout=wallet,
            session_factory=session_factory,
        )
        assert reopened.get_project(0).name == "A"
        assert reopened.create_project("B", "b", 1, caller=alice) == 1

    def test_different_owner_rejected(self, marketplace, session_factory, alice):
        from marketplace_kernel.exceptions import OwnerAlreadySetError
        from marketplace_kernel.marketplace import Marketplace

        with pytest.raises(OwnerAlreadySetError):
            Marketplace(owner=alice, session_factory=session_factory)


class TestRejectionLogging:

    def test_rejection_logged_with_code(self, marketplace, captured_logs, alice):
        with pytest.raises(UnauthorizedError):
            marketplace.withdraw(alice)

        rejected = [r for r in captured_logs() if r["message"] == "operation_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["code"] == "UNAUTHORIZED"
        assert rejected[0]["operation"] == "withdraw"
        assert rejected[0]["actor_id"] == alice
        assert rejected[0]["level"] == "WARNING"

    def test_success_logged_with_context(self, marketplace, captured_logs, alice, bob):
        project_id = marketplace.create_project("Bridge", "Steel span", 100, caller=alice)
        marketplace.place_bid(project_id, 5, 5, caller=bob)

        placed = [r for r in captured_logs() if r["message"] == "bid_placed"]
        assert len(placed) == 1
        assert placed[0]["operation"] == "place_bid"
        assert placed[0]["project_id"] == str(project_id)
        assert "correlation_id" in placed[0]
