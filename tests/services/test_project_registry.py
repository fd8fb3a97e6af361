"""
Tests for ProjectRegistry.create_project and project lookup.
"""

import pytest

from marketplace_kernel.db.types import MAX_AMOUNT
from marketplace_kernel.exceptions import EmergencyStoppedError, ProjectNotFoundError
from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.project_registry import ProjectRegistry
from marketplace_kernel.services.sequence_service import SequenceService


class TestCreateProject:

    def test_first_id_is_zero(self, session, deterministic_clock, alice):
        registry = ProjectRegistry(session, deterministic_clock)
        assert registry.create_project("Bridge", "Steel span", 100, alice) == 0
        assert registry.create_project("Tunnel", "Bore", 200, alice) == 1

    def test_counter_advances_by_one(self, session, deterministic_clock, alice):
        sequences = SequenceService(session)
        before = sequences.peek(SequenceService.PROJECT)
        project_id = ProjectRegistry(session, deterministic_clock).create_project(
            "Bridge", "Steel span", 100, alice
        )
        assert project_id == before
        assert sequences.peek(SequenceService.PROJECT) == before + 1

    def test_stored_fields(self, session, deterministic_clock, alice):
        registry = ProjectRegistry(session, deterministic_clock)
        project_id = registry.create_project("Bridge", "Steel span", 100, alice)
        project = registry.require_project(project_id)
        assert project.name == "Bridge"
        assert project.description == "Steel span"
        assert project.price == 100
        assert project.owner == alice
        assert project.is_active is True
        assert project.milestones.reached_count == 0

    def test_empty_text_stored_verbatim(self, session, deterministic_clock, alice):
        registry = ProjectRegistry(session, deterministic_clock)
        project = registry.require_project(registry.create_project("", "", 0, alice))
        assert project.name == ""
        assert project.description == ""

    def test_max_price_accepted(self, session, deterministic_clock, alice):
        registry = ProjectRegistry(session, deterministic_clock)
        project = registry.require_project(
            registry.create_project("Big", "Job", MAX_AMOUNT, alice)
        )
        assert project.price == MAX_AMOUNT

    def test_negative_price_rejected(self, session, deterministic_clock, alice):
        with pytest.raises(ValueError):
            ProjectRegistry(session, deterministic_clock).create_project("x", "y", -1, alice)

    def test_stopped_rejects(self, session, deterministic_clock, system_owner, alice):
        AccessController(session).toggle_active(system_owner)
        with pytest.raises(EmergencyStoppedError):
            ProjectRegistry(session, deterministic_clock).create_project("x", "y", 1, alice)
        assert SequenceService(session).peek(SequenceService.PROJECT) == 0

    def test_stopped_rejects_before_price_range(
        self, session, deterministic_clock, system_owner, alice
    ):
        AccessController(session).toggle_active(system_owner)
        with pytest.raises(EmergencyStoppedError):
            ProjectRegistry(session, deterministic_clock).create_project("x", "y", -1, alice)


class TestRequireProject:

    def test_missing_project(self, session, deterministic_clock):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            ProjectRegistry(session, deterministic_clock).require_project(42)
        assert exc_info.value.project_id == 42

    def test_find_missing_returns_none(self, session, deterministic_clock):
        assert ProjectRegistry(session, deterministic_clock).find_project(42) is None
