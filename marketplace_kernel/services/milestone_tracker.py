"""
MilestoneTracker -- per-day progress flags and completion notices.

Responsibility:
    Lets the current project owner set milestone flags and announce
    completion.

Architecture position:
    Kernel > Services -- imperative shell.
    Flags are an immutable MilestoneFlags value; marking replaces the
    column value with a new one.

Invariants enforced:
    - Checks in order: gate, project exists, caller is current owner,
      index within [0, MILESTONE_COUNT).
    - Marking is idempotent and emits on every successful call.
    - Completion changes no stored state.

Failure modes:
    - EmergencyStoppedError, ProjectNotFoundError, UnauthorizedError,
      InvalidMilestoneIndexError.
"""

from sqlalchemy.orm import Session

from marketplace_kernel.domain.clock import Clock, SystemClock
from marketplace_kernel.domain.milestones import MilestoneFlags
from marketplace_kernel.exceptions import UnauthorizedError
from marketplace_kernel.logging_config import get_logger
from marketplace_kernel.models.project import Project
from marketplace_kernel.services.access_controller import PROJECT_OWNER_ROLE, AccessController
from marketplace_kernel.services.base import BaseService
from marketplace_kernel.services.notification_log import NotificationLog
from marketplace_kernel.services.project_registry import ProjectRegistry

logger = get_logger("services.milestone_tracker")


class MilestoneTracker(BaseService):
    """Milestone marking and completion for project owners."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        clock = clock or SystemClock()
        self._access = AccessController(session)
        self._registry = ProjectRegistry(session, clock)
        self._notifications = NotificationLog(session, clock)

    def _owned_project(self, project_id: int, caller: str, operation: str) -> Project:
        self._access.require_running(operation)
        project = self._registry.require_project(project_id)
        if caller != project.owner:
            raise UnauthorizedError(caller, PROJECT_OWNER_ROLE, operation)
        return project

    def mark_milestone(self, project_id: int, index: int, caller: str) -> None:
        """
        Set ``milestones[index]`` on a project the caller owns.

        Raises:
            InvalidMilestoneIndexError: index outside [0, MILESTONE_COUNT).
        """
        project = self._owned_project(project_id, caller, "mark_milestone")
        MilestoneFlags.validate_index(index)

        project.milestones = project.milestones.mark(index)
        self.session.flush()

        self._notifications.milestone_reached(project_id, index, caller)

        logger.info(
            "milestone_marked",
            extra={
                "project_id": project_id,
                "milestone_index": index,
                "reached_count": project.milestones.reached_count,
            },
        )

    def complete_project(self, project_id: int, caller: str) -> None:
        """Announce completion. No stored state changes."""
        self._owned_project(project_id, caller, "complete_project")

        self._notifications.project_completed(project_id, caller)

        logger.info("project_completed", extra={"project_id": project_id})
