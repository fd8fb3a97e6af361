"""
ProjectRegistry -- creation and lookup of Project records.

Responsibility:
    Allocates project ids, stores new projects with a cleared milestone set,
    and loads projects for the services that mutate them.

Architecture position:
    Kernel > Services -- imperative shell.
    Read-only views of projects live in selectors/marketplace_selector.py.

Invariants enforced:
    - New id == prior value of the project counter; the counter then
      increases by exactly 1.
    - New projects are active, owned by the caller, with every milestone
      flag cleared.
    - Name, description and price are stored verbatim (no emptiness or
      bounds check beyond the storable amount range).

Failure modes:
    - EmergencyStoppedError: gate closed.
    - ProjectNotFoundError: ``require_project`` on an unassigned id.
    - ValueError: price is not a storable unsigned amount.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace_kernel.db.types import validate_amount
from marketplace_kernel.domain.clock import Clock, SystemClock
from marketplace_kernel.domain.milestones import MilestoneFlags
from marketplace_kernel.exceptions import ProjectNotFoundError
from marketplace_kernel.logging_config import get_logger
from marketplace_kernel.models.project import Project
from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.base import BaseService
from marketplace_kernel.services.notification_log import NotificationLog
from marketplace_kernel.services.sequence_service import SequenceService

logger = get_logger("services.project_registry")


class ProjectRegistry(BaseService):
    """Create/store Project records."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        clock = clock or SystemClock()
        self._access = AccessController(session)
        self._sequence_service = SequenceService(session)
        self._notifications = NotificationLog(session, clock)

    def create_project(
        self,
        name: str,
        description: str,
        price: int,
        caller: str,
    ) -> int:
        """
        Publish a new project owned by ``caller``.

        Args:
            name: Project name, stored verbatim.
            description: Project description, stored verbatim.
            price: Advertised price; informational only.
            caller: Identity of the creator.

        Returns:
            The new project id.

        Raises:
            EmergencyStoppedError: If the gate is closed.
        """
        self._access.require_running("create_project")
        validate_amount(price, "price")

        project_id = self._sequence_service.allocate(SequenceService.PROJECT)
        project = Project(
            id=project_id,
            name=name,
            description=description,
            is_active=True,
            price=price,
            owner=caller,
            milestones=MilestoneFlags.empty(),
        )
        self.session.add(project)
        self.session.flush()

        self._notifications.new_project(project_id, name, caller)

        logger.info(
            "project_created",
            extra={"project_id": project_id, "price": price, "owner": caller},
        )
        return project_id

    def find_project(self, project_id: int) -> Project | None:
        return self.session.execute(
            select(Project).where(Project.id == project_id).with_for_update()
        ).scalar_one_or_none()

    def require_project(self, project_id: int) -> Project:
        """
        Load a project for mutation.

        Raises:
            ProjectNotFoundError: If the id was never assigned.
        """
        project = self.find_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project
