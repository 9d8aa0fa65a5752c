# File: pmtool/services/project_service.py

from typing import List, Optional, Dict, Any
import logging

from sqlalchemy.orm import Session

from pmtool import schemas
from pmtool.core.config import settings
from pmtool.core.events import ProjectCreated, ProjectUpdated, ProjectDeleted
from pmtool.core.exceptions import ForbiddenException, ProjectNotFoundException
from pmtool.db.models.project import Project
from pmtool.repositories.project_repository import ProjectRepository
from pmtool.services.base_service import BaseService

logger = logging.getLogger(__name__)

USER_PROJECTS_KEY = "projects:user:{user_id}"
PROJECT_KEY = "project:{project_id}"


def _serialize(project: Project) -> Dict[str, Any]:
    return schemas.Project.model_validate(project).model_dump()


class ProjectService(BaseService[Project]):
    """
    Service for managing projects.

    Reads are served from the cache as plain dicts; every mutation drops the
    affected entries. Users see the projects they own and the projects that
    contain tasks assigned to them; only the owner may change or delete one.
    """

    repository: ProjectRepository

    def __init__(
        self,
        session: Session,
        repository: Optional[ProjectRepository] = None,
        event_bus=None,
        cache_service=None,
    ):
        super().__init__(
            session,
            repository=repository or ProjectRepository(session),
            event_bus=event_bus,
            cache_service=cache_service,
        )

    def create_project(self, data: Dict[str, Any], owner_id: str) -> Project:
        """
        Create a new project owned by the given user.

        Args:
            data: Project data (name, description)
            owner_id: ID of the creating user

        Returns:
            Created project entity
        """
        with self.transaction():
            project = self.repository.create({**data, "owner_id": owner_id})

        self._invalidate_user_lists()
        self._log_operation("create", "Project", project.id, user_id=owner_id)
        self._publish(ProjectCreated(project_id=project.id, name=project.name, owner_id=owner_id))
        return project

    def list_projects(self, user_id: str) -> List[Dict[str, Any]]:
        """Projects visible to the user, cached per user."""
        key = USER_PROJECTS_KEY.format(user_id=user_id)
        return self._cached(
            key, lambda: [_serialize(p) for p in self.repository.list_for_user(user_id)]
        )

    def search_projects(self, user_id: str, query: str) -> List[Dict[str, Any]]:
        return [_serialize(p) for p in self.repository.search_for_user(user_id, query)]

    def get_project(self, project_id: str, user_id: str) -> Dict[str, Any]:
        """
        Get a project the user may see.

        Raises:
            ProjectNotFoundException: If the project does not exist
            ForbiddenException: If the user neither owns it nor has a task in it
        """
        key = PROJECT_KEY.format(project_id=project_id)
        project = self._cached(key, lambda: self._load(project_id))
        if project is None:
            raise ProjectNotFoundException(project_id)
        if project["owner_id"] != user_id and not self.repository.user_has_access(project_id, user_id):
            raise ForbiddenException("Project", project_id)
        return project

    def update_project(self, project_id: str, data: Dict[str, Any], user_id: str) -> Project:
        """
        Update a project. Only the owner may do so.

        Raises:
            ProjectNotFoundException: If the project does not exist
            ForbiddenException: If the user is not the owner
        """
        project = self._get_owned(project_id, user_id)
        changes = {k: v for k, v in data.items() if getattr(project, k, None) != v}

        with self.transaction():
            project = self.repository.update(project_id, data)

        self._invalidate_project(project_id)
        self._log_operation("update", "Project", project_id, user_id=user_id, details=changes)
        self._publish(ProjectUpdated(project_id=project_id, changes=changes))
        return project

    def delete_project(self, project_id: str, user_id: str) -> None:
        """
        Delete a project with its tasks. Only the owner may do so.
        """
        self._get_owned(project_id, user_id)

        with self.transaction():
            self.repository.delete(project_id)

        self._invalidate_project(project_id)
        self._log_operation("delete", "Project", project_id, user_id=user_id)
        self._publish(ProjectDeleted(project_id=project_id))

    def ensure_exists(self, project_id: str) -> Project:
        project = self.repository.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundException(project_id)
        return project

    def check_member(self, project_id: str, user_id: str) -> None:
        """
        Refuse users who neither own the project nor have a task in it.

        Unknown projects pass, so callers keep their own not-found handling.

        Raises:
            ForbiddenException: If the project exists and the user is not a member
        """
        project = self.repository.get_by_id(project_id)
        if project is None or project.owner_id == user_id:
            return
        if not self.repository.user_has_access(project_id, user_id):
            raise ForbiddenException("Project", project_id)

    def _get_owned(self, project_id: str, user_id: str) -> Project:
        project = self.ensure_exists(project_id)
        if project.owner_id != user_id:
            raise ForbiddenException(
                "Project", project_id, message="Only the project owner can modify this project"
            )
        return project

    def _load(self, project_id: str) -> Optional[Dict[str, Any]]:
        project = self.repository.get_by_id(project_id)
        return _serialize(project) if project else None

    def _cached(self, key: str, getter):
        if not self.cache_service:
            return getter()
        return self.cache_service.get_or_set(key, getter, ttl=settings.CACHE_TTL_SECONDS)

    def _invalidate_project(self, project_id: str) -> None:
        if self.cache_service:
            self.cache_service.invalidate(PROJECT_KEY.format(project_id=project_id))
        self._invalidate_user_lists()

    def _invalidate_user_lists(self) -> None:
        # Membership depends on task assignment, so every user's list may change
        if self.cache_service:
            self.cache_service.invalidate_pattern("projects:user:")
