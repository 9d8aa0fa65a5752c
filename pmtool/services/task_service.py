# File: pmtool/services/task_service.py

from typing import List, Optional, Dict, Any
import logging

from sqlalchemy.orm import Session

from pmtool.core.events import TaskCreated, TaskUpdated, TaskDeleted
from pmtool.core.exceptions import (
    ProjectNotFoundException,
    TaskNotFoundException,
    UserNotFoundException,
)
from pmtool.db.models.task import Task
from pmtool.repositories.project_repository import ProjectRepository
from pmtool.repositories.task_repository import TaskRepository
from pmtool.repositories.user_repository import UserRepository
from pmtool.services.base_service import BaseService
from pmtool.services.notification_service import NotificationService
from pmtool.services.task_dependency_service import TaskDependencyService

logger = logging.getLogger(__name__)


class TaskService(BaseService[Task]):
    """
    Service for managing tasks.

    Creating a task may also record its prerequisites; assigning a task to a
    user notifies that user.
    """

    repository: TaskRepository

    def __init__(
        self,
        session: Session,
        repository: Optional[TaskRepository] = None,
        dependency_service: Optional[TaskDependencyService] = None,
        notification_service: Optional[NotificationService] = None,
        event_bus=None,
        cache_service=None,
    ):
        super().__init__(
            session,
            repository=repository or TaskRepository(session),
            event_bus=event_bus,
            cache_service=cache_service,
        )
        self.project_repository = ProjectRepository(session)
        self.user_repository = UserRepository(session)
        self.dependency_service = dependency_service or TaskDependencyService(
            session, task_repository=self.repository, event_bus=event_bus
        )
        self.notification_service = notification_service or NotificationService(session)

    def list_tasks(self, project_id: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Task]:
        """List tasks, optionally restricted to one project."""
        if project_id:
            return self.repository.list(skip=skip, limit=limit, project_id=project_id)
        return self.repository.list(skip=skip, limit=limit)

    def search_tasks(self, query: str, limit: int = 100) -> List[Task]:
        return self.repository.search(query, ["title", "description"], limit=limit)

    def get_task(self, task_id: str) -> Task:
        """
        Get a task by ID.

        Raises:
            TaskNotFoundException: If the task does not exist
        """
        task = self.repository.find_task_by_id(task_id)
        if task is None:
            raise TaskNotFoundException(task_id)
        return task

    def create_task(self, data: Dict[str, Any], user_id: Optional[str] = None) -> Task:
        """
        Create a task, record its prerequisites and notify the assignee.

        Args:
            data: Task fields plus optional depends_on_ids
            user_id: Acting user, for the audit log

        Returns:
            Created task entity

        Raises:
            ProjectNotFoundException: If the project does not exist
            UserNotFoundException: If the assignee does not exist
        """
        data = dict(data)
        depends_on_ids = data.pop("depends_on_ids", None) or []

        if self.project_repository.get_by_id(data["project_id"]) is None:
            raise ProjectNotFoundException(data["project_id"])
        assignee_id = data.get("assigned_to_id")
        if assignee_id and self.user_repository.get_by_id(assignee_id) is None:
            raise UserNotFoundException(assignee_id)

        with self.transaction():
            task = self.repository.create(data)

        if depends_on_ids:
            self.dependency_service.add_dependencies(task.id, depends_on_ids)

        if task.assigned_to_id:
            self._notify_assignee(task)

        self._invalidate_projects()
        self._log_operation(
            "create", "Task", task.id, user_id=user_id,
            details={"project_id": task.project_id, "prerequisites": len(depends_on_ids)},
        )
        self._publish(
            TaskCreated(
                task_id=task.id,
                project_id=task.project_id,
                title=task.title,
                assigned_to_id=task.assigned_to_id,
            )
        )
        return task

    def update_task(self, task_id: str, data: Dict[str, Any], user_id: Optional[str] = None) -> Task:
        """
        Update a task. A change of assignee notifies the new assignee.

        Raises:
            TaskNotFoundException: If the task does not exist
            UserNotFoundException: If the new assignee does not exist
        """
        task = self.get_task(task_id)
        previous_assignee = task.assigned_to_id

        new_assignee = data.get("assigned_to_id")
        if new_assignee and self.user_repository.get_by_id(new_assignee) is None:
            raise UserNotFoundException(new_assignee)

        changes = {
            k: str(v) if v is not None else None
            for k, v in data.items()
            if getattr(task, k, None) != v
        }

        with self.transaction():
            task = self.repository.update(task_id, data)

        if task.assigned_to_id and task.assigned_to_id != previous_assignee:
            self._notify_assignee(task)

        self._invalidate_projects()
        self._log_operation("update", "Task", task_id, user_id=user_id, details=changes)
        self._publish(TaskUpdated(task_id=task_id, project_id=task.project_id, changes=changes))
        return task

    def delete_task(self, task_id: str, user_id: Optional[str] = None) -> None:
        """
        Delete a task together with every dependency edge that references it.

        Raises:
            TaskNotFoundException: If the task does not exist
        """
        task = self.get_task(task_id)
        project_id = task.project_id

        with self.transaction():
            self.repository.delete(task_id)

        self._invalidate_projects()
        self._log_operation("delete", "Task", task_id, user_id=user_id)
        self._publish(TaskDeleted(task_id=task_id, project_id=project_id))

    def _notify_assignee(self, task: Task) -> None:
        self.notification_service.create_notification(
            task.assigned_to_id, f"You have been assigned to task: {task.title}"
        )

    def _invalidate_projects(self) -> None:
        # Task assignment decides which projects a user can see
        if self.cache_service:
            self.cache_service.invalidate_pattern("projects:user:")
