# File: pmtool/repositories/task_repository.py

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from pmtool.db.models.task import Task
from pmtool.repositories.base_repository import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """
    Repository for Task entity operations.

    Tasks of a project are always returned in creation order, which is the
    order the dependency graph uses to break ties.
    """

    def __init__(self, session: Session):
        super().__init__(session=session, model=Task)

    def list_tasks_by_project(self, project_id: str) -> List[Task]:
        """
        Get all tasks of a project.

        Args:
            project_id (str): ID of the project

        Returns:
            List[Task]: Tasks of the project in creation order
        """
        stmt = (
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())

    def find_task_by_id(self, task_id: str) -> Optional[Task]:
        return self.get_by_id(task_id)

    def find_tasks_by_ids(self, task_ids: Iterable[str]) -> List[Task]:
        """
        Bulk lookup of tasks. Unknown ids are simply absent from the result.
        """
        ids = list(task_ids)
        if not ids:
            return []
        stmt = select(Task).where(Task.id.in_(ids))
        return list(self.session.execute(stmt).scalars().all())
