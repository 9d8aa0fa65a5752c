# File: pmtool/repositories/task_dependency_repository.py

from typing import Iterable, List

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from pmtool.db.models.task import TaskDependency
from pmtool.repositories.base_repository import BaseRepository


class TaskDependencyRepository(BaseRepository[TaskDependency]):
    """
    Repository for dependency edges between tasks.

    Edge writes are flushed but not committed; the calling service owns the
    transaction boundary.
    """

    def __init__(self, session: Session):
        super().__init__(session=session, model=TaskDependency)

    def list_all_dependency_edges(self) -> List[TaskDependency]:
        """Every edge in the store, regardless of project."""
        stmt = select(TaskDependency).order_by(TaskDependency.created_at)
        return list(self.session.execute(stmt).scalars().all())

    def list_dependency_edges_by_task_ids(self, task_ids: Iterable[str]) -> List[TaskDependency]:
        """
        Get edges whose dependent task or prerequisite is in the given set.

        Args:
            task_ids: IDs of the tasks of interest

        Returns:
            List[TaskDependency]: Edges touching the set
        """
        ids = list(task_ids)
        if not ids:
            return []
        stmt = (
            select(TaskDependency)
            .where(or_(TaskDependency.task_id.in_(ids), TaskDependency.depends_on_id.in_(ids)))
            .order_by(TaskDependency.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())

    def create_dependency_edge(self, task_id: str, depends_on_id: str) -> TaskDependency:
        """
        Stage a new edge "task_id depends on depends_on_id".

        No duplicate check is made.
        """
        edge = TaskDependency(task_id=task_id, depends_on_id=depends_on_id)
        self.session.add(edge)
        self.session.flush()
        return edge

    def find_dependency_edges_by_task_id(self, task_id: str) -> List[TaskDependency]:
        """All edges whose dependent task is task_id."""
        stmt = (
            select(TaskDependency)
            .where(TaskDependency.task_id == task_id)
            .order_by(TaskDependency.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())
