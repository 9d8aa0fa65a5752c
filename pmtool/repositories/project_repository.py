# File: pmtool/repositories/project_repository.py

from typing import List

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from pmtool.db.models.project import Project
from pmtool.db.models.task import Task
from pmtool.repositories.base_repository import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """
    Repository for Project entity operations.

    Projects are visible to their owner and to every user assigned to at
    least one of their tasks.
    """

    def __init__(self, session: Session):
        super().__init__(session=session, model=Project)

    def _accessible_clause(self, user_id: str):
        assigned_project_ids = select(Task.project_id).where(Task.assigned_to_id == user_id)
        return or_(Project.owner_id == user_id, Project.id.in_(assigned_project_ids))

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Project]:
        """
        Get projects owned by the user or containing tasks assigned to them.

        Args:
            user_id (str): ID of the user

        Returns:
            List[Project]: Projects visible to the user, oldest first
        """
        stmt = (
            select(Project)
            .where(self._accessible_clause(user_id))
            .order_by(Project.created_at)
            .offset(skip)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def search_for_user(self, user_id: str, query: str, limit: int = 100) -> List[Project]:
        """Search visible projects by name or description."""
        search_term = f"%{query}%"
        stmt = (
            select(Project)
            .where(self._accessible_clause(user_id))
            .where(or_(Project.name.ilike(search_term), Project.description.ilike(search_term)))
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def user_has_access(self, project_id: str, user_id: str) -> bool:
        """Check whether the user owns the project or is assigned to one of its tasks."""
        stmt = select(Project.id).where(Project.id == project_id).where(
            self._accessible_clause(user_id)
        )
        return self.session.execute(stmt).first() is not None
