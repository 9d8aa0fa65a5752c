# File: pmtool/services/analytics_service.py
"""
Analytics service for PMTool.

Aggregates project and task counts straight from the database.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pmtool.core.exceptions import ProjectNotFoundException
from pmtool.db.models.enums import TaskStatus
from pmtool.db.models.project import Project
from pmtool.db.models.task import Task
from pmtool.db.models.user import User

logger = logging.getLogger(__name__)


def _rate(part: int, total: int) -> float:
    return (part / total) * 100 if total > 0 else 0.0


class AnalyticsService:
    """Read-only statistics over projects, tasks and users."""

    def __init__(self, session: Session):
        self.session = session

    def _count(self, stmt) -> int:
        return self.session.execute(stmt).scalar_one()

    def get_project_stats(self) -> Dict[str, int]:
        """
        Count projects. A project is active while it has an unfinished task.
        """
        total = self._count(select(func.count(Project.id)))
        active = self._count(
            select(func.count(func.distinct(Task.project_id))).where(Task.status != TaskStatus.DONE)
        )
        return {
            "total_projects": total,
            "active_projects": active,
            "completed_projects": total - active,
        }

    def get_task_stats(self) -> Dict[str, Any]:
        rows = self.session.execute(
            select(Task.status, func.count(Task.id)).group_by(Task.status)
        ).all()
        by_status = {status.value: 0 for status in TaskStatus}
        for status, count in rows:
            by_status[TaskStatus(status).value] = count

        total = sum(by_status.values())
        return {
            "total_tasks": total,
            "tasks_by_status": by_status,
            "completion_rate": _rate(by_status[TaskStatus.DONE.value], total),
        }

    def get_user_productivity(self) -> List[Dict[str, Any]]:
        """Assigned and completed task counts for every user."""
        users = self.session.execute(select(User).order_by(User.created_at)).scalars().all()
        rows = self.session.execute(
            select(Task.assigned_to_id, Task.status, func.count(Task.id))
            .where(Task.assigned_to_id.is_not(None))
            .group_by(Task.assigned_to_id, Task.status)
        ).all()

        assigned: Dict[str, int] = {}
        completed: Dict[str, int] = {}
        for user_id, status, count in rows:
            assigned[user_id] = assigned.get(user_id, 0) + count
            if TaskStatus(status) == TaskStatus.DONE:
                completed[user_id] = completed.get(user_id, 0) + count

        return [
            {
                "user_id": user.id,
                "name": user.name,
                "assigned_tasks": assigned.get(user.id, 0),
                "completed_tasks": completed.get(user.id, 0),
                "completion_rate": _rate(completed.get(user.id, 0), assigned.get(user.id, 0)),
            }
            for user in users
        ]

    def get_project_progress(self, project_id: str) -> Dict[str, Any]:
        """
        Share of a project's tasks that are done.

        Raises:
            ProjectNotFoundException: If the project does not exist
        """
        project = self.session.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundException(project_id)

        total = self._count(select(func.count(Task.id)).where(Task.project_id == project_id))
        done = self._count(
            select(func.count(Task.id))
            .where(Task.project_id == project_id)
            .where(Task.status == TaskStatus.DONE)
        )
        return {
            "project_id": project.id,
            "project_name": project.name,
            "total_tasks": total,
            "completed_tasks": done,
            "progress_percentage": _rate(done, total),
        }

    def get_time_based_analytics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Activity inside a time window. Either bound may be omitted.

        A task counts as completed in the window when it is done and was last
        updated inside it.
        """

        def window(stmt, column):
            if start_date is not None:
                stmt = stmt.where(column >= start_date)
            if end_date is not None:
                stmt = stmt.where(column <= end_date)
            return stmt

        tasks_created = self._count(window(select(func.count(Task.id)), Task.created_at))
        tasks_completed = self._count(
            window(select(func.count(Task.id)).where(Task.status == TaskStatus.DONE), Task.updated_at)
        )
        projects_created = self._count(window(select(func.count(Project.id)), Project.created_at))

        logger.debug(f"Time based analytics for {start_date} - {end_date} computed")
        return {
            "start_date": start_date,
            "end_date": end_date,
            "tasks_created": tasks_created,
            "tasks_completed": tasks_completed,
            "projects_created": projects_created,
        }
