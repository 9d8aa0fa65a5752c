"""
Initializes the models package for SQLAlchemy declarative base.

Importing every model here registers its table on ``Base.metadata`` so that
``Base.metadata.create_all()`` sees the full schema.
"""

from pmtool.db.models.base import Base
from pmtool.db.models.enums import UserRole, TaskPriority, TaskStatus
from pmtool.db.models.user import User
from pmtool.db.models.project import Project
from pmtool.db.models.task import Task, TaskDependency
from pmtool.db.models.notification import Notification

__all__ = [
    "Base",
    "UserRole",
    "TaskPriority",
    "TaskStatus",
    "User",
    "Project",
    "Task",
    "TaskDependency",
    "Notification",
]
