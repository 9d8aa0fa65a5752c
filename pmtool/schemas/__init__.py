# pmtool/schemas/__init__.py
"""
Pydantic schemas for the PMTool API.
"""

from .token import Token, TokenPayload
from .user import UserCreate, User
from .project import ProjectCreate, ProjectUpdate, Project
from .task import TaskCreate, TaskUpdate, Task, DependencyCreate, TaskDependency
from .notification import Notification, NotificationReadAll
from .analytics import (
    ProjectStatistics,
    TaskStatistics,
    UserProductivity,
    ProjectProgress,
    TimeBasedAnalytics,
)
