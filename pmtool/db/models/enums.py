# File: pmtool/db/models/enums.py
"""
Enumeration types shared by the PMTool models and schemas.
"""

from enum import Enum


class UserRole(str, Enum):
    """Role of a user account."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


class TaskPriority(str, Enum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Progress state of a task."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
