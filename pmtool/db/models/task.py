# File: pmtool/db/models/task.py
"""
Task and task dependency models for PMTool.

This module defines the Task model and the TaskDependency edge model.
An edge reads "task depends on depends_on": the depends_on task is the
prerequisite and must be finished first. Nothing prevents the same pair
from being stored twice, and the prerequisite may live in another project.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship, validates

from pmtool.db.models.base import AbstractBase, TimestampMixin
from pmtool.db.models.enums import TaskPriority, TaskStatus


class Task(AbstractBase, TimestampMixin):
    """
    Task model representing a unit of work inside a project.

    Attributes:
        title: Short task title
        description: Free-form description
        project_id: Owning project
        assigned_to_id: Optional assignee
        priority: low / medium / high
        status: todo / in_progress / done
        due_date: Optional due date
    """

    __tablename__ = "tasks"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    assigned_to_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    priority = Column(Enum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False)
    status = Column(Enum(TaskStatus), default=TaskStatus.TODO, nullable=False)
    due_date = Column(Date, nullable=True)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    assigned_to = relationship("User", back_populates="assigned_tasks")
    dependencies = relationship(
        "TaskDependency",
        foreign_keys="TaskDependency.task_id",
        back_populates="task",
        cascade="all, delete",
    )
    dependents = relationship(
        "TaskDependency",
        foreign_keys="TaskDependency.depends_on_id",
        back_populates="depends_on",
        cascade="all, delete",
    )

    @validates("title")
    def validate_title(self, key: str, title: str) -> str:
        if not title or not title.strip():
            raise ValueError("Task title must not be empty")
        return title.strip()


class TaskDependency(AbstractBase):
    """
    Directed dependency edge between two tasks.

    Attributes:
        task_id: The dependent (child) task
        depends_on_id: The prerequisite (parent) task
    """

    __tablename__ = "task_dependencies"

    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    depends_on_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    task = relationship("Task", foreign_keys=[task_id], back_populates="dependencies")
    depends_on = relationship("Task", foreign_keys=[depends_on_id], back_populates="dependents")

    def __repr__(self):
        return f"TaskDependency(id={self.id}, task_id={self.task_id}, depends_on_id={self.depends_on_id})"
