# pmtool/schemas/task.py
"""
Task and task dependency schemas for the PMTool API.
"""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, validator

from pmtool.db.models.enums import TaskPriority, TaskStatus


class TaskBase(BaseModel):
    title: str = Field(..., description="Task title", min_length=1, max_length=255)
    description: str = Field("", description="Task description")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    status: TaskStatus = Field(TaskStatus.TODO, description="Task status")
    due_date: Optional[date] = Field(None, description="Optional due date")


class TaskCreate(TaskBase):
    """
    Schema for creating a task.

    depends_on_ids lists prerequisite tasks; ids that match no task are ignored.
    """

    project_id: str = Field(..., description="Project the task belongs to")
    assigned_to_id: Optional[str] = Field(None, description="User the task is assigned to")
    depends_on_ids: List[str] = Field(default_factory=list, description="Prerequisite task IDs")

    @validator("title")
    def title_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Task title must not be blank")
        return v.strip()


class TaskUpdate(BaseModel):
    """Schema for updating a task. Only provided fields change."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    assigned_to_id: Optional[str] = None

    @validator("title", "description", "priority", "status", pre=True)
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field may be omitted but not set to null")
        return v

    @validator("title")
    def title_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Task title must not be blank")
        return v.strip()


class Task(TaskBase):
    """Schema for task responses."""

    id: str
    project_id: str
    assigned_to_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DependencyCreate(BaseModel):
    """Schema for adding prerequisites to a task."""

    prerequisite_ids: List[str] = Field(..., description="IDs of tasks that must be finished first")


class TaskDependency(BaseModel):
    """A dependency edge: task_id depends on depends_on_id."""

    id: str
    task_id: str
    depends_on_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
