# pmtool/schemas/analytics.py
"""
Analytics schemas for the PMTool API.
"""

from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, Field


class ProjectStatistics(BaseModel):
    total_projects: int
    active_projects: int = Field(..., description="Projects with at least one unfinished task")
    completed_projects: int


class TaskStatistics(BaseModel):
    total_tasks: int
    tasks_by_status: Dict[str, int]
    completion_rate: float = Field(..., description="Percentage of tasks done")


class UserProductivity(BaseModel):
    user_id: str
    name: str
    assigned_tasks: int
    completed_tasks: int
    completion_rate: float


class ProjectProgress(BaseModel):
    project_id: str
    project_name: str
    total_tasks: int
    completed_tasks: int
    progress_percentage: float


class TimeBasedAnalytics(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tasks_created: int
    tasks_completed: int
    projects_created: int
