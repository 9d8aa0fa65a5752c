# pmtool/schemas/project.py
"""
Project schemas for the PMTool API.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, validator


class ProjectBase(BaseModel):
    name: str = Field(..., description="Project name", min_length=1, max_length=255)
    description: Optional[str] = Field(None, description="Project description")


class ProjectCreate(ProjectBase):
    """Schema for creating a project. The owner is the current user."""

    @validator("name")
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Project name must not be blank")
        return v.strip()


class ProjectUpdate(BaseModel):
    """Schema for updating a project. Only provided fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class Project(ProjectBase):
    """Schema for project responses."""

    id: str
    owner_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
