# File: pmtool/db/models/project.py
"""
Project model for PMTool.

A project is owned by one user and references its tasks; tasks keep their
own lifecycle once created.
"""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship, validates

from pmtool.db.models.base import AbstractBase, TimestampMixin


class Project(AbstractBase, TimestampMixin):
    """
    Project model grouping a set of tasks under one owner.
    """

    __tablename__ = "projects"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    owner = relationship("User", back_populates="owned_projects")
    tasks = relationship(
        "Task", back_populates="project", cascade="all, delete"
    )

    @validates("name")
    def validate_name(self, key: str, name: str) -> str:
        if not name or not name.strip():
            raise ValueError("Project name must not be empty")
        return name.strip()
