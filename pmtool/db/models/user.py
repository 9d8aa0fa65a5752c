# File: pmtool/db/models/user.py

from sqlalchemy import Boolean, Column, Enum, String
from sqlalchemy.orm import relationship

from pmtool.db.models.base import AbstractBase, TimestampMixin
from pmtool.db.models.enums import UserRole


class User(AbstractBase, TimestampMixin):
    """
    User model for authentication and task assignment.

    Stores account information, credentials and the user's role.
    """

    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.MEMBER, nullable=False)
    is_active = Column(Boolean, default=True)

    # Relationships
    owned_projects = relationship("Project", back_populates="owner")
    assigned_tasks = relationship("Task", back_populates="assigned_to")
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete"
    )

    def __repr__(self):
        return f"User(id={self.id}, email={self.email}, role={self.role})"
