# File: pmtool/db/models/base.py
"""
Base models and mixins for PMTool.

This module provides the foundation for all database models in the system:
- Base SQLAlchemy model class
- Timestamp mixin
- Abstract base with an opaque UUID primary key
"""

from datetime import datetime, date, timezone
from typing import Any, Dict
import enum
import uuid

from sqlalchemy import Column, DateTime, MetaData, String
from sqlalchemy.orm import declarative_base

Base = declarative_base(metadata=MetaData())


def generate_uuid() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    """
    Mixin providing automatic timestamp functionality.

    Adds created_at and updated_at timestamps that are automatically
    maintained when records are created or updated.
    """

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class AbstractBase(Base):
    """
    Abstract base class for all model entities.

    Attributes:
        id: Opaque primary key (UUID string)
    """

    __abstract__ = True

    id = Column(String(36), primary_key=True, default=generate_uuid)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the model instance to a dictionary.

        Returns:
            Dictionary representation of the model's columns
        """
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, enum.Enum):
                value = value.value
            result[column.name] = value
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"
