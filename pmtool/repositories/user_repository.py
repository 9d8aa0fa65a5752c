# File: pmtool/repositories/user_repository.py
"""
Repository implementation for users in PMTool.
"""

import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from pmtool.db.models.user import User
from pmtool.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user entities, extending BaseRepository with user-specific methods.
    """

    def __init__(self, session: Session):
        super().__init__(session=session, model=User)

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by email address (case-insensitive).

        Args:
            email: The email address to search for

        Returns:
            The User entity if found, otherwise None
        """
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return self.session.execute(stmt).scalar_one_or_none()
