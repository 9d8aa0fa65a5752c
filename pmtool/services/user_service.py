# pmtool/services/user_service.py
"""
User service for PMTool.

This module provides functionality for user registration and authentication.
"""

from typing import Optional, List
from datetime import timedelta
from sqlalchemy.orm import Session
import logging

from pmtool import schemas
from pmtool.services.base_service import BaseService
from pmtool.db.models.user import User
from pmtool.repositories.user_repository import UserRepository
from pmtool.core.exceptions import (
    AuthenticationException,
    DuplicateEntityException,
    ValidationException,
)
from pmtool.core.security import get_password_hash, verify_password, create_access_token
from pmtool.core.config import settings

logger = logging.getLogger(__name__)


class UserService(BaseService[User]):
    """
    Service layer for managing Users.
    """

    repository: UserRepository

    def __init__(self, session: Session, repository: Optional[UserRepository] = None):
        super().__init__(session=session, repository=repository or UserRepository(session))

    def create_user(self, user_in: schemas.UserCreate) -> User:
        """
        Creates a new user, hashing the password.

        Args:
            user_in: User creation schema containing user details and plain password.

        Returns:
            The created User object.

        Raises:
            DuplicateEntityException: If a user with the same email already exists.
            ValidationException: If password requirements are not met.
        """
        logger.info(f"Attempting to create user with email: {user_in.email}")
        if self.get_by_email(user_in.email):
            logger.warning(f"Attempted to create duplicate user: {user_in.email}")
            raise DuplicateEntityException(
                "User with this email already exists",
                details={"email": user_in.email},
            )

        if len(user_in.password) < settings.MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long",
                {"password": ["Password too short"]},
            )

        user_data = user_in.model_dump(exclude={"password"})
        user_data["hashed_password"] = get_password_hash(user_in.password)
        user_data["is_active"] = True

        with self.transaction():
            created_user = self.repository.create(user_data)

        self._log_operation("create", "User", created_user.id)
        return created_user

    def get_user(self, user_id: str) -> Optional[User]:
        """Gets a single user by ID."""
        return self.repository.get_by_id(user_id)

    def get_all_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        return self.repository.list(skip=skip, limit=limit)

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieves a user by their email address.

        Returns:
            The User object if found, otherwise None.
        """
        return self.repository.get_by_email(email)

    def authenticate_user(self, email: str, password: str) -> User:
        """
        Check credentials and return the matching active user.

        Raises:
            AuthenticationException: On unknown email, wrong password or inactive user
        """
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for {email}")
            raise AuthenticationException("Incorrect email or password")
        if not user.is_active:
            raise AuthenticationException("Inactive user")
        return user

    def login(self, email: str, password: str) -> schemas.Token:
        """Authenticate and issue a bearer access token."""
        user = self.authenticate_user(email, password)
        expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        token = create_access_token(user.id, expires_delta=expires)
        logger.info(f"User {user.id} logged in")
        return schemas.Token(
            access_token=token,
            token_type="bearer",
            expires_in=int(expires.total_seconds()),
        )
