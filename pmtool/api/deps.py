# pmtool/api/deps.py
"""
FastAPI dependencies for PMTool.

Provides dependency functions for database sessions, user authentication,
and service injection for API routes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from pmtool.core import security
from pmtool.core.config import settings
from pmtool.core.events import global_event_bus
from pmtool.db.session import get_db
from pmtool.db.models.user import User
from pmtool.schemas.token import TokenPayload
from pmtool.services.analytics_service import AnalyticsService
from pmtool.services.cache_service import CacheService
from pmtool.services.notification_service import NotificationService
from pmtool.services.project_service import ProjectService
from pmtool.services.search_service import SearchService
from pmtool.services.task_dependency_service import TaskDependencyService
from pmtool.services.task_service import TaskService
from pmtool.services.user_service import UserService

logger = logging.getLogger(__name__)

# --- Authentication ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")

_cache_service: Optional[CacheService] = None


def resolve_user_from_token(db: Session, token: str) -> Optional[User]:
    """
    Decode a bearer token and load its user.

    Returns:
        The user, or None when the token is invalid, expired or names no user
    """
    try:
        payload = security.decode_token(token)
        token_data = TokenPayload.model_validate(payload)
    except (JWTError, ValidationError) as e:
        logger.warning(f"Token validation failed: {e}")
        return None

    if datetime.fromtimestamp(token_data.exp, tz=timezone.utc) < datetime.now(timezone.utc):
        logger.warning(f"Token expired for sub: {token_data.sub}")
        return None

    user = UserService(db).get_user(token_data.sub)
    if user is None:
        logger.warning(f"User with ID {token_data.sub} from token not found in DB.")
    return user


# --- User Authentication Dependencies ---

def get_current_user(
        db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> User:
    """Get current authenticated user from JWT token."""
    user = resolve_user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(
        current_user: User = Depends(get_current_user),
) -> User:
    """Gets current user and verifies they are active."""
    if not current_user.is_active:
        logger.warning(f"Request by inactive user: {current_user.email} (ID: {current_user.id})")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


# --- Service Dependency Injectors ---

def get_cache_service() -> CacheService:
    """Provides the process-wide CacheService."""
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService()
    return _cache_service


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_project_service(
        db: Session = Depends(get_db),
        cache_service: CacheService = Depends(get_cache_service),
) -> ProjectService:
    """Provides an instance of ProjectService."""
    return ProjectService(db, event_bus=global_event_bus, cache_service=cache_service)


def get_task_dependency_service(db: Session = Depends(get_db)) -> TaskDependencyService:
    return TaskDependencyService(db, event_bus=global_event_bus)


def get_task_service(
        db: Session = Depends(get_db),
        cache_service: CacheService = Depends(get_cache_service),
) -> TaskService:
    """Provides an instance of TaskService."""
    return TaskService(db, event_bus=global_event_bus, cache_service=cache_service)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    return SearchService(db)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)
