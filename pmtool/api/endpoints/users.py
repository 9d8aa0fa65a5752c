# File: pmtool/api/endpoints/users.py
"""
User API endpoints for PMTool.
"""

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from pmtool.api.deps import get_current_active_user, get_user_service
from pmtool.core.exceptions import DuplicateEntityException, ValidationException
from pmtool.db.models.user import User as UserModel
from pmtool.schemas.user import User, UserCreate
from pmtool.services.user_service import UserService

router = APIRouter()


@router.get("/health")
def health() -> Any:
    return {"status": "ok"}


@router.post("/", response_model=User, status_code=status.HTTP_201_CREATED)
def register_user(
    *,
    user_in: UserCreate,
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """
    Register a new user.

    Raises:
        HTTPException: 409 if the email is taken, 422 if the password is too short
    """
    try:
        return user_service.create_user(user_in)
    except DuplicateEntityException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)


@router.get("/", response_model=List[User])
def list_users(
    *,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: UserModel = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    return user_service.get_all_users(skip=skip, limit=limit)


@router.get("/me", response_model=User)
def read_current_user(current_user: UserModel = Depends(get_current_active_user)) -> Any:
    """Get the currently authenticated user."""
    return current_user
