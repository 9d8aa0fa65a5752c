# File: pmtool/api/endpoints/auth.py
"""
Authentication endpoints for PMTool.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from pmtool.api.deps import get_user_service
from pmtool.core.exceptions import AuthenticationException
from pmtool.schemas.token import Token
from pmtool.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def _login(form_data: OAuth2PasswordRequestForm, user_service: UserService) -> Token:
    try:
        return user_service.login(form_data.username, form_data.password)
    except AuthenticationException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """
    Log in with email (as the OAuth2 ``username`` field) and password.

    Returns:
        A bearer access token
    """
    return _login(form_data, user_service)


@router.post("/token", response_model=Token)
def login_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """OAuth2 compatible token login, used by the interactive docs."""
    return _login(form_data, user_service)
