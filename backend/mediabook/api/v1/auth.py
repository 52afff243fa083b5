"""Authentication endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.api import deps
from mediabook.models.user import User
from mediabook.schemas.auth import Token
from mediabook.schemas.user import UserRead
from mediabook.services.auth_service import authenticate_user, create_access_token_for_user

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/token",
    response_model=Token,
    summary="Obtain access token",
    dependencies=[deps.LOGIN_RATE_LIMIT],
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> Token:
    """Validate credentials and issue a bearer token."""
    user = await authenticate_user(
        session, email=form_data.username, password=form_data.password
    )
    if not user:
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = await create_access_token_for_user(user)
    return Token(access_token=access_token)


@router.get("/me", response_model=UserRead, summary="Current user")
async def read_current_user(
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> UserRead:
    return UserRead.model_validate(current_user)
