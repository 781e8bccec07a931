"""
Xync Backend — Authentication Routes
====================================

What:  Account registration, login and the "who am I" endpoint.
Who:   /auth/register and /auth/login are listed in PUBLIC_PATHS and reach
       these handlers without a token. /auth/me requires one.

Login failures always return the same 401 body whether the email is
unknown or the password is wrong.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import get_db_session
from xync.middleware.auth import get_current_user_id
from xync.models.user import User
from xync.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from xync.schemas.common import ErrorResponse
from xync.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _auth_response(user: User) -> AuthResponse:
    issued = user_service.issue_session(user, datetime.now(timezone.utc))
    return AuthResponse(
        token=issued.token,
        expires_at=issued.expires_at,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
    description=(
        "Registers a new user and returns the account together with a bearer "
        "token, so clients can proceed without a separate login."
    ),
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await user_service.register(db, payload)
    return _auth_response(user)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid email or password", "model": ErrorResponse},
    },
    summary="Exchange credentials for a bearer token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await user_service.authenticate(db, payload.email, payload.password)
    return _auth_response(user)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="The authenticated user",
)
async def me(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """A valid token for a since-deleted account answers 404."""
    user = await user_service.get_user(db, user_id)
    return UserResponse.model_validate(user)
