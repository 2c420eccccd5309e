"""Auth: register, login, refresh, logout, me."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_services
from app.core.exceptions import AuthenticationError, RefreshError
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import LoginBody, LogoutBody, RefreshBody, RegisterBody, TokenResponse
from app.schemas.user import UserOut
from app.services.container import Services
from app.services.sessions import SessionResult
from app.services.users import register_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(result: SessionResult) -> TokenResponse:
    return TokenResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expiry_duration=result.expiry_duration,
    )


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=201,
    summary="Register a new user",
    responses={
        409: {"description": "Email already registered"},
        422: {"description": "Invalid email or weak password"},
    },
)
async def register(
    session: Annotated[AsyncSession, Depends(get_db)],
    services: Annotated[Services, Depends(get_services)],
    body: RegisterBody,
) -> TokenResponse:
    user = await register_user(session, body.email, body.password, body.display_name)
    # The refresh session is written through its own connection; the user row must exist first.
    await session.commit()
    logger.info("Registered user %s", user.id)
    result = await services.sessions.start_session(user.id, body.device_id)
    return _token_response(result)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    responses={
        401: {"description": "Invalid email or password"},
    },
)
async def login(
    services: Annotated[Services, Depends(get_services)],
    body: LoginBody,
) -> TokenResponse:
    try:
        result = await services.sessions.login(body.email, body.password, body.device_id)
    except AuthenticationError:
        logger.info("Login failed")
        raise
    logger.info("Login succeeded for user %s", result.user_id)
    return _token_response(result)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Exchange refresh token for new access and refresh tokens",
    responses={
        401: {"description": "Refresh token required, invalid, expired or already used"},
    },
)
async def refresh_tokens(
    services: Annotated[Services, Depends(get_services)],
    body: RefreshBody,
) -> TokenResponse:
    """Exchange refresh_token for new access_token and refresh_token (rotation)."""
    try:
        result = await services.sessions.refresh(body.refresh_token)
    except RefreshError:
        logger.info("Refresh rejected")
        raise
    return _token_response(result)


@router.post(
    "/logout",
    status_code=204,
    summary="Revoke a refresh token",
    responses={204: {"description": "Always succeeds, even for unknown tokens"}},
)
async def logout(
    services: Annotated[Services, Depends(get_services)],
    body: LogoutBody,
) -> Response:
    await services.sessions.logout(body.refresh_token)
    return Response(status_code=204)


@router.get(
    "/me",
    response_model=UserOut,
    summary="Get current authenticated user",
    responses={
        401: {"description": "Not authenticated or invalid token"},
    },
)
async def me(user: Annotated[User, Depends(get_current_user)]) -> UserOut:
    return UserOut.model_validate(user)
