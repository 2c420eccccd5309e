"""FastAPI dependencies: wired services, current user from JWT, page request."""

from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import AuthenticationError
from app.db.session import get_db
from app.models.user import User
from app.services.container import Services
from app.services.pagination import PageRequest


def get_services(request: Request) -> Services:
    return request.app.state.services


async def get_current_user(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db)],
    services: Annotated[Services, Depends(get_services)],
) -> User:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationError("Not authenticated", code="MISSING_TOKEN")
    token = auth_header[7:].strip()
    if not token:
        raise AuthenticationError("Not authenticated", code="MISSING_TOKEN")
    user_id = services.token_issuer.verify(token)
    user = await session.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found", code="USER_NOT_FOUND")
    return user


def get_page_request(
    offset: Annotated[int, Query(description="Number of records to skip")] = 0,
    limit: Annotated[int | None, Query(description="Max records per page")] = None,
) -> PageRequest:
    """Out-of-range values become a ValidationError (422); limit is capped at PAGINATION_MAX_LIMIT."""
    if limit is None:
        limit = settings.pagination_default_limit
    return PageRequest.create(offset, limit, settings.pagination_max_limit)


def get_client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None
