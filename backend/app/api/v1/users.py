"""User endpoints: list and lookup."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_page_request
from app.db.session import get_db
from app.schemas.pagination import PaginatedResponse
from app.schemas.user import UserOut
from app.services.pagination import PageRequest
from app.services.users import get_user, list_users

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=PaginatedResponse[UserOut],
    summary="List users",
    responses={422: {"description": "Invalid offset or limit"}},
)
async def get_users(
    session: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[PageRequest, Depends(get_page_request)],
) -> PaginatedResponse[UserOut]:
    result = await list_users(session, page)
    return PaginatedResponse[UserOut].from_page(result, UserOut)


@router.get(
    "/{user_id}",
    response_model=UserOut,
    summary="Get user by id",
    responses={404: {"description": "User not found"}},
)
async def get_user_by_id(
    session: Annotated[AsyncSession, Depends(get_db)],
    user_id: str,
) -> UserOut:
    return UserOut.model_validate(await get_user(session, user_id))
