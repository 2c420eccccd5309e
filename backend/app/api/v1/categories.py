"""Categories API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_client_ip, get_current_user, get_page_request
from app.db.session import get_db
from app.models.user import User
from app.schemas.category import CategoryBody, CategoryOut
from app.schemas.pagination import PaginatedResponse
from app.services import categories as category_service
from app.services.pagination import PageRequest

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=PaginatedResponse[CategoryOut], summary="List categories by name")
async def list_categories(
    session: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[PageRequest, Depends(get_page_request)],
) -> PaginatedResponse[CategoryOut]:
    result = await category_service.list_categories(session, page)
    return PaginatedResponse[CategoryOut].from_page(result, CategoryOut)


@router.get(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Get category",
    responses={404: {"description": "Category not found"}},
)
async def get_category(
    session: Annotated[AsyncSession, Depends(get_db)],
    category_id: str,
) -> CategoryOut:
    return CategoryOut.model_validate(await category_service.get_category(session, category_id))


@router.post(
    "",
    response_model=CategoryOut,
    status_code=201,
    summary="Create category",
    responses={401: {"description": "Not authenticated"}, 409: {"description": "Name already exists"}},
)
async def create_category(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    ip_address: Annotated[str | None, Depends(get_client_ip)],
    body: CategoryBody,
) -> CategoryOut:
    category = await category_service.create_category(session, user.id, body.name, ip_address=ip_address)
    return CategoryOut.model_validate(category)


@router.put(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Rename category",
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Category not found"},
        409: {"description": "Name already exists"},
    },
)
async def update_category(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    ip_address: Annotated[str | None, Depends(get_client_ip)],
    category_id: str,
    body: CategoryBody,
) -> CategoryOut:
    category = await category_service.update_category(
        session, user.id, category_id, body.name, ip_address=ip_address
    )
    return CategoryOut.model_validate(category)


@router.delete(
    "/{category_id}",
    status_code=204,
    summary="Delete category",
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Category not found"},
        409: {"description": "Category still has posts"},
    },
)
async def delete_category(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    ip_address: Annotated[str | None, Depends(get_client_ip)],
    category_id: str,
) -> Response:
    await category_service.delete_category(session, user.id, category_id, ip_address=ip_address)
    return Response(status_code=204)
