"""Posts API: paginated listing (optionally by author or category) and CRUD for the author."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_client_ip, get_current_user, get_page_request
from app.db.session import get_db
from app.models.user import User
from app.schemas.pagination import PaginatedResponse
from app.schemas.post import PostBody, PostOut
from app.services import posts as post_service
from app.services.pagination import PageRequest

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get(
    "",
    response_model=PaginatedResponse[PostOut],
    summary="List posts, newest first",
    responses={
        404: {"description": "user_id or category_id does not exist"},
        422: {"description": "Invalid offset or limit"},
    },
)
async def list_posts(
    session: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[PageRequest, Depends(get_page_request)],
    user_id: Annotated[str | None, Query(description="Only posts by this author")] = None,
    category_id: Annotated[str | None, Query(description="Only posts in this category")] = None,
) -> PaginatedResponse[PostOut]:
    result = await post_service.list_posts(session, page, user_id=user_id, category_id=category_id)
    return PaginatedResponse[PostOut].from_page(result, PostOut)


@router.get(
    "/{post_id}",
    response_model=PostOut,
    summary="Get post",
    responses={404: {"description": "Post not found"}},
)
async def get_post(
    session: Annotated[AsyncSession, Depends(get_db)],
    post_id: str,
) -> PostOut:
    return PostOut.model_validate(await post_service.get_post(session, post_id))


@router.post(
    "",
    response_model=PostOut,
    status_code=201,
    summary="Create post",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "Category not found"}},
)
async def create_post(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    ip_address: Annotated[str | None, Depends(get_client_ip)],
    body: PostBody,
) -> PostOut:
    post = await post_service.create_post(
        session, user.id, body.title, body.content, body.category_id, ip_address=ip_address
    )
    return PostOut.model_validate(post)


@router.put(
    "/{post_id}",
    response_model=PostOut,
    summary="Replace post title, content and category",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not the author"},
        404: {"description": "Post or category not found"},
    },
)
async def update_post(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    ip_address: Annotated[str | None, Depends(get_client_ip)],
    post_id: str,
    body: PostBody,
) -> PostOut:
    post = await post_service.update_post(
        session, user.id, post_id, body.title, body.content, body.category_id, ip_address=ip_address
    )
    return PostOut.model_validate(post)


@router.delete(
    "/{post_id}",
    status_code=204,
    summary="Delete post",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not the author"},
        404: {"description": "Post not found"},
    },
)
async def delete_post(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    ip_address: Annotated[str | None, Depends(get_client_ip)],
    post_id: str,
) -> Response:
    await post_service.delete_post(session, user.id, post_id, ip_address=ip_address)
    return Response(status_code=204)
