"""Post CRUD and paginated listing by author or category."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.post import Post
from app.services.audit import log_action
from app.services.categories import get_category
from app.services.pagination import Page, PageRequest, paginate
from app.services.users import get_user

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255


def _check_fields(title: str, content: str) -> tuple[str, str]:
    title = (title or "").strip()
    if not title or len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be 1-{MAX_TITLE_LENGTH} characters", code="INVALID_TITLE")
    if not (content or "").strip():
        raise ValidationError("Content must not be empty", code="INVALID_CONTENT")
    return title, content


def _ensure_author(post: Post, user_id: str) -> None:
    if post.user_id != user_id:
        raise AuthorizationError("Only the author can modify this post", code="NOT_POST_AUTHOR")


async def get_post(session: AsyncSession, post_id: str) -> Post:
    post = await session.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post", post_id)
    return post


async def list_posts(
    session: AsyncSession,
    page: PageRequest,
    user_id: str | None = None,
    category_id: str | None = None,
) -> Page[Post]:
    """Newest first. Filtering by an unknown user or category is a NotFoundError, not an empty page."""
    stmt = select(Post)
    if user_id:
        await get_user(session, user_id)
        stmt = stmt.where(Post.user_id == user_id)
    if category_id:
        await get_category(session, category_id)
        stmt = stmt.where(Post.category_id == category_id)
    stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc())
    result = await paginate(session, stmt, page)
    logger.debug(
        "Listed posts user_id=%s category_id=%s offset=%d limit=%d total=%d",
        user_id,
        category_id,
        page.offset,
        page.limit,
        result.total_records,
    )
    return result


async def create_post(
    session: AsyncSession,
    user_id: str,
    title: str,
    content: str,
    category_id: str,
    ip_address: str | None = None,
) -> Post:
    title, content = _check_fields(title, content)
    await get_category(session, category_id)
    post = Post(title=title, content=content, category_id=category_id, user_id=user_id, approved=False)
    session.add(post)
    await session.flush()
    await log_action(
        session,
        user_id=user_id,
        action="create",
        resource="post",
        resource_id=post.id,
        details={"category_id": category_id},
        ip_address=ip_address,
    )
    logger.info("Post %s created by user %s", post.id, user_id)
    return post


async def update_post(
    session: AsyncSession,
    user_id: str,
    post_id: str,
    title: str,
    content: str,
    category_id: str,
    ip_address: str | None = None,
) -> Post:
    """Replace title, content and category of an existing post."""
    post = await get_post(session, post_id)
    _ensure_author(post, user_id)
    title, content = _check_fields(title, content)
    await get_category(session, category_id)
    post.title = title
    post.content = content
    post.category_id = category_id
    post.updated_at = datetime.utcnow()
    await session.flush()
    await log_action(
        session,
        user_id=user_id,
        action="update",
        resource="post",
        resource_id=post.id,
        details={"category_id": category_id},
        ip_address=ip_address,
    )
    logger.info("Post %s updated by user %s", post.id, user_id)
    return post


async def delete_post(
    session: AsyncSession, user_id: str, post_id: str, ip_address: str | None = None
) -> None:
    post = await get_post(session, post_id)
    _ensure_author(post, user_id)
    await session.delete(post)
    await session.flush()
    await log_action(
        session,
        user_id=user_id,
        action="delete",
        resource="post",
        resource_id=post_id,
        ip_address=ip_address,
    )
    logger.info("Post %s deleted by user %s", post_id, user_id)
