"""Category CRUD. Names are unique case-insensitively."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.category import Category
from app.models.post import Post
from app.services.audit import log_action
from app.services.pagination import Page, PageRequest, paginate

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 64


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name or len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Category name must be 1-{MAX_NAME_LENGTH} characters",
            code="INVALID_CATEGORY_NAME",
        )
    return name


async def _name_taken(session: AsyncSession, name: str, exclude_id: str | None = None) -> bool:
    q = select(Category.id).where(func.lower(Category.name) == name.lower())
    if exclude_id:
        q = q.where(Category.id != exclude_id)
    r = await session.execute(q.limit(1))
    return r.scalar_one_or_none() is not None


async def get_category(session: AsyncSession, category_id: str) -> Category:
    category = await session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category", category_id)
    return category


async def list_categories(session: AsyncSession, page: PageRequest) -> Page[Category]:
    stmt = select(Category).order_by(Category.name.asc(), Category.id.asc())
    return await paginate(session, stmt, page)


async def create_category(
    session: AsyncSession, user_id: str, name: str, ip_address: str | None = None
) -> Category:
    name = _clean_name(name)
    if await _name_taken(session, name):
        raise ConflictError("Category name already exists", code="CATEGORY_EXISTS")
    category = Category(name=name)
    session.add(category)
    try:
        await session.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent create of the same name
        raise ConflictError("Category name already exists", code="CATEGORY_EXISTS") from e
    await log_action(
        session,
        user_id=user_id,
        action="create",
        resource="category",
        resource_id=category.id,
        ip_address=ip_address,
    )
    logger.info("Category %s created by user %s", category.id, user_id)
    return category


async def update_category(
    session: AsyncSession,
    user_id: str,
    category_id: str,
    name: str,
    ip_address: str | None = None,
) -> Category:
    category = await get_category(session, category_id)
    name = _clean_name(name)
    if await _name_taken(session, name, exclude_id=category.id):
        raise ConflictError("Category name already exists", code="CATEGORY_EXISTS")
    category.name = name
    try:
        await session.flush()
    except IntegrityError as e:
        raise ConflictError("Category name already exists", code="CATEGORY_EXISTS") from e
    await log_action(
        session,
        user_id=user_id,
        action="update",
        resource="category",
        resource_id=category.id,
        details={"name": name},
        ip_address=ip_address,
    )
    return category


async def delete_category(
    session: AsyncSession, user_id: str, category_id: str, ip_address: str | None = None
) -> None:
    category = await get_category(session, category_id)
    r = await session.execute(select(Post.id).where(Post.category_id == category.id).limit(1))
    if r.scalar_one_or_none() is not None:
        raise ConflictError("Category still has posts", code="CATEGORY_IN_USE")
    await session.delete(category)
    try:
        await session.flush()
    except IntegrityError as e:
        # A post was attached after the check; the foreign key refuses the delete
        raise ConflictError("Category still has posts", code="CATEGORY_IN_USE") from e
    await log_action(
        session,
        user_id=user_id,
        action="delete",
        resource="category",
        resource_id=category_id,
        ip_address=ip_address,
    )
    logger.info("Category %s deleted by user %s", category_id, user_id)
