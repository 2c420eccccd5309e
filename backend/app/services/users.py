"""User accounts: registration and lookup."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import hash_password, normalize_email
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.user import User
from app.services.pagination import Page, PageRequest, paginate

MIN_PASSWORD_LENGTH = 8


async def register_user(
    session: AsyncSession,
    email: str,
    password: str,
    display_name: str | None = None,
) -> User:
    email = normalize_email(email)
    if not email or "@" not in email:
        raise ValidationError("A valid email is required", code="INVALID_EMAIL")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            code="WEAK_PASSWORD",
        )
    r = await session.execute(select(User.id).where(User.email == email))
    if r.scalar_one_or_none() is not None:
        raise ConflictError("Email already registered", code="EMAIL_TAKEN")
    user = User(
        email=email,
        password_hash=hash_password(password),
        display_name=(display_name or "").strip() or None,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same email
        raise ConflictError("Email already registered", code="EMAIL_TAKEN") from e
    return user


async def get_user(session: AsyncSession, user_id: str) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def list_users(session: AsyncSession, page: PageRequest) -> Page[User]:
    stmt = select(User).order_by(User.created_at.asc(), User.id.asc())
    return await paginate(session, stmt, page)
