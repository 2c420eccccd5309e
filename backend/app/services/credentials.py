"""Credential check for login: email + plaintext password against the stored bcrypt hash."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.auth import DUMMY_PASSWORD_HASH, normalize_email, verify_password
from app.core.exceptions import AuthenticationError
from app.models.user import User

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def invalid_credentials() -> AuthenticationError:
    """The one error for every login failure; never says which part was wrong."""
    return AuthenticationError(INVALID_CREDENTIALS_MESSAGE, code="INVALID_CREDENTIALS")


class CredentialVerifier:
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def verify(self, email: str, password: str) -> User:
        email = normalize_email(email)
        if not email or not password:
            raise invalid_credentials()
        async with self._session_maker() as session:
            r = await session.execute(select(User).where(User.email == email))
            user = r.scalar_one_or_none()
        # Unknown email still pays for one hash check so both failures look alike.
        password_hash = user.password_hash if user is not None else DUMMY_PASSWORD_HASH
        matches = verify_password(password, password_hash)
        if user is None or not matches:
            raise invalid_credentials()
        return user
