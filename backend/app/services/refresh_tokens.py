"""
Refresh token store: one rotating opaque token per (user, device) session.

Only the SHA256 of a token is persisted. Rotation is a compare-and-replace
UPDATE on the session row, so a superseded token can never be exchanged
twice even across processes; per-session asyncio locks additionally
serialize create/rotate/revoke inside one process.
"""

from __future__ import annotations

import asyncio
import weakref
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.auth import create_refresh_token, hash_refresh_token
from app.core.clock import Clock, utcnow
from app.core.exceptions import RefreshError
from app.models.refresh_token import DEFAULT_DEVICE_ID, RefreshToken


@dataclass(frozen=True)
class RotatedToken:
    token: str
    user_id: str


class RefreshTokenStore:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        ttl: timedelta,
        clock: Clock = utcnow,
        token_factory: Callable[[], str] = create_refresh_token,
    ):
        self._session_maker = session_maker
        self._ttl = ttl
        self._clock = clock
        self._token_factory = token_factory
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str, device_id: str) -> asyncio.Lock:
        key = f"{user_id}:{device_id}"
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _find_session(self, token_hash: str) -> tuple[str, str, str] | None:
        """Return (session id, user id, device id) for a stored token hash."""
        async with self._session_maker() as session:
            r = await session.execute(
                select(RefreshToken.id, RefreshToken.user_id, RefreshToken.device_id).where(
                    RefreshToken.token_hash == token_hash
                )
            )
            row = r.one_or_none()
        if row is None:
            return None
        return row[0], row[1], row[2]

    async def create(self, user_id: str, device_id: str = DEFAULT_DEVICE_ID) -> str:
        """Start (or restart) the session for user/device; any prior token for it stops working."""
        token = self._token_factory()
        token_hash = hash_refresh_token(token)
        async with self._lock_for(user_id, device_id):
            expires_at = self._clock() + self._ttl
            try:
                async with self._session_maker() as session, session.begin():
                    r = await session.execute(
                        select(RefreshToken).where(
                            RefreshToken.user_id == user_id,
                            RefreshToken.device_id == device_id,
                        )
                    )
                    row = r.scalar_one_or_none()
                    if row is None:
                        session.add(
                            RefreshToken(
                                user_id=user_id,
                                device_id=device_id,
                                token_hash=token_hash,
                                expires_at=expires_at,
                            )
                        )
                    else:
                        row.token_hash = token_hash
                        row.expires_at = expires_at
            except IntegrityError:
                # Another process inserted this session's row first; overwrite it instead.
                async with self._session_maker() as session, session.begin():
                    await session.execute(
                        update(RefreshToken)
                        .where(
                            RefreshToken.user_id == user_id,
                            RefreshToken.device_id == device_id,
                        )
                        .values(token_hash=token_hash, expires_at=expires_at)
                        .execution_options(synchronize_session=False)
                    )
        return token

    async def rotate(self, old_token: str) -> RotatedToken:
        """Exchange a live token for a new one. Unknown, expired or already-rotated -> RefreshError."""
        if not old_token or not old_token.strip():
            raise RefreshError("Refresh token required")
        old_hash = hash_refresh_token(old_token.strip())
        found = await self._find_session(old_hash)
        if found is None:
            raise RefreshError()
        session_id, user_id, device_id = found

        new_token = self._token_factory()
        async with self._lock_for(user_id, device_id):
            now = self._clock()
            async with self._session_maker() as session, session.begin():
                result = await session.execute(
                    update(RefreshToken)
                    .where(
                        RefreshToken.id == session_id,
                        RefreshToken.token_hash == old_hash,
                        RefreshToken.expires_at > now,
                    )
                    .values(token_hash=hash_refresh_token(new_token), expires_at=now + self._ttl)
                    .execution_options(synchronize_session=False)
                )
                rotated = result.rowcount == 1
                if not rotated:
                    # Dead session: drop it if it expired; a superseded hash no longer matches anyway.
                    await session.execute(
                        delete(RefreshToken)
                        .where(
                            RefreshToken.id == session_id,
                            RefreshToken.token_hash == old_hash,
                            RefreshToken.expires_at <= now,
                        )
                        .execution_options(synchronize_session=False)
                    )
        if not rotated:
            raise RefreshError()
        return RotatedToken(token=new_token, user_id=user_id)

    async def revoke(self, token: str) -> None:
        """Delete the session holding this token. Unknown or already-revoked tokens are a no-op."""
        if not token or not token.strip():
            return
        token_hash = hash_refresh_token(token.strip())
        found = await self._find_session(token_hash)
        if found is None:
            return
        _, user_id, device_id = found
        async with self._lock_for(user_id, device_id):
            async with self._session_maker() as session, session.begin():
                await session.execute(
                    delete(RefreshToken)
                    .where(RefreshToken.token_hash == token_hash)
                    .execution_options(synchronize_session=False)
                )
