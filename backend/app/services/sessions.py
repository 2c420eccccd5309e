"""Login / refresh / logout: credential check, access token, refresh-token session as one unit."""

from __future__ import annotations

from dataclasses import dataclass

from app.core.tokens import TokenIssuer
from app.models.refresh_token import DEFAULT_DEVICE_ID
from app.services.credentials import CredentialVerifier
from app.services.refresh_tokens import RefreshTokenStore


@dataclass(frozen=True)
class SessionResult:
    access_token: str
    refresh_token: str
    expiry_duration: int  # seconds until access_token expires
    user_id: str


class SessionOrchestrator:
    def __init__(
        self,
        verifier: CredentialVerifier,
        issuer: TokenIssuer,
        store: RefreshTokenStore,
    ):
        self._verifier = verifier
        self._issuer = issuer
        self._store = store

    async def login(self, email: str, password: str, device_id: str = DEFAULT_DEVICE_ID) -> SessionResult:
        """
        Verify credentials, then issue tokens. Raises AuthenticationError.

        The refresh-token row is written last, so a failed verification or
        issuance leaves no session behind.
        """
        user = await self._verifier.verify(email, password)
        return await self.start_session(user.id, device_id)

    async def start_session(self, user_id: str, device_id: str = DEFAULT_DEVICE_ID) -> SessionResult:
        """Issue tokens for an already-authenticated user (e.g. right after registration)."""
        access = self._issuer.issue(user_id)
        refresh = await self._store.create(user_id, device_id or DEFAULT_DEVICE_ID)
        return SessionResult(
            access_token=access.token,
            refresh_token=refresh,
            expiry_duration=self._issuer.ttl_seconds,
            user_id=user_id,
        )

    async def refresh(self, refresh_token: str) -> SessionResult:
        """Rotate the refresh token and issue a fresh access token. Raises RefreshError."""
        rotated = await self._store.rotate(refresh_token)
        access = self._issuer.issue(rotated.user_id)
        return SessionResult(
            access_token=access.token,
            refresh_token=rotated.token,
            expiry_duration=self._issuer.ttl_seconds,
            user_id=rotated.user_id,
        )

    async def logout(self, refresh_token: str) -> None:
        await self._store.revoke(refresh_token)
