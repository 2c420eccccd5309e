"""Access-token issuance and verification (JWT, HS256 or RS256)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import Settings
from app.core.clock import Clock, utcnow
from app.core.exceptions import AuthenticationError

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class TokenConfig:
    """Signing material and lifetime, loaded once at startup and never mutated."""

    signing_key: str
    verification_key: str
    algorithm: str
    ttl: timedelta
    issuer: str

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenConfig:
        if settings.use_rs256:
            return cls(
                signing_key=settings.jwt_private_key.strip(),
                verification_key=settings.jwt_public_key.strip(),
                algorithm="RS256",
                ttl=timedelta(minutes=settings.access_token_expire_minutes),
                issuer=settings.jwt_issuer,
            )
        return cls(
            signing_key=settings.secret_key,
            verification_key=settings.secret_key,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
            issuer=settings.jwt_issuer,
        )


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenIssuer:
    def __init__(self, config: TokenConfig, clock: Clock = utcnow):
        self._config = config
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return int(self._config.ttl.total_seconds())

    def issue(self, user_id: str) -> IssuedToken:
        now = self._clock()
        expires_at = now + self._config.ttl
        payload = {
            "iss": self._config.issuer,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "type": ACCESS_TOKEN_TYPE,
            "jti": uuid.uuid4().hex,
        }
        result = jwt.encode(payload, self._config.signing_key, algorithm=self._config.algorithm)
        token = result if isinstance(result, str) else result.decode("utf-8")
        return IssuedToken(token=token, expires_at=expires_at)

    def decode(self, token: str) -> dict[str, Any]:
        """Check signature, issuer, type and expiry; return the claims."""
        try:
            # Expiry is checked below against the injected clock, not jose's own.
            payload = jwt.decode(
                token,
                self._config.verification_key,
                algorithms=[self._config.algorithm],
                issuer=self._config.issuer,
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN") from e
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise AuthenticationError("Invalid or expired token", code="INVALID_TOKEN")
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self._clock().timestamp():
            raise AuthenticationError("Invalid or expired token", code="TOKEN_EXPIRED")
        return payload

    def verify(self, token: str) -> str:
        """Return the user id the token was issued for."""
        payload = self.decode(token)
        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
        return str(user_id)
