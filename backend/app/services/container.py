"""Explicit wiring of the auth core, assembled once when the app is created."""

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import Settings
from app.core.clock import Clock, utcnow
from app.core.tokens import TokenConfig, TokenIssuer
from app.services.credentials import CredentialVerifier
from app.services.refresh_tokens import RefreshTokenStore
from app.services.sessions import SessionOrchestrator


@dataclass(frozen=True)
class Services:
    token_issuer: TokenIssuer
    refresh_tokens: RefreshTokenStore
    sessions: SessionOrchestrator


def build_services(
    settings: Settings,
    session_maker: async_sessionmaker[AsyncSession],
    clock: Clock = utcnow,
) -> Services:
    issuer = TokenIssuer(TokenConfig.from_settings(settings), clock=clock)
    store = RefreshTokenStore(
        session_maker,
        ttl=timedelta(days=settings.refresh_token_expire_days),
        clock=clock,
    )
    orchestrator = SessionOrchestrator(CredentialVerifier(session_maker), issuer, store)
    return Services(token_issuer=issuer, refresh_tokens=store, sessions=orchestrator)
