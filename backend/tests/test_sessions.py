"""Session orchestrator: login, refresh rotation, logout, and failure atomicity."""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from app.core.exceptions import AuthenticationError, RefreshError
from app.models.refresh_token import RefreshToken
from app.services.sessions import SessionResult


async def _session_count(session_maker) -> int:
    async with session_maker() as session:
        return (await session.execute(select(func.count()).select_from(RefreshToken))).scalar()


@pytest.mark.asyncio
async def test_login_access_token_decodes_to_user(services, make_user):
    user = await make_user("author@test.com", "s3cret-pass")
    result = await services.sessions.login("author@test.com", "s3cret-pass")
    assert isinstance(result, SessionResult)
    assert services.token_issuer.verify(result.access_token) == user.id
    assert result.refresh_token
    assert result.expiry_duration == services.token_issuer.ttl_seconds
    assert result.user_id == user.id


@pytest.mark.asyncio
async def test_login_failures_look_the_same(services, make_user):
    await make_user("author@test.com", "s3cret-pass")
    with pytest.raises(AuthenticationError) as wrong_password:
        await services.sessions.login("author@test.com", "wrong-pass")
    with pytest.raises(AuthenticationError) as unknown_email:
        await services.sessions.login("ghost@test.com", "s3cret-pass")
    assert str(wrong_password.value) == str(unknown_email.value)
    assert wrong_password.value.code == unknown_email.value.code


@pytest.mark.asyncio
async def test_failed_login_persists_no_session(services, session_maker, make_user):
    await make_user("author@test.com", "s3cret-pass")
    with pytest.raises(AuthenticationError):
        await services.sessions.login("author@test.com", "wrong-pass")
    assert await _session_count(session_maker) == 0


@pytest.mark.asyncio
async def test_issuance_failure_persists_no_session(services, session_maker, make_user):
    await make_user("author@test.com", "s3cret-pass")
    with patch.object(services.token_issuer, "issue", side_effect=RuntimeError("signing key unavailable")):
        with pytest.raises(RuntimeError):
            await services.sessions.login("author@test.com", "s3cret-pass")
    assert await _session_count(session_maker) == 0


@pytest.mark.asyncio
async def test_refresh_twice_with_same_token(services, make_user):
    user = await make_user()
    login = await services.sessions.login("test@test.com", "password123")
    first = await services.sessions.refresh(login.refresh_token)
    assert first.refresh_token != login.refresh_token
    assert services.token_issuer.verify(first.access_token) == user.id
    with pytest.raises(RefreshError):
        await services.sessions.refresh(login.refresh_token)


@pytest.mark.asyncio
async def test_refresh_after_expiry_fails(services, clock, make_user):
    await make_user()
    login = await services.sessions.login("test@test.com", "password123")
    clock.advance(days=8)
    with pytest.raises(RefreshError):
        await services.sessions.refresh(login.refresh_token)


@pytest.mark.asyncio
async def test_logout_then_refresh_fails_and_logout_is_idempotent(services, make_user):
    await make_user()
    login = await services.sessions.login("test@test.com", "password123")
    await services.sessions.logout(login.refresh_token)
    await services.sessions.logout(login.refresh_token)
    with pytest.raises(RefreshError):
        await services.sessions.refresh(login.refresh_token)


@pytest.mark.asyncio
async def test_login_again_on_same_device_supersedes_previous_session(services, make_user):
    await make_user()
    old = await services.sessions.login("test@test.com", "password123", device_id="tablet")
    new = await services.sessions.login("test@test.com", "password123", device_id="tablet")
    with pytest.raises(RefreshError):
        await services.sessions.refresh(old.refresh_token)
    assert (await services.sessions.refresh(new.refresh_token)).refresh_token


@pytest.mark.asyncio
async def test_racing_refresh_calls_exactly_one_succeeds(services, make_user):
    await make_user()
    login = await services.sessions.login("test@test.com", "password123")
    results = await asyncio.gather(
        services.sessions.refresh(login.refresh_token),
        services.sessions.refresh(login.refresh_token),
        return_exceptions=True,
    )
    assert sum(isinstance(r, SessionResult) for r in results) == 1
    assert sum(isinstance(r, RefreshError) for r in results) == 1
