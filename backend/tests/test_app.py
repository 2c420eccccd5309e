"""App factory: startup creates the injected database, security headers."""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import settings
from app.main import create_app


@pytest.mark.asyncio
async def test_startup_creates_tables_on_injected_database(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}", poolclass=NullPool)
    app = create_app(session_maker=async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    try:
        async with app.router.lifespan_context(app):
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda c: inspect(c).get_table_names())
    finally:
        await engine.dispose()
    assert {"users", "user_refresh_tokens", "categories", "posts", "audit_log"} <= set(tables)


@pytest.mark.asyncio
async def test_security_headers(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in resp.headers


@pytest.mark.asyncio
async def test_hsts_header_when_enabled(app):
    with patch.object(settings, "enable_hsts", True):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/health")
    assert resp.headers["Strict-Transport-Security"].startswith("max-age=")
