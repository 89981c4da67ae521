"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session. Tests are skipped when PostgreSQL is unreachable.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.at_common.database import async_session_factory, engine
from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def database() -> None:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM auctions LIMIT 1"))
    except (SQLAlchemyError, OSError) as exc:
        pytest.skip(f"PostgreSQL with migrations not available: {exc}")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(database: None) -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client, keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def seed_profile(database: None):  # type: ignore[no-untyped-def]
    """Return an async helper that upserts a profile row."""

    async def _seed(profile_id: str, role: str, email: str) -> None:
        async with async_session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO profiles (id, role, email)
                    VALUES (CAST(:id AS UUID), :role, :email)
                    ON CONFLICT (id) DO UPDATE SET role = EXCLUDED.role
                """),
                {"id": profile_id, "role": role, "email": email},
            )

    return _seed
