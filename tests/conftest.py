"""Shared pytest fixtures for the wellbeing analytics test suite.

Provides:
- db_engine: on-disk SQLite async engine (per test) with all tables
- session_factory: sessionmaker bound to db_engine, as the stores expect
- db_session: a session for arranging test data (commit to make it visible)
- settings: test Settings (no summary service, demo mode off)
- client: AsyncClient with dependency overrides for DB-backed testing

Stores open one session per call, so tests use a file-backed database that
every session sees, rather than a single in-memory connection.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from wellbeing.config.settings import Settings, get_settings
from wellbeing.db.session import Base, get_session_factory
import wellbeing.db.tables  # noqa: F401  register ORM tables on Base.metadata


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine(tmp_path):
    """Create a file-backed SQLite async engine with all tables."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'wellbeing.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        SUMMARY_SERVICE_URL="",
        DEMO_MODE=False,
        TIER_OVERRIDE=None,
        STORE_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
async def client(session_factory, settings):
    """AsyncClient with the session factory and settings overridden."""
    from wellbeing.api.main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
