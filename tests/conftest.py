import os

# Must be set before acquisition.core.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import httpx
import pytest_asyncio

from acquisition.core.db import build_engine, build_sessionmaker, get_db
from acquisition.main import app
from acquisition.models import Base  # noqa: F401  (imports every model so metadata is complete)

from fixtures_seed import (  # noqa: F401
    admin,
    buyer1,
    buyer2,
    make_listing,
    make_user,
    seller,
    stranger,
)


def _test_db_url(tmp_path) -> str:
    # Postgres when provided, otherwise a throwaway SQLite file per test
    return os.getenv("DATABASE_URL_TEST") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    engine = build_engine(_test_db_url(tmp_path))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine):
    """
    Sessions for seeding and assertions. Keep them short-lived
    (`async with session_factory() as s:`): on SQLite an open transaction
    holds the database write lock.
    """
    return build_sessionmaker(async_engine)


@pytest_asyncio.fixture
async def client(session_factory):
    """
    HTTP client where every request gets its own session on the test DB.
    """
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
