"""
Pytest fixtures.

- test_engine: SQLite in-memory database with foreign keys enforced, fresh per test
- test_db: async session on that database
- test_client: HTTP client for the API with get_db pointed at the test database
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from article_tags.api.dependencies import get_db
from article_tags.core.config import settings
from article_tags.core.database import create_engine_for_url, drop_db, init_db
from article_tags.main import app
from article_tags.models import Article, Tag

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """
    Async engine for an in-memory database.

    create_engine_for_url uses StaticPool (one shared connection, otherwise
    the in-memory database disappears) and turns on PRAGMA foreign_keys.
    """
    engine = create_engine_for_url(TEST_DATABASE_URL)

    await init_db(bind=engine)

    yield engine

    await drop_db(bind=engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine):
    """Session on the test database, rolled back after the test."""
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_client(test_engine):
    """
    HTTP client for /api/v1 with a valid API key.

    Paths are relative to the API prefix: test_client.get("/articles").
    """

    async def override_get_db():
        TestSessionLocal = async_sessionmaker(
            test_engine, class_=AsyncSession, expire_on_commit=False
        )
        async with TestSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test/api/v1",
        headers={"X-API-Key": settings.API_KEY},
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def article_and_tag(test_db):
    """One article and one tag, committed, not linked."""
    article = Article(title="Composite keys")
    tag = Tag(name="databases")
    test_db.add_all([article, tag])
    await test_db.commit()
    return article, tag
