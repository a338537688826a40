"""Database connection and session management."""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from .config import settings


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    Turn on foreign key enforcement for every new SQLite connection.

    SQLite ignores REFERENCES clauses unless PRAGMA foreign_keys is set per
    connection, so without this a link row could point at a missing article.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine_for_url(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pool settings suited to the backend."""
    if url.startswith("sqlite"):
        # StaticPool keeps a single connection, required for in-memory SQLite
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_async_engine(url, echo=echo, poolclass=NullPool)


engine = create_engine_for_url(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session that is committed on success and rolled back on error.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables."""
    from ..models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """Drop all tables (use with caution!)."""
    from ..models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
