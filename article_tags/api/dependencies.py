"""
Dependencies for FastAPI endpoints.

Endpoints ask for a ready service instead of building one:

    async def create_article(service: ArticleService = Depends(get_article_service)):
        ...

get_db opens one session per request and commits it when the endpoint
returns, or rolls it back if it raised.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import AsyncSessionLocal
from ..services import ArticleService, ArticlesTagService, TagService

# ============================================================================
# API KEY AUTHENTICATION
# ============================================================================

api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,  # missing key is reported by verify_api_key
    description="API key, sent in the X-API-Key header",
)


async def verify_api_key(api_key: str | None = Depends(api_key_header)) -> str:
    """
    Reject requests without a valid X-API-Key header.

        curl -H "X-API-Key: your-secret-key" http://localhost:8000/api/v1/articles
    """
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is missing. Add header: X-API-Key: your-key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if api_key != settings.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


# ============================================================================
# DATABASE SESSION DEPENDENCY
# ============================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: commit on success, rollback on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_article_service(db: AsyncSession = Depends(get_db)) -> ArticleService:
    return ArticleService(db)


async def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db)


async def get_articles_tag_service(db: AsyncSession = Depends(get_db)) -> ArticlesTagService:
    return ArticlesTagService(db)
