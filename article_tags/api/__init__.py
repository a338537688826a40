"""API layer - FastAPI endpoints."""

from .articles import router as articles_router
from .articles_tags import router as articles_tags_router
from .tags import router as tags_router

__all__ = [
    "articles_router",
    "tags_router",
    "articles_tags_router",
]
