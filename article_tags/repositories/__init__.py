"""Repository layer for data access."""

from .article import ArticleRepository
from .articles_tag import ArticlesTagRepository
from .base import BaseRepository
from .tag import TagRepository

__all__ = [
    "BaseRepository",
    "ArticleRepository",
    "TagRepository",
    "ArticlesTagRepository",
]
