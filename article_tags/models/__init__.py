"""SQLAlchemy models for Article Tags."""

from .article import Article
from .articles_tag import ArticlesTag
from .base import Base, TimestampMixin
from .tag import Tag

__all__ = [
    "Base",
    "TimestampMixin",
    "Article",
    "Tag",
    "ArticlesTag",
]
