"""Service layer with business logic."""

from .article import ArticleService
from .articles_tag import ArticlesTagService
from .exceptions import RecordExistsError, RecordNotFoundError
from .tag import TagService, clean_tag_name, normalize_tag_name

__all__ = [
    "ArticleService",
    "TagService",
    "ArticlesTagService",
    "RecordNotFoundError",
    "RecordExistsError",
    "clean_tag_name",
    "normalize_tag_name",
]
