"""
Pydantic schemas for the API.

Request bodies are validated here; responses are built from ORM objects
with from_attributes=True, so the database models never leak directly.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# TAG SCHEMAS
# ============================================================================


class TagResponse(BaseModel):
    """
    Example:
    {"id": 1, "name": "python", "created_at": "2026-01-18T12:00:00"}
    """

    id: int
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TagCreate(BaseModel):
    """
    POST /tags

    {"name": "Python Programming"} is stored as "python-programming".
    """

    name: str = Field(..., min_length=1, max_length=50, description="Tag name")


class TagUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class TagWithUsage(TagResponse):
    """GET /tags/popular"""

    usage_count: int = Field(..., description="Number of articles carrying this tag")


class TagStatistics(BaseModel):
    tag_id: int
    tag_name: str
    total_articles: int
    published_articles: int
    draft_articles: int


# ============================================================================
# ARTICLE SCHEMAS
# ============================================================================


class ArticleBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Article title")
    body: str | None = Field(None, description="Article body")
    published: bool = Field(default=False)


class ArticleCreate(ArticleBase):
    """
    POST /articles

    {
        "title": "Async SQLAlchemy in practice",
        "body": "...",
        "tag_names": ["python", "sqlalchemy"]
    }
    """

    tag_names: list[str] = Field(default_factory=list, description="Tags to attach")


class ArticleUpdate(BaseModel):
    """PUT /articles/{id}. Every field is optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    body: str | None = None
    published: bool | None = None


class ArticleResponse(ArticleBase):
    id: int
    created_at: datetime
    updated_at: datetime
    tags: list[TagResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ArticleSummary(BaseModel):
    """Article without tags, nested inside link responses."""

    id: int
    title: str
    published: bool

    model_config = ConfigDict(from_attributes=True)


class ArticleTagNames(BaseModel):
    """
    POST /articles/{id}/tags adds, PUT /articles/{id}/tags replaces.

    {"tag_names": ["python", "fastapi"]}
    """

    tag_names: list[str] = Field(..., description="Tag names")


# ============================================================================
# ARTICLES_TAGS SCHEMAS
# ============================================================================


class ArticlesTagCreate(BaseModel):
    """
    POST /articles-tags

    {"article_id": 1, "tag_id": 3}
    """

    article_id: int = Field(..., gt=0)
    tag_id: int = Field(..., gt=0)


class ArticlesTagResponse(BaseModel):
    """
    One link row with both sides resolved.

    {
        "article_id": 1,
        "tag_id": 3,
        "display_value": 1,
        "article": {"id": 1, "title": "...", "published": true},
        "tag": {"id": 3, "name": "python", "created_at": "..."}
    }
    """

    article_id: int
    tag_id: int
    display_value: int
    article: ArticleSummary
    tag: TagResponse

    model_config = ConfigDict(from_attributes=True)


class ArticlesTagListItem(BaseModel):
    """Entry of GET /articles-tags/list: primary key plus display value."""

    article_id: int
    tag_id: int
    display_value: int


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class ErrorDetail(BaseModel):
    """
    {"field": "title", "message": "String should have at least 1 character"}
    """

    field: str = Field(..., description="Field name")
    message: str = Field(..., description="What is wrong with it")


class ErrorBody(BaseModel):
    """
    Codes:
    - VALIDATION_ERROR
    - NOT_FOUND
    - ALREADY_EXISTS
    - INTEGRITY_ERROR
    - RATE_LIMIT_EXCEEDED
    - INTERNAL_ERROR
    """

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    details: list[ErrorDetail] | None = Field(default=None, description="Per-field errors")


class ErrorResponse(BaseModel):
    """
    Envelope shared by every error response.

    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Article with id 999 not found",
            "details": null
        }
    }
    """

    error: ErrorBody


class PaginatedResponse(BaseModel):
    """List page with the total row count."""

    items: list
    total: int
    skip: int
    limit: int


class ArticlesTagPage(PaginatedResponse):
    items: list[ArticlesTagResponse]
