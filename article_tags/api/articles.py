"""
API endpoints for articles and the tags attached to them.

Tags are addressed by name here; missing tags are created on the fly.
"""

from fastapi import APIRouter, Depends, Query, status

from ..services import ArticleService
from .dependencies import get_article_service
from .errors import from_value_error
from .schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleTagNames,
    ArticleUpdate,
    ErrorResponse,
    TagResponse,
)

router = APIRouter(prefix="/articles", tags=["articles"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Article not found"}}


# ============================================================================
# LIST / CREATE
# ============================================================================


@router.get("", response_model=list[ArticleResponse], summary="List articles")
async def get_articles(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    tag: str | None = Query(None, description="Only articles carrying this tag"),
    search: str | None = Query(None, description="Case-insensitive title search"),
    published: bool | None = Query(None),
    service: ArticleService = Depends(get_article_service),
) -> list[ArticleResponse]:
    """
    ```
    GET /articles?tag=python&published=true&skip=0&limit=20
    ```
    """
    articles = await service.get_articles(
        skip=skip, limit=limit, tag=tag, search=search, published=published
    )
    return [ArticleResponse.model_validate(a) for a in articles]


@router.post(
    "",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an article",
    responses={400: {"model": ErrorResponse, "description": "Invalid title or tag name"}},
)
async def create_article(
    data: ArticleCreate, service: ArticleService = Depends(get_article_service)
) -> ArticleResponse:
    """
    ```json
    {"title": "Async SQLAlchemy", "body": "...", "tag_names": ["Python", "ORM"]}
    ```
    """
    try:
        article = await service.create_article(
            title=data.title, body=data.body, published=data.published, tag_names=data.tag_names
        )
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticleResponse.model_validate(article)


# ============================================================================
# SINGLE ARTICLE
# ============================================================================


@router.get(
    "/{article_id}", response_model=ArticleResponse, summary="Get an article", responses=NOT_FOUND
)
async def get_article(
    article_id: int, service: ArticleService = Depends(get_article_service)
) -> ArticleResponse:
    try:
        article = await service.get_article(article_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticleResponse.model_validate(article)


@router.put(
    "/{article_id}",
    response_model=ArticleResponse,
    summary="Update an article",
    responses=NOT_FOUND,
)
async def update_article(
    article_id: int, data: ArticleUpdate, service: ArticleService = Depends(get_article_service)
) -> ArticleResponse:
    """Partial update: omitted fields keep their value."""
    try:
        article = await service.update_article(article_id, **data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticleResponse.model_validate(article)


@router.delete(
    "/{article_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an article",
    description="Deletes the article and its links to tags. The tags are kept.",
    responses=NOT_FOUND,
)
async def delete_article(article_id: int, service: ArticleService = Depends(get_article_service)):
    try:
        await service.delete_article(article_id)
    except ValueError as e:
        raise from_value_error(e) from e


# ============================================================================
# ARTICLE TAGS
# ============================================================================


@router.get(
    "/{article_id}/tags",
    response_model=list[TagResponse],
    summary="Tags of an article",
    responses=NOT_FOUND,
)
async def get_article_tags(
    article_id: int, service: ArticleService = Depends(get_article_service)
) -> list[TagResponse]:
    try:
        tags = await service.get_article_tags(article_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return [TagResponse.model_validate(t) for t in tags]


@router.post(
    "/{article_id}/tags",
    response_model=ArticleResponse,
    summary="Add tags to an article",
    responses=NOT_FOUND,
)
async def add_article_tags(
    article_id: int, data: ArticleTagNames, service: ArticleService = Depends(get_article_service)
) -> ArticleResponse:
    """
    Tags the article already has are skipped.

    ```json
    {"tag_names": ["python", "fastapi"]}
    ```
    """
    try:
        article = await service.add_tags(article_id, data.tag_names)
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticleResponse.model_validate(article)


@router.put(
    "/{article_id}/tags",
    response_model=ArticleResponse,
    summary="Replace the tags of an article",
    responses=NOT_FOUND,
)
async def set_article_tags(
    article_id: int, data: ArticleTagNames, service: ArticleService = Depends(get_article_service)
) -> ArticleResponse:
    """An empty list removes every tag from the article."""
    try:
        article = await service.set_tags(article_id, data.tag_names)
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticleResponse.model_validate(article)


@router.delete(
    "/{article_id}/tags/{tag_name}",
    response_model=ArticleResponse,
    summary="Remove a tag from an article",
    responses={404: {"model": ErrorResponse, "description": "Article, tag or link not found"}},
)
async def remove_article_tag(
    article_id: int, tag_name: str, service: ArticleService = Depends(get_article_service)
) -> ArticleResponse:
    try:
        article = await service.remove_tag(article_id, tag_name)
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticleResponse.model_validate(article)
