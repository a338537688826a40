"""
API endpoints for the articles_tags join table.

A link is addressed by its composite key: /articles-tags/{article_id}/{tag_id}.
"""

from fastapi import APIRouter, Depends, Query, status

from ..services import ArticlesTagService
from .dependencies import get_articles_tag_service
from .errors import from_value_error
from .schemas import (
    ArticlesTagCreate,
    ArticlesTagListItem,
    ArticlesTagPage,
    ArticlesTagResponse,
    ErrorResponse,
)

router = APIRouter(prefix="/articles-tags", tags=["articles-tags"])

LINK_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Link not found"}}


@router.get("", response_model=ArticlesTagPage, summary="List links")
async def get_links(
    article_id: int | None = Query(None, description="Only links of this article"),
    tag_id: int | None = Query(None, description="Only links of this tag"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: ArticlesTagService = Depends(get_articles_tag_service),
) -> ArticlesTagPage:
    """
    Links ordered by (article_id, tag_id), each with its article and tag.

    ```
    GET /articles-tags?tag_id=3&limit=20
    ```
    """
    links = await service.list_links(article_id=article_id, tag_id=tag_id, skip=skip, limit=limit)
    total = await service.count_links(article_id=article_id, tag_id=tag_id)
    return ArticlesTagPage(
        items=[ArticlesTagResponse.model_validate(link) for link in links],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/list",
    response_model=list[ArticlesTagListItem],
    summary="Links as key / display value pairs",
)
async def get_link_list(
    service: ArticlesTagService = Depends(get_articles_tag_service),
) -> list[ArticlesTagListItem]:
    listing = await service.get_link_list()
    return [
        ArticlesTagListItem(article_id=article_id, tag_id=tag_id, display_value=display)
        for (article_id, tag_id), display in listing.items()
    ]


@router.post(
    "",
    response_model=ArticlesTagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Tag an article",
    responses={
        404: {"model": ErrorResponse, "description": "Article or tag not found"},
        409: {"model": ErrorResponse, "description": "Article already has this tag"},
    },
)
async def create_link(
    data: ArticlesTagCreate, service: ArticlesTagService = Depends(get_articles_tag_service)
) -> ArticlesTagResponse:
    """
    ```json
    {"article_id": 1, "tag_id": 3}
    ```
    """
    try:
        link = await service.tag_article(data.article_id, data.tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticlesTagResponse.model_validate(link)


@router.get(
    "/{article_id}/{tag_id}",
    response_model=ArticlesTagResponse,
    summary="Get a link",
    responses=LINK_NOT_FOUND,
)
async def get_link(
    article_id: int,
    tag_id: int,
    service: ArticlesTagService = Depends(get_articles_tag_service),
) -> ArticlesTagResponse:
    try:
        link = await service.get_link(article_id, tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return ArticlesTagResponse.model_validate(link)


@router.delete(
    "/{article_id}/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Untag an article",
    description="Removes the link only; the article and the tag are kept.",
    responses=LINK_NOT_FOUND,
)
async def delete_link(
    article_id: int,
    tag_id: int,
    service: ArticlesTagService = Depends(get_articles_tag_service),
):
    try:
        await service.untag_article(article_id, tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
