"""
API endpoints for tags.

Names are normalised on the way in (lowercase, spaces -> dashes).
"""

from fastapi import APIRouter, Depends, Query, status

from ..services import TagService
from .dependencies import get_tag_service
from .errors import from_value_error
from .schemas import (
    ArticleSummary,
    ErrorResponse,
    TagCreate,
    TagResponse,
    TagStatistics,
    TagUpdate,
    TagWithUsage,
)

router = APIRouter(prefix="/tags", tags=["tags"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Tag not found"}}


# ============================================================================
# COLLECTION
# ============================================================================


@router.get("", response_model=list[TagResponse], summary="List tags")
async def get_tags(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    tags = await service.get_all_tags(skip=skip, limit=limit)
    return [TagResponse.model_validate(t) for t in tags]


@router.get(
    "/popular",
    response_model=list[TagWithUsage],
    summary="Most used tags",
    description="Tags with the number of articles carrying them, most used first.",
)
async def get_popular_tags(
    limit: int = Query(10, ge=1, le=100, description="How many tags"),
    service: TagService = Depends(get_tag_service),
) -> list[TagWithUsage]:
    """
    ```json
    [
        {"id": 1, "name": "python", "usage_count": 15, "created_at": "..."},
        {"id": 2, "name": "backend", "usage_count": 12, "created_at": "..."}
    ]
    ```
    """
    tags_with_usage = await service.get_popular_tags(limit)
    return [
        TagWithUsage(id=tag.id, name=tag.name, created_at=tag.created_at, usage_count=count)
        for tag, count in tags_with_usage
    ]


@router.get("/unused", response_model=list[TagResponse], summary="Tags without articles")
async def get_unused_tags(service: TagService = Depends(get_tag_service)) -> list[TagResponse]:
    tags = await service.get_unused_tags()
    return [TagResponse.model_validate(t) for t in tags]


@router.get("/search", response_model=list[TagResponse], summary="Search tags by name")
async def search_tags(
    q: str = Query(..., min_length=1, description="Part of the tag name"),
    service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    tags = await service.search_tags(q)
    return [TagResponse.model_validate(t) for t in tags]


@router.post("/cleanup", summary="Delete every tag without articles")
async def cleanup_unused_tags(service: TagService = Depends(get_tag_service)):
    """
    ```json
    {"deleted_count": 5}
    ```
    """
    count = await service.cleanup_unused_tags()
    return {"deleted_count": count}


@router.post(
    "",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tag",
    description="""
    "Python Programming" is stored as "python-programming", "C++" as "c".
    """,
    responses={409: {"model": ErrorResponse, "description": "Tag already exists"}},
)
async def create_tag(data: TagCreate, service: TagService = Depends(get_tag_service)) -> TagResponse:
    try:
        tag = await service.create_tag(data.name)
    except ValueError as e:
        raise from_value_error(e) from e
    return TagResponse.model_validate(tag)


# ============================================================================
# SINGLE TAG
# ============================================================================


@router.get("/{tag_id}", response_model=TagResponse, summary="Get a tag", responses=NOT_FOUND)
async def get_tag(tag_id: int, service: TagService = Depends(get_tag_service)) -> TagResponse:
    try:
        tag = await service.get_tag(tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return TagResponse.model_validate(tag)


@router.get(
    "/{tag_id}/articles",
    response_model=list[ArticleSummary],
    summary="Articles carrying a tag",
    responses=NOT_FOUND,
)
async def get_tag_articles(
    tag_id: int, service: TagService = Depends(get_tag_service)
) -> list[ArticleSummary]:
    try:
        tag = await service.get_tag_with_articles(tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return [ArticleSummary.model_validate(a) for a in tag.articles]


@router.put(
    "/{tag_id}",
    response_model=TagResponse,
    summary="Rename a tag",
    description="Every article carrying the tag sees the new name.",
    responses={
        **NOT_FOUND,
        409: {"model": ErrorResponse, "description": "New name already taken"},
    },
)
async def rename_tag(
    tag_id: int, data: TagUpdate, service: TagService = Depends(get_tag_service)
) -> TagResponse:
    try:
        tag = await service.rename_tag(tag_id, data.name)
    except ValueError as e:
        raise from_value_error(e) from e
    return TagResponse.model_validate(tag)


@router.delete(
    "/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a tag",
    description="""
    A tag still used by articles is only deleted with force=true,
    which also removes its links to those articles.
    """,
    responses={
        **NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Tag is used by articles"},
    },
)
async def delete_tag(
    tag_id: int,
    force: bool = Query(False, description="Delete even if articles use it"),
    service: TagService = Depends(get_tag_service),
):
    try:
        await service.delete_tag(tag_id, force=force)
    except ValueError as e:
        raise from_value_error(e) from e


@router.post(
    "/{source_tag_id}/merge/{target_tag_id}",
    response_model=TagResponse,
    summary="Merge two tags",
    description="Articles tagged with source get target; source is deleted.",
    responses={
        **NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Source and target are the same tag"},
    },
)
async def merge_tags(
    source_tag_id: int, target_tag_id: int, service: TagService = Depends(get_tag_service)
) -> TagResponse:
    try:
        tag = await service.merge_tags(source_tag_id, target_tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return TagResponse.model_validate(tag)


@router.get(
    "/{tag_id}/stats", response_model=TagStatistics, summary="Tag statistics", responses=NOT_FOUND
)
async def get_tag_statistics(
    tag_id: int, service: TagService = Depends(get_tag_service)
) -> TagStatistics:
    """
    ```json
    {
        "tag_id": 1,
        "tag_name": "python",
        "total_articles": 15,
        "published_articles": 10,
        "draft_articles": 5
    }
    ```
    """
    try:
        stats = await service.get_tag_statistics(tag_id)
    except ValueError as e:
        raise from_value_error(e) from e
    return TagStatistics(**stats)
