"""Tag service with business logic."""

import re

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import Tag
from ..repositories import ArticleRepository, ArticlesTagRepository, TagRepository
from .exceptions import RecordExistsError, RecordNotFoundError

logger = get_logger(__name__)


def normalize_tag_name(name: str) -> str:
    """
    Normalise a tag name.

    - lowercase
    - spaces become dashes
    - anything other than a-z, 0-9, dash and underscore is dropped
    - runs of dashes collapse, leading/trailing dashes are stripped

    Examples:
        "Python Programming" -> "python-programming"
        "Web  Dev"           -> "web-dev"
        "C++"                -> "c"
        "Test_Tag"           -> "test_tag"
    """
    normalized = name.lower().replace(" ", "-")
    normalized = re.sub(r"[^a-z0-9\-_]", "", normalized)
    normalized = re.sub(r"-+", "-", normalized)
    return normalized.strip("-")


def clean_tag_name(name: str) -> str:
    """Normalise a user-supplied name, rejecting names that end up empty."""
    if not name or not name.strip():
        raise ValueError("Tag name cannot be empty")

    normalized = normalize_tag_name(name)
    if not normalized:
        raise ValueError(f"Tag name '{name}' is empty after normalization")
    if len(normalized) > 50:
        raise ValueError("Tag name cannot be longer than 50 characters")
    return normalized


class TagService:
    """
    Business rules for tags.

    Names are unique after normalisation. A tag still linked to articles is
    only deleted when asked to with force=True; its links go with it.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tag_repo = TagRepository(db)
        self.article_repo = ArticleRepository(db)
        self.link_repo = ArticlesTagRepository(db)

    async def create_tag(self, name: str) -> Tag:
        """
        Create a tag.

        Raises:
            ValueError: empty name or a tag with the same normalised name exists
        """
        normalized_name = clean_tag_name(name)

        existing = await self.tag_repo.get_by_name(normalized_name)
        if existing:
            raise RecordExistsError(f"Tag '{normalized_name}' already exists")

        tag = await self.tag_repo.create(Tag(name=normalized_name))
        logger.info("Tag created", extra={"tag_id": tag.id, "tag_name": tag.name})
        return tag

    async def get_or_create_tag(self, name: str) -> Tag:
        """Return the tag with this (normalised) name, creating it if needed."""
        (tag,) = await self.tag_repo.bulk_get_or_create([clean_tag_name(name)])
        return tag

    async def get_tag(self, tag_id: int) -> Tag:
        """
        Raises:
            ValueError: tag not found
        """
        tag = await self.tag_repo.get_by_id(tag_id)
        if not tag:
            raise RecordNotFoundError(f"Tag with id {tag_id} not found")
        return tag

    async def get_tag_with_articles(self, tag_id: int) -> Tag:
        tag = await self.tag_repo.get_by_id_with_articles(tag_id)
        if not tag:
            raise RecordNotFoundError(f"Tag with id {tag_id} not found")
        return tag

    async def get_tag_by_name(self, name: str) -> Tag | None:
        return await self.tag_repo.get_by_name(normalize_tag_name(name))

    async def get_all_tags(self, skip: int = 0, limit: int = 100) -> list[Tag]:
        return await self.tag_repo.get_all(skip=skip, limit=limit)

    async def get_popular_tags(self, limit: int = 10) -> list[tuple[Tag, int]]:
        """[(Tag('python'), 15), (Tag('backend'), 10), ...]"""
        return await self.tag_repo.get_popular_tags(limit)

    async def get_unused_tags(self) -> list[Tag]:
        return await self.tag_repo.get_unused_tags()

    async def search_tags(self, query: str) -> list[Tag]:
        if not query or not query.strip():
            return []
        return await self.tag_repo.search_tags(query.strip())

    async def rename_tag(self, tag_id: int, new_name: str) -> Tag:
        """
        Rename a tag. Every article carrying it sees the new name.

        Raises:
            ValueError: tag not found, empty name or name taken
        """
        tag = await self.get_tag(tag_id)
        normalized_name = clean_tag_name(new_name)

        if normalized_name != tag.name:
            existing = await self.tag_repo.get_by_name(normalized_name)
            if existing:
                raise RecordExistsError(f"Tag '{normalized_name}' already exists")

            old_name = tag.name
            tag = await self.tag_repo.update(tag_id, name=normalized_name)
            logger.info(
                "Tag renamed",
                extra={"tag_id": tag_id, "old_name": old_name, "new_name": normalized_name},
            )

        return tag

    async def merge_tags(self, source_tag_id: int, target_tag_id: int) -> Tag:
        """
        Move every article from source to target, then delete source.

        An article that already carries both tags keeps a single link to target.

        Raises:
            ValueError: same tag twice or either tag not found
        """
        if source_tag_id == target_tag_id:
            raise ValueError("Cannot merge tag with itself")

        source_tag = await self.get_tag(source_tag_id)
        target_tag = await self.get_tag(target_tag_id)

        moved = 0
        for link in await self.link_repo.get_by_tag(source_tag_id):
            if not await self.link_repo.exists((link.article_id, target_tag_id)):
                await self.link_repo.link(link.article_id, target_tag_id)
                moved += 1

        # Remaining source links go with the tag (ON DELETE CASCADE)
        await self.tag_repo.delete(source_tag_id)
        await self.db.flush()

        logger.info(
            "Tags merged",
            extra={
                "source_tag": source_tag.name,
                "target_tag": target_tag.name,
                "articles_moved": moved,
            },
        )
        return target_tag

    async def delete_tag(self, tag_id: int, force: bool = False) -> bool:
        """
        Delete a tag.

        Raises:
            ValueError: tag not found, or still used by articles and force is False
        """
        tag = await self.get_tag(tag_id)

        usage = await self.link_repo.count_links(tag_id=tag_id)
        if usage and not force:
            raise ValueError(
                f"Cannot delete tag '{tag.name}' used in {usage} articles. "
                "Use force=True to delete anyway."
            )

        deleted = await self.tag_repo.delete(tag_id)
        await self.db.flush()

        logger.info(
            "Tag deleted",
            extra={"tag_id": tag_id, "tag_name": tag.name, "links_removed": usage},
        )
        return deleted

    async def cleanup_unused_tags(self) -> int:
        """Delete every tag with no articles. Returns how many were deleted."""
        unused_tags = await self.get_unused_tags()

        for tag in unused_tags:
            await self.tag_repo.delete(tag.id)
        await self.db.flush()

        if unused_tags:
            logger.info("Unused tags removed", extra={"count": len(unused_tags)})
        return len(unused_tags)

    async def get_tag_statistics(self, tag_id: int) -> dict:
        """
        Example:
            {
                "tag_id": 1,
                "tag_name": "python",
                "total_articles": 15,
                "published_articles": 10,
                "draft_articles": 5
            }
        """
        tag = await self.get_tag(tag_id)
        articles = await self.article_repo.get_by_tag(tag_id)

        published = sum(1 for a in articles if a.published)

        return {
            "tag_id": tag_id,
            "tag_name": tag.name,
            "total_articles": len(articles),
            "published_articles": published,
            "draft_articles": len(articles) - published,
        }
