"""Service for direct work with articles_tags link rows."""

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import ArticlesTag
from ..repositories import ArticleRepository, ArticlesTagRepository, TagRepository
from .exceptions import RecordExistsError, RecordNotFoundError

logger = get_logger(__name__)


class ArticlesTagService:
    """
    Create, read and remove links by (article_id, tag_id).

    Rules:
    1. Both the article and the tag must exist before they can be linked
    2. A pair can be linked only once
    3. Removing a link never touches the article or the tag
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.link_repo = ArticlesTagRepository(db)
        self.article_repo = ArticleRepository(db)
        self.tag_repo = TagRepository(db)

    async def tag_article(self, article_id: int, tag_id: int) -> ArticlesTag:
        """
        Link an article to a tag.

        Raises:
            ValueError: article or tag not found, or the pair is already linked
        """
        if not await self.article_repo.exists(article_id):
            raise RecordNotFoundError(f"Article with id {article_id} not found")
        if not await self.tag_repo.exists(tag_id):
            raise RecordNotFoundError(f"Tag with id {tag_id} not found")

        if await self.link_repo.exists((article_id, tag_id)):
            raise RecordExistsError(f"Article {article_id} is already tagged with tag {tag_id}")

        await self.link_repo.link(article_id, tag_id)
        logger.info("Link created", extra={"article_id": article_id, "tag_id": tag_id})
        return await self.get_link(article_id, tag_id)

    async def untag_article(self, article_id: int, tag_id: int) -> None:
        """
        Raises:
            RecordNotFoundError: no such link
        """
        if not await self.link_repo.unlink(article_id, tag_id):
            raise RecordNotFoundError(
                f"Link between article {article_id} and tag {tag_id} not found"
            )
        await self.db.flush()
        logger.info("Link removed", extra={"article_id": article_id, "tag_id": tag_id})

    async def get_link(self, article_id: int, tag_id: int) -> ArticlesTag:
        """
        Get a link with its article and tag loaded.

        Raises:
            RecordNotFoundError: no such link
        """
        link = await self.link_repo.get(article_id, tag_id)
        if not link:
            raise RecordNotFoundError(
                f"Link between article {article_id} and tag {tag_id} not found"
            )
        return link

    async def list_links(
        self,
        article_id: int | None = None,
        tag_id: int | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ArticlesTag]:
        return await self.link_repo.list_links(
            article_id=article_id, tag_id=tag_id, skip=skip, limit=limit
        )

    async def count_links(self, article_id: int | None = None, tag_id: int | None = None) -> int:
        return await self.link_repo.count_links(article_id=article_id, tag_id=tag_id)

    async def get_link_list(self) -> dict[tuple[int, int], int]:
        """{(article_id, tag_id): article_id} keyed by the composite primary key."""
        return await self.link_repo.find_list()
