"""Article service with business logic."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..models import Article, Tag
from ..repositories import ArticleRepository, ArticlesTagRepository, TagRepository
from .exceptions import RecordNotFoundError
from .tag import clean_tag_name, normalize_tag_name

logger = get_logger(__name__)

TITLE_MAX_LENGTH = 255


class ArticleService:
    """
    Articles and the tags attached to them.

    Tags are referenced by name here; names are normalised and missing tags
    are created on the fly. Deleting an article removes its links to tags
    but never the tags themselves.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.article_repo = ArticleRepository(db)
        self.tag_repo = TagRepository(db)
        self.link_repo = ArticlesTagRepository(db)

    async def create_article(
        self,
        title: str,
        body: str | None = None,
        published: bool = False,
        tag_names: list[str] | None = None,
    ) -> Article:
        """
        Create an article, optionally tagged.

        Raises:
            ValueError: empty or too long title, invalid tag name
        """
        title = self._clean_title(title)

        article = await self.article_repo.create(
            Article(title=title, body=body, published=published)
        )

        if tag_names:
            await self._link_tags(article.id, await self._resolve_tags(tag_names))

        logger.info("Article created", extra={"article_id": article.id})
        return await self.get_article(article.id)

    async def get_article(self, article_id: int) -> Article:
        """
        Get an article with its tags.

        Raises:
            ValueError: article not found
        """
        article = await self.article_repo.get_by_id_with_tags(article_id)
        if not article:
            raise RecordNotFoundError(f"Article with id {article_id} not found")
        return article

    async def get_articles(
        self,
        skip: int = 0,
        limit: int = 100,
        tag: str | None = None,
        search: str | None = None,
        published: bool | None = None,
    ) -> list[Article]:
        tag_name = normalize_tag_name(tag) if tag else None
        return await self.article_repo.get_filtered(
            skip=skip, limit=limit, tag_name=tag_name, search=search, published=published
        )

    async def update_article(self, article_id: int, **fields: Any) -> Article:
        """
        Update title, body or published. None values are left untouched.

        Raises:
            ValueError: article not found or invalid title
        """
        await self.get_article(article_id)

        updates = {
            key: value
            for key, value in fields.items()
            if key in ("title", "body", "published") and value is not None
        }
        if "title" in updates:
            updates["title"] = self._clean_title(updates["title"])

        if updates:
            await self.article_repo.update(article_id, **updates)

        return await self.get_article(article_id)

    async def delete_article(self, article_id: int) -> bool:
        """
        Delete an article. Its articles_tags rows are removed with it.

        Raises:
            ValueError: article not found
        """
        await self.get_article(article_id)

        links = await self.link_repo.count_links(article_id=article_id)
        deleted = await self.article_repo.delete(article_id)
        await self.db.flush()

        logger.info("Article deleted", extra={"article_id": article_id, "links_removed": links})
        return deleted

    # ------------------------------------------------------------------
    # Tagging
    # ------------------------------------------------------------------

    async def get_article_tags(self, article_id: int) -> list[Tag]:
        article = await self.get_article(article_id)
        return list(article.tags)

    async def add_tags(self, article_id: int, tag_names: list[str]) -> Article:
        """
        Attach tags by name, creating missing ones. Tags already attached are skipped.

        Raises:
            ValueError: article not found or invalid tag name
        """
        await self.get_article(article_id)

        tags = await self._resolve_tags(tag_names)
        added = await self._link_tags(article_id, tags)

        logger.info("Article tagged", extra={"article_id": article_id, "tags_added": added})
        return await self.get_article(article_id)

    async def remove_tag(self, article_id: int, tag_name: str) -> Article:
        """
        Detach one tag by name. The tag itself is kept.

        Raises:
            ValueError: article not found, tag not found, or tag not on this article
        """
        await self.get_article(article_id)

        tag = await self.tag_repo.get_by_name(clean_tag_name(tag_name))
        if not tag:
            raise RecordNotFoundError(f"Tag '{tag_name}' not found")

        if not await self.link_repo.unlink(article_id, tag.id):
            raise RecordNotFoundError(f"Tag '{tag.name}' not found on article {article_id}")
        await self.db.flush()

        logger.info("Article untagged", extra={"article_id": article_id, "tag_id": tag.id})
        return await self.get_article(article_id)

    async def set_tags(self, article_id: int, tag_names: list[str]) -> Article:
        """
        Replace the tag set of an article. An empty list removes all tags.

        Raises:
            ValueError: article not found or invalid tag name
        """
        await self.get_article(article_id)

        wanted = await self._resolve_tags(tag_names)
        wanted_ids = {tag.id for tag in wanted}
        current_ids = await self.link_repo.get_tag_ids_for_article(article_id)

        for tag_id in current_ids - wanted_ids:
            await self.link_repo.unlink(article_id, tag_id)
        added = await self._link_tags(article_id, wanted, current_ids)
        await self.db.flush()

        logger.info(
            "Article tags replaced",
            extra={
                "article_id": article_id,
                "tags_added": added,
                "tags_removed": len(current_ids - wanted_ids),
            },
        )
        return await self.get_article(article_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resolve_tags(self, tag_names: list[str]) -> list[Tag]:
        names = [clean_tag_name(name) for name in tag_names]
        return await self.tag_repo.bulk_get_or_create(names)

    async def _link_tags(
        self, article_id: int, tags: list[Tag], current_ids: set[int] | None = None
    ) -> int:
        if current_ids is None:
            current_ids = await self.link_repo.get_tag_ids_for_article(article_id)

        added = 0
        for tag in tags:
            if tag.id not in current_ids:
                await self.link_repo.link(article_id, tag.id)
                added += 1
        return added

    def _clean_title(self, title: str) -> str:
        if not title or not title.strip():
            raise ValueError("Article title cannot be empty")
        title = title.strip()
        if len(title) > TITLE_MAX_LENGTH:
            raise ValueError(f"Article title cannot be longer than {TITLE_MAX_LENGTH} characters")
        return title
