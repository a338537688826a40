"""Tag repository with specific queries."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Article, ArticlesTag, Tag
from .base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """Tag lookups, usage counting and bulk get-or-create."""

    def __init__(self, db: AsyncSession):
        super().__init__(Tag, db)

    async def get_by_name(self, name: str) -> Tag | None:
        """
        SQL:
            SELECT * FROM tags WHERE name = {name};
        """
        result = await self.db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def get_by_id_with_articles(self, id: int) -> Tag | None:
        """Get a tag with its articles loaded."""
        result = await self.db.execute(
            select(Tag)
            .options(selectinload(Tag.articles))
            .where(Tag.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def bulk_get_or_create(self, tag_names: list[str]) -> list[Tag]:
        """
        Get or create many tags with one SELECT and one flush.

        Returned in the order of first appearance in `tag_names`.
        """
        unique_names = list(dict.fromkeys(tag_names))
        if not unique_names:
            return []

        result = await self.db.execute(select(Tag).where(Tag.name.in_(unique_names)))
        by_name = {tag.name: tag for tag in result.scalars().all()}

        new_tags = []
        for name in unique_names:
            if name not in by_name:
                tag = Tag(name=name)
                self.db.add(tag)
                by_name[name] = tag
                new_tags.append(tag)

        if new_tags:
            await self.db.flush()
            for tag in new_tags:
                await self.db.refresh(tag)

        return [by_name[name] for name in unique_names]

    async def get_popular_tags(self, limit: int = 10) -> list[tuple[Tag, int]]:
        """
        Most used tags with the number of articles carrying them.

        Links are counted only when their article still exists.

        SQL:
            SELECT tags.*, COALESCE(usage.n, 0)
            FROM tags
            LEFT JOIN (
                SELECT articles_tags.tag_id, COUNT(*) AS n
                FROM articles_tags
                JOIN articles ON articles.id = articles_tags.article_id
                GROUP BY articles_tags.tag_id
            ) usage ON usage.tag_id = tags.id
            ORDER BY 2 DESC, tags.name
            LIMIT {limit};
        """
        usage = (
            select(ArticlesTag.tag_id, func.count().label("usage_count"))
            .join(Article, Article.id == ArticlesTag.article_id)
            .group_by(ArticlesTag.tag_id)
            .subquery()
        )
        usage_count = func.coalesce(usage.c.usage_count, 0)

        result = await self.db.execute(
            select(Tag, usage_count)
            .outerjoin(usage, usage.c.tag_id == Tag.id)
            .order_by(usage_count.desc(), Tag.name)
            .limit(limit)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def get_unused_tags(self) -> list[Tag]:
        """
        Tags not linked to any existing article.

        SQL:
            SELECT tags.* FROM tags
            WHERE NOT EXISTS (
                SELECT 1 FROM articles_tags
                JOIN articles ON articles.id = articles_tags.article_id
                WHERE articles_tags.tag_id = tags.id
            );
        """
        linked = (
            select(ArticlesTag.tag_id)
            .join(Article, Article.id == ArticlesTag.article_id)
            .where(ArticlesTag.tag_id == Tag.id)
            .exists()
        )
        result = await self.db.execute(select(Tag).where(~linked).order_by(Tag.name))
        return list(result.scalars().all())

    async def search_tags(self, search_term: str) -> list[Tag]:
        """
        SQL:
            SELECT * FROM tags WHERE LOWER(name) LIKE LOWER('%{search_term}%');
        """
        result = await self.db.execute(
            select(Tag).where(Tag.name.ilike(f"%{search_term}%")).order_by(Tag.name)
        )
        return list(result.scalars().all())
