"""Article repository with specific queries."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Article, ArticlesTag, Tag
from .base import BaseRepository


class ArticleRepository(BaseRepository[Article]):
    """Article queries, including lookups through the articles_tags join table."""

    def __init__(self, db: AsyncSession):
        super().__init__(Article, db)

    async def get_by_id_with_tags(self, id: int) -> Article | None:
        """
        Get an article with its tags loaded, so article.tags needs no extra query.

        SQL:
            SELECT * FROM articles WHERE id = {id};
            SELECT tags.* FROM tags JOIN articles_tags ... WHERE article_id IN ({id});
        """
        result = await self.db.execute(
            select(Article)
            .options(selectinload(Article.tags))
            .where(Article.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_filtered(
        self,
        skip: int = 0,
        limit: int = 100,
        tag_name: str | None = None,
        search: str | None = None,
        published: bool | None = None,
    ) -> list[Article]:
        """
        List articles with optional filters, newest id last.

        tag_name restricts to articles linked to that tag (inner join through
        articles_tags); search matches the title case-insensitively.
        """
        query = select(Article).options(selectinload(Article.tags))

        if tag_name is not None:
            query = (
                query.join(ArticlesTag, ArticlesTag.article_id == Article.id)
                .join(Tag, Tag.id == ArticlesTag.tag_id)
                .where(Tag.name == tag_name)
            )
        if search:
            query = query.where(Article.title.ilike(f"%{search}%"))
        if published is not None:
            query = query.where(Article.published == published)

        result = await self.db.execute(query.order_by(Article.id).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def get_by_tag(self, tag_id: int) -> list[Article]:
        """
        Articles linked to a tag.

        SQL:
            SELECT articles.* FROM articles
            JOIN articles_tags ON articles.id = articles_tags.article_id
            WHERE articles_tags.tag_id = {tag_id};
        """
        result = await self.db.execute(
            select(Article)
            .join(ArticlesTag, ArticlesTag.article_id == Article.id)
            .where(ArticlesTag.tag_id == tag_id)
            .order_by(Article.id)
        )
        return list(result.scalars().all())
