"""Repository for the articles_tags join table."""

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Article, ArticlesTag, Tag
from .base import BaseRepository


class ArticlesTagRepository(BaseRepository[ArticlesTag]):
    """
    Link rows between articles and tags.

    Rows are addressed by the pair (article_id, tag_id). Every query here
    inner-joins both parents, so a link whose article or tag no longer
    exists is never returned or counted.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(ArticlesTag, db)

    async def get(self, article_id: int, tag_id: int) -> ArticlesTag | None:
        """Get one link with its article and tag loaded."""
        return await self.get_by_id((article_id, tag_id))

    async def link(self, article_id: int, tag_id: int) -> ArticlesTag:
        """
        Insert a link row.

        SQL:
            INSERT INTO articles_tags (article_id, tag_id) VALUES ({article_id}, {tag_id});
        """
        return await self.create(ArticlesTag(article_id=article_id, tag_id=tag_id))

    async def unlink(self, article_id: int, tag_id: int) -> bool:
        """
        Delete a link row. Returns False if there was none.

        SQL:
            DELETE FROM articles_tags WHERE article_id = {article_id} AND tag_id = {tag_id};
        """
        return await self.delete((article_id, tag_id))

    async def list_links(
        self,
        article_id: int | None = None,
        tag_id: int | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ArticlesTag]:
        """
        Link rows ordered by (article_id, tag_id), optionally for one article or tag.

        SQL:
            SELECT articles_tags.*, articles.*, tags.*
            FROM articles_tags
            JOIN articles ON articles.id = articles_tags.article_id
            JOIN tags ON tags.id = articles_tags.tag_id
            WHERE ...
            ORDER BY article_id, tag_id
            OFFSET {skip} LIMIT {limit};
        """
        query = self._filter(select(ArticlesTag), article_id, tag_id)
        result = await self.db.execute(
            query.order_by(ArticlesTag.article_id, ArticlesTag.tag_id).offset(skip).limit(limit)
        )
        return list(result.unique().scalars().all())

    async def get_by_tag(self, tag_id: int) -> list[ArticlesTag]:
        """All links of one tag."""
        return await self.list_links(tag_id=tag_id, limit=None)

    async def count_links(self, article_id: int | None = None, tag_id: int | None = None) -> int:
        """
        Count link rows whose article and tag both exist.

        SQL:
            SELECT COUNT(*) FROM articles_tags
            JOIN articles ON ... JOIN tags ON ...
            WHERE ...;
        """
        query = self._join_parents(select(func.count()).select_from(ArticlesTag))
        query = self._filter(query, article_id, tag_id)
        result = await self.db.execute(query)
        return result.scalar_one()

    async def get_tag_ids_for_article(self, article_id: int) -> set[int]:
        """Tag ids currently linked to an article."""
        result = await self.db.execute(
            select(ArticlesTag.tag_id).where(ArticlesTag.article_id == article_id)
        )
        return set(result.scalars().all())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _list_statement(self, stmt: Select) -> Select:
        return self._join_parents(stmt).order_by(ArticlesTag.article_id, ArticlesTag.tag_id)

    @staticmethod
    def _join_parents(stmt: Select) -> Select:
        return stmt.join(Article, Article.id == ArticlesTag.article_id).join(
            Tag, Tag.id == ArticlesTag.tag_id
        )

    @staticmethod
    def _filter(stmt: Select, article_id: int | None, tag_id: int | None) -> Select:
        if article_id is not None:
            stmt = stmt.where(ArticlesTag.article_id == article_id)
        if tag_id is not None:
            stmt = stmt.where(ArticlesTag.tag_id == tag_id)
        return stmt
