"""Article-Tag join table."""

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class ArticlesTag(Base):
    """
    One tagging of one article.

    Primary key is the pair (article_id, tag_id). Both parents are loaded
    with an INNER JOIN, so a row whose article or tag is gone never comes
    back from a query on this model.
    """

    __tablename__ = "articles_tags"
    # PK index covers lookups by article_id; tag_id needs its own
    __table_args__ = (Index("ix_articles_tags_tag_id", "tag_id"),)

    display_field = "article_id"

    article_id: Mapped[int] = mapped_column(
        ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    article: Mapped["Article"] = relationship(
        "Article", back_populates="article_tags", lazy="joined", innerjoin=True
    )
    tag: Mapped["Tag"] = relationship(
        "Tag", back_populates="article_tags", lazy="joined", innerjoin=True
    )

    def __repr__(self) -> str:
        return f"<ArticlesTag(article_id={self.article_id}, tag_id={self.tag_id})>"
