"""Tag model."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utc_now


class Tag(Base):
    """Label attached to articles through the articles_tags join table."""

    __tablename__ = "tags"

    display_field = "name"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    article_tags: Mapped[list["ArticlesTag"]] = relationship(
        "ArticlesTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    articles: Mapped[list["Article"]] = relationship(
        "Article", secondary="articles_tags", viewonly=True, order_by="Article.id"
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
