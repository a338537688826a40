"""Article model."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Article(Base, TimestampMixin):
    """A content record that can carry any number of tags."""

    __tablename__ = "articles"

    display_field = "title"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Link rows are owned by the article: removing one from the list deletes it,
    # deleting the article deletes all of them (ON DELETE CASCADE in the DB).
    article_tags: Mapped[list["ArticlesTag"]] = relationship(
        "ArticlesTag",
        back_populates="article",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Read-only shortcut through articles_tags; write through article_tags
    tags: Mapped[list["Tag"]] = relationship(
        "Tag", secondary="articles_tags", viewonly=True, order_by="Tag.name"
    )

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, title='{self.title}')>"
