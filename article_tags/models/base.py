"""Base classes for SQLAlchemy models."""

from datetime import UTC, datetime
from typing import Any, ClassVar

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Return current UTC datetime (naive, for SQLite compatibility)."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """
    Base class for all models.

    display_field names the column used when a row is shown as a single
    label (select options, list lookups). Subclasses override it.
    """

    display_field: ClassVar[str] = "id"

    @property
    def display_value(self) -> Any:
        return getattr(self, self.display_field)


class TimestampMixin:
    """Mixin for adding created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
