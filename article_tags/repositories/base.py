"""Base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, and_, delete, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ..models.base import Base

ModelType = TypeVar("ModelType", bound=Base)

# Scalar for single-column keys, tuple for composite keys like (article_id, tag_id)
Identity = int | tuple[int, ...]


class BaseRepository(Generic[ModelType]):
    """
    CRUD operations shared by every model.

    Rows are addressed by their primary key, whatever its shape:
        article_repo = BaseRepository[Article](Article, db)
        await article_repo.get_by_id(1)

        link_repo = BaseRepository[ArticlesTag](ArticlesTag, db)
        await link_repo.get_by_id((1, 3))

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    # ------------------------------------------------------------------
    # Primary key helpers
    # ------------------------------------------------------------------

    @property
    def primary_key(self) -> tuple:
        """Primary key columns in declaration order."""
        return tuple(inspect(self.model).primary_key)

    def _identity_clause(self, id: Identity) -> ColumnElement[bool]:
        values = id if isinstance(id, tuple) else (id,)
        columns = self.primary_key
        if len(values) != len(columns):
            raise ValueError(
                f"{self.model.__name__} primary key has {len(columns)} column(s), "
                f"got {len(values)} value(s)"
            )
        return and_(*(column == value for column, value in zip(columns, values)))

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create(self, obj: ModelType) -> ModelType:
        """
        Add a new row and flush it so generated values (id, timestamps) are set.

        SQL:
            INSERT INTO table (...) VALUES (...);
        """
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def get_by_id(self, id: Identity) -> ModelType | None:
        """
        Get one row by primary key, or None.

        SQL:
            SELECT * FROM table WHERE pk = {id} LIMIT 1;
        """
        result = await self.db.execute(select(self.model).where(self._identity_clause(id)))
        return result.unique().scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """
        Get rows ordered by primary key, with pagination.

        SQL:
            SELECT * FROM table ORDER BY pk OFFSET {skip} LIMIT {limit};
        """
        result = await self.db.execute(
            select(self.model).order_by(*self.primary_key).offset(skip).limit(limit)
        )
        return list(result.unique().scalars().all())

    async def update(self, id: Identity, **kwargs: Any) -> ModelType | None:
        """
        Update the given fields of one row. Unknown field names are ignored.

        Returns the updated object or None when the row does not exist.
        """
        obj = await self.get_by_id(id)
        if not obj:
            return None

        for key, value in kwargs.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, id: Identity) -> bool:
        """
        Delete one row by primary key.

        Dependent rows are removed by the database (ON DELETE CASCADE).

        SQL:
            DELETE FROM table WHERE pk = {id};
        """
        result = await self.db.execute(delete(self.model).where(self._identity_clause(id)))
        return result.rowcount > 0

    async def exists(self, id: Identity) -> bool:
        """
        SQL:
            SELECT EXISTS(SELECT 1 FROM table WHERE pk = {id});
        """
        result = await self.db.execute(
            select(select(*self.primary_key).where(self._identity_clause(id)).exists())
        )
        return bool(result.scalar())

    async def count(self) -> int:
        """
        SQL:
            SELECT COUNT(*) FROM table;
        """
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def find_list(self) -> dict[Any, Any]:
        """
        Map primary key to display value for every row.

        Composite keys come back as tuples:
            {1: "python", 2: "fastapi"}              # tags
            {(1, 1): 1, (1, 2): 1, (2, 1): 2}        # articles_tags
        """
        columns = self.primary_key
        display = getattr(self.model, self.model.display_field).label("display_value")
        result = await self.db.execute(self._list_statement(select(*columns, display)))

        listing: dict[Any, Any] = {}
        for row in result.all():
            key = row[0] if len(columns) == 1 else tuple(row[: len(columns)])
            listing[key] = row[-1]
        return listing

    def _list_statement(self, stmt: Select) -> Select:
        """Hook for subclasses that must restrict which rows are listed."""
        return stmt.order_by(*self.primary_key)
