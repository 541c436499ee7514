from typing import TypeVar, Generic, Type, Optional, Any, Sequence, Tuple

from sqlalchemy import select, delete, func, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from tutorhub.model.base import Base

# Generic type for SQLAlchemy models
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class with common CRUD operations.

    Single-row writes (create, update, delete) commit immediately.
    Multi-step service operations stage rows with add()/flush() and
    finish with commit() so the whole unit lands in one transaction.

    Usage:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession):
                super().__init__(User, session)
    """
    model: Type[ModelType]

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    # ==================== CREATE ====================

    async def create(self, obj_in: dict | ModelType) -> ModelType:
        """
        Create a new record and commit.

        Args:
            obj_in: Dictionary or model instance with data to create

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_in) if isinstance(obj_in, dict) else obj_in
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def add(self, obj_in: dict | ModelType) -> ModelType:
        """
        Stage a new record inside the current transaction.

        The row is flushed so its primary key is available, but nothing
        is committed.
        """
        db_obj = self.model(**obj_in) if isinstance(obj_in, dict) else obj_in
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj

    async def add_many(self, objs_in: list[dict | ModelType]) -> list[ModelType]:
        """Stage several records inside the current transaction."""
        db_objs = [
            self.model(**obj_in) if isinstance(obj_in, dict) else obj_in
            for obj_in in objs_in
        ]
        self.session.add_all(db_objs)
        await self.session.flush()
        return db_objs

    # ==================== READ ====================

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Get a single record by ID.

        Args:
            id: Primary key ID

        Returns:
            Model instance or None if not found
        """
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """
        Get the first record whose field equals value.

        Args:
            field: Field name to filter by
            value: Value to match

        Returns:
            Model instance or None if not found
        """
        query = select(self.model).where(getattr(self.model, field) == value).limit(1)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def get_by_filters(
        self,
        filters: dict[str, Any],
        skip: int = 0,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        order_desc: bool = False
    ) -> Sequence[ModelType]:
        """
        Get records matching multiple equality conditions.

        Args:
            filters: Dictionary of field-value pairs to filter by
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)
            order_by: Field name to order by
            order_desc: Whether to order descending

        Returns:
            List of model instances
        """
        conditions = [getattr(self.model, field) == value for field, value in filters.items()]
        query = select(self.model).where(and_(*conditions))

        if order_by:
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)

        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return result.scalars().all()

    # ==================== UPDATE ====================

    async def update(self, db_obj: ModelType, obj_in: dict) -> ModelType:
        """
        Apply field values to a loaded record and commit.

        Args:
            db_obj: Model instance to update
            obj_in: Dictionary with fields to update

        Returns:
            Updated model instance
        """
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self.session.commit()
        return db_obj

    # ==================== DELETE ====================

    async def delete_by_filters(self, filters: dict[str, Any]) -> int:
        """
        Delete records matching filter conditions inside the current transaction.

        Returns:
            Number of records deleted
        """
        conditions = [getattr(self.model, field) == value for field, value in filters.items()]
        result = await self.session.execute(delete(self.model).where(and_(*conditions)))
        return result.rowcount

    # ==================== COUNT ====================

    async def count_by_filters(self, filters: dict[str, Any]) -> int:
        """
        Count records matching filter conditions.

        Args:
            filters: Dictionary of field-value pairs to filter by

        Returns:
            Count of matching records
        """
        conditions = [getattr(self.model, field) == value for field, value in filters.items()]
        query = select(func.count(self.model.id)).where(and_(*conditions))
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def count_all(self) -> int:
        result = await self.session.execute(select(func.count(self.model.id)))
        return result.scalar() or 0

    # ==================== EXISTS ====================

    async def exists_by_field(self, field: str, value: Any, exclude_id: Optional[int] = None) -> bool:
        """
        Check if a record exists by a specific field value.

        Args:
            field: Field name to filter by
            value: Value to match
            exclude_id: Ignore this primary key (used when updating a record)

        Returns:
            True if exists, False otherwise
        """
        query = select(func.count(self.model.id)).where(getattr(self.model, field) == value)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)

        result = await self.session.execute(query)
        return (result.scalar() or 0) > 0

    # ==================== UTILITY ====================

    async def paginate(
        self,
        query: Select,
        skip: int,
        limit: int,
        options: Sequence[Any] = (),
    ) -> Tuple[Sequence[Any], int]:
        """
        Run a select for one page and count the unpaged result.

        Args:
            query: SQLAlchemy Select statement (ordering included)
            skip: Number of records to skip
            limit: Page size
            options: Loader options applied to the page query only

        Returns:
            (rows on the page, total matching rows)
        """
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = (await self.session.execute(count_query)).scalar() or 0

        result = await self.session.execute(query.options(*options).offset(skip).limit(limit))
        return result.scalars().all(), total

    async def slugs_like(self, base_slug: str, exclude_id: Optional[int] = None) -> set[str]:
        """
        Existing slugs equal to base_slug or starting with "base_slug-".

        Only meaningful for models with a slug column.
        """
        query = select(self.model.slug).where(
            (self.model.slug == base_slug) | (self.model.slug.like(f"{base_slug}-%"))
        )
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        return set((await self.session.execute(query)).scalars().all())

    async def execute_query(self, query: Select) -> Sequence[ModelType]:
        """
        Execute a custom SQLAlchemy select query.

        Args:
            query: SQLAlchemy Select statement

        Returns:
            List of model instances
        """
        result = await self.session.execute(query)
        return result.scalars().all()

    async def flush(self):
        await self.session.flush()

    async def commit(self):
        """Commit the current transaction"""
        await self.session.commit()
