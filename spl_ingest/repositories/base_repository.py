from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from spl_ingest.utils.logging import get_logger

# Define a generic type for SQLAlchemy models
ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing natural-key lookups and inserts.

    Ingestion never updates or deletes rows. Every write is a find-by-key
    followed, on a miss, by an insert guarded by a savepoint so that a
    concurrent insert of the same key resolves to the existing row.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def find_by_natural_key(self, **key: Any) -> Optional[ModelType]:
        """Find the record matching every given column value.

        None values match SQL NULL.

        Args:
            **key: Natural key columns and values

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model)
            for field, value in key.items():
                query = query.where(getattr(self.model, field) == value)
            result = await self.session.execute(query.limit(1))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error looking up {self.model.__name__} by natural key: {str(e)}",
                exc_info=True,
                extra={"natural_key": {k: str(v) for k, v in key.items()}}
            )
            raise

    async def find_all(
        self,
        order_by: Optional[str] = None,
        **filters: Any,
    ) -> List[ModelType]:
        """Get all records matching the filters.

        Args:
            order_by: Optional column name to sort by
            **filters: field_name=value equality filters

        Returns:
            List of records
        """
        try:
            query = select(self.model)
            for field, value in filters.items():
                query = query.where(getattr(self.model, field) == value)
            if order_by:
                query = query.order_by(getattr(self.model, order_by))
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving all {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def insert(self, **kwargs: Any) -> ModelType:
        """Insert a new record inside a savepoint.

        Args:
            **kwargs: Fields and values for the new record

        Returns:
            The created record

        Raises:
            IntegrityError: If the natural key already exists
        """
        try:
            async with self.session.begin_nested():
                instance = self.model(**kwargs)
                self.session.add(instance)
                await self.session.flush()
            return instance
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def get_or_create(
        self,
        defaults: Optional[Dict[str, Any]] = None,
        **key: Any,
    ) -> Tuple[ModelType, bool]:
        """Return the record for a natural key, inserting it on a miss.

        Args:
            defaults: Non-key fields used only when inserting
            **key: Natural key columns and values

        Returns:
            Tuple of (record, created)
        """
        existing = await self.find_by_natural_key(**key)
        if existing is not None:
            return existing, False

        try:
            instance = await self.insert(**key, **(defaults or {}))
            return instance, True
        except IntegrityError:
            # Another writer inserted the same key between lookup and insert
            self.logger.debug(
                f"{self.model.__name__} insert conflicted, re-reading existing row"
            )
            existing = await self.find_by_natural_key(**key)
            if existing is None:
                raise
            return existing, False

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count records matching filters.

        Args:
            filters: Dictionary of field_name: value to filter by

        Returns:
            Count of matching records
        """
        try:
            query = select(func.count()).select_from(self.model)

            if filters:
                for field, value in filters.items():
                    if hasattr(self.model, field):
                        query = query.where(getattr(self.model, field) == value)

            result = await self.session.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error counting {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise
