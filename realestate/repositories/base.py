"""
Base repository class with common data-access operations using async SQLAlchemy.
Each repository wraps one table (collection) and one request-scoped session.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.sql.elements import ColumnElement
from realestate.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Thin data-access layer: find, insert, replace, update, delete and count.
    Writes commit immediately; failures roll back and propagate.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Insert a new record.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance, refreshed with server-generated fields
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Get a record by its ID.
        The identity map is refreshed so values written by UPDATE statements are seen.
        """
        query = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        obj = result.scalar_one_or_none()

        if obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")

        return obj

    async def find_one(self, predicate: ColumnElement[bool]) -> Optional[ModelType]:
        query = (
            select(self.model)
            .where(predicate)
            .order_by(self.model.created_at, self.model.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    async def find(
        self,
        predicate: Optional[ColumnElement[bool]] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[ModelType]:
        """
        Find records matching a predicate in insertion order.

        Args:
            predicate: Optional WHERE clause
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)

        Returns:
            List of model instances
        """
        query = select(self.model)
        if predicate is not None:
            query = query.where(predicate)

        # created_at alone is not unique; id keeps pages stable
        query = query.order_by(self.model.created_at, self.model.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        objects = list(result.scalars().all())
        logger.debug(f"Retrieved {len(objects)} {self.model.__name__} records")
        return objects

    async def count(self, predicate: Optional[ColumnElement[bool]] = None) -> int:
        query = select(func.count()).select_from(self.model)
        if predicate is not None:
            query = query.where(predicate)

        result = await self.db.execute(query)
        return result.scalar() or 0

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> bool:
        """
        Apply a partial update in a single UPDATE statement.

        Args:
            id: UUID of the record to update
            obj_in: Dictionary of column values to set

        Returns:
            True if a record was updated, False if none matched
        """
        if not obj_in:
            return False

        try:
            result = await self.db.execute(
                update(self.model)
                .where(self.model.id == id)
                .values(**obj_in)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            updated = result.rowcount > 0
            if updated:
                logger.debug(f"Updated {self.model.__name__} {id}: {sorted(obj_in)}")
            return updated
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {id}: {e}")
            raise

    async def replace(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Overwrite every client-editable column of a record.

        Returns:
            The reloaded record, or None if it does not exist
        """
        if not await self.update(id, obj_in):
            return None
        return await self.get_by_id(id)

    async def delete(self, id: uuid.UUID) -> bool:
        try:
            result = await self.db.execute(delete(self.model).where(self.model.id == id))
            await self.db.commit()
            deleted = result.rowcount > 0
            if deleted:
                logger.debug(f"Deleted {self.model.__name__} with id: {id}")
            return deleted
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {id}: {e}")
            raise

    async def delete_where(self, predicate: ColumnElement[bool]) -> int:
        """Delete every record matching the predicate and return how many went."""
        try:
            result = await self.db.execute(delete(self.model).where(predicate))
            await self.db.commit()
            logger.debug(f"Deleted {result.rowcount} {self.model.__name__} records")
            return result.rowcount
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} records: {e}")
            raise

    async def exists(self, id: uuid.UUID) -> bool:
        return await self.count(self.model.id == id) > 0
