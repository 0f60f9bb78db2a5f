"""
Base Repository - Generic repository with common CRUD operations.

This provides:
1. Generic CRUD operations for all models
2. Type safety with generics
3. Consistent interface across all repositories
4. Async database operations
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

# Generic type for any database model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing common CRUD operations.

    Every write commits immediately; callers that need several statements to
    be atomic serialize them at the service level.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model type and database session.

        Args:
            model: The SQLAlchemy model class (User, Friendship)
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_data: Dict[str, Any]) -> ModelType:
        """
        Create a new record.

        Args:
            obj_data: Dictionary of field values

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_data)
        self.db.add(db_obj)
        await self.db.commit()
        await self.db.refresh(db_obj)
        return db_obj

    async def get(self, id: Any) -> Optional[ModelType]:
        """
        Get a single record by ID.

        Args:
            id: Primary key value

        Returns:
            Model instance or None if not found
        """
        result = await self.db.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_multi(
        self, skip: int = 0, limit: Optional[int] = None
    ) -> List[ModelType]:
        """
        Get records in the table's natural order.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)

        Returns:
            List of model instances
        """
        query = select(self.model).execution_options(populate_existing=True)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, id: Any, obj_data: Dict[str, Any]) -> Optional[ModelType]:
        """
        Update a record by ID.

        Args:
            id: Primary key value
            obj_data: Dictionary of fields to update

        Returns:
            Updated model instance or None if not found
        """
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self.db.commit()
        await self.db.refresh(db_obj)
        return db_obj

    async def delete(self, id: Any) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        await self.db.commit()
        return result.rowcount > 0

    async def count(self) -> int:
        """Count all records."""
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar() or 0

    async def exists(self, id: Any) -> bool:
        """
        Check if record exists by ID.

        Args:
            id: Primary key value

        Returns:
            True if exists, False otherwise
        """
        result = await self.db.execute(select(self.model.id).where(self.model.id == id))
        return result.first() is not None
