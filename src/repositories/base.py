from typing import Generic, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..database.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common CRUD operations."""

    def __init__(self, model: Type[ModelType], session: Session):
        """Initialize repository.

        Args:
            model: The SQLAlchemy model class
            session: Database session
        """
        self.model = model
        self.session = session

    def create(self, **fields) -> ModelType:
        """Create a new entity."""
        # Don't generate ID - let the database handle auto-increment
        instance = self.model(**fields)
        self.session.add(instance)
        self.session.flush()
        return instance

    def get_all(self, limit: int | None = None, offset: int = 0) -> list[ModelType]:
        """Get all entities with optional pagination."""
        stmt = select(self.model).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        return list(self.session.execute(stmt).scalars().all())

    def get_by(self, **filters) -> list[ModelType]:
        """Get entities matching filters.

        Args:
            **filters: Column name and value pairs to filter by
        """
        stmt = select(self.model)
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter field: {key}")
            stmt = stmt.where(getattr(self.model, key) == value)

        return list(self.session.execute(stmt).scalars().all())

    def get_one_by(self, **filters) -> ModelType | None:
        """Get single entity matching filters."""
        results = self.get_by(**filters)
        return results[0] if results else None

    def delete_all(self) -> int:
        """Delete every entity and return the number of rows removed."""
        result = self.session.execute(delete(self.model))
        self.session.flush()
        return result.rowcount

    def count(self, **filters) -> int:
        """Count entities matching filters."""
        stmt = select(func.count()).select_from(self.model)
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter field: {key}")
            stmt = stmt.where(getattr(self.model, key) == value)
        return self.session.execute(stmt).scalar_one()

    def exists(self, **filters) -> bool:
        """Check if any entity matches filters."""
        return self.count(**filters) > 0
