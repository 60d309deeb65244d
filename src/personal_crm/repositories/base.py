"""
Base repository with generic CRUD operations.

This module provides a generic BaseRepository class that implements
common database operations (Create, Read, Update, Delete) for any SQLAlchemy model.
All domain-specific repositories should extend this base class.

Every user-owned model carries a `user_id` column; the `*_owned` helpers
filter on it so a caller can never reach another user's rows by id.
"""

from typing import Generic, TypeVar, Type, List, Optional, Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import desc, asc

from personal_crm.models.base import Base
from personal_crm.core.exceptions import NotFoundException, DatabaseException


# Generic type bound to SQLAlchemy Base
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository with CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model type this repository manages

    Example:
        class TagRepository(BaseRepository[Tag]):
            def __init__(self, db: Session):
                super().__init__(Tag, db)

            def get_by_name(self, user_id: int, name: str) -> Optional[Tag]:
                return self.db.query(self.model).filter(
                    self.model.user_id == user_id,
                    self.model.name == name,
                ).first()
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize the repository.

        Args:
            model: The SQLAlchemy model class
            db: SQLAlchemy database session
        """
        self.model = model
        self.db = db

    def get(self, id: int) -> Optional[ModelType]:
        """
        Get a single record by ID.

        Args:
            id: Primary key value

        Returns:
            Model instance or None if not found
        """
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except Exception as e:
            raise DatabaseException(f"Failed to get {self.model.__name__} with id {id}") from e

    def get_owned(self, id: int, user_id: int) -> Optional[ModelType]:
        """
        Get a record by ID only if it belongs to `user_id`.

        Args:
            id: Primary key value
            user_id: Owning user

        Returns:
            Model instance or None if missing or owned by someone else
        """
        try:
            return self.db.query(self.model).filter(
                self.model.id == id,
                self.model.user_id == user_id,
            ).first()
        except Exception as e:
            raise DatabaseException(f"Failed to get {self.model.__name__} with id {id}") from e

    def get_owned_or_fail(self, id: int, user_id: int) -> ModelType:
        """
        Get a user's record by ID or raise exception.

        Raises:
            NotFoundException: If the record is missing or owned by another user
        """
        obj = self.get_owned(id, user_id)
        if obj is None:
            raise NotFoundException(self.model.__name__, id)
        return obj

    def list_owned(
        self,
        user_id: int,
        order_by: Optional[str] = "id",
        order_desc: bool = False,
    ) -> List[ModelType]:
        """
        All records owned by a user.

        Args:
            user_id: Owning user
            order_by: Field name to order by
            order_desc: Whether to order descending

        Returns:
            List of model instances
        """
        try:
            query = self.db.query(self.model).filter(self.model.user_id == user_id)
            if order_by and hasattr(self.model, order_by):
                order_column = getattr(self.model, order_by)
                query = query.order_by(desc(order_column) if order_desc else asc(order_column))
            return query.all()
        except Exception as e:
            raise DatabaseException(f"Failed to list {self.model.__name__} for user {user_id}") from e

    def create(self, obj: ModelType) -> ModelType:
        """
        Create a new record.

        Args:
            obj: Model instance to create

        Returns:
            Created model instance with ID populated

        Raises:
            IntegrityError: On a unique or foreign key violation, after rollback
        """
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
            return obj
        except IntegrityError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise DatabaseException(f"Failed to create {self.model.__name__}") from e

    def create_from_dict(self, data: Dict[str, Any]) -> ModelType:
        """
        Create a new record from dictionary.

        Args:
            data: Dictionary of field values

        Returns:
            Created model instance
        """
        return self.create(self.model(**data))

    def update(self, obj: ModelType) -> ModelType:
        """
        Commit pending changes on an existing record.

        Args:
            obj: Model instance with updated values

        Returns:
            Updated model instance
        """
        try:
            self.db.commit()
            self.db.refresh(obj)
            return obj
        except IntegrityError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise DatabaseException(f"Failed to update {self.model.__name__}") from e

    def apply_updates(self, obj: ModelType, data: Dict[str, Any]) -> ModelType:
        """
        Set fields from a partial update and commit.

        Args:
            obj: Model instance to change
            data: Dictionary of fields to update

        Returns:
            Updated model instance
        """
        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
        return self.update(obj)

    def delete(self, obj: ModelType) -> bool:
        """
        Delete a record.

        Args:
            obj: Model instance to delete

        Returns:
            True if successful
        """
        try:
            self.db.delete(obj)
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            raise DatabaseException(f"Failed to delete {self.model.__name__}") from e
