"""Base repository class with common CRUD operations."""

from typing import Generic, TypeVar, Type, Optional
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import structlog

from placement_backend.core.base import Base
from placement_backend.core.error_handling import DatabaseError

logger = structlog.get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository class with common CRUD operations."""
    
    def __init__(self, model: Type[ModelType]):
        """Initialize repository with model class.
        
        Args:
            model: SQLAlchemy model class
        """
        self.model = model
    
    def create(self, db: Session, **kwargs) -> ModelType:
        """Create a new record.
        
        Args:
            db: Database session
            **kwargs: Model field values
            
        Returns:
            Created model instance
            
        Raises:
            DatabaseError: If the insert fails
        """
        try:
            instance = self.model(**kwargs)
            db.add(instance)
            db.commit()
            db.refresh(instance)
            
            logger.info(
                "Record created",
                model=self.model.__name__,
                id=str(instance.id)
            )
            return instance
            
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                "Record creation failed",
                model=self.model.__name__,
                error=str(e)
            )
            raise DatabaseError(
                f"Failed to create {self.model.__name__}: {str(e)}",
                original_error=e
            )
    
    def get_by_id(self, db: Session, id: UUID) -> Optional[ModelType]:
        """Get record by ID.
        
        Args:
            db: Database session
            id: Record UUID
            
        Returns:
            Model instance if found, None otherwise
        """
        return db.query(self.model).filter(self.model.id == id).first()
    
    def update(self, db: Session, instance: ModelType, **kwargs) -> ModelType:
        """Apply field values to one record and commit.
        
        Each call is its own unit of work; a failure rolls back only this
        record's changes.
        
        Raises:
            DatabaseError: If the commit fails
        """
        try:
            for field, value in kwargs.items():
                if not hasattr(instance, field):
                    raise ValueError(f"Invalid field: {field}")
                setattr(instance, field, value)
            
            db.commit()
            db.refresh(instance)
            
            logger.debug(
                "Record updated",
                model=self.model.__name__,
                id=str(instance.id),
                fields=list(kwargs.keys())
            )
            return instance
            
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                "Record update failed",
                model=self.model.__name__,
                id=str(instance.id),
                error=str(e)
            )
            raise DatabaseError(
                f"Failed to update {self.model.__name__}: {str(e)}",
                original_error=e
            )

