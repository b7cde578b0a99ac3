"""Student repository for database operations."""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from placement_backend.models.student import Student
from .base import BaseRepository


class StudentRepository(BaseRepository[Student]):
    """Repository for Student model operations."""
    
    def __init__(self):
        super().__init__(Student)
    
    def get_by_user_id(self, db: Session, user_id: UUID) -> Optional[Student]:
        return db.query(Student).filter(Student.user_id == user_id).first()
