"""Job repository for database operations."""

from placement_backend.models.job import Job
from .base import BaseRepository


class JobRepository(BaseRepository[Job]):
    """Repository for Job model operations."""
    
    def __init__(self):
        super().__init__(Job)
