"""Repository pattern implementations for data access."""

from .base import BaseRepository
from .application import ApplicationRepository
from .job import JobRepository
from .student import StudentRepository
from .notification import NotificationRepository

__all__ = [
    "BaseRepository",
    "ApplicationRepository",
    "JobRepository",
    "StudentRepository",
    "NotificationRepository",
]
