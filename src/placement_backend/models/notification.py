"""User-facing notification model."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Text, Boolean, Index

from placement_backend.core.base import Base
from placement_backend.core.custom_types import GUID


class NotificationType(str, Enum):
    APPLICATION_RECEIVED = "application_received"
    APPLICATION_SHORTLISTED = "application_shortlisted"
    APPLICATION_REJECTED = "application_rejected"
    APPLICATION_SELECTED = "application_selected"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Notification(Base):
    """Notification shown to a single user."""
    
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "is_read"),
    )
    
    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(GUID(), nullable=False)
    user_role = Column(String(20), nullable=False)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_job_id = Column(GUID(), nullable=True)
    related_application_id = Column(GUID(), nullable=True)
    action_url = Column(String(255), nullable=True)
    priority = Column(String(10), default=NotificationPriority.MEDIUM.value, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}')>"
    
    def mark_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = datetime.utcnow()
