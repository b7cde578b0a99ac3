"""Pydantic schemas for notifications."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    """Schema for notification response."""
    
    id: UUID
    type: str
    title: str
    message: str
    related_job_id: Optional[UUID] = None
    related_application_id: Optional[UUID] = None
    action_url: Optional[str] = None
    priority: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    
    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    """A page of notifications plus counters."""
    
    notifications: List[NotificationResponse]
    total: int
    unread_count: int
    skip: int
    limit: int
