"""Notification repository for database operations."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from placement_backend.models.notification import Notification
from .base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for Notification model operations."""
    
    def __init__(self):
        super().__init__(Notification)
    
    def get_for_user(
        self,
        db: Session,
        user_id: UUID,
        is_read: Optional[bool] = None,
        skip: int = 0,
        limit: int = 20
    ) -> List[Notification]:
        """Get a user's notifications, newest first."""
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if is_read is not None:
            query = query.filter(Notification.is_read == is_read)
        return (
            query.order_by(Notification.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
    
    def count_for_user(self, db: Session, user_id: UUID, is_read: Optional[bool] = None) -> int:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if is_read is not None:
            query = query.filter(Notification.is_read == is_read)
        return query.count()
    
    def get_owned(self, db: Session, notification_id: UUID, user_id: UUID) -> Optional[Notification]:
        return (
            db.query(Notification)
            .filter(
                and_(
                    Notification.id == notification_id,
                    Notification.user_id == user_id
                )
            )
            .first()
        )
    
    def mark_all_read(self, db: Session, user_id: UUID) -> int:
        """Mark every unread notification of a user as read.
        
        Returns:
            Number of notifications updated
        """
        updated = (
            db.query(Notification)
            .filter(
                and_(
                    Notification.user_id == user_id,
                    Notification.is_read == False  # noqa: E712
                )
            )
            .update(
                {"is_read": True, "read_at": datetime.utcnow()},
                synchronize_session=False
            )
        )
        db.commit()
        return updated
    
    def delete_owned(self, db: Session, notification_id: UUID, user_id: UUID) -> bool:
        """Delete one of a user's notifications.
        
        Returns:
            False if the user has no notification with this ID
        """
        deleted = (
            db.query(Notification)
            .filter(
                and_(
                    Notification.id == notification_id,
                    Notification.user_id == user_id
                )
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted == 1
    
    def delete_read(self, db: Session, user_id: UUID) -> int:
        """Delete every read notification of a user.
        
        Returns:
            Number of notifications deleted
        """
        deleted = (
            db.query(Notification)
            .filter(
                and_(
                    Notification.user_id == user_id,
                    Notification.is_read == True  # noqa: E712
                )
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
