"""Notification dispatcher and inbox operations."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from placement_backend.core.error_handling import NotFoundError
from placement_backend.core.event_publisher import TransitionEvent
from placement_backend.models.application_status import ApplicationStatus
from placement_backend.models.notification import Notification, NotificationPriority, NotificationType
from placement_backend.models.job import Job
from placement_backend.models.student import Student
from placement_backend.repositories.application import ApplicationRepository
from placement_backend.repositories.notification import NotificationRepository

logger = structlog.get_logger(__name__)


def application_shortlisted(job_title: str) -> Dict[str, str]:
    return {
        "type": NotificationType.APPLICATION_SHORTLISTED.value,
        "title": "Application Shortlisted!",
        "message": f"Congratulations! You've been shortlisted for {job_title}.",
        "priority": NotificationPriority.HIGH.value,
    }


def application_rejected(job_title: str) -> Dict[str, str]:
    return {
        "type": NotificationType.APPLICATION_REJECTED.value,
        "title": "Application Update",
        "message": f"Your application for {job_title} was not successful this time.",
        "priority": NotificationPriority.MEDIUM.value,
    }


def application_selected(job_title: str) -> Dict[str, str]:
    return {
        "type": NotificationType.APPLICATION_SELECTED.value,
        "title": "You're Selected!",
        "message": f"Congratulations! You've been selected for {job_title}.",
        "priority": NotificationPriority.HIGH.value,
    }


def new_application(student_name: str, job_title: str) -> Dict[str, str]:
    return {
        "type": NotificationType.APPLICATION_RECEIVED.value,
        "title": "New Application Received",
        "message": f"{student_name} has applied for {job_title}.",
        "priority": NotificationPriority.MEDIUM.value,
    }


# on-hold is not announced to the student
STATUS_TEMPLATES = {
    ApplicationStatus.SHORTLISTED: application_shortlisted,
    ApplicationStatus.REJECTED: application_rejected,
    ApplicationStatus.SELECTED: application_selected,
}


class NotificationService:
    """Creates notification records and serves a user's inbox."""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = NotificationRepository()
        self.applications = ApplicationRepository()
    
    def create_notification(
        self,
        user_id: UUID,
        user_role: str,
        type: str,
        title: str,
        message: str,
        priority: str = NotificationPriority.MEDIUM.value,
        related_job_id: Optional[UUID] = None,
        related_application_id: Optional[UUID] = None,
        action_url: Optional[str] = None
    ) -> Notification:
        """Persist a notification for one user."""
        notification = self.repository.create(
            self.db,
            user_id=user_id,
            user_role=user_role,
            type=type,
            title=title,
            message=message,
            priority=priority,
            related_job_id=related_job_id,
            related_application_id=related_application_id,
            action_url=action_url
        )
        
        logger.info(
            "Notification created",
            notification_id=str(notification.id),
            user_id=str(user_id),
            user_role=user_role,
            type=type
        )
        return notification
    
    def handle_transition_event(self, event: TransitionEvent) -> Optional[Notification]:
        """Tell the student about a decision on their application.
        
        Returns:
            The created notification, or None when the new status is not
            announced
        """
        template = STATUS_TEMPLATES.get(ApplicationStatus(event.to_status))
        if template is None:
            return None
        
        application = self.applications.get_by_id(self.db, event.application_id)
        if application is None:
            logger.warning(
                "Application vanished before notification",
                application_id=str(event.application_id)
            )
            return None
        
        job: Job = application.job
        student: Student = application.student
        
        action_url = "/student/applications"
        if event.to_status == ApplicationStatus.SELECTED.value:
            action_url = f"/student/jobs/{job.id}"
        
        return self.create_notification(
            user_id=student.user_id,
            user_role="student",
            related_job_id=job.id,
            related_application_id=application.id,
            action_url=action_url,
            **template(job.title)
        )
    
    def notify_new_application(self, recruiter_user_id: UUID, student: Student, job: Job, application_id: UUID) -> Notification:
        """Tell the recruiter that a student applied."""
        return self.create_notification(
            user_id=recruiter_user_id,
            user_role="recruiter",
            related_job_id=job.id,
            related_application_id=application_id,
            action_url=f"/recruiter/jobs/{job.id}/applications",
            **new_application(student.full_name or student.registration_number, job.title)
        )
    
    def list_for_user(
        self,
        user_id: UUID,
        is_read: Optional[bool] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Dict[str, Any]:
        """Get a page of a user's notifications with total and unread counts."""
        notifications: List[Notification] = self.repository.get_for_user(
            self.db, user_id, is_read=is_read, skip=skip, limit=limit
        )
        return {
            "notifications": notifications,
            "total": self.repository.count_for_user(self.db, user_id, is_read=is_read),
            "unread_count": self.repository.count_for_user(self.db, user_id, is_read=False),
            "skip": skip,
            "limit": limit,
        }
    
    def unread_count(self, user_id: UUID) -> int:
        return self.repository.count_for_user(self.db, user_id, is_read=False)
    
    def mark_as_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        """Mark one of the user's notifications as read.
        
        Raises:
            NotFoundError: The notification does not exist or belongs to someone else
        """
        notification = self.repository.get_owned(self.db, notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        
        notification.mark_read()
        self.db.commit()
        self.db.refresh(notification)
        return notification
    
    def mark_all_as_read(self, user_id: UUID) -> int:
        updated = self.repository.mark_all_read(self.db, user_id)
        logger.info("Notifications marked read", user_id=str(user_id), count=updated)
        return updated
    
    def delete_notification(self, notification_id: UUID, user_id: UUID) -> None:
        """Delete one of the user's notifications.
        
        Raises:
            NotFoundError: The notification does not exist or belongs to someone else
        """
        if not self.repository.delete_owned(self.db, notification_id, user_id):
            raise NotFoundError("Notification", notification_id)
        logger.info("Notification deleted", notification_id=str(notification_id), user_id=str(user_id))
    
    def clear_read(self, user_id: UUID) -> int:
        deleted = self.repository.delete_read(self.db, user_id)
        logger.info("Read notifications cleared", user_id=str(user_id), count=deleted)
        return deleted
