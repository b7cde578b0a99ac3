"""Database models for the placement backend."""

from .application_status import ApplicationStatus, ActorType
from .job import Job
from .student import Student
from .application import Application
from .notification import Notification, NotificationType, NotificationPriority
from .status_transition_log import StatusTransitionLog

__all__ = [
    "ApplicationStatus",
    "ActorType",
    "Job",
    "Student",
    "Application",
    "Notification",
    "NotificationType",
    "NotificationPriority",
    "StatusTransitionLog",
]
