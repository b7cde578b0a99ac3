"""Service wiring shared by the API routers."""

from fastapi import Depends
from sqlalchemy.orm import Session

from placement_backend.auth.models import CurrentUser
from placement_backend.core.database import get_db
from placement_backend.core.error_handling import NotFoundError
from placement_backend.core.event_publisher import TransitionEventPublisher
from placement_backend.models.student import Student
from placement_backend.repositories.student import StudentRepository
from placement_backend.scoring.client import ScoringClient, get_scoring_client
from placement_backend.services.application_service import ApplicationService
from placement_backend.services.notification_service import NotificationService
from placement_backend.services.scoring_service import ATSScoringService
from placement_backend.services.transition_service import ApplicationTransitionService


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_transition_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service)
) -> ApplicationTransitionService:
    """Transition engine whose committed changes notify the student."""
    publisher = TransitionEventPublisher([notifications.handle_transition_event])
    return ApplicationTransitionService(db, publisher=publisher)


def get_application_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service)
) -> ApplicationService:
    return ApplicationService(db, notifications=notifications)


def get_scoring_service(
    db: Session = Depends(get_db),
    transitions: ApplicationTransitionService = Depends(get_transition_service),
    scoring_client: ScoringClient = Depends(get_scoring_client)
) -> ATSScoringService:
    return ATSScoringService(db, scoring_client, transition_service=transitions)


def resolve_student(db: Session, user: CurrentUser) -> Student:
    """Find the student record of the caller.
    
    Raises:
        NotFoundError: The caller has no student profile
    """
    students = StudentRepository()
    student = None
    if user.profile_id is not None:
        student = students.get_by_id(db, user.profile_id)
    if student is None:
        student = students.get_by_user_id(db, user.user_id)
    if student is None or student.user_id != user.user_id:
        raise NotFoundError("Student profile for user", user.user_id)
    return student
