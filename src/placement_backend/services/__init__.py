"""Business logic services for the placement backend."""

from .transition_service import ApplicationTransitionService
from .notification_service import NotificationService
from .application_service import ApplicationService, check_eligibility
from .scoring_service import ATSScoringService, validate_threshold

__all__ = [
    "ApplicationTransitionService",
    "NotificationService",
    "ApplicationService",
    "check_eligibility",
    "ATSScoringService",
    "validate_threshold",
]
