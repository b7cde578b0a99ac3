"""Pydantic schemas for data validation and serialization."""

from .scoring import ATSScore, Recommendation, ScoreRecalculationRequest, ScoreRecalculationResult, ScoreItemResult
from .application import (
    ApplicationCreate,
    StatusUpdateRequest,
    BulkStatusUpdateRequest,
    BulkTransitionResult,
    TransitionFailure,
    ApplicationResponse,
    JobApplicationsResponse,
    ApplicationListResponse,
    TransitionLogResponse,
)
from .notification import NotificationResponse, NotificationListResponse

__all__ = [
    "ATSScore", "Recommendation", "ScoreRecalculationRequest", "ScoreRecalculationResult", "ScoreItemResult",
    "ApplicationCreate", "StatusUpdateRequest", "BulkStatusUpdateRequest",
    "BulkTransitionResult", "TransitionFailure", "ApplicationResponse",
    "JobApplicationsResponse", "ApplicationListResponse", "TransitionLogResponse",
    "NotificationResponse", "NotificationListResponse",
]
