"""Error taxonomy for the placement backend.

Every error raised by the services derives from :class:`PlacementError` and
carries a category that the API layer maps to an HTTP status code. Nothing in
this package retries automatically and none of these errors is process-fatal.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .logging import get_logger

logger = get_logger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and routing."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    UPSTREAM = "upstream"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for error handling and logging."""
    operation: str
    component: str
    user_id: Optional[str] = None
    request_id: Optional[str] = None
    additional_data: Optional[Dict[str, Any]] = None


class PlacementError(Exception):
    """Base exception class for placement backend errors."""
    
    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context
        self.original_error = original_error
        self.timestamp = datetime.utcnow()
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging and API responses."""
        return {
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "context": {
                "operation": self.context.operation if self.context else None,
                "component": self.context.component if self.context else None,
                "user_id": self.context.user_id if self.context else None,
                "request_id": self.context.request_id if self.context else None,
                "additional_data": self.context.additional_data if self.context else None,
            },
            "original_error": str(self.original_error) if self.original_error else None,
            "original_error_type": type(self.original_error).__name__ if self.original_error else None,
        }


class ValidationError(PlacementError):
    """Malformed input, e.g. a missing rejection reason or an out-of-range threshold."""
    
    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        super().__init__(
            message,
            ErrorCategory.VALIDATION,
            ErrorSeverity.LOW,
            **kwargs
        )
        self.field = field
        self.value = value


class NotFoundError(PlacementError):
    """Unknown application, job, student or notification id."""
    
    def __init__(self, resource: str, resource_id: Any, **kwargs):
        super().__init__(
            f"{resource} with ID {resource_id} not found",
            ErrorCategory.NOT_FOUND,
            ErrorSeverity.LOW,
            **kwargs
        )
        self.resource = resource
        self.resource_id = resource_id


class InvalidTransition(PlacementError):
    """Requested status change is not an edge of the status graph."""
    
    def __init__(self, from_status: str, to_status: str, message: str = None, **kwargs):
        super().__init__(
            message or f"Cannot change application status from {from_status} to {to_status}",
            ErrorCategory.INVALID_TRANSITION,
            ErrorSeverity.LOW,
            **kwargs
        )
        self.from_status = from_status
        self.to_status = to_status


class AuthorizationError(PlacementError):
    """Caller may not act on the requested resource."""
    
    def __init__(self, message: str = "Access denied", **kwargs):
        super().__init__(
            message,
            ErrorCategory.AUTHORIZATION,
            ErrorSeverity.HIGH,
            **kwargs
        )


class DatabaseError(PlacementError):
    """Error for database operations."""
    
    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            ErrorCategory.DATABASE,
            ErrorSeverity.HIGH,
            **kwargs
        )


class UpstreamError(PlacementError):
    """Scoring collaborator failed, timed out or returned an unusable answer."""
    
    def __init__(self, message: str, service_name: str = "ats_scoring", **kwargs):
        super().__init__(
            message,
            ErrorCategory.UPSTREAM,
            ErrorSeverity.MEDIUM,
            **kwargs
        )
        self.service_name = service_name


def log_error(error: PlacementError) -> None:
    """Log an error at the level matching its severity."""
    log_data = error.to_dict()
    
    if error.severity == ErrorSeverity.CRITICAL:
        logger.critical("Critical error occurred", **log_data)
    elif error.severity == ErrorSeverity.HIGH:
        logger.error("High severity error occurred", **log_data)
    elif error.severity == ErrorSeverity.MEDIUM:
        logger.warning("Medium severity error occurred", **log_data)
    else:
        logger.info("Low severity error occurred", **log_data)
