"""Application status transition engine.

Validates status changes against the status graph in
``models.application_status`` and applies them one record at a time. Each
application is its own unit of work: the status change, its timestamps and
the history row are committed together, and the transition event goes out
only after that commit succeeds.

Callers are expected to have checked that the acting recruiter owns the job;
ownership is not re-checked here.
"""

import time
from datetime import datetime
from typing import Iterable, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from placement_backend.core.error_handling import (
    DatabaseError,
    InvalidTransition,
    NotFoundError,
    PlacementError,
    ValidationError,
)
from placement_backend.core.event_publisher import TransitionEvent, TransitionEventPublisher
from placement_backend.core.logging import performance_logger
from placement_backend.models.application import Application
from placement_backend.models.application_status import (
    ALLOWED_TRANSITIONS,
    FIRST_REACHED_TIMESTAMPS,
    ActorType,
    ApplicationStatus,
    parse_status,
)
from placement_backend.models.status_transition_log import StatusTransitionLog
from placement_backend.repositories.application import ApplicationRepository
from placement_backend.schemas.application import BulkTransitionResult, TransitionFailure

logger = structlog.get_logger(__name__)


def _require_reason(target: ApplicationStatus, reason: Optional[str]) -> Optional[str]:
    """Return the cleaned rejection reason, or raise if rejecting without one."""
    cleaned = reason.strip() if reason else None
    if target == ApplicationStatus.REJECTED and not cleaned:
        raise ValidationError(
            "Rejection reason is required",
            field="rejection_reason",
            value=reason
        )
    return cleaned


class ApplicationTransitionService:
    """Applies single and bulk status transitions."""
    
    def __init__(self, db: Session, publisher: Optional[TransitionEventPublisher] = None):
        self.db = db
        self.repository = ApplicationRepository()
        self.publisher = publisher or TransitionEventPublisher()
    
    def apply_single_transition(
        self,
        application_id: UUID,
        target_status: Union[str, ApplicationStatus],
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        actor_id: Optional[UUID] = None,
        actor_type: ActorType = ActorType.USER
    ) -> Application:
        """Move one application to ``target_status``.
        
        Args:
            application_id: UUID of the application
            target_status: Status to move to
            reason: Rejection reason, required when the target is rejected
            notes: Recruiter notes to store with the change (optional)
            actor_id: UUID of the user performing the change (optional)
            actor_type: Type of actor (USER or SYSTEM)
            
        Returns:
            The updated application
            
        Raises:
            ValidationError: Unknown target status or missing rejection reason
            NotFoundError: No active application with this ID
            InvalidTransition: The status graph has no such edge
            DatabaseError: The change could not be committed
        """
        target = parse_status(target_status)
        
        application = self.repository.get_active(self.db, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)
        
        current = application.current_status
        if target not in ALLOWED_TRANSITIONS[current]:
            logger.info(
                "Illegal status transition rejected",
                application_id=str(application_id),
                from_status=current.value,
                to_status=target.value
            )
            raise InvalidTransition(current.value, target.value)
        
        rejection_reason = _require_reason(target, reason)
        occurred_at = datetime.utcnow()
        
        try:
            application.status = target.value
            
            timestamp_field = FIRST_REACHED_TIMESTAMPS.get(target)
            if timestamp_field and getattr(application, timestamp_field) is None:
                setattr(application, timestamp_field, occurred_at)
            
            if target == ApplicationStatus.SHORTLISTED and application.shortlisted_by is None:
                application.shortlisted_by = actor_id
            if target == ApplicationStatus.REJECTED:
                application.rejection_reason = rejection_reason
            if notes:
                application.recruiter_notes = notes
            
            self.db.add(StatusTransitionLog(
                application_id=application.id,
                from_status=current.value,
                to_status=target.value,
                actor_id=actor_id,
                actor_type=actor_type.value,
                reason=rejection_reason or notes,
                created_at=occurred_at
            ))
            
            self.db.commit()
            
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Application status transition failed",
                application_id=str(application_id),
                from_status=current.value,
                to_status=target.value,
                error=str(e)
            )
            raise DatabaseError(
                f"Failed to update application {application_id}: {str(e)}",
                original_error=e
            )
        
        self.db.refresh(application)
        
        logger.info(
            "Application status transition completed",
            application_id=str(application_id),
            from_status=current.value,
            to_status=target.value,
            actor_id=str(actor_id) if actor_id else None,
            actor_type=actor_type.value
        )
        
        self.publisher.publish(TransitionEvent(
            application_id=application.id,
            from_status=current.value,
            to_status=target.value,
            occurred_at=occurred_at,
            actor_id=actor_id,
            actor_type=actor_type.value
        ))
        
        return application
    
    def apply_bulk_transition(
        self,
        application_ids: Iterable[UUID],
        target_status: Union[str, ApplicationStatus],
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        actor_id: Optional[UUID] = None
    ) -> BulkTransitionResult:
        """Move many applications to ``target_status``, each independently.
        
        Request-level problems (unknown status, empty selection, rejecting
        without a reason) fail the whole call before anything is touched.
        After that every application succeeds or fails on its own and the
        result lists both sides keyed by ID.
        """
        target = parse_status(target_status)
        
        # Duplicates in the selection are processed once, in request order
        unique_ids: List[UUID] = list(dict.fromkeys(application_ids))
        if not unique_ids:
            raise ValidationError("No applications selected", field="application_ids")
        _require_reason(target, reason)
        
        result = BulkTransitionResult(target_status=target, requested=len(unique_ids))
        started = time.monotonic()
        
        for application_id in unique_ids:
            try:
                self.apply_single_transition(
                    application_id,
                    target,
                    reason=reason,
                    notes=notes,
                    actor_id=actor_id
                )
                result.succeeded.append(application_id)
            except PlacementError as e:
                result.failed[application_id] = TransitionFailure(
                    error=e.category.value,
                    message=e.message
                )
            except Exception as e:
                self.db.rollback()
                logger.error(
                    "Unexpected error in bulk transition item",
                    application_id=str(application_id),
                    error=str(e)
                )
                result.failed[application_id] = TransitionFailure(error="system", message=str(e))
        
        performance_logger.log_processing_metrics(
            "bulk_status_transition",
            items_processed=len(unique_ids),
            duration_seconds=time.monotonic() - started,
            success_count=result.success_count,
            error_count=result.failure_count,
            target_status=target.value
        )
        
        return result
    
    def can_transition(
        self,
        application_id: UUID,
        target_status: Union[str, ApplicationStatus]
    ) -> Tuple[bool, str]:
        """Check whether an application could move to ``target_status``.
        
        The rejection reason is not considered here.
        
        Returns:
            Tuple of (can_transition, reason)
        """
        try:
            target = parse_status(target_status)
        except ValidationError as e:
            return False, e.message
        
        application = self.repository.get_active(self.db, application_id)
        if application is None:
            return False, f"Application with ID {application_id} not found"
        
        current = application.current_status
        if not ALLOWED_TRANSITIONS[current]:
            return False, f"Cannot transition from terminal state {current.value}"
        if target not in ALLOWED_TRANSITIONS[current]:
            return False, f"Cannot change application status from {current.value} to {target.value}"
        
        return True, "Transition is allowed"
    
    def get_transition_history(
        self,
        application_id: UUID,
        limit: int = 100
    ) -> List[StatusTransitionLog]:
        """Get the status history of an application, newest first."""
        return (
            self.db.query(StatusTransitionLog)
            .filter(StatusTransitionLog.application_id == application_id)
            .order_by(StatusTransitionLog.created_at.desc())
            .limit(limit)
            .all()
        )
