"""Application lifecycle and status transition API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import structlog

from placement_backend.auth.dependencies import ensure_job_owner, get_current_user, require_role
from placement_backend.auth.models import CurrentUser, UserRole
from placement_backend.core.config import settings
from placement_backend.core.database import get_db
from placement_backend.core.error_handling import AuthorizationError
from placement_backend.core.logging import performance_logger
from placement_backend.models.application import Application
from placement_backend.repositories.application import ApplicationRepository
from placement_backend.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    BulkStatusUpdateRequest,
    BulkTransitionResult,
    JobApplicationsResponse,
    StatusUpdateRequest,
    TransitionLogResponse,
)
from placement_backend.schemas.scoring import ScoreRecalculationRequest, ScoreRecalculationResult
from placement_backend.services.application_service import ApplicationService
from placement_backend.services.scoring_service import ATSScoringService
from placement_backend.services.transition_service import ApplicationTransitionService
from .dependencies import (
    get_application_service,
    get_scoring_service,
    get_transition_service,
    resolve_student,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])

student_only = require_role(UserRole.STUDENT)
recruiter_only = require_role(UserRole.RECRUITER)
admin_only = require_role(UserRole.ADMIN)


def ensure_can_view(db: Session, application: Application, user: CurrentUser) -> None:
    """Allow the applying student, the job's recruiter and admins.
    
    Raises:
        AuthorizationError: Any other caller
    """
    if user.role == UserRole.STUDENT:
        if resolve_student(db, user).id != application.student_id:
            raise AuthorizationError("Not authorized to view this application")
    else:
        ensure_job_owner(db, application.job_id, user)


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def apply_for_job(
    application_data: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(student_only),
    service: ApplicationService = Depends(get_application_service)
):
    """Apply to a job as the authenticated student."""
    student = resolve_student(db, current_user)
    
    with performance_logger.log_operation_time("apply_for_job", user_id=str(current_user.user_id)):
        application = service.apply_for_job(
            student.id,
            application_data.job_id,
            cover_letter=application_data.cover_letter
        )
    
    return application


@router.get("/mine", response_model=List[ApplicationResponse])
async def list_my_applications(
    application_status: Optional[str] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(student_only),
    service: ApplicationService = Depends(get_application_service)
):
    """List the authenticated student's active applications."""
    student = resolve_student(db, current_user)
    return service.get_student_applications(student.id, status=application_status)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(student_only),
    service: ApplicationService = Depends(get_application_service)
):
    """Withdraw one of the student's applications while it is undecided."""
    student = resolve_student(db, current_user)
    service.withdraw_application(application_id, student.id)


@router.get("/job/{job_id}", response_model=JobApplicationsResponse)
async def list_job_applications(
    job_id: UUID,
    application_status: Optional[str] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(recruiter_only),
    service: ApplicationService = Depends(get_application_service)
):
    """List a job's applications with per-status counts."""
    ensure_job_owner(db, job_id, current_user)
    return service.get_job_applications(job_id, status=application_status)


@router.get("/recruiter/all", response_model=ApplicationListResponse)
async def list_recruiter_applications(
    job_id: Optional[UUID] = Query(None, description="Filter by job"),
    application_status: Optional[str] = Query(None, alias="status", description="Filter by status"),
    current_user: CurrentUser = Depends(recruiter_only),
    service: ApplicationService = Depends(get_application_service)
):
    """List active applications across all of the caller's jobs."""
    applications = service.get_recruiter_applications(
        current_user.user_id, job_id=job_id, status=application_status
    )
    return {"count": len(applications), "applications": applications}


@router.get("/admin/all", response_model=ApplicationListResponse)
async def list_all_applications(
    application_status: Optional[str] = Query(None, alias="status", description="Filter by status"),
    job_id: Optional[UUID] = Query(None, description="Filter by job"),
    student_id: Optional[UUID] = Query(None, description="Filter by student"),
    current_user: CurrentUser = Depends(admin_only),
    service: ApplicationService = Depends(get_application_service)
):
    applications = service.get_all_applications(
        status=application_status, job_id=job_id, student_id=student_id
    )
    return {"count": len(applications), "applications": applications}


@router.put("/bulk-update", response_model=BulkTransitionResult)
async def bulk_update_status(
    update: BulkStatusUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(recruiter_only),
    transitions: ApplicationTransitionService = Depends(get_transition_service)
):
    """Apply one status change to many applications.
    
    Every referenced application must belong to a job of the caller.
    Unknown IDs are reported per item by the transition engine.
    """
    applications = ApplicationRepository().get_by_ids(db, update.application_ids)
    for job_id in {application.job_id for application in applications}:
        ensure_job_owner(db, job_id, current_user)
    
    result = transitions.apply_bulk_transition(
        update.application_ids,
        update.status,
        reason=update.rejection_reason,
        notes=update.recruiter_notes,
        actor_id=current_user.user_id
    )
    
    logger.info(
        "Bulk status update via API",
        user_id=str(current_user.user_id),
        target_status=result.target_status.value,
        succeeded=result.success_count,
        failed=result.failure_count
    )
    return result


@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: UUID,
    update: StatusUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(recruiter_only),
    transitions: ApplicationTransitionService = Depends(get_transition_service),
    service: ApplicationService = Depends(get_application_service)
):
    """Move one application to a new status."""
    application = service.get_application(application_id)
    ensure_job_owner(db, application.job_id, current_user)
    
    return transitions.apply_single_transition(
        application_id,
        update.status,
        reason=update.rejection_reason,
        notes=update.recruiter_notes,
        actor_id=current_user.user_id
    )


@router.post("/job/{job_id}/calculate-scores", response_model=ScoreRecalculationResult)
async def calculate_scores(
    job_id: UUID,
    request: Optional[ScoreRecalculationRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(recruiter_only),
    scoring: ATSScoringService = Depends(get_scoring_service)
):
    """Score every undecided application of a job.
    
    Without a body the configured default threshold is used for
    auto-shortlisting.
    """
    ensure_job_owner(db, job_id, current_user)
    request = request or ScoreRecalculationRequest()
    
    threshold = None
    if request.auto_shortlist:
        threshold = request.auto_shortlist_threshold
        if threshold is None:
            threshold = settings.default_auto_shortlist_threshold
    
    result = await scoring.recalculate_scores(job_id, auto_shortlist_threshold=threshold)
    
    logger.info(
        "ATS scores recalculated via API",
        job_id=str(job_id),
        user_id=str(current_user.user_id),
        scored=result.scored,
        shortlisted=result.shortlisted,
        failed=result.failed
    )
    return result


@router.get("/{application_id}/history", response_model=List[TransitionLogResponse])
async def get_application_history(
    application_id: UUID,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    transitions: ApplicationTransitionService = Depends(get_transition_service),
    service: ApplicationService = Depends(get_application_service)
):
    """Status history of an application, newest first.
    
    Visible to the applying student, the owning recruiter and admins.
    """
    application = service.get_application(application_id)
    ensure_can_view(db, application, current_user)
    
    return transitions.get_transition_history(application_id, limit=limit)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service)
):
    """Get one active application.
    
    Visible to the applying student, the owning recruiter and admins.
    """
    application = service.get_application(application_id)
    ensure_can_view(db, application, current_user)
    return application
