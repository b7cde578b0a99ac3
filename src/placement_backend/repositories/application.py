"""Application repository for database operations."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from placement_backend.core.error_handling import DatabaseError
from placement_backend.models.application import Application
from placement_backend.models.application_status import ApplicationStatus
from .base import BaseRepository

logger = structlog.get_logger(__name__)


class ApplicationRepository(BaseRepository[Application]):
    """Repository for Application model operations.
    
    Withdrawn (soft-deleted) applications are excluded unless a method says
    otherwise.
    """
    
    def __init__(self):
        super().__init__(Application)
    
    def get_active(self, db: Session, application_id: UUID) -> Optional[Application]:
        """Get a non-withdrawn application by ID."""
        return (
            db.query(Application)
            .filter(
                and_(
                    Application.id == application_id,
                    Application.deleted_at.is_(None)
                )
            )
            .first()
        )
    
    def get_by_job(
        self,
        db: Session,
        job_id: UUID,
        status: Optional[ApplicationStatus] = None,
        include_deleted: bool = False
    ) -> List[Application]:
        """Get applications for a job, newest first.
        
        Args:
            db: Database session
            job_id: Job UUID
            status: Only return applications in this status (optional)
            include_deleted: Whether to include withdrawn applications
        """
        query = db.query(Application).filter(Application.job_id == job_id)
        
        if status is not None:
            query = query.filter(Application.status == ApplicationStatus(status).value)
        if not include_deleted:
            query = query.filter(Application.deleted_at.is_(None))
        
        return query.order_by(Application.created_at.desc()).all()
    
    def get_by_student(
        self,
        db: Session,
        student_id: UUID,
        status: Optional[ApplicationStatus] = None
    ) -> List[Application]:
        """Get a student's active applications, newest first."""
        query = db.query(Application).filter(
            and_(
                Application.student_id == student_id,
                Application.deleted_at.is_(None)
            )
        )
        
        if status is not None:
            query = query.filter(Application.status == ApplicationStatus(status).value)
        
        return query.order_by(Application.created_at.desc()).all()
    
    def search(
        self,
        db: Session,
        recruiter_id: Optional[UUID] = None,
        job_id: Optional[UUID] = None,
        student_id: Optional[UUID] = None,
        status: Optional[ApplicationStatus] = None
    ) -> List[Application]:
        """Get active applications matching every given filter, newest first."""
        query = db.query(Application).filter(Application.deleted_at.is_(None))
        
        if recruiter_id is not None:
            query = query.filter(Application.recruiter_id == recruiter_id)
        if job_id is not None:
            query = query.filter(Application.job_id == job_id)
        if student_id is not None:
            query = query.filter(Application.student_id == student_id)
        if status is not None:
            query = query.filter(Application.status == ApplicationStatus(status).value)
        
        return query.order_by(Application.created_at.desc()).all()
    
    def get_by_ids(self, db: Session, application_ids: Sequence[UUID]) -> List[Application]:
        """Get active applications whose IDs are in ``application_ids``."""
        if not application_ids:
            return []
        return (
            db.query(Application)
            .filter(
                and_(
                    Application.id.in_(list(application_ids)),
                    Application.deleted_at.is_(None)
                )
            )
            .all()
        )
    
    def get_active_for_pair(
        self,
        db: Session,
        student_id: UUID,
        job_id: UUID
    ) -> Optional[Application]:
        """Get the active application a student holds for a job, if any."""
        return (
            db.query(Application)
            .filter(
                and_(
                    Application.student_id == student_id,
                    Application.job_id == job_id,
                    Application.deleted_at.is_(None)
                )
            )
            .first()
        )
    
    def count_by_status(self, db: Session, job_id: UUID) -> Dict[str, int]:
        """Count active applications of a job per status.
        
        Every status is present in the result, zero when absent.
        """
        rows = (
            db.query(Application.status, func.count(Application.id))
            .filter(
                and_(
                    Application.job_id == job_id,
                    Application.deleted_at.is_(None)
                )
            )
            .group_by(Application.status)
            .all()
        )
        counts = {status.value: 0 for status in ApplicationStatus}
        for status, count in rows:
            counts[status] = count
        return counts
    
    def soft_delete(self, db: Session, application: Application) -> Application:
        """Withdraw an application by setting its deleted_at timestamp."""
        if application.deleted_at is not None:
            logger.warning("Application already withdrawn", application_id=str(application.id))
            return application
        
        application.soft_delete()
        db.commit()
        db.refresh(application)
        
        logger.info(
            "Application soft deleted",
            application_id=str(application.id),
            student_id=str(application.student_id)
        )
        return application
    
    def store_score_if_applied(
        self,
        db: Session,
        application_id: UUID,
        ats_score: Dict[str, Any],
        scored_at: datetime
    ) -> bool:
        """Write an ATS score onto an application still awaiting a decision.
        
        The status check and the write are one UPDATE statement, so a
        decision committed while the score was being computed is never
        overwritten.
        
        Returns:
            True if the score was stored, False if the application has left
            ``applied`` or been withdrawn
            
        Raises:
            DatabaseError: If the update fails
        """
        try:
            updated = (
                db.query(Application)
                .filter(
                    and_(
                        Application.id == application_id,
                        Application.status == ApplicationStatus.APPLIED.value,
                        Application.deleted_at.is_(None)
                    )
                )
                .update(
                    {
                        Application.ats_score: ats_score,
                        Application.ats_scored_at: scored_at,
                        Application.updated_at: scored_at
                    },
                    synchronize_session=False
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                "Score update failed",
                application_id=str(application_id),
                error=str(e)
            )
            raise DatabaseError(f"Failed to store ATS score: {str(e)}", original_error=e)
        
        return updated == 1
