"""Application lifecycle outside the status graph: applying, withdrawing, listing."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import structlog

from placement_backend.core.error_handling import (
    AuthorizationError,
    DatabaseError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from placement_backend.models.application import Application
from placement_backend.models.application_status import (
    INITIAL_STATUS,
    WITHDRAWABLE_STATUSES,
    ApplicationStatus,
    parse_status,
)
from placement_backend.models.job import Job
from placement_backend.models.student import Student
from placement_backend.repositories.application import ApplicationRepository
from placement_backend.repositories.job import JobRepository
from placement_backend.repositories.student import StudentRepository
from .notification_service import NotificationService

logger = structlog.get_logger(__name__)


def check_eligibility(student: Student, job: Job) -> None:
    """Check a student against a job's eligibility criteria.
    
    Raises:
        ValidationError: Describing the first criterion the student misses
    """
    if job.min_cgpa is not None and (student.cgpa is None or student.cgpa < job.min_cgpa):
        raise ValidationError(
            f"Minimum CGPA required: {job.min_cgpa}. Your CGPA: {student.cgpa if student.cgpa is not None else 'Not set'}",
            field="cgpa",
            value=student.cgpa
        )
    
    if job.max_backlogs is not None and (student.backlogs or 0) > job.max_backlogs:
        raise ValidationError(
            f"Maximum backlogs allowed: {job.max_backlogs}. Your backlogs: {student.backlogs}",
            field="backlogs",
            value=student.backlogs
        )
    
    branches = [branch.upper() for branch in (job.branches or [])]
    if branches and (student.branch or "").upper() not in branches:
        raise ValidationError(
            f"This job is only for branches: {', '.join(branches)}. Your branch: {student.branch}",
            field="branch",
            value=student.branch
        )
    
    years = job.graduation_years or []
    if years and student.graduation_year not in years:
        raise ValidationError(
            f"This job is only for graduation years: {', '.join(str(y) for y in years)}. "
            f"Your year: {student.graduation_year}",
            field="graduation_year",
            value=student.graduation_year
        )


class ApplicationService:
    """Service for creating, withdrawing and listing applications."""
    
    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.repository = ApplicationRepository()
        self.jobs = JobRepository()
        self.students = StudentRepository()
        self.notifications = notifications or NotificationService(db)
    
    def get_job(self, job_id: UUID) -> Job:
        job = self.jobs.get_by_id(self.db, job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        return job
    
    def get_student(self, student_id: UUID) -> Student:
        student = self.students.get_by_id(self.db, student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student
    
    def get_application(self, application_id: UUID) -> Application:
        application = self.repository.get_active(self.db, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)
        return application
    
    def apply_for_job(
        self,
        student_id: UUID,
        job_id: UUID,
        cover_letter: Optional[str] = None
    ) -> Application:
        """Create a new application in the initial status.
        
        Args:
            student_id: Student UUID
            job_id: Job UUID
            cover_letter: Optional cover letter
            
        Returns:
            Created application
            
        Raises:
            NotFoundError: Unknown job or student
            ValidationError: Job closed, student ineligible, or already applied
        """
        job = self.get_job(job_id)
        
        if job.approval_status != "approved":
            raise ValidationError("This job is not available for applications", field="job_id", value=job_id)
        if not job.is_active:
            raise ValidationError("This job posting is no longer active", field="job_id", value=job_id)
        if not job.is_open:
            raise ValidationError("Application deadline has passed", field="job_id", value=job_id)
        
        student = self.get_student(student_id)
        
        if self.repository.get_active_for_pair(self.db, student_id, job_id) is not None:
            raise ValidationError("You have already applied for this job", field="job_id", value=job_id)
        
        check_eligibility(student, job)
        
        try:
            application = self.repository.create(
                self.db,
                job_id=job.id,
                student_id=student.id,
                recruiter_id=job.recruiter_id,
                status=INITIAL_STATUS.value,
                cover_letter=cover_letter
            )
        except DatabaseError as e:
            # A concurrent request for the same pair won the unique index
            if isinstance(e.original_error, IntegrityError):
                logger.info(
                    "Duplicate application rejected by database",
                    job_id=str(job.id),
                    student_id=str(student.id)
                )
                raise ValidationError(
                    "You have already applied for this job",
                    field="job_id",
                    value=job_id
                )
            raise
        
        logger.info(
            "Application created",
            application_id=str(application.id),
            job_id=str(job.id),
            student_id=str(student.id),
            status=application.status
        )
        
        try:
            self.notifications.notify_new_application(job.recruiter_id, student, job, application.id)
        except Exception as e:
            logger.warning(
                "Failed to notify recruiter of new application",
                application_id=str(application.id),
                error=str(e)
            )
        
        return application
    
    def withdraw_application(self, application_id: UUID, student_id: UUID) -> Application:
        """Withdraw a student's own application.
        
        Raises:
            NotFoundError: No active application with this ID
            AuthorizationError: The application belongs to another student
            InvalidTransition: A decision has already been made
        """
        application = self.get_application(application_id)
        
        if application.student_id != student_id:
            raise AuthorizationError("Not authorized to withdraw this application")
        
        if application.current_status not in WITHDRAWABLE_STATUSES:
            raise InvalidTransition(
                application.status,
                "withdrawn",
                message=f"Cannot withdraw application that is {application.status}"
            )
        
        application = self.repository.soft_delete(self.db, application)
        logger.info(
            "Application withdrawn",
            application_id=str(application_id),
            student_id=str(student_id)
        )
        return application
    
    def get_job_applications(
        self,
        job_id: UUID,
        status: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get a job's applications with per-status counts."""
        job = self.get_job(job_id)
        status_filter = parse_status(status) if status else None
        
        applications = self.repository.get_by_job(self.db, job.id, status=status_filter)
        counts = self.repository.count_by_status(self.db, job.id)
        stats = {"total": sum(counts.values()), **counts}
        
        return {"job_id": job.id, "stats": stats, "applications": applications}
    
    def get_student_applications(
        self,
        student_id: UUID,
        status: Optional[str] = None
    ) -> List[Application]:
        status_filter: Optional[ApplicationStatus] = parse_status(status) if status else None
        return self.repository.get_by_student(self.db, student_id, status=status_filter)
    
    def get_recruiter_applications(
        self,
        recruiter_id: UUID,
        job_id: Optional[UUID] = None,
        status: Optional[str] = None
    ) -> List[Application]:
        """Active applications across all of a recruiter's jobs.
        
        Args:
            recruiter_id: Recruiter user UUID
            job_id: Narrow to one job (optional)
            status: Narrow to one status (optional)
        """
        status_filter = parse_status(status) if status else None
        return self.repository.search(
            self.db, recruiter_id=recruiter_id, job_id=job_id, status=status_filter
        )
    
    def get_all_applications(
        self,
        status: Optional[str] = None,
        job_id: Optional[UUID] = None,
        student_id: Optional[UUID] = None
    ) -> List[Application]:
        """Active applications portal-wide, for administrators."""
        status_filter = parse_status(status) if status else None
        return self.repository.search(
            self.db, job_id=job_id, student_id=student_id, status=status_filter
        )
