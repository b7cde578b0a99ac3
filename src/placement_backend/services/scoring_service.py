"""ATS scoring trigger.

Scores every undecided (``applied``) application of a job through the scoring
collaborator, stores the result on the application and, when a threshold is
given, shortlists the applications that reach it. Scoring calls run
concurrently up to ``settings.scoring_max_concurrency`` and each one is
bounded by ``settings.scoring_timeout_seconds``. Every application is handled
on its own: a failed call or write is recorded in the summary and the rest of
the batch carries on.
"""

import asyncio
import time
from datetime import datetime
from typing import Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from placement_backend.core.config import settings
from placement_backend.core.error_handling import (
    ErrorCategory,
    NotFoundError,
    PlacementError,
    UpstreamError,
    ValidationError,
)
from placement_backend.core.logging import performance_logger
from placement_backend.models.application import Application
from placement_backend.models.application_status import ActorType, ApplicationStatus
from placement_backend.models.job import Job
from placement_backend.models.student import Student
from placement_backend.repositories.application import ApplicationRepository
from placement_backend.repositories.job import JobRepository
from placement_backend.schemas.scoring import ATSScore, ScoreItemResult, ScoreRecalculationResult
from placement_backend.scoring.client import ScoringClient
from .transition_service import ApplicationTransitionService

logger = structlog.get_logger(__name__)

ScoreOutcome = Union[ATSScore, UpstreamError]


def validate_threshold(threshold: Optional[int]) -> Optional[int]:
    """Check an auto-shortlist threshold.
    
    Raises:
        ValidationError: Not an integer in 0-100
    """
    if threshold is None:
        return None
    if isinstance(threshold, bool) or not isinstance(threshold, int) or not 0 <= threshold <= 100:
        raise ValidationError(
            f"Auto-shortlist threshold must be an integer between 0 and 100, got {threshold!r}",
            field="auto_shortlist_threshold",
            value=threshold
        )
    return threshold


class ATSScoringService:
    """Recalculates ATS scores for a job and optionally auto-shortlists."""
    
    def __init__(
        self,
        db: Session,
        scoring_client: ScoringClient,
        transition_service: Optional[ApplicationTransitionService] = None,
        timeout_seconds: Optional[float] = None,
        max_concurrency: Optional[int] = None
    ):
        self.db = db
        self.scoring_client = scoring_client
        self.transitions = transition_service or ApplicationTransitionService(db)
        self.repository = ApplicationRepository()
        self.jobs = JobRepository()
        self.timeout_seconds = timeout_seconds or settings.scoring_timeout_seconds
        self.max_concurrency = max_concurrency or settings.scoring_max_concurrency
    
    async def _score_one(
        self,
        semaphore: asyncio.Semaphore,
        application_id: UUID,
        student: Student,
        job: Job
    ) -> ScoreOutcome:
        """Score one candidate, turning every failure into an UpstreamError."""
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    self.scoring_client.score(student, job),
                    timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError as e:
                error = UpstreamError(
                    f"Scoring timed out after {self.timeout_seconds}s",
                    original_error=e
                )
            except UpstreamError as e:
                error = e
            except Exception as e:
                error = UpstreamError(f"Scoring failed: {str(e)}", original_error=e)
        
        logger.warning(
            "Scoring failed for application",
            application_id=str(application_id),
            job_id=str(job.id),
            error=error.message
        )
        return error
    
    def _persist_outcome(
        self,
        application: Application,
        outcome: ScoreOutcome,
        threshold: Optional[int]
    ) -> ScoreItemResult:
        item = ScoreItemResult(application_id=application.id)
        
        if isinstance(outcome, UpstreamError):
            item.error = outcome.category.value
            item.message = outcome.message
            return item
        
        try:
            stored = self.repository.store_score_if_applied(
                self.db,
                application.id,
                ats_score=outcome.model_dump(mode="json"),
                scored_at=datetime.utcnow()
            )
        except PlacementError as e:
            item.error = e.category.value
            item.message = e.message
            return item
        
        if not stored:
            self.db.refresh(application)
            item.error = ErrorCategory.INVALID_TRANSITION.value
            item.message = (
                f"Application is {application.status} and no longer awaiting a score"
                if application.is_active
                else "Application was withdrawn while being scored"
            )
            logger.info(
                "Discarded score for decided application",
                application_id=str(application.id),
                status=application.status,
                score=outcome.score
            )
            return item
        
        item.scored = True
        item.score = outcome.score
        
        if threshold is not None and outcome.score >= threshold:
            try:
                self.transitions.apply_single_transition(
                    application.id,
                    ApplicationStatus.SHORTLISTED,
                    notes=f"Auto-shortlisted: ATS Score {outcome.score}%",
                    actor_type=ActorType.SYSTEM
                )
                item.shortlisted = True
            except PlacementError as e:
                item.error = e.category.value
                item.message = e.message
        
        return item
    
    async def recalculate_scores(
        self,
        job_id: UUID,
        auto_shortlist_threshold: Optional[int] = None
    ) -> ScoreRecalculationResult:
        """Score every ``applied`` application of a job.
        
        Args:
            job_id: Job UUID
            auto_shortlist_threshold: Shortlist applications scoring at or
                above this value (optional, 0-100)
            
        Returns:
            Batch summary with one entry per application
            
        Raises:
            ValidationError: Threshold out of range
            NotFoundError: Unknown job
        """
        threshold = validate_threshold(auto_shortlist_threshold)
        
        job = self.jobs.get_by_id(self.db, job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        
        applications: List[Application] = self.repository.get_by_job(
            self.db, job.id, status=ApplicationStatus.APPLIED
        )
        # Load profiles up front so no lazy loads happen inside the coroutines
        students: Dict[UUID, Student] = {app.id: app.student for app in applications}
        
        result = ScoreRecalculationResult(
            job_id=job.id,
            auto_shortlist_threshold=threshold,
            total=len(applications)
        )
        if not applications:
            logger.info("No applications to score", job_id=str(job.id))
            return result
        
        started = time.monotonic()
        semaphore = asyncio.Semaphore(self.max_concurrency)
        
        with performance_logger.log_operation_time("recalculate_ats_scores", job_id=str(job.id)):
            outcomes = await asyncio.gather(*(
                self._score_one(semaphore, app.id, students[app.id], job)
                for app in applications
            ))
            
            for application, outcome in zip(applications, outcomes):
                item = self._persist_outcome(application, outcome, threshold)
                result.items.append(item)
        
        result.scored = sum(1 for item in result.items if item.scored)
        result.shortlisted = sum(1 for item in result.items if item.shortlisted)
        result.failed = sum(1 for item in result.items if item.error is not None)
        
        performance_logger.log_processing_metrics(
            "recalculate_ats_scores",
            items_processed=result.total,
            duration_seconds=time.monotonic() - started,
            success_count=result.scored,
            error_count=result.failed,
            job_id=str(job.id),
            shortlisted=result.shortlisted
        )
        
        return result
