"""Pydantic schemas for applications and status transitions."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, validator

from placement_backend.models.application_status import ApplicationStatus, status_label
from .scoring import ATSScore


class ApplicationCreate(BaseModel):
    """Schema for a student applying to a job."""
    
    job_id: UUID = Field(..., description="Job posting UUID")
    cover_letter: Optional[str] = Field(None, max_length=5000, description="Optional cover letter")


class StatusUpdateRequest(BaseModel):
    """Schema for a single status transition.
    
    The status is kept as a raw string so that unknown values reach the
    transition engine and are reported as validation errors there.
    """
    
    status: str = Field(..., description="Target status")
    rejection_reason: Optional[str] = Field(None, description="Required when rejecting")
    recruiter_notes: Optional[str] = Field(None, description="Optional recruiter notes")


class BulkStatusUpdateRequest(BaseModel):
    """Schema for applying one transition to many applications."""
    
    application_ids: List[UUID] = Field(..., description="Applications to update")
    status: str = Field(..., description="Target status")
    rejection_reason: Optional[str] = None
    recruiter_notes: Optional[str] = None
    
    @validator('application_ids')
    def validate_application_ids(cls, v):
        """Validate that at least one application is selected."""
        if not v:
            raise ValueError('No applications selected')
        return v


class TransitionFailure(BaseModel):
    """Why one item of a bulk transition failed."""
    
    error: str
    message: str


class BulkTransitionResult(BaseModel):
    """Per-item outcome of a bulk transition."""
    
    target_status: ApplicationStatus
    requested: int = 0
    succeeded: List[UUID] = Field(default_factory=list)
    failed: Dict[UUID, TransitionFailure] = Field(default_factory=dict)
    
    @property
    def success_count(self) -> int:
        return len(self.succeeded)
    
    @property
    def failure_count(self) -> int:
        return len(self.failed)


class ApplicationResponse(BaseModel):
    """Schema for application response."""
    
    id: UUID
    job_id: UUID
    student_id: UUID
    recruiter_id: UUID
    status: ApplicationStatus
    cover_letter: Optional[str] = None
    applied_at: datetime
    shortlisted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    selected_at: Optional[datetime] = None
    recruiter_notes: Optional[str] = None
    ats_score: Optional[ATSScore] = None
    ats_scored_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    
    @computed_field
    @property
    def status_label(self) -> str:
        return status_label(self.status)
    
    class Config:
        from_attributes = True


class JobApplicationsResponse(BaseModel):
    """Applications of one job with per-status counts."""
    
    job_id: UUID
    stats: Dict[str, int]
    applications: List[ApplicationResponse]


class ApplicationListResponse(BaseModel):
    """A filtered list of applications."""
    
    count: int
    applications: List[ApplicationResponse]


class TransitionLogResponse(BaseModel):
    """Schema for one status history entry."""
    
    id: UUID
    application_id: UUID
    from_status: str
    to_status: str
    actor_id: Optional[UUID] = None
    actor_type: str
    reason: Optional[str] = None
    created_at: datetime
    
    class Config:
        from_attributes = True
