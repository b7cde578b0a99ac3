"""Application model linking students to job postings."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, JSON, Index, text
from sqlalchemy.orm import relationship

from placement_backend.core.base import Base
from placement_backend.core.custom_types import GUID
from .application_status import ApplicationStatus, INITIAL_STATUS


class Application(Base):
    """One student's submission to one job posting."""
    
    __tablename__ = "applications"
    __table_args__ = (
        Index("ix_applications_job_status", "job_id", "status"),
        Index("ix_applications_student_status", "student_id", "status"),
        Index("ix_applications_recruiter_status", "recruiter_id", "status"),
        # At most one active application per student and job
        Index(
            "uq_applications_active_student_job",
            "student_id",
            "job_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
    
    id = Column(GUID(), primary_key=True, default=uuid4)
    job_id = Column(GUID(), ForeignKey("jobs.id"), nullable=False)
    student_id = Column(GUID(), ForeignKey("students.id"), nullable=False)
    recruiter_id = Column(GUID(), nullable=False)
    status = Column(String(20), default=INITIAL_STATUS.value, nullable=False)
    cover_letter = Column(Text, nullable=True)
    
    # Milestones, each stamped once by the transition engine
    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    shortlisted_at = Column(DateTime, nullable=True)
    shortlisted_by = Column(GUID(), nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    selected_at = Column(DateTime, nullable=True)
    recruiter_notes = Column(Text, nullable=True)
    
    # Written only by the scoring trigger
    ats_score = Column(JSON, nullable=True)
    ats_scored_at = Column(DateTime, nullable=True)
    
    deleted_at = Column(DateTime, nullable=True)  # Set on withdrawal
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    # Relationships
    job = relationship("Job", back_populates="applications")
    student = relationship("Student", back_populates="applications")
    transitions = relationship(
        "StatusTransitionLog",
        back_populates="application",
        order_by="StatusTransitionLog.created_at.desc()"
    )
    
    def __repr__(self) -> str:
        return f"<Application(id={self.id}, student_id={self.student_id}, job_id={self.job_id}, status={self.status})>"
    
    @property
    def current_status(self) -> ApplicationStatus:
        return ApplicationStatus(self.status)
    
    @property
    def is_active(self) -> bool:
        """Withdrawn applications are kept but no longer active."""
        return self.deleted_at is None
    
    def soft_delete(self) -> None:
        """Mark the application as withdrawn."""
        self.deleted_at = datetime.utcnow()
