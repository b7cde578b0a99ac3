"""Job posting model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Text, JSON, Float, Integer, Boolean
from sqlalchemy.orm import relationship

from placement_backend.core.base import Base
from placement_backend.core.custom_types import GUID


class Job(Base):
    """Job posting owned by a recruiter."""
    
    __tablename__ = "jobs"
    
    id = Column(GUID(), primary_key=True, default=uuid4)
    recruiter_id = Column(GUID(), nullable=False, index=True)  # User ID of the owning recruiter
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    job_type = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    skills_required = Column(JSON, nullable=False, default=list)
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_type = Column(String(20), nullable=True, default="LPA")
    
    # Eligibility criteria
    min_cgpa = Column(Float, nullable=True)
    max_backlogs = Column(Integer, nullable=True)
    branches = Column(JSON, nullable=False, default=list)
    graduation_years = Column(JSON, nullable=False, default=list)
    
    application_deadline = Column(DateTime, nullable=True)
    approval_status = Column(String(20), default="pending", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    applications = relationship("Application", back_populates="job")
    
    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title='{self.title}', recruiter_id={self.recruiter_id})>"
    
    @property
    def is_open(self) -> bool:
        """Approved, active and before its deadline."""
        if self.approval_status != "approved" or not self.is_active:
            return False
        if self.application_deadline and self.application_deadline < datetime.utcnow():
            return False
        return True
