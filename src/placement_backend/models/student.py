"""Student profile model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, JSON, Float, Integer
from sqlalchemy.orm import relationship

from placement_backend.core.base import Base
from placement_backend.core.custom_types import GUID


class Student(Base):
    """Student profile used for eligibility checks and ATS scoring."""
    
    __tablename__ = "students"
    
    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(GUID(), unique=True, nullable=False)
    registration_number = Column(String(50), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    branch = Column(String(50), nullable=True)
    cgpa = Column(Float, nullable=True)
    backlogs = Column(Integer, nullable=False, default=0)
    graduation_year = Column(Integer, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    projects = Column(JSON, nullable=False, default=list)  # [{"title", "description", "technologies"}]
    internships = Column(JSON, nullable=False, default=list)  # [{"company_name", "role", "duration"}]
    resume_data = Column(JSON, nullable=True)  # AI-parsed resume
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    applications = relationship("Application", back_populates="student")
    
    def __repr__(self) -> str:
        return f"<Student(id={self.id}, registration_number='{self.registration_number}')>"
    
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
