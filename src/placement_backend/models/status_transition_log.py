"""Audit trail of application status changes."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from placement_backend.core.base import Base
from placement_backend.core.custom_types import GUID
from .application_status import ActorType


class StatusTransitionLog(Base):
    """One row per committed status transition."""
    
    __tablename__ = "status_transition_logs"
    
    id = Column(GUID(), primary_key=True, default=uuid4)
    application_id = Column(GUID(), ForeignKey("applications.id"), nullable=False, index=True)
    from_status = Column(String(20), nullable=False)
    to_status = Column(String(20), nullable=False)
    actor_id = Column(GUID(), nullable=True)  # Null for system actions
    actor_type = Column(String(20), default=ActorType.USER.value, nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    application = relationship("Application", back_populates="transitions")
    
    def __repr__(self) -> str:
        return f"<StatusTransitionLog(id={self.id}, application_id={self.application_id}, {self.from_status}->{self.to_status})>"
