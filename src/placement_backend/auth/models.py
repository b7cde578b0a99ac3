"""Authentication models and schemas."""

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class UserRole(str, Enum):
    """Portal roles carried in the access token."""
    STUDENT = "student"
    RECRUITER = "recruiter"
    ADMIN = "admin"
    ALUMNI = "alumni"


class TokenData(BaseModel):
    """Decoded token claims."""
    user_id: Optional[UUID] = None
    role: Optional[UserRole] = None
    profile_id: Optional[UUID] = None


class CurrentUser(BaseModel):
    """Authenticated caller of a request.
    
    ``profile_id`` is the id of the role record (the student row for a
    student), when the token carries one.
    """
    user_id: UUID
    role: UserRole
    profile_id: Optional[UUID] = None
    
    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
