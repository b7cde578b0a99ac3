"""FastAPI dependencies for authentication and authorization."""

from typing import Callable
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import structlog

from placement_backend.core.error_handling import AuthorizationError, NotFoundError
from placement_backend.models.job import Job
from placement_backend.repositories.job import JobRepository
from .models import CurrentUser, UserRole
from .utils import verify_token

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """Get current authenticated user from JWT token.
    
    Raises:
        HTTPException: If authentication fails
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    if not credentials:
        logger.warning("No credentials provided")
        raise credentials_exception
    
    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise credentials_exception
    
    return CurrentUser(
        user_id=token_data.user_id,
        role=token_data.role,
        profile_id=token_data.profile_id
    )


def require_role(*roles: UserRole) -> Callable:
    """Dependency factory restricting an endpoint to some roles.
    
    Admins always pass.
    """
    async def check_role(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.is_admin or current_user.role in roles:
            return current_user
        
        logger.warning(
            "Role access denied",
            user_id=str(current_user.user_id),
            role=current_user.role.value,
            required=[r.value for r in roles]
        )
        raise AuthorizationError(f"This action requires role: {', '.join(r.value for r in roles)}")
    
    return check_role


def ensure_job_owner(db: Session, job_id: UUID, user: CurrentUser) -> Job:
    """Check that the caller owns a job.
    
    Args:
        db: Database session
        job_id: Job UUID
        user: Authenticated caller
        
    Returns:
        The job
        
    Raises:
        NotFoundError: Unknown job
        AuthorizationError: Caller is neither the owning recruiter nor an admin
    """
    job = JobRepository().get_by_id(db, job_id)
    if job is None:
        raise NotFoundError("Job", job_id)
    
    if user.is_admin:
        return job
    
    if user.role != UserRole.RECRUITER or job.recruiter_id != user.user_id:
        logger.warning(
            "Job access denied",
            user_id=str(user.user_id),
            job_id=str(job_id)
        )
        raise AuthorizationError("Not authorized to manage applications for this job")
    
    return job
