"""Authentication utilities."""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID
import uuid

from jose import JWTError, jwt
import structlog

from placement_backend.core.config import settings
from .models import TokenData, UserRole

logger = structlog.get_logger(__name__)


def create_access_token(
    user_id: UUID,
    role: UserRole,
    profile_id: Optional[UUID] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.
    
    Args:
        user_id: Subject of the token
        role: Portal role of the user
        profile_id: Id of the role record (optional)
        expires_delta: Token expiration time
        
    Returns:
        Encoded JWT token
    """
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    
    to_encode = {
        "sub": str(user_id),
        "role": UserRole(role).value,
        "exp": expire,
        "iat": datetime.utcnow(),
        "jti": str(uuid.uuid4()),
    }
    if profile_id is not None:
        to_encode["profile_id"] = str(profile_id)
    
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    
    logger.debug("Access token created", user_id=str(user_id), expires_at=expire.isoformat())
    return encoded_jwt


def verify_token(token: str) -> Optional[TokenData]:
    """Verify and decode a JWT token.
    
    Args:
        token: JWT token to verify
        
    Returns:
        TokenData if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning("Token verification failed", error=str(e))
        return None
    
    user_id_str = payload.get("sub")
    role = payload.get("role")
    if user_id_str is None or role is None:
        logger.warning("Token missing required claims")
        return None
    
    try:
        profile_id_str = payload.get("profile_id")
        return TokenData(
            user_id=UUID(user_id_str),
            role=UserRole(role),
            profile_id=UUID(profile_id_str) if profile_id_str else None
        )
    except ValueError as e:
        logger.warning("Token claims malformed", error=str(e))
        return None
