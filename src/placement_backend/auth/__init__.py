"""Authentication and authorization module."""

from .dependencies import ensure_job_owner, get_current_user, require_role
from .models import CurrentUser, TokenData, UserRole
from .utils import create_access_token, verify_token

__all__ = [
    "ensure_job_owner",
    "get_current_user",
    "require_role",
    "CurrentUser",
    "TokenData",
    "UserRole",
    "create_access_token",
    "verify_token",
]
