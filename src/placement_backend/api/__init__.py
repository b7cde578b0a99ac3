"""HTTP API routers."""

from .applications import router as applications_router
from .notifications import router as notifications_router

__all__ = ["applications_router", "notifications_router"]
