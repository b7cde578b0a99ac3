"""FastAPI application for the placement backend."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

from placement_backend import __version__
from placement_backend.api import applications_router, notifications_router
from placement_backend.core.config import settings
from placement_backend.core.database import close_db, db_manager, init_db
from placement_backend.core.error_handling import ErrorCategory, PlacementError, log_error
from placement_backend.core.logging import configure_logging

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = {
    ErrorCategory.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCategory.UPSTREAM: status.HTTP_502_BAD_GATEWAY,
    ErrorCategory.DATABASE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCategory.SYSTEM: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    init_db()
    logger.info("Placement backend started", environment=settings.environment)
    
    yield
    
    close_db()
    logger.info("Placement backend stopped")


app = FastAPI(
    title="Placement Backend API",
    description="Application status tracking and ATS scoring for the campus placement portal",
    version=__version__,
    lifespan=lifespan
)

app.include_router(applications_router)
app.include_router(notifications_router)


@app.exception_handler(PlacementError)
async def placement_error_handler(request: Request, exc: PlacementError):
    """Translate service errors into HTTP responses."""
    log_error(exc)
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(exc.category, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content={"detail": exc.message, "error": exc.category.value}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    database_ok = db_manager.health_check()
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "placement-backend",
        "database": database_ok,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "placement_backend.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )
