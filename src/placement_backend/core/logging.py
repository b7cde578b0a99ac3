"""Structured logging configuration."""

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Optional

import structlog
from structlog.stdlib import LoggerFactory

from .config import settings


def configure_logging() -> None:
    """Configure structured logging for the application."""
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.environment == "production"
            else structlog.dev.ConsoleRenderer(colors=True),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )
    
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.log_level == "DEBUG" else logging.WARNING
    )
    # The OpenAI client logs every request at INFO
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.
    
    Args:
        name: Logger name (typically __name__)
        
    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)


class PerformanceLogger:
    """Logger for tracking operation timings and batch throughput."""
    
    def __init__(self, logger_name: str = "performance"):
        self.logger = get_logger(logger_name)
    
    @contextmanager
    def log_operation_time(
        self,
        operation: str,
        **context: Any
    ):
        """Context manager to log operation execution time.
        
        Args:
            operation: Name of the operation being timed
            **context: Additional context for logging
        """
        start_time = time.monotonic()
        start_timestamp = datetime.utcnow()
        
        self.logger.debug(
            "Operation started",
            operation=operation,
            start_time=start_timestamp.isoformat(),
            **context
        )
        
        try:
            yield
        except Exception as e:
            self.logger.warning(
                "Operation failed",
                operation=operation,
                duration_seconds=round(time.monotonic() - start_time, 3),
                error=str(e),
                error_type=type(e).__name__,
                **context
            )
            raise
        
        self.logger.info(
            "Operation completed",
            operation=operation,
            duration_seconds=round(time.monotonic() - start_time, 3),
            **context
        )
    
    def log_processing_metrics(
        self,
        operation: str,
        items_processed: int,
        duration_seconds: float,
        success_count: Optional[int] = None,
        error_count: Optional[int] = None,
        **context: Any
    ):
        """Log processing metrics for batch operations.
        
        Args:
            operation: Name of the operation
            items_processed: Total number of items processed
            duration_seconds: Total processing time
            success_count: Number of successful items (optional)
            error_count: Number of failed items (optional)
            **context: Additional context
        """
        throughput = items_processed / duration_seconds if duration_seconds > 0 else 0
        
        self.logger.info(
            "Processing metrics",
            operation=operation,
            items_processed=items_processed,
            duration_seconds=round(duration_seconds, 3),
            throughput_per_second=round(throughput, 2),
            success_count=success_count,
            error_count=error_count,
            **context
        )


performance_logger = PerformanceLogger()
