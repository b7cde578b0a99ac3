"""Database connection and session management with connection pooling."""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool
import structlog

from .config import settings
from .base import Base

logger = structlog.get_logger(__name__)


class DatabaseManager:
    """Manages database connections with connection pooling."""
    
    def __init__(self, database_url: str) -> None:
        """Initialize database manager.
        
        Args:
            database_url: SQLAlchemy connection URL
        """
        self.database_url = database_url
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
    
    def _engine_options(self) -> Dict[str, Any]:
        if self.database_url.startswith("sqlite"):
            # SQLite is used for local runs and tests; one file, no pool tuning
            return {"connect_args": {"check_same_thread": False}}
        
        return {
            "poolclass": QueuePool,
            "pool_size": settings.database_pool_size,
            "max_overflow": settings.database_max_overflow,
            "pool_timeout": 30,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
        }
    
    def initialize(self) -> None:
        """Initialize database engine and session factory."""
        if self.engine is not None:
            logger.warning("Database engine already initialized")
            return
        
        self.engine = create_engine(
            self.database_url,
            echo=settings.log_level == "DEBUG",
            **self._engine_options()
        )
        
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )
        
        logger.info(
            "Database engine initialized",
            dialect=self.engine.dialect.name
        )
    
    def close(self) -> None:
        """Close database engine and dispose of connection pool."""
        if self.engine:
            self.engine.dispose()
            logger.info("Database engine closed")
            self.engine = None
            self.SessionLocal = None
    
    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get database session with automatic cleanup.
        
        Services commit their own units of work; this only rolls back
        whatever is left uncommitted when an exception escapes.
        
        Yields:
            Database session
            
        Raises:
            RuntimeError: If database is not initialized
        """
        if self.SessionLocal is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        
        session = self.SessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
    
    def create_tables(self) -> None:
        """Create all database tables."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        
        # Register every model on the metadata before create_all
        import placement_backend.models  # noqa: F401
        
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created")
    
    def health_check(self) -> bool:
        """Check database connectivity.
        
        Returns:
            True if database is accessible, False otherwise
        """
        if self.engine is None:
            return False
        
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False


# Global database manager instance
db_manager = DatabaseManager(settings.database_url)


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI to get database session.
    
    Yields:
        Database session
    """
    with db_manager.get_session() as session:
        yield session


def init_db() -> None:
    """Initialize the engine and make sure the schema exists."""
    db_manager.initialize()
    db_manager.create_tables()


def close_db() -> None:
    """Close database connections."""
    db_manager.close()
