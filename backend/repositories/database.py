"""
Database configuration with connection pooling.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, QueuePool

from models.config import settings
from models.exceptions import StoreException


def create_db_engine():
    """
    Create database engine with appropriate configuration.

    Uses QueuePool for PostgreSQL/production and NullPool for SQLite.
    NullPool creates a new connection per request, avoiding concurrency issues.
    """
    is_sqlite = "sqlite" in settings.DATABASE_URL

    if is_sqlite:
        return create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
    else:
        return create_engine(
            settings.DATABASE_URL,
            poolclass=QueuePool,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,  # Verify connections before use
        )


engine = create_db_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Get database session with automatic cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_operation(db: Session, operation: str) -> Iterator[Session]:
    """
    Wrap a unit of store work so driver failures surface as StoreException.

    The session is rolled back and the underlying error message is kept
    on the raised exception. No retry is attempted.

    Args:
        db: Database session
        operation: Short name of the operation, used in logs and messages

    Raises:
        StoreException: If any SQLAlchemy error escapes the block
    """
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store operation {operation} failed: {e!r}")
        raise StoreException(operation, str(e)) from e
