# File: pmtool/db/session.py
"""
Database session management for PMTool.

Usage:
    from pmtool.db.session import get_db

    # In FastAPI dependency
    def some_endpoint(db: Session = Depends(get_db)):
        ...
"""

import logging
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pmtool.core.config import settings
from pmtool.db.models.base import Base

# Configure module logger
logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite engines allow cross-thread use and enforce foreign keys.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
        enable_sqlite_foreign_keys(engine)
    else:
        engine = create_engine(database_url, pool_pre_ping=True, echo=echo)
    return engine


logger.info(f"Creating SQLAlchemy engine for {settings.DATABASE_URL.split('@')[-1]}")
engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session with proper resource management.

    Returns:
        SQLAlchemy Session for database operations
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def verify_db_connection(bind: Engine = None) -> bool:
    """
    Verify that we can connect to the database.

    Returns:
        True if connection succeeds, False otherwise
    """
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1")).scalar()
            return True
    except Exception as e:
        logger.error(f"Database connection verification failed: {e}")
        return False


def init_db(reset: bool = False, bind: Engine = None) -> bool:
    """
    Initialize the database schema.

    Args:
        reset: Whether to drop and recreate all tables
        bind: Engine to use instead of the module engine

    Returns:
        True if initialization succeeds, False otherwise
    """
    # Registers every table on Base.metadata
    import pmtool.db.models  # noqa: F401

    target = bind or engine
    logger.info("Initializing database schema...")

    if not verify_db_connection(target):
        logger.error("Engine connection test failed before create_all")
        return False

    if reset:
        logger.info("Dropping all tables for reset...")
        Base.metadata.drop_all(bind=target)

    Base.metadata.create_all(bind=target)
    logger.info(f"Database schema initialized with {len(Base.metadata.tables)} tables")
    return True
