"""
Database connection and session management.

This module handles:
- Database engine creation with connection pooling
- Session factory setup
- Connection health checks
- Retry logic for database initialization
"""

import time
from functools import lru_cache
from typing import Generator, Dict, Any
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
import logging

from personal_crm.core.config import get_settings

logger = logging.getLogger('CORE_DATABASE')

# Backoff between connection attempts at startup
RETRY_DELAYS = [1, 2, 3, 5, 8]


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@lru_cache()
def get_engine() -> Engine:
    """
    Create the application engine, retrying while the database comes up.

    Returns:
        Engine: SQLAlchemy engine bound to the configured database

    Raises:
        Exception: If the database is unreachable after all retries
    """
    settings = get_settings()
    database_url = settings.get_database_url()
    engine_config = {
        'pool_size': settings.db_pool_size,
        'max_overflow': settings.db_max_overflow,
        'pool_timeout': settings.db_pool_timeout,
        'pool_recycle': settings.db_pool_recycle,
        'pool_pre_ping': settings.db_pool_pre_ping,
        'echo': settings.db_echo,
    }

    for i, delay in enumerate(RETRY_DELAYS):
        try:
            engine = create_engine(database_url, **engine_config)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info(f"Database connection established successfully on attempt {i+1}")
            return engine
        except OperationalError as e:
            logger.error(f"Database not ready (attempt {i+1}/{len(RETRY_DELAYS)}): {e}")
            if i < len(RETRY_DELAYS) - 1:
                logger.info(f"Retrying in {delay} seconds...")
                time.sleep(delay)
            else:
                raise Exception(f"Could not connect to the database after {len(RETRY_DELAYS)} attempts") from e


@lru_cache()
def get_session_factory() -> sessionmaker:
    """Session factory bound to the application engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session

    Example:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def get_database_health() -> Dict[str, Any]:
    """
    Check database connection health and return status.

    Returns:
        dict: Health status with connection pool information
    """
    settings = get_settings()
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return {
            "status": "healthy",
            "connection_pool": engine.pool.status(),
            "database": settings.get_database_name(),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
            "database": settings.get_database_name(),
        }


def init_db() -> None:
    """
    Create all tables. Safe to call on every startup.
    """
    from personal_crm.models import Base

    try:
        Base.metadata.create_all(bind=get_engine())
        logger.info("Database tables ensured")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        raise
