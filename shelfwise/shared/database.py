"""
Database configuration and utilities.
Engine setup, session management and schema lifecycle for the SQL stores.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)


# ============================================================================
# ENGINE CONFIGURATION
# ============================================================================

def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def create_database_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create database engine

    Args:
        url: Database URL (defaults to settings.DATABASE_URL)
        echo: Log all SQL statements (defaults to settings.DATABASE_ECHO)

    Returns:
        Engine. In-memory SQLite shares one connection across sessions and
        threads; SQLite connections enforce foreign keys.
    """
    if url is None or echo is None:
        from ..config import get_settings
        settings = get_settings()
        url = url or settings.DATABASE_URL
        echo = settings.DATABASE_ECHO if echo is None else echo

    kwargs = {"echo": echo}
    if _is_sqlite(url):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
        kwargs["pool_recycle"] = 3600

    engine = create_engine(url, **kwargs)

    if _is_sqlite(url):
        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to an engine."""
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


# ============================================================================
# SESSION MANAGEMENT
# ============================================================================

@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """
    Transactional session: commit on success, roll back on error.

    Usage:
        with session_scope(SessionLocal) as session:
            session.add(row)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ============================================================================
# DATABASE LIFECYCLE
# ============================================================================

def init_database(engine: Engine) -> None:
    """
    Create all tables (development/testing).
    Production schemas should come from migrations.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema initialized")


def drop_database(engine: Engine) -> None:
    """Drop all tables (testing only)."""
    Base.metadata.drop_all(bind=engine)
    logger.warning("Database schema dropped")
