"""
Database connection and session management.

Uses synchronous SQLAlchemy through SQLModel. The engine is created lazily
from settings so importing the package never opens a connection; the host
process (or a test) decides when to connect.

PostgreSQL connections use NullPool (pooling is delegated to pgBouncer in
deployment). SQLite is supported for development and tests.
"""

from typing import Callable, Generator, Optional
from contextlib import contextmanager
from urllib.parse import urlparse
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlalchemy.orm import sessionmaker
import logging

from incident_sync.core.config import settings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def normalize_database_url(url: str) -> str:
    """Rewrite plain postgresql:// URLs to the psycopg (v3) driver format."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    Args:
        database_url: SQLAlchemy URL (postgresql:// or sqlite://)
        echo: Log SQL statements

    Returns:
        Configured SQLAlchemy engine
    """
    url = normalize_database_url(database_url)
    db_url = urlparse(url)

    if url.startswith("sqlite"):
        logger.info(f"Database driver: sqlite ({db_url.path or 'memory'})")
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    logger.info(f"Database driver: postgresql+psycopg (sync)")
    logger.info(f"Database host: {db_url.hostname}:{db_url.port}")
    logger.info(f"Database name: {db_url.path[1:]}")

    # NullPool avoids double-pooling with pgBouncer
    return create_engine(
        url,
        poolclass=NullPool,
        pool_pre_ping=True,
        echo=echo,
        connect_args={
            "prepare_threshold": None  # pgBouncer transaction mode
        },
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Build a session factory with explicit flush/refresh control."""
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    return _engine


def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory bound to get_engine()."""
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(get_engine())
    return _session_factory


def create_db_and_tables(engine: Optional[Engine] = None) -> None:
    """Create all tables registered on SQLModel metadata (idempotent)."""
    # Import models so their tables are registered on the metadata
    import incident_sync.models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())


@contextmanager
def session_scope(session_factory: SessionFactory) -> Generator[Session, None, None]:
    """
    Context manager for sessions from an explicit factory, with auto-commit.

    Auto-commits on success, auto-rolls back on exception.

    Yields:
        Session: Database session
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_session_context():
    """
    Context manager for database sessions outside the sync engine.

    Does NOT auto-commit - caller must explicitly commit.
    Use this for scripts, utilities, or when you need fine-grained control.

    Usage in scripts/utilities:
        from incident_sync.db import get_session_context

        with get_session_context() as db:
            db.add(DataSource(name="Acme Status", ...))
            db.commit()  # Explicit commit

    Yields:
        Session: Database session
    """
    session = get_session_factory()()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
