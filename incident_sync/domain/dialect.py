"""Dialect-specific INSERT constructs used by the upsert operations."""

from sqlmodel import Session
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert


def insert_for(session: Session):
    """Return the ON CONFLICT-capable insert() for the session's dialect.

    Args:
        session: Database session bound to an engine

    Returns:
        PostgreSQL or SQLite insert function

    Raises:
        NotImplementedError: For dialects without ON CONFLICT support
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"Upserts are not supported on dialect '{dialect}'")
