"""
Database connection and session management.

Exports:
    - get_engine: Lazily created process-wide engine
    - create_db_engine: Engine factory for an explicit URL (tests, scripts)
    - make_session_factory: Session factory for an engine
    - create_db_and_tables: Create all tables on an engine
    - session_scope: Auto-commit context manager over an explicit factory
    - get_session_context: Context manager without auto-commit (explicit control)
"""

from .engine import (
    SessionFactory,
    get_engine,
    get_session_factory,
    create_db_engine,
    make_session_factory,
    create_db_and_tables,
    session_scope,
    get_session_context,
)

__all__ = [
    "SessionFactory",
    "get_engine",
    "get_session_factory",
    "create_db_engine",
    "make_session_factory",
    "create_db_and_tables",
    "session_scope",
    "get_session_context",
]
