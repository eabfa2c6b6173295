"""Shared column types for database models."""

from typing import TypeAlias

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in development and tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

# Python-side alias for opaque provider payloads
JSONDict: TypeAlias = dict
