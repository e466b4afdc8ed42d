"""SQLAlchemy database layer for lexibase.

Provides the shared engine, session factory, and declarative base used by the
lexeme store, the ingestion pipeline and the maintenance jobs.
"""

from .base import Base
from .engine import (
    configure_engine,
    create_schema,
    dispose_engine,
    get_db_session,
    get_engine,
)
from .upsert import get_or_create

__all__ = [
    "Base",
    "configure_engine",
    "create_schema",
    "dispose_engine",
    "get_db_session",
    "get_engine",
    "get_or_create",
]
