"""SQLAlchemy engine singleton and session helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config_manager import get_settings

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_database_url() -> str:
    return get_settings().database_url


def _build_engine(url: str, **kwargs: Any) -> Engine:
    if url.startswith("sqlite"):
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") in {"sqlite:", "sqlite+pysqlite:"}:
            options["poolclass"] = StaticPool
        options.update(kwargs)
        return create_engine(url, **options)
    options = {
        "pool_size": 10,
        "max_overflow": 5,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "echo": False,
    }
    options.update(kwargs)
    return create_engine(url, **options)


def configure_engine(url: Optional[str] = None, **kwargs: Any) -> Engine:
    """Replace the global engine, e.g. to point tests at SQLite."""
    global _engine, _session_factory
    dispose_engine()
    _engine = _build_engine(url or get_database_url(), **kwargs)
    _session_factory = None
    return _engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _build_engine(get_database_url())
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    factory = get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_schema() -> None:
    """Create every table registered on the declarative base."""
    from . import models  # noqa: F401  (registers the mapped classes)
    from .base import Base

    Base.metadata.create_all(get_engine())


def dispose_engine() -> None:
    """Dispose the global engine and clear the factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
