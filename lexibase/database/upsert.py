"""Get-or-create by natural key.

Every entity with a uniqueness constraint (word, translation, pronunciation,
stem, sentence link, user mark) is written through :func:`get_or_create` so that
concurrent writers converge on one row instead of colliding.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .base import Base

ModelT = TypeVar("ModelT", bound=Base)


def _dialect_insert(session: Session):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert

        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert

        return insert
    return None


def _fetch(session: Session, model: Type[ModelT], key: Mapping[str, Any]) -> Optional[ModelT]:
    return session.execute(select(model).filter_by(**key)).scalar_one_or_none()


def get_or_create(
    session: Session,
    model: Type[ModelT],
    *,
    defaults: Optional[Mapping[str, Any]] = None,
    **key: Any,
) -> Tuple[ModelT, bool]:
    """Return the row of ``model`` identified by ``key``, inserting it if absent.

    ``defaults`` only apply to a newly inserted row.  The second element of the
    returned tuple is True when this call created the row.
    """

    if not key:
        raise ValueError("get_or_create requires at least one natural key column")

    existing = _fetch(session, model, key)
    if existing is not None:
        return existing, False

    values = dict(defaults or {})
    values.update(key)
    insert = _dialect_insert(session)
    if insert is not None:
        result = session.execute(insert(model).values(**values).on_conflict_do_nothing())
        created = bool(result.rowcount)
    else:
        try:
            with session.begin_nested():
                session.add(model(**values))
            created = True
        except IntegrityError:
            created = False

    instance = _fetch(session, model, key)
    if instance is None:  # pragma: no cover - only reachable if a concurrent delete wins
        raise LookupError(f"{model.__name__} row for {dict(key)!r} vanished after insert")
    return instance, created


__all__ = ["get_or_create"]
