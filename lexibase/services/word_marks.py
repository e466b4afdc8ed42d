"""Per-user familiarity marks on words."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .. import logging_manager as log_mgr
from ..database import get_db_session
from ..database.models import MarkSource, WordModel, WordUserMarkModel
from ..results import OperationResult
from .lexeme_store import LexemeStore, MarkValueError, validate_mark

logger = log_mgr.get_logger("services.word_marks")


def serialize_mark(mark: WordUserMarkModel, word: WordModel) -> Dict[str, Any]:
    return {
        "id": mark.id,
        "user_id": mark.user_id,
        "word_id": word.id,
        "word": word.word,
        "language_code": word.language_code,
        "mark": mark.mark,
        "note": mark.note,
        "source": mark.source,
        "is_known": mark.is_known,
        "updated_at": mark.updated_at.isoformat() if mark.updated_at else None,
    }


class WordMarkService:
    """Create, read, delete and list the marks a user put on words."""

    def create_or_update_mark(
        self,
        user_id: int,
        word: str,
        language_code: str,
        mark: int,
        note: str = "",
        source: MarkSource = MarkSource.MANUAL,
    ) -> OperationResult[Dict[str, Any]]:
        try:
            validate_mark(mark)
        except MarkValueError as exc:
            return OperationResult.fail(str(exc))
        if not word or not word.strip():
            return OperationResult.fail("Word must not be empty")

        try:
            with get_db_session() as session:
                store = LexemeStore(session)
                word_row = store.get_or_create_word(word, language_code)
                mark_row = store.upsert_mark(user_id, word_row.id, mark, note=note, source=source)
                payload = serialize_mark(mark_row, word_row)
        except Exception as exc:
            logger.exception(
                "Failed to save word mark", extra={"event": "marks.save_failed", "user_id": user_id}
            )
            return OperationResult.fail(f"Failed to save word mark: {exc}")
        return OperationResult.ok(payload, message="Word mark saved successfully")

    def get_mark(
        self, user_id: int, word: str, language_code: str
    ) -> OperationResult[Optional[Dict[str, Any]]]:
        with get_db_session() as session:
            store = LexemeStore(session)
            word_row = store.find_word(word, language_code)
            mark_row = store.get_mark(user_id, word_row.id) if word_row is not None else None
            if mark_row is None:
                return OperationResult.ok(None, message="Word mark not found")
            return OperationResult.ok(serialize_mark(mark_row, word_row))

    def delete_mark(self, user_id: int, word: str, language_code: str) -> OperationResult[None]:
        with get_db_session() as session:
            store = LexemeStore(session)
            word_row = store.find_word(word, language_code)
            deleted = word_row is not None and store.delete_mark(user_id, word_row.id)
        if not deleted:
            return OperationResult.fail("Word mark not found")
        return OperationResult.ok(message="Word mark deleted successfully")

    def list_user_marks(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 50,
        *,
        mark: Optional[int] = None,
        language_code: Optional[str] = None,
        search: Optional[str] = None,
    ) -> OperationResult[Dict[str, Any]]:
        if page < 1 or limit < 1:
            return OperationResult.fail("Page and limit must be positive")
        try:
            with get_db_session() as session:
                rows, total = LexemeStore(session).list_marks(
                    user_id,
                    offset=(page - 1) * limit,
                    limit=limit,
                    mark=mark,
                    language_code=language_code,
                    search=search,
                )
                marks = [serialize_mark(mark_row, word_row) for mark_row, word_row in rows]
        except MarkValueError as exc:
            return OperationResult.fail(str(exc))
        return OperationResult.ok(
            {
                "marks": marks,
                "pagination": {
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "total_pages": (total + limit - 1) // limit,
                },
            }
        )


__all__ = ["WordMarkService", "serialize_mark"]
