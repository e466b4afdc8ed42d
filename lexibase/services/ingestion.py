"""Turn lesson files into persisted sentences."""

from __future__ import annotations

import time
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError

from .. import logging_manager as log_mgr
from ..config_manager import get_settings
from ..database import get_db_session
from ..database.models import SentenceModel
from ..results import OperationResult
from ..subtitles import ProcessedSentence, SubtitleParseError, parse_lesson_content

logger = log_mgr.get_logger("services.ingestion")


class FileContentProvider(Protocol):
    """Object storage capability needed to read lesson files."""

    def get_file_content(self, key: str) -> str:
        ...


class LocalFileContentProvider:
    """Reads lesson files from a directory on disk."""

    def __init__(self, root: Union[str, Path, None] = None, *, encoding: str = "utf-8-sig") -> None:
        self.root = Path(root) if root is not None else None
        self.encoding = encoding

    def get_file_content(self, key: str) -> str:
        path = Path(key)
        if self.root is not None and not path.is_absolute():
            path = self.root / path
        return path.read_text(encoding=self.encoding)


class SentenceIngestionPipeline:
    """Parses lesson files and stores their sentences for a lesson."""

    def __init__(
        self,
        file_provider: Optional[FileContentProvider] = None,
        *,
        split_cues: Optional[bool] = None,
    ) -> None:
        self.file_provider = file_provider or LocalFileContentProvider()
        if split_cues is None:
            split_cues = get_settings().split_cues_into_sentences
        self.split_cues = split_cues

    def ingest_lesson_file(
        self,
        content: str,
        file_name: Optional[str],
        language_code: str,
    ) -> OperationResult[List[ProcessedSentence]]:
        """Parse ``content`` into normalized sentences without persisting them."""

        if not content or not content.strip():
            return OperationResult.fail("File content is empty")
        try:
            sentences = parse_lesson_content(content, file_name, split_cues=self.split_cues)
        except SubtitleParseError as exc:
            logger.warning(
                "Failed to parse lesson file %s: %s",
                file_name or "<inline>",
                exc,
                extra={"event": "ingestion.parse_failed", "language_code": language_code},
            )
            return OperationResult.fail(str(exc))
        return OperationResult.ok(
            sentences, message=f"Parsed {len(sentences)} sentences"
        )

    def persist_sentences(
        self, lesson_id: int, sentences: Sequence[ProcessedSentence]
    ) -> List[int]:
        """Create sentence rows for ``lesson_id`` in one transaction."""

        with get_db_session() as session:
            rows = [
                SentenceModel(
                    lesson_id=lesson_id,
                    original_text=sentence.text,
                    start_time_ms=sentence.start_ms,
                    end_time_ms=sentence.end_ms,
                )
                for sentence in sentences
            ]
            session.add_all(rows)
            session.flush()
            return [row.id for row in rows]

    def ingest_lesson(
        self,
        lesson_id: int,
        file_key: str,
        language_code: str,
        file_name: Optional[str] = None,
    ) -> OperationResult[List[int]]:
        """Fetch, parse and store the sentences of one lesson file.

        Either every sentence is stored or none is.
        """

        started = time.perf_counter()
        with log_mgr.log_context(lesson_id=lesson_id):
            try:
                content = self.file_provider.get_file_content(file_key)
            except (OSError, UnicodeDecodeError) as exc:
                logger.error("Could not read lesson file %s: %s", file_key, exc)
                return OperationResult.fail(f"Could not read lesson file: {exc}")

            parsed = self.ingest_lesson_file(content, file_name or file_key, language_code)
            if not parsed.success or not parsed.data:
                return OperationResult.fail(parsed.message or "No sentences found")

            try:
                sentence_ids = self.persist_sentences(lesson_id, parsed.data)
            except SQLAlchemyError as exc:
                logger.exception("Failed to store lesson sentences")
                return OperationResult.fail(f"Failed to store lesson sentences: {exc}")
            logger.info(
                "Stored %d sentences",
                len(sentence_ids),
                extra={
                    "event": "ingestion.stored",
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            return OperationResult.ok(
                sentence_ids, message=f"Stored {len(sentence_ids)} sentences"
            )


__all__ = [
    "FileContentProvider",
    "LocalFileContentProvider",
    "SentenceIngestionPipeline",
]
