"""Merge word entries that differ only by half-width katakana spelling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from .. import logging_manager as log_mgr
from ..database import get_db_session
from ..database.models import (
    SentenceWordModel,
    WordModel,
    WordPronunciationModel,
    WordStemModel,
    WordTranslationModel,
    WordUserMarkModel,
)
from ..database.upsert import get_or_create
from ..results import BatchReport
from ..services.lexeme_store import LexemeStore
from ..text_normalization import has_narrow_variant, normalize_script

logger = log_mgr.get_logger("jobs.consolidation")

JOB_NAME = "consolidation"
SCAN_CHUNK_SIZE = 1000


@dataclass(slots=True)
class MergeCandidate:
    word_id: int
    word: str
    language_code: str


def _no_sync(stmt):
    return stmt.execution_options(synchronize_session=False)


def _mark_wins(variant: WordUserMarkModel, existing: WordUserMarkModel) -> bool:
    if variant.mark != existing.mark:
        return variant.mark > existing.mark
    if variant.updated_at is None or existing.updated_at is None:
        return existing.updated_at is None and variant.updated_at is not None
    return variant.updated_at > existing.updated_at


class ConsolidationJob:
    """Folds every narrow-script word into its normalized counterpart."""

    def __init__(self, *, chunk_size: int = SCAN_CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size

    def iter_candidates(self) -> Iterator[MergeCandidate]:
        last_id = 0
        while True:
            with get_db_session() as session:
                rows = session.execute(
                    select(WordModel.id, WordModel.word, WordModel.language_code)
                    .where(WordModel.id > last_id)
                    .order_by(WordModel.id)
                    .limit(self.chunk_size)
                ).all()
            if not rows:
                return
            for word_id, word, language_code in rows:
                if has_narrow_variant(word):
                    yield MergeCandidate(word_id, word, language_code)
            last_id = rows[-1][0]

    # ------------------------------------------------------------------
    # Per-table moves
    # ------------------------------------------------------------------
    @staticmethod
    def _move_stems(session: Session, variant_id: int, canonical: WordModel) -> None:
        stems = session.execute(
            select(WordStemModel.stem).where(WordStemModel.word_id == variant_id)
        ).scalars()
        for stem in list(stems):
            if stem != canonical.word:
                get_or_create(session, WordStemModel, word_id=canonical.id, stem=stem)

    @staticmethod
    def _move_pronunciations(session: Session, variant_id: int, canonical_id: int) -> None:
        rows = session.execute(
            select(WordPronunciationModel.pronunciation, WordPronunciationModel.pronunciation_type)
            .where(WordPronunciationModel.word_id == variant_id)
        ).all()
        for pronunciation, pronunciation_type in rows:
            get_or_create(
                session,
                WordPronunciationModel,
                word_id=canonical_id,
                pronunciation=pronunciation,
                pronunciation_type=pronunciation_type,
            )

    @staticmethod
    def _move_translations(session: Session, variant_id: int, canonical_id: int) -> None:
        rows = session.execute(
            select(WordTranslationModel.language_code, WordTranslationModel.translation)
            .where(WordTranslationModel.word_id == variant_id)
        ).all()
        store = LexemeStore(session)
        for language_code, translation in rows:
            store.add_translation(canonical_id, language_code, translation)

    @staticmethod
    def _move_marks(session: Session, variant_id: int, canonical_id: int) -> None:
        variant_marks = list(
            session.execute(
                select(WordUserMarkModel).where(WordUserMarkModel.word_id == variant_id)
            ).scalars()
        )
        for variant_mark in variant_marks:
            existing = session.execute(
                select(WordUserMarkModel).where(
                    WordUserMarkModel.user_id == variant_mark.user_id,
                    WordUserMarkModel.word_id == canonical_id,
                )
            ).scalar_one_or_none()
            if existing is not None:
                if not _mark_wins(variant_mark, existing):
                    continue
                session.execute(
                    _no_sync(delete(WordUserMarkModel).where(WordUserMarkModel.id == existing.id))
                )
            # updated_at is assigned to itself so the onupdate default does not fire.
            session.execute(
                _no_sync(
                    update(WordUserMarkModel)
                    .where(WordUserMarkModel.id == variant_mark.id)
                    .values(word_id=canonical_id, updated_at=WordUserMarkModel.updated_at)
                )
            )

    @staticmethod
    def _move_sentence_links(session: Session, variant_id: int, canonical_id: int) -> None:
        linked = set(
            session.execute(
                select(SentenceWordModel.sentence_id).where(SentenceWordModel.word_id == canonical_id)
            ).scalars()
        )
        rows = session.execute(
            select(SentenceWordModel.id, SentenceWordModel.sentence_id).where(
                SentenceWordModel.word_id == variant_id
            )
        ).all()
        for link_id, sentence_id in rows:
            if sentence_id in linked:
                continue
            session.execute(
                _no_sync(
                    update(SentenceWordModel)
                    .where(SentenceWordModel.id == link_id)
                    .values(word_id=canonical_id)
                )
            )
            linked.add(sentence_id)

    @staticmethod
    def _delete_variant(session: Session, variant_id: int) -> None:
        for model in (
            SentenceWordModel,
            WordStemModel,
            WordPronunciationModel,
            WordTranslationModel,
            WordUserMarkModel,
        ):
            session.execute(_no_sync(delete(model).where(model.word_id == variant_id)))
        session.execute(_no_sync(delete(WordModel).where(WordModel.id == variant_id)))

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------
    def merge_word(self, variant_id: int) -> Optional[int]:
        """Merge one variant word into its canonical entry in a single transaction.

        Returns the canonical word id, or None when there was nothing to merge.
        """

        with get_db_session() as session:
            variant = session.get(WordModel, variant_id)
            if variant is None:
                return None
            canonical_literal = normalize_script(variant.word)
            if canonical_literal == variant.word:
                return None
            canonical, _ = get_or_create(
                session, WordModel, word=canonical_literal, language_code=variant.language_code
            )
            if canonical.id == variant.id:
                return None

            self._move_stems(session, variant.id, canonical)
            self._move_pronunciations(session, variant.id, canonical.id)
            self._move_translations(session, variant.id, canonical.id)
            self._move_marks(session, variant.id, canonical.id)
            self._move_sentence_links(session, variant.id, canonical.id)
            self._delete_variant(session, variant.id)
            return canonical.id

    def run_consolidation_pass(self) -> BatchReport:
        report = BatchReport()
        candidates: List[MergeCandidate] = list(self.iter_candidates())
        logger.info(
            "Found %d words with half-width spellings",
            len(candidates),
            extra={"event": "consolidation.candidates"},
        )
        for candidate in candidates:
            try:
                canonical_id = self.merge_word(candidate.word_id)
            except Exception as exc:
                logger.error(
                    "Failed to merge word %s (%s)",
                    candidate.word,
                    candidate.language_code,
                    exc_info=True,
                    extra={"event": "consolidation.merge_failed", "word_id": candidate.word_id},
                )
                report.record_failure(candidate.word_id, str(exc))
                continue
            if canonical_id is None:
                report.record_success(candidate.word_id, detail="skipped")
                continue
            logger.info(
                "Merged %s into word %d",
                candidate.word,
                canonical_id,
                extra={"event": "consolidation.merged", "word_id": candidate.word_id},
            )
            report.record_success(candidate.word_id, detail=f"merged into {canonical_id}")
        return report


def run_consolidation_pass() -> BatchReport:
    return ConsolidationJob().run_consolidation_pass()


__all__ = ["ConsolidationJob", "JOB_NAME", "MergeCandidate", "run_consolidation_pass"]
