"""Collapse oversized translation sets through the analysis oracle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select

from .. import logging_manager as log_mgr
from ..config_manager import get_settings
from ..database import get_db_session
from ..database.models import WordModel, WordTranslationModel
from ..oracle import SentenceAnalysisOracle
from ..results import BatchReport
from ..services.lexeme_store import LexemeStore
from ..services.translation_lookup import TranslationLookupService

logger = log_mgr.get_logger("jobs.translation_reduction")

JOB_NAME = "translation_reduction"


@dataclass(slots=True)
class ReductionCandidate:
    word_id: int
    word: str
    source_language: str
    target_language: str
    translation_count: int


class TranslationReductionJob:
    """Finds words with too many translations and replaces them with a reduced set."""

    def __init__(
        self,
        oracle: SentenceAnalysisOracle,
        *,
        threshold: Optional[int] = None,
        lookup: Optional[TranslationLookupService] = None,
    ) -> None:
        self.threshold = (
            threshold if threshold is not None else get_settings().translation_reduce_threshold
        )
        self.lookup = lookup or TranslationLookupService(oracle)

    def find_candidates(self) -> List[ReductionCandidate]:
        translation_count = func.count(func.distinct(WordTranslationModel.translation))
        stmt = (
            select(
                WordModel.id,
                WordModel.word,
                WordModel.language_code,
                WordTranslationModel.language_code,
                translation_count,
            )
            .join(WordTranslationModel, WordTranslationModel.word_id == WordModel.id)
            .where(WordModel.translations_reduced_at.is_(None))
            .group_by(
                WordModel.id,
                WordModel.word,
                WordModel.language_code,
                WordTranslationModel.language_code,
            )
            .having(translation_count > self.threshold)
            .order_by(WordModel.id)
        )
        with get_db_session() as session:
            return [
                ReductionCandidate(word_id, word, source, target, int(count))
                for word_id, word, source, target, count in session.execute(stmt).all()
            ]

    def reduce_candidate(self, candidate: ReductionCandidate) -> Optional[List[str]]:
        with get_db_session() as session:
            translations = LexemeStore(session).translations_for(
                candidate.word_id, candidate.target_language
            )
        if len(translations) <= self.threshold:
            return translations
        return self.lookup.reduce_translations(
            candidate.word_id,
            candidate.word,
            translations,
            candidate.source_language,
            candidate.target_language,
        )

    def run_translation_reduction_pass(self) -> BatchReport:
        report = BatchReport()
        candidates = self.find_candidates()
        logger.info(
            "Found %d words with more than %d translations",
            len(candidates),
            self.threshold,
            extra={"event": "reduction.candidates"},
        )
        for index, candidate in enumerate(candidates, start=1):
            logger.info(
                "Reducing translations (%d/%d) for %s (%s) with %d translations",
                index,
                len(candidates),
                candidate.word,
                candidate.source_language,
                candidate.translation_count,
                extra={"word_id": candidate.word_id},
            )
            try:
                reduced = self.reduce_candidate(candidate)
            except Exception as exc:
                logger.error(
                    "Failed to reduce translations for %s",
                    candidate.word,
                    exc_info=True,
                    extra={"event": "reduction.failed", "word_id": candidate.word_id},
                )
                report.record_failure(candidate.word_id, str(exc))
                continue
            if reduced is None:
                report.record_failure(candidate.word_id, "Oracle returned no usable reduction")
                continue
            report.record_success(
                candidate.word_id,
                detail=f"{candidate.translation_count} -> {len(reduced)} translations",
            )
        return report


def run_translation_reduction_pass(oracle: SentenceAnalysisOracle) -> BatchReport:
    return TranslationReductionJob(oracle).run_translation_reduction_pass()


__all__ = [
    "JOB_NAME",
    "ReductionCandidate",
    "TranslationReductionJob",
    "run_translation_reduction_pass",
]
