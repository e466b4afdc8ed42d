"""Lazily fill the word-split cache of sentences using the analysis oracle."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .. import logging_manager as log_mgr
from ..config_manager import get_settings
from ..database import get_db_session
from ..database.models import SentenceModel
from ..oracle import OracleError, SentenceAnalysisOracle, SentenceSplitResult
from ..results import OperationResult
from .lexeme_store import LexemeStore, WordProjection

logger = log_mgr.get_logger("services.analysis")


@dataclass(slots=True)
class WordTranslationEntry:
    word: str
    translation: str


@dataclass(slots=True)
class WordPronunciationEntry:
    word: str
    pronunciation: str
    pronunciation_type: str


@dataclass(slots=True)
class WordStemEntry:
    word: str
    stem: str


@dataclass(slots=True)
class AnalyzedSentence:
    """A sentence together with its cached split and word-level glosses."""

    id: int
    original_text: str
    split_text: Optional[List[str]]
    start_time_ms: Optional[int] = None
    end_time_ms: Optional[int] = None
    translations: List[WordTranslationEntry] = field(default_factory=list)
    pronunciations: List[WordPronunciationEntry] = field(default_factory=list)
    stems: List[WordStemEntry] = field(default_factory=list)

    @property
    def is_analyzed(self) -> bool:
        return self.split_text is not None


@dataclass(slots=True)
class LessonSentencePage:
    lesson_id: int
    sentences: List[AnalyzedSentence]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


def _snapshot(row: SentenceModel) -> AnalyzedSentence:
    split = row.split_text if row.split_text else None
    return AnalyzedSentence(
        id=row.id,
        original_text=row.original_text,
        split_text=list(split) if split is not None else None,
        start_time_ms=row.start_time_ms,
        end_time_ms=row.end_time_ms,
    )


def _dedupe(items: Iterable, key) -> List:
    seen = set()
    unique = []
    for item in items:
        marker = key(item)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(item)
    return unique


def _finalize(sentence: AnalyzedSentence) -> AnalyzedSentence:
    sentence.translations = _dedupe(sentence.translations, lambda e: (e.word, e.translation))
    sentence.pronunciations = _dedupe(sentence.pronunciations, lambda e: (e.word, e.pronunciation))
    sentence.stems = _dedupe(sentence.stems, lambda e: (e.word, e.stem))
    return sentence


def _apply_projection(sentence: AnalyzedSentence, projections: Dict[str, WordProjection]) -> None:
    for literal in sentence.split_text or []:
        projection = projections.get(literal)
        if projection is None:
            continue
        if projection.translation:
            sentence.translations.append(WordTranslationEntry(literal, projection.translation))
        for pronunciation, pronunciation_type in projection.pronunciations:
            sentence.pronunciations.append(
                WordPronunciationEntry(literal, pronunciation, pronunciation_type)
            )
        for stem in projection.stems:
            sentence.stems.append(WordStemEntry(literal, stem))


class SentenceAnalysisPipeline:
    """Analyses sentences that lack a cached split and stores the results."""

    def __init__(
        self,
        oracle: SentenceAnalysisOracle,
        *,
        concurrency: Optional[int] = None,
        target_language: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.oracle = oracle
        if concurrency is None:
            concurrency = settings.analysis_concurrency
        self.concurrency = max(1, concurrency)
        self.target_language = target_language or settings.translation_target_language

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load(self, sentence_ids: Sequence[int]) -> List[AnalyzedSentence]:
        if not sentence_ids:
            return []
        with get_db_session() as session:
            rows = session.execute(
                select(SentenceModel)
                .where(SentenceModel.id.in_(list(sentence_ids)))
                .order_by(SentenceModel.id)
            ).scalars()
            return [_snapshot(row) for row in rows]

    def _project_stored(self, sentences: List[AnalyzedSentence], language_code: str) -> None:
        """Fill glosses of split sentences from what the store holds for their words."""

        if not sentences:
            return
        literals = [literal for sentence in sentences for literal in sentence.split_text or []]
        with get_db_session() as session:
            projections = LexemeStore(session).project_words(
                literals, language_code, self.target_language
            )
        for sentence in sentences:
            _apply_projection(sentence, projections)

    def _call_oracle(
        self, executor: ThreadPoolExecutor, batch: List[AnalyzedSentence], language_code: str
    ) -> Optional[List[SentenceSplitResult]]:
        futures = [
            executor.submit(self.oracle.analyze_sentence, sentence.original_text, language_code)
            for sentence in batch
        ]
        results: List[SentenceSplitResult] = []
        failure: Optional[BaseException] = None
        for sentence, future in zip(batch, futures):
            try:
                results.append(future.result())
            except OracleError as exc:
                failure = failure or exc
            except Exception as exc:
                logger.error(
                    "Oracle raised an unexpected error for sentence %s",
                    sentence.id,
                    exc_info=True,
                    extra={"event": "analysis.oracle_crashed"},
                )
                failure = failure or exc
        if failure is not None:
            logger.warning(
                "Sentence analysis failed for batch %s: %s",
                [sentence.id for sentence in batch],
                failure,
                extra={"event": "analysis.batch_failed", "status": "oracle_error"},
            )
            return None
        return results

    def _store_batch(
        self,
        batch: List[AnalyzedSentence],
        results: List[SentenceSplitResult],
        language_code: str,
    ) -> None:
        with get_db_session() as session:
            store = LexemeStore(session)
            for sentence, result in zip(batch, results):
                store.record_analyzed_words(
                    sentence.id, language_code, result.words, self.target_language
                )
                row = session.get(SentenceModel, sentence.id)
                if row is not None:
                    row.split_text = result.split

    def _analyze_pending(self, pending: List[AnalyzedSentence], language_code: str) -> int:
        analyzed = 0
        with ThreadPoolExecutor(
            max_workers=self.concurrency, thread_name_prefix="lexibase-analysis"
        ) as executor:
            for start in range(0, len(pending), self.concurrency):
                batch = pending[start : start + self.concurrency]
                results = self._call_oracle(executor, batch, language_code)
                if results is None:
                    continue
                try:
                    self._store_batch(batch, results, language_code)
                except Exception:
                    logger.exception(
                        "Failed to store analysis for sentences %s",
                        [sentence.id for sentence in batch],
                        extra={"event": "analysis.store_failed"},
                    )
                    continue
                for sentence, result in zip(batch, results):
                    sentence.split_text = result.split
                analyzed += len(batch)
        return analyzed

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def analyze(
        self, sentences: Sequence[AnalyzedSentence], language_code: str
    ) -> List[AnalyzedSentence]:
        """Fill missing splits for already loaded ``sentences``.

        Sentences whose oracle batch failed come back with ``split_text`` None.
        """

        cached = [sentence for sentence in sentences if sentence.split_text]
        pending = [sentence for sentence in sentences if not sentence.split_text]
        for sentence in pending:
            sentence.split_text = None

        if pending:
            started = time.perf_counter()
            analyzed = self._analyze_pending(pending, language_code)
            logger.info(
                "Analysed %d of %d pending sentences",
                analyzed,
                len(pending),
                extra={
                    "event": "analysis.completed",
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

        merged = sorted([*cached, *pending], key=lambda sentence: sentence.id)
        # Fresh and cached sentences read their glosses the same way.
        self._project_stored(
            [sentence for sentence in merged if sentence.split_text], language_code
        )
        return [_finalize(sentence) for sentence in merged]

    def ensure_sentences_analyzed(
        self, sentence_ids: Sequence[int], language_code: str
    ) -> OperationResult[List[AnalyzedSentence]]:
        """Return the sentences with their splits, analysing the missing ones."""

        try:
            sentences = self._load(sentence_ids)
            return OperationResult.ok(self.analyze(sentences, language_code))
        except Exception as exc:
            logger.exception("Failed to analyse sentences", extra={"event": "analysis.failed"})
            return OperationResult.fail(f"Failed to analyse sentences: {exc}")

    def get_lesson_sentences(
        self,
        lesson_id: int,
        language_code: str,
        *,
        page: int = 1,
        limit: int = 10,
    ) -> OperationResult[LessonSentencePage]:
        """Return one page of a lesson's sentences with their splits filled in."""

        if page < 1 or limit < 1:
            return OperationResult.fail("Page and limit must be positive")
        try:
            with get_db_session() as session:
                total = session.execute(
                    select(func.count())
                    .select_from(SentenceModel)
                    .where(SentenceModel.lesson_id == lesson_id)
                ).scalar_one()
                rows = session.execute(
                    select(SentenceModel)
                    .where(SentenceModel.lesson_id == lesson_id)
                    .order_by(SentenceModel.id)
                    .offset((page - 1) * limit)
                    .limit(limit)
                ).scalars()
                sentences = [_snapshot(row) for row in rows]
            with log_mgr.log_context(lesson_id=lesson_id):
                analyzed = self.analyze(sentences, language_code)
        except Exception as exc:
            logger.exception("Failed to load lesson sentences", extra={"lesson_id": lesson_id})
            return OperationResult.fail(f"Failed to retrieve lesson sentences: {exc}")
        return OperationResult.ok(
            LessonSentencePage(
                lesson_id=lesson_id, sentences=analyzed, page=page, limit=limit, total=int(total)
            )
        )

    def analyze_lesson(self, lesson_id: int, language_code: str) -> OperationResult[List[AnalyzedSentence]]:
        """Analyse every sentence of a lesson that still lacks a split."""

        try:
            with get_db_session() as session:
                sentence_ids = list(
                    session.execute(
                        select(SentenceModel.id)
                        .where(SentenceModel.lesson_id == lesson_id)
                        .order_by(SentenceModel.id)
                    ).scalars()
                )
        except SQLAlchemyError as exc:
            logger.exception("Failed to list lesson sentences", extra={"lesson_id": lesson_id})
            return OperationResult.fail(f"Failed to list lesson sentences: {exc}")
        with log_mgr.log_context(lesson_id=lesson_id):
            return self.ensure_sentences_analyzed(sentence_ids, language_code)


__all__ = [
    "AnalyzedSentence",
    "LessonSentencePage",
    "SentenceAnalysisPipeline",
    "WordPronunciationEntry",
    "WordStemEntry",
    "WordTranslationEntry",
]
