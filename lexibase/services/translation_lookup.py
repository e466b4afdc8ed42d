"""Translation and pronunciation lookups with on-demand reduction."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .. import logging_manager as log_mgr
from ..config_manager import get_settings
from ..database import get_db_session
from ..oracle import OracleError, SentenceAnalysisOracle
from ..results import OperationResult
from .lexeme_store import LexemeStore

logger = log_mgr.get_logger("services.translation_lookup")


class TranslationLookupService:
    """Serves stored translations, collapsing large sets through the oracle."""

    def __init__(
        self,
        oracle: SentenceAnalysisOracle,
        *,
        reduce_min: Optional[int] = None,
        target_language: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.oracle = oracle
        self.reduce_min = (
            reduce_min if reduce_min is not None else settings.translation_lookup_reduce_min
        )
        self.target_language = target_language or settings.translation_target_language

    def reduce_translations(
        self,
        word_id: int,
        literal: str,
        translations: Sequence[str],
        source_language: str,
        target_language: str,
    ) -> Optional[List[str]]:
        """Ask the oracle for a smaller translation set and store it.

        Returns the stored set, or None when the oracle failed or returned
        nothing, in which case the existing rows are left untouched.
        """

        try:
            reduced = self.oracle.reduce_translations(
                literal, list(translations), source_language, target_language
            )
        except OracleError as exc:
            logger.warning(
                "Translation reduction failed for %s: %s",
                literal,
                exc,
                extra={"event": "translations.reduce_failed", "word_id": word_id},
            )
            return None
        reduced = [item.strip() for item in reduced if item and item.strip()]
        if not reduced:
            logger.info(
                "Oracle returned no translations for %s; keeping %d stored",
                literal,
                len(translations),
                extra={"event": "translations.reduce_empty", "word_id": word_id},
            )
            return None

        with get_db_session() as session:
            stored = LexemeStore(session).replace_translations(word_id, target_language, reduced)
        logger.info(
            "Reduced translations of %s from %d to %d",
            literal,
            len(translations),
            len(stored),
            extra={"event": "translations.reduced", "word_id": word_id},
        )
        return stored

    def lookup_word_translations(
        self,
        word: str,
        source_language: str,
        target_language: Optional[str] = None,
    ) -> OperationResult[List[str]]:
        target_language = target_language or self.target_language
        try:
            with get_db_session() as session:
                store = LexemeStore(session)
                row = store.find_word(word, source_language)
                if row is None:
                    return OperationResult.ok([], message="Word not found")
                word_id = row.id
                already_reduced = row.translations_reduced_at is not None
                translations = store.translations_for(word_id, target_language)
        except Exception as exc:
            logger.exception("Failed to look up translations", extra={"event": "translations.lookup_failed"})
            return OperationResult.fail(f"Failed to look up translations: {exc}")

        if not already_reduced and len(translations) >= self.reduce_min:
            try:
                reduced = self.reduce_translations(
                    word_id, word, translations, source_language, target_language
                )
            except Exception as exc:
                logger.exception(
                    "Failed to store reduced translations",
                    extra={"event": "translations.reduce_store_failed", "word_id": word_id},
                )
                return OperationResult.fail(f"Failed to store reduced translations: {exc}")
            if reduced:
                return OperationResult.ok(reduced)
        return OperationResult.ok(translations)

    def get_word_pronunciations(
        self, word: str, language_code: str
    ) -> OperationResult[List[dict]]:
        try:
            with get_db_session() as session:
                store = LexemeStore(session)
                row = store.find_word(word, language_code)
                if row is None:
                    return OperationResult.ok([], message="Word not found")
                pronunciations = [
                    {
                        "pronunciation": item.pronunciation,
                        "pronunciation_type": item.pronunciation_type,
                    }
                    for item in store.pronunciations_for(row.id)
                ]
        except Exception as exc:
            logger.exception("Failed to look up pronunciations")
            return OperationResult.fail(f"Failed to look up pronunciations: {exc}")
        return OperationResult.ok(pronunciations)


__all__ = ["TranslationLookupService"]
