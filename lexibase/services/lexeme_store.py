"""Persistent lexical knowledge base operations.

All writes go through :func:`~lexibase.database.upsert.get_or_create`, keyed by
the natural keys of each table, so repeating the same write is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from ..database.models import (
    MAX_MARK,
    MIN_MARK,
    MarkSource,
    SentenceWordModel,
    WordModel,
    WordPronunciationModel,
    WordStemModel,
    WordTranslationModel,
    WordUserMarkModel,
)
from ..database.upsert import get_or_create
from ..oracle.schemas import AnalyzedWord


class MarkValueError(ValueError):
    """Raised when a mark falls outside the 0-5 scale."""


def validate_mark(mark: int) -> int:
    if isinstance(mark, bool) or not isinstance(mark, int):
        raise MarkValueError(f"Mark must be an integer, got {mark!r}")
    if mark < MIN_MARK or mark > MAX_MARK:
        raise MarkValueError(f"Mark must be between {MIN_MARK} and {MAX_MARK}")
    return mark


@dataclass(slots=True)
class WordProjection:
    """What the store knows about one literal word."""

    word: str
    translation: Optional[str] = None
    pronunciations: List[Tuple[str, str]] = field(default_factory=list)
    stems: List[str] = field(default_factory=list)


class LexemeStore:
    """Read and write helpers for words and their attached records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Words
    # ------------------------------------------------------------------
    def find_word(self, literal: str, language_code: str) -> Optional[WordModel]:
        stmt = select(WordModel).where(
            WordModel.word == literal, WordModel.language_code == language_code
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_or_create_word(self, literal: str, language_code: str) -> WordModel:
        literal = literal.strip()
        if not literal:
            raise ValueError("Word literal must not be blank")
        word, _ = get_or_create(self.session, WordModel, word=literal, language_code=language_code)
        return word

    # ------------------------------------------------------------------
    # Attached records
    # ------------------------------------------------------------------
    def add_translation(self, word_id: int, language_code: str, translation: str) -> bool:
        translation = (translation or "").strip()
        if not translation:
            return False
        _, created = get_or_create(
            self.session,
            WordTranslationModel,
            word_id=word_id,
            language_code=language_code,
            translation=translation,
        )
        if created:
            self._set_reduced_at(word_id, None)
        return created

    def add_pronunciation(
        self, word_id: int, pronunciation: Optional[str], pronunciation_type: Optional[str]
    ) -> bool:
        pronunciation = (pronunciation or "").strip()
        pronunciation_type = (pronunciation_type or "").strip()
        if not pronunciation or not pronunciation_type:
            return False
        _, created = get_or_create(
            self.session,
            WordPronunciationModel,
            word_id=word_id,
            pronunciation=pronunciation,
            pronunciation_type=pronunciation_type,
        )
        return created

    def add_stem(self, word: WordModel, stem: Optional[str]) -> bool:
        stem = (stem or "").strip()
        if not stem or stem == word.word:
            return False
        _, created = get_or_create(self.session, WordStemModel, word_id=word.id, stem=stem)
        return created

    def link_sentence(self, word_id: int, sentence_id: int) -> bool:
        _, created = get_or_create(
            self.session, SentenceWordModel, word_id=word_id, sentence_id=sentence_id
        )
        return created

    def record_analyzed_words(
        self,
        sentence_id: int,
        language_code: str,
        words: Iterable[AnalyzedWord],
        target_language: str,
    ) -> None:
        """Persist the oracle's words for one sentence."""

        for item in words:
            word = self.get_or_create_word(item.word, language_code)
            self.add_translation(word.id, target_language, item.translation)
            pronunciation_type = item.pronunciation_type.value if item.pronunciation_type else None
            self.add_pronunciation(word.id, item.pronunciation, pronunciation_type)
            for stem in item.stems:
                self.add_stem(word, stem)
            self.link_sentence(word.id, sentence_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def translations_for(self, word_id: int, language_code: str) -> List[str]:
        stmt = (
            select(WordTranslationModel.translation)
            .where(
                WordTranslationModel.word_id == word_id,
                WordTranslationModel.language_code == language_code,
            )
            .order_by(WordTranslationModel.id)
        )
        return list(self.session.execute(stmt).scalars())

    def pronunciations_for(self, word_id: int) -> List[WordPronunciationModel]:
        stmt = (
            select(WordPronunciationModel)
            .where(WordPronunciationModel.word_id == word_id)
            .order_by(WordPronunciationModel.id)
        )
        return list(self.session.execute(stmt).scalars())

    def stems_for(self, word_id: int) -> List[str]:
        stmt = select(WordStemModel.stem).where(WordStemModel.word_id == word_id).order_by(WordStemModel.id)
        return list(self.session.execute(stmt).scalars())

    def project_words(
        self, literals: Sequence[str], language_code: str, target_language: str
    ) -> Dict[str, WordProjection]:
        """Return stored translation, pronunciations and stems for each literal."""

        unique = list(dict.fromkeys(literal for literal in literals if literal))
        if not unique:
            return {}
        stmt = select(WordModel).where(
            WordModel.language_code == language_code, WordModel.word.in_(unique)
        )
        words = {word.word: word for word in self.session.execute(stmt).scalars()}

        projections: Dict[str, WordProjection] = {}
        for literal in unique:
            projection = WordProjection(word=literal)
            word = words.get(literal)
            if word is not None:
                translations = self.translations_for(word.id, target_language)
                projection.translation = translations[0] if translations else None
                projection.pronunciations = [
                    (row.pronunciation, row.pronunciation_type)
                    for row in self.pronunciations_for(word.id)
                ]
                projection.stems = self.stems_for(word.id)
            projections[literal] = projection
        return projections

    def replace_translations(
        self, word_id: int, language_code: str, translations: Sequence[str]
    ) -> List[str]:
        """Swap the stored translation set for ``translations``.

        The word is marked as reduced until another translation is added.
        Runs inside the caller's transaction; nothing is committed here.
        """

        self.session.execute(
            delete(WordTranslationModel).where(
                WordTranslationModel.word_id == word_id,
                WordTranslationModel.language_code == language_code,
            )
        )
        stored: List[str] = []
        for translation in translations:
            if self.add_translation(word_id, language_code, translation):
                stored.append(translation.strip())
        self._set_reduced_at(word_id, func.now())
        return stored

    def _set_reduced_at(self, word_id: int, value) -> None:
        self.session.execute(
            update(WordModel)
            .where(WordModel.id == word_id)
            .values(translations_reduced_at=value)
            .execution_options(synchronize_session=False)
        )

    # ------------------------------------------------------------------
    # User marks
    # ------------------------------------------------------------------
    def get_mark(self, user_id: int, word_id: int) -> Optional[WordUserMarkModel]:
        stmt = select(WordUserMarkModel).where(
            WordUserMarkModel.user_id == user_id, WordUserMarkModel.word_id == word_id
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def upsert_mark(
        self,
        user_id: int,
        word_id: int,
        mark: int,
        *,
        note: str = "",
        source: MarkSource = MarkSource.MANUAL,
    ) -> WordUserMarkModel:
        validate_mark(mark)
        row, created = get_or_create(
            self.session,
            WordUserMarkModel,
            defaults={"mark": mark, "note": note or "", "source": source.value},
            user_id=user_id,
            word_id=word_id,
        )
        if not created:
            row.mark = mark
            row.note = note or ""
            row.source = source.value
            self.session.flush()
        return row

    def delete_mark(self, user_id: int, word_id: int) -> bool:
        result = self.session.execute(
            delete(WordUserMarkModel).where(
                WordUserMarkModel.user_id == user_id, WordUserMarkModel.word_id == word_id
            )
        )
        return bool(result.rowcount)

    def list_marks(
        self,
        user_id: int,
        *,
        offset: int = 0,
        limit: int = 50,
        mark: Optional[int] = None,
        language_code: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Tuple[WordUserMarkModel, WordModel]], int]:
        """Return one page of a user's marks (newest first) and the total count."""

        conditions = [WordUserMarkModel.user_id == user_id]
        if mark is not None:
            conditions.append(WordUserMarkModel.mark == validate_mark(mark))
        if language_code:
            conditions.append(WordModel.language_code == language_code)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(WordModel.word).like(pattern),
                    func.lower(WordUserMarkModel.note).like(pattern),
                )
            )

        base = select(WordUserMarkModel, WordModel).join(
            WordModel, WordModel.id == WordUserMarkModel.word_id
        )
        rows = self.session.execute(
            base.where(*conditions)
            .order_by(WordUserMarkModel.updated_at.desc(), WordUserMarkModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        total = self.session.execute(
            select(func.count())
            .select_from(WordUserMarkModel)
            .join(WordModel, WordModel.id == WordUserMarkModel.word_id)
            .where(*conditions)
        ).scalar_one()
        return [(row[0], row[1]) for row in rows], int(total)


__all__ = ["LexemeStore", "MarkValueError", "WordProjection", "validate_mark"]
