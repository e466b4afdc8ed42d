"""Lexeme models: words and the records attached to them."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base, TimestampMixin

MIN_MARK = 0
MAX_MARK = 5
KNOWN_MARK_THRESHOLD = 4


class PronunciationType(str, Enum):
    HIRAGANA = "hiragana"
    ROMANIZATION = "romanization"
    PINYIN = "pinyin"
    IPA = "ipa"


class MarkSource(str, Enum):
    MANUAL = "manual"
    IMPORTED = "imported"


class WordModel(TimestampMixin, Base):
    __tablename__ = "word"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(255), nullable=False)
    language_code: Mapped[str] = mapped_column(String(10), nullable=False)
    # Set when the oracle last reduced the translations; cleared by a new translation.
    translations_reduced_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("word", "language_code", name="word_word_language_code_key"),
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"WordModel(id={self.id!r}, word={self.word!r}, language_code={self.language_code!r})"


class WordTranslationModel(TimestampMixin, Base):
    __tablename__ = "word_translation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word_id: Mapped[int] = mapped_column(ForeignKey("word.id"), nullable=False)
    language_code: Mapped[str] = mapped_column(String(10), nullable=False)
    translation: Mapped[str] = mapped_column(String(191), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "word_id",
            "language_code",
            "translation",
            name="word_translation_word_id_language_code_translation_key",
        ),
    )


class WordPronunciationModel(TimestampMixin, Base):
    __tablename__ = "word_pronunciation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word_id: Mapped[int] = mapped_column(ForeignKey("word.id"), nullable=False)
    pronunciation: Mapped[str] = mapped_column(String(255), nullable=False)
    pronunciation_type: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "word_id",
            "pronunciation",
            "pronunciation_type",
            name="word_pronunciation_word_id_pronunciation_pronunciation_type_key",
        ),
    )


class WordStemModel(TimestampMixin, Base):
    __tablename__ = "word_stem"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word_id: Mapped[int] = mapped_column(ForeignKey("word.id"), nullable=False)
    stem: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (UniqueConstraint("word_id", "stem", name="word_stem_word_id_stem_key"),)


class WordUserMarkModel(TimestampMixin, Base):
    __tablename__ = "word_user_mark"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    word_id: Mapped[int] = mapped_column(ForeignKey("word.id"), nullable=False)
    mark: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    source: Mapped[str] = mapped_column(String(20), nullable=False, default=MarkSource.MANUAL.value)

    __table_args__ = (
        UniqueConstraint("user_id", "word_id", name="word_user_mark_user_id_word_id_key"),
        CheckConstraint(f"mark >= {MIN_MARK} AND mark <= {MAX_MARK}", name="word_user_mark_mark_range"),
        Index("idx_word_user_mark_user_updated", "user_id", "updated_at"),
    )

    @property
    def is_known(self) -> bool:
        return self.mark >= KNOWN_MARK_THRESHOLD


__all__ = [
    "KNOWN_MARK_THRESHOLD",
    "MAX_MARK",
    "MIN_MARK",
    "MarkSource",
    "PronunciationType",
    "WordModel",
    "WordPronunciationModel",
    "WordStemModel",
    "WordTranslationModel",
    "WordUserMarkModel",
]
