"""Sentence models."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base, TimestampMixin


class SentenceModel(TimestampMixin, Base):
    """A sentence of a lesson; ``split_text`` caches the analysed word list."""

    __tablename__ = "sentence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(Integer, nullable=False)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    split_text: Mapped[Optional[List[str]]] = mapped_column(JSON(none_as_null=True), nullable=True)
    start_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    end_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (Index("idx_sentence_lesson", "lesson_id", "id"),)


class SentenceWordModel(TimestampMixin, Base):
    __tablename__ = "sentence_word"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word_id: Mapped[int] = mapped_column(ForeignKey("word.id"), nullable=False)
    sentence_id: Mapped[int] = mapped_column(ForeignKey("sentence.id"), nullable=False)

    __table_args__ = (
        UniqueConstraint("word_id", "sentence_id", name="sentence_word_word_id_sentence_id_key"),
    )


__all__ = ["SentenceModel", "SentenceWordModel"]
