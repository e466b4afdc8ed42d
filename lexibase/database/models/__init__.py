"""SQLAlchemy models; importing this package registers them with Base.metadata."""

from .sentence import SentenceModel, SentenceWordModel
from .word import (
    KNOWN_MARK_THRESHOLD,
    MAX_MARK,
    MIN_MARK,
    MarkSource,
    PronunciationType,
    WordModel,
    WordPronunciationModel,
    WordStemModel,
    WordTranslationModel,
    WordUserMarkModel,
)

__all__ = [
    "KNOWN_MARK_THRESHOLD",
    "MAX_MARK",
    "MIN_MARK",
    "MarkSource",
    "PronunciationType",
    "SentenceModel",
    "SentenceWordModel",
    "WordModel",
    "WordPronunciationModel",
    "WordStemModel",
    "WordTranslationModel",
    "WordUserMarkModel",
]
