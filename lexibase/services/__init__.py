"""Core services operating on the lexical knowledge base."""

from .analysis import AnalyzedSentence, LessonSentencePage, SentenceAnalysisPipeline
from .ingestion import FileContentProvider, LocalFileContentProvider, SentenceIngestionPipeline
from .lexeme_store import LexemeStore, MarkValueError, WordProjection
from .status_import import StatusCard, StatusImportService, card_to_mark
from .translation_lookup import TranslationLookupService
from .word_marks import WordMarkService

__all__ = [
    "AnalyzedSentence",
    "FileContentProvider",
    "LessonSentencePage",
    "LexemeStore",
    "LocalFileContentProvider",
    "MarkValueError",
    "SentenceAnalysisPipeline",
    "SentenceIngestionPipeline",
    "StatusCard",
    "StatusImportService",
    "TranslationLookupService",
    "WordMarkService",
    "WordProjection",
    "card_to_mark",
]
