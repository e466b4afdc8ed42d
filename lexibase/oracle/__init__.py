"""Sentence analysis oracle interface, result schemas and the LLM adapter."""

from .base import SentenceAnalysisOracle
from .errors import OracleError, OracleResponseError, OracleUnavailableError
from .llm_oracle import LLMSentenceAnalysisOracle
from .schemas import (
    AnalyzedWord,
    OcrResult,
    OracleResult,
    SentenceSplitResult,
    TranslationReductionResult,
    parse_oracle_result,
)

__all__ = [
    "AnalyzedWord",
    "LLMSentenceAnalysisOracle",
    "OcrResult",
    "OracleError",
    "OracleResponseError",
    "OracleResult",
    "OracleUnavailableError",
    "SentenceAnalysisOracle",
    "SentenceSplitResult",
    "TranslationReductionResult",
    "parse_oracle_result",
]
