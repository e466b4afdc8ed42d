"""Interface implemented by sentence analysis oracles."""

from __future__ import annotations

from typing import List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from .schemas import SentenceSplitResult


@runtime_checkable
class SentenceAnalysisOracle(Protocol):
    """External collaborator that analyses sentences, images and translation sets.

    Every method raises :class:`~lexibase.oracle.errors.OracleUnavailableError`
    when the backend cannot be reached and
    :class:`~lexibase.oracle.errors.OracleResponseError` when its answer is
    unusable.
    """

    def analyze_sentence(self, text: str, language: str) -> SentenceSplitResult:
        ...

    def extract_text(
        self,
        image_base64: str,
        language: str,
        region: Optional[Mapping[str, float]] = None,
    ) -> List[str]:
        ...

    def reduce_translations(
        self,
        word: str,
        translations: Sequence[str],
        source_language: str,
        target_language: str,
    ) -> List[str]:
        ...

    def translate_sentence(
        self,
        sentence: str,
        context_sentences: Sequence[str],
        language: str,
    ) -> str:
        ...


__all__ = ["SentenceAnalysisOracle"]
