"""Strict result schemas for each kind of oracle answer."""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from ..database.models.word import PronunciationType


class AnalyzedWord(BaseModel):
    """One word of a sentence as returned by the oracle."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    word: str
    translation: str = ""
    pronunciation: Optional[str] = None
    pronunciation_type: Optional[PronunciationType] = Field(
        default=None, alias="pronunciationType"
    )
    stems: List[str] = Field(default_factory=list)

    @field_validator("word")
    @classmethod
    def _require_word(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("word must not be blank")
        return value

    @field_validator("translation", mode="before")
    @classmethod
    def _coerce_translation(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("pronunciation_type", mode="before")
    @classmethod
    def _normalize_pronunciation_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    @field_validator("stems", mode="before")
    @classmethod
    def _coerce_stems(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class SentenceSplitResult(BaseModel):
    kind: Literal["sentence_split"] = "sentence_split"
    words: List[AnalyzedWord] = Field(default_factory=list)

    @property
    def split(self) -> List[str]:
        return [item.word for item in self.words]


class OcrResult(BaseModel):
    kind: Literal["ocr"] = "ocr"
    texts: List[str] = Field(default_factory=list)

    @field_validator("texts")
    @classmethod
    def _drop_blank(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value if item and item.strip()]


class TranslationReductionResult(BaseModel):
    kind: Literal["translation_reduction"] = "translation_reduction"
    translations: List[str] = Field(default_factory=list)

    @field_validator("translations")
    @classmethod
    def _drop_blank_and_duplicates(cls, value: List[str]) -> List[str]:
        seen = set()
        cleaned: List[str] = []
        for item in value:
            text = item.strip() if item else ""
            if text and text not in seen:
                seen.add(text)
                cleaned.append(text)
        return cleaned


OracleResult = Annotated[
    Union[SentenceSplitResult, OcrResult, TranslationReductionResult],
    Field(discriminator="kind"),
]

_RESULT_ADAPTER: TypeAdapter = TypeAdapter(OracleResult)

# Field that holds the list when the model answers with a bare JSON array.
_LIST_FIELDS = {
    "sentence_split": "words",
    "ocr": "texts",
    "translation_reduction": "translations",
}


def parse_oracle_result(kind: str, payload: Any) -> OracleResult:
    """Validate ``payload`` as the result variant identified by ``kind``.

    Raises :class:`pydantic.ValidationError` when the payload does not match.
    """

    if kind not in _LIST_FIELDS:
        raise ValueError(f"Unknown oracle result kind: {kind}")
    if isinstance(payload, list):
        payload = {_LIST_FIELDS[kind]: payload}
    if not isinstance(payload, dict):
        payload = {_LIST_FIELDS[kind]: payload}
    return _RESULT_ADAPTER.validate_python({**payload, "kind": kind})


__all__ = [
    "AnalyzedWord",
    "OcrResult",
    "OracleResult",
    "SentenceSplitResult",
    "TranslationReductionResult",
    "parse_oracle_result",
]
