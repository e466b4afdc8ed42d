"""Prompt templates used for communicating with the LLM."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

SOURCE_START = "<<<BEGIN_SOURCE_TEXT>>>"
SOURCE_END = "<<<END_SOURCE_TEXT>>>"

# Pronunciation notation requested per source language.
_PRONUNCIATION_REQUIREMENTS = {
    "hiragana": {
        "aliases": ("ja", "japanese", "日本語"),
        "instruction": "Give the reading of every word in hiragana (no romaji, no katakana).",
    },
    "romanization": {
        "aliases": ("ko", "korean", "한국어"),
        "instruction": "Give the Revised Romanization of every word.",
    },
    "pinyin": {
        "aliases": ("zh", "zh-cn", "zh-tw", "chinese", "中文"),
        "instruction": "Give the pinyin of every word with tone marks.",
    },
}

_DEFAULT_PRONUNCIATION = "ipa"
_DEFAULT_PRONUNCIATION_INSTRUCTION = "Give the IPA transcription of every word without slashes or brackets."

_LANGUAGE_NAMES = {
    "en": "English",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
}


def language_name(language_code: str) -> str:
    """Return a human readable name for ``language_code`` when known."""

    return _LANGUAGE_NAMES.get(language_code.strip().lower(), language_code)


def pronunciation_type_for(language_code: str) -> str:
    """Return the pronunciation notation requested for ``language_code``."""

    normalized = language_code.strip().lower()
    for kind, requirement in _PRONUNCIATION_REQUIREMENTS.items():
        if normalized in requirement["aliases"]:
            return kind
    return _DEFAULT_PRONUNCIATION


def _pronunciation_instruction(language_code: str) -> str:
    kind = pronunciation_type_for(language_code)
    requirement = _PRONUNCIATION_REQUIREMENTS.get(kind)
    if requirement is None:
        return _DEFAULT_PRONUNCIATION_INSTRUCTION
    return requirement["instruction"]


def make_sentence_analysis_prompt(language_code: str, target_language: str = "en") -> str:
    """Build the system prompt for splitting a sentence into translated words."""

    kind = pronunciation_type_for(language_code)
    instructions = [
        f"You are a {language_name(language_code)} language tutor.",
        "Split the sentence into the words a learner would look up, in reading order.",
        "Keep every word exactly as it appears in the sentence; do not normalise spelling.",
        "Skip punctuation and whitespace.",
        f"For every word give a short {language_name(target_language)} translation that fits the sentence.",
        _pronunciation_instruction(language_code),
        f'Set "pronunciationType" to "{kind}" for every word that has a pronunciation.',
        'When a word is inflected, list its dictionary forms in "stems".',
        "Respond with JSON only, matching the provided schema.",
    ]
    return "\n".join(instructions)


def make_ocr_prompt(language_code: str) -> str:
    """Build the system prompt for extracting text segments from an image."""

    return "\n".join(
        [
            f"Extract all {language_name(language_code)} text visible in the image.",
            "Return each separate line or speech bubble as its own entry, in reading order.",
            "Do not translate or correct the text.",
            'Respond with JSON only: {"texts": ["..."]}.',
        ]
    )


def make_translation_reduction_prompt(source_language: str, target_language: str) -> str:
    """Build the system prompt for collapsing redundant translations."""

    return "\n".join(
        [
            f"You maintain a {language_name(source_language)} to "
            f"{language_name(target_language)} learner dictionary.",
            "You receive a word and the translations collected for it so far.",
            "Merge synonyms and near-duplicates, drop wrong or overly specific entries,",
            "and keep at most three of the most common distinct meanings.",
            'Respond with JSON only: {"translations": ["..."]}.',
        ]
    )


def make_contextual_translation_prompt(language_code: str, target_language: str = "en") -> str:
    """Build the system prompt for translating one sentence with context."""

    return "\n".join(
        [
            f"Translate the sentence between {SOURCE_START} and {SOURCE_END} from "
            f"{language_name(language_code)} to {language_name(target_language)}.",
            "Use the surrounding sentences only to resolve ambiguity; do not translate them.",
            "Provide ONLY the translated sentence without commentary, labels or quotes.",
        ]
    )


def make_sentence_payload(
    content: str,
    *,
    system_prompt: str,
) -> List[Dict[str, Any]]:
    """Return a chat message list for ``content``."""

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": content},
    ]


def make_image_payload(
    image_base64: str,
    *,
    system_prompt: str,
    mime_type: str = "image/jpeg",
) -> List[Dict[str, Any]]:
    """Return a chat message list carrying an inline image."""

    return [
        {"role": "system", "content": system_prompt},
        {
            "role": "user",
            "content": [
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime_type};base64,{image_base64}"},
                }
            ],
        },
    ]


def wrap_source_text(sentence: str, context_sentences: Optional[Sequence[str]] = None) -> str:
    """Return ``sentence`` wrapped in source markers, preceded by optional context."""

    parts: List[str] = []
    context = [item.strip() for item in context_sentences or () if item and item.strip()]
    if context:
        parts.append("Context:")
        parts.extend(context)
        parts.append("")
    parts.append(f"{SOURCE_START}\n{sentence}\n{SOURCE_END}")
    return "\n".join(parts)


def sentence_analysis_response_format() -> Dict[str, Any]:
    """Return the ``response_format`` block describing the sentence analysis schema."""

    word_schema = {
        "type": "object",
        "properties": {
            "word": {"type": "string"},
            "translation": {"type": "string"},
            "pronunciation": {"type": ["string", "null"]},
            "pronunciationType": {
                "type": ["string", "null"],
                "enum": ["hiragana", "romanization", "pinyin", "ipa", None],
            },
            "stems": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["word", "translation", "pronunciation", "pronunciationType", "stems"],
        "additionalProperties": False,
    }
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "sentence_analysis",
            "strict": True,
            "schema": {
                "type": "object",
                "properties": {"words": {"type": "array", "items": word_schema}},
                "required": ["words"],
                "additionalProperties": False,
            },
        },
    }


__all__ = [
    "SOURCE_END",
    "SOURCE_START",
    "language_name",
    "make_contextual_translation_prompt",
    "make_image_payload",
    "make_ocr_prompt",
    "make_sentence_analysis_prompt",
    "make_sentence_payload",
    "make_translation_reduction_prompt",
    "pronunciation_type_for",
    "sentence_analysis_response_format",
    "wrap_source_text",
]
