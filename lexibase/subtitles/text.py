"""Sentence splitting and cue text clean-up helpers."""

from __future__ import annotations

import math
from typing import List

import regex

from .common import (
    CJK_PATTERN,
    MIN_CJK_SENTENCE_LENGTH,
    MIN_WESTERN_SENTENCE_LENGTH,
    SENTENCE_END_PATTERN,
    TRAILING_TERMINATORS_PATTERN,
)
from .models import ProcessedSentence, SubtitleCue

_MARKUP_TAG_PATTERN = regex.compile(r"<[^>]*>")


def clean_cue_text(text: str) -> str:
    """Strip markup tags and collapse line breaks into single spaces."""

    without_tags = _MARKUP_TAG_PATTERN.sub("", text)
    return " ".join(part.strip() for part in without_tags.split("\n") if part.strip())


def _is_meaningful(sentence: str) -> bool:
    core = TRAILING_TERMINATORS_PATTERN.sub("", sentence).strip()
    if CJK_PATTERN.search(core):
        return len(core) >= MIN_CJK_SENTENCE_LENGTH
    return len(core) >= MIN_WESTERN_SENTENCE_LENGTH


def split_into_sentences(text: str) -> List[str]:
    """Split ``text`` after runs of Western or CJK sentence terminators.

    Terminators stay attached to the sentence they close.  Fragments that are
    too short to be a sentence (under three characters, or empty for text
    containing CJK) are dropped.
    """

    sentences: List[str] = []
    cursor = 0
    for match in SENTENCE_END_PATTERN.finditer(text):
        fragment = text[cursor : match.end()].strip()
        if fragment:
            sentences.append(fragment)
        cursor = match.end()
    tail = text[cursor:].strip()
    if tail:
        sentences.append(tail)
    return [sentence for sentence in sentences if _is_meaningful(sentence)]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def distribute_cue(cue: SubtitleCue, sentences: List[str]) -> List[ProcessedSentence]:
    """Spread the cue's time span over ``sentences`` by character count.

    The time cursor advances cumulatively, so the produced spans are
    contiguous and the final sentence ends exactly where the cue ends.
    """

    if not sentences:
        return []
    if len(sentences) == 1:
        return [ProcessedSentence(text=sentences[0], start_ms=cue.start_ms, end_ms=cue.end_ms)]

    total_chars = sum(len(sentence) for sentence in sentences)
    duration = cue.end_ms - cue.start_ms
    cursor = float(cue.start_ms)
    distributed: List[ProcessedSentence] = []
    for index, sentence in enumerate(sentences):
        span = (len(sentence) / total_chars) * duration
        next_cursor = cursor + span
        end_ms = cue.end_ms if index == len(sentences) - 1 else round_half_up(next_cursor)
        distributed.append(
            ProcessedSentence(text=sentence, start_ms=round_half_up(cursor), end_ms=end_ms)
        )
        cursor = next_cursor
    return distributed


__all__ = [
    "clean_cue_text",
    "distribute_cue",
    "round_half_up",
    "split_into_sentences",
]
