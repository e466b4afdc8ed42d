"""Shared constants for lesson file parsing."""

from __future__ import annotations

import regex

SRT_EXTENSION = ".srt"
ASS_EXTENSIONS = (".ass", ".ssa")
TEXT_EXTENSION = ".txt"

SRT_TIMESTAMP_PATTERN = regex.compile(
    r"^\s*(?P<start>\d{1,2}:\d{2}:\d{2}[,.]\d{1,3})\s*-->\s*(?P<end>\d{1,2}:\d{2}:\d{2}[,.]\d{1,3})"
)
SRT_CUE_SNIFF_PATTERN = regex.compile(
    r"^\d+[ \t]*\n\d{1,2}:\d{2}:\d{2}[,.]\d{3}[ \t]*-->[ \t]*\d{1,2}:\d{2}:\d{2}[,.]\d{3}",
    regex.MULTILINE,
)
ASS_SECTION_SNIFF_PATTERN = regex.compile(
    r"^\s*\[(?:Script Info|V4\+? Styles|Events)\]\s*$",
    regex.MULTILINE | regex.IGNORECASE,
)

# Western . ! ? and the CJK terminators 。 ！ ？ ～ ‥ …
SENTENCE_TERMINATORS = ".!?。！？～‥…"
# Full-width 。！？ close a sentence even when the next one follows without a space.
CJK_HARD_TERMINATORS = "。！？"
SENTENCE_END_PATTERN = regex.compile(
    rf"[{regex.escape(SENTENCE_TERMINATORS)}]*[{CJK_HARD_TERMINATORS}][{regex.escape(SENTENCE_TERMINATORS)}]*\s*"
    rf"|[{regex.escape(SENTENCE_TERMINATORS)}]+(?:\s+|$)"
)
TRAILING_TERMINATORS_PATTERN = regex.compile(rf"[{regex.escape(SENTENCE_TERMINATORS)}]+$")
CJK_PATTERN = regex.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF\uAC00-\uD7AF]")

MIN_WESTERN_SENTENCE_LENGTH = 3
MIN_CJK_SENTENCE_LENGTH = 1


def normalize_line_endings(payload: str) -> str:
    return payload.replace("\r\n", "\n").replace("\r", "\n")


__all__ = [
    "ASS_EXTENSIONS",
    "ASS_SECTION_SNIFF_PATTERN",
    "CJK_PATTERN",
    "MIN_CJK_SENTENCE_LENGTH",
    "MIN_WESTERN_SENTENCE_LENGTH",
    "SENTENCE_END_PATTERN",
    "SENTENCE_TERMINATORS",
    "SRT_CUE_SNIFF_PATTERN",
    "SRT_EXTENSION",
    "SRT_TIMESTAMP_PATTERN",
    "TEXT_EXTENSION",
    "TRAILING_TERMINATORS_PATTERN",
    "normalize_line_endings",
]
