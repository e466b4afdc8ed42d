"""Turn raw lesson file content into an ordered list of sentences."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .. import logging_manager as log_mgr
from ..text_normalization import normalize_script
from .ass import parse_ass
from .common import normalize_line_endings
from .errors import SubtitleParseError, UnsupportedFormatError
from .models import ProcessedSentence, SubtitleCue, SubtitleFormat
from .sniffer import detect_format
from .srt import parse_srt
from .text import distribute_cue, split_into_sentences
from .utils import sort_and_deduplicate_cues

logger = log_mgr.get_logger("subtitles.processing")

_CUE_PARSERS: Dict[SubtitleFormat, Callable[[str], List[SubtitleCue]]] = {
    SubtitleFormat.SRT: parse_srt,
    SubtitleFormat.ASS: parse_ass,
}


def cues_to_sentences(
    cues: List[SubtitleCue], *, split_cues: bool = False
) -> List[ProcessedSentence]:
    """Convert cues into sentences, normalizing script variants.

    With ``split_cues`` each cue is further split on sentence terminators and
    its time span is distributed across the pieces; otherwise one cue yields
    exactly one sentence.
    """

    sentences: List[ProcessedSentence] = []
    for cue in sort_and_deduplicate_cues(cues):
        text = normalize_script(cue.text).strip()
        if not text:
            continue
        if not split_cues:
            sentences.append(ProcessedSentence(text=text, start_ms=cue.start_ms, end_ms=cue.end_ms))
            continue
        pieces = split_into_sentences(text) or [text]
        normalized_cue = SubtitleCue(text=text, start_ms=cue.start_ms, end_ms=cue.end_ms)
        sentences.extend(distribute_cue(normalized_cue, pieces))
    return sentences


def parse_subtitle_content(
    content: str, subtitle_format: SubtitleFormat, *, split_cues: bool = False
) -> List[ProcessedSentence]:
    parser = _CUE_PARSERS.get(subtitle_format)
    if parser is None:
        raise UnsupportedFormatError(f"Unsupported subtitle format: {subtitle_format.value}")
    sentences = cues_to_sentences(parser(content), split_cues=split_cues)
    if not sentences:
        raise SubtitleParseError(
            f"No sentences could be extracted from the {subtitle_format.value.upper()} file."
        )
    return sentences


def parse_text_content(content: str) -> List[ProcessedSentence]:
    """Split untimed plain text into sentences."""

    cleaned = normalize_script(normalize_line_endings(content or "").strip())
    if not cleaned:
        raise SubtitleParseError("Text file is empty or contains no readable content.")
    sentences = [ProcessedSentence(text=sentence) for sentence in split_into_sentences(cleaned)]
    if not sentences:
        raise SubtitleParseError("Text file does not contain any complete sentence.")
    return sentences


def parse_lesson_content(
    content: str, file_name: Optional[str] = None, *, split_cues: bool = False
) -> List[ProcessedSentence]:
    """Detect the format of ``content`` and return its sentences in order."""

    subtitle_format = detect_format(content, file_name)
    logger.debug(
        "Parsing lesson content as %s",
        subtitle_format.value,
        extra={"event": "subtitles.parse", "file_name": file_name},
    )
    if subtitle_format is SubtitleFormat.TXT:
        return parse_text_content(content)
    return parse_subtitle_content(content, subtitle_format, split_cues=split_cues)


__all__ = [
    "cues_to_sentences",
    "parse_lesson_content",
    "parse_subtitle_content",
    "parse_text_content",
]
