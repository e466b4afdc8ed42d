"""SubRip (SRT) parsing."""

from __future__ import annotations

from typing import List

import regex

from .. import logging_manager as log_mgr
from .common import SRT_TIMESTAMP_PATTERN, normalize_line_endings
from .errors import SubtitleParseError, SubtitleTimestampError
from .models import SubtitleCue
from .text import clean_cue_text

logger = log_mgr.get_logger("subtitles.srt")

_BLOCK_SEPARATOR = regex.compile(r"\n\s*\n")


def srt_timestamp_to_ms(value: str) -> int:
    """Convert ``HH:MM:SS,mmm`` (or ``.mmm``) to milliseconds."""

    parts = value.strip().replace(",", ".").split(":")
    if len(parts) != 3:
        raise SubtitleTimestampError(f"Invalid SRT timestamp: {value!r}")
    hours, minutes, seconds = parts
    whole_seconds, _, fraction = seconds.partition(".")
    try:
        hours_value = int(hours)
        minutes_value = int(minutes)
        seconds_value = int(whole_seconds)
        milliseconds = int((fraction or "0").ljust(3, "0")[:3])
    except ValueError as exc:
        raise SubtitleTimestampError(f"Invalid SRT timestamp: {value!r}") from exc
    if minutes_value >= 60 or seconds_value >= 60:
        raise SubtitleTimestampError(f"Out of range SRT timestamp: {value!r}")
    return hours_value * 3_600_000 + minutes_value * 60_000 + seconds_value * 1000 + milliseconds


def _split_blocks(payload: str) -> List[str]:
    sanitized = payload.strip()
    if not sanitized:
        return []
    return [block for block in _BLOCK_SEPARATOR.split(sanitized) if block.strip()]


def parse_srt(payload: str) -> List[SubtitleCue]:
    """Parse SRT ``payload`` into dialogue cues.

    Blocks without a timing line are metadata and are ignored.  A block whose
    timing line is malformed is skipped with a warning.  A payload yielding no
    cue at all is rejected.
    """

    cues: List[SubtitleCue] = []
    content = normalize_line_endings(payload).lstrip("\ufeff")
    for block_number, raw_block in enumerate(_split_blocks(content), start=1):
        lines = [line.strip() for line in raw_block.split("\n") if line.strip()]
        if not lines:
            continue
        time_line_index = 1 if lines[0].isdigit() else 0
        if time_line_index >= len(lines) or "-->" not in lines[time_line_index]:
            logger.debug("Skipping non-dialogue SRT block %s", block_number)
            continue

        time_line = lines[time_line_index]
        match = SRT_TIMESTAMP_PATTERN.match(time_line)
        try:
            if not match:
                raise SubtitleTimestampError(f"Unrecognised SRT timing line: {time_line!r}")
            start_ms = srt_timestamp_to_ms(match.group("start"))
            end_ms = srt_timestamp_to_ms(match.group("end"))
            if end_ms < start_ms:
                raise SubtitleTimestampError(f"Cue ends before it starts: {time_line!r}")
        except SubtitleTimestampError as exc:
            logger.warning(
                "Skipping SRT cue %s: %s",
                block_number,
                exc,
                extra={"event": "subtitles.srt.invalid_timestamp"},
            )
            continue

        text = clean_cue_text("\n".join(lines[time_line_index + 1 :]))
        if not text:
            continue
        cues.append(SubtitleCue(text=text, start_ms=start_ms, end_ms=end_ms))

    if not cues:
        raise SubtitleParseError(
            "Failed to parse SRT file: no valid subtitle cues were found. "
            "Please ensure the file is in valid SRT format."
        )
    return cues


__all__ = ["parse_srt", "srt_timestamp_to_ms"]
