"""Advanced SubStation Alpha (ASS/SSA) parsing."""

from __future__ import annotations

from typing import List, Optional

import regex

from .. import logging_manager as log_mgr
from .common import normalize_line_endings
from .errors import SubtitleParseError, SubtitleTimestampError
from .models import SubtitleCue

logger = log_mgr.get_logger("subtitles.ass")

_OVERRIDE_TAG_PATTERN = regex.compile(r"\{[^}]*\}")
_STANDARD_FORMAT = (
    "layer",
    "start",
    "end",
    "style",
    "name",
    "marginl",
    "marginr",
    "marginv",
    "effect",
    "text",
)


def ass_timestamp_to_ms(value: str) -> int:
    """Convert an ``H:MM:SS.cc`` timestamp to milliseconds."""

    parts = value.strip().split(":")
    if len(parts) != 3:
        raise SubtitleTimestampError(f"Invalid ASS timestamp format: {value!r}")
    hours, minutes, seconds = parts
    whole_seconds, _, fraction = seconds.partition(".")
    try:
        hours_value = int(hours)
        minutes_value = int(minutes)
        seconds_value = int(whole_seconds)
        fraction_ms = int((fraction or "0").ljust(3, "0")[:3])
    except ValueError as exc:
        raise SubtitleTimestampError(f"Invalid ASS timestamp format: {value!r}") from exc
    if minutes_value >= 60 or seconds_value >= 60:
        raise SubtitleTimestampError(f"Out of range ASS timestamp: {value!r}")
    return hours_value * 3_600_000 + minutes_value * 60_000 + seconds_value * 1000 + fraction_ms


def strip_ass_markup(text: str) -> str:
    """Remove override blocks and translate ASS escape sequences."""

    cleaned = _OVERRIDE_TAG_PATTERN.sub("", text)
    cleaned = cleaned.replace("\\N", "\n").replace("\\n", "\n").replace("\\h", " ")
    return " ".join(line.strip() for line in cleaned.split("\n") if line.strip())


def _split_event_fields(data: str, columns: Optional[List[str]]) -> List[str]:
    if columns:
        return data.split(",", len(columns) - 1)
    parts = data.split(",", len(_STANDARD_FORMAT) - 1)
    if len(parts) >= len(_STANDARD_FORMAT):
        return parts
    # Non-standard layout without a Format line: the last field is the text.
    return data.split(",")


def parse_ass(payload: str) -> List[SubtitleCue]:
    """Parse the ``[Events]`` section of an ASS payload into dialogue cues."""

    cues: List[SubtitleCue] = []
    in_events = False
    columns: Optional[List[str]] = None

    for raw_line in normalize_line_endings(payload).lstrip("\ufeff").split("\n"):
        line = raw_line.strip()
        if line.lower() == "[events]":
            in_events = True
            continue
        if not in_events:
            continue
        if line.startswith("[") and line.endswith("]"):
            break
        if not line or line.startswith(";") or line.startswith("!"):
            continue

        key, separator, data = line.partition(":")
        if not separator:
            continue
        key = key.strip().lower()
        if key == "format":
            columns = [column.strip().lower() for column in data.split(",")]
            continue
        if key != "dialogue":
            # Comment: events and anything else are not spoken lines.
            continue

        fields = [field.strip() for field in _split_event_fields(data.strip(), columns)]
        layout = columns or list(_STANDARD_FORMAT)
        start_index = layout.index("start") if "start" in layout else 1
        end_index = layout.index("end") if "end" in layout else 2
        text_index = layout.index("text") if "text" in layout else len(fields) - 1
        if max(start_index, end_index, text_index) >= len(fields):
            text_index = len(fields) - 1
            if max(start_index, end_index) >= len(fields):
                logger.warning("Skipping ASS dialogue with missing fields: %r", line)
                continue

        try:
            start_ms = ass_timestamp_to_ms(fields[start_index])
            end_ms = ass_timestamp_to_ms(fields[end_index])
        except SubtitleTimestampError as exc:
            logger.warning(
                "Skipping dialogue with invalid timestamp: %s",
                exc,
                extra={"event": "subtitles.ass.invalid_timestamp"},
            )
            continue

        text = strip_ass_markup(fields[text_index])
        if not text:
            continue
        cues.append(SubtitleCue(text=text, start_ms=start_ms, end_ms=end_ms))

    if not cues:
        raise SubtitleParseError(
            "Failed to parse ASS file: no valid subtitle entries found. "
            "The file may be empty or have no dialogue events."
        )
    return cues


__all__ = ["ass_timestamp_to_ms", "parse_ass", "strip_ass_markup"]
