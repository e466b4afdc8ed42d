"""Cue list post-processing."""

from __future__ import annotations

from typing import List, Sequence

from .models import SubtitleCue


def sort_and_deduplicate_cues(cues: Sequence[SubtitleCue]) -> List[SubtitleCue]:
    """Sort cues by start time and merge adjacent cues with identical text.

    A merged cue keeps the earliest start and the latest end of its run.
    """

    ordered = sorted(cues, key=lambda cue: cue.start_ms)
    merged: List[SubtitleCue] = []
    for cue in ordered:
        previous = merged[-1] if merged else None
        if previous is not None and previous.text == cue.text:
            previous.start_ms = min(previous.start_ms, cue.start_ms)
            previous.end_ms = max(previous.end_ms, cue.end_ms)
            continue
        merged.append(SubtitleCue(text=cue.text, start_ms=cue.start_ms, end_ms=cue.end_ms))
    return merged


__all__ = ["sort_and_deduplicate_cues"]
