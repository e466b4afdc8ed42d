"""Typed containers for lesson file parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SubtitleFormat(str, Enum):
    SRT = "srt"
    ASS = "ass"
    TXT = "txt"


@dataclass(slots=True)
class SubtitleCue:
    """One timed subtitle entry before sentence-level processing."""

    text: str
    start_ms: int
    end_ms: int

    @property
    def duration_ms(self) -> int:
        return max(0, self.end_ms - self.start_ms)


@dataclass(slots=True)
class ProcessedSentence:
    """A sentence ready to be persisted, optionally carrying its timing."""

    text: str
    start_ms: Optional[int] = None
    end_ms: Optional[int] = None

    @property
    def is_timed(self) -> bool:
        return self.start_ms is not None and self.end_ms is not None


__all__ = ["ProcessedSentence", "SubtitleCue", "SubtitleFormat"]
