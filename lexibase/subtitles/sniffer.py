"""Lesson file format detection."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Optional

from .common import (
    ASS_EXTENSIONS,
    ASS_SECTION_SNIFF_PATTERN,
    SRT_CUE_SNIFF_PATTERN,
    SRT_EXTENSION,
    normalize_line_endings,
)
from .models import SubtitleFormat


def detect_format(content: str, file_name: Optional[str] = None) -> SubtitleFormat:
    """Choose a parser from the content first, then the file extension.

    Anything unrecognised is treated as plain text.
    """

    sample = normalize_line_endings(content or "").lstrip("\ufeff")
    if ASS_SECTION_SNIFF_PATTERN.search(sample):
        return SubtitleFormat.ASS
    if SRT_CUE_SNIFF_PATTERN.search(sample):
        return SubtitleFormat.SRT

    if file_name:
        suffix = PurePosixPath(file_name.strip()).suffix.lower()
        if suffix == SRT_EXTENSION:
            return SubtitleFormat.SRT
        if suffix in ASS_EXTENSIONS:
            return SubtitleFormat.ASS

    return SubtitleFormat.TXT


__all__ = ["detect_format"]
