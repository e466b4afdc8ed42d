"""Subtitle and plain-text lesson parsing."""

from .errors import SubtitleParseError, SubtitleTimestampError, UnsupportedFormatError
from .models import ProcessedSentence, SubtitleCue, SubtitleFormat
from .processing import parse_lesson_content
from .sniffer import detect_format

__all__ = [
    "ProcessedSentence",
    "SubtitleCue",
    "SubtitleFormat",
    "SubtitleParseError",
    "SubtitleTimestampError",
    "UnsupportedFormatError",
    "detect_format",
    "parse_lesson_content",
]
