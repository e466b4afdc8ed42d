"""Errors raised while parsing lesson files."""


class SubtitleParseError(ValueError):
    """Raised when a lesson file cannot be turned into sentences."""


class SubtitleTimestampError(SubtitleParseError):
    """Raised for a single cue whose timing cannot be parsed."""


class UnsupportedFormatError(SubtitleParseError):
    """Raised when no parser exists for the requested format."""


__all__ = ["SubtitleParseError", "SubtitleTimestampError", "UnsupportedFormatError"]
