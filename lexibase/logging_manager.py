"""Structured JSON logging shared by every lexibase component.

Records are rendered as one JSON object per line.  Values bound with
:func:`log_context` are copied onto every record emitted inside the block by
the same thread.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

ROOT_LOGGER_NAME = "lexibase"
DEFAULT_LOG_LEVEL = logging.INFO
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_logger: Optional[logging.Logger] = None
_log_context: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "lexibase_log_context", default={}
)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_STANDARD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JSONLogFormatter(logging.Formatter):
    """Render log records as structured JSON strings."""

    TOP_LEVEL_FIELDS: tuple[str, ...] = (
        "event",
        "job",
        "lesson_id",
        "word_id",
        "status",
        "duration_ms",
    )

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
        }
        extra: Dict[str, object] = {}
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRIBUTES or value is None:
                continue
            if key in self.TOP_LEVEL_FIELDS:
                payload[key] = value
            else:
                extra[key] = value
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class LogContextFilter(logging.Filter):
    """Copy the bound context values onto each record without overriding ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    *,
    log_file: Union[str, Path, None] = None,
) -> logging.Logger:
    """Configure the ``lexibase`` logger.

    Records always go to stderr; ``log_file`` adds a rotating file handler.
    Calling this again only adjusts the level and adds a file handler that is
    not attached yet.
    """

    global _logger

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _logger is None:
        logger.propagate = False
        logger.addFilter(LogContextFilter())
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(JSONLogFormatter())
        logger.addHandler(stream_handler)
        _logger = logger

    if log_file is not None:
        path = Path(log_file).expanduser().resolve()
        attached = any(
            isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == path
            for handler in logger.handlers
        )
        if not attached:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
            )
            file_handler.setFormatter(JSONLogFormatter())
            logger.addHandler(file_handler)

    configure_logging_level(log_level=log_level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the configured logger, or a named child of it."""

    logger = _logger or setup_logging()
    if not name:
        return logger
    child = logger.getChild(name)
    if not any(isinstance(item, LogContextFilter) for item in child.filters):
        child.addFilter(LogContextFilter())
    return child


def configure_logging_level(debug_enabled: bool = False, log_level: Optional[int] = None) -> int:
    """Adjust the logger level from a debug flag or an explicit level."""

    if log_level is None:
        log_level = logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    for handler in logger.handlers:
        handler.setLevel(log_level)
    return log_level


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Bind ``values`` to every record logged inside the block."""

    current = dict(_log_context.get())
    current.update({key: value for key, value in values.items() if value is not None})
    token = _log_context.set(current)
    try:
        yield
    finally:
        _log_context.reset(token)


def get_log_context() -> Dict[str, object]:
    return dict(_log_context.get())


__all__ = [
    "JSONLogFormatter",
    "LogContextFilter",
    "configure_logging_level",
    "get_log_context",
    "get_logger",
    "log_context",
    "setup_logging",
]
