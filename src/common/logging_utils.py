"""Centralized logging helpers.

Provides the root logger setup used by the CLI plus small utilities for
structured DEBUG traces: ``extra_context`` builds the ``extra=`` mapping,
``safe_url`` strips credentials and query strings before a URL is logged and
``Timer`` measures call durations.
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from constants import Constants

_HANDLER_NAME = "pomfinder-stderr"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger to write diagnostics to stderr.

    The level comes from ``level`` if given, else from the
    ``POMFINDER_LOG_LEVEL`` environment variable, else INFO. Calling this
    twice does not stack handlers.

    Args:
        level: Optional level name, e.g. "DEBUG".
        log_file: Optional path of an additional log file.
    """
    root = logging.getLogger()
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if not any(getattr(h, "name", None) == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        root.addHandler(file_handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True if DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records.

    None values are dropped so formatters only see populated fields.
    """
    return {key: value for key, value in fields.items() if value is not None}


def safe_url(url: str) -> str:
    """Return ``url`` without userinfo, query string or fragment."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    netloc = parts.hostname or ""
    try:
        port = parts.port
    except ValueError:
        port = None  # malformed port, dropped from the trace
    if port:
        netloc = f"{netloc}:{port}"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, up to now if the block is still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
