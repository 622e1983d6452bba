"""Centralized logging helpers.

Configures the root logger once from the environment and offers small
helpers for structured DEBUG events so call sites stay terse.
"""
from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any, Dict, Optional

from constants import Constants, EnvVars

_CONFIGURED = False


def configure_logging(log_file: Optional[str] = None) -> None:
    """Configure the root logger from BUILDSMITH_LOG_LEVEL.

    Safe to call more than once; handlers are only installed on the first call
    unless a log file is supplied later.
    """
    global _CONFIGURED  # pylint: disable=global-statement
    level_name = os.environ.get(EnvVars.LOG_LEVEL, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    if not _CONFIGURED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
        _CONFIGURED = True

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(file_handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log record.

    None values are dropped so records only carry meaningful fields.
    """
    return {k: v for k, v in fields.items() if v is not None}


def new_operation_id() -> str:
    """Return a short identifier correlating the log lines of one invocation."""
    return uuid.uuid4().hex[:12]


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
