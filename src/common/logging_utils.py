"""Centralized logging helpers.

All modules log through ``logging.getLogger(__name__)``; this module owns the
root configuration plus small helpers for structured ``extra=`` context,
URL redaction and timing.
"""
from __future__ import annotations

import logging
import os
import sys
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants

_CONTEXT_KEYS = ("event", "component", "action", "outcome", "target")


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    value = getattr(logging, name, None)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once for CLI use.

    Args:
        level: Level name; falls back to $VSIXFETCH_LOG_LEVEL, then INFO.
        log_file: Optional path for an additional file handler.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(_resolve_level(level))


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping, dropping unset fields.

    Standard keys (event, component, action, outcome, target) always exist
    on the record so formatters can reference them safely.
    """
    context: Dict[str, Any] = {key: None for key in _CONTEXT_KEYS}
    context.update({k: v for k, v in fields.items() if v is not None})
    return context


def safe_url(url: str) -> str:
    """Strip credentials, query string and fragment from a URL for logging."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urllib.parse.urlunsplit((parts.scheme, host, parts.path, "", ""))


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

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
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
