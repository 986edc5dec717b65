"""Centralized logging helpers.

Every module logs through ``logging.getLogger(__name__)``; this module owns the
root configuration and the small helpers used to attach structured context to
DEBUG traces.
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from constants import Constants

_CONTEXT_FIELDS = ("event", "component", "action", "outcome", "target")


class _ContextFormatter(logging.Formatter):
    """Formatter that appends structured context at DEBUG level."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = getattr(record, "context_fields", None)
        if record.levelno <= logging.DEBUG and context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{base} [{pairs}]"
        return base


def _resolve_level(level: Optional[str] = None) -> int:
    name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(stream: Optional[Any] = None, level: Optional[str] = None) -> None:
    """Install a single stream handler on the root logger.

    ``level`` wins over $TCENV_LOG_LEVEL. Safe to call more than once; the
    handler is replaced, not duplicated.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_tcenv_handler", False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_ContextFormatter(Constants.LOG_FORMAT))
    handler._tcenv_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted for this logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log call.

    None values are dropped so call sites can pass optional fields freely.
    """
    context = {k: v for k, v in fields.items() if v is not None}
    ordered = {k: context.pop(k) for k in _CONTEXT_FIELDS if k in context}
    ordered.update(context)
    return {"context_fields": ordered}


def safe_url(url: str) -> str:
    """Strip credentials and query string from a URL before logging it."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
