"""
Structured JSON event logging for the orchestration stack.

Each line carries the per-query trace id and, when a span is recording,
the OpenTelemetry trace/span ids so logs and traces can be joined.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union
from uuid import uuid4

from .otel import current_span_ids


LOGGER_NAME = "agri_intel"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

_TRACE_ID_CTX: ContextVar[str] = ContextVar("trace_id", default="unknown")
_LOGGER = logging.getLogger(LOGGER_NAME)
_INITIALIZED = False


def init_logging(
    *, log_path: Optional[str] = None, level: Union[int, str] = logging.INFO
) -> None:
    """Attach one handler (rotating file or stderr) to the package logger."""
    global _INITIALIZED
    if _INITIALIZED:
        return
    if log_path:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    _LOGGER.addHandler(handler)
    _LOGGER.setLevel(level)
    _INITIALIZED = True


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    """Bind a trace id (generated when omitted) for the enclosed block."""
    value = trace_id or uuid4().hex[:12]
    token = _TRACE_ID_CTX.set(value)
    try:
        yield value
    finally:
        _TRACE_ID_CTX.reset(token)


def get_trace_id() -> str:
    return _TRACE_ID_CTX.get() or "unknown"


def summarize_text(text: str, limit: int = 400) -> str:
    if not text:
        return ""
    text = str(text)
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def _build_payload(event: str, fields: Dict[str, Any]) -> str:
    payload = {
        "event": event,
        "trace_id": get_trace_id(),
        **current_span_ids(),
        **fields,
    }
    return json.dumps(payload, ensure_ascii=True, default=str)


def log_event(event: str, **fields: Any) -> None:
    if _LOGGER.isEnabledFor(logging.INFO):
        _LOGGER.info(_build_payload(event, fields))


def log_error(
    event: str, *, exc: Optional[BaseException] = None, **fields: Any
) -> None:
    """Warning-level event for a handled failure; `exc` adds its type and text."""
    if exc is not None:
        fields = {"error_type": type(exc).__name__, "error": str(exc), **fields}
    _LOGGER.warning(_build_payload(event, fields))
