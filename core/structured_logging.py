"""Structured logging helpers with run and source-file correlation context."""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

_RUN_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "run_id", default="-"
)
_SOURCE_FILE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "source_file", default="-"
)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | file=%(source_file)s | "
    "%(name)s | %(message)s"
)


class _ExtractionContextFilter(logging.Filter):
    """Inject run id and the file being extracted into all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID_VAR.get("-")
        record.source_file = _SOURCE_FILE_VAR.get("-")
        return True


def _ensure_filter_on_root_handlers() -> None:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if not any(isinstance(f, _ExtractionContextFilter) for f in handler.filters):
            handler.addFilter(_ExtractionContextFilter())


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure root logging format with run/file context."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root_logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)
    _ensure_filter_on_root_handlers()


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate the run correlation ID."""
    value = run_id or uuid.uuid4().hex[:12]
    _RUN_ID_VAR.set(value)
    return value


def get_run_id() -> str:
    """Get the current run correlation ID."""
    return _RUN_ID_VAR.get("-")


def get_source_file() -> str:
    """Get the file currently being extracted, ``-`` outside a file scope."""
    return _SOURCE_FILE_VAR.get("-")


@contextmanager
def source_file_scope(file_name: str) -> Iterator[None]:
    """Tag every log emitted inside the block with ``file_name``."""
    token = _SOURCE_FILE_VAR.set(file_name)
    try:
        yield
    finally:
        _SOURCE_FILE_VAR.reset(token)
