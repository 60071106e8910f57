"""Structured logging helpers with run, phase and project context."""

from __future__ import annotations

import contextvars
import logging
import sys
import uuid
from concurrent.futures import Executor, Future
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

T = TypeVar("T")

_RUN_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "run_id", default="-"
)
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "phase", default="-"
)
_PROJECT_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "project", default="-"
)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | phase=%(phase)s | "
    "project=%(project)s | %(name)s | %(message)s"
)


class _RunContextFilter(logging.Filter):
    """Inject run correlation fields into all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID_VAR.get("-")
        record.phase = _PHASE_VAR.get("-")
        record.project = _PROJECT_VAR.get("-")
        return True


def _ensure_filter_on_root_handlers() -> None:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        has_filter = any(isinstance(f, _RunContextFilter) for f in handler.filters)
        if not has_filter:
            handler.addFilter(_RunContextFilter())


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure root logging on stderr with run/phase/project context.

    Rendered tables go to stdout, so log lines never interleave with them.
    """
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    else:
        root_logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)
    _ensure_filter_on_root_handlers()


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate run correlation ID."""
    value = run_id or str(uuid.uuid4())
    _RUN_ID_VAR.set(value)
    return value


def get_run_id() -> str:
    """Get current run correlation ID."""
    return _RUN_ID_VAR.get("-")


def get_project() -> str:
    """Get the project currently being processed in this context."""
    return _PROJECT_VAR.get("-")


@contextmanager
def phase_scope(phase: str) -> Iterator[None]:
    """Temporarily set phase context for emitted logs."""
    token = _PHASE_VAR.set(phase)
    try:
        yield
    finally:
        _PHASE_VAR.reset(token)


@contextmanager
def project_scope(project_name: str) -> Iterator[None]:
    """Temporarily set project context for emitted logs."""
    token = _PROJECT_VAR.set(project_name)
    try:
        yield
    finally:
        _PROJECT_VAR.reset(token)


def submit_in_context(
    executor: Executor,
    fn: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> Future[T]:
    """Submit ``fn`` to ``executor`` running inside a copy of the caller's context.

    Pool threads do not inherit context variables, so without this the
    run_id/phase fields would read "-" in worker log lines.
    """
    ctx = contextvars.copy_context()
    return executor.submit(ctx.run, fn, *args, **kwargs)
