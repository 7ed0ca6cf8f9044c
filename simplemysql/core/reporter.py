"""
Error reporter: receives (kind, message, sql) for every problem the builders
detect and every driver error the client sees.

The default implementation writes to the ``simplemysql`` logger. When
``log_file`` is given a ``FileHandler`` is attached, and each record can carry
the caller's backtrace (optionally with frame locals).
"""

from __future__ import annotations

import inspect
import logging
import threading
import traceback
from typing import Protocol

from .config import Settings, settings as default_settings
from .errors import ErrorKind

_LOGGER_NAME = "simplemysql"
_LOG_FORMAT = "[%(asctime)s]: %(message)s"
_LOG_DATEFMT = "%d.%m.%Y %H:%M:%S"


class ErrorReporter(Protocol):
    def report(self, kind: ErrorKind, message: str, sql: str | None = None) -> None: ...


class LoggingErrorReporter:
    """Report errors through stdlib logging."""

    def __init__(
        self,
        *,
        logger_instance: logging.Logger | None = None,
        log_file: str | None = None,
        log_backtrace: bool = False,
        stack_vars: bool = False,
        backtrace_limit: int | None = 20,
    ) -> None:
        self.logger = logger_instance or logging.getLogger(_LOGGER_NAME)
        self.log_backtrace = log_backtrace
        self.stack_vars = stack_vars
        self.backtrace_limit = backtrace_limit
        self._handler: logging.Handler | None = None
        if log_file:
            self._handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            self._handler.setFormatter(logging.Formatter(_LOG_FORMAT, _LOG_DATEFMT))
            self.logger.addHandler(self._handler)

    def report(self, kind: ErrorKind, message: str, sql: str | None = None) -> None:
        lines = [f"{ErrorKind(kind).value}: {message}"]
        if sql is not None:
            lines.append(f"    Query: {sql}")
        if self.log_backtrace:
            lines.append("    Backtrace:")
            lines.append(self._backtrace())
        level = logging.ERROR if kind == ErrorKind.QUERY_ERROR else logging.WARNING
        self.logger.log(level, "\n".join(lines), extra={"sql_error_kind": ErrorKind(kind).value})

    def _backtrace(self) -> str:
        frame = inspect.currentframe()
        # Skip _backtrace() and report().
        caller = frame.f_back.f_back if frame is not None and frame.f_back is not None else None
        try:
            summary = traceback.StackSummary.extract(
                traceback.walk_stack(caller),
                limit=self.backtrace_limit,
                capture_locals=self.stack_vars,
            )
        finally:
            del frame, caller
        summary.reverse()
        return "".join("        " + line for line in summary.format()).rstrip("\n")

    def close(self) -> None:
        """Detach and close the file handler, if any."""
        if self._handler is not None:
            self.logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None


def make_reporter(cfg: Settings | None = None) -> LoggingErrorReporter:
    """Build the default reporter from settings (file logging only when LOG_ERRORS is on)."""
    cfg = cfg or default_settings
    log_file = cfg.LOG_FILE if cfg.LOG_ERRORS else None
    return LoggingErrorReporter(
        log_file=log_file,
        log_backtrace=cfg.LOG_ERRORS and cfg.LOG_BACKTRACE,
        stack_vars=cfg.LOG_STACK_VARS,
    )


_default_reporter: LoggingErrorReporter | None = None
_default_lock = threading.Lock()


def get_default_reporter() -> LoggingErrorReporter:
    """Return the shared reporter built from settings (created on first use)."""
    global _default_reporter
    if _default_reporter is None:
        with _default_lock:
            if _default_reporter is None:
                _default_reporter = make_reporter()
    return _default_reporter
