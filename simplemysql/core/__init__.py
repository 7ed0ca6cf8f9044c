"""
Core: settings, error model, error reporter and connection helpers.
"""

from .config import Settings, settings
from .errors import (
    ArgumentCountMismatch,
    ErrorKind,
    SQLBuildError,
    TypeMismatch,
    UnknownPlaceholderType,
)
from .reporter import ErrorReporter, LoggingErrorReporter, get_default_reporter, make_reporter

__all__ = [
    "Settings",
    "settings",
    "ErrorKind",
    "SQLBuildError",
    "UnknownPlaceholderType",
    "ArgumentCountMismatch",
    "TypeMismatch",
    "ErrorReporter",
    "LoggingErrorReporter",
    "make_reporter",
    "get_default_reporter",
]
