"""
Error kinds raised or reported while building SQL.

Driver failures (connection, query) are not wrapped: they are reported with
``ErrorKind.CONNECTION_ERROR`` / ``ErrorKind.QUERY_ERROR`` and re-raised as the
driver's own ``pymysql.err`` exceptions.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds passed to the error reporter."""

    UNKNOWN_PLACEHOLDER_TYPE = "unknown_placeholder_type"
    ARGUMENT_COUNT_MISMATCH = "argument_count_mismatch"
    TYPE_MISMATCH = "type_mismatch"
    CONNECTION_ERROR = "connection_error"
    QUERY_ERROR = "query_error"


class SQLBuildError(ValueError):
    """Base class for errors detected while formatting or assembling SQL."""

    kind: ErrorKind = ErrorKind.TYPE_MISMATCH


class UnknownPlaceholderType(SQLBuildError):
    """Declared type tag is not one of the recognized tags."""

    kind = ErrorKind.UNKNOWN_PLACEHOLDER_TYPE


class ArgumentCountMismatch(SQLBuildError):
    """Template placeholders and supplied arguments do not line up."""

    kind = ErrorKind.ARGUMENT_COUNT_MISMATCH


class TypeMismatch(SQLBuildError):
    """Value shape is incompatible with its declared type (strict mode)."""

    kind = ErrorKind.TYPE_MISMATCH
