"""Unit tests for core.errors."""

import pytest

from simplemysql.core.errors import (
    ArgumentCountMismatch,
    ErrorKind,
    SQLBuildError,
    TypeMismatch,
    UnknownPlaceholderType,
)


@pytest.mark.parametrize(
    "exc,kind",
    [
        (UnknownPlaceholderType, ErrorKind.UNKNOWN_PLACEHOLDER_TYPE),
        (ArgumentCountMismatch, ErrorKind.ARGUMENT_COUNT_MISMATCH),
        (TypeMismatch, ErrorKind.TYPE_MISMATCH),
    ],
)
def test_kind(exc: type[SQLBuildError], kind: ErrorKind) -> None:
    assert exc.kind is kind
    assert exc("x").kind is kind


def test_build_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        raise TypeMismatch("bad")


def test_kind_values() -> None:
    assert ErrorKind("query_error") is ErrorKind.QUERY_ERROR
    assert ErrorKind.CONNECTION_ERROR == "connection_error"
