from typing import Any

import pytest

from simplemysql.core.errors import ErrorKind
from simplemysql.sql.filters import ValueFormatter


class RecordingReporter:
    """Error reporter that keeps (kind, message, sql) tuples."""

    def __init__(self) -> None:
        self.records: list[tuple[ErrorKind, str, Any]] = []

    def report(self, kind: ErrorKind, message: str, sql: str | None = None) -> None:
        self.records.append((kind, message, sql))

    @property
    def kinds(self) -> list[ErrorKind]:
        return [r[0] for r in self.records]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def formatter(reporter: RecordingReporter) -> ValueFormatter:
    return ValueFormatter(reporter=reporter, strict_types=False)


@pytest.fixture
def strict_formatter(reporter: RecordingReporter) -> ValueFormatter:
    return ValueFormatter(reporter=reporter, strict_types=True)
