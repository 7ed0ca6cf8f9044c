"""Unit tests for core.reporter (LoggingErrorReporter)."""

import logging
import re

import pytest

from simplemysql.core.config import Settings
from simplemysql.core.errors import ErrorKind
from simplemysql.core.reporter import LoggingErrorReporter, get_default_reporter, make_reporter


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("simplemysql.tests.reporter")


class TestLoggingErrorReporter:
    def test_warning_for_build_errors(self, logger, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=logger.name)
        LoggingErrorReporter(logger_instance=logger).report(ErrorKind.TYPE_MISMATCH, "Expected integer")

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.getMessage() == "type_mismatch: Expected integer"
        assert record.sql_error_kind == "type_mismatch"

    def test_error_level_and_query_line(self, logger, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=logger.name)
        LoggingErrorReporter(logger_instance=logger).report(
            ErrorKind.QUERY_ERROR, "SQL error #1064. Error text: syntax", "SELEC 1"
        )

        record = caplog.records[0]
        assert record.levelno == logging.ERROR
        assert record.getMessage().splitlines() == [
            "query_error: SQL error #1064. Error text: syntax",
            "    Query: SELEC 1",
        ]

    def test_backtrace_names_caller(self, logger, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=logger.name)
        marker = "local-marker-value"
        LoggingErrorReporter(logger_instance=logger, log_backtrace=True, stack_vars=True).report(
            ErrorKind.ARGUMENT_COUNT_MISMATCH, "No argument"
        )

        message = caplog.records[0].getMessage()
        assert "    Backtrace:" in message
        assert "test_backtrace_names_caller" in message
        assert f"marker = {marker!r}" in message
        assert "in _backtrace\n" not in message
        assert "in report\n" not in message

    def test_backtrace_without_locals(self, logger, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=logger.name)
        marker = "local-marker-value"
        LoggingErrorReporter(logger_instance=logger, log_backtrace=True).report(ErrorKind.TYPE_MISMATCH, marker)

        message = caplog.records[0].getMessage()
        assert "test_backtrace_without_locals" in message
        assert "marker = " not in message

    def test_log_file(self, logger, tmp_path) -> None:
        path = tmp_path / "sql-errors.log"
        reporter = LoggingErrorReporter(logger_instance=logger, log_file=str(path))
        try:
            reporter.report(ErrorKind.CONNECTION_ERROR, "Can't connect to MySQL server. Error #2003: refused")
        finally:
            reporter.close()

        text = path.read_text(encoding="utf-8")
        assert re.match(r"^\[\d{2}\.\d{2}\.\d{4} \d{2}:\d{2}:\d{2}\]: connection_error: Can't connect", text)
        assert reporter._handler is None
        assert not logger.handlers


class TestMakeReporter:
    def test_file_only_when_enabled(self, tmp_path) -> None:
        path = tmp_path / "errors.log"
        reporter = make_reporter(Settings(_env_file=None, LOG_FILE=str(path)))
        assert reporter._handler is None
        assert reporter.log_backtrace is False

    def test_enabled(self, tmp_path) -> None:
        path = tmp_path / "errors.log"
        reporter = make_reporter(
            Settings(_env_file=None, LOG_ERRORS=True, LOG_FILE=str(path), LOG_STACK_VARS=False)
        )
        try:
            assert reporter._handler is not None
            assert reporter.log_backtrace is True
            assert reporter.stack_vars is False
        finally:
            reporter.close()


def test_default_reporter_is_shared() -> None:
    assert get_default_reporter() is get_default_reporter()
