"""
SimpleMySQL: builders plus an optional pymysql connection.

The builders (``parse``, ``prepare_*``) work without a connection. When one is
open, string escaping goes through it so the server's SQL mode is honoured.
The ``query*`` helpers render a template and hand the finished string to the
driver; driver errors are reported and re-raised unchanged.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Mapping
from typing import Any

import pymysql

from simplemysql.core.config import Settings, settings as default_settings
from simplemysql.core.errors import ErrorKind
from simplemysql.core.pool import connect, health_check
from simplemysql.core.reporter import ErrorReporter, get_default_reporter, make_reporter
from simplemysql.sql.builder import Select, StatementBuilder
from simplemysql.sql.escaper import PyMySQLEscaper
from simplemysql.sql.executor import execute_sql, execute_statement
from simplemysql.sql.filters import ValueFormatter
from simplemysql.sql.template_engine import SQLTemplateEngine

_log = logging.getLogger(__name__)

_LIMIT = re.compile(r"\bLIMIT\b", re.IGNORECASE)


class SimpleMySQL:
    """
    Safe MySQL query building and execution.

        db = SimpleMySQL()
        db.connect(user="app", password="secret", database="shop")
        rows = db.query("SELECT * FROM ?n WHERE id IN ?a AND price > ?2f", "goods", [1, 2], 9.5)

    Pass ``conn`` to borrow an existing pymysql connection; it is never closed
    by this object.
    """

    def __init__(
        self,
        conn: Any = None,
        *,
        strict_types: bool | None = None,
        reporter: ErrorReporter | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self.cfg = cfg or default_settings
        if reporter is None:
            reporter = get_default_reporter() if cfg is None else make_reporter(cfg)
        self.reporter = reporter
        strict = self.cfg.STRICT_TYPES if strict_types is None else strict_types
        self.formatter = ValueFormatter(PyMySQLEscaper(conn), self.reporter, strict_types=strict)
        self.engine = SQLTemplateEngine(self.formatter, cache_size=self.cfg.TEMPLATE_CACHE_SIZE)
        self.builder = StatementBuilder(self.formatter)
        self._conn = conn
        self._owns_conn = False
        self._time = 0.0
        self._last_error: tuple[int, str] = (0, "")

    # -- connection ------------------------------------------------------

    @property
    def conn(self) -> Any:
        return self._conn

    @property
    def connected(self) -> bool:
        return self._conn is not None

    def connect(self, **params: Any) -> None:
        """
        Open a connection. ``params`` (host, port, user, password, database,
        charset, ...) override the MYSQL_* settings. No-op when already connected.
        """
        if self._conn is not None:
            return
        try:
            conn = connect(cfg=self.cfg, **params)
        except pymysql.err.MySQLError as e:
            self._last_error = _error_tuple(e)
            self.reporter.report(
                ErrorKind.CONNECTION_ERROR,
                f"Can't connect to MySQL server. Error #{self._last_error[0]}: {self._last_error[1]}",
            )
            raise
        self._attach(conn, owned=True)

    def disconnect(self) -> None:
        """Close the connection if this object opened it; forget it either way."""
        conn, owned = self._conn, self._owns_conn
        self._attach(None, owned=False)
        if conn is not None and owned:
            try:
                conn.close()
            except pymysql.err.Error:
                _log.debug("Error while closing MySQL connection", exc_info=True)

    def reconnect(self, **params: Any) -> None:
        self.disconnect()
        self.connect(**params)

    def ping(self) -> bool:
        """True when the connection answers ``SELECT 1``."""
        return self._conn is not None and health_check(self._conn)

    def _attach(self, conn: Any, *, owned: bool) -> None:
        self._conn = conn
        self._owns_conn = owned
        self.formatter.escaper = PyMySQLEscaper(conn)

    def __enter__(self) -> SimpleMySQL:
        self.connect()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.disconnect()

    # -- configuration ---------------------------------------------------

    @property
    def strict_types(self) -> bool:
        return self.formatter.strict_types

    def set_strict_types(self, value: bool) -> None:
        """Raise on type/argument mismatches instead of coercing."""
        self.formatter.strict_types = bool(value)

    # -- builders --------------------------------------------------------

    def parse(self, template: str, *args: Any) -> str:
        """Render a ``?x`` template with positional arguments."""
        return self.engine.render(template, *args)

    def prepare_insert(self, table: str, values: Any) -> str:
        return self.builder.insert(table, values)

    def prepare_update(self, table: str, values: Any, conditions: Any = None) -> str:
        return self.builder.update(table, values, conditions)

    def prepare_delete(self, table: str, conditions: Any = None) -> str:
        return self.builder.delete(table, conditions)

    def prepare_select(self, description: Select | Mapping[str, Any]) -> str:
        return self.builder.select(description)

    # -- execution -------------------------------------------------------

    def _run(self, sql: str, fn: Callable[[Any, str], Any]) -> Any:
        if self._conn is None:
            raise RuntimeError("Not connected: call connect() first")
        _log.debug("Executing SQL: %s", sql)
        t1 = time.monotonic()
        try:
            return fn(self._conn, sql)
        except pymysql.err.MySQLError as e:
            self._last_error = _error_tuple(e)
            self.reporter.report(
                ErrorKind.QUERY_ERROR,
                f"SQL error #{self._last_error[0]}. Error text: {self._last_error[1]}",
                sql,
            )
            raise
        finally:
            self._time = time.monotonic() - t1

    def query(self, template: str, *args: Any) -> Any:
        """
        Render and run one statement. Returns ``list[dict]`` for SELECT-like
        statements, the affected row count otherwise.
        """
        self._last_error = (0, "")
        return self._run(self.parse(template, *args), execute_statement)

    def query_multi(self, template: str, *args: Any) -> list[Any]:
        """Render and run ``;``-separated statements; one result per statement."""
        self._last_error = (0, "")
        return self._run(self.parse(template, *args), execute_sql)

    def query_first(self, template: str, *args: Any) -> dict[str, Any] | None:
        """First row of the result (``LIMIT 1`` is appended when the template has no LIMIT)."""
        rows = self.query(_limit_one(template), *args)
        return rows[0] if rows else None

    def query_first_cell(self, template: str, *args: Any) -> Any:
        """First column of the first row, or None."""
        row = self.query_first(template, *args)
        if not row:
            return None
        return next(iter(row.values()))

    def query_column(self, template: str, column: int | str, *args: Any) -> list[Any]:
        """
        One column of every row, by position or name. An index outside the
        result's columns yields a list of None.
        """
        rows = self.query(template, *args)
        if isinstance(column, str):
            return [row.get(column) for row in rows]
        out = []
        for row in rows:
            values = list(row.values())
            out.append(values[column] if 0 <= column < len(values) else None)
        return out

    # -- introspection ---------------------------------------------------

    @property
    def last_insert_id(self) -> int:
        return self._conn.insert_id() if self._conn is not None else 0

    @property
    def affected_rows(self) -> int:
        return self._conn.affected_rows() if self._conn is not None else 0

    @property
    def query_time(self) -> float:
        """Duration of the last executed query, in seconds."""
        return self._time

    @property
    def err_code(self) -> int:
        return self._last_error[0]

    @property
    def err_string(self) -> str:
        return self._last_error[1]


def _error_tuple(e: pymysql.err.MySQLError) -> tuple[int, str]:
    if len(e.args) >= 2 and isinstance(e.args[0], int):
        return e.args[0], str(e.args[1])
    return 0, str(e)


def _limit_one(template: str) -> str:
    if _LIMIT.search(template):
        return template
    return template.rstrip().rstrip(";") + " LIMIT 1"
