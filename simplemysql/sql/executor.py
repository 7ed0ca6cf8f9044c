"""
Execute a finished SQL string (one or more ``;``-separated statements).

Returns one result per statement: ``list[dict]`` for SELECT-like statements,
the affected row count otherwise.
"""

import re
from typing import Any

from simplemysql.core.pool import cursor_to_dicts, execute

_RESULT_KEYWORDS = ("SELECT", "WITH", "SHOW", "DESCRIBE", "DESC", "EXPLAIN")

# Unterminated quotes and comments run to the end of the input.
_STATEMENT_PART = re.compile(
    r"""
    '(?:[^'\\]|\\.|'')*'?
    | "(?:[^"\\]|\\.|"")*"?
    | `(?:[^`]|``)*`?
    | (?:--|\#)[^\n]*
    | /\*.*?(?:\*/|\Z)
    | ;
    | [^'"`;\-#/]+
    | .
    """,
    re.VERBOSE | re.DOTALL,
)


def _is_select_like(sql: str) -> bool:
    """True if the statement returns rows (SELECT, WITH, SHOW, ...); otherwise DML."""
    s = re.sub(r"^[\s;(]+", "", sql)
    if not s:
        return True
    return s.split()[0].upper() in _RESULT_KEYWORDS


def _split_statements(sql: str) -> list[str]:
    """Split on ``;`` outside quoted text and comments; empty statements are dropped."""
    stmts: list[str] = []
    current: list[str] = []
    for m in _STATEMENT_PART.finditer(sql):
        part = m.group()
        if part != ";":
            current.append(part)
            continue
        stmt = "".join(current).strip()
        if stmt:
            stmts.append(stmt)
        current = []
    tail = "".join(current).strip()
    if tail:
        stmts.append(tail)
    return stmts


def execute_statement(conn: Any, sql: str) -> Any:
    """Run one statement; rows for SELECT-like statements, rowcount otherwise."""
    cur = execute(conn, sql)
    try:
        if _is_select_like(sql):
            return cursor_to_dicts(cur)
        return cur.rowcount if cur.rowcount is not None else 0
    finally:
        cur.close()


def execute_sql(conn: Any, sql: str) -> list[Any]:
    """
    Run SQL on ``conn``. No parameter binding; SQL is final.

    Always returns a list of per-statement results (one element per statement).
    """
    return [execute_statement(conn, stmt) for stmt in _split_statements(sql)]
