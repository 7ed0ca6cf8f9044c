"""
Open MySQL connections and run single statements through pymysql.
"""

from typing import Any

import pymysql

from simplemysql.core.config import Settings, settings as default_settings


def connect(
    *,
    host: str | None = None,
    port: int | None = None,
    user: str | None = None,
    password: str | None = None,
    database: str | None = None,
    charset: str | None = None,
    cfg: Settings | None = None,
    **extra: Any,
) -> Any:
    """
    Open a pymysql connection. Missing arguments fall back to settings
    (MYSQL_HOST, MYSQL_PORT, ...). ``extra`` is passed through to pymysql.connect.
    """
    cfg = cfg or default_settings
    return pymysql.connect(
        host=host or cfg.MYSQL_HOST,
        port=int(port or cfg.MYSQL_PORT),
        user=user if user is not None else cfg.MYSQL_USER,
        password=password if password is not None else cfg.MYSQL_PASSWORD,
        database=database if database is not None else cfg.MYSQL_DATABASE,
        charset=charset or cfg.MYSQL_CHARSET,
        connect_timeout=cfg.MYSQL_CONNECT_TIMEOUT,
        **extra,
    )


def execute(conn: Any, sql: str) -> Any:
    """
    Execute a finished SQL string and return the cursor. No parameter binding:
    the string is already escaped. Caller uses cursor_to_dicts(cursor) or cursor.rowcount.
    """
    cur = conn.cursor()
    try:
        cur.execute(sql)
    except Exception:
        cur.close()
        raise
    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
