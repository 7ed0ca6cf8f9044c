"""
Escaper: thin adapter over pymysql's string-escaping primitives.

With a live connection the connection's own routine is used, so the server's
``NO_BACKSLASH_ESCAPES`` mode is honoured. Without one, pymysql's default
backslash escaping applies.
"""

from typing import Any, Protocol

from pymysql import converters


class Escaper(Protocol):
    def escape_string(self, raw: str) -> str: ...

    def quote_identifier(self, raw: str) -> str: ...

    def escape_bytes(self, raw: bytes) -> str: ...


class PyMySQLEscaper:
    """Escape values with pymysql (connection-aware when a connection is given)."""

    def __init__(self, conn: Any = None) -> None:
        self.conn = conn

    def escape_string(self, raw: str) -> str:
        """Escape for inclusion inside a single-quoted literal (quotes not added)."""
        if self.conn is not None:
            return self.conn.escape_string(raw)
        return converters.escape_string(raw)

    def quote_identifier(self, raw: str) -> str:
        """Escape for inclusion inside backticks (backticks not added)."""
        return self.escape_string(raw).replace("`", "``")

    def escape_bytes(self, raw: bytes) -> str:
        """Escape and quote a binary value."""
        if self.conn is not None:
            return self.conn.escape(bytes(raw))
        return converters.escape_bytes(bytes(raw))


_default_escaper = PyMySQLEscaper()


def get_default_escaper() -> PyMySQLEscaper:
    """Connection-less escaper shared by builders created without one."""
    return _default_escaper
