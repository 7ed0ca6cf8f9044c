"""
Liveness check for an open connection.
"""

from contextlib import closing
from typing import Any

from .connect import execute


def health_check(conn: Any) -> bool:
    """True when ``conn`` answers ``SELECT 1``; any driver or socket failure means False."""
    try:
        with closing(execute(conn, "SELECT 1")) as cur:
            return cur.fetchone() is not None
    except Exception:
        return False
