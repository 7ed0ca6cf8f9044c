"""
MySQL connection helpers (pymysql).

The builders never touch a connection; these helpers back the optional
``SimpleMySQL`` client and the driver-aware escaper.
"""

from .connect import connect, cursor_to_dicts, execute
from .health import health_check

__all__ = [
    "connect",
    "execute",
    "cursor_to_dicts",
    "health_check",
]
