"""
SQL building: placeholder templates (``?s``, ``?i``, ``?2f`` ...) and
declarative INSERT/UPDATE/DELETE/SELECT assemblers.

Exports: SQLTemplateEngine, StatementBuilder, ValueFormatter, tokenize, execute_sql.
"""

from simplemysql.sql.builder import Condition, Join, OrderBy, Select, StatementBuilder, Value
from simplemysql.sql.escaper import Escaper, PyMySQLEscaper
from simplemysql.sql.executor import execute_sql
from simplemysql.sql.filters import SqlSafe, ValueFormatter, ValueType
from simplemysql.sql.parser import Literal, Placeholder, PlaceholderKind, count_placeholders, tokenize
from simplemysql.sql.safety import check_sql_template_safety
from simplemysql.sql.template_engine import SQLTemplateEngine

__all__ = [
    "SQLTemplateEngine",
    "StatementBuilder",
    "Value",
    "Condition",
    "OrderBy",
    "Join",
    "Select",
    "ValueFormatter",
    "ValueType",
    "SqlSafe",
    "Escaper",
    "PyMySQLEscaper",
    "tokenize",
    "count_placeholders",
    "Literal",
    "Placeholder",
    "PlaceholderKind",
    "check_sql_template_safety",
    "execute_sql",
]
