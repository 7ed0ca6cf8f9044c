"""
simplemysql - safe MySQL query building.

Placeholders:
    ?s  string          ?i  integer         ?f / ?2f  float (N decimals)
    ?n  identifier      ?a  set: ('a', 'b') ?u  `field` = 'value', ...
    ?p  query part inserted without modification
"""

__version__ = "1.4.0"

from .client import SimpleMySQL
from .core.errors import ArgumentCountMismatch, ErrorKind, SQLBuildError, TypeMismatch, UnknownPlaceholderType
from .sql import (
    Condition,
    OrderBy,
    Select,
    SQLTemplateEngine,
    StatementBuilder,
    Value,
    ValueFormatter,
    ValueType,
    tokenize,
)

__all__ = [
    "__version__",
    "SimpleMySQL",
    "SQLTemplateEngine",
    "StatementBuilder",
    "ValueFormatter",
    "ValueType",
    "Value",
    "Condition",
    "OrderBy",
    "Select",
    "tokenize",
    "ErrorKind",
    "SQLBuildError",
    "UnknownPlaceholderType",
    "ArgumentCountMismatch",
    "TypeMismatch",
]
