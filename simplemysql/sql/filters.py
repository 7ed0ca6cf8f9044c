"""
Value formatter: turns one argument plus a declared type into a safe SQL
fragment.

Every formatter returns ``SqlSafe`` so callers can tell an escaped fragment
from raw user input. Numbers are coerced, strings and binaries are escaped
through the ``Escaper`` and single-quoted, identifiers are escaped and
backtick-quoted.

Two coercion modes:

* lenient (default): bad input is normalised (``"12abc"`` -> ``12``,
  ``"x"`` -> ``0``, a list passed as a string is escaped as its ``str()``).
* strict: the same input raises ``TypeMismatch`` after being reported.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any

from simplemysql.core.config import settings
from simplemysql.core.errors import SQLBuildError, TypeMismatch, UnknownPlaceholderType
from simplemysql.core.reporter import ErrorReporter, get_default_reporter
from simplemysql.sql.escaper import Escaper, get_default_escaper

_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Key used when a bare scalar is passed where a field map is expected.
FIELD_MAP_SCALAR_KEY = 0


class SqlSafe(str):
    """String subclass marking a fragment as already escaped/formatted."""


def _safe(v: str) -> SqlSafe:
    return SqlSafe(v)


class ValueType(str, Enum):
    """Declared type tags accepted by the statement builders."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BINARY = "binary"

    @classmethod
    def from_tag(cls, tag: Any) -> ValueType:
        """Resolve a tag or one of its aliases; unknown tags raise UnknownPlaceholderType."""
        if isinstance(tag, cls):
            return tag
        key = tag.strip().lower() if isinstance(tag, str) else tag
        try:
            return _TYPE_ALIASES[key]
        except (KeyError, TypeError):
            raise UnknownPlaceholderType(f"{tag!r}: unexpected variable type") from None


_TYPE_ALIASES: dict[str, ValueType] = {
    "integer": ValueType.INTEGER,
    "int": ValueType.INTEGER,
    "float": ValueType.FLOAT,
    "double": ValueType.FLOAT,
    "decimal": ValueType.FLOAT,
    "string": ValueType.STRING,
    "str": ValueType.STRING,
    "binary": ValueType.BINARY,
    "bin": ValueType.BINARY,
}


def _is_collection(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple, set, frozenset))


def _lenient_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, Decimal):
        return int(value) if value.is_finite() else 0
    if isinstance(value, (str, bytes)):
        s = value.decode("ascii", "ignore") if isinstance(value, bytes) else value
        m = _INT_PREFIX.match(s)
        return int(m.group()) if m else 0
    return 0


def _lenient_number(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, (bool, int)):
        return Decimal(int(value))
    if isinstance(value, float):
        return Decimal(repr(value)) if math.isfinite(value) else Decimal(0)
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal(0)
    if isinstance(value, (str, bytes)):
        s = value.decode("ascii", "ignore") if isinstance(value, bytes) else value
        m = _FLOAT_PREFIX.match(s)
        return Decimal(m.group().strip()) if m else Decimal(0)
    return Decimal(0)


def _strict_int(value: Any) -> int:
    if value is None:
        raise TypeMismatch("Expected integer, got None")
    if isinstance(value, bool):
        raise TypeMismatch("Boolean not allowed for integer")
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if not math.isfinite(value) or value != int(value):
            raise TypeMismatch(f"Expected integer, got {type(value).__name__}: {value}")
        return int(value)
    if isinstance(value, str):
        s = value.strip()
        try:
            x = Decimal(s)
        except InvalidOperation:
            raise TypeMismatch(f"Invalid integer: {value!r}") from None
        if not x.is_finite() or x != x.to_integral_value():
            raise TypeMismatch(f"Expected integer, got: {value!r}")
        return int(x)
    raise TypeMismatch(f"Expected integer, got {type(value).__name__}")


def _strict_number(value: Any) -> Decimal:
    if value is None:
        raise TypeMismatch("Expected number, got None")
    if isinstance(value, bool):
        raise TypeMismatch("Boolean not allowed for float")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise TypeMismatch(f"Expected finite number, got {value}")
        return Decimal(repr(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise TypeMismatch(f"Expected finite number, got {value}")
        return value
    if isinstance(value, str):
        try:
            x = Decimal(value.strip())
        except InvalidOperation:
            raise TypeMismatch(f"Invalid number: {value!r}") from None
        if not x.is_finite():
            raise TypeMismatch(f"Expected finite number, got: {value!r}")
        return x
    raise TypeMismatch(f"Expected number, got {type(value).__name__}")


def number_format(value: Decimal, decimals: int = 0) -> str:
    """Fixed-point text with ``decimals`` digits, ``.`` separator, no grouping, half-up rounding."""
    decimals = max(int(decimals), 0)
    with localcontext() as ctx:
        # Enough digits for the integer part, the fraction and a carry.
        ctx.prec = max(value.adjusted(), 0) + decimals + 2
        ctx.Emax, ctx.Emin = MAX_EMAX, MIN_EMIN
        q = value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    if q.is_zero():
        q = abs(q)
    return f"{q:f}"


def promote_to_sequence(value: Any) -> list[Any]:
    """set-array input: mappings yield their values, a bare scalar becomes ``[value]``."""
    if isinstance(value, Mapping):
        return list(value.values())
    if isinstance(value, (str, bytes, bytearray)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def promote_to_mapping(value: Any) -> list[tuple[Any, Any]]:
    """field-map input: a sequence is keyed by position, a bare scalar by ``FIELD_MAP_SCALAR_KEY``."""
    if isinstance(value, Mapping):
        return list(value.items())
    if isinstance(value, (list, tuple)):
        return list(enumerate(value))
    return [(FIELD_MAP_SCALAR_KEY, value)]


class ValueFormatter:
    """Formats values, identifiers, sets and field maps for one escaper/reporter pair."""

    def __init__(
        self,
        escaper: Escaper | None = None,
        reporter: ErrorReporter | None = None,
        *,
        strict_types: bool | None = None,
    ) -> None:
        self.escaper = escaper or get_default_escaper()
        self.reporter = reporter or get_default_reporter()
        self.strict_types = settings.STRICT_TYPES if strict_types is None else strict_types

    def fail(self, error: SQLBuildError, default: str = "", sql: str | None = None) -> SqlSafe:
        """Report ``error``; raise it in strict mode, otherwise return ``default``."""
        self.reporter.report(error.kind, str(error), sql)
        if self.strict_types:
            raise error
        return _safe(default)

    def format_value(self, value: Any, type_tag: Any, decimals: int = 0) -> SqlSafe:
        """Format ``value`` according to a declared type tag."""
        try:
            vtype = ValueType.from_tag(type_tag)
        except UnknownPlaceholderType as e:
            return self.fail(e)
        if vtype is ValueType.INTEGER:
            return self.format_int(value)
        if vtype is ValueType.FLOAT:
            return self.format_float(value, decimals)
        if vtype is ValueType.STRING:
            return self.format_string(value)
        return self.format_binary(value)

    def format_int(self, value: Any) -> SqlSafe:
        if not self.strict_types:
            return _safe(str(_lenient_int(value)))
        try:
            return _safe(str(_strict_int(value)))
        except TypeMismatch as e:
            return self.fail(e, "0")

    def format_float(self, value: Any, decimals: int = 0) -> SqlSafe:
        if not self.strict_types:
            return _safe(number_format(_lenient_number(value), decimals))
        try:
            return _safe(number_format(_strict_number(value), decimals))
        except TypeMismatch as e:
            return self.fail(e, number_format(Decimal(0), decimals))

    def format_string(self, value: Any) -> SqlSafe:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return _safe(self.escaper.escape_bytes(bytes(value)))
        if _is_collection(value) and self.strict_types:
            return self.fail(TypeMismatch(f"Expected scalar string, got {type(value).__name__}"), "''")
        s = "" if value is None else str(value)
        return _safe("'" + self.escaper.escape_string(s) + "'")

    def format_binary(self, value: Any) -> SqlSafe:
        return self.format_string(value)

    def format_name(self, value: Any) -> SqlSafe:
        """
        Quote a table/field name. ``db.table`` -> ```db`.`table```; anything after
        the first space (``AS alias``, ``t``) is reattached verbatim.
        """
        if _is_collection(value) and self.strict_types:
            return self.fail(TypeMismatch(f"Expected identifier, got {type(value).__name__}"), "``")
        name = "" if value is None else str(value).strip()
        name, sep, rest = name.partition(" ")
        quoted = "`.`".join(self.escaper.quote_identifier(part) for part in name.split("."))
        return _safe(f"`{quoted}`{sep}{rest}")

    def format_set(self, value: Any) -> SqlSafe:
        """``['a', 'b']`` -> ``('a', 'b')``; empty -> ``()``."""
        return _safe("(" + ", ".join(self.format_string(v) for v in promote_to_sequence(value)) + ")")

    def format_field_map(self, value: Any) -> SqlSafe:
        """``{'a': 1}`` -> ```a` = '1'``; empty -> ``''``."""
        return _safe(
            ", ".join(
                f"{self.format_name(k)} = {self.format_string(v)}" for k, v in promote_to_mapping(value)
            )
        )

    def format_raw(self, value: Any) -> SqlSafe:
        """Insert verbatim. Caller is responsible for the content."""
        return _safe("" if value is None else str(value))
