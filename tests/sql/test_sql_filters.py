"""Unit tests for sql.filters (value formatter) and sql.escaper."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from simplemysql.core.errors import ErrorKind, TypeMismatch, UnknownPlaceholderType
from simplemysql.sql.escaper import PyMySQLEscaper
from simplemysql.sql.filters import (
    SqlSafe,
    ValueType,
    number_format,
    promote_to_mapping,
    promote_to_sequence,
)
from simplemysql.sql.template_engine import SQLTemplateEngine

_UNESCAPE = {"0": "\0", "n": "\n", "r": "\r", "Z": "\x1a", "\\": "\\", "'": "'", '"': '"'}


def _unquote(literal: str) -> str:
    """Read back a single-quoted MySQL string literal (backslash escapes)."""
    assert literal[0] == "'" and literal[-1] == "'"
    body, out, i = literal[1:-1], [], 0
    while i < len(body):
        if body[i] == "\\":
            out.append(_UNESCAPE[body[i + 1]])
            i += 2
        else:
            assert body[i] != "'"
            out.append(body[i])
            i += 1
    return "".join(out)


class TestSqlSafe:
    def test_string_returns_safe(self, formatter):
        assert isinstance(formatter.format_string("hello"), SqlSafe)

    def test_int_returns_safe(self, formatter):
        assert isinstance(formatter.format_int(42), SqlSafe)

    def test_raw_returns_safe(self, formatter):
        assert isinstance(formatter.format_raw("NOW()"), SqlSafe)


class TestValueType:
    def test_aliases(self):
        assert ValueType.from_tag("int") is ValueType.INTEGER
        assert ValueType.from_tag(" Integer ") is ValueType.INTEGER
        assert ValueType.from_tag("double") is ValueType.FLOAT
        assert ValueType.from_tag("decimal") is ValueType.FLOAT
        assert ValueType.from_tag("str") is ValueType.STRING
        assert ValueType.from_tag("bin") is ValueType.BINARY
        assert ValueType.from_tag(ValueType.STRING) is ValueType.STRING

    def test_unknown(self):
        with pytest.raises(UnknownPlaceholderType):
            ValueType.from_tag("money")
        with pytest.raises(UnknownPlaceholderType):
            ValueType.from_tag(None)


class TestFormatInt:
    def test_int(self, formatter):
        assert formatter.format_int(5) == "5"
        assert formatter.format_int(-7) == "-7"

    def test_lenient_coercion(self, formatter):
        assert formatter.format_int("99") == "99"
        assert formatter.format_int("12abc") == "12"
        assert formatter.format_int("abc") == "0"
        assert formatter.format_int(None) == "0"
        assert formatter.format_int(3.9) == "3"
        assert formatter.format_int(-3.9) == "-3"
        assert formatter.format_int(True) == "1"
        assert formatter.format_int([1]) == "0"

    def test_lenient_does_not_report(self, formatter, reporter):
        formatter.format_int("abc")
        assert reporter.records == []

    def test_strict_accepts_integral(self, strict_formatter):
        assert strict_formatter.format_int("42") == "42"
        assert strict_formatter.format_int(4.0) == "4"

    @pytest.mark.parametrize("bad", ["abc", 3.5, True, None, [1]])
    def test_strict_rejects(self, strict_formatter, reporter, bad):
        with pytest.raises(TypeMismatch):
            strict_formatter.format_int(bad)
        assert reporter.kinds == [ErrorKind.TYPE_MISMATCH]


class TestFormatFloat:
    def test_precision(self, formatter):
        assert formatter.format_float(3.14159, 2) == "3.14"
        assert formatter.format_float(3.14159, 0) == "3"
        assert formatter.format_float(3.14159) == "3"

    def test_rounds_half_up(self, formatter):
        assert formatter.format_float(9.999, 2) == "10.00"
        assert formatter.format_float(2.675, 2) == "2.68"
        assert formatter.format_float(-1.005, 2) == "-1.01"
        assert formatter.format_float(2.5, 0) == "3"

    def test_no_grouping(self, formatter):
        assert formatter.format_float(1234567.891, 2) == "1234567.89"

    def test_lenient_coercion(self, formatter):
        assert formatter.format_float("2.5abc", 1) == "2.5"
        assert formatter.format_float("x", 2) == "0.00"
        assert formatter.format_float(None, 1) == "0.0"
        assert formatter.format_float(Decimal("1.25"), 1) == "1.3"

    def test_strict(self, strict_formatter):
        assert strict_formatter.format_float("1.5", 2) == "1.50"
        with pytest.raises(TypeMismatch):
            strict_formatter.format_float("abc", 2)
        with pytest.raises(TypeMismatch):
            strict_formatter.format_float([], 2)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1e400", "1" + "0" * 400 + ".00"),
            ("-1e400", "-1" + "0" * 400 + ".00"),
            ("1e30", "1" + "0" * 30 + ".00"),
            (1e30, "1" + "0" * 30 + ".00"),
            ("123456789012345678901234567890.125", "123456789012345678901234567890.13"),
        ],
    )
    def test_large_values_stay_exact(self, formatter, strict_formatter, value, expected):
        assert formatter.format_float(value, 2) == expected
        assert strict_formatter.format_float(value, 2) == expected

    def test_large_value_in_template(self, formatter):
        sql = SQLTemplateEngine(formatter).render("SELECT * FROM t WHERE price > ?2f", "1e400")
        assert "inf" not in sql
        assert sql == "SELECT * FROM t WHERE price > 1" + "0" * 400 + ".00"

    def test_number_format_negative_zero(self):
        assert number_format(Decimal("-0.001"), 2) == "0.00"


class TestFormatString:
    def test_plain(self, formatter):
        assert formatter.format_string("hello") == "'hello'"

    def test_quote_escape(self, formatter):
        assert formatter.format_string("O'Brien") == "'O\\'Brien'"

    def test_backslash_and_control_chars(self, formatter):
        assert formatter.format_string("a\\b") == "'a\\\\b'"
        assert formatter.format_string("line\n") == "'line\\n'"

    @pytest.mark.parametrize(
        "raw",
        ["it's", "back\\slash", 'dq"', "nul\0byte", "cr\r\nlf", "ctrl-z\x1a", "'; DROP TABLE users; --"],
    )
    def test_round_trip(self, formatter, raw):
        assert _unquote(formatter.format_string(raw)) == raw

    def test_none(self, formatter):
        assert formatter.format_string(None) == "''"

    def test_bytes(self, formatter):
        assert formatter.format_string(b"a'b") == "'a\\'b'"

    def test_lenient_collection(self, formatter):
        assert formatter.format_string([1]) == "'[1]'"

    def test_strict_collection(self, strict_formatter, reporter):
        with pytest.raises(TypeMismatch):
            strict_formatter.format_string({"a": 1})
        assert reporter.kinds == [ErrorKind.TYPE_MISMATCH]

    def test_binary(self, formatter):
        assert formatter.format_binary("x'y") == "'x\\'y'"
        assert formatter.format_binary(bytearray(b"\x00a")) == "'\\0a'"


class TestFormatName:
    def test_simple(self, formatter):
        assert formatter.format_name("users") == "`users`"

    def test_qualified(self, formatter):
        assert formatter.format_name("db.table") == "`db`.`table`"

    def test_alias_reattached(self, formatter):
        assert formatter.format_name(" users u ") == "`users` u"
        assert formatter.format_name("col AS alias") == "`col` AS alias"
        assert formatter.format_name("t.col AS c") == "`t`.`col` AS c"

    def test_escaping(self, formatter):
        assert formatter.format_name("a`b") == "`a``b`"
        assert formatter.format_name("o'x") == "`o\\'x`"

    def test_strict_collection(self, strict_formatter):
        with pytest.raises(TypeMismatch):
            strict_formatter.format_name(["users"])


class TestFormatSet:
    def test_list(self, formatter):
        assert formatter.format_set(["a", "b", "c"]) == "('a', 'b', 'c')"

    def test_empty(self, formatter):
        assert formatter.format_set([]) == "()"

    def test_numbers_are_quoted(self, formatter):
        assert formatter.format_set((1, 2)) == "('1', '2')"

    def test_quote_escape(self, formatter):
        assert formatter.format_set(["o'brien"]) == "('o\\'brien')"

    def test_scalar_promoted_to_one_element(self, formatter):
        assert formatter.format_set("x") == "('x')"
        assert formatter.format_set(5) == "('5')"

    def test_mapping_uses_values(self, formatter):
        assert formatter.format_set({"k": "v"}) == "('v')"


class TestFormatFieldMap:
    def test_mapping(self, formatter):
        assert formatter.format_field_map({"a": 1, "b": "x'y"}) == "`a` = '1', `b` = 'x\\'y'"

    def test_empty(self, formatter):
        assert formatter.format_field_map({}) == ""

    def test_scalar_promoted_to_single_pair(self, formatter):
        assert formatter.format_field_map("val") == "`0` = 'val'"

    def test_sequence_keyed_by_position(self, formatter):
        assert formatter.format_field_map(["p", "q"]) == "`0` = 'p', `1` = 'q'"


def test_promotion_helpers():
    assert promote_to_sequence("ab") == ["ab"]
    assert promote_to_sequence({1, 2}) == [1, 2] or promote_to_sequence({1, 2}) == [2, 1]
    assert promote_to_mapping({"a": 1}) == [("a", 1)]
    assert promote_to_mapping(3) == [(0, 3)]


class TestFormatValue:
    def test_dispatch(self, formatter):
        assert formatter.format_value("5", "int") == "5"
        assert formatter.format_value(1.5, "DOUBLE", 1) == "1.5"
        assert formatter.format_value(1.5, "decimal", 2) == "1.50"
        assert formatter.format_value("x", "string") == "'x'"
        assert formatter.format_value("x", "bin") == "'x'"

    def test_unknown_type_lenient(self, formatter, reporter):
        assert formatter.format_value("x", "money") == ""
        assert reporter.kinds == [ErrorKind.UNKNOWN_PLACEHOLDER_TYPE]
        assert "unexpected variable type" in reporter.records[0][1]

    def test_unknown_type_strict(self, strict_formatter, reporter):
        with pytest.raises(UnknownPlaceholderType):
            strict_formatter.format_value("x", "money")
        assert reporter.kinds == [ErrorKind.UNKNOWN_PLACEHOLDER_TYPE]


class TestFormatRaw:
    def test_verbatim(self, formatter):
        assert formatter.format_raw("NOW() - INTERVAL 1 DAY") == "NOW() - INTERVAL 1 DAY"

    def test_none(self, formatter):
        assert formatter.format_raw(None) == ""


class TestPyMySQLEscaper:
    def test_without_connection(self):
        e = PyMySQLEscaper()
        assert e.escape_string("a'b") == "a\\'b"
        assert e.quote_identifier("a`b") == "a``b"
        assert e.escape_bytes(b"a'b") == "'a\\'b'"

    def test_uses_connection(self):
        conn = MagicMock()
        conn.escape_string.side_effect = lambda s: s.replace("'", "''")
        e = PyMySQLEscaper(conn)
        assert e.escape_string("a'b") == "a''b"
        assert e.quote_identifier("a'`b") == "a''``b"
        conn.escape_string.assert_called_with("a'`b")
